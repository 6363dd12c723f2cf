import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///lettertwist.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PING_MESSAGE = os.environ.get('PING_MESSAGE', 'ping')
    # Optional JSON word list replacing the built-in dictionary
    WORDS_FILE = os.environ.get('WORDS_FILE')
    # Game timers (seconds)
    CORRECT_DISPLAY_DELAY_SEC = float(os.environ.get('CORRECT_DISPLAY_DELAY_SEC', '1.5'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    TIMED_MODE_DURATION_SEC = int(os.environ.get('TIMED_MODE_DURATION_SEC', '60'))
    ACHIEVEMENT_MODE_LIVES = int(os.environ.get('ACHIEVEMENT_MODE_LIVES', '3'))
    SESSION_TIMEOUT_MINUTES = int(os.environ.get('SESSION_TIMEOUT_MINUTES', '120'))
    # Progress persistence: database, memory or file
    PROGRESS_STORE = os.environ.get('PROGRESS_STORE', 'database')
    PROGRESS_FILE = os.environ.get('PROGRESS_FILE', 'progress.json')
    # When set, progress is written here first and mirrored to PROGRESS_STORE
    PROGRESS_LOCAL_FILE = os.environ.get('PROGRESS_LOCAL_FILE')
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    # Seed account created by `flask db-reset`
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'teacher')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'teacher123')
