import os
import sys
import pytest

# Ensure the project root (containing the `lettertwist` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from lettertwist import create_app, db, socketio
from lettertwist.services.games.sessions import reset_sessions


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    PING_MESSAGE = 'ping'
    WORDS_FILE = None
    CORRECT_DISPLAY_DELAY_SEC = 0
    TICK_INTERVAL_SEC = 0
    TIMED_MODE_DURATION_SEC = 60
    ACHIEVEMENT_MODE_LIVES = 3
    SESSION_TIMEOUT_MINUTES = 120
    PROGRESS_STORE = 'database'
    PROGRESS_LOCAL_FILE = None
    TIMER_HEARTBEAT_SEC = 0
    ADMIN_USERNAME = 'teacher'
    ADMIN_PASSWORD = 'teacher123'


class SchedulerTestConfig(TestConfig):
    ENABLE_SCHEDULER_IN_TESTS = True
    TIMED_MODE_DURATION_SEC = 5


def _app_for(config_class):
    application = create_app(config_class)
    with application.app_context():
        # Ensure models are imported so tables are created
        from lettertwist.models import AdminUser
        db.create_all()
        teacher = AdminUser(username=config_class.ADMIN_USERNAME, role='teacher')
        teacher.set_password(config_class.ADMIN_PASSWORD)
        db.session.add(teacher)
        db.session.commit()
        yield application
        db.session.remove()
        db.drop_all()
    reset_sessions()


@pytest.fixture()
def flask_app():
    yield from _app_for(TestConfig)


@pytest.fixture()
def scheduled_app():
    yield from _app_for(SchedulerTestConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def scheduled_client(scheduled_app):
    return scheduled_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    test_client = flask_app.test_client()
    res = test_client.post('/api/admin/login', json={'username': 'teacher', 'password': 'teacher123'})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def student(flask_app):
    from lettertwist.models import Student
    s = Student(name='Alice Johnson', email='alice.johnson@example.com')
    db.session.add(s)
    db.session.commit()
    return s


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
