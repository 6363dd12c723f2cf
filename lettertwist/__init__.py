from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Shared per-process resources: word dictionary and progress sink
    from lettertwist.services.games.dictionary import load_dictionary
    from lettertwist.services.games.progress import build_progress_store
    flask_app.extensions['lettertwist.dictionary'] = load_dictionary(flask_app.config.get('WORDS_FILE'))
    flask_app.extensions['lettertwist.progress'] = build_progress_store(flask_app.config)

    from lettertwist.main import main
    flask_app.register_blueprint(main)

    from lettertwist.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from lettertwist.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from lettertwist.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from lettertwist.models import AdminUser

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(AdminUser, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from lettertwist.models import AdminUser, Student
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin_user = AdminUser(username=flask_app.config['ADMIN_USERNAME'], role='teacher')
            admin_user.set_password(flask_app.config['ADMIN_PASSWORD'])
            db.session.add(admin_user)

            # Seed students
            seed = [
                ('Alice Johnson', 'alice.johnson@example.com'),
                ('Bob Smith', 'bob.smith@example.com'),
            ]
            for name, email in seed:
                db.session.add(Student(name=name, email=email))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
