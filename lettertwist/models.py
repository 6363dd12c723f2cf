from lettertwist import db, bcrypt
from flask_login import UserMixin
from datetime import datetime
import json

class AdminUser(UserMixin, db.Model):
    __tablename__ = 'admin_user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False, default='teacher') # teacher, admin

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not password:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
        }

class Student(db.Model):
    __tablename__ = 'student'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    total_score = db.Column(db.Integer, default=0, nullable=False)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    last_played = db.Column(db.Date, nullable=True)
    achievements = db.Column(db.Text, nullable=True)  # JSON-encoded list of achievement names
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def average_score(self):
        if not self.games_played:
            return 0
        return round(self.total_score / self.games_played)

    def get_achievements(self):
        try:
            return json.loads(self.achievements) if self.achievements else []
        except ValueError:
            return []

    def set_achievements(self, names):
        self.achievements = json.dumps(sorted(set(names)))

    def touch(self, when=None):
        """Stamp the row as just played."""
        when = when or datetime.utcnow()
        self.last_played = when.date()
        self.updated_at = when

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'total_score': self.total_score or 0,
            'games_played': self.games_played or 0,
            'average_score': self.average_score,
            'last_played': self.last_played.isoformat() if self.last_played else 'Never',
            'achievements': self.get_achievements(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
