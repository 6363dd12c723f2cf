import csv
import io
from datetime import datetime

from flask import Blueprint, request, jsonify, Response
from flask_login import login_user, logout_user, login_required, current_user
from lettertwist import db
from lettertwist.models import AdminUser, Student

admin = Blueprint('admin', __name__)

@admin.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = AdminUser.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password')):
        login_user(user, remember=True)
        return jsonify({'success': True, 'admin': user.to_dict()})
    return jsonify({'error': 'Invalid credentials'}), 401

@admin.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})

@admin.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'admin': current_user.to_dict()})

@admin.route('/students', methods=['GET'])
@login_required
def list_students():
    students = Student.query.order_by(Student.id).all()
    return jsonify({
        'success': True,
        'students': [s.to_dict() for s in students],
        'count': len(students),
    })

@admin.route('/students', methods=['POST'])
@login_required
def add_student():
    data = request.get_json(silent=True) or {}
    name = data.get('name') or ''
    email = data.get('email') or ''
    if not isinstance(name, str) or not isinstance(email, str) or not name.strip() or not email.strip():
        return jsonify({'error': 'Name and email are required'}), 400
    name, email = name.strip(), email.strip()

    if Student.query.filter_by(email=email).first():
        return jsonify({'error': 'Student with this email already exists'}), 409

    student = Student(name=name, email=email)
    db.session.add(student)
    db.session.commit()
    return jsonify({'success': True, 'student': student.to_dict()}), 201

@admin.route('/students/<int:student_id>', methods=['GET'])
@login_required
def get_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({'error': 'Student not found'}), 404
    return jsonify({'success': True, 'student': student.to_dict()})

@admin.route('/students/<int:student_id>', methods=['PUT'])
@login_required
def update_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({'error': 'Student not found'}), 404

    data = request.get_json(silent=True) or {}
    achievements = data.get('achievements')
    if achievements is not None and (
        not isinstance(achievements, list) or not all(isinstance(a, str) for a in achievements)
    ):
        return jsonify({'error': 'achievements must be a list of names'}), 400
    try:
        total_score = int(data['total_score']) if data.get('total_score') is not None else None
        games_played = int(data['games_played']) if data.get('games_played') is not None else None
    except (TypeError, ValueError):
        return jsonify({'error': 'total_score and games_played must be integers'}), 400

    if total_score is not None:
        student.total_score = total_score
    if games_played is not None:
        student.games_played = games_played
    if achievements is not None:
        student.set_achievements(achievements)

    student.touch()
    db.session.add(student)
    db.session.commit()
    return jsonify({'success': True, 'student': student.to_dict()})

@admin.route('/students/<int:student_id>', methods=['DELETE'])
@login_required
def delete_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({'error': 'Student not found'}), 404
    payload = student.to_dict()
    db.session.delete(student)
    db.session.commit()
    return jsonify({'success': True, 'message': 'Student deleted successfully', 'student': payload})

@admin.route('/students/export', methods=['GET'])
@login_required
def export_students():
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(['Name', 'Email', 'Total Score', 'Games Played', 'Average Score', 'Last Played', 'Achievements'])
    for s in Student.query.order_by(Student.id).all():
        row = s.to_dict()
        writer.writerow([
            row['name'], row['email'], row['total_score'], row['games_played'],
            row['average_score'], row['last_played'], '; '.join(row['achievements']),
        ])
    return Response(
        buf.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=letter-twist-students.csv'},
    )

@admin.route('/analytics', methods=['GET'])
@login_required
def analytics():
    students = Student.query.all()
    total_students = len(students)
    total_games = sum(s.games_played or 0 for s in students)
    total_score = sum(s.total_score or 0 for s in students)
    total_achievements = sum(len(s.get_achievements()) for s in students)

    top_performers = sorted(students, key=lambda s: s.total_score or 0, reverse=True)[:5]
    recent_activity = sorted(
        (s for s in students if s.last_played),
        key=lambda s: (s.last_played, s.updated_at or datetime.min),
        reverse=True,
    )[:10]

    return jsonify({
        'success': True,
        'analytics': {
            'overview': {
                'total_students': total_students,
                'total_games': total_games,
                'total_score': total_score,
                'total_achievements': total_achievements,
                'average_score': round(total_score / total_students) if total_students else 0,
            },
            'top_performers': [s.to_dict() for s in top_performers],
            'recent_activity': [s.to_dict() for s in recent_activity],
        },
    })
