from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import func
from lettertwist.models import Student

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Letter Twist game server!'})

@main.route('/api/ping')
def ping():
    return jsonify({'message': current_app.config.get('PING_MESSAGE', 'ping')})

@main.route('/api/students/lookup', methods=['POST'])
def lookup_student():
    """Find a student by name or email so their games count towards their progress."""
    data = request.get_json(silent=True) or {}
    identifier = data.get('identifier') or ''
    if isinstance(identifier, str):
        identifier = identifier.strip()
    if not identifier or not isinstance(identifier, str):
        return jsonify({'error': 'Please enter your name!'}), 400

    needle = identifier.lower()
    student = Student.query.filter(
        (func.lower(Student.name) == needle) | (func.lower(Student.email) == needle)
    ).first()
    if not student:
        return jsonify({'error': 'Student not found'}), 404
    return jsonify({'success': True, 'student': student.to_dict()})
