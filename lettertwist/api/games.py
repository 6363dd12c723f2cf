from flask import Blueprint, jsonify, request, current_app
from lettertwist import db
from lettertwist.models import Student
from lettertwist.services.games.engine import MODES, SessionNotActive, advance_word, submit_answer
from lettertwist.services.games.scheduler import emit_state, schedule_advance, schedule_tick
from lettertwist.services.games.sessions import complete_session, create_session, discard_session, get_session


games = Blueprint('games', __name__)

MODE_DESCRIPTIONS = {
    'practice': {
        'title': 'Practice Mode',
        'description': 'Learn at your own pace with no time pressure. Perfect for mastering new words!',
    },
    'timed': {
        'title': 'Timed Challenge',
        'description': 'Race against the clock! Score as many points as possible before time runs out.',
    },
    'achievements': {
        'title': 'Achievement Hunt',
        'description': 'Unlock achievements and master different word levels! Every wrong answer costs a life.',
    },
}


def _session_or_404(session_code):
    play = get_session(session_code)
    if not play:
        return None, (jsonify({'error': 'Session not found'}), 404)
    return play, None


@games.route('/modes', methods=['GET'])
def list_modes():
    cfg = current_app.config
    modes = []
    for mode in MODES:
        entry = {'mode': mode, **MODE_DESCRIPTIONS[mode]}
        if mode == 'timed':
            entry['time_limit'] = int(cfg.get('TIMED_MODE_DURATION_SEC', 60))
        if mode == 'achievements':
            entry['lives'] = int(cfg.get('ACHIEVEMENT_MODE_LIVES', 3))
        modes.append(entry)
    return jsonify(modes)


@games.route('/start', methods=['POST'])
def start_session():
    data = request.get_json(silent=True) or {}
    mode = data.get('mode') or 'practice'
    if mode not in MODES:
        return jsonify({'error': f"Unknown game mode '{mode}'"}), 400

    student_id = data.get('student_id')
    if student_id is not None:
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            return jsonify({'error': 'Invalid student id'}), 400
        if not db.session.get(Student, student_id):
            return jsonify({'error': 'Student not found'}), 400

    play = create_session(mode, student_id=student_id)
    payload = play.to_dict()
    if mode == 'timed':
        schedule_tick(current_app._get_current_object(), play.code)
    return jsonify(payload), 201


@games.route('/<string:session_code>/state', methods=['GET'])
def get_state(session_code):
    play, error = _session_or_404(session_code)
    if error:
        return error
    return jsonify(play.to_dict())


@games.route('/<string:session_code>/answer', methods=['POST'])
def answer(session_code):
    play, error = _session_or_404(session_code)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    guess = data.get('guess')
    if not isinstance(guess, str) or not guess.strip():
        return jsonify({'error': 'A guess is required'}), 400

    with play.lock:
        if play.state.status != 'in_progress':
            return jsonify({'error': 'This session has finished'}), 409
        if play.state.awaiting_advance:
            return jsonify({'error': 'Waiting for the next word'}), 409
        try:
            result = submit_answer(play.state, guess)
        except SessionNotActive as exc:
            return jsonify({'error': str(exc)}), 409
        finished = play.state.status == 'finished'

    if finished:
        complete_session(play)
    payload = {'result': result, 'state': play.to_dict()}
    emit_state(play)
    if result == 'correct':
        schedule_advance(current_app._get_current_object(), play.code)
    return jsonify(payload)


@games.route('/<string:session_code>/advance', methods=['POST'])
def advance(session_code):
    play, error = _session_or_404(session_code)
    if error:
        return error

    with play.lock:
        if play.state.status != 'in_progress' or not play.state.awaiting_advance:
            return jsonify({'error': 'Answer the current word first'}), 409
        advance_word(play.state)
        finished = play.state.status == 'finished'

    if finished:
        complete_session(play)
    emit_state(play)
    return jsonify(play.to_dict())


@games.route('/<string:session_code>/summary', methods=['GET'])
def summary(session_code):
    play, error = _session_or_404(session_code)
    if error:
        return error
    if play.state.status != 'finished':
        return jsonify({'error': 'Session is still in progress'}), 409
    if play.summary is None:
        complete_session(play)
    return jsonify(play.summary_dict())


@games.route('/<string:session_code>', methods=['DELETE'])
def delete_session(session_code):
    if not discard_session(session_code):
        return jsonify({'error': 'Session not found'}), 404
    return jsonify({'success': True})
