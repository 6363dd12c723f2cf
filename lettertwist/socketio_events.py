from flask_socketio import join_room, leave_room, emit
from lettertwist import socketio
from lettertwist.services.games.sessions import get_session


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    session_code = (data or {}).get('session_code')
    if not session_code:
        emit('error', {'message': 'session_code is required'})
        return
    room = f"session:{session_code.upper()}"
    join_room(room)
    emit('joined', {'room': room})
    # Send the current snapshot so late joiners can render straight away
    play = get_session(session_code)
    if play:
        emit('state_update', play.to_dict())


def handle_leave_session(data):
    session_code = (data or {}).get('session_code')
    if not session_code:
        emit('error', {'message': 'session_code is required'})
        return
    room = f"session:{session_code.upper()}"
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
