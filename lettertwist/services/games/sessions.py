import random
import string
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional

from flask import current_app

from .engine import SessionDelta, finalize_session, initialize_session


class PlaySession:
    """A live session: engine state plus who is playing it."""

    def __init__(self, code: str, state, student_id: Optional[int] = None):
        self.code = code
        self.state = state
        self.student_id = student_id
        self.created_at = datetime.utcnow()
        # Held for every state transition; HTTP handlers and timers share sessions
        self.lock = threading.RLock()
        self.summary: Optional[SessionDelta] = None
        self.progress = None

    def to_dict(self):
        payload = self.state.snapshot()
        payload['session_code'] = self.code
        payload['student_id'] = self.student_id
        return payload

    def summary_dict(self):
        if self.summary is None:
            return None
        return {
            'session_code': self.code,
            'student_id': self.student_id,
            'mode': self.state.mode,
            'score_to_add': self.summary.score_to_add,
            'new_achievements': sorted(self.summary.new_achievements),
            'level_reached': self.state.current_tier,
            'attempts': self.state.attempts,
            'progress': self.progress.to_dict() if self.progress else None,
        }


_sessions: Dict[str, PlaySession] = {}
_registry_lock = threading.Lock()


def generate_session_code(length=6):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in _sessions:
            return code


def _is_expired(play: PlaySession) -> bool:
    timeout = int(current_app.config.get('SESSION_TIMEOUT_MINUTES', 120))
    return datetime.utcnow() - play.created_at > timedelta(minutes=timeout)


def purge_expired_sessions() -> int:
    with _registry_lock:
        expired = [code for code, play in _sessions.items() if _is_expired(play)]
        for code in expired:
            del _sessions[code]
    return len(expired)


def create_session(mode: str, student_id: Optional[int] = None, rng=None) -> PlaySession:
    purge_expired_sessions()
    cfg = current_app.config
    state = initialize_session(
        current_app.extensions['lettertwist.dictionary'],
        mode,
        rng=rng,
        lives=int(cfg.get('ACHIEVEMENT_MODE_LIVES', 3)),
        time_limit=int(cfg.get('TIMED_MODE_DURATION_SEC', 60)),
    )
    with _registry_lock:
        code = generate_session_code()
        play = PlaySession(code, state, student_id=student_id)
        _sessions[code] = play
    current_app.logger.info(f"[session-start] code={code} mode={mode} student={student_id}")
    return play


def get_session(code: str) -> Optional[PlaySession]:
    if not code:
        return None
    code = code.upper()
    with _registry_lock:
        play = _sessions.get(code)
        if play and _is_expired(play):
            del _sessions[code]
            return None
    return play


def discard_session(code: str) -> bool:
    with _registry_lock:
        return _sessions.pop(code.upper(), None) is not None


def reset_sessions() -> None:
    with _registry_lock:
        _sessions.clear()


def complete_session(play: PlaySession) -> Optional[SessionDelta]:
    """Finalize a finished session and hand its delta to the progress store.

    Safe to call repeatedly; only the first call after the session finishes
    produces and persists a delta. Persistence is best-effort.
    """
    with play.lock:
        if play.state.status != 'finished':
            return None
        delta = finalize_session(play.state)
        if delta is None:
            return None
        play.summary = delta
        current_app.logger.info(
            f"[session-finish] code={play.code} score={delta.score_to_add} "
            f"achievements={sorted(delta.new_achievements)} level={play.state.current_tier}"
        )
        if play.student_id is None:
            return delta
        store = current_app.extensions['lettertwist.progress']
        try:
            play.progress = store.apply_delta(str(play.student_id), delta)
        except Exception as exc:
            current_app.logger.warning(
                f"[progress-sync-failed] code={play.code} student={play.student_id}: {exc}"
            )
        return delta
