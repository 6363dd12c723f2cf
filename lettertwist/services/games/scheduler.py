import time
from typing import Set, Tuple

from lettertwist import socketio
from .engine import advance_word, tick
from .sessions import complete_session, get_session


_scheduled_keys: Set[Tuple[str, str, int]] = set()


def emit_state(play) -> None:
    socketio.emit('state_update', play.to_dict(), to=f"session:{play.code}", namespace='/ws')


def _scheduler_disabled(app) -> bool:
    return bool(app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'))


def _sleep(app, delay: float, label: str) -> None:
    # heartbeat sleep loop if enabled
    try:
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
    except (TypeError, ValueError):
        hb = 0
    if hb and hb > 0:
        slept = 0.0
        while slept < delay:
            step = min(hb, delay - slept)
            time.sleep(step)
            slept += step
            app.logger.info(f"[timer-heartbeat] {label} remaining={max(0.0, delay - slept)}s")
    else:
        time.sleep(delay)


def _run(app, worker, *args) -> None:
    if app.config.get('TESTING'):
        worker(*args)
    else:
        socketio.start_background_task(worker, *args)


def schedule_advance(app, code: str) -> None:
    """Advance to the next word once the correct-answer display delay has passed.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per (session, answer)
    - Aborts if the word was already advanced by other means
    """
    if _scheduler_disabled(app):
        return

    with app.app_context():
        play = get_session(code)
        if not play or play.state.status != 'in_progress' or not play.state.awaiting_advance:
            return
        expected_attempts = play.state.attempts
        key = (play.code, 'advance', expected_attempts)
        if key in _scheduled_keys:
            app.logger.info(f"[timer-skip] session={play.code} advance attempt={expected_attempts} already scheduled")
            return
        _scheduled_keys.add(key)
        delay = float(app.config.get('CORRECT_DISPLAY_DELAY_SEC', 1.5))
        app.logger.info(f"[timer-set] session={play.code} advance attempt={expected_attempts} delay={delay}s")

    def _worker(session_code: str, expected: int, wait: float):
        _sleep(app, wait, f"session={session_code} advance")
        with app.app_context():
            _scheduled_keys.discard((session_code, 'advance', expected))
            current = get_session(session_code)
            if not current:
                return
            with current.lock:
                state = current.state
                if state.status != 'in_progress' or not state.awaiting_advance or state.attempts != expected:
                    app.logger.info(f"[timer-abort] session={session_code} advance attempt={expected} no longer pending")
                    return
                advance_word(state)
                app.logger.info(f"[timer-fire] session={session_code} advance -> level={state.current_tier} word={state.current_word_index}")
            if state.status == 'finished':
                complete_session(current)
            emit_state(current)

    _run(app, _worker, play.code, expected_attempts, delay)


def schedule_tick(app, code: str) -> None:
    """Count a timed session down one interval at a time until it finishes."""
    if _scheduler_disabled(app):
        return

    with app.app_context():
        play = get_session(code)
        if not play or play.state.mode != 'timed' or play.state.status != 'in_progress':
            return
        expected_remaining = int(play.state.time_remaining)
        key = (play.code, 'tick', expected_remaining)
        if key in _scheduled_keys:
            app.logger.info(f"[timer-skip] session={play.code} tick remaining={expected_remaining} already scheduled")
            return
        _scheduled_keys.add(key)
        interval = float(app.config.get('TICK_INTERVAL_SEC', 1))

    def _worker(session_code: str, expected: int, wait: float):
        _sleep(app, wait, f"session={session_code} tick")
        with app.app_context():
            _scheduled_keys.discard((session_code, 'tick', expected))
            current = get_session(session_code)
            if not current:
                return
            with current.lock:
                state = current.state
                if state.status != 'in_progress' or state.time_remaining != expected:
                    app.logger.info(f"[timer-abort] session={session_code} tick remaining={expected} mismatch")
                    return
                tick(state)
            if state.status == 'finished':
                app.logger.info(f"[timer-fire] session={session_code} time is up")
                complete_session(current)
            emit_state(current)
            still_running = state.status == 'in_progress'
        if still_running:
            schedule_tick(app, session_code)

    _run(app, _worker, play.code, expected_remaining, interval)
