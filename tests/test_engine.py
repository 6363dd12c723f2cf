import random
from collections import Counter

import pytest

from lettertwist.services.games.dictionary import load_dictionary
from lettertwist.services.games.engine import (
    SessionNotActive,
    TIERS,
    WordEntry,
    advance_word,
    finalize_session,
    initialize_session,
    scramble_word,
    shuffled,
    submit_answer,
    tick,
)
from lettertwist.services.games.scoring import (
    FIRST_STEPS,
    PERFECT_START,
    WORD_WARRIOR,
    evaluate_achievements,
    points_for,
)


@pytest.fixture()
def dictionary():
    return load_dictionary()


def answer_correctly(session):
    return submit_answer(session, session.current_word.word.lower())


def answer_wrong(session):
    return submit_answer(session, 'not-a-word')


def test_scramble_is_a_permutation_that_differs():
    for word in ['CAT', 'BALL', 'ELEPHANT', 'PLAYGROUND']:
        for _ in range(500):
            scrambled = scramble_word(word)
            assert Counter(scrambled) == Counter(word)
            assert scrambled != word


def test_scramble_identical_letters_returns_word():
    for _ in range(50):
        assert scramble_word('AAA') == 'AAA'
    assert scramble_word('A') == 'A'


def test_shuffled_is_uniform_and_leaves_input_alone():
    rng = random.Random(1234)
    items = [1, 2, 3]
    counts = Counter(tuple(shuffled(items, rng)) for _ in range(6000))
    assert items == [1, 2, 3]
    assert len(counts) == 6
    assert all(800 < n < 1200 for n in counts.values())


def test_initialize_session_structure(dictionary):
    session = initialize_session(dictionary, 'practice')
    assert session.status == 'in_progress'
    assert session.difficulty_order == list(TIERS)
    assert session.score == 0 and session.attempts == 0
    assert session.current_difficulty_index == 0 and session.current_word_index == 0
    assert session.lives is None
    assert session.time_remaining is None
    assert session.unlocked_achievements == set()
    for tier in TIERS:
        words = session.randomized_word_sets[tier]
        assert sorted(w.word for w in words) == sorted(e.word for e in dictionary[tier])
        for w in words:
            assert Counter(w.scrambled) == Counter(w.word)


def test_mode_specific_lives_and_timer(dictionary):
    assert initialize_session(dictionary, 'achievements').lives == 3
    assert initialize_session(dictionary, 'timed').time_remaining == 60
    custom = initialize_session(dictionary, 'timed', time_limit=30)
    assert custom.time_remaining == 30
    with pytest.raises(ValueError):
        initialize_session(dictionary, 'marathon')


def test_sessions_are_randomized_each_time(dictionary):
    def layout(session):
        return [(w.word, w.scrambled) for tier in TIERS for w in session.randomized_word_sets[tier]]

    first = layout(initialize_session(dictionary, 'practice'))
    second = layout(initialize_session(dictionary, 'practice'))
    assert first != second


def test_seeded_sessions_are_reproducible(dictionary):
    a = initialize_session(dictionary, 'practice', rng=random.Random(7))
    b = initialize_session(dictionary, 'practice', rng=random.Random(7))
    assert a.randomized_word_sets == b.randomized_word_sets


def test_points_per_correct_answer(dictionary):
    for mode, points in [('practice', 10), ('achievements', 10), ('timed', 15)]:
        session = initialize_session(dictionary, mode)
        assert answer_correctly(session) == 'correct'
        assert session.score == points
        advance_word(session)
        assert answer_wrong(session) == 'incorrect'
        assert session.score == points


def test_points_for_unknown_mode_raises():
    assert points_for('timed') == 15
    with pytest.raises(KeyError):
        points_for('marathon')


def test_guess_is_case_insensitive(dictionary):
    session = initialize_session(dictionary, 'practice')
    word = session.current_word.word
    assert submit_answer(session, f"  {word.lower()} ") == 'correct'


def test_answer_does_not_advance(dictionary):
    session = initialize_session(dictionary, 'practice')
    answer_correctly(session)
    assert session.current_word_index == 0
    assert session.awaiting_advance is True
    advance_word(session)
    assert session.current_word_index == 1
    assert session.awaiting_advance is False
    assert session.last_result is None


def test_first_steps_and_word_warrior_thresholds(dictionary):
    session = initialize_session(dictionary, 'practice')
    for _ in range(4):
        answer_correctly(session)
        advance_word(session)
    assert FIRST_STEPS not in session.unlocked_achievements
    answer_correctly(session)
    assert session.score == 50
    assert FIRST_STEPS in session.unlocked_achievements
    advance_word(session)
    for _ in range(4):
        answer_correctly(session)
        advance_word(session)
    assert WORD_WARRIOR not in session.unlocked_achievements
    answer_correctly(session)
    assert session.score == 100
    assert {FIRST_STEPS, WORD_WARRIOR} <= session.unlocked_achievements


def test_timed_mode_reaches_first_steps_sooner(dictionary):
    session = initialize_session(dictionary, 'timed')
    for _ in range(4):
        answer_correctly(session)
        advance_word(session)
    assert session.score == 60
    assert FIRST_STEPS in session.unlocked_achievements


def test_evaluate_achievements_is_idempotent():
    assert evaluate_achievements(50, 5, set()) == {FIRST_STEPS}
    assert evaluate_achievements(60, 6, {FIRST_STEPS}) == set()
    assert evaluate_achievements(110, 11, {FIRST_STEPS}) == {WORD_WARRIOR}
    assert evaluate_achievements(10, 1, set()) == {PERFECT_START}
    assert evaluate_achievements(10, 1, {PERFECT_START}) == set()


def test_perfect_start_only_for_correct_first_answer(dictionary):
    lucky = initialize_session(dictionary, 'practice')
    answer_correctly(lucky)
    assert PERFECT_START in lucky.unlocked_achievements

    unlucky = initialize_session(dictionary, 'practice')
    answer_wrong(unlucky)
    answer_correctly(unlucky)
    assert unlucky.attempts == 2
    assert PERFECT_START not in unlucky.unlocked_achievements


def test_lives_run_out_mid_word(dictionary):
    session = initialize_session(dictionary, 'achievements')
    answer_correctly(session)
    advance_word(session)
    answer_correctly(session)
    advance_word(session)
    score_before = session.score
    position = (session.current_difficulty_index, session.current_word_index)

    answer_wrong(session)
    answer_wrong(session)
    assert session.status == 'in_progress'
    assert session.lives == 1
    answer_wrong(session)
    assert session.status == 'finished'
    assert session.lives == 0
    assert session.score == score_before
    assert (session.current_difficulty_index, session.current_word_index) == position

    with pytest.raises(SessionNotActive):
        answer_correctly(session)


def test_wrong_answers_cost_nothing_outside_achievements_mode(dictionary):
    session = initialize_session(dictionary, 'practice')
    for _ in range(10):
        answer_wrong(session)
    assert session.status == 'in_progress'
    assert session.lives is None
    assert session.attempts == 10


def test_timer_finishes_exactly_at_zero(dictionary):
    session = initialize_session(dictionary, 'timed')
    for _ in range(59):
        tick(session)
    assert session.status == 'in_progress'
    assert session.time_remaining == 1
    tick(session)
    assert session.status == 'finished'
    assert session.time_remaining == 0
    tick(session)
    assert session.time_remaining == 0


def test_tick_ignored_outside_timed_mode(dictionary):
    session = initialize_session(dictionary, 'practice')
    tick(session)
    assert session.time_remaining is None
    assert session.status == 'in_progress'


def test_tier_progression_is_linear(dictionary):
    session = initialize_session(dictionary, 'practice')
    visited = []
    while session.status == 'in_progress':
        if not visited or visited[-1] != session.current_tier:
            visited.append(session.current_tier)
        answer_correctly(session)
        advance_word(session)
    assert visited == ['easy', 'medium', 'hard']
    with pytest.raises(SessionNotActive):
        advance_word(session)


def test_full_practice_session(dictionary):
    session = initialize_session(dictionary, 'practice')
    while session.status == 'in_progress':
        assert answer_correctly(session) == 'correct'
        advance_word(session)
    assert session.score == 300
    assert session.attempts == 30
    assert session.status == 'finished'
    assert session.unlocked_achievements == {FIRST_STEPS, WORD_WARRIOR, PERFECT_START}


def test_finalize_only_once(dictionary):
    session = initialize_session(dictionary, 'achievements')
    answer_correctly(session)
    with pytest.raises(SessionNotActive):
        finalize_session(session)
    advance_word(session)
    for _ in range(3):
        answer_wrong(session)

    delta = finalize_session(session)
    assert delta.score_to_add == 10
    assert delta.new_achievements == {PERFECT_START}
    assert finalize_session(session) is None


def test_snapshot_reveals_answer_only_after_solving():
    small = {
        'easy': [WordEntry(word='CAT', hint='Says meow')],
        'medium': [WordEntry(word='BOOK', hint='You read this')],
        'hard': [WordEntry(word='SCHOOL', hint='Where you learn')],
    }
    session = initialize_session(small, 'practice')
    snap = session.snapshot()
    assert snap['answer'] is None
    assert snap['hint'] == 'Says meow'
    assert snap['level'] == 'easy'
    assert snap['progress'] == 100
    answer_correctly(session)
    assert session.snapshot()['answer'] == 'CAT'
    advance_word(session)
    assert session.snapshot()['level'] == 'medium'
    assert session.snapshot()['answer'] is None
