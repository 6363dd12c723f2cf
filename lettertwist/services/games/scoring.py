from typing import Iterable, Set

FIRST_STEPS = "First Steps"
WORD_WARRIOR = "Word Warrior"
PERFECT_START = "Perfect Start"

# Points per correct answer, keyed by game mode
POINTS_PER_WORD = {
    'practice': 10,
    'achievements': 10,
    'timed': 15,
}

# (achievement, minimum score) pairs checked after every correct answer
SCORE_THRESHOLDS = (
    (FIRST_STEPS, 50),
    (WORD_WARRIOR, 100),
)


def points_for(mode: str) -> int:
    return POINTS_PER_WORD[mode]


def evaluate_achievements(score: int, attempts: int, unlocked: Iterable[str]) -> Set[str]:
    """Return the achievements newly earned by a correct answer.

    `score` is the score including the answer just given and `attempts` counts
    every submitted guess so far, this one included. Names already in
    `unlocked` are never returned again.
    """
    already = set(unlocked)
    earned = set()
    for name, threshold in SCORE_THRESHOLDS:
        if score >= threshold and name not in already:
            earned.add(name)
    if attempts == 1 and PERFECT_START not in already:
        earned.add(PERFECT_START)
    return earned
