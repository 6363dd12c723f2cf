"""Session engine for one play-through of the spelling game.

Turns a word dictionary into a randomized quiz that gets harder tier by tier
(easy -> medium -> hard), checks answers, keeps score, lives and the timer,
and hands back a summary once the session has finished. Everything here is
plain in-memory state; persistence and scheduling live in sibling modules.
"""

import random
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Set

from pydantic import BaseModel, ConfigDict, Field

from .scoring import evaluate_achievements, points_for


TIERS = ('easy', 'medium', 'hard')
MODES = ('practice', 'timed', 'achievements')
MAX_SCRAMBLE_ATTEMPTS = 10
DEFAULT_LIVES = 3
DEFAULT_TIME_LIMIT_SEC = 60

Mode = Literal['practice', 'timed', 'achievements']
Status = Literal['not_started', 'in_progress', 'finished']
AnswerResult = Literal['correct', 'incorrect']


class SessionNotActive(Exception):
    """Raised when an operation needs a running (or finished) session and gets the other."""


class WordEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    word: str
    hint: str


class ScrambledWord(BaseModel):
    word: str
    scrambled: str
    hint: str


class SessionDelta(BaseModel):
    """What a finished session adds to a student's cumulative progress."""
    score_to_add: int
    new_achievements: Set[str] = Field(default_factory=set)


class SessionState(BaseModel):
    mode: Mode
    difficulty_order: List[str] = Field(default_factory=lambda: list(TIERS))
    current_difficulty_index: int = 0
    current_word_index: int = 0
    randomized_word_sets: Dict[str, List[ScrambledWord]] = Field(default_factory=dict)
    score: int = 0
    lives: Optional[int] = None
    attempts: int = 0
    time_remaining: Optional[int] = None
    unlocked_achievements: Set[str] = Field(default_factory=set)
    status: Status = 'not_started'
    last_result: Optional[AnswerResult] = None
    awaiting_advance: bool = False
    finalized: bool = False

    @property
    def current_tier(self) -> str:
        return self.difficulty_order[self.current_difficulty_index]

    @property
    def current_word_set(self) -> List[ScrambledWord]:
        return self.randomized_word_sets.get(self.current_tier, [])

    @property
    def current_word(self) -> ScrambledWord:
        return self.current_word_set[self.current_word_index]

    def snapshot(self) -> dict:
        """Serializable view for the display layer.

        The answer is only revealed once it has been guessed or the session is over.
        """
        words = self.current_word_set
        word = self.current_word if words else None
        reveal = self.awaiting_advance or self.status == 'finished'
        return {
            'mode': self.mode,
            'status': self.status,
            'level': self.current_tier,
            'level_number': self.current_difficulty_index + 1,
            'word_index': self.current_word_index,
            'words_in_level': len(words),
            'progress': round((self.current_word_index + 1) / len(words) * 100) if words else 0,
            'scrambled': word.scrambled if word else None,
            'hint': word.hint if word else None,
            'answer': word.word if (word and reveal) else None,
            'score': self.score,
            'lives': self.lives,
            'attempts': self.attempts,
            'time_remaining': self.time_remaining,
            'achievements': sorted(self.unlocked_achievements),
            'last_result': self.last_result,
            'awaiting_advance': self.awaiting_advance,
        }


def shuffled(items: Sequence, rng: Optional[random.Random] = None) -> list:
    """Return a uniformly random permutation of `items` (Fisher-Yates)."""
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def scramble_word(word: str, rng: Optional[random.Random] = None) -> str:
    """Permute the letters of `word` until they differ from it.

    Gives up after MAX_SCRAMBLE_ATTEMPTS, so a word made of one repeated
    letter ("AAA") comes back unchanged.
    """
    scrambled = word
    attempts = 0
    while scrambled == word and attempts < MAX_SCRAMBLE_ATTEMPTS:
        scrambled = ''.join(shuffled(word, rng))
        attempts += 1
    return scrambled


def initialize_session(dictionary: Mapping[str, Sequence[WordEntry]], mode: str,
                       rng: Optional[random.Random] = None,
                       lives: int = DEFAULT_LIVES,
                       time_limit: int = DEFAULT_TIME_LIMIT_SEC) -> SessionState:
    if mode not in MODES:
        raise ValueError(f"Unknown game mode: {mode}")

    word_sets = {}
    for tier in TIERS:
        word_sets[tier] = [
            ScrambledWord(word=entry.word, scrambled=scramble_word(entry.word, rng), hint=entry.hint)
            for entry in shuffled(dictionary[tier], rng)
        ]

    return SessionState(
        mode=mode,
        randomized_word_sets=word_sets,
        lives=lives if mode == 'achievements' else None,
        time_remaining=time_limit if mode == 'timed' else None,
        status='in_progress',
    )


def submit_answer(session: SessionState, guess: str) -> AnswerResult:
    """Check `guess` against the current word. Does not move the word cursor."""
    if session.status != 'in_progress':
        raise SessionNotActive(f"Cannot answer a session that is {session.status}")

    session.attempts += 1
    if guess.strip().upper() == session.current_word.word:
        prospective = session.score + points_for(session.mode)
        session.unlocked_achievements |= evaluate_achievements(
            prospective, session.attempts, session.unlocked_achievements
        )
        session.score = prospective
        session.last_result = 'correct'
        session.awaiting_advance = True
        return 'correct'

    session.last_result = 'incorrect'
    if session.mode == 'achievements':
        session.lives -= 1
        if session.lives <= 0:
            session.lives = 0
            session.status = 'finished'
    return 'incorrect'


def advance_word(session: SessionState) -> None:
    """Move to the next word, the next tier, or finish after the hard tier."""
    if session.status != 'in_progress':
        raise SessionNotActive(f"Cannot advance a session that is {session.status}")

    session.last_result = None
    session.awaiting_advance = False
    if session.current_word_index < len(session.current_word_set) - 1:
        session.current_word_index += 1
    elif session.current_difficulty_index < len(session.difficulty_order) - 1:
        session.current_difficulty_index += 1
        session.current_word_index = 0
    else:
        session.status = 'finished'


def tick(session: SessionState) -> None:
    """One elapsed second of a timed session."""
    if session.mode != 'timed' or session.status != 'in_progress':
        return
    session.time_remaining -= 1
    if session.time_remaining <= 0:
        session.time_remaining = 0
        session.status = 'finished'


def finalize_session(session: SessionState) -> Optional[SessionDelta]:
    """Produce the progress delta for a finished session.

    Returns None on every call after the first so a session is never counted twice.
    """
    if session.status != 'finished':
        raise SessionNotActive("Only finished sessions can be finalized")
    if session.finalized:
        return None
    session.finalized = True
    return SessionDelta(
        score_to_add=session.score,
        new_achievements=set(session.unlocked_achievements),
    )
