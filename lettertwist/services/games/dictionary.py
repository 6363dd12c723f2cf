import json
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from .engine import TIERS, WordEntry

logger = logging.getLogger(__name__)


class DictionaryError(ValueError):
    pass


BASE_WORD_SETS = {
    'easy': [
        ('CAT', "A furry pet that says meow"),
        ('DOG', "Man's best friend"),
        ('SUN', "Bright star in the sky"),
        ('RED', "Color of roses"),
        ('BIG', "Opposite of small"),
        ('FUN', "Something enjoyable"),
        ('RUN', "Moving fast with your legs"),
        ('BALL', "Round toy you can throw"),
        ('BLUE', "Color of the sky"),
        ('FISH', "Animal that swims in water"),
    ],
    'medium': [
        ('BOOK', "You read this"),
        ('TREE', "Tall plant with leaves"),
        ('HOUSE', "Where you live"),
        ('WATER', "You drink this"),
        ('HAPPY', "Feeling of joy"),
        ('CHAIR', "You sit on this"),
        ('LIGHT', "Makes things bright"),
        ('MUSIC', "Sounds that are nice to hear"),
        ('DANCE', "Moving to music"),
        ('SMILE', "Happy expression on your face"),
    ],
    'hard': [
        ('FRIEND', "Someone you like to play with"),
        ('SCHOOL', "Where you learn"),
        ('RAINBOW', "Colorful arc in the sky"),
        ('BUTTERFLY', "Colorful flying insect"),
        ('ELEPHANT', "Large gray animal with trunk"),
        ('BIRTHDAY', "Special day you celebrate each year"),
        ('SUNSHINE', "Light and warmth from the sun"),
        ('ADVENTURE', "Exciting journey or experience"),
        ('PLAYGROUND', "Fun place with swings and slides"),
        ('FAVORITE', "The thing you like best"),
    ],
}


class _RawEntry(BaseModel):
    word: str
    hint: Optional[str] = None


_raw_entries = TypeAdapter(List[_RawEntry])


def _as_mapping(item):
    # (word, hint) pairs are accepted alongside {word, hint} objects
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return {'word': item[0], 'hint': item[1]}
    return item


def _entry(raw: _RawEntry, tier: str) -> WordEntry:
    word = raw.word.strip().upper()
    if not word.isalpha():
        raise DictionaryError(f"Invalid word {raw.word!r} in tier '{tier}': letters only")
    return WordEntry(word=word, hint=(raw.hint or '').strip())


def build_dictionary(raw: dict) -> Dict[str, List[WordEntry]]:
    """Validate a {tier: [{word, hint}, ...]} mapping and convert it to WordEntry lists."""
    dictionary = {}
    for tier in TIERS:
        items = raw.get(tier) if isinstance(raw, dict) else None
        if not items:
            raise DictionaryError(f"Tier '{tier}' is missing or empty")
        try:
            parsed = _raw_entries.validate_python(
                [_as_mapping(item) for item in items] if isinstance(items, list) else items
            )
        except ValidationError as exc:
            raise DictionaryError(f"Malformed entries in tier '{tier}': {exc}") from exc
        dictionary[tier] = [_entry(entry, tier) for entry in parsed]
    return dictionary


def load_dictionary(path: Optional[str] = None) -> Dict[str, List[WordEntry]]:
    """Load the word/hint dictionary from a JSON file, or the built-in sets."""
    if not path:
        return build_dictionary(BASE_WORD_SETS)
    try:
        with open(path, encoding='utf-8') as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as exc:
        raise DictionaryError(f"Could not read word list {path}: {exc}") from exc
    dictionary = build_dictionary(raw)
    logger.info(
        "Loaded word list from %s (%s)",
        path,
        ', '.join(f"{tier}={len(dictionary[tier])}" for tier in TIERS),
    )
    return dictionary
