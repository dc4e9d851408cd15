import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union


logger = logging.getLogger(__name__)


class WordSourceError(RuntimeError):
    """Raised when neither the word table nor the local word file is usable."""


class Difficulty(str, Enum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'

    @classmethod
    def parse(cls, value: Union[str, 'Difficulty']) -> 'Difficulty':
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        raise ValueError(f'unknown difficulty {value!r}')


@dataclass(frozen=True)
class Word:
    text: str
    clue: str = ''
    difficulty: str = Difficulty.EASY.value
    reference_seed: str = field(default='')

    def __post_init__(self):
        if not self.reference_seed:
            object.__setattr__(self, 'reference_seed', self.text.lower())

    @classmethod
    def from_dict(cls, data: dict) -> 'Word':
        text = data.get('word') or data.get('text')
        if not text:
            raise ValueError(f'word entry without text: {data!r}')
        return cls(
            text=text,
            clue=data.get('clue') or '',
            difficulty=data.get('difficulty') or Difficulty.EASY.value,
            reference_seed=data.get('reference_seed') or '',
        )

    def to_dict(self) -> dict:
        return {
            'word': self.text,
            'clue': self.clue,
            'difficulty': self.difficulty,
            'reference_seed': self.reference_seed,
        }


def parse_words(entries: Iterable[dict]) -> List[Word]:
    return [Word.from_dict(entry) for entry in entries]


def load_words_file(path: str) -> List[Word]:
    with open(path, encoding='utf-8') as fh:
        return parse_words(json.load(fh))


def load_words(words_file: Optional[str] = None) -> List[Word]:
    """Load the master word list from the word table, falling back to a JSON file.

    Must run inside an app context. An empty table counts as a failure of
    the primary source.
    """
    from flask import current_app
    from scribble.models import WordEntry

    try:
        words = [entry.to_word() for entry in WordEntry.query.all()]
        if not words:
            raise WordSourceError('word table is empty')
        return words
    except Exception as exc:
        logger.warning(f"[words-fallback] primary source failed: {exc!r}")

    path = words_file or current_app.config.get('WORDS_FILE')
    try:
        words = load_words_file(path)
    except (OSError, TypeError, ValueError) as exc:
        raise WordSourceError(f'no word source available (fallback {path!r}: {exc})') from exc
    if not words:
        raise WordSourceError(f'fallback word file {path!r} is empty')
    return words
