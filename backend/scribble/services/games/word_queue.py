import random
from typing import Iterable, List, Optional, Union

from .words import Difficulty, Word


class WordQueue:
    """Ordered words for one session; each word appears at most once."""

    def __init__(self, words: Iterable[Word]):
        self._words: List[Word] = list(words)
        self._index = -1

    @classmethod
    def build(cls, difficulty: Union[str, Difficulty], master_list: Iterable[Word],
              target_count: int, rng: Optional[random.Random] = None) -> 'WordQueue':
        difficulty = Difficulty.parse(difficulty)
        seen = set()
        candidates = []
        for word in master_list:
            key = word.text.strip().lower()
            if key in seen:
                continue
            try:
                matches = Difficulty.parse(word.difficulty) is difficulty
            except ValueError:
                matches = False
            if matches:
                seen.add(key)
                candidates.append(word)
        # random.shuffle is a Fisher-Yates shuffle: every permutation is equally likely
        (rng or random.Random()).shuffle(candidates)
        return cls(candidates[:max(0, target_count)])

    @property
    def words(self) -> List[Word]:
        return list(self._words)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[Word]:
        if 0 <= self._index < len(self._words):
            return self._words[self._index]
        return None

    @property
    def remaining(self) -> int:
        return max(0, len(self._words) - self._index - 1)

    def next(self) -> Optional[Word]:
        """Advance to the following word; None once the queue is exhausted."""
        if self._index + 1 >= len(self._words):
            self._index = len(self._words)
            return None
        self._index += 1
        return self._words[self._index]

    def __len__(self) -> int:
        return len(self._words)
