from collections import deque
from typing import Deque, Optional

from .raster import RasterBuffer


DEFAULT_UNDO_LIMIT = 20


class UndoStack:
    """Bounded stack of raster snapshots; the oldest entry is evicted on overflow."""

    def __init__(self, limit: int = DEFAULT_UNDO_LIMIT):
        if limit <= 0:
            raise ValueError('undo limit must be positive')
        self.limit = limit
        self._snapshots: Deque[RasterBuffer] = deque(maxlen=limit)

    def push(self, buffer: RasterBuffer) -> None:
        self._snapshots.append(buffer.copy())

    def pop(self) -> Optional[RasterBuffer]:
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)
