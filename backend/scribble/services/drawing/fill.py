import logging
from typing import Sequence, Union

import numpy as np

from .raster import RGB, RasterBuffer, parse_color
from .undo import UndoStack


logger = logging.getLogger(__name__)


def flood_fill(buffer: RasterBuffer, start_x: int, start_y: int, color: RGB) -> int:
    """Recolor the 4-connected region of pixels matching the seed pixel's RGB.

    Uses an explicit work stack, so region size is bounded only by the
    buffer. Matching ignores alpha; written pixels are opaque. Returns the
    number of recolored pixels (0 for out-of-bounds seeds or when the seed
    already has the target color).
    """
    if not buffer.in_bounds(start_x, start_y):
        return 0
    match_color = buffer.get_rgb(start_x, start_y)
    if match_color == tuple(color):
        return 0

    width, height = buffer.width, buffer.height
    rgb = buffer.pixels[..., :3]
    # Flat bytearray of "still matches" flags; clearing a flag on recolor
    # guarantees each pixel is visited at most once.
    matches = bytearray(np.all(rgb == np.array(match_color, dtype=np.uint8), axis=-1).tobytes())
    filled = []

    stack = [(start_x, start_y)]
    while stack:
        x, y = stack.pop()
        if x < 0 or x >= width or y < 0 or y >= height:
            continue
        index = y * width + x
        if not matches[index]:
            continue
        matches[index] = 0
        filled.append(index)
        stack.append((x + 1, y))
        stack.append((x - 1, y))
        stack.append((x, y + 1))
        stack.append((x, y - 1))

    flat = buffer.pixels.reshape(-1, 4)
    flat[np.array(filled, dtype=np.intp)] = (*color, 255)
    return len(filled)


class FillEngine:
    """Flood fill with the same undo discipline as a stroke."""

    def __init__(self, undo_stack: UndoStack):
        self.undo_stack = undo_stack

    def fill(self, buffer: RasterBuffer, x: int, y: int,
             color: Union[str, Sequence[int], None]) -> int:
        target = parse_color(color)
        if target is None:
            logger.info(f"[fill-skip] unresolved color={color!r}")
            return 0
        self.undo_stack.push(buffer)
        return flood_fill(buffer, x, y, target)
