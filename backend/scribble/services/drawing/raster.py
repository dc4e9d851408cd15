import math
import re
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image


RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)

_HEX_COLOR = re.compile(r'^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$', re.IGNORECASE)


def parse_color(value: Union[str, Sequence[int], None]) -> Optional[RGB]:
    """Resolve '#rrggbb' / 'rrggbb' strings or RGB triples to a color tuple.

    Returns None for anything that does not resolve to a color; callers
    treat that as "no target color" and skip the operation.
    """
    if value is None:
        return None
    if isinstance(value, str):
        match = _HEX_COLOR.match(value.strip())
        if not match:
            return None
        return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]
    try:
        channels = tuple(int(c) for c in value)
    except (TypeError, ValueError):
        return None
    if len(channels) != 3 or any(c < 0 or c > 255 for c in channels):
        return None
    return channels  # type: ignore[return-value]


class RasterBuffer:
    """Fixed-size RGBA pixel grid backing the drawing surface.

    Pixels live in an (height, width, 4) uint8 array; x indexes columns and
    y indexes rows.
    """

    def __init__(self, width: int, height: int, background: RGB = WHITE):
        if width <= 0 or height <= 0:
            raise ValueError(f'raster dimensions must be positive, got {width}x{height}')
        self.background = background
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.fill(background)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_rgb(self, x: int, y: int) -> RGB:
        r, g, b = self.pixels[y, x, :3]
        return int(r), int(g), int(b)

    def set_pixel(self, x: int, y: int, color: RGB) -> None:
        self.pixels[y, x] = (*color, 255)

    def fill(self, color: RGB) -> None:
        self.pixels[...] = (*color, 255)

    def copy(self) -> 'RasterBuffer':
        clone = RasterBuffer.__new__(RasterBuffer)
        clone.background = self.background
        clone.pixels = self.pixels.copy()
        return clone

    def restore(self, snapshot: 'RasterBuffer') -> None:
        """Replace this buffer's content (and dimensions) with a snapshot's."""
        self.pixels = snapshot.pixels.copy()

    def draw_segment(self, start: Tuple[float, float], end: Tuple[float, float],
                     width: float, color: RGB) -> None:
        """Paint a round-capped line segment of the given width.

        A pixel is painted when its center lies within width / 2 of the
        segment, which yields round caps and round joins between
        consecutive segments.
        """
        radius = max(float(width), 1.0) / 2.0
        x0, y0 = start
        x1, y1 = end

        left = max(int(math.floor(min(x0, x1) - radius)), 0)
        right = min(int(math.ceil(max(x0, x1) + radius)), self.width - 1)
        top = max(int(math.floor(min(y0, y1) - radius)), 0)
        bottom = min(int(math.ceil(max(y0, y1) + radius)), self.height - 1)
        if left > right or top > bottom:
            return

        ys, xs = np.mgrid[top:bottom + 1, left:right + 1]
        px = xs + 0.5
        py = ys + 0.5
        dx = x1 - x0
        dy = y1 - y0
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = np.zeros_like(px)
        else:
            t = np.clip(((px - x0) * dx + (py - y0) * dy) / length_sq, 0.0, 1.0)
        dist_sq = (px - (x0 + t * dx)) ** 2 + (py - (y0 + t * dy)) ** 2

        region = self.pixels[top:bottom + 1, left:right + 1]
        region[dist_sq <= radius * radius] = (*color, 255)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    @classmethod
    def from_image(cls, image: Image.Image, background: RGB = WHITE) -> 'RasterBuffer':
        """Build a buffer from a PIL image, flattening transparency onto the background."""
        rgba = image.convert('RGBA')
        base = Image.new('RGBA', rgba.size, (*background, 255))
        base.alpha_composite(rgba)
        buffer = cls.__new__(cls)
        buffer.background = background
        buffer.pixels = np.array(base, dtype=np.uint8)
        return buffer
