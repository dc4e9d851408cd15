import math
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from .fill import FillEngine
from .raster import BLACK, RGB, WHITE, RasterBuffer, parse_color
from .undo import DEFAULT_UNDO_LIMIT, UndoStack


Point = Tuple[float, float]

ERASER_WIDTH_FACTOR = 4
DEFAULT_BRUSH_SIZE = 5


class Tool(str, Enum):
    PENCIL = 'pencil'
    FILL = 'fill'
    ERASER = 'eraser'

    @classmethod
    def parse(cls, value: Union[str, 'Tool']) -> 'Tool':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f'unknown tool {value!r}') from None


class DrawingSurface:
    """Turns pointer input into strokes and fills on a raster buffer.

    The surface owns its buffer and undo history. One snapshot is pushed
    before every destructive operation (stroke start, fill); clearing and
    resizing are not undoable.
    """

    def __init__(self, width: int, height: int, background: RGB = WHITE,
                 undo_limit: int = DEFAULT_UNDO_LIMIT):
        self.background = background
        self.buffer = RasterBuffer(width, height, background)
        self.undo_stack = UndoStack(undo_limit)
        self.fill_engine = FillEngine(self.undo_stack)
        self.tool = Tool.PENCIL
        self.color: RGB = BLACK
        self.brush_size: float = DEFAULT_BRUSH_SIZE
        self._last_point: Optional[Point] = None

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    @property
    def stroke_open(self) -> bool:
        return self._last_point is not None

    def map_point(self, point: Point, display_size: Optional[Tuple[float, float]] = None) -> Point:
        """Scale a display-space point into buffer space."""
        x, y = point
        if not display_size:
            return float(x), float(y)
        display_w, display_h = display_size
        if display_w <= 0 or display_h <= 0:
            return float(x), float(y)
        return x * (self.width / display_w), y * (self.height / display_h)

    def set_tool(self, tool: Union[str, Tool]) -> Tool:
        self.tool = Tool.parse(tool)
        return self.tool

    def set_color(self, color: Union[str, Sequence[int], None]) -> bool:
        resolved = parse_color(color)
        if resolved is None:
            return False
        self.color = resolved
        return True

    def begin_stroke(self, point: Point, color: Union[str, Sequence[int], None] = None) -> None:
        if self.tool is Tool.FILL:
            x, y = point
            # floor, not truncation: -0.5 is off the canvas, not pixel 0
            self.fill_engine.fill(self.buffer, math.floor(x), math.floor(y),
                                  color if color is not None else self.color)
            return
        self.undo_stack.push(self.buffer)
        self._last_point = (float(point[0]), float(point[1]))

    def extend_stroke(self, point: Point, width: Optional[float] = None,
                      color: Union[str, Sequence[int], None] = None) -> bool:
        if self._last_point is None:
            return False
        stroke_width = float(width) if width else float(self.brush_size)
        if self.tool is Tool.ERASER:
            paint = self.background
            stroke_width *= ERASER_WIDTH_FACTOR
        else:
            paint = parse_color(color) if color is not None else self.color
            if paint is None:
                paint = self.color
        end = (float(point[0]), float(point[1]))
        self.buffer.draw_segment(self._last_point, end, stroke_width, paint)
        self._last_point = end
        return True

    def end_stroke(self) -> None:
        self._last_point = None

    def clear(self) -> None:
        self.buffer.fill(self.background)
        self._last_point = None

    def reset(self) -> None:
        """Blank canvas and empty history, used between words."""
        self.clear()
        self.undo_stack.clear()

    def resize(self, width: int, height: int) -> bool:
        """Reallocate the buffer at a new size, dropping content and history.

        Zero-sized requests (hidden containers) are ignored.
        """
        if width <= 0 or height <= 0:
            return False
        self.end_stroke()
        self.buffer = RasterBuffer(int(width), int(height), self.background)
        self.undo_stack.clear()
        return True

    def undo(self) -> bool:
        snapshot = self.undo_stack.pop()
        if snapshot is None:
            return False
        self._last_point = None
        self.buffer.restore(snapshot)
        return True

    def snapshot(self) -> RasterBuffer:
        return self.buffer.copy()
