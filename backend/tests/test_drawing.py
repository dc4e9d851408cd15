import numpy as np
import pytest

from scribble.services.drawing.fill import FillEngine, flood_fill
from scribble.services.drawing.raster import BLACK, WHITE, RasterBuffer, parse_color
from scribble.services.drawing.surface import DrawingSurface, Tool
from scribble.services.drawing.undo import UndoStack

RED = (255, 0, 0)


def test_parse_color_accepts_hex_and_triples():
    assert parse_color('#ff8000') == (255, 128, 0)
    assert parse_color('00FF00') == (0, 255, 0)
    assert parse_color([1, 2, 3]) == (1, 2, 3)
    assert parse_color('#ggg000') is None
    assert parse_color('red') is None
    assert parse_color((1, 2)) is None
    assert parse_color(None) is None


def test_raster_starts_as_opaque_background():
    buffer = RasterBuffer(4, 3)
    assert buffer.size == (4, 3)
    assert buffer.pixels.shape == (3, 4, 4)
    assert (buffer.pixels == 255).all()
    with pytest.raises(ValueError):
        RasterBuffer(0, 10)


def test_draw_segment_paints_round_capped_line():
    buffer = RasterBuffer(40, 20)
    buffer.draw_segment((10, 10), (30, 10), 4, BLACK)
    assert buffer.get_rgb(20, 10) == BLACK
    # round cap extends past the end point by the radius
    assert buffer.get_rgb(31, 10) == BLACK
    assert buffer.get_rgb(35, 10) == WHITE
    assert buffer.get_rgb(20, 2) == WHITE


def test_draw_segment_outside_buffer_is_ignored():
    buffer = RasterBuffer(10, 10)
    buffer.draw_segment((50, 50), (60, 60), 3, BLACK)
    assert (buffer.pixels == 255).all()


def test_undo_stack_is_bounded_to_most_recent_snapshots():
    stack = UndoStack(limit=20)
    buffer = RasterBuffer(2, 2)
    for i in range(25):
        buffer.set_pixel(0, 0, (i, i, i))
        stack.push(buffer)
    assert len(stack) == 20
    restored = [stack.pop().get_rgb(0, 0)[0] for _ in range(20)]
    assert restored == list(range(24, 4, -1))
    assert stack.pop() is None


def test_flood_fill_recolors_exactly_the_connected_region():
    buffer = RasterBuffer(10, 10)
    # vertical wall splits the canvas into two regions
    for y in range(10):
        buffer.set_pixel(5, y, BLACK)
    count = flood_fill(buffer, 1, 1, RED)
    assert count == 50
    assert buffer.get_rgb(0, 9) == RED
    assert buffer.get_rgb(4, 0) == RED
    assert buffer.get_rgb(5, 5) == BLACK
    assert buffer.get_rgb(6, 5) == WHITE


def test_flood_fill_does_not_leak_diagonally():
    buffer = RasterBuffer(3, 3)
    buffer.fill(BLACK)
    buffer.set_pixel(0, 0, WHITE)
    buffer.set_pixel(1, 1, WHITE)
    assert flood_fill(buffer, 0, 0, RED) == 1
    assert buffer.get_rgb(1, 1) == WHITE


def test_flood_fill_matches_rgb_and_forces_opaque_alpha():
    buffer = RasterBuffer(4, 4)
    buffer.pixels[..., 3] = 10
    flood_fill(buffer, 0, 0, RED)
    assert (buffer.pixels[..., 3] == 255).all()
    assert buffer.get_rgb(3, 3) == RED


def test_flood_fill_same_color_and_out_of_bounds_are_noops():
    buffer = RasterBuffer(5, 5)
    before = buffer.pixels.copy()
    assert flood_fill(buffer, 2, 2, WHITE) == 0
    assert flood_fill(buffer, -1, 2, RED) == 0
    assert flood_fill(buffer, 2, 5, RED) == 0
    assert np.array_equal(buffer.pixels, before)


def test_fill_engine_snapshots_before_filling_and_skips_bad_colors():
    stack = UndoStack()
    engine = FillEngine(stack)
    buffer = RasterBuffer(5, 5)
    assert engine.fill(buffer, 0, 0, 'not-a-color') == 0
    assert len(stack) == 0
    assert engine.fill(buffer, 0, 0, '#ff0000') == 25
    assert len(stack) == 1
    assert stack.pop().get_rgb(0, 0) == WHITE


def test_flood_fill_handles_large_regions_without_recursion():
    buffer = RasterBuffer(400, 300)
    assert flood_fill(buffer, 0, 0, RED) == 400 * 300


def test_surface_maps_display_coordinates_to_buffer_space():
    surface = DrawingSurface(200, 100)
    assert surface.map_point((50, 25), (100, 50)) == (100.0, 50.0)
    assert surface.map_point((7, 3)) == (7.0, 3.0)


def test_surface_stroke_pushes_one_snapshot_per_stroke():
    surface = DrawingSurface(40, 30)
    surface.begin_stroke((5, 5))
    surface.extend_stroke((20, 5), width=3, color='#000000')
    surface.extend_stroke((20, 20), width=3, color='#000000')
    surface.end_stroke()
    assert len(surface.undo_stack) == 1
    assert surface.buffer.get_rgb(12, 5) == BLACK
    assert surface.buffer.get_rgb(20, 12) == BLACK


def test_extend_without_open_stroke_does_nothing():
    surface = DrawingSurface(20, 20)
    assert surface.extend_stroke((10, 10), width=5) is False
    surface.end_stroke()
    assert (surface.buffer.pixels == 255).all()


def test_eraser_paints_background_four_times_wider():
    surface = DrawingSurface(60, 60)
    surface.buffer.fill(BLACK)
    surface.set_tool('eraser')
    surface.begin_stroke((30, 30))
    surface.extend_stroke((30, 31), width=4)
    # brush 4 * 4 = 16 wide, so 7px from the line is erased
    assert surface.buffer.get_rgb(37, 30) == WHITE
    assert surface.buffer.get_rgb(45, 30) == BLACK


def test_fill_tool_delegates_to_flood_fill():
    surface = DrawingSurface(10, 10)
    surface.set_tool(Tool.FILL)
    surface.begin_stroke((3, 3), color='#00ff00')
    assert surface.buffer.get_rgb(9, 9) == (0, 255, 0)
    assert not surface.stroke_open
    assert len(surface.undo_stack) == 1


def test_undo_restores_states_in_reverse_order():
    surface = DrawingSurface(30, 30)
    states = []
    for i in range(3):
        states.append(surface.buffer.pixels.copy())
        surface.begin_stroke((5, 5 + 8 * i))
        surface.extend_stroke((25, 5 + 8 * i), width=2, color=BLACK)
        surface.end_stroke()
    for expected in reversed(states):
        assert surface.undo() is True
        assert np.array_equal(surface.buffer.pixels, expected)
    assert surface.undo() is False


def test_resize_reallocates_clears_and_aborts_open_stroke():
    surface = DrawingSurface(20, 20)
    surface.begin_stroke((1, 1))
    surface.extend_stroke((10, 10), width=3)
    assert surface.resize(50, 40) is True
    assert (surface.width, surface.height) == (50, 40)
    assert not surface.stroke_open
    assert len(surface.undo_stack) == 0
    assert (surface.buffer.pixels == 255).all()
    assert surface.resize(0, 40) is False
    assert (surface.width, surface.height) == (50, 40)


def test_unknown_tool_is_rejected():
    surface = DrawingSurface(10, 10)
    with pytest.raises(ValueError):
        surface.set_tool('spray')


def test_tool_parse_accepts_members_and_names():
    assert Tool.parse(Tool.PENCIL) is Tool.PENCIL
    assert Tool.parse(Tool.FILL) is Tool.FILL
    assert Tool.parse('Eraser') is Tool.ERASER
    surface = DrawingSurface(10, 10)
    assert surface.set_tool(Tool.FILL) is Tool.FILL


def test_fill_tool_floors_pointer_coordinates():
    surface = DrawingSurface(10, 10)
    surface.set_tool(Tool.FILL)
    before = surface.buffer.pixels.copy()
    # just left of the canvas, must not land on column 0
    surface.begin_stroke((-0.5, 4.0), color='#ff0000')
    assert np.array_equal(surface.buffer.pixels, before)
    surface.begin_stroke((0.9, 9.99), color='#ff0000')
    assert surface.buffer.get_rgb(0, 0) == (255, 0, 0)
