import pytest

from pixedit.brush import Brush, BrushMode, BrushState, ViewExtent
from pixedit.color import TRANSPARENT, WHITE, Rgba8
from pixedit.gfx import Point


def grid(*rows):
    return [WHITE if ch == "w" else TRANSPARENT for row in rows for ch in row.split()]


BRUSH1 = grid(
    "z z z",
    "z w z",
    "z z z",
)
BRUSH2 = grid(
    "z z z z",
    "z w w z",
    "z w w z",
    "z z z z",
)
BRUSH3 = grid(
    "z z z z z",
    "z z w z z",
    "z w w w z",
    "z z w z z",
    "z z z z z",
)
BRUSH5 = grid(
    "z z z z z z z",
    "z z w w w z z",
    "z w w w w w z",
    "z w w w w w z",
    "z w w w w w z",
    "z z w w w z z",
    "z z z z z z z",
)
BRUSH7 = grid(
    "z z z z z z z z z",
    "z z z w w w z z z",
    "z z w w w w w z z",
    "z w w w w w w w z",
    "z w w w w w w w z",
    "z w w w w w w w z",
    "z z w w w w w z z",
    "z z z w w w z z z",
    "z z z z z z z z z",
)
BRUSH15 = grid(
    "z z z z z w w w w w z z z z z",
    "z z z w w w w w w w w w z z z",
    "z z w w w w w w w w w w w z z",
    "z w w w w w w w w w w w w w z",
    "z w w w w w w w w w w w w w z",
    "w w w w w w w w w w w w w w w",
    "w w w w w w w w w w w w w w w",
    "w w w w w w w w w w w w w w w",
    "w w w w w w w w w w w w w w w",
    "w w w w w w w w w w w w w w w",
    "z w w w w w w w w w w w w w z",
    "z w w w w w w w w w w w w w z",
    "z z w w w w w w w w w w w z z",
    "z z z w w w w w w w w w z z z",
    "z z z z z w w w w w z z z z z",
)


@pytest.mark.parametrize(
    "size, position, diameter, expected",
    [
        (3, (1.0, 1.0), 1.0, BRUSH1),
        (4, (1.5, 1.5), 2.0, BRUSH2),
        (5, (2.0, 2.0), 3.0, BRUSH3),
        (7, (3.0, 3.0), 5.0, BRUSH5),
        (9, (4.0, 4.0), 7.0, BRUSH7),
        (15, (7.0, 7.0), 15.0, BRUSH15),
    ],
)
def test_paint(size, position, diameter, expected):
    canvas = [TRANSPARENT] * (size * size)
    assert Brush.paint(canvas, size, size, position, diameter, WHITE) == expected


def test_paint_rejects_wrong_buffer_size():
    with pytest.raises(ValueError):
        Brush.paint([TRANSPARENT] * 3, 2, 2, (0.0, 0.0), 1.0, WHITE)


def test_mode_display():
    assert str(BrushMode.ERASE) == "erase"
    assert str(BrushMode.XRAY) == "xray"
    assert str(BrushMode.line()) == "line"
    assert str(BrushMode.line(45)) == "45 degree snap line"


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        BrushMode("fnord")


def test_set_unset_toggle():
    b = Brush()
    assert b.set(BrushMode.ERASE) is True
    assert b.set(BrushMode.ERASE) is False
    assert b.is_set(BrushMode.ERASE)
    assert b.unset(BrushMode.ERASE) is True
    assert b.unset(BrushMode.ERASE) is False
    b.toggle(BrushMode.XSYM)
    assert b.is_set(BrushMode.XSYM)
    b.toggle(BrushMode.XSYM)
    assert not b.is_set(BrushMode.XSYM)


def test_only_one_line_mode():
    b = Brush()
    b.set(BrushMode.line(45))
    b.set(BrushMode.line())
    assert b.modes == frozenset({BrushMode.line()})
    assert b.unset(BrushMode.line(90)) is True
    assert b.modes == frozenset()


def test_reset_clears_modes():
    b = Brush()
    b.set(BrushMode.ERASE)
    b.set(BrushMode.MULTI)
    b.reset()
    assert b.modes == frozenset()


def test_line_horizontal():
    assert Brush.line((0, 0), (3, 0)) == [Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0)]


def test_line_single_point():
    assert Brush.line((2, 2), (2, 2)) == [Point(2, 2)]


def test_line_shallow():
    assert Brush.line((0, 0), (3, 1)) == [Point(0, 0), Point(1, 0), Point(2, 1), Point(3, 1)]


@pytest.mark.parametrize("end", [(7, -3), (-5, 9), (0, -6), (-4, -4)])
def test_line_invariants(end):
    pts = Brush.line((0, 0), end)
    assert pts[0] == Point(0, 0)
    assert pts[-1] == Point(*end)
    assert len(pts) == max(abs(end[0]), abs(end[1])) + 1
    for a, b in zip(pts, pts[1:]):
        assert max(abs(a.x - b.x), abs(a.y - b.y)) == 1


def test_filter_stroke_removes_corner():
    stroke = [Point(0, 0), Point(1, 0), Point(1, 1)]
    assert Brush.filter_stroke(stroke) == [Point(0, 0), Point(1, 1), Point(1, 1)]


def test_filter_stroke_keeps_straight_line():
    stroke = [Point(0, 0), Point(1, 0), Point(2, 0)]
    assert Brush.filter_stroke(stroke) == [Point(0, 0), Point(1, 0), Point(2, 0)]


def test_filter_stroke_empty():
    assert Brush.filter_stroke([]) == []


EXTENT = ViewExtent(fw=4, fh=4, nframes=3)


def test_expand_plain():
    assert Brush().expand((1, 0), EXTENT) == [Point(1, 0)]


def test_expand_xsym():
    b = Brush()
    b.set(BrushMode.XSYM)
    assert b.expand((1, 0), EXTENT) == [Point(1, 0), Point(2, 0)]


def test_expand_ysym():
    b = Brush()
    b.set(BrushMode.YSYM)
    assert b.expand((1, 0), EXTENT) == [Point(1, 0), Point(1, 3)]


def test_expand_multi():
    b = Brush()
    b.set(BrushMode.MULTI)
    assert b.expand((1, 0), EXTENT) == [Point(1, 0), Point(1, 0), Point(5, 0), Point(9, 0)]


def test_drawing_lifecycle():
    b = Brush()
    assert not b.is_drawing()
    b.start_drawing((0, 0), WHITE, EXTENT)
    assert b.state is BrushState.DRAWING
    assert b.color == WHITE
    assert b.stroke == [Point(0, 0)]
    b.draw((3, 0))
    assert b.stroke == [Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0)]
    b.stop_drawing()
    assert b.state is BrushState.DRAW_ENDED
    assert b.is_drawing()
    b.update()
    assert b.state is BrushState.NOT_DRAWING
    assert b.stroke == []


def test_stop_without_drawing_raises():
    with pytest.raises(RuntimeError):
        Brush().stop_drawing()


def test_draw_without_start_raises():
    with pytest.raises(RuntimeError):
        Brush().draw((1, 1))


def test_line_mode_keeps_only_straight_line():
    b = Brush()
    b.set(BrushMode.line())
    b.start_drawing((0, 0), WHITE, EXTENT)
    b.draw((2, 3))
    b.draw((4, 1))
    assert b.stroke[0] == Point(0, 0)
    assert b.stroke[-1] == Point(4, 1)
    assert len(b.stroke) == 5


def test_line_mode_snaps_to_45_degrees():
    b = Brush()
    b.set(BrushMode.line(45))
    b.start_drawing((0, 0), WHITE, EXTENT)
    b.draw((5, 4))
    assert b.stroke[-1] == Point(5, 5)


def test_line_mode_snaps_to_90_degrees():
    b = Brush()
    b.set(BrushMode.line(90))
    b.start_drawing((0, 0), WHITE, EXTENT)
    b.draw((5, 1))
    assert b.stroke == [Point(x, 0) for x in range(6)]


def test_perfect_mode_filters_stroke():
    b = Brush()
    b.set(BrushMode.PERFECT)
    b.start_drawing((0, 0), WHITE, EXTENT)
    b.draw((1, 0))
    b.draw((1, 1))
    assert Point(1, 0) not in b.stroke[1:-1]
    assert b.stroke[-1] == Point(1, 1)


def test_draw_accepts_custom_color():
    b = Brush()
    color = Rgba8(1, 2, 3, 4)
    b.start_drawing((2, 2), color, EXTENT)
    assert b.color == color
    assert b.extent == EXTENT