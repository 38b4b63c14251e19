from pixedit.gfx import Point, Rect, Repeat, ZDepth


def test_floor_keeps_whole_numbers():
    p = Point(3.0, -2.0).floor()
    assert p == Point(3.0, -2.0)


def test_floor_is_not_greater():
    for x, y in [(1.7, 2.2), (-0.5, -3.9), (10.01, 0.0)]:
        p = Point(x, y).floor()
        assert p.x <= x < p.x + 1
        assert p.y <= y < p.y + 1


def test_to_int_rounds_half_away_from_zero():
    assert Point(2.5, -2.5).to_int() == Point(3, -3)


def test_to_int_round_trip_through_float():
    p = Point(7, -4)
    assert p.to_float().to_int() == p
    assert isinstance(p.to_float().x, float)


def test_add_and_sub_are_inverse():
    p = Point(1.5, 2.5)
    assert (p + (3.0, -1.0)) - (3.0, -1.0) == p
    assert p - p == Point(0.0, 0.0)


def test_rect_dimensions():
    r = Rect(1, 2, 4, 7)
    assert r.width == 4 - 1
    assert r.height == 7 - 2
    assert r.area == r.width * r.height


def test_repeat_defaults():
    assert Repeat() == Repeat(1.0, 1.0)


def test_zdepth_ordering_and_default():
    assert ZDepth() == ZDepth.ZERO
    assert ZDepth(-0.9) < ZDepth(-0.7) < ZDepth.ZERO
    assert float(ZDepth(-0.3)) == -0.3