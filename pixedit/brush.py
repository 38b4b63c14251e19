"""Brush state, stroke generation and brush modes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterable, Optional, Sequence

from .color import TRANSPARENT, Rgba8
from .gfx import Point

__all__ = ["BrushMode", "BrushState", "ViewExtent", "Brush"]

_SIMPLE_MODES = ("erase", "multi", "perfect", "xsym", "ysym", "xray")
_LINE = "line"


def _round(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _as_point(p) -> Point:
    if isinstance(p, Point):
        return p
    x, y = p
    return Point(x, y)


@dataclass(frozen=True)
class BrushMode:
    """A brush mode. Any number of modes can be active at once."""

    kind: str
    snap: Optional[int] = None

    ERASE: ClassVar[BrushMode]
    MULTI: ClassVar[BrushMode]
    PERFECT: ClassVar[BrushMode]
    XSYM: ClassVar[BrushMode]
    YSYM: ClassVar[BrushMode]
    XRAY: ClassVar[BrushMode]

    def __post_init__(self) -> None:
        if self.kind == _LINE:
            return
        if self.kind not in _SIMPLE_MODES:
            raise ValueError(f"unknown brush mode: {self.kind}")
        if self.snap is not None:
            raise ValueError(f"brush mode {self.kind!r} takes no snap angle")

    @staticmethod
    def line(snap: Optional[int] = None) -> BrushMode:
        """A mode confining strokes to a straight line, optionally snapped to an angle."""
        return BrushMode(_LINE, snap)

    @property
    def is_line(self) -> bool:
        return self.kind == _LINE

    def __str__(self) -> str:
        if self.is_line:
            if self.snap is not None:
                return f"{self.snap} degree snap line"
            return "line"
        return self.kind


BrushMode.ERASE = BrushMode("erase")
BrushMode.MULTI = BrushMode("multi")
BrushMode.PERFECT = BrushMode("perfect")
BrushMode.XSYM = BrushMode("xsym")
BrushMode.YSYM = BrushMode("ysym")
BrushMode.XRAY = BrushMode("xray")


class BrushState(Enum):
    """Input state of the brush."""

    NOT_DRAWING = "not-drawing"
    DRAW_STARTED = "draw-started"
    DRAWING = "drawing"
    DRAW_ENDED = "draw-ended"


@dataclass(frozen=True)
class ViewExtent:
    """Frame width, frame height and frame count of a view."""

    fw: int
    fh: int
    nframes: int


@dataclass
class Brush:
    """The brush: its size, colour, modes and current stroke."""

    size: int = 1
    state: BrushState = BrushState.NOT_DRAWING
    stroke: list = field(default_factory=list)
    color: Rgba8 = TRANSPARENT
    extent: Optional[ViewExtent] = None
    _modes: set = field(default_factory=set, repr=False)
    _curr: Point = field(default=Point(0, 0), repr=False)
    _prev: Point = field(default=Point(0, 0), repr=False)

    @property
    def modes(self) -> frozenset:
        return frozenset(self._modes)

    def is_set(self, mode: BrushMode) -> bool:
        """Whether ``mode`` is active."""
        return mode in self._modes

    def set(self, mode: BrushMode) -> bool:
        """Activate ``mode``; return whether it was newly added."""
        if mode.is_line:
            # Only one line sub-mode may be active at a time.
            current = self._line_mode()
            if current is not None:
                self.unset(current)
        if mode in self._modes:
            return False
        self._modes.add(mode)
        return True

    def unset(self, mode: BrushMode) -> bool:
        """Deactivate ``mode``; return whether it was active."""
        current = self._line_mode()
        target = current if (current is not None and mode.is_line) else mode
        if target in self._modes:
            self._modes.discard(target)
            return True
        return False

    def toggle(self, mode: BrushMode) -> None:
        """Toggle ``mode`` on or off."""
        if self.is_set(mode):
            self.unset(mode)
        else:
            self.set(mode)

    def is_drawing(self) -> bool:
        return self.state is not BrushState.NOT_DRAWING

    def reset(self) -> None:
        """Clear all brush modes."""
        self._modes.clear()

    def update(self) -> None:
        """Per-frame update: finish a stroke that has ended."""
        if self.state is BrushState.DRAW_ENDED:
            self.state = BrushState.NOT_DRAWING
            self.stroke.clear()

    def start_drawing(self, p, color: Rgba8, extent: ViewExtent) -> None:
        """Begin a stroke at ``p``."""
        self.state = BrushState.DRAW_STARTED
        self.extent = extent
        self.color = color
        self.stroke = []
        self.draw(p)

    def _line_mode(self) -> Optional[BrushMode]:
        return next((m for m in self._modes if m.is_line), None)

    def draw(self, p) -> None:
        """Extend the stroke to ``p``."""
        if self.state not in (BrushState.DRAW_STARTED, BrushState.DRAWING):
            raise RuntimeError(f"cannot draw while brush is {self.state.value}")
        p = _as_point(p)
        self._prev = p if self.state is BrushState.DRAW_STARTED else self._curr
        self._curr = p

        line_mode = self._line_mode()
        if line_mode is not None:
            start = self.stroke[0] if self.stroke else p
            if line_mode.snap is None:
                end = self._curr
            else:
                end = self._snapped_end(start, self._curr, line_mode.snap)
            self.stroke = Brush.line(start, end)
        else:
            extended = self.stroke + Brush.line(self._prev, self._curr)
            self.stroke = [
                q for i, q in enumerate(extended) if i == 0 or extended[i - 1] != q
            ]

        if self.is_set(BrushMode.PERFECT):
            self.stroke = Brush.filter_stroke(self.stroke)

        if self.state is BrushState.DRAW_STARTED:
            self.state = BrushState.DRAWING

    @staticmethod
    def _snapped_end(start: Point, curr: Point, snap: int) -> Point:
        snap_rad = snap * math.pi / 180.0
        dx = float(curr.x - start.x)
        dy = float(curr.y - start.y)
        dist = math.hypot(dx, dy)
        angle = math.atan2(dy, dx)
        round_angle = _round(angle / snap_rad) * snap_rad
        ex = start.x + math.cos(round_angle) * dist
        ey = start.y + math.sin(round_angle) * dist
        return Point(_round(ex), _round(ey))

    def stop_drawing(self) -> None:
        """End the current stroke."""
        if self.state not in (BrushState.DRAW_STARTED, BrushState.DRAWING):
            raise RuntimeError(f"cannot stop drawing while brush is {self.state.value}")
        self.state = BrushState.DRAW_ENDED

    def expand(self, p, extent: ViewExtent) -> list:
        """Expand a point into all the brush heads the active modes produce."""
        pixels = [_as_point(p)]
        fw, fh, nframes = extent.fw, extent.fh, extent.nframes

        if self.is_set(BrushMode.XSYM):
            for q in list(pixels):
                frame_index = _trunc_div(q.x, fw)
                pixels.append(
                    Point((frame_index + 1) * fw - (q.x - frame_index * fw) - 1, q.y)
                )
        if self.is_set(BrushMode.YSYM):
            for q in list(pixels):
                pixels.append(Point(q.x, fh - q.y - 1))
        if self.is_set(BrushMode.MULTI):
            for q in list(pixels):
                frame_index = _trunc_div(q.x, fw)
                pixels.extend(Point(q.x + i * fw, q.y) for i in range(nframes - frame_index))
        return pixels

    @staticmethod
    def line(p0, p1) -> list:
        """The points of a line from ``p0`` to ``p1`` (Bresenham)."""
        x, y = _as_point(p0)
        x1, y1 = _as_point(p1)
        dx = abs(x1 - x)
        dy = abs(y1 - y)
        sx = 1 if x < x1 else -1
        sy = 1 if y < y1 else -1
        err = _trunc_div(dx if dx > dy else -dy, 2)

        points = []
        while True:
            points.append(Point(x, y))
            if (x, y) == (x1, y1):
                return points
            e2 = err
            if e2 > -dx:
                err -= dy
                x += sx
            if e2 < dy:
                err += dx
                y += sy

    @staticmethod
    def paint(
        pixels: Sequence[Rgba8],
        w: int,
        h: int,
        position,
        diameter: float,
        color: Rgba8,
    ) -> list:
        """Return ``pixels`` with a filled circle of ``color`` painted in."""
        if len(pixels) != w * h:
            raise ValueError(f"expected {w * h} pixels, got {len(pixels)}")
        px, py = position
        bias = 0.5 if 2.0 < diameter <= 3.0 else 0.0
        radius = diameter / 2.0 - bias

        def painted(i: int, c: Rgba8) -> Rgba8:
            x, y = i % w, i // w
            return color if math.hypot(x - px, y - py) <= radius else c

        return [painted(i, c) for i, c in enumerate(pixels)]

    @staticmethod
    def filter_stroke(stroke: Sequence) -> list:
        """Remove 'L' shapes from a stroke (pixel-perfect mode)."""
        points = [_as_point(p) for p in stroke]
        filtered = points[:1]

        triples = iter(zip(points, points[1:], points[2:]))
        for prev, curr, nxt in triples:
            if (prev.y == curr.y and nxt.x == curr.x) or (
                prev.x == curr.x and nxt.y == curr.y
            ):
                filtered.append(nxt)
                next(triples, None)
            else:
                filtered.append(curr)

        filtered.extend(points[-1:])
        return filtered