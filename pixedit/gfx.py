"""Small geometry primitives shared by the editor."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Union

__all__ = ["Point", "Rect", "Repeat", "ZDepth"]

Number = Union[int, float]


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _offset(other) -> tuple[Number, Number]:
    if isinstance(other, Point):
        return other.x, other.y
    dx, dy = other
    return dx, dy


@dataclass(frozen=True)
class Point:
    """A 2D point."""

    x: Number
    y: Number

    def floor(self) -> Point:
        """Return the point with both coordinates floored."""
        return Point(float(math.floor(self.x)), float(math.floor(self.y)))

    def to_int(self) -> Point:
        """Return the point with both coordinates rounded to integers."""
        return Point(_round_half_away(self.x), _round_half_away(self.y))

    def to_float(self) -> Point:
        """Return the point with float coordinates."""
        return Point(float(self.x), float(self.y))

    def __add__(self, other) -> Point:
        dx, dy = _offset(other)
        return Point(self.x + dx, self.y + dy)

    def __sub__(self, other) -> Point:
        dx, dy = _offset(other)
        return Point(self.x - dx, self.y - dy)

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle given by two corners."""

    x1: Number
    y1: Number
    x2: Number
    y2: Number

    @property
    def width(self) -> Number:
        return self.x2 - self.x1

    @property
    def height(self) -> Number:
        return self.y2 - self.y1

    @property
    def area(self) -> Number:
        return abs(self.width * self.height)


@dataclass(frozen=True)
class Repeat:
    """Texture repetition factors along each axis."""

    x: float = 1.0
    y: float = 1.0


@dataclass(frozen=True, order=True)
class ZDepth:
    """Drawing depth of a layer."""

    value: float = 0.0

    ZERO: ClassVar[ZDepth]

    def __float__(self) -> float:
        return float(self.value)


ZDepth.ZERO = ZDepth(0.0)