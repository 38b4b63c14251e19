"""Scanline flood fill over a pixel grid."""

from __future__ import annotations

from typing import Optional, Sequence

from .color import Rgba8
from .gfx import Rect

__all__ = ["FloodFiller", "flood_fill"]


class FloodFiller:
    """Fills the region of equal colour around a starting point.

    ``pixels`` are stored row by row from the top; ``start`` is given in view
    coordinates, whose y axis runs upward from the bottom row.
    """

    def __init__(
        self,
        pixels: Sequence[Rgba8],
        width: int,
        height: int,
        start,
        replacement_color: Rgba8,
    ) -> None:
        if len(pixels) != width * height:
            raise ValueError(f"expected {width * height} pixels, got {len(pixels)}")
        self.pixels = list(pixels)
        self.width = width
        self.height = height
        self.replacement_color = replacement_color

        sx, sy = start
        x = max(0, int(sx))
        view_y = max(0, int(sy))
        if view_y >= height or x >= width:
            raise IndexError(f"starting point {tuple(start)!r} is outside the grid")
        y = height - view_y - 1

        self.target_color = self.pixels[x + y * width]
        self._rects: list[tuple[Rect, Rgba8]] = []
        self._stack: list[tuple[int, int]] = [(x, y)]

    def _get(self, x: int, y: int) -> Optional[Rgba8]:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.pixels[x + y * self.width]
        return None

    def _try_set_at(self, x: int, y: int) -> bool:
        if self._get(x, y) != self.target_color or self._get(x, y) is None:
            return False
        self.pixels[x + y * self.width] = self.replacement_color
        return True

    def _push_on_change(self, x: int, y: int, edge: bool) -> bool:
        c = self._get(x, y)
        if c is None:
            return edge
        if c == self.target_color:
            if edge:
                # Solid-to-fillable transition: a new span starts here.
                self._stack.append((x, y))
                return False
            return edge
        return True

    def _look_above_below(self, x: int, y: int, up: bool, down: bool) -> tuple[bool, bool]:
        if y > 0:
            up = self._push_on_change(x, y - 1, up)
        if y < self.height - 1:
            down = self._push_on_change(x, y + 1, down)
        return up, down

    def _push_rect(self, x: int, y: int, w: int, h: int) -> None:
        top = self.height - y - 1
        self._rects.append(
            (Rect(float(x), float(top), float(x + w), float(top + h)), self.replacement_color)
        )

    def run(self) -> Optional[list[tuple[Rect, Rgba8]]]:
        """Fill the region and return the filled spans as coloured rectangles.

        Returns ``None`` when the region already has the replacement colour.
        """
        if self.target_color == self.replacement_color:
            return None

        while self._stack:
            px, py = self._stack.pop()
            min_x = max_x = px
            up_edge = down_edge = True

            for x in range(px, self.width + 1):
                max_x = x
                if not self._try_set_at(x, py):
                    break
                up_edge, down_edge = self._look_above_below(x, py, up_edge, down_edge)

            up_edge = py > 0 and self._get(px, py - 1) != self.target_color
            down_edge = (
                py < self.height - 1 and self._get(px, py + 1) != self.target_color
            )

            for x in range(px - 1, -1, -1):
                min_x = x
                if not self._try_set_at(x, py):
                    min_x += 1
                    break
                up_edge, down_edge = self._look_above_below(x, py, up_edge, down_edge)

            self._push_rect(min_x, py, max_x - min_x, 1)

        return list(self._rects)


def flood_fill(
    pixels: Sequence[Rgba8], width: int, height: int, start, color: Rgba8
) -> Optional[list[tuple[Rect, Rgba8]]]:
    """Flood fill from ``start``; ``None`` if it is outside or nothing changes."""
    try:
        filler = FloodFiller(pixels, width, height, start, color)
    except IndexError:
        return None
    return filler.run()