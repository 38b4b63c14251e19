"""RGBA colours and the editor's named palette constants."""

from __future__ import annotations

from dataclasses import dataclass, replace

__all__ = [
    "Rgba8",
    "WHITE",
    "BLACK",
    "TRANSPARENT",
    "GREY",
    "DARK_GREY",
    "LIGHT_GREY",
    "RED",
    "YELLOW",
    "LIGHT_GREEN",
    "GREEN",
    "BLUE",
]


@dataclass(frozen=True)
class Rgba8:
    """An 8-bit-per-channel RGBA colour."""

    r: int
    g: int
    b: int
    a: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise ValueError(f"colour component {name}={value!r} is not in 0..255")

    def alpha(self, a: int) -> Rgba8:
        """Return the same colour with the alpha channel replaced."""
        return replace(self, a=a)

    def to_bytes(self) -> bytes:
        """Return the colour as four bytes in r, g, b, a order."""
        return bytes((self.r, self.g, self.b, self.a))

    @classmethod
    def from_bytes(cls, data: bytes) -> Rgba8:
        """Build a colour from four bytes in r, g, b, a order."""
        if len(data) != 4:
            raise ValueError(f"expected 4 bytes, got {len(data)}")
        return cls(*data)


WHITE = Rgba8(0xFF, 0xFF, 0xFF, 0xFF)
BLACK = Rgba8(0x00, 0x00, 0x00, 0xFF)
TRANSPARENT = Rgba8(0x00, 0x00, 0x00, 0x00)
GREY = Rgba8(0x88, 0x88, 0x88, 0xFF)
DARK_GREY = Rgba8(0x55, 0x55, 0x55, 0xFF)
LIGHT_GREY = Rgba8(0xAA, 0xAA, 0xAA, 0xFF)
RED = Rgba8(0xFF, 0x33, 0x66, 0xFF)
YELLOW = Rgba8(0xFF, 0xFF, 0x66, 0xFF)
LIGHT_GREEN = Rgba8(0xBB, 0xFF, 0xEE, 0xFF)
GREEN = Rgba8(0x38, 0xB7, 0x55, 0xFF)
BLUE = Rgba8(0x29, 0x36, 0x6F, 0xFF)