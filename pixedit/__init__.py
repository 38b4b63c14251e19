"""Building blocks of a modal pixel-art editor: colours, geometry, brushes, flood fill, completion and recording."""

__version__ = "0.1.0"

__all__ = ["autocomplete", "brush", "color", "execution", "flood", "gfx"]