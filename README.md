# pixedit

Building blocks of a modal, keyboard-driven pixel-art editor, as a plain
Python library.

## What is in it

- `pixedit.color`: `Rgba8`, an immutable 8-bit RGBA colour with
  `alpha(a)`, `to_bytes()` and `Rgba8.from_bytes(data)`, and named colours
  such as `WHITE`, `BLACK`, `TRANSPARENT`, `RED` and `GREY`.
- `pixedit.gfx`: small geometry values: `Point` (with `floor()`,
  `to_int()`, `to_float()` and addition/subtraction of offsets), `Rect`
  (with `width`, `height`, `area`), `Repeat` and `ZDepth`.
- `pixedit.brush`: `Brush` tracks a stroke while it is drawn
  (`start_drawing`, `draw`, `stop_drawing`, `update`). Modes are
  `BrushMode.ERASE`, `MULTI`, `PERFECT`, `XSYM`, `YSYM`, `XRAY`, and
  `BrushMode.line(snap)` for straight lines, optionally snapped to a multiple
  of `snap` degrees. Only one line mode is active at a time. `Brush.expand`
  turns one point into all brush heads for the active symmetry and
  multi-frame modes. `Brush.line` draws Bresenham lines. `Brush.filter_stroke`
  removes "L" corners (pixel-perfect mode). `Brush.paint` returns a pixel
  list with a filled circle painted in.
- `pixedit.flood`: `flood_fill` and `FloodFiller` do a scanline flood fill
  over a row-major pixel list. The start point is given with y counted
  upward from the bottom row. The result is a list of `(Rect, Rgba8)` spans,
  one per filled row segment. `flood_fill` returns `None` when the start is
  outside the grid or the region already has the colour.
- `pixedit.autocomplete`: `Autocomplete` cycles through the candidates of a
  `Completer`. `FileCompleter` completes names relative to a working
  directory. It skips hidden entries and lists only directories and files
  whose extension is `rx` or one of the given extensions. With
  `FileCompleterOpts(directories=True)` it lists directories only. A single
  matching directory completes with a trailing `/`.
- `pixedit.execution`: recording and replaying sessions. `TimedEvent` and
  the `Event` types (`MouseInput`, `MouseWheel`, `CursorMoved`,
  `KeyboardInput`, `ReceivedCharacter`, `Paste`) have a text form and a
  `parse` method. `seahash` and `Hash` compute frame digests.
  `FrameRecorder`, `GifRecorder`, `DigestState`, `ReplayResult` and
  `Execution` tie these together.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from pixedit.brush import Brush

points = Brush.line((0, 0), (3, 1))   # list of Point
```

```python
from pixedit.color import TRANSPARENT, WHITE
from pixedit.flood import flood_fill

spans = flood_fill([TRANSPARENT] * 4, 2, 2, (0, 0), WHITE)
```

```python
from pixedit.autocomplete import Autocomplete, FileCompleter

auto = Autocomplete(FileCompleter(".", ["png"]))
result = auto.next("", 0)   # (completion, range replaced) or None
```

## Recordings

`Execution.recording(path, digest_mode, w, h, gif_mode)` creates the
directory `path`. The caller adds `TimedEvent`s to its `events` list and
passes each rendered frame (RGBA bytes or a sequence of `Rgba8`) to
`record`. Consecutive identical frames are stored once. `stop_recording()`
writes the files and returns to normal mode. The files share the
directory's name:

- `<name>.events`: one event per line: frame number, milliseconds, event.
- `<name>.digest`: one 16-digit hexadecimal frame hash per line, written when
  the digest mode is `DigestMode.RECORD`.
- `<name>.gif`: the frames as an animation, when the GIF mode is
  `GifMode.RECORD`. Each frame's delay is its time on screen, and the last
  frame lasts one second.

`Execution.replaying(path, DigestMode.VERIFY)` loads the events and digests.
Each frame passed to `record` is compared with the next expected digest. A
mismatch raises `VerificationFailed`, and `result.summary()` reports how
many frames matched. With `DigestMode.RECORD`, `finalize_replaying()` writes
the digests gathered during the replay.

## What it does not do

This package has no editor of its own. It opens no window and renders
nothing. It has no command-line parser, key bindings or settings, and it
installs no command. The replay side hands back parsed events, and the
caller feeds them to its own session.