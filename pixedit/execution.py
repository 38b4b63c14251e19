"""Session recording and replay: timed input events, frame digests and GIF capture."""

from __future__ import annotations

import logging
import re
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import ClassVar, Iterable, Optional, Sequence, Union

from PIL import Image

from .color import Rgba8

__all__ = [
    "GifMode",
    "DigestMode",
    "Hash",
    "seahash",
    "InputState",
    "Event",
    "MouseInput",
    "MouseWheel",
    "CursorMoved",
    "KeyboardInput",
    "ReceivedCharacter",
    "Paste",
    "EventParseError",
    "TimedEvent",
    "VerifyStatus",
    "VerifyResult",
    "VerificationFailed",
    "ReplayResult",
    "GifRecorder",
    "FrameRecorder",
    "DigestState",
    "ExecutionKind",
    "Execution",
]

log = logging.getLogger(__name__)

FrameData = Union[bytes, bytearray, memoryview, Sequence[Rgba8]]

_MASK = (1 << 64) - 1
_SEEDS = (0x16F11FE89B0D677C, 0xB480A793D8E6C86C, 0x6FE2E5AAF078EBC9, 0x14F994A4C5259381)
_PRIME = 0x6EED0E9DA4D94A4F
_U32_MAX = (1 << 32) - 1


# --------------------------------------------------------------------------- #
# Hashing


def _diffuse(x: int) -> int:
    x = (x * _PRIME) & _MASK
    x ^= (x >> 32) >> (x >> 60)
    return (x * _PRIME) & _MASK


def seahash(data: bytes) -> int:
    """Return the 64-bit SeaHash of ``data`` using the default seeds."""
    data = bytes(data)
    lanes = list(_SEEDS)
    for index, offset in enumerate(range(0, len(data), 8)):
        word = int.from_bytes(data[offset : offset + 8], "little")
        lane = index % 4
        lanes[lane] = _diffuse(lanes[lane] ^ word)
    a, b, c, d = lanes
    return _diffuse(a ^ b ^ c ^ d ^ len(data))


def _frame_bytes(data: FrameData) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return b"".join(color.to_bytes() for color in data)


_HEX = re.compile(r"\+?[0-9a-fA-F]+")


@dataclass(frozen=True)
class Hash:
    """A 64-bit frame digest, written as sixteen hex digits."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _MASK:
            raise ValueError(f"hash value {self.value!r} does not fit in 64 bits")

    def __str__(self) -> str:
        return f"{self.value:016x}"

    @staticmethod
    def parse(text: str) -> Hash:
        """Parse a hexadecimal digest."""
        if not text:
            raise ValueError("cannot parse integer from empty string")
        if not _HEX.fullmatch(text):
            raise ValueError("invalid digit found in string")
        value = int(text.lstrip("+"), 16)
        if value > _MASK:
            raise ValueError("number too large to fit in target type")
        return Hash(value)

    @staticmethod
    def of_frame(data: FrameData) -> Hash:
        """Digest of a frame's pixel bytes."""
        return Hash(seahash(_frame_bytes(data)))


# --------------------------------------------------------------------------- #
# Events


class EventParseError(ValueError):
    """An event line could not be parsed."""


class InputState(Enum):
    PRESSED = "pressed"
    RELEASED = "released"
    REPEATED = "repeated"

    @classmethod
    def parse(cls, text: str) -> InputState:
        try:
            return cls(text)
        except ValueError:
            raise EventParseError(f"unknown input state: {text}") from None


def _fmt_float(x: float) -> str:
    x = float(x)
    if x == 0:
        return "-0" if str(x).startswith("-") else "0"
    if x.is_integer():
        return str(int(x))
    return format(Decimal(repr(x)), "f")


_NUMBER = r"[+-]?\d+(?:\.\d+)?"
_PAIR = re.compile(rf"({_NUMBER})\s+({_NUMBER})")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_/\-]*")
_KEY_STATE = re.compile(r"(\S+)\s+(\S+)")
_CHAR = re.compile(r"'(.)'", re.DOTALL)


def _parse_pair(text: str) -> tuple[float, float]:
    m = _PAIR.fullmatch(text)
    if not m:
        raise EventParseError(f"expected two numbers, got {text!r}")
    return float(m.group(1)), float(m.group(2))


class Event:
    """An input event that can be recorded and replayed."""

    @staticmethod
    def parse(text: str) -> Event:
        """Parse an event from its textual form."""
        m = _IDENT.match(text)
        if not m:
            raise EventParseError(f"expected identifier, got {text!r}")
        name = m.group()
        rest = text[m.end() :]
        ws = re.match(r"\s+", rest)
        if not ws:
            raise EventParseError(f"expected whitespace, got {rest!r}")
        rest = rest[ws.end() :]

        if name == "mouse/input":
            return MouseInput(InputState.parse(rest))
        if name == "mouse/wheel":
            return MouseWheel(*_parse_pair(rest))
        if name == "cursor/moved":
            return CursorMoved(*_parse_pair(rest))
        if name == "keyboard/input":
            km = _KEY_STATE.fullmatch(rest)
            if not km:
                raise EventParseError(f"expected <key> <state>, got {rest!r}")
            return KeyboardInput(km.group(1), InputState.parse(km.group(2)))
        if name == "char/received":
            cm = _CHAR.fullmatch(rest)
            if not cm:
                raise EventParseError(f"expected a quoted character, got {rest!r}")
            return ReceivedCharacter(cm.group(1))
        raise EventParseError(f'unrecognized event "{name}"')


@dataclass(frozen=True)
class MouseInput(Event):
    state: InputState

    def __str__(self) -> str:
        if self.state is InputState.REPEATED:
            raise ValueError("mouse input cannot be repeated")
        return f"mouse/input {self.state.value}"


@dataclass(frozen=True)
class MouseWheel(Event):
    x: float
    y: float

    def __str__(self) -> str:
        return f"mouse/wheel {_fmt_float(self.x)} {_fmt_float(self.y)}"


@dataclass(frozen=True)
class CursorMoved(Event):
    x: float
    y: float

    def __str__(self) -> str:
        return f"cursor/moved {_fmt_float(self.x)} {_fmt_float(self.y)}"


@dataclass(frozen=True)
class KeyboardInput(Event):
    key: str
    state: InputState

    def __str__(self) -> str:
        return f"keyboard/input {self.key} {self.state.value}"


@dataclass(frozen=True)
class ReceivedCharacter(Event):
    char: str

    def __str__(self) -> str:
        return f"char/received '{self.char}'"


@dataclass(frozen=True)
class Paste(Event):
    text: Optional[str] = None

    def __str__(self) -> str:
        return f"paste '{self.text or ''}'"


_TIMED = re.compile(r"(\d+)\s+(\d+)\s+(.*)", re.DOTALL)


@dataclass(frozen=True)
class TimedEvent:
    """An event tagged with its frame number and time since the start."""

    frame: int
    delta: timedelta
    event: Event

    def __str__(self) -> str:
        millis = self.delta // timedelta(milliseconds=1)
        return f"{self.frame:05} {millis:07} {self.event}"

    @staticmethod
    def parse(line: str) -> TimedEvent:
        """Parse a ``<frame> <millis> <event>`` line."""
        m = _TIMED.fullmatch(line)
        if not m:
            raise EventParseError(f"expected <frame> <delta> <event>, got {line!r}")
        frame, millis = int(m.group(1)), int(m.group(2))
        if frame > _U32_MAX or millis > _U32_MAX:
            raise EventParseError("number too large to fit in target type")
        return TimedEvent(frame, timedelta(milliseconds=millis), Event.parse(m.group(3)))


# --------------------------------------------------------------------------- #
# Modes and results


class GifMode(Enum):
    IGNORE = "ignore"
    RECORD = "record"


class DigestMode(Enum):
    """Whether frame digests are verified, recorded or ignored."""

    VERIFY = "verify"
    RECORD = "record"
    IGNORE = "ignore"


class VerifyStatus(Enum):
    STALE = "stale"
    OKAY = "okay"
    FAILED = "failed"
    EOF = "eof"


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of checking one frame against the expected digests."""

    status: VerifyStatus
    actual: Optional[Hash] = None
    expected: Optional[Hash] = None

    @property
    def is_err(self) -> bool:
        return self.status is VerifyStatus.FAILED


class VerificationFailed(Exception):
    """A replayed frame did not match its recorded digest."""

    def __init__(self, result: VerifyResult) -> None:
        super().__init__(f"verify: {result.actual} != {result.expected}")
        self.result = result


@dataclass
class ReplayResult:
    """Running tally of a verifying replay."""

    eof: bool = False
    failed: bool = False
    okay_count: int = 0
    stale_count: int = 0

    def is_ok(self) -> bool:
        return not self.failed

    def is_err(self) -> bool:
        return not self.is_ok()

    def is_done(self) -> bool:
        return self.eof

    def summary(self) -> str:
        if self.is_err():
            return f"replay failed after {self.okay_count} frames"
        return f"ok ({self.okay_count} frames)"

    def record(self, result: VerifyResult) -> None:
        """Account for one verification result."""
        if result.status is VerifyStatus.OKAY:
            log.info("verify: %s OK", result.actual)
            self.okay_count += 1
        elif result.status is VerifyStatus.FAILED:
            log.error("verify: %s != %s", result.actual, result.expected)
            self.failed = True
        elif result.status is VerifyStatus.EOF:
            self.eof = True
        else:
            self.stale_count += 1


# --------------------------------------------------------------------------- #
# Recorders


class GifRecorder:
    """Collects frames and writes them as an animated GIF."""

    def __init__(self, path=None, width: int = 0, height: int = 0) -> None:
        self.path = Path(path) if path is not None else None
        self.width = width
        self.height = height
        self._frames: list[tuple[float, bytes]] = []
        if self.path is not None:
            self.path.write_bytes(b"")

    @classmethod
    def dummy(cls) -> GifRecorder:
        """A recorder that records nothing."""
        return cls()

    @property
    def is_dummy(self) -> bool:
        return self.width == 0 and self.height == 0

    def record(self, data: FrameData) -> None:
        """Keep a frame, stamped with the current time."""
        if self.is_dummy:
            return
        raw = _frame_bytes(data)
        expected = self.width * self.height * 4
        if len(raw) != expected:
            raise ValueError(f"expected {expected} bytes of RGBA data, got {len(raw)}")
        self._frames.append((time.monotonic(), raw))

    def finish(self) -> None:
        """Write the collected frames to the GIF file."""
        if self.path is None or not self._frames:
            return
        images = []
        durations = []
        for (t1, raw), following in zip(self._frames, self._frames[1:] + [None]):
            # The last frame lingers for a second.
            delay = (following[0] - t1) if following is not None else 1.0
            durations.append(int(delay * 1000) // 10 * 10)
            image = Image.frombytes("RGBA", (self.width, self.height), raw)
            images.append(image.convert("RGB"))
        first, rest = images[0], images[1:]
        first.save(
            self.path,
            format="GIF",
            save_all=True,
            append_images=rest,
            duration=durations,
            disposal=2,
        )


class FrameRecorder:
    """Records and verifies the digests of rendered frames."""

    def __init__(
        self,
        gif_recorder: Optional[GifRecorder] = None,
        gif_mode: GifMode = GifMode.IGNORE,
        digest_mode: DigestMode = DigestMode.IGNORE,
    ) -> None:
        self.frames: deque[Hash] = deque()
        self.last_verified: Optional[Hash] = None
        self.gif_recorder = gif_recorder or GifRecorder.dummy()
        self.gif_mode = gif_mode
        self.digest_mode = digest_mode

    @classmethod
    def from_frames(cls, frames: Iterable[Hash], digest_mode: DigestMode) -> FrameRecorder:
        """A recorder primed with the digests expected during replay."""
        recorder = cls(GifRecorder.dummy(), GifMode.IGNORE, digest_mode)
        recorder.frames.extend(frames)
        return recorder

    def record_frame(self, data: FrameData) -> None:
        """Record a frame unless it repeats the previous one."""
        digest = Hash.of_frame(data)
        if self.frames and self.frames[-1] == digest:
            return
        log.debug("frame: %s", digest)
        if self.digest_mode is DigestMode.RECORD or self.gif_mode is GifMode.RECORD:
            self.frames.append(digest)
        self.gif_recorder.record(data)

    def verify_frame(self, data: FrameData) -> VerifyResult:
        """Compare a frame against the next expected digest."""
        actual = Hash.of_frame(data)
        if not self.frames:
            return VerifyResult(VerifyStatus.EOF)
        if actual == self.last_verified:
            return VerifyResult(VerifyStatus.STALE, actual)
        self.last_verified = actual
        expected = self.frames.popleft()
        if actual == expected:
            return VerifyResult(VerifyStatus.OKAY, actual)
        return VerifyResult(VerifyStatus.FAILED, actual, expected)

    def finish(self) -> None:
        self.gif_recorder.finish()


# --------------------------------------------------------------------------- #
# Digest files


def _read_digest(path: Path) -> list[Hash]:
    with open(path, encoding="utf-8") as f:
        return [Hash.parse(line.removesuffix("\n").removesuffix("\r")) for line in f]


def _write_digest(frames: Iterable[Hash], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for digest in frames:
            f.write(f"{digest}\n")


@dataclass
class DigestState:
    """Digest mode together with the digest file it applies to."""

    mode: DigestMode
    path: Optional[Path] = None

    @classmethod
    def create(cls, mode: DigestMode, path) -> DigestState:
        if mode is DigestMode.VERIFY:
            return cls.verify(path)
        if mode is DigestMode.RECORD:
            return cls.record(path)
        return cls.ignore()

    @classmethod
    def verify(cls, path) -> DigestState:
        """Check that the digest file exists and is well formed."""
        path = Path(path)
        _read_digest(path)
        return cls(DigestMode.VERIFY, path)

    @classmethod
    def record(cls, path) -> DigestState:
        return cls(DigestMode.RECORD, Path(path))

    @classmethod
    def ignore(cls) -> DigestState:
        return cls(DigestMode.IGNORE, None)


# --------------------------------------------------------------------------- #
# Execution


class ExecutionKind(Enum):
    NORMAL = "normal"
    RECORDING = "recording"
    REPLAYING = "replaying"


def _file_name(path: Path) -> str:
    name = path.name
    if name in ("", ".."):
        raise ValueError(f"invalid path {str(path)!r}")
    return name


@dataclass
class Execution:
    """Whether the session runs normally, records its inputs or replays them."""

    kind: ExecutionKind = ExecutionKind.NORMAL
    events: Union[list, deque] = field(default_factory=list)
    path: Optional[Path] = None
    digest: DigestState = field(default_factory=DigestState.ignore)
    recorder: FrameRecorder = field(default_factory=FrameRecorder)
    result: ReplayResult = field(default_factory=ReplayResult)
    start: float = field(default_factory=time.monotonic)

    NORMAL: ClassVar[ExecutionKind] = ExecutionKind.NORMAL

    @classmethod
    def normal(cls) -> Execution:
        return cls()

    @classmethod
    def recording(
        cls, path, digest_mode: DigestMode, w: int, h: int, gif_mode: GifMode
    ) -> Execution:
        """Start recording inputs into the directory ``path``."""
        path = Path(path)
        name = _file_name(path)
        path.mkdir(parents=True, exist_ok=True)

        base = path / name
        digest = DigestState.create(digest_mode, base.with_suffix(".digest"))
        if gif_mode is GifMode.RECORD:
            gif = GifRecorder(base.with_suffix(".gif"), w, h)
        else:
            gif = GifRecorder.dummy()
        return cls(
            kind=ExecutionKind.RECORDING,
            events=[],
            path=path,
            digest=digest,
            recorder=FrameRecorder(gif, gif_mode, digest_mode),
        )

    @classmethod
    def replaying(cls, path, mode: DigestMode) -> Execution:
        """Load the events recorded in the directory ``path`` for replay."""
        path = Path(path)
        base = path / _file_name(path)
        digest = DigestState.create(mode, base.with_suffix(".digest"))

        if digest.mode is DigestMode.VERIFY and digest.path is not None:
            recorder = FrameRecorder.from_frames(_read_digest(digest.path), mode)
        else:
            recorder = FrameRecorder(GifRecorder.dummy(), GifMode.IGNORE, mode)

        events_path = base.with_suffix(".events")
        events: deque[TimedEvent] = deque()
        with open(events_path, encoding="utf-8") as f:
            for number, line in enumerate(f, start=1):
                line = line.removesuffix("\n").removesuffix("\r")
                try:
                    events.append(TimedEvent.parse(line))
                except ValueError as e:
                    raise ValueError(f"{events_path}:{number}: {e}") from e

        return cls(
            kind=ExecutionKind.REPLAYING,
            events=events,
            path=path,
            digest=digest,
            recorder=recorder,
        )

    def is_normal(self) -> bool:
        return self.kind is ExecutionKind.NORMAL

    def is_recording(self) -> bool:
        return self.kind is ExecutionKind.RECORDING

    def is_replaying(self) -> bool:
        return self.kind is ExecutionKind.REPLAYING

    def record(self, data: FrameData) -> None:
        """Record or verify a rendered frame.

        Raises ``VerificationFailed`` when a verified replay diverges.
        """
        if self.is_replaying() and self.digest.mode is DigestMode.VERIFY:
            result = self.recorder.verify_frame(data)
            self.result.record(result)
            if result.is_err:
                raise VerificationFailed(result)
        elif self.is_replaying() or self.is_recording():
            self.recorder.record_frame(data)

    def stop_recording(self) -> Path:
        """Write the recording to disk, switch to normal mode and return its directory."""
        if not self.is_recording() or self.path is None:
            raise RuntimeError("record finalizer called outside of recording context")

        self.recorder.finish()
        name = _file_name(self.path)
        events_path = self.path / Path(name).with_suffix(".events")
        with open(events_path, "w", encoding="utf-8") as f:
            for event in self.events:
                f.write(f"{event}\n")

        if self.digest.mode is DigestMode.RECORD and self.digest.path is not None:
            _write_digest(self.recorder.frames, self.digest.path)

        path = self.path
        self.kind = ExecutionKind.NORMAL
        self.events = []
        self.path = None
        self.digest = DigestState.ignore()
        self.recorder = FrameRecorder()
        self.result = ReplayResult()
        return path

    def finalize_replaying(self) -> Path:
        """Write the digests recorded during replay and return the digest path."""
        if (
            not self.is_replaying()
            or self.digest.mode is not DigestMode.RECORD
            or self.digest.path is None
        ):
            raise RuntimeError("replay finalizer called outside of replay context")
        _write_digest(self.recorder.frames, self.digest.path)
        return self.digest.path