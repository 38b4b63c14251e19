"""Cycling tab completion and a filesystem completer."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional, TypeVar

__all__ = ["Completer", "Autocomplete", "FileCompleterOpts", "FileCompleter"]


class Completer(ABC):
    """Something that can propose completions for an input prefix."""

    @abstractmethod
    def complete(self, input: str, opts=None) -> list[str]:
        """Return the completion candidates for ``input``."""


C = TypeVar("C", bound=Completer)


class Autocomplete(Generic[C]):
    """Cycles through the candidates a completer offers."""

    def __init__(self, completer: C) -> None:
        self.completer = completer
        self.range = range(0, 0)
        self._candidates: Optional[list[str]] = None
        self._position = 0

    def invalidate(self) -> None:
        """Forget the current candidates so the next call asks afresh."""
        self._candidates = None
        self._position = 0
        self.range = range(0, 0)

    def next(self, input: str, cursor: int) -> Optional[tuple[str, range]]:
        """Return the next completion and the input range it replaces."""
        if self._candidates is not None:
            completion = self._candidates[self._position % len(self._candidates)]
            self._position += 1
            current = self.range
            self.range = range(current.start, current.start + len(completion))
            return completion, current

        candidates = list(self.completer.complete(input[:cursor], None))
        if not candidates:
            return None

        first = candidates[0]
        if candidates[1 % len(candidates)] == first:
            # A single match: start over from it next time.
            self.invalidate()
        else:
            self._candidates = candidates
            self._position = 1
            self.range = range(cursor, cursor + len(first))
        return first, range(cursor, cursor)


@dataclass
class FileCompleterOpts:
    """Options for file completion."""

    directories: bool = False


class FileCompleter(Completer):
    """Completes file and directory names relative to a working directory."""

    def __init__(self, cwd, extensions) -> None:
        self.cwd = Path(cwd)
        self.extensions = list(extensions)

    def complete(self, input: str, opts: Optional[FileCompleterOpts] = None) -> list[str]:
        opts = opts or FileCompleterOpts()

        slash = input.rfind("/")
        if slash >= 0:
            search_dir = self.cwd / input[: slash + 1]
            prefix = input[slash + 1 :]
        else:
            search_dir = self.cwd
            prefix = input

        try:
            names = self.paths(search_dir)
        except OSError:
            names = []

        candidates = [(name, (search_dir / name).is_dir()) for name in names]
        if opts.directories:
            candidates = [(name, is_dir) for name, is_dir in candidates if is_dir]

        if prefix:
            candidates = [
                (name[len(prefix) :], is_dir)
                for name, is_dir in candidates
                if name.startswith(prefix)
            ]

        if len(candidates) == 1 and candidates[0][1]:
            return [candidates[0][0] + "/"]

        return sorted(name for name, _ in candidates)

    def paths(self, directory) -> list[str]:
        """List the visible entries of ``directory`` that are worth completing."""
        directory = Path(directory)
        found = []
        with os.scandir(directory) as entries:
            for entry in entries:
                name = entry.name
                if name.startswith("."):
                    continue
                suffix = Path(name).suffix
                extension = suffix[1:] if suffix else None
                known = extension is not None and (
                    extension == "rx" or extension in self.extensions
                )
                if known or (directory / name).is_dir():
                    found.append(name)
        return found