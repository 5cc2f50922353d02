"""Console output helpers and small file predicates."""

from __future__ import annotations

import os
import stat
import sys
from dataclasses import dataclass
from typing import TextIO

_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_RED = "\x1b[31m"
_RESET = "\x1b[0m"


@dataclass
class Console:
    """Writes coloured status messages.

    ``out`` and ``err`` default to the process's stdout and stderr at the time
    of writing. ``color`` forces colouring on or off; ``None`` colours only
    terminals and honours ``NO_COLOR``.
    """

    out: TextIO | None = None
    err: TextIO | None = None
    color: bool | None = None

    def ok(self, message: str) -> None:
        self._write(self._out(), _GREEN, f"ok: {message}")

    def warn(self, message: str) -> None:
        self._write(self._out(), _YELLOW, f"warn: {message}")

    def error(self, message: str) -> None:
        self._write(self._err(), _RED, f"error: {message}")

    def green(self, message: str) -> None:
        self._write(self._out(), _GREEN, message)

    def _out(self) -> TextIO:
        return self.out if self.out is not None else sys.stdout

    def _err(self) -> TextIO:
        return self.err if self.err is not None else sys.stderr

    def _use_color(self, stream: TextIO) -> bool:
        if self.color is not None:
            return self.color
        if os.environ.get("NO_COLOR"):
            return False
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def _write(self, stream: TextIO, code: str, message: str) -> None:
        text = message.rstrip("\n")
        if self._use_color(stream):
            text = f"{code}{text}{_RESET}"
        print(text, file=stream, flush=True)


def last8(text: str) -> str:
    """Return the last eight characters of ``text``."""
    return text[-8:]


def _base_name(path: str) -> str:
    trimmed = path.rstrip("/\\") if path not in ("", "/") else path
    name = os.path.basename(trimmed)
    return name or "."


if sys.platform == "win32":

    def _attributes(path: str) -> int | None:
        try:
            return os.stat(path).st_file_attributes
        except (OSError, ValueError):
            return None

    def is_hidden(path: str) -> bool:
        """Tell whether a file or directory is hidden (dot name or hidden attribute)."""
        name = _base_name(path)
        if len(name) > 2 and name.startswith("."):
            return True
        attrs = _attributes(path)
        return attrs is not None and bool(attrs & stat.FILE_ATTRIBUTE_HIDDEN)

    def is_read_only(path: str) -> bool:
        """Tell whether a file or directory carries the read-only attribute."""
        attrs = _attributes(path)
        return attrs is not None and bool(attrs & stat.FILE_ATTRIBUTE_READONLY)

else:

    def is_hidden(path: str) -> bool:
        """Tell whether a file or directory name marks it hidden.

        Names of two characters or fewer are never treated as hidden.
        """
        name = _base_name(path)
        return len(name) > 2 and name.startswith(".")

    def is_read_only(path: str) -> bool:
        """Tell whether nobody has write permission on a file or directory."""
        try:
            mode = os.stat(path).st_mode
        except (OSError, ValueError):
            return False
        return stat.S_IMODE(mode) & 0o222 == 0