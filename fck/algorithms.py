"""Hash algorithms supported by the command and the names of its output files."""

from __future__ import annotations

import hashlib
from typing import Any, Callable

OUTPUT_FILE_NAME = "checksum.hash"
"""File that ``hash -w`` writes checksums to."""

OUTPUT_CHECK_FILE_NAME = "check_dir.check"
"""File that ``check -w`` writes its comparison report to."""

HasherFactory = Callable[[], Any]

_ALGORITHMS: dict[str, HasherFactory] = {
    "md5": hashlib.md5,
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


class UnsupportedAlgorithmError(ValueError):
    """Raised when a hash algorithm name is not one of the supported ones."""

    def __init__(self, name: str) -> None:
        super().__init__(f"不支持的哈希算法: {name}")
        self.name = name


def hasher_factory(name: str) -> HasherFactory:
    """Return a callable that creates a fresh hash object for ``name``."""
    try:
        return _ALGORITHMS[name]
    except KeyError:
        raise UnsupportedAlgorithmError(name) from None


def supported_names() -> tuple[str, ...]:
    """Return the names of all supported algorithms."""
    return tuple(_ALGORITHMS)