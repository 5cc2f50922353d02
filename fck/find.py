"""Search a directory tree for entries whose names contain a keyword."""

from __future__ import annotations

import os
import re
import stat
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, TextIO

from fck.tools import is_hidden, is_read_only

_SIZE_PATTERN = re.compile(r"^([+-])(\d+)([BKMGbkmg])$")
_UNIT_FACTORS = {"B": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


class FindError(Exception):
    """Raised when a search is misconfigured or the tree cannot be walked."""


@dataclass
class FindOptions:
    """Settings of one search.

    ``size`` takes the form ``+5M`` or ``-5M``; ``mtime`` takes ``+5`` or
    ``-5`` days. ``max_depth`` of -1 means no limit.
    """

    path: str
    keyword: str = ""
    max_depth: int = -1
    files_only: bool = False
    dirs_only: bool = False
    symlinks_only: bool = False
    read_only: bool = False
    size: str = ""
    mtime: str = ""
    case_sensitive: bool = False
    full_path: bool = False
    hidden: bool = False


def validate_size_condition(condition: str) -> tuple[str, int, str]:
    """Check a size condition and return its sign, number and upper-case unit."""
    match = _SIZE_PATTERN.match(condition)
    if match is None:
        raise FindError(
            "文件大小格式错误, 格式如+5M(大于5M)或-5M(小于5M), 支持单位B/K/M/G(大写)"
        )
    sign, number, unit = match.groups()
    return sign, int(number), unit.upper()


def _plain_number(text: str) -> bool:
    return bool(text) and not any(ch.isspace() or ch == "_" for ch in text)


def match_file_size(file_size: int, condition: str) -> bool:
    """Tell whether ``file_size`` bytes satisfy a condition such as ``+5M``."""
    if len(condition) < 2:
        return False
    comparator, body = condition[0], condition[1:]
    unit, number = body[-1], body[:-1]
    if not _plain_number(number):
        return False
    try:
        value = float(number)
    except ValueError:
        return False
    factor = _UNIT_FACTORS.get(unit.upper())
    if factor is None:
        return False
    limit = value * factor
    if comparator == "+":
        return float(file_size) > limit
    if comparator == "-":
        return float(file_size) < limit
    return False


def match_file_time(
    file_time: datetime, condition: str, now: datetime | None = None
) -> bool:
    """Tell whether ``file_time`` satisfies a condition such as ``+5`` or ``-5``.

    ``+N`` matches times after the point N days before ``now``; ``-N`` matches
    times before it.
    """
    if len(condition) < 2:
        return False
    comparator, number = condition[0], condition[1:]
    if not _plain_number(number):
        return False
    try:
        days = int(number)
    except ValueError:
        return False
    reference = now if now is not None else datetime.now()
    threshold = reference - timedelta(days=days)
    if comparator == "+":
        return file_time > threshold
    if comparator == "-":
        return file_time < threshold
    return False


class _Entry:
    """A walked path with lazily fetched, non-following file information."""

    def __init__(
        self, path: str, name: str, is_dir: bool, info: os.stat_result | None = None,
        dir_entry: os.DirEntry | None = None,
    ) -> None:
        self.path = path
        self.name = name
        self.is_dir = is_dir
        self._info = info
        self._dir_entry = dir_entry

    def info(self) -> os.stat_result | None:
        if self._info is None and self._dir_entry is not None:
            try:
                self._info = self._dir_entry.stat(follow_symlinks=False)
            except OSError:
                return None
        return self._info


def _root_name(path: str) -> str:
    trimmed = path.rstrip("/\\") or path
    return os.path.basename(trimmed) or trimmed


class _Search:
    def __init__(self, options: FindOptions, pattern: re.Pattern[str]) -> None:
        self.options = options
        self.pattern = pattern

    def walk(self) -> Iterator[str]:
        root = self.options.path
        try:
            info = os.lstat(root)
        except OSError as exc:
            raise FindError(f"遍历目录时出错: 访问文件时出错：{exc}") from exc
        entry = _Entry(root, _root_name(root), stat.S_ISDIR(info.st_mode), info)
        yield from self._visit(entry, 0)

    def _visit(self, entry: _Entry, depth: int) -> Iterator[str]:
        max_depth = self.options.max_depth
        if max_depth >= 0 and depth > max_depth:
            return
        descend = entry.is_dir
        if self.pattern.search(entry.name):
            shown, descend = self._consider(entry)
            if shown is not None:
                yield shown
        if not descend:
            return
        try:
            with os.scandir(entry.path) as listing:
                children = sorted(listing, key=lambda item: item.name)
        except OSError as exc:
            raise FindError(f"遍历目录时出错: 访问文件时出错：{exc}") from exc
        for child in children:
            child_entry = _Entry(
                os.path.normpath(os.path.join(entry.path, child.name)),
                child.name,
                child.is_dir(follow_symlinks=False),
                dir_entry=child,
            )
            yield from self._visit(child_entry, depth + 1)

    def _consider(self, entry: _Entry) -> tuple[str | None, bool]:
        """Return the path to show, if any, and whether to descend into the entry."""
        options = self.options
        descend = entry.is_dir
        if options.files_only and entry.is_dir:
            return None, descend
        if options.dirs_only and not entry.is_dir:
            return None, descend
        if options.symlinks_only:
            info = entry.info()
            if info is None or not stat.S_ISLNK(info.st_mode):
                return None, descend
        if options.size:
            info = entry.info()
            if info is None or not match_file_size(info.st_size, options.size):
                return None, descend
        if options.mtime:
            info = entry.info()
            if info is None:
                return None, descend
            if not match_file_time(datetime.fromtimestamp(info.st_mtime), options.mtime):
                return None, descend
        if not options.hidden and is_hidden(entry.path):
            return None, False
        if options.read_only and not is_read_only(entry.path):
            return None, descend
        if options.full_path:
            return os.path.abspath(entry.path), descend
        return entry.path, descend


def find(options: FindOptions) -> Iterator[str]:
    """Validate ``options`` and return an iterator over the matching paths.

    Paths come in walk order: each directory's entries sorted by name. Hidden
    directories whose names match are not entered unless ``hidden`` is set.
    """
    if not options.path:
        raise FindError("查找路径不能为空")
    try:
        os.stat(options.path)
    except OSError:
        raise FindError(f"查找路径不存在: {options.path}") from None
    if options.max_depth < -1:
        raise FindError("查找最大深度不能小于 -1")
    if options.size:
        validate_size_condition(options.size)
    if options.files_only and options.dirs_only and options.symlinks_only:
        raise FindError("不能同时指定 -f、-d 和 -l 标志")

    flags = 0 if options.case_sensitive else re.IGNORECASE
    pattern = re.compile(re.escape(options.keyword), flags)
    return _Search(options, pattern).walk()


def run_find(options: FindOptions, out: TextIO | None = None) -> int:
    """Print every match on its own line and return how many were printed."""
    stream = out if out is not None else sys.stdout
    count = 0
    for path in find(options):
        print(path, file=stream, flush=True)
        count += 1
    return count