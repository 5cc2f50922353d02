"""Compute and print the sizes of files and directories."""

from __future__ import annotations

import glob
import os
from typing import Iterable, Iterator

from fck.tools import Console

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
_BASE = 1024.0


def human_readable_size(size: int) -> str:
    """Format a byte count with a binary unit and at most two decimals."""
    value = float(size)
    for exponent, unit in enumerate(_UNITS):
        if value < _BASE ** (exponent + 1) or exponent == len(_UNITS) - 1:
            value /= _BASE**exponent
            break
    text = f"{value:.2f}"
    if text == "0.00":
        return "0B"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}{unit}"


def _entry_sizes(directory: str) -> Iterator[int]:
    with os.scandir(directory) as entries:
        for entry in entries:
            yield entry.stat(follow_symlinks=False).st_size
            if entry.is_dir(follow_symlinks=False):
                yield from _entry_sizes(entry.path)


def path_size(path: str) -> int:
    """Return the size of a file, or the total size of everything under a directory.

    Sizes of subdirectory entries themselves count; symbolic links inside a
    directory are not followed.
    """
    info = os.stat(path)
    if not os.path.isdir(path) or not _is_dir_mode(info.st_mode):
        return info.st_size
    return sum(_entry_sizes(path))


def _is_dir_mode(mode: int) -> bool:
    import stat

    return stat.S_ISDIR(mode)


def _print_size(size: int, path: str) -> None:
    print(f"{human_readable_size(size):<15}\t{path}")


def run_size(paths: Iterable[str], console: Console) -> None:
    """Print the size of each path; problems with single paths are reported and skipped.

    A path holding ``*`` is expanded as a pattern, and no paths after it are
    handled.
    """
    targets = list(paths)
    if not targets:
        raise ValueError("请指定要计算大小的路径")

    for raw in targets:
        target = os.path.normpath(raw)

        if "*" in target:
            matches = sorted(glob.glob(target))
            if not matches:
                console.error("没有找到匹配的文件")
                continue
            for match in matches:
                try:
                    size = path_size(match)
                except OSError as exc:
                    console.error(f"计算文件大小失败: {exc}")
                    continue
                _print_size(size, match)
            return

        try:
            info = os.stat(target)
        except OSError as exc:
            console.error(f"获取文件信息失败: 路径 {target} 错误: {exc}")
            continue
        if not _is_dir_mode(info.st_mode):
            _print_size(info.st_size, target)
            continue

        try:
            size = path_size(target)
        except OSError as exc:
            console.error(f"计算目录大小失败: 路径 {target} 错误: {exc}")
            continue
        _print_size(size, target)