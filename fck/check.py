"""Verify files against a checksum file, or compare two directory trees."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Mapping

from fck.algorithms import (
    OUTPUT_CHECK_FILE_NAME,
    UnsupportedAlgorithmError,
    hasher_factory,
)
from fck.hashing import HashError, checksum
from fck.tools import Console, last8

_HEADER_LIMIT = 1024


class CheckError(Exception):
    """Raised when a check cannot be carried out."""


@dataclass
class ChecksumFile:
    """Contents of a checksum file: its algorithm and expected digests by path."""

    algorithm: str
    entries: dict[str, str] = field(default_factory=dict)


@dataclass
class Comparison:
    """Outcome of comparing two directory trees by file name.

    ``different`` holds ``(name, digest_a, digest_b)`` tuples. Files whose
    digest could not be computed stay in ``only_a`` and ``only_b`` and their
    problems are listed in ``errors``.
    """

    same: list[str] = field(default_factory=list)
    different: list[tuple[str, str, str]] = field(default_factory=list)
    only_a: dict[str, str] = field(default_factory=dict)
    only_b: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


def parse_checksum_file(path: str, console: Console) -> ChecksumFile:
    """Read a checksum file written by ``hash -w``.

    The file starts with ``#algorithm#timestamp``. Lines that are empty or
    start with ``#`` are ignored; other lines must hold a digest and a path,
    and malformed ones are reported and skipped.
    """
    if not path:
        raise CheckError("在校验文件时，必须指定一个校验文件 checksum.hash")
    try:
        os.stat(path)
    except OSError:
        raise CheckError(f"校验文件不存在: {path}") from None
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise CheckError(f"无法打开校验文件: {exc}") from exc

    header = data[:_HEADER_LIMIT].decode("utf-8", errors="replace")
    if not header.startswith("#"):
        raise CheckError("校验文件头格式错误, 必须以#开头")
    parts = header.split("#")
    if len(parts) < 3:
        raise CheckError("校验文件头格式错误, 格式应为 #hashType#timestamp")
    algorithm = parts[1]
    if not algorithm:
        raise CheckError("校验文件头格式错误, 必须指定哈希算法")
    try:
        hasher_factory(algorithm)
    except UnsupportedAlgorithmError as exc:
        raise CheckError(str(exc)) from None

    result = ChecksumFile(algorithm)
    text = data.decode("utf-8", errors="replace")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r")
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if len(fields) != 2:
            console.error(f"校验文件格式错误, 文件 {path} 的第 {number} 行, {line}")
            continue
        expected, file_path = fields
        result.entries[file_path.strip('"')] = expected
    return result


def verify_checksum_file(path: str, console: Console) -> list[str]:
    """Check every file listed in a checksum file and return those that differ.

    Missing files are warned about and skipped.
    """
    parsed = parse_checksum_file(path, console)
    actual: dict[str, str] = {}
    for file_path in sorted(parsed.entries):
        if not os.path.exists(file_path):
            console.warn(f"在进行校验时，发现文件 {file_path} 不存在，将跳过该文件的校验")
            continue
        try:
            actual[file_path] = checksum(file_path, parsed.algorithm)
        except HashError as exc:
            console.error(f"计算文件哈希失败: {exc}")
            actual[file_path] = ""

    mismatched: list[str] = []
    for file_path in sorted(actual):
        expected = parsed.entries[file_path]
        digest = actual[file_path]
        if digest != expected:
            console.error(
                f"文件 {file_path} 不一致, 预期Hash值: {last8(expected)}, "
                f"实际Hash值: {last8(digest)}"
            )
            mismatched.append(file_path)

    if not mismatched:
        console.ok("校验成功，无文件差异")
    return mismatched


def _walk(directory: str) -> Iterator[os.DirEntry]:
    with os.scandir(directory) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)
        else:
            yield entry


def list_files(directory: str) -> dict[str, str]:
    """Map the name of every file under ``directory`` to its path.

    When names repeat, the file met last in name order wins.
    """
    if not os.path.isdir(directory) or os.path.islink(directory):
        if os.path.lexists(directory):
            return {os.path.basename(directory): directory}
    try:
        return {entry.name: entry.path for entry in _walk(directory)}
    except OSError as exc:
        raise CheckError(f"获取文件列表时出错: {exc}") from exc


def compare_dirs(
    files_a: Mapping[str, str], files_b: Mapping[str, str], algorithm: str
) -> Comparison:
    """Compare two name-to-path maps by the digests of equally named files."""
    try:
        hasher_factory(algorithm)
    except UnsupportedAlgorithmError:
        raise CheckError(f"在校验哈希值时，哈希算法 {algorithm} 无效") from None

    result = Comparison(only_a=dict(files_a), only_b=dict(files_b))
    common = sorted(set(files_a) & set(files_b))
    with ThreadPoolExecutor(max_workers=2) as pool:
        for name in common:
            path_a, path_b = files_a[name], files_b[name]
            future_a = pool.submit(checksum, path_a, algorithm)
            future_b = pool.submit(checksum, path_b, algorithm)
            failed = False
            digests = []
            for path, future in ((path_a, future_a), (path_b, future_b)):
                try:
                    digests.append(future.result())
                except HashError as exc:
                    result.errors.append(f"计算文件 {path} 的 {algorithm} 值时出错: {exc}")
                    failed = True
            if failed:
                continue
            digest_a, digest_b = digests
            if digest_a != digest_b:
                result.different.append((name, digest_a, digest_b))
            else:
                result.same.append(name)
            del result.only_a[name]
            del result.only_b[name]
    return result


def _blocks(comparison: Comparison, algorithm: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_heading, text)`` pairs making up the comparison report."""
    yield True, "=== 比较具有相同名称的文件 ==="
    for number, (name, digest_a, digest_b) in enumerate(comparison.different, start=1):
        yield False, (
            f"{number}. 文件 {name} 的 {algorithm} 值不同:\n"
            f"  目录 A: {last8(digest_a)}\n  目录 B: {last8(digest_b)}"
        )
    if not comparison.same:
        yield False, "暂无相同文件"
    if not comparison.different:
        yield False, "暂无不同文件"

    for label, only in (("A", comparison.only_a), ("B", comparison.only_b)):
        yield True, f"\n=== 仅存在于目录 {label} 的文件 ==="
        for number, name in enumerate(sorted(only), start=1):
            yield False, f"{number}. 文件 {name} 仅存在于目录 {label}: {only[name]}"
        if not only:
            yield False, "无匹配文件"

    yield True, (
        "\n=== 统计结果 ===\n"
        f"相同文件: {len(comparison.same)}\n"
        f"不同文件: {len(comparison.different)}\n"
        f"仅A目录文件: {len(comparison.only_a)}\n"
        f"仅B目录文件: {len(comparison.only_b)}"
    )


def render_comparison(comparison: Comparison, algorithm: str) -> str:
    """Return the comparison report as plain text."""
    return "".join(f"{text}\n" for _, text in _blocks(comparison, algorithm))


def run_check(
    check_file: str,
    dir_a: str,
    dir_b: str,
    algorithm: str,
    write: bool,
    console: Console,
) -> None:
    """Verify a checksum file, or compare two directories and report the result.

    A checksum file takes precedence over directories. With ``write`` the
    directory report goes to the check file in the current directory.
    """
    if check_file:
        verify_checksum_file(check_file, console)
        return

    if not dir_a and not dir_b:
        raise CheckError("必须指定一个校验文件或两个目录。或 -h 参数查看帮助信息。")
    if not dir_a or not dir_b:
        raise CheckError("必须指定两个目录。或 -h 参数查看帮助信息。")
    if not os.path.exists(dir_a):
        raise CheckError(f"目录A不存在: {dir_a}")
    if not os.path.exists(dir_b):
        raise CheckError(f"目录B不存在: {dir_b}")
    try:
        hasher_factory(algorithm)
    except UnsupportedAlgorithmError:
        raise CheckError(f"在校验哈希值时，哈希算法 {algorithm} 无效") from None

    files_a = list_files(dir_a)
    files_b = list_files(dir_b)

    if write:
        try:
            handle = open(OUTPUT_CHECK_FILE_NAME, "w", encoding="utf-8")
        except OSError as exc:
            raise CheckError(f"打开文件 {OUTPUT_CHECK_FILE_NAME} 失败: {exc}") from exc
        with handle:
            try:
                handle.write(f"#{algorithm}#{datetime.now():%Y-%m-%d %H:%M:%S}\n\n")
            except OSError as exc:
                raise CheckError(f"写入文件头失败: {exc}") from exc
            comparison = compare_dirs(files_a, files_b, algorithm)
            for message in comparison.errors:
                console.error(message)
            handle.write(render_comparison(comparison, algorithm))
        console.ok(f"比较结果已写入文件: {OUTPUT_CHECK_FILE_NAME}")
        return

    comparison = compare_dirs(files_a, files_b, algorithm)
    for message in comparison.errors:
        console.error(message)
    for heading, text in _blocks(comparison, algorithm):
        if heading:
            console.green(text)
        else:
            print(text, flush=True)