"""Compute checksums of files, optionally in parallel and into a checksum file."""

from __future__ import annotations

import glob
import os
import stat
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, TextIO, Union

from fck.algorithms import (
    OUTPUT_FILE_NAME,
    HasherFactory,
    UnsupportedAlgorithmError,
    hasher_factory,
)
from fck.tools import Console

KB = 1024
MB = 1024 * KB

_GLOB_CHARS = frozenset("*?[]{}")
_CANCELLED = "操作已取消"

Algorithm = Union[str, HasherFactory]


class HashError(Exception):
    """Raised when files cannot be collected, read or hashed."""


def _factory(algorithm: Algorithm) -> HasherFactory:
    if isinstance(algorithm, str):
        return hasher_factory(algorithm)
    return algorithm


def buffer_size(file_size: int) -> int:
    """Return the read buffer size used for a file of ``file_size`` bytes."""
    thresholds = (
        (32 * KB, 32 * KB),
        (128 * KB, 32 * KB),
        (512 * KB, 64 * KB),
        (1 * MB, 128 * KB),
        (4 * MB, 256 * KB),
        (16 * MB, 512 * KB),
        (64 * MB, 1 * MB),
    )
    for limit, size in thresholds:
        if file_size < limit:
            return size
    return 2 * MB


def checksum(path: str, algorithm: Algorithm) -> str:
    """Return the hex digest of the file at ``path``.

    ``algorithm`` is a supported algorithm name or a hasher factory.
    """
    factory = _factory(algorithm)
    try:
        info = os.stat(path)
    except OSError as exc:
        raise HashError(f"文件不存在或无法访问: {exc}") from exc
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise HashError(f"无法打开文件: {exc}") from exc
    hasher = factory()
    chunk_size = buffer_size(info.st_size)
    with handle:
        try:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                hasher.update(chunk)
        except OSError as exc:
            raise HashError(f"读取文件失败: {exc}") from exc
    return hasher.hexdigest()


def _skip_dir_warning(console: Console, name: str) -> None:
    console.warn(f"跳过目录：{name}, 请使用 -r 选项以递归方式处理")


def _walk_files(directory: str) -> list[str]:
    files: list[str] = []
    with os.scandir(directory) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            files.extend(_walk_files(entry.path))
        else:
            files.append(entry.path)
    return files


def walk_dir(dir_path: str, recursive: bool, console: Console) -> list[str]:
    """List the files in a directory, descending into subdirectories if ``recursive``.

    Without recursion, subdirectories are reported as skipped.
    """
    if recursive:
        try:
            return _walk_files(dir_path)
        except OSError as exc:
            raise HashError(f"遍历目录失败: {exc}") from exc

    try:
        with os.scandir(dir_path) as entries:
            ordered = sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        raise HashError(f"读取目录失败: {exc}") from exc

    files: list[str] = []
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            _skip_dir_warning(console, entry.name)
            continue
        files.append(os.path.join(dir_path, entry.name))
    return files


def collect_files(target_path: str, recursive: bool, console: Console) -> list[str]:
    """Collect the files named by a path, a directory or a wildcard pattern."""
    if _GLOB_CHARS.intersection(target_path):
        matches = sorted(glob.glob(target_path))
        if not matches:
            raise HashError("没有找到匹配的文件")
        files: list[str] = []
        for match in matches:
            try:
                info = os.stat(match)
            except OSError as exc:
                raise HashError(f"无法获取文件信息: {exc}") from exc
            if stat.S_ISDIR(info.st_mode):
                if recursive:
                    files.extend(walk_dir(match, recursive, console))
                else:
                    _skip_dir_warning(console, match)
            else:
                files.append(match)
        return files

    try:
        info = os.stat(target_path)
    except OSError as exc:
        raise HashError(f"无法获取路径信息: {exc}") from exc
    if stat.S_ISDIR(info.st_mode):
        return walk_dir(target_path, recursive, console)
    return [target_path]


def _quote(text: str) -> str:
    escapes = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}
    parts = []
    for char in text:
        if char in escapes:
            parts.append(escapes[char])
        elif char.isprintable():
            parts.append(char)
        elif ord(char) < 0x100:
            parts.append(f"\\x{ord(char):02x}")
        elif ord(char) < 0x10000:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(f"\\U{ord(char):08x}")
    return '"' + "".join(parts) + '"'


class _Run:
    """Shared state of one batch of hashing tasks."""

    def __init__(self, factory: HasherFactory, output: TextIO | None) -> None:
        self.factory = factory
        self.output = output
        self.errors: list[HashError] = []
        self.cause: HashError | None = None
        self._lock = threading.Lock()
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def add_error(self, error: HashError) -> None:
        with self._lock:
            self.errors.append(error)

    def fail(self, error: HashError) -> None:
        with self._lock:
            self.errors.append(error)
            if self.cause is None:
                self.cause = error
        self._cancelled.set()

    def cancel(self, cause: HashError) -> None:
        with self._lock:
            if self.cause is None:
                self.cause = cause
        self._cancelled.set()

    def emit(self, digest: str, path: str) -> None:
        with self._lock:
            if self.output is None:
                print(f"{digest}\t{path}", flush=True)
                return
            try:
                self.output.write(f"{digest}\t{_quote(path)}\n")
            except OSError as exc:
                raise HashError(f"写入文件 {OUTPUT_FILE_NAME} 失败: {exc}") from exc

    def hash_one(self, path: str) -> None:
        if self.cancelled:
            raise HashError(_CANCELLED)
        try:
            if stat.S_ISLNK(os.lstat(path).st_mode):
                return
        except OSError:
            pass
        try:
            digest = checksum(path, self.factory)
        except HashError as exc:
            raise HashError(f"计算文件 {path} 哈希值失败: {exc}") from exc
        if self.cancelled:
            raise HashError(_CANCELLED)
        self.emit(digest, path)

    def task(self, path: str) -> None:
        try:
            try:
                os.stat(path)
            except OSError as exc:
                raise HashError(f"文件 {path} 不存在或无法访问: {exc}") from exc
            self.hash_one(path)
        except HashError as exc:
            self.fail(exc)
        except Exception as exc:  # noqa: BLE001 - one bad file must not stop the batch
            self.fail(HashError(f"处理文件 {path} 时发生意外错误: {exc}"))


def hash_files(
    files: Iterable[str],
    algorithm: Algorithm,
    jobs: int,
    output: TextIO | None,
) -> list[HashError]:
    """Hash ``files`` with up to ``jobs`` workers and return the errors met.

    Each result goes to stdout as ``digest<TAB>path``, or, when ``output`` is
    given, to it as ``digest<TAB>"path"``. The first error cancels the files
    not yet started; the returned list then ends with the cancellation cause.
    Symbolic links are skipped.
    """
    if jobs <= 0:
        raise HashError("在校验哈希值时，并发数必须大于 0")
    run = _Run(_factory(algorithm), output)
    slots = threading.BoundedSemaphore(jobs)

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        try:
            for path in files:
                if run.cancelled:
                    run.add_error(HashError(_CANCELLED))
                    continue
                slots.acquire()
                future = pool.submit(run.task, path)
                future.add_done_callback(lambda _future: slots.release())
        except KeyboardInterrupt:
            run.cancel(HashError("用户中断操作"))

    errors = list(run.errors)
    if run.cause is not None:
        errors.append(HashError(f"任务被取消: {run.cause}"))
    return errors


def _report(errors: list[HashError], console: Console) -> None:
    seen: set[str] = set()
    for error in errors:
        message = str(error)
        if message not in seen:
            seen.add(message)
            console.error(message)


def run_hash(
    paths: Iterable[str],
    algorithm: str,
    recursive: bool,
    jobs: int,
    write: bool,
    console: Console,
) -> None:
    """Hash every file named by ``paths``, printing or writing the checksums.

    With ``write`` the checksums of each path go to the checksum file in the
    current directory, which is started afresh for every path.
    """
    targets = list(paths)
    if not targets:
        raise HashError("请指定要计算哈希值的路径")
    if jobs <= 0:
        raise HashError("在校验哈希值时，并发数必须大于 0")
    try:
        factory = hasher_factory(algorithm)
    except UnsupportedAlgorithmError:
        raise HashError(f"在校验哈希值时，哈希算法 {algorithm} 无效") from None

    for raw in targets:
        target = os.path.normpath(raw)
        try:
            files = collect_files(target, recursive, console)
        except HashError as exc:
            console.error(f"在校验哈希值时，收集文件失败: {exc}")
            continue
        if not files:
            console.warn(f"在校验哈希值时，路径 {target} 没有找到任何文件")
            continue

        if write:
            errors = _hash_into_file(files, algorithm, factory, jobs)
        else:
            errors = hash_files(files, factory, jobs, None)

        if errors:
            _report(errors, console)
        elif write:
            console.ok(
                f"校验哈希值完成，共处理 {len(files)} 个文件, "
                f"并将哈希值写入文件 {OUTPUT_FILE_NAME}"
            )


def _hash_into_file(
    files: list[str], name: str, factory: HasherFactory, jobs: int
) -> list[HashError]:
    try:
        handle = open(OUTPUT_FILE_NAME, "w", encoding="utf-8")
    except OSError as exc:
        return [HashError(f"打开文件 {OUTPUT_FILE_NAME} 失败: {exc}")]
    with handle:
        try:
            handle.write(f"#{name}#{datetime.now():%Y-%m-%d %H:%M:%S}\n")
        except OSError as exc:
            return [HashError(f"写入文件头 {OUTPUT_FILE_NAME} 失败: {exc}")]
        return hash_files(files, factory, jobs, handle)