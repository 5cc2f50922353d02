"""Command-line entry point: parses arguments and dispatches to subcommands."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _dist_version
from typing import Callable, Sequence

from fck.algorithms import supported_names
from fck.check import CheckError, run_check
from fck.find import FindError, FindOptions, run_find
from fck.hashing import HashError, run_hash
from fck.size import run_size
from fck.tools import Console

_APP_NAME = "fck"

_ALIASES = {"h": "hash", "s": "size", "c": "check", "f": "find"}

# Options of each subcommand that take a value; a value may start with "-".
_VALUE_OPTIONS: dict[str, frozenset[str]] = {
    "hash": frozenset({"-t", "-j"}),
    "size": frozenset(),
    "check": frozenset({"-f", "-a", "-b", "-t"}),
    "find": frozenset({"-p", "-k", "-m", "-size", "-mtime"}),
}


def _app_version() -> str:
    try:
        return _dist_version(_APP_NAME)
    except PackageNotFoundError:
        return "unknown"


def _help_flag(parser: argparse.ArgumentParser, dest: str) -> None:
    parser.add_argument("-h", dest=dest, action="store_true", help="打印帮助信息并退出")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the hash, size, check and find subcommands."""
    algorithms = "、".join(supported_names())
    parser = argparse.ArgumentParser(
        prog=_APP_NAME,
        description="文件工具: 计算哈希值、统计大小、校验文件和查找文件",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-v", dest="version", action="store_true", help="打印版本信息并退出")
    _help_flag(parser, "show_help")
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    hash_parser = commands.add_parser(
        "hash", aliases=["h"], add_help=False, allow_abbrev=False, help="计算文件哈希值"
    )
    _help_flag(hash_parser, "command_help")
    hash_parser.add_argument(
        "-t", dest="algorithm", default="md5", help=f"指定哈希算法，支持 {algorithms}"
    )
    hash_parser.add_argument("-r", dest="recursive", action="store_true", help="递归处理目录")
    hash_parser.add_argument("-j", dest="jobs", type=int, default=1, help="指定并发数量")
    hash_parser.add_argument(
        "-w", dest="write", action="store_true", help="将哈希值写入文件, 文件名为checksum.hash"
    )
    hash_parser.add_argument("paths", nargs="*", help="要计算哈希值的路径")
    hash_parser.set_defaults(command_parser=hash_parser)

    size_parser = commands.add_parser(
        "size", aliases=["s"], add_help=False, allow_abbrev=False, help="计算文件或目录大小"
    )
    _help_flag(size_parser, "command_help")
    size_parser.add_argument("paths", nargs="*", help="要计算大小的路径")
    size_parser.set_defaults(command_parser=size_parser)

    check_parser = commands.add_parser(
        "check", aliases=["c"], add_help=False, allow_abbrev=False, help="校验文件或比较目录"
    )
    _help_flag(check_parser, "command_help")
    check_parser.add_argument(
        "-f", dest="check_file", default="", help="指定校验值文件, 根据文件中的哈希值进行校验"
    )
    check_parser.add_argument("-a", dest="dir_a", default="", help="指定要校验的目录A")
    check_parser.add_argument("-b", dest="dir_b", default="", help="指定要校验的目录B")
    check_parser.add_argument(
        "-t", dest="algorithm", default="md5", help=f"指定哈希算法，支持 {algorithms}"
    )
    check_parser.add_argument(
        "-w", dest="write", action="store_true", help="将校验结果写入文件, 文件名为check_dir.check"
    )
    check_parser.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    check_parser.set_defaults(command_parser=check_parser)

    find_parser = commands.add_parser(
        "find", aliases=["f"], add_help=False, allow_abbrev=False, help="按名称查找文件和目录"
    )
    _help_flag(find_parser, "command_help")
    find_parser.add_argument("-p", dest="path", default="", help="指定要查找的路径")
    find_parser.add_argument("-k", dest="keyword", default="", help="指定要查找的关键字")
    find_parser.add_argument(
        "-m", dest="max_depth", type=int, default=-1, help="指定查找的最大深度, -1 表示不限制"
    )
    find_parser.add_argument("-f", dest="files_only", action="store_true", help="限制只查找文件")
    find_parser.add_argument("-d", dest="dirs_only", action="store_true", help="限制只查找目录")
    find_parser.add_argument(
        "-l", dest="symlinks_only", action="store_true", help="限制只查找软链接"
    )
    find_parser.add_argument(
        "-ro", dest="read_only", action="store_true", help="限制只查找只读文件"
    )
    find_parser.add_argument(
        "-size",
        dest="size",
        default="",
        help="按文件大小过滤, 格式如+5M(大于5M)或-5M(小于5M), 支持单位B/K/M/G",
    )
    find_parser.add_argument(
        "-mtime", dest="mtime", default="", help="按修改时间查找, 格式如+5(大于5天)或-5(小于5天)"
    )
    find_parser.add_argument(
        "-c", dest="case_sensitive", action="store_true", help="开启大小写敏感匹配, 默认不区分大小写"
    )
    find_parser.add_argument(
        "-full", dest="full_path", action="store_true", help="是否显示完整路径, 默认显示匹配到的路径"
    )
    find_parser.add_argument(
        "-hidden", dest="hidden", action="store_true", help="是否显示隐藏文件, 默认不显示隐藏文件"
    )
    find_parser.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    find_parser.set_defaults(command_parser=find_parser)

    return parser


def _join_values(tokens: Sequence[str], value_options: frozenset[str]) -> list[str]:
    """Attach option values to their options so values starting with '-' survive."""
    joined: list[str] = []
    pending: str | None = None
    for token in tokens:
        if pending is not None:
            joined.append(f"{pending}={token}")
            pending = None
        elif token in value_options:
            pending = token
        else:
            joined.append(token)
    if pending is not None:
        joined.append(pending)
    return joined


def _run_hash(args: argparse.Namespace, console: Console) -> None:
    try:
        run_hash(args.paths, args.algorithm, args.recursive, args.jobs, args.write, console)
    except HashError as exc:
        raise HashError(f"执行hash子命令时发生了错误: {exc}") from exc


def _run_size(args: argparse.Namespace, console: Console) -> None:
    try:
        run_size(args.paths, console)
    except ValueError as exc:
        raise ValueError(f"执行size子命令时发生了错误: {exc}") from exc


def _run_check(args: argparse.Namespace, console: Console) -> None:
    try:
        run_check(args.check_file, args.dir_a, args.dir_b, args.algorithm, args.write, console)
    except CheckError as exc:
        raise CheckError(f"执行check子命令时发生了错误: {exc}") from exc


def _run_find(args: argparse.Namespace, console: Console) -> None:
    options = FindOptions(
        path=args.path,
        keyword=args.keyword,
        max_depth=args.max_depth,
        files_only=args.files_only,
        dirs_only=args.dirs_only,
        symlinks_only=args.symlinks_only,
        read_only=args.read_only,
        size=args.size,
        mtime=args.mtime,
        case_sensitive=args.case_sensitive,
        full_path=args.full_path,
        hidden=args.hidden,
    )
    try:
        run_find(options)
    except FindError as exc:
        raise FindError(f"执行find子命令时发生了错误: {exc}") from exc


_HANDLERS: dict[str, Callable[[argparse.Namespace, Console], None]] = {
    "hash": _run_hash,
    "size": _run_size,
    "check": _run_check,
    "find": _run_find,
}


def run(argv: Sequence[str] | None = None, console: Console | None = None) -> None:
    """Parse ``argv`` and run the chosen subcommand.

    Subcommand failures are raised with a message naming the subcommand.
    Unknown subcommands do nothing.
    """
    tokens = list(sys.argv[1:] if argv is None else argv)
    console = console if console is not None else Console()
    parser = build_parser()

    split = next(
        (index for index, token in enumerate(tokens) if not token.startswith("-") or token == "-"),
        len(tokens),
    )
    leading, rest = tokens[:split], tokens[split:]
    top = parser.parse_args(leading)
    command = rest[0] if rest else None

    if top.version or command == "version":
        console.green(f"{_APP_NAME} {_app_version()}")
        return
    if top.show_help or command is None or command == "help":
        print(parser.format_help())
        return

    name = _ALIASES.get(command, command)
    if name not in _HANDLERS:
        return

    args = parser.parse_args([*leading, command, *_join_values(rest[1:], _VALUE_OPTIONS[name])])
    if args.command_help:
        print(args.command_parser.format_help())
        return
    _HANDLERS[name](args, console)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return the process exit status."""
    console = Console()
    try:
        run(argv, console)
    except (HashError, CheckError, FindError, ValueError) as exc:
        console.error(str(exc))
        return 1
    except KeyboardInterrupt:
        console.warn("用户中断操作")
        return 1
    except Exception as exc:  # noqa: BLE001 - last line of defence for the command
        console.error(f"fck在运行过程中发生了错误: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())