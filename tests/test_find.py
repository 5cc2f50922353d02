import io
import os
import time
from datetime import datetime, timedelta

import pytest

from fck.find import (
    FindError,
    FindOptions,
    find,
    match_file_size,
    match_file_time,
    run_find,
    validate_size_condition,
)


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "tree"
    root.mkdir()
    (root / "a.txt").write_bytes(b"0123456789")
    (root / "B.TXT").write_bytes(b"x")
    sub = root / "sub"
    sub.mkdir()
    (sub / "c.txt").write_bytes(b"x")
    deep = sub / "deep"
    deep.mkdir()
    (deep / "d.txt").write_bytes(b"x")
    hidden = root / ".hidden"
    hidden.mkdir()
    (hidden / "e.txt").write_bytes(b"x")
    return root


def _p(root, *parts):
    return str(root.joinpath(*parts))


def test_match_file_size_greater_and_less():
    assert match_file_size(2048, "+1K") is True
    assert match_file_size(1000, "+1K") is False
    assert match_file_size(1000, "-1K") is True
    assert match_file_size(2 * 1024 * 1024, "+1m") is True


def test_match_file_size_boundary_is_exclusive():
    assert match_file_size(1024, "+1K") is False
    assert match_file_size(1024, "-1K") is False


@pytest.mark.parametrize("condition", ["", "+", "+K", "+5X", "*5K", "+a5K"])
def test_match_file_size_rejects_bad_conditions(condition):
    assert match_file_size(10, condition) is False


def test_match_file_time_directions():
    now = datetime(2024, 5, 20, 12, 0, 0)
    recent = now - timedelta(days=1)
    old = now - timedelta(days=10)
    assert match_file_time(recent, "+5", now) is True
    assert match_file_time(recent, "-5", now) is False
    assert match_file_time(old, "-5", now) is True
    assert match_file_time(old, "+5", now) is False


@pytest.mark.parametrize("condition", ["", "+", "x5", "+abc", "+ 5"])
def test_match_file_time_rejects_bad_conditions(condition):
    now = datetime(2024, 5, 20)
    assert match_file_time(now, condition, now) is False


def test_validate_size_condition_parses():
    assert validate_size_condition("+5M") == ("+", 5, "M")
    assert validate_size_condition("-12k") == ("-", 12, "K")


@pytest.mark.parametrize("condition", ["5M", "+5.5M", "+5T", "+M", ""])
def test_validate_size_condition_rejects(condition):
    with pytest.raises(FindError):
        validate_size_condition(condition)


def test_find_keyword_case_insensitive(tree):
    result = set(find(FindOptions(path=str(tree), keyword="txt", files_only=True)))
    assert result == {
        _p(tree, "a.txt"),
        _p(tree, "B.TXT"),
        _p(tree, "sub", "c.txt"),
        _p(tree, "sub", "deep", "d.txt"),
        _p(tree, ".hidden", "e.txt"),
    }


def test_find_case_sensitive(tree):
    result = list(find(FindOptions(path=str(tree), keyword="TXT", case_sensitive=True)))
    assert result == [_p(tree, "B.TXT")]


def test_find_order_sorted_within_directory(tree):
    result = list(find(FindOptions(path=str(tree), keyword="txt", files_only=True, max_depth=1)))
    assert result == [_p(tree, "B.TXT"), _p(tree, "a.txt")]


def test_find_max_depth_limits(tree):
    result = set(find(FindOptions(path=str(tree), keyword="", max_depth=0)))
    assert result == {str(tree)}


def test_find_dirs_only_skips_hidden(tree):
    result = set(find(FindOptions(path=str(tree), dirs_only=True)))
    assert result == {str(tree), _p(tree, "sub"), _p(tree, "sub", "deep")}


def test_find_hidden_directory_not_entered(tree):
    result = set(find(FindOptions(path=str(tree))))
    assert _p(tree, ".hidden") not in result
    assert _p(tree, ".hidden", "e.txt") not in result
    assert _p(tree, "sub", "deep", "d.txt") in result


def test_find_hidden_shown_when_asked(tree):
    result = set(find(FindOptions(path=str(tree), hidden=True)))
    assert _p(tree, ".hidden") in result
    assert _p(tree, ".hidden", "e.txt") in result


def test_find_size_filter(tree):
    result = list(find(FindOptions(path=str(tree), files_only=True, size="+5B")))
    assert result == [_p(tree, "a.txt")]


def test_find_mtime_filter(tree):
    old = time.time() - 10 * 86400
    os.utime(tree / "a.txt", (old, old))
    older = list(find(FindOptions(path=str(tree), files_only=True, mtime="-5")))
    assert older == [_p(tree, "a.txt")]
    newer = set(find(FindOptions(path=str(tree), files_only=True, mtime="+5")))
    assert _p(tree, "a.txt") not in newer
    assert _p(tree, "B.TXT") in newer


def test_find_full_path(tree, monkeypatch):
    monkeypatch.chdir(tree.parent)
    result = list(find(FindOptions(path="tree", keyword="a.txt", full_path=True)))
    assert result == [os.path.abspath(os.path.join("tree", "a.txt"))]


def test_find_relative_paths_keep_root_prefix(tree, monkeypatch):
    monkeypatch.chdir(tree.parent)
    result = list(find(FindOptions(path="tree", keyword="c.txt")))
    assert result == [os.path.join("tree", "sub", "c.txt")]


def test_find_read_only(tree):
    target = tree / "B.TXT"
    os.chmod(target, 0o444)
    try:
        result = list(find(FindOptions(path=str(tree), files_only=True, read_only=True)))
    finally:
        os.chmod(target, 0o644)
    assert result == [_p(tree, "B.TXT")]


def test_find_errors(tree, tmp_path):
    with pytest.raises(FindError):
        find(FindOptions(path=""))
    with pytest.raises(FindError, match="查找路径不存在"):
        find(FindOptions(path=str(tmp_path / "missing")))
    with pytest.raises(FindError):
        find(FindOptions(path=str(tree), max_depth=-2))
    with pytest.raises(FindError):
        find(FindOptions(path=str(tree), size="5M"))
    with pytest.raises(FindError):
        find(
            FindOptions(
                path=str(tree), files_only=True, dirs_only=True, symlinks_only=True
            )
        )


def test_run_find_writes_lines(tree):
    out = io.StringIO()
    count = run_find(FindOptions(path=str(tree), keyword="txt", files_only=True, max_depth=1), out)
    assert count == 2
    assert out.getvalue().splitlines() == [_p(tree, "B.TXT"), _p(tree, "a.txt")]