import io
import os
import stat

from fck.tools import Console, is_hidden, is_read_only, last8


def test_last8_empty():
    assert last8("") == ""


def test_last8_short_string_unchanged():
    assert last8("abc") == "abc"
    assert last8("12345678") == "12345678"


def test_last8_long_string_keeps_tail():
    text = "0123456789abcdef"
    result = last8(text)
    assert len(result) == 8
    assert text.endswith(result)


def test_is_hidden_dot_names():
    assert is_hidden(".git") is True
    assert is_hidden(os.path.join("some", "dir", ".hidden")) is True
    assert is_hidden(".gitignore/") is True


def test_is_hidden_short_and_plain_names():
    assert is_hidden(".a") is False
    assert is_hidden("..") is False
    assert is_hidden("visible.txt") is False


def test_is_read_only_follows_permissions(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("data")
    target.chmod(stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH)
    try:
        assert is_read_only(str(target)) is True
    finally:
        target.chmod(stat.S_IRUSR | stat.S_IWUSR)
    assert is_read_only(str(target)) is False


def test_is_read_only_missing_path(tmp_path):
    assert is_read_only(str(tmp_path / "missing")) is False


def test_console_ok_and_warn_go_to_out():
    out, err = io.StringIO(), io.StringIO()
    console = Console(out=out, err=err, color=False)
    console.ok("finished")
    console.warn("careful")
    text = out.getvalue()
    assert "finished" in text
    assert "careful" in text
    assert err.getvalue() == ""


def test_console_error_goes_to_err():
    out, err = io.StringIO(), io.StringIO()
    console = Console(out=out, err=err, color=False)
    console.error("broken")
    assert "broken" in err.getvalue()
    assert out.getvalue() == ""


def test_console_green_colours_when_enabled():
    out = io.StringIO()
    Console(out=out, color=True).green("title")
    text = out.getvalue()
    assert "\x1b[" in text
    assert "title" in text


def test_console_plain_when_disabled():
    out = io.StringIO()
    Console(out=out, color=False).green("title")
    assert out.getvalue() == "title\n"