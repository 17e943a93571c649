import pytest

from iavl.color import (
    ANSI_FG_BLUE,
    ANSI_FG_CYAN,
    ANSI_FG_GREEN,
    ANSI_RESET,
    COLORS_ENV,
    blue,
    colored_bytes,
    cyan,
    green,
)


@pytest.mark.parametrize(
    "func, code", [(green, ANSI_FG_GREEN), (blue, ANSI_FG_BLUE), (cyan, ANSI_FG_CYAN)]
)
def test_single_argument_is_wrapped(func, code):
    assert func("x") == code + "x" + ANSI_RESET


def test_multiple_arguments_each_wrapped():
    assert green("a", 1) == green("a") + green(1)
    assert green(1) == ANSI_FG_GREEN + "1" + ANSI_RESET


def test_already_coloured_is_untouched():
    coloured = blue("text")
    assert green(coloured) == coloured


def test_no_arguments_is_empty():
    assert cyan() == ""


def test_colored_bytes_without_env_returns_first_byte(monkeypatch):
    monkeypatch.delenv(COLORS_ENV, raising=False)
    assert colored_bytes(b"abc", green, blue) == "a"
    assert colored_bytes(b"", green, blue) == ""


def test_colored_bytes_with_env(monkeypatch):
    monkeypatch.setenv(COLORS_ENV, "on")
    result = colored_bytes(b"a\x00 ~", green, blue)
    assert result == green("a") + blue("00") + blue("20") + green("~")


def test_colored_bytes_with_env_empty_input(monkeypatch):
    monkeypatch.setenv(COLORS_ENV, "on")
    assert colored_bytes(b"", green, blue) == ""