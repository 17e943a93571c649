"""ANSI colouring helpers for rendering keys and values."""

from __future__ import annotations

import os
from typing import Any, Callable

ANSI_RESET = "\x1b[0m"
ANSI_BRIGHT = "\x1b[1m"
ANSI_FG_GREEN = "\x1b[32m"
ANSI_FG_BLUE = "\x1b[34m"
ANSI_FG_CYAN = "\x1b[36m"

COLORS_ENV = "TENDERMINT_IAVL_COLORS_ON"

__all__ = [
    "ANSI_RESET",
    "ANSI_BRIGHT",
    "ANSI_FG_GREEN",
    "ANSI_FG_BLUE",
    "ANSI_FG_CYAN",
    "green",
    "blue",
    "cyan",
    "colored_bytes",
]


def _treat(s: str, color: str) -> str:
    if len(s) > 2 and s.startswith("\x1b["):
        return s
    return color + s + ANSI_RESET


def _treat_all(color: str, args: tuple[Any, ...]) -> str:
    return "".join(_treat(str(arg), color) for arg in args)


def green(*args: Any) -> str:
    """Colour each argument green unless it is already coloured."""
    return _treat_all(ANSI_FG_GREEN, args)


def blue(*args: Any) -> str:
    """Colour each argument blue unless it is already coloured."""
    return _treat_all(ANSI_FG_BLUE, args)


def cyan(*args: Any) -> str:
    """Colour each argument cyan unless it is already coloured."""
    return _treat_all(ANSI_FG_CYAN, args)


def colored_bytes(
    data: bytes,
    text_color: Callable[..., str],
    bytes_color: Callable[..., str],
) -> str:
    """Render bytes, colouring printable characters and hex bytes differently.

    Colouring only happens when the colours environment variable is non-empty;
    otherwise only the first byte is rendered, as a character.
    """
    if not os.environ.get(COLORS_ENV, ""):
        return chr(data[0]) if data else ""
    return "".join(
        text_color(chr(b)) if 0x21 <= b < 0x7F else bytes_color(f"{b:02X}")
        for b in data
    )