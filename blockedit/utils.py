from __future__ import annotations

import re

from wcwidth import wcswidth, wcwidth

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


def display_width(text: str) -> int:
    """Number of terminal cells ``text`` occupies, ignoring ANSI sequences."""

    plain = strip_ansi(text)
    width = wcswidth(plain)
    if width >= 0:
        return width
    # Control characters make wcswidth give up; count the printable ones.
    return sum(max(0, wcwidth(ch)) for ch in plain)


def pad_to_width(text: str, width: int) -> str:
    """Left-align ``text`` in ``width`` cells, like ``'%-*s'`` but cell-aware."""

    return text + " " * max(0, width - display_width(text))
