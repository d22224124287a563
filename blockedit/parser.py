"""Line scanner for brace-delimited ``key = value`` configuration files.

The format is the one used by Hyprland-style configs::

    # comment
    general {
        gaps_in = 5 # trailing comment
    }

Both the cache loader and the write-back engine go through :func:`scan_lines`
so they always agree on which text on a line is "the value".
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

BLOCK_OPEN_RE = re.compile(r"(?P<name>[A-Za-z0-9_.:-]+)\s*\{")


@dataclass(frozen=True)
class ConfigRecord:
    key: str
    block: str
    raw_value: str
    line: int = -1


@dataclass(frozen=True)
class DataLine:
    """A ``key = value`` line together with the column span of its value."""

    index: int
    key: str
    block: str
    value: str
    value_start: int
    value_end: int

    def to_record(self) -> ConfigRecord:
        return ConfigRecord(key=self.key, block=self.block, raw_value=self.value, line=self.index)


def strip_comment(line: str) -> str:
    """Return ``line`` without its trailing ``#`` comment and line break."""

    line = line.rstrip("\r\n")
    hash_at = line.find("#")
    return line if hash_at == -1 else line[:hash_at]


def _split_data(code: str, start: int) -> tuple[str, str, int, int] | None:
    eq = code.find("=", start)
    if eq == -1:
        return None
    key = code[start:eq].strip()
    if not key:
        return None

    value_region = code[eq + 1 :]
    close = value_region.find("}")
    if close != -1:
        value_region = value_region[:close]
    value = value_region.strip()
    if not value:
        # Empty value: anchor the span right after "=".
        return key, value, eq + 1, eq + 1
    lead = len(value_region) - len(value_region.lstrip())
    value_start = eq + 1 + lead
    return key, value, value_start, value_start + len(value)


def scan_lines(lines: Iterable[str]) -> Iterator[DataLine]:
    """Yield every data line of ``lines`` with its enclosing block name.

    A stack of open block names is kept while scanning. The first
    ``name {`` on a line pushes ``name``; every ``}`` pops one level, but
    never past the top level. Comment lines are skipped entirely and lines
    without ``=`` or with an empty key are ignored.
    """

    stack: list[str] = []
    for index, line in enumerate(lines):
        if line.lstrip().startswith("#"):
            continue

        code = strip_comment(line)
        data_start = 0
        opened = BLOCK_OPEN_RE.search(code)
        if opened:
            stack.append(opened.group("name"))
            data_start = opened.end()

        parts = _split_data(code, data_start)
        if parts is not None:
            key, value, value_start, value_end = parts
            yield DataLine(
                index=index,
                key=key,
                block=stack[-1] if stack else "",
                value=value,
                value_start=value_start,
                value_end=value_end,
            )

        closes = code.count("}")
        while closes > 0 and stack:
            stack.pop()
            closes -= 1


def parse_records(text: str) -> list[ConfigRecord]:
    """Parse configuration ``text`` into its ordered records."""

    return [data.to_record() for data in scan_lines(text.splitlines())]
