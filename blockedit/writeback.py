from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile

from .parser import DataLine, scan_lines

logger = logging.getLogger(__name__)


class WriteBackError(Exception):
    """Raised when a value cannot be written back to the configuration file."""


def find_value_line(lines: list[str], key: str, block: str = "") -> DataLine | None:
    """Return the first data line for ``key`` inside ``block``.

    With an empty ``block`` the first occurrence anywhere in the file wins,
    regardless of the block it sits in.
    """

    for data in scan_lines(lines):
        if data.key != key:
            continue
        if block and data.block != block:
            continue
        return data
    return None


def substitute_value(text: str, key: str, block: str, value: str) -> tuple[str, int | None]:
    """Replace the value token of one line in ``text``.

    Returns the new text and the index of the rewritten line, or the original
    text and ``None`` when no line matched. Indentation, spacing around ``=``
    and any trailing comment are kept as they are.
    """

    if "\n" in value or "\r" in value:
        raise WriteBackError(f"Refusing to write a multi-line value for {key!r}")
    if "#" in value or "}" in value:
        raise WriteBackError(f"Refusing to write {value!r} for {key!r}: it would not read back")

    lines = text.splitlines(keepends=True)
    target = find_value_line(lines, key, block)
    if target is None:
        return text, None

    line = lines[target.index]
    head, tail = line[: target.value_start], line[target.value_end :]
    if not target.value and value:
        value = " " + value
        if tail and not tail[0].isspace():
            value += " "
    lines[target.index] = head + value + tail
    return "".join(lines), target.index


def write_atomic(path: str, text: str) -> None:
    """Replace ``path`` with ``text`` through a temporary sibling file."""

    real_path = os.path.realpath(path)
    directory = os.path.dirname(real_path) or "."
    fd, tmp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(real_path)}.", suffix=".tmp", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        with contextlib.suppress(OSError):
            os.chmod(tmp_path, stat.S_IMODE(os.stat(real_path).st_mode))
        os.replace(tmp_path, real_path)
    except Exception as exc:
        with contextlib.suppress(Exception):
            os.unlink(tmp_path)
        raise WriteBackError(f"Failed to write {path}: {exc}") from exc


def write_value(path: str, key: str, block: str, value: str) -> bool:
    """Write ``value`` for ``key`` in ``block`` into the file at ``path``.

    Returns ``False`` when no matching line exists; the file is then left
    untouched.
    """

    try:
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise WriteBackError(f"Failed to read {path}: {exc}") from exc

    new_text, index = substitute_value(text, key, block, value)
    if index is None:
        return False
    if new_text != text:
        write_atomic(path, new_text)
    logger.info("Wrote %s = %s in [%s] at line %d of %s", key, value, block, index + 1, path)
    return True
