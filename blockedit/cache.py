"""In-memory view of the configuration file, keyed by ``(key, block)``."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Literal

from .parser import ConfigRecord, parse_records
from .writeback import write_value

logger = logging.getLogger(__name__)

CommitResult = Literal["written", "unchanged", "missed"]


class ConfigCache:
    """Parsed values of one configuration file.

    Every record is stored under its exact ``(key, block)``. The top-level
    slot ``(key, "")`` doubles as a "first match anywhere" entry: when the
    file has no top-level ``key`` it holds the first value seen for ``key``
    in any block, so fields declared without a block still resolve.
    """

    def __init__(self, path: str, records: Iterable[ConfigRecord] = ()) -> None:
        self.path = path
        self._entries: dict[tuple[str, str], str] = {}
        self.index(records)

    @classmethod
    def load(cls, path: str) -> ConfigCache:
        cache = cls(path)
        cache.reload()
        return cache

    def reload(self) -> None:
        with open(self.path, encoding="utf-8") as f:
            records = parse_records(f.read())
        self._entries.clear()
        self.index(records)
        logger.debug("Loaded %d records from %s", len(records), self.path)

    def index(self, records: Iterable[ConfigRecord]) -> None:
        for record in records:
            self._entries[(record.key, record.block)] = record.raw_value
            self._entries.setdefault((record.key, ""), record.raw_value)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: tuple[str, str]) -> bool:
        return item in self._entries

    def lookup(self, key: str, block: str = "") -> str | None:
        value = self._entries.get((key, block))
        if value is None:
            value = self._entries.get((key, ""))
        return value

    def is_dirty(self, key: str, block: str, value: str) -> bool:
        return self._entries.get((key, block)) != value

    def mark_written(self, key: str, block: str, value: str) -> None:
        self._entries[(key, block)] = value

    def commit(self, key: str, block: str, value: str) -> CommitResult:
        """Persist ``value`` for ``(key, block)`` unless it is already current.

        A miss (no matching line in the file) still updates the cache so the
        UI reflects the intended value; the divergence is logged.
        """

        if not self.is_dirty(key, block, value):
            logger.debug("Skipping write of %s in [%s]: value unchanged", key, block)
            return "unchanged"

        found = write_value(self.path, key, block, value)
        self.mark_written(key, block, value)
        if not found:
            logger.warning(
                "No line for %s in [%s] in %s; cache updated, file unchanged",
                key,
                block or "top level",
                self.path,
            )
            return "missed"
        return "written"
