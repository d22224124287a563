from __future__ import annotations

from collections.abc import Iterable

from .cache import CommitResult, ConfigCache
from .fields import Field


class ValueEditor:
    """Applies typed edits to fields and commits them through the cache."""

    def __init__(self, cache: ConfigCache) -> None:
        self.cache = cache

    def current_value(self, field: Field) -> str | None:
        return self.cache.lookup(field.key, field.block)

    def adjust(self, field: Field, direction: int) -> CommitResult:
        new_value = field.next_value(self.current_value(field), direction)
        return self.cache.commit(field.key, field.block, new_value)

    def set_value(self, field: Field, value: str) -> CommitResult:
        return self.cache.commit(field.key, field.block, value)

    def reset(self, fields: Iterable[Field]) -> list[tuple[Field, CommitResult]]:
        """Commit each field's default; fields without one are left alone."""

        results: list[tuple[Field, CommitResult]] = []
        for field in fields:
            if field.default:
                results.append((field, self.set_value(field, field.default)))
        return results
