"""Editable field definitions and the tab registry that groups them."""
from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import KW_ONLY, dataclass
from typing import ClassVar

INT_RE = re.compile(r"^-?[0-9]+$")
FLOAT_RE = re.compile(r"^-?[0-9]*\.?[0-9]+$")


def _clamp(value, minimum, maximum):
    if minimum is not None and value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


@dataclass(frozen=True)
class IntField:
    kind: ClassVar[str] = "int"

    label: str
    key: str
    block: str = ""
    default: str | None = None
    minimum: int | None = None
    maximum: int | None = None
    step: int = 1

    def next_value(self, current: str | None, direction: int) -> str:
        if current is None or not INT_RE.match(current):
            value = self.minimum if self.minimum is not None else 0
        else:
            value = int(current)
        value += direction * self.step
        return str(_clamp(value, self.minimum, self.maximum))


@dataclass(frozen=True)
class FloatField:
    kind: ClassVar[str] = "float"

    label: str
    key: str
    block: str = ""
    default: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    step: float = 0.1

    def next_value(self, current: str | None, direction: int) -> str:
        if current is None or not FLOAT_RE.match(current):
            value = self.minimum if self.minimum is not None else 0.0
        else:
            value = float(current)
        value = _clamp(value + direction * self.step, self.minimum, self.maximum)
        # %.4g keeps repeated steps from accumulating binary noise.
        text = f"{float(value):.4g}"
        return "0" if text == "-0" else text


@dataclass(frozen=True)
class BoolField:
    kind: ClassVar[str] = "bool"

    label: str
    key: str
    block: str = ""
    default: str | None = None

    def next_value(self, current: str | None, direction: int) -> str:
        return "false" if current == "true" else "true"


@dataclass(frozen=True)
class CycleField:
    kind: ClassVar[str] = "cycle"

    label: str
    key: str
    block: str = ""
    default: str | None = None
    options: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError(f"Cycle field {self.label!r} needs at least one option")

    def next_value(self, current: str | None, direction: int) -> str:
        try:
            index = self.options.index(current)
        except ValueError:
            index = 0
        return self.options[(index + direction) % len(self.options)]


@dataclass(frozen=True)
class ActionField:
    """A field whose next value comes from a field-specific callback."""

    kind: ClassVar[str] = "action"

    label: str
    key: str
    block: str = ""
    default: str | None = None
    _: KW_ONLY
    toggle: Callable[[str | None], str]
    describe: Callable[[str], str | None] | None = None

    def next_value(self, current: str | None, direction: int) -> str:
        return self.toggle(current)


Field = IntField | FloatField | BoolField | CycleField | ActionField


def parse_options(options: str | Sequence[str]) -> tuple[str, ...]:
    """Accept ``"a,b,c"`` or a sequence and return a clean option tuple."""

    if isinstance(options, str):
        options = options.split(",")
    return tuple(opt.strip() for opt in options if opt.strip())


@dataclass(frozen=True)
class Tab:
    name: str
    fields: tuple[Field, ...]

    def __len__(self) -> int:
        return len(self.fields)


class FieldRegistry:
    """Ordered catalog of fields grouped into named tabs."""

    def __init__(self, tab_names: Sequence[str]) -> None:
        if not tab_names:
            raise ValueError("A registry needs at least one tab")
        if len(set(tab_names)) != len(tab_names):
            raise ValueError("Tab names must be unique")
        self._names = tuple(tab_names)
        self._fields: dict[str, list[Field]] = {name: [] for name in self._names}

    def _resolve(self, tab: int | str) -> str:
        if isinstance(tab, int):
            if not 0 <= tab < len(self._names):
                raise ValueError(f"Invalid tab index {tab}")
            return self._names[tab]
        if tab not in self._fields:
            raise ValueError(f"Unknown tab {tab!r}")
        return tab

    def register(self, tab: int | str, field: Field) -> Field:
        name = self._resolve(tab)
        if any(existing.label == field.label for existing in self._fields[name]):
            raise ValueError(f"Duplicate label {field.label!r} in tab {name!r}")
        self._fields[name].append(field)
        return field

    @property
    def tab_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def tabs(self) -> tuple[Tab, ...]:
        return tuple(Tab(name, tuple(self._fields[name])) for name in self._names)

    def tab(self, index: int) -> Tab:
        name = self._resolve(index)
        return Tab(name, tuple(self._fields[name]))

    def __len__(self) -> int:
        return len(self._names)
