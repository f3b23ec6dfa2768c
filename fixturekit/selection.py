"""Selection of fixture names for setup and teardown."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True)
class All:
    """Every known fixture."""

    def resolve(self, available: Callable[[], list[str]]) -> list[str]:
        return list(available())


@dataclass(frozen=True)
class Named:
    """An explicit list of fixture names, in request order."""

    names: tuple[str, ...]

    def resolve(self, available: Callable[[], list[str]]) -> list[str]:
        return list(self.names)


Selection: TypeAlias = All | Named

ALL = All()


def parse_selection(value: Selection | str | Iterable[str] | None) -> Selection:
    """
    Parse a caller-supplied selection.

    Args:
        value: ``None``, a comma-separated string, an iterable of names,
            or an already parsed selection

    Returns:
        ``ALL`` when nothing usable was given, otherwise ``Named``
    """
    if value is None:
        return ALL
    if isinstance(value, (All, Named)):
        return value

    parts = value.split(",") if isinstance(value, str) else value
    names: list[str] = []
    for part in parts:
        if not isinstance(part, str):
            raise TypeError(f"Fixture names must be strings, got {type(part).__name__}")
        name = part.strip()
        if name and name not in names:
            names.append(name)

    if not names:
        return ALL
    return Named(tuple(names))
