"""Fixture file discovery and in-memory cache."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fixturekit.errors import FilesystemError, FixtureNotFoundError, ParseError

logger = logging.getLogger(__name__)

FIXTURE_EXTENSION = ".json"


@dataclass(frozen=True)
class Fixture:
    """A named set of records parsed from one fixture file."""

    name: str
    records: tuple[Mapping[str, Any], ...]

    def __len__(self) -> int:
        return len(self.records)


class FixtureStore:
    """
    Reads fixture files from a directory and memoizes their contents.

    Entries are never invalidated: once a fixture has been read, later
    calls are served from memory even if the file changes on disk.
    """

    def __init__(self, directory: Path | str, extension: str = FIXTURE_EXTENSION):
        """
        Initialize the store.

        Args:
            directory: Directory holding ``<name>.json`` files
            extension: Recognized fixture file extension
        """
        self.directory = Path(directory)
        self.extension = extension
        self._cache: dict[str, Fixture] = {}

    def list_fixtures(self) -> list[str]:
        """
        List all available fixture names.

        Returns:
            Sorted fixture names (without extension)

        Raises:
            FilesystemError: If the directory is missing or unreadable
        """
        try:
            entries = list(self.directory.iterdir())
        except OSError as e:
            raise FilesystemError(
                f"Cannot list fixtures directory {self.directory}: {e}",
                details={"path": str(self.directory)},
            ) from e

        return sorted(
            entry.stem
            for entry in entries
            if entry.suffix == self.extension and entry.is_file()
        )

    def is_cached(self, name: str) -> bool:
        return name in self._cache

    def get(self, name: str) -> Fixture:
        """Get a fixture, reading it from disk on first use."""
        fixture = self._cache.get(name)
        if fixture is None:
            logger.debug(f"Fixture {name} not cached, loading from {self.directory}")
            fixture = Fixture(name=name, records=self._read(name))
            self._cache[name] = fixture
        return fixture

    def load(self, name: str) -> tuple[Mapping[str, Any], ...]:
        """
        Load the records of a fixture by name.

        Args:
            name: Fixture name without extension

        Returns:
            Parsed records; a single-object file yields one record

        Raises:
            FixtureNotFoundError: If the fixture file doesn't exist
            ParseError: If the file can't be decoded or isn't an object or an array of objects
            FilesystemError: If the file can't be read
        """
        return self.get(name).records

    def _read(self, name: str) -> tuple[Mapping[str, Any], ...]:
        path = self.directory / f"{name}{self.extension}"
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise FixtureNotFoundError(
                f"Fixture file not found: {path}", name=name, details={"path": str(path)}
            ) from e
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Fixture {name} is not valid UTF-8: {e}", name=name, details={"path": str(path)}
            ) from e
        except OSError as e:
            raise FilesystemError(
                f"Cannot read fixture file {path}: {e}", name=name, details={"path": str(path)}
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Invalid JSON in fixture {name}: {e}",
                name=name,
                details={"path": str(path), "line": e.lineno, "column": e.colno},
            ) from e
        except (RecursionError, ValueError) as e:
            raise ParseError(
                f"Cannot parse fixture {name}: {e}", name=name, details={"path": str(path)}
            ) from e

        if isinstance(data, dict):
            return (data,)
        if isinstance(data, list) and all(isinstance(item, dict) for item in data):
            return tuple(data)

        raise ParseError(
            f"Fixture {name} must contain an object or an array of objects",
            name=name,
            details={"path": str(path)},
        )
