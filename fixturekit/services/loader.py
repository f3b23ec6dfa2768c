"""Insert fixture records into their models."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from fixturekit.errors import FixtureError, FixtureSetupError, InsertError
from fixturekit.registry import ModelRegistry
from fixturekit.selection import ALL, Selection
from fixturekit.store import FixtureStore

logger = logging.getLogger(__name__)

SETUP_COMPLETE = "setup complete"


@dataclass
class LoadReport:
    """Outcome of a setup run."""

    loaded: dict[str, int] = field(default_factory=dict)
    failures: dict[str, FixtureError] = field(default_factory=dict)
    message: str = SETUP_COMPLETE

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self, message: str = "Fixtures failed to load") -> None:
        """Raise a ``FixtureSetupError`` if any fixture failed."""
        if self.failures:
            raise FixtureSetupError(message, self.failures)


class FixtureLoader:
    """Loads cached fixture data into the models registered for each fixture."""

    def __init__(self, store: FixtureStore, models: ModelRegistry):
        """Initialize the loader."""
        self.store = store
        self.models = models

    async def load_one(self, name: str) -> int:
        """
        Insert one fixture into the model of the same name.

        Args:
            name: Fixture name, also used to look up the model

        Returns:
            Number of records created

        Raises:
            ModelNotFoundError: If no model matches the fixture name
            InsertError: If the model rejects the records
            FixtureError: If the fixture itself can't be loaded, including
                unexpected errors from the store or the registry
        """
        logger.debug(f"Loading fixture {name}")
        try:
            model = self.models.lookup(name)
            records = self.store.load(name)
        except FixtureError:
            raise
        except Exception as e:
            logger.debug(f"Unexpected error when reading fixture {name}: {e}")
            raise FixtureError(f"Failed to load fixture {name}: {e}", name=name) from e

        try:
            created = await model.bulk_create(records)
        except Exception as e:
            logger.debug(f"Error when attempting to add fixtures for {name}: {e}")
            raise InsertError(
                f"Failed to insert fixture {name} into {model.name}: {e}",
                name=name,
                details={"model": model.name},
            ) from e

        logger.debug(f"Loaded {created} records for {name}")
        return created

    async def load_many(self, selection: Selection = ALL) -> LoadReport:
        """
        Load every selected fixture concurrently.

        Failures are collected, not raised; nothing is rolled back.

        Raises:
            FilesystemError: If all fixtures were selected and the directory can't be listed
        """
        names = selection.resolve(self.store.list_fixtures)
        logger.debug(f"Loading fixtures: {names}")

        results = await asyncio.gather(
            *(self.load_one(name) for name in names),
            return_exceptions=True,
        )

        report = LoadReport()
        for name, result in zip(names, results):
            if isinstance(result, FixtureError):
                report.failures[name] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                report.loaded[name] = result

        return report
