"""Erase fixture data by re-synchronizing data sources."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from fixturekit.errors import MigrationError
from fixturekit.registry import DataSourceRegistry
from fixturekit.selection import All, Selection

logger = logging.getLogger(__name__)

TEARDOWN_COMPLETE = "teardown complete"


@dataclass
class MigrationFailure:
    """A data source that failed to re-synchronize."""

    data_source: str
    models: list[str] | None
    error: MigrationError


@dataclass
class TeardownReport:
    """
    Outcome of a teardown run.

    Teardown is best-effort: ``message`` is always "teardown complete" and
    failures are reported here instead of being raised.
    """

    migrated: dict[str, list[str] | None] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    failures: list[MigrationFailure] = field(default_factory=list)
    message: str = TEARDOWN_COMPLETE

    @property
    def ok(self) -> bool:
        return not self.failures


class TeardownCoordinator:
    """Drops and recreates model storage on every registered data source."""

    def __init__(self, data_sources: DataSourceRegistry):
        """Initialize the coordinator."""
        self.data_sources = data_sources

    async def teardown(self, selection: Selection) -> TeardownReport:
        """
        Re-synchronize every data source.

        With a named selection each data source only migrates its own models
        matching those names (case-insensitively); with ``All`` it migrates
        everything it holds.
        """
        names = list(self.data_sources)
        logger.debug(f"Tearing down data sources: {names}")

        report = TeardownReport()
        await asyncio.gather(*(self._migrate(name, selection, report) for name in names))

        if report.failures:
            logger.warning(
                f"Failed to tear down fixtures on {[f.data_source for f in report.failures]}. "
                "This does not necessarily mean the teardown itself failed; check that "
                "the affected tables are now empty."
            )
        return report

    async def _migrate(self, name: str, selection: Selection, report: TeardownReport) -> None:
        models: list[str] | None = None
        try:
            models = self._select_models(name, selection)
            if models is not None and not models:
                report.skipped.append(name)
                return
            await self._automigrate(name, models)
        except MigrationError as error:
            report.failures.append(MigrationFailure(data_source=name, models=models, error=error))
            return

        logger.debug(f"Successfully migrated {name}")
        report.migrated[name] = models

    def _select_models(self, name: str, selection: Selection) -> list[str] | None:
        """Models of one data source to migrate; ``None`` means all of them."""
        if isinstance(selection, All):
            logger.debug(f"Dropping all models for {name}")
            return None

        try:
            models = self.data_sources.resolve_models(name, selection.names)
        except Exception as e:
            logger.error(f"Error when listing models of {name}: {e}")
            raise MigrationError(
                f"Failed to list models of data source {name}: {e}",
                name=name,
                details={"models": None},
            ) from e

        if models:
            logger.debug(f"Dropping models {models} from {name}")
        else:
            logger.debug(f"No models matching {list(selection.names)} on {name}")
        return models

    async def _automigrate(self, name: str, models: list[str] | None) -> None:
        try:
            await self.data_sources[name].automigrate(models)
        except Exception as e:
            logger.error(f"Error when attempting to automigrate {name}: {e}")
            raise MigrationError(
                f"Failed to re-synchronize data source {name}: {e}",
                name=name,
                details={"models": models},
            ) from e
