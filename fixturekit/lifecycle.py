"""Fixture lifecycle: configuration, environment gating and public operations."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from fixturekit.config import Settings
from fixturekit.errors import FixtureError, FixtureSetupError
from fixturekit.registry import DataSourceRegistry, ModelRegistry
from fixturekit.selection import ALL, All, Selection, parse_selection
from fixturekit.services.loader import FixtureLoader, LoadReport
from fixturekit.services.teardown import TeardownCoordinator, TeardownReport
from fixturekit.store import FixtureStore

logger = logging.getLogger(__name__)

SelectionArg = Selection | str | Iterable[str] | None

_FIXTURE_OPTIONS = {
    "load_fixtures_on_startup",
    "error_on_setup_failure",
    "environments",
    "fixtures_path",
    "app_root",
}


def resolve_environment(app: FastAPI | None, variable: str) -> str | None:
    """Active environment: ``app.state.environment`` if set, else the process variable."""
    if app is not None:
        environment = getattr(app.state, "environment", None)
        if environment:
            return environment
    return os.environ.get(variable)


@dataclass
class FixtureContext:
    """Everything a fixture operation needs, built once at initialization."""

    settings: Settings
    store: FixtureStore
    models: ModelRegistry
    data_sources: DataSourceRegistry
    environment: str | None

    @property
    def fixtures_dir(self) -> Path:
        return self.store.directory

    @property
    def active(self) -> bool:
        """Whether the current environment is one fixtures are enabled for."""
        return self.settings.environment_matches(self.environment)


class FixtureController:
    """Public setup/teardown operations over a ``FixtureContext``."""

    def __init__(self, context: FixtureContext):
        self.context = context
        self.loader = FixtureLoader(context.store, context.models)
        self.coordinator = TeardownCoordinator(context.data_sources)

    @classmethod
    def build(
        cls,
        models: ModelRegistry | Mapping[str, Any],
        data_sources: DataSourceRegistry | Mapping[str, Any],
        options: Settings | Mapping[str, Any] | None = None,
        app: FastAPI | None = None,
    ) -> FixtureController:
        """
        Merge options over defaults and build a controller.

        Args:
            models: Model registry, or a mapping of name to model handle
            data_sources: Data-source registry, or a mapping of name to handle
            options: Settings instance, or keyword options for ``Settings``
            app: Host application consulted for ``state.environment``
        """
        settings = options if isinstance(options, Settings) else Settings(**(options or {}))
        if not isinstance(models, ModelRegistry):
            models = ModelRegistry(models)
        if not isinstance(data_sources, DataSourceRegistry):
            data_sources = DataSourceRegistry(data_sources)

        context = FixtureContext(
            settings=settings,
            store=FixtureStore(settings.fixtures_dir),
            models=models,
            data_sources=data_sources,
            environment=resolve_environment(app, settings.environment_variable),
        )
        logger.debug(
            f"Initializing fixtures with options {settings.model_dump(include=_FIXTURE_OPTIONS)}"
        )
        return cls(context)

    @property
    def settings(self) -> Settings:
        return self.context.settings

    async def initialize(self) -> LoadReport | None:
        """
        Run the startup load if the environment allows it.

        Returns:
            The startup load report, or ``None`` if nothing was loaded

        Raises:
            FixtureSetupError: If the startup load failed and
                ``error_on_setup_failure`` is set
        """
        if not self.context.active:
            logger.info(
                f"Skipping fixtures because environment {self.context.environment!r} "
                f"is not in {self.settings.environments!r}"
            )
            return None

        if not self.settings.load_fixtures_on_startup:
            return None

        logger.info(f"Loading fixtures on startup from {self.context.fixtures_dir}")
        try:
            report = await self.loader.load_many(ALL)
        except FixtureError as e:
            logger.error(f"Error when loading fixtures on startup: {e}")
            if self.settings.error_on_setup_failure:
                raise FixtureSetupError("Failed to load fixtures on startup", {"*": e}) from e
            return None

        if not report.ok:
            logger.error(f"Error when loading fixtures on startup: {list(report.failures)}")
            if self.settings.error_on_setup_failure:
                report.raise_for_failures("Failed to load fixtures on startup")
        return report

    async def setup_fixtures(self, selection: SelectionArg = None) -> LoadReport:
        """
        Load the selected fixtures, or all of them.

        Raises:
            FixtureSetupError: On any failure, if ``error_on_setup_failure`` is set
        """
        parsed = parse_selection(selection)
        if isinstance(parsed, All):
            logger.info("Loading all fixtures in folder")
        else:
            logger.info(f"Loading following fixtures: {list(parsed.names)}")

        try:
            report = await self.loader.load_many(parsed)
        except FixtureError as e:
            report = LoadReport(failures={"*": e})

        if not report.ok:
            logger.error(
                "Fixtures failed to load: "
                + "; ".join(f"{name}: {error.message}" for name, error in report.failures.items())
            )
            if self.settings.error_on_setup_failure:
                report.raise_for_failures()
        return report

    async def teardown_fixtures(self, selection: SelectionArg = None) -> TeardownReport:
        """Re-synchronize the selected models on every data source; never raises."""
        parsed = parse_selection(selection)
        report = await self.coordinator.teardown(parsed)
        logger.info(
            f"Fixture teardown finished: {len(report.migrated)} migrated, "
            f"{len(report.failures)} failed"
        )
        return report


def install_operations(app: FastAPI, controller: FixtureController) -> None:
    """Expose the controller's operations on the app and over HTTP."""
    from fixturekit.api.handlers import fixture_error_handler
    from fixturekit.api.routes import fixtures_router

    app.state.fixtures = controller
    app.state.setup_fixtures = controller.setup_fixtures
    app.state.teardown_fixtures = controller.teardown_fixtures

    app.include_router(fixtures_router, prefix=controller.settings.route_prefix)
    app.add_exception_handler(FixtureError, fixture_error_handler)


def init_fixtures(
    app: FastAPI,
    models: ModelRegistry | Mapping[str, Any],
    data_sources: DataSourceRegistry | Mapping[str, Any],
    options: Settings | Mapping[str, Any] | None = None,
) -> FixtureController:
    """
    Attach fixture support to a FastAPI application.

    Installs the operations immediately and runs the startup load when the
    application's lifespan starts; a startup failure with
    ``error_on_setup_failure`` aborts startup.
    """
    controller = FixtureController.build(models, data_sources, options, app=app)
    install_operations(app, controller)

    wrapped = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(app_: FastAPI) -> AsyncIterator[Any]:
        await controller.initialize()
        async with wrapped(app_) as state:
            yield state

    app.router.lifespan_context = lifespan
    return controller
