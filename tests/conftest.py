"""Pytest fixtures for the fixturekit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from fixturekit.lifecycle import FixtureController, init_fixtures
from fixturekit.registry import DataSourceRegistry, ModelRegistry
from tests.fixtures import FakeDataSource, FakeModel, copy_fixtures

# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove fixture-related variables from the process environment."""
    for variable in (
        "APP_ENV",
        "FIXTURES_ENVIRONMENTS",
        "FIXTURES_LOAD_FIXTURES_ON_STARTUP",
        "FIXTURES_ERROR_ON_SETUP_FAILURE",
        "FIXTURES_FIXTURES_PATH",
        "FIXTURES_APP_ROOT",
        "FIXTURES_ROUTE_PREFIX",
    ):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.setenv("APP_ENV", "test")


# =============================================================================
# Fixture Files
# =============================================================================


@pytest.fixture
def app_root(tmp_path) -> Path:
    """Application root holding the sample fixtures under the default path."""
    copy_fixtures(tmp_path / "server" / "test-fixtures")
    return tmp_path


@pytest.fixture
def fixtures_dir(app_root) -> Path:
    """The directory the store reads from."""
    return app_root / "server" / "test-fixtures"


@pytest.fixture
def options(app_root) -> dict[str, Any]:
    """Default component options pointing at the temporary app root."""
    return {"app_root": app_root}


# =============================================================================
# Registries
# =============================================================================


@pytest.fixture
def fake_models() -> dict[str, FakeModel]:
    """One fake model per sample fixture."""
    return {name: FakeModel(name) for name in ("users", "Widgets", "orders")}


@pytest.fixture
def model_registry(fake_models) -> ModelRegistry:
    return ModelRegistry(fake_models)


@pytest.fixture
def fake_data_source(fake_models) -> FakeDataSource:
    return FakeDataSource("db", fake_models)


@pytest.fixture
def data_source_registry(fake_data_source) -> DataSourceRegistry:
    return DataSourceRegistry([fake_data_source])


@pytest.fixture
def make_controller(model_registry, data_source_registry, options):
    """Factory building a controller with option overrides."""

    def _make(app: FastAPI | None = None, **overrides: Any) -> FixtureController:
        return FixtureController.build(
            model_registry,
            data_source_registry,
            {**options, **overrides},
            app=app,
        )

    return _make


@pytest.fixture
def controller(make_controller) -> FixtureController:
    return make_controller()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest.fixture
def make_app(model_registry, data_source_registry, options):
    """Factory building a FastAPI app with fixtures installed."""

    def _make(**overrides: Any) -> FastAPI:
        app = FastAPI()
        init_fixtures(app, model_registry, data_source_registry, {**options, **overrides})
        return app

    return _make


@pytest.fixture
def app(make_app) -> FastAPI:
    return make_app()


@pytest.fixture
async def client(app):
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
