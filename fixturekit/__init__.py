"""Load and tear down JSON fixtures for FastAPI + SQLAlchemy applications."""

__version__ = "0.1.0"

from fixturekit.config import Settings, get_settings
from fixturekit.errors import (
    FilesystemError,
    FixtureError,
    FixtureNotFoundError,
    FixtureSetupError,
    InsertError,
    MigrationError,
    ModelNotFoundError,
    NotFoundError,
    ParseError,
)
from fixturekit.lifecycle import (
    FixtureContext,
    FixtureController,
    init_fixtures,
    install_operations,
)
from fixturekit.registry import DataSourceRegistry, ModelRegistry
from fixturekit.selection import ALL, All, Named, Selection, parse_selection
from fixturekit.services import LoadReport, TeardownReport
from fixturekit.store import Fixture, FixtureStore

__all__ = [
    "ALL",
    "All",
    "DataSourceRegistry",
    "FilesystemError",
    "Fixture",
    "FixtureContext",
    "FixtureController",
    "FixtureError",
    "FixtureNotFoundError",
    "FixtureSetupError",
    "FixtureStore",
    "InsertError",
    "LoadReport",
    "MigrationError",
    "ModelNotFoundError",
    "ModelRegistry",
    "Named",
    "NotFoundError",
    "ParseError",
    "Selection",
    "Settings",
    "TeardownReport",
    "get_settings",
    "init_fixtures",
    "install_operations",
    "parse_selection",
]
