"""Fixture setup and teardown services."""

from fixturekit.services.loader import SETUP_COMPLETE, FixtureLoader, LoadReport
from fixturekit.services.teardown import (
    TEARDOWN_COMPLETE,
    MigrationFailure,
    TeardownCoordinator,
    TeardownReport,
)

__all__ = [
    "FixtureLoader",
    "LoadReport",
    "MigrationFailure",
    "SETUP_COMPLETE",
    "TEARDOWN_COMPLETE",
    "TeardownCoordinator",
    "TeardownReport",
]
