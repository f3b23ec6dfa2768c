"""Sample fixture files and helpers for the fixturekit tests."""

from tests.fixtures.fakes import FakeDataSource, FakeModel
from tests.fixtures.loader import (
    FIXTURES_DIR,
    copy_fixtures,
    list_fixtures,
    load_fixture,
    write_fixture,
    write_raw_fixture,
)

__all__ = [
    "FakeDataSource",
    "FakeModel",
    "FIXTURES_DIR",
    "copy_fixtures",
    "list_fixtures",
    "load_fixture",
    "write_fixture",
    "write_raw_fixture",
]
