"""HTTP interface for fixture setup and teardown."""

from fixturekit.api.handlers import fixture_error_handler
from fixturekit.api.routes import fixtures_router, get_controller

__all__ = [
    "fixture_error_handler",
    "fixtures_router",
    "get_controller",
]
