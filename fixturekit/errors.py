"""Exceptions raised by the fixtures component."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class FixtureError(Exception):
    """
    Base class for fixture errors.

    Attributes:
        message: Human readable message
        name: Fixture, model or data source the error refers to
        details: Additional error details for the HTTP error payload
        error_type: Machine readable error type
        status_code: HTTP status used when the error reaches the API
    """

    error_type = "fixture_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.name = name
        self.details = details or {}

    def to_details(self) -> dict[str, Any]:
        """Serializable summary of the error."""
        data: dict[str, Any] = {"type": self.error_type, "message": self.message}
        if self.name is not None:
            data["name"] = self.name
        if self.details:
            data.update(self.details)
        return data


class FilesystemError(FixtureError):
    """The fixtures directory or a fixture file could not be read."""

    error_type = "filesystem_error"


class ParseError(FixtureError):
    """A fixture file does not hold an object or an array of objects."""

    error_type = "parse_error"
    status_code = 422


class NotFoundError(FixtureError):
    """A fixture or model does not exist."""

    error_type = "not_found"
    status_code = 404


class FixtureNotFoundError(NotFoundError):
    """No fixture file exists for the requested name."""

    error_type = "fixture_not_found"


class ModelNotFoundError(NotFoundError):
    """No model is registered under the fixture's name."""

    error_type = "model_not_found"


class InsertError(FixtureError):
    """The model's bulk-create operation rejected the records."""

    error_type = "insert_error"


class MigrationError(FixtureError):
    """A data source's auto-migrate operation failed."""

    error_type = "migration_error"


class FixtureSetupError(FixtureError):
    """One or more fixtures failed to load."""

    error_type = "fixture_setup_failed"

    def __init__(self, message: str, failures: Mapping[str, FixtureError]):
        super().__init__(message)
        self.failures = dict(failures)
        self.details = {
            "failures": [
                {"fixture": name, **error.to_details()}
                for name, error in self.failures.items()
            ]
        }
