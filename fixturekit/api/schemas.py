"""Pydantic schemas for the fixtures API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from fixturekit.services.loader import LoadReport
from fixturekit.services.teardown import TeardownReport

# ============================================================================
# Base Response Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict | None = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status: healthy or unhealthy")
    version: str = Field(..., description="Application version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")


# ============================================================================
# Fixture Schemas
# ============================================================================


class FixtureFailure(BaseModel):
    """A fixture that failed to load."""

    fixture: str = Field(..., description="Fixture name ('*' when listing failed)")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")


class MigrationFailureSchema(BaseModel):
    """A data source that failed to re-synchronize."""

    data_source: str = Field(..., description="Data source name")
    models: list[str] | None = Field(default=None, description="Models being migrated, None for all")
    message: str = Field(..., description="Error message")


class SetupResponse(BaseModel):
    """Response of GET /setup."""

    fixtures: str = Field(..., description="Status message")
    loaded: dict[str, int] = Field(default_factory=dict, description="Records created per fixture")
    failures: list[FixtureFailure] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: LoadReport) -> SetupResponse:
        return cls(
            fixtures=report.message,
            loaded=report.loaded,
            failures=[
                FixtureFailure(fixture=name, error=error.error_type, message=error.message)
                for name, error in report.failures.items()
            ],
        )


class TeardownResponse(BaseModel):
    """Response of GET /teardown. ``fixtures`` is always "teardown complete"."""

    fixtures: str = Field(..., description="Status message")
    migrated: dict[str, list[str] | None] = Field(
        default_factory=dict,
        description="Models re-synchronized per data source, None meaning all",
    )
    skipped: list[str] = Field(default_factory=list, description="Data sources with no matching models")
    failures: list[MigrationFailureSchema] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: TeardownReport) -> TeardownResponse:
        return cls(
            fixtures=report.message,
            migrated=report.migrated,
            skipped=report.skipped,
            failures=[
                MigrationFailureSchema(
                    data_source=failure.data_source,
                    models=failure.models,
                    message=failure.error.message,
                )
                for failure in report.failures
            ],
        )
