"""Exception handlers for fixture errors."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from fixturekit.api.schemas import ErrorResponse
from fixturekit.errors import FixtureError

logger = logging.getLogger(__name__)


async def fixture_error_handler(_request: Request, exc: FixtureError) -> JSONResponse:
    """Render a ``FixtureError`` as an ``ErrorResponse``."""
    logger.warning(f"Fixture operation failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error_type,
            message=exc.message,
            details=exc.details or None,
        ).model_dump(),
    )
