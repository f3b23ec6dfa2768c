"""FastAPI routes for fixture setup and teardown."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request

from fixturekit.api.schemas import ErrorResponse, SetupResponse, TeardownResponse
from fixturekit.lifecycle import FixtureController

logger = logging.getLogger(__name__)

fixtures_router = APIRouter(tags=["fixtures"])

SELECT_DESCRIPTION = "Comma-separated fixture names; omit to select every fixture"


def get_controller(request: Request) -> FixtureController:
    """Controller installed on the application by ``install_operations``."""
    return request.app.state.fixtures


@fixtures_router.get(
    "/setup",
    response_model=SetupResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Setup fixtures",
)
async def setup_fixtures(
    select: str | None = Query(default=None, description=SELECT_DESCRIPTION),
    controller: FixtureController = Depends(get_controller),
) -> SetupResponse:
    """
    Load fixtures into their models.

    Failures are only reported as an error when the component was
    configured with ``error_on_setup_failure``.
    """
    logger.debug(f"Setup requested with select={select!r}")
    report = await controller.setup_fixtures(select)
    return SetupResponse.from_report(report)


@fixtures_router.get(
    "/teardown",
    response_model=TeardownResponse,
    summary="Teardown fixtures",
)
async def teardown_fixtures(
    select: str | None = Query(default=None, description=SELECT_DESCRIPTION),
    controller: FixtureController = Depends(get_controller),
) -> TeardownResponse:
    """Empty the selected models on every data source (best-effort)."""
    logger.debug(f"Teardown requested with select={select!r}")
    report = await controller.teardown_fixtures(select)
    return TeardownResponse.from_report(report)
