"""Unit tests for the fixtures HTTP endpoints."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient


class TestSetupEndpoint:
    """Tests for GET /fixtures/setup."""

    @pytest.mark.asyncio
    async def test_setup_all(self, client, fake_models):
        """
        Given fixture files for every model,
        When GET /fixtures/setup is called without a selection,
        Then every fixture is loaded and "setup complete" is returned.
        """
        response = await client.get("/fixtures/setup")

        assert response.status_code == 200
        data = response.json()
        assert data["fixtures"] == "setup complete"
        assert data["loaded"] == {"Widgets": 1, "orders": 3, "users": 2}
        assert data["failures"] == []
        assert len(fake_models["users"].rows) == 2

    @pytest.mark.asyncio
    async def test_setup_selection(self, client, fake_models):
        response = await client.get("/fixtures/setup", params={"select": "users,orders"})

        assert response.status_code == 200
        assert set(response.json()["loaded"]) == {"users", "orders"}
        assert fake_models["Widgets"].calls == 0

    @pytest.mark.asyncio
    async def test_setup_empty_selection_loads_all(self, client):
        response = await client.get("/fixtures/setup?select=")

        assert response.status_code == 200
        assert len(response.json()["loaded"]) == 3

    @pytest.mark.asyncio
    async def test_setup_failure_swallowed_by_default(self, client, fake_models):
        fake_models["orders"].error = RuntimeError("insert rejected")

        response = await client.get("/fixtures/setup")

        assert response.status_code == 200
        data = response.json()
        assert data["fixtures"] == "setup complete"
        assert data["failures"][0]["fixture"] == "orders"
        assert data["failures"][0]["error"] == "insert_error"

    @pytest.mark.asyncio
    async def test_undecodable_fixture_still_completes(self, client, fixtures_dir):
        (fixtures_dir / "users.json").write_bytes(b'[{"name": "\xff\xfe"}]')

        response = await client.get("/fixtures/setup", params={"select": "users"})

        assert response.status_code == 200
        data = response.json()
        assert data["fixtures"] == "setup complete"
        assert data["failures"][0]["fixture"] == "users"
        assert data["failures"][0]["error"] == "parse_error"

    @pytest.mark.asyncio
    async def test_setup_failure_returns_error_when_configured(self, make_app, fake_models):
        """
        Given error_on_setup_failure is enabled,
        When a fixture fails to load,
        Then an error payload is returned instead of "setup complete".
        """
        fake_models["orders"].error = RuntimeError("insert rejected")
        app = make_app(error_on_setup_failure=True)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/fixtures/setup")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "fixture_setup_failed"
        assert data["details"]["failures"][0]["fixture"] == "orders"


class TestTeardownEndpoint:
    """Tests for GET /fixtures/teardown."""

    @pytest.mark.asyncio
    async def test_teardown_all(self, client, fake_data_source):
        await client.get("/fixtures/setup")

        response = await client.get("/fixtures/teardown")

        assert response.status_code == 200
        data = response.json()
        assert data["fixtures"] == "teardown complete"
        assert data["migrated"] == {"db": None}
        assert all(model.rows == [] for model in fake_data_source.models.values())

    @pytest.mark.asyncio
    async def test_teardown_selection(self, client, fake_data_source):
        response = await client.get("/fixtures/teardown", params={"select": "USERS"})

        assert response.json()["migrated"] == {"db": ["users"]}
        assert fake_data_source.migrations == [["users"]]

    @pytest.mark.asyncio
    async def test_teardown_failure_still_completes(self, client, fake_data_source):
        """
        Given a data source whose migration fails,
        When GET /fixtures/teardown is called,
        Then "teardown complete" is returned with the failure listed.
        """
        fake_data_source.error = RuntimeError("cannot drop table")

        response = await client.get("/fixtures/teardown")

        assert response.status_code == 200
        data = response.json()
        assert data["fixtures"] == "teardown complete"
        assert data["failures"][0]["data_source"] == "db"
        assert "cannot drop table" in data["failures"][0]["message"]


@pytest.mark.asyncio
async def test_custom_route_prefix(make_app):
    app = make_app(route_prefix="/api/Fixtures")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/Fixtures/setup", params={"select": "Widgets"})

    assert response.status_code == 200
    assert response.json()["loaded"] == {"Widgets": 1}
