"""In-memory stand-ins for host models and data sources."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class FakeModel:
    """In-memory model handle recording every bulk create."""

    def __init__(self, name: str, error: Exception | None = None):
        self.name = name
        self.error = error
        self.rows: list[dict[str, Any]] = []
        self.calls = 0

    async def bulk_create(self, records: Sequence[dict[str, Any]]) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        self.rows.extend(dict(record) for record in records)
        return len(records)


class FakeDataSource:
    """Data source handle that empties its fake models on automigrate."""

    def __init__(
        self,
        name: str,
        models: dict[str, FakeModel],
        error: Exception | None = None,
        listing_error: Exception | None = None,
    ):
        self.name = name
        self.models = models
        self.error = error
        self.listing_error = listing_error
        self.migrations: list[list[str] | None] = []

    def model_names(self) -> list[str]:
        if self.listing_error is not None:
            raise self.listing_error
        return list(self.models)

    async def automigrate(self, model_names: Sequence[str] | None = None) -> None:
        self.migrations.append(None if model_names is None else list(model_names))
        if self.error is not None:
            raise self.error
        for name in model_names if model_names is not None else self.models:
            self.models[name].rows.clear()
