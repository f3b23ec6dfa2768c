"""Registries of host models and data sources."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from fixturekit.errors import ModelNotFoundError


@runtime_checkable
class ModelHandle(Protocol):
    """A model that can bulk-insert records."""

    name: str

    async def bulk_create(self, records: Sequence[Mapping[str, Any]]) -> int:
        """Insert the records and return how many were created."""
        ...


@runtime_checkable
class DataSourceHandle(Protocol):
    """A data source whose models can be dropped and recreated."""

    name: str

    def model_names(self) -> list[str]:
        """Names of the models attached to this data source."""
        ...

    async def automigrate(self, model_names: Sequence[str] | None = None) -> None:
        """Re-synchronize the named models, or every model when ``None``."""
        ...


def casefold_matches(name: str, candidates: Iterable[str]) -> list[str]:
    """Return every candidate equal to ``name`` ignoring case, in candidate order."""
    folded = name.casefold()
    return [candidate for candidate in candidates if candidate.casefold() == folded]


class ModelRegistry(Mapping[str, ModelHandle]):
    """Models keyed by name, with case-insensitive lookup."""

    def __init__(self, models: Iterable[ModelHandle] | Mapping[str, ModelHandle] = ()):
        self._models: dict[str, ModelHandle] = {}
        if isinstance(models, Mapping):
            for name, model in models.items():
                self.register(model, name=name)
        else:
            for model in models:
                self.register(model)

    def register(self, model: ModelHandle, name: str | None = None) -> None:
        """Register a model under ``name`` (defaults to ``model.name``)."""
        self._models[name or model.name] = model

    def __getitem__(self, name: str) -> ModelHandle:
        return self._models[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def lookup(self, name: str) -> ModelHandle:
        """
        Find the model for a fixture name.

        An exact match wins. Otherwise a single case-insensitive match is
        accepted; several case-insensitive matches are ambiguous.

        Raises:
            ModelNotFoundError: If no unambiguous model matches
        """
        if name in self._models:
            return self._models[name]

        matches = casefold_matches(name, self._models)
        if len(matches) == 1:
            return self._models[matches[0]]
        if matches:
            raise ModelNotFoundError(
                f"Model name {name!r} is ambiguous: {', '.join(matches)}",
                name=name,
                details={"candidates": matches},
            )
        raise ModelNotFoundError(f"No model registered for fixture {name!r}", name=name)


class DataSourceRegistry(Mapping[str, DataSourceHandle]):
    """Data sources keyed by name."""

    def __init__(
        self,
        data_sources: Iterable[DataSourceHandle] | Mapping[str, DataSourceHandle] = (),
    ):
        self._sources: dict[str, DataSourceHandle] = {}
        if isinstance(data_sources, Mapping):
            for name, source in data_sources.items():
                self.register(source, name=name)
        else:
            for source in data_sources:
                self.register(source)

    def register(self, source: DataSourceHandle, name: str | None = None) -> None:
        self._sources[name or source.name] = source

    def __getitem__(self, name: str) -> DataSourceHandle:
        return self._sources[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def resolve_models(self, name: str, model_names: Iterable[str]) -> list[str]:
        """
        Match requested model names against one data source.

        Args:
            name: Data source name
            model_names: Requested names, in any casing

        Returns:
            The data source's own model names that match, without duplicates
        """
        available = self._sources[name].model_names()
        resolved: list[str] = []
        for requested in model_names:
            for match in casefold_matches(requested, available):
                if match not in resolved:
                    resolved.append(match)
        return resolved
