"""SQLAlchemy adapters for the model and data-source registries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Literal

from sqlalchemy import Connection, Table
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import sort_tables

from fixturekit.registry import DataSourceRegistry, ModelRegistry

logger = logging.getLogger(__name__)

ModelNaming = Literal["class", "table"]


def model_name(model: type, naming: ModelNaming = "class") -> str:
    """Registry name for a mapped class."""
    if naming == "table":
        return model.__table__.name
    return model.__name__


class SQLAlchemyModel:
    """Model handle that bulk-inserts records through an ORM session."""

    def __init__(
        self,
        model: type,
        session_factory: async_sessionmaker[AsyncSession],
        name: str | None = None,
    ):
        self.model = model
        self.session_factory = session_factory
        self.name = name or model.__name__

    async def bulk_create(self, records: Sequence[Mapping[str, Any]]) -> int:
        """Create one instance per record in a single transaction."""
        async with self.session_factory() as session, session.begin():
            session.add_all([self.model(**record) for record in records])
        return len(records)


class SQLAlchemyDataSource:
    """Data source handle backed by an async engine.

    ``automigrate`` drops and recreates the selected tables, which leaves
    them empty.
    """

    def __init__(self, name: str, engine: AsyncEngine, models: Mapping[str, type]):
        self.name = name
        self.engine = engine
        self.models = dict(models)

    def model_names(self) -> list[str]:
        return list(self.models)

    async def automigrate(self, model_names: Sequence[str] | None = None) -> None:
        names = list(self.models) if model_names is None else list(model_names)
        unknown = [name for name in names if name not in self.models]
        if unknown:
            raise KeyError(f"Models not attached to data source {self.name}: {unknown}")

        tables = [self.models[name].__table__ for name in names]
        async with self.engine.begin() as conn:
            await conn.run_sync(_recreate_tables, tables)
        logger.debug(f"Recreated tables {[t.name for t in tables]} on {self.name}")


def _recreate_tables(conn: Connection, tables: Iterable[Table]) -> None:
    ordered = sort_tables(tables)
    for table in reversed(ordered):
        table.drop(conn, checkfirst=True)
    for table in ordered:
        table.create(conn, checkfirst=True)


def create_engine_and_sessions(
    database_url: str,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an async engine and a session factory bound to it."""
    engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


def build_registries(
    base: type[DeclarativeBase],
    engine: AsyncEngine,
    data_source_name: str = "db",
    naming: ModelNaming = "class",
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> tuple[ModelRegistry, DataSourceRegistry]:
    """
    Build registries for every mapped class of a declarative base.

    Args:
        base: Declarative base whose mappers are registered
        engine: Engine used both for inserts and for re-synchronization
        data_source_name: Name of the single data source
        naming: Register models under their class name or their table name
        session_factory: Session factory to use instead of a new one

    Returns:
        tuple: (model registry, data source registry)
    """
    if session_factory is None:
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    mapped = {
        model_name(mapper.class_, naming): mapper.class_
        for mapper in base.registry.mappers
        if isinstance(getattr(mapper.class_, "__table__", None), Table)
    }

    models = ModelRegistry(
        {
            name: SQLAlchemyModel(cls, session_factory, name=name)
            for name, cls in mapped.items()
        }
    )
    data_sources = DataSourceRegistry(
        [SQLAlchemyDataSource(data_source_name, engine, mapped)]
    )
    logger.debug(f"Registered models {list(mapped)} on data source {data_source_name}")
    return models, data_sources
