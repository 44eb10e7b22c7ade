"""SQLAlchemy connection helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

# Import duckdb_engine to register the dialect with SQLAlchemy
try:
    import duckdb_engine  # noqa: F401
except ImportError:
    pass

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import EngineConfig
from ..utils.exceptions import DatabaseConnectionError


class ConnectionManager:
    """Creates and caches SQLAlchemy engines for withover databases."""

    def __init__(self, config: EngineConfig):
        self.config = config
        self._engine: Engine | None = None
        self._owns_engine = config.engine is None

    def _create_engine(self) -> Engine:
        # If an engine is provided in config, use it directly
        if self.config.engine is not None:
            if not isinstance(self.config.engine, Engine):
                raise TypeError("config.engine must be a SQLAlchemy Engine")
            return self.config.engine

        if self.config.dsn is None:
            raise ValueError("Either 'dsn' or 'engine' must be provided in EngineConfig")

        try:
            return create_engine(self.config.dsn, echo=self.config.echo, future=self.config.future)
        except (SQLAlchemyError, ImportError) as exc:
            raise DatabaseConnectionError(
                f"Could not create an engine for {self.config.dsn!r}: {exc}",
                context={"dsn": self.config.dsn},
            ) from exc

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Get a database connection that commits on success.

        Yields:
            SQLAlchemy connection
        """
        with self.engine.begin() as connection:
            yield connection

    def close(self) -> None:
        """Dispose the engine if this manager created it."""
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
        self._engine = None
