"""Database handle returned by :func:`withover.connect`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from .config import WithoverConfig
from .engine.connection import ConnectionManager
from .engine.dialects import DialectSpec, get_dialect
from .engine.execution import QueryExecutor, QueryResult
from .sql.compiled import CompiledSQL

if TYPE_CHECKING:
    from .query.builder import Query

logger = logging.getLogger(__name__)


class Database:
    """Entry-point object returned by ``withover.connect``."""

    def __init__(self, config: WithoverConfig):
        self.config = config
        self._connections = ConnectionManager(config.engine)
        self._executor = QueryExecutor(self._connections, config.engine)
        self._dialect = get_dialect(self._dialect_name)
        self._closed = False

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connections

    @property
    def executor(self) -> QueryExecutor:
        return self._executor

    @property
    def dialect(self) -> DialectSpec:
        return self._dialect

    def table(self, name: str) -> "Query":
        """Start a query over the relation ``name`` bound to this database."""
        from .query.builder import table

        return table(name, database=self)

    def with_cte(self, name: str, query: "Query", columns: Sequence[str] = ()) -> "Query":
        """Start a query that declares ``query`` as the CTE ``name``."""
        from .query.builder import with_cte

        return with_cte(name, query, columns, database=self)

    def execute(self, compiled: CompiledSQL, format: Optional[str] = None) -> QueryResult:  # noqa: A002
        """Run an already compiled statement and return its rows."""
        if self._closed:
            raise RuntimeError("Cannot execute on a closed Database")
        return self._executor.fetch(compiled, format=format)

    def close(self) -> None:
        """Dispose of the engine. The Database should not be used afterwards."""
        if self._closed:
            return
        self._connections.close()
        self._closed = True
        logger.debug("Closed database handle")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----------------------------------------------------------------- internals
    @property
    def _dialect_name(self) -> str:
        if self.config.engine.dialect:
            return self.config.engine.dialect
        # Extract dialect from DSN, normalizing driver variants (e.g., "mysql+pymysql" -> "mysql")
        dsn = self.config.engine.dsn
        if not dsn:
            return "ansi"
        return dsn.split(":", 1)[0].split("+", 1)[0]
