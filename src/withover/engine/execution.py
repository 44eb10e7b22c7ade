"""Execution helpers for running compiled SQL."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from ..config import EngineConfig
from ..sql.compiled import CompiledSQL
from ..utils.exceptions import ExecutionError, QueryTimeoutError
from .connection import ConnectionManager

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl

logger = logging.getLogger(__name__)

# Optional performance monitoring hooks
_perf_hooks: dict[str, list[Callable[[str, float, dict[str, Any]], None]]] = {
    "query_start": [],
    "query_end": [],
}

# Type alias for result rows - can be records, pandas DataFrame, or polars DataFrame
if TYPE_CHECKING:
    ResultRows = Union[
        List[dict[str, object]],
        "pd.DataFrame",
        "pl.DataFrame",
    ]
else:
    ResultRows = Any


@dataclass
class QueryResult:
    rows: ResultRows
    rowcount: Optional[int]


class QueryExecutor:
    """Run :class:`CompiledSQL` statements through the driver."""

    def __init__(self, connection_manager: ConnectionManager, config: EngineConfig):
        self._connections = connection_manager
        self._config = config

    def fetch(self, compiled: CompiledSQL, format: Optional[str] = None) -> QueryResult:  # noqa: A002
        """Execute a compiled SELECT and return its rows.

        The SQL is handed to the DBAPI cursor as-is, with the positional
        parameters in placeholder order.

        Args:
            compiled: SQL text and positional parameters
            format: Override for the configured fetch format

        Returns:
            QueryResult containing rows and rowcount

        Raises:
            ExecutionError: If SQL execution fails
            QueryTimeoutError: If the driver reports a timeout
        """
        sql, params = compiled.sql, compiled.params
        logger.debug("Executing query: %s params=%r", sql, params)

        start_time = time.perf_counter()
        _call_hooks("query_start", sql, 0.0, {"params": params})

        try:
            with self._connections.connect() as conn:
                if self._config.query_timeout is not None:
                    conn = conn.execution_options(timeout=self._config.query_timeout)
                result = conn.exec_driver_sql(sql, params)
                rows = result.fetchall()
                columns = list(result.keys())
        except SQLAlchemyError as exc:
            elapsed = time.perf_counter() - start_time
            logger.error("SQL execution failed after %.3f seconds: %s", elapsed, exc, exc_info=True)
            _call_hooks("query_end", sql, elapsed, {"error": str(exc), "params": params})
            error_str = str(exc).lower()
            sql_preview = sql[:500] + "..." if len(sql) > 500 else sql
            if "timeout" in error_str or "timed out" in error_str:
                raise QueryTimeoutError(
                    f"Query exceeded timeout: {exc}\nSQL query: {sql_preview}",
                    timeout=self._config.query_timeout,
                ) from exc
            raise ExecutionError(
                f"SQL execution failed: {exc}\nSQL query: {sql_preview}",
                context={"sql": sql, "params": params, "elapsed_seconds": elapsed},
            ) from exc

        payload = self._format_rows(rows, columns, format or self._config.fetch_format)
        elapsed = time.perf_counter() - start_time
        logger.debug("Query returned %d rows in %.3f seconds", len(rows), elapsed)
        _call_hooks("query_end", sql, elapsed, {"rowcount": len(rows), "params": params})
        return QueryResult(rows=payload, rowcount=len(rows))

    def _format_rows(
        self, rows: Sequence[Sequence[object]], columns: Sequence[str], fmt: str
    ) -> ResultRows:
        if fmt == "records":
            return [dict(zip(columns, row)) for row in rows]
        if fmt == "pandas":
            try:
                import pandas as pd
            except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError("Pandas support requested but pandas is not installed") from exc
            return pd.DataFrame([tuple(row) for row in rows], columns=list(columns))
        if fmt == "polars":
            try:
                import polars as pl
            except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError("Polars support requested but polars is not installed") from exc
            return pl.DataFrame([tuple(row) for row in rows], schema=list(columns), orient="row")
        raise ValueError(
            f"Unknown fetch format '{fmt}'. Supported formats: records, pandas, polars"
        )


def register_performance_hook(
    event: str, callback: Callable[[str, float, dict[str, Any]], None]
) -> None:
    """Register a performance monitoring hook.

    Args:
        event: Event type - "query_start" or "query_end"
        callback: Callback function that receives (sql, elapsed_time, metadata)

    Example:
        >>> def log_slow_queries(sql: str, elapsed: float, metadata: dict):
        ...     if elapsed > 1.0:
        ...         print(f"Slow query ({elapsed:.2f}s): {sql[:100]}")
        >>> register_performance_hook("query_end", log_slow_queries)
    """
    if event not in _perf_hooks:
        raise ValueError(f"Unknown event type: {event}. Valid events: {list(_perf_hooks.keys())}")
    _perf_hooks[event].append(callback)


def unregister_performance_hook(
    event: str, callback: Callable[[str, float, dict[str, Any]], None]
) -> None:
    if event in _perf_hooks and callback in _perf_hooks[event]:
        _perf_hooks[event].remove(callback)


def _call_hooks(event: str, sql: str, elapsed: float, metadata: dict[str, Any]) -> None:
    for hook in _perf_hooks.get(event, []):
        try:
            hook(sql, elapsed, metadata)
        except Exception as exc:
            logger.warning("Performance hook failed: %s", exc, exc_info=True)
