"""Immutable query builder that composes CTEs, window projections and filters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from ..engine.dialects import DialectSpec, resolve_dialect
from ..expressions.column import Column, to_column
from ..logical import operators
from ..logical.plan import LogicalPlan
from ..sql.builders import validate_relation_name
from ..sql.compiled import CompiledSQL, CompileResult
from ..sql.compiler import compile_statement
from ..sql.cte_compiler import ComposedQuery, NamedSubquery
from ..utils.exceptions import ConfigurationError, WithoverError

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CTEDefinition:
    """A sub-query declared under ``name`` on a :class:`Query`."""

    name: str
    query: "Query"
    columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class Query:
    """Lazy, immutable query.

    Every builder method returns a new :class:`Query`; nothing is compiled
    until :meth:`compile`, :meth:`to_sql` or :meth:`collect` is called.

    Example:
        >>> ranked = table("users").select(
        ...     col("*"),
        ...     F.row_number().over(partition_by="unionid", order_by=col("created_at").desc()).alias("rn"),
        ... )
        >>> query = with_cte("ranked", ranked).select_from_cte("ranked").where(col("rn") == 1)
        >>> query.to_sql()
    """

    plan: Optional[LogicalPlan] = None
    ctes: tuple[CTEDefinition, ...] = ()
    database: Optional["Database"] = None

    # ----------------------------------------------------------------- builders
    def _with_plan(self, plan: LogicalPlan) -> "Query":
        return replace(self, plan=plan)

    def _require_plan(self, operation: str) -> LogicalPlan:
        if self.plan is None:
            raise ConfigurationError(
                f"Cannot apply {operation}() before choosing a base query",
                context={"operation": operation},
            )
        return self.plan

    def select(self, *columns: Union[Column, str]) -> "Query":
        """Replace the projection list. Strings name columns; ``"*"`` selects all."""
        plan = self._require_plan("select")
        if not columns:
            return self
        return self._with_plan(operators.project(plan, [to_column(c) for c in columns]))

    def where(self, predicate: Column) -> "Query":
        plan = self._require_plan("where")
        return self._with_plan(operators.filter(plan, predicate))

    filter = where

    def order_by(self, *columns: Union[Column, str]) -> "Query":
        plan = self._require_plan("order_by")
        orders = []
        for column in columns:
            column = to_column(column)
            if column.op == "sort_desc":
                orders.append(operators.sort_order(column.args[0], descending=True))
            elif column.op == "sort_asc":
                orders.append(operators.sort_order(column.args[0]))
            else:
                orders.append(operators.sort_order(column))
        return self._with_plan(operators.order_by(plan, orders))

    orderBy = order_by

    def limit(self, count: int, offset: int = 0) -> "Query":
        plan = self._require_plan("limit")
        if count < 0 or offset < 0:
            raise ConfigurationError(
                "limit() count and offset must be non-negative",
                context={"count": count, "offset": offset},
            )
        return self._with_plan(operators.limit(plan, count, offset))

    def with_cte(self, name: str, query: "Query", columns: Sequence[str] = ()) -> "Query":
        """Declare ``query`` as a CTE called ``name`` on this query.

        CTEs keep their declaration order. Names are checked when the query is
        compiled, so declaring the same name twice fails at :meth:`compile`.
        """
        validate_relation_name(name, "CTE")
        definition = CTEDefinition(name=name, query=query, columns=tuple(columns))
        return replace(self, ctes=self.ctes + (definition,))

    withCTE = with_cte

    def select_from_cte(self, name: str) -> "Query":
        """Read from the CTE ``name`` instead of the current relation.

        Operators already applied (filters, projections, ordering) are kept and
        now apply to the CTE.
        """
        validate_relation_name(name, "CTE")
        if self.plan is None:
            return self._with_plan(operators.scan(name))
        return self._with_plan(operators.retarget(self.plan, name))

    # ---------------------------------------------------------------- compiling
    def _resolve_dialect(self, dialect: Union[str, DialectSpec, None]) -> DialectSpec:
        if dialect is None and self.database is not None:
            return self.database.dialect
        return resolve_dialect(dialect)

    def compose(self, dialect: Union[str, DialectSpec, None] = None) -> ComposedQuery:
        """Compile each CTE body and the base statement separately."""
        spec = self._resolve_dialect(dialect)
        ctes = tuple(
            NamedSubquery.from_compiled(cte.name, cte.query.compile(spec), cte.columns)
            for cte in self.ctes
        )
        if self.plan is None:
            base = CompiledSQL(sql="")
        else:
            base = compile_statement(self.plan, spec)
        return ComposedQuery(ctes=ctes, base_sql=base.sql, base_params=base.params, dialect=spec)

    def compile(self, dialect: Union[str, DialectSpec, None] = None) -> CompiledSQL:
        """Compile to a single statement plus its positional parameters.

        Raises:
            ConfigurationError: If the query has no base relation, a CTE name is
                repeated or invalid, or a window/frame specification is invalid
            CompilationError: If placeholders and parameters disagree
        """
        compiled = self.compose(dialect).compile()
        logger.debug("Compiled query with %d CTE(s): %s", len(self.ctes), compiled.sql)
        return compiled

    def try_compile(self, dialect: Union[str, DialectSpec, None] = None) -> CompileResult:
        """Like :meth:`compile`, but report failures in the result instead of raising."""
        try:
            return CompileResult(compiled=self.compile(dialect))
        except WithoverError as exc:
            return CompileResult(error=exc)

    def to_sql(self, dialect: Union[str, DialectSpec, None] = None) -> str:
        return self.compile(dialect).sql

    toSQL = to_sql

    # ---------------------------------------------------------------- execution
    def collect(self, format: Optional[str] = None) -> Any:  # noqa: A002
        """Execute the query on the attached :class:`Database`.

        Args:
            format: ``"records"`` (list of dicts), ``"pandas"`` or ``"polars"``;
                defaults to the database's configured fetch format

        Raises:
            RuntimeError: If the query is not bound to a :class:`Database`
        """
        if self.database is None:
            raise RuntimeError("Cannot collect a query without an attached Database")
        result = self.database.execute(self.compile(), format=format)
        return result.rows


def table(name: str, database: Optional["Database"] = None) -> Query:
    """Start a query that reads every column of the relation ``name``."""
    validate_relation_name(name, "table")
    return Query(plan=operators.scan(name), database=database)


def with_cte(
    name: str,
    query: Query,
    columns: Sequence[str] = (),
    database: Optional["Database"] = None,
) -> Query:
    """Start a query that declares one CTE and has no base relation yet.

    Follow with :meth:`Query.select_from_cte` (or another ``with_cte``).
    """
    return Query(database=database or query.database).with_cte(name, query, columns)


def attach_ctes(
    ctes: Sequence[tuple[str, Query]],
    base_query: Query,
    dialect: Union[str, DialectSpec, None] = None,
) -> ComposedQuery:
    """Attach ``(name, query)`` pairs as CTEs in front of ``base_query``.

    Returns the :class:`ComposedQuery`; call ``.compile()`` for the SQL.
    """
    if not ctes:
        raise ConfigurationError("A WITH clause requires at least one CTE")
    composed = base_query
    for name, query in ctes:
        composed = composed.with_cte(name, query)
    return composed.compose(dialect)


