"""Compile logical plans into SQL using SQLAlchemy Core API."""

from __future__ import annotations

import logging
from typing import Any, Union

from sqlalchemy import literal_column, select, table
from sqlalchemy.sql import Select

from ..engine.dialects import DialectSpec, resolve_dialect
from ..logical.plan import Filter, Limit, LogicalPlan, Project, Sort, TableScan
from ..utils.exceptions import CompilationError, ConfigurationError
from .builders import check_alignment
from .compiled import CompiledSQL
from .expression_compiler import ExpressionCompiler

logger = logging.getLogger(__name__)


def compile_plan(plan: LogicalPlan, dialect: Union[str, DialectSpec, None] = None) -> Select:
    """Compile a logical plan to a SQLAlchemy Select statement.

    Args:
        plan: Logical plan to compile
        dialect: SQL dialect specification

    Returns:
        SQLAlchemy Select statement
    """
    compiler = SQLCompiler(resolve_dialect(dialect))
    return compiler.compile(plan)


def compile_statement(
    plan: LogicalPlan, dialect: Union[str, DialectSpec, None] = None
) -> CompiledSQL:
    """Compile a logical plan to single-line SQL text and positional parameters.

    The statement is compiled against the dialect's SQLAlchemy dialect with a
    positional paramstyle, so parameters come back in the order SQLAlchemy
    emitted their placeholders.
    """
    spec = resolve_dialect(dialect)
    stmt = compile_plan(plan, spec)
    compiled = stmt.compile(
        dialect=spec.sqlalchemy_dialect(),
        compile_kwargs={"render_postcompile": True},
    )
    values = compiled.params
    params = tuple(values[name] for name in (compiled.positiontup or ()))
    # SQLAlchemy breaks clauses onto new lines and already pads them with spaces
    sql = compiled.string.replace("\n", "")
    check_alignment(sql, params, spec.placeholder)
    logger.debug("Compiled statement: %s params=%r", sql, params)
    return CompiledSQL(sql=sql, params=params)


class SQLCompiler:
    """Main entry point for compiling logical plans to SQLAlchemy Select statements."""

    def __init__(self, dialect: DialectSpec):
        self.dialect = dialect
        self._expr = ExpressionCompiler(dialect)

    def compile(self, plan: LogicalPlan) -> Select:
        """Compile a logical plan to a SQLAlchemy Select statement."""
        return self._compile_plan(plan)

    def _has_projection(self, plan: LogicalPlan) -> bool:
        # Filters and sorts keep the scan's SELECT list; projections and limits fix it
        if isinstance(plan, (Project, Limit)):
            return True
        if isinstance(plan, (Filter, Sort)):
            return self._has_projection(plan.child)
        return False

    def _compile_child(self, child: LogicalPlan) -> Select:
        # A WHERE, ORDER BY or LIMIT added to a limited SELECT must apply after its LIMIT
        stmt = self._compile_plan(child)
        if isinstance(child, Limit):
            return select(literal_column("*")).select_from(stmt.subquery())
        return stmt

    def _compile_plan(self, plan: LogicalPlan) -> Select:
        if isinstance(plan, TableScan):
            sa_table = table(plan.table)
            if plan.alias:
                sa_table = sa_table.alias(plan.alias)  # type: ignore[assignment]
            # table() objects carry no column metadata, so select * explicitly
            stmt: Select[Any] = select(literal_column("*")).select_from(sa_table)
            return stmt

        if isinstance(plan, Project):
            child_stmt = self._compile_plan(plan.child)
            columns = [self._expr.compile_expr(column) for column in plan.projections]
            if not columns:
                raise ConfigurationError("select() requires at least one column")
            if self._has_projection(plan.child):
                return select(*columns).select_from(child_stmt.subquery())
            return child_stmt.with_only_columns(*columns)

        if isinstance(plan, Filter):
            if any(node.op == "window" for node in plan.predicate.walk()):
                raise ConfigurationError(
                    "Window functions cannot be used in a WHERE predicate",
                    suggestion=(
                        "Project the window expression inside a CTE and filter on its "
                        "alias with select_from_cte()."
                    ),
                )
            child_stmt = self._compile_child(plan.child)
            predicate = self._expr.compile_expr(plan.predicate)
            return child_stmt.where(predicate)

        if isinstance(plan, Limit):
            child_stmt = self._compile_child(plan.child)
            stmt = child_stmt.limit(plan.count)
            if plan.offset:
                stmt = stmt.offset(plan.offset)
            return stmt

        if isinstance(plan, Sort):
            child_stmt = self._compile_child(plan.child)
            order_by_clauses = []
            for order in plan.orders:
                expr = self._expr.compile_expr(order.expression)
                if order.descending:
                    expr = expr.desc()
                else:
                    expr = expr.asc()
                order_by_clauses.append(expr)
            return child_stmt.order_by(*order_by_clauses)

        raise CompilationError(
            f"Unsupported logical plan node: {type(plan).__name__}",
            context={"plan": repr(plan)},
        )
