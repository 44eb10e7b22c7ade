"""Compile window function expressions into SQL fragments.

The renderer walks the expression tree once. Column references become quoted
identifiers; literal values are handed to a ``bind`` callback which returns the
placeholder text and records the value, so parameter order always follows
emission order. Standalone compilation collects the values into a list; the
SQLAlchemy bridge in :mod:`withover.sql.expression_compiler` passes a callback
that registers them with SQLAlchemy's own compiler instead.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Union

from ..engine.dialects import DialectSpec, resolve_dialect
from ..expressions.column import Column
from ..expressions.window import WindowSpec
from ..utils.exceptions import CompilationError, ConfigurationError
from .builders import check_alignment, comma_separated, quote_identifier
from .compiled import CompiledSQL
from .frame import render_frame

logger = logging.getLogger(__name__)

Binder = Callable[[Any], str]

_BINARY_OPERATORS = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
    "eq": "=",
    "ne": "<>",
    "lt": "<",
    "le": "<=",
    "gt": ">",
    "ge": ">=",
    "and": "AND",
    "or": "OR",
}


class WindowCompiler:
    """Render expression trees, including ``OVER`` clauses, to SQL text."""

    def __init__(self, dialect: DialectSpec, bind: Binder):
        self.dialect = dialect
        self._bind = bind

    def render(self, expression: Column) -> str:
        if not isinstance(expression, Column):
            raise CompilationError(f"Expected Column expression, got {type(expression)}")
        op = expression.op

        if op == "column":
            return quote_identifier(expression.args[0], self.dialect.quote_char)
        if op == "star":
            return "*"
        if op == "literal":
            return self._bind(expression.args[0])
        if op == "call":
            name, arguments = expression.args
            return f"{name}({comma_separated(self.render(arg) for arg in arguments)})"
        if op == "window":
            function, spec = expression.args
            return self.render_window(function, spec)
        if op in _BINARY_OPERATORS:
            left, right = expression.args
            return f"({self.render(left)} {_BINARY_OPERATORS[op]} {self.render(right)})"
        if op == "not":
            return f"(NOT {self.render(expression.args[0])})"
        if op == "neg":
            return f"(-{self.render(expression.args[0])})"
        if op == "is_null":
            return f"({self.render(expression.args[0])} IS NULL)"
        if op == "is_not_null":
            return f"({self.render(expression.args[0])} IS NOT NULL)"
        if op in ("sort_asc", "sort_desc"):
            return self.render_order_item(expression)
        raise CompilationError(
            f"Unsupported expression in window clause: {op!r}",
            context={"op": op},
        )

    def render_order_item(self, expression: Column) -> str:
        # Direction is a literal suffix; an undecorated column keeps the default order
        if expression.op == "sort_asc":
            return f"{self.render(expression.args[0])} ASC"
        if expression.op == "sort_desc":
            return f"{self.render(expression.args[0])} DESC"
        return self.render(expression)

    def render_window(self, function: Column, spec: WindowSpec) -> str:
        if any(node.op == "window" for node in function.walk()):
            raise ConfigurationError(
                "Window functions cannot be nested inside another window function"
            )
        for column in spec.partition_by_cols:
            if column.op in ("sort_asc", "sort_desc"):
                raise ConfigurationError(
                    "PARTITION BY columns cannot carry a sort direction",
                    context={"column": repr(column.args[0])},
                    suggestion="Move .asc()/.desc() columns to order_by().",
                )
        sql = self.render(function) + " OVER ("
        if spec.partition_by_cols:
            sql += "PARTITION BY " + comma_separated(
                self.render(column) for column in spec.partition_by_cols
            )
        if spec.order_by_cols:
            if spec.partition_by_cols:
                sql += " "
            sql += "ORDER BY " + comma_separated(
                self.render_order_item(column) for column in spec.order_by_cols
            )
        if spec.frame_spec is not None:
            if spec.partition_by_cols or spec.order_by_cols:
                sql += " "
            sql += render_frame(spec.frame_spec)
        return sql + ")"


def compile_window(
    fn: Column,
    dialect: Union[str, DialectSpec, None] = None,
    *,
    include_alias: bool = False,
) -> CompiledSQL:
    """Compile a window function expression to ``(sql, params)``.

    Args:
        fn: A :class:`WindowFunctionExpr` (or any column expression containing one)
        dialect: Dialect name or spec; decides quoting and placeholder style
        include_alias: Append ``AS alias`` when the expression carries an alias

    Returns:
        :class:`CompiledSQL` whose parameters are the function arguments followed
        by any literals in the window clause, in placeholder order

    Example:
        >>> compile_window(F.row_number().over(partition_by="unionid"))
        CompiledSQL(sql='ROW_NUMBER() OVER (PARTITION BY "unionid")', params=())
    """
    spec = resolve_dialect(dialect)
    params: list[Any] = []

    def bind(value: Any) -> str:
        params.append(value)
        return spec.placeholder

    sql = WindowCompiler(spec, bind).render(fn)
    check_alignment(sql, params, spec.placeholder)
    if include_alias and fn.alias_name:
        sql = f"{sql} AS {spec.quote_relation(fn.alias_name)}"
    logger.debug("Compiled window expression: %s", sql)
    return CompiledSQL(sql=sql, params=tuple(params))
