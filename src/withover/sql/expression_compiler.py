"""Compile expression trees into SQLAlchemy column expressions."""

from __future__ import annotations

from typing import Any, Union
from typing import cast as typing_cast

from sqlalchemy import and_, func, literal, literal_column, not_, or_
from sqlalchemy import column as sa_column
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql import ColumnElement
from sqlalchemy.types import NullType

from ..engine.dialects import DialectSpec
from ..expressions.column import Column
from ..utils.exceptions import CompilationError
from .builders import quote_identifier
from .window_compiler import WindowCompiler


class WindowElement(ColumnElement):
    """SQLAlchemy column element that renders a window expression.

    Rendering goes through :class:`WindowCompiler`, with every literal value
    registered as a SQLAlchemy bind parameter so its position is tracked by the
    statement compiler like any other parameter.
    """

    inherit_cache = False
    type = NullType()

    def __init__(self, expression: Column, dialect: DialectSpec):
        self.node = expression
        self.dialect_spec = dialect


@compiles(WindowElement)
def _compile_window_element(element: WindowElement, compiler: Any, **kw: Any) -> str:
    literal_binds = kw.get("literal_binds", False)

    def bind(value: Any) -> str:
        return compiler.process(literal(value), literal_binds=literal_binds)

    return WindowCompiler(element.dialect_spec, bind).render(element.node)


class ExpressionCompiler:
    """Compile :class:`Column` trees into SQLAlchemy column expressions."""

    def __init__(self, dialect: DialectSpec):
        self.dialect = dialect

    def compile_expr(self, expression: Column) -> ColumnElement:
        """Compile a :class:`Column` expression, applying its alias if any."""
        compiled = self._compile(expression)
        if expression.alias_name:
            compiled = typing_cast(ColumnElement[Any], compiled.label(expression.alias_name))
        return compiled

    def _compile(self, expression: Union[Column, Any]) -> ColumnElement:
        if not isinstance(expression, Column):
            raise CompilationError(f"Expected Column expression, got {type(expression)}")

        op = expression.op
        args = expression.args

        if op == "star":
            return literal_column("*")

        if op == "column":
            col_name = args[0]
            quoted = quote_identifier(col_name, self.dialect.quote_char)
            if "." in col_name:
                return literal_column(quoted)
            # Plain names are quoted by SQLAlchemy only where the dialect needs it
            return sa_column(col_name)

        if op == "literal":
            return literal(args[0])

        if op == "window":
            # The renderer ignores aliases; compile_expr labels the outermost node
            return WindowElement(expression, self.dialect)

        if op == "call":
            name, arguments = args
            return getattr(func, name.lower())(*(self._compile(arg) for arg in arguments))

        if op == "and":
            return and_(self._compile(args[0]), self._compile(args[1]))
        if op == "or":
            return or_(self._compile(args[0]), self._compile(args[1]))
        if op == "not":
            return not_(self._compile(args[0]))

        if op in ("add", "sub", "mul", "div", "eq", "ne", "lt", "le", "gt", "ge"):
            left = self._compile(args[0])
            right = self._compile(args[1])
            if op == "add":
                return left + right
            if op == "sub":
                return left - right
            if op == "mul":
                return left * right
            if op == "div":
                return left / right
            if op == "eq":
                return left == right
            if op == "ne":
                return left != right
            if op == "lt":
                return left < right
            if op == "le":
                return left <= right
            if op == "gt":
                return left > right
            return left >= right

        if op == "neg":
            return -self._compile(args[0])
        if op == "is_null":
            return self._compile(args[0]).is_(None)
        if op == "is_not_null":
            return self._compile(args[0]).is_not(None)
        if op == "like":
            return self._compile(args[0]).like(args[1])
        if op == "between":
            return self._compile(args[0]).between(self._compile(args[1]), self._compile(args[2]))
        if op == "in":
            values = [self._compile(value) for value in args[1]]
            return self._compile(args[0]).in_(values)
        if op == "sort_asc":
            return self._compile(args[0]).asc()
        if op == "sort_desc":
            return self._compile(args[0]).desc()

        raise CompilationError(f"Unsupported expression operation: {op!r}", context={"op": op})
