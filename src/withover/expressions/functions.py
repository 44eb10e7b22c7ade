"""Window function constructors and a few scalar helpers.

Every window constructor returns an unconfigured
:class:`~withover.expressions.window.WindowFunctionExpr`; attach a window with
``.over(...)`` or the chained ``partition_by`` / ``order_by`` / frame methods.
Compiled without any window it renders as ``FUNC(...) OVER ()``.
"""

from __future__ import annotations

from typing import Optional, Union

from ..utils.exceptions import ConfigurationError
from .column import Column, ColumnLike, col, ensure_column, literal, star
from .window import WindowFunctionExpr, WindowSpec

__all__ = [
    "lit",
    "coalesce",
    "upper",
    "lower",
    "row_number",
    "rank",
    "dense_rank",
    "percent_rank",
    "cume_dist",
    "ntile",
    "lag",
    "lead",
    "first_value",
    "last_value",
    "nth_value",
    "count",
    "sum",
    "avg",
    "max",
    "min",
]


def call(name: str, *arguments: Column) -> Column:
    """Plain function-call node: ``NAME(arg, ...)``."""
    return Column(op="call", args=(name, tuple(arguments)))


def _window(name: str, *arguments: Column) -> WindowFunctionExpr:
    return WindowFunctionExpr(op="window", args=(call(name, *arguments), WindowSpec()))


def _argument(value: Union[ColumnLike, str]) -> Column:
    # Strings name columns here; use lit() for string values
    if isinstance(value, str):
        return col(value)
    return ensure_column(value)


def _require_int(value: object, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigurationError(
            f"{name} must be an integer >= {minimum}, got {value!r}",
            context={name: value},
        )
    return value


def lit(value: Union[bool, int, float, str, None]) -> Column:
    """Create a literal column; it is always sent as a bound parameter.

    Example:
        >>> from withover.expressions import functions as F
        >>> F.lit(42)
    """
    return literal(value)


def coalesce(*columns: ColumnLike) -> Column:
    if not columns:
        raise ConfigurationError("coalesce requires at least one column")
    return call("COALESCE", *(_argument(c) for c in columns))


def upper(column: ColumnLike) -> Column:
    return call("UPPER", _argument(column))


def lower(column: ColumnLike) -> Column:
    return call("LOWER", _argument(column))


# ------------------------------------------------------------------ ranking


def row_number() -> WindowFunctionExpr:
    """Generate a row number for each row in a window.

    Example:
        >>> F.row_number().over(partition_by="unionid", order_by=col("created_at").desc())
    """
    return _window("ROW_NUMBER")


def rank() -> WindowFunctionExpr:
    """Compute the rank of rows within a window, with gaps after ties."""
    return _window("RANK")


def dense_rank() -> WindowFunctionExpr:
    """Compute the rank of rows within a window, without gaps."""
    return _window("DENSE_RANK")


def percent_rank() -> WindowFunctionExpr:
    return _window("PERCENT_RANK")


def cume_dist() -> WindowFunctionExpr:
    return _window("CUME_DIST")


def ntile(n: int) -> WindowFunctionExpr:
    """Divide the ordered partition into ``n`` roughly equal buckets.

    Args:
        n: Number of buckets, at least 1

    Example:
        >>> F.ntile(4).over(order_by="score")
    """
    return _window("NTILE", literal(_require_int(n, "n", 1)))


# -------------------------------------------------------------------- value


def _offset_function(
    name: str, column: ColumnLike, offset: int, default: Optional[ColumnLike]
) -> WindowFunctionExpr:
    arguments = [_argument(column), literal(_require_int(offset, "offset", 0))]
    if default is not None:
        arguments.append(ensure_column(default))
    return _window(name, *arguments)


def lag(column: ColumnLike, offset: int = 1, default: Optional[ColumnLike] = None) -> WindowFunctionExpr:
    """Get the value of a column from a previous row in the window.

    Args:
        column: Column (or column name) to read
        offset: Number of rows to look back (default: 1)
        default: Value when the offset leaves the partition; bound as a parameter

    Example:
        >>> F.lag("price", 1, 0).over(order_by="day")
    """
    return _offset_function("LAG", column, offset, default)


def lead(column: ColumnLike, offset: int = 1, default: Optional[ColumnLike] = None) -> WindowFunctionExpr:
    """Get the value of a column from a following row in the window."""
    return _offset_function("LEAD", column, offset, default)


def first_value(column: ColumnLike) -> WindowFunctionExpr:
    return _window("FIRST_VALUE", _argument(column))


def last_value(column: ColumnLike) -> WindowFunctionExpr:
    """Last value of the frame.

    With the default frame this is the current row; pair it with
    ``rows_between(None, None)`` for the partition's last value.
    """
    return _window("LAST_VALUE", _argument(column))


def nth_value(column: ColumnLike, n: int) -> WindowFunctionExpr:
    """Get the ``n``-th (1-based) value of the frame."""
    return _window("NTH_VALUE", _argument(column), literal(_require_int(n, "n", 1)))


# ---------------------------------------------------------------- aggregates


def count(column: Union[ColumnLike, str] = "*") -> WindowFunctionExpr:
    """Count rows (``"*"``) or non-null values of a column over a window."""
    if isinstance(column, str) and column == "*":
        return _window("COUNT", star())
    return _window("COUNT", _argument(column))


def sum(column: ColumnLike) -> WindowFunctionExpr:  # noqa: A001 - mirrored PySpark API
    """Sum over a window.

    Example:
        >>> F.sum(col("amount")).over(Window.order_by("day").rows_between(None, 0))
    """
    return _window("SUM", _argument(column))


def avg(column: ColumnLike) -> WindowFunctionExpr:
    return _window("AVG", _argument(column))


def max(column: ColumnLike) -> WindowFunctionExpr:  # noqa: A001 - mirrored PySpark API
    return _window("MAX", _argument(column))


def min(column: ColumnLike) -> WindowFunctionExpr:  # noqa: A001 - mirrored PySpark API
    return _window("MIN", _argument(column))
