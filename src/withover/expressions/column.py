"""Column helper similar to PySpark's ``Column``."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Union
from typing_extensions import TypeAlias

from .expr import Expression

if TYPE_CHECKING:
    from .window import FrameSpec, WindowFunctionExpr, WindowSpec

LiteralValue = Union[bool, int, float, str, None]
ColumnLike: TypeAlias = Union["Column", LiteralValue]


@dataclass(frozen=True, eq=False)
class Column(Expression):
    """User-facing wrapper around expressions with rich operators."""

    source: Optional[str] = None

    # ------------------------------------------------------------------ helpers
    def alias(self, alias: str) -> "Column":
        return replace(self, _alias=alias)

    def is_null(self) -> "Column":
        return Column(op="is_null", args=(self,))

    def is_not_null(self) -> "Column":
        return Column(op="is_not_null", args=(self,))

    def like(self, pattern: str) -> "Column":
        return Column(op="like", args=(self, pattern))

    def between(self, lower: ColumnLike, upper: ColumnLike) -> "Column":
        return Column(
            op="between",
            args=(self, ensure_column(lower), ensure_column(upper)),
        )

    # ---------------------------------------------------------------- operators
    def _binary(self, op: str, other: ColumnLike) -> "Column":
        return Column(op=op, args=(self, ensure_column(other)))

    def _unary(self, op: str) -> "Column":
        return Column(op=op, args=(self,))

    def __add__(self, other: ColumnLike) -> "Column":
        return self._binary("add", other)

    def __sub__(self, other: ColumnLike) -> "Column":
        return self._binary("sub", other)

    def __mul__(self, other: ColumnLike) -> "Column":
        return self._binary("mul", other)

    def __truediv__(self, other: ColumnLike) -> "Column":
        return self._binary("div", other)

    def __neg__(self) -> "Column":
        return self._unary("neg")

    def __eq__(self, other: object) -> "Column":  # type: ignore[override]
        return self._binary("eq", other)  # type: ignore[arg-type]

    def __ne__(self, other: object) -> "Column":  # type: ignore[override]
        return self._binary("ne", other)  # type: ignore[arg-type]

    def __lt__(self, other: ColumnLike) -> "Column":
        return self._binary("lt", other)

    def __le__(self, other: ColumnLike) -> "Column":
        return self._binary("le", other)

    def __gt__(self, other: ColumnLike) -> "Column":
        return self._binary("gt", other)

    def __ge__(self, other: ColumnLike) -> "Column":
        return self._binary("ge", other)

    def __and__(self, other: ColumnLike) -> "Column":
        return self._binary("and", other)

    def __or__(self, other: ColumnLike) -> "Column":
        return self._binary("or", other)

    def __invert__(self) -> "Column":
        return self._unary("not")

    def isin(self, values: Iterable[ColumnLike]) -> "Column":
        """Check if column value is in a list of values.

        Example:
            >>> col("unionid").isin(["u1", "u2"])  # unionid IN (?, ?)
        """
        expr_values = tuple(ensure_column(value) for value in values)
        return Column(op="in", args=(self, expr_values))

    def asc(self) -> "Column":
        return Column(op="sort_asc", args=(self,))

    def desc(self) -> "Column":
        return Column(op="sort_desc", args=(self,))

    def over(
        self,
        window: Optional["WindowSpec"] = None,
        *,
        partition_by: Optional[Union["Column", str, Sequence[Union["Column", str]]]] = None,
        order_by: Optional[Union["Column", str, Sequence[Union["Column", str]]]] = None,
        frame: Optional["FrameSpec"] = None,
    ) -> "WindowFunctionExpr":
        """Apply this expression as a window function.

        Args:
            window: A prepared :class:`WindowSpec`, e.g. from ``Window.partition_by(...)``
            partition_by: Column(s) to partition by
            order_by: Column(s) to order by within each partition
            frame: Optional frame specification

        Returns:
            New :class:`WindowFunctionExpr`; this column is left untouched

        Example:
            >>> F.sum(col("amount")).over(partition_by="region", order_by=col("day"))
        """
        from .window import WindowFunctionExpr, WindowSpec

        spec = window if window is not None else WindowSpec()
        if partition_by is not None:
            spec = spec.partition_by(*_as_sequence(partition_by))
        if order_by is not None:
            spec = spec.order_by(*_as_sequence(order_by))
        if frame is not None:
            spec = spec.frame(frame)
        return WindowFunctionExpr(op="window", args=(self, spec), _alias=self._alias)

    def __bool__(self) -> bool:  # pragma: no cover
        raise TypeError("Column expressions cannot be used as booleans")


def _as_sequence(value: Any) -> tuple[Any, ...]:
    if isinstance(value, (Column, str)):
        return (value,)
    return tuple(value)


def literal(value: LiteralValue) -> Column:
    return Column(op="literal", args=(value,))


def ensure_column(value: ColumnLike) -> Column:
    if isinstance(value, Column):
        return value
    return literal(value)


def col(name: str) -> Column:
    if name == "*":
        return star()
    return Column(op="column", args=(name,), source=name)


def star() -> Column:
    return Column(op="star", args=())


def to_column(value: Union[Column, str]) -> Column:
    """Column names given as plain strings become column references."""
    if isinstance(value, str):
        return col(value)
    return value
