"""Window specifications and window function expressions.

Every builder method here returns a new object. Two window functions declared
back to back therefore never share a specification, no matter how the
partitions, orderings and frames are chained.

Example:
    >>> from withover import Window, col, functions as F
    >>> w = Window.partition_by("unionid").order_by(col("created_at").desc())
    >>> rn = F.row_number().over(w).alias("rn")
    >>> running = F.sum(col("amount")).over(w.rows_between(None, 0)).alias("running")
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from ..utils.exceptions import ConfigurationError
from .column import Column, to_column

if TYPE_CHECKING:
    from ..engine.dialects import DialectSpec
    from ..sql.compiled import CompiledSQL

ColumnRef = Union[Column, str]
BoundLike = Union["FrameBound", int, float, None]


class FrameUnit(Enum):
    """Window frame unit."""

    ROWS = "ROWS"
    RANGE = "RANGE"


class FrameBoundKind(Enum):
    """Window frame bound kind."""

    UNBOUNDED_PRECEDING = "UNBOUNDED PRECEDING"
    PRECEDING = "PRECEDING"
    CURRENT_ROW = "CURRENT ROW"
    FOLLOWING = "FOLLOWING"
    UNBOUNDED_FOLLOWING = "UNBOUNDED FOLLOWING"


@dataclass(frozen=True)
class FrameBound:
    """One end of a window frame.

    ``offset`` is required for ``PRECEDING`` / ``FOLLOWING`` and must be absent
    for the other kinds; the rule is enforced when the frame is rendered.
    """

    kind: FrameBoundKind
    offset: Optional[Union[int, float]] = None

    @classmethod
    def unbounded_preceding(cls) -> "FrameBound":
        return cls(FrameBoundKind.UNBOUNDED_PRECEDING)

    @classmethod
    def preceding(cls, offset: Union[int, float]) -> "FrameBound":
        return cls(FrameBoundKind.PRECEDING, offset)

    @classmethod
    def current_row(cls) -> "FrameBound":
        return cls(FrameBoundKind.CURRENT_ROW)

    @classmethod
    def following(cls, offset: Union[int, float]) -> "FrameBound":
        return cls(FrameBoundKind.FOLLOWING, offset)

    @classmethod
    def unbounded_following(cls) -> "FrameBound":
        return cls(FrameBoundKind.UNBOUNDED_FOLLOWING)

    @classmethod
    def coerce(cls, value: BoundLike, *, is_start: bool) -> "FrameBound":
        """Translate PySpark-style bounds.

        ``None`` is unbounded on the given side, a negative number is that many
        rows preceding, ``0`` is the current row and a positive number is that
        many rows following.
        """
        if isinstance(value, FrameBound):
            return value
        if value is None:
            return cls.unbounded_preceding() if is_start else cls.unbounded_following()
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(
                f"Frame bound must be None, a number or a FrameBound, got {value!r}",
                context={"bound": value},
            )
        if value < 0:
            return cls.preceding(-value)
        if value == 0:
            return cls.current_row()
        return cls.following(value)


@dataclass(frozen=True)
class FrameSpec:
    """Frame clause: ``unit start`` or ``unit BETWEEN start AND end``."""

    unit: FrameUnit
    start: FrameBound
    end: Optional[FrameBound] = None


@dataclass(frozen=True)
class WindowSpec:
    """Window specification for window functions."""

    partition_by_cols: tuple[Column, ...] = ()
    order_by_cols: tuple[Column, ...] = ()
    frame_spec: Optional[FrameSpec] = None

    def partition_by(self, *columns: ColumnRef) -> "WindowSpec":
        return replace(self, partition_by_cols=tuple(to_column(c) for c in columns))

    def order_by(self, *columns: ColumnRef) -> "WindowSpec":
        return replace(self, order_by_cols=tuple(to_column(c) for c in columns))

    def frame(self, frame: Optional[FrameSpec]) -> "WindowSpec":
        return replace(self, frame_spec=frame)

    def rows_between(self, start: BoundLike, end: BoundLike) -> "WindowSpec":
        return self.frame(_between(FrameUnit.ROWS, start, end))

    def range_between(self, start: BoundLike, end: BoundLike) -> "WindowSpec":
        return self.frame(_between(FrameUnit.RANGE, start, end))

    def rows(self, start: BoundLike) -> "WindowSpec":
        """Single-bound ROWS frame, e.g. ``ROWS UNBOUNDED PRECEDING``."""
        return self.frame(FrameSpec(FrameUnit.ROWS, FrameBound.coerce(start, is_start=True)))

    def range(self, start: BoundLike) -> "WindowSpec":
        return self.frame(FrameSpec(FrameUnit.RANGE, FrameBound.coerce(start, is_start=True)))

    @property
    def is_empty(self) -> bool:
        return not self.partition_by_cols and not self.order_by_cols and self.frame_spec is None

    # PySpark spellings
    partitionBy = partition_by
    orderBy = order_by
    rowsBetween = rows_between
    rangeBetween = range_between


def _between(unit: FrameUnit, start: BoundLike, end: BoundLike) -> FrameSpec:
    return FrameSpec(
        unit,
        FrameBound.coerce(start, is_start=True),
        FrameBound.coerce(end, is_start=False),
    )


class Window:
    """Factory for :class:`WindowSpec`, mirroring ``pyspark.sql.Window``."""

    @staticmethod
    def partition_by(*columns: ColumnRef) -> WindowSpec:
        return WindowSpec().partition_by(*columns)

    @staticmethod
    def order_by(*columns: ColumnRef) -> WindowSpec:
        return WindowSpec().order_by(*columns)

    @staticmethod
    def rows_between(start: BoundLike, end: BoundLike) -> WindowSpec:
        return WindowSpec().rows_between(start, end)

    @staticmethod
    def range_between(start: BoundLike, end: BoundLike) -> WindowSpec:
        return WindowSpec().range_between(start, end)

    partitionBy = partition_by
    orderBy = order_by
    rowsBetween = rows_between
    rangeBetween = range_between


@dataclass(frozen=True, eq=False)
class WindowFunctionExpr(Column):
    """A function call together with its ``OVER`` specification.

    ``args`` is ``(function_call, window_spec)``. Produced unconfigured by the
    constructors in :mod:`withover.expressions.functions`; every configuration
    method returns a new expression.
    """

    @property
    def function(self) -> Column:
        return self.args[0]

    @property
    def spec(self) -> WindowSpec:
        return self.args[1]

    def _with_spec(self, spec: WindowSpec) -> "WindowFunctionExpr":
        return replace(self, args=(self.function, spec))

    def over(  # type: ignore[override]
        self,
        window: Optional[WindowSpec] = None,
        *,
        partition_by=None,
        order_by=None,
        frame: Optional[FrameSpec] = None,
    ) -> "WindowFunctionExpr":
        """Replace the window specification (the function call is kept)."""
        rebuilt = self.function.over(
            window, partition_by=partition_by, order_by=order_by, frame=frame
        )
        return replace(rebuilt, _alias=self._alias)

    def partition_by(self, *columns: ColumnRef) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.partition_by(*columns))

    def order_by(self, *columns: ColumnRef) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.order_by(*columns))

    def frame(self, frame: Optional[FrameSpec]) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.frame(frame))

    def rows_between(self, start: BoundLike, end: BoundLike) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.rows_between(start, end))

    def range_between(self, start: BoundLike, end: BoundLike) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.range_between(start, end))

    def rows(self, start: BoundLike) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.rows(start))

    def range(self, start: BoundLike) -> "WindowFunctionExpr":
        return self._with_spec(self.spec.range(start))

    def compile(self, dialect: Union[str, "DialectSpec", None] = None) -> "CompiledSQL":
        """Compile to a projection item, with a trailing ``AS alias`` when aliased."""
        from ..sql.window_compiler import compile_window

        return compile_window(self, dialect, include_alias=True)

    def to_sql(self, dialect: Union[str, "DialectSpec", None] = None) -> str:
        return self.compile(dialect).sql
