"""Tests for window specifications and window function expressions."""

from __future__ import annotations

import pytest

from withover import Window, col, functions as F
from withover.expressions.window import (
    FrameBound,
    FrameBoundKind,
    FrameSpec,
    FrameUnit,
    WindowFunctionExpr,
    WindowSpec,
)
from withover.utils.exceptions import ConfigurationError


class TestFrameBoundCoercion:
    """PySpark-style integer bounds."""

    def test_none_is_unbounded(self):
        assert FrameBound.coerce(None, is_start=True) == FrameBound.unbounded_preceding()
        assert FrameBound.coerce(None, is_start=False) == FrameBound.unbounded_following()

    def test_numbers(self):
        assert FrameBound.coerce(-3, is_start=True) == FrameBound(FrameBoundKind.PRECEDING, 3)
        assert FrameBound.coerce(0, is_start=True) == FrameBound.current_row()
        assert FrameBound.coerce(2, is_start=False) == FrameBound(FrameBoundKind.FOLLOWING, 2)

    def test_bound_passthrough(self):
        bound = FrameBound.preceding(5)
        assert FrameBound.coerce(bound, is_start=False) is bound

    @pytest.mark.parametrize("value", ["2", True, [1]])
    def test_non_numeric_bound(self, value):
        with pytest.raises(ConfigurationError, match="Frame bound must be"):
            FrameBound.coerce(value, is_start=True)
        with pytest.raises(ConfigurationError, match="Frame bound must be"):
            Window.rows_between(value, 0)


class TestWindowSpec:
    def test_empty(self):
        assert WindowSpec().is_empty
        assert not Window.partition_by("a").is_empty

    def test_builder_returns_new_spec(self):
        base = Window.partition_by("unionid")
        ordered = base.order_by("created_at")
        assert base.order_by_cols == ()
        assert [c.args[0] for c in ordered.partition_by_cols] == ["unionid"]
        assert [c.args[0] for c in ordered.order_by_cols] == ["created_at"]

    def test_rows_between(self):
        spec = Window.order_by("day").rows_between(-2, 2)
        assert spec.frame_spec == FrameSpec(
            FrameUnit.ROWS, FrameBound.preceding(2), FrameBound.following(2)
        )

    def test_range_single_bound(self):
        spec = WindowSpec().range(None)
        assert spec.frame_spec == FrameSpec(FrameUnit.RANGE, FrameBound.unbounded_preceding())

    def test_camel_case_aliases(self):
        camel = Window.partitionBy("a").orderBy("b").rowsBetween(None, 0)
        snake = Window.partition_by("a").order_by("b").rows_between(None, 0)
        assert F.rank().over(camel).to_sql() == F.rank().over(snake).to_sql()
        assert camel.frame_spec == snake.frame_spec


class TestWindowFunctionExpr:
    def test_constructor_returns_unconfigured_expression(self):
        fn = F.row_number()
        assert isinstance(fn, WindowFunctionExpr)
        assert fn.spec.is_empty
        assert fn.function.args[0] == "ROW_NUMBER"

    def test_back_to_back_declarations_do_not_share_specs(self):
        """Configuring one window function never edits another one's window."""
        w = Window.partition_by("unionid")
        first = F.row_number().over(w.order_by(col("created_at").desc()))
        second = F.sum("amount").over(w).rows_between(None, 0)

        assert first.spec.frame_spec is None
        assert second.spec.order_by_cols == ()
        assert w.order_by_cols == () and w.frame_spec is None
        assert first.to_sql() == (
            'ROW_NUMBER() OVER (PARTITION BY "unionid" ORDER BY "created_at" DESC)'
        )
        assert second.to_sql() == (
            'SUM("amount") OVER (PARTITION BY "unionid" '
            "ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW)"
        )

    def test_chained_methods_return_new_expressions(self):
        base = F.rank()
        partitioned = base.partition_by("region")
        ordered = partitioned.order_by("score")
        assert base.spec.is_empty
        assert partitioned.spec.order_by_cols == ()
        assert ordered.to_sql() == 'RANK() OVER (PARTITION BY "region" ORDER BY "score")'

    def test_over_replaces_window(self):
        fn = F.rank().over(partition_by="a").over(order_by="b")
        assert fn.to_sql() == 'RANK() OVER (ORDER BY "b")'

    def test_frame_methods(self):
        frame = FrameSpec(FrameUnit.RANGE, FrameBound.unbounded_preceding(), FrameBound.current_row())
        assert F.sum("x").frame(frame).spec.frame_spec == frame
        assert F.sum("x").range_between(None, 0).spec.frame_spec == frame
        assert F.sum("x").rows(-1).spec.frame_spec == FrameSpec(FrameUnit.ROWS, FrameBound.preceding(1))
        assert F.sum("x").range(0).spec.frame_spec == FrameSpec(FrameUnit.RANGE, FrameBound.current_row())

    def test_reusable_across_compilations(self):
        fn = F.lag("price", 1, 0).over(order_by="day").alias("prev")
        assert fn.compile("sqlite") == fn.compile("sqlite")
        assert fn.compile("postgresql").sql == 'LAG("price", %s, %s) OVER (ORDER BY "day") AS prev'

    def test_column_over(self):
        """Any column expression can be windowed with Column.over."""
        fn = col("amount").over(partition_by="region")
        assert isinstance(fn, WindowFunctionExpr)
        assert fn.to_sql() == '"amount" OVER (PARTITION BY "region")'
