"""Tests for window expression compilation."""

from __future__ import annotations

import pytest

from withover import Window, col, functions as F
from withover.expressions.column import Column
from withover.expressions.window import FrameBound, FrameSpec, FrameUnit, WindowFunctionExpr, WindowSpec
from withover.sql.window_compiler import compile_window
from withover.utils.exceptions import CompilationError, ConfigurationError


class TestWindowClause:
    """Emission order and shape of the OVER clause."""

    def test_empty_window_is_legal(self):
        """A window without partition, order or frame renders as OVER ()."""
        compiled = compile_window(F.row_number())
        assert compiled.sql == "ROW_NUMBER() OVER ()"
        assert compiled.params == ()

    def test_empty_window_keeps_function_params(self):
        compiled = compile_window(F.ntile(4))
        assert compiled.sql == "NTILE(?) OVER ()"
        assert compiled.params == (4,)

    def test_partition_and_order(self):
        fn = F.row_number().over(partition_by="unionid", order_by=col("created_at").desc())
        compiled = compile_window(fn)
        assert compiled.sql == 'ROW_NUMBER() OVER (PARTITION BY "unionid" ORDER BY "created_at" DESC)'
        assert compiled.params == ()

    def test_order_only(self):
        compiled = compile_window(F.rank().over(order_by=col("score").asc()))
        assert compiled.sql == 'RANK() OVER (ORDER BY "score" ASC)'

    def test_undecorated_order_column_has_no_direction(self):
        compiled = compile_window(F.dense_rank().over(order_by="score"))
        assert compiled.sql == 'DENSE_RANK() OVER (ORDER BY "score")'

    def test_frame_only(self):
        frame = FrameSpec(FrameUnit.ROWS, FrameBound.preceding(2), FrameBound.following(2))
        compiled = compile_window(F.avg("amount").over(frame=frame))
        assert compiled.sql == 'AVG("amount") OVER (ROWS BETWEEN 2 PRECEDING AND 2 FOLLOWING)'
        assert compiled.params == ()

    def test_partition_order_and_frame(self):
        fn = F.sum("amount").over(
            Window.partition_by("unionid").order_by("created_at").rows_between(None, 0)
        )
        assert compile_window(fn).sql == (
            'SUM("amount") OVER (PARTITION BY "unionid" ORDER BY "created_at" '
            "ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW)"
        )

    def test_single_bound_frame(self):
        fn = F.count().over(order_by="day").rows(None)
        assert compile_window(fn).sql == 'COUNT(*) OVER (ORDER BY "day" ROWS UNBOUNDED PRECEDING)'

    def test_column_order_is_preserved_with_duplicates(self):
        fn = F.rank().over(
            partition_by=["b", "a", "b"],
            order_by=[col("z").desc(), "y", col("z").asc()],
        )
        assert compile_window(fn).sql == (
            'RANK() OVER (PARTITION BY "b", "a", "b" ORDER BY "z" DESC, "y", "z" ASC)'
        )


class TestParameters:
    """Literal values are bound; column references are identifiers."""

    def test_lag_binds_offset_and_default(self):
        compiled = compile_window(F.lag("price", 2, 0).over(order_by="day"))
        assert compiled.sql == 'LAG("price", ?, ?) OVER (ORDER BY "day")'
        assert compiled.params == (2, 0)

    def test_lead_without_default(self):
        compiled = compile_window(F.lead(col("price")).over(order_by="day"))
        assert compiled.sql == 'LEAD("price", ?) OVER (ORDER BY "day")'
        assert compiled.params == (1,)

    def test_nth_value(self):
        compiled = compile_window(F.nth_value("price", 3).over(order_by="day"))
        assert compiled.sql == 'NTH_VALUE("price", ?) OVER (ORDER BY "day")'
        assert compiled.params == (3,)

    def test_function_params_precede_window_params(self):
        fn = F.lag("price", 1).over(partition_by=col("bucket") + 10, order_by="day")
        compiled = compile_window(fn)
        assert compiled.sql == 'LAG("price", ?) OVER (PARTITION BY ("bucket" + ?) ORDER BY "day")'
        assert compiled.params == (1, 10)

    def test_partition_columns_are_never_parameters(self):
        fn = F.row_number().over(partition_by=["unionid", "region"], order_by="created_at")
        compiled = compile_window(fn)
        assert "?" not in compiled.sql
        assert compiled.params == ()

    def test_format_paramstyle(self):
        compiled = compile_window(F.lag("price", 2).over(order_by="day"), "postgresql")
        assert compiled.sql == 'LAG("price", %s) OVER (ORDER BY "day")'
        assert compiled.params == (2,)

    def test_mysql_quoting(self):
        compiled = compile_window(F.row_number().over(partition_by="unionid"), "mysql")
        assert compiled.sql == "ROW_NUMBER() OVER (PARTITION BY `unionid`)"

    def test_idempotent(self):
        fn = F.lag("price", 1, 0).over(partition_by="unionid", order_by=col("day").desc())
        assert compile_window(fn) == compile_window(fn)


class TestAliasAndComposition:
    def test_alias_appended_by_compile(self):
        fn = F.row_number().over(partition_by="unionid").alias("rn")
        assert fn.compile().sql == 'ROW_NUMBER() OVER (PARTITION BY "unionid") AS rn'
        # compile_window leaves the alias to the surrounding SELECT by default
        assert compile_window(fn).sql == 'ROW_NUMBER() OVER (PARTITION BY "unionid")'

    def test_alias_survives_reconfiguration(self):
        fn = F.rank().alias("r").over(order_by="score")
        assert fn.alias_name == "r"
        assert fn.to_sql() == 'RANK() OVER (ORDER BY "score") AS r'

    def test_arithmetic_between_windows(self):
        share = F.sum("amount").over(partition_by="unionid") / F.sum("amount").over()
        compiled = compile_window(share)
        assert compiled.sql == (
            '(SUM("amount") OVER (PARTITION BY "unionid") / SUM("amount") OVER ())'
        )

    def test_nested_window_rejected(self):
        nested = F.sum(F.row_number().over(order_by="day")).over()
        with pytest.raises(ConfigurationError, match="cannot be nested"):
            compile_window(nested)

    def test_invalid_partition_identifier(self):
        fn = F.rank().over(partition_by="region; DROP TABLE users")
        with pytest.raises(ConfigurationError, match="Invalid column identifier"):
            compile_window(fn)

    def test_unsupported_expression(self):
        fn = WindowFunctionExpr(op="window", args=(Column(op="mystery", args=()), WindowSpec()))
        with pytest.raises(CompilationError, match="Unsupported expression in window clause"):
            compile_window(fn)

    def test_invalid_frame_is_reported_at_compile_time(self):
        fn = F.sum("amount").over(
            frame=FrameSpec(FrameUnit.ROWS, FrameBound.following(-2))
        )
        with pytest.raises(ConfigurationError, match="non-negative"):
            compile_window(fn)

    def test_sort_direction_in_partition_rejected(self):
        fn = F.rank().over(partition_by=col("x").desc())
        with pytest.raises(ConfigurationError, match="cannot carry a sort direction") as exc_info:
            compile_window(fn)
        assert "order_by" in exc_info.value.suggestion
        with pytest.raises(ConfigurationError, match="sort direction"):
            compile_window(F.rank().over(Window.partition_by(col("x").asc())))
