"""Tests for WITH clause assembly."""

from __future__ import annotations

import pytest

from withover.engine.dialects import get_dialect
from withover.sql.compiled import CompiledSQL
from withover.sql.cte_compiler import ComposedQuery, NamedSubquery, compile_with
from withover.utils.exceptions import CompilationError, ConfigurationError


def test_single_cte():
    cte = NamedSubquery("recent", "SELECT * FROM orders WHERE day > ?", ("2024-01-01",))
    compiled = compile_with([cte], "SELECT * FROM recent WHERE amount > ?", (10,))
    assert compiled.sql == (
        "WITH recent AS (SELECT * FROM orders WHERE day > ?) SELECT * FROM recent WHERE amount > ?"
    )
    assert compiled.params == ("2024-01-01", 10)


def test_declaration_order_and_parameter_order():
    """CTE parameters come first, in declaration order, then the base parameters."""
    ctes = [
        NamedSubquery("b", "SELECT * FROM t WHERE x = ?", (1,)),
        NamedSubquery("a", "SELECT * FROM b WHERE y = ? AND z = ?", (2, 3)),
    ]
    compiled = compile_with(ctes, "SELECT * FROM a WHERE w = ?", (4,))
    assert compiled.sql == (
        "WITH b AS (SELECT * FROM t WHERE x = ?), "
        "a AS (SELECT * FROM b WHERE y = ? AND z = ?) "
        "SELECT * FROM a WHERE w = ?"
    )
    assert compiled.params == (1, 2, 3, 4)


def test_cte_body_is_opaque():
    """A body with its own window expression or WITH is wrapped untouched."""
    body = 'WITH inner_q AS (SELECT 1 AS x) SELECT x, ROW_NUMBER() OVER (ORDER BY "x") AS rn FROM inner_q'
    compiled = compile_with([NamedSubquery("outer_q", body)], "SELECT * FROM outer_q")
    assert compiled.sql == f"WITH outer_q AS ({body}) SELECT * FROM outer_q"


def test_column_list():
    cte = NamedSubquery("totals", "SELECT region, SUM(amount) FROM orders GROUP BY region", columns=("region", "total"))
    compiled = compile_with([cte], "SELECT * FROM totals")
    assert compiled.sql.startswith("WITH totals(region, total) AS (SELECT region")


def test_names_follow_dialect_quoting():
    cte = NamedSubquery("Ranked", "SELECT 1")
    compiled = compile_with([cte], 'SELECT * FROM "Ranked"', dialect="sqlite")
    assert compiled.sql == 'WITH "Ranked" AS (SELECT 1) SELECT * FROM "Ranked"'


def test_format_placeholders():
    cte = NamedSubquery("recent", "SELECT * FROM orders WHERE day > %s", ("2024-01-01",))
    compiled = compile_with([cte], "SELECT * FROM recent", dialect=get_dialect("postgresql"))
    assert compiled.params == ("2024-01-01",)


def test_empty_cte_list():
    with pytest.raises(ConfigurationError, match="at least one CTE"):
        compile_with([], "SELECT 1")


@pytest.mark.parametrize("base_sql", ["", "   "])
def test_empty_base_query(base_sql):
    with pytest.raises(ConfigurationError, match="base query SQL is empty"):
        compile_with([NamedSubquery("a", "SELECT 1")], base_sql)


def test_duplicate_names():
    """Duplicate names are reported, never silently overwritten."""
    ctes = [NamedSubquery("x", "SELECT 1"), NamedSubquery("x", "SELECT 2")]
    with pytest.raises(ConfigurationError, match="Duplicate CTE name 'x'") as exc_info:
        compile_with(ctes, "SELECT * FROM x")
    assert "unique" in exc_info.value.suggestion
    assert exc_info.value.context["names"] == ["x", "x"]


def test_names_are_case_sensitive():
    ctes = [NamedSubquery("x", "SELECT 1"), NamedSubquery("X", "SELECT 2")]
    compiled = compile_with(ctes, "SELECT * FROM x")
    assert compiled.sql.startswith('WITH x AS (SELECT 1), "X" AS (SELECT 2)')


def test_invalid_name():
    with pytest.raises(ConfigurationError, match="Invalid CTE name"):
        compile_with([NamedSubquery("bad name", "SELECT 1")], "SELECT 1")


def test_parameter_mismatch_is_detected():
    cte = NamedSubquery("a", "SELECT * FROM t WHERE x = ?", ())
    with pytest.raises(CompilationError, match="placeholder"):
        compile_with([cte], "SELECT * FROM a")


class TestComposedQuery:
    def test_compile(self):
        composed = ComposedQuery(
            ctes=(NamedSubquery.from_compiled("a", CompiledSQL("SELECT * FROM t WHERE x = ?", (1,))),),
            base_sql="SELECT * FROM a LIMIT ?",
            base_params=(5,),
        )
        assert composed.cte_names == ("a",)
        assert composed.compile() == CompiledSQL(
            "WITH a AS (SELECT * FROM t WHERE x = ?) SELECT * FROM a LIMIT ?", (1, 5)
        )

    def test_without_ctes_returns_base(self):
        composed = ComposedQuery(ctes=(), base_sql="SELECT * FROM t WHERE x = ?", base_params=(1,))
        sql, params = composed.compile()
        assert sql == "SELECT * FROM t WHERE x = ?"
        assert params == (1,)

    def test_without_ctes_or_base(self):
        with pytest.raises(ConfigurationError, match="base query SQL is empty"):
            ComposedQuery(ctes=(), base_sql="").compile()
