"""Attach compiled sub-queries to a base statement as a ``WITH`` clause."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, Union

from ..engine.dialects import DialectSpec, resolve_dialect
from ..utils.exceptions import ConfigurationError
from .builders import check_alignment, comma_separated, validate_relation_name
from .compiled import CompiledSQL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedSubquery:
    """A compiled CTE body and the name it is declared under.

    The SQL is opaque: whatever the body contains (window expressions, its own
    ``WITH`` clause) is emitted inside the parentheses unchanged.
    """

    name: str
    sql: str
    params: tuple[object, ...] = ()
    columns: tuple[str, ...] = ()

    @classmethod
    def from_compiled(
        cls, name: str, compiled: CompiledSQL, columns: Sequence[str] = ()
    ) -> "NamedSubquery":
        return cls(name=name, sql=compiled.sql, params=compiled.params, columns=tuple(columns))


def _render_cte(cte: NamedSubquery, dialect: DialectSpec) -> str:
    head = dialect.quote_relation(validate_relation_name(cte.name, "CTE"))
    if cte.columns:
        names = (
            dialect.quote_relation(validate_relation_name(c, "CTE column")) for c in cte.columns
        )
        head = f"{head}({comma_separated(names)})"
    return f"{head} AS ({cte.sql})"


def compile_with(
    ctes: Sequence[NamedSubquery],
    base_sql: str,
    base_params: Sequence[object] = (),
    dialect: Union[str, DialectSpec, None] = None,
) -> CompiledSQL:
    """Prefix ``base_sql`` with ``WITH name AS (sql), ...``.

    Args:
        ctes: Non-empty sequence of compiled CTEs, in declaration order
        base_sql: Compiled base statement (a SELECT, or any full statement)
        base_params: Parameters of the base statement
        dialect: Dialect used to spell CTE names and check placeholders

    Returns:
        :class:`CompiledSQL` whose parameters are every CTE's parameters in
        declaration order followed by the base parameters

    Raises:
        ConfigurationError: If ``ctes`` is empty, names are invalid or repeated,
            or the base statement is empty
    """
    spec = resolve_dialect(dialect)
    if not ctes:
        raise ConfigurationError("A WITH clause requires at least one CTE")
    if not base_sql or not base_sql.strip():
        raise ConfigurationError("The base query SQL is empty")

    seen: set[str] = set()
    for cte in ctes:
        if cte.name in seen:
            raise ConfigurationError(
                f"Duplicate CTE name {cte.name!r}",
                context={"names": [c.name for c in ctes]},
            )
        seen.add(cte.name)

    sql = f"WITH {comma_separated(_render_cte(cte, spec) for cte in ctes)} {base_sql}"
    params: list[object] = []
    for cte in ctes:
        params.extend(cte.params)
    params.extend(base_params)

    check_alignment(sql, params, spec.placeholder)
    logger.debug("Compiled WITH clause over %d CTE(s): %s", len(ctes), sql)
    return CompiledSQL(sql=sql, params=tuple(params))


@dataclass(frozen=True)
class ComposedQuery:
    """CTEs plus the base statement they prefix, ready to be assembled."""

    ctes: tuple[NamedSubquery, ...]
    base_sql: str
    base_params: tuple[object, ...] = ()
    dialect: DialectSpec = field(default_factory=resolve_dialect)

    def compile(self) -> CompiledSQL:
        if not self.ctes:
            if not self.base_sql or not self.base_sql.strip():
                raise ConfigurationError("The base query SQL is empty")
            return CompiledSQL(sql=self.base_sql, params=self.base_params)
        return compile_with(self.ctes, self.base_sql, self.base_params, self.dialect)

    @property
    def cte_names(self) -> tuple[str, ...]:
        return tuple(cte.name for cte in self.ctes)
