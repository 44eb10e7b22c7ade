"""Dialect registry and helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Union

from ..utils.exceptions import ConfigurationError

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

_PLACEHOLDERS = {"qmark": "?", "format": "%s"}


@dataclass(frozen=True)
class DialectSpec:
    name: str
    quote_char: str = '"'
    paramstyle: str = "qmark"
    sqlalchemy_name: str = "default"

    @property
    def placeholder(self) -> str:
        return _PLACEHOLDERS[self.paramstyle]

    def sqlalchemy_dialect(self) -> "Dialect":
        """SQLAlchemy dialect that compiles statements with this positional paramstyle."""
        return _load_sqlalchemy_dialect(self.sqlalchemy_name, self.paramstyle)

    def quote_relation(self, name: str) -> str:
        """Quote a relation or alias name only where the dialect requires it.

        Matches how SQLAlchemy renders ``table(name)`` so a CTE declared here and
        referenced from a compiled statement spell the same identifier.
        """
        return self.sqlalchemy_dialect().identifier_preparer.quote(name)


@lru_cache(maxsize=None)
def _load_sqlalchemy_dialect(name: str, paramstyle: str) -> "Dialect":
    # psycopg2 and mysqldb emit bare placeholders; psycopg appends casts to them
    if name == "sqlite":
        from sqlalchemy.dialects import sqlite

        return sqlite.dialect(paramstyle=paramstyle)
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import psycopg2

        return psycopg2.dialect(paramstyle=paramstyle)
    if name == "mysql":
        from sqlalchemy.dialects.mysql import mysqldb

        return mysqldb.dialect(paramstyle=paramstyle)
    from sqlalchemy.engine.default import DefaultDialect

    return DefaultDialect(paramstyle=paramstyle)


DIALECTS: dict[str, DialectSpec] = {
    "ansi": DialectSpec(name="ansi"),
    "sqlite": DialectSpec(name="sqlite", sqlalchemy_name="sqlite"),
    "postgresql": DialectSpec(name="postgresql", paramstyle="format", sqlalchemy_name="postgresql"),
    "mysql": DialectSpec(name="mysql", quote_char="`", paramstyle="format", sqlalchemy_name="mysql"),
    "duckdb": DialectSpec(name="duckdb", sqlalchemy_name="postgresql"),
}


def get_dialect(name: str) -> DialectSpec:
    # Driver suffixes such as "postgresql+psycopg2" share the base dialect
    base = name.split("+", 1)[0].lower()
    try:
        return DIALECTS[base]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unknown dialect '{name}'",
            suggestion=f"Supported dialects: {', '.join(sorted(DIALECTS))}",
        ) from exc


def resolve_dialect(dialect: Union[str, DialectSpec, None] = None) -> DialectSpec:
    """Normalise a dialect argument; ``None`` falls back to ``WITHOVER_DIALECT`` then ansi."""
    if isinstance(dialect, DialectSpec):
        return dialect
    if dialect is None:
        dialect = os.environ.get("WITHOVER_DIALECT", "ansi")
    return get_dialect(dialect)
