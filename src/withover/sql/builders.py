"""Helper utilities for SQL generation."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from ..utils.exceptions import CompilationError, ConfigurationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")


def comma_separated(values: Iterable[str]) -> str:
    return ", ".join(values)


def validate_relation_name(name: object, kind: str = "relation") -> str:
    """Return ``name`` if it is a single valid SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ConfigurationError(
            f"Invalid {kind} name: {name!r} is not a valid identifier",
            context={"name": name},
        )
    return name


def quote_identifier(identifier: str, quote_char: str = '"') -> str:
    """Quote a possibly dotted identifier, one part at a time.

    Every part must be a plain identifier; quote characters, placeholders and
    whitespace are rejected rather than escaped.
    """
    parts = identifier.split(".")
    for part in parts:
        if not _IDENTIFIER.match(part):
            raise ConfigurationError(
                f"Invalid column identifier: {identifier!r}",
                context={"identifier": identifier},
            )
    return ".".join(f"{quote_char}{part}{quote_char}" for part in parts)


def format_literal(value: object) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    raise TypeError(f"Unsupported literal type: {type(value)!r}")


def check_alignment(sql: str, params: Sequence[object], placeholder: str) -> None:
    """Raise :class:`CompilationError` unless ``sql`` has one placeholder per parameter."""
    emitted = sql.count(placeholder)
    if emitted != len(params):
        raise CompilationError(
            f"Emitted {emitted} placeholder(s) but collected {len(params)} parameter(s)",
            context={"sql": sql, "placeholder": placeholder},
        )
