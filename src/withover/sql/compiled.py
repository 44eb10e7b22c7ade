"""Compiled SQL value object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from ..utils.exceptions import WithoverError


@dataclass(frozen=True)
class CompiledSQL:
    """SQL text plus its positional parameters, in placeholder order."""

    sql: str
    params: tuple[object, ...] = ()

    def __iter__(self) -> Iterator[object]:
        # Allows ``sql, params = compiled``
        yield self.sql
        yield self.params


@dataclass(frozen=True)
class CompileResult:
    """Outcome of a non-raising compile: either ``compiled`` or ``error`` is set."""

    compiled: Optional[CompiledSQL] = None
    error: Optional[WithoverError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> CompiledSQL:
        if self.error is not None:
            raise self.error
        assert self.compiled is not None
        return self.compiled
