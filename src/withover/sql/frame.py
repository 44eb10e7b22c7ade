"""Frame clause rendering for window specifications."""

from __future__ import annotations

import math

from ..expressions.window import FrameBound, FrameBoundKind, FrameSpec
from ..utils.exceptions import ConfigurationError
from .builders import format_literal

_OFFSET_KINDS = frozenset({FrameBoundKind.PRECEDING, FrameBoundKind.FOLLOWING})


def render_frame_bound(bound: FrameBound) -> str:
    """Render one bound; offsets are emitted as numeric literals, never bound."""
    if bound.kind in _OFFSET_KINDS:
        offset = bound.offset
        if offset is None:
            raise ConfigurationError(
                f"{bound.kind.value} frame bound requires an offset",
                context={"kind": bound.kind.name},
            )
        if (
            isinstance(offset, bool)
            or not isinstance(offset, (int, float))
            or not math.isfinite(offset)
            or offset < 0
        ):
            raise ConfigurationError(
                f"{bound.kind.value} frame bound offset must be a finite non-negative number, "
                f"got {offset!r}",
                context={"kind": bound.kind.name, "offset": offset},
            )
        return f"{format_literal(offset)} {bound.kind.value}"
    if bound.offset is not None:
        raise ConfigurationError(
            f"{bound.kind.value} frame bound does not take an offset (got {bound.offset!r})",
            context={"kind": bound.kind.name, "offset": bound.offset},
        )
    return bound.kind.value


def render_frame(frame: FrameSpec) -> str:
    """Render ``UNIT start`` or ``UNIT BETWEEN start AND end``.

    Example:
        >>> render_frame(FrameSpec(FrameUnit.ROWS, FrameBound.preceding(2), FrameBound.following(2)))
        'ROWS BETWEEN 2 PRECEDING AND 2 FOLLOWING'
    """
    if frame.start.kind is FrameBoundKind.UNBOUNDED_FOLLOWING:
        raise ConfigurationError("A window frame cannot start at UNBOUNDED FOLLOWING")
    start = render_frame_bound(frame.start)
    if frame.end is None:
        return f"{frame.unit.value} {start}"
    if frame.end.kind is FrameBoundKind.UNBOUNDED_PRECEDING:
        raise ConfigurationError("A window frame cannot end at UNBOUNDED PRECEDING")
    end = render_frame_bound(frame.end)
    return f"{frame.unit.value} BETWEEN {start} AND {end}"
