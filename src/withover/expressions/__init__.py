"""Expression system public exports."""

from .column import Column, col, ensure_column, literal
from .functions import (
    avg,
    coalesce,
    count,
    cume_dist,
    dense_rank,
    first_value,
    lag,
    last_value,
    lead,
    lit,
    lower,
    max,
    min,
    nth_value,
    ntile,
    percent_rank,
    rank,
    row_number,
    sum,
    upper,
)
from .window import FrameBound, FrameSpec, FrameUnit, Window, WindowFunctionExpr, WindowSpec

__all__ = [
    "Column",
    "FrameBound",
    "FrameSpec",
    "FrameUnit",
    "Window",
    "WindowFunctionExpr",
    "WindowSpec",
    "col",
    "ensure_column",
    "literal",
    "lit",
    "row_number",
    "rank",
    "dense_rank",
    "percent_rank",
    "cume_dist",
    "ntile",
    "lag",
    "lead",
    "first_value",
    "last_value",
    "nth_value",
    "sum",
    "avg",
    "min",
    "max",
    "count",
    "coalesce",
    "upper",
    "lower",
]
