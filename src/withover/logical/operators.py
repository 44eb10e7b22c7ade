"""Factory helpers for logical plan nodes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from ..expressions.column import Column
from .plan import Filter, Limit, LogicalPlan, Project, Sort, SortOrder, TableScan


def scan(table: str, alias: str | None = None) -> TableScan:
    """Create a TableScan logical plan node.

    Args:
        table: Name of the table (or CTE) to scan
        alias: Optional alias for the relation

    Returns:
        TableScan logical plan node
    """
    return TableScan(table=table, alias=alias)


def project(child: LogicalPlan, columns: Sequence[Column]) -> Project:
    return Project(child=child, projections=tuple(columns))


def filter(child: LogicalPlan, predicate: Column) -> Filter:  # noqa: A001
    return Filter(child=child, predicate=predicate)


def limit(child: LogicalPlan, count: int, offset: int = 0) -> Limit:
    """Create a Limit logical plan node.

    Args:
        child: Child logical plan
        count: Maximum number of rows to return
        offset: Number of rows to skip before returning results

    Returns:
        Limit logical plan node
    """
    return Limit(child=child, count=count, offset=offset)


def sort_order(expression: Column, descending: bool = False) -> SortOrder:
    return SortOrder(expression=expression, descending=descending)


def order_by(child: LogicalPlan, orders: Sequence[SortOrder]) -> Sort:
    return Sort(child=child, orders=tuple(orders))


def retarget(plan: LogicalPlan, relation: str) -> LogicalPlan:
    """Point the plan's source relation at ``relation``.

    Every operator above the scan is kept, so predicates, projections and
    ordering apply to the new relation exactly as they did to the old one.
    """
    if isinstance(plan, TableScan):
        return replace(plan, table=relation)
    if isinstance(plan, (Project, Filter, Limit, Sort)):
        return replace(plan, child=retarget(plan.child, relation))
    raise TypeError(f"Cannot retarget plan node {type(plan).__name__}")
