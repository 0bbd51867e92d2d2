"""Parameterized WHERE clause construction for ``award_flights`` queries.

Predicates and their values are accumulated side by side and only joined
when the clause is rendered, so user input never becomes part of the SQL
text.  Placeholders are positional ``?`` markers; ``params`` holds the bound
values in the same order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

from .schemas.enums import SortOrder

if TYPE_CHECKING:
    from datetime import date

    from .schemas.enums import Cabin
    from .schemas.filters import (
        CheapestByDateFilters,
        DeleteFilters,
        DestinationFilters,
        RouteFilters,
    )

_ORDER_BY: dict[SortOrder, str] = {
    SortOrder.POINTS: "ORDER BY points ASC, departure_date ASC, departure_time ASC",
    SortOrder.DATE: "ORDER BY departure_date ASC, departure_time ASC, points ASC",
}


@dataclass
class WhereClause:
    """Ordered ``predicate AND predicate ...`` list with its bound values."""

    predicates: list[str] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)

    def add(self, predicate: str, *params: Any) -> Self:
        if predicate.count("?") != len(params):
            msg = f"Predicate {predicate!r} expects {predicate.count('?')} params"
            raise ValueError(msg)
        self.predicates.append(predicate)
        self.params.extend(params)
        return self

    def add_if(self, value: Any, predicate: str) -> Self:
        """Add ``predicate`` bound to *value* unless *value* is None."""
        if value is not None:
            self.add(predicate, value)
        return self

    @property
    def sql(self) -> str:
        if not self.predicates:
            return ""
        return "WHERE " + " AND ".join(self.predicates)


def _date_range(
    where: WhereClause, date_from: date | None, date_to: date | None
) -> WhereClause:
    where.add_if(date_from, "departure_date >= ?")
    where.add_if(date_to, "departure_date <= ?")
    return where


def _cabin(where: WhereClause, cabin: Cabin | None) -> WhereClause:
    return where.add_if(cabin.value if cabin is not None else None, "cabin = ?")


def _available(where: WhereClause, available_only: bool) -> WhereClause:
    if available_only:
        where.add("available = ?", True)
    return where


def build_route_where(filters: RouteFilters) -> WhereClause:
    """WHERE clause shared by the search, count and stats queries.

    Origin and destination are always constrained.  A single ``date`` replaces
    the range predicates; every other filter contributes only when set.
    """
    where = WhereClause()
    where.add("origin = ?", filters.origin)
    where.add("destination = ?", filters.destination)

    if filters.date is not None:
        where.add("departure_date = ?", filters.date)
    else:
        _date_range(where, filters.date_from, filters.date_to)

    _cabin(where, filters.cabin)
    where.add_if(filters.tier, "tier = ?")
    where.add_if(filters.program_id, "program_id = ?")
    _available(where, filters.available_only)
    where.add_if(filters.points_max, "points <= ?")
    where.add_if(filters.points_min, "points >= ?")
    return where


def build_delete_where(filters: DeleteFilters) -> WhereClause:
    where = WhereClause()
    where.add("program_id = ?", filters.program_id)
    where.add("destination = ?", filters.destination)
    where.add("origin = ?", filters.origin)
    _date_range(where, filters.date_from, filters.date_to)
    return _cabin(where, filters.cabin)


def build_destination_where(filters: DestinationFilters) -> WhereClause:
    where = WhereClause()
    where.add("origin = ?", filters.origin)
    _date_range(where, filters.date_from, filters.date_to)
    _cabin(where, filters.cabin)
    return _available(where, filters.available_only)


def build_cheapest_where(filters: CheapestByDateFilters) -> WhereClause:
    where = WhereClause()
    where.add("origin = ?", filters.origin)
    where.add("destination = ?", filters.destination)
    _date_range(where, filters.date_from, filters.date_to)
    _cabin(where, filters.cabin)
    where.add_if(filters.program_id, "program_id = ?")
    return _available(where, filters.available_only)


def order_by(sort: SortOrder) -> str:
    """ORDER BY clause with a full tie-break chain for stable pagination."""
    return _ORDER_BY[sort]
