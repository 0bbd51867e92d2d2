"""Core schemas for Miles Tracker."""

from .enums import Cabin, RouteType, SortOrder
from .filters import (
    CheapestByDateFilters,
    DeleteFilters,
    DestinationFilters,
    FlightRecord,
    ProgramInput,
    RouteFilters,
    SearchFilters,
    StatsFilters,
)

__all__ = [
    "Cabin",
    "CheapestByDateFilters",
    "DeleteFilters",
    "DestinationFilters",
    "FlightRecord",
    "ProgramInput",
    "RouteFilters",
    "RouteType",
    "SearchFilters",
    "SortOrder",
    "StatsFilters",
]
