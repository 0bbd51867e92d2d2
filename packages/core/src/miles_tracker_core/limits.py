"""Tunable defaults and ceilings for queries and bulk writes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class QueryLimits:
    """Deployment-specific constants consumed by the normalizer and services.

    ``storage_batch_chunk_size`` must not exceed the store's statements-per-
    batch ceiling.
    """

    default_origin: str = "KUL"
    default_limit: int = 200
    max_limit: int = 500
    max_upsert_records: int = 500
    storage_batch_chunk_size: int = 50


DEFAULT_LIMITS = QueryLimits()
