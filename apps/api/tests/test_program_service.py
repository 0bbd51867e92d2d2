"""Store-backed tests for ProgramService."""

from __future__ import annotations

import pytest

from miles_tracker_api.services.program_service import ProgramService
from miles_tracker_core.errors import NotFoundError, ValidationError


async def test_programs_listed_by_airline_then_name(db):
    service = ProgramService(db)
    for program_id, name, airline in (
        ("krisflyer", "KrisFlyer", "Singapore Airlines"),
        ("enrich", "Enrich", "Malaysia Airlines"),
        ("airpoints", "Airpoints", "Air New Zealand"),
    ):
        await service.upsert_program(
            {"id": program_id, "name": name, "airline": airline}
        )

    programs = await service.list_programs()

    assert [p.id for p in programs] == ["airpoints", "enrich", "krisflyer"]


async def test_upsert_program_updates_existing(db, program):
    service = ProgramService(db)
    original = await service.get_program(program)

    updated = await service.upsert_program(
        {"id": program, "name": "Enrich Platinum", "airline": "Malaysia Airlines"}
    )

    assert updated.name == "Enrich Platinum"
    assert updated.alliance is None
    assert updated.created_at == original.created_at
    assert len(await service.list_programs()) == 1


async def test_get_missing_program(db):
    with pytest.raises(NotFoundError, match="Program nope not found"):
        await ProgramService(db).get_program("nope")


async def test_upsert_program_requires_airline(db):
    with pytest.raises(ValidationError, match="airline is required"):
        await ProgramService(db).upsert_program({"id": "x", "name": "X"})
