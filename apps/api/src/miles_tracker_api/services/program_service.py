"""Loyalty program service."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from miles_tracker_core.errors import NotFoundError
from miles_tracker_core.normalize import normalize_program
from miles_tracker_db.database import storage_errors

from .rows import PROGRAM_COLUMNS, to_program_item

if TYPE_CHECKING:
    from collections.abc import Mapping

    from miles_tracker_db.database import Database

    from ..schemas.programs import ProgramItem

logger = logging.getLogger(__name__)

_UPSERT_SQL = (
    "INSERT INTO programs (id, name, airline, alliance, created_at) "
    "VALUES (?, ?, ?, ?, ?) "
    "ON CONFLICT (id) DO UPDATE SET name = excluded.name, "
    "airline = excluded.airline, alliance = excluded.alliance"
)


class ProgramService:
    """Handles loyalty program listing and registration."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def list_programs(self) -> list[ProgramItem]:
        with storage_errors("Failed to list programs"):
            rows = await self._db.fetch_all(
                f"SELECT {PROGRAM_COLUMNS} FROM programs ORDER BY airline ASC, name ASC"
            )
        return [to_program_item(row) for row in rows]

    async def get_program(self, program_id: str) -> ProgramItem:
        with storage_errors("Failed to load program"):
            row = await self._db.fetch_one(
                f"SELECT {PROGRAM_COLUMNS} FROM programs WHERE id = ?", [program_id]
            )
        if row is None:
            msg = f"Program {program_id} not found"
            raise NotFoundError(msg)
        return to_program_item(row)

    async def upsert_program(self, raw: Mapping[str, Any]) -> ProgramItem:
        """Create a program, or rename an existing one; ``created_at`` is kept."""
        program = normalize_program(raw)
        with storage_errors("Failed to save program"):
            await self._db.execute(
                _UPSERT_SQL,
                [
                    program.id,
                    program.name,
                    program.airline,
                    program.alliance,
                    datetime.now(UTC),
                ],
            )
        logger.info("Saved program %s (%s)", program.id, program.airline)
        return await self.get_program(program.id)
