"""Loyalty program router."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from miles_tracker_core.errors import ValidationError
from miles_tracker_db.database import Database  # noqa: TC002

from ..dependencies import get_db, json_body
from ..schemas.common import ApiResponse
from ..schemas.programs import ProgramItem
from ..services.program_service import ProgramService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/programs", tags=["programs"])

DbDep = Annotated[Database, Depends(get_db)]


@router.get("", response_model=ApiResponse[list[ProgramItem]])
async def list_programs(db: DbDep) -> ApiResponse[list[ProgramItem]]:
    programs = await ProgramService(db).list_programs()
    return ApiResponse[list[ProgramItem]](data=programs)


@router.post("", response_model=ApiResponse[ProgramItem])
async def upsert_program(
    body: Annotated[Any, Depends(json_body)], db: DbDep
) -> ApiResponse[ProgramItem]:
    if not isinstance(body, dict):
        msg = "Request body must be an object"
        raise ValidationError(msg)
    program = await ProgramService(db).upsert_program(body)
    return ApiResponse[ProgramItem](data=program)


@router.get("/{program_id}", response_model=ApiResponse[ProgramItem])
async def get_program(program_id: str, db: DbDep) -> ApiResponse[ProgramItem]:
    program = await ProgramService(db).get_program(program_id)
    return ApiResponse[ProgramItem](data=program)
