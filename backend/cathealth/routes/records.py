"""
CatHealth Backend — Health Record Route Handlers
==================================================

What:  Vaccinations, checkups, medications and other health events.
How:   Creation and listing are addressed through the cat
       (/api/cats/{catId}/records); everything else through the record id
       (/api/records/{id}), with ownership resolved record → cat → owner.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.database import get_db_session
from cathealth.dependencies import get_current_user, get_file_service
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.common import ErrorResponse
from cathealth.schemas.health_record import HealthRecordResponse, HealthRecordWrite
from cathealth.services.file_service import FileService
from cathealth.services.health_record_service import HealthRecordService
from cathealth.services.ownership import parse_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health Records"])

record_service = HealthRecordService()

OWNED_RESPONSES = {
    403: {"description": "Belongs to another user", "model": ErrorResponse},
    404: {"description": "Cat or record not found", "model": ErrorResponse},
}


@router.post(
    "/cats/{cat_id}/records",
    status_code=201,
    response_model=HealthRecordResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid record", "model": ErrorResponse}},
    summary="Add a health record to a cat",
)
async def create_record(
    cat_id: str,
    payload: HealthRecordWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> HealthRecordResponse:
    return await record_service.create_record(db, parse_id(cat_id, "cat"), payload, current_user)


@router.get(
    "/cats/{cat_id}/records",
    response_model=List[HealthRecordResponse],
    responses=OWNED_RESPONSES,
    summary="List a cat's health records (newest date first)",
)
async def list_records(
    cat_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[HealthRecordResponse]:
    return await record_service.list_records(db, parse_id(cat_id, "cat"), current_user)


@router.get(
    "/records/{record_id}",
    response_model=HealthRecordResponse,
    responses=OWNED_RESPONSES,
    summary="Get a health record",
)
async def get_record(
    record_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> HealthRecordResponse:
    return await record_service.get_record(db, parse_id(record_id, "health record"), current_user)


@router.put(
    "/records/{record_id}",
    response_model=HealthRecordResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid record", "model": ErrorResponse}},
    summary="Replace a health record",
)
async def update_record(
    record_id: str,
    payload: HealthRecordWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> HealthRecordResponse:
    return await record_service.update_record(
        db, parse_id(record_id, "health record"), payload, current_user
    )


@router.delete(
    "/records/{record_id}",
    status_code=204,
    response_class=Response,
    responses=OWNED_RESPONSES,
    summary="Delete a health record",
)
async def delete_record(
    record_id: str,
    background_tasks: BackgroundTasks,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> Response:
    orphaned = await record_service.delete_record(db, parse_id(record_id, "health record"), current_user)
    if orphaned:
        background_tasks.add_task(file_service.cleanup_file, orphaned)
    return Response(status_code=204)


@router.post(
    "/records/{record_id}/file",
    response_model=HealthRecordResponse,
    responses={
        **OWNED_RESPONSES,
        400: {"description": "Unsupported file type or size", "model": ErrorResponse},
    },
    summary="Attach a document (PDF or image) to a health record",
)
async def upload_record_file(
    record_id: str,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(..., description="Vet document, invoice or photo"),
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> HealthRecordResponse:
    try:
        content = await file.read()
        logger.info(
            "Received record document: filename=%s, size=%d bytes",
            file.filename or "unknown",
            len(content),
        )
        record, previous = await record_service.attach_file(
            db,
            parse_id(record_id, "health record"),
            current_user,
            file_service,
            filename=file.filename,
            content=content,
            content_type=file.content_type,
            content_length=file.size,
        )
    finally:
        await file.close()

    if previous:
        background_tasks.add_task(file_service.cleanup_file, previous)
    return record
