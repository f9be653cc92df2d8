"""
CatHealth Backend — Cat Route Handlers
========================================

What:  CRUD for the caller's cats plus the photo upload.
Who:   Called by the frontend dashboard, cat detail and cat form pages.

Every route is behind the Authorization Gate. Path ids are taken as
strings and parsed by parse_id, so /api/cats/abc is a 404 like any
other id that matches nothing.

POST /api/cats takes either a JSON body or the add-cat form as
multipart/form-data (name, breed, age, weight as strings plus an optional
`image` file), so a cat and its photo can be created in one request.

Files replaced or orphaned by a request (old photo, attachments of a
deleted cat) are removed by a background task after the response.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, File, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as FormFile

from cathealth.database import get_db_session
from cathealth.dependencies import get_current_user, get_file_service
from cathealth.exceptions import ValidationError
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.cat import CatDetailResponse, CatResponse, CatWrite
from cathealth.schemas.common import ErrorResponse
from cathealth.services.cat_service import CatService, ImageUpload
from cathealth.services.file_service import FileService
from cathealth.services.ownership import parse_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cats", tags=["Cats"])

cat_service = CatService()

OWNED_RESPONSES = {
    403: {"description": "Cat belongs to another user", "model": ErrorResponse},
    404: {"description": "Cat not found", "model": ErrorResponse},
}

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

CAT_WRITE_SCHEMA = CatWrite.model_json_schema(by_alias=True)


def _cat_write(data) -> CatWrite:
    """Validates a body read by hand the same way FastAPI validates declared bodies."""
    try:
        return CatWrite.model_validate(data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False), body=data)


@router.get("", response_model=List[CatResponse], summary="List the caller's cats")
async def list_cats(
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    return await cat_service.list_cats(db, current_user)


@router.post(
    "",
    status_code=201,
    response_model=CatResponse,
    responses={400: {"description": "Invalid cat data", "model": ErrorResponse}},
    summary="Add a cat (JSON, or multipart form with an optional image)",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": CAT_WRITE_SCHEMA},
                "multipart/form-data": {
                    "schema": {
                        **CAT_WRITE_SCHEMA,
                        "properties": {
                            **CAT_WRITE_SCHEMA["properties"],
                            "image": {"type": "string", "format": "binary"},
                        },
                    }
                },
            },
        }
    },
)
async def create_cat(
    request: Request,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> CatResponse:
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith(FORM_CONTENT_TYPES):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError(message="Request body must be JSON or multipart form data")
        return await cat_service.create_cat(db, _cat_write(body), current_user)

    form = await request.form()
    try:
        payload = _cat_write({key: value for key, value in form.items() if key != "image"})
        image = None
        upload = form.get("image")
        # Browsers send an empty part when no file was chosen
        if isinstance(upload, FormFile) and upload.filename:
            content = await upload.read()
            logger.info(
                "Received cat photo with new cat: filename=%s, size=%d bytes",
                upload.filename,
                len(content),
            )
            image = ImageUpload(
                filename=upload.filename,
                content=content,
                content_type=upload.content_type,
                content_length=upload.size,
            )
        return await cat_service.create_cat(db, payload, current_user, image=image, file_service=file_service)
    finally:
        await form.close()


@router.get(
    "/{cat_id}",
    response_model=CatDetailResponse,
    responses=OWNED_RESPONSES,
    summary="Get a cat with its health records",
)
async def get_cat(
    cat_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CatDetailResponse:
    return await cat_service.get_cat(db, parse_id(cat_id, "cat"), current_user)


@router.put(
    "/{cat_id}",
    response_model=CatResponse,
    responses=OWNED_RESPONSES,
    summary="Replace a cat's details",
)
async def update_cat(
    cat_id: str,
    payload: CatWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CatResponse:
    return await cat_service.update_cat(db, parse_id(cat_id, "cat"), payload, current_user)


@router.delete(
    "/{cat_id}",
    status_code=204,
    response_class=Response,
    responses=OWNED_RESPONSES,
    summary="Delete a cat and everything recorded for it",
)
async def delete_cat(
    cat_id: str,
    background_tasks: BackgroundTasks,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> Response:
    orphaned = await cat_service.delete_cat(db, parse_id(cat_id, "cat"), current_user)
    for path in orphaned:
        background_tasks.add_task(file_service.cleanup_file, path)
    return Response(status_code=204)


@router.post(
    "/{cat_id}/image",
    response_model=CatResponse,
    responses={
        **OWNED_RESPONSES,
        400: {"description": "Unsupported file type or size", "model": ErrorResponse},
    },
    summary="Upload a cat photo (PNG, JPG, JPEG or WEBP)",
)
async def upload_cat_image(
    cat_id: str,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(..., description="Photo of the cat"),
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> CatResponse:
    try:
        content = await image.read()
        logger.info(
            "Received cat photo: filename=%s, size=%d bytes",
            image.filename or "unknown",
            len(content),
        )
        cat, previous = await cat_service.set_image(
            db,
            parse_id(cat_id, "cat"),
            current_user,
            file_service,
            filename=image.filename,
            content=content,
            content_type=image.content_type,
            content_length=image.size,
        )
    finally:
        await image.close()

    if previous:
        background_tasks.add_task(file_service.cleanup_file, previous)
    return cat
