"""
CatHealth Backend — Stored File Route
=======================================

GET /api/files/{path}

Serves cat photos and record documents saved by FileService. Public like
the rest of the static surface: the path contains a random UUID and is
only handed out in responses to the owner.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from cathealth.dependencies import get_file_service
from cathealth.schemas.common import ErrorResponse
from cathealth.services.file_service import FileService

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    responses={
        200: {"description": "Stored file"},
        400: {"description": "Path outside the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded file",
)
async def serve_file(
    file_path: str,
    file_service: FileService = Depends(get_file_service),
) -> FileResponse:
    # media type is guessed from the stored extension
    return FileResponse(
        path=str(file_service.resolve(file_path)),
        headers={"Cache-Control": "private, max-age=86400"},
    )
