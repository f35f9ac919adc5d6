"""
RoomStager Backend — Stored File Route
========================================

Serves uploads written by FileService at the URLs recorded on projects,
areas, hotspots and library items (`/api/files/staging/YYYY/MM/DD/img_...`).
Public: viewer links embed these URLs directly.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.config import settings
from app.schemas.project import ErrorResponse
from app.services.file_service import file_service

router = APIRouter(prefix=settings.files_url_prefix, tags=["Files"])


@router.get(
    "/{file_path:path}",
    response_class=FileResponse,
    responses={404: {"description": "File not found", "model": ErrorResponse}},
    summary="Download a stored image",
)
async def get_file(file_path: str) -> FileResponse:
    path = file_service.resolve_path(file_path)
    # Stored files are never rewritten in place
    return FileResponse(
        path,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
