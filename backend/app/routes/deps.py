"""Shared helpers for the staging route modules."""

from typing import Optional

from fastapi import Query, UploadFile

from app.config import settings
from app.services.file_service import IncomingFile


async def read_upload(file: Optional[UploadFile]) -> Optional[IncomingFile]:
    """Read a multipart file field; an absent or nameless part counts as no file."""
    if file is None or not file.filename:
        return None
    try:
        content = await file.read()
    finally:
        await file.close()
    return IncomingFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
    )


class PageParams:
    """Query parameters shared by every listing route."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="1-based page number"),
        limit: int = Query(
            default=settings.default_page_size,
            ge=1,
            le=settings.max_page_size,
            description="Projects per page",
        ),
        search: Optional[str] = Query(
            default=None,
            description="Case-insensitive substring match on the project name",
        ),
    ):
        self.page = page
        self.limit = limit
        self.search = search
