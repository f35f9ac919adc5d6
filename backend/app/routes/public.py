"""
RoomStager Backend — Public Route Handlers
============================================

Unauthenticated, read-only views used by shared viewer links. Projects are
returned without their owner id.

    GET /api/staging/public          every project, paginated
    GET /api/staging/public/{id}     one project with area views
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import PageParams
from app.schemas.project import ApiResponse, ErrorResponse, ProjectDetail, ProjectPage
from app.services.project_service import project_service

router = APIRouter(prefix="/api/staging/public", tags=["Public"])


@router.get(
    "",
    response_model=ApiResponse[ProjectPage],
    summary="List projects (public)",
)
async def list_public_projects(
    response: Response,
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectPage]:
    result = await project_service.list_projects(
        db, None, page=params.page, limit=params.limit, search=params.search
    )
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return ApiResponse(message="Public staging projects retrieved successfully", data=result)


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectDetail],
    responses={
        400: {"description": "Invalid project ID", "model": ErrorResponse},
        404: {"description": "Project not found", "model": ErrorResponse},
    },
    summary="Get a project (public)",
)
async def get_public_project(
    project_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectDetail]:
    detail = await project_service.get_detail(db, project_id, None)
    return ApiResponse(message="Staging project details retrieved successfully", data=detail)
