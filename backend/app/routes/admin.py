"""
RoomStager Backend — Admin Route Handlers
===========================================

Routes (admin token required, otherwise 403):
    GET    /api/staging/admin/all      every project, paginated
    GET    /api/staging/admin/{id}     any project with area views
    DELETE /api/staging/admin/bulk     delete many by id
    DELETE /api/staging/admin/{id}     delete any project

`/admin/bulk` is registered before `/admin/{id}` so it is never captured as an id.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import PageParams
from app.schemas.project import (
    ApiResponse,
    BulkDeleteRequest,
    BulkDeleteResult,
    ErrorResponse,
    ProjectDetail,
    ProjectPage,
    ProjectSummary,
)
from app.security import Identity, require_admin
from app.services.project_service import project_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staging/admin", tags=["Admin"])

ADMIN_ERRORS = {
    401: {"description": "Missing or invalid access token", "model": ErrorResponse},
    403: {"description": "Admin access required", "model": ErrorResponse},
}


@router.get(
    "/all",
    response_model=ApiResponse[ProjectPage],
    responses=ADMIN_ERRORS,
    summary="List all projects",
)
async def list_all_projects(
    response: Response,
    params: PageParams = Depends(),
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectPage]:
    result = await project_service.list_projects(
        db, identity, page=params.page, limit=params.limit, search=params.search
    )
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return ApiResponse(message="Staging projects retrieved successfully", data=result)


@router.delete(
    "/bulk",
    response_model=ApiResponse[BulkDeleteResult],
    responses={**ADMIN_ERRORS, 400: {"description": "Invalid IDs provided", "model": ErrorResponse}},
    summary="Delete several projects",
)
async def bulk_delete_projects(
    body: BulkDeleteRequest,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[BulkDeleteResult]:
    deleted = await project_service.bulk_delete(db, body.ids)
    logger.info("Admin %s bulk-deleted %d projects", identity.user_id, deleted)
    return ApiResponse(
        message="Staging projects deleted successfully",
        data=BulkDeleteResult(deleted_count=deleted),
    )


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectDetail],
    responses={**ADMIN_ERRORS, 404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Get any project",
)
async def get_any_project(
    project_id: str,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectDetail]:
    detail = await project_service.get_detail(db, project_id, identity)
    return ApiResponse(message="Staging project retrieved successfully", data=detail)


@router.delete(
    "/{project_id}",
    response_model=ApiResponse[ProjectSummary],
    responses={**ADMIN_ERRORS, 404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Delete any project",
)
async def delete_any_project(
    project_id: str,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectSummary]:
    summary = await project_service.delete_project(db, identity, project_id)
    return ApiResponse(message="Staging project deleted successfully", data=summary)
