"""
RoomStager Backend — Project Route Handlers (owner scope)
===========================================================

What:  The caller's own projects: list, detail, create, update, delete.
How:   Thin handlers. Parse the request, call ProjectService, wrap the result
       in ApiResponse. Errors are formatted by the handlers in app.main.

Routes:
    GET    /api/staging/user           own projects, paginated
    GET    /api/staging/user/{id}      own project with area views
    POST   /api/staging                create (multipart, optional `images` file)
    PUT    /api/staging/{id}           partial update of scalar fields
    DELETE /api/staging/{id}           hard delete

Admins pass the ownership check on detail/update/delete for any project.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import PageParams, read_upload
from app.schemas.project import (
    ApiResponse,
    ErrorResponse,
    ProjectDetail,
    ProjectPage,
    ProjectSummary,
    ProjectUpdate,
)
from app.security import Identity, get_current_user
from app.services.project_service import project_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staging", tags=["Projects"])

AUTH_ERRORS = {
    401: {"description": "Missing or invalid access token", "model": ErrorResponse},
}
PROJECT_ERRORS = {
    **AUTH_ERRORS,
    400: {"description": "Invalid project ID or input", "model": ErrorResponse},
    404: {"description": "Project not found", "model": ErrorResponse},
}


@router.get(
    "/user",
    response_model=ApiResponse[ProjectPage],
    responses=AUTH_ERRORS,
    summary="List your projects",
    description="Newest first. `search` filters by project name (case-insensitive substring).",
)
async def list_own_projects(
    response: Response,
    params: PageParams = Depends(),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectPage]:
    result = await project_service.list_projects(
        db,
        identity,
        page=params.page,
        limit=params.limit,
        search=params.search,
        owned_only=True,
    )
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return ApiResponse(message="Your staging projects retrieved successfully", data=result)


@router.get(
    "/user/{project_id}",
    response_model=ApiResponse[ProjectDetail],
    responses=PROJECT_ERRORS,
    summary="Get one of your projects",
    description="Each area carries the hotspots placed on it, its info markers and its item placements.",
)
async def get_own_project(
    project_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectDetail]:
    detail = await project_service.get_detail(db, project_id, identity)
    return ApiResponse(message="Staging project retrieved successfully", data=detail)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[ProjectDetail],
    responses={
        **AUTH_ERRORS,
        400: {"description": "Missing required fields or unsupported image", "model": ErrorResponse},
    },
    summary="Create a project",
    description=(
        "Multipart form. projectName, streetAddress, cityLocality, state and country are "
        "required. An optional `images` file becomes the project image, and a first area "
        "named after the project is created showing it."
    ),
)
async def create_project(
    project_name: Optional[str] = Form(None, alias="projectName"),
    street_address: Optional[str] = Form(None, alias="streetAddress"),
    apt_landmark: Optional[str] = Form(None, alias="aptLandmark"),
    city_locality: Optional[str] = Form(None, alias="cityLocality"),
    state: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    note: Optional[str] = Form(None),
    images: Optional[UploadFile] = File(None, description="Optional project image"),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectDetail]:
    upload = await read_upload(images)
    detail = await project_service.create_project(
        db,
        identity,
        fields={
            "project_name": project_name,
            "street_address": street_address,
            "apt_landmark": apt_landmark,
            "city_locality": city_locality,
            "state": state,
            "country": country,
            "note": note,
        },
        upload=upload,
    )
    return ApiResponse(message="Staging project created successfully", data=detail)


@router.put(
    "/{project_id}",
    response_model=ApiResponse[ProjectDetail],
    responses=PROJECT_ERRORS,
    summary="Update project fields",
    description="Only the fields present in the body are changed. Areas, hotspots, info and items are not editable here.",
)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectDetail]:
    detail = await project_service.update_project(
        db, identity, project_id, body.model_dump(exclude_unset=True)
    )
    return ApiResponse(message="Staging project updated successfully", data=detail)


@router.delete(
    "/{project_id}",
    response_model=ApiResponse[ProjectSummary],
    responses=PROJECT_ERRORS,
    summary="Delete a project",
    description="Irreversible. Uploaded images are not removed from storage.",
)
async def delete_project(
    project_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProjectSummary]:
    summary = await project_service.delete_project(db, identity, project_id)
    logger.info("User %s deleted project %s", identity.user_id, project_id)
    return ApiResponse(message="Staging project deleted successfully", data=summary)
