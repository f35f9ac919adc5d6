"""
RoomStager Backend — Area, Hotspot and Info Route Handlers
============================================================

What:  HTTP entry points for the staging graph: areas, hotspots between
       areas, and info markers.
How:   Each handler maps form/JSON input onto one ProjectService call; the
       consistency rules live in app.services.staging_graph.

Routes (all under /api/staging/{id}, owner or admin):
    POST   /areas                          add area (multipart: image, areaName)
    GET    /areas                          raw area list
    DELETE /areas/{areaId}                 delete area, keep its hotspots/info
    POST   /areas/{areaId}/hotspots        add or update hotspot (multipart)
    POST   /areas/{areaId}/info            add or overwrite info marker
    DELETE /delete-area-hotspot            delete an area/hotspot pair

`{areaId}` accepts the area's `areaId`, its `_id`, or the `id` alias.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import read_upload
from app.routes.projects import PROJECT_ERRORS
from app.schemas.document import Area
from app.schemas.project import (
    ApiResponse,
    AreaCreated,
    AreaHotspotDeleted,
    DeleteAreaHotspotRequest,
    HotspotAdded,
    InfoRequest,
    InfoSaved,
)
from app.security import Identity, get_current_user
from app.services.project_service import project_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staging", tags=["Areas & Hotspots"])


@router.post(
    "/{project_id}/areas",
    status_code=201,
    response_model=ApiResponse[AreaCreated],
    responses=PROJECT_ERRORS,
    summary="Add an area",
    description=(
        "Adds an area with its own image. When this makes a second area, the "
        "project image moves onto the first area."
    ),
)
async def add_area(
    project_id: str,
    area_name: Optional[str] = Form(None, alias="areaName"),
    image: Optional[UploadFile] = File(None, description="Area image"),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AreaCreated]:
    upload = await read_upload(image)
    created = await project_service.add_area(db, identity, project_id, area_name, upload)
    return ApiResponse(message="Area added successfully", data=created)


@router.get(
    "/{project_id}/areas",
    response_model=ApiResponse[List[Area]],
    responses=PROJECT_ERRORS,
    summary="List areas",
)
async def get_areas(
    project_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[Area]]:
    areas = await project_service.get_areas(db, identity, project_id)
    return ApiResponse(message="Areas retrieved successfully", data=areas)


@router.delete(
    "/{project_id}/areas/{area_id}",
    response_model=ApiResponse[Area],
    responses=PROJECT_ERRORS,
    summary="Delete an area",
    description=(
        "Removes the area only. Hotspots and info markers on it are kept; use "
        "/delete-area-hotspot to remove an area together with its hotspot."
    ),
)
async def delete_area(
    project_id: str,
    area_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Area]:
    area = await project_service.delete_area(db, identity, project_id, area_id)
    logger.info("User %s deleted area %s from project %s", identity.user_id, area.area_id, project_id)
    return ApiResponse(message="Area deleted successfully", data=area)


@router.post(
    "/{project_id}/areas/{area_id}/hotspots",
    status_code=201,
    response_model=ApiResponse[HotspotAdded],
    responses=PROJECT_ERRORS,
    summary="Add or update a hotspot",
    description=(
        "Places a hotspot on the area and links it to the area named like its "
        "title (created from the upload when none exists). Repeating the call "
        "with the same title updates both instead of duplicating them."
    ),
)
async def add_hotspot(
    project_id: str,
    area_id: str,
    title: Optional[str] = Form(None),
    x: Optional[str] = Form(None),
    y: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Image of the linked area"),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[HotspotAdded]:
    upload = await read_upload(image)
    added = await project_service.add_hotspot(
        db, identity, project_id, area_id, title, x, y, upload
    )
    return ApiResponse(message="Hotspot added successfully", data=added)


@router.post(
    "/{project_id}/areas/{area_id}/info",
    response_model=ApiResponse[InfoSaved],
    responses=PROJECT_ERRORS,
    summary="Add or update an info marker",
    description="A marker already at the same x/y in this area is overwritten.",
)
async def upsert_info(
    project_id: str,
    area_id: str,
    body: InfoRequest,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[InfoSaved]:
    saved = await project_service.upsert_info(
        db, identity, project_id, area_id, body.description, body.x, body.y
    )
    return ApiResponse(message="Info added successfully", data=saved)


@router.delete(
    "/{project_id}/delete-area-hotspot",
    response_model=ApiResponse[AreaHotspotDeleted],
    responses=PROJECT_ERRORS,
    summary="Delete an area together with its hotspot",
    description=(
        "Give areaId and/or hotspotId, in the JSON body or as query parameters. "
        "Deleting an area also deletes the hotspot that opens it; deleting a "
        "hotspot also deletes the area it opens. One level only."
    ),
)
async def delete_area_and_hotspot(
    project_id: str,
    body: Optional[DeleteAreaHotspotRequest] = Body(None),
    area_id: Optional[str] = Query(None, alias="areaId"),
    hotspot_id: Optional[str] = Query(None, alias="hotspotId"),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AreaHotspotDeleted]:
    if body is not None:
        area_id = body.area_id or area_id
        hotspot_id = body.hotspot_id or hotspot_id
    deleted = await project_service.delete_area_and_hotspot(
        db, identity, project_id, area_ref=area_id, hotspot_ref=hotspot_id
    )
    logger.info(
        "User %s deleted area %s and hotspot %s from project %s",
        identity.user_id,
        deleted.deleted_area.area_id if deleted.deleted_area else None,
        deleted.deleted_hotspot.hotspot_id if deleted.deleted_hotspot else None,
        project_id,
    )
    return ApiResponse(message="Area and hotspot deleted successfully", data=deleted)
