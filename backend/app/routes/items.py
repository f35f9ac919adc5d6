"""
RoomStager Backend — Item Library Route Handlers
==================================================

Routes (all under /api/staging/{id}, owner or admin):
    POST   /items                                  add to library (multipart)
    DELETE /items/{itemId}                         remove from library and all areas
    POST   /areas/{areaId}/items                   place a library item
    PUT    /areas/{areaId}/items/{instanceId}      move/rotate/resize/flip a placement
    DELETE /areas/{areaId}/items/{instanceId}      remove one placement
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import read_upload
from app.routes.projects import PROJECT_ERRORS
from app.schemas.document import ItemInstance
from app.schemas.project import (
    ApiResponse,
    ItemInstanceUpdate,
    LibraryItemCreated,
    LibraryItemDeleted,
    PlaceItemRequest,
)
from app.security import Identity, get_current_user
from app.services.project_service import project_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staging", tags=["Items"])


@router.post(
    "/{project_id}/items",
    status_code=201,
    response_model=ApiResponse[LibraryItemCreated],
    responses=PROJECT_ERRORS,
    summary="Add an item to the project library",
    description=(
        "Optionally places it right away when areaId is given; an unknown "
        "areaId skips the placement but still adds the item."
    ),
)
async def add_library_item(
    project_id: str,
    image: Optional[UploadFile] = File(None, description="Item image"),
    width: Optional[str] = Form(None),
    height: Optional[str] = Form(None),
    area_id: Optional[str] = Form(None, alias="areaId"),
    x: Optional[str] = Form(None),
    y: Optional[str] = Form(None),
    rotation: Optional[str] = Form(None),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LibraryItemCreated]:
    upload = await read_upload(image)
    created = await project_service.add_library_item(
        db,
        identity,
        project_id,
        upload,
        width=width,
        height=height,
        area_ref=area_id,
        x=x,
        y=y,
        rotation=rotation,
    )
    return ApiResponse(message="Item added to library successfully", data=created)


@router.delete(
    "/{project_id}/items/{item_id}",
    response_model=ApiResponse[LibraryItemDeleted],
    responses=PROJECT_ERRORS,
    summary="Delete a library item",
    description="Also removes every placement of the item in every area.",
)
async def delete_library_item(
    project_id: str,
    item_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LibraryItemDeleted]:
    removed = await project_service.delete_library_item(db, identity, project_id, item_id)
    logger.info(
        "User %s deleted item %s from project %s (%d placements removed)",
        identity.user_id,
        removed.item_id,
        project_id,
        removed.instances_removed,
    )
    return ApiResponse(
        message="Item deleted from project and all areas successfully",
        data=removed,
    )


@router.post(
    "/{project_id}/areas/{area_id}/items",
    status_code=201,
    response_model=ApiResponse[ItemInstance],
    responses=PROJECT_ERRORS,
    summary="Place a library item in an area",
    description="Width and height default to the library item's size.",
)
async def place_item(
    project_id: str,
    area_id: str,
    body: PlaceItemRequest,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ItemInstance]:
    instance = await project_service.place_item(
        db,
        identity,
        project_id,
        area_id,
        body.item_id,
        x=body.x,
        y=body.y,
        rotation=body.rotation,
        width=body.width,
        height=body.height,
        flip_x=body.flip_x,
        flip_y=body.flip_y,
    )
    return ApiResponse(message="Item added to area successfully", data=instance)


@router.put(
    "/{project_id}/areas/{area_id}/items/{instance_id}",
    response_model=ApiResponse[ItemInstance],
    responses=PROJECT_ERRORS,
    summary="Update an item placement",
)
async def update_item_instance(
    project_id: str,
    area_id: str,
    instance_id: str,
    body: ItemInstanceUpdate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ItemInstance]:
    instance = await project_service.update_item_instance(
        db, identity, project_id, area_id, instance_id, body.model_dump(exclude_unset=True)
    )
    return ApiResponse(message="Item updated successfully", data=instance)


@router.delete(
    "/{project_id}/areas/{area_id}/items/{instance_id}",
    response_model=ApiResponse[ItemInstance],
    responses=PROJECT_ERRORS,
    summary="Remove an item placement",
    description="The library item itself is kept.",
)
async def delete_item_instance(
    project_id: str,
    area_id: str,
    instance_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ItemInstance]:
    instance = await project_service.delete_item_instance(
        db, identity, project_id, area_id, instance_id
    )
    return ApiResponse(message="Item deleted from area successfully", data=instance)
