"""
RoomStager Backend — API Request/Response Schemas
===================================================

What:  Pydantic models defining the HTTP contract of /api/staging.
Why:   Request validation, camelCase serialization and OpenAPI docs.
How:   Every success body is `ApiResponse[T]` (`message` + `data`); errors use
       `ErrorResponse`, produced by the handlers in app.main.

Numeric inputs (coordinates, sizes) are declared loosely as number-or-string.
Editor clients send them from form fields; the graph layer converts them and
reports a non-numeric value as a 400 with the offending field name.
"""

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from app.schemas.document import (
    Area,
    DirectImage,
    Hotspot,
    InfoMarker,
    ItemInstance,
    LibraryItem,
)

T = TypeVar("T")

NumberInput = Optional[Union[float, str]]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(ApiModel, Generic[T]):
    """Success envelope shared by every /api/staging route."""

    message: str = Field(description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Operation result")


# ══════════════════════════════════════════════════════════════════════════
# Read models
# ══════════════════════════════════════════════════════════════════════════


class ProjectSummary(ApiModel):
    """Project-level fields. `createdBy` is omitted on public routes."""

    id: uuid.UUID = Field(alias="_id")
    project_name: str
    street_address: str
    apt_landmark: Optional[str] = None
    city_locality: str
    state: str
    country: str
    note: Optional[str] = None
    image: Optional[DirectImage] = None
    items: List[LibraryItem] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AreaView(Area):
    """
    An area together with everything drawn on it.

    `hotspots`: hotspots whose parentAreaId is this area's `_id`.
    `info`:     info markers whose areaId is this area's `_id`.
    """

    hotspots: List[Hotspot] = Field(default_factory=list)
    info: List[InfoMarker] = Field(default_factory=list)

    @computed_field(alias="id")
    @property
    def id_alias(self) -> str:
        return self.id


class ProjectDetail(ApiModel):
    project: ProjectSummary
    areas: List[AreaView] = Field(default_factory=list)


class Pagination(ApiModel):
    current_page: int
    per_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, per_page: int, total_items: int) -> "Pagination":
        total_pages = (total_items + per_page - 1) // per_page if total_items else 0
        return cls(
            current_page=page,
            per_page=per_page,
            total_pages=total_pages,
            total_items=total_items,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ProjectPage(ApiModel):
    projects: List[ProjectDetail]
    pagination: Pagination


# ══════════════════════════════════════════════════════════════════════════
# Mutation results
# ══════════════════════════════════════════════════════════════════════════


class AreaCreated(ApiModel):
    area: Area
    project_image: Optional[DirectImage] = None


class HotspotAdded(ApiModel):
    hotspot: Hotspot
    area: Area
    hotspot_created: bool
    area_created: bool


class InfoSaved(ApiModel):
    info: InfoMarker
    created: bool


class AreaHotspotDeleted(ApiModel):
    deleted_area: Optional[Area] = None
    deleted_hotspot: Optional[Hotspot] = None


class LibraryItemCreated(LibraryItem):
    placed_in_area: Optional[ItemInstance] = None


class LibraryItemDeleted(ApiModel):
    item_id: str
    instances_removed: int


class BulkDeleteResult(ApiModel):
    deleted_count: int


# ══════════════════════════════════════════════════════════════════════════
# Request bodies
# ══════════════════════════════════════════════════════════════════════════


class ProjectUpdate(ApiModel):
    """Partial update of the scalar project fields. Collections are not editable here."""

    project_name: Optional[str] = None
    street_address: Optional[str] = None
    apt_landmark: Optional[str] = None
    city_locality: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    note: Optional[str] = None


class InfoRequest(ApiModel):
    description: Optional[str] = None
    x: NumberInput = None
    y: NumberInput = None


class PlaceItemRequest(ApiModel):
    item_id: Optional[str] = None
    x: NumberInput = None
    y: NumberInput = None
    rotation: NumberInput = None
    width: NumberInput = None
    height: NumberInput = None
    flip_x: bool = False
    flip_y: bool = False


class ItemInstanceUpdate(ApiModel):
    x: NumberInput = None
    y: NumberInput = None
    rotation: NumberInput = None
    width: NumberInput = None
    height: NumberInput = None
    flip_x: Optional[bool] = None
    flip_y: Optional[bool] = None


class DeleteAreaHotspotRequest(ApiModel):
    area_id: Optional[str] = None
    hotspot_id: Optional[str] = None


class BulkDeleteRequest(ApiModel):
    ids: Optional[List[str]] = None


# ══════════════════════════════════════════════════════════════════════════
# Error / health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    Example:
        {
            "error": "not_found",
            "message": "project with ID '...' was not found",
            "details": {"resource": "project"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    storage: str = Field(description="writable or unwritable")
    uptime_seconds: float
