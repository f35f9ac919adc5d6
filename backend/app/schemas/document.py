"""
RoomStager Backend — Project Document Schemas
==============================================

What:  Pydantic models for one staging project and its embedded collections.
Why:   The graph rules (app.services.staging_graph) operate on plain in-memory
       objects; the database row is only a container for the serialized form.
How:   Field names are snake_case in Python and camelCase on the wire and in the
       JSON columns (alias generator), matching the document shape clients
       already consume (`areaId`, `parentHotspotId`, `imageUrl`, ...).

Identity model:
    Every embedded entity has a document-internal `_id` (24 hex chars) and, where
    clients need a stable handle, an external identifier with a type prefix
    (`area_...`, `hotspot_...`, `info_...`, `item_...`, `inst_...`).

    Cross references are by-value strings inside the same document:
        Hotspot.parent_area_id  → Area.id        (document id)
        Hotspot.child_area_id   → Area.area_id   (external id)
        Area.parent_hotspot_id  → Hotspot.hotspot_id
        InfoMarker.area_id      → Area.id        (document id)
        ItemInstance.item_id    → LibraryItem.item_id
"""

import secrets
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_object_id() -> str:
    """Document-internal identifier for an embedded entity (ObjectId-shaped)."""
    return secrets.token_hex(12)


class DocumentModel(BaseModel):
    """Shared config: camelCase aliases, population by either name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=False,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Serialized form stored in the JSON columns and returned to clients."""
        return self.model_dump(mode="json", by_alias=True)


class StoredFile(BaseModel):
    """
    Result of handing an upload to object storage.

    The graph layer copies these fields verbatim onto areas, hotspots and
    library items; it never deletes the stored object.
    """

    url: str
    storage_id: str
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: int = 0

    def image_subtype(self, default: str = "jpg") -> str:
        """`image/png` → `png`; used for the short `imageType` fields."""
        if self.mime_type and "/" in self.mime_type:
            subtype = self.mime_type.split("/", 1)[1]
            if subtype:
                return subtype
        return default


class ImageFields(DocumentModel):
    """Image columns shared by areas, hotspots and library items."""

    image_url: Optional[str] = None
    image_public_id: Optional[str] = None
    image_name: Optional[str] = None
    image_type: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    def set_image(self, stored: StoredFile, default_type: str = "jpg") -> None:
        self.image_url = stored.url
        self.image_public_id = stored.storage_id
        self.image_name = stored.original_name
        self.image_type = stored.image_subtype(default_type)

    def copy_image_from(self, other: "ImageFields") -> None:
        self.image_url = other.image_url
        self.image_public_id = other.image_public_id
        self.image_name = other.image_name
        self.image_type = other.image_type

    def clear_image(self) -> None:
        self.image_url = None
        self.image_public_id = None
        self.image_name = None
        self.image_type = None


class ItemInstance(DocumentModel):
    """One placement of a library item inside one area."""

    id: str = Field(default_factory=new_object_id, alias="_id")
    instance_id: str
    item_id: str
    x: float = 0
    y: float = 0
    rotation: float = 0
    width: float = 0
    height: float = 0
    flip_x: bool = False
    flip_y: bool = False
    image_url: Optional[str] = None


class Area(ImageFields):
    """A viewable room or view inside a project."""

    id: str = Field(default_factory=new_object_id, alias="_id")
    area_id: str
    area_name: str
    parent_hotspot_id: Optional[str] = None
    items: List[ItemInstance] = Field(default_factory=list)


class Hotspot(ImageFields):
    """A clickable point on one area's image that opens another area."""

    id: str = Field(default_factory=new_object_id, alias="_id")
    hotspot_id: str
    title: str
    x: float = 0
    y: float = 0
    parent_area_id: str
    child_area_id: Optional[str] = None


class InfoMarker(DocumentModel):
    """A point annotation with descriptive text."""

    id: str = Field(default_factory=new_object_id, alias="_id")
    info_id: Optional[str] = None
    description: str
    x: float = 0
    y: float = 0
    area_id: str


class LibraryItem(ImageFields):
    """A reusable placeable asset owned by the project."""

    id: str = Field(default_factory=new_object_id, alias="_id")
    item_id: str
    width: float = 0
    height: float = 0


class DirectImage(DocumentModel):
    """
    The project's single direct image.

    Populated only while the project has at most one area; once a second area
    exists the image lives on the first area instead (see relocation rules).
    """

    url: Optional[str] = None
    public_id: Optional[str] = Field(default=None, alias="public_id")
    type: Optional[str] = None
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return bool(self.url)

    def clear(self) -> None:
        self.url = None
        self.public_id = None
        self.type = None
        self.original_name = None
        self.mime_type = None
        self.size = None


class ProjectDocument(DocumentModel):
    """
    In-memory form of one staging project.

    Loaded from a `projects` row by ProjectService, mutated by the graph layer,
    and written back as a whole.
    """

    id: Optional[uuid.UUID] = Field(default=None, alias="_id")
    project_name: str
    street_address: str
    apt_landmark: Optional[str] = None
    city_locality: str
    state: str
    country: str
    note: Optional[str] = None
    image: DirectImage = Field(default_factory=DirectImage)
    areas: List[Area] = Field(default_factory=list)
    hotspots: List[Hotspot] = Field(default_factory=list)
    info: List[InfoMarker] = Field(default_factory=list)
    items: List[LibraryItem] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
