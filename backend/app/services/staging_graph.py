"""
RoomStager Backend — Staging Graph Rules
==========================================

What:  The mutation rules for areas, hotspots, info markers and items inside
       one project document.
Why:   These collections reference each other by string ids (hotspot → parent
       and child area, info → area, instance → library item) and must stay
       consistent under partial updates and deletes.
How:   Plain functions over a loaded `ProjectDocument`. No I/O, no sessions:
       ProjectService loads the document, calls exactly one of these, and
       saves the document back.
Who:   Called by ProjectService; unit-tested directly.

Rules at a glance:
    ┌────────────────────────┬──────────────────────────────────────────────┐
    │ add_area               │ append, then relocate image fields           │
    │ create_area_from_...   │ project creation only; keeps both copies     │
    │ relocate_image_fields  │ image on project iff exactly one area        │
    │ add_hotspot            │ dedup hotspot by title, child area by name   │
    │ upsert_info            │ one marker per (area, x, y)                  │
    │ delete_area            │ image hand-off; hotspots/info left dangling  │
    │ delete_area_and_hotspot│ single-hop pair delete                       │
    │ delete_library_item    │ full cascade across every area               │
    │ delete_item_instance   │ one instance, no cascade                     │
    └────────────────────────┴──────────────────────────────────────────────┘

Every mutating entry point except `create_area_from_project_image` finishes by
calling `relocate_image_fields`, so the "where does the image live" state is
repaired after any structural change regardless of which route caused it.

Validation happens before the first write to the document: a ValidationError
or NotFoundError leaves the document untouched.
"""

import logging
import math
from typing import Any, List, NamedTuple, Optional

from app.exceptions import NotFoundError, ValidationError
from app.schemas.document import (
    Area,
    Hotspot,
    InfoMarker,
    ItemInstance,
    LibraryItem,
    ProjectDocument,
    StoredFile,
)
from app.services import identifiers

logger = logging.getLogger(__name__)


class HotspotPlacement(NamedTuple):
    hotspot: Hotspot
    area: Area
    hotspot_created: bool
    area_created: bool


class InfoUpsert(NamedTuple):
    info: InfoMarker
    created: bool


class PairDeletion(NamedTuple):
    area: Optional[Area]
    hotspot: Optional[Hotspot]


class LibraryItemAdded(NamedTuple):
    item: LibraryItem
    placed: Optional[ItemInstance]


class LibraryItemRemoved(NamedTuple):
    item: LibraryItem
    instances_removed: int


# ══════════════════════════════════════════════════════════════════════════
# Input coercion
# ══════════════════════════════════════════════════════════════════════════

def coerce_number(value: Any, field: str, default: Optional[float] = None) -> float:
    """
    Parse a coordinate/size that may arrive as a form string.

    Missing values fall back to `default`; without a default they are an error.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(message=f"{field} is required", field=field)
        return default
    if isinstance(value, bool):
        raise ValidationError(message=f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            message=f"{field} must be a number",
            field=field,
            context={"value": str(value)},
        )
    if not math.isfinite(number):
        raise ValidationError(message=f"{field} must be a finite number", field=field)
    return number


def require_text(value: Optional[str], field: str, message: Optional[str] = None) -> str:
    """Trimmed non-empty text or ValidationError."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(message=message or f"{field} is required", field=field)
    return text


def require_image(image: Optional[StoredFile], message: str) -> StoredFile:
    if image is None:
        raise ValidationError(message=message, field="image")
    return image


def name_key(value: Optional[str]) -> str:
    """Comparison key for hotspot titles and area names."""
    return (value or "").strip().lower()


# ══════════════════════════════════════════════════════════════════════════
# Lookups
# ══════════════════════════════════════════════════════════════════════════

def resolve_area(document: ProjectDocument, area_ref: Optional[str]) -> Optional[Area]:
    """
    Find an area by any of its accepted handles.

    Clients send the external `areaId` (`area_...`), the document `_id`, or the
    `id` alias (same value as `_id`). All three reduce to one comparison here so
    no operation carries its own resolution logic.
    """
    ref = (area_ref or "").strip()
    if not ref:
        return None
    for area in document.areas:
        if ref == area.area_id or ref == area.id:
            return area
    return None


def require_area(
    document: ProjectDocument,
    area_ref: Optional[str],
    resource: str = "area",
) -> Area:
    area = resolve_area(document, area_ref)
    if area is None:
        raise NotFoundError(resource=resource, resource_id=area_ref)
    return area


def find_hotspot(document: ProjectDocument, hotspot_ref: Optional[str]) -> Optional[Hotspot]:
    ref = (hotspot_ref or "").strip()
    if not ref:
        return None
    for hotspot in document.hotspots:
        if ref == hotspot.hotspot_id or ref == hotspot.id:
            return hotspot
    return None


def find_library_item(document: ProjectDocument, item_id: Optional[str]) -> Optional[LibraryItem]:
    for item in document.items:
        if item.item_id == item_id:
            return item
    return None


def hotspots_in_area(document: ProjectDocument, area: Area) -> List[Hotspot]:
    return [h for h in document.hotspots if h.parent_area_id == area.id]


def info_in_area(document: ProjectDocument, area: Area) -> List[InfoMarker]:
    return [i for i in document.info if i.area_id == area.id]


def _remove(collection: list, entity: Any) -> None:
    collection[:] = [e for e in collection if e is not entity]


# ══════════════════════════════════════════════════════════════════════════
# Image-field relocation
# ══════════════════════════════════════════════════════════════════════════

def _lift_area_image(document: ProjectDocument, area: Area) -> None:
    """Move an area's image onto the project and clear it from the area."""
    image = document.image
    image.url = area.image_url
    image.public_id = area.image_public_id
    image.original_name = area.image_name
    image.mime_type = f"image/{area.image_type}" if area.image_type else "image/jpeg"
    image.type = "capture"
    image.size = 0
    area.clear_image()


def _push_project_image(document: ProjectDocument, area: Area) -> None:
    """Copy the project's direct image onto an area that has none."""
    image = document.image
    area.image_url = image.url
    area.image_public_id = image.public_id
    area.image_name = image.original_name
    subtype = (image.mime_type or "").partition("/")[2]
    area.image_type = subtype or "jpg"


def relocate_image_fields(document: ProjectDocument) -> None:
    """
    Keep the project's direct image valid exactly when there is one area.

    - two or more areas: the project's direct image moves onto the first area
      (only if that area has no image of its own) and is cleared from the project
    - exactly one area holding an image: that image moves up to the project and
      is cleared from the area
    - no areas: nothing to do

    Running it on an already consistent document changes nothing.
    """
    areas = document.areas
    if len(areas) >= 2:
        first = areas[0]
        if document.image.is_set and not first.has_image:
            _push_project_image(document, first)
            logger.debug("Relocated project image onto first area %s", first.area_id)
        document.image.clear()
    elif len(areas) == 1:
        only = areas[0]
        if only.has_image:
            _lift_area_image(document, only)
            logger.debug("Relocated image of sole area %s onto project", only.area_id)


# ══════════════════════════════════════════════════════════════════════════
# Areas
# ══════════════════════════════════════════════════════════════════════════

def add_area(
    document: ProjectDocument,
    area_name: Optional[str],
    image: Optional[StoredFile],
) -> Area:
    """Append a new area carrying its own image. Area names are not unique."""
    name = require_text(area_name, "areaName", "Area name is required")
    stored = require_image(image, "Image is required for area")

    area = Area(area_id=identifiers.generate_id(identifiers.AREA, 9), area_name=name)
    area.set_image(stored, default_type="png")
    document.areas.append(area)

    relocate_image_fields(document)
    return area


def create_area_from_project_image(document: ProjectDocument) -> Optional[Area]:
    """
    Project creation with a direct image: add one area showing that image.

    The project keeps its own copy of the image as well; relocation is not run
    here, so both copies exist until the next structural change.
    """
    if not document.image.is_set:
        return None

    area = Area(area_id=identifiers.generate_id(identifiers.AREA), area_name=document.project_name)
    _push_project_image(document, area)
    document.areas.append(area)
    return area


def delete_area(document: ProjectDocument, area_ref: Optional[str]) -> Area:
    """
    Remove one area and hand its image on.

    Hotspots and info markers that point at the removed area are kept.
    Use `delete_area_and_hotspot` to drop the linked hotspot too.
    """
    area = require_area(document, area_ref)
    index = next(i for i, candidate in enumerate(document.areas) if candidate is area)
    del document.areas[index]

    remaining = document.areas
    if index == 0 and remaining:
        new_first = remaining[0]
        if area.has_image and not new_first.has_image:
            new_first.copy_image_from(area)

    if len(remaining) == 1 and remaining[0].has_image:
        _lift_area_image(document, remaining[0])

    relocate_image_fields(document)
    return area


# ══════════════════════════════════════════════════════════════════════════
# Hotspots
# ══════════════════════════════════════════════════════════════════════════

def add_hotspot(
    document: ProjectDocument,
    area_ref: Optional[str],
    title: Optional[str],
    x: Any,
    y: Any,
    image: Optional[StoredFile],
) -> HotspotPlacement:
    """
    Place a hotspot on an area and link it to the area it opens.

    Two independent dedup rules, both keyed on the trimmed, lower-cased title:
      - an area anywhere in the project whose name matches is reused as the
        child (its image is replaced by the upload); otherwise a new child
        area is created with the upload
      - a hotspot under the same parent with a matching title is updated in
        place (coordinates, image, child link); otherwise a new one is added

    Calling this twice with the same parent and title is therefore an update
    on both sides of the relationship.
    """
    clean_title = require_text(title, "title", "x, y and title are required")
    px = coerce_number(x, "x")
    py = coerce_number(y, "y")
    stored = require_image(image, "Image is required for hotspot")
    parent = require_area(document, area_ref, resource="parent area")

    key = name_key(clean_title)

    child = next((a for a in document.areas if name_key(a.area_name) == key), None)
    area_created = child is None
    if child is None:
        child = Area(area_id=identifiers.generate_id(identifiers.AREA), area_name=clean_title)
        child.set_image(stored)
        document.areas.append(child)
    else:
        child.set_image(stored)

    # Older documents stored the parent's areaId instead of its _id
    parent_keys = {parent.id, parent.area_id}
    hotspot = next(
        (
            h for h in document.hotspots
            if h.parent_area_id in parent_keys and name_key(h.title) == key
        ),
        None,
    )
    hotspot_created = hotspot is None
    if hotspot is None:
        hotspot = Hotspot(
            hotspot_id=identifiers.generate_id(identifiers.HOTSPOT),
            title=clean_title,
            x=px,
            y=py,
            parent_area_id=parent.id,
        )
        hotspot.set_image(stored)
        document.hotspots.append(hotspot)
    else:
        hotspot.x = px
        hotspot.y = py
        hotspot.set_image(stored)

    hotspot.child_area_id = child.area_id
    child.parent_hotspot_id = hotspot.hotspot_id

    relocate_image_fields(document)
    return HotspotPlacement(hotspot, child, hotspot_created, area_created)


def delete_area_and_hotspot(
    document: ProjectDocument,
    area_ref: Optional[str] = None,
    hotspot_ref: Optional[str] = None,
) -> PairDeletion:
    """
    Delete an area or hotspot together with its directly paired counterpart.

    - area given: also removes the hotspot whose hotspotId equals the area's
      parentHotspotId
    - hotspot given: also removes the area whose areaId equals the hotspot's
      childAreaId

    One hop only. Hotspots inside a removed child area, and info markers on
    it, are left in place.
    """
    if not (area_ref or "").strip() and not (hotspot_ref or "").strip():
        raise ValidationError(message="Either areaId or hotspotId is required")

    deleted_area: Optional[Area] = None
    deleted_hotspot: Optional[Hotspot] = None

    area = resolve_area(document, area_ref)
    if area is not None:
        deleted_area = area
        if area.parent_hotspot_id:
            linked = next(
                (h for h in document.hotspots if h.hotspot_id == area.parent_hotspot_id),
                None,
            )
            if linked is not None:
                _remove(document.hotspots, linked)
                deleted_hotspot = linked
        _remove(document.areas, area)

    hotspot = find_hotspot(document, hotspot_ref)
    if hotspot is not None:
        deleted_hotspot = hotspot
        if hotspot.child_area_id:
            child = next(
                (a for a in document.areas if a.area_id == hotspot.child_area_id),
                None,
            )
            if child is not None:
                _remove(document.areas, child)
                deleted_area = child
        _remove(document.hotspots, hotspot)

    if deleted_area is None and deleted_hotspot is None:
        raise NotFoundError(resource="area or hotspot", resource_id=area_ref or hotspot_ref)

    relocate_image_fields(document)
    return PairDeletion(deleted_area, deleted_hotspot)


# ══════════════════════════════════════════════════════════════════════════
# Info markers
# ══════════════════════════════════════════════════════════════════════════

def upsert_info(
    document: ProjectDocument,
    area_ref: Optional[str],
    description: Optional[str],
    x: Any = None,
    y: Any = None,
) -> InfoUpsert:
    """
    Write an info marker at (area, x, y).

    A marker already at the same coordinates in the same area is overwritten;
    coordinates are compared as numbers so "10" and 10.0 match.
    """
    text = require_text(description, "description", "Description is required")
    px = coerce_number(x, "x", default=0.0)
    py = coerce_number(y, "y", default=0.0)
    area = require_area(document, area_ref)

    existing = next(
        (
            i for i in document.info
            if i.area_id == area.id and float(i.x) == px and float(i.y) == py
        ),
        None,
    )
    if existing is not None:
        existing.description = text
        existing.x = px
        existing.y = py
        info, created = existing, False
    else:
        info = InfoMarker(
            info_id=identifiers.generate_id(identifiers.INFO),
            description=text,
            x=px,
            y=py,
            area_id=area.id,
        )
        document.info.append(info)
        created = True

    relocate_image_fields(document)
    return InfoUpsert(info, created)


# ══════════════════════════════════════════════════════════════════════════
# Item library and placements
# ══════════════════════════════════════════════════════════════════════════

def _new_instance(
    item: LibraryItem,
    x: float,
    y: float,
    rotation: float,
    width: Optional[float] = None,
    height: Optional[float] = None,
    flip_x: bool = False,
    flip_y: bool = False,
) -> ItemInstance:
    return ItemInstance(
        instance_id=identifiers.generate_id(identifiers.INSTANCE),
        item_id=item.item_id,
        x=x,
        y=y,
        rotation=rotation,
        width=item.width if width is None else width,
        height=item.height if height is None else height,
        flip_x=flip_x,
        flip_y=flip_y,
        image_url=item.image_url,
    )


def add_library_item(
    document: ProjectDocument,
    image: Optional[StoredFile],
    width: Any = None,
    height: Any = None,
    area_ref: Optional[str] = None,
    x: Any = None,
    y: Any = None,
    rotation: Any = None,
) -> LibraryItemAdded:
    """
    Add an asset to the project library, optionally placing it right away.

    An area reference that does not resolve skips the placement; the library
    item is still added.
    """
    stored = require_image(image, "Image is required")
    item_width = coerce_number(width, "width", default=0.0)
    item_height = coerce_number(height, "height", default=0.0)
    px = coerce_number(x, "x", default=0.0)
    py = coerce_number(y, "y", default=0.0)
    angle = coerce_number(rotation, "rotation", default=0.0)

    item = LibraryItem(
        item_id=identifiers.generate_id(identifiers.ITEM),
        width=item_width,
        height=item_height,
    )
    item.set_image(stored)
    document.items.append(item)

    placed = None
    if area_ref:
        area = resolve_area(document, area_ref)
        if area is None:
            logger.warning("Item %s not placed: area %s not found", item.item_id, area_ref)
        else:
            placed = _new_instance(item, px, py, angle)
            area.items.append(placed)

    relocate_image_fields(document)
    return LibraryItemAdded(item, placed)


def place_item(
    document: ProjectDocument,
    area_ref: Optional[str],
    item_id: Optional[str],
    x: Any = None,
    y: Any = None,
    rotation: Any = None,
    width: Any = None,
    height: Any = None,
    flip_x: bool = False,
    flip_y: bool = False,
) -> ItemInstance:
    """Place a library item in an area; size defaults to the item's nominal size."""
    library_id = require_text(item_id, "itemId", "itemId is required")
    px = coerce_number(x, "x", default=0.0)
    py = coerce_number(y, "y", default=0.0)
    angle = coerce_number(rotation, "rotation", default=0.0)
    w = None if width is None else coerce_number(width, "width")
    h = None if height is None else coerce_number(height, "height")

    area = require_area(document, area_ref)
    item = find_library_item(document, library_id)
    if item is None:
        raise NotFoundError(resource="library item", resource_id=library_id)

    instance = _new_instance(item, px, py, angle, w, h, bool(flip_x), bool(flip_y))
    area.items.append(instance)

    relocate_image_fields(document)
    return instance


_NUMERIC_INSTANCE_FIELDS = ("x", "y", "rotation", "width", "height")
_FLAG_INSTANCE_FIELDS = ("flip_x", "flip_y")


def update_item_instance(
    document: ProjectDocument,
    area_ref: Optional[str],
    instance_id: str,
    **changes: Any,
) -> ItemInstance:
    """Partially update one placement's position, rotation, size or flips."""
    unknown = set(changes) - set(_NUMERIC_INSTANCE_FIELDS) - set(_FLAG_INSTANCE_FIELDS)
    if unknown:
        raise ValidationError(
            message=f"Unsupported fields: {', '.join(sorted(unknown))}",
            context={"fields": sorted(unknown)},
        )
    values = {}
    for field in _NUMERIC_INSTANCE_FIELDS:
        if changes.get(field) is not None:
            values[field] = coerce_number(changes[field], field)
    for field in _FLAG_INSTANCE_FIELDS:
        if changes.get(field) is not None:
            values[field] = bool(changes[field])

    area = require_area(document, area_ref)
    instance = next((i for i in area.items if i.instance_id == instance_id), None)
    if instance is None:
        raise NotFoundError(resource="item instance", resource_id=instance_id)

    for field, value in values.items():
        setattr(instance, field, value)

    relocate_image_fields(document)
    return instance


def delete_library_item(document: ProjectDocument, item_id: str) -> LibraryItemRemoved:
    """Remove an item from the library and every placement of it in every area."""
    item = find_library_item(document, item_id)
    if item is None:
        raise NotFoundError(resource="library item", resource_id=item_id)

    _remove(document.items, item)
    removed = 0
    for area in document.areas:
        kept = [i for i in area.items if i.item_id != item_id]
        removed += len(area.items) - len(kept)
        area.items = kept

    relocate_image_fields(document)
    return LibraryItemRemoved(item, removed)


def delete_item_instance(
    document: ProjectDocument,
    area_ref: Optional[str],
    instance_id: str,
) -> ItemInstance:
    """Remove one placement from one area. The library item stays."""
    area = require_area(document, area_ref)
    instance = next((i for i in area.items if i.instance_id == instance_id), None)
    if instance is None:
        raise NotFoundError(resource="item instance", resource_id=instance_id)

    _remove(area.items, instance)
    relocate_image_fields(document)
    return instance
