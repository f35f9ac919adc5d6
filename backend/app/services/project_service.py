"""
RoomStager Backend — Project Service (Document Store Orchestrator)
====================================================================

What:  Loads, lists, creates, updates and deletes staging projects, and runs
       each graph mutation inside a load → mutate → save cycle.
Why:   Keeps HTTP concerns out of the store and I/O out of the graph rules.
How:   Composes the `projects` table (SQLAlchemy), FileService (uploads) and
       the pure functions in app.services.staging_graph.
Who:   Called by the route handlers; one call per request.

Mutation Flow (e.g. POST /api/staging/{id}/areas/{areaId}/hotspots):
    ┌───────────┐   ┌──────────┐   ┌──────────┐   ┌───────────┐   ┌────────┐
    │ Validate  │──▶│  Load    │──▶│  Store   │──▶│  Graph    │──▶│  Save  │
    │ inputs    │   │ (owner)  │   │  upload  │   │  mutation │   │ (flush)│
    └───────────┘   └──────────┘   └──────────┘   └───────────┘   └────────┘

    - Validation and the ownership check run before anything is written.
    - The upload is stored before the document save and is not removed if the
      save fails (orphaned files are accepted).
    - The commit happens in the session dependency; last writer wins.

Visibility:
    identity is None          → public read, no owner filter, owner omitted
    identity.is_admin         → every project
    otherwise                 → only projects with created_by == identity.user_id
    A project outside the caller's visibility is reported as not found.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.project import Project
from app.schemas.document import Area, DirectImage, ItemInstance, ProjectDocument, StoredFile
from app.schemas.project import (
    AreaCreated,
    AreaHotspotDeleted,
    AreaView,
    HotspotAdded,
    InfoSaved,
    LibraryItemCreated,
    LibraryItemDeleted,
    Pagination,
    ProjectDetail,
    ProjectPage,
    ProjectSummary,
)
from app.security import Identity
from app.services import staging_graph
from app.services.file_service import IncomingFile, file_service

logger = logging.getLogger(__name__)

R = TypeVar("R")

REQUIRED_PROJECT_FIELDS = {
    "project_name": "projectName",
    "street_address": "streetAddress",
    "city_locality": "cityLocality",
    "state": "state",
    "country": "country",
}

OPTIONAL_PROJECT_FIELDS = ("apt_landmark", "note")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProjectService:
    """
    Business logic for staging projects.

    Stateless: every method receives the request's session and identity.
    Domain errors (ValidationError, NotFoundError) propagate unchanged;
    SQLAlchemy failures are wrapped in DatabaseError.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Store primitives
    # ══════════════════════════════════════════════════════════════════════

    @staticmethod
    def parse_project_id(project_id: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(project_id))
        except ValueError:
            raise ValidationError(
                message="Invalid project ID",
                field="id",
                context={"id": str(project_id)},
            )

    async def load(
        self,
        db: AsyncSession,
        project_id: str,
        identity: Optional[Identity],
    ) -> Project:
        """Fetch one project visible to `identity`, or NotFoundError."""
        pid = self.parse_project_id(project_id)
        query = select(Project).where(Project.id == pid)
        if identity is not None and not identity.is_admin:
            query = query.where(Project.created_by == identity.user_id)

        try:
            result = await db.execute(query)
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading project %s: %s", project_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the project. Please try again.",
                context={"project_id": str(project_id)},
            )

        if row is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))
        return row

    async def save(self, db: AsyncSession, row: Project, document: ProjectDocument) -> None:
        """Write the whole document back onto its row (commit happens per request)."""
        row.apply_document(document)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving project %s: %s", row.id, str(e))
            raise DatabaseError(
                message="Could not save the project. Please try again.",
                context={"project_id": str(row.id)},
            )

    async def _mutate(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        mutation: Callable[[ProjectDocument], R],
    ) -> R:
        row = await self.load(db, project_id, identity)
        document = row.to_document()
        result = mutation(document)
        await self.save(db, row, document)
        return result

    # ══════════════════════════════════════════════════════════════════════
    # Read projections
    # ══════════════════════════════════════════════════════════════════════

    @staticmethod
    def build_detail(document: ProjectDocument, include_owner: bool = True) -> ProjectDetail:
        """Project summary plus one view per area with its hotspots and info."""
        summary = ProjectSummary(
            id=document.id,
            project_name=document.project_name,
            street_address=document.street_address,
            apt_landmark=document.apt_landmark,
            city_locality=document.city_locality,
            state=document.state,
            country=document.country,
            note=document.note,
            image=document.image if document.image.is_set else None,
            items=document.items,
            created_by=document.created_by if include_owner else None,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )
        areas = [
            AreaView.model_validate(
                {
                    **area.model_dump(),
                    "hotspots": staging_graph.hotspots_in_area(document, area),
                    "info": staging_graph.info_in_area(document, area),
                }
            )
            for area in document.areas
        ]
        return ProjectDetail(project=summary, areas=areas)

    async def get_detail(
        self,
        db: AsyncSession,
        project_id: str,
        identity: Optional[Identity],
    ) -> ProjectDetail:
        row = await self.load(db, project_id, identity)
        return self.build_detail(row.to_document(), include_owner=identity is not None)

    async def get_areas(self, db: AsyncSession, identity: Identity, project_id: str) -> List[Area]:
        row = await self.load(db, project_id, identity)
        return row.to_document().areas

    async def list_projects(
        self,
        db: AsyncSession,
        identity: Optional[Identity],
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        owned_only: bool = False,
    ) -> ProjectPage:
        """
        One page of projects, newest first.

        `search` is a case-insensitive substring match on the project name.
        Ties on created_at are broken by id so pages never overlap.
        """
        filters = []
        if owned_only and identity is not None:
            filters.append(Project.created_by == identity.user_id)
        term = (search or "").strip()
        if term:
            filters.append(Project.project_name.ilike(f"%{_escape_like(term)}%", escape="\\"))

        query = (
            select(Project)
            .where(*filters)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        count_query = select(func.count(Project.id)).where(*filters)

        try:
            total = (await db.execute(count_query)).scalar() or 0
            rows = list((await db.execute(query)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing projects: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve projects. Please try again.",
                context={"error_type": type(e).__name__},
            )

        include_owner = identity is not None
        return ProjectPage(
            projects=[self.build_detail(row.to_document(), include_owner) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    # ══════════════════════════════════════════════════════════════════════
    # Project lifecycle
    # ══════════════════════════════════════════════════════════════════════

    async def create_project(
        self,
        db: AsyncSession,
        identity: Identity,
        fields: Dict[str, Optional[str]],
        upload: Optional[IncomingFile] = None,
    ) -> ProjectDetail:
        """
        Create a project, optionally with one direct image.

        With an image, one area named after the project is added showing the
        same image; the project keeps its own copy as well.
        """
        missing = [
            camel for name, camel in REQUIRED_PROJECT_FIELDS.items()
            if not (fields.get(name) or "").strip()
        ]
        if missing:
            raise ValidationError(message="Missing required fields", context={"missing": missing})

        stored: Optional[StoredFile] = None
        if upload is not None:
            stored = await file_service.store_upload(upload)

        document = ProjectDocument(
            **{name: fields[name].strip() for name in REQUIRED_PROJECT_FIELDS},
            **{name: fields.get(name) for name in OPTIONAL_PROJECT_FIELDS},
            created_by=identity.user_id,
        )
        if stored is not None:
            document.image = DirectImage(
                url=stored.url,
                public_id=stored.storage_id,
                type="capture",
                original_name=stored.original_name,
                mime_type=stored.mime_type,
                size=stored.size,
            )
            staging_graph.create_area_from_project_image(document)

        row = Project(
            id=uuid.uuid4(),
            created_by=identity.user_id,
            created_at=datetime.now(timezone.utc),
        )
        row.apply_document(document)
        db.add(row)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating project: %s", str(e))
            raise DatabaseError(message="Could not create the project. Please try again.")

        logger.info(
            "Project %s created by %s (image=%s, areas=%d)",
            row.id,
            identity.user_id,
            stored is not None,
            len(document.areas),
        )
        return self.build_detail(row.to_document())

    async def update_project(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        changes: Dict[str, Any],
    ) -> ProjectDetail:
        """Apply the given scalar fields; fields not present are left untouched."""
        for name, value in changes.items():
            if name in REQUIRED_PROJECT_FIELDS and not (value or "").strip():
                raise ValidationError(
                    message=f"{REQUIRED_PROJECT_FIELDS[name]} cannot be empty",
                    field=REQUIRED_PROJECT_FIELDS[name],
                )

        def apply(document: ProjectDocument) -> ProjectDocument:
            for name, value in changes.items():
                setattr(document, name, value.strip() if isinstance(value, str) else value)
            return document

        document = await self._mutate(db, identity, project_id, apply)
        logger.info("Project %s updated: %s", project_id, ", ".join(sorted(changes)) or "no fields")
        return self.build_detail(document)

    async def delete_project(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
    ) -> ProjectSummary:
        """Hard delete. Stored files stay in place."""
        row = await self.load(db, project_id, identity)
        summary = self.build_detail(row.to_document()).project
        try:
            await db.delete(row)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting project %s: %s", project_id, str(e))
            raise DatabaseError(message="Could not delete the project. Please try again.")

        logger.info("Project %s deleted by %s", project_id, identity.user_id)
        return summary

    async def bulk_delete(self, db: AsyncSession, ids: Optional[List[str]]) -> int:
        """Admin bulk delete; returns how many rows were removed."""
        if not ids:
            raise ValidationError(message="Invalid IDs provided", field="ids")
        try:
            pids = [uuid.UUID(str(i)) for i in ids]
        except ValueError:
            raise ValidationError(message="Invalid IDs provided", field="ids")

        try:
            result = await db.execute(delete(Project).where(Project.id.in_(pids)))
        except SQLAlchemyError as e:
            logger.error("Database error in bulk delete: %s", str(e))
            raise DatabaseError(message="Could not delete projects. Please try again.")

        deleted = result.rowcount or 0
        logger.info("Bulk delete removed %d of %d requested projects", deleted, len(pids))
        return deleted

    # ══════════════════════════════════════════════════════════════════════
    # Graph mutations
    # ══════════════════════════════════════════════════════════════════════

    async def add_area(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_name: Optional[str],
        upload: Optional[IncomingFile],
    ) -> AreaCreated:
        staging_graph.require_text(area_name, "areaName", "Area name is required")
        if upload is None:
            raise ValidationError(message="Image is required for area", field="image")

        row = await self.load(db, project_id, identity)
        stored = await file_service.store_upload(upload)
        document = row.to_document()
        area = staging_graph.add_area(document, area_name, stored)
        await self.save(db, row, document)

        logger.info("Area %s added to project %s (%d areas)", area.area_id, project_id, len(document.areas))
        return AreaCreated(
            area=area,
            project_image=document.image if document.image.is_set else None,
        )

    async def delete_area(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
    ) -> Area:
        area = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.delete_area(document, area_ref),
        )
        logger.info("Area %s deleted from project %s", area.area_id, project_id)
        return area

    async def add_hotspot(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
        title: Optional[str],
        x: Any,
        y: Any,
        upload: Optional[IncomingFile],
    ) -> HotspotAdded:
        staging_graph.require_text(title, "title", "x, y and title are required")
        staging_graph.coerce_number(x, "x")
        staging_graph.coerce_number(y, "y")
        if upload is None:
            raise ValidationError(message="Image is required for hotspot", field="image")

        row = await self.load(db, project_id, identity)
        document = row.to_document()
        staging_graph.require_area(document, area_ref, resource="parent area")

        stored = await file_service.store_upload(upload)
        placement = staging_graph.add_hotspot(document, area_ref, title, x, y, stored)
        await self.save(db, row, document)

        logger.info(
            "Hotspot %s (%s) on area %s of project %s; child area %s (%s)",
            placement.hotspot.hotspot_id,
            "new" if placement.hotspot_created else "updated",
            area_ref,
            project_id,
            placement.area.area_id,
            "new" if placement.area_created else "reused",
        )
        return HotspotAdded(
            hotspot=placement.hotspot,
            area=placement.area,
            hotspot_created=placement.hotspot_created,
            area_created=placement.area_created,
        )

    async def upsert_info(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
        description: Optional[str],
        x: Any = None,
        y: Any = None,
    ) -> InfoSaved:
        saved = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.upsert_info(document, area_ref, description, x, y),
        )
        logger.info(
            "Info %s %s on area %s of project %s",
            saved.info.info_id,
            "added" if saved.created else "updated",
            area_ref,
            project_id,
        )
        return InfoSaved(info=saved.info, created=saved.created)

    async def delete_area_and_hotspot(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: Optional[str] = None,
        hotspot_ref: Optional[str] = None,
    ) -> AreaHotspotDeleted:
        if not (area_ref or "").strip() and not (hotspot_ref or "").strip():
            raise ValidationError(message="Either areaId or hotspotId is required")

        deleted = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.delete_area_and_hotspot(document, area_ref, hotspot_ref),
        )
        logger.info(
            "Project %s: deleted area %s and hotspot %s",
            project_id,
            deleted.area.area_id if deleted.area else None,
            deleted.hotspot.hotspot_id if deleted.hotspot else None,
        )
        return AreaHotspotDeleted(deleted_area=deleted.area, deleted_hotspot=deleted.hotspot)

    async def add_library_item(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        upload: Optional[IncomingFile],
        width: Any = None,
        height: Any = None,
        area_ref: Optional[str] = None,
        x: Any = None,
        y: Any = None,
        rotation: Any = None,
    ) -> LibraryItemCreated:
        if upload is None:
            raise ValidationError(message="Image is required", field="image")
        for value, field in ((width, "width"), (height, "height"), (x, "x"), (y, "y"), (rotation, "rotation")):
            staging_graph.coerce_number(value, field, default=0.0)

        row = await self.load(db, project_id, identity)
        stored = await file_service.store_upload(upload)
        document = row.to_document()
        added = staging_graph.add_library_item(
            document, stored, width, height, area_ref, x, y, rotation
        )
        await self.save(db, row, document)

        logger.info(
            "Library item %s added to project %s%s",
            added.item.item_id,
            project_id,
            f" and placed as {added.placed.instance_id}" if added.placed else "",
        )
        return LibraryItemCreated.model_validate(
            {**added.item.model_dump(), "placed_in_area": added.placed}
        )

    async def place_item(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
        item_id: Optional[str],
        **placement: Any,
    ) -> ItemInstance:
        staging_graph.require_text(item_id, "itemId", "itemId is required")
        instance = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.place_item(document, area_ref, item_id, **placement),
        )
        logger.info("Item %s placed as %s in area %s of project %s", item_id, instance.instance_id, area_ref, project_id)
        return instance

    async def update_item_instance(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
        instance_id: str,
        changes: Dict[str, Any],
    ) -> ItemInstance:
        instance = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.update_item_instance(document, area_ref, instance_id, **changes),
        )
        logger.info("Item instance %s updated in project %s", instance_id, project_id)
        return instance

    async def delete_library_item(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        item_id: str,
    ) -> LibraryItemDeleted:
        removed = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.delete_library_item(document, item_id),
        )
        logger.info(
            "Library item %s deleted from project %s with %d placements",
            item_id,
            project_id,
            removed.instances_removed,
        )
        return LibraryItemDeleted(item_id=item_id, instances_removed=removed.instances_removed)

    async def delete_item_instance(
        self,
        db: AsyncSession,
        identity: Identity,
        project_id: str,
        area_ref: str,
        instance_id: str,
    ) -> ItemInstance:
        instance = await self._mutate(
            db, identity, project_id,
            lambda document: staging_graph.delete_item_instance(document, area_ref, instance_id),
        )
        logger.info("Item instance %s removed from area %s of project %s", instance_id, area_ref, project_id)
        return instance


# ── Singleton Instance ────────────────────────────────────────────────────
project_service = ProjectService()
