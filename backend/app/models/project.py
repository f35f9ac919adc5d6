"""
RoomStager Backend — Project SQLAlchemy Model
===============================================

What:  ORM model representing the `projects` table.
Why:   One row holds one whole staging project document; the embedded
       collections (areas, hotspots, info, items) live in JSON columns.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Read and written by ProjectService; converted to and from
       `ProjectDocument` with `to_document()` / `apply_document()`.

Table Design Rationale:
    - UUID primary key: clients address projects by this id in every route
    - Scalar address fields as columns: searchable with ILIKE/LIKE
    - Direct image as columns: it is a single value, not a collection
    - Embedded collections as JSON (JSONB on PostgreSQL): they are always read
      and written together with the project and reference each other by id
    - created_by: the owner's user id from the access token, indexed for
      the "my projects" listing

    Index on created_at DESC:
        Every listing sorts newest first.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.schemas.document import DirectImage, ProjectDocument

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
DocumentJSON = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """
    A staging project row.

    Lifecycle:
        1. Created by POST /api/staging (optionally with one direct image)
        2. Mutated wholesale by every graph operation (load → mutate → save)
        3. Deleted by its owner or by an admin; stored files are never removed
    """

    __tablename__ = "projects"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Project identifier used in every /api/staging/{id} route",
    )

    # ── Address & Description ─────────────────────────────────────────────
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    street_address: Mapped[str] = mapped_column(String(255), nullable=False)
    apt_landmark: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city_locality: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Direct Image ──────────────────────────────────────────────────────
    # Valid only while the project has at most one area
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    image_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    image_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    image_original_name: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    image_mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    image_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ── Embedded Collections ──────────────────────────────────────────────
    areas: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)
    hotspots: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)
    info: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)
    items: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)

    # ── Ownership & Timestamps ────────────────────────────────────────────
    created_by: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="User id of the owner (token `id`/`sub` claim)",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_projects_created_at", created_at.desc()),
    )

    # ── Document Conversion ───────────────────────────────────────────────
    def to_document(self) -> ProjectDocument:
        """Build the in-memory document the graph layer mutates."""
        return ProjectDocument(
            id=self.id,
            project_name=self.project_name,
            street_address=self.street_address,
            apt_landmark=self.apt_landmark,
            city_locality=self.city_locality,
            state=self.state,
            country=self.country,
            note=self.note,
            image=DirectImage(
                url=self.image_url,
                public_id=self.image_public_id,
                type=self.image_type,
                original_name=self.image_original_name,
                mime_type=self.image_mime_type,
                size=self.image_size,
            ),
            areas=self.areas or [],
            hotspots=self.hotspots or [],
            info=self.info or [],
            items=self.items or [],
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_document(self, document: ProjectDocument) -> None:
        """
        Copy a (mutated) document back onto the row.

        JSON columns are reassigned with fresh lists so SQLAlchemy sees the change.
        """
        self.project_name = document.project_name
        self.street_address = document.street_address
        self.apt_landmark = document.apt_landmark
        self.city_locality = document.city_locality
        self.state = document.state
        self.country = document.country
        self.note = document.note

        image = document.image
        self.image_url = image.url
        self.image_public_id = image.public_id
        self.image_type = image.type
        self.image_original_name = image.original_name
        self.image_mime_type = image.mime_type
        self.image_size = image.size

        self.areas = [area.to_document() for area in document.areas]
        self.hotspots = [hotspot.to_document() for hotspot in document.hotspots]
        self.info = [marker.to_document() for marker in document.info]
        self.items = [item.to_document() for item in document.items]
        self.updated_at = _utcnow()

    def __repr__(self) -> str:
        return (
            f"<Project(id={self.id}, name='{self.project_name}', "
            f"areas={len(self.areas or [])})>"
        )
