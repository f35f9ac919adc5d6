"""Create projects table

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

One row per staging project. Areas, hotspots, info markers and library items
are embedded JSONB arrays; see app/models/project.py.

Rollback: downgrade() drops the table (all projects lost; stored files remain).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DocumentJSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False,
                  comment="Project identifier used in every /api/staging/{id} route"),

        # Address & description
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("street_address", sa.String(255), nullable=False),
        sa.Column("apt_landmark", sa.String(255), nullable=True),
        sa.Column("city_locality", sa.String(255), nullable=False),
        sa.Column("state", sa.String(255), nullable=False),
        sa.Column("country", sa.String(255), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),

        # Direct image (only while the project has at most one area)
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("image_public_id", sa.String(512), nullable=True),
        sa.Column("image_type", sa.String(50), nullable=True),
        sa.Column("image_original_name", sa.String(512), nullable=True),
        sa.Column("image_mime_type", sa.String(100), nullable=True),
        sa.Column("image_size", sa.Integer(), nullable=True),

        # Embedded collections
        sa.Column("areas", DocumentJSON, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("hotspots", DocumentJSON, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("info", DocumentJSON, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("items", DocumentJSON, nullable=False, server_default=sa.text("'[]'")),

        # Ownership & timestamps
        sa.Column("created_by", sa.String(255), nullable=False,
                  comment="User id of the owner (token `id`/`sub` claim)"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),

        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("ix_projects_created_by", "projects", ["created_by"])
    op.create_index("idx_projects_created_at", "projects", [sa.text("created_at DESC")])


def downgrade() -> None:
    op.drop_index("idx_projects_created_at", table_name="projects")
    op.drop_index("ix_projects_created_by", table_name="projects")
    op.drop_table("projects")
