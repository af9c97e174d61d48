"""add metadata suggestion, draft and publication columns

Earlier deployments tracked the workflow in two columns:
metadata_status (PENDING / GENERATED / EDITED / APPROVED, with
inconsistent casing) and publication_status (DRAFT / PENDING_REVIEW /
PUBLISHED / REJECTED). Revision 20261018_0003 collapses them into status.

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 09:10:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None

JSON_DOCUMENT = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    with op.batch_alter_table("datasets") as batch:
        batch.add_column(sa.Column("suggested_title", sa.String(length=500), nullable=True))
        batch.add_column(sa.Column("suggested_description", sa.Text(), nullable=True))
        batch.add_column(sa.Column("suggested_tags", JSON_DOCUMENT, nullable=True))
        batch.add_column(sa.Column("suggested_category", sa.String(length=255), nullable=True))
        batch.add_column(sa.Column("metadata_draft", JSON_DOCUMENT, nullable=True))
        batch.add_column(
            sa.Column("metadata_language", sa.String(length=8), server_default="en", nullable=False)
        )
        batch.add_column(
            sa.Column("metadata_status", sa.String(length=32), server_default="PENDING", nullable=False)
        )
        batch.add_column(
            sa.Column("publication_status", sa.String(length=32), server_default="DRAFT", nullable=False)
        )
        batch.add_column(sa.Column("review_comment", sa.Text(), nullable=True))
        batch.add_column(sa.Column("published_at", sa.DateTime(timezone=True), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("datasets") as batch:
        batch.drop_column("published_at")
        batch.drop_column("review_comment")
        batch.drop_column("publication_status")
        batch.drop_column("metadata_status")
        batch.drop_column("metadata_language")
        batch.drop_column("metadata_draft")
        batch.drop_column("suggested_category")
        batch.drop_column("suggested_tags")
        batch.drop_column("suggested_description")
        batch.drop_column("suggested_title")
