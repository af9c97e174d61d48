"""collapse legacy metadata/publication statuses into datasets.status

One-time data migration. Every row gets exactly one of NEEDS_METADATA,
PENDING_REVIEW, APPROVED or REJECTED via migrate_legacy_status(); the two
legacy columns are dropped afterwards. Also adds reviewed_by,
row_count_estimated and the case-insensitive unique index on name.

Revision ID: 20261018_0003
Revises: 20261018_0002
Create Date: 2026-10-18 09:20:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from app.domain.dataset_status import DatasetStatus, migrate_legacy_status

# revision identifiers, used by Alembic.
revision = "20261018_0003"
down_revision = "20261018_0002"
branch_labels = None
depends_on = None

# status -> (metadata_status, publication_status) for downgrade
_LEGACY_PAIRS = {
    DatasetStatus.NEEDS_METADATA.value: ("PENDING", "DRAFT"),
    DatasetStatus.PENDING_REVIEW.value: ("EDITED", "PENDING_REVIEW"),
    DatasetStatus.APPROVED.value: ("APPROVED", "PUBLISHED"),
    DatasetStatus.REJECTED.value: ("EDITED", "REJECTED"),
}


def upgrade() -> None:
    with op.batch_alter_table("datasets") as batch:
        batch.add_column(sa.Column("status", sa.String(length=32), nullable=True))
        batch.add_column(sa.Column("reviewed_by", sa.String(length=255), nullable=True))

    bind = op.get_bind()
    datasets = sa.table(
        "datasets",
        sa.column("id", sa.Uuid()),
        sa.column("metadata_status", sa.String()),
        sa.column("publication_status", sa.String()),
        sa.column("status", sa.String()),
    )
    rows = bind.execute(
        sa.select(datasets.c.id, datasets.c.metadata_status, datasets.c.publication_status)
    ).all()
    for row in rows:
        status = migrate_legacy_status(row.metadata_status, row.publication_status)
        bind.execute(
            datasets.update().where(datasets.c.id == row.id).values(status=status.value)
        )

    with op.batch_alter_table("datasets") as batch:
        batch.alter_column(
            "status",
            existing_type=sa.String(length=32),
            nullable=False,
            server_default=DatasetStatus.NEEDS_METADATA.value,
        )
        batch.drop_column("metadata_status")
        batch.drop_column("publication_status")

    op.create_index("ix_datasets_status", "datasets", ["status"], unique=False)
    op.create_index(
        "uq_datasets_name_lower",
        "datasets",
        [sa.text("lower(name)")],
        unique=True,
    )

    with op.batch_alter_table("file_metadata") as batch:
        batch.add_column(
            sa.Column("row_count_estimated", sa.Boolean(), server_default=sa.false(), nullable=False)
        )


def downgrade() -> None:
    with op.batch_alter_table("file_metadata") as batch:
        batch.drop_column("row_count_estimated")

    op.drop_index("uq_datasets_name_lower", table_name="datasets")
    op.drop_index("ix_datasets_status", table_name="datasets")

    with op.batch_alter_table("datasets") as batch:
        batch.add_column(
            sa.Column("metadata_status", sa.String(length=32), server_default="PENDING", nullable=False)
        )
        batch.add_column(
            sa.Column("publication_status", sa.String(length=32), server_default="DRAFT", nullable=False)
        )

    bind = op.get_bind()
    datasets = sa.table(
        "datasets",
        sa.column("status", sa.String()),
        sa.column("metadata_status", sa.String()),
        sa.column("publication_status", sa.String()),
    )
    for status, (metadata_status, publication_status) in _LEGACY_PAIRS.items():
        bind.execute(
            datasets.update()
            .where(datasets.c.status == status)
            .values(metadata_status=metadata_status, publication_status=publication_status)
        )

    with op.batch_alter_table("datasets") as batch:
        batch.drop_column("reviewed_by")
        batch.drop_column("status")
