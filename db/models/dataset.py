"""
db/models/dataset.py

Dataset model: one uploaded file of tabular data together with its AI
suggestion, the user's metadata draft and the review outcome.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.dataset_status import DatasetStatus
from db.base import Base, JSONDocument, TimestampMixin

if TYPE_CHECKING:
    from db.models.file_metadata import FileMetadata


class Dataset(Base, TimestampMixin):
    """
    One uploaded dataset moving through the review workflow.

    suggested_* hold the latest AI suggestion verbatim; metadata_draft holds
    what the user last submitted for review. status is only ever written by
    DatasetRepository.apply_transition.
    """

    __tablename__ = "datasets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User-supplied name, unique case-insensitively",
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    suggested_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    suggested_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    suggested_tags: Mapped[list[str] | None] = mapped_column(JSONDocument, nullable=True)
    suggested_category: Mapped[str | None] = mapped_column(String(255), nullable=True)

    metadata_draft: Mapped[dict[str, Any] | None] = mapped_column(
        JSONDocument,
        nullable=True,
        comment="Latest user-submitted metadata: title, description, tags, category",
    )

    metadata_language: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default="en",
        server_default="en",
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DatasetStatus.NEEDS_METADATA.value,
        server_default=DatasetStatus.NEEDS_METADATA.value,
        comment="NEEDS_METADATA → PENDING_REVIEW → APPROVED | REJECTED",
    )

    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    reviewed_by: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Identity of the reviewer who approved or rejected",
    )

    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set when the dataset is approved",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    file_metadata: Mapped["FileMetadata | None"] = relationship(
        "FileMetadata",
        back_populates="dataset",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_datasets_status", "status"),
        Index("ix_datasets_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Dataset id={self.id} name={self.name!r} status={self.status!r}>"


Index("uq_datasets_name_lower", func.lower(Dataset.name), unique=True)
