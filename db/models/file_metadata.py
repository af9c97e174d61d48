"""
db/models/file_metadata.py

Structural summary of the file behind a dataset (exactly one per dataset).
"""

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, JSONDocument, TimestampMixin

if TYPE_CHECKING:
    from db.models.dataset import Dataset


class FileMetadata(Base, TimestampMixin):
    """
    sample_data is deferred: list views never load it, and only
    DatasetRepository.get_by_id(include_sample=True) pulls it eagerly.
    """

    __tablename__ = "file_metadata"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    dataset_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("datasets.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    original_name: Mapped[str] = mapped_column(String(512), nullable=False)

    file_size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Size in bytes as uploaded",
    )

    file_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="MIME type reported by the client or inferred from the extension",
    )

    row_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    row_count_estimated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="True when row_count was extrapolated from a file prefix",
    )

    column_names: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False)

    sample_data: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONDocument,
        nullable=True,
        deferred=True,
        comment="Up to the first 10 data rows keyed by column name",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    dataset: Mapped["Dataset"] = relationship(
        "Dataset",
        back_populates="file_metadata",
    )

    def __repr__(self) -> str:
        return (
            f"<FileMetadata dataset_id={self.dataset_id} "
            f"original_name={self.original_name!r} rows={self.row_count}>"
        )
