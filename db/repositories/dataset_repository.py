"""
Dataset repository responsible for DB writes and lookup operations.

The repository never commits; the calling service owns the transaction.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, defer, selectinload, undefer

from app.domain.dataset_status import DatasetStatus
from db.models.dataset import Dataset
from db.models.file_metadata import FileMetadata
from db.repositories.errors import StatusWriteError

# Columns a generic update() may touch. status, reviewed_by and published_at
# are written only through apply_transition().
_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "suggested_title",
        "suggested_description",
        "suggested_tags",
        "suggested_category",
        "metadata_draft",
        "metadata_language",
    }
)

_TRANSITION_FIELDS = frozenset(
    {
        "review_comment",
        "reviewed_by",
        "published_at",
        "metadata_draft",
        "metadata_language",
    }
)


class DatasetRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, *, dataset: Dataset, file_metadata: FileMetadata) -> Dataset:
        """Insert a dataset and its one file-metadata row together."""
        dataset.file_metadata = file_metadata
        self._session.add(dataset)
        self._session.flush()
        return dataset

    def get_by_id(
        self,
        dataset_id: uuid.UUID,
        *,
        include_sample: bool = True,
        for_update: bool = False,
    ) -> Dataset | None:
        file_loader = selectinload(Dataset.file_metadata)
        stmt = (
            select(Dataset)
            .where(Dataset.id == dataset_id)
            .options(
                file_loader.options(undefer(FileMetadata.sample_data))
                if include_sample
                else file_loader.options(defer(FileMetadata.sample_data))
            )
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.scalars(stmt).first()

    def list_all(self, *, limit: int | None = None) -> list[Dataset]:
        """All datasets, newest first, without sample rows."""
        stmt = (
            select(Dataset)
            .options(selectinload(Dataset.file_metadata).options(defer(FileMetadata.sample_data)))
            .order_by(Dataset.created_at.desc(), Dataset.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.scalars(stmt).all())

    def exists_by_name(self, name: str, *, case_insensitive: bool = True) -> bool:
        candidate = name.strip()
        if case_insensitive:
            condition = func.lower(Dataset.name) == candidate.lower()
        else:
            condition = Dataset.name == candidate
        stmt = select(Dataset.id).where(condition).limit(1)
        return self._session.scalars(stmt).first() is not None

    def update(self, dataset_id: uuid.UUID, fields: Mapping[str, Any]) -> Dataset | None:
        """
        Apply a partial update of non-status columns. Returns None when the
        dataset does not exist.
        """
        forbidden = set(fields) - _UPDATABLE_FIELDS
        if "status" in forbidden:
            raise StatusWriteError("status can only be changed through apply_transition().")
        if forbidden:
            raise ValueError(f"Unsupported dataset fields: {sorted(forbidden)}")

        dataset = self._session.get(Dataset, dataset_id)
        if dataset is None:
            return None

        for key, value in fields.items():
            setattr(dataset, key, value)
        self._session.flush()
        return dataset

    def apply_transition(
        self,
        dataset: Dataset,
        *,
        status: DatasetStatus,
        fields: Mapping[str, Any] | None = None,
    ) -> Dataset:
        """
        Write a new status plus the side-effect columns of that transition.

        Callers must have resolved the transition against the workflow table
        and should hold the row lock obtained via get_by_id(for_update=True).
        """
        fields = dict(fields or {})
        unexpected = set(fields) - _TRANSITION_FIELDS
        if unexpected:
            raise ValueError(f"Unsupported transition fields: {sorted(unexpected)}")

        dataset.status = DatasetStatus(status).value
        for key, value in fields.items():
            setattr(dataset, key, value)
        self._session.flush()
        return dataset

    def delete(self, dataset_id: uuid.UUID) -> bool:
        dataset = self._session.get(Dataset, dataset_id)
        if dataset is None:
            return False
        self._session.delete(dataset)
        self._session.flush()
        return True
