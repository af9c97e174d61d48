"""
app/api/presenters.py

ORM -> response-model conversion. Display status is reconciled here and
nowhere else, so the stored record is never rewritten to satisfy the UI.
"""

from __future__ import annotations

from app.domain.status_reconciliation import display_status, has_metadata
from app.schemas.dataset import DatasetDetailResponse, DatasetSummaryResponse, FileMetadataResponse
from app.schemas.metadata import MetadataDraft, MetadataStateResponse, MetadataSuggestionResponse
from db.models.dataset import Dataset
from db.models.file_metadata import FileMetadata


def present_file_metadata(file_metadata: FileMetadata | None, *, include_sample: bool) -> FileMetadataResponse | None:
    if file_metadata is None:
        return None
    return FileMetadataResponse(
        id=file_metadata.id,
        original_name=file_metadata.original_name,
        file_size=file_metadata.file_size,
        file_type=file_metadata.file_type,
        row_count=file_metadata.row_count,
        row_count_estimated=bool(file_metadata.row_count_estimated),
        column_names=list(file_metadata.column_names or []),
        sample_data=list(file_metadata.sample_data or []) if include_sample else None,
        created_at=file_metadata.created_at,
    )


def _summary_fields(dataset: Dataset, *, include_sample: bool) -> dict:
    shown = display_status(dataset)
    return {
        "id": dataset.id,
        "name": dataset.name,
        "description": dataset.description,
        "status": shown,
        "display_status": shown,
        "has_metadata": has_metadata(dataset),
        "metadata_language": dataset.metadata_language or "en",
        "review_comment": dataset.review_comment,
        "reviewed_by": dataset.reviewed_by,
        "published_at": dataset.published_at,
        "created_at": dataset.created_at,
        "updated_at": dataset.updated_at,
        "file_metadata": present_file_metadata(dataset.file_metadata, include_sample=include_sample),
    }


def present_suggestion(dataset: Dataset) -> MetadataSuggestionResponse:
    return MetadataSuggestionResponse(
        title=dataset.suggested_title or "",
        description=dataset.suggested_description or "",
        tags=list(dataset.suggested_tags or []),
        category=dataset.suggested_category or "",
    )


def present_draft(dataset: Dataset) -> MetadataDraft | None:
    if not dataset.metadata_draft:
        return None
    return MetadataDraft.model_validate(dataset.metadata_draft)


def present_dataset_summary(dataset: Dataset) -> DatasetSummaryResponse:
    return DatasetSummaryResponse(**_summary_fields(dataset, include_sample=False))


def present_dataset(dataset: Dataset, *, include_sample: bool = True) -> DatasetDetailResponse:
    return DatasetDetailResponse(
        **_summary_fields(dataset, include_sample=include_sample),
        suggested=present_suggestion(dataset),
        draft=present_draft(dataset),
    )


def present_metadata_state(dataset: Dataset) -> MetadataStateResponse:
    return MetadataStateResponse(
        suggested=present_suggestion(dataset),
        draft=present_draft(dataset),
        language=dataset.metadata_language or "en",
        status=display_status(dataset),
    )
