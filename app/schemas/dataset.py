"""
app/schemas/dataset.py

Response schemas for dataset endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.dataset_status import DatasetStatus
from app.schemas.metadata import CamelModel, MetadataDraft, MetadataSuggestionResponse


class FileMetadataResponse(CamelModel):
    """
    Structural summary of the uploaded file. sample_data is omitted in lists.
    """

    id: uuid.UUID
    original_name: str
    file_size: int = Field(..., ge=0)
    file_type: str
    row_count: int = Field(..., ge=0)
    row_count_estimated: bool = False
    column_names: list[str]
    sample_data: list[dict[str, Any]] | None = None
    created_at: datetime


class DatasetSummaryResponse(CamelModel):
    """
    One dataset as shown in lists.

    status is the reconciled display status; has_metadata is true whenever
    that status is past NEEDS_METADATA.
    """

    id: uuid.UUID
    name: str
    description: str | None = None
    status: DatasetStatus
    display_status: DatasetStatus
    has_metadata: bool
    metadata_language: str
    review_comment: str | None = None
    reviewed_by: str | None = None
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    file_metadata: FileMetadataResponse | None = None


class DatasetDetailResponse(DatasetSummaryResponse):
    suggested: MetadataSuggestionResponse
    draft: MetadataDraft | None = None


class DatasetEnvelope(BaseModel):
    dataset: DatasetDetailResponse


class DatasetListResponse(BaseModel):
    datasets: list[DatasetSummaryResponse] = Field(default_factory=list)


class SuggestionResultResponse(BaseModel):
    metadata: MetadataSuggestionResponse
    dataset: DatasetDetailResponse


class MessageResponse(BaseModel):
    message: str
