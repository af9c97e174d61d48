"""
app/schemas package marker.
"""

from app.schemas.dataset import (
    DatasetDetailResponse,
    DatasetEnvelope,
    DatasetListResponse,
    DatasetSummaryResponse,
    FileMetadataResponse,
    MessageResponse,
    SuggestionResultResponse,
)
from app.schemas.metadata import (
    DraftRequest,
    MetadataDraft,
    MetadataStateResponse,
    MetadataSuggestionResponse,
    ReviewRequest,
    SuggestionRequest,
)

__all__ = [
    "DatasetDetailResponse",
    "DatasetEnvelope",
    "DatasetListResponse",
    "DatasetSummaryResponse",
    "DraftRequest",
    "FileMetadataResponse",
    "MessageResponse",
    "MetadataDraft",
    "MetadataStateResponse",
    "MetadataSuggestionResponse",
    "ReviewRequest",
    "SuggestionRequest",
    "SuggestionResultResponse",
]
