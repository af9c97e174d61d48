"""
app/domain package marker.
"""

from app.domain.dataset_status import (
    DatasetStatus,
    WorkflowAction,
    migrate_legacy_status,
    normalize_status,
    resolve_transition,
)
from app.domain.status_reconciliation import display_status, has_metadata
from app.domain.errors import (
    DatasetNameConflictError,
    DatasetNotFoundError,
    DatasetValidationError,
    DatasetWorkflowError,
    InvalidTransitionError,
    MissingReviewCommentError,
)
from app.domain.ingestion import FileValidationResult, StructuralSummary, UploadedFile

__all__ = [
    "DatasetNameConflictError",
    "DatasetNotFoundError",
    "DatasetStatus",
    "DatasetValidationError",
    "DatasetWorkflowError",
    "FileValidationResult",
    "InvalidTransitionError",
    "MissingReviewCommentError",
    "StructuralSummary",
    "UploadedFile",
    "WorkflowAction",
    "display_status",
    "has_metadata",
    "migrate_legacy_status",
    "normalize_status",
    "resolve_transition",
]
