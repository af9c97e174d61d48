"""
app/validators package marker.
"""

from app.validators.dataset_validator import (
    validate_dataset_name,
    validate_language,
    validate_review_decision,
)
from app.validators.upload_validator import (
    ALLOWED_EXTENSIONS,
    resolve_content_type,
    validate_upload,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "resolve_content_type",
    "validate_dataset_name",
    "validate_language",
    "validate_review_decision",
    "validate_upload",
]
