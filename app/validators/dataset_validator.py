"""
Input validation for dataset names, metadata languages and review decisions.
"""

from __future__ import annotations

import re

from app.config import SUPPORTED_LANGUAGES
from app.domain.dataset_status import REVIEW_DECISIONS, DatasetStatus, normalize_status
from app.domain.errors import DatasetValidationError

MAX_NAME_LENGTH = 255

# ASCII only, so lower(name) folds the same on SQLite and PostgreSQL.
_NAME_PATTERN = re.compile(r"[A-Za-z0-9]+")


def validate_dataset_name(name: str | None) -> str:
    """Return the trimmed name or raise DatasetValidationError."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise DatasetValidationError("Dataset name is required.")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise DatasetValidationError(f"Dataset name must be at most {MAX_NAME_LENGTH} characters.")
    if not _NAME_PATTERN.fullmatch(cleaned):
        raise DatasetValidationError("Dataset name may only contain English letters (a-z, A-Z) and digits.")
    return cleaned


def validate_language(language: str | None, *, default: str = "en") -> str:
    cleaned = (language or "").strip().lower() or default
    if cleaned not in SUPPORTED_LANGUAGES:
        raise DatasetValidationError(
            f"Unsupported language '{language}'. Allowed: {', '.join(SUPPORTED_LANGUAGES)}."
        )
    return cleaned


def validate_review_decision(raw_status: str | None) -> DatasetStatus:
    status = normalize_status(raw_status)
    if status not in REVIEW_DECISIONS:
        raise DatasetValidationError(
            "Invalid status. Allowed: " + ", ".join(sorted(s.value for s in REVIEW_DECISIONS)) + "."
        )
    return status
