"""
app/domain/errors.py

Domain exceptions raised by the dataset workflow and translated to HTTP
responses at the router boundary.
"""

from __future__ import annotations

from typing import Any


class DatasetWorkflowError(Exception):
    """Base class for expected, client-facing workflow failures."""

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class DatasetValidationError(DatasetWorkflowError):
    """Bad input: file type, size, name, language or metadata shape."""

    code = "VALIDATION"


class DatasetNameConflictError(DatasetValidationError):
    code = "DUPLICATE_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(f"A dataset named '{name}' already exists.")
        self.name = name


class InvalidTransitionError(DatasetValidationError):
    code = "INVALID_TRANSITION"

    def __init__(self, *, current: str, action: str) -> None:
        super().__init__(f"Cannot {action.replace('_', ' ')} a dataset in status {current}.")
        self.current = current
        self.action = action

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["currentStatus"] = self.current
        return payload


class MissingReviewCommentError(DatasetValidationError):
    code = "REVIEW_COMMENT_REQUIRED"

    def __init__(self) -> None:
        super().__init__("A review comment is required when rejecting a dataset.")


class DatasetNotFoundError(DatasetWorkflowError):
    code = "NOT_FOUND"

    def __init__(self, dataset_id: object) -> None:
        super().__init__(f"Dataset not found: {dataset_id}")
        self.dataset_id = dataset_id
