"""
Domain models for uploaded-file validation and structural summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload handed from the HTTP layer to the ingestion service."""

    file_name: str
    file_size: int
    content_type: str | None
    stream: BinaryIO


@dataclass(frozen=True)
class FileValidationResult:
    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "FileValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, error: str) -> "FileValidationResult":
        return cls(valid=False, error=error)


@dataclass(frozen=True)
class StructuralSummary:
    """
    Row count, header names and a bounded sample of one uploaded file.

    Either `error` is set and the rest is empty, or `error` is None and
    `column_names` is non-empty. Every sample row carries exactly the keys in
    `column_names`. `row_count_estimated` is True when `row_count` was
    extrapolated from a prefix of the file instead of a full parse.
    """

    row_count: int = 0
    column_names: list[str] = field(default_factory=list)
    sample_data: list[dict[str, Any]] = field(default_factory=list)
    row_count_estimated: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str) -> "StructuralSummary":
        return cls(error=error)
