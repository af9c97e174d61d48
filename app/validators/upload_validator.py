"""
Validation helpers for uploaded dataset files.

The gate is non-throwing: callers get a FileValidationResult and decide how
to surface the error.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from app.domain.ingestion import FileValidationResult

ALLOWED_EXTENSIONS: tuple[str, ...] = (".csv", ".xls", ".xlsx")

CSV_CONTENT_TYPE = "text/csv"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_CONTENT_TYPE_BY_EXTENSION = {
    ".csv": CSV_CONTENT_TYPE,
    ".xls": XLS_CONTENT_TYPE,
    ".xlsx": XLSX_CONTENT_TYPE,
}

# Generic types browsers send when they cannot classify a file.
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def file_extension(file_name: str) -> str:
    return Path(file_name or "").suffix.lower()


def _format_megabytes(size_bytes: int) -> str:
    megabytes = size_bytes / (1024 * 1024)
    if megabytes.is_integer():
        return f"{int(megabytes)}MB"
    return f"{megabytes:.1f}MB"


def validate_upload(file_name: str, file_size: int, *, max_bytes: int) -> FileValidationResult:
    """
    Check size and extension of an uploaded file.

    Size is checked before type, so an oversized file with a bad extension
    reports the size problem.
    """

    if file_size > max_bytes:
        return FileValidationResult.failure(
            f"File size exceeds the maximum limit of {_format_megabytes(max_bytes)}"
        )

    if file_extension(file_name) not in ALLOWED_EXTENSIONS:
        return FileValidationResult.failure(
            f"Invalid file type. Allowed types: {', '.join(ALLOWED_EXTENSIONS)}"
        )

    if file_size <= 0:
        return FileValidationResult.failure("File is empty or has no valid data")

    return FileValidationResult.ok()


def resolve_content_type(file_name: str, reported: str | None) -> str:
    """
    Prefer the client-reported MIME type; fall back to one inferred from the
    extension when the client sent nothing useful.
    """

    cleaned = (reported or "").split(";", 1)[0].strip().lower()
    if cleaned not in _GENERIC_CONTENT_TYPES:
        return cleaned

    extension = file_extension(file_name)
    if extension in _CONTENT_TYPE_BY_EXTENSION:
        return _CONTENT_TYPE_BY_EXTENSION[extension]

    guessed, _ = mimetypes.guess_type(file_name or "")
    return guessed or "application/octet-stream"
