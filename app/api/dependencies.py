"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

import os

from fastapi import File, Header, UploadFile

from app.config import get_app_settings
from app.domain.ingestion import UploadedFile


def _measure(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    stream = upload.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def get_dataset_upload(file: UploadFile | None = File(default=None)) -> UploadedFile | None:
    """
    Wrap the multipart file part for the ingestion service.

    A missing part yields None so the service can answer with a specific
    "No file provided." message instead of a generic validation error.
    """

    if file is None or not (file.filename or "").strip():
        return None

    return UploadedFile(
        file_name=file.filename.strip(),
        file_size=_measure(file),
        content_type=file.content_type,
        stream=file.file,
    )


def get_reviewer(x_reviewer: str | None = Header(default=None)) -> str:
    """
    Reviewer identity for approve/reject. Authentication is out of scope, so
    the X-Reviewer header is trusted as-is and falls back to REVIEWER_DEFAULT.
    """

    reviewer = (x_reviewer or "").strip()
    return reviewer or get_app_settings().default_reviewer
