"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.dataset import Dataset
from db.models.file_metadata import FileMetadata

__all__ = [
    "Dataset",
    "FileMetadata",
]
