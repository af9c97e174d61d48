"""
Repository-layer exceptions for dataset persistence.
"""

from __future__ import annotations


class DatasetRepositoryError(Exception):
    """Base exception for dataset repository failures."""


class DatasetPersistenceError(DatasetRepositoryError):
    """Raised when a dataset write or read fails at the database layer."""


class StatusWriteError(DatasetRepositoryError):
    """Raised when a generic update tries to change status outside a workflow transition."""
