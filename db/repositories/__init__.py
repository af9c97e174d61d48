"""
Repository layer exports.
"""

from db.repositories.dataset_repository import DatasetRepository
from db.repositories.errors import (
    DatasetPersistenceError,
    DatasetRepositoryError,
    StatusWriteError,
)

__all__ = [
    "DatasetRepository",
    "DatasetPersistenceError",
    "DatasetRepositoryError",
    "StatusWriteError",
]
