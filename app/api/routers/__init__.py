"""
app/api/routers package marker.
"""

from app.api.routers.dataset_metadata import router as dataset_metadata_router
from app.api.routers.datasets import router as datasets_router

__all__ = [
    "dataset_metadata_router",
    "datasets_router",
]
