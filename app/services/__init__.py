"""
app/services package marker.
"""

from app.services.dataset_export_service import (
    DatasetExportService,
    ExportResult,
    get_dataset_export_service,
)
from app.services.dataset_service import DatasetService, get_dataset_service
from app.services.dataset_workflow_service import DatasetWorkflowService, get_dataset_workflow_service
from app.services.file_ingestion_service import FileIngestionService, get_file_ingestion_service
from app.services.metadata_suggestion_service import (
    MetadataSuggestionService,
    get_metadata_suggestion_service,
)

__all__ = [
    "DatasetExportService",
    "DatasetService",
    "DatasetWorkflowService",
    "ExportResult",
    "FileIngestionService",
    "MetadataSuggestionService",
    "get_dataset_export_service",
    "get_dataset_service",
    "get_dataset_workflow_service",
    "get_file_ingestion_service",
    "get_metadata_suggestion_service",
]
