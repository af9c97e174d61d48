"""
app/services/dataset_service.py

Orchestrates dataset uploads, lookups, deletion and suggestion generation.
Status changes are delegated to DatasetWorkflowService.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import DatasetNameConflictError, DatasetNotFoundError, DatasetValidationError
from app.domain.ingestion import UploadedFile
from app.schemas.metadata import MetadataDraft
from app.services.dataset_workflow_service import (
    DatasetWorkflowService,
    get_dataset_workflow_service,
    parse_dataset_id,
)
from app.services.file_ingestion_service import FileIngestionService, get_file_ingestion_service
from app.services.metadata_suggestion_service import (
    MetadataSuggestionService,
    get_metadata_suggestion_service,
)
from app.validators.dataset_validator import validate_dataset_name, validate_language
from app.validators.upload_validator import resolve_content_type
from db.models.dataset import Dataset
from db.models.file_metadata import FileMetadata
from db.repositories.dataset_repository import DatasetRepository
from db.repositories.errors import DatasetPersistenceError
from llm_metadata.schema import MetadataSuggestion

logger = logging.getLogger(__name__)


class DatasetService:
    """
    Application service behind the dataset and metadata endpoints.
    """

    def __init__(
        self,
        *,
        ingestion_service: FileIngestionService | None = None,
        suggestion_service: MetadataSuggestionService | None = None,
        workflow_service: DatasetWorkflowService | None = None,
    ) -> None:
        self._ingestion = ingestion_service or get_file_ingestion_service()
        self._suggestions = suggestion_service or get_metadata_suggestion_service()
        self._workflow = workflow_service or get_dataset_workflow_service()

    @property
    def workflow(self) -> DatasetWorkflowService:
        return self._workflow

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def create_dataset(
        self,
        db: Session,
        *,
        name: str | None,
        description: str | None,
        upload: UploadedFile | None,
    ) -> Dataset:
        """
        Validate, summarise and persist an uploaded file as a new dataset in
        NEEDS_METADATA.
        """
        if upload is None or not upload.file_name:
            raise DatasetValidationError("No file provided.")

        cleaned_name = validate_dataset_name(name)

        validation = self._ingestion.validate(upload.file_name, upload.file_size)
        if not validation.valid:
            raise DatasetValidationError(validation.error or "Invalid file.")

        repository = DatasetRepository(db)
        if repository.exists_by_name(cleaned_name):
            raise DatasetNameConflictError(cleaned_name)

        summary = self._ingestion.ingest(upload)
        if not summary.succeeded:
            raise DatasetValidationError(summary.error or "File could not be parsed.")

        dataset = Dataset(
            name=cleaned_name,
            description=(description or "").strip() or None,
        )
        file_metadata = FileMetadata(
            original_name=upload.file_name,
            file_size=upload.file_size,
            file_type=resolve_content_type(upload.file_name, upload.content_type),
            row_count=summary.row_count,
            row_count_estimated=summary.row_count_estimated,
            column_names=list(summary.column_names),
            sample_data=list(summary.sample_data),
        )

        try:
            repository.create(dataset=dataset, file_metadata=file_metadata)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise DatasetNameConflictError(cleaned_name) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatasetPersistenceError("Failed to persist dataset.") from exc

        logger.info(
            "Created dataset %s name=%r rows=%d columns=%d",
            dataset.id,
            dataset.name,
            file_metadata.row_count,
            len(file_metadata.column_names),
        )
        return dataset

    # ------------------------------------------------------------------
    # Reads and delete
    # ------------------------------------------------------------------

    def list_datasets(self, db: Session) -> list[Dataset]:
        try:
            return DatasetRepository(db).list_all()
        except SQLAlchemyError as exc:
            raise DatasetPersistenceError("Failed to list datasets.") from exc

    def get_dataset(
        self,
        db: Session,
        dataset_id: uuid.UUID | str,
        *,
        include_sample: bool = True,
    ) -> Dataset:
        try:
            dataset = DatasetRepository(db).get_by_id(
                parse_dataset_id(dataset_id),
                include_sample=include_sample,
            )
        except SQLAlchemyError as exc:
            raise DatasetPersistenceError("Failed to load dataset.") from exc
        if dataset is None:
            raise DatasetNotFoundError(dataset_id)
        return dataset

    def delete_dataset(self, db: Session, dataset_id: uuid.UUID | str) -> None:
        try:
            deleted = DatasetRepository(db).delete(parse_dataset_id(dataset_id))
            if deleted:
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatasetPersistenceError("Failed to delete dataset.") from exc
        if not deleted:
            raise DatasetNotFoundError(dataset_id)
        logger.info("Deleted dataset %s", dataset_id)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def generate_suggestion(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        language: str | None,
    ) -> tuple[MetadataSuggestion, Dataset]:
        """
        Ask the model for a suggestion and record it. The model call runs
        outside any database transaction, so a slow upstream never holds a
        row lock.
        """
        resolved_language = validate_language(language)
        dataset = self.get_dataset(db, dataset_id, include_sample=True)
        file_metadata = dataset.file_metadata
        sample_rows = list(file_metadata.sample_data or []) if file_metadata else []
        column_names = list(file_metadata.column_names or []) if file_metadata else []
        db.commit()

        suggestion = self._suggestions.suggest(sample_rows, column_names, resolved_language)
        dataset = self._workflow.record_suggestion(
            db,
            dataset_id=dataset.id,
            suggestion=suggestion,
            language=resolved_language,
        )
        return suggestion, dataset

    def save_draft(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        draft: MetadataDraft | None,
        language: str | None,
    ) -> Dataset:
        if draft is None:
            raise DatasetValidationError("Metadata is required.")
        return self._workflow.save_draft(
            db,
            dataset_id=dataset_id,
            draft=draft,
            language=validate_language(language) if language is not None else None,
        )


@lru_cache(maxsize=1)
def get_dataset_service() -> DatasetService:
    """
    Return the shared dataset service instance.
    """

    return DatasetService()
