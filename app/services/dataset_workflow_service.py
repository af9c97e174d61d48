"""
app/services/dataset_workflow_service.py

The only component that changes a dataset's status.

Every operation re-reads the dataset with a row lock, resolves the action
against the transition table in app.domain.dataset_status, applies the
side effects through DatasetRepository.apply_transition and commits. The
caller owns the session lifecycle; this service owns the transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.dataset_status import DatasetStatus, TERMINAL_STATUSES, WorkflowAction, resolve_transition
from app.domain.errors import DatasetNotFoundError, MissingReviewCommentError
from app.schemas.metadata import MetadataDraft
from db.base import utcnow
from db.models.dataset import Dataset
from db.repositories.dataset_repository import DatasetRepository
from db.repositories.errors import DatasetPersistenceError
from llm_metadata.schema import MetadataSuggestion

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def parse_dataset_id(dataset_id: uuid.UUID | str) -> uuid.UUID:
    """Malformed ids are reported as not found rather than as a validation error."""
    if isinstance(dataset_id, uuid.UUID):
        return dataset_id
    try:
        return uuid.UUID(str(dataset_id))
    except (ValueError, AttributeError, TypeError) as exc:
        raise DatasetNotFoundError(dataset_id) from exc


@contextmanager
def _transaction(db: Session, action: str) -> Iterator[None]:
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise DatasetPersistenceError(f"Failed to {action}.") from exc
    except Exception:
        db.rollback()
        raise


class DatasetWorkflowService:
    """
    Records suggestions, saves drafts and applies review decisions.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or utcnow

    def _load_for_update(self, db: Session, dataset_id: uuid.UUID | str) -> tuple[DatasetRepository, Dataset]:
        repository = DatasetRepository(db)
        dataset = repository.get_by_id(
            parse_dataset_id(dataset_id),
            include_sample=False,
            for_update=True,
        )
        if dataset is None:
            raise DatasetNotFoundError(dataset_id)
        return repository, dataset

    def _log_transition(
        self,
        dataset: Dataset,
        *,
        previous: str,
        action: WorkflowAction,
        reviewer: str | None = None,
    ) -> None:
        logger.info(
            "Dataset %s %s: %s -> %s reviewer=%s",
            dataset.id,
            action.value,
            previous,
            dataset.status,
            reviewer or "-",
        )

    # ------------------------------------------------------------------
    # Suggestion and draft
    # ------------------------------------------------------------------

    def record_suggestion(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        suggestion: MetadataSuggestion,
        language: str,
    ) -> Dataset:
        """Overwrite the stored suggestion wholesale. Status never changes."""
        with _transaction(db, "record metadata suggestion"):
            repository, dataset = self._load_for_update(db, dataset_id)
            resolve_transition(WorkflowAction.RECORD_SUGGESTION, dataset.status)
            repository.update(
                dataset.id,
                {
                    "suggested_title": suggestion.title,
                    "suggested_description": suggestion.description,
                    "suggested_tags": list(suggestion.tags),
                    "suggested_category": suggestion.category,
                    "metadata_language": language,
                },
            )
        logger.info("Dataset %s suggestion recorded (language=%s, empty=%s)", dataset.id, language, suggestion.is_empty)
        return dataset

    def save_draft(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        draft: MetadataDraft,
        language: str | None = None,
    ) -> Dataset:
        """
        Store the user's draft and submit it for review. Re-entering review
        from APPROVED or REJECTED clears the previous review comment. The
        stored language is kept when none is given.
        """
        with _transaction(db, "save metadata draft"):
            repository, dataset = self._load_for_update(db, dataset_id)
            previous = dataset.status
            target = resolve_transition(WorkflowAction.SAVE_DRAFT, previous)

            fields: dict[str, object] = {"metadata_draft": draft.model_dump(mode="json")}
            if language is not None:
                fields["metadata_language"] = language
            if previous in {status.value for status in TERMINAL_STATUSES}:
                fields["review_comment"] = None
                fields["reviewed_by"] = None

            repository.apply_transition(dataset, status=target, fields=fields)
        self._log_transition(dataset, previous=previous, action=WorkflowAction.SAVE_DRAFT)
        return dataset

    # ------------------------------------------------------------------
    # Review decisions
    # ------------------------------------------------------------------

    def approve(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        reviewer: str,
        comment: str | None = None,
    ) -> Dataset:
        with _transaction(db, "approve dataset"):
            repository, dataset = self._load_for_update(db, dataset_id)
            previous = dataset.status
            target = resolve_transition(WorkflowAction.APPROVE, previous)

            fields: dict[str, object] = {
                "published_at": self._clock(),
                "reviewed_by": reviewer,
            }
            if comment is not None and comment.strip():
                fields["review_comment"] = comment

            repository.apply_transition(dataset, status=target, fields=fields)
        self._log_transition(dataset, previous=previous, action=WorkflowAction.APPROVE, reviewer=reviewer)
        return dataset

    def reject(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        reviewer: str,
        comment: str | None,
    ) -> Dataset:
        with _transaction(db, "reject dataset"):
            repository, dataset = self._load_for_update(db, dataset_id)
            previous = dataset.status
            target = resolve_transition(WorkflowAction.REJECT, previous)
            if comment is None or not comment.strip():
                raise MissingReviewCommentError()

            repository.apply_transition(
                dataset,
                status=target,
                fields={"review_comment": comment, "reviewed_by": reviewer},
            )
        self._log_transition(dataset, previous=previous, action=WorkflowAction.REJECT, reviewer=reviewer)
        return dataset

    def review(
        self,
        db: Session,
        *,
        dataset_id: uuid.UUID | str,
        decision: DatasetStatus,
        reviewer: str,
        comment: str | None = None,
    ) -> Dataset:
        """Dispatch a publish request to approve() or reject()."""
        if decision is DatasetStatus.APPROVED:
            return self.approve(db, dataset_id=dataset_id, reviewer=reviewer, comment=comment)
        if decision is DatasetStatus.REJECTED:
            return self.reject(db, dataset_id=dataset_id, reviewer=reviewer, comment=comment)
        raise ValueError(f"Unsupported review decision: {decision}")


@lru_cache(maxsize=1)
def get_dataset_workflow_service() -> DatasetWorkflowService:
    return DatasetWorkflowService()
