"""
app/api/routers/dataset_metadata.py

Metadata suggestion, draft and review endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_reviewer
from app.api.errors import http_errors
from app.api.presenters import present_dataset, present_metadata_state
from app.schemas.dataset import DatasetEnvelope, SuggestionResultResponse
from app.schemas.metadata import (
    DraftRequest,
    MetadataStateResponse,
    MetadataSuggestionResponse,
    ReviewRequest,
    SuggestionRequest,
)
from app.services.dataset_service import DatasetService, get_dataset_service
from app.validators.dataset_validator import validate_review_decision
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/datasets", tags=["metadata"])


@router.get("/{dataset_id}/metadata", response_model=MetadataStateResponse)
def get_metadata(
    dataset_id: str,
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> MetadataStateResponse:
    with http_errors("metadata lookup"):
        dataset = service.get_dataset(db, dataset_id, include_sample=False)
    return present_metadata_state(dataset)


@router.post("/{dataset_id}/metadata", response_model=SuggestionResultResponse)
def generate_metadata(
    dataset_id: str,
    payload: SuggestionRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> SuggestionResultResponse:
    """
    Ask the model for a metadata suggestion. Never fails because of the
    model: an unavailable suggestion comes back empty. Status is unchanged.
    """

    language = payload.language if payload is not None else None
    with http_errors("metadata generation"):
        suggestion, dataset = service.generate_suggestion(
            db,
            dataset_id=dataset_id,
            language=language,
        )
    return SuggestionResultResponse(
        metadata=MetadataSuggestionResponse(**suggestion.model_dump()),
        dataset=present_dataset(dataset),
    )


@router.put("/{dataset_id}/metadata", response_model=DatasetEnvelope)
def save_metadata(
    dataset_id: str,
    payload: DraftRequest,
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetEnvelope:
    """
    Save the user's metadata draft and submit it for review.
    """

    with http_errors("metadata draft save"):
        dataset = service.save_draft(
            db,
            dataset_id=dataset_id,
            draft=payload.metadata,
            language=payload.language,
        )
    return DatasetEnvelope(dataset=present_dataset(dataset))


@router.put("/{dataset_id}/publish", response_model=DatasetEnvelope)
def review_dataset(
    dataset_id: str,
    payload: ReviewRequest,
    reviewer: str = Depends(get_reviewer),
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetEnvelope:
    """
    Approve or reject a dataset that is pending review. Rejection requires
    a reviewComment.
    """

    with http_errors("dataset review"):
        service.get_dataset(db, dataset_id, include_sample=False)
        decision = validate_review_decision(payload.status)
        dataset = service.workflow.review(
            db,
            dataset_id=dataset_id,
            decision=decision,
            reviewer=reviewer,
            comment=payload.review_comment,
        )
    return DatasetEnvelope(dataset=present_dataset(dataset))
