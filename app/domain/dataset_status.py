"""
app/domain/dataset_status.py

Dataset status vocabulary and the review workflow transition table.

    NEEDS_METADATA ──save draft──▶ PENDING_REVIEW ──approve──▶ APPROVED
          ▲                          │    ▲                       │
          │                          │    └───────save draft──────┤
          └── AI suggestion          └──reject──▶ REJECTED ──save draft──┘
              (no status change)

Generating an AI suggestion never moves a dataset. Saving a draft from any
state submits it for review. Only PENDING_REVIEW can be approved or rejected.
"""

from __future__ import annotations

from enum import Enum

from app.domain.errors import InvalidTransitionError


class DatasetStatus(str, Enum):
    NEEDS_METADATA = "NEEDS_METADATA"
    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WorkflowAction(str, Enum):
    RECORD_SUGGESTION = "record_suggestion"
    SAVE_DRAFT = "save_draft"
    APPROVE = "approve"
    REJECT = "reject"


TERMINAL_STATUSES: frozenset[DatasetStatus] = frozenset(
    {DatasetStatus.APPROVED, DatasetStatus.REJECTED}
)

# Review decisions accepted by the publish endpoint.
REVIEW_DECISIONS: frozenset[DatasetStatus] = TERMINAL_STATUSES

_ALL_STATUSES: frozenset[DatasetStatus] = frozenset(DatasetStatus)

# action -> (statuses it may be applied from, resulting status or None for "unchanged")
_TRANSITIONS: dict[WorkflowAction, tuple[frozenset[DatasetStatus], DatasetStatus | None]] = {
    WorkflowAction.RECORD_SUGGESTION: (_ALL_STATUSES, None),
    WorkflowAction.SAVE_DRAFT: (_ALL_STATUSES, DatasetStatus.PENDING_REVIEW),
    WorkflowAction.APPROVE: (frozenset({DatasetStatus.PENDING_REVIEW}), DatasetStatus.APPROVED),
    WorkflowAction.REJECT: (frozenset({DatasetStatus.PENDING_REVIEW}), DatasetStatus.REJECTED),
}


def coerce_status(value: DatasetStatus | str) -> DatasetStatus:
    """Convert a stored status string into DatasetStatus, rejecting anything outside the vocabulary."""
    if isinstance(value, DatasetStatus):
        return value
    try:
        return DatasetStatus(value)
    except ValueError as exc:
        raise ValueError(f"Unknown dataset status: {value!r}") from exc


def resolve_transition(action: WorkflowAction, current: DatasetStatus | str) -> DatasetStatus:
    """
    Return the status a dataset lands in after `action`, or raise
    InvalidTransitionError when the action is illegal from `current`.
    """
    current_status = coerce_status(current)
    allowed_from, target = _TRANSITIONS[action]
    if current_status not in allowed_from:
        raise InvalidTransitionError(
            current=current_status.value,
            action=action.value,
        )
    return current_status if target is None else target


# ---------------------------------------------------------------------------
# Legacy vocabularies
# ---------------------------------------------------------------------------

# Earlier schema revisions stored a separate metadata status and publication
# status with overlapping spellings. Keys are normalized (see _status_key).
LEGACY_STATUS_MAP: dict[str, DatasetStatus] = {
    "PENDING": DatasetStatus.NEEDS_METADATA,
    "GENERATED": DatasetStatus.NEEDS_METADATA,
    "DRAFT": DatasetStatus.NEEDS_METADATA,
    "NEEDS_METADATA": DatasetStatus.NEEDS_METADATA,
    "EDITED": DatasetStatus.PENDING_REVIEW,
    "PENDING_REVIEW": DatasetStatus.PENDING_REVIEW,
    "APPROVED": DatasetStatus.APPROVED,
    "PUBLISHED": DatasetStatus.APPROVED,
    "REJECTED": DatasetStatus.REJECTED,
}

# Publication statuses that carry a review outcome and therefore win over
# whatever the metadata status said.
_DECISIVE_PUBLICATION_STATUSES = frozenset({"PENDING_REVIEW", "PUBLISHED", "APPROVED", "REJECTED"})


def _status_key(raw: str) -> str:
    return "_".join(raw.strip().upper().replace("-", " ").split())


def normalize_status(raw: object) -> DatasetStatus | None:
    """
    Map any known spelling ("pending", "PENDING REVIEW", "Published", ...)
    onto the current vocabulary. Returns None for blank or unknown values.
    """
    if isinstance(raw, DatasetStatus):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    return LEGACY_STATUS_MAP.get(_status_key(raw))


def migrate_legacy_status(
    metadata_status: object,
    publication_status: object = None,
) -> DatasetStatus:
    """
    Collapse the legacy (metadata_status, publication_status) pair into one status.

    A publication status that records a review outcome takes precedence;
    otherwise the metadata status decides. Unknown values land in NEEDS_METADATA.
    """
    if isinstance(publication_status, str) and _status_key(publication_status) in _DECISIVE_PUBLICATION_STATUSES:
        decided = normalize_status(publication_status)
        if decided is not None:
            return decided

    return normalize_status(metadata_status) or DatasetStatus.NEEDS_METADATA
