"""
tests/test_dataset_status.py

Pure unit tests for the workflow transition table and legacy status
normalisation. No database.
"""

from __future__ import annotations

import pytest

from app.domain.dataset_status import (
    DatasetStatus,
    WorkflowAction,
    migrate_legacy_status,
    normalize_status,
    resolve_transition,
)
from app.domain.errors import InvalidTransitionError

ALL_STATUSES = list(DatasetStatus)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


class TestTransitions:
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_recording_a_suggestion_never_changes_status(self, status: DatasetStatus) -> None:
        assert resolve_transition(WorkflowAction.RECORD_SUGGESTION, status) is status

    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_saving_a_draft_always_submits_for_review(self, status: DatasetStatus) -> None:
        assert resolve_transition(WorkflowAction.SAVE_DRAFT, status) is DatasetStatus.PENDING_REVIEW

    def test_approve_from_pending_review(self) -> None:
        assert resolve_transition(WorkflowAction.APPROVE, DatasetStatus.PENDING_REVIEW) is DatasetStatus.APPROVED

    def test_reject_from_pending_review(self) -> None:
        assert resolve_transition(WorkflowAction.REJECT, "PENDING_REVIEW") is DatasetStatus.REJECTED

    @pytest.mark.parametrize(
        "status",
        [DatasetStatus.NEEDS_METADATA, DatasetStatus.APPROVED, DatasetStatus.REJECTED],
    )
    @pytest.mark.parametrize("action", [WorkflowAction.APPROVE, WorkflowAction.REJECT])
    def test_review_decisions_only_from_pending_review(
        self,
        status: DatasetStatus,
        action: WorkflowAction,
    ) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            resolve_transition(action, status)

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.current == status.value

    def test_unknown_stored_status_is_refused(self) -> None:
        with pytest.raises(ValueError):
            resolve_transition(WorkflowAction.APPROVE, "PUBLISHED")


# ---------------------------------------------------------------------------
# Legacy vocabularies
# ---------------------------------------------------------------------------


class TestNormalizeStatus:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("PENDING", DatasetStatus.NEEDS_METADATA),
            ("pending", DatasetStatus.NEEDS_METADATA),
            ("GENERATED", DatasetStatus.NEEDS_METADATA),
            ("DRAFT", DatasetStatus.NEEDS_METADATA),
            ("needs metadata", DatasetStatus.NEEDS_METADATA),
            ("EDITED", DatasetStatus.PENDING_REVIEW),
            ("PENDING REVIEW", DatasetStatus.PENDING_REVIEW),
            ("pending-review", DatasetStatus.PENDING_REVIEW),
            ("Published", DatasetStatus.APPROVED),
            ("APPROVED", DatasetStatus.APPROVED),
            (" rejected ", DatasetStatus.REJECTED),
        ],
    )
    def test_known_spellings(self, raw: str, expected: DatasetStatus) -> None:
        assert normalize_status(raw) is expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "ARCHIVED", 3])
    def test_unknown_values_are_none(self, raw: object) -> None:
        assert normalize_status(raw) is None


class TestMigrateLegacyStatus:
    def test_decisive_publication_status_wins(self) -> None:
        assert migrate_legacy_status("EDITED", "PUBLISHED") is DatasetStatus.APPROVED
        assert migrate_legacy_status("GENERATED", "REJECTED") is DatasetStatus.REJECTED
        assert migrate_legacy_status("pending", "PENDING REVIEW") is DatasetStatus.PENDING_REVIEW

    def test_draft_publication_defers_to_metadata_status(self) -> None:
        assert migrate_legacy_status("EDITED", "DRAFT") is DatasetStatus.PENDING_REVIEW
        assert migrate_legacy_status("APPROVED", "DRAFT") is DatasetStatus.APPROVED

    def test_unknown_pair_lands_in_needs_metadata(self) -> None:
        assert migrate_legacy_status("mystery", None) is DatasetStatus.NEEDS_METADATA
        assert migrate_legacy_status(None, None) is DatasetStatus.NEEDS_METADATA

    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_current_vocabulary_is_a_fixed_point(self, status: DatasetStatus) -> None:
        assert migrate_legacy_status(status.value) is status
