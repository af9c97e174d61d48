"""
tests/test_status_reconciliation.py

display_status() over plain mappings, legacy records and ORM objects.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace

import pytest

from app.domain.dataset_status import DatasetStatus
from app.domain.status_reconciliation import display_status, has_metadata

RECORDS = [
    {"status": "APPROVED"},
    {"status": "PENDING_REVIEW"},
    {"status": "pending"},
    {"status": "PENDING REVIEW"},
    {"metadataStatus": "EDITED", "publicationStatus": "DRAFT"},
    {"metadataStatus": "GENERATED", "publicationStatus": "PUBLISHED"},
    {"hasMetadata": True},
    {"hasMetadata": False},
    {},
    {"status": "ARCHIVED"},
    {"status": "", "has_metadata": True},
]


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"status": "APPROVED"}, DatasetStatus.APPROVED),
        ({"status": "REJECTED", "hasMetadata": False}, DatasetStatus.REJECTED),
        ({"status": "pending"}, DatasetStatus.NEEDS_METADATA),
        ({"status": "PENDING REVIEW"}, DatasetStatus.PENDING_REVIEW),
        ({"metadataStatus": "EDITED", "publicationStatus": "DRAFT"}, DatasetStatus.PENDING_REVIEW),
        ({"metadata_status": "GENERATED", "publication_status": "PUBLISHED"}, DatasetStatus.APPROVED),
        ({"hasMetadata": True}, DatasetStatus.PENDING_REVIEW),
        ({"hasMetadata": False}, DatasetStatus.NEEDS_METADATA),
        ({}, DatasetStatus.NEEDS_METADATA),
        ({"status": "ARCHIVED"}, DatasetStatus.NEEDS_METADATA),
    ],
)
def test_display_status(record: dict, expected: DatasetStatus) -> None:
    assert display_status(record) is expected


def test_status_field_wins_over_legacy_flag() -> None:
    assert display_status({"status": "NEEDS_METADATA", "hasMetadata": True}) is DatasetStatus.NEEDS_METADATA


def test_reads_attributes_of_objects() -> None:
    record = SimpleNamespace(status="REJECTED", review_comment="fix title")
    assert display_status(record) is DatasetStatus.REJECTED
    assert has_metadata(record) is True


def test_has_metadata_is_false_only_for_needs_metadata() -> None:
    assert has_metadata({"status": "NEEDS_METADATA"}) is False
    assert has_metadata({"status": "PENDING_REVIEW"}) is True
    assert has_metadata({"hasMetadata": True}) is True


@pytest.mark.parametrize("record", RECORDS)
def test_is_idempotent(record: dict) -> None:
    first = display_status(record)
    rewritten = {**record, "status": first.value}
    assert display_status(rewritten) is first


@pytest.mark.parametrize("record", RECORDS)
def test_does_not_mutate_input(record: dict) -> None:
    snapshot = copy.deepcopy(record)
    display_status(record)
    has_metadata(record)
    assert record == snapshot
