"""
app/domain/status_reconciliation.py

Pure reconciliation of a dataset record (ORM object or plain mapping) onto
the current status vocabulary, including records written by older schema
revisions that carried `metadataStatus`/`publicationStatus` or only a
`hasMetadata` flag.

Nothing here mutates its input. Applying display_status() and storing the
result as the record's status, then calling it again, yields the same value.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.dataset_status import DatasetStatus, migrate_legacy_status, normalize_status

_STATUS_FIELDS = ("status", "metadata_status", "metadataStatus")
_PUBLICATION_FIELDS = ("publication_status", "publicationStatus")
_HAS_METADATA_FIELDS = ("has_metadata", "hasMetadata")


def _read(record: Any, names: tuple[str, ...]) -> Any:
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None and value != "":
            return value
    return None


def display_status(record: Any) -> DatasetStatus:
    """
    Status to show for `record`.

    A recognised status field wins. Without one, a legacy boolean
    has-metadata flag maps true -> PENDING_REVIEW and false -> NEEDS_METADATA.
    Anything else is NEEDS_METADATA.
    """
    status = _read(record, _STATUS_FIELDS)
    publication = _read(record, _PUBLICATION_FIELDS)

    if status is not None or publication is not None:
        if normalize_status(status) is not None or normalize_status(publication) is not None:
            return migrate_legacy_status(status, publication)

    flag = _read(record, _HAS_METADATA_FIELDS)
    if isinstance(flag, bool):
        return DatasetStatus.PENDING_REVIEW if flag else DatasetStatus.NEEDS_METADATA

    return DatasetStatus.NEEDS_METADATA


def has_metadata(record: Any) -> bool:
    return display_status(record) is not DatasetStatus.NEEDS_METADATA
