"""
tests/test_dataset_repository.py

Coverage:
  - create() persists the dataset and its file metadata together
  - get_by_id() with and without sample rows
  - list_all() ordering and deferred sample rows
  - exists_by_name() case handling
  - update() field whitelist and status guard
  - apply_transition() field whitelist
  - delete() cascades to file metadata
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.dataset_status import DatasetStatus
from db.models import Dataset, FileMetadata
from db.repositories import DatasetRepository, StatusWriteError


def _new_dataset(name: str = "sales") -> tuple[Dataset, FileMetadata]:
    dataset = Dataset(name=name, description="Quarterly sales")
    file_metadata = FileMetadata(
        original_name=f"{name}.csv",
        file_size=42,
        file_type="text/csv",
        row_count=3,
        column_names=["id", "amount"],
        sample_data=[{"id": "1", "amount": "10"}],
    )
    return dataset, file_metadata


def _create(session: Session, name: str = "sales") -> Dataset:
    dataset, file_metadata = _new_dataset(name)
    DatasetRepository(session).create(dataset=dataset, file_metadata=file_metadata)
    session.commit()
    return dataset


# ---------------------------------------------------------------------------
# Create and read
# ---------------------------------------------------------------------------


class TestCreateAndRead:
    def test_create_assigns_defaults(self, db_session: Session) -> None:
        dataset = _create(db_session)

        assert isinstance(dataset.id, uuid.UUID)
        assert dataset.status == DatasetStatus.NEEDS_METADATA.value
        assert dataset.metadata_language == "en"
        assert dataset.created_at is not None
        assert dataset.file_metadata.dataset_id == dataset.id
        assert dataset.file_metadata.row_count_estimated is False

    def test_get_by_id_includes_sample(self, session_factory: sessionmaker) -> None:
        with session_factory() as session:
            dataset_id = _create(session).id

        with session_factory() as session:
            loaded = DatasetRepository(session).get_by_id(dataset_id)

            assert loaded is not None
            assert loaded.file_metadata.column_names == ["id", "amount"]
            assert "sample_data" not in inspect(loaded.file_metadata).unloaded
            assert loaded.file_metadata.sample_data == [{"id": "1", "amount": "10"}]

    def test_get_by_id_can_skip_sample(self, session_factory: sessionmaker) -> None:
        with session_factory() as session:
            dataset_id = _create(session).id

        with session_factory() as session:
            loaded = DatasetRepository(session).get_by_id(dataset_id, include_sample=False)

            assert "sample_data" in inspect(loaded.file_metadata).unloaded

    def test_get_by_id_unknown(self, db_session: Session) -> None:
        assert DatasetRepository(db_session).get_by_id(uuid.uuid4()) is None

    def test_list_all_newest_first_without_sample(self, session_factory: sessionmaker) -> None:
        with session_factory() as session:
            _create(session, "first")
            _create(session, "second")

        with session_factory() as session:
            datasets = DatasetRepository(session).list_all()

            assert [d.name for d in datasets] == ["second", "first"]
            assert all("sample_data" in inspect(d.file_metadata).unloaded for d in datasets)

    def test_list_all_limit(self, db_session: Session) -> None:
        _create(db_session, "first")
        _create(db_session, "second")

        assert len(DatasetRepository(db_session).list_all(limit=1)) == 1


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class TestNames:
    def test_exists_by_name_ignores_case(self, db_session: Session) -> None:
        _create(db_session, "Sales")
        repository = DatasetRepository(db_session)

        assert repository.exists_by_name("sales")
        assert repository.exists_by_name(" SALES ")
        assert not repository.exists_by_name("sales", case_insensitive=False)
        assert not repository.exists_by_name("revenue")

    def test_unique_index_is_case_insensitive(self, db_session: Session) -> None:
        _create(db_session, "Sales")
        dataset, file_metadata = _new_dataset("SALES")

        with pytest.raises(IntegrityError):
            DatasetRepository(db_session).create(dataset=dataset, file_metadata=file_metadata)
        db_session.rollback()


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestWrites:
    def test_update_writes_allowed_fields(self, db_session: Session) -> None:
        dataset = _create(db_session)
        repository = DatasetRepository(db_session)

        updated = repository.update(dataset.id, {"suggested_title": "Sales", "suggested_tags": ["a"]})
        db_session.commit()

        assert updated is dataset
        assert dataset.suggested_title == "Sales"
        assert dataset.suggested_tags == ["a"]

    def test_update_refuses_status(self, db_session: Session) -> None:
        dataset = _create(db_session)

        with pytest.raises(StatusWriteError):
            DatasetRepository(db_session).update(dataset.id, {"status": "APPROVED"})

        assert dataset.status == DatasetStatus.NEEDS_METADATA.value

    def test_update_refuses_unknown_fields(self, db_session: Session) -> None:
        dataset = _create(db_session)

        with pytest.raises(ValueError):
            DatasetRepository(db_session).update(dataset.id, {"published_at": None})

    def test_update_unknown_dataset(self, db_session: Session) -> None:
        assert DatasetRepository(db_session).update(uuid.uuid4(), {"name": "x"}) is None

    def test_apply_transition(self, db_session: Session) -> None:
        dataset = _create(db_session)

        DatasetRepository(db_session).apply_transition(
            dataset,
            status=DatasetStatus.PENDING_REVIEW,
            fields={"metadata_draft": {"title": "Sales"}},
        )
        db_session.commit()

        assert dataset.status == "PENDING_REVIEW"
        assert dataset.metadata_draft == {"title": "Sales"}

    def test_apply_transition_refuses_other_fields(self, db_session: Session) -> None:
        dataset = _create(db_session)

        with pytest.raises(ValueError):
            DatasetRepository(db_session).apply_transition(
                dataset,
                status=DatasetStatus.APPROVED,
                fields={"name": "renamed"},
            )

    def test_delete_cascades(self, db_session: Session) -> None:
        dataset = _create(db_session)
        repository = DatasetRepository(db_session)

        assert repository.delete(dataset.id) is True
        db_session.commit()

        assert db_session.scalar(select(func.count()).select_from(FileMetadata)) == 0
        assert repository.delete(dataset.id) is False
