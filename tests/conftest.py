"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database, a controllable LLM adapter
and a TestClient wired to both through dependency overrides.
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers ORM models on Base.metadata
from app.config import UploadSettings
from app.domain.ingestion import UploadedFile
from app.services.dataset_service import DatasetService, get_dataset_service
from app.services.dataset_workflow_service import DatasetWorkflowService
from app.services.file_ingestion_service import FileIngestionService
from app.services.metadata_suggestion_service import MetadataSuggestionService
from db.base import Base
from db.session import build_session_factory, enable_sqlite_foreign_keys, get_db
from llm_metadata.adapter import BaseLLMAdapter

SALES_SUGGESTION = {
    "title": "Sales Data",
    "description": "Three sales transactions with an id and an amount.",
    "tags": ["sales"],
    "category": "finance",
}


class StubLLMAdapter(BaseLLMAdapter):
    """Returns `response` (or raises it when it is an exception) and records prompts."""

    def __init__(self, response: str | Exception = "") -> None:
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def stub_adapter() -> StubLLMAdapter:
    return StubLLMAdapter(json.dumps(SALES_SUGGESTION))


@pytest.fixture()
def upload_settings() -> UploadSettings:
    return UploadSettings()


@pytest.fixture()
def dataset_service(stub_adapter: StubLLMAdapter, upload_settings: UploadSettings) -> DatasetService:
    return DatasetService(
        ingestion_service=FileIngestionService(upload_settings),
        suggestion_service=MetadataSuggestionService(
            adapter_factory=lambda: stub_adapter,
            timeout_seconds=5.0,
        ),
        workflow_service=DatasetWorkflowService(),
    )


@pytest.fixture()
def make_upload() -> Callable[..., UploadedFile]:
    def _make(
        content: bytes,
        file_name: str = "sales.csv",
        content_type: str | None = "text/csv",
    ) -> UploadedFile:
        return UploadedFile(
            file_name=file_name,
            file_size=len(content),
            content_type=content_type,
            stream=io.BytesIO(content),
        )

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def client(session_factory: sessionmaker, dataset_service: DatasetService) -> Generator[TestClient, None, None]:
    from app.main import create_app

    application = create_app()

    def _get_test_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = _get_test_db
    application.dependency_overrides[get_dataset_service] = lambda: dataset_service

    # No context manager: the lifespan would probe the configured database.
    yield TestClient(application)

    application.dependency_overrides.clear()


def xlsx_bytes(rows: list[list[Any]]) -> bytes:
    """Build a one-sheet workbook in memory."""
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def make_xlsx() -> Callable[[list[list[Any]]], bytes]:
    return xlsx_bytes
