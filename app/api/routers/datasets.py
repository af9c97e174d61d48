"""
app/api/routers/datasets.py

Dataset upload, listing, detail, deletion and download endpoints.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_dataset_upload
from app.api.errors import http_errors
from app.api.presenters import present_dataset, present_dataset_summary
from app.domain.ingestion import UploadedFile
from app.schemas.dataset import DatasetEnvelope, DatasetListResponse, MessageResponse
from app.services.dataset_export_service import (
    DatasetExportService,
    ExportResult,
    get_dataset_export_service,
    render_xlsx,
)
from app.services.dataset_service import DatasetService, get_dataset_service
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/datasets", tags=["datasets"])


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _content_disposition(file_name: str) -> str:
    ascii_name = file_name.encode("ascii", "ignore").decode("ascii").replace('"', "") or "dataset"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


def _to_csv_streaming(result: ExportResult) -> StreamingResponse:
    """Stream *result* as a UTF-8 CSV download; None becomes an empty field."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type=result.media_type,
        headers={
            "Content-Disposition": _content_disposition(result.file_name),
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_xlsx_response(result: ExportResult) -> StreamingResponse:
    return StreamingResponse(
        content=iter([render_xlsx(result)]),
        media_type=result.media_type,
        headers={
            "Content-Disposition": _content_disposition(result.file_name),
            "X-Row-Count": str(len(result.rows)),
        },
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("", response_model=DatasetEnvelope, status_code=status.HTTP_201_CREATED)
def upload_dataset(
    upload: UploadedFile | None = Depends(get_dataset_upload),
    name: str = Form(default=""),
    description: str = Form(default=""),
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetEnvelope:
    """
    Upload a CSV or Excel file as a new dataset awaiting metadata.
    """

    try:
        with http_errors("dataset upload"):
            dataset = service.create_dataset(
                db,
                name=name,
                description=description,
                upload=upload,
            )
    finally:
        if upload is not None:
            upload.stream.close()

    return DatasetEnvelope(dataset=present_dataset(dataset))


@router.get("", response_model=DatasetListResponse)
def list_datasets(
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetListResponse:
    """
    All datasets, newest first. Sample rows are not included.
    """

    with http_errors("dataset listing"):
        datasets = service.list_datasets(db)
    return DatasetListResponse(datasets=[present_dataset_summary(dataset) for dataset in datasets])


@router.get("/{dataset_id}", response_model=DatasetEnvelope)
def get_dataset(
    dataset_id: str,
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetEnvelope:
    with http_errors("dataset lookup"):
        dataset = service.get_dataset(db, dataset_id)
    return DatasetEnvelope(dataset=present_dataset(dataset))


@router.delete("/{dataset_id}", response_model=MessageResponse)
def delete_dataset(
    dataset_id: str,
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
) -> MessageResponse:
    with http_errors("dataset deletion"):
        service.delete_dataset(db, dataset_id)
    return MessageResponse(message="Dataset deleted successfully")


@router.get("/{dataset_id}/download")
def download_dataset(
    dataset_id: str,
    output_format: str | None = Query(
        default=None,
        alias="format",
        description='"csv" or "xlsx". Defaults to the family of the uploaded file.',
    ),
    db: Session = Depends(get_db),
    service: DatasetService = Depends(get_dataset_service),
    exporter: DatasetExportService = Depends(get_dataset_export_service),
) -> StreamingResponse:
    """
    Download the stored sample rows as CSV or XLSX, named after the uploaded file.
    """

    with http_errors("dataset download"):
        dataset = service.get_dataset(db, dataset_id, include_sample=True)
        result = exporter.export(dataset, output_format=output_format)

    logger.info(
        "Dataset download id=%s format=%s rows=%d",
        dataset.id,
        result.output_format,
        len(result.rows),
    )
    if result.output_format == "xlsx":
        return _to_xlsx_response(result)
    return _to_csv_streaming(result)
