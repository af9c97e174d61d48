"""
app/services/dataset_export_service.py

Regenerates a downloadable file from a dataset's stored sample rows.

Only the sample kept at upload time is available, so the download is a
preview of the original file, not a copy of it.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import PurePath
from typing import Any

import pandas as pd

from app.domain.errors import DatasetValidationError
from app.validators.upload_validator import XLSX_CONTENT_TYPE, file_extension
from db.models.dataset import Dataset

EXPORT_FORMATS = frozenset({"csv", "xlsx"})
XLSX_SHEET_NAME = "Data"


@dataclass(frozen=True)
class ExportResult:
    """
    Flat tabular data ready for CSV or XLSX serialisation.

    fields keeps the original column order; rows are keyed by those fields.
    """

    file_name: str
    output_format: str
    fields: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def media_type(self) -> str:
        if self.output_format == "xlsx":
            return XLSX_CONTENT_TYPE
        return "text/csv; charset=utf-8"


def _download_name(original_name: str, output_format: str) -> str:
    path = PurePath(original_name or "dataset")
    stem = path.stem or "dataset"
    if file_extension(path.name) == f".{output_format}":
        return path.name
    return f"{stem}.{output_format}"


def render_xlsx(result: ExportResult) -> bytes:
    """Serialise an export into a single-sheet workbook."""
    frame = pd.DataFrame(result.rows, columns=result.fields)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=XLSX_SHEET_NAME, index=False)
    return buffer.getvalue()


class DatasetExportService:
    """
    Builds ExportResult objects from stored file metadata.
    """

    def resolve_format(self, dataset: Dataset, requested: str | None) -> str:
        if requested:
            output_format = requested.strip().lower()
            if output_format not in EXPORT_FORMATS:
                raise DatasetValidationError(
                    f"Invalid format {requested!r}. Must be one of: {sorted(EXPORT_FORMATS)}."
                )
            return output_format

        original = dataset.file_metadata.original_name if dataset.file_metadata else ""
        return "xlsx" if file_extension(original) in {".xls", ".xlsx"} else "csv"

    def export(self, dataset: Dataset, *, output_format: str | None = None) -> ExportResult:
        file_metadata = dataset.file_metadata
        if file_metadata is None:
            raise DatasetValidationError("Dataset has no file to download.")

        resolved = self.resolve_format(dataset, output_format)
        fields = list(file_metadata.column_names or [])
        rows = [
            {name: row.get(name) for name in fields}
            for row in (file_metadata.sample_data or [])
        ]
        return ExportResult(
            file_name=_download_name(file_metadata.original_name, resolved),
            output_format=resolved,
            fields=fields,
            rows=rows,
        )


@lru_cache(maxsize=1)
def get_dataset_export_service() -> DatasetExportService:
    return DatasetExportService()
