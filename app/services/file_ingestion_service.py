"""
app/services/file_ingestion_service.py

Structural summary extraction for uploaded CSV and Excel files.

ingest() never raises: every failure is reported through
StructuralSummary.error so the upload endpoint can return a specific 400.

CSV strategy:
  - files up to csv_prefix_threshold_bytes are streamed in full with the
    csv module; row_count is exact and memory stays bounded by the sample.
  - larger files are summarised from their first csv_prefix_bytes bytes and
    row_count is extrapolated from the average line length
    (row_count_estimated=True). Quoted fields that span several lines are
    counted once per physical line, so files with multi-line cells come out
    over-estimated.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any, BinaryIO

import numpy as np
import pandas as pd

from app.config import UploadSettings, get_upload_settings
from app.domain.ingestion import FileValidationResult, StructuralSummary, UploadedFile
from app.validators.upload_validator import file_extension, validate_upload

logger = logging.getLogger(__name__)

_EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}


class FileIngestionError(ValueError):
    """Internal parse failure; converted to StructuralSummary.error before leaving the service."""


# ---------------------------------------------------------------------------
# Cell and header helpers
# ---------------------------------------------------------------------------


def _normalize_headers(raw_headers: list[Any]) -> list[str]:
    """
    Trim header cells, name blank ones positionally and suffix duplicates so
    that every sample row can carry one key per column.

    Generated names are checked against every header in the row, so
    ``a_2,a,a`` becomes ``a_2,a,a_3`` rather than repeating ``a_2``.
    """

    cleaned: list[str] = []
    for index, raw in enumerate(raw_headers, start=1):
        name = "" if raw is None else str(raw).strip()
        if not name or name.lower() == "nan":
            name = f"column_{index}"
        cleaned.append(name)

    taken = set(cleaned)
    names: list[str] = []
    used: set[str] = set()
    for name in cleaned:
        if name in used:
            suffix = 2
            while f"{name}_{suffix}" in taken:
                suffix += 1
            name = f"{name}_{suffix}"
            taken.add(name)
        used.add(name)
        names.append(name)
    return names


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (np.floating, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _build_row(column_names: list[str], cells: list[Any]) -> dict[str, Any]:
    """Key cells by column; short rows are padded with None, extra cells dropped."""
    return {
        name: (cells[index] if index < len(cells) else None)
        for index, name in enumerate(column_names)
    }


def _is_blank_row(cells: list[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in cells)


def _clean_csv_cells(cells: list[str]) -> list[Any]:
    return [cell.strip() for cell in cells]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class FileIngestionService:
    """
    Validates uploads and extracts row counts, column names and sample rows.
    """

    def __init__(self, settings: UploadSettings | None = None) -> None:
        self._settings = settings or get_upload_settings()

    def validate(self, file_name: str, file_size: int) -> FileValidationResult:
        return validate_upload(file_name, file_size, max_bytes=self._settings.max_bytes)

    def ingest(self, upload: UploadedFile) -> StructuralSummary:
        extension = file_extension(upload.file_name)
        try:
            upload.stream.seek(0)
            if extension == ".csv":
                if upload.file_size > self._settings.csv_prefix_threshold_bytes:
                    summary = self._summarize_csv_prefix(upload.stream, upload.file_size)
                else:
                    summary = self._summarize_csv(upload.stream)
            elif extension in _EXCEL_ENGINES:
                summary = self._summarize_excel(upload.stream, extension)
            else:
                return StructuralSummary.failure(
                    f"Unsupported file type '{extension or upload.file_name}'."
                )
        except FileIngestionError as exc:
            return StructuralSummary.failure(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure while parsing upload %s", upload.file_name)
            return StructuralSummary.failure(
                f"Error parsing file - file may be corrupted or in an unsupported format ({exc.__class__.__name__})."
            )
        finally:
            try:
                upload.stream.seek(0)
            except (OSError, ValueError):
                pass

        logger.info(
            "Ingested %s rows=%d columns=%d estimated=%s",
            upload.file_name,
            summary.row_count,
            len(summary.column_names),
            summary.row_count_estimated,
        )
        return summary

    # ── CSV ────────────────────────────────────────────────────────────────────

    def _summarize_csv(self, raw_file: BinaryIO) -> StructuralSummary:
        text_stream: io.TextIOWrapper | None = None
        sample_limit = self._settings.sample_rows

        try:
            text_stream = io.TextIOWrapper(raw_file, encoding="utf-8-sig", newline="")
            reader = csv.reader(text_stream)

            header = next(reader, None)
            while header is not None and _is_blank_row(header):
                header = next(reader, None)
            if header is None:
                raise FileIngestionError("CSV file is empty or has no header row.")

            column_names = _normalize_headers(header)
            row_count = 0
            sample: list[dict[str, Any]] = []
            for cells in reader:
                if _is_blank_row(cells):
                    continue
                row_count += 1
                if len(sample) < sample_limit:
                    sample.append(_build_row(column_names, _clean_csv_cells(cells)))

        except UnicodeDecodeError as exc:
            raise FileIngestionError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise FileIngestionError(f"Invalid CSV format: {exc}") from exc
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

        if row_count == 0:
            raise FileIngestionError("CSV file has a header row but no data rows.")

        return StructuralSummary(
            row_count=row_count,
            column_names=column_names,
            sample_data=sample,
        )

    def _summarize_csv_prefix(self, raw_file: BinaryIO, file_size: int) -> StructuralSummary:
        """
        Parse the header and up to sample_rows rows from a bounded prefix and
        extrapolate the total row count from the average line length seen.
        """

        prefix = raw_file.read(self._settings.csv_prefix_bytes)
        if len(prefix) < file_size:
            last_newline = prefix.rfind(b"\n")
            if last_newline == -1:
                raise FileIngestionError("CSV header row is longer than the sampling window.")
            prefix = prefix[: last_newline + 1]

        try:
            text = prefix.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FileIngestionError("CSV must be UTF-8 encoded.") from exc

        physical_lines = text.splitlines()
        lines = [line for line in physical_lines if line.strip()]
        if not lines:
            raise FileIngestionError("CSV file is empty or has no header row.")

        try:
            parsed = list(csv.reader(lines[: self._settings.sample_rows + 1]))
        except csv.Error as exc:
            raise FileIngestionError(f"Invalid CSV format: {exc}") from exc

        column_names = _normalize_headers(parsed[0])
        sample = [_build_row(column_names, _clean_csv_cells(cells)) for cells in parsed[1:]]
        observed_data_lines = len(lines) - 1
        if observed_data_lines == 0:
            raise FileIngestionError("CSV file has a header row but no data rows.")

        average_line_bytes = len(prefix) / max(1, len(physical_lines))
        estimated_lines = int(round(file_size / average_line_bytes)) if average_line_bytes else 0
        row_count = max(observed_data_lines, estimated_lines - 1)

        return StructuralSummary(
            row_count=row_count,
            column_names=column_names,
            sample_data=sample,
            row_count_estimated=True,
        )

    # ── Excel ──────────────────────────────────────────────────────────────────

    def _summarize_excel(self, raw_file: BinaryIO, extension: str) -> StructuralSummary:
        engine = _EXCEL_ENGINES[extension]
        try:
            frame = pd.read_excel(
                raw_file,
                sheet_name=0,
                header=None,
                dtype=object,
                engine=engine,
            )
        except ImportError as exc:
            raise FileIngestionError(
                f"Reading {extension} files requires the '{engine}' package."
            ) from exc
        except Exception as exc:
            message = str(exc)
            if "encrypted" in message.lower():
                raise FileIngestionError(
                    "Excel file is encrypted. Remove the password and upload it again."
                ) from exc
            raise FileIngestionError(f"Could not read Excel file: {message}") from exc

        rows = [
            [_json_safe(cell) for cell in record]
            for record in frame.itertuples(index=False, name=None)
        ]
        rows = [row for row in rows if not _is_blank_row(row)]
        if not rows:
            raise FileIngestionError("Excel file is empty or has only headers.")

        column_names = _normalize_headers(rows[0])
        data_rows = rows[1:]
        if not data_rows:
            raise FileIngestionError("Excel file is empty or has only headers.")

        sample = [
            _build_row(column_names, row)
            for row in data_rows[: self._settings.sample_rows]
        ]
        return StructuralSummary(
            row_count=len(data_rows),
            column_names=column_names,
            sample_data=sample,
        )


@lru_cache(maxsize=1)
def get_file_ingestion_service() -> FileIngestionService:
    """
    Return the shared file ingestion service instance.
    """

    return FileIngestionService()
