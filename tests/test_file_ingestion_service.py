"""
tests/test_file_ingestion_service.py

Coverage:
  - CSV: header + rows, UTF-8 BOM, blank lines, short rows, sample cap
  - CSV failures: empty, header only, wrong encoding
  - Large CSV: prefix sampling with an estimated row count
  - Excel (.xlsx): header row, null cells, header-only sheet
  - validate(): size / type / empty ordering
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from app.config import UploadSettings
from app.domain.ingestion import UploadedFile
from app.services.file_ingestion_service import FileIngestionService

UploadFactory = Callable[..., UploadedFile]


@pytest.fixture()
def service() -> FileIngestionService:
    return FileIngestionService(UploadSettings())


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


class TestCsvIngestion:
    def test_counts_rows_and_samples(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"id,amount\n1,10\n2,20\n3,30\n"))

        assert summary.succeeded
        assert summary.row_count == 3
        assert summary.column_names == ["id", "amount"]
        assert summary.sample_data[0] == {"id": "1", "amount": "10"}
        assert len(summary.sample_data) == 3
        assert summary.row_count_estimated is False

    def test_strips_utf8_bom_from_first_header(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"\xef\xbb\xbfname,city\nAda,London\n"))

        assert summary.column_names == ["name", "city"]

    def test_skips_blank_lines(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"a,b\n\n1,2\n,\n3,4\n\n"))

        assert summary.row_count == 2
        assert [row["a"] for row in summary.sample_data] == ["1", "3"]

    def test_short_rows_are_padded(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"a,b,c\n1,2\n"))

        assert summary.sample_data == [{"a": "1", "b": "2", "c": None}]

    def test_quoted_commas_stay_in_one_cell(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b'name,note\n"Smith, J","said ""hi"""\n'))

        assert summary.sample_data == [{"name": "Smith, J", "note": 'said "hi"'}]

    def test_blank_and_duplicate_headers_are_named(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"id,,id\n1,2,3\n"))

        assert summary.column_names == ["id", "column_2", "id_2"]

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (b"a_2,a,a\n1,2,3\n", ["a_2", "a", "a_3"]),
            (b"column_2,\n1,2\n", ["column_2", "column_2_2"]),
            (b"a,a,a_2\n1,2,3\n", ["a", "a_3", "a_2"]),
        ],
    )
    def test_generated_header_names_never_collide(
        self,
        service: FileIngestionService,
        make_upload: UploadFactory,
        content: bytes,
        expected: list[str],
    ) -> None:
        summary = service.ingest(make_upload(content))

        assert summary.column_names == expected
        assert list(summary.sample_data[0]) == expected
        assert sorted(summary.sample_data[0].values()) == [str(n) for n in range(1, len(expected) + 1)]

    def test_sample_is_capped_at_ten_rows(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        body = "n\n" + "".join(f"{i}\n" for i in range(25))
        summary = service.ingest(make_upload(body.encode()))

        assert summary.row_count == 25
        assert len(summary.sample_data) == 10
        assert summary.sample_data[-1] == {"n": "9"}

    def test_empty_file(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b""))

        assert not summary.succeeded
        assert summary.error == "CSV file is empty or has no header row."

    def test_header_only(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"a,b\n"))

        assert summary.error == "CSV file has a header row but no data rows."

    def test_non_utf8_bytes(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"a,b\n\xff\xfe,1\n"))

        assert summary.error == "CSV must be UTF-8 encoded."

    def test_stream_is_rewound_and_left_open(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        upload = make_upload(b"a\n1\n")
        service.ingest(upload)

        assert not upload.stream.closed
        assert upload.stream.tell() == 0


class TestLargeCsvSampling:
    @pytest.fixture()
    def sampling_service(self) -> FileIngestionService:
        return FileIngestionService(
            UploadSettings(csv_prefix_threshold_bytes=1024, csv_prefix_bytes=1024)
        )

    def test_estimates_row_count_from_prefix(
        self,
        sampling_service: FileIngestionService,
        make_upload: UploadFactory,
    ) -> None:
        body = "id,val\n" + "".join(f"{i:05d},{i % 10}\n" for i in range(2000))
        summary = sampling_service.ingest(make_upload(body.encode()))

        assert summary.succeeded
        assert summary.row_count_estimated is True
        assert abs(summary.row_count - 2000) <= 20
        assert summary.column_names == ["id", "val"]
        assert len(summary.sample_data) == 10
        assert summary.sample_data[0] == {"id": "00000", "val": "0"}

    def test_header_longer_than_window(
        self,
        sampling_service: FileIngestionService,
        make_upload: UploadFactory,
    ) -> None:
        header = ",".join(f"column_name_{i}" for i in range(200))
        summary = sampling_service.ingest(make_upload(f"{header}\n1\n".encode()))

        assert summary.error == "CSV header row is longer than the sampling window."


# ---------------------------------------------------------------------------
# Excel
# ---------------------------------------------------------------------------


class TestExcelIngestion:
    def test_first_sheet_summary(
        self,
        service: FileIngestionService,
        make_upload: UploadFactory,
        make_xlsx: Callable,
    ) -> None:
        content = make_xlsx([["Region", "Sales"], ["North", 100], ["South", None]])
        summary = service.ingest(make_upload(content, file_name="regions.xlsx", content_type=None))

        assert summary.succeeded
        assert summary.row_count == 2
        assert summary.column_names == ["Region", "Sales"]
        assert summary.sample_data == [
            {"Region": "North", "Sales": 100},
            {"Region": "South", "Sales": None},
        ]

    def test_header_only_sheet(
        self,
        service: FileIngestionService,
        make_upload: UploadFactory,
        make_xlsx: Callable,
    ) -> None:
        content = make_xlsx([["a", "b"]])
        summary = service.ingest(make_upload(content, file_name="empty.xlsx"))

        assert summary.error == "Excel file is empty or has only headers."

    def test_corrupt_workbook(self, service: FileIngestionService, make_upload: UploadFactory) -> None:
        summary = service.ingest(make_upload(b"not a zip archive", file_name="broken.xlsx"))

        assert not summary.succeeded
        assert summary.error


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


class TestValidate:
    def test_accepts_supported_file(self, service: FileIngestionService) -> None:
        assert service.validate("sales.CSV", 10).valid

    def test_size_is_checked_before_type(self, service: FileIngestionService) -> None:
        result = service.validate("notes.txt", 11 * 1024 * 1024)

        assert not result.valid
        assert result.error == "File size exceeds the maximum limit of 10MB"

    def test_type_is_checked_before_emptiness(self, service: FileIngestionService) -> None:
        result = service.validate("notes.txt", 0)

        assert result.error == "Invalid file type. Allowed types: .csv, .xls, .xlsx"

    def test_empty_file(self, service: FileIngestionService) -> None:
        assert service.validate("sales.csv", 0).error == "File is empty or has no valid data"
