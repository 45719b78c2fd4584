"""
Tests for request-level conversion orchestration.
"""

import io
import tempfile
from datetime import datetime
from pathlib import Path

import openpyxl
import pytest
from openpyxl import Workbook

from sheet_reshaper import io_utils
from sheet_reshaper.config import XLSX_MIME_TYPE, ColumnLayout, ConversionOptions
from sheet_reshaper.core import convert_file, convert_upload, convert_workbook, convert_workbook_bytes
from sheet_reshaper.exceptions import (
    MissingRequiredColumnError,
    MissingWorksheetError,
    UploadTransportError,
)

from conftest import make_price_workbook, make_sales_workbook, to_bytes

NOW = datetime(2024, 1, 31, 9, 5, 0)


def _load(content: bytes):
    return openpyxl.load_workbook(io.BytesIO(content)).active


class TestConvertWorkbookBytes:
    """Test suite for convert_workbook_bytes function."""

    def test_yearly_end_to_end(self, sample_sales_rows):
        """Test X, X, Y rows produce two groups and two subtotal rows."""
        data = to_bytes(make_sales_workbook(sample_sales_rows))

        result = convert_workbook_bytes(data, ConversionOptions(mode="yearly"), now=NOW)

        assert result.filename == "년도별_2024-01-31 09:05:00.xlsx"
        assert result.mime_type == XLSX_MIME_TYPE
        assert result.summary['groups_found'] == 2
        assert result.summary['output_rows'] == 5

        ws = _load(result.content)
        assert [list(row) for row in ws.iter_rows(values_only=True)] == [
            ["제품군", "모델명", "2024", "총 합계"],
            ["F1", "X", 30, 30],
            ["F1 계", None, "=SUM(C2:C2)", "=SUM(D2:D2)"],
            ["F2", "Y", 5, 5],
            ["F2 계", None, "=SUM(C4:C4)", "=SUM(D4:D4)"],
        ]

    def test_monthly_preview_and_filename(self, sample_sales_rows):
        """Test monthly mode buckets by year-month and names the file 월별_."""
        data = to_bytes(make_sales_workbook(sample_sales_rows))

        result = convert_workbook_bytes(data, ConversionOptions(mode="monthly"), now=NOW)

        assert result.filename.startswith("월별_")
        assert list(result.preview.columns) == [
            "제품군", "모델명", "24년_01월", "24년_03월", "24년_06월", "총 합계"
        ]
        assert result.preview.iloc[0].tolist() == ["F1", "X", 10, 0, 20, 30]

    def test_price_split(self):
        """Test price mode writes one row per split record."""
        data = to_bytes(make_price_workbook([["TV", "A|B", "10|20", "5"]]))

        result = convert_workbook_bytes(data, ConversionOptions(mode="price"), now=NOW)

        assert result.filename == "가격변환_2024-01-31 09:05:00.xlsx"
        assert result.summary['records'] == 2
        ws = _load(result.content)
        assert ws["A3"].value == "B"
        assert ws["B3"].value == "20"

    def test_only_first_sheet_is_read(self, sample_sales_rows):
        """Test later worksheets are ignored."""
        wb = make_sales_workbook(sample_sales_rows)
        other = wb.create_sheet("Other")
        other.append(["x"] * 10)
        other.append([None, None, "Z", "F9", None, None, None, 999, None, "240101"])

        result = convert_workbook_bytes(to_bytes(wb), ConversionOptions(), now=NOW)

        assert "Z" not in result.preview["모델명"].tolist()

    def test_custom_amount_column(self, sample_sales_rows):
        """Test the layout selects the amount column."""
        wb = make_sales_workbook(sample_sales_rows)
        for row in range(2, 5):
            wb.active.cell(row=row, column=9, value=1)

        options = ConversionOptions(mode="yearly", layout=ColumnLayout.from_letters(amount="I"))
        result = convert_workbook_bytes(to_bytes(wb), options, now=NOW)

        assert result.preview["총 합계"].tolist() == [2, 1]

    def test_family_labels_collated_case_insensitively(self):
        """Test family order ignores case instead of following code points."""
        rows = [
            {'code': f'M{i}', 'label': label, 'amount': 1, 'date': '240101'}
            for i, label in enumerate(['banana', 'Apple', 'apricot', 'Zebra'])
        ]
        data = to_bytes(make_sales_workbook(rows))

        result = convert_workbook_bytes(data, ConversionOptions(), now=NOW)

        assert result.preview["제품군"].tolist() == ['Apple', 'apricot', 'banana', 'Zebra']

    def test_missing_price_columns(self):
        """Test price mode fails when a required header is missing."""
        data = to_bytes(make_price_workbook([], header=["모델명"]))

        with pytest.raises(MissingRequiredColumnError):
            convert_workbook_bytes(data, ConversionOptions(mode="price"))

    def test_corrupt_upload(self):
        """Test unreadable bytes raise UploadTransportError."""
        with pytest.raises(UploadTransportError, match="엑셀 처리 중 오류"):
            convert_workbook_bytes(b"not an excel file", ConversionOptions())


class TestConvertWorkbook:
    """Test suite for convert_workbook function."""

    def test_missing_worksheet(self):
        """Test a workbook without worksheets raises MissingWorksheetError."""
        wb = Workbook()
        wb.remove(wb.active)

        with pytest.raises(MissingWorksheetError, match="워크시트를 찾을 수 없습니다"):
            convert_workbook(wb, ConversionOptions())

    def test_source_closed_when_conversion_fails(self, monkeypatch):
        """Test the source workbook is closed even when validation fails."""
        wb = make_price_workbook([], header=["분류"])
        closed = []
        monkeypatch.setattr(wb, "close", lambda: closed.append(True))

        with pytest.raises(MissingRequiredColumnError):
            convert_workbook(wb, ConversionOptions(mode="price"))

        assert closed == [True]

    def test_header_only_sheet(self):
        """Test a sheet without data rows converts to a header-only workbook."""
        result = convert_workbook(make_sales_workbook([]), ConversionOptions(), now=NOW)

        ws = _load(result.content)
        assert ws.max_row == 1
        assert result.summary['groups_found'] == 0


class TestConvertFile:
    """Test suite for convert_file function."""

    def test_convert_from_disk(self, tmp_path, sample_sales_rows):
        """Test converting a file on disk records the input path."""
        input_path = tmp_path / "sales.xlsx"
        make_sales_workbook(sample_sales_rows).save(input_path)

        result = convert_file(input_path, ConversionOptions())

        assert result.summary['input_file'] == str(input_path)
        assert result.summary['groups_found'] == 2

    def test_rejects_non_excel(self, tmp_path):
        """Test non-Excel suffixes are rejected."""
        path = tmp_path / "data.csv"
        path.write_text("a,b")

        with pytest.raises(ValueError, match="must be an Excel file"):
            convert_file(path, ConversionOptions())


class TestConvertUpload:
    """Test suite for convert_upload function."""

    @pytest.fixture
    def created_temp_files(self, monkeypatch):
        """Record temporary files created for uploads."""
        created = []
        real_mkstemp = tempfile.mkstemp

        def recording_mkstemp(*args, **kwargs):
            fd, name = real_mkstemp(*args, **kwargs)
            created.append(name)
            return fd, name

        monkeypatch.setattr(io_utils.tempfile, "mkstemp", recording_mkstemp)
        return created

    def test_success_removes_temp_file(self, created_temp_files, sample_sales_rows):
        """Test the temporary upload is deleted after a successful conversion."""
        stream = io.BytesIO(to_bytes(make_sales_workbook(sample_sales_rows)))

        result = convert_upload(stream, ConversionOptions())

        assert result.summary['groups_found'] == 2
        assert len(created_temp_files) == 1
        assert not Path(created_temp_files[0]).exists()

    def test_parse_error_removes_temp_file(self, created_temp_files):
        """Test the temporary upload is deleted when parsing fails."""
        with pytest.raises(UploadTransportError):
            convert_upload(io.BytesIO(b"garbage"), ConversionOptions())

        assert not Path(created_temp_files[0]).exists()

    def test_validation_error_removes_temp_file(self, created_temp_files):
        """Test the temporary upload is deleted when validation fails."""
        stream = io.BytesIO(to_bytes(make_price_workbook([], header=["분류"])))

        with pytest.raises(MissingRequiredColumnError):
            convert_upload(stream, ConversionOptions(mode="price"))

        assert not Path(created_temp_files[0]).exists()

    def test_already_read_stream(self, created_temp_files, sample_sales_rows):
        """Test an upload stream consumed by an earlier read still converts."""
        stream = io.BytesIO(to_bytes(make_sales_workbook(sample_sales_rows)))
        stream.read()

        result = convert_upload(stream, ConversionOptions())

        assert result.summary['groups_found'] == 2
