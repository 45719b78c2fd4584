"""
Sheet Reshaper - convert an uploaded spreadsheet into a reshaped workbook.

This package provides two pipelines over the first worksheet of an Excel file:
per-code aggregation of amounts into yearly or monthly buckets with product
family subtotals, and splitting of pipe-joined model/price cells into rows.
"""

__version__ = "0.1.0"

from .core import convert_file, convert_upload, convert_workbook, convert_workbook_bytes
from .config import ColumnLayout, ConversionOptions
from .exceptions import (
    ConversionError,
    MissingRequiredColumnError,
    MissingWorksheetError,
    UploadTransportError,
)

__all__ = [
    "convert_file",
    "convert_upload",
    "convert_workbook",
    "convert_workbook_bytes",
    "ColumnLayout",
    "ConversionOptions",
    "ConversionError",
    "MissingRequiredColumnError",
    "MissingWorksheetError",
    "UploadTransportError",
]
