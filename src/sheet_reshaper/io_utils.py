"""
I/O utilities for reading uploads and naming/writing converted files.
"""

import io
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import openpyxl
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .exceptions import MissingWorksheetError, UploadTransportError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = ['.xlsx', '.xlsm']


def load_workbook_bytes(data: bytes) -> Workbook:
    """
    Parse uploaded .xlsx bytes into a workbook.

    Cached formula results are read instead of formulas, and styled text is
    kept as rich text so it can be flattened run by run.

    Args:
        data: Raw file content

    Returns:
        Loaded openpyxl workbook

    Raises:
        UploadTransportError: If the content is not a readable Excel file
    """
    try:
        return openpyxl.load_workbook(io.BytesIO(data), data_only=True, rich_text=True)
    except Exception as e:
        logger.error(f"Failed to parse uploaded workbook: {e}")
        raise UploadTransportError() from e


def load_workbook_safe(path: Path) -> Workbook:
    """
    Safely load an Excel workbook from disk.

    Args:
        path: Path to the Excel file

    Returns:
        Loaded openpyxl workbook

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is not a valid Excel file
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() not in EXCEL_SUFFIXES:
        raise ValueError(f"File must be an Excel file (.xlsx or .xlsm): {path}")

    return load_workbook_bytes(path.read_bytes())


def first_worksheet(wb: Workbook) -> Worksheet:
    """
    Return the first worksheet; later sheets are ignored.

    Raises:
        MissingWorksheetError: If the workbook has no worksheet
    """
    if not wb.worksheets:
        raise MissingWorksheetError()
    return wb.worksheets[0]


def build_output_filename(prefix: str = "", now: Optional[datetime] = None) -> str:
    """
    Build the timestamped download name, e.g. '월별_2024-01-31 09:05:00.xlsx'.

    Args:
        prefix: Mode tag prepended to the timestamp
        now: Timestamp to use (current local time if None)
    """
    now = now or datetime.now()
    return f"{prefix}{now:%Y-%m-%d %H:%M:%S}.xlsx"


def sanitize_filename(text: str) -> str:
    """
    Sanitize text for use as a filename.

    Args:
        text: Text to sanitize

    Returns:
        Sanitized filename-safe text
    """
    if not text or not text.strip():
        return "Unknown"

    # Invalid chars: < > : " | ? * \ /
    sanitized = re.sub(r'[<>:"|?*\\/]', '_', text.strip())
    sanitized = re.sub(r'\s+', ' ', sanitized)

    # Leading/trailing dots and spaces are rejected on Windows
    sanitized = sanitized.strip('. ')

    if len(sanitized) > 200:
        sanitized = sanitized[:200].strip()

    if not sanitized:
        return "Unknown"

    return sanitized


def ensure_out_dir(path: Path) -> Path:
    """
    Ensure output directory exists.

    Args:
        path: Directory path to create

    Returns:
        The created directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_unique_filename(base_path: Path, extension: str = ".xlsx") -> Path:
    """
    Generate a unique filename by adding numeric suffix if needed.

    Args:
        base_path: Base path without extension
        extension: File extension to use

    Returns:
        Unique file path
    """
    full_path = base_path.with_name(base_path.name + extension)

    if not full_path.exists():
        return full_path

    counter = 2
    while True:
        new_path = base_path.with_name(f"{base_path.name} #{counter}{extension}")
        if not new_path.exists():
            return new_path
        counter += 1


def write_output_file(content: bytes, filename: str, out_dir: Path) -> Path:
    """
    Write converted content into out_dir under a filesystem-safe name.

    Args:
        content: Serialized workbook
        filename: Download name (see build_output_filename)
        out_dir: Output directory

    Returns:
        Path of the written file
    """
    ensure_out_dir(out_dir)

    stem = filename[:-len(".xlsx")] if filename.endswith(".xlsx") else filename
    output_path = generate_unique_filename(out_dir / sanitize_filename(stem), ".xlsx")
    output_path.write_bytes(content)

    logger.info(f"Wrote {len(content)} bytes to {output_path}")
    return output_path


@contextmanager
def temporary_upload(stream: BinaryIO, suffix: str = ".xlsx") -> Iterator[Path]:
    """
    Spool an uploaded stream to a temporary file, removed on every exit path.

    The whole upload is written even if the stream was already read.

    Args:
        stream: Readable binary stream of the upload
        suffix: Suffix for the temporary file

    Yields:
        Path of the temporary file
    """
    fd, name = tempfile.mkstemp(suffix=suffix)
    tmp_path = Path(name)
    try:
        with os.fdopen(fd, 'wb') as tmp:
            tmp.write(_upload_bytes(stream))
        yield tmp_path
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
            logger.debug(f"Removed temporary upload {tmp_path}")


def _upload_bytes(stream: BinaryIO) -> bytes:
    # Streamlit's UploadedFile and BytesIO keep the full buffer
    if hasattr(stream, 'getvalue'):
        return stream.getvalue()
    stream.seek(0)
    return stream.read()
