"""
Core orchestration for a single conversion request.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional

import pandas as pd
from openpyxl.workbook import Workbook

from .aggregate import aggregate_rows, extract_source_rows
from .buckets import derive_bucket_keys, get_bucket_strategy
from .config import XLSX_MIME_TYPE, ConversionOptions
from .exceptions import UploadTransportError
from .exporters import (
    aggregation_header,
    auto_fit_columns,
    build_aggregation_workbook,
    build_split_workbook,
    workbook_to_bytes,
)
from .io_utils import (
    build_output_filename,
    first_worksheet,
    load_workbook_bytes,
    load_workbook_safe,
    temporary_upload,
)
from .price_split import PRICE_HEADERS, extract_split_records, find_price_columns

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Converted workbook ready to be handed back to the caller."""
    filename: str
    content: bytes
    preview: pd.DataFrame
    summary: Dict[str, Any] = field(default_factory=dict)
    mime_type: str = XLSX_MIME_TYPE


def convert_workbook(
    wb: Workbook,
    options: ConversionOptions,
    now: Optional[datetime] = None
) -> ConversionResult:
    """
    Run the pipeline selected by options.mode over the first worksheet.

    Args:
        wb: Loaded source workbook
        options: Mode and column layout for this request
        now: Timestamp used for the output filename

    Returns:
        ConversionResult with the serialized output workbook

    Raises:
        MissingWorksheetError: If the workbook has no worksheet
        MissingRequiredColumnError: If price mode headers are missing
    """
    try:
        ws = first_worksheet(wb)
        sheet_used = ws.title
        logger.info(f"Using sheet: '{sheet_used}' (mode: {options.mode})")

        if options.mode == "price":
            columns = find_price_columns(ws)
            records = extract_split_records(ws, columns)

            out_wb = build_split_workbook(records)
            preview = pd.DataFrame(records, columns=PRICE_HEADERS)
            summary = {
                'records': len(records),
            }
        else:
            strategy = get_bucket_strategy(options.mode)
            rows = extract_source_rows(ws, options.layout)
            buckets = derive_bucket_keys((row.date_code for row in rows), strategy)
            groups = aggregate_rows(rows, buckets, strategy)

            out_wb = build_aggregation_workbook(groups, buckets)
            preview = pd.DataFrame(
                [[g.label, g.code, *g.values, g.total] for g in groups],
                columns=aggregation_header(buckets),
            )
            summary = {
                'source_rows': len(rows),
                'buckets': ", ".join(buckets),
                'groups_found': len(groups),
                'families': len({g.label for g in groups}),
            }
    finally:
        wb.close()

    out_ws = out_wb.active
    auto_fit_columns(out_ws)
    output_rows = out_ws.max_row
    content = workbook_to_bytes(out_wb)

    summary.update({
        'sheet_used': sheet_used,
        'mode': options.mode,
        'output_rows': output_rows,
    })

    return ConversionResult(
        filename=build_output_filename(options.filename_prefix, now),
        content=content,
        preview=preview,
        summary=summary,
    )


def convert_workbook_bytes(
    data: bytes,
    options: ConversionOptions,
    now: Optional[datetime] = None
) -> ConversionResult:
    """Convert raw .xlsx bytes; see convert_workbook."""
    return convert_workbook(load_workbook_bytes(data), options, now)


def convert_file(
    input_path: Path,
    options: ConversionOptions,
    now: Optional[datetime] = None
) -> ConversionResult:
    """
    Convert an Excel file on disk.

    Args:
        input_path: Path to the source .xlsx/.xlsm file
        options: Mode and column layout for this request
        now: Timestamp used for the output filename

    Returns:
        ConversionResult with the serialized output workbook
    """
    logger.info(f"Starting conversion: {input_path}")

    result = convert_workbook(load_workbook_safe(input_path), options, now)
    result.summary['input_file'] = str(input_path)
    return result


def convert_upload(
    stream: BinaryIO,
    options: ConversionOptions,
    now: Optional[datetime] = None
) -> ConversionResult:
    """
    Convert an uploaded file stream.

    The upload is spooled to a temporary file that is deleted whether the
    conversion succeeds or fails.

    Raises:
        UploadTransportError: If the upload cannot be read
        ConversionError: For any other conversion failure
    """
    try:
        with temporary_upload(stream) as tmp_path:
            return convert_workbook_bytes(tmp_path.read_bytes(), options, now)
    except OSError as e:
        logger.error(f"Failed to read upload: {e}")
        raise UploadTransportError() from e
