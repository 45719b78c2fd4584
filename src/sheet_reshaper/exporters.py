"""
Workbook assembly for the converted output files.
"""

import io
import logging
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .aggregate import AggregatedGroup
from .cells import normalize_cell_text
from .price_split import PRICE_HEADERS, SplitRecord

logger = logging.getLogger(__name__)

SHEET_TITLE = "Converted"

LABEL_HEADER = "제품군"
CODE_HEADER = "모델명"
TOTAL_HEADER = "총 합계"
SUBTOTAL_SUFFIX = " 계"

MIN_COLUMN_WIDTH = 10

_THIN = Side(style='thin', color='FF000000')
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_BOLD = Font(bold=True)
_HEADER_FILL = PatternFill(start_color='D8EEF2', end_color='D8EEF2', fill_type='solid')
_SUBTOTAL_FILL = PatternFill(start_color='FFE9DA', end_color='FFE9DA', fill_type='solid')
_CENTER = Alignment(horizontal='center', vertical='center')


def aggregation_header(buckets: Sequence[str]) -> List[str]:
    return [LABEL_HEADER, CODE_HEADER, *buckets, TOTAL_HEADER]


def build_aggregation_workbook(groups: Sequence[AggregatedGroup], buckets: Sequence[str]) -> Workbook:
    """
    Render aggregated groups into a new workbook with family subtotals.

    A subtotal row follows the last data row of every product family. Its
    first two cells are merged and carry the "{family} 계" label, the other
    cells hold SUM formulas over the family's data rows.

    Args:
        groups: Aggregated groups, sorted so families are contiguous
        buckets: Bucket labels, in the order of each group's values

    Returns:
        New openpyxl workbook with a single "Converted" sheet
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    header = aggregation_header(buckets)
    _write_header(ws, header)

    current_label: Optional[str] = None
    group_start_row = ws.max_row + 1
    subtotals = 0

    for group in groups:
        if current_label is not None and group.label != current_label:
            _write_subtotal_row(ws, current_label, group_start_row, len(header))
            subtotals += 1
            group_start_row = ws.max_row + 1

        current_label = group.label
        ws.append([group.label, group.code, *group.values, group.total])

    if current_label is not None:
        _write_subtotal_row(ws, current_label, group_start_row, len(header))
        subtotals += 1

    logger.info(f"Assembled {len(groups)} data rows and {subtotals} subtotal rows")
    return wb


def _write_header(ws: Worksheet, header: Sequence[str]) -> None:
    ws.append(list(header))
    for cell in ws[1]:
        cell.font = _BOLD
        cell.fill = _HEADER_FILL
        cell.border = _BORDER


def _write_subtotal_row(ws: Worksheet, label: str, start_row: int, column_count: int) -> int:
    """
    Append a subtotal row summing rows start_row..(subtotal row - 1).

    Returns:
        1-based index of the subtotal row
    """
    row = ws.max_row + 1

    ws.cell(row=row, column=1, value=f"{label}{SUBTOTAL_SUFFIX}")
    for col_idx in range(2, column_count):
        letter = get_column_letter(col_idx + 1)
        ws.cell(row=row, column=col_idx + 1, value=f"=SUM({letter}{start_row}:{letter}{row - 1})")

    for col_idx in range(column_count):
        cell = ws.cell(row=row, column=col_idx + 1)
        cell.font = _BOLD
        cell.fill = _SUBTOTAL_FILL
        cell.border = _BORDER

    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=2)
    ws.cell(row=row, column=1).alignment = _CENTER

    return row


def build_split_workbook(records: Sequence[SplitRecord]) -> Workbook:
    """
    Render price-split records into a new workbook, one row per record.

    Args:
        records: Split records in output order

    Returns:
        New openpyxl workbook with a single "Converted" sheet
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    _write_header(ws, PRICE_HEADERS)
    for record in records:
        ws.append(list(record))

    logger.info(f"Assembled {len(records)} split rows")
    return wb


def auto_fit_columns(ws: Worksheet) -> None:
    """
    Size every column to its longest cell text plus padding.

    Width is max(10, longest text + 2). Every cell of the used range is
    scanned, empty and merged cells counting as zero length.
    """
    for col_idx, column in enumerate(
        ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column),
        start=1
    ):
        max_length = max((len(normalize_cell_text(cell.value)) for cell in column), default=0)
        ws.column_dimensions[get_column_letter(col_idx)].width = max(MIN_COLUMN_WIDTH, max_length + 2)


def workbook_to_bytes(wb: Workbook) -> bytes:
    """Serialize a workbook to .xlsx bytes."""
    buffer = io.BytesIO()
    wb.save(buffer)
    wb.close()
    return buffer.getvalue()
