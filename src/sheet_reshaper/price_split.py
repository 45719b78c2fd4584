"""
Price-split conversion: explode pipe-joined model/price cells into rows.
"""

import logging
from typing import Any, List, NamedTuple, Optional

from openpyxl.worksheet.worksheet import Worksheet

from .cells import normalize_cell_text, split_delimited, value_at
from .exceptions import MissingRequiredColumnError

logger = logging.getLogger(__name__)

MODEL_NAME_HEADER = "모델명"
PRICE_HEADER = "물품대(변경후)"
SALE_PRICE_HEADER = "판매가(변경후)"

PRICE_HEADERS = [MODEL_NAME_HEADER, PRICE_HEADER, SALE_PRICE_HEADER]


class SplitRecord(NamedTuple):
    model_name: str
    price: str
    sale_price: str


class PriceColumns(NamedTuple):
    """Zero-based positions of the three price columns."""
    model_name: int
    price: int
    sale_price: int


def find_price_columns(ws: Worksheet) -> PriceColumns:
    """
    Locate the model name, price and sale price columns in the header row.

    Args:
        ws: Source worksheet; row 1 is the header

    Returns:
        PriceColumns with zero-based indices

    Raises:
        MissingRequiredColumnError: If any of the three headers is absent
    """
    found = {}

    header = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ())
    for col_idx, value in enumerate(header):
        text = normalize_cell_text(value).strip()
        if text in PRICE_HEADERS:
            found[text] = col_idx

    missing = [name for name in PRICE_HEADERS if name not in found]
    if missing:
        raise MissingRequiredColumnError(missing)

    columns = PriceColumns(
        model_name=found[MODEL_NAME_HEADER],
        price=found[PRICE_HEADER],
        sale_price=found[SALE_PRICE_HEADER],
    )
    logger.info(f"Found price columns at {columns}")
    return columns


def split_row(model_name: Any, price: Any, sale_price: Any) -> List[SplitRecord]:
    """
    Split three raw cell values and zip their parts into records.

    The shortest lists are padded with empty strings; positions where all
    three parts are empty are dropped.
    """
    parts = [
        split_delimited(normalize_cell_text(value))
        for value in (model_name, price, sale_price)
    ]
    length = max(len(p) for p in parts)

    records = []
    for i in range(length):
        record = SplitRecord(*(_part(p, i) for p in parts))
        if any(record):
            records.append(record)

    return records


def _part(parts: List[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""


def extract_split_records(ws: Worksheet, columns: Optional[PriceColumns] = None) -> List[SplitRecord]:
    """
    Convert every data row of the worksheet into split records.

    Args:
        ws: Source worksheet
        columns: Pre-located price columns (located from the header if None)

    Returns:
        Records in source-row order, then split-index order
    """
    if columns is None:
        columns = find_price_columns(ws)

    records = []
    for values in ws.iter_rows(min_row=2, values_only=True):
        records.extend(split_row(
            value_at(values, columns.model_name),
            value_at(values, columns.price),
            value_at(values, columns.sale_price),
        ))

    logger.info(f"Split sheet '{ws.title}' into {len(records)} records")
    return records
