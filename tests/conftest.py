"""
Shared fixtures for building source workbooks in memory.
"""

import io
from typing import List, Optional, Sequence

import pytest
from openpyxl import Workbook


SALES_HEADER = [
    "No", "거래처", "코드", "제품군", "규격", "출고일", "수량", "금액", "단가", "일자코드"
]


def make_sales_workbook(rows: Sequence[dict]) -> Workbook:
    """
    Build a sales sheet using the default column layout.

    Each row is a dict with optional keys code (C), label (D), amount (H)
    and date (J).
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Sales"
    ws.append(SALES_HEADER)

    for i, row in enumerate(rows, start=1):
        values: List[Optional[object]] = [None] * len(SALES_HEADER)
        values[0] = i
        values[2] = row.get('code')
        values[3] = row.get('label')
        values[7] = row.get('amount')
        values[9] = row.get('date')
        ws.append(values)

    return wb


def make_price_workbook(rows: Sequence[Sequence[object]], header: Optional[Sequence[str]] = None) -> Workbook:
    """Build a price sheet whose columns are 분류, 모델명, 물품대(변경후), 판매가(변경후)."""
    wb = Workbook()
    ws = wb.active
    ws.append(list(header) if header is not None else ["분류", "모델명", "물품대(변경후)", "판매가(변경후)"])
    for row in rows:
        ws.append(list(row))
    return wb


def to_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def sample_sales_rows():
    """Three rows: codes X, X, Y in families F1, F1, F2, all in 2024."""
    return [
        {'code': 'X', 'label': 'F1', 'amount': 10, 'date': '240115'},
        {'code': 'X', 'label': 'F1', 'amount': 20, 'date': '240630'},
        {'code': 'Y', 'label': 'F2', 'amount': 5, 'date': '240301'},
    ]
