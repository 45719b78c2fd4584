"""
Row extraction and per-code aggregation for the yearly/monthly pipelines.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd
from natsort import natsort_keygen, ns
from openpyxl.worksheet.worksheet import Worksheet

from .buckets import BucketStrategy
from .cells import Number, coerce_amount, normalize_cell_text, plain_value, value_at
from .config import ColumnLayout

logger = logging.getLogger(__name__)

_natural_key = natsort_keygen(alg=ns.IGNORECASE)


@dataclass(frozen=True)
class SourceRow:
    """One data row of the source sheet, mapped to its semantic fields."""
    code: Any
    label: str
    amount: Number
    date_code: Optional[str]


@dataclass(frozen=True)
class AggregatedGroup:
    """Summed amounts of one code, one value per bucket plus the total."""
    label: str
    code: Any
    values: Tuple[Number, ...]
    total: Number


def extract_source_rows(ws: Worksheet, layout: ColumnLayout) -> List[SourceRow]:
    """
    Read the data rows of a worksheet into SourceRow records.

    The first row is the header and is skipped, as are rows without any value.

    Args:
        ws: Source worksheet
        layout: Column positions of code, label, amount and date code

    Returns:
        List of SourceRow in sheet order
    """
    rows = []

    for values in ws.iter_rows(min_row=2, values_only=True):
        if all(value is None for value in values):
            continue

        rows.append(SourceRow(
            code=_code_value(value_at(values, layout.code)),
            label=normalize_cell_text(value_at(values, layout.label)),
            amount=coerce_amount(value_at(values, layout.amount)),
            date_code=normalize_cell_text(value_at(values, layout.date_code)).strip() or None,
        ))

    logger.info(f"Extracted {len(rows)} data rows from sheet '{ws.title}'")
    return rows


def _code_value(value: Any) -> Any:
    value = plain_value(value)
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def aggregate_rows(
    rows: Sequence[SourceRow],
    buckets: Sequence[str],
    strategy: BucketStrategy
) -> List[AggregatedGroup]:
    """
    Group rows by code and sum their amounts into each bucket.

    Args:
        rows: Source rows
        buckets: Ordered bucket keys (see derive_bucket_keys)
        strategy: Strategy used to map each row's date code to its bucket

    Returns:
        One AggregatedGroup per distinct code, sorted by product family label
    """
    if not rows:
        return []

    df = pd.DataFrame({
        'code': pd.Series([row.code for row in rows], dtype=object),
        'label': [row.label for row in rows],
        'amount': pd.Series([row.amount for row in rows], dtype=object),
        'bucket': pd.Series([strategy.key(row.date_code) for row in rows], dtype=object),
    })

    # First row per code, in order of first appearance
    firsts = df.drop_duplicates(subset='code', keep='first')

    sums = (
        df.dropna(subset=['bucket'])
        .groupby(['code', 'bucket'], sort=False)['amount']
        .agg(_exact_sum)
        .to_dict()
    )

    groups = []
    for code, label in zip(firsts['code'].tolist(), firsts['label'].tolist()):
        values = tuple(sums.get((code, bucket), 0) for bucket in buckets)
        groups.append(AggregatedGroup(
            label=label,
            code=code,
            values=values,
            total=sum(values),
        ))

    groups.sort(key=lambda group: family_sort_key(group.label))

    logger.info(f"Aggregated {len(rows)} rows into {len(groups)} groups over {len(buckets)} buckets")
    return groups


def _exact_sum(amounts: pd.Series) -> Number:
    # Left-to-right sum of the cell amounts, without compensated summation
    return sum(amounts.tolist())


def family_sort_key(label: str):
    """
    Collation key for product family labels.

    Letters compare case-insensitively first, lowercase sorting ahead of
    uppercase only between otherwise equal labels. Digit runs compare as
    numbers. Hangul labels follow Latin ones in dictionary order. The key
    does not depend on the process locale.
    """
    return _natural_key(label), label.swapcase()
