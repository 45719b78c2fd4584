"""
Bucket-key derivation for the aggregation pipeline.

A bucket is the period a source row's amount is summed into. The period is
read from the YYMMDD-style date code of the row: yearly buckets look like
``"2024"`` and monthly buckets look like ``"24년_01월"``.
"""

import logging
from typing import Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class BucketStrategy(Protocol):
    """Maps a date code to its bucket key and orders the distinct keys."""

    def key(self, date_code: Optional[str]) -> Optional[str]:
        ...

    def order(self, keys: List[str]) -> List[str]:
        ...


class YearlyBuckets:
    """Four-digit year buckets, kept in order of first appearance."""

    def key(self, date_code: Optional[str]) -> Optional[str]:
        if not date_code:
            return None
        if len(date_code) < 2:
            logger.debug(f"Skipping malformed date code: '{date_code}'")
            return None
        return f"20{date_code[:2]}"

    def order(self, keys: List[str]) -> List[str]:
        return list(keys)


class MonthlyBuckets:
    """Year-month buckets, sorted by the two-digit year then month."""

    def key(self, date_code: Optional[str]) -> Optional[str]:
        if not date_code:
            return None

        year, month = date_code[:2], date_code[2:4]
        if len(month) < 2 or not (year.isdigit() and month.isdigit()):
            logger.debug(f"Skipping malformed date code: '{date_code}'")
            return None

        return f"{year}년_{month}월"

    def order(self, keys: List[str]) -> List[str]:
        return sorted(keys, key=_year_month)


def _year_month(key: str):
    year, month = key.split("년_")
    return int(year), int(month.rstrip("월"))


_STRATEGIES = {
    "yearly": YearlyBuckets,
    "monthly": MonthlyBuckets,
}


def get_bucket_strategy(mode: str) -> BucketStrategy:
    """
    Return the bucket strategy for an aggregation mode.

    Args:
        mode: 'yearly' or 'monthly'

    Returns:
        Strategy instance

    Raises:
        ValueError: If mode is not an aggregation mode
    """
    try:
        return _STRATEGIES[mode]()
    except KeyError:
        raise ValueError(f"Aggregation mode must be 'yearly' or 'monthly', got: {mode}")


def derive_bucket_keys(date_codes: Iterable[Optional[str]], strategy: BucketStrategy) -> List[str]:
    """
    Collect the distinct bucket keys observed across all rows.

    Args:
        date_codes: Normalized date code of every data row (None when absent)
        strategy: Yearly or monthly strategy

    Returns:
        Distinct keys in the strategy's order
    """
    seen = {}
    for date_code in date_codes:
        bucket = strategy.key(date_code)
        if bucket is not None:
            seen.setdefault(bucket, None)

    return strategy.order(list(seen))
