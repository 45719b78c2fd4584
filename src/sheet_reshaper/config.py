"""
Request-scoped conversion settings.
"""

from dataclasses import dataclass, field
from typing import Literal, Dict

from openpyxl.utils import column_index_from_string

Mode = Literal["yearly", "monthly", "price"]

MODES = ("yearly", "monthly", "price")

FILENAME_PREFIXES: Dict[str, str] = {
    "monthly": "월별_",
    "yearly": "년도별_",
    "price": "가격변환_",
}

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ColumnLayout:
    """
    Zero-based positions of the source columns read in aggregation mode.

    Defaults follow the product sales export: code in C, product family in D,
    amount in H and the YYMMDD date code in J.
    """
    code: int = 2
    label: int = 3
    amount: int = 7
    date_code: int = 9

    @classmethod
    def from_letters(
        cls,
        code: str = "C",
        label: str = "D",
        amount: str = "H",
        date_code: str = "J"
    ) -> "ColumnLayout":
        """Build a layout from spreadsheet column letters."""
        try:
            return cls(
                code=column_index_from_string(code.strip().upper()) - 1,
                label=column_index_from_string(label.strip().upper()) - 1,
                amount=column_index_from_string(amount.strip().upper()) - 1,
                date_code=column_index_from_string(date_code.strip().upper()) - 1,
            )
        except ValueError as e:
            raise ValueError(f"Invalid column letter: {e}")


@dataclass(frozen=True)
class ConversionOptions:
    """Settings for a single conversion request."""
    mode: Mode = "yearly"
    layout: ColumnLayout = field(default_factory=ColumnLayout)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Mode must be one of {', '.join(MODES)}, got: {self.mode}")

    @property
    def filename_prefix(self) -> str:
        return FILENAME_PREFIXES[self.mode]
