"""
Cell value helpers: plain-text normalization, delimiter splitting and
amount coercion.
"""

import math
import re
from datetime import date, datetime, time
from typing import Any, List, Sequence, Union

from openpyxl.cell.rich_text import CellRichText, TextBlock

# | ¦ │ ┃ ∣ ｜
PIPE_VARIANTS = "|¦│┃∣｜"

_PIPE_PATTERN = re.compile(f"[{re.escape(PIPE_VARIANTS)}]")

Number = Union[int, float]


def normalize_cell_text(value: Any) -> str:
    """
    Convert a raw cell value into plain text.
    
    Args:
        value: Value read from an openpyxl cell (scalar, date or rich text)
        
    Returns:
        Plain string; empty string for missing values
    """
    if value is None:
        return ""
    
    if isinstance(value, CellRichText):
        return "".join(
            run.text if isinstance(run, TextBlock) else str(run)
            for run in value
        )
    
    if isinstance(value, bool):
        return "true" if value else "false"
    
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    
    if isinstance(value, (date, time)):
        return value.isoformat()
    
    return str(value)


def plain_value(value: Any) -> Any:
    """Return rich text as plain text, leave every other value untouched."""
    if isinstance(value, CellRichText):
        return normalize_cell_text(value)
    return value


def split_delimited(text: str) -> List[str]:
    """
    Split text on any vertical bar look-alike and trim each part.
    
    Args:
        text: Normalized cell text
        
    Returns:
        Ordered list of trimmed parts; [""] for empty input
    """
    return [part.strip() for part in _PIPE_PATTERN.split(text)]


def coerce_amount(value: Any) -> Number:
    """
    Coerce a raw amount cell into a number.
    
    Missing and non-numeric values count as 0. Numeric strings are parsed,
    integers stay integers.
    """
    if value is None or isinstance(value, bool):
        return 0
    
    if isinstance(value, (int, float)):
        return value
    
    text = normalize_cell_text(value).strip().replace(",", "")
    if not text:
        return 0
    
    try:
        return int(text)
    except ValueError:
        pass
    
    try:
        number = float(text)
    except ValueError:
        return 0
    
    return number if math.isfinite(number) else 0


def value_at(values: Sequence[Any], index: int) -> Any:
    """Return values[index], or None when the row is shorter than index."""
    return values[index] if index < len(values) else None
