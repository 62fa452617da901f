"""
Display helpers shared by the response schemas.
"""

from datetime import datetime
from typing import Optional
import math
import re

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lower-case, hyphen-separated, URL-safe form of a title or name."""
    return _NON_SLUG_CHARS.sub("-", (text or "").lower()).strip("-")


def _trim_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_price(value: Optional[float]) -> Optional[str]:
    """
    USD currency string with grouping and at most two decimals.

    >>> format_price(1250000)
    '$1,250,000'
    >>> format_price(1234.5)
    '$1,234.5'
    """
    if value is None:
        return None
    text = f"{abs(value):,.2f}".rstrip("0").rstrip(".")
    return f"-${text}" if value < 0 else f"${text}"


def format_area(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    return f"{_trim_number(value)} sq ft"


def reading_time(text: Optional[str], words_per_minute: int = 200) -> str:
    words = len((text or "").split())
    return f"{max(1, math.ceil(words / words_per_minute))} min read"


def format_long_date(value: Optional[datetime]) -> Optional[str]:
    """'October 19, 2026' style date."""
    if value is None:
        return None
    return f"{value.strftime('%B')} {value.day}, {value.year}"
