"""
Month-year values in their canonical ``MM-YYYY`` text form.

Stored dates always carry day 1; the day is dropped again on output.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from app.core.exceptions import ValidationError

MONTH_YEAR_FORMAT = "MM-YYYY"

_MONTH_YEAR_RE = re.compile(r"(0[1-9]|1[0-2])-([0-9]{4})")


def parse_month_year(value: str, field: str = "date") -> date:
    """Parse ``MM-YYYY`` into the first day of that month."""
    match = _MONTH_YEAR_RE.fullmatch(value or "")
    if not match:
        raise ValidationError(f"invalid {field} format (expected {MONTH_YEAR_FORMAT}): {value!r}")
    month, year = int(match.group(1)), int(match.group(2))
    if year < 1:
        raise ValidationError(f"invalid {field} format (expected {MONTH_YEAR_FORMAT}): {value!r}")
    return date(year, month, 1)


def format_month_year(value: Optional[date]) -> str:
    """Render a stored date as ``MM-YYYY``; an absent date renders as an empty string."""
    if value is None:
        return ""
    return f"{value.month:02d}-{value.year:04d}"
