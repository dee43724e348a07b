"""Shared field normalizers: identifiers, amounts, DD/MM/YYYY dates and month/day intervals."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

# Core-banking extracts write these instead of leaving a date blank.
NO_DATE_SENTINELS = frozenset({"00/00/0000", "00000000", "99/99/9999"})

_LEADING_ZEROS = re.compile(r"^0+")


def clean_text(value: Any) -> str:
    """Trimmed string; None/NaN become ""."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def normalize_identifier(value: Any) -> str:
    """Strip leading zeros from an account/CIF number ("000123" -> "123", "0000" -> "0")."""
    text = clean_text(value)
    if not text:
        return ""
    return _LEADING_ZEROS.sub("", text) or "0"


def parse_amount(value: Any) -> float:
    """Parse an amount with thousands separators; anything unparseable is 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if np.isfinite(value) else 0.0

    s = re.sub(r"\s", "", str(value).replace(",", ""))
    if s == "":
        return 0.0
    try:
        v = float(s)
    except ValueError:
        return 0.0
    if not np.isfinite(v):
        return 0.0
    return v


def parse_ddmmyyyy(value: Any) -> str | None:
    """Parse DD/MM/YYYY into an ISO date string; sentinels and malformed input give None."""
    text = clean_text(value)
    if not text or text in NO_DATE_SENTINELS:
        return None

    parts = text.split("/")
    if len(parts) != 3:
        return None
    d, m, y = parts
    if not (d.isdigit() and m.isdigit() and y.isdigit()) or len(y) != 4:
        return None

    try:
        return date(int(y), int(m), int(d)).isoformat()
    except ValueError:
        return None


def to_date(value: Any) -> date | None:
    """Coerce an ISO string / date / Timestamp to ``datetime.date``."""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, date):
        return value
    text = clean_text(value)
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def months_between(later: Any, earlier: Any) -> int | None:
    """Whole calendar-month difference (year*12 + month); day-of-month is ignored."""
    d1 = to_date(later)
    d2 = to_date(earlier)
    if d1 is None or d2 is None:
        return None
    return (d1.year - d2.year) * 12 + (d1.month - d2.month)


def days_until(target: Any, as_of: date) -> int | None:
    """Days from *as_of* to *target* (negative once the target has passed)."""
    d = to_date(target)
    if d is None:
        return None
    return (d - as_of).days
