"""Flat-file reading and field normalization."""

from portfolio_engine.io._utils import (
    NO_DATE_SENTINELS,
    clean_text,
    days_until,
    months_between,
    normalize_identifier,
    parse_amount,
    parse_ddmmyyyy,
    to_date,
)
from portfolio_engine.io.flat_file import parse_flat_file, read_headers

__all__ = [
    "NO_DATE_SENTINELS",
    "clean_text",
    "days_until",
    "months_between",
    "normalize_identifier",
    "parse_amount",
    "parse_ddmmyyyy",
    "parse_flat_file",
    "read_headers",
    "to_date",
]
