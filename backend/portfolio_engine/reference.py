"""ProductCode lookups built from the two uploaded mapping tables."""

from __future__ import annotations

from typing import Any

from portfolio_engine.io._utils import clean_text
from portfolio_engine.store import LOAN_PRODUCT_MAPPING, PRODUCT_MAPPING, ParquetStore


def product_code(type_code: Any, category_code: Any) -> str:
    """Join an account type and interest category into a ProductCode ("SB" + "01" -> "SB-01")."""
    t = clean_text(type_code)
    c = clean_text(category_code)
    return f"{t}-{c}" if t and c else ""


def build_lookup(store: ParquetStore, table: str) -> dict[str, dict[str, Any]]:
    """ProductCode -> mapping record, read fresh from *store* on every call."""
    lookup: dict[str, dict[str, Any]] = {}
    for record in store.get_all(table):
        code = clean_text(record.get("ProductCode"))
        if code:
            lookup[code] = record
    return lookup


def deposit_product_lookup(store: ParquetStore) -> dict[str, dict[str, Any]]:
    return build_lookup(store, PRODUCT_MAPPING)


def loan_product_lookup(store: ParquetStore) -> dict[str, dict[str, Any]]:
    return build_lookup(store, LOAN_PRODUCT_MAPPING)
