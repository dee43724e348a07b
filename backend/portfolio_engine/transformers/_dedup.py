"""Deposit vs CC/OD deduplication.

An overdraft account appears in both the deposit extract and the CC/OD
balance file.  It is represented once, under CC/OD, so deposit rows whose
normalized account number is also a CC/OD account are dropped.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from portfolio_engine.io._utils import normalize_identifier


def duplicate_accounts(deposit_accounts: Iterable[Any], ccod_accounts: Iterable[Any]) -> set[str]:
    """Normalized account numbers present on both sides."""
    deposits = {normalize_identifier(a) for a in deposit_accounts}
    ccod = {normalize_identifier(a) for a in ccod_accounts}
    deposits.discard("")
    return deposits & ccod


def drop_ccod_duplicates(
    rows: Sequence[dict[str, Any]],
    ccod_accounts: Iterable[Any],
    *,
    account_field: str = "AcNo",
) -> tuple[list[dict[str, Any]], set[str]]:
    """Return (rows without CC/OD duplicates, the duplicate account numbers)."""
    dupes = duplicate_accounts((r.get(account_field) for r in rows), ccod_accounts)
    if not dupes:
        return list(rows), dupes
    kept = [r for r in rows if normalize_identifier(r.get(account_field)) not in dupes]
    return kept, dupes
