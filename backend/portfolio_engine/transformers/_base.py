"""Commit step shared by every transformer: replace the table, stamp the date, log the upload."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from portfolio_engine.store import ParquetStore, UploadLogEntry


def commit_table(
    store: ParquetStore,
    table: str,
    records: Sequence[dict[str, Any]],
    *,
    file_type: str,
    file_name: str,
    as_of: date,
    setting_key: str | None = None,
) -> int:
    """Atomically replace *table* with *records* and record the upload; returns the row count."""
    n = store.replace_all(table, records)
    if setting_key:
        store.set_setting(setting_key, as_of.isoformat())
    store.append_log(UploadLogEntry(
        file_type=file_type,
        file_name=file_name,
        record_count=n,
        status="success",
    ))
    return n
