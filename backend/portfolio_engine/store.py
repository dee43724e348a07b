"""Keyed table store: one Parquet file per table, JSON documents for settings and the upload log.

Table replacement is atomic: the new snapshot is written to a temp file and
renamed over the live one, so a reader sees either the old table or the new
table, never an empty or half-written one.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import pandas as pd
from pydantic import BaseModel, Field

_log = logging.getLogger(__name__)


# ── Table catalog ────────────────────────────────────────────────────────────

PRODUCT_MAPPING = "product-mapping"
LOAN_PRODUCT_MAPPING = "loan-product-mapping"
DEPOSIT = "deposit"
LOAN = "loan"
CCOD = "ccod"
NPA = "npa"
LOAN_SHADOW = "loan-shadow"
DEPOSIT_SHADOW = "deposit-shadow"
CUSTOMER = "customer"
UPLOAD_LOG = "upload-log"
SETTINGS = "settings"

# table -> primary key column
TABLE_KEYS: dict[str, str] = {
    PRODUCT_MAPPING: "ProductCode",
    LOAN_PRODUCT_MAPPING: "ProductCode",
    DEPOSIT: "AcNo",
    LOAN: "LoanKey",
    CCOD: "LoanKey",
    NPA: "ACCOUNT_NO",
    LOAN_SHADOW: "AcNo",
    DEPOSIT_SHADOW: "AcNo",
    CUSTOMER: "CIF",
}

# table -> secondary indexes available to get_by_index()
TABLE_INDEXES: dict[str, tuple[str, ...]] = {
    PRODUCT_MAPPING: (),
    LOAN_PRODUCT_MAPPING: (),
    DEPOSIT: ("CIF", "Category", "Dormancy_Flag"),
    LOAN: ("CIF", "SMA_CLASS", "Exposure_Type"),
    CCOD: ("CIF", "SMA_CLASS"),
    NPA: ("NEW_IRAC", "SYS"),
    LOAN_SHADOW: ("CIFNo",),
    DEPOSIT_SHADOW: ("CIFNo",),
    CUSTOMER: ("HNI_Category", "CustomerSegment"),
}

DATA_TABLES: tuple[str, ...] = tuple(TABLE_KEYS)


# ── Documents ────────────────────────────────────────────────────────────────

def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class UploadLogEntry(BaseModel):
    id: int | None = None
    file_type: str
    file_name: str
    record_count: int = 0
    status: str
    error_message: str | None = None
    timestamp: str = Field(default_factory=_utc_now)


class Setting(BaseModel):
    key: str
    value: Any = None
    updated_at: str = Field(default_factory=_utc_now)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    if df.empty:
        return []
    obj = df.astype(object)
    return obj.where(df.notna(), None).to_dict(orient="records")


def _atomic_write_text(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, path)


# ── Store ────────────────────────────────────────────────────────────────────

class ParquetStore:
    """Durable keyed tables with secondary-index lookup, settings and an audit log.

    A DataFrame per table is cached after the first read and dropped on every
    write to that table.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._cache: dict[str, pd.DataFrame] = {}

    # ── Paths ────────────────────────────────────────────────────────────

    def _table_path(self, table: str) -> Path:
        return self.root / f"{table}.parquet"

    @property
    def _settings_path(self) -> Path:
        return self.root / "settings.json"

    @property
    def _log_path(self) -> Path:
        return self.root / "upload-log.json"

    @staticmethod
    def _check_table(table: str) -> str:
        if table not in TABLE_KEYS:
            raise ValueError(f"Unknown table: '{table}'. Available: {sorted(TABLE_KEYS)}")
        return TABLE_KEYS[table]

    # ── DataFrame I/O ────────────────────────────────────────────────────

    def _read_df(self, table: str) -> pd.DataFrame:
        cached = self._cache.get(table)
        if cached is not None:
            return cached

        path = self._table_path(table)
        df = pd.read_parquet(path, engine="pyarrow") if path.exists() else pd.DataFrame()
        self._cache[table] = df
        return df

    def _write_df(self, table: str, df: pd.DataFrame) -> None:
        path = self._table_path(table)
        tmp = path.with_name(path.name + ".tmp")
        try:
            if df.empty:
                path.unlink(missing_ok=True)
            else:
                df.to_parquet(tmp, engine="pyarrow", index=False)
                os.replace(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)
            # after the swap: a read racing the write must not re-cache the old file
            self._cache.pop(table, None)

    @staticmethod
    def _dedupe(df: pd.DataFrame, key: str) -> pd.DataFrame:
        if df.empty or key not in df.columns:
            return df
        return df.drop_duplicates(subset=[key], keep="last").reset_index(drop=True)

    # ── Tables ───────────────────────────────────────────────────────────

    def put_all(self, table: str, records: Iterable[dict[str, Any]]) -> None:
        """Insert records, replacing any existing record with the same primary key."""
        key = self._check_table(table)
        incoming = pd.DataFrame(list(records))
        if incoming.empty:
            return
        existing = self._read_df(table)
        combined = incoming if existing.empty else pd.concat([existing, incoming], ignore_index=True)
        self._write_df(table, self._dedupe(combined, key))

    def replace_all(self, table: str, records: Iterable[dict[str, Any]]) -> int:
        """Clear *table* and bulk insert *records* as a single atomic swap."""
        key = self._check_table(table)
        df = self._dedupe(pd.DataFrame(list(records)), key)
        self._write_df(table, df)
        _log.info("Replaced table %s with %d records", table, len(df))
        return len(df)

    def get_all(self, table: str) -> list[dict[str, Any]]:
        self._check_table(table)
        return _frame_to_records(self._read_df(table))

    def get(self, table: str, key_value: Any) -> dict[str, Any] | None:
        """Single record by primary key."""
        key = self._check_table(table)
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return None
        found = _frame_to_records(df.loc[df[key] == key_value])
        return found[0] if found else None

    def get_by_index(self, table: str, index_name: str, value: Any) -> list[dict[str, Any]]:
        self._check_table(table)
        if index_name not in TABLE_INDEXES[table]:
            raise ValueError(
                f"Table '{table}' has no index '{index_name}'. "
                f"Available: {list(TABLE_INDEXES[table])}"
            )
        df = self._read_df(table)
        if df.empty or index_name not in df.columns:
            return []
        return _frame_to_records(df.loc[df[index_name] == value])

    def count(self, table: str) -> int:
        if table == UPLOAD_LOG:
            return len(self.get_logs())
        if table == SETTINGS:
            return len(self._read_settings())
        self._check_table(table)
        return len(self._read_df(table))

    def clear(self, table: str) -> None:
        if table == UPLOAD_LOG:
            self._log_path.unlink(missing_ok=True)
            return
        if table == SETTINGS:
            self._settings_path.unlink(missing_ok=True)
            return
        self._check_table(table)
        self._write_df(table, pd.DataFrame())

    # ── Settings ─────────────────────────────────────────────────────────

    def _read_settings(self) -> dict[str, Setting]:
        if not self._settings_path.exists():
            return {}
        payload = json.loads(self._settings_path.read_text(encoding="utf-8"))
        return {k: Setting(**v) for k, v in payload.items()}

    def get_setting(self, key: str, default: Any = None) -> Any:
        setting = self._read_settings().get(key)
        return default if setting is None else setting.value

    def set_setting(self, key: str, value: Any) -> None:
        settings = self._read_settings()
        settings[key] = Setting(key=key, value=value)
        _atomic_write_text(
            self._settings_path,
            json.dumps({k: s.model_dump() for k, s in settings.items()}, indent=2),
        )

    # ── Upload log ───────────────────────────────────────────────────────

    def get_logs(self) -> list[UploadLogEntry]:
        if not self._log_path.exists():
            return []
        payload = json.loads(self._log_path.read_text(encoding="utf-8"))
        return [UploadLogEntry(**item) for item in payload]

    def append_log(self, entry: UploadLogEntry | dict[str, Any]) -> UploadLogEntry:
        if isinstance(entry, dict):
            entry = UploadLogEntry(**entry)
        logs = self.get_logs()
        next_id = max((e.id or 0 for e in logs), default=0) + 1
        entry = entry.model_copy(update={"id": next_id})
        logs.append(entry)
        _atomic_write_text(
            self._log_path,
            json.dumps([e.model_dump() for e in logs], indent=2),
        )
        return entry
