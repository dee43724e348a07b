"""Daily listing of non-performing accounts."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from portfolio_engine.classification import irac_description
from portfolio_engine.io._utils import clean_text, parse_amount, parse_ddmmyyyy
from portfolio_engine.io.flat_file import parse_flat_file
from portfolio_engine.store import NPA, ParquetStore
from portfolio_engine.transformers._base import commit_table

_log = logging.getLogger(__name__)

_TEXT_FIELDS = (
    "ACCOUNT_NO", "CUSTOMER_NAME", "OLD_IRAC", "NEW_IRAC", "ARR_COND", "SYS",
    "FATHER_NAME", "SPOUSE_NAME", "ADDRESS1", "ADDRESS2", "ADDRESS3", "POSTCODE",
)


def transform_npa(rows: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for r in rows:
        if not clean_text(r.get("ACCOUNT_NO")):
            continue
        rec: dict[str, Any] = {col: clean_text(r.get(col)) for col in _TEXT_FIELDS}
        rec.update({
            "SR_NO": parse_amount(r.get("SR_NO")),
            "URIP": parse_amount(r.get("URIP")),
            "OUTSTANDING": parse_amount(r.get("OUTSTANDING")),
            "NPA_DATE": parse_ddmmyyyy(r.get("NPA_DATE")),
            "IRAC_DESC": irac_description(rec["NEW_IRAC"]),
        })
        records.append(rec)

    if len(records) != len(rows):
        _log.warning("Skipped %d NPA rows without an account number", len(rows) - len(records))
    return records


def process_npa_report(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "Listof_NPA_Accounts.csv",
    as_of: date,
) -> int:
    records = transform_npa(parse_flat_file(text))
    return commit_table(
        store, NPA, records,
        file_type="npa-report", file_name=file_name, as_of=as_of,
        setting_key="npa-report-date",
    )
