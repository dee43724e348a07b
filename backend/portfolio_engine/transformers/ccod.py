"""Daily CC/OD (cash-credit / overdraft) balance file."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Sequence

from portfolio_engine.classification import irregular_flag
from portfolio_engine.io._utils import clean_text, normalize_identifier, parse_amount, parse_ddmmyyyy
from portfolio_engine.io.flat_file import parse_flat_file
from portfolio_engine.store import CCOD, ParquetStore
from portfolio_engine.transformers._base import commit_table

_log = logging.getLogger(__name__)

_TEXT_FIELDS = (
    "CUSTNAME", "ACCTDESC", "NEWIRAC", "OLDIRAC", "ARRCOND", "MAINTBR",
    "STRESS", "SMA_CODE", "RA", "WRITE_OFF_FLAG", "SMA_CLASS",
    "SMA_ARREAR_CONDITION",
)
_AMOUNT_FIELDS = ("INTRATE", "UNCLRBAL", "UNREALINT", "ACCRINT")
_DATE_FIELDS = ("LMTEXPDT", "SANC_RENDT", "IRRGDT", "RA_DATE", "WRITE_OFF_DATE", "SMA_DATE")


def _ccod_record(r: Mapping[str, str]) -> dict[str, Any]:
    balance = parse_amount(r.get("ACCTBAL"))
    limit = parse_amount(r.get("LIMIT"))
    dp = parse_amount(r.get("DP"))
    irregamt = parse_amount(r.get("IRREGAMT"))

    record: dict[str, Any] = {
        "LoanKey": clean_text(r.get("ACCTNO")),
        "CIF": normalize_identifier(r.get("CUSTNUMBER")),
        "CurrentBalance": balance,
        "LIMIT": limit,
        "DP": dp,
        "IRREGAMT": irregamt,
        "WRITE_OFF_AMT": parse_amount(r.get("WRITE_OFF_AMT")),
        "CURRENCY": clean_text(r.get("CURRENCY")) or "INR",
    }
    for col in _TEXT_FIELDS:
        record[col] = clean_text(r.get(col))
    for col in _AMOUNT_FIELDS:
        record[col] = parse_amount(r.get(col))
    for col in _DATE_FIELDS:
        record[col] = parse_ddmmyyyy(r.get(col))

    record.update({
        "Utilization": balance / limit if limit != 0 else None,
        "DP_Gap": dp - balance,
        "Irregular_Flag": irregular_flag(irregamt, balance, dp),
        "Exposure_Type": "CC/OD",
        "Loan_Category": "CC/OD",
    })
    return record


def transform_ccod(rows: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    keyed = [r for r in rows if clean_text(r.get("ACCTNO"))]
    if len(keyed) != len(rows):
        _log.warning("Skipped %d CC/OD rows without an account number", len(rows) - len(keyed))
    return [_ccod_record(r) for r in keyed]


def process_ccod_balance(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "CC_OD_Balance_File.csv",
    as_of: date,
) -> int:
    records = transform_ccod(parse_flat_file(text))
    return commit_table(
        store, CCOD, records,
        file_type="ccod-balance", file_name=file_name, as_of=as_of,
        setting_key="ccod-balance-date",
    )
