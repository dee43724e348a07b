"""Deposit shadow extract -> classified deposit accounts.

Per row: product resolution, flag/band/bucket/dormancy classification.
Then two explicit passes for HNI: sum current balance per CIF over the
surviving rows, and stamp every row with its CIF total and HNI category.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

from portfolio_engine.classification import (
    deposit_value_band,
    dormancy_flag,
    hni_category,
    maturity_bucket,
    nri_flag,
    salary_flag,
    wealth_flag,
)
from portfolio_engine.io._utils import clean_text, normalize_identifier, parse_amount, parse_ddmmyyyy
from portfolio_engine.io.flat_file import parse_flat_file
from portfolio_engine.reference import deposit_product_lookup, product_code
from portfolio_engine.store import CCOD, DEPOSIT, ParquetStore
from portfolio_engine.transformers._base import commit_table
from portfolio_engine.transformers._dedup import drop_ccod_duplicates

_log = logging.getLogger(__name__)

# Raw header -> output field, copied through as trimmed text.
_TEXT_FIELDS = {
    "Acct_Desc": "Acct_Desc",
    "Product": "ProductText",
    "BrNo": "MAINTBR",
    "MobileNo": "MobileNo",
    "ModeOfOperation": "ModeOfOperation",
    "ShortName": "ShortName",
    "Add1": "Add1",
    "Add2": "Add2",
    "Add3": "Add3",
    "Add4": "Add4",
    "PostCode": "PostCode",
    "PhoneNo_Res": "PhoneNo_Res",
    "PhoneNo_Bus": "PhoneNo_Bus",
    "AdhaarID": "AdhaarID",
    "GrpID": "GrpID",
    "GL_Wkly_CD": "GL_Wkly_CD",
    "GL_Class_Code": "GL_Class_Code",
    "Period_Dep": "Period_Dep",
    "Term_Pay_Frequency": "Term_Pay_Frequency",
}


def _deposit_record(
    r: Mapping[str, str],
    mappings: Mapping[str, Mapping[str, Any]],
    as_of: date,
) -> dict[str, Any]:
    current_balance = parse_amount(r.get("Curr_Bal"))
    available_balance = parse_amount(r.get("Availbl_Bal"))
    frozen_amount = parse_amount(r.get("FrozenAmt"))
    act_type = clean_text(r.get("ActType"))
    int_cat = clean_text(r.get("IntCat"))
    code = product_code(act_type, int_cat)
    maturity_dt = parse_ddmmyyyy(r.get("Maturity_Dt"))
    close_dt = parse_ddmmyyyy(r.get("AcCloseDt"))
    status = clean_text(r.get("Status"))
    acct_desc = clean_text(r.get("Acct_Desc"))

    pm = mappings.get(code) if code else None
    category = clean_text((pm or {}).get("Category")) or "Unknown"
    sub_category = clean_text((pm or {}).get("SubCategory")) or "Unknown"
    prod_type = clean_text((pm or {}).get("PROD_TYPE"))
    prod_desc = clean_text((pm or {}).get("PROD_DESC"))

    record: dict[str, Any] = {
        "AcNo": normalize_identifier(r.get("AcNo")),
        "CIF": normalize_identifier(r.get("CIFNo")),
        "CustName": clean_text(r.get("Name1")),
        "OpenDt": parse_ddmmyyyy(r.get("OpenDt")),
        "Maturity_Dt": maturity_dt,
        "AcCloseDt": close_dt,
        "CurrentBalance": current_balance,
        "AvailableBalance": available_balance,
        "Net_Av_Bal_YTD": parse_amount(r.get("NET_Av_BAL_YTD")),
        "UnclearedAmount": parse_amount(r.get("Unclrd_Amt")),
        "FrozenAmount": frozen_amount,
        "TermValue": parse_amount(r.get("Term_Value")),
        "MaturityValue": parse_amount(r.get("Maturity_Val")),
        "INTRATE": parse_amount(r.get("IntRate")),
        "OD_Limit": parse_amount(r.get("OD_Limit")),
        "ActType": act_type,
        "IntCat": int_cat,
        "ProductCode": code,
        "Status": status,
        "VIP_Flag": "VIP" if clean_text(r.get("VIP_Flag")).upper() == "Y" else "Non-VIP",
    }
    for raw, field in _TEXT_FIELDS.items():
        record[field] = clean_text(r.get(raw))

    record.update({
        "Category": category,
        "SubCategory": sub_category,
        "PROD_TYPE": prod_type,
        "PROD_DESC": prod_desc,
        "Salary_Account_Flag": salary_flag(pm, prod_type),
        "Wealth_Client_Flag": wealth_flag(pm, prod_desc, acct_desc),
        "NRI_Client_Flag": nri_flag(pm, prod_desc),
        "Deposit_Value_Band": deposit_value_band(category, current_balance),
        "Maturity_Bucket": maturity_bucket(category, maturity_dt, as_of),
        "Dormancy_Flag": dormancy_flag(
            frozen_amount=frozen_amount,
            current_balance=current_balance,
            available_balance=available_balance,
            close_dt=close_dt,
            status=status,
        ),
        "Exposure_Type": "Deposit",
    })
    return record


def cif_deposit_totals(records: Iterable[Mapping[str, Any]]) -> dict[str, float]:
    """Pass 1: current balance summed per CIF."""
    totals: dict[str, float] = {}
    for rec in records:
        cif = rec.get("CIF")
        if cif:
            totals[cif] = totals.get(cif, 0.0) + float(rec.get("CurrentBalance") or 0.0)
    return totals


def apply_hni(records: Iterable[Mapping[str, Any]], totals: Mapping[str, float]) -> list[dict[str, Any]]:
    """Pass 2: stamp each record with its CIF total and HNI category."""
    out: list[dict[str, Any]] = []
    for rec in records:
        total = totals.get(rec.get("CIF") or "", 0.0)
        out.append({**rec, "HNI_Category": hni_category(total), "CIF_Total_Deposit": total})
    return out


def transform_deposits(
    rows: Sequence[dict[str, str]],
    *,
    mappings: Mapping[str, Mapping[str, Any]],
    ccod_accounts: Iterable[Any],
    as_of: date,
) -> list[dict[str, Any]]:
    kept, dupes = drop_ccod_duplicates(rows, ccod_accounts, account_field="AcNo")
    if dupes:
        _log.warning("Dropped %d deposit rows already present as CC/OD accounts", len(rows) - len(kept))

    # keyed by AcNo, last row wins as in the store, so CIF totals match what is kept
    by_account: dict[str, dict[str, Any]] = {}
    for r in kept:
        rec = _deposit_record(r, mappings, as_of)
        by_account.pop(rec["AcNo"], None)
        by_account[rec["AcNo"]] = rec
    records = list(by_account.values())
    return apply_hni(records, cif_deposit_totals(records))


def process_deposit_shadow(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "DEP_Shadow_file.csv",
    as_of: date,
) -> int:
    ccod_accounts = [r.get("LoanKey") for r in store.get_all(CCOD)]
    records = transform_deposits(
        parse_flat_file(text),
        mappings=deposit_product_lookup(store),
        ccod_accounts=ccod_accounts,
        as_of=as_of,
    )
    return commit_table(
        store, DEPOSIT, records,
        file_type="deposit-shadow", file_name=file_name, as_of=as_of,
        setting_key="deposit-shadow-date",
    )
