"""Term loans: month-end shadow extract and the daily balance file merged against it.

The shadow file carries static reference data (dates, EMI schedule, IRAC,
contact details).  The daily balance file is the source of truth for
balances; each balance row is enriched with its shadow match, a product
classification and tenure/risk analytics.  A missing shadow match degrades
to empty ``Shadow_*`` fields and a description-based classification.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Sequence

from portfolio_engine.classification import (
    forecast_bucket,
    loan_category_from_description,
    risk_weight,
)
from portfolio_engine.classification.schema import STAFF_SEGMENT_CODE
from portfolio_engine.io._utils import (
    clean_text,
    months_between,
    normalize_identifier,
    parse_amount,
    parse_ddmmyyyy,
)
from portfolio_engine.io.flat_file import parse_flat_file
from portfolio_engine.reference import loan_product_lookup, product_code
from portfolio_engine.store import LOAN, LOAN_SHADOW, ParquetStore
from portfolio_engine.transformers._base import commit_table

_log = logging.getLogger(__name__)


# ── Shadow (month-end) ───────────────────────────────────────────────────────

_SHADOW_TEXT = (
    "Name1", "New_IRAC", "Old_IRAC", "Status", "Acct_Type", "Int_cat",
    "Acct_Code", "Cat_Type_Name", "Segment_Cd", "MobileNo", "ShortName",
    "Add1", "Add2", "Add3", "Add4", "PostCode", "Phone_No_Res", "Phone_No_Bus",
    "Sec_Ind", "Posting_Restrict", "Hold_Flag", "Stop_Flag", "VIP_Flag",
    "CPC_BrNo", "Extn_Cntr_ID", "SMA_CLASS",
)
_SHADOW_AMOUNTS = (
    "CurrentBalance", "AvailableBalance", "Loan_Arrears", "App_Lmt",
    "EMI_Due", "EMI_Paid", "EMI_Overdue", "Int_Rate", "Period_Loan",
    "Unclrd_Amt",
)
_SHADOW_DATES = (
    "AcOpenDt", "Maturity_Dt", "Acc_Close_Dt", "Proc_Date", "Next_Repay_Dt",
)


def _shadow_record(r: Mapping[str, str]) -> dict[str, Any]:
    record: dict[str, Any] = {
        "AcNo": normalize_identifier(r.get("AcNo")),
        "CIFNo": normalize_identifier(r.get("CIFNo")),
        # Some extracts ship the header with a trailing space.
        "Sanction_Dt": parse_ddmmyyyy(r.get("Sanction_Dt ") or r.get("Sanction_Dt")),
        "MAINTBR": clean_text(r.get("BrNo")),
    }
    for col in _SHADOW_DATES:
        record[col] = parse_ddmmyyyy(r.get(col))
    for col in _SHADOW_AMOUNTS:
        record[col] = parse_amount(r.get(col))
    for col in _SHADOW_TEXT:
        record[col] = clean_text(r.get(col))
    return record


def transform_loan_shadow(rows: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    records = [_shadow_record(r) for r in rows]
    keyed = [rec for rec in records if rec["AcNo"]]
    if len(keyed) != len(records):
        _log.warning("Skipped %d loan shadow rows without an account number", len(records) - len(keyed))
    return keyed


def process_loan_shadow(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "LON_Shadow_file.csv",
    as_of: date,
) -> int:
    records = transform_loan_shadow(parse_flat_file(text))
    return commit_table(
        store, LOAN_SHADOW, records,
        file_type="loan-shadow", file_name=file_name, as_of=as_of,
        setting_key="loan-shadow-date",
    )


# ── Balance (daily) ──────────────────────────────────────────────────────────

def _ratio(numerator: int | None, term: int | None) -> float | None:
    if numerator is None or not term or term <= 0:
        return None
    return round(numerator / term, 4)


def _classify_loan(
    shadow: Mapping[str, Any],
    mapping: Mapping[str, Any] | None,
    description: str,
) -> dict[str, str]:
    """Staff segment override, then product mapping, then description keywords."""
    result = {
        "Loan_Category": "Other",
        "Loan_SubCategory": "",
        "Loan_Segment": "General",
        "Loan_Priority": "Medium",
        "Loan_Secured": "",
        "Loan_Scheme": "None",
        "Loan_RiskWeight": "100",
        "ProductName": description,
    }
    if clean_text(shadow.get("Segment_Cd")) == STAFF_SEGMENT_CODE:
        result.update({"Loan_Category": "Staff Loan", "Loan_Segment": "Staff", "Loan_Priority": "High"})
    elif mapping:
        result.update({
            "Loan_Category": clean_text(mapping.get("Category")) or "Other",
            "Loan_SubCategory": clean_text(mapping.get("SubCategory")),
            "Loan_Segment": clean_text(mapping.get("Segment")) or "General",
            "Loan_Priority": clean_text(mapping.get("Priority")) or "Medium",
            "Loan_Secured": clean_text(mapping.get("Secured")),
            "Loan_Scheme": clean_text(mapping.get("Scheme")) or "None",
            "Loan_RiskWeight": clean_text(mapping.get("RiskWeight")) or "100",
            "ProductName": clean_text(mapping.get("ProductName")) or description,
        })
    else:
        result["Loan_Category"] = loan_category_from_description(description)
    return result


def _loan_record(
    r: Mapping[str, str],
    shadows: Mapping[str, Mapping[str, Any]],
    mappings: Mapping[str, Mapping[str, Any]],
    as_of: date,
) -> dict[str, Any]:
    loan_key = clean_text(r.get("ACCTNO"))
    outstand = parse_amount(r.get("OUTSTAND"))
    instalamt = parse_amount(r.get("INSTALAMT"))
    int_rate = parse_amount(r.get("INTRATE"))
    sanct_dt = parse_ddmmyyyy(r.get("SANCTDT"))
    sma_class = clean_text(r.get("SMA_CLASS"))
    new_irac = clean_text(r.get("NEWIRAC"))
    description = clean_text(r.get("ACCTDESC"))

    shadow = shadows.get(normalize_identifier(loan_key)) or {}
    shadow_cif = clean_text(shadow.get("CIFNo"))
    shadow_name = clean_text(shadow.get("Name1"))
    shadow_maturity = shadow.get("Maturity_Dt") or None
    shadow_irac = clean_text(shadow.get("New_IRAC"))
    shadow_sma = clean_text(shadow.get("SMA_CLASS"))

    cif = shadow_cif if shadow_cif and shadow_cif != "0" else normalize_identifier(r.get("CUSTNUMBER"))
    sanction = sanct_dt or shadow.get("Sanction_Dt") or None

    months_to_maturity = months_between(shadow_maturity, as_of)
    total_term = months_between(shadow_maturity, sanction)
    loan_age = months_between(as_of, sanction)

    monthly_interest = outstand * (int_rate / 1200) if outstand and int_rate else None
    monthly_principal = (
        instalamt - monthly_interest if instalamt and monthly_interest is not None else None
    )

    code = product_code(shadow.get("Acct_Type"), shadow.get("Int_cat"))
    mapping = mappings.get(code) if code else None

    record: dict[str, Any] = {
        "LoanKey": loan_key,
        "CIF": cif,
        "CUSTNAME": clean_text(r.get("CUSTNAME")) or shadow_name,
        "ACCTDESC": description,
        "OUTSTAND": outstand,
        "LIMIT": parse_amount(r.get("LIMIT")),
        "INSTALAMT": instalamt,
        "INTRATE": int_rate,
        "THEOBAL": parse_amount(r.get("THEOBAL")),
        "IRREGAMT": parse_amount(r.get("IRREGAMT")),
        "UNREALINT": parse_amount(r.get("UNREALINT")),
        "ACCRINT": parse_amount(r.get("ACCRINT")),
        "SANCTDT": sanct_dt,
        "IRRGDT": parse_ddmmyyyy(r.get("IRRGDT")),
        "NEWIRAC": new_irac,
        "OLDIRAC": clean_text(r.get("OLDIRAC")),
        "ARRCOND": clean_text(r.get("ARRCOND")),
        "SMA_CLASS": sma_class,
        "SMA_DATE": parse_ddmmyyyy(r.get("SMA_DATE")),
        "SMA_CODE": clean_text(r.get("SMA_CODE_INCIPIENT_STRESS")),
        "SMA_ARREAR_CONDITION": clean_text(r.get("SMA_ARREAR_CONDITION")),
        "STRESS": clean_text(r.get("STRESS")),
        "RA": clean_text(r.get("RA")),
        "RA_DATE": parse_ddmmyyyy(r.get("RA_DATE")),
        "WRITE_OFF_FLAG": clean_text(r.get("WRITE_OFF_FLAG")),
        "WRITE_OFF_AMOUNT": parse_amount(r.get("WRITE_OFF_AMOUNT")),
        "WRITE_OFF_DATE": parse_ddmmyyyy(r.get("WRITE_OFF_DATE")),
        "CURRENCY": clean_text(r.get("CURRENCY")) or "INR",
        "MAINTBR": clean_text(r.get("MAINTBR")),
        "EMISDue": parse_amount(r.get("EMISDue")),
        "EMISPaid": parse_amount(r.get("EMISPaid")),
        "EMISOvrdue": parse_amount(r.get("EMISOvrdue")),
        # Shadow merge
        "Shadow_CIF": shadow_cif,
        "Shadow_CustName": shadow_name,
        "Shadow_Maturity_Dt": shadow_maturity,
        "Shadow_EMI_Due": float(shadow.get("EMI_Due") or 0.0),
        "Shadow_EMI_Paid": float(shadow.get("EMI_Paid") or 0.0),
        "Shadow_EMI_Overdue": float(shadow.get("EMI_Overdue") or 0.0),
        "Shadow_Loan_Arrears": float(shadow.get("Loan_Arrears") or 0.0),
        "Shadow_New_IRAC": shadow_irac,
        "Shadow_SMA_CLASS": shadow_sma,
        "Shadow_Add1": clean_text(shadow.get("Add1")),
        "Shadow_Add2": clean_text(shadow.get("Add2")),
        "Shadow_Add3": clean_text(shadow.get("Add3")),
        "Shadow_Add4": clean_text(shadow.get("Add4")),
        "Shadow_PostCode": clean_text(shadow.get("PostCode")),
        "Shadow_MobileNo": clean_text(shadow.get("MobileNo")),
        "Shadow_Phone_No_Res": clean_text(shadow.get("Phone_No_Res")),
        "Shadow_Cat_Type_Name": clean_text(shadow.get("Cat_Type_Name")),
        "Shadow_App_Lmt": float(shadow.get("App_Lmt") or 0.0),
        # Analytics
        "Months_To_Maturity": months_to_maturity,
        "Total_Loan_Term_Months": total_term,
        "Loan_Age_Months": loan_age,
        "Monthly_Interest_Component": monthly_interest,
        "Monthly_Principal_Component": monthly_principal,
        "Risk_Weight": risk_weight(sma_class or shadow_sma, new_irac or shadow_irac),
        "Remaining_Tenure_Percent": _ratio(months_to_maturity, total_term),
        "Seasoning_Ratio": _ratio(loan_age, total_term),
        "Forecast_Bucket": forecast_bucket(months_to_maturity),
        "ProductCode": code,
        "Maturity_Dt": shadow_maturity,
        "Exposure_Type": "Term Loan",
    }
    record.update(_classify_loan(shadow, mapping, description))
    return record


def transform_loan_balance(
    rows: Sequence[dict[str, str]],
    *,
    shadows: Mapping[str, Mapping[str, Any]],
    mappings: Mapping[str, Mapping[str, Any]],
    as_of: date,
) -> list[dict[str, Any]]:
    records = [_loan_record(r, shadows, mappings, as_of) for r in rows]
    unmatched = sum(1 for rec in records if not rec["Shadow_CIF"] and not rec["Shadow_Maturity_Dt"])
    if records and unmatched:
        _log.info("%d of %d loan balance rows have no shadow match", unmatched, len(records))
    return records


def process_loan_balance(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "LoansBalanceFile.csv",
    as_of: date,
) -> int:
    shadows = {rec["AcNo"]: rec for rec in store.get_all(LOAN_SHADOW) if rec.get("AcNo")}
    records = transform_loan_balance(
        parse_flat_file(text),
        shadows=shadows,
        mappings=loan_product_lookup(store),
        as_of=as_of,
    )
    return commit_table(
        store, LOAN, records,
        file_type="loan-balance", file_name=file_name, as_of=as_of,
        setting_key="loan-balance-date",
    )
