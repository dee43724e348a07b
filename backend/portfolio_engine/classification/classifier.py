"""
Rule-based business classification.

Every function here is pure: inputs are already-normalized field values and
the result is a label (or ``None`` when the rule does not apply).  Rules are
evaluated first-match-wins in the order defined in schema.py.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence

from portfolio_engine.classification.schema import (
    CASA_CATEGORIES,
    DEPOSIT_VALUE_BANDS,
    DEPOSIT_VALUE_DEFAULT,
    DORMANT_STATUS_CODES,
    FORECAST_BUCKET_OVERFLOW,
    FORECAST_BUCKETS,
    HNI_BANDS,
    HNI_DEFAULT,
    IRAC_DEFAULT_LABEL,
    IRAC_LABELS,
    IRAC_RISK_WEIGHTS,
    LOAN_CATEGORY_DEFAULT,
    LOAN_CATEGORY_RULES,
    MATURITY_BUCKET_OVERFLOW,
    MATURITY_BUCKETS,
    NRI_KEYWORDS,
    RISK_WEIGHT_DEFAULT,
    SALARY_PROD_TYPE,
    SEGMENT_DEFAULT,
    SMA_RISK_WEIGHTS,
    TERM_CATEGORIES,
    WEALTH_KEYWORDS,
    Band,
)
from portfolio_engine.io._utils import days_until


# ── Generic helpers ───────────────────────────────────────────────────────

def _band(amount: float, bands: Sequence[Band], default: str) -> str:
    for band in bands:
        if amount >= band.floor:
            return band.label
    return default


def _ceiling_bucket(value: int, buckets: Sequence[tuple[int, str]], overflow: str) -> str:
    for ceiling, label in buckets:
        if value <= ceiling:
            return label
    return overflow


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    upper = text.upper()
    return any(k in upper for k in keywords)


def _is_yes(mapping: Mapping[str, Any] | None, flag: str) -> bool:
    return bool(mapping) and str(mapping.get(flag) or "") == "Yes"


def _irac_digits(code: str) -> str:
    """Zero-padded and bare codes compare equal: 04 and 4 both give 4."""
    return code.strip().lstrip("0")


# ── Deposits ──────────────────────────────────────────────────────────────

def deposit_value_band(category: str, current_balance: float) -> str | None:
    if category not in CASA_CATEGORIES:
        return None
    return _band(current_balance, DEPOSIT_VALUE_BANDS, DEPOSIT_VALUE_DEFAULT)


def maturity_bucket(category: str, maturity_dt: str | None, as_of: date) -> str | None:
    if category not in TERM_CATEGORIES or not maturity_dt:
        return None
    days = days_until(maturity_dt, as_of)
    if days is None:
        return None
    return _ceiling_bucket(days, MATURITY_BUCKETS, MATURITY_BUCKET_OVERFLOW)


def dormancy_flag(
    *,
    frozen_amount: float,
    current_balance: float,
    available_balance: float,
    close_dt: str | None,
    status: str,
) -> str:
    if frozen_amount > 0:
        return "Frozen"
    if current_balance == 0 and available_balance == 0:
        return "Zero Balance"
    if close_dt:
        return "Closed"
    if status in DORMANT_STATUS_CODES:
        return "Dormant/Inoperative"
    return "Active"


def salary_flag(mapping: Mapping[str, Any] | None, prod_type: str) -> str:
    if _is_yes(mapping, "SalaryFlag") or prod_type.upper() == SALARY_PROD_TYPE:
        return "Salary"
    return "Non-Salary"


def wealth_flag(mapping: Mapping[str, Any] | None, prod_desc: str, acct_desc: str) -> str:
    if _is_yes(mapping, "WealthFlag"):
        return "Wealth"
    if _contains_any(prod_desc, WEALTH_KEYWORDS) or _contains_any(acct_desc, WEALTH_KEYWORDS):
        return "Wealth"
    return "Non-Wealth"


def nri_flag(mapping: Mapping[str, Any] | None, prod_desc: str) -> str:
    if _is_yes(mapping, "NRIFlag") or _contains_any(prod_desc, NRI_KEYWORDS):
        return "NRI"
    return "Resident"


def hni_category(total_deposit: float) -> str:
    return _band(total_deposit, HNI_BANDS, HNI_DEFAULT)


# ── Loans ─────────────────────────────────────────────────────────────────

def loan_category_from_description(description: str) -> str:
    """Fallback loan category when no product mapping resolves."""
    for category, keywords in LOAN_CATEGORY_RULES:
        if _contains_any(description, keywords):
            return category
    return LOAN_CATEGORY_DEFAULT


def risk_weight(sma_class: str, irac_code: str) -> float:
    """SMA class wins over IRAC; unknown combinations fall back to the default."""
    sma = sma_class.strip().upper()
    if sma in SMA_RISK_WEIGHTS:
        return SMA_RISK_WEIGHTS[sma]
    irac = irac_code.strip()
    if irac.isdigit():
        irac = irac.zfill(2)
    return IRAC_RISK_WEIGHTS.get(irac, RISK_WEIGHT_DEFAULT)


def forecast_bucket(months_to_maturity: int | None) -> str | None:
    if months_to_maturity is None:
        return None
    return _ceiling_bucket(months_to_maturity, FORECAST_BUCKETS, FORECAST_BUCKET_OVERFLOW)


# ── Overdrafts ────────────────────────────────────────────────────────────

def irregular_flag(irregular_amount: float, balance: float, drawing_power: float) -> str:
    if irregular_amount > 0:
        return "Irregular"
    if drawing_power > 0 and abs(balance) > drawing_power:
        return "Overdrawn"
    return "Regular"


# ── Asset quality ─────────────────────────────────────────────────────────

def irac_description(code: str) -> str:
    return IRAC_LABELS.get(_irac_digits(code), IRAC_DEFAULT_LABEL)


def is_npa_irac(code: str, standard_codes: frozenset[str]) -> bool:
    """True when an IRAC code is present and outside the account type's standard set.

    Digit-only codes are zero-padded to two places first, so "1" reads as "01".
    """
    code = code.strip()
    if code.isdigit():
        code = code.zfill(2)
    return bool(code) and code not in standard_codes


# ── Customer ──────────────────────────────────────────────────────────────

def customer_segment(
    *,
    hni: str,
    nri: str,
    wealth: str,
    salary: str,
) -> str:
    if hni in ("Ultra HNI", "HNI"):
        return hni
    if nri == "NRI":
        return "NRI"
    if wealth == "Wealth":
        return "Wealth"
    if salary == "Salary":
        return "Salary"
    return SEGMENT_DEFAULT
