"""Classify an uploaded extract by file name, falling back to its header row."""

from __future__ import annotations

from typing import Sequence

PRODUCT_MAPPING_FILE = "product-mapping"
LOAN_PRODUCT_MAPPING_FILE = "loan-product-mapping"
DEPOSIT_SHADOW_FILE = "deposit-shadow"
LOAN_SHADOW_FILE = "loan-shadow"
LOAN_BALANCE_FILE = "loan-balance"
CCOD_BALANCE_FILE = "ccod-balance"
NPA_REPORT_FILE = "npa-report"
UNKNOWN_FILE = "unknown"

FILE_TYPE_LABELS: dict[str, str] = {
    DEPOSIT_SHADOW_FILE: "Deposit Shadow (Month-end)",
    LOAN_SHADOW_FILE: "Loan Shadow (Month-end)",
    LOAN_BALANCE_FILE: "Loan Balance (Daily)",
    CCOD_BALANCE_FILE: "CC/OD Balance (Daily)",
    NPA_REPORT_FILE: "NPA Report (Daily)",
    PRODUCT_MAPPING_FILE: "Deposit Product Category Mapping",
    LOAN_PRODUCT_MAPPING_FILE: "Loan Product Category Mapping",
}

# Evaluated in order; the first rule with any fragment in the lower-cased
# file name wins.  NPA listings share the "lond" prefix with loan balances,
# and the loan mapping file name also contains "mapping".
_NAME_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (NPA_REPORT_FILE, ("npa", "listof_npa", "lond2572")),
    (DEPOSIT_SHADOW_FILE, ("dep_shadow", "weeklyreports_dep")),
    (LOAN_SHADOW_FILE, ("lon_shadow", "miscreports_lon_shadow")),
    (LOAN_PRODUCT_MAPPING_FILE, ("loan_product", "loan_mapping")),
    (PRODUCT_MAPPING_FILE, ("product_category", "deposit_product", "mapping")),
    (CCOD_BALANCE_FILE, ("cc_od", "depd")),
    (LOAN_BALANCE_FILE, ("loansbalancefile", "lond")),
)

# Fallback: every fragment must occur somewhere in the joined header row.
_HEADER_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (LOAN_BALANCE_FILE, ("acctno", "outstand", "emisdue")),
    (CCOD_BALANCE_FILE, ("acctno", "acctbal", "dp")),
    (NPA_REPORT_FILE, ("account_no", "npa_date")),
    (DEPOSIT_SHADOW_FILE, ("bankcd", "curr_bal", "acttype")),
    (LOAN_SHADOW_FILE, ("bnkno", "loan_arrears", "emi_due")),
    (LOAN_PRODUCT_MAPPING_FILE, ("productcode", "category", "secured")),
    (PRODUCT_MAPPING_FILE, ("productcode", "category", "salaryflag")),
)


def detect_file_type(file_name: str, headers: Sequence[str]) -> str:
    """Return one of the file-type tags, or ``"unknown"``."""
    name = (file_name or "").lower()
    for file_type, fragments in _NAME_RULES:
        if any(f in name for f in fragments):
            return file_type

    header_str = ",".join(headers).lower()
    for file_type, fragments in _HEADER_RULES:
        if all(f in header_str for f in fragments):
            return file_type

    return UNKNOWN_FILE


def file_type_label(file_type: str) -> str:
    return FILE_TYPE_LABELS.get(file_type, file_type)
