"""Shared pytest fixtures for engine and API integration tests.

Provides:
- store: ParquetStore rooted in a per-test temp directory
- test_client: FastAPI TestClient whose store lives under a temp PORTFOLIO_DATA_DIR
- make_csv: builds extract text from a header list and row dicts
- SYNTHETIC_*: small extracts in the core-banking column layouts
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

import pytest
from starlette.testclient import TestClient

import portfolio_api.state as state
from portfolio_api.main import app
from portfolio_engine.store import ParquetStore

AS_OF = date(2024, 3, 31)


# ── Store / TestClient ─────────────────────────────────────────────────────

@pytest.fixture()
def store(tmp_path) -> ParquetStore:
    return ParquetStore(tmp_path / "store")


@pytest.fixture()
def test_client(tmp_path, monkeypatch):
    """TestClient bound to a fresh data directory; the cached store is reset around each test."""
    monkeypatch.setenv("PORTFOLIO_DATA_DIR", str(tmp_path / "api-data"))
    state.reset_store()
    with TestClient(app) as client:
        yield client
    state.reset_store()


# ── CSV builder ────────────────────────────────────────────────────────────

def make_csv(headers: Sequence[str], rows: Sequence[dict[str, Any]]) -> str:
    """Comma-joined extract text; missing keys become empty fields."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(str(row.get(h, "")) for h in headers))
    return "\n".join(lines) + "\n"


# ── Column layouts ─────────────────────────────────────────────────────────

PRODUCT_MAPPING_HEADERS = [
    "ProductCode", "PROD_TYPE", "CURRENCY", "PROD_DESC", "Category", "SubCategory",
    "SalaryFlag", "WealthFlag", "SeniorCitizen", "NRIFlag",
]

LOAN_PRODUCT_MAPPING_HEADERS = [
    "ProductCode", "ProductName", "Category", "SubCategory", "Segment",
    "Priority", "Secured", "Scheme", "RiskWeight",
]

DEPOSIT_HEADERS = [
    "BankCd", "AcNo", "CIFNo", "Name1", "ActType", "IntCat", "Curr_Bal",
    "Availbl_Bal", "FrozenAmt", "OpenDt", "Maturity_Dt", "AcCloseDt", "Status",
    "Acct_Desc", "MobileNo", "BrNo", "VIP_Flag",
]

LOAN_SHADOW_HEADERS = [
    "BnkNo", "AcNo", "CIFNo", "Name1", "Acct_Type", "Int_cat", "Segment_Cd",
    "Sanction_Dt", "Maturity_Dt", "Loan_Arrears", "EMI_Due", "EMI_Paid",
    "EMI_Overdue", "New_IRAC", "MobileNo", "Add1", "PostCode",
]

LOAN_BALANCE_HEADERS = [
    "ACCTNO", "CUSTNUMBER", "CUSTNAME", "ACCTDESC", "OUTSTAND", "LIMIT",
    "INSTALAMT", "INTRATE", "SANCTDT", "NEWIRAC", "SMA_CLASS", "EMISDue",
]

CCOD_HEADERS = [
    "ACCTNO", "CUSTNUMBER", "CUSTNAME", "ACCTDESC", "ACCTBAL", "LIMIT", "DP",
    "IRREGAMT", "NEWIRAC", "SMA_CLASS",
]

NPA_HEADERS = [
    "SR_NO", "ACCOUNT_NO", "CUSTOMER_NAME", "NEW_IRAC", "NPA_DATE", "OUTSTANDING", "SYS",
]


# ── Synthetic extracts ─────────────────────────────────────────────────────

SYNTHETIC_PRODUCT_MAPPING_CSV = make_csv(PRODUCT_MAPPING_HEADERS, [
    {"ProductCode": "SB-01", "PROD_TYPE": "SB", "PROD_DESC": "SAVINGS BANK GENERAL",
     "Category": "Regular Savings", "SubCategory": "General"},
    {"ProductCode": "SB-05", "PROD_TYPE": "SAL-PROD", "PROD_DESC": "SALARY PACKAGE",
     "Category": "Salary", "SubCategory": "Corporate Salary"},
    {"ProductCode": "TD-10", "PROD_TYPE": "TD", "PROD_DESC": "NRE TERM DEPOSIT",
     "Category": "Term Deposit (NRE)", "SubCategory": "NRE"},
])

SYNTHETIC_LOAN_PRODUCT_MAPPING_CSV = make_csv(LOAN_PRODUCT_MAPPING_HEADERS, [
    {"ProductCode": "HL-01", "ProductName": "Home Loan Regular", "Category": "Home Loan",
     "SubCategory": "Regular", "Segment": "Retail", "Priority": "High", "Secured": "Yes"},
])

SYNTHETIC_DEPOSIT_CSV = make_csv(DEPOSIT_HEADERS, [
    {"BankCd": "1", "AcNo": "0001234", "CIFNo": "0055", "Name1": "ASHA RAO",
     "ActType": "SB", "IntCat": "01", "Curr_Bal": '"2,600,000"', "Availbl_Bal": "2600000",
     "FrozenAmt": "0", "OpenDt": "01/04/2015", "Status": "01", "MobileNo": "9800000001",
     "BrNo": "2572"},
    {"BankCd": "1", "AcNo": "0005678", "CIFNo": "0077", "Name1": "VIKRAM SHAH",
     "ActType": "TD", "IntCat": "10", "Curr_Bal": "500000", "Availbl_Bal": "500000",
     "FrozenAmt": "0", "Maturity_Dt": "15/04/2024", "Status": "01", "BrNo": "2572"},
    {"BankCd": "1", "AcNo": "000900", "CIFNo": "0088", "Name1": "OD HOLDER",
     "ActType": "SB", "IntCat": "01", "Curr_Bal": "-15000", "Availbl_Bal": "0",
     "FrozenAmt": "0", "Status": "01", "BrNo": "2572"},
])

SYNTHETIC_LOAN_SHADOW_CSV = make_csv(LOAN_SHADOW_HEADERS, [
    {"BnkNo": "1", "AcNo": "00070001", "CIFNo": "0055", "Name1": "ASHA RAO",
     "Acct_Type": "HL", "Int_cat": "01", "Segment_Cd": "101", "Sanction_Dt": "15/01/2020",
     "Maturity_Dt": "15/01/2030", "Loan_Arrears": "0", "EMI_Due": "50", "EMI_Paid": "50",
     "EMI_Overdue": "0", "New_IRAC": "01", "MobileNo": "9800000001", "Add1": "MG ROAD",
     "PostCode": "560001"},
])

SYNTHETIC_LOAN_BALANCE_CSV = make_csv(LOAN_BALANCE_HEADERS, [
    {"ACCTNO": "70001", "CUSTNUMBER": "55", "CUSTNAME": "ASHA RAO", "ACCTDESC": "HOME LOAN",
     "OUTSTAND": "1200000", "LIMIT": "2000000", "INSTALAMT": "25000", "INTRATE": "9",
     "SANCTDT": "15/01/2020", "NEWIRAC": "01", "SMA_CLASS": "STD", "EMISDue": "50"},
    {"ACCTNO": "70002", "CUSTNUMBER": "0099", "CUSTNAME": "RAVI KUMAR", "ACCTDESC": "CAR LOAN",
     "OUTSTAND": "300000", "LIMIT": "500000", "INSTALAMT": "0", "INTRATE": "10",
     "SANCTDT": "01/06/2022", "NEWIRAC": "06", "SMA_CLASS": "", "EMISDue": "20"},
])

SYNTHETIC_CCOD_CSV = make_csv(CCOD_HEADERS, [
    {"ACCTNO": "900", "CUSTNUMBER": "0088", "CUSTNAME": "OD HOLDER", "ACCTDESC": "CASH CREDIT",
     "ACCTBAL": "-15000", "LIMIT": "50000", "DP": "40000", "IRREGAMT": "0", "NEWIRAC": "01"},
])

SYNTHETIC_NPA_CSV = make_csv(NPA_HEADERS, [
    {"SR_NO": "1", "ACCOUNT_NO": "70002", "CUSTOMER_NAME": "RAVI KUMAR", "NEW_IRAC": "06",
     "NPA_DATE": "31/12/2023", "OUTSTANDING": "300000", "SYS": "LON"},
])
