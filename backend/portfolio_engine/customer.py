"""Customer 360 dimension: one aggregate record per CIF, rebuilt from scratch.

The dimension is fully derived from the deposit, loan, CC/OD and NPA
tables and is replaced wholesale on every rebuild; nothing mutates it
incrementally.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping

from portfolio_engine.classification import customer_segment, hni_category, is_npa_irac
from portfolio_engine.classification.schema import CCOD_STANDARD_IRAC, LOAN_STANDARD_IRAC
from portfolio_engine.io._utils import clean_text, normalize_identifier
from portfolio_engine.store import CCOD, CUSTOMER, DEPOSIT, LOAN, NPA, ParquetStore
from portfolio_engine.transformers._dedup import drop_ccod_duplicates

_log = logging.getLogger(__name__)


def _new_customer(cif: str, *, name: Any, branch: Any, contact: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "CIF": cif,
        "CustName": clean_text(name),
        "MAINTBR": clean_text(branch),
        "HNI_Category": "Regular",
        "NRI_Client_Flag": "Resident",
        "Wealth_Client_Flag": "Non-Wealth",
        "Salary_Account_Flag": "Non-Salary",
        "TotalDeposits": 0.0,
        "TotalLoans": 0.0,
        "TotalCCOD": 0.0,
        "TotalRelationshipValue": 0.0,
        "NetExposure": 0.0,
        "DepositCount": 0,
        "LoanCount": 0,
        "CCODCount": 0,
        "NPACount": 0,
        "HasNPA": False,
        "MobileNo": clean_text(contact.get("MobileNo")),
        "Add1": clean_text(contact.get("Add1")),
        "Add2": clean_text(contact.get("Add2")),
        "Add3": clean_text(contact.get("Add3")),
        "PostCode": clean_text(contact.get("PostCode")),
        "CustomerSegment": "Regular",
    }


def _mark_npa(c: dict[str, Any]) -> None:
    c["NPACount"] += 1
    c["HasNPA"] = True


def _amount(value: Any) -> float:
    return float(value) if value is not None else 0.0


def build_customer_dimension(
    deposits: Iterable[Mapping[str, Any]],
    loans: Iterable[Mapping[str, Any]],
    ccod: Iterable[Mapping[str, Any]],
    npa: Iterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Aggregate the four domain tables into customer records keyed by CIF."""
    ccod = list(ccod)
    deposits, dupes = drop_ccod_duplicates(list(deposits), (c.get("LoanKey") for c in ccod))
    if dupes:
        _log.warning("Excluded %d deposit accounts also present as CC/OD", len(dupes))

    npa_accounts = {normalize_identifier(n.get("ACCOUNT_NO")) for n in npa}
    npa_accounts.discard("")
    customers: dict[str, dict[str, Any]] = {}

    # ── Deposits ─────────────────────────────────────────────────────────
    for dep in deposits:
        cif = clean_text(dep.get("CIF"))
        if not cif:
            continue
        c = customers.get(cif)
        if c is None:
            c = customers[cif] = _new_customer(
                cif, name=dep.get("CustName"), branch=dep.get("MAINTBR"), contact=dep,
            )
        balance = _amount(dep.get("CurrentBalance"))
        if balance >= 0:
            c["TotalDeposits"] += balance
            c["DepositCount"] += 1
        else:
            c["TotalLoans"] += abs(balance)
            c["LoanCount"] += 1
        if dep.get("NRI_Client_Flag") == "NRI":
            c["NRI_Client_Flag"] = "NRI"
        if dep.get("Wealth_Client_Flag") == "Wealth":
            c["Wealth_Client_Flag"] = "Wealth"
        if dep.get("Salary_Account_Flag") == "Salary":
            c["Salary_Account_Flag"] = "Salary"
        if not c["CustName"]:
            c["CustName"] = clean_text(dep.get("CustName"))
        if not c["MobileNo"]:
            c["MobileNo"] = clean_text(dep.get("MobileNo"))

    # ── Term loans ───────────────────────────────────────────────────────
    for loan in loans:
        cif = clean_text(loan.get("CIF"))
        if not cif:
            continue
        c = customers.get(cif)
        if c is None:
            contact = {
                k: loan.get(f"Shadow_{k}") for k in ("MobileNo", "Add1", "Add2", "Add3", "PostCode")
            }
            c = customers[cif] = _new_customer(
                cif, name=loan.get("CUSTNAME"), branch=loan.get("MAINTBR"), contact=contact,
            )
        outstanding = _amount(loan.get("OUTSTAND"))
        if outstanding > 0:
            c["TotalLoans"] += outstanding
            c["LoanCount"] += 1
        elif outstanding < 0:
            c["TotalDeposits"] += abs(outstanding)
            c["DepositCount"] += 1
        if not c["CustName"]:
            c["CustName"] = clean_text(loan.get("CUSTNAME"))
        if is_npa_irac(clean_text(loan.get("NEWIRAC")), LOAN_STANDARD_IRAC):
            _mark_npa(c)
        elif normalize_identifier(loan.get("LoanKey")) in npa_accounts:
            _mark_npa(c)

    # ── CC/OD ────────────────────────────────────────────────────────────
    for cc in ccod:
        cif = clean_text(cc.get("CIF"))
        if not cif:
            continue
        c = customers.get(cif)
        if c is None:
            c = customers[cif] = _new_customer(
                cif, name=cc.get("CUSTNAME"), branch=cc.get("MAINTBR"), contact={},
            )
        balance = _amount(cc.get("CurrentBalance"))
        if balance > 0:
            c["TotalDeposits"] += balance
        elif balance < 0:
            c["TotalCCOD"] += abs(balance)
        c["CCODCount"] += 1
        if not c["CustName"]:
            c["CustName"] = clean_text(cc.get("CUSTNAME"))
        if is_npa_irac(clean_text(cc.get("NEWIRAC")), CCOD_STANDARD_IRAC):
            _mark_npa(c)
        elif normalize_identifier(cc.get("LoanKey")) in npa_accounts:
            _mark_npa(c)

    # ── Finalize ─────────────────────────────────────────────────────────
    for c in customers.values():
        deposits_total, loans_total, ccod_total = c["TotalDeposits"], c["TotalLoans"], c["TotalCCOD"]
        c["TotalRelationshipValue"] = abs(deposits_total) + abs(loans_total) + abs(ccod_total)
        c["NetExposure"] = deposits_total - loans_total - ccod_total
        c["HNI_Category"] = hni_category(deposits_total)
        c["CustomerSegment"] = customer_segment(
            hni=c["HNI_Category"],
            nri=c["NRI_Client_Flag"],
            wealth=c["Wealth_Client_Flag"],
            salary=c["Salary_Account_Flag"],
        )
    return list(customers.values())


def rebuild_customer_dimension(store: ParquetStore, *, as_of: date) -> int:
    """Rescan the domain tables and replace the customer table; returns the customer count."""
    customers = build_customer_dimension(
        store.get_all(DEPOSIT),
        store.get_all(LOAN),
        store.get_all(CCOD),
        store.get_all(NPA),
    )
    n = store.replace_all(CUSTOMER, customers)
    store.set_setting("customer-dim-date", as_of.isoformat())
    _log.info("Customer dimension rebuilt: %d customers", n)
    return n
