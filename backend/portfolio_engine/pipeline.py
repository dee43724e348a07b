"""Upload orchestration: detect -> transform -> commit -> audit, plus status and Customer 360.

Every upload outcome, success or failure, lands in the store's upload log.
A batch runs files in the caller's order and rebuilds the customer
dimension once at the end when any of its source tables changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable

from portfolio_engine.customer import rebuild_customer_dimension
from portfolio_engine.detector import (
    CCOD_BALANCE_FILE,
    DEPOSIT_SHADOW_FILE,
    LOAN_BALANCE_FILE,
    LOAN_PRODUCT_MAPPING_FILE,
    LOAN_SHADOW_FILE,
    NPA_REPORT_FILE,
    PRODUCT_MAPPING_FILE,
    UNKNOWN_FILE,
    detect_file_type,
    file_type_label,
)
from portfolio_engine.io.flat_file import read_headers
from portfolio_engine.store import (
    CCOD,
    CUSTOMER,
    DATA_TABLES,
    DEPOSIT,
    LOAN,
    UPLOAD_LOG,
    ParquetStore,
    UploadLogEntry,
)
from portfolio_engine.transformers import (
    process_ccod_balance,
    process_deposit_shadow,
    process_loan_balance,
    process_loan_product_mapping,
    process_loan_shadow,
    process_npa_report,
    process_product_mapping,
)

_log = logging.getLogger(__name__)

_PROCESSORS: dict[str, Callable[..., int]] = {
    PRODUCT_MAPPING_FILE: process_product_mapping,
    LOAN_PRODUCT_MAPPING_FILE: process_loan_product_mapping,
    DEPOSIT_SHADOW_FILE: process_deposit_shadow,
    LOAN_SHADOW_FILE: process_loan_shadow,
    LOAN_BALANCE_FILE: process_loan_balance,
    CCOD_BALANCE_FILE: process_ccod_balance,
    NPA_REPORT_FILE: process_npa_report,
}

# Uploads of these types change an input of the customer dimension.
CUSTOMER_SOURCE_TYPES = frozenset({
    DEPOSIT_SHADOW_FILE,
    LOAN_SHADOW_FILE,
    LOAN_BALANCE_FILE,
    CCOD_BALANCE_FILE,
    NPA_REPORT_FILE,
})


LAST_PROCESSED_KEYS = (
    "deposit-shadow-date",
    "loan-shadow-date",
    "loan-balance-date",
    "ccod-balance-date",
    "npa-report-date",
    "customer-dim-date",
)


class UnrecognizedFileError(ValueError):
    """Neither the file name nor the header row identifies the extract."""


@dataclass
class UploadResult:
    file_name: str
    file_type: str
    label: str
    record_count: int


@dataclass
class FileOutcome:
    file_name: str
    file_type: str
    status: str
    record_count: int = 0
    error: str | None = None


@dataclass
class BatchResult:
    files: list[FileOutcome] = field(default_factory=list)
    customer_count: int | None = None

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [f for f in self.files if f.status == "success"]


def _today(as_of: date | None) -> date:
    return as_of or date.today()


def upload(
    store: ParquetStore,
    file_name: str,
    raw_text: str,
    *,
    as_of: date | None = None,
) -> UploadResult:
    """Detect, transform and commit one extract.

    Raises:
        UnrecognizedFileError: the file type could not be determined.
            An error entry is still written to the upload log.
    """
    as_of = _today(as_of)
    file_type = detect_file_type(file_name, read_headers(raw_text))

    if file_type == UNKNOWN_FILE:
        message = f"Unrecognized file type for '{file_name}'"
        _log.warning("%s", message)
        store.append_log(UploadLogEntry(
            file_type=UNKNOWN_FILE,
            file_name=file_name,
            status="error",
            error_message=message,
        ))
        raise UnrecognizedFileError(message)

    try:
        n = _PROCESSORS[file_type](store, raw_text, file_name=file_name, as_of=as_of)
    except Exception as exc:
        _log.exception("Processing %s (%s) failed", file_name, file_type)
        store.append_log(UploadLogEntry(
            file_type=file_type,
            file_name=file_name,
            status="error",
            error_message=str(exc),
        ))
        raise

    _log.info("Processed %s as %s: %d records", file_name, file_type, n)
    return UploadResult(
        file_name=file_name,
        file_type=file_type,
        label=file_type_label(file_type),
        record_count=n,
    )


def upload_batch(
    store: ParquetStore,
    files: Iterable[tuple[str, str]],
    *,
    as_of: date | None = None,
) -> BatchResult:
    """Process ``(file_name, raw_text)`` pairs in order; one failure never blocks the rest."""
    as_of = _today(as_of)
    result = BatchResult()

    for file_name, raw_text in files:
        try:
            res = upload(store, file_name, raw_text, as_of=as_of)
        except UnrecognizedFileError as exc:
            result.files.append(FileOutcome(file_name, UNKNOWN_FILE, "error", error=str(exc)))
            continue
        except Exception as exc:  # already logged and audited by upload()
            file_type = detect_file_type(file_name, read_headers(raw_text))
            result.files.append(FileOutcome(file_name, file_type, "error", error=str(exc)))
            continue
        result.files.append(FileOutcome(file_name, res.file_type, "success", res.record_count))

    if any(f.file_type in CUSTOMER_SOURCE_TYPES for f in result.succeeded):
        result.customer_count = rebuild_customer_dimension(store, as_of=as_of)
    return result


def rebuild_customers(store: ParquetStore, *, as_of: date | None = None) -> int:
    return rebuild_customer_dimension(store, as_of=_today(as_of))


def data_status(store: ParquetStore) -> dict[str, Any]:
    """Record count per data table, the upload-log size and ``has_data``."""
    counts: dict[str, Any] = {table: store.count(table) for table in DATA_TABLES}
    counts[UPLOAD_LOG] = store.count(UPLOAD_LOG)
    counts["has_data"] = counts[DEPOSIT] > 0 or counts[LOAN] > 0
    return counts


def last_processed(store: ParquetStore) -> dict[str, str | None]:
    """ISO date each file type (and the customer dimension) was last committed."""
    return {key: store.get_setting(key) for key in LAST_PROCESSED_KEYS}


def clear_all(store: ParquetStore) -> None:
    for table in DATA_TABLES:
        store.clear(table)
    store.clear(UPLOAD_LOG)
    _log.info("Cleared all portfolio tables and the upload log")


def customer_360(store: ParquetStore, cif: str) -> dict[str, Any] | None:
    """Customer record with its deposit, loan and CC/OD accounts; None when the CIF is unknown."""
    customer = store.get(CUSTOMER, cif)
    if customer is None:
        return None
    return {
        "customer": customer,
        "deposits": store.get_by_index(DEPOSIT, "CIF", cif),
        "loans": store.get_by_index(LOAN, "CIF", cif),
        "ccod": store.get_by_index(CCOD, "CIF", cif),
    }
