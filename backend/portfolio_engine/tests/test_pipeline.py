"""Upload orchestration: single upload, batches, status, clear and Customer 360."""

from __future__ import annotations

import pytest

from portfolio_engine import pipeline
from portfolio_engine.pipeline import (
    UnrecognizedFileError,
    clear_all,
    customer_360,
    data_status,
    rebuild_customers,
    upload,
    upload_batch,
)
from portfolio_engine.store import DEPOSIT, ParquetStore
from portfolio_engine.tests.conftest import (
    AS_OF,
    SYNTHETIC_CCOD_CSV,
    SYNTHETIC_DEPOSIT_CSV,
    SYNTHETIC_LOAN_BALANCE_CSV,
    SYNTHETIC_LOAN_PRODUCT_MAPPING_CSV,
    SYNTHETIC_LOAN_SHADOW_CSV,
    SYNTHETIC_NPA_CSV,
    SYNTHETIC_PRODUCT_MAPPING_CSV,
)

PERIOD_BATCH = [
    ("Deposit_Product_Category_Mapping.csv", SYNTHETIC_PRODUCT_MAPPING_CSV),
    ("Loan_Product_Category_Mapping.csv", SYNTHETIC_LOAN_PRODUCT_MAPPING_CSV),
    ("CC_OD_Balance_File.csv", SYNTHETIC_CCOD_CSV),
    ("DEP_Shadow_file.csv", SYNTHETIC_DEPOSIT_CSV),
    ("LON_Shadow_file.csv", SYNTHETIC_LOAN_SHADOW_CSV),
    ("LoansBalanceFile.csv", SYNTHETIC_LOAN_BALANCE_CSV),
    ("Listof_NPA_Accounts.csv", SYNTHETIC_NPA_CSV),
]


class TestUpload:
    def test_detects_and_commits(self, store: ParquetStore) -> None:
        res = upload(store, "DEP_Shadow_file.csv", SYNTHETIC_DEPOSIT_CSV, as_of=AS_OF)
        assert res.file_type == "deposit-shadow"
        assert res.label == "Deposit Shadow (Month-end)"
        assert res.record_count == 3
        log = store.get_logs()[-1]
        assert (log.status, log.file_name, log.record_count) == ("success", "DEP_Shadow_file.csv", 3)

    def test_detects_by_headers(self, store: ParquetStore) -> None:
        res = upload(store, "export_0331.csv", SYNTHETIC_NPA_CSV, as_of=AS_OF)
        assert res.file_type == "npa-report"

    def test_unrecognized_logs_and_raises(self, store: ParquetStore) -> None:
        with pytest.raises(UnrecognizedFileError):
            upload(store, "notes.csv", "foo,bar\n1,2\n", as_of=AS_OF)
        log = store.get_logs()[-1]
        assert log.status == "error"
        assert log.file_type == "unknown"
        assert "notes.csv" in log.error_message
        assert data_status(store)["has_data"] is False

    def test_unrecognized_is_value_error(self) -> None:
        assert issubclass(UnrecognizedFileError, ValueError)

    def test_transformer_failure_logged_and_reraised(self, store: ParquetStore, monkeypatch) -> None:
        def _fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setitem(pipeline._PROCESSORS, "npa-report", _fail)
        with pytest.raises(OSError):
            upload(store, "Listof_NPA_Accounts.csv", SYNTHETIC_NPA_CSV, as_of=AS_OF)
        log = store.get_logs()[-1]
        assert (log.status, log.file_type, log.error_message) == ("error", "npa-report", "disk full")


class TestBatch:
    def test_full_period_rebuilds_customers_once(self, store: ParquetStore) -> None:
        result = upload_batch(store, PERIOD_BATCH, as_of=AS_OF)
        assert [f.status for f in result.files] == ["success"] * 7
        assert result.customer_count == 4
        assert store.count(DEPOSIT) == 2

    def test_failure_does_not_block_others(self, store: ParquetStore) -> None:
        result = upload_batch(
            store,
            [("junk.csv", "a,b\n1,2\n"), ("CC_OD_Balance_File.csv", SYNTHETIC_CCOD_CSV)],
            as_of=AS_OF,
        )
        assert [(f.file_type, f.status) for f in result.files] == [
            ("unknown", "error"), ("ccod-balance", "success"),
        ]
        assert result.customer_count == 1

    def test_mapping_only_batch_skips_rebuild(self, store: ParquetStore) -> None:
        result = upload_batch(
            store, [("Deposit_Product_Category_Mapping.csv", SYNTHETIC_PRODUCT_MAPPING_CSV)], as_of=AS_OF,
        )
        assert result.customer_count is None
        assert store.get_setting("customer-dim-date") is None


class TestStatusAndQueries:
    def test_status_counts(self, store: ParquetStore) -> None:
        upload_batch(store, PERIOD_BATCH, as_of=AS_OF)
        status = data_status(store)
        assert status["deposit"] == 2
        assert status["loan"] == 2
        assert status["customer"] == 4
        assert status["upload-log"] == 7
        assert status["has_data"] is True
        assert pipeline.last_processed(store)["npa-report-date"] == "2024-03-31"

    def test_customer_360(self, store: ParquetStore) -> None:
        upload_batch(store, PERIOD_BATCH, as_of=AS_OF)
        view = customer_360(store, "55")
        assert view["customer"]["CustName"] == "ASHA RAO"
        assert [d["AcNo"] for d in view["deposits"]] == ["1234"]
        assert [l["LoanKey"] for l in view["loans"]] == ["70001"]
        assert view["ccod"] == []
        assert customer_360(store, "404") is None

    def test_rebuild_on_demand(self, store: ParquetStore) -> None:
        upload(store, "CC_OD_Balance_File.csv", SYNTHETIC_CCOD_CSV, as_of=AS_OF)
        assert rebuild_customers(store, as_of=AS_OF) == 1

    def test_clear_all(self, store: ParquetStore) -> None:
        upload_batch(store, PERIOD_BATCH, as_of=AS_OF)
        clear_all(store)
        status = data_status(store)
        assert all(v == 0 for k, v in status.items() if k != "has_data")
        assert status["has_data"] is False
