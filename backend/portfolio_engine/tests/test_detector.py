"""File-type detection by name and by header row."""

from __future__ import annotations

import pytest

from portfolio_engine.detector import FILE_TYPE_LABELS, detect_file_type, file_type_label
from portfolio_engine.tests.conftest import (
    CCOD_HEADERS,
    DEPOSIT_HEADERS,
    LOAN_BALANCE_HEADERS,
    LOAN_PRODUCT_MAPPING_HEADERS,
    LOAN_SHADOW_HEADERS,
    NPA_HEADERS,
    PRODUCT_MAPPING_HEADERS,
)


class TestByFileName:
    @pytest.mark.parametrize(
        "name, file_type",
        [
            ("Listof_NPA_Accounts.csv", "npa-report"),
            ("LOND2572_20240331.csv", "npa-report"),
            ("DEP_Shadow_file.csv", "deposit-shadow"),
            ("WeeklyReports_DEP_2572.csv", "deposit-shadow"),
            ("LON_Shadow_file.csv", "loan-shadow"),
            ("Loan_Product_Category_Mapping.csv", "loan-product-mapping"),
            ("Deposit_Product_Category_Mapping.csv", "product-mapping"),
            ("CC_OD_Balance_File.csv", "ccod-balance"),
            ("DEPD1234.csv", "ccod-balance"),
            ("LoansBalanceFile.csv", "loan-balance"),
            ("LOND1111.csv", "loan-balance"),
        ],
    )
    def test_name_rules(self, name: str, file_type: str) -> None:
        assert detect_file_type(name, []) == file_type

    def test_name_beats_headers(self) -> None:
        assert detect_file_type("npa_list.csv", LOAN_BALANCE_HEADERS) == "npa-report"


class TestByHeaders:
    @pytest.mark.parametrize(
        "headers, file_type",
        [
            (LOAN_BALANCE_HEADERS, "loan-balance"),
            (CCOD_HEADERS, "ccod-balance"),
            (NPA_HEADERS, "npa-report"),
            (DEPOSIT_HEADERS, "deposit-shadow"),
            (LOAN_SHADOW_HEADERS, "loan-shadow"),
            (LOAN_PRODUCT_MAPPING_HEADERS, "loan-product-mapping"),
            (PRODUCT_MAPPING_HEADERS, "product-mapping"),
        ],
    )
    def test_header_rules(self, headers: list[str], file_type: str) -> None:
        assert detect_file_type("export.csv", headers) == file_type

    def test_unknown(self) -> None:
        assert detect_file_type("notes.txt", ["foo", "bar"]) == "unknown"
        assert detect_file_type("", []) == "unknown"


class TestLabels:
    def test_every_known_type_has_label(self) -> None:
        assert len(FILE_TYPE_LABELS) == 7
        assert file_type_label("ccod-balance") == "CC/OD Balance (Daily)"
        assert file_type_label("unknown") == "unknown"
