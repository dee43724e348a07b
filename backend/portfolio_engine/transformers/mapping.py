"""Deposit and loan product-category mapping tables."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from portfolio_engine.io._utils import clean_text
from portfolio_engine.io.flat_file import parse_flat_file
from portfolio_engine.store import LOAN_PRODUCT_MAPPING, PRODUCT_MAPPING, ParquetStore
from portfolio_engine.transformers._base import commit_table


def _get(row: dict[str, str], col: str, default: str = "") -> str:
    return clean_text(row.get(col)) or default


def transform_product_mapping(rows: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    return [
        {
            "ProductCode": _get(r, "ProductCode"),
            "PROD_TYPE": _get(r, "PROD_TYPE"),
            "CURRENCY": _get(r, "CURRENCY"),
            "PROD_DESC": _get(r, "PROD_DESC"),
            "Category": _get(r, "Category"),
            "SubCategory": _get(r, "SubCategory"),
            "SalaryFlag": _get(r, "SalaryFlag", "No"),
            "WealthFlag": _get(r, "WealthFlag", "No"),
            "SeniorCitizen": _get(r, "SeniorCitizen", "No"),
            "NRIFlag": _get(r, "NRIFlag", "No"),
        }
        for r in rows
        if _get(r, "ProductCode")
    ]


def transform_loan_product_mapping(rows: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    return [
        {
            "ProductCode": _get(r, "ProductCode"),
            "ProductName": _get(r, "ProductName"),
            "Category": _get(r, "Category"),
            "SubCategory": _get(r, "SubCategory"),
            "Segment": _get(r, "Segment"),
            "Priority": _get(r, "Priority", "No"),
            "Secured": _get(r, "Secured"),
            "Scheme": _get(r, "Scheme", "None"),
            "RiskWeight": _get(r, "RiskWeight", "100"),
        }
        for r in rows
        if _get(r, "ProductCode")
    ]


def process_product_mapping(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "Deposit_Product_Category_Mapping.csv",
    as_of: date,
) -> int:
    records = transform_product_mapping(parse_flat_file(text))
    return commit_table(
        store, PRODUCT_MAPPING, records,
        file_type="product-mapping", file_name=file_name, as_of=as_of,
    )


def process_loan_product_mapping(
    store: ParquetStore,
    text: str,
    *,
    file_name: str = "Loan_Product_Category_Mapping.csv",
    as_of: date,
) -> int:
    records = transform_loan_product_mapping(parse_flat_file(text))
    return commit_table(
        store, LOAN_PRODUCT_MAPPING, records,
        file_type="loan-product-mapping", file_name=file_name, as_of=as_of,
    )
