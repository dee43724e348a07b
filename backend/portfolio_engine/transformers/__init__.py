"""Domain transformers: raw flat-file rows -> classified table records.

Each module exposes a pure ``transform_*`` function and a ``process_*``
entry point that parses the file text, transforms it and commits the
result to a :class:`~portfolio_engine.store.ParquetStore`.
"""

from portfolio_engine.transformers.ccod import process_ccod_balance, transform_ccod
from portfolio_engine.transformers.deposit import process_deposit_shadow, transform_deposits
from portfolio_engine.transformers.loan import (
    process_loan_balance,
    process_loan_shadow,
    transform_loan_balance,
    transform_loan_shadow,
)
from portfolio_engine.transformers.mapping import (
    process_loan_product_mapping,
    process_product_mapping,
    transform_loan_product_mapping,
    transform_product_mapping,
)
from portfolio_engine.transformers.npa import process_npa_report, transform_npa

__all__ = [
    "process_ccod_balance",
    "process_deposit_shadow",
    "process_loan_balance",
    "process_loan_product_mapping",
    "process_loan_shadow",
    "process_npa_report",
    "process_product_mapping",
    "transform_ccod",
    "transform_deposits",
    "transform_loan_balance",
    "transform_loan_product_mapping",
    "transform_loan_shadow",
    "transform_npa",
    "transform_product_mapping",
]
