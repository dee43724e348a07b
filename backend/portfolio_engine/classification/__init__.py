"""Portfolio classification: thresholds, whitelists and rule functions.

To change a threshold or keyword list edit schema.py; classifier.py only
evaluates the rules in the order schema.py defines them.
"""

from portfolio_engine.classification.classifier import (
    customer_segment,
    deposit_value_band,
    dormancy_flag,
    forecast_bucket,
    hni_category,
    irac_description,
    irregular_flag,
    is_npa_irac,
    loan_category_from_description,
    maturity_bucket,
    nri_flag,
    risk_weight,
    salary_flag,
    wealth_flag,
)

__all__ = [
    "customer_segment",
    "deposit_value_band",
    "dormancy_flag",
    "forecast_bucket",
    "hni_category",
    "irac_description",
    "irregular_flag",
    "is_npa_irac",
    "loan_category_from_description",
    "maturity_bucket",
    "nri_flag",
    "risk_weight",
    "salary_flag",
    "wealth_flag",
]
