"""
Portfolio classification schema.

SINGLE SOURCE OF TRUTH for the business thresholds, category whitelists and
keyword rules applied by the transformers and the customer dimension.
Amounts are in rupees.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Band:
    """Lower-inclusive threshold and the label assigned at or above it."""
    floor: float
    label: str


# ═════════════════════════════════════════════════════════════════════════════
# DEPOSITS
# ═════════════════════════════════════════════════════════════════════════════

# Value bands apply only to CASA-like categories.
CASA_CATEGORIES = frozenset({
    "Regular Savings",
    "Wealth Savings",
    "Current",
    "Salary",
    "Wealth Account",
    "Savings Plus",
    "NRI Savings",
    "NRI Current",
})

DEPOSIT_VALUE_BANDS = (
    Band(1_000_000, "Very High"),
    Band(250_000, "High"),
    Band(50_000, "Medium"),
)
DEPOSIT_VALUE_DEFAULT = "Low"

# Maturity buckets apply only to term-deposit-like categories.
TERM_CATEGORIES = frozenset({
    "Term Deposit",
    "Recurring Deposit",
    "Term Deposit (NRO)",
    "Term Deposit (NRE)",
    "Term Deposit (RFC/FCNB)",
    "Recurring Deposit (NRE)",
    "Recurring Deposit (NRO)",
    "MOD",
})

# (max days to maturity, label), evaluated in order.
MATURITY_BUCKETS = (
    (0, "Matured"),
    (30, "0–30 Days"),
    (90, "31–90 Days"),
    (180, "91–180 Days"),
    (365, "181–365 Days"),
)
MATURITY_BUCKET_OVERFLOW = "365+ Days"

DORMANT_STATUS_CODES = frozenset({"03", "19"})

SALARY_PROD_TYPE = "SAL-PROD"
WEALTH_KEYWORDS = ("WEALTH",)
NRI_KEYWORDS = ("NRE", "NRO", "RFC", "FCNB")

# ═════════════════════════════════════════════════════════════════════════════
# CUSTOMER VALUE
# ═════════════════════════════════════════════════════════════════════════════

HNI_BANDS = (
    Band(10_000_000, "Ultra HNI"),
    Band(2_500_000, "HNI"),
)
HNI_DEFAULT = "Regular"

# ═════════════════════════════════════════════════════════════════════════════
# LOANS
# ═════════════════════════════════════════════════════════════════════════════

STAFF_SEGMENT_CODE = "306"

# (category, keywords) evaluated in order against the upper-cased account
# description; the first rule with any keyword present wins.
LOAN_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Home Loan", ("HOME", "SURAKSHA", "HL")),
    ("Vehicle Loan", ("CAR", "VEHICLE", "AUTO")),
    ("Personal Loan", ("PERSONAL", "XPRESS", "PAXC", "PENSION")),
    ("Education Loan", ("EDUCATION", "STU", "SCH LN")),
    ("Gold Loan", ("GOLD",)),
    ("Agriculture", ("AGRI", "KCC", "CROP", "SGY")),
    ("MSME/Business", ("MSME", "MUDRA", "SME", "BUSINESS")),
    ("CC/OD", ("OD", "CC")),
)
LOAN_CATEGORY_DEFAULT = "Other"

SMA_RISK_WEIGHTS = {
    "STD": 0.95,
    "SMA0": 0.85,
    "SMA1": 0.65,
    "SMA2": 0.35,
}
IRAC_RISK_WEIGHTS = {
    "05": 0.10,
    "06": 0.05,
    "08": 0.05,
}
RISK_WEIGHT_DEFAULT = 0.95

# (max months to maturity, label), evaluated in order.
FORECAST_BUCKETS = (
    (1, "1 Month"),
    (3, "3 Months"),
    (6, "6 Months"),
    (12, "12 Months"),
)
FORECAST_BUCKET_OVERFLOW = "12+ Months"

# ═════════════════════════════════════════════════════════════════════════════
# ASSET QUALITY
# ═════════════════════════════════════════════════════════════════════════════

IRAC_LABELS = {
    "4": "Sub-Standard",
    "5": "Doubtful",
    "6": "Doubtful (D2)",
    "7": "Doubtful (D3)",
    "8": "Loss",
}
IRAC_DEFAULT_LABEL = "Standard"

# IRAC codes that do NOT mark an account as non-performing.
LOAN_STANDARD_IRAC = frozenset({"00", "01"})
CCOD_STANDARD_IRAC = frozenset({"00", "01"})

# ═════════════════════════════════════════════════════════════════════════════
# CUSTOMER SEGMENT
# ═════════════════════════════════════════════════════════════════════════════

SEGMENT_DEFAULT = "Regular"
