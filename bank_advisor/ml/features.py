"""
Feature preparation for the return model.

Defines which ``BankRecord`` values are model inputs and how they are
encoded. This module is the single place to update if the feature set
changes; the estimator and every backend read ``FEATURE_COLS`` from here so
training and inference matrices always share one column order.

Feature vector
--------------
  deposit_rate   : annualized deposit rate, percent
  loan_rate      : annualized loan rate, percent
  prior_return   : observed investment return, percent (never a prediction)
  term_years     : term_days / 365.0

Label
-----
  prior_return — the model learns the observed return surface; predictions
  are written to ``investment_return`` on scored copies only.
"""

from __future__ import annotations

import math
from typing import Iterable

from bank_advisor.models.bank import BankRecord

FEATURE_COLS: list[str] = [
    "deposit_rate",
    "loan_rate",
    "prior_return",
    "term_years",
]

DAYS_PER_YEAR = 365.0


def encode_record(record: BankRecord) -> dict[str, float]:
    """Return the named feature values for one record."""
    return {
        "deposit_rate": float(record.deposit_rate),
        "loan_rate":    float(record.loan_rate),
        "prior_return": float(record.prior_return),
        "term_years":   record.term_days / DAYS_PER_YEAR,
    }


def feature_vector(record: BankRecord) -> list[float]:
    """Encode one record as a row in ``FEATURE_COLS`` order."""
    encoded = encode_record(record)
    return [encoded[c] for c in FEATURE_COLS]


def build_feature_matrix(records: Iterable[BankRecord]) -> list[list[float]]:
    """Build the training/inference matrix, one row per record, input order kept."""
    return [feature_vector(r) for r in records]


def build_labels(records: Iterable[BankRecord]) -> list[float]:
    """Build the label vector (observed return), input order kept."""
    return [float(r.prior_return) for r in records]


def all_finite(matrix: list[list[float]], labels: list[float]) -> bool:
    """True when no feature or label is NaN or infinite."""
    return all(math.isfinite(v) for row in matrix for v in row) and all(
        math.isfinite(v) for v in labels
    )
