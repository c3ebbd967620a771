"""
Shared pytest fixtures for the Bank Rate Advisor test suite.

Provides:
  - ``make_record``: factory for valid ``BankRecord`` objects.
  - ``sample_records``: a small, varied bank list (8 banks).
  - ``zero_noise_estimator``: untrained estimator whose heuristic
    perturbation is pinned to 0, so predictions are exact.
  - ``trained_estimator``: MLP-backed estimator fitted on ``sample_records``.
  - ``untrainable_estimator``: estimator whose model refuses to fit, so
    every prediction takes the zero-noise heuristic path.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from bank_advisor.ml.estimator import ReturnEstimator
from bank_advisor.ml.return_model import MLPReturnModel
from bank_advisor.models.bank import BankRecord

OBSERVED = date(2026, 10, 19)


def _record(
    bank_name: str = "BankA",
    deposit_rate: float = 6.0,
    loan_rate: float = 12.0,
    investment_return: float = 0.0,
    observed_date: date = OBSERVED,
    term_days: int = 365,
) -> BankRecord:
    return BankRecord(
        bank_name=bank_name,
        deposit_rate=deposit_rate,
        loan_rate=loan_rate,
        investment_return=investment_return,
        observed_date=observed_date,
        term_days=term_days,
    )


@pytest.fixture
def make_record() -> Callable[..., BankRecord]:
    """Factory for ``BankRecord`` with overridable defaults."""
    return _record


@pytest.fixture
def sample_records() -> list[BankRecord]:
    """Eight banks with distinct deposit rates."""
    return [
        _record("Sberbank",    5.4, 13.9,  8.1),
        _record("VTB",         6.8, 12.5,  9.2),
        _record("Tinkoff",     7.9, 11.0, 11.4),
        _record("Alfa-Bank",   6.9, 12.2, 10.1),
        _record("Gazprombank", 6.1, 13.1,  8.9),
        _record("Raiffeisen",  5.9, 12.8,  8.4),
        _record("Otkritie",    6.3, 13.4,  9.5),
        _record("MKB",         7.2, 14.6, 10.6),
    ]


@pytest.fixture
def zero_noise_estimator() -> ReturnEstimator:
    """Untrained estimator with the heuristic perturbation fixed at 0."""
    return ReturnEstimator(perturbation=lambda: 0.0)


@pytest.fixture
def trained_estimator(sample_records) -> ReturnEstimator:
    """Estimator with a small MLP fitted on ``sample_records``."""
    est = ReturnEstimator(
        model=MLPReturnModel(epochs=50),
        perturbation=lambda: 0.0,
    )
    est.train(sample_records)
    assert est.is_trained
    return est


class UntrainableModel:
    """Return model whose fit always fails, keeping the estimator untrained."""

    name = "untrainable"

    def __init__(self) -> None:
        self.fit_calls = 0

    def fit(self, features, labels) -> None:
        self.fit_calls += 1
        raise RuntimeError("fit disabled for tests")

    def predict(self, features):
        raise RuntimeError("never fitted")


@pytest.fixture
def untrainable_estimator() -> ReturnEstimator:
    """Estimator that stays untrained and predicts ``deposit_rate * 1.3`` exactly."""
    return ReturnEstimator(model=UntrainableModel(), perturbation=lambda: 0.0)
