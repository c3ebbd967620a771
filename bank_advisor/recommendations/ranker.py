"""
Ranking helpers shared by the engine and the fallback path.

Both rankers use Python's stable sort with ``reverse=True``: records with
equal keys keep their input order, so identical inputs always rank
identically.
"""

from __future__ import annotations

from typing import Optional, Sequence

from bank_advisor.models.bank import BankRecord


def rank_by_return(
    records: Sequence[BankRecord],
    limit: Optional[int] = None,
) -> list[BankRecord]:
    """Sort by ``investment_return`` descending and keep the first ``limit``."""
    ranked = sorted(records, key=lambda r: r.investment_return, reverse=True)
    return ranked if limit is None else ranked[:limit]


def rank_by_deposit_rate(
    records: Sequence[BankRecord],
    limit: Optional[int] = 3,
) -> list[BankRecord]:
    """Sort by raw ``deposit_rate`` descending and keep the first ``limit``.

    Used when the estimator/engine path is unavailable; the records keep
    whatever ``investment_return`` they arrived with.
    """
    ranked = sorted(records, key=lambda r: r.deposit_rate, reverse=True)
    return ranked if limit is None else ranked[:limit]
