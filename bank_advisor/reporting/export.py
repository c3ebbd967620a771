"""
Plain-text export of a recommendation list.

``format_recommendations_text()`` is pure (the timestamp is an argument);
``write_recommendations()`` writes it to disk and returns the written
``Path``. The file is meant for people, not for re-import; use the history
store for machine-readable records.

Example output::

    Investment recommendations
    Date: 2026-10-19T09:30:00
    Investment amount: 100,000 RUB

    1. BankB
       Return: 10.40%
       Profit: 10,400 RUB
       Deposit rate: 8.00%
       Loan rate: 14.00%
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from bank_advisor.models.bank import BankRecord
from bank_advisor.reporting.formatters import expected_profit, format_money, format_pct

logger = logging.getLogger(__name__)


def format_recommendations_text(
    ranked: Sequence[BankRecord],
    amount: float,
    generated_at: datetime,
    currency: str = "RUB",
) -> str:
    """Render a numbered recommendation list with a dated header."""
    lines = [
        "Investment recommendations",
        f"Date: {generated_at.isoformat(timespec='seconds')}",
        f"Investment amount: {format_money(amount, currency)}",
        "",
    ]
    for rank, bank in enumerate(ranked, start=1):
        profit = expected_profit(amount, bank.investment_return)
        lines.extend(
            [
                f"{rank}. {bank.bank_name}",
                f"   Return: {format_pct(bank.investment_return)}",
                f"   Profit: {format_money(profit, currency)}",
                f"   Deposit rate: {format_pct(bank.deposit_rate)}",
                f"   Loan rate: {format_pct(bank.loan_rate)}",
                "",
            ]
        )
    return "\n".join(lines)


def write_recommendations(
    ranked: Sequence[BankRecord],
    amount: float,
    path: Path,
    generated_at: Optional[datetime] = None,
    currency: str = "RUB",
) -> Path:
    """Write ``ranked`` to a UTF-8 text file.

    Args:
        ranked:       Records in display order.
        amount:       Investment amount.
        path:         Destination file (parent dirs created if missing).
        generated_at: Header timestamp; defaults to now (local time).
        currency:     Currency label.

    Returns:
        ``path`` as written.
    """
    stamp = generated_at or datetime.now()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        format_recommendations_text(ranked, amount, stamp, currency), encoding="utf-8"
    )
    logger.info("Recommendations written: %s (%d bank(s))", path, len(ranked))
    return path
