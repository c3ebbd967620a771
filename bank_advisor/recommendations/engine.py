"""
Recommendation engine: raw bank records + investor intent → ranked top-N.

Flow
----
1. Validate ``amount`` (finite, > 0) and ``term_days`` (int, > 0).
2. Train the estimator once per engine lifetime if it is untrained. Later
   calls never retrain, even with different records or after a failed fit.
3. Score every record into a NEW record: predicted return in
   ``investment_return``, the investor's ``term_days`` replacing the
   record's own term.
4. Stable sort by predicted return, descending; truncate to ``top_n``.

Empty input returns ``[]``. Only argument validation raises.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Optional, Sequence

from bank_advisor.exceptions import InvalidArgumentError
from bank_advisor.ml.estimator import ReturnEstimator
from bank_advisor.models.bank import BankRecord
from bank_advisor.recommendations.ranker import rank_by_return

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5


def validate_request(amount: float, term_days: int) -> None:
    """Reject amounts and terms the recommendation contract does not cover.

    Raises:
        InvalidArgumentError: ``amount`` is not a finite number > 0, or
            ``term_days`` is not an integer > 0.
    """
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise InvalidArgumentError(f"amount must be a number, got {type(amount).__name__}.")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidArgumentError(f"amount must be a finite number > 0, got {amount}.")
    if isinstance(term_days, bool) or not isinstance(term_days, int):
        raise InvalidArgumentError(
            f"term_days must be an integer, got {type(term_days).__name__}."
        )
    if term_days <= 0:
        raise InvalidArgumentError(f"term_days must be > 0, got {term_days}.")


class RecommendationEngine:
    """Ranks banks by estimated return for one investment request at a time.

    Attributes:
        estimator: The ``ReturnEstimator`` used for every record.
        top_n:     Maximum number of recommendations returned.
    """

    def __init__(
        self,
        estimator: Optional[ReturnEstimator] = None,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        if top_n <= 0:
            raise InvalidArgumentError(f"top_n must be > 0, got {top_n}.")
        self.estimator = estimator if estimator is not None else ReturnEstimator()
        self.top_n = top_n
        self._training_attempted = False

    def recommend(
        self,
        records: Sequence[BankRecord],
        amount: float,
        term_days: int,
    ) -> list[BankRecord]:
        """Return up to ``top_n`` scored copies of ``records``, best first.

        Args:
            records:   Bank records to score (never mutated).
            amount:    Investment amount; validated, not used in ranking.
            term_days: Investor's horizon; overrides every record's term.

        Raises:
            InvalidArgumentError: On a non-positive amount or term.
        """
        validate_request(amount, term_days)
        logger.info("Analyzing %d bank record(s)", len(records))

        if not records:
            return []

        if not self.estimator.is_trained and not self._training_attempted:
            self._training_attempted = True
            self.estimator.train(records)

        scored: list[BankRecord] = []
        for record in records:
            estimate = self.estimator.estimate(record)
            scored.append(record.with_estimate(estimate.value, term_days, estimate.source))

        ranked = rank_by_return(scored, limit=self.top_n)
        logger.info(
            "Ranked %d record(s); top=%s",
            len(ranked), ranked[0].bank_name if ranked else None,
            extra={
                "bank": ranked[0].bank_name if ranked else None,
                "source": ranked[0].return_source if ranked else None,
                "backend": self.estimator.backend,
                "records": len(records),
            },
        )
        return ranked
