"""
Advice pipeline — from data sources to rendered recommendation reports.

Flow
----
1. ``gather_records()``:
     history.load()  →  source.fetch_records()  →  current + historical
     →  history.save(merged)
2. ``build_advice()``:
     engine.recommend()  →  summary_report() + detailed_report(best)

Fallback
--------
If the engine fails for any reason other than a rejected argument, the
available records are ranked by raw deposit rate (top ``fallback_top_n``)
and rendered with the same summary formatter. ``AdviceResult.used_fallback``
tells the caller which path produced the report; no detailed report is
rendered on the fallback path.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from bank_advisor.exceptions import InvalidArgumentError
from bank_advisor.ingestion.scraper import RecordSource
from bank_advisor.models.bank import BankRecord
from bank_advisor.recommendations.engine import RecommendationEngine
from bank_advisor.recommendations.ranker import rank_by_deposit_rate
from bank_advisor.reporting.formatters import detailed_report, summary_report
from bank_advisor.storage.history import HistoryStore

logger = logging.getLogger(__name__)


@dataclass
class AdviceResult:
    """Everything the presentation layer needs to show one recommendation run.

    Attributes:
        ranked:           Records in display order.
        summary:          Rendered summary report.
        detail:           Detailed report for the best bank; ``None`` on the
                          fallback path or when there is nothing to rank.
        used_fallback:    True when the deposit-rate ranking was used.
        elapsed_s:        Wall-clock seconds spent ranking and rendering.
        records_analyzed: Number of input records.
    """

    ranked:           list[BankRecord] = field(default_factory=list)
    summary:          str = ""
    detail:           Optional[str] = None
    used_fallback:    bool = False
    elapsed_s:        float = 0.0
    records_analyzed: int = 0


def gather_records(
    source: Optional[RecordSource],
    history: HistoryStore,
) -> list[BankRecord]:
    """Collect current + historical records and save the merged list.

    Args:
        source:  Record source; ``None`` to work from history alone.
        history: History store, loaded first and overwritten with the merge.

    Returns:
        Current records followed by historical records.
    """
    historical = history.load()
    logger.info("Historical records loaded: %d", len(historical))

    current: list[BankRecord] = []
    if source is not None:
        current = source.fetch_records()
        logger.info("Current records collected: %d", len(current))

    merged = current + historical
    logger.info("Total records for analysis: %d", len(merged))

    if source is not None:
        history.save(merged)
    return merged


def build_advice(
    records: Sequence[BankRecord],
    amount: float,
    term_days: int,
    engine: RecommendationEngine,
    fallback_top_n: int = 3,
    currency: str = "RUB",
) -> AdviceResult:
    """Rank ``records`` and render the reports, falling back on engine failure.

    Raises:
        InvalidArgumentError: ``amount`` or ``term_days`` is rejected.
    """
    started = time.perf_counter()
    used_fallback = False
    try:
        ranked = engine.recommend(records, amount, term_days)
    except InvalidArgumentError:
        raise
    except Exception as exc:
        logger.error("Recommendation failed, ranking by deposit rate instead: %s", exc)
        ranked = rank_by_deposit_rate(records, limit=fallback_top_n)
        used_fallback = True

    summary = summary_report(ranked, amount, currency)
    detail = None
    if ranked and not used_fallback:
        detail = detailed_report(ranked[0], amount, currency)

    return AdviceResult(
        ranked=ranked,
        summary=summary,
        detail=detail,
        used_fallback=used_fallback,
        elapsed_s=time.perf_counter() - started,
        records_analyzed=len(records),
    )
