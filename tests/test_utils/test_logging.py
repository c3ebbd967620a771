"""
Tests for bank_advisor/utils/logging.py.

What we test
------------
configure_logging():
  - Sets the root level, adds a file handler only when log_file is set.
  - Quietens httpx.

Formatters:
  - JSON lines nest advisor context fields under "ctx"; other extras and
    standard LogRecord attributes are not emitted.
  - Text lines append "key=value" context pairs.

Context on the advice path:
  - Engine, estimator and scraper log calls carry bank/backend/source/url.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path

import httpx
import pytest

from bank_advisor.config import LoggingConfig, ScraperConfig
from bank_advisor.ingestion.scraper import BankRateScraper
from bank_advisor.recommendations.engine import RecommendationEngine
from bank_advisor.utils.logging import (
    LOG_FORMAT,
    _ContextFormatter,
    _JsonFormatter,
    configure_logging,
    record_context,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _log_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bank_advisor.recommendations.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Ranked %d record(s)",
        args=(2,),
        exc_info=None,
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


# ── configure_logging ─────────────────────────────────────────────────────────

def test_configure_logging_with_file(tmp_path: Path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "advisor.log"
    configure_logging(LoggingConfig(level="WARNING", log_file=str(log_file)))

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
    assert log_file.parent.is_dir()
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_without_file(restore_root_logger) -> None:
    configure_logging(LoggingConfig(level="DEBUG", log_file=""))

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)


def test_configure_logging_json_handlers(restore_root_logger) -> None:
    configure_logging(LoggingConfig(log_file="", json_format=True))
    assert all(isinstance(h.formatter, _JsonFormatter) for h in restore_root_logger.handlers)


# ── Formatters ────────────────────────────────────────────────────────────────

def test_record_context_keeps_known_fields_only() -> None:
    record = _log_record(bank="BankB", backend="mlp", deposit_rate=8.0, source=None)
    assert record_context(record) == {"bank": "BankB", "backend": "mlp"}


def test_json_formatter_nests_context() -> None:
    payload = json.loads(
        _JsonFormatter().format(_log_record(bank="Сбербанк", source="heuristic", other=1))
    )

    assert payload["level"] == "INFO"
    assert payload["logger"] == "bank_advisor.recommendations.engine"
    assert payload["msg"] == "Ranked 2 record(s)"
    assert payload["ctx"] == {"bank": "Сбербанк", "source": "heuristic"}
    assert "other" not in payload
    assert "lineno" not in payload


def test_json_formatter_without_context() -> None:
    payload = json.loads(_JsonFormatter().format(_log_record()))
    assert "ctx" not in payload


def test_text_formatter_appends_context() -> None:
    line = _ContextFormatter(LOG_FORMAT).format(_log_record(bank="BankB", records=2))
    assert line.endswith("Ranked 2 record(s) | bank=BankB records=2")


def test_text_formatter_without_context() -> None:
    line = _ContextFormatter(LOG_FORMAT).format(_log_record())
    assert line.endswith("Ranked 2 record(s)")


# ── Context on the advice path ────────────────────────────────────────────────

def test_engine_logs_carry_context(caplog, untrainable_estimator, make_record) -> None:
    records = [make_record("BankA", 6.0), make_record("BankB", 8.0)]
    with caplog.at_level(logging.INFO, logger="bank_advisor"):
        RecommendationEngine(untrainable_estimator).recommend(records, 1_000, 30)

    ranked_log = next(r for r in caplog.records if r.getMessage().startswith("Ranked"))
    assert record_context(ranked_log) == {
        "bank": "BankB",
        "backend": "untrainable",
        "source": "heuristic",
        "records": 2,
    }

    failed_fit = next(r for r in caplog.records if "training failed" in r.getMessage())
    assert failed_fit.backend == "untrainable"


def test_scraper_logs_carry_url(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    url = "https://www.vtb.ru/"
    scraper = BankRateScraper(
        ScraperConfig(sources=[url], delay_s=0.0),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        rng=random.Random(0),
    )
    with caplog.at_level(logging.INFO, logger="bank_advisor"):
        scraper.fetch_records()

    failure = next(r for r in caplog.records if r.getMessage().startswith("Scan failed"))
    assert record_context(failure) == {"source": "synthetic", "url": url}
