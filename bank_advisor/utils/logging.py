"""
Logging setup for the Bank Rate Advisor.

``configure_logging(config)`` is called once by each CLI command before any
scraping or ranking starts. Library modules only ever do
``logger = logging.getLogger(__name__)``.

Context fields
--------------
Log calls on the advice path attach per-bank context through ``extra=``::

    logger.warning("Scan failed: %s", url, extra={"url": url, "source": "synthetic"})

Only the names in ``CONTEXT_FIELDS`` are picked up. The text formatter
appends them as ``key=value`` pairs; the JSON formatter nests them under
``"ctx"``::

    {"ts": "2026-10-19T09:30:00Z", "level": "WARNING", "logger": "bank_advisor.ingestion.scraper",
     "msg": "Scan failed: https://www.vtb.ru/", "ctx": {"url": "https://www.vtb.ru/", "source": "synthetic"}}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bank_advisor.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

CONTEXT_FIELDS: tuple[str, ...] = ("bank", "backend", "source", "url", "records")

_QUIET_LOGGERS = ("httpx", "httpcore", "lightgbm")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Advisor context fields present on ``record``, in ``CONTEXT_FIELDS`` order."""
    return {
        key: getattr(record, key)
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class _ContextFormatter(logging.Formatter):
    """Plain-text lines with the advisor context appended."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ctx = record_context(record)
        if ctx:
            line += " | " + " ".join(f"{k}={v}" for k, v in ctx.items())
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``, ``ctx``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        ctx = record_context(record)
        if ctx:
            payload["ctx"] = ctx
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def _build_handlers(config: "LoggingConfig", level: int) -> list[logging.Handler]:
    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = _ContextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig") -> None:
    """Route the root logger to stdout (and ``config.log_file`` when set).

    Args:
        config: ``[logging]`` section of ``AppConfig``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=_build_handlers(config, level), force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
