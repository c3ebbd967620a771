"""
Historical rate store — a flat CSV of previously collected bank records.

File layout (header row, then one row per record)::

    bankName,depositRate,loanRate,investmentReturn,date,termDays
    Sberbank,5.42,13.87,8.11,2026-10-19,365

- Rates are written with two decimals; ``date`` is ISO-8601.
- The format is comma-delimited and unquoted, so commas inside bank names
  are replaced with ``;`` before writing.
- Rows with the wrong column count, unparseable values or values that fail
  ``BankRecord`` validation are skipped on load with a warning.

Both directions are best-effort: errors are logged, never raised. A file that
is not valid UTF-8 is reported like an I/O error; rows read before the
decoding failure are kept.
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import ValidationError

from bank_advisor.models.bank import BankRecord

logger = logging.getLogger(__name__)

CSV_HEADER: list[str] = [
    "bankName",
    "depositRate",
    "loanRate",
    "investmentReturn",
    "date",
    "termDays",
]


class HistoryStore(Protocol):
    """Persistence port for historical bank records."""

    def load(self) -> list[BankRecord]:
        ...

    def save(self, records: Sequence[BankRecord]) -> None:
        ...


def record_to_row(record: BankRecord) -> list[str]:
    """Serialize one record into CSV cells."""
    return [
        record.bank_name.replace(",", ";"),
        f"{record.deposit_rate:.2f}",
        f"{record.loan_rate:.2f}",
        f"{record.investment_return:.2f}",
        record.observed_date.isoformat(),
        str(record.term_days),
    ]


def row_to_record(row: list[str]) -> BankRecord:
    """Parse CSV cells into a record.

    Raises:
        ValueError: Wrong column count or unparseable number/date.
        pydantic.ValidationError: Parsed values violate ``BankRecord`` rules.
    """
    if len(row) != len(CSV_HEADER):
        raise ValueError(f"expected {len(CSV_HEADER)} columns, got {len(row)}")
    name, deposit, loan, ret, observed, term = row
    return BankRecord(
        bank_name=name,
        deposit_rate=float(deposit),
        loan_rate=float(loan),
        investment_return=float(ret),
        observed_date=date.fromisoformat(observed),
        term_days=int(term),
    )


class CsvHistoryStore:
    """CSV-backed ``HistoryStore``.

    Attributes:
        path: Location of the history file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, records: Sequence[BankRecord]) -> None:
        """Overwrite the history file with ``records``."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(CSV_HEADER)
                for record in records:
                    writer.writerow(record_to_row(record))
        except OSError as exc:
            logger.error("Failed to save history to %s: %s", self.path, exc)
            return
        logger.info("History saved: %s (%d record(s))", self.path, len(records))

    def load(self) -> list[BankRecord]:
        """Read every valid record; ``[]`` when the file does not exist."""
        records: list[BankRecord] = []
        if not self.path.exists():
            logger.info("History file does not exist yet: %s", self.path)
            return records

        try:
            with self.path.open("r", newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for line_no, row in enumerate(reader, start=2):
                    if not row:
                        continue
                    try:
                        records.append(row_to_record(row))
                    except (ValueError, ValidationError) as exc:
                        logger.warning(
                            "Skipping malformed history row %d in %s: %s",
                            line_no, self.path, exc,
                        )
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to load history from %s: %s", self.path, exc)

        logger.info("History loaded: %d record(s) from %s", len(records), self.path)
        return records
