"""
ASCII terminal formatters for recommendation reports.

Both formatters are pure: no I/O, no clock, no randomness. Identical
arguments always produce byte-identical strings, so outputs can be compared
against golden files.

Number formats
--------------
  percentages : exactly two decimals            ``10.40%``
  money       : whole units, ``,`` separators    ``110,400 RUB``

Money is signed. A negative predicted return (possible on the heuristic path
when the deposit rate is 0 and the perturbation is negative) renders as a
negative profit such as ``-500 RUB``. ``-0`` and ``-0.00`` are printed as
``0`` and ``0.00``.

Summary layout (78-column body)::

  +================================================================================+
  |                           INVESTMENT RECOMMENDATIONS                           |
  +================================================================================+
  | Rank Bank                    Return          Profit             Total  Deposit |
  +--------------------------------------------------------------------------------+
  | [1]  BankB                   10.40%      10,400 RUB       110,400 RUB    8.00% |
  | [2]  BankA                    7.80%       7,800 RUB       107,800 RUB    6.00% |
  +================================================================================+
  | Best option:        BankB                                                      |
  | ...                                                                            |

Numeric columns widen to fit their longest value, and the box widens with
them, so every bordered line of one report has the same length. Bank names
are cut to 20 characters.

The formatters accept any ranked list, including the deposit-rate fallback
ranking, not only the engine's output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from bank_advisor.models.bank import BankRecord

_WIDTH = 78
_NAME_WIDTH = 20
_RANK_MARKERS = ("[1]", "[2]", "[3]")
_LABEL_WIDTH = 20

# Minimum widths of the numeric columns: return, profit, total, deposit.
_MIN_COLUMNS = (9, 15, 17, 8)

ADVICE_LINES: tuple[str, ...] = (
    "ADDITIONAL ADVICE:",
    "  * Spread investments across several banks",
    "  * Take bank reliability into account (ratings, reviews)",
    "  * Check the terms for early withdrawal",
    "  * Confirm current rates on the banks' official sites",
    "",
    "Note: forecasts are based on a statistical model and historical data.",
    "Actual results may differ. Invest deliberately.",
)


# ── Number helpers ────────────────────────────────────────────────────────────


def expected_profit(amount: float, annual_return_pct: float) -> float:
    """``amount * annual_return_pct / 100``."""
    return amount * annual_return_pct / 100


def format_pct(value: float) -> str:
    text = f"{value:.2f}"
    if text == "-0.00":
        text = "0.00"
    return f"{text}%"


def format_money(value: float, currency: str = "RUB") -> str:
    """Whole units with ``,`` separators; negative values keep their sign."""
    text = f"{value:,.0f}"
    if text == "-0":
        text = "0"
    return f"{text} {currency}" if currency else text


# ── Summary ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _Box:
    """Inner width of the summary box."""

    width: int

    @property
    def border(self) -> str:
        return "+" + "=" * (self.width + 2) + "+"

    @property
    def rule(self) -> str:
        return "+" + "-" * (self.width + 2) + "+"

    def line(self, text: str = "") -> str:
        return f"| {text:<{self.width}} |"

    def centered(self, text: str) -> str:
        return f"| {text:^{self.width}} |"


def _row_cells(bank: BankRecord, amount: float, currency: str) -> tuple[str, str, str, str]:
    profit = expected_profit(amount, bank.investment_return)
    return (
        format_pct(bank.investment_return),
        format_money(profit, currency),
        format_money(amount + profit, currency),
        format_pct(bank.deposit_rate),
    )


def _format_row(marker: str, name: str, cells: Sequence[str], widths: Sequence[int]) -> str:
    numeric = " ".join(f"{cell:>{w}}" for cell, w in zip(cells, widths))
    return f"{marker:<4} {name:<{_NAME_WIDTH}} {numeric}"


def summary_report(
    ranked: Sequence[BankRecord],
    amount: float,
    currency: str = "RUB",
) -> str:
    """Render the ranked list as a bordered table plus a best-option block.

    Args:
        ranked:   Records in display order (first = best).
        amount:   Investment amount used for profit/total columns.
        currency: Currency label appended to money values.

    Returns:
        Multi-line string ending with a newline.
    """
    if not ranked:
        box = _Box(_WIDTH)
        lines = [
            box.border,
            box.centered("INVESTMENT RECOMMENDATIONS"),
            box.border,
            box.centered("No data available for recommendations"),
            box.border,
        ]
        return "\n".join(lines) + "\n"

    rows = [_row_cells(bank, amount, currency) for bank in ranked]
    widths = [
        max(minimum, *(len(cells[i]) for cells in rows))
        for i, minimum in enumerate(_MIN_COLUMNS)
    ]

    best = ranked[0]
    best_return, best_profit, best_total, _ = rows[0]
    best_block = [
        ("Best option:", best.bank_name),
        ("Predicted return:", best_return),
        ("Expected profit:", best_profit),
        ("Total at maturity:", best_total),
    ]

    header = _format_row("Rank", "Bank", ("Return", "Profit", "Total", "Deposit"), widths)
    block_width = _LABEL_WIDTH + max(len(v) for _, v in best_block[1:])
    box = _Box(max(_WIDTH, len(header), block_width))

    lines: list[str] = [
        box.border,
        box.centered("INVESTMENT RECOMMENDATIONS"),
        box.border,
        box.line(header),
        box.rule,
    ]
    for i, (bank, cells) in enumerate(zip(ranked, rows)):
        marker = _RANK_MARKERS[i] if i < len(_RANK_MARKERS) else ""
        lines.append(box.line(_format_row(marker, bank.bank_name[:_NAME_WIDTH], cells, widths)))

    lines.append(box.border)
    for label, value in best_block:
        text = f"{label:<{_LABEL_WIDTH}}{value}"
        lines.append(box.line(text[:box.width]))
    lines.append(box.border)
    lines.append("")
    lines.extend(ADVICE_LINES)

    return "\n".join(lines) + "\n"


# ── Detail ────────────────────────────────────────────────────────────────────


def detailed_report(
    bank: BankRecord,
    amount: float,
    currency: str = "RUB",
) -> str:
    """Render a single-bank breakdown including monthly income.

    Monthly income is ``profit / (term_days / 30.0)``.
    """
    profit = expected_profit(amount, bank.investment_return)
    monthly = profit / (bank.term_days / 30.0)

    lines = [
        "",
        f"DETAILED ANALYSIS: {bank.bank_name}",
        "-" * 50,
        f"Predicted return:        {format_pct(bank.investment_return)} per year",
        f"Investment term:         {bank.term_days} days",
        f"Investment amount:       {format_money(amount, currency)}",
        f"Expected profit:         {format_money(profit, currency)}",
        f"Monthly income:          {format_money(monthly, currency)}",
        f"Total at maturity:       {format_money(amount + profit, currency)}",
        f"Deposit rate:            {format_pct(bank.deposit_rate)}",
        f"Loan rate:               {format_pct(bank.loan_rate)}",
    ]
    return "\n".join(lines) + "\n"
