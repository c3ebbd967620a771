"""
Tests for bank_advisor/reporting/formatters.py.

What we test
------------
Number helpers:
  - expected_profit() arithmetic.
  - format_pct() / format_money() formats, including "-0" normalization.

summary_report():
  - Two-bank example: best option BankB, profit 10,400 RUB, total 110,400 RUB.
  - Rows appear in the given order with [1]/[2]/[3] markers only.
  - Every bordered line has the same width.
  - Long bank names are truncated in the table.
  - Empty list renders the "no data" message and no advice block.
  - Output is deterministic and ends with a newline.

detailed_report():
  - Monthly income is profit / (term_days / 30).
  - Shows both rates, term and totals.
"""

from __future__ import annotations

import pytest

from bank_advisor.reporting.formatters import (
    ADVICE_LINES,
    detailed_report,
    expected_profit,
    format_money,
    format_pct,
    summary_report,
)


@pytest.fixture
def ranked_pair(make_record):
    bank_b = make_record("BankB", 8.0, 14.0).with_estimate(10.4, 180, "heuristic")
    bank_a = make_record("BankA", 6.0, 12.0).with_estimate(7.8, 180, "heuristic")
    return [bank_b, bank_a]


# ── Number helpers ────────────────────────────────────────────────────────────

def test_expected_profit():
    assert expected_profit(100_000, 10.4) == pytest.approx(10_400)
    assert expected_profit(50_000, 0.0) == 0.0


@pytest.mark.parametrize(
    "value, expected",
    [(10.4, "10.40%"), (7.8, "7.80%"), (0.0, "0.00%"), (-0.001, "0.00%"), (-1.5, "-1.50%")],
)
def test_format_pct(value, expected):
    assert format_pct(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (110_400, "110,400 RUB"),
        (1_733.33, "1,733 RUB"),
        (999.5, "1,000 RUB"),
        (-0.4, "0 RUB"),
        (-1_200, "-1,200 RUB"),
    ],
)
def test_format_money(value, expected):
    assert format_money(value) == expected


def test_format_money_currency_label():
    assert format_money(1000, "USD") == "1,000 USD"
    assert format_money(1000, "") == "1,000"


# ── summary_report ────────────────────────────────────────────────────────────

def test_summary_best_option_block(ranked_pair):
    report = summary_report(ranked_pair, 100_000)

    assert "INVESTMENT RECOMMENDATIONS" in report
    assert "Best option:        BankB" in report
    assert "Predicted return:   10.40%" in report
    assert "Expected profit:    10,400 RUB" in report
    assert "Total at maturity:  110,400 RUB" in report


def test_summary_rows_in_given_order(ranked_pair):
    lines = summary_report(ranked_pair, 100_000).splitlines()
    row_b = next(i for i, l in enumerate(lines) if l.startswith("| [1]"))
    row_a = next(i for i, l in enumerate(lines) if l.startswith("| [2]"))

    assert "BankB" in lines[row_b] and "10.40%" in lines[row_b]
    assert "BankA" in lines[row_a] and "7.80%" in lines[row_a]
    assert "7,800 RUB" in lines[row_a]
    assert "107,800 RUB" in lines[row_a]
    assert "6.00%" in lines[row_a]
    assert row_b < row_a


def test_summary_only_top_three_marked(make_record):
    ranked = [
        make_record(f"Bank{i}", 5.0).with_estimate(10.0 - i, 365, "heuristic")
        for i in range(5)
    ]
    lines = summary_report(ranked, 10_000).splitlines()
    rows = [l for l in lines if "Bank" in l and "%" in l and "Best" not in l]

    assert rows[0].startswith("| [1]")
    assert rows[2].startswith("| [3]")
    assert rows[3].startswith("|      Bank3")
    assert "[4]" not in "\n".join(lines)


def _boxed_widths(report: str) -> set[int]:
    return {len(l) for l in report.splitlines() if l.startswith(("|", "+"))}


def test_summary_bordered_lines_have_equal_width(ranked_pair):
    assert _boxed_widths(summary_report(ranked_pair, 100_000)) == {82}


@pytest.mark.parametrize("amount", [5_000_000_000_000, 1e30])
def test_summary_large_amounts_keep_border_aligned(ranked_pair, amount):
    report = summary_report(ranked_pair, amount)
    widths = _boxed_widths(report)

    assert len(widths) == 1
    assert widths.pop() > 82
    assert format_money(amount + expected_profit(amount, 10.4)) in report


def test_summary_large_return_keeps_border_aligned(make_record):
    ranked = [make_record("BankZ", 6.0).with_estimate(1e12, 365, "model")]
    assert len(_boxed_widths(summary_report(ranked, 100_000))) == 1


def test_summary_negative_profit_is_signed(make_record):
    ranked = [make_record("ZeroRate", 0.0).with_estimate(-0.5, 365, "heuristic")]
    report = summary_report(ranked, 100_000)

    assert "Expected profit:    -500 RUB" in report
    assert "Total at maturity:  99,500 RUB" in report
    assert len(_boxed_widths(report)) == 1


def test_summary_truncates_long_names(make_record):
    long_name = "Very Long Regional Development Bank"
    ranked = [make_record(long_name, 6.0).with_estimate(8.0, 365, "heuristic")]
    lines = summary_report(ranked, 1_000).splitlines()
    row = next(l for l in lines if l.startswith("| [1]"))

    assert long_name[:20] in row
    assert long_name not in row


def test_summary_includes_advice(ranked_pair):
    report = summary_report(ranked_pair, 100_000)
    for line in ADVICE_LINES:
        assert line in report


def test_summary_empty_list():
    report = summary_report([], 100_000)
    assert "No data available for recommendations" in report
    assert "Best option" not in report
    assert ADVICE_LINES[0] not in report
    assert report.endswith("\n")


def test_summary_is_deterministic(ranked_pair):
    first = summary_report(ranked_pair, 100_000)
    assert summary_report(ranked_pair, 100_000) == first
    assert first.endswith("\n")


# ── detailed_report ───────────────────────────────────────────────────────────

def test_detailed_report_fields(ranked_pair):
    report = detailed_report(ranked_pair[0], 100_000)

    assert "DETAILED ANALYSIS: BankB" in report
    assert "10.40% per year" in report
    assert "180 days" in report
    assert "100,000 RUB" in report
    assert "10,400 RUB" in report
    assert "110,400 RUB" in report
    assert "Deposit rate:            8.00%" in report
    assert "Loan rate:               14.00%" in report


def test_detailed_report_monthly_income(ranked_pair):
    # 10,400 profit over 180 days = 6 months of 1,733.33
    report = detailed_report(ranked_pair[0], 100_000)
    assert "Monthly income:          1,733 RUB" in report


def test_detailed_report_is_deterministic(ranked_pair):
    assert detailed_report(ranked_pair[1], 5_000, "USD") == detailed_report(
        ranked_pair[1], 5_000, "USD"
    )
