"""Output helpers for the amortization calculator.

This module provides simple functions to render summaries, amortization
schedules and scenario comparisons in a tabular text format using built-in
printing and string formatting.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import AmortizationRow, LoanSummary, ScenarioSet


def print_summary(summary: LoanSummary) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Loan amount        : {summary.loan_amount:.2f}")
    if summary.down_payment:
        print(f"Down payment       : {summary.down_payment:.2f}")
    print(f"Annual rate        : {summary.effective_rate:.3f}%")
    print(f"Term               : {summary.term_months} months")
    print(f"Monthly payment    : {summary.monthly_payment:.2f}")
    print(f"Total payment      : {summary.total_payment:.2f}")
    print(f"Total interest     : {summary.total_interest:.2f}")
    # Extra-payment figures only matter when there is an extra payment.
    if summary.extra_payment:
        print(f"Extra payment      : {summary.extra_payment:.2f}")
        print(f"Payoff time        : {summary.payoff_time_months} months")
        print(f"Term reduction     : {summary.months_saved} months")
        print(f"Interest saved     : {summary.interest_saved:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationRow]) -> int:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[AmortizationRow]
        The schedule rows to print. Rows are consumed lazily.

    Returns
    -------
    int
        The number of rows printed.
    """
    headers = ["Month", "Payment", "Principal", "Interest", "Balance", "CumInterest"]
    print("\t".join(headers))
    printed = 0
    for row in schedule:
        print(
            "\t".join(
                [
                    str(row.month),
                    f"{row.payment:.2f}",
                    f"{row.principal:.2f}",
                    f"{row.interest:.2f}",
                    f"{row.balance:.2f}",
                    f"{row.cumulative_interest:.2f}",
                ]
            )
        )
        printed += 1
    return printed


def print_scenarios(scenarios: ScenarioSet) -> None:
    """Print every scenario side by side.

    The ``Diff`` columns show the change against the base scenario; a
    negative total interest difference means the scenario is cheaper.
    """
    print("Scenarios")
    print("=" * 96)
    print(
        f"{'Scenario':14s} {'Term':>6s} {'Extra':>10s} {'Payment':>12s} "
        f"{'Interest':>14s} {'Diff':>12s} {'Payoff':>7s} {'Saved':>12s}"
    )
    base = scenarios.base
    for label, summary in scenarios.items():
        diff = summary.total_interest - base.total_interest
        print(
            f"{label:14s} {summary.term_months:6d} {summary.extra_payment:10.2f} "
            f"{summary.monthly_payment:12.2f} {summary.total_interest:14.2f} "
            f"{diff:12.2f} {summary.payoff_time_months:7d} {summary.interest_saved:12.2f}"
        )
    print("=" * 96)
