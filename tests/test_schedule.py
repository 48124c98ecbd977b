"""Tests for amortization schedule generation."""
from decimal import Decimal, localcontext
from itertools import islice

import pytest

from amortizer.data_models import LoanInput
from amortizer.engine import AmortizationSchedule, build_schedule, compute_summary
from amortizer.exceptions import ArithmeticOverflowError, InvalidInputError, NonAmortizingError

CENT = Decimal("0.01")


def test_interest_free_schedule_has_one_row_per_month(interest_free_loan):
    rows = list(build_schedule(interest_free_loan))
    assert len(rows) == 12
    assert [row.month for row in rows] == list(range(1, 13))
    assert all(row.interest == 0 for row in rows)
    assert all(row.payment == Decimal("833.33") for row in rows)
    assert rows[-1].balance == Decimal("0.00")
    assert sum(row.principal for row in rows) == Decimal("10000.00")


def test_mortgage_schedule_closes_at_term(mortgage):
    rows = list(build_schedule(mortgage))
    assert len(rows) == 360
    assert rows[-1].month == 360
    assert rows[-1].balance == Decimal("0.00")
    assert abs(sum(row.principal for row in rows) - Decimal("250000")) <= CENT


def test_first_row_of_mortgage(mortgage):
    first = next(iter(build_schedule(mortgage)))
    assert first.month == 1
    assert first.payment == Decimal("1122.61")
    assert first.interest == Decimal("729.17")
    assert abs(first.principal + first.interest - first.payment) <= CENT
    assert first.balance == Decimal("250000.00") - first.principal
    assert first.cumulative_interest == first.interest


def test_balance_never_increases(mortgage):
    rows = list(build_schedule(mortgage.replace(extra_payment=Decimal("350"))))
    balances = [row.balance for row in rows]
    assert balances == sorted(balances, reverse=True)
    assert balances[-1] == 0
    assert all(row.balance >= 0 for row in rows)


def test_payment_split_between_principal_and_interest(mortgage):
    rows = list(build_schedule(mortgage.replace(extra_payment=Decimal("200"))))
    for row in rows[:-1]:
        assert abs(row.principal + row.interest - row.payment) <= Decimal("0.02")
    last = rows[-1]
    assert last.principal + last.interest <= last.payment + CENT


def test_cumulative_interest_tracks_interest_column(mortgage):
    rows = list(build_schedule(mortgage))
    running = Decimal("0")
    for row in rows:
        running += row.interest
        # Each interest figure is rounded on its own.
        assert abs(running - row.cumulative_interest) <= Decimal("0.005") * row.month + CENT
    summary = compute_summary(mortgage)
    assert abs(rows[-1].cumulative_interest - summary.total_interest) <= CENT


def test_extra_payment_stops_early_at_payoff_time(mortgage):
    loan = mortgage.replace(extra_payment=Decimal("200"))
    summary = compute_summary(loan)
    rows = list(build_schedule(loan))
    assert len(rows) == summary.payoff_time_months
    assert len(rows) < 360
    assert rows[-1].balance == 0
    assert rows[-1].principal <= rows[-1].payment
    assert rows[0].payment == summary.monthly_payment + Decimal("200")


def test_sub_cent_residual_gets_its_own_row():
    # Three payments of 333.332 leave 0.004 owing.
    loan = LoanInput(principal=1000, rate=0, term=4, extra_payment="83.332")
    rows = list(build_schedule(loan))
    assert len(rows) == compute_summary(loan).payoff_time_months == 4
    assert rows[2].balance == Decimal("0.00")
    last = rows[-1]
    assert last.principal == Decimal("0.00")
    assert last.principal <= last.payment
    assert last.balance == 0
    assert sum(row.principal for row in rows) == Decimal("1000.00")


def test_interest_saved_matches_schedule(mortgage):
    loan = mortgage.replace(extra_payment=Decimal("200"))
    summary = compute_summary(loan)
    rows = list(build_schedule(loan))
    saved = summary.total_interest - rows[-1].cumulative_interest
    assert abs(saved - summary.interest_saved) <= Decimal("0.02")


def test_schedule_uses_financed_amount(car_loan):
    rows = list(build_schedule(car_loan))
    assert len(rows) == 60
    # 8000 * 5 % / 12
    assert rows[0].interest == Decimal("33.33")
    assert rows[0].payment == Decimal("150.97")
    assert abs(sum(row.principal for row in rows) - Decimal("8000")) <= CENT


def test_schedule_is_restartable(mortgage):
    schedule = build_schedule(mortgage)
    assert list(schedule) == list(schedule)


def test_schedule_is_lazy(mortgage):
    schedule = build_schedule(mortgage.replace(term=1200))
    first = list(islice(schedule, 3))
    assert [row.month for row in first] == [1, 2, 3]


def test_single_month_term():
    rows = list(build_schedule(LoanInput(principal=1200, rate=12, term=1)))
    assert len(rows) == 1
    assert rows[0].principal == Decimal("1200.00")
    assert rows[0].interest == Decimal("12.00")
    assert rows[0].payment == Decimal("1212.00")
    assert rows[0].balance == 0


def test_huge_extra_payment_repays_in_first_month():
    rows = list(build_schedule(LoanInput(principal=1000, rate=6, term=24, extra_payment=5000)))
    assert len(rows) == 1
    assert rows[0].principal == Decimal("1000.00")
    assert rows[0].interest == Decimal("5.00")
    assert rows[0].balance == 0


def test_invalid_input_fails_before_iteration():
    with pytest.raises(InvalidInputError) as excinfo:
        build_schedule(LoanInput(principal=1000, rate=5, term=0))
    assert excinfo.value.field == "term"


def test_non_amortizing_loan_fails_fast():
    loan = LoanInput(principal=1000, rate=100, term=2000)
    with pytest.raises(NonAmortizingError):
        build_schedule(loan)


def test_schedule_guards_against_growing_balance():
    schedule = AmortizationSchedule(
        loan_amount=Decimal("1000"),
        monthly_rate=Decimal("0.01"),
        payment=Decimal("5"),
        term=360,
    )
    with pytest.raises(NonAmortizingError):
        next(iter(schedule))


def test_schedule_hard_stops_at_term():
    # A payment that is too small to repay in time still ends at the term.
    schedule = AmortizationSchedule(
        loan_amount=Decimal("1000"),
        monthly_rate=Decimal("0.01"),
        payment=Decimal("20"),
        term=12,
    )
    rows = list(schedule)
    assert len(rows) == 12
    assert rows[-1].balance > 0


def test_schedule_overflow_reported_as_arithmetic_error():
    with pytest.raises(ArithmeticOverflowError):
        build_schedule(LoanInput(principal=Decimal("1e30"), rate=5, term=12))


def test_direct_schedule_overflow_reported_as_arithmetic_error():
    schedule = AmortizationSchedule(
        loan_amount=Decimal("1e30"),
        monthly_rate=Decimal("0.01"),
        payment=Decimal("2e28"),
        term=12,
    )
    with pytest.raises(ArithmeticOverflowError):
        next(iter(schedule))


def test_schedule_ignores_caller_precision(mortgage):
    expected = list(build_schedule(mortgage))
    with localcontext() as ctx:
        ctx.prec = 6
        rows = list(build_schedule(mortgage))
        summary = compute_summary(mortgage)
    assert rows == expected
    assert summary == compute_summary(mortgage)
