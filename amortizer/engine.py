"""Core calculation engine for the amortization calculator.

This module implements the financial logic of a fixed-rate annuity loan:
the monthly payment, a month-by-month amortization schedule, the payoff time
when an extra payment is added every month, the interest saved by doing so
and a fixed set of comparison scenarios.

All arithmetic uses ``Decimal`` at 28 significant digits inside a local
context, so the engine never touches the caller's decimal context and holds
no state between calls. Results are rounded half away from zero: money to
cents and the rate to three decimal places.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import (
    ROUND_CEILING,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Iterator, Union

from .data_models import (
    EXTRA_PAYMENT_SCENARIOS,
    MIN_TERM_MONTHS,
    TERM_DELTA_MONTHS,
    AmortizationRow,
    LoanInput,
    LoanSummary,
    ScenarioSet,
)
from .exceptions import ArithmeticOverflowError, InvalidInputError, NonAmortizingError
from .utils import round_money, round_rate, to_decimal

_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)
MAX_RATE = Decimal("100")
HALF_CENT = Decimal("0.005")
# Payoff periods are snapped to this quantum before the ceiling so that
# arithmetic noise around a whole number does not add a month.
PAYOFF_QUANTUM = Decimal("1e-9")

DecimalLike = Union[Decimal, int, float, str]


@contextmanager
def _arithmetic() -> Iterator[None]:
    with localcontext(_CONTEXT):
        try:
            yield
        except (Overflow, InvalidOperation) as exc:
            raise ArithmeticOverflowError(
                "Loan figures exceed the representable range"
            ) from exc


def validate_input(loan: LoanInput) -> None:
    """Check every field of ``loan`` and raise ``InvalidInputError`` on the first violation."""
    if isinstance(loan.term, bool) or not isinstance(loan.term, int):
        raise InvalidInputError("term", loan.term, "must be a whole number of months")
    if loan.principal <= 0:
        raise InvalidInputError("principal", loan.principal, "must be positive")
    if loan.rate < 0 or loan.rate > MAX_RATE:
        raise InvalidInputError("rate", loan.rate, "must be between 0 and 100 percent")
    if loan.term < 1:
        raise InvalidInputError("term", loan.term, "must be at least one month")
    if loan.down_payment < 0:
        raise InvalidInputError("down_payment", loan.down_payment, "must not be negative")
    if loan.extra_payment < 0:
        raise InvalidInputError("extra_payment", loan.extra_payment, "must not be negative")
    if loan.down_payment >= loan.principal:
        raise InvalidInputError(
            "down_payment", loan.down_payment, "leaves no amount to finance"
        )


def _as_decimal(name: str, value: DecimalLike) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise InvalidInputError(name, value, "not a number") from exc


def monthly_rate_for(rate: Decimal) -> Decimal:
    """Convert an annual rate in percent into a monthly decimal rate."""
    return (rate / Decimal(100)) / Decimal(12)


def calculate_annuity_payment(principal: Decimal, monthly_rate: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    evaluated here in the equivalent form ``P * i / (1 - (1 + i)^-n)``, where
    ``P`` is the principal, ``i`` is the monthly interest rate and ``n`` is
    the number of payments. When the interest rate is zero, the payment
    simplifies to ``P / n``.
    """
    if term <= 0:
        raise InvalidInputError("term", term, "must be at least one month")
    if monthly_rate == 0:
        return principal / Decimal(term)
    factor = (1 + monthly_rate) ** term
    return principal * monthly_rate / (1 - 1 / factor)


def payoff_time(principal: DecimalLike, monthly_rate: DecimalLike, payment: DecimalLike) -> int:
    """Return the number of months needed to repay ``principal``.

    Paying ``payment`` every month, the balance reaches zero after

        n = -ln(1 - P * i / A) / ln(1 + i)

    months (``P / A`` when ``i`` is zero), rounded up to a whole month.

    Raises
    ------
    InvalidInputError
        If an argument is not a number.
    NonAmortizingError
        If ``payment`` does not exceed the interest on ``principal``.
    """
    principal = _as_decimal("principal", principal)
    monthly_rate = _as_decimal("monthly_rate", monthly_rate)
    payment = _as_decimal("payment", payment)
    with _arithmetic():
        interest = principal * monthly_rate
        if payment <= 0 or payment <= interest:
            raise NonAmortizingError(payment, interest)
        if monthly_rate == 0:
            periods = principal / payment
        else:
            periods = -(1 - interest / payment).ln() / (1 + monthly_rate).ln()
        periods = periods.quantize(PAYOFF_QUANTUM)
        return int(periods.to_integral_value(rounding=ROUND_CEILING))


def total_interest_at_payment(
    principal: DecimalLike,
    monthly_rate: DecimalLike,
    payment: DecimalLike,
    months: int,
) -> Decimal:
    """Return the interest paid when ``payment`` is made for ``months`` months.

    This is ``payment * months - principal`` less whatever part of the last
    payment exceeds the balance still owed, so a final partial installment is
    not counted as interest. ``months`` is expected to be the payoff time for
    ``payment``; when the loan is not yet repaid after ``months`` the result
    is the plain ``payment * months - principal``.
    """
    principal = _as_decimal("principal", principal)
    monthly_rate = _as_decimal("monthly_rate", monthly_rate)
    payment = _as_decimal("payment", payment)
    with _arithmetic():
        paid_interest = payment * months - principal
        if months < 1:
            return paid_interest
        if monthly_rate == 0:
            balance = principal - payment * (months - 1)
        else:
            growth = (1 + monthly_rate) ** (months - 1)
            balance = principal * growth - payment * (growth - 1) / monthly_rate
        final_due = balance * (1 + monthly_rate)
        overshoot = min(max(payment - final_due, Decimal("0")), payment)
        return paid_interest - overshoot


def compute_summary(loan: LoanInput) -> LoanSummary:
    """Compute the payment, totals, payoff time and interest saved for ``loan``.

    Parameters
    ----------
    loan: LoanInput
        The loan parameters. ``principal`` is the amount *before* the down
        payment; the down payment reduces the financed amount.

    Returns
    -------
    LoanSummary
        ``monthly_payment``, ``total_payment`` and ``total_interest`` describe
        the loan without extra payments over the full term.
        ``payoff_time_months`` is the number of months needed when
        ``extra_payment`` is added to every payment (equal to the term when
        there is no extra payment) and ``interest_saved`` is the interest
        avoided that way.

    Raises
    ------
    InvalidInputError
        If a field of ``loan`` is out of range.
    NonAmortizingError
        If the payment does not cover the monthly interest.
    ArithmeticOverflowError
        If the figures exceed the representable range.
    """
    validate_input(loan)
    with _arithmetic():
        loan_amount = loan.loan_amount
        monthly_rate = monthly_rate_for(loan.rate)
        monthly_payment = calculate_annuity_payment(loan_amount, monthly_rate, loan.term)
        total_payment = monthly_payment * loan.term
        total_interest = total_payment - loan_amount

        payment = monthly_payment + loan.extra_payment
        payoff = payoff_time(loan_amount, monthly_rate, payment)
        interest_saved = total_interest - total_interest_at_payment(
            loan_amount, monthly_rate, payment, payoff
        )

        return LoanSummary(
            loan_amount=round_money(loan_amount),
            monthly_payment=round_money(monthly_payment),
            total_payment=round_money(total_payment),
            total_interest=round_money(total_interest),
            payoff_time_months=payoff,
            interest_saved=round_money(interest_saved),
            effective_rate=round_rate(loan.rate),
            term_months=loan.term,
            down_payment=round_money(loan.down_payment),
            extra_payment=round_money(loan.extra_payment),
        )


class AmortizationSchedule:
    """Month-by-month amortization schedule of a loan.

    The schedule is lazy and restartable: rows are computed one at a time
    while iterating and every new iteration starts again at month 1. It ends
    on the row that brings the balance to zero, or at the last month of the
    term, whichever comes first.
    """

    def __init__(self, loan_amount: Decimal, monthly_rate: Decimal, payment: Decimal, term: int) -> None:
        self.loan_amount = loan_amount
        self.monthly_rate = monthly_rate
        self.payment = payment
        self.term = term

    def __iter__(self) -> Iterator[AmortizationRow]:
        balance = self.loan_amount
        with _arithmetic():
            shown_balance = round_money(balance)
        cumulative_interest = Decimal("0")
        for month in range(1, self.term + 1):
            with _arithmetic():
                interest = balance * self.monthly_rate
                if self.payment <= interest:
                    raise NonAmortizingError(round_money(self.payment), round_money(interest))
                balance -= min(self.payment - interest, balance)
                # A sub-cent residual left on the last month is written off.
                if month == self.term and balance < HALF_CENT:
                    balance = Decimal("0")
                cumulative_interest += interest
                # The principal column is the drop of the rounded balance, so it
                # always adds up to the loan amount.
                previous_balance, shown_balance = shown_balance, round_money(balance)
                row = AmortizationRow(
                    month=month,
                    payment=round_money(self.payment),
                    principal=previous_balance - shown_balance,
                    interest=round_money(interest),
                    balance=shown_balance,
                    cumulative_interest=round_money(cumulative_interest),
                )
            yield row
            if balance <= 0:
                return

    def __repr__(self) -> str:
        return (
            f"AmortizationSchedule(loan_amount={self.loan_amount}, "
            f"payment={self.payment}, term={self.term})"
        )


def build_schedule(loan: LoanInput) -> AmortizationSchedule:
    """Return the amortization schedule of ``loan``.

    Every row pays ``monthly_payment + extra_payment``; interest accrues on
    the outstanding balance and the rest reduces it. The schedule has one row
    per month of the payoff time reported by ``compute_summary``.

    The input is validated and the payment computed immediately, so errors
    surface here rather than halfway through the iteration.
    """
    validate_input(loan)
    with _arithmetic():
        loan_amount = loan.loan_amount
        # Fails early when the amount cannot be shown in cents.
        round_money(loan_amount)
        monthly_rate = monthly_rate_for(loan.rate)
        monthly_payment = calculate_annuity_payment(loan_amount, monthly_rate, loan.term)
        payment = monthly_payment + loan.extra_payment
        months = min(payoff_time(loan_amount, monthly_rate, payment), loan.term)
    return AmortizationSchedule(loan_amount, monthly_rate, payment, months)


def compute_scenarios(loan: LoanInput) -> ScenarioSet:
    """Summarize ``loan`` alongside its standard comparison variants.

    The variants add a fixed extra payment of 100 or 200 every month, or
    shorten/lengthen the term by 60 months (never below 12 months). The first
    failing computation propagates its error.
    """
    base = compute_summary(loan)
    extra = {
        label: compute_summary(loan.replace(extra_payment=amount))
        for label, amount in EXTRA_PAYMENT_SCENARIOS.items()
    }
    shorter_term = compute_summary(
        loan.replace(term=max(MIN_TERM_MONTHS, loan.term - TERM_DELTA_MONTHS))
    )
    longer_term = compute_summary(loan.replace(term=loan.term + TERM_DELTA_MONTHS))
    return ScenarioSet(
        base=base,
        shorter_term=shorter_term,
        longer_term=longer_term,
        **extra,
    )
