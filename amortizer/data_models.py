"""Data models for the amortization engine.

This module defines the dataclasses exchanged with the engine: the loan
input, the summary of a loan, a single row of the amortization schedule and
the fixed set of comparison scenarios. All of them are immutable; the engine
creates fresh instances for every call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Tuple

from .exceptions import InvalidInputError
from .utils import to_decimal


# Scenario labels and the deltas applied to the base loan for each of them.
EXTRA_PAYMENT_SCENARIOS: Dict[str, Decimal] = {
    "extra_100": Decimal("100"),
    "extra_200": Decimal("200"),
}
TERM_DELTA_MONTHS = 60
MIN_TERM_MONTHS = 12
SCENARIO_LABELS: Tuple[str, ...] = (
    "base",
    "extra_100",
    "extra_200",
    "shorter_term",
    "longer_term",
)


@dataclass(frozen=True)
class LoanInput:
    """Parameters of a fixed-rate loan.

    Attributes
    ----------
    principal: Decimal
        Face value of the loan *before* the down payment.
    rate: Decimal
        Annual nominal interest rate in percent (``3.5`` means 3.5 %).
    term: int
        Number of scheduled monthly installments.
    down_payment: Decimal
        Amount paid up front; reduces the financed amount.
    extra_payment: Decimal
        Additional amount applied to principal every month on top of the
        scheduled payment.

    Numbers may be given as ``int``, ``float``, ``str`` or ``Decimal``; they
    are converted to ``Decimal`` once, at construction. ``None`` for either
    optional payment means zero.
    """

    principal: Decimal
    rate: Decimal
    term: int
    down_payment: Optional[Decimal] = None
    extra_payment: Optional[Decimal] = None

    def __post_init__(self) -> None:
        for name in ("principal", "rate", "down_payment", "extra_payment"):
            value = getattr(self, name)
            if value is None and name in ("down_payment", "extra_payment"):
                value = Decimal("0")
            try:
                converted = to_decimal(value)
            except ValueError as exc:
                raise InvalidInputError(name, value, "not a number") from exc
            object.__setattr__(self, name, converted)

    @property
    def loan_amount(self) -> Decimal:
        """Amount actually financed (principal minus down payment)."""
        return self.principal - self.down_payment

    def replace(self, **changes: Any) -> "LoanInput":
        """Return a copy of the loan with ``changes`` applied."""
        return replace(self, **changes)


@dataclass(frozen=True)
class LoanSummary:
    """Aggregate figures of a loan, rounded for presentation.

    ``monthly_payment``, ``total_payment`` and ``total_interest`` describe the
    baseline loan without extra payments over the full term.
    ``payoff_time_months`` and ``interest_saved`` describe the effect of
    paying ``monthly_payment + extra_payment`` every month.
    """

    loan_amount: Decimal
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    payoff_time_months: int
    interest_saved: Decimal
    effective_rate: Decimal
    term_months: int
    down_payment: Decimal
    extra_payment: Decimal

    @property
    def months_saved(self) -> int:
        """Months by which the extra payment shortens the term."""
        return self.term_months - self.payoff_time_months

    def to_dict(self) -> Dict[str, Any]:
        """Return the summary as a plain dict, ``months_saved`` included."""
        data = asdict(self)
        data["months_saved"] = self.months_saved
        return data


@dataclass(frozen=True)
class AmortizationRow:
    """One month of the amortization schedule.

    ``payment`` is the scheduled payment plus the extra payment. On the final
    row ``principal`` is clipped to the outstanding balance, so
    ``principal + interest`` may be lower than ``payment`` there.

    Figures are rounded to cents. ``principal`` is the drop of the rounded
    balance, so on other rows ``principal + interest`` can differ from
    ``payment`` by a cent.
    """

    month: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    cumulative_interest: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Return the row as a plain dict."""
        return asdict(self)


@dataclass(frozen=True)
class ScenarioSet:
    """Summaries of the base loan and its fixed comparison variants."""

    base: LoanSummary
    extra_100: LoanSummary
    extra_200: LoanSummary
    shorter_term: LoanSummary
    longer_term: LoanSummary

    def __getitem__(self, label: str) -> LoanSummary:
        if label not in SCENARIO_LABELS:
            raise KeyError(label)
        return getattr(self, label)

    def __iter__(self) -> Iterator[str]:
        return (f.name for f in fields(self))

    def __len__(self) -> int:
        return len(SCENARIO_LABELS)

    def items(self) -> Iterator[Tuple[str, LoanSummary]]:
        for label in self:
            yield label, self[label]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {label: summary.to_dict() for label, summary in self.items()}
