"""Exception classes raised by the amortization engine.

Every error derives from ``AmortizerError`` which keeps a human readable
message together with a ``context`` dictionary describing the offending
values. Callers (the CLI, or any other front end) decide how to present them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AmortizerError(Exception):
    """Base class for all engine errors.

    Attributes
    ----------
    message: str
        Description of the failure.
    context: dict
        Values that caused the failure, e.g. ``{"field": "term", "value": 0}``.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InvalidInputError(AmortizerError, ValueError):
    """A loan input field violates its constraint.

    Raised for a non-positive principal, a rate outside ``[0, 100]``, a term
    shorter than one month, negative down or extra payments, and a down
    payment that leaves nothing to finance.
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(f"Invalid {field}: {reason}", {"field": field, "value": value})
        self.field = field
        self.value = value


class NonAmortizingError(AmortizerError):
    """The periodic payment does not exceed the interest accruing each period.

    Such a loan never reaches a zero balance.
    """

    def __init__(self, payment: Any, interest: Any) -> None:
        super().__init__(
            "Payment does not cover the interest accruing each period",
            {"payment": payment, "interest": interest},
        )
        self.payment = payment
        self.interest = interest


class ArithmeticOverflowError(AmortizerError, ArithmeticError):
    """The inputs combine into a result outside the representable range."""
