from decimal import Decimal

import pytest

from amortizer.data_models import LoanInput


@pytest.fixture
def mortgage() -> LoanInput:
    """250k over 30 years at 3.5 %, no down or extra payment."""
    return LoanInput(principal=Decimal("250000"), rate=Decimal("3.5"), term=360)


@pytest.fixture
def interest_free_loan() -> LoanInput:
    return LoanInput(principal=Decimal("10000"), rate=Decimal("0"), term=12)


@pytest.fixture
def car_loan() -> LoanInput:
    """10k over 5 years at 5 % with 2k down."""
    return LoanInput(
        principal=Decimal("10000"),
        rate=Decimal("5"),
        term=60,
        down_payment=Decimal("2000"),
    )
