"""Shared loan fixtures.

Reference loan: 1,000,000 at 3.5 % over 5 years (60 monthly payments),
which totals 1,091,504.72 without overpayments.
"""

import pytest
from decimal import Decimal

from amortize.data_models import LoanConfig, LoanConfigBuilder


@pytest.fixture
def reference_builder() -> LoanConfigBuilder:
    return (
        LoanConfigBuilder()
        .set_principal(1000000)
        .set_interest_rate(3.5)
        .set_term(60)
    )


@pytest.fixture
def reference_loan(reference_builder) -> LoanConfig:
    return reference_builder.build()


@pytest.fixture
def small_loan() -> LoanConfig:
    """20 at 50 % over 12 months."""
    return LoanConfig(principal=Decimal("20"), rate=Decimal("50"), term=12)
