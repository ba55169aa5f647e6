from datetime import date
from decimal import Decimal

import pytest

from amortize.data_models import (
    MAX_TERM_MONTHS,
    LoanConfig,
    LoanConfigBuilder,
    MonthRecord,
    Overpayment,
    OverpaymentMode,
)
from amortize.exceptions import InvalidConfiguration


class TestOverpayment:
    def test_amount_is_decimal(self):
        op = Overpayment(5000.0, OverpaymentMode.REDUCE_LOAN_TERM)
        assert op.get_amount() == Decimal("5000.0")
        assert isinstance(op.amount, Decimal)

    def test_mode_predicate(self):
        assert Overpayment(Decimal("1"), OverpaymentMode.REDUCE_MONTHLY_PAYMENT).reduces_monthly_payment()
        assert not Overpayment(Decimal("1"), OverpaymentMode.REDUCE_LOAN_TERM).reduces_monthly_payment()

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("reduceMonthlyPayment", OverpaymentMode.REDUCE_MONTHLY_PAYMENT),
            ("installment", OverpaymentMode.REDUCE_MONTHLY_PAYMENT),
            ("reduceLoanTerm", OverpaymentMode.REDUCE_LOAN_TERM),
            ("TERM", OverpaymentMode.REDUCE_LOAN_TERM),
            ("REDUCE_LOAN_TERM", OverpaymentMode.REDUCE_LOAN_TERM),
        ],
    )
    def test_mode_parsing(self, value, expected):
        assert Overpayment(Decimal("10"), value).mode is expected

    def test_unknown_mode(self):
        with pytest.raises(InvalidConfiguration):
            Overpayment(Decimal("10"), "refinance")

    @pytest.mark.parametrize("amount", [0, -1, "abc"])
    def test_amount_must_be_positive_number(self, amount):
        with pytest.raises(InvalidConfiguration):
            Overpayment(amount, OverpaymentMode.REDUCE_LOAN_TERM)

    def test_is_immutable(self):
        op = Overpayment(Decimal("10"))
        with pytest.raises(AttributeError):
            op.amount = Decimal("20")


class TestLoanConfig:
    @pytest.mark.parametrize(
        "principal, rate, term",
        [
            (Decimal("-1"), Decimal("5"), 12),
            (Decimal("100"), Decimal("-0.5"), 12),
            (Decimal("100"), Decimal("5"), 0),
            (Decimal("100"), Decimal("5"), -3),
            (Decimal("100"), Decimal("5"), 12.5),
        ],
    )
    def test_rejects_invalid_parameters(self, principal, rate, term):
        with pytest.raises(InvalidConfiguration):
            LoanConfig(principal=principal, rate=rate, term=term)

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            LoanConfig(principal=Decimal("100"), rate=Decimal("5"), term=0)

    def test_rejects_month_zero(self):
        with pytest.raises(InvalidConfiguration):
            LoanConfig(
                principal=Decimal("100"),
                rate=Decimal("5"),
                term=12,
                overpayments={0: (Overpayment(Decimal("1")),)},
            )

    def test_rate_per_month(self):
        config = LoanConfig(principal=Decimal("100"), rate=Decimal("12"), term=12)
        assert config.rate_per_month == Decimal("0.01")

    def test_overpayments_are_read_only(self):
        config = LoanConfig(
            principal=Decimal("100"),
            rate=Decimal("5"),
            term=12,
            overpayments={3: (Overpayment(Decimal("1")),)},
        )
        with pytest.raises(TypeError):
            config.overpayments[4] = ()

    def test_without_overpayments(self):
        config = LoanConfig(
            principal=Decimal("100"),
            rate=Decimal("5"),
            term=12,
            overpayments={3: (Overpayment(Decimal("1")),)},
            start_date=date(2025, 1, 1),
        )
        plain = config.without_overpayments()
        assert not plain.has_overpayments()
        assert plain.start_date == date(2025, 1, 1)
        assert config.has_overpayments()
        assert config.reduces_term()


class TestLoanConfigBuilder:
    def test_builds_config(self):
        config = LoanConfigBuilder().set_principal("20").set_interest_rate(50).set_term(12).build()
        assert config.principal == Decimal("20")
        assert config.rate == Decimal("50")
        assert config.term == 12
        assert config.start_date is None

    def test_term_is_required(self):
        with pytest.raises(InvalidConfiguration):
            LoanConfigBuilder().set_principal(100).build()

    def test_overpayment_order_is_preserved(self):
        first = Overpayment(Decimal("1"), OverpaymentMode.REDUCE_LOAN_TERM)
        second = Overpayment(Decimal("2"), OverpaymentMode.REDUCE_MONTHLY_PAYMENT)
        config = (
            LoanConfigBuilder()
            .set_principal(100)
            .set_term(12)
            .add_overpayment(4, first)
            .add_overpayment(4, second)
            .build()
        )
        assert config.overpayments_for(4) == (first, second)
        assert config.overpayments_for(5) == ()

    def test_build_does_not_share_state(self):
        builder = LoanConfigBuilder().set_principal(100).set_term(12)
        config = builder.build()
        builder.add_overpayment(2, Overpayment(Decimal("5")))
        assert not config.has_overpayments()


class TestMonthRecord:
    def test_derived_totals(self):
        record = MonthRecord(
            payment_number=1,
            principal_due=Decimal("1.32"),
            interest_due=Decimal("0.83"),
            opening_balance=Decimal("20"),
            closing_balance=Decimal("18.68"),
            overpayments=(Overpayment(Decimal("0.10")), Overpayment(Decimal("0.205"))),
        )
        assert record.total_amount_due() == Decimal("2.15")
        assert record.total_overpayments() == Decimal("0.31")

    def test_no_overpayments(self):
        record = MonthRecord(1, Decimal("1"), Decimal("0"), Decimal("1"), Decimal("0"))
        assert record.total_overpayments() == Decimal("0")
        assert record.date is None


class TestLoanConfigLimits:
    def test_rejects_term_beyond_limit(self):
        with pytest.raises(InvalidConfiguration):
            LoanConfig(principal=Decimal("100"), rate=Decimal("5"), term=10**9)

    def test_accepts_longest_term(self):
        config = LoanConfig(principal=Decimal("100"), rate=Decimal("5"), term=MAX_TERM_MONTHS)
        assert config.term == MAX_TERM_MONTHS

    def test_is_hashable(self):
        plain = LoanConfig(principal=Decimal("100"), rate=Decimal("5"), term=12)
        with_overpayment = LoanConfig(
            principal=Decimal("100"),
            rate=Decimal("5"),
            term=12,
            overpayments={3: (Overpayment(Decimal("1")),)},
        )
        assert hash(plain) == hash(LoanConfig(principal=Decimal("100"), rate=Decimal("5"), term=12))
        assert len({plain, with_overpayment}) == 2
