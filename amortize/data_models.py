"""Data models for the amortization calculator.

This module defines dataclasses representing the entities used by the
calculator: overpayments, the overall loan configuration (and the builder that
assembles it) and individual schedule records. All of them are frozen so a
schedule, once computed, cannot drift from the inputs that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .exceptions import InvalidConfiguration
from .utils import Number, round_money, to_decimal


# 100 years of monthly payments.
MAX_TERM_MONTHS = 1200


class OverpaymentMode(str, Enum):
    """How an overpayment affects the rest of the schedule."""

    REDUCE_MONTHLY_PAYMENT = "reduceMonthlyPayment"
    REDUCE_LOAN_TERM = "reduceLoanTerm"

    @classmethod
    def parse(cls, value: Union[str, "OverpaymentMode"]) -> "OverpaymentMode":
        """Accept the canonical names plus the short ``installment``/``term`` aliases."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        aliases = {
            "installment": cls.REDUCE_MONTHLY_PAYMENT,
            "payment": cls.REDUCE_MONTHLY_PAYMENT,
            "term": cls.REDUCE_LOAN_TERM,
        }
        if key.lower() in aliases:
            return aliases[key.lower()]
        for mode in cls:
            if key == mode.value or key.upper() == mode.name:
                return mode
        raise InvalidConfiguration(
            f"Overpayment mode must be 'reduceMonthlyPayment' or 'reduceLoanTerm'; got {value!r}"
        )


@dataclass(frozen=True)
class Overpayment:
    """Represents an extra payment applied to the principal.

    Attributes
    ----------
    amount: Decimal
        The amount of additional money applied to the principal. Must be
        positive.
    mode: OverpaymentMode
        ``REDUCE_LOAN_TERM`` keeps the monthly payment constant so the loan
        is paid off sooner. ``REDUCE_MONTHLY_PAYMENT`` re-amortizes the
        remaining balance over the remaining term, lowering future payments.
    """

    amount: Decimal
    mode: OverpaymentMode = OverpaymentMode.REDUCE_LOAN_TERM

    def __post_init__(self) -> None:
        try:
            amount = to_decimal(self.amount)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc
        if amount <= 0:
            raise InvalidConfiguration(f"Overpayment amount must be positive; got {amount}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "mode", OverpaymentMode.parse(self.mode))

    def get_amount(self) -> Decimal:
        return self.amount

    def reduces_monthly_payment(self) -> bool:
        return self.mode is OverpaymentMode.REDUCE_MONTHLY_PAYMENT


@dataclass(frozen=True)
class LoanConfig:
    """Configuration of a loan.

    ``rate`` is the annual nominal interest rate in percent (``50`` means
    50 %). ``overpayments`` maps a 1-based month index to the overpayments
    made in that month, in the order they were added. When ``start_date`` is
    set, every schedule record also carries its calendar date.
    """

    principal: Decimal
    rate: Decimal
    term: int
    overpayments: Mapping[int, Tuple[Overpayment, ...]] = field(default_factory=dict, hash=False)
    start_date: Optional[date] = None

    def __post_init__(self) -> None:
        try:
            principal = to_decimal(self.principal)
            rate = to_decimal(self.rate)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc
        if principal < 0:
            raise InvalidConfiguration(f"Principal must not be negative; got {principal}")
        if rate < 0:
            raise InvalidConfiguration(f"Interest rate must not be negative; got {rate}")
        if isinstance(self.term, bool) or not isinstance(self.term, int) or self.term <= 0:
            raise InvalidConfiguration(f"Term must be a positive number of months; got {self.term!r}")
        if self.term > MAX_TERM_MONTHS:
            raise InvalidConfiguration(f"Term must not exceed {MAX_TERM_MONTHS} months; got {self.term}")

        overpayments: Dict[int, Tuple[Overpayment, ...]] = {}
        for month, items in self.overpayments.items():
            if isinstance(month, bool) or not isinstance(month, int) or month < 1:
                raise InvalidConfiguration(f"Overpayment month must be a positive integer; got {month!r}")
            for item in items:
                if not isinstance(item, Overpayment):
                    raise InvalidConfiguration(f"Expected an Overpayment; got {item!r}")
            if items:
                overpayments[month] = tuple(items)

        object.__setattr__(self, "principal", principal)
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "overpayments", MappingProxyType(overpayments))

    @property
    def rate_per_month(self) -> Decimal:
        return self.rate / Decimal(12) / Decimal(100)

    def overpayments_for(self, month: int) -> Tuple[Overpayment, ...]:
        return self.overpayments.get(month, ())

    def has_overpayments(self) -> bool:
        return bool(self.overpayments)

    def reduces_term(self) -> bool:
        """Return True if any overpayment keeps the payment and shortens the loan."""
        return any(
            not op.reduces_monthly_payment()
            for items in self.overpayments.values()
            for op in items
        )

    def without_overpayments(self) -> "LoanConfig":
        return LoanConfig(
            principal=self.principal,
            rate=self.rate,
            term=self.term,
            start_date=self.start_date,
        )


class LoanConfigBuilder:
    """Fluent assembly of a :class:`LoanConfig`.

    Setters may be called in any order; nothing is validated until
    :meth:`build`, which returns an immutable configuration.
    """

    def __init__(self) -> None:
        self._principal: Number = Decimal("0")
        self._rate: Number = Decimal("0")
        self._term: int = 0
        self._start_date: Optional[date] = None
        self._overpayments: Dict[int, List[Overpayment]] = {}

    def set_principal(self, amount: Number) -> "LoanConfigBuilder":
        self._principal = amount
        return self

    def set_interest_rate(self, percent: Number) -> "LoanConfigBuilder":
        self._rate = percent
        return self

    def set_term(self, months: int) -> "LoanConfigBuilder":
        self._term = months
        return self

    def set_start_date(self, start: Optional[date]) -> "LoanConfigBuilder":
        self._start_date = start
        return self

    def add_overpayment(self, month: int, overpayment: Overpayment) -> "LoanConfigBuilder":
        self._overpayments.setdefault(month, []).append(overpayment)
        return self

    def build(self) -> LoanConfig:
        return LoanConfig(
            principal=self._principal,
            rate=self._rate,
            term=self._term,
            overpayments={month: tuple(items) for month, items in self._overpayments.items()},
            start_date=self._start_date,
        )


@dataclass(frozen=True)
class MonthRecord:
    """One month of an amortization schedule.

    Amounts are already rounded to cents by the engine. ``date`` is only set
    when the loan was configured with a start date.
    """

    payment_number: int
    principal_due: Decimal
    interest_due: Decimal
    opening_balance: Decimal
    closing_balance: Decimal
    overpayments: Tuple[Overpayment, ...] = ()
    date: Optional[date] = None

    def total_amount_due(self) -> Decimal:
        return round_money(self.principal_due + self.interest_due)

    def total_overpayments(self) -> Decimal:
        return round_money(sum((op.amount for op in self.overpayments), Decimal("0")))
