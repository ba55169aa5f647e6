"""Core calculation engine for the amortization calculator.

This module implements the financial logic required to build an annuity
(equal installment) amortization schedule. It supports overpayments that
either shorten the loan or lower the following payments. Results are returned
as a list of ``MonthRecord`` objects, optionally with a summary dictionary.

Every monetary value is rounded to cents at the moment it is produced, the way
a lender's statement would show it, so totals are reproducible to the cent.
"""

from __future__ import annotations

import logging
from decimal import Decimal, DecimalException
from typing import Dict, List, Optional, Tuple

from .data_models import LoanConfig, MonthRecord
from .exceptions import InvalidConfiguration, ScheduleDivergence
from .utils import add_months, round_money

logger = logging.getLogger(__name__)

# Upper bound on generated months, as a multiple of the configured term.
MAX_TERM_MULTIPLE = 10

ZERO = Decimal("0")


def compute_monthly_payment(principal: Decimal, rate_per_month: Decimal, months: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``. The result is rounded to cents.
    """
    if months <= 0:
        raise ValueError("Term must be positive")
    try:
        if rate_per_month == 0:
            return round_money(principal / Decimal(months))
        factor = (1 + rate_per_month) ** months
        return round_money(principal * ((rate_per_month * factor) / (factor - 1)))
    except DecimalException as exc:
        raise InvalidConfiguration(
            f"Monthly payment for {principal} over {months} months is out of range"
        ) from exc


class ScheduleCalculator:
    """Builds the month-by-month schedule for one :class:`LoanConfig`.

    A calculator holds no state besides its configuration, so the same
    instance can be asked for the schedule any number of times.
    """

    def __init__(self, config: LoanConfig) -> None:
        self.config = config

    @property
    def rate_per_month(self) -> Decimal:
        return self.config.rate_per_month

    def compute_monthly_payment(self, principal: Decimal, months: int) -> Decimal:
        return compute_monthly_payment(principal, self.rate_per_month, months)

    def generate_schedule(self) -> List[MonthRecord]:
        """Return the schedule, one record per month until the balance is cleared.

        Raises
        ------
        ScheduleDivergence
            If the balance is still outstanding after ``MAX_TERM_MULTIPLE``
            times the configured term.
        InvalidConfiguration
            If the amounts exceed what cent-precision arithmetic can hold.
        """
        try:
            return self._generate()
        except DecimalException as exc:
            raise InvalidConfiguration(
                f"Loan of {self.config.principal} at {self.config.rate}% is out of range"
            ) from exc

    def _generate(self) -> List[MonthRecord]:
        config = self.config
        term = config.term
        rate = self.rate_per_month
        balance = config.principal
        monthly_payment = self.compute_monthly_payment(balance, term)
        limit = term * MAX_TERM_MULTIPLE

        schedule: List[MonthRecord] = []
        month = 0
        while balance > 0:
            month += 1
            if month > limit:
                raise ScheduleDivergence(month - 1, balance)

            interest = round_money(balance * rate)
            # On the final month, or when the regular payment would overshoot,
            # the principal portion is whatever is left.
            if month == term or balance < monthly_payment - interest:
                principal_due = balance
                if month < term:
                    logger.debug("Loan paid off early in month %d of %d", month, term)
            else:
                principal_due = monthly_payment - interest

            opening_balance = balance
            balance -= principal_due

            overpayments = config.overpayments_for(month)
            if overpayments:
                balance -= round_money(sum((op.amount for op in overpayments), ZERO))
                if balance < 0:
                    balance = ZERO
                remaining = term - month
                if any(op.reduces_monthly_payment() for op in overpayments) and remaining > 0 and balance > 0:
                    monthly_payment = self.compute_monthly_payment(balance, remaining)
                    logger.debug(
                        "Monthly payment recalculated to %s over %d remaining months after month %d",
                        monthly_payment,
                        remaining,
                        month,
                    )

            schedule.append(
                MonthRecord(
                    payment_number=month,
                    principal_due=principal_due,
                    interest_due=interest,
                    opening_balance=opening_balance,
                    closing_balance=balance,
                    overpayments=overpayments,
                    date=add_months(config.start_date, month - 1) if config.start_date else None,
                )
            )

        return schedule

    def total_amount_due_over_term(self, schedule: Optional[List[MonthRecord]] = None) -> Decimal:
        """Return the sum of every scheduled payment, excluding overpayments.

        With a zero interest rate this is the principal itself.
        """
        if self.config.rate == 0:
            return self.config.principal
        if schedule is None:
            schedule = self.generate_schedule()
        return round_money(sum((m.total_amount_due() for m in schedule), ZERO))


def summarize(config: LoanConfig, schedule: List[MonthRecord]) -> Dict[str, object]:
    """Return aggregate metrics for a computed schedule.

    When the loan carries overpayments, a ``comparison`` block reports the
    interest and months saved against the same loan without them.
    """
    calculator = ScheduleCalculator(config)
    total_interest = round_money(sum((m.interest_due for m in schedule), ZERO))
    total_overpayment = round_money(sum((m.total_overpayments() for m in schedule), ZERO))
    try:
        max_payment = max(m.total_amount_due() + m.total_overpayments() for m in schedule)
    except ValueError:
        max_payment = ZERO

    summary: Dict[str, object] = {
        "principal": float(config.principal),
        "monthly_payment": float(calculator.compute_monthly_payment(config.principal, config.term)),
        "total_interest": float(total_interest),
        "total_overpayment": float(total_overpayment),
        "total_amount_due": float(calculator.total_amount_due_over_term(schedule)),
        "term_months": config.term,
        "payments_made": len(schedule),
        "months_saved": config.term - len(schedule) if schedule else 0,
        "max_payment": float(max_payment),
    }
    if config.start_date:
        summary["original_end_date"] = add_months(config.start_date, config.term - 1).strftime("%Y-%m")
        last = schedule[-1].date if schedule else config.start_date
        summary["new_end_date"] = last.strftime("%Y-%m")

    if config.has_overpayments():
        baseline = ScheduleCalculator(config.without_overpayments()).generate_schedule()
        baseline_interest = round_money(sum((m.interest_due for m in baseline), ZERO))
        summary["comparison"] = {
            "baseline_total_interest": float(baseline_interest),
            "interest_saved": float(baseline_interest - total_interest),
            "months_saved": len(baseline) - len(schedule),
            "reduces_term": config.reduces_term(),
        }
    return summary


def compute_schedule(config: LoanConfig) -> Tuple[List[MonthRecord], Dict[str, object]]:
    """Compute the amortization schedule and summary for a loan."""
    schedule = ScheduleCalculator(config).generate_schedule()
    return schedule, summarize(config, schedule)
