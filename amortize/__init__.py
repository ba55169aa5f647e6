"""Loan amortization schedules with overpayment support."""

from .data_models import LoanConfig, LoanConfigBuilder, MonthRecord, Overpayment, OverpaymentMode
from .engine import ScheduleCalculator, compute_schedule
from .exceptions import AmortizeError, InvalidConfiguration, ScheduleDivergence

__all__ = [
    "AmortizeError",
    "InvalidConfiguration",
    "LoanConfig",
    "LoanConfigBuilder",
    "MonthRecord",
    "Overpayment",
    "OverpaymentMode",
    "ScheduleCalculator",
    "ScheduleDivergence",
    "compute_schedule",
]
