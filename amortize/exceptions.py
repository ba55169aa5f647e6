"""Errors raised by the amortization engine."""


class AmortizeError(Exception):
    """Base class for all amortization errors."""


class InvalidConfiguration(AmortizeError, ValueError):
    """The loan parameters or an overpayment cannot produce a schedule."""


class ScheduleDivergence(AmortizeError, RuntimeError):
    """The schedule did not pay off within the iteration cap."""

    def __init__(self, months: int, balance) -> None:
        super().__init__(
            f"Schedule did not converge after {months} months (balance {balance})"
        )
        self.months = months
        self.balance = balance
