"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules or view summaries.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .data_models import LoanConfig, LoanConfigBuilder, MonthRecord, Overpayment, OverpaymentMode
from .engine import compute_schedule
from .exceptions import AmortizeError
from .formatter import print_schedule, print_summary, schedule_to_dicts
from .utils import decimal_from_str, month_index, parse_year_month

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def _parse_mode(value: str) -> OverpaymentMode:
    try:
        return OverpaymentMode.parse(value)
    except AmortizeError as exc:
        raise click.BadParameter(str(exc))


def _parse_month(value: str, start_dt) -> int:
    """Return the payment number for a month given as an index or as YYYY-MM."""
    value = value.strip()
    if value.isdigit():
        return int(value)
    if start_dt is None:
        raise click.BadParameter(
            f"Overpayment month {value} is a date; pass --start-date or use a month number"
        )
    try:
        dt = parse_year_month(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    index = month_index(start_dt, dt)
    if index < 1:
        raise click.BadParameter(f"Overpayment month {value} is before the start date")
    return index


def parse_overpayment_strings(values: Tuple[str, ...], start_dt=None) -> List[Tuple[int, Overpayment]]:
    overpayments: List[Tuple[int, Overpayment]] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Overpayment must be in MONTH:AMOUNT:MODE format; got {item}"
            )
        month_str, amt_str, mode_str = parts
        month = _parse_month(month_str, start_dt)
        amount = decimal_from_str(str(parse_amount(amt_str)))
        try:
            overpayments.append((month, Overpayment(amount=amount, mode=_parse_mode(mode_str))))
        except AmortizeError as exc:
            raise click.BadParameter(str(exc))
    return overpayments


def build_config_from_options(
    principal: str,
    rate: float,
    term: int,
    start_date: Optional[str] = None,
    overpayment: Tuple[str, ...] = (),
    monthly_overpayment: Optional[str] = None,
) -> LoanConfig:
    builder = LoanConfigBuilder()
    builder.set_principal(decimal_from_str(str(parse_amount(principal))))
    builder.set_interest_rate(decimal_from_str(str(rate)))
    builder.set_term(term)

    start_dt = None
    if start_date:
        try:
            start_dt = parse_year_month(start_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        builder.set_start_date(start_dt)

    for month, op in parse_overpayment_strings(overpayment, start_dt):
        builder.add_overpayment(month, op)

    # Handle monthly overpayment: string of format AMOUNT:MODE
    if monthly_overpayment:
        parts = monthly_overpayment.split(":")
        if len(parts) != 2:
            raise click.BadParameter(
                "Monthly overpayment must be in AMOUNT:MODE format, e.g., '500:term'"
            )
        amt_str, mode_str = parts
        amount = decimal_from_str(str(parse_amount(amt_str)))
        mode = _parse_mode(mode_str)
        try:
            for month in range(1, term + 1):
                builder.add_overpayment(month, Overpayment(amount=amount, mode=mode))
        except AmortizeError as exc:
            raise click.BadParameter(str(exc))

    try:
        return builder.build()
    except AmortizeError as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, schedule: List[MonthRecord], summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": summary, "schedule": schedule_to_dicts(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[MonthRecord]) -> None:
    """Export schedule to a CSV file."""
    header = [
        "Month",
        "Date",
        "Opening_Balance",
        "Payment",
        "Principal",
        "Interest",
        "Overpayment",
        "Closing_Balance",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.payment_number,
                    e.date.isoformat() if e.date else "",
                    float(e.opening_balance),
                    float(e.total_amount_due()),
                    float(e.principal_due),
                    float(e.interest_due),
                    float(e.total_overpayments()),
                    float(e.closing_balance),
                ]
            )


def _run(config: LoanConfig):
    try:
        return compute_schedule(config)
    except AmortizeError as exc:
        raise click.ClickException(str(exc))


def loan_options(func):
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k/m suffixes)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option("--start-date", "-s", "start_date", help="First payment date (YYYY-MM)"),
        click.option(
            "--overpayment",
            "overpayment",
            multiple=True,
            help="Overpayment in MONTH:AMOUNT:MODE format; MONTH is a number or YYYY-MM, MODE is reduceMonthlyPayment|installment or reduceLoanTerm|term",
        ),
        click.option(
            "--monthly-overpayment",
            "monthly_overpayment",
            help="Apply the same overpayment every month in AMOUNT:MODE format. Example: --monthly-overpayment 500:term",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command-line loan amortization calculator with overpayments."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    term: int,
    start_date: Optional[str],
    overpayment: Tuple[str, ...],
    monthly_overpayment: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    config = build_config_from_options(principal, rate, term, start_date, overpayment, monthly_overpayment)
    schedule_entries, summary = _run(config)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, schedule_entries, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        logger.info("Wrote %d months to %s", len(schedule_entries), path)
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(summary)
        # Limit schedule length printed to avoid flooding the terminal
        if len(schedule_entries) > MAX_PRINTED_ROWS:
            click.echo(
                f"Schedule has {len(schedule_entries)} rows; showing first {MAX_PRINTED_ROWS} rows."
            )
            print_schedule(schedule_entries[:MAX_PRINTED_ROWS])
        else:
            print_schedule(schedule_entries)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    term: int,
    start_date: Optional[str],
    overpayment: Tuple[str, ...],
    monthly_overpayment: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    config = build_config_from_options(principal, rate, term, start_date, overpayment, monthly_overpayment)
    _, summary_data = _run(config)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


if __name__ == "__main__":
    cli()
