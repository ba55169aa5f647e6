"""Output helpers for the amortization calculator.

This module turns schedule records into plain dictionaries for JSON/CSV
export and renders schedules and summaries as text tables. The engine itself
never touches any of these representations.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import click

from .data_models import MonthRecord, Overpayment
from .utils import round_money


def overpayment_to_dict(overpayment: Overpayment) -> Dict[str, Any]:
    return {"amount": float(round_money(overpayment.amount)), "mode": overpayment.mode.value}


def month_to_dict(record: MonthRecord) -> Dict[str, Any]:
    """Return the transport representation of one schedule month.

    The ``date`` key is present only for schedules keyed by calendar date.
    """
    data: Dict[str, Any] = {
        "paymentNumber": record.payment_number,
        "interestDue": float(round_money(record.interest_due)),
        "principalDue": float(round_money(record.principal_due)),
        "openingBalance": float(round_money(record.opening_balance)),
        "closingBalance": float(round_money(record.closing_balance)),
        "overpayments": [overpayment_to_dict(op) for op in record.overpayments],
    }
    if record.date is not None:
        data["date"] = record.date.isoformat()
    return data


def schedule_to_dicts(schedule: Iterable[MonthRecord]) -> List[Dict[str, Any]]:
    return [month_to_dict(record) for record in schedule]


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Principal          : {summary['principal']:.2f}")
    click.echo(f"Monthly payment    : {summary['monthly_payment']:.2f}")
    click.echo(f"Total interest     : {summary['total_interest']:.2f}")
    if summary.get("total_overpayment"):
        click.echo(f"Total overpayment  : {summary['total_overpayment']:.2f}")
    click.echo(f"Total amount due   : {summary['total_amount_due']:.2f}")
    if summary.get("original_end_date"):
        click.echo(f"Original end date  : {summary['original_end_date']}")
        click.echo(f"New end date       : {summary['new_end_date']}")
    click.echo(f"Payments made      : {summary['payments_made']} of {summary['term_months']}")
    if summary.get("max_payment"):
        click.echo(f"Highest payment    : {summary['max_payment']:.2f}")
    comparison = summary.get("comparison")
    if comparison:
        click.echo(f"Baseline interest  : {comparison['baseline_total_interest']:.2f}")
        click.echo(f"Interest saved     : {comparison['interest_saved']:.2f}")
        if comparison.get("months_saved"):
            click.echo(f"Term reduction     : {int(comparison['months_saved'])} months")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[MonthRecord]) -> None:
    """Print the amortization schedule as a tab separated table."""
    headers = ["Month", "Date", "Opening", "Payment", "Principal", "Interest", "Overpay", "Closing"]
    click.echo("\t".join(headers))
    for record in schedule:
        row = [
            str(record.payment_number),
            record.date.isoformat() if record.date else "-",
            f"{record.opening_balance:.2f}",
            f"{record.total_amount_due():.2f}",
            f"{record.principal_due:.2f}",
            f"{record.interest_due:.2f}",
            f"{record.total_overpayments():.2f}",
            f"{record.closing_balance:.2f}",
        ]
        click.echo("\t".join(row))
