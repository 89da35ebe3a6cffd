"""Output formatting functions for CLI commands.

Currency rendering lives here and nowhere else; the engine only ever
hands out Decimal amounts.
"""

import csv
import json
import sys
from decimal import Decimal

import click

from paycheckplanner import constants

CURRENCY_SYMBOLS = {"USD": "$", "CAD": "$", "AUD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


def format_currency(value: Decimal, currency: str = constants.DEFAULT_CURRENCY) -> str:
    """Format an amount for display, e.g. ``$1,234.56`` or ``-$20.00``."""
    value = Decimal(value).quantize(constants.CENTS_PRECISION)
    symbol = CURRENCY_SYMBOLS.get(currency)
    sign = "-" if value < 0 else ""
    if symbol is None:
        return f"{sign}{abs(value):,.2f} {currency}"
    return f"{sign}{symbol}{abs(value):,.2f}"


def print_rule_table(rules: list, currency: str = constants.DEFAULT_CURRENCY) -> None:
    """
    Print rules as a formatted ASCII table.

    Displays owner ID, kind, frequency, anchor date and amount. The ID
    column width is auto-calculated and capped.

    Args:
        rules: List of RecurrenceRule objects to display.
        currency: Currency code for the amount column.
    """
    id_width = max(len(r.owner_id) for r in rules)
    id_width = min(max(id_width, len("ID")), constants.MAX_TABLE_COLUMN_WIDTH)

    click.echo(
        f"{'ID':<{id_width}}  {'Kind':<6}  {'Frequency':<12}  {'Anchor':<10}  {'Amount':>12}"
    )
    click.echo("-" * (id_width + 6 + 12 + 10 + 12 + 8))

    for r in rules:
        main = "*" if r.is_main else ""
        click.echo(
            f"{r.owner_id[:id_width]:<{id_width}}  {r.kind.value:<6}  "
            f"{(r.frequency.value + main):<12}  {r.anchor_date.isoformat():<10}  "
            f"{format_currency(r.amount, currency):>12}"
        )

    click.echo(f"\nTotal: {len(rules)} rules")


def print_rule_csv(rules: list) -> None:
    """Print rules as CSV to stdout."""
    writer = csv.writer(sys.stdout)
    writer.writerow(["ID", "Name", "Kind", "Frequency", "Anchor", "End", "Amount"])
    for r in rules:
        writer.writerow(
            [
                r.owner_id,
                r.name,
                r.kind.value,
                r.frequency.value,
                r.anchor_date.isoformat(),
                r.end_date.isoformat() if r.end_date else "",
                str(r.amount),
            ],
        )


def print_occurrence_table(occurrences: list, currency: str = constants.DEFAULT_CURRENCY) -> None:
    """Print occurrences as a table with a running total."""
    name_width = max((len(o.name or o.owner_id) for o in occurrences), default=4)
    name_width = min(max(name_width, len("Name")), constants.MAX_TABLE_COLUMN_WIDTH)

    click.echo(f"{'Date':<10}  {'Name':<{name_width}}  {'Frequency':<12}  {'Amount':>12}")
    click.echo("-" * (10 + name_width + 12 + 12 + 6))

    total = constants.ZERO_AMOUNT
    for o in occurrences:
        total += o.amount
        name = (o.name or o.owner_id)[:name_width]
        click.echo(
            f"{o.date.isoformat():<10}  {name:<{name_width}}  {o.frequency.value:<12}  "
            f"{format_currency(o.amount, currency):>12}"
        )

    click.echo(f"\n{len(occurrences)} occurrences, total {format_currency(total, currency)}")


def print_occurrence_csv(occurrences: list) -> None:
    """Print occurrences as CSV to stdout."""
    writer = csv.writer(sys.stdout)
    writer.writerow(["Date", "ID", "Name", "Frequency", "Amount"])
    for o in occurrences:
        writer.writerow([o.date.isoformat(), o.owner_id, o.name, o.frequency.value, str(o.amount)])


def print_occurrence_json(occurrences: list) -> None:
    """Print occurrences as a JSON list."""
    payload = [
        {
            "date": o.date.isoformat(),
            "owner_id": o.owner_id,
            "name": o.name,
            "frequency": o.frequency.value,
            "amount": str(o.amount),
        }
        for o in occurrences
    ]
    click.echo(json.dumps(payload, indent=2))


def print_period_table(summaries: list, currency: str = constants.DEFAULT_CURRENCY) -> None:
    """Print pay-period summaries: income, bills, carry-in and leftover."""
    header = (
        f"{'Payday':<10}  {'Until':<10}  {'Income':>12}  {'Bills':>12}  "
        f"{'Carry in':>12}  {'Leftover':>12}"
    )
    click.echo(header)
    click.echo("-" * len(header))

    for s in summaries:
        click.echo(
            f"{s.period.start.isoformat():<10}  {s.period.end.isoformat():<10}  "
            f"{format_currency(s.income_total, currency):>12}  "
            f"{format_currency(s.bill_total, currency):>12}  "
            f"{format_currency(s.carry_in, currency):>12}  "
            f"{format_currency(s.leftover, currency):>12}"
        )


def print_period_json(summaries: list) -> None:
    """Print pay-period summaries as JSON."""
    payload = [
        {
            "start": s.period.start.isoformat(),
            "end": s.period.end.isoformat(),
            "income_total": str(s.income_total),
            "bill_total": str(s.bill_total),
            "carry_in": str(s.carry_in),
            "leftover": str(s.leftover),
            "bills": [o.owner_id for o in s.bills],
        }
        for s in summaries
    ]
    click.echo(json.dumps(payload, indent=2))


def print_reminders(reminders: list, currency: str = constants.DEFAULT_CURRENCY) -> None:
    """Print bill reminders, one per line."""
    for r in reminders:
        click.echo(
            f"{r.fire_at.isoformat()}  {r.identifier}  {r.name or r.owner_id}  "
            f"Due today • {format_currency(r.amount, currency)}"
        )
    click.echo(f"\n{len(reminders)} reminders")
