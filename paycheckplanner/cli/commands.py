"""Click CLI commands for paycheckplanner."""

import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

import click

from paycheckplanner import __version__
from paycheckplanner.calendar_days import resolve_calendar
from paycheckplanner.forecast import forecast_entries, format_entries
from paycheckplanner.loader import load_plan_from_path
from paycheckplanner.projection import project_budget
from paycheckplanner.recurrence import RecurrenceEngine
from paycheckplanner.reminders import bill_reminders
from paycheckplanner.schema import PlanFile, QueryWindow

from .formatters import (
    format_currency,
    print_occurrence_csv,
    print_occurrence_json,
    print_occurrence_table,
    print_period_json,
    print_period_table,
    print_reminders,
    print_rule_csv,
    print_rule_table,
)

logger = logging.getLogger(__name__)

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _load_or_exit(path: str) -> PlanFile:
    plan = load_plan_from_path(Path(path))
    if plan is None:
        click.echo(f"Error: Path is neither a file nor a directory: {path}", err=True)
        sys.exit(1)
    return plan


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
def main(verbose: bool):
    """Paycheck Planner - project recurring income and bills."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@main.command()
@click.argument("path", type=click.Path(exists=True))
def validate(path: str):
    """Validate plan files for syntax and schema compliance.

    PATH can be either a plan.yaml file or a plan/ directory.

    Examples:
        paycheckplanner validate plan.yaml
        paycheckplanner validate plan/
    """
    click.echo(f"Validating plan from: {path}")

    try:
        plan = _load_or_exit(path)

        click.echo("✓ Validation successful!")
        click.echo(f"  Incomes: {len(plan.incomes)}")
        click.echo(f"  Bills: {len(plan.bills)}")

        owner_ids = [r.owner_id for r in plan.rules]
        duplicates = {oid for oid in owner_ids if owner_ids.count(oid) > 1}
        if duplicates:
            click.echo(f"\n⚠ Warning: Duplicate owner IDs found: {duplicates}", err=True)
            sys.exit(1)

        click.echo("\nAll rules are valid!")

    except Exception as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        if logger.isEnabledFor(logging.DEBUG):
            traceback.print_exc()
        sys.exit(1)


@main.command(name="list")
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--kind",
    type=click.Choice(["income", "bill", "all"]),
    default="all",
    help="Which rules to show (default: all)",
)
def list_rules(path: str, output_format: str, kind: str):
    """List income and bill rules.

    Examples:
        paycheckplanner list plan/
        paycheckplanner list plan.yaml --kind bill --format json
    """
    try:
        plan = _load_or_exit(path)
        rules = [r for r in plan.rules if kind == "all" or r.kind.value == kind]

        if not rules:
            click.echo("No rules found")
            return

        if output_format == "table":
            print_rule_table(rules, plan.config.currency)
        elif output_format == "json":
            rules_data = [r.model_dump(mode="json") for r in rules]
            click.echo(json.dumps(rules_data, indent=2))
        elif output_format == "csv":
            print_rule_csv(rules)

    except Exception as e:
        _fail(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("start_date", type=DATE_TYPE)
@click.argument("end_date", type=DATE_TYPE)
@click.option("--owner", "owner_id", help="Only expand the rule with this owner ID")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    help="Output format (default: table)",
)
def occurrences(path: str, start_date, end_date, owner_id, output_format: str):
    """Expand rules into dated occurrences in [START_DATE, END_DATE).

    END_DATE is exclusive.

    Examples:
        paycheckplanner occurrences plan.yaml 2024-01-01 2024-02-01
        paycheckplanner occurrences plan.yaml 2024-01-01 2025-01-01 --owner rent
    """
    try:
        plan = _load_or_exit(path)
        rules = plan.rules
        if owner_id is not None:
            rule = plan.find(owner_id)
            if rule is None:
                click.echo(f"Error: Rule '{owner_id}' not found", err=True)
                sys.exit(1)
            rules = [rule]

        window = QueryWindow.from_instants(start_date, end_date)
        found = RecurrenceEngine().expand_all(rules, window)

        if output_format == "json":
            print_occurrence_json(found)
        elif output_format == "csv":
            print_occurrence_csv(found)
        elif not found:
            click.echo("No occurrences in window")
        else:
            print_occurrence_table(found, plan.config.currency)

    except Exception as e:
        _fail(e)


@main.command(name="next")
@click.argument("path", type=click.Path(exists=True))
@click.argument("owner_id")
@click.argument("on_or_after", type=DATE_TYPE)
@click.option("--count", type=int, default=1, help="Number of occurrences to show (default: 1)")
def next_occurrence(path: str, owner_id: str, on_or_after, count: int):
    """Show the next occurrence(s) of a rule on or after a date.

    Examples:
        paycheckplanner next plan.yaml rent 2024-02-02
        paycheckplanner next plan.yaml paycheck 2024-01-01 --count 6
    """
    try:
        plan = _load_or_exit(path)
        rule = plan.find(owner_id)
        if rule is None:
            click.echo(f"Error: Rule '{owner_id}' not found", err=True)
            sys.exit(1)

        dates = RecurrenceEngine().next_occurrences(rule, on_or_after.date(), count)
        if not dates:
            click.echo(f"No occurrences of '{owner_id}' on or after {on_or_after.date()}")
            return
        for day in dates:
            click.echo(day.isoformat())

    except Exception as e:
        _fail(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("start_date", type=DATE_TYPE)
@click.argument("end_date", type=DATE_TYPE)
def total(path: str, start_date, end_date):
    """Total income and bills in [START_DATE, END_DATE).

    Examples:
        paycheckplanner total plan.yaml 2024-01-01 2024-02-01
    """
    try:
        plan = _load_or_exit(path)
        window = QueryWindow.from_instants(start_date, end_date)
        engine = RecurrenceEngine()

        income = engine.total_amount(plan.incomes, window)
        bills = engine.total_amount(plan.bills, window)
        currency = plan.config.currency

        click.echo(f"Income:   {format_currency(income, currency)}")
        click.echo(f"Bills:    {format_currency(bills, currency)}")
        click.echo(f"Leftover: {format_currency(income - bills, currency)}")

    except Exception as e:
        _fail(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--count", type=int, help="Number of pay periods (default: from config)")
@click.option("--start", "start_date", type=DATE_TYPE, help="Projection start (default: today)")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
def periods(path: str, count, start_date, output_format: str):
    """Project pay periods with income, bills and carry-over.

    Examples:
        paycheckplanner periods plan.yaml
        paycheckplanner periods plan.yaml --count 12 --start 2024-01-01
    """
    try:
        plan = _load_or_exit(path)
        calendar = resolve_calendar(plan.config.calendar)
        start = start_date.date() if start_date else datetime.now(calendar).date()
        count = count or plan.config.period_count

        summaries = project_budget(plan.incomes, plan.bills, count, start, calendar=calendar)
        if not summaries:
            click.echo("No pay periods could be built from the income rules")
            return

        if output_format == "json":
            print_period_json(summaries)
        else:
            print_period_table(summaries, plan.config.currency)

    except Exception as e:
        _fail(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("start_date", type=DATE_TYPE)
@click.argument("end_date", type=DATE_TYPE)
@click.option("--hour", type=click.IntRange(0, 23), help="Local hour reminders fire")
def reminders(path: str, start_date, end_date, hour):
    """List bill reminders due in [START_DATE, END_DATE).

    Examples:
        paycheckplanner reminders plan.yaml 2024-01-01 2024-01-15
    """
    try:
        plan = _load_or_exit(path)
        calendar = resolve_calendar(plan.config.calendar)
        window = QueryWindow.from_instants(start_date, end_date)
        hour = plan.config.bill_reminder_hour if hour is None else hour

        found = bill_reminders(plan.bills, window, calendar=calendar, hour=hour)
        print_reminders(found, plan.config.currency)

    except Exception as e:
        _fail(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("start_date", type=DATE_TYPE)
@click.argument("end_date", type=DATE_TYPE)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, writable=True),
    help="Write to this file instead of stdout",
)
def forecast(path: str, start_date, end_date, output_path):
    """Write Beancount forecast (#) transactions for [START_DATE, END_DATE).

    Examples:
        paycheckplanner forecast plan.yaml 2024-01-01 2024-04-01
        paycheckplanner forecast plan/ 2024-01-01 2025-01-01 -o forecast.beancount
    """
    try:
        plan = _load_or_exit(path)
        window = QueryWindow.from_instants(start_date, end_date)
        text = format_entries(forecast_entries(plan.rules, window, plan.config))

        if output_path:
            Path(output_path).write_text(text)
            click.echo(f"Wrote forecast to {output_path}")
        else:
            click.echo(text, nl=False)

    except Exception as e:
        _fail(e)
