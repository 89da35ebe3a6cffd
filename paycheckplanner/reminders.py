"""Reminder scheduling: turn due dates and paydays into timed reminder values.

Nothing here delivers a notification. Each reminder carries a stable
identifier, a fire time and the figures a notifier needs to render it;
permissions, transport and rendering stay with the caller.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from . import constants
from .calendar_days import Calendar, at_clock_time, optional_calendar
from .projection import PeriodSummary
from .recurrence import RecurrenceEngine
from .schema import QueryWindow, RecurrenceRule

logger = logging.getLogger(__name__)


class BillReminder(NamedTuple):
    """A bill falling due on ``due_date``."""

    identifier: str
    owner_id: str
    name: str
    due_date: date
    fire_at: datetime
    amount: Decimal


class PaydayReminder(NamedTuple):
    """A payday with the period's income, bills and leftover."""

    identifier: str
    payday: date
    fire_at: datetime
    income_total: Decimal
    bill_total: Decimal
    leftover: Decimal


def day_key(day: date) -> str:
    """Compact day key used in reminder identifiers, e.g. ``y2024m1d5``."""
    return f"y{day.year}m{day.month}d{day.day}"


def bill_reminder_id(owner_id: str, due_date: date) -> str:
    return f"{constants.BILL_REMINDER_PREFIX}|{owner_id}|{day_key(due_date)}"


def payday_reminder_id(payday: date) -> str:
    return f"{constants.PAYDAY_REMINDER_PREFIX}|{day_key(payday)}"


def bill_reminders(
    bills: Iterable[RecurrenceRule],
    window: QueryWindow,
    calendar: Calendar = None,
    hour: int = constants.DEFAULT_BILL_REMINDER_HOUR,
    engine: Optional[RecurrenceEngine] = None,
) -> list[BillReminder]:
    """
    One reminder per bill due date inside the window.

    Args:
        bills: Bill rules
        window: Days to remind about (typically an upcoming pay period)
        calendar: Zone name or tzinfo the fire time is expressed in
        hour: Local clock hour the reminder fires on the due day
        engine: Recurrence engine to use (a fresh one by default)

    Returns:
        Reminders ordered by due date
    """
    engine = engine or RecurrenceEngine()
    calendar = optional_calendar(calendar)
    reminders = [
        BillReminder(
            identifier=bill_reminder_id(occ.owner_id, occ.date),
            owner_id=occ.owner_id,
            name=occ.name,
            due_date=occ.date,
            fire_at=at_clock_time(occ.date, hour, calendar=calendar),
            amount=occ.amount,
        )
        for occ in engine.expand_all(bills, window)
    ]
    logger.debug("Built %d bill reminders for %s..%s", len(reminders), window.start, window.end)
    return reminders


def payday_reminders(
    summaries: Iterable[PeriodSummary],
    calendar: Calendar = None,
    hour: int = constants.DEFAULT_PAYDAY_REMINDER_HOUR,
) -> list[PaydayReminder]:
    """One reminder on the morning of each summarized period's payday."""
    calendar = optional_calendar(calendar)
    return [
        PaydayReminder(
            identifier=payday_reminder_id(summary.period.payday),
            payday=summary.period.payday,
            fire_at=at_clock_time(summary.period.payday, hour, calendar=calendar),
            income_total=summary.income_total,
            bill_total=summary.bill_total,
            leftover=summary.leftover,
        )
        for summary in summaries
    ]
