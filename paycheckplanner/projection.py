"""Budget projection: pay periods and per-period income/bill summaries.

A pay period runs from one payday up to (not including) the next, so each
period is the half-open window the recurrence engine works with. Income
received on the first day of a period funds the bills due before the next
payday; whatever is left (or owed) carries into the following period.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from .calendar_days import Calendar, Instant, calendar_day, optional_calendar
from .recurrence import Occurrence, RecurrenceEngine
from .schema import QueryWindow, RecurrenceRule

logger = logging.getLogger(__name__)


class PayPeriod(NamedTuple):
    """Days ``[start, end)`` between two consecutive paydays."""

    start: date
    end: date

    @property
    def payday(self) -> date:
        return self.start

    @property
    def window(self) -> QueryWindow:
        return QueryWindow(start=self.start, end=self.end)


class PeriodSummary(NamedTuple):
    """Income, bills and carry-over for one pay period."""

    period: PayPeriod
    income_total: Decimal
    bill_total: Decimal
    carry_in: Decimal
    incomes: tuple[Occurrence, ...]
    bills: tuple[Occurrence, ...]

    @property
    def leftover(self) -> Decimal:
        return self.income_total + self.carry_in - self.bill_total

    @property
    def carry_out(self) -> Decimal:
        return self.leftover


def _grid_anchor(incomes: list[RecurrenceRule]) -> Optional[RecurrenceRule]:
    """The income whose paydays define the grid, if one stands out."""
    recurring = [rule for rule in incomes if rule.frequency.is_recurring]
    for rule in recurring:
        if rule.is_main:
            return rule
    if len(incomes) == 1 and len(recurring) == 1:
        return recurring[0]
    return None


def _paydays_around(
    engine: RecurrenceEngine, rule: RecurrenceRule, start: date, count: int
) -> list[date]:
    """The payday on/before ``start`` (if any) followed by upcoming paydays."""
    paydays = []
    previous = engine.previous_on_or_before(rule, start)
    if previous is not None:
        paydays.append(previous)
    paydays.extend(engine.next_occurrences(rule, start, count))
    return paydays


def pay_periods(
    incomes: Iterable[RecurrenceRule],
    count: int,
    start: Instant,
    calendar: Calendar = None,
    engine: Optional[RecurrenceEngine] = None,
) -> list[PayPeriod]:
    """
    Build up to ``count`` contiguous pay periods covering ``start``.

    If an income is marked main (or there is exactly one recurring income),
    its paydays form the grid. Otherwise the paydays of all incomes are
    merged into one grid.

    Args:
        incomes: Income rules
        count: Number of periods wanted
        start: Day the projection starts from; the first period contains it
            when a payday on or before it exists
        calendar: Zone name or tzinfo used to normalize ``start`` if it is a datetime
        engine: Recurrence engine to use (a fresh one by default)

    Returns:
        Periods in order; fewer than ``count`` if the incomes run out
    """
    if count <= 0:
        return []

    engine = engine or RecurrenceEngine()
    incomes = list(incomes)
    lower = calendar_day(start, optional_calendar(calendar))

    anchor = _grid_anchor(incomes)
    if anchor is not None:
        boundaries = set(_paydays_around(engine, anchor, lower, count + 1))
    else:
        boundaries = set()
        for rule in incomes:
            boundaries.update(_paydays_around(engine, rule, lower, count + 1))

    ordered = sorted(boundaries)
    # Start from the latest payday on or before the start day, if any
    on_or_before = [day for day in ordered if day <= lower]
    if on_or_before:
        ordered = ordered[ordered.index(on_or_before[-1]):]

    periods = [PayPeriod(a, b) for a, b in zip(ordered, ordered[1:])][:count]
    if len(periods) < count:
        logger.debug("Only %d of %d pay periods could be built", len(periods), count)
    return periods


def summarize_periods(
    incomes: Iterable[RecurrenceRule],
    bills: Iterable[RecurrenceRule],
    periods: Iterable[PayPeriod],
    engine: Optional[RecurrenceEngine] = None,
) -> list[PeriodSummary]:
    """
    Total income and bills per period and roll the leftover forward.

    The first period starts with no carry; each later period's carry-in is
    the previous period's leftover, positive or negative.
    """
    engine = engine or RecurrenceEngine()
    incomes = list(incomes)
    bills = list(bills)

    summaries = []
    carry = Decimal("0")
    for period in periods:
        window = period.window
        summary = PeriodSummary(
            period=period,
            income_total=engine.total_amount(incomes, window),
            bill_total=engine.total_amount(bills, window),
            carry_in=carry,
            incomes=tuple(engine.expand_all(incomes, window)),
            bills=tuple(engine.expand_all(bills, window)),
        )
        summaries.append(summary)
        carry = summary.carry_out
    return summaries


def project_budget(
    incomes: Iterable[RecurrenceRule],
    bills: Iterable[RecurrenceRule],
    count: int,
    start: Instant,
    calendar: Calendar = None,
) -> list[PeriodSummary]:
    """Pay periods from ``start`` with their income/bill summaries."""
    engine = RecurrenceEngine()
    incomes = list(incomes)
    periods = pay_periods(incomes, count, start, calendar=calendar, engine=engine)
    return summarize_periods(incomes, bills, periods, engine=engine)
