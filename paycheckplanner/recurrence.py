"""Recurrence engine for expanding income and bill rules into dated occurrences.

Every question the planner asks about a rule (which days fall in this pay
period, when is the next due date, how much leaves the account this month)
is answered from :meth:`RecurrenceEngine.occurrence_dates`. The next/previous
lookups and the totals are folds over that one generator, so the budget,
the reminders and the filters never disagree about a date.

Each strider is bounded by a fixed number of steps (see ``constants``).
Running out of steps truncates the result; it is not an error.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from . import constants
from .calendar_days import (
    Instant,
    add_days,
    add_months,
    calendar_day,
    clamp_day,
    days_between,
    first_of_month,
    month_occurrence,
)
from .schema import QueryWindow, RecurrenceRule
from .types import FrequencyType

logger = logging.getLogger(__name__)


class Occurrence(NamedTuple):
    """One concrete dated instance of a rule."""

    owner_id: str
    name: str
    date: date
    amount: Decimal
    frequency: FrequencyType


class RecurrenceEngine:
    """Engine for generating occurrence dates from recurrence rules.

    The engine is stateless; one instance can be shared freely, including
    across threads.
    """

    def occurrences(self, rule: RecurrenceRule, window: QueryWindow) -> list[Occurrence]:
        """
        Expand a rule into its occurrences inside a half-open window.

        Args:
            rule: Recurrence rule to expand
            window: Days ``[start, end)`` to report

        Returns:
            Occurrences in date order, each carrying the rule's full amount
        """
        return [
            Occurrence(rule.owner_id, rule.name, day, rule.amount, rule.frequency)
            for day in self.occurrence_dates(rule, window)
        ]

    def occurrence_dates(self, rule: RecurrenceRule, window: QueryWindow) -> list[date]:
        """
        Generate occurrence dates for a rule within ``[window.start, window.end)``.

        The rule's inclusive ``end_date`` narrows the window to
        ``end_date + 1 day``. Inverted or empty windows give an empty list.
        """
        if rule.end_date is not None:
            day_after_end = add_days(rule.end_date, 1)
            if day_after_end is not None:
                window = window.clipped(day_after_end)

        if window.is_empty:
            return []

        frequency = rule.frequency
        try:
            if frequency == FrequencyType.ONE_TIME:
                return self._expand_one_time(rule, window)
            if frequency == FrequencyType.WEEKLY:
                return self._expand_weekly(
                    rule.anchor_date, constants.WEEKLY_STRIDE_WEEKS, window
                )
            if frequency == FrequencyType.BIWEEKLY:
                return self._expand_weekly(
                    rule.anchor_date, constants.BIWEEKLY_STRIDE_WEEKS, window
                )
            if frequency == FrequencyType.MONTHLY:
                return self._expand_monthly(rule.anchor_date, rule.anchor_date.day, window)
            if frequency == FrequencyType.SEMIMONTHLY:
                return self._expand_semimonthly(rule, window)
            if frequency == FrequencyType.YEARLY:
                return self._expand_yearly(rule.anchor_date, window)
            logger.error("Unknown frequency type: %s", frequency)
            return []
        except (OverflowError, ValueError) as e:
            logger.error("Error expanding recurrence for %s: %s", rule.owner_id, e)
            return []

    def _expand_one_time(self, rule: RecurrenceRule, window: QueryWindow) -> list[date]:
        """A one-time rule occurs on its override date, else on its anchor."""
        day = rule.one_time_date or rule.anchor_date
        return [day] if window.contains(day) else []

    def _expand_weekly(self, anchor: date, stride_weeks: int, window: QueryWindow) -> list[date]:
        """
        Generate dates every ``stride_weeks`` weeks on the anchor's weekday.

        The first candidate is the first day on or after the later of the
        window start and the anchor that shares the anchor's weekday. For
        strides longer than one week it is pushed forward by whole weeks
        until it sits a multiple of the stride away from the anchor.
        """
        lower = max(window.start, anchor)
        candidate = add_days(lower, (anchor.weekday() - lower.weekday()) % constants.DAYS_PER_WEEK)
        if candidate is None:
            return []

        if stride_weeks > 1:
            weeks_between = days_between(anchor, candidate) // constants.DAYS_PER_WEEK
            remainder = weeks_between % stride_weeks
            if remainder:
                candidate = add_days(
                    candidate, (stride_weeks - remainder) * constants.DAYS_PER_WEEK
                )
                if candidate is None:
                    return []

        step = stride_weeks * constants.DAYS_PER_WEEK
        dates = []
        for _ in range(constants.WEEKLY_MAX_CYCLES):
            if candidate >= window.end:
                break
            if candidate >= window.start and candidate >= anchor:
                dates.append(candidate)
            candidate = add_days(candidate, step)
            if candidate is None:
                break
        else:
            logger.debug("Weekly expansion from %s stopped at the cycle cap", anchor)

        return dates

    def _expand_monthly(self, anchor: date, day_of_month: int, window: QueryWindow) -> list[date]:
        """
        Generate one date per month on ``day_of_month``.

        Short months clamp to their last day. Every month is clamped on its
        own, so a 31st that lands on Feb 29 is back on the 31st in March.
        """
        lower = max(window.start, anchor)
        base = first_of_month(lower)

        first = month_occurrence(base, day_of_month)
        offset = 1 if first is not None and first < lower else 0

        dates = []
        for months in range(offset, offset + constants.MONTHLY_MAX_CYCLES):
            month = add_months(base, months)
            if month is None:
                break
            candidate = month_occurrence(month, day_of_month)
            if candidate is None:
                continue
            if candidate >= window.end:
                break
            if candidate >= lower:
                dates.append(candidate)
        else:
            logger.debug("Monthly expansion from %s stopped at the cycle cap", anchor)

        return dates

    def _expand_semimonthly(self, rule: RecurrenceRule, window: QueryWindow) -> list[date]:
        """
        Generate dates on two days of every month.

        Each day is its own monthly stream and every date carries the full
        amount. Both days are already within 1-28, so distinct days never
        collide; equal days collapse into one stream.
        """
        all_dates = []
        for day in sorted(set(rule.semimonthly_days)):
            all_dates.extend(self._expand_monthly(rule.anchor_date, day, window))

        return sorted(all_dates)

    def _expand_yearly(self, anchor: date, window: QueryWindow) -> list[date]:
        """
        Generate one date per year on the anchor's month and day.

        A Feb 29 anchor falls on Feb 28 in years without a leap day.
        """
        lower = max(window.start, anchor)

        dates = []
        for year in range(lower.year, lower.year + constants.YEARLY_MAX_CYCLES):
            candidate = clamp_day(year, anchor.month, anchor.day)
            if candidate is None:
                continue
            if candidate >= window.end:
                break
            if candidate >= lower:
                dates.append(candidate)
        else:
            logger.debug("Yearly expansion from %s stopped at the cycle cap", anchor)

        return dates

    # ------------------------------------------------------------------
    # Queries built on the expansion
    # ------------------------------------------------------------------

    def next_on_or_after(self, rule: RecurrenceRule, day: Instant) -> Optional[date]:
        """
        Find the earliest occurrence on or after ``day``.

        Expands the rule over a window one longest-gap (plus a buffer) long,
        so the answer always agrees with :meth:`occurrence_dates`.

        Returns:
            The occurrence date, or None if the rule has no more occurrences

        Example:
            >>> rule = RecurrenceRule(owner_id="rent", frequency="MONTHLY",
            ...                       anchor_date=date(2024, 1, 31), amount=1500)
            >>> RecurrenceEngine().next_on_or_after(rule, date(2024, 2, 2))
            datetime.date(2024, 2, 29)
        """
        day = calendar_day(day)

        if not rule.frequency.is_recurring:
            target = rule.one_time_date or rule.anchor_date
            end = add_days(max(target, day), 1) or date.max
            dates = self.occurrence_dates(rule, QueryWindow(start=day, end=end))
            return dates[0] if dates else None

        lower = max(day, rule.anchor_date)
        span = constants.MAX_GAP_DAYS[rule.frequency.value] + constants.LOOKUP_BUFFER_DAYS
        end = add_days(lower, span) or date.max
        dates = self.occurrence_dates(rule, QueryWindow(start=lower, end=end))
        return dates[0] if dates else None

    def previous_on_or_before(self, rule: RecurrenceRule, day: Instant) -> Optional[date]:
        """Find the latest occurrence on or before ``day``, or None."""
        day = calendar_day(day)
        end = add_days(day, 1) or date.max

        if not rule.frequency.is_recurring:
            start = rule.one_time_date or rule.anchor_date
        else:
            span = constants.MAX_GAP_DAYS[rule.frequency.value] + constants.LOOKUP_BUFFER_DAYS
            start = max(rule.anchor_date, add_days(day, -span) or date.min)

        dates = self.occurrence_dates(rule, QueryWindow(start=start, end=end))
        return dates[-1] if dates else None

    def next_occurrences(self, rule: RecurrenceRule, day: Instant, count: int) -> list[date]:
        """The next ``count`` occurrence dates on or after ``day``."""
        dates = []
        cursor: Optional[date] = calendar_day(day)
        while cursor is not None and len(dates) < count:
            found = self.next_on_or_after(rule, cursor)
            if found is None:
                break
            dates.append(found)
            cursor = add_days(found, 1)
        return dates

    def occurs(self, rule: RecurrenceRule, window: QueryWindow) -> bool:
        """True if the rule has at least one occurrence inside the window."""
        return bool(self.occurrence_dates(rule, window))

    def expand_all(
        self, rules: Iterable[RecurrenceRule], window: QueryWindow
    ) -> list[Occurrence]:
        """Occurrences of every rule, merged in date order (stable per rule)."""
        merged = [occ for rule in rules for occ in self.occurrences(rule, window)]
        merged.sort(key=lambda occ: occ.date)
        return merged

    def total_amount(self, rules: Iterable[RecurrenceRule], window: QueryWindow) -> Decimal:
        """Sum of the amounts of every occurrence of ``rules`` inside the window."""
        return sum(
            (occ.amount for rule in rules for occ in self.occurrences(rule, window)),
            constants.ZERO_AMOUNT,
        )

    def rules_in_window(
        self, rules: Iterable[RecurrenceRule], window: QueryWindow
    ) -> list[RecurrenceRule]:
        """Filter rules down to those that occur inside the window."""
        return [rule for rule in rules if self.occurs(rule, window)]

