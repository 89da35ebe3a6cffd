"""Pydantic schema models for recurrence rules, query windows and plan files."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import constants
from .calendar_days import (
    Calendar,
    Instant,
    add_days,
    calendar_day,
    optional_calendar,
    resolve_calendar,
)
from .types import FrequencyType, RuleKind


def _to_calendar_day(v: Any) -> Any:
    """Drop the time-of-day from datetimes; leave everything else to pydantic."""
    if isinstance(v, datetime):
        return v.date()
    return v


class RecurrenceRule(BaseModel):
    """Recurring income or bill, reduced to what the recurrence engine needs.

    Rules are immutable; callers build a fresh one from their stored income
    source or bill record for every query.
    """

    model_config = ConfigDict(frozen=True)

    owner_id: str = Field(..., description="Opaque identifier of the income source or bill")
    name: str = Field("", description="Display name carried through to occurrences")
    kind: RuleKind = Field(RuleKind.BILL, description="income or bill")
    frequency: FrequencyType = Field(FrequencyType.ONE_TIME, description="Recurrence frequency")
    anchor_date: date = Field(..., description="Reference occurrence the schedule is defined from")
    end_date: Optional[date] = Field(None, description="Last day (inclusive) an occurrence may fall on")
    one_time_date: Optional[date] = Field(
        None, description="Explicit date for ONE_TIME rules (defaults to anchor_date)"
    )
    first_day_of_month: Optional[int] = Field(None, description="First SEMIMONTHLY day (1-28)")
    second_day_of_month: Optional[int] = Field(None, description="Second SEMIMONTHLY day (1-28)")
    amount: Decimal = Field(..., description="Amount of every single occurrence")
    is_main: bool = Field(False, description="Primary income schedule for the pay-period grid")
    account: Optional[str] = Field(None, description="Ledger account for forecast export")

    @field_validator("owner_id")
    @classmethod
    def validate_owner_id(cls, v: str) -> str:
        """Ensure owner_id is not blank."""
        if not v or not v.strip():
            raise ValueError("owner_id cannot be empty")
        return v

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v: Any) -> FrequencyType:
        """Accept loose spellings such as 'every 2 weeks' or 'annually'."""
        return FrequencyType.parse(v)

    @field_validator("anchor_date", "end_date", "one_time_date", mode="before")
    @classmethod
    def normalize_day(cls, v: Any) -> Any:
        """Discard time-of-day so stride arithmetic only sees calendar days."""
        return _to_calendar_day(v)

    @field_validator("first_day_of_month", "second_day_of_month", mode="before")
    @classmethod
    def clamp_semimonthly_day(cls, v: Any) -> Optional[int]:
        """Clamp semimonthly days into 1-28 instead of rejecting them."""
        if v is None:
            return None
        return min(max(int(v), constants.SEMIMONTHLY_MIN_DAY), constants.SEMIMONTHLY_MAX_DAY)

    @field_validator("amount", mode="before")
    @classmethod
    def exact_amount(cls, v: Any) -> Any:
        """Convert floats through their repr so 0.1 stays 0.1."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @property
    def semimonthly_days(self) -> tuple[int, int]:
        """The two SEMIMONTHLY days, falling back to the 1st and 15th."""
        first, second = constants.DEFAULT_SEMIMONTHLY_DAYS
        if self.first_day_of_month is not None:
            first = self.first_day_of_month
        if self.second_day_of_month is not None:
            second = self.second_day_of_month
        return first, second


class QueryWindow(BaseModel):
    """Half-open range of calendar days ``[start, end)``.

    An inverted window (``start > end``) is allowed and simply contains no days.
    """

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def normalize_day(cls, v: Any) -> Any:
        return _to_calendar_day(v)

    @classmethod
    def from_instants(
        cls, start: Instant, end: Instant, calendar: Calendar = None
    ) -> "QueryWindow":
        """Build a window from instants, normalized to days in a zone name or tzinfo."""
        calendar = optional_calendar(calendar)
        return cls(start=calendar_day(start, calendar), end=calendar_day(end, calendar))

    @classmethod
    def spanning(cls, start: date, days: int) -> "QueryWindow":
        """Window of ``days`` calendar days beginning at ``start``, capped at ``date.max``."""
        return cls(start=start, end=add_days(start, days) or date.max)

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def clipped(self, end: date) -> "QueryWindow":
        """Same window with its end pulled in to ``end`` if that is earlier."""
        if end >= self.end:
            return self
        return QueryWindow(start=self.start, end=end)


class PlannerConfig(BaseModel):
    """Global configuration for paycheckplanner."""

    currency: str = Field(constants.DEFAULT_CURRENCY, description="Currency for display/export")
    calendar: str = Field(constants.DEFAULT_CALENDAR, description="IANA zone defining calendar days")
    bill_reminder_hour: int = Field(
        constants.DEFAULT_BILL_REMINDER_HOUR, description="Local hour bill reminders fire"
    )
    payday_reminder_hour: int = Field(
        constants.DEFAULT_PAYDAY_REMINDER_HOUR, description="Local hour payday reminders fire"
    )
    period_count: int = Field(constants.DEFAULT_PERIOD_COUNT, description="Pay periods to project")
    cash_account: str = Field(constants.DEFAULT_CASH_ACCOUNT, description="Forecast cash account")
    income_account: str = Field(
        constants.DEFAULT_INCOME_ACCOUNT, description="Default income account"
    )
    bill_account: str = Field(constants.DEFAULT_BILL_ACCOUNT, description="Default bill account")

    @field_validator("bill_reminder_hour", "payday_reminder_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Ensure reminder hours are valid clock hours."""
        if v < 0 or v > 23:
            raise ValueError("reminder hour must be between 0 and 23")
        return v

    @field_validator("period_count")
    @classmethod
    def validate_period_count(cls, v: int) -> int:
        """Ensure period_count is positive."""
        if v < 1:
            raise ValueError("period_count must be at least 1")
        return v

    @field_validator("calendar")
    @classmethod
    def validate_calendar(cls, v: str) -> str:
        """Ensure the calendar names a known time zone."""
        resolve_calendar(v)
        return v


class PlanFile(BaseModel):
    """Root plan file structure: income sources, bills and config."""

    version: str = Field(constants.PLAN_FILE_VERSION, description="Plan file format version")
    incomes: list[RecurrenceRule] = Field(default_factory=list, description="Income rules")
    bills: list[RecurrenceRule] = Field(default_factory=list, description="Bill rules")
    config: PlannerConfig = Field(default_factory=PlannerConfig, description="Global configuration")
    source_file: Optional[Path] = Field(None, exclude=True, description="Where the plan was read from")

    @model_validator(mode="before")
    @classmethod
    def tag_rule_kinds(cls, data: Any) -> Any:
        """Rules listed under incomes/bills take their kind from the list."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key, kind in (("incomes", RuleKind.INCOME), ("bills", RuleKind.BILL)):
            rules = data.get(key)
            if rules:
                data[key] = [
                    {**rule, "kind": kind} if isinstance(rule, dict) else rule for rule in rules
                ]
        return data

    @property
    def rules(self) -> list[RecurrenceRule]:
        return [*self.incomes, *self.bills]

    def find(self, owner_id: str) -> Optional[RecurrenceRule]:
        for rule in self.rules:
            if rule.owner_id == owner_id:
                return rule
        return None
