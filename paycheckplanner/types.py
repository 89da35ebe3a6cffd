"""Type definitions and enums for paycheckplanner."""

import re
from enum import Enum


class FrequencyType(str, Enum):
    """Recurrence frequency types."""

    ONE_TIME = "ONE_TIME"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    SEMIMONTHLY = "SEMIMONTHLY"  # Two days per month (e.g., 1st & 15th)

    @property
    def is_recurring(self) -> bool:
        return self is not FrequencyType.ONE_TIME

    @classmethod
    def parse(cls, raw: object) -> "FrequencyType":
        """Map a loosely spelled frequency onto a FrequencyType.

        Unknown or empty spellings fall back to ONE_TIME, matching how stored
        bill records with a missing repeat setting are treated.

        Examples:
            >>> FrequencyType.parse("every 2 weeks")
            <FrequencyType.BIWEEKLY: 'BIWEEKLY'>
            >>> FrequencyType.parse("Semi-Monthly")
            <FrequencyType.SEMIMONTHLY: 'SEMIMONTHLY'>
        """
        if isinstance(raw, cls):
            return raw
        key = re.sub(r"[\s_\-]+", "-", str(raw or "").strip().lower())
        return FREQUENCY_ALIASES.get(key, cls.ONE_TIME)


FREQUENCY_ALIASES = {
    "one-time": FrequencyType.ONE_TIME,
    "onetime": FrequencyType.ONE_TIME,
    "once": FrequencyType.ONE_TIME,
    "none": FrequencyType.ONE_TIME,
    "weekly": FrequencyType.WEEKLY,
    "biweekly": FrequencyType.BIWEEKLY,
    "bi-weekly": FrequencyType.BIWEEKLY,
    "every-2-weeks": FrequencyType.BIWEEKLY,
    "every-two-weeks": FrequencyType.BIWEEKLY,
    "fortnightly": FrequencyType.BIWEEKLY,
    "monthly": FrequencyType.MONTHLY,
    "semimonthly": FrequencyType.SEMIMONTHLY,
    "semi-monthly": FrequencyType.SEMIMONTHLY,
    "twice-monthly": FrequencyType.SEMIMONTHLY,
    "yearly": FrequencyType.YEARLY,
    "annual": FrequencyType.YEARLY,
    "annually": FrequencyType.YEARLY,
}


class RuleKind(str, Enum):
    """Whether a rule brings money in or takes it out."""

    INCOME = "income"
    BILL = "bill"
