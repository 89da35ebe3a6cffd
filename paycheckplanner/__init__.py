"""Paycheckplanner - recurring income and bill planning.

This package expands recurring income and bill rules into concrete dated
occurrences and answers the questions a paycheck budget needs from them:
what falls in this pay period, when is the next due date, and how much is
left over.

Main exports:
    RecurrenceEngine: Occurrence expansion, next-occurrence and totals
    RecurrenceRule: Immutable rule model
    QueryWindow: Half-open window of calendar days
"""

__version__ = "1.0.0"

from .recurrence import Occurrence, RecurrenceEngine
from .schema import QueryWindow, RecurrenceRule
from .types import FrequencyType, RuleKind

__all__ = [
    "FrequencyType",
    "Occurrence",
    "QueryWindow",
    "RecurrenceEngine",
    "RecurrenceRule",
    "RuleKind",
]
