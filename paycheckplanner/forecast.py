"""Export projected occurrences as Beancount forecast transactions.

Each occurrence becomes a ``#``-flagged transaction dated on its occurrence
day, so a ledger can show upcoming paychecks and bills next to real entries:

    2024-01-05 # "Paycheck" "Projected BIWEEKLY occurrence"
      schedule-id: "paycheck"
      schedule-frequency: "BIWEEKLY"
      Assets:Checking   2500.00 USD
      Income:Salary    -2500.00 USD
"""

import logging
from typing import Iterable, Optional

from beancount.core import amount, data
from beancount.parser import printer

from . import constants
from .recurrence import Occurrence, RecurrenceEngine
from .schema import PlannerConfig, QueryWindow, RecurrenceRule
from .types import RuleKind

logger = logging.getLogger(__name__)

FORECAST_SOURCE = "<paycheckplanner>"


def _posting(account: str, value, currency: str) -> data.Posting:
    return data.Posting(
        account=account,
        units=amount.Amount(value, currency),
        cost=None,
        price=None,
        flag=None,
        meta=None,
    )


def forecast_transaction(
    rule: RecurrenceRule,
    occurrence: Occurrence,
    config: PlannerConfig,
) -> data.Transaction:
    """
    Build one forecast transaction for an occurrence of ``rule``.

    Income moves money from the rule's income account into the cash account;
    a bill moves it from the cash account into the rule's expense account.
    """
    value = occurrence.amount.quantize(constants.CENTS_PRECISION)

    if rule.kind == RuleKind.INCOME:
        source = rule.account or config.income_account
        postings = [
            _posting(config.cash_account, value, config.currency),
            _posting(source, -value, config.currency),
        ]
    else:
        target = rule.account or config.bill_account
        postings = [
            _posting(target, value, config.currency),
            _posting(config.cash_account, -value, config.currency),
        ]

    meta = data.new_metadata(FORECAST_SOURCE, 0)
    meta[constants.META_SCHEDULE_ID] = occurrence.owner_id
    meta[constants.META_FREQUENCY] = occurrence.frequency.value

    return data.Transaction(
        meta=meta,
        date=occurrence.date,
        flag=constants.FORECAST_FLAG,
        payee=occurrence.name or occurrence.owner_id,
        narration=f"Projected {occurrence.frequency.value} occurrence",
        tags=frozenset(),
        links=frozenset(),
        postings=postings,
    )


def forecast_entries(
    rules: Iterable[RecurrenceRule],
    window: QueryWindow,
    config: Optional[PlannerConfig] = None,
    engine: Optional[RecurrenceEngine] = None,
) -> list[data.Transaction]:
    """Forecast transactions for every occurrence of ``rules`` in the window, by date."""
    config = config or PlannerConfig()
    engine = engine or RecurrenceEngine()

    entries = [
        forecast_transaction(rule, occurrence, config)
        for rule in rules
        for occurrence in engine.occurrences(rule, window)
    ]
    entries.sort(key=lambda txn: txn.date)

    logger.debug("Generated %d forecast entries for %s..%s", len(entries), window.start, window.end)
    return entries


def format_entries(entries: Iterable[data.Directive]) -> str:
    """Render entries as Beancount ledger text."""
    return "\n".join(printer.format_entry(entry) for entry in entries)
