"""Pytest configuration and shared fixtures for paycheckplanner tests."""

from datetime import date
from decimal import Decimal

import pytest
import yaml

from paycheckplanner.recurrence import RecurrenceEngine
from paycheckplanner.schema import PlanFile, PlannerConfig, QueryWindow, RecurrenceRule
from paycheckplanner.types import FrequencyType, RuleKind

# ============================================================================
# Rule and Window Builders
# ============================================================================


def make_rule(
    owner_id: str = "test-rule",
    frequency: FrequencyType = FrequencyType.MONTHLY,
    anchor_date: date = date(2024, 1, 1),
    amount: Decimal = Decimal("100.00"),
    name: str = "Test Rule",
    kind: RuleKind = RuleKind.BILL,
    **kwargs,
) -> RecurrenceRule:
    """Create a RecurrenceRule with sensible defaults."""
    return RecurrenceRule(
        owner_id=owner_id,
        name=name,
        kind=kind,
        frequency=frequency,
        anchor_date=anchor_date,
        amount=amount,
        **kwargs,
    )


def make_income(
    owner_id: str = "paycheck",
    frequency: FrequencyType = FrequencyType.BIWEEKLY,
    anchor_date: date = date(2024, 1, 5),
    amount: Decimal = Decimal("2000.00"),
    **kwargs,
) -> RecurrenceRule:
    """Create an income rule (biweekly paycheck by default)."""
    kwargs.setdefault("name", "Paycheck")
    return make_rule(
        owner_id=owner_id,
        frequency=frequency,
        anchor_date=anchor_date,
        amount=amount,
        kind=RuleKind.INCOME,
        **kwargs,
    )


def window(start: date, end: date) -> QueryWindow:
    """Shorthand for a half-open QueryWindow."""
    return QueryWindow(start=start, end=end)


def make_plan_dict() -> dict:
    """A small plan: one biweekly paycheck, rent, a phone bill and a one-off."""
    return {
        "version": "1.0",
        "config": {"currency": "USD", "calendar": "America/Chicago"},
        "incomes": [
            {
                "owner_id": "paycheck",
                "name": "Paycheck",
                "frequency": "biweekly",
                "anchor_date": "2024-01-05",
                "amount": "2000.00",
                "is_main": True,
            },
        ],
        "bills": [
            {
                "owner_id": "rent",
                "name": "Rent",
                "frequency": "monthly",
                "anchor_date": "2024-01-01",
                "amount": "1500.00",
                "account": "Expenses:Housing:Rent",
            },
            {
                "owner_id": "phone",
                "name": "Phone",
                "frequency": "Monthly",
                "anchor_date": "2024-01-20",
                "amount": "45.50",
            },
            {
                "owner_id": "car-registration",
                "name": "Car Registration",
                "frequency": "once",
                "anchor_date": "2024-01-25",
                "amount": "120.00",
            },
        ],
    }


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def engine():
    """Fixture providing a recurrence engine."""
    return RecurrenceEngine()


@pytest.fixture
def sample_rule():
    """Fixture providing a rule builder function."""
    return make_rule


@pytest.fixture
def sample_income():
    """Fixture providing an income rule builder function."""
    return make_income


@pytest.fixture
def planner_config():
    """Fixture providing the default PlannerConfig."""
    return PlannerConfig()


@pytest.fixture
def sample_plan():
    """Fixture providing a validated PlanFile."""
    return PlanFile(**make_plan_dict())


@pytest.fixture
def plan_yaml_file(tmp_path):
    """Create a temporary plan.yaml file."""
    path = tmp_path / "plan.yaml"
    with path.open("w") as f:
        yaml.dump(make_plan_dict(), f)
    return path


@pytest.fixture
def plan_dir(tmp_path):
    """Create a temporary plan/ directory split across files."""
    plan = make_plan_dict()
    plan_path = tmp_path / "plan"
    plan_path.mkdir()

    with (plan_path / "_config.yaml").open("w") as f:
        yaml.dump(plan["config"], f)
    with (plan_path / "income.yaml").open("w") as f:
        yaml.dump({"incomes": plan["incomes"]}, f)
    with (plan_path / "bills.yaml").open("w") as f:
        yaml.dump({"bills": plan["bills"]}, f)

    return plan_path
