"""Tests for Pydantic schema models."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from dateutil import tz
from pydantic import ValidationError

from paycheckplanner.schema import PlanFile, PlannerConfig, QueryWindow, RecurrenceRule
from paycheckplanner.types import FrequencyType, RuleKind
from tests.conftest import make_plan_dict


class TestFrequencyParsing:
    """Tests for loose frequency spellings."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("WEEKLY", FrequencyType.WEEKLY),
            ("weekly", FrequencyType.WEEKLY),
            ("Bi-Weekly", FrequencyType.BIWEEKLY),
            ("every 2 weeks", FrequencyType.BIWEEKLY),
            ("fortnightly", FrequencyType.BIWEEKLY),
            ("semi_monthly", FrequencyType.SEMIMONTHLY),
            ("twice monthly", FrequencyType.SEMIMONTHLY),
            ("Monthly", FrequencyType.MONTHLY),
            ("annually", FrequencyType.YEARLY),
            ("ONE_TIME", FrequencyType.ONE_TIME),
            ("once", FrequencyType.ONE_TIME),
        ],
    )
    def test_parse_known_spellings(self, raw, expected):
        assert FrequencyType.parse(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "quarterly", "whenever"])
    def test_unknown_spellings_are_one_time(self, raw):
        """Unrecognized repeat settings are treated as one-off."""
        assert FrequencyType.parse(raw) == FrequencyType.ONE_TIME

    def test_enum_member_passes_through(self):
        assert FrequencyType.parse(FrequencyType.YEARLY) is FrequencyType.YEARLY

    def test_is_recurring(self):
        assert not FrequencyType.ONE_TIME.is_recurring
        assert all(f.is_recurring for f in FrequencyType if f is not FrequencyType.ONE_TIME)


class TestRecurrenceRule:
    """Tests for RecurrenceRule model."""

    def test_minimal_rule(self):
        rule = RecurrenceRule(owner_id="rent", anchor_date=date(2024, 1, 1), amount=Decimal("1500"))

        assert rule.frequency == FrequencyType.ONE_TIME
        assert rule.kind == RuleKind.BILL
        assert rule.end_date is None
        assert rule.is_main is False

    def test_frequency_string_is_parsed(self):
        rule = RecurrenceRule(
            owner_id="pay", frequency="every two weeks", anchor_date=date(2024, 1, 5), amount=1
        )
        assert rule.frequency == FrequencyType.BIWEEKLY

    def test_datetime_fields_reduced_to_days(self):
        rule = RecurrenceRule(
            owner_id="pay",
            frequency="weekly",
            anchor_date=datetime(2024, 1, 5, 17, 30),
            end_date=datetime(2024, 6, 1, 8, 0),
            amount=1,
        )

        assert rule.anchor_date == date(2024, 1, 5)
        assert rule.end_date == date(2024, 6, 1)
        assert not isinstance(rule.anchor_date, datetime)

    def test_iso_string_dates(self):
        rule = RecurrenceRule(owner_id="x", anchor_date="2024-02-29", amount="10.00")
        assert rule.anchor_date == date(2024, 2, 29)
        assert rule.amount == Decimal("10.00")

    def test_float_amount_is_exact(self):
        rule = RecurrenceRule(owner_id="x", anchor_date=date(2024, 1, 1), amount=0.1)
        assert rule.amount == Decimal("0.1")

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            (1, 15, (1, 15)),
            (0, 31, (1, 28)),
            (-5, 29, (1, 28)),
            (None, None, (1, 15)),
            (10, None, (10, 15)),
        ],
    )
    def test_semimonthly_days_clamped(self, first, second, expected):
        rule = RecurrenceRule(
            owner_id="pay",
            frequency="semimonthly",
            anchor_date=date(2024, 1, 1),
            first_day_of_month=first,
            second_day_of_month=second,
            amount=1,
        )
        assert rule.semimonthly_days == expected

    @pytest.mark.parametrize("owner_id", ["", "   "])
    def test_blank_owner_id_rejected(self, owner_id):
        with pytest.raises(ValidationError, match="owner_id cannot be empty"):
            RecurrenceRule(owner_id=owner_id, anchor_date=date(2024, 1, 1), amount=1)

    def test_missing_anchor_rejected(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(owner_id="x", amount=1)

    def test_rule_is_frozen(self):
        rule = RecurrenceRule(owner_id="x", anchor_date=date(2024, 1, 1), amount=1)
        with pytest.raises(ValidationError):
            rule.amount = Decimal("2")


class TestQueryWindow:
    """Tests for QueryWindow model."""

    def test_contains_is_half_open(self):
        w = QueryWindow(start=date(2024, 1, 1), end=date(2024, 1, 31))

        assert w.contains(date(2024, 1, 1))
        assert w.contains(date(2024, 1, 30))
        assert not w.contains(date(2024, 1, 31))

    def test_inverted_window_allowed_and_empty(self):
        w = QueryWindow(start=date(2024, 2, 1), end=date(2024, 1, 1))

        assert w.is_empty
        assert not w.contains(date(2024, 1, 15))

    def test_datetimes_reduced_to_days(self):
        w = QueryWindow(start=datetime(2024, 1, 1, 12), end=datetime(2024, 2, 1, 23, 59))
        assert (w.start, w.end) == (date(2024, 1, 1), date(2024, 2, 1))

    def test_from_instants_uses_calendar(self):
        """An aware instant is placed on its day in the given calendar."""
        chicago = tz.gettz("America/Chicago")
        start = datetime(2024, 1, 6, 3, 0, tzinfo=timezone.utc)

        w = QueryWindow.from_instants(start, date(2024, 2, 1), chicago)

        assert w.start == date(2024, 1, 5)
        assert w.end == date(2024, 2, 1)

    def test_from_instants_accepts_zone_name(self):
        start = datetime(2024, 1, 6, 3, 0, tzinfo=timezone.utc)

        w = QueryWindow.from_instants(start, date(2024, 2, 1), "America/Chicago")

        assert w.start == date(2024, 1, 5)

    def test_from_instants_unknown_zone_name(self):
        with pytest.raises(ValueError, match="Unknown calendar"):
            QueryWindow.from_instants(datetime(2024, 1, 6), date(2024, 2, 1), "Mars/Olympus_Mons")

    def test_spanning(self):
        w = QueryWindow.spanning(date(2024, 1, 5), 14)
        assert w.end == date(2024, 1, 19)

    def test_spanning_past_last_day_stops_at_date_max(self):
        w = QueryWindow.spanning(date(9999, 12, 20), 30)

        assert w.end == date.max
        assert w.contains(date(9999, 12, 30))

    def test_clipped(self):
        w = QueryWindow(start=date(2024, 1, 1), end=date(2024, 2, 1))

        assert w.clipped(date(2024, 3, 1)) is w
        assert w.clipped(date(2024, 1, 20)).end == date(2024, 1, 20)


class TestPlannerConfig:
    """Tests for PlannerConfig model."""

    def test_defaults(self):
        config = PlannerConfig()

        assert config.currency == "USD"
        assert config.calendar == "UTC"
        assert config.bill_reminder_hour == 9
        assert config.payday_reminder_hour == 8
        assert config.cash_account == "Assets:Checking"

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_invalid_reminder_hour(self, hour):
        with pytest.raises(ValidationError, match="reminder hour"):
            PlannerConfig(bill_reminder_hour=hour)

    def test_invalid_period_count(self):
        with pytest.raises(ValidationError, match="period_count"):
            PlannerConfig(period_count=0)

    def test_unknown_calendar(self):
        with pytest.raises(ValidationError, match="Unknown calendar"):
            PlannerConfig(calendar="Mars/Olympus_Mons")


class TestPlanFile:
    """Tests for PlanFile model."""

    def test_kinds_follow_lists(self):
        """Rules under incomes are income, rules under bills are bills."""
        plan = PlanFile(**make_plan_dict())

        assert all(r.kind == RuleKind.INCOME for r in plan.incomes)
        assert all(r.kind == RuleKind.BILL for r in plan.bills)

    def test_listed_kind_overrides_declared_kind(self):
        data = make_plan_dict()
        data["bills"][0]["kind"] = "income"

        plan = PlanFile(**data)

        assert plan.bills[0].kind == RuleKind.BILL

    def test_rules_and_find(self):
        plan = PlanFile(**make_plan_dict())

        assert [r.owner_id for r in plan.rules] == ["paycheck", "rent", "phone", "car-registration"]
        assert plan.find("phone").amount == Decimal("45.50")
        assert plan.find("missing") is None

    def test_loose_frequencies_in_plan(self):
        plan = PlanFile(**make_plan_dict())

        assert plan.find("phone").frequency == FrequencyType.MONTHLY
        assert plan.find("car-registration").frequency == FrequencyType.ONE_TIME

    def test_empty_plan(self):
        plan = PlanFile()
        assert plan.rules == []
        assert plan.config == PlannerConfig()

    def test_source_file_not_dumped(self, tmp_path):
        plan = PlanFile(source_file=tmp_path / "plan.yaml")
        assert "source_file" not in plan.model_dump()
