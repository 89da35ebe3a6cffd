"""
Global constants for paycheckplanner.

This module centralizes iteration caps, file locations and default values
so the engine, loader and CLI agree on them.
"""

from decimal import Decimal

# ============================================================================
# File Paths and Directories
# ============================================================================

CONFIG_FILENAME = "_config.yaml"
PLAN_FILE_PATTERN = "*.yaml"
DEFAULT_PLAN_DIR = "plan"
DEFAULT_PLAN_FILE = "plan.yaml"
PLAN_FILE_VERSION = "1.0"

# Environment variables for plan location discovery
ENV_PLAN_DIR = "PAYCHECKPLANNER_DIR"
ENV_PLAN_FILE = "PAYCHECKPLANNER_FILE"

# ============================================================================
# Recurrence Safety Caps
# ============================================================================

# Expansion stops silently once a strider has taken this many steps.
WEEKLY_MAX_CYCLES = 520  # ~10 years of weekly steps
MONTHLY_MAX_CYCLES = 240  # ~20 years
YEARLY_MAX_CYCLES = 50

# ============================================================================
# Stride Lengths
# ============================================================================

DAYS_PER_WEEK = 7
WEEKLY_STRIDE_WEEKS = 1
BIWEEKLY_STRIDE_WEEKS = 2

# Longest gap between consecutive occurrences, per frequency (days).
# Used to size lookup windows for next/previous occurrence queries.
MAX_GAP_DAYS = {
    "WEEKLY": 7,
    "BIWEEKLY": 14,
    "MONTHLY": 31,
    "SEMIMONTHLY": 31,
    "YEARLY": 366,
}
LOOKUP_BUFFER_DAYS = 7

# ============================================================================
# Semimonthly Days
# ============================================================================

SEMIMONTHLY_MIN_DAY = 1
SEMIMONTHLY_MAX_DAY = 28
DEFAULT_SEMIMONTHLY_DAYS = (1, 15)

# ============================================================================
# Default Configuration Values
# ============================================================================

DEFAULT_CURRENCY = "USD"
DEFAULT_CALENDAR = "UTC"
DEFAULT_BILL_REMINDER_HOUR = 9
DEFAULT_PAYDAY_REMINDER_HOUR = 8
DEFAULT_PERIOD_COUNT = 6

DEFAULT_CASH_ACCOUNT = "Assets:Checking"
DEFAULT_INCOME_ACCOUNT = "Income:Salary"
DEFAULT_BILL_ACCOUNT = "Expenses:Bills"

# ============================================================================
# Reminder Identifiers
# ============================================================================

BILL_REMINDER_PREFIX = "bill"
PAYDAY_REMINDER_PREFIX = "payday"

# ============================================================================
# Forecast Export
# ============================================================================

FORECAST_FLAG = "#"
META_SCHEDULE_ID = "schedule-id"
META_FREQUENCY = "schedule-frequency"

# ============================================================================
# Financial/Decimal Constants
# ============================================================================

CENTS_PRECISION = Decimal("0.01")
ZERO_AMOUNT = Decimal("0")

# ============================================================================
# Display/Formatting Constants
# ============================================================================

MAX_TABLE_COLUMN_WIDTH = 30
