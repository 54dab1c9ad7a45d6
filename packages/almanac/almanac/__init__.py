"""almanac - Calendar math for arbitrary calendar systems."""
from __future__ import annotations

from almanac.calendar import CalendarDriver
from almanac.duration import (
    DurationExpression,
    DurationUnits,
    is_valid_duration,
    parse_duration,
    roll_duration,
)
from almanac.leap import count_leap_years, cycle_length, gregorian_rules, is_leap_year
from almanac.loaders import calendar_from_dict, origin_from_dict
from almanac.rng import derive_seed, seeded_random
from almanac.types import (
    INTERCALARY,
    STANDARD,
    AlmanacError,
    CalendarDate,
    CalendarDefinition,
    CalendarDefinitionError,
    CalendarOrigin,
    DefinitionError,
    DurationError,
    EmptyDurationError,
    Era,
    Holiday,
    InvalidTokenError,
    LeapRule,
    MissingUnitError,
    MissingValueError,
    Month,
    NegativeDurationError,
    RandomSource,
    Season,
    TrailingOperatorError,
    ValidationIssue,
    ValidationReport,
)
from almanac.validation import validate_calendar, validate_calendar_or_raise

__all__ = [
    "AlmanacError",
    "CalendarDate",
    "CalendarDefinition",
    "CalendarDefinitionError",
    "CalendarDriver",
    "CalendarOrigin",
    "DefinitionError",
    "DurationError",
    "DurationExpression",
    "DurationUnits",
    "EmptyDurationError",
    "Era",
    "Holiday",
    "INTERCALARY",
    "InvalidTokenError",
    "LeapRule",
    "MissingUnitError",
    "MissingValueError",
    "Month",
    "NegativeDurationError",
    "RandomSource",
    "STANDARD",
    "Season",
    "TrailingOperatorError",
    "ValidationIssue",
    "ValidationReport",
    "calendar_from_dict",
    "count_leap_years",
    "cycle_length",
    "derive_seed",
    "gregorian_rules",
    "is_leap_year",
    "is_valid_duration",
    "origin_from_dict",
    "parse_duration",
    "roll_duration",
    "seeded_random",
    "validate_calendar",
    "validate_calendar_or_raise",
]
