"""Tests for almanac.duration — compound duration expressions."""
from __future__ import annotations

import random

import pytest

from almanac.duration import (
    DurationUnits,
    is_valid_duration,
    parse_duration,
    roll_duration,
)
from almanac.presets import GREGORIAN, HARPTOS
from almanac.types import (
    DurationError,
    EmptyDurationError,
    InvalidTokenError,
    MissingUnitError,
    MissingValueError,
    NegativeDurationError,
    TrailingOperatorError,
)


class TestFixedTerms:
    def test_hours(self) -> None:
        assert roll_duration("6 hours") == 360

    def test_weeks_plus_days(self) -> None:
        assert roll_duration("2 weeks + 3 days") == 24480

    def test_every_unit(self) -> None:
        assert roll_duration("1 minute") == 1
        assert roll_duration("1 hour") == 60
        assert roll_duration("1 day") == 1440
        assert roll_duration("1 week") == 10080
        assert roll_duration("1 month") == 43200
        assert roll_duration("1 year") == 525600

    def test_case_and_plural_insensitive(self) -> None:
        assert roll_duration("3 HOURS") == 180
        assert roll_duration("1 Day") == 1440
        assert roll_duration("2 Minutes") == 2

    def test_whitespace_insignificant(self) -> None:
        assert roll_duration("2weeks+3days") == 24480
        assert roll_duration("   6   hours   ") == 360

    def test_leading_plus_is_noop(self) -> None:
        assert roll_duration("+1 hour") == 60

    def test_leading_minus_allowed_when_total_positive(self) -> None:
        assert roll_duration("-1 hour + 3 hours") == 120

    def test_adjacent_terms_add(self) -> None:
        assert roll_duration("1 hour 30 minutes") == 90

    def test_subtraction(self) -> None:
        assert roll_duration("1 day - 2 hours") == 1320

    def test_custom_units(self) -> None:
        units = DurationUnits(hours_per_day=10, days_per_week=5)
        assert roll_duration("1 day", units=units) == 600
        assert roll_duration("1 week", units=units) == 3000


class TestDice:
    def test_dice_consume_rng_in_term_order(self) -> None:
        expected_rng = random.Random(42)
        hours = expected_rng.randint(1, 4)
        minutes = expected_rng.randint(1, 6) + expected_rng.randint(1, 6)
        result = roll_duration("1d4 hours + 2d6 minutes", rng=random.Random(42))
        assert result == hours * 60 + minutes

    def test_same_seed_same_result(self) -> None:
        a = roll_duration("3d6 days", rng=random.Random(7))
        b = roll_duration("3d6 days", rng=random.Random(7))
        assert a == b

    def test_results_within_bounds(self) -> None:
        expr = parse_duration("2d6 hours")
        assert expr.has_dice is True
        assert expr.bounds() == (120, 720)
        rng = random.Random(3)
        for _ in range(50):
            assert 120 <= expr.evaluate(rng=rng) <= 720

    def test_bounds_with_subtraction(self) -> None:
        assert parse_duration("1 day - 1d6 hours").bounds() == (1080, 1380)

    def test_zero_dice_rejected(self) -> None:
        with pytest.raises(InvalidTokenError):
            parse_duration("0d6 hours")


class TestErrors:
    def test_negative_total(self) -> None:
        with pytest.raises(NegativeDurationError):
            roll_duration("1 hour - 2 hours")

    def test_trailing_operator(self) -> None:
        with pytest.raises(TrailingOperatorError) as exc_info:
            roll_duration("5 hours +")
        assert exc_info.value.fragment == "+"

    def test_empty(self) -> None:
        with pytest.raises(EmptyDurationError):
            parse_duration("")
        with pytest.raises(EmptyDurationError):
            parse_duration("   ")

    def test_missing_unit(self) -> None:
        with pytest.raises(MissingUnitError) as exc_info:
            parse_duration("5")
        assert exc_info.value.fragment == "5"
        with pytest.raises(MissingUnitError):
            parse_duration("5 hours + 2")

    def test_missing_value(self) -> None:
        with pytest.raises(MissingValueError):
            parse_duration("hours")
        with pytest.raises(MissingValueError):
            parse_duration("5 hours + + 2 hours")

    def test_lone_operator(self) -> None:
        with pytest.raises(TrailingOperatorError):
            parse_duration("-")

    def test_unknown_unit(self) -> None:
        with pytest.raises(InvalidTokenError) as exc_info:
            parse_duration("2 fortnights")
        assert exc_info.value.fragment == "fortnights"

    def test_unknown_character(self) -> None:
        with pytest.raises(InvalidTokenError):
            parse_duration("5 hours * 2")

    def test_errors_share_base(self) -> None:
        for cls in (
            EmptyDurationError,
            InvalidTokenError,
            MissingUnitError,
            MissingValueError,
            NegativeDurationError,
            TrailingOperatorError,
        ):
            assert issubclass(cls, DurationError)
            assert issubclass(cls, ValueError)

    def test_message_names_expression(self) -> None:
        with pytest.raises(DurationError, match="5 hours"):
            parse_duration("5 hours +")

    def test_is_valid_duration(self) -> None:
        assert is_valid_duration("1d6 days") is True
        assert is_valid_duration("1d6") is False


class TestUnitsForCalendar:
    def test_harptos_ten_day_week(self) -> None:
        units = DurationUnits.for_calendar(HARPTOS)
        assert units.days_per_week == 10
        assert units.days_per_month == 30
        assert units.days_per_year == 365

    def test_gregorian(self) -> None:
        units = DurationUnits.for_calendar(GREGORIAN)
        assert units.days_per_week == 7
        assert units.days_per_month == 30
        assert units.days_per_year == 365
        assert units.minutes_per_day == 1440
