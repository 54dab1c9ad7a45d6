"""Tests for almanac.calendar — CalendarDriver."""
from __future__ import annotations

import datetime
from dataclasses import replace

import pytest

from almanac.calendar import CalendarDriver
from almanac.presets import GREGORIAN, HARPTOS, SIMPLE_COUNTER
from almanac.types import (
    INTERCALARY,
    CalendarDefinition,
    CalendarDefinitionError,
    CalendarOrigin,
    LeapRule,
    Month,
    Season,
)

ROUND_TRIP_DAYS = (0, 1, 365, 1000, 10000, 100000, 10**9, 10**10)


def proleptic() -> CalendarDriver:
    """Gregorian calendar with day 0 = 0001-01-01, comparable to datetime ordinals."""
    return CalendarDriver(replace(GREGORIAN, starting_year=1))


class TestGetDate:
    def test_day_zero_is_starting_year(self) -> None:
        date = CalendarDriver(GREGORIAN).get_date(0)
        assert (date.year, date.month_index, date.day_of_month) == (2024, 0, 1)
        assert date.month_name == "January"
        assert date.year_suffix == "AD"
        assert date.is_intercalary is False
        assert date.is_simple_counter is False

    def test_leap_day(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        feb29 = driver.get_date(59)
        assert (feb29.month_name, feb29.day_of_month) == ("February", 29)
        mar1 = driver.get_date(60)
        assert (mar1.month_name, mar1.day_of_month) == ("March", 1)

    def test_next_year_starts_after_366_days(self) -> None:
        date = CalendarDriver(GREGORIAN).get_date(366)
        assert (date.year, date.month_index, date.day_of_month) == (2025, 0, 1)

    def test_matches_datetime_ordinals(self) -> None:
        driver = proleptic()
        for day in (0, 1, 59, 365, 730119, 738885, 1_000_000, 3_652_058):
            expected = datetime.date.fromordinal(day + 1)
            date = driver.get_date(day)
            assert (date.year, date.month_index + 1, date.day_of_month) == (
                expected.year,
                expected.month,
                expected.day,
            )

    def test_negative_days_reach_previous_year(self) -> None:
        date = CalendarDriver(GREGORIAN).get_date(-1)
        assert (date.year, date.month_name, date.day_of_month) == (2023, "December", 31)


class TestRoundTrip:
    @pytest.mark.parametrize("day", ROUND_TRIP_DAYS)
    def test_gregorian(self, day: int) -> None:
        driver = CalendarDriver(GREGORIAN)
        date = driver.get_date(day)
        assert driver.get_absolute_day(date.year, date.month_index, date.day_of_month) == day

    @pytest.mark.parametrize("day", ROUND_TRIP_DAYS)
    def test_harptos(self, day: int) -> None:
        driver = CalendarDriver(HARPTOS)
        date = driver.get_date(day)
        assert driver.get_absolute_day(date.year, date.month_index, date.day_of_month) == day

    def test_contiguous_range_across_leap_years(self) -> None:
        driver = CalendarDriver(HARPTOS)
        for day in range(0, 3000):
            date = driver.get_date(day)
            assert driver.get_absolute_day(date.year, date.month_index, date.day_of_month) == day

    def test_consecutive_days_are_consecutive_dates(self) -> None:
        driver = proleptic()
        base = 10**10
        for day in range(base, base + 800):
            today = driver.get_date(day)
            tomorrow = driver.get_date(day + 1)
            if today.day_of_month < driver.days_in_month(today.year, today.month_index):
                assert tomorrow.day_of_month == today.day_of_month + 1
            else:
                assert tomorrow.day_of_month == 1

    def test_huge_day_matches_year_arithmetic(self) -> None:
        driver = proleptic()
        year = 27_379_000
        day = driver.get_absolute_day(year, 0, 1)
        leaps = driver.count_leap_years(1, year)
        assert day == (year - 1) * 365 + leaps
        assert driver.get_date(day).year == year


class TestGetAbsoluteDay:
    def test_known_ordinal(self) -> None:
        assert proleptic().get_absolute_day(2000, 0, 1) == 730119

    def test_month_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            CalendarDriver(GREGORIAN).get_absolute_day(2024, 12, 1)

    def test_day_out_of_range(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.get_absolute_day(2024, 1, 29) == 59
        with pytest.raises(ValueError):
            driver.get_absolute_day(2025, 1, 29)
        with pytest.raises(ValueError):
            driver.get_absolute_day(2025, 0, 0)


class TestLeapYears:
    def test_days_in_year(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.days_in_year(2024) == 366
        assert driver.days_in_year(2025) == 365
        assert driver.days_in_year(2100) == 365
        assert driver.days_in_year(2000) == 366

    def test_days_in_year_tracks_is_leap_year(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        for year in range(1800, 2400):
            assert (driver.days_in_year(year) == 366) == driver.is_leap_year(year)

    def test_untargeted_rule_extends_last_month(self) -> None:
        definition = CalendarDefinition(
            id="two",
            name="Two Months",
            months=(Month("First", 10), Month("Second", 10)),
            leap_rules=(LeapRule(interval=2),),
            starting_year=1,
        )
        driver = CalendarDriver(definition)
        assert driver.leap_target_month(2) == 1
        assert driver.days_in_month(2, 1) == 11
        assert driver.days_in_month(2, 0) == 10
        assert driver.days_in_year(2) == 21
        assert driver.days_in_year(3) == 20

    def test_cycle_properties(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.cycle_years == 400
        assert driver.cycle_days == 146097
        assert CalendarDriver(SIMPLE_COUNTER).cycle_years == 1

    def test_count_leap_years(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.count_leap_years(1896, 1905) == 2
        assert driver.count_leap_years(1996, 2005) == 3


class TestWeekdays:
    def test_day_zero_is_first_weekday(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.get_date(0).day_of_week == "Sunday"
        assert driver.get_date(1).day_of_week == "Monday"
        assert driver.get_date(7).day_of_week == "Sunday"

    def test_weekdays_cycle_continuously(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        names = driver.weekdays
        for day in range(0, 800):
            assert driver.get_date(day).day_of_week == names[day % 7]

    def test_intercalary_days_have_no_weekday(self) -> None:
        driver = CalendarDriver(HARPTOS)
        assert driver.get_date(29).day_of_week == "Tenth-day"  # Hammer 30
        assert driver.get_date(30).day_of_week == ""  # Midwinter
        assert driver.get_date(31).day_of_week == "First-day"  # Alturiak 1

    def test_simple_counter(self) -> None:
        driver = CalendarDriver(SIMPLE_COUNTER)
        date = driver.get_date(9)
        assert date.is_simple_counter is True
        assert date.day_of_week == ""
        assert date.year == 10


class TestOrigin:
    def test_origin_maps_day_zero(self) -> None:
        driver = CalendarDriver(GREGORIAN, origin=CalendarOrigin(2024, 2, 15))
        date = driver.get_date(0)
        assert (date.year, date.month_name, date.day_of_month) == (2024, "March", 15)
        assert driver.get_absolute_day(2024, 2, 15) == 0
        assert driver.get_absolute_day(2024, 0, 1) == -74

    def test_origin_day_is_first_weekday(self) -> None:
        driver = CalendarDriver(GREGORIAN, origin=CalendarOrigin(2024, 2, 15))
        assert driver.get_date(0).day_of_week == "Sunday"

    def test_origin_round_trip(self) -> None:
        driver = CalendarDriver(HARPTOS, origin=CalendarOrigin(1372, 9, 1))
        for day in (0, 1, 365, 1000, 10**9):
            date = driver.get_date(day)
            assert driver.get_absolute_day(date.year, date.month_index, date.day_of_month) == day

    def test_invalid_origin_raises(self) -> None:
        with pytest.raises(ValueError):
            CalendarDriver(GREGORIAN, origin=CalendarOrigin(2025, 1, 29))


class TestErasAndFormatting:
    def test_era_suffix(self) -> None:
        driver = CalendarDriver(HARPTOS, origin=CalendarOrigin(0, 0, 1))
        assert driver.get_date(0).year_suffix == "BD"
        assert driver.display_year(0) == 1
        assert driver.year_suffix(1492) == "DR"
        assert driver.get_era(1492).name == "Dalereckoning"

    def test_fallback_suffix(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.get_era(2024) is None
        assert driver.year_suffix(2024) == "AD"

    def test_format_date(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.format_date(driver.get_date(0)) == "Sunday, January 1, 2024 AD"

    def test_format_backward_era(self) -> None:
        driver = CalendarDriver(HARPTOS, origin=CalendarOrigin(-4, 0, 1))
        assert driver.format_date(driver.get_date(30)) == "Midwinter 1, 5 BD"


class TestHolidays:
    def test_holiday_lookup(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert [h.name for h in driver.get_holidays(0)] == ["New Year's Day"]
        christmas = driver.get_absolute_day(2024, 11, 25)
        assert [h.name for h in driver.get_holidays(christmas)] == ["Christmas"]
        assert driver.get_holidays(1) == []


class TestSeasons:
    def test_wraps_to_last_season(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.get_season(0).name == "Winter"

    def test_season_by_date(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.get_season(driver.get_absolute_day(2024, 6, 1)).name == "Summer"
        assert driver.get_season(driver.get_absolute_day(2024, 2, 20)).name == "Spring"
        assert driver.get_season(driver.get_absolute_day(2024, 2, 19)).name == "Winter"

    def test_solar_defaults_without_seasons(self) -> None:
        assert CalendarDriver(HARPTOS).get_solar_times(0) == (360, 1080)

    def test_regional_seasons(self) -> None:
        definition = CalendarDefinition(
            id="regional",
            name="Regional",
            months=(Month("Only", 100),),
            seasons=(
                Season("Bright", 0, 1, sunrise=300, sunset=1200),
                Season("Polar Bright", 0, 1, sunrise=60, sunset=1400, region="polar"),
            ),
        )
        driver = CalendarDriver(definition)
        assert driver.get_solar_times(5) == (300, 1200)
        assert driver.get_solar_times(5, region="polar") == (60, 1400)
        assert driver.get_solar_times(5, region="desert") == (300, 1200)

    def test_sun_state_and_light(self) -> None:
        driver = CalendarDriver(GREGORIAN)  # winter: sunrise 450, sunset 1020
        assert driver.get_sun_state(0, 420) == "dawn"
        assert driver.get_sun_state(0, 479) == "dawn"
        assert driver.get_sun_state(0, 600) == "day"
        assert driver.get_sun_state(0, 1020) == "dusk"
        assert driver.get_sun_state(0, 1200) == "night"
        assert driver.get_light_level(0, 600) == "bright"
        assert driver.get_light_level(0, 450) == "dim"
        assert driver.get_light_level(0, 0) == "dark"

    def test_sun_state_uses_clock(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        driver.set_time_of_day(720)
        assert driver.get_sun_state(0) == "day"


class TestTimeOfDay:
    def test_advance_within_day(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        assert driver.advance_time(90) == 0
        assert driver.time_of_day == 90

    def test_advance_rolls_over(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        driver.set_time_of_day(1430)
        assert driver.advance_time(1440 * 2 + 20) == 3
        assert driver.time_of_day == 10

    def test_negative_advance_raises(self) -> None:
        with pytest.raises(ValueError):
            CalendarDriver(GREGORIAN).advance_time(-1)

    def test_set_time_clamps(self) -> None:
        driver = CalendarDriver(GREGORIAN)
        driver.set_time_of_day(5000)
        assert driver.time_of_day == 1439
        driver.set_time_of_day(-5)
        assert driver.time_of_day == 0


class TestConstruction:
    def test_requires_standard_month(self) -> None:
        definition = CalendarDefinition(
            id="bad", name="Bad", months=(Month("Fest", 1, kind=INTERCALARY),)
        )
        with pytest.raises(CalendarDefinitionError):
            CalendarDriver(definition)

    def test_rejects_out_of_range_leap_target(self) -> None:
        definition = CalendarDefinition(
            id="bad",
            name="Bad",
            months=(Month("Only", 30),),
            leap_rules=(LeapRule(interval=4, target_month=3),),
        )
        with pytest.raises(CalendarDefinitionError):
            CalendarDriver(definition)

    def test_rejects_non_positive_minutes_per_day(self) -> None:
        with pytest.raises(ValueError):
            CalendarDriver(GREGORIAN, minutes_per_day=0)
