"""CalendarDriver: absolute day counter <-> structured date for any calendar."""
from __future__ import annotations

from bisect import bisect_right

from almanac.leap import LeapCycle, is_leap_year, matching_rule
from almanac.types import (
    CalendarDate,
    CalendarDefinition,
    CalendarDefinitionError,
    CalendarOrigin,
    Era,
    Holiday,
    Month,
    Season,
)

MINUTES_PER_DAY = 1440
TWILIGHT_MINUTES = 30  # each side of sunrise and sunset
DEFAULT_SUNRISE = 360
DEFAULT_SUNSET = 1080

DAWN = "dawn"
DAY = "day"
DUSK = "dusk"
NIGHT = "night"


class CalendarDriver:
    """Converts between absolute days and dates for one calendar definition.

    Leap years repeat with the rule tree's cycle (400 years for Gregorian),
    so the driver precomputes cumulative day counts for a single cycle and
    answers every query with one divmod and one bisect, however large the
    day number. Calendars without leap rules have a one-year cycle.

    Also tracks a minutes-since-midnight clock for sub-day advancement.
    """

    def __init__(
        self,
        definition: CalendarDefinition,
        origin: CalendarOrigin | None = None,
        minutes_per_day: int = MINUTES_PER_DAY,
    ) -> None:
        if minutes_per_day <= 0:
            raise ValueError("minutes_per_day must be positive")
        months = tuple(definition.months)
        if not any(not month.is_intercalary for month in months):
            raise CalendarDefinitionError(
                f"calendar {definition.id!r} needs at least one standard month"
            )
        for index, month in enumerate(months):
            if month.days < 1:
                raise CalendarDefinitionError(
                    f"month {index} ({month.name!r}) must have at least one day"
                )
        for rule in definition.leap_rules:
            if rule.target_month is not None and not 0 <= rule.target_month < len(months):
                raise CalendarDefinitionError(
                    f"leap rule targets month {rule.target_month}, "
                    f"calendar has {len(months)} months"
                )

        self._definition = definition
        self._months: tuple[Month, ...] = months
        self._weekdays = tuple(definition.weekdays)
        self._rules = tuple(definition.leap_rules)
        self._origin = origin
        self._minutes_per_day = minutes_per_day
        self._time_of_day = 0

        self._base_lengths = tuple(month.days for month in months)
        self._leap_cycle = LeapCycle(self._rules)
        self._base_year = origin.year if origin is not None else definition.starting_year

        # Cumulative days, and weekday-counted days, over one leap cycle
        year_prefix = [0]
        week_prefix = [0]
        for offset in range(self._leap_cycle.years):
            lengths = self._month_lengths(self._base_year + offset)
            year_prefix.append(year_prefix[-1] + sum(lengths))
            week_prefix.append(week_prefix[-1] + self._counted_days(lengths))
        self._year_prefix = year_prefix
        self._week_prefix = week_prefix

        self._origin_shift = 0
        self._origin_week_shift = 0
        if origin is not None:
            self._check_date(origin.year, origin.month, origin.day)
            self._origin_shift = (
                sum(self._month_lengths(origin.year)[: origin.month]) + origin.day - 1
            )
            self._origin_week_shift = self._week_count(origin.year, origin.month, origin.day)

    # --- Properties ---

    @property
    def definition(self) -> CalendarDefinition:
        return self._definition

    @property
    def origin(self) -> CalendarOrigin | None:
        return self._origin

    @property
    def months(self) -> tuple[Month, ...]:
        return self._months

    @property
    def weekdays(self) -> tuple[str, ...]:
        return self._weekdays

    @property
    def is_simple_counter(self) -> bool:
        """No weekday concept: dates carry an empty ``day_of_week``."""
        return not self._weekdays

    @property
    def year_length(self) -> int:
        """Days in a non-leap year."""
        return sum(self._base_lengths)

    @property
    def cycle_years(self) -> int:
        return self._leap_cycle.years

    @property
    def cycle_days(self) -> int:
        return self._year_prefix[-1]

    @property
    def minutes_per_day(self) -> int:
        return self._minutes_per_day

    @property
    def time_of_day(self) -> int:
        """Minutes since midnight."""
        return self._time_of_day

    # --- Conversion ---

    def get_date(self, day: int) -> CalendarDate:
        """Structured date for an absolute day."""
        shifted = day + self._origin_shift
        cycles, remainder = divmod(shifted, self.cycle_days)
        offset = bisect_right(self._year_prefix, remainder) - 1
        year = self._base_year + cycles * self._leap_cycle.years + offset
        day_of_year = remainder - self._year_prefix[offset]

        month_index = 0
        for month_index, length in enumerate(self._month_lengths(year)):
            if day_of_year < length:
                break
            day_of_year -= length
        return self._make_date(year, month_index, day_of_year + 1)

    def get_absolute_day(self, year: int, month_index: int, day_of_month: int) -> int:
        """Absolute day for a date. Inverse of ``get_date``.

        Raises:
            ValueError: If the month index or day of month is out of range
                for that year.
        """
        self._check_date(year, month_index, day_of_month)
        return (
            self._days_before_year(year)
            + sum(self._month_lengths(year)[:month_index])
            + day_of_month
            - 1
            - self._origin_shift
        )

    def format_date(self, date: CalendarDate) -> str:
        """Human-readable date, e.g. ``"Tuesday, March 4, 2025 AD"``."""
        text = f"{date.month_name} {date.day_of_month}, {self.display_year(date.year)}"
        if date.year_suffix:
            text = f"{text} {date.year_suffix}"
        if date.day_of_week:
            text = f"{date.day_of_week}, {text}"
        return text

    # --- Years and leap rules ---

    def is_leap_year(self, year: int) -> bool:
        return is_leap_year(year, self._rules)

    def leap_target_month(self, year: int) -> int | None:
        """Month index that gains the leap day in ``year``, None if not leap."""
        rule = matching_rule(year, self._rules)
        if rule is None:
            return None
        if rule.target_month is None:
            return len(self._months) - 1
        return rule.target_month

    def days_in_year(self, year: int) -> int:
        return sum(self._month_lengths(year))

    def days_in_month(self, year: int, month_index: int) -> int:
        if not 0 <= month_index < len(self._months):
            raise ValueError(f"month index {month_index} out of range")
        return self._month_lengths(year)[month_index]

    def count_leap_years(self, start: int, end: int) -> int:
        """Leap years in ``[start, end)``."""
        return self._leap_cycle.count(start, end)

    def get_era(self, year: int) -> Era | None:
        for era in self._definition.eras:
            if era.contains(year):
                return era
        return None

    def year_suffix(self, year: int) -> str:
        era = self.get_era(year)
        if era is not None:
            return era.abbrev
        return self._definition.year_suffix

    def display_year(self, year: int) -> int:
        """Year as counted by its era. Backward eras count down to their end."""
        era = self.get_era(year)
        if era is not None and era.direction < 0 and era.end_year is not None:
            return era.end_year - year
        return year

    # --- Holidays, seasons, and daylight ---

    def get_holidays(self, day: int) -> list[Holiday]:
        date = self.get_date(day)
        return [
            holiday
            for holiday in self._definition.holidays
            if holiday.month == date.month_index and holiday.day == date.day_of_month
        ]

    def get_season(self, day: int, region: str | None = None) -> Season | None:
        """Season in effect on ``day``.

        Region-specific seasons are consulted first when a region is given;
        otherwise, or when none match, the regionless seasons are used.
        """
        date = self.get_date(day)
        if region is not None:
            season = self._find_season(date, region)
            if season is not None:
                return season
        return self._find_season(date, None)

    def get_solar_times(self, day: int, region: str | None = None) -> tuple[int, int]:
        """``(sunrise, sunset)`` in minutes after midnight."""
        season = self.get_season(day, region)
        if season is None:
            return DEFAULT_SUNRISE, DEFAULT_SUNSET
        return season.sunrise, season.sunset

    def get_sun_state(
        self, day: int, time_of_day: int | None = None, region: str | None = None
    ) -> str:
        """One of ``dawn``, ``day``, ``dusk``, ``night``."""
        minutes = self._time_of_day if time_of_day is None else time_of_day
        sunrise, sunset = self.get_solar_times(day, region)
        if sunrise - TWILIGHT_MINUTES <= minutes < sunrise + TWILIGHT_MINUTES:
            return DAWN
        if sunrise + TWILIGHT_MINUTES <= minutes < sunset - TWILIGHT_MINUTES:
            return DAY
        if sunset - TWILIGHT_MINUTES <= minutes < sunset + TWILIGHT_MINUTES:
            return DUSK
        return NIGHT

    def get_light_level(
        self, day: int, time_of_day: int | None = None, region: str | None = None
    ) -> str:
        """One of ``bright``, ``dim``, ``dark``."""
        state = self.get_sun_state(day, time_of_day, region)
        if state == DAY:
            return "bright"
        if state == NIGHT:
            return "dark"
        return "dim"

    # --- Time of day ---

    def set_time_of_day(self, minutes: int) -> None:
        """Set the clock, clamped to one day."""
        self._time_of_day = max(0, min(minutes, self._minutes_per_day - 1))

    def advance_time(self, minutes: int) -> int:
        """Advance the clock. Returns the number of whole days rolled over."""
        if minutes < 0:
            raise ValueError("cannot advance time by a negative amount")
        days, self._time_of_day = divmod(self._time_of_day + minutes, self._minutes_per_day)
        return days

    # --- Internal helpers ---

    def _month_lengths(self, year: int) -> list[int]:
        lengths = list(self._base_lengths)
        target = self.leap_target_month(year)
        if target is not None:
            lengths[target] += 1
        return lengths

    def _counted_days(self, lengths: list[int]) -> int:
        """Days that advance the weekday cycle. Intercalary days do not."""
        return sum(
            length
            for length, month in zip(lengths, self._months)
            if not month.is_intercalary
        )

    def _days_before_year(self, year: int) -> int:
        cycles, offset = divmod(year - self._base_year, self._leap_cycle.years)
        return cycles * self.cycle_days + self._year_prefix[offset]

    def _week_count(self, year: int, month_index: int, day_of_month: int) -> int:
        """Weekday-counted days from the base year's start to this date."""
        cycles, offset = divmod(year - self._base_year, self._leap_cycle.years)
        count = cycles * self._week_prefix[-1] + self._week_prefix[offset]
        count += self._counted_days(self._month_lengths(year)[:month_index])
        if not self._months[month_index].is_intercalary:
            count += day_of_month - 1
        return count

    def _check_date(self, year: int, month_index: int, day_of_month: int) -> None:
        if not 0 <= month_index < len(self._months):
            raise ValueError(
                f"month index {month_index} out of range (0-{len(self._months) - 1})"
            )
        length = self._month_lengths(year)[month_index]
        if not 1 <= day_of_month <= length:
            raise ValueError(
                f"day {day_of_month} out of range for {self._months[month_index].name} "
                f"{year} (1-{length})"
            )

    def _make_date(self, year: int, month_index: int, day_of_month: int) -> CalendarDate:
        month = self._months[month_index]
        weekday = ""
        if self._weekdays and not month.is_intercalary:
            count = self._week_count(year, month_index, day_of_month) - self._origin_week_shift
            weekday = self._weekdays[count % len(self._weekdays)]
        return CalendarDate(
            year=year,
            month_index=month_index,
            day_of_month=day_of_month,
            month_name=month.name,
            day_of_week=weekday,
            year_suffix=self.year_suffix(year),
            is_intercalary=month.is_intercalary,
            is_simple_counter=self.is_simple_counter,
        )

    def _find_season(self, date: CalendarDate, region: str | None) -> Season | None:
        candidates = sorted(
            (s for s in self._definition.seasons if s.region == region),
            key=lambda s: (s.start_month, s.start_day),
        )
        if not candidates:
            return None
        active = candidates[-1]  # wraps around from the previous year
        for season in candidates:
            if (season.start_month, season.start_day) <= (date.month_index, date.day_of_month):
                active = season
            else:
                break
        return active
