"""Calendar definition validation. Run before building a CalendarDriver."""
from __future__ import annotations

from typing import Sequence

from almanac.calendar import CalendarDriver
from almanac.leap import cycle_length
from almanac.types import (
    MONTH_KINDS,
    CalendarDefinition,
    CalendarDefinitionError,
    LeapRule,
    Month,
    ValidationReport,
)

MAX_CYCLE_YEARS = 1_000_000
ROUND_TRIP_DAYS = (0, 1, 365, 1000, 10000, 100000)


def validate_calendar(definition: CalendarDefinition) -> ValidationReport:
    """Structural checks, then a conversion smoke test when those pass."""
    report = ValidationReport()
    months = list(definition.months)

    if not definition.id:
        report.error("id", "calendar id is required")
    if not months:
        report.error("months", "calendar has no months")
    elif all(month.is_intercalary for month in months):
        report.error("months", "at least one standard month is required")

    seen: set[str] = set()
    for index, month in enumerate(months):
        path = f"months[{index}]"
        if not month.name:
            report.error(f"{path}.name", "month name is required")
        elif month.name in seen:
            report.error(f"{path}.name", f"duplicate month name {month.name!r}")
        seen.add(month.name)
        if month.days < 1:
            report.error(f"{path}.days", f"must be at least 1, got {month.days}")
        if month.kind not in MONTH_KINDS:
            report.error(f"{path}.kind", f"unknown month kind {month.kind!r}")

    if len(set(definition.weekdays)) != len(definition.weekdays):
        report.warn("weekdays", "weekday names repeat")

    _check_leap_rules(definition.leap_rules, len(months), "leap_rules", report)
    if report.is_valid and definition.leap_rules:
        cycle = cycle_length(definition.leap_rules)
        if cycle > MAX_CYCLE_YEARS:
            report.error(
                "leap_rules", f"leap cycle of {cycle} years exceeds {MAX_CYCLE_YEARS}"
            )

    for index, holiday in enumerate(definition.holidays):
        _check_month_day(holiday.month, holiday.day, months, f"holidays[{index}]", report)

    for index, season in enumerate(definition.seasons):
        path = f"seasons[{index}]"
        _check_month_day(season.start_month, season.start_day, months, path, report)
        for name, value in (("sunrise", season.sunrise), ("sunset", season.sunset)):
            if not 0 <= value <= 1439:
                report.error(f"{path}.{name}", f"must be within 0-1439, got {value}")
        if season.sunrise >= season.sunset:
            report.warn(path, "sunrise is not before sunset")

    for index, era in enumerate(definition.eras):
        if era.end_year is not None and era.end_year <= era.start_year:
            report.error(f"eras[{index}]", "end_year must be after start_year")
        if era.direction not in (1, -1):
            report.error(f"eras[{index}].direction", "must be 1 or -1")

    if report.is_valid:
        _check_round_trip(definition, report)
    return report


def validate_calendar_or_raise(definition: CalendarDefinition) -> ValidationReport:
    """Like ``validate_calendar`` but raises CalendarDefinitionError on errors."""
    report = validate_calendar(definition)
    if not report.is_valid:
        raise CalendarDefinitionError.from_report(f"calendar {definition.id!r}", report)
    return report


def _check_leap_rules(
    rules: Sequence[LeapRule], month_count: int, path: str, report: ValidationReport
) -> None:
    for index, rule in enumerate(rules):
        rule_path = f"{path}[{index}]"
        if rule.interval < 1:
            report.error(f"{rule_path}.interval", f"must be at least 1, got {rule.interval}")
        if rule.target_month is not None and not 0 <= rule.target_month < month_count:
            report.error(
                f"{rule_path}.target_month",
                f"month {rule.target_month} does not exist ({month_count} months)",
            )
        _check_leap_rules(rule.exclude, month_count, f"{rule_path}.exclude", report)


def _check_month_day(
    month_index: int, day: int, months: list[Month], path: str, report: ValidationReport
) -> None:
    if not 0 <= month_index < len(months):
        report.error(path, f"month {month_index} does not exist")
        return
    # Leap days may extend a month by one
    if not 1 <= day <= months[month_index].days + 1:
        report.error(path, f"day {day} does not exist in {months[month_index].name}")


def _check_round_trip(definition: CalendarDefinition, report: ValidationReport) -> None:
    try:
        driver = CalendarDriver(definition)
        for day in ROUND_TRIP_DAYS:
            date = driver.get_date(day)
            back = driver.get_absolute_day(date.year, date.month_index, date.day_of_month)
            if back != day:
                report.error("conversion", f"day {day} round-trips to {back}")
    except (ArithmeticError, ValueError) as exc:
        report.error("conversion", f"date conversion failed: {exc}")
