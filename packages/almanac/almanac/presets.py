"""Ready-made calendar definitions."""
from __future__ import annotations

from almanac.leap import gregorian_rules
from almanac.types import (
    INTERCALARY,
    CalendarDefinition,
    Era,
    Holiday,
    LeapRule,
    Month,
    Season,
)


def _months(*entries: tuple[str, int, str]) -> tuple[Month, ...]:
    return tuple(Month(name=name, days=days, season=season) for name, days, season in entries)


def _festival(name: str, season: str) -> Month:
    return Month(name=name, days=1, kind=INTERCALARY, season=season)


GREGORIAN = CalendarDefinition(
    id="gregorian",
    name="Gregorian Calendar",
    weekdays=("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"),
    months=_months(
        ("January", 31, "Winter"),
        ("February", 28, "Winter"),
        ("March", 31, "Spring"),
        ("April", 30, "Spring"),
        ("May", 31, "Spring"),
        ("June", 30, "Summer"),
        ("July", 31, "Summer"),
        ("August", 31, "Summer"),
        ("September", 30, "Fall"),
        ("October", 31, "Fall"),
        ("November", 30, "Fall"),
        ("December", 31, "Winter"),
    ),
    holidays=(
        Holiday("New Year's Day", 0, 1),
        Holiday("Christmas", 11, 25),
    ),
    starting_year=2024,
    year_suffix="AD",
    leap_rules=gregorian_rules(target_month=1),
    seasons=(
        Season("Spring", 2, 20, sunrise=375, sunset=1110),
        Season("Summer", 5, 21, sunrise=330, sunset=1230),
        Season("Fall", 8, 22, sunrise=420, sunset=1140),
        Season("Winter", 11, 21, sunrise=450, sunset=1020),
    ),
)

HARPTOS = CalendarDefinition(
    id="harptos",
    name="Calendar of Harptos",
    description="Forgotten Realms. Ten-day weeks; Shieldmeet follows Midsummer every fourth year.",
    weekdays=(
        "First-day", "Second-day", "Third-day", "Fourth-day", "Fifth-day",
        "Sixth-day", "Seventh-day", "Eighth-day", "Ninth-day", "Tenth-day",
    ),
    months=(
        Month("Hammer", 30, season="Winter"),
        _festival("Midwinter", "Winter"),
        Month("Alturiak", 30, season="Winter"),
        Month("Ches", 30, season="Spring"),
        Month("Tarsakh", 30, season="Spring"),
        _festival("Greengrass", "Spring"),
        Month("Mirtul", 30, season="Spring"),
        Month("Kythorn", 30, season="Summer"),
        Month("Flamerule", 30, season="Summer"),
        _festival("Midsummer", "Summer"),
        Month("Eleasis", 30, season="Summer"),
        Month("Eleint", 30, season="Fall"),
        _festival("Highharvestide", "Fall"),
        Month("Marpenoth", 30, season="Fall"),
        Month("Uktar", 30, season="Fall"),
        _festival("Feast of the Moon", "Fall"),
        Month("Nightal", 30, season="Winter"),
    ),
    holidays=(Holiday("Shieldmeet", 9, 2, "Leap day following Midsummer"),),
    starting_year=1492,
    year_suffix="DR",
    eras=(
        Era("Before Dalereckoning", "BD", start_year=-10000, end_year=1, direction=-1),
        Era("Dalereckoning", "DR", start_year=1),
    ),
    leap_rules=(LeapRule(interval=4, target_month=9),),
)

GOLARION = CalendarDefinition(
    id="golarion",
    name="Absalom Reckoning",
    weekdays=("Moonday", "Toilday", "Wealday", "Oathday", "Fireday", "Starday", "Sunday"),
    months=_months(
        ("Abadius", 31, "Winter"),
        ("Calistril", 28, "Winter"),
        ("Pharast", 31, "Spring"),
        ("Gozran", 30, "Spring"),
        ("Desnus", 31, "Spring"),
        ("Sarenith", 30, "Summer"),
        ("Erastus", 31, "Summer"),
        ("Arodus", 31, "Summer"),
        ("Rova", 30, "Fall"),
        ("Lamashan", 31, "Fall"),
        ("Neth", 30, "Fall"),
        ("Kuthona", 31, "Winter"),
    ),
    starting_year=4724,
    year_suffix="AR",
    leap_rules=(LeapRule(interval=8, target_month=1),),
)

SIMPLE_COUNTER = CalendarDefinition(
    id="simple",
    name="Simple Day Counter",
    months=(Month("Day", 1),),
    starting_year=1,
)

PRESETS: dict[str, CalendarDefinition] = {
    c.id: c for c in (GREGORIAN, HARPTOS, GOLARION, SIMPLE_COUNTER)
}


def preset(calendar_id: str) -> CalendarDefinition:
    """Look up a preset by id. Raises KeyError."""
    return PRESETS[calendar_id]
