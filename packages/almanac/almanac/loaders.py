"""Build calendar definitions from pre-parsed plain dicts."""
from __future__ import annotations

from typing import Any

from almanac.types import (
    STANDARD,
    CalendarDefinition,
    CalendarDefinitionError,
    CalendarOrigin,
    Era,
    Holiday,
    LeapRule,
    Month,
    Season,
)


def leap_rule_from_dict(data: dict[str, Any]) -> LeapRule:
    return LeapRule(
        interval=data["interval"],
        offset=data.get("offset", 0),
        target_month=data.get("target_month"),
        exclude=tuple(leap_rule_from_dict(d) for d in data.get("exclude", ())),
    )


def calendar_from_dict(data: dict[str, Any]) -> CalendarDefinition:
    """Build a CalendarDefinition. Keys mirror the dataclass field names.

    Raises:
        CalendarDefinitionError: If a required key is missing or a nested
            entry has keys the dataclass does not know.
    """
    try:
        return CalendarDefinition(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            weekdays=tuple(data.get("weekdays", ())),
            months=tuple(
                Month(
                    name=m["name"],
                    days=m["days"],
                    kind=m.get("kind", STANDARD),
                    season=m.get("season"),
                )
                for m in data["months"]
            ),
            holidays=tuple(Holiday(**h) for h in data.get("holidays", ())),
            starting_year=data.get("starting_year", 1),
            year_suffix=data.get("year_suffix", ""),
            eras=tuple(Era(**e) for e in data.get("eras", ())),
            leap_rules=tuple(leap_rule_from_dict(r) for r in data.get("leap_rules", ())),
            seasons=tuple(Season(**s) for s in data.get("seasons", ())),
        )
    except KeyError as exc:
        raise CalendarDefinitionError(f"calendar definition is missing {exc}") from exc
    except TypeError as exc:
        raise CalendarDefinitionError(f"calendar definition is malformed: {exc}") from exc


def origin_from_dict(data: dict[str, Any] | None) -> CalendarOrigin | None:
    if not data:
        return None
    return CalendarOrigin(year=data["year"], month=data["month"], day=data["day"])
