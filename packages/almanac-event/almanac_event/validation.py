"""Event definition validation. Run before constructing an EventScheduler."""
from __future__ import annotations

from typing import Sequence

from almanac.duration import DurationUnits, parse_duration
from almanac.types import CalendarDefinition, DurationError, ValidationReport

from almanac_event.conditions import parse_condition
from almanac_event.types import (
    ChainEvent,
    ConditionalEvent,
    ConditionSyntaxError,
    EventDef,
    EventDefinitionError,
    FixedEvent,
    IntervalEvent,
)


def validate_events(
    events: Sequence[EventDef],
    units: DurationUnits | None = None,
    calendar: CalendarDefinition | None = None,
) -> ValidationReport:
    """Check every definition, then cross-event references.

    With a calendar, fixed dates are also checked against its months.

    Unknown referenced ids are warnings. Tier violations are errors:
    tier 1 may not reference conditionals, tier 2 may not reference tier 2.
    """
    units = units or DurationUnits()
    report = ValidationReport()
    by_id: dict[str, EventDef] = {}

    for index, event in enumerate(events):
        path = f"events[{event.id or index}]"
        if not event.id:
            report.error(path, "event id is required")
        elif event.id in by_id:
            report.error(path, f"duplicate event id {event.id!r}")
        else:
            by_id[event.id] = event
        if not event.name:
            report.error(f"{path}.name", "event name is required")
        if getattr(event, "duration", 1) < 1:
            report.error(f"{path}.duration", "must be at least 1 day")

        if isinstance(event, FixedEvent):
            _check_fixed(event, path, calendar, report)
        elif isinstance(event, IntervalEvent):
            if event.interval < 1:
                report.error(f"{path}.interval", f"must be at least 1, got {event.interval}")
        elif isinstance(event, ChainEvent):
            _check_chain(event, path, units, report)
        elif isinstance(event, ConditionalEvent):
            if event.tier not in (1, 2):
                report.error(f"{path}.tier", f"must be 1 or 2, got {event.tier}")
        else:
            report.error(path, f"unknown event type {type(event).__name__}")

    for event in events:
        if isinstance(event, ConditionalEvent):
            _check_references(event, by_id, report)
    return report


def validate_events_or_raise(
    events: Sequence[EventDef],
    units: DurationUnits | None = None,
    calendar: CalendarDefinition | None = None,
) -> ValidationReport:
    """Like ``validate_events`` but raises EventDefinitionError on errors."""
    report = validate_events(events, units, calendar)
    if not report.is_valid:
        raise EventDefinitionError.from_report("event definitions", report)
    return report


def _check_fixed(
    event: FixedEvent,
    path: str,
    calendar: CalendarDefinition | None,
    report: ValidationReport,
) -> None:
    months = list(calendar.months) if calendar is not None else None
    if event.intercalary_name is not None:
        if event.month is not None:
            report.warn(path, "month is ignored when intercalary_name is set")
        if months is not None and not any(
            m.is_intercalary and m.name == event.intercalary_name for m in months
        ):
            report.error(
                f"{path}.intercalary_name",
                f"no intercalary month named {event.intercalary_name!r}",
            )
        return
    if event.month is None or event.day is None:
        report.error(path, "fixed events need month and day, or intercalary_name")
        return
    if event.month < 0 or (months is not None and event.month >= len(months)):
        report.error(f"{path}.month", f"month {event.month} does not exist")
        return
    # Leap days may extend a month by one
    if event.day < 1 or (months is not None and event.day > months[event.month].days + 1):
        report.error(f"{path}.day", f"day {event.day} does not exist")


def _check_chain(
    event: ChainEvent, path: str, units: DurationUnits, report: ValidationReport
) -> None:
    if not event.states:
        report.error(f"{path}.states", "chain needs at least one state")
        return
    names: set[str] = set()
    for index, state in enumerate(event.states):
        state_path = f"{path}.states[{index}]"
        if state.name in names:
            report.error(f"{state_path}.name", f"duplicate state name {state.name!r}")
        names.add(state.name)
        if state.weight < 0:
            report.error(f"{state_path}.weight", f"must be >= 0, got {state.weight}")
        try:
            expression = parse_duration(state.duration)
        except DurationError as exc:
            report.error(f"{state_path}.duration", str(exc))
            continue
        low, _ = expression.bounds(units)
        if low < 0:
            report.error(f"{state_path}.duration", f"can resolve to {low} minutes")
    if all(state.weight <= 0 for state in event.states):
        report.warn(f"{path}.states", "all weights are zero; the first state always wins")
    if event.initial_state is not None and event.initial_state not in names:
        report.error(f"{path}.initial_state", f"no state named {event.initial_state!r}")


def _check_references(
    event: ConditionalEvent, by_id: dict[str, EventDef], report: ValidationReport
) -> None:
    path = f"events[{event.id}].condition"
    try:
        condition = parse_condition(event.condition)
    except ConditionSyntaxError as exc:
        report.error(path, str(exc))
        return
    for ref in condition.references:
        target = by_id.get(ref)
        if target is None:
            report.warn(path, f"references unknown event {ref!r}")
        elif ref == event.id:
            report.error(path, "condition references its own event")
        elif isinstance(target, ConditionalEvent):
            if event.tier == 1:
                report.error(path, f"tier 1 cannot reference conditional {ref!r}")
            elif target.tier != 1:
                report.error(path, f"tier 2 can only reference tier-1 conditional, not {ref!r}")
