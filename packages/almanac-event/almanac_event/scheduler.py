"""EventScheduler — resolves which world events are active on any day."""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Iterable, Mapping

from almanac.calendar import CalendarDriver
from almanac.duration import DurationUnits
from almanac.rng import RandomFactory
from almanac.types import CalendarDate

from almanac_event.chains import ChainTimeline
from almanac_event.conditions import Condition, parse_condition
from almanac_event.config import SchedulerConfig
from almanac_event.types import (
    ANCHOR_RESET,
    SIMULATION,
    ActiveEvent,
    ChainEvent,
    ChainState,
    ConditionalEvent,
    EffectRegistry,
    EventContext,
    EventDef,
    FixedEvent,
    IntervalEvent,
    NotableEvent,
    TimeJump,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


class EventScheduler:
    """Resolves active events, merged effects, and notable changes per day.

    Evaluation order for one day:
    1. Fixed and interval events, from the calendar date
    2. Chain events, from their deterministic timelines
    3. Tier-1 conditionals, against the events from 1-2
    4. Tier-2 conditionals, against the events from 1-3

    Module toggles then hide events with a disabled tag. Conditionals see
    hidden events too, so disabling one module never changes events that
    do not carry its tag. Days within ``buffer_size`` of the current day
    are cached until the current day changes, a module is toggled, or
    definitions change. Other days are computed on each query.
    """

    def __init__(
        self,
        driver: CalendarDriver,
        events: Iterable[EventDef] = (),
        config: SchedulerConfig | None = None,
        start_day: int = 0,
        rng_factory: RandomFactory = random.Random,
    ) -> None:
        self._driver = driver
        self._config = config or SchedulerConfig()
        self._units = self._config.units or DurationUnits.for_calendar(driver.definition)
        self._rng_factory = rng_factory
        self._definitions: dict[str, EventDef] = {}
        self._definition_order: list[str] = []
        self._positions: dict[str, int] = {}
        self._conditions: dict[str, Condition] = {}
        self._timelines: dict[str, ChainTimeline] = {}
        self._skipped: dict[str, str] = {}  # event id -> reason
        self._toggles: dict[str, bool] = {}
        self._cache: dict[int, list[ActiveEvent]] = {}
        self._current_day = start_day
        for event in events:
            self.define(event)

    # --- Registration ---

    def define(self, event: EventDef) -> None:
        """Register an event. Insertion order preserved; re-defining replaces.

        An event whose condition does not parse, or whose chain durations do
        not parse or can resolve negative, stays registered but is skipped
        during resolution, with a warning.
        """
        if event.id not in self._definitions:
            self._positions[event.id] = len(self._definition_order)
            self._definition_order.append(event.id)
        self._definitions[event.id] = event
        self._conditions.pop(event.id, None)
        self._timelines.pop(event.id, None)
        self._skipped.pop(event.id, None)
        try:
            self._compile(event)
        except ValueError as exc:  # DurationError and ConditionSyntaxError included
            self._skip(event.id, exc)
        self.invalidate()

    def load(self, events: Iterable[EventDef]) -> None:
        """Replace every definition."""
        self._definitions.clear()
        self._definition_order.clear()
        self._positions.clear()
        self._conditions.clear()
        self._timelines.clear()
        self._skipped.clear()
        for event in events:
            self.define(event)
        self.invalidate()

    def definition(self, event_id: str) -> EventDef | None:
        """Look up an event definition by id."""
        return self._definitions.get(event_id)

    def defined_events(self) -> list[str]:
        """Event ids in definition order."""
        return list(self._definition_order)

    def skipped_events(self) -> dict[str, str]:
        """Events excluded from resolution, with the reason."""
        return dict(self._skipped)

    # --- Properties ---

    @property
    def driver(self) -> CalendarDriver:
        return self._driver

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def units(self) -> DurationUnits:
        return self._units

    @property
    def current_day(self) -> int:
        return self._current_day

    def get_date(self, day: int | None = None) -> CalendarDate:
        return self._driver.get_date(self._current_day if day is None else day)

    # --- Queries ---

    def get_active_events(
        self, day: int | None = None, context: EventContext | None = None
    ) -> list[ActiveEvent]:
        """Visible active events, lowest priority first, ties in definition order."""
        if day is None:
            day = self._current_day
        events = self._cache.get(day)
        if events is None:
            events = self._compute(day)
            if self._in_cache_window(day):
                self._cache[day] = events
        if context is not None:
            events = [
                ae for ae in events if self._definitions[ae.event_id].scope.matches(context)
            ]
        return list(events)

    def get_effect_registry(
        self, day: int | None = None, context: EventContext | None = None
    ) -> EffectRegistry:
        """Fold active events' effects. Higher priority wins on key collisions."""
        if day is None:
            day = self._current_day
        active = self.get_active_events(day, context)
        effects: dict[str, Any] = {}
        for ae in active:
            effects.update(ae.effects)
        return EffectRegistry(
            day=day,
            time_of_day=self._driver.time_of_day,
            active_events=active,
            effects=effects,
        )

    def is_active(self, event_id: str, day: int | None = None) -> bool:
        return any(ae.event_id == event_id for ae in self.get_active_events(day))

    def get_chain_state(self, event_id: str, day: int | None = None) -> ChainState | None:
        """Resolved chain window, or None for unknown, broken, or inactive chains."""
        timeline = self._timelines.get(event_id)
        if timeline is None:
            return None
        return timeline.state_at(self._current_day if day is None else day)

    def get_chain_states(self, day: int | None = None) -> dict[str, ChainState]:
        """Every chain's window on ``day``, for persistence or display."""
        states: dict[str, ChainState] = {}
        for event_id in self._definition_order:
            state = self.get_chain_state(event_id, day)
            if state is not None:
                states[event_id] = state
        return states

    # --- Modules ---

    def toggle_module(self, tag: str, enabled: bool) -> None:
        """Enable or disable a module tag. Unknown tags are accepted."""
        self._toggles[tag] = enabled
        self.invalidate()

    def set_module_toggles(self, toggles: Mapping[str, bool]) -> None:
        """Replace all toggles. Tags not listed become enabled."""
        self._toggles = dict(toggles)
        self.invalidate()

    def get_module_toggles(self) -> dict[str, bool]:
        return dict(self._toggles)

    def is_module_enabled(self, tag: str) -> bool:
        return self._toggles.get(tag, True)

    def get_available_modules(self) -> list[str]:
        """Every tag on any loaded event, sorted, without duplicates."""
        return sorted({tag for event in self._definitions.values() for tag in event.tags})

    # --- Time ---

    def set_current_day(self, day: int) -> None:
        """Move to ``day`` without collecting notable events."""
        if day == self._current_day:
            return
        self._current_day = day
        self.invalidate()
        self._fill_buffer()

    def advance_to_day(
        self, to_day: int, on_progress: ProgressCallback | None = None
    ) -> TimeJump:
        """Move to ``to_day``, collecting notable events on the way forward.

        Jumps longer than ``max_simulation_days`` report ``anchor_reset``
        and a history gap; only their final stretch is scanned.
        """
        started = time.monotonic()
        from_day = self._current_day
        days = to_day - from_day
        mode = SIMULATION if abs(days) <= self._config.max_simulation_days else ANCHOR_RESET
        notable = self.get_notable_events(from_day, to_day, on_progress) if days > 0 else []
        self.set_current_day(to_day)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "advanced from day %d to %d (%s, %d notable, %.1f ms)",
            from_day, to_day, mode, len(notable), elapsed_ms,
        )
        return TimeJump(
            from_day=from_day,
            to_day=to_day,
            days_advanced=days,
            mode=mode,
            has_history_gap=mode == ANCHOR_RESET,
            notable_events=notable,
            elapsed_ms=elapsed_ms,
        )

    def advance_time(
        self, minutes: int, on_progress: ProgressCallback | None = None
    ) -> TimeJump:
        """Advance the calendar clock, then the day by however many rolled over."""
        rolled = self._driver.advance_time(minutes)
        if self._uses_minutes():
            self.invalidate()
        return self.advance_to_day(self._current_day + rolled, on_progress)

    def get_notable_events(
        self,
        from_day: int,
        to_day: int,
        on_progress: ProgressCallback | None = None,
    ) -> list[NotableEvent]:
        """Events starting in ``(from_day, to_day]``, in day order.

        An event starts on a day when it was not visible the day before,
        when it re-triggers, or when its chain state changes.
        """
        if to_day <= from_day:
            return []
        limit = self._config.max_simulation_days
        mode = SIMULATION if to_day - from_day <= limit else ANCHOR_RESET
        first = max(from_day + 1, to_day - limit + 1)
        total = to_day - first + 1

        previous = {ae.event_id: ae for ae in self._visible(first - 1)}
        notable: list[NotableEvent] = []
        for count, day in enumerate(range(first, to_day + 1), start=1):
            current = self._visible(day)
            date: CalendarDate | None = None
            for ae in current:
                before = previous.get(ae.event_id)
                if before is not None and ae.start_day != day and before.state == ae.state:
                    continue
                if date is None:
                    date = self._driver.get_date(day)
                notable.append(
                    NotableEvent(
                        day=day,
                        event_id=ae.event_id,
                        name=ae.name,
                        kind=ae.kind,
                        priority=ae.priority,
                        date=date,
                        state=ae.state,
                    )
                )
            previous = {ae.event_id: ae for ae in current}
            if on_progress is not None:
                on_progress(count / total, mode)
        return notable

    # --- Cache ---

    def invalidate(self) -> None:
        """Drop every cached day."""
        if self._cache:
            logger.debug("dropping %d cached days", len(self._cache))
        self._cache.clear()

    def _fill_buffer(self) -> None:
        for day in range(self._current_day, self._current_day + self._config.buffer_size):
            if day not in self._cache:
                self._cache[day] = self._compute(day)

    def _in_cache_window(self, day: int) -> bool:
        return abs(day - self._current_day) <= self._config.buffer_size

    def _visible(self, day: int) -> list[ActiveEvent]:
        """Cached or freshly computed, without growing the cache."""
        events = self._cache.get(day)
        if events is None:
            events = self._compute(day)
        return events

    # --- Resolution ---

    def _compute(self, day: int) -> list[ActiveEvent]:
        resolved = self._resolve(day)
        visible = [
            ae for ae in resolved.values() if self._is_enabled(self._definitions[ae.event_id])
        ]
        visible.sort(key=lambda ae: (ae.priority, self._positions[ae.event_id]))
        return visible

    def _resolve(self, day: int) -> dict[str, ActiveEvent]:
        """Every active event on ``day``, ignoring toggles, in evaluation order."""
        date = self._driver.get_date(day)
        events = [
            self._definitions[event_id]
            for event_id in self._definition_order
            if event_id not in self._skipped
        ]
        resolved: dict[str, ActiveEvent] = {}

        for event in events:
            active: ActiveEvent | None = None
            if isinstance(event, FixedEvent):
                active = self._resolve_fixed(event, day, date)
            elif isinstance(event, IntervalEvent):
                active = self._resolve_interval(event, day)
            if active is not None:
                resolved[event.id] = active

        for event in events:
            if isinstance(event, ChainEvent):
                active = self._resolve_chain(event, day)
                if active is not None:
                    resolved[event.id] = active

        for tier in (1, 2):
            visible_to_tier = dict(resolved)
            for event in events:
                if isinstance(event, ConditionalEvent) and event.tier == tier:
                    if self._conditions[event.id].evaluate(visible_to_tier):
                        resolved[event.id] = self._activate(event, day, day + 1)
        return resolved

    def _resolve_fixed(
        self, event: FixedEvent, day: int, date: CalendarDate
    ) -> ActiveEvent | None:
        for back in range(event.duration):
            trigger = day - back
            trigger_date = date if back == 0 else self._driver.get_date(trigger)
            if _fixed_matches(event, trigger_date):
                return self._activate(event, trigger, trigger + event.duration)
        return None

    def _resolve_interval(self, event: IntervalEvent, day: int) -> ActiveEvent | None:
        if event.use_minutes:
            minutes = day * self._driver.minutes_per_day + self._driver.time_of_day
            if (minutes - event.offset) % event.interval == 0:
                return self._activate(event, day, day + 1)
            return None
        phase = (day - event.offset) % event.interval
        if phase < event.duration:
            start = day - phase
            return self._activate(event, start, start + event.duration)
        return None

    def _resolve_chain(self, event: ChainEvent, day: int) -> ActiveEvent | None:
        state = self._timelines[event.id].state_at(day)
        if state is None:
            return None
        effects = dict(event.effects)
        effects.update(event.states[state.state_index].effects)
        return self._activate(
            event, state.entered_day, state.end_day, effects=effects, state=state.state_name
        )

    def _activate(
        self,
        event: EventDef,
        start_day: int,
        end_day: int,
        effects: dict[str, Any] | None = None,
        state: str | None = None,
    ) -> ActiveEvent:
        return ActiveEvent(
            event_id=event.id,
            name=event.name,
            kind=event.kind,
            priority=event.priority,
            start_day=start_day,
            end_day=end_day,
            effects=dict(event.effects) if effects is None else effects,
            tags=tuple(event.tags),
            state=event.name if state is None else state,
        )

    # --- Internal helpers ---

    def _compile(self, event: EventDef) -> None:
        """Parse expressions and check values resolution depends on.

        Raises:
            ValueError: Including DurationError and ConditionSyntaxError.
        """
        if getattr(event, "duration", 1) < 1:
            raise ValueError(f"duration must be at least 1 day, got {event.duration}")
        if isinstance(event, IntervalEvent) and event.interval < 1:
            raise ValueError(f"interval must be at least 1, got {event.interval}")
        if isinstance(event, ConditionalEvent):
            if event.tier not in (1, 2):
                raise ValueError(f"tier must be 1 or 2, got {event.tier}")
            self._conditions[event.id] = parse_condition(event.condition)
        elif isinstance(event, ChainEvent):
            self._timelines[event.id] = ChainTimeline(
                event, self._units, self._config.chain_epoch_days, self._rng_factory
            )

    def _skip(self, event_id: str, reason: Exception) -> None:
        self._skipped[event_id] = str(reason)
        logger.warning("skipping event %r: %s", event_id, reason)

    def _is_enabled(self, event: EventDef) -> bool:
        return all(self._toggles.get(tag, True) for tag in event.tags)

    def _uses_minutes(self) -> bool:
        return any(
            isinstance(event, IntervalEvent) and event.use_minutes
            for event in self._definitions.values()
        )

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize runtime state (not definitions)."""
        return {
            "current_day": self._current_day,
            "time_of_day": self._driver.time_of_day,
            "module_toggles": dict(self._toggles),
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore runtime state. Definitions must be loaded separately."""
        self._current_day = data.get("current_day", 0)
        self._driver.set_time_of_day(data.get("time_of_day", 0))
        self._toggles = dict(data.get("module_toggles", {}))
        self.invalidate()


def _fixed_matches(event: FixedEvent, date: CalendarDate) -> bool:
    if event.year is not None and date.year != event.year:
        return False
    if event.intercalary_name is not None:
        return (
            date.is_intercalary
            and date.month_name == event.intercalary_name
            and date.day_of_month == (event.day or 1)
        )
    return date.month_index == event.month and date.day_of_month == event.day
