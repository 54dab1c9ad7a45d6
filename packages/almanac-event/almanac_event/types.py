"""Core data types for world-event scheduling."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from almanac.types import AlmanacError, CalendarDate, DefinitionError

SIMULATION = "simulation"
ANCHOR_RESET = "anchor_reset"


@dataclass(frozen=True)
class EventContext:
    """Where the party is. ``None`` fields do not filter."""

    location: str | None = None
    faction: str | None = None
    season: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class EventScope:
    """Where an event applies. Empty lists mean everywhere."""

    locations: tuple[str, ...] = ()
    factions: tuple[str, ...] = ()
    seasons: tuple[str, ...] = ()
    regions: tuple[str, ...] = ()

    def matches(self, context: EventContext) -> bool:
        for allowed, value in (
            (self.locations, context.location),
            (self.factions, context.faction),
            (self.seasons, context.season),
            (self.regions, context.region),
        ):
            if allowed and value is not None and value not in allowed:
                return False
        return True


# --- Definitions (not serialized) ---


@dataclass
class FixedEvent:
    """Recurs on a calendar date each year, or once when ``year`` is set."""

    kind: ClassVar[str] = "fixed"

    id: str
    name: str
    month: int | None = None  # 0-based month index
    day: int | None = None  # 1-based day of month
    intercalary_name: str | None = None  # alternative to month, e.g. "Midsummer"
    year: int | None = None  # None = every year
    priority: int = 0
    effects: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)  # module membership
    duration: int = 1  # days active from the trigger date
    scope: EventScope = field(default_factory=EventScope)


@dataclass
class IntervalEvent:
    """Fires when ``(day - offset) % interval == 0``."""

    kind: ClassVar[str] = "interval"

    id: str
    name: str
    interval: int
    offset: int = 0
    use_minutes: bool = False  # count minutes (day * minutes_per_day + time) instead of days
    priority: int = 0
    effects: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    duration: int = 1
    scope: EventScope = field(default_factory=EventScope)


@dataclass
class ChainStateDef:
    name: str
    weight: float = 1.0  # relative selection weight, >= 0
    duration: str = "1 day"  # duration expression, e.g. "1d4 days"
    effects: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChainEvent:
    """Weighted state machine. Each state lasts a rolled duration."""

    kind: ClassVar[str] = "chain"

    id: str
    name: str
    seed: int | str
    states: list[ChainStateDef]
    initial_state: str | None = None  # None = pick by weight
    start_day: int = 0  # activation day
    priority: int = 0
    effects: dict[str, Any] = field(default_factory=dict)  # shared by every state
    tags: list[str] = field(default_factory=list)
    scope: EventScope = field(default_factory=EventScope)


@dataclass
class ConditionalEvent:
    """Active while its condition over other events holds."""

    kind: ClassVar[str] = "conditional"

    id: str
    name: str
    condition: str
    tier: int = 1  # 1: non-conditional refs only, 2: may also ref tier 1
    priority: int = 0
    effects: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    scope: EventScope = field(default_factory=EventScope)


EventDef = Union[FixedEvent, IntervalEvent, ChainEvent, ConditionalEvent]
EVENT_TYPES: dict[str, type] = {
    cls.kind: cls for cls in (FixedEvent, IntervalEvent, ChainEvent, ConditionalEvent)
}


# --- Results ---


@dataclass(frozen=True)
class ActiveEvent:
    event_id: str
    name: str
    kind: str
    priority: int
    start_day: int
    end_day: int  # exclusive
    effects: dict[str, Any] = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    state: str | None = None  # chain state name; the event name for other kinds


@dataclass(frozen=True)
class ChainState:
    """Resolved chain window. Serializable."""

    event_id: str
    state_name: str
    state_index: int
    entered_day: int
    duration_days: int
    end_day: int  # exclusive
    epoch: int
    transition_index: int  # within the epoch


@dataclass
class EffectRegistry:
    day: int
    time_of_day: int
    active_events: list[ActiveEvent]
    effects: dict[str, Any]


@dataclass(frozen=True)
class NotableEvent:
    """An event that started on ``day``: trigger, state change, or condition turning true."""

    day: int
    event_id: str
    name: str
    kind: str
    priority: int
    date: CalendarDate
    state: str | None = None


@dataclass
class TimeJump:
    from_day: int
    to_day: int
    days_advanced: int
    mode: str  # SIMULATION or ANCHOR_RESET
    has_history_gap: bool
    notable_events: list[NotableEvent] = field(default_factory=list)
    elapsed_ms: float = 0.0


# --- Errors ---


class EventDefinitionError(DefinitionError):
    """Raised for malformed event definitions."""


class ConditionSyntaxError(AlmanacError, ValueError):
    """Raised when a condition expression cannot be parsed."""

    def __init__(self, message: str, expression: str, position: int) -> None:
        self.expression = expression
        self.position = position
        self.fragment = expression[position : position + 20]
        super().__init__(f"{message} at position {position} in {expression!r}")
