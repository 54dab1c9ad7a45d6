"""World-event scheduling over almanac calendars."""
from almanac_event.chains import ChainTimeline, select_state, state_at
from almanac_event.conditions import (
    Condition,
    check_condition,
    evaluate_condition,
    extract_event_references,
    parse_condition,
)
from almanac_event.config import SchedulerConfig
from almanac_event.loaders import event_from_dict, events_from_dicts
from almanac_event.scheduler import EventScheduler
from almanac_event.systems import make_time_advance_hook
from almanac_event.types import (
    ANCHOR_RESET,
    SIMULATION,
    ActiveEvent,
    ChainEvent,
    ChainState,
    ChainStateDef,
    ConditionalEvent,
    ConditionSyntaxError,
    EffectRegistry,
    EventContext,
    EventDef,
    EventDefinitionError,
    EventScope,
    FixedEvent,
    IntervalEvent,
    NotableEvent,
    TimeJump,
)
from almanac_event.validation import validate_events, validate_events_or_raise

__all__ = [
    "FixedEvent",
    "IntervalEvent",
    "ChainEvent",
    "ChainStateDef",
    "ConditionalEvent",
    "EventDef",
    "EventScope",
    "EventContext",
    "ActiveEvent",
    "ChainState",
    "EffectRegistry",
    "NotableEvent",
    "TimeJump",
    "SIMULATION",
    "ANCHOR_RESET",
    "EventDefinitionError",
    "ConditionSyntaxError",
    "Condition",
    "parse_condition",
    "evaluate_condition",
    "extract_event_references",
    "check_condition",
    "ChainTimeline",
    "select_state",
    "state_at",
    "SchedulerConfig",
    "EventScheduler",
    "event_from_dict",
    "events_from_dicts",
    "make_time_advance_hook",
    "validate_events",
    "validate_events_or_raise",
]
