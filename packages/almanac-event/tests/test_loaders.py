"""Tests for almanac_event.loaders — dict to definition conversion."""
from __future__ import annotations

import pytest

from almanac_event.loaders import event_from_dict, events_from_dicts
from almanac_event.types import (
    ChainEvent,
    ChainStateDef,
    ConditionalEvent,
    EventDefinitionError,
    EventScope,
    FixedEvent,
    IntervalEvent,
)


class TestEventFromDict:
    def test_fixed_with_scope(self) -> None:
        event = event_from_dict(
            {
                "type": "fixed",
                "id": "xmas",
                "name": "Christmas",
                "month": 11,
                "day": 25,
                "tags": ["holidays"],
                "locations": ["Waterdeep"],
            }
        )
        assert isinstance(event, FixedEvent)
        assert event.scope == EventScope(locations=("Waterdeep",))
        assert event.tags == ["holidays"]

    def test_chain_states(self) -> None:
        event = event_from_dict(
            {
                "type": "chain",
                "id": "weather",
                "name": "Weather",
                "seed": 42,
                "states": [
                    {"name": "Clear", "weight": 2},
                    {"name": "Rain", "duration": "1d3 days", "effects": {"wet": True}},
                ],
            }
        )
        assert isinstance(event, ChainEvent)
        assert event.states[0] == ChainStateDef("Clear", weight=2)
        assert event.states[1].effects == {"wet": True}

    def test_many(self) -> None:
        events = events_from_dicts(
            [
                {"type": "interval", "id": "m", "name": "Market", "interval": 7},
                {"type": "conditional", "id": "c", "name": "C", "condition": "true", "tier": 2},
            ]
        )
        assert isinstance(events[0], IntervalEvent)
        assert isinstance(events[1], ConditionalEvent)
        assert events[1].tier == 2

    def test_input_not_mutated(self) -> None:
        data = {"type": "fixed", "id": "f", "name": "F", "month": 0, "day": 1, "regions": ["n"]}
        event_from_dict(data)
        assert data["type"] == "fixed"
        assert data["regions"] == ["n"]

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "meteor", "id": "x", "name": "X"},
            {"id": "x", "name": "X"},
            {"type": "interval", "id": "x", "name": "X"},
            {"type": "interval", "id": "x", "name": "X", "interval": 1, "colour": "red"},
            {"type": "chain", "id": "x", "name": "X", "seed": 1, "states": [{"label": "A"}]},
        ],
    )
    def test_errors(self, data: dict) -> None:
        with pytest.raises(EventDefinitionError):
            event_from_dict(data)
