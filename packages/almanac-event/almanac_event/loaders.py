"""Build event definitions from pre-parsed plain dicts."""
from __future__ import annotations

from typing import Any, Iterable

from almanac_event.types import (
    EVENT_TYPES,
    ChainEvent,
    ChainStateDef,
    EventDef,
    EventDefinitionError,
    EventScope,
)

_SCOPE_KEYS = ("locations", "factions", "seasons", "regions")


def event_from_dict(data: dict[str, Any]) -> EventDef:
    """Build one definition. ``type`` picks the variant; other keys mirror fields.

    Raises:
        EventDefinitionError: On an unknown type, a missing required key,
            or a key the variant does not have.
    """
    fields = dict(data)
    kind = fields.pop("type", None)
    cls = EVENT_TYPES.get(kind)
    if cls is None:
        raise EventDefinitionError(
            f"event {data.get('id')!r} has unknown type {kind!r}; "
            f"expected one of {sorted(EVENT_TYPES)}"
        )
    scope = {key: tuple(fields.pop(key)) for key in _SCOPE_KEYS if key in fields}
    if scope:
        fields["scope"] = EventScope(**scope)
    try:
        if cls is ChainEvent and "states" in fields:
            fields["states"] = [ChainStateDef(**state) for state in fields["states"]]
        return cls(**fields)
    except TypeError as exc:
        raise EventDefinitionError(f"event {data.get('id')!r}: {exc}") from exc


def events_from_dicts(items: Iterable[dict[str, Any]]) -> list[EventDef]:
    return [event_from_dict(item) for item in items]
