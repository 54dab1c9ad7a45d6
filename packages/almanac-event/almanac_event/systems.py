"""Host hook factory for calendar time changes."""
from __future__ import annotations

import logging
from typing import Callable

from almanac_event.scheduler import EventScheduler
from almanac_event.types import NotableEvent

logger = logging.getLogger(__name__)


def make_time_advance_hook(
    scheduler: EventScheduler,
    on_notable: Callable[[NotableEvent], None] | None = None,
) -> Callable[[int, int], list[NotableEvent]]:
    """Return a callable the host invokes when its calendar moves.

    Hook order:
    1. Advance the scheduler to ``to_day`` (re-syncing from ``from_day``
       if the host and scheduler disagree)
    2. Forward each notable event, in day order (on_notable)
    3. Return the notable events

    Failures are logged and yield an empty list so the host's time change
    always completes.
    """

    def time_advance_hook(from_day: int, to_day: int) -> list[NotableEvent]:
        try:
            if scheduler.current_day != from_day:
                scheduler.set_current_day(from_day)
            jump = scheduler.advance_to_day(to_day)
            if on_notable is not None:
                for event in jump.notable_events:
                    on_notable(event)
            return jump.notable_events
        except Exception:
            logger.exception("notable event collection failed for days %d-%d", from_day, to_day)
            return []

    return time_advance_hook
