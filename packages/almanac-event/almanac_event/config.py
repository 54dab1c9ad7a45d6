"""Scheduler configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass

from almanac.duration import DurationUnits


@dataclass(frozen=True)
class SchedulerConfig:
    """Immutable configuration for the world event scheduler.

    Attributes:
        max_simulation_days: Longest jump scanned day by day for notable
            events. Longer jumps only scan their final stretch and report
            an ``anchor_reset`` with a history gap.
        buffer_size: Days from the current day precomputed after each day
            change. Only days this close to the current day are cached.
            0 disables look-ahead and caches the current day alone.
        chain_epoch_days: Chain timelines restart their transition counter
            about every this many days, so only one epoch of windows is held
            in memory. The window crossing an epoch boundary keeps its full
            length. None keeps every window from activation.
        units: Duration unit table for chain states. None derives it from
            the calendar (week, month and year lengths).
    """

    max_simulation_days: int = 365
    buffer_size: int = 30
    chain_epoch_days: int | None = 10_000
    units: DurationUnits | None = None
