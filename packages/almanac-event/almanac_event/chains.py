"""Chain state machine: weighted states with rolled durations.

Transition ``n`` of epoch ``e`` draws from a generator seeded with
``derive_seed(event.seed, e, n)``. The state picked and the days it lasts
therefore depend only on the event, the day, and the epoch length, never
on which days were queried before.

An epoch runs from its first day until the window that crosses
``epoch_days`` days later has run its full length; the next epoch starts
where that window ends and restarts the transition counter. Only the
windows of one epoch are held in memory. ``epoch_days=None`` keeps every
window from activation in a single epoch.
"""
from __future__ import annotations

import random
from bisect import bisect_right
from typing import Sequence

from almanac.duration import DurationExpression, DurationUnits, parse_duration
from almanac.rng import RandomFactory, derive_seed
from almanac.types import NegativeDurationError

from almanac_event.types import ChainEvent, ChainState, ChainStateDef


def select_state(states: Sequence[ChainStateDef], roll: float) -> int:
    """Cumulative-weight pick for ``roll`` in ``[0, 1)``.

    Zero-weight states are never picked unless every weight is zero, in
    which case the first state is.
    """
    total = sum(max(0.0, state.weight) for state in states)
    if total <= 0:
        return 0
    remainder = roll * total
    last_weighted = 0
    for index, state in enumerate(states):
        if state.weight <= 0:
            continue
        last_weighted = index
        remainder -= state.weight
        if remainder < 0:
            return index
    return last_weighted


def duration_days(minutes: int, minutes_per_day: int) -> int:
    """Whole days a state lasts. At least one."""
    return max(1, -(-minutes // minutes_per_day))


class ChainTimeline:
    """Memoized state windows for one chain event.

    Windows are computed lazily and kept for the current epoch only. The
    first day of every epoch seen so far is kept so any day can be mapped
    back to its epoch.

    Raises:
        DurationError: If a state's duration does not parse.
        NegativeDurationError: If a state's duration can resolve below zero.
    """

    def __init__(
        self,
        event: ChainEvent,
        units: DurationUnits | None = None,
        epoch_days: int | None = None,
        rng_factory: RandomFactory = random.Random,
    ) -> None:
        if not event.states:
            raise ValueError(f"chain {event.id!r} has no states")
        if epoch_days is not None and epoch_days <= 0:
            raise ValueError("epoch_days must be positive")
        self._event = event
        self._units = units or DurationUnits()
        self._epoch_days = epoch_days
        self._rng_factory = rng_factory
        self._durations: list[DurationExpression] = []
        for state in event.states:
            expression = parse_duration(state.duration)
            low, _ = expression.bounds(self._units)
            if low < 0:
                raise NegativeDurationError(
                    f"state {state.name!r} can resolve to {low} minutes", state.duration
                )
            self._durations.append(expression)
        self._initial: int | None = None
        if event.initial_state is not None:
            names = [state.name for state in event.states]
            if event.initial_state not in names:
                raise ValueError(
                    f"chain {event.id!r} has no state {event.initial_state!r}"
                )
            self._initial = names.index(event.initial_state)

        self._epoch_starts: list[int] = [event.start_day]
        self._epoch: int | None = None
        self._starts: list[int] = []
        self._ends: list[int] = []
        self._indices: list[int] = []

    @property
    def event(self) -> ChainEvent:
        return self._event

    def state_at(self, day: int) -> ChainState | None:
        """State in effect on ``day``. None before the activation day."""
        if day < self._event.start_day:
            return None
        epoch = self._epoch_of(day)
        self._load(epoch)
        while self._ends[-1] <= day:
            self._extend()

        window = bisect_right(self._starts, day) - 1
        index = self._indices[window]
        start = self._starts[window]
        end = self._ends[window]
        return ChainState(
            event_id=self._event.id,
            state_name=self._event.states[index].name,
            state_index=index,
            entered_day=start,
            duration_days=end - start,
            end_day=end,
            epoch=epoch,
            transition_index=window,
        )

    def _epoch_of(self, day: int) -> int:
        if self._epoch_days is None:
            return 0
        while self._epoch_starts[-1] <= day:
            # Close the last known epoch: its final window crosses the
            # nominal length and runs to its drawn end.
            last = len(self._epoch_starts) - 1
            self._load(last)
            nominal_end = self._epoch_starts[last] + self._epoch_days
            while self._ends[-1] < nominal_end:
                self._extend()
            self._epoch_starts.append(self._ends[-1])
        return bisect_right(self._epoch_starts, day) - 1

    def _load(self, epoch: int) -> None:
        if epoch == self._epoch:
            return
        self._epoch = epoch
        self._starts, self._ends, self._indices = [], [], []
        self._extend()

    def _extend(self) -> None:
        epoch = self._epoch
        transition = len(self._starts)
        start = self._ends[-1] if self._ends else self._epoch_starts[epoch]
        rng = self._rng_factory(derive_seed(self._event.seed, epoch, transition))
        if transition == 0 and epoch == 0 and self._initial is not None:
            index = self._initial
        else:
            index = select_state(self._event.states, rng.random())
        minutes = self._durations[index].evaluate(self._units, rng)
        self._starts.append(start)
        self._ends.append(start + duration_days(minutes, self._units.minutes_per_day))
        self._indices.append(index)


def state_at(
    event: ChainEvent,
    day: int,
    units: DurationUnits | None = None,
    epoch_days: int | None = None,
) -> ChainState | None:
    """Pure one-shot lookup. Use ChainTimeline to reuse windows across days."""
    return ChainTimeline(event, units, epoch_days).state_at(day)
