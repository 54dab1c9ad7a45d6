"""Recursive leap-year rules and their repeat cycle."""
from __future__ import annotations

import math
from typing import Iterator, Sequence

from almanac.types import LeapRule


def rule_matches(rule: LeapRule, year: int) -> bool:
    """Test one rule, recursing into its excludes."""
    if (year - rule.offset) % rule.interval != 0:
        return False
    return not any(rule_matches(excluded, year) for excluded in rule.exclude)


def is_leap_year(year: int, rules: Sequence[LeapRule] | None) -> bool:
    """A year is leap when any top-level rule matches. No rules, no leap years."""
    if not rules:
        return False
    return any(rule_matches(rule, year) for rule in rules)


def matching_rule(year: int, rules: Sequence[LeapRule] | None) -> LeapRule | None:
    """First top-level rule matching ``year``. Its target month gets the day."""
    for rule in rules or ():
        if rule_matches(rule, year):
            return rule
    return None


def iter_intervals(rules: Sequence[LeapRule]) -> Iterator[int]:
    """Yield every interval in the tree, depth first."""
    for rule in rules:
        yield rule.interval
        yield from iter_intervals(rule.exclude)


def cycle_length(rules: Sequence[LeapRule] | None) -> int:
    """Years after which the leap pattern repeats: LCM of all intervals.

    Raises:
        ValueError: If any interval in the tree is below 1.
    """
    intervals = list(iter_intervals(rules or ()))
    for interval in intervals:
        if interval < 1:
            raise ValueError(f"leap interval must be >= 1, got {interval}")
    if not intervals:
        return 1
    return math.lcm(*intervals)


def gregorian_rules(target_month: int | None = 1) -> tuple[LeapRule, ...]:
    """Every 4 years, except every 100, except every 400."""
    return (
        LeapRule(
            interval=4,
            target_month=target_month,
            exclude=(LeapRule(interval=100, exclude=(LeapRule(interval=400),)),),
        ),
    )


class LeapCycle:
    """Leap pattern over one repeat cycle, anchored at year 0.

    Because every rule is periodic in its interval, the pattern of year
    ``y`` equals that of ``y mod years``. Counting leap years over any span
    is then two prefix lookups plus whole-cycle multiplication.
    """

    def __init__(self, rules: Sequence[LeapRule] | None) -> None:
        self._rules = tuple(rules or ())
        self._years = cycle_length(self._rules)
        prefix = [0]
        for year in range(self._years):
            prefix.append(prefix[-1] + is_leap_year(year, self._rules))
        self._prefix = prefix

    @property
    def years(self) -> int:
        return self._years

    @property
    def leaps_per_cycle(self) -> int:
        return self._prefix[-1]

    def leaps_before(self, year: int) -> int:
        """Leap years in ``[0, year)``. Negative years count down from 0."""
        cycles, rest = divmod(year, self._years)
        return cycles * self._prefix[-1] + self._prefix[rest]

    def count(self, start: int, end: int) -> int:
        """Leap years in ``[start, end)``. Zero for empty or reversed spans."""
        if end <= start:
            return 0
        return self.leaps_before(end) - self.leaps_before(start)


def count_leap_years(
    start: int, end: int, rules: Sequence[LeapRule] | None
) -> int:
    """Leap years in ``[start, end)`` under ``rules``."""
    return LeapCycle(rules).count(start, end)
