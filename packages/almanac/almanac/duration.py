"""Compound duration expressions: fixed units, dice, and signed sums.

``"2 weeks + 3 days"``, ``"1d4 hours + 30 minutes"`` and ``"-1 hour + 3 hours"``
all evaluate to a whole number of minutes. Terms without an operator between
them are added (``"1 hour 30 minutes"``).
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass

from almanac.types import (
    CalendarDefinition,
    DurationError,
    EmptyDurationError,
    InvalidTokenError,
    MissingUnitError,
    MissingValueError,
    NegativeDurationError,
    RandomSource,
    TrailingOperatorError,
)

UNITS = ("minute", "hour", "day", "week", "month", "year")

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<dice>\d+[dD]\d+)|(?P<number>\d+)|(?P<word>[A-Za-z]+)|(?P<op>[+-]))"
)


@dataclass(frozen=True)
class DurationUnits:
    """Unit conversion table. Defaults are real-world values.

    Attributes:
        minutes_per_hour: Minutes in one hour.
        hours_per_day: Hours in one day.
        days_per_week: Days in one week.
        days_per_month: Days in one month.
        days_per_year: Days in one year.
    """

    minutes_per_hour: int = 60
    hours_per_day: int = 24
    days_per_week: int = 7
    days_per_month: int = 30
    days_per_year: int = 365

    @property
    def minutes_per_day(self) -> int:
        return self.minutes_per_hour * self.hours_per_day

    def minutes_per(self, unit: str) -> int:
        """Minutes in one ``unit``. Raises KeyError for unknown units."""
        day = self.minutes_per_day
        return {
            "minute": 1,
            "hour": self.minutes_per_hour,
            "day": day,
            "week": day * self.days_per_week,
            "month": day * self.days_per_month,
            "year": day * self.days_per_year,
        }[unit]

    @classmethod
    def for_calendar(cls, definition: CalendarDefinition) -> DurationUnits:
        """Week, month and year lengths taken from a calendar's shape."""
        standard = [m.days for m in definition.months if not m.is_intercalary]
        year = sum(m.days for m in definition.months)
        return cls(
            days_per_week=len(definition.weekdays) or 7,
            days_per_month=round(sum(standard) / len(standard)) if standard else 30,
            days_per_year=year or 365,
        )


@dataclass(frozen=True)
class DurationTerm:
    sign: int  # 1 or -1
    count: int  # fixed quantity, or number of dice
    sides: int  # 0 for a fixed quantity
    unit: str

    @property
    def is_dice(self) -> bool:
        return self.sides > 0

    def resolve(self, units: DurationUnits, rng: RandomSource) -> int:
        if self.is_dice:
            amount = sum(rng.randint(1, self.sides) for _ in range(self.count))
        else:
            amount = self.count
        return self.sign * amount * units.minutes_per(self.unit)

    def bounds(self, units: DurationUnits) -> tuple[int, int]:
        """Smallest and largest minutes this term can contribute."""
        per = units.minutes_per(self.unit)
        low = self.count * per
        high = self.count * (self.sides if self.is_dice else 1) * per
        if self.sign < 0:
            return -high, -low
        return low, high


@dataclass(frozen=True)
class DurationExpression:
    """A parsed duration. Evaluate as often as needed; parsing happens once."""

    source: str
    terms: tuple[DurationTerm, ...]

    @property
    def has_dice(self) -> bool:
        return any(term.is_dice for term in self.terms)

    def bounds(self, units: DurationUnits | None = None) -> tuple[int, int]:
        units = units or DurationUnits()
        low = high = 0
        for term in self.terms:
            term_low, term_high = term.bounds(units)
            low += term_low
            high += term_high
        return low, high

    def evaluate(
        self, units: DurationUnits | None = None, rng: RandomSource | None = None
    ) -> int:
        """Sum the terms left to right. Dice draw from ``rng`` in term order.

        Raises:
            NegativeDurationError: If the total is below zero.
        """
        units = units or DurationUnits()
        if rng is None:
            rng = random.Random()
        total = 0
        for term in self.terms:
            total += term.resolve(units, rng)
        if total < 0:
            raise NegativeDurationError(
                f"duration resolves to {total} minutes", self.source
            )
        return total


@dataclass(frozen=True)
class _Token:
    kind: str  # "dice", "number", "word", "op"
    text: str
    position: int


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    end = len(expression.rstrip())
    while position < end:
        match = _TOKEN_RE.match(expression, position)
        if match is None or match.lastgroup is None:
            fragment = expression[position:].strip()[:12]
            raise InvalidTokenError("unexpected character", expression, fragment)
        kind = match.lastgroup
        tokens.append(_Token(kind, match.group(kind), match.start(kind)))
        position = match.end()
    return tokens


def _unit_name(word: str) -> str | None:
    word = word.lower()
    if word in UNITS:
        return word
    if word.endswith("s") and word[:-1] in UNITS:
        return word[:-1]
    return None


def parse_duration(expression: str) -> DurationExpression:
    """Parse an expression without evaluating it.

    Raises:
        EmptyDurationError: Nothing but whitespace.
        InvalidTokenError: Unknown characters or unit names, or zero dice.
        MissingValueError: A unit or operator where a quantity belongs.
        MissingUnitError: A quantity without a unit.
        TrailingOperatorError: The expression ends with ``+`` or ``-``.
    """
    tokens = _tokenize(expression)
    if not tokens:
        raise EmptyDurationError("empty duration", expression)

    terms: list[DurationTerm] = []
    pos = 0
    sign = 1
    if tokens[0].kind == "op":
        sign = -1 if tokens[0].text == "-" else 1
        pos = 1

    while True:
        if pos >= len(tokens):
            raise TrailingOperatorError(
                "expression ends with an operator", expression, tokens[-1].text
            )
        token = tokens[pos]
        if token.kind not in ("number", "dice"):
            raise MissingValueError("expected a number or dice", expression, token.text)
        if pos + 1 >= len(tokens) or tokens[pos + 1].kind != "word":
            raise MissingUnitError("missing unit", expression, token.text)
        word = tokens[pos + 1].text
        unit = _unit_name(word)
        if unit is None:
            raise InvalidTokenError("unknown unit", expression, word)
        terms.append(_make_term(sign, token, unit, expression))
        pos += 2

        if pos == len(tokens):
            break
        if tokens[pos].kind == "op":
            sign = -1 if tokens[pos].text == "-" else 1
            pos += 1
        else:
            sign = 1
    return DurationExpression(expression, tuple(terms))


def _make_term(sign: int, token: _Token, unit: str, expression: str) -> DurationTerm:
    if token.kind == "number":
        return DurationTerm(sign, int(token.text), 0, unit)
    count, sides = (int(part) for part in token.text.lower().split("d"))
    if count < 1 or sides < 1:
        raise InvalidTokenError("dice need at least one die of one side", expression, token.text)
    return DurationTerm(sign, count, sides, unit)


def roll_duration(
    expression: str,
    rng: RandomSource | None = None,
    units: DurationUnits | None = None,
) -> int:
    """Parse and evaluate in one step. Returns minutes."""
    return parse_duration(expression).evaluate(units, rng)


def is_valid_duration(expression: str) -> bool:
    """Syntax check only."""
    try:
        parse_duration(expression)
    except DurationError:
        return False
    return True
