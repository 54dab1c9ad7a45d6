"""Calendar data model, date results, validation reports, and error types."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

STANDARD = "standard"
INTERCALARY = "intercalary"
MONTH_KINDS = (STANDARD, INTERCALARY)


class RandomSource(Protocol):
    """Anything with the two draws the parsers need. ``random.Random`` fits."""

    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...


# --- Definitions ---


@dataclass(frozen=True)
class LeapRule:
    """One node of a recursive leap-year rule tree.

    A year matches when ``(year - offset) % interval == 0`` and no rule in
    ``exclude`` matches it. Excludes are tested the same way, so an
    exclude's own excludes re-admit the year (every 4, not 100, yes 400).
    """

    interval: int
    offset: int = 0
    target_month: int | None = None  # month index gaining the day, None = last month
    exclude: tuple[LeapRule, ...] = ()


@dataclass(frozen=True)
class Month:
    name: str
    days: int
    kind: str = STANDARD  # "standard" or "intercalary"
    season: str | None = None

    @property
    def is_intercalary(self) -> bool:
        return self.kind == INTERCALARY


@dataclass(frozen=True)
class Holiday:
    name: str
    month: int  # 0-based month index
    day: int  # 1-based day of month
    description: str = ""


@dataclass(frozen=True)
class Era:
    """A named span of years used for the year suffix."""

    name: str
    abbrev: str
    start_year: int  # inclusive
    end_year: int | None = None  # exclusive, None = open-ended
    direction: int = 1  # 1 counts forward, -1 counts backward toward end_year

    def contains(self, year: int) -> bool:
        if year < self.start_year:
            return False
        return self.end_year is None or year < self.end_year


@dataclass(frozen=True)
class Season:
    name: str
    start_month: int  # 0-based month index
    start_day: int  # 1-based day of month
    sunrise: int = 360  # minutes after midnight
    sunset: int = 1080
    region: str | None = None  # None = applies everywhere


@dataclass(frozen=True)
class CalendarOrigin:
    """Calendar date that absolute day 0 maps to."""

    year: int
    month: int  # 0-based month index
    day: int  # 1-based day of month


@dataclass(frozen=True)
class CalendarDefinition:
    """A complete calendar system. Immutable once loaded."""

    id: str
    name: str
    months: tuple[Month, ...]
    weekdays: tuple[str, ...] = ()  # empty = simple counter, no weekday concept
    holidays: tuple[Holiday, ...] = ()
    starting_year: int = 1
    year_suffix: str = ""
    eras: tuple[Era, ...] = ()
    leap_rules: tuple[LeapRule, ...] = ()  # OR-ed together
    seasons: tuple[Season, ...] = ()
    description: str = ""


# --- Results ---


@dataclass(frozen=True)
class CalendarDate:
    year: int
    month_index: int
    day_of_month: int
    month_name: str
    day_of_week: str  # "" for intercalary days and simple counters
    year_suffix: str
    is_intercalary: bool
    is_simple_counter: bool


@dataclass(frozen=True)
class ValidationIssue:
    path: str  # e.g. "months[3].days", "events[raid].condition"
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationReport:
    """Outcome of a definition validation pass."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, path: str, message: str) -> None:
        self.errors.append(ValidationIssue(path, message))

    def warn(self, path: str, message: str) -> None:
        self.warnings.append(ValidationIssue(path, message))


# --- Errors ---


class AlmanacError(Exception):
    """Base class for every error raised by the almanac packages."""


class DefinitionError(AlmanacError, ValueError):
    """Raised when a calendar or event definition fails validation."""

    def __init__(self, message: str, report: ValidationReport | None = None) -> None:
        self.report = report
        super().__init__(message)

    @classmethod
    def from_report(cls, subject: str, report: ValidationReport) -> DefinitionError:
        listed = "; ".join(str(issue) for issue in report.errors[:5])
        more = len(report.errors) - 5
        if more > 0:
            listed += f" (+{more} more)"
        return cls(f"invalid {subject}: {listed}", report)


class CalendarDefinitionError(DefinitionError):
    """Raised for a malformed calendar definition."""


class DurationError(AlmanacError, ValueError):
    """Raised when a duration expression cannot be parsed or evaluated."""

    def __init__(self, message: str, expression: str, fragment: str = "") -> None:
        self.expression = expression
        self.fragment = fragment
        if fragment:
            message = f"{message} near {fragment!r} in {expression!r}"
        else:
            message = f"{message} in {expression!r}"
        super().__init__(message)


class EmptyDurationError(DurationError):
    """The expression has no terms at all."""


class InvalidTokenError(DurationError):
    """A character sequence or unit name the grammar does not know."""


class MissingUnitError(DurationError):
    """A number or dice term is not followed by a unit."""


class MissingValueError(DurationError):
    """A unit or operator appears where a number or dice term was expected."""


class TrailingOperatorError(DurationError):
    """The expression ends with ``+`` or ``-``."""


class NegativeDurationError(DurationError):
    """The terms sum to less than zero minutes."""
