"""
Holiday calendar rules.

Every rule answers one question: "on which date does this holiday fall in
year Y?". Classifying a date is then a matter of asking each rule in order
and comparing, which keeps fixed-date, floating and movable holidays behind
one interface (HolidayRule, a Protocol).

Rule order matters: fixed dates are checked first, then floating dates, and
the first match wins, so a date is never counted twice.

This module is pure: no I/O, no clock, no randomness. It runs inside the
Temporal workflow sandbox.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol, Sequence

from trip_pricing.domain.models import HolidayInfo

logger = logging.getLogger(__name__)

MONDAY = calendar.MONDAY
THURSDAY = calendar.THURSDAY


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian computus)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """The n-th (1-based) given weekday of a month, e.g. 4th Thursday of November."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def last_weekday(year: int, month: int, weekday: int) -> date:
    last = date(year, month, calendar.monthrange(year, month)[1])
    return last - timedelta(days=(last.weekday() - weekday) % 7)


class HolidayRule(Protocol):
    """Interface for a single holiday definition."""

    name: str
    federal: bool

    def date_for(self, year: int) -> date: ...


@dataclass(frozen=True)
class FixedDate:
    name: str
    month: int
    day: int
    federal: bool = False

    def date_for(self, year: int) -> date:
        return date(year, self.month, self.day)


@dataclass(frozen=True)
class NthWeekdayOfMonth:
    name: str
    month: int
    weekday: int
    n: int
    federal: bool = False

    def date_for(self, year: int) -> date:
        return nth_weekday(year, self.month, self.weekday, self.n)


@dataclass(frozen=True)
class LastWeekdayOfMonth:
    name: str
    month: int
    weekday: int
    federal: bool = False

    def date_for(self, year: int) -> date:
        return last_weekday(year, self.month, self.weekday)


@dataclass(frozen=True)
class EasterSunday:
    name: str = "Easter Sunday"
    federal: bool = False

    def date_for(self, year: int) -> date:
        return easter_sunday(year)


@dataclass(frozen=True)
class DaysAfter:
    """A holiday defined relative to another, e.g. the day after Thanksgiving."""

    name: str
    base: HolidayRule
    days: int = 1
    federal: bool = False

    def date_for(self, year: int) -> date:
        return self.base.date_for(year) + timedelta(days=self.days)


THANKSGIVING = NthWeekdayOfMonth("Thanksgiving Day", 11, THURSDAY, 4, federal=True)

FIXED_RULES: tuple[HolidayRule, ...] = (
    FixedDate("New Year's Day", 1, 1, federal=True),
    FixedDate("Independence Day", 7, 4, federal=True),
    FixedDate("Veterans Day", 11, 11, federal=True),
    FixedDate("Christmas Day", 12, 25, federal=True),
    FixedDate("New Year's Eve", 12, 31),
    FixedDate("Christmas Eve", 12, 24),
)

FLOATING_RULES: tuple[HolidayRule, ...] = (
    NthWeekdayOfMonth("Martin Luther King Jr. Day", 1, MONDAY, 3, federal=True),
    NthWeekdayOfMonth("Presidents' Day", 2, MONDAY, 3, federal=True),
    EasterSunday(),
    LastWeekdayOfMonth("Memorial Day", 5, MONDAY, federal=True),
    NthWeekdayOfMonth("Labor Day", 9, MONDAY, 1, federal=True),
    NthWeekdayOfMonth("Columbus Day", 10, MONDAY, 2, federal=True),
    THANKSGIVING,
    DaysAfter("Black Friday", THANKSGIVING),
)

DEFAULT_RULES: tuple[HolidayRule, ...] = FIXED_RULES + FLOATING_RULES


def to_local_date(value: object, tz: tzinfo | None = None) -> date | None:
    """Coerce a date, datetime or ISO string to a calendar date.

    Aware datetimes are converted into `tz` first when one is given, so the
    result does not depend on the server's local timezone. Returns None for
    anything that cannot be read as a date.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    return None


class CalendarRuleEngine:
    """Classifies dates as surcharge-bearing holidays.

    Every matched holiday carries the same flat surcharge; the federal flag is
    informational only.

    Examples:
        - 2025-07-04 -> Independence Day (fixed)
        - 2025-11-27 -> Thanksgiving Day (4th Thursday of November)
        - 2025-11-28 -> Black Friday (Thanksgiving + 1)
        - 2025-04-20 -> Easter Sunday (computus)
    """

    def __init__(self, surcharge_cents: int = 10000, rules: Sequence[HolidayRule] = DEFAULT_RULES) -> None:
        self.surcharge_cents = surcharge_cents
        self.rules = tuple(rules)

    def classify(self, value: object, tz: tzinfo | None = None) -> HolidayInfo:
        day = to_local_date(value, tz)
        if day is None:
            # Unreadable dates are priced as ordinary days rather than failing.
            logger.debug("Cannot read %r as a date; treating as non-holiday", value)
            return HolidayInfo()
        for rule in self.rules:
            if rule.date_for(day.year) == day:
                return HolidayInfo(
                    is_holiday=True,
                    name=rule.name,
                    is_federal=rule.federal,
                    surcharge_cents=self.surcharge_cents,
                )
        return HolidayInfo()

    def holidays_for_year(self, year: int) -> list[tuple[date, HolidayRule]]:
        """All configured holidays in a year, in calendar order."""
        return sorted(((rule.date_for(year), rule) for rule in self.rules), key=lambda pair: pair[0])
