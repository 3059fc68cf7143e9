# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Why is everything in one file?
#   - Flat is better than nested
#   - It prevents circular imports since the classes 'know' about each other
#     (the formatter needs DateTime, DateTime needs the formatter for __str__)
#   - It's easier to vendor (i.e. copy-paste) this library if needed
# - DateTime keeps two representations: the absolute time (microseconds since
#   the Gregorian reform) and the broken-down calendar fields. Every mutation
#   recomputes both. The calendar fields are derived through a floating point
#   Julian day, and the time of day is then recomputed from the exact integer
#   value. Don't "simplify" one of the two steps away: the round trip tests
#   depend on both.
from __future__ import annotations

__version__ = "0.1.0"

import logging
import math
import string
import threading
import time
from abc import ABC, abstractmethod
from datetime import (
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
)
from enum import Enum
from operator import attrgetter
from typing import (
    TYPE_CHECKING,
    Callable,
    ClassVar,
    NamedTuple,
    overload,
)

try:
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
except ImportError:  # pragma: no cover
    from backports.zoneinfo import (  # type: ignore[import-not-found,no-redef]
        ZoneInfo,
        ZoneInfoNotFoundError,
    )

__all__ = [
    # values
    "Duration",
    "Timestamp",
    "CalendarFields",
    "DateTime",
    "LocalDateTime",
    # calendar
    "to_julian_day",
    "from_julian_day",
    "normalize",
    "correct_day_boundary",
    "is_leap_year",
    "days_in_month",
    "is_valid",
    # formatting and parsing
    "Directive",
    "format_datetime",
    "format_duration",
    "tzd_iso",
    "tzd_rfc",
    "parse",
    "try_parse",
    "detect_format",
    "parse_month",
    "parse_day_of_week",
    "parse_tzd",
    "ISO8601_FORMAT",
    "ISO8601_FRAC_FORMAT",
    "RFC822_FORMAT",
    "RFC1123_FORMAT",
    "HTTP_FORMAT",
    "RFC850_FORMAT",
    "RFC1036_FORMAT",
    "ASCTIME_FORMAT",
    "SORTABLE_FORMAT",
    "DURATION_FORMAT",
    "WEEKDAY_NAMES",
    "MONTH_NAMES",
    "UTC",
    "SUNDAY",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    # collaborators
    "Timezone",
    "SystemTimezone",
    "ZoneInfoTimezone",
    "system_timezone",
    "Clock",
    "SystemClock",
    # errors
    "OutOfRange",
    "InvalidFormat",
    "TimezoneError",
]

_log = logging.getLogger(__name__)

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

# Durations, in microseconds
MILLISECONDS = 1_000
SECONDS = 1_000 * MILLISECONDS
MINUTES = 60 * SECONDS
HOURS = 60 * MINUTES
DAYS = 24 * HOURS

UTC = 0xFFFF
"""Special time zone differential denoting UTC"""

# Microseconds between the Gregorian reform (1582-10-15) and the UNIX epoch
_GREGORIAN_EPOCH_OFFSET = 12_219_292_800 * SECONDS
# Julian day of the Gregorian reform
_GREGORIAN_EPOCH_JD = 2299160.5


class Duration:
    """A signed amount of time with microsecond resolution.

    The inputs are normalized, so 90 minutes becomes 1 hour and 30 minutes,
    for example.

    Examples
    --------

    >>> d = Duration(hours=1, minutes=30)
    Duration(0d 01:30:00.000)
    >>> d.in_minutes()
    90.0
    >>> Duration(days=2, hours=12, minutes=30, seconds=10, microseconds=123456)
    Duration(2d 12:30:10.123)

    """

    __slots__ = ("_total_us",)

    def __init__(
        self,
        *,
        days: float = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: int = 0,
    ) -> None:
        assert type(microseconds) is int  # catch this common mistake
        self._total_us = (
            # Cast individual components to int to avoid floating point errors
            int(days * DAYS)
            + int(hours * HOURS)
            + int(minutes * MINUTES)
            + int(seconds * SECONDS)
            + int(milliseconds * MILLISECONDS)
            + microseconds
        )

    ZERO: ClassVar[Duration]
    """A duration of zero"""

    def in_days(self) -> float:
        """The total duration in days

        Example
        -------

        >>> Duration(hours=36).in_days()
        1.5

        """
        return self._total_us / DAYS

    def in_hours(self) -> float:
        """The total duration in hours

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d.in_hours()
        1.5

        """
        return self._total_us / HOURS

    def in_minutes(self) -> float:
        """The total duration in minutes

        Example
        -------

        >>> d = Duration(hours=1, minutes=30, seconds=30)
        >>> d.in_minutes()
        90.5

        """
        return self._total_us / MINUTES

    def in_seconds(self) -> float:
        """The total duration in seconds

        Example
        -------

        >>> d = Duration(minutes=2, seconds=1, microseconds=500_000)
        >>> d.in_seconds()
        121.5

        """
        return self._total_us / SECONDS

    def in_milliseconds(self) -> float:
        """The total duration in milliseconds"""
        return self._total_us / MILLISECONDS

    def in_microseconds(self) -> int:
        """The total duration in microseconds

        >>> d = Duration(seconds=2, microseconds=50)
        >>> d.in_microseconds()
        2_000_050

        """
        return self._total_us

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        """Convert to a tuple of
        (days, hours, minutes, seconds, milliseconds, microseconds).

        All components carry the sign of the duration.

        Example
        -------

        >>> d = Duration(hours=36, minutes=30, microseconds=10_123_456)
        >>> d.as_tuple()
        (1, 12, 30, 10, 123, 456)
        >>> (-d).as_tuple()
        (-1, -12, -30, -10, -123, -456)

        """
        days, rem = divmod(abs(self._total_us), DAYS)
        hours, rem = divmod(rem, HOURS)
        mins, rem = divmod(rem, MINUTES)
        secs, rem = divmod(rem, SECONDS)
        ms, us = divmod(rem, MILLISECONDS)
        return (
            (days, hours, mins, secs, ms, us)
            if self._total_us >= 0
            else (-days, -hours, -mins, -secs, -ms, -us)
        )

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d == Duration(minutes=90)
        True
        >>> d == Duration(hours=2)
        False

        """
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us == other._total_us

    def __hash__(self) -> int:
        return hash(self._total_us)

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us < other._total_us

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us <= other._total_us

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us > other._total_us

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us >= other._total_us

    def __bool__(self) -> bool:
        """True if the duration is non-zero

        Example
        -------

        >>> bool(Duration())
        False
        >>> bool(Duration(minutes=1))
        True

        """
        return bool(self._total_us)

    def __add__(self, other: Duration) -> Duration:
        """Add two durations together

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d + Duration(minutes=30)
        Duration(0d 02:00:00.000)

        """
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._total_us + other._total_us)

    def __sub__(self, other: Duration) -> Duration:
        """Subtract two durations

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d - Duration(minutes=30)
        Duration(0d 01:00:00.000)

        """
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._total_us - other._total_us)

    def __mul__(self, other: float) -> Duration:
        """Multiply by a number

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d * 2.5
        Duration(0d 03:45:00.000)

        """
        if not isinstance(other, (int, float)):
            return NotImplemented
        return Duration(microseconds=int(self._total_us * other))

    __rmul__ = __mul__

    def __neg__(self) -> Duration:
        """Negate the duration

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> -d
        Duration(0d -1:-30:00.000)

        """
        return Duration(microseconds=-self._total_us)

    @overload
    def __truediv__(self, other: float) -> Duration: ...

    @overload
    def __truediv__(self, other: Duration) -> float: ...

    def __truediv__(self, other: float | Duration) -> Duration | float:
        """Divide by a number or another duration

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d / 2
        Duration(0d 00:45:00.000)
        >>> d / Duration(minutes=30)
        3.0

        """
        if isinstance(other, Duration):
            return self._total_us / other._total_us
        elif isinstance(other, (int, float)):
            return Duration(microseconds=int(self._total_us / other))
        return NotImplemented

    def __abs__(self) -> Duration:
        """The absolute value of the duration

        Example
        -------

        >>> d = Duration(hours=-1, minutes=-30)
        >>> abs(d)
        Duration(0d 01:30:00.000)

        """
        return Duration(microseconds=abs(self._total_us))

    def format(self, fmt: str = "%dd %H:%M:%S.%i") -> str:
        """Format with a format specifier string.
        See :func:`format_duration` for the supported directives.

        Example
        -------

        >>> Duration(hours=26, minutes=5).format("%h hours, %M minutes")
        '26 hours, 05 minutes'

        """
        return format_duration(self, fmt)

    def __str__(self) -> str:
        return format_duration(self)

    def __repr__(self) -> str:
        return f"Duration({self})"

    def py_timedelta(self) -> _timedelta:
        """Convert to a :class:`~datetime.timedelta`

        Inverse of :meth:`from_py_timedelta`

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d.py_timedelta()
        timedelta(seconds=5400)

        """
        return _timedelta(microseconds=self._total_us)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        """Create from a :class:`~datetime.timedelta`

        Inverse of :meth:`py_timedelta`

        Example
        -------

        >>> Duration.from_py_timedelta(timedelta(seconds=5400))
        Duration(0d 01:30:00.000)

        """
        return Duration(
            days=td.days,
            seconds=td.seconds,
            microseconds=td.microseconds,
        )


Duration.ZERO = Duration()


class Timestamp:
    """An instant in time, stored as a count of microseconds since
    the UNIX epoch (1970-01-01 00:00:00 UTC).

    Timestamps are independent of any timezone. They are only monotonic
    as long as the system clock is (i.e. isn't set back).

    Example
    -------

    >>> Timestamp.from_epoch_time(1_000_000_000)
    Timestamp(1000000000000000)
    >>> Timestamp(1_500_000) + Duration(seconds=1)
    Timestamp(2500000)

    """

    __slots__ = ("_us",)

    def __init__(self, microseconds: int = 0, /) -> None:
        self._us = microseconds

    @classmethod
    def now(cls) -> Timestamp:
        """The current time, according to the clock collaborator"""
        return _clock.now()

    @classmethod
    def from_epoch_time(cls, seconds: int, /) -> Timestamp:
        """Create from a count of seconds since the UNIX epoch
        (i.e. a ``time_t``).

        Inverse of :meth:`epoch_time`
        """
        return cls(seconds * SECONDS)

    @classmethod
    def from_epoch_microseconds(cls, microseconds: int, /) -> Timestamp:
        return cls(microseconds)

    @classmethod
    def from_utc_time(cls, value: int, /) -> Timestamp:
        """Create from a count of microseconds since the Gregorian
        reform (1582-10-15 00:00:00 UTC).

        Inverse of :meth:`utc_time`
        """
        return cls(value - _GREGORIAN_EPOCH_OFFSET)

    @staticmethod
    def resolution() -> int:
        """The number of units per second. Always 1 000 000."""
        return SECONDS

    def epoch_time(self) -> int:
        """The number of whole seconds since the UNIX epoch

        Example
        -------

        >>> Timestamp(1_999_999).epoch_time()
        1

        """
        return self._us // SECONDS

    def epoch_microseconds(self) -> int:
        """The number of microseconds since the UNIX epoch"""
        return self._us

    def utc_time(self) -> int:
        """The number of microseconds since the Gregorian reform
        (1582-10-15 00:00:00 UTC)"""
        return self._us + _GREGORIAN_EPOCH_OFFSET

    def elapsed(self) -> Duration:
        """The time elapsed since this instant.
        Equivalent to ``Timestamp.now() - self``."""
        return Timestamp.now() - self

    def is_elapsed(self, interval: Duration, /) -> bool:
        """Whether at least the given interval has passed since
        this instant.

        Example
        -------

        >>> start = Timestamp.now()
        >>> start.is_elapsed(Duration(hours=1))
        False

        """
        return self.elapsed() >= interval

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._us == other._us

    def __hash__(self) -> int:
        return hash(self._us)

    def __lt__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._us < other._us

    def __le__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._us <= other._us

    def __gt__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._us > other._us

    def __ge__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._us >= other._us

    def __add__(self, delta: Duration) -> Timestamp:
        """Add a duration to this timestamp"""
        if not isinstance(delta, Duration):
            return NotImplemented
        return Timestamp(self._us + delta._total_us)

    __radd__ = __add__

    @overload
    def __sub__(self, other: Duration) -> Timestamp: ...

    @overload
    def __sub__(self, other: Timestamp) -> Duration: ...

    def __sub__(self, other: Duration | Timestamp) -> Timestamp | Duration:
        """Subtract a duration, or calculate the duration between
        two timestamps.

        Example
        -------

        >>> Timestamp(3_000_000) - Timestamp(1_000_000)
        Duration(0d 00:00:02.000)

        """
        if isinstance(other, Timestamp):
            return Duration(microseconds=self._us - other._us)
        elif isinstance(other, Duration):
            return Timestamp(self._us - other._total_us)
        return NotImplemented

    def py_datetime(self) -> _datetime:
        """Convert to an aware :class:`~datetime.datetime` in UTC"""
        return _EPOCH_DT + _timedelta(microseconds=self._us)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> Timestamp:
        """Create from an aware :class:`~datetime.datetime`

        Raises
        ------
        ValueError
            If the datetime is naive
        """
        if d.tzinfo is None or d.utcoffset() is None:
            raise ValueError(
                "Can only create Timestamp from an aware datetime, "
                f"got {d!r}"
            )
        return cls((d - _EPOCH_DT) // _timedelta(microseconds=1))

    def __repr__(self) -> str:
        return f"Timestamp({self._us})"


class CalendarFields(NamedTuple):
    """The broken-down representation of a date and time
    in the proleptic Gregorian calendar."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0
    microsecond: int = 0


_DAYS_IN_MONTH = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
# ⌊(153m − 457) / 5⌋ for 3 <= m <= 14
_MONTH_LOOKUP = (
    -91, -60, -30, 0, 31, 61, 92, 122, 153, 184, 214, 245, 275, 306, 337
)  # fmt: skip


def is_leap_year(year: int, /) -> bool:
    """Whether the year is a leap year in the proleptic Gregorian calendar

    >>> is_leap_year(2000), is_leap_year(1900), is_leap_year(0)
    (True, False, True)
    """
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int, /) -> int:
    """The number of days in the given month

    >>> days_in_month(2000, 2), days_in_month(1900, 2)
    (29, 28)

    Raises
    ------
    OutOfRange
        If the month is not in the range 1-12
    """
    if not 1 <= month <= 12:
        raise OutOfRange(f"month must be in 1..12, got {month}")
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month]


def is_valid(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
    microsecond: int = 0,
) -> bool:
    """Whether the given fields form a valid date and time"""
    return (
        0 <= year <= 9999
        and 1 <= month <= 12
        and 1 <= day <= days_in_month(year, month)
        and 0 <= hour <= 23
        and 0 <= minute <= 59
        and 0 <= second <= 59
        and 0 <= millisecond <= 999
        and 0 <= microsecond <= 999
    )


def to_julian_day(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
    microsecond: int = 0,
) -> float:
    """Convert calendar fields to a (continuous) Julian day

    >>> to_julian_day(1970, 1, 1)
    2440587.5
    >>> to_julian_day(2000, 1, 1, 12)
    2451545.0
    """
    dday = (
        day
        + ((((hour * 60 + minute) * 60 + second) * 1000 + millisecond) * 1000
           + microsecond)
        / 86_400_000_000.0
    )  # fmt: skip
    if month < 3:
        month += 12
        year -= 1
    # The evaluation order matters: it keeps the result identical
    # to the reference formulation, bit for bit.
    return (
        dday
        + _MONTH_LOOKUP[month]
        + 365 * year
        + math.floor(year / 4)
        - math.floor(year / 100)
        + math.floor(year / 400)
        + 1721118.5
    )


def from_julian_day(julian_day: float, /) -> CalendarFields:
    """Convert a Julian day to (normalized) calendar fields

    >>> from_julian_day(2440587.5)[:4]
    (1970, 1, 1, 0)
    """
    floor = math.floor
    z = floor(julian_day - 1721118.5)
    r = julian_day - 1721118.5 - z
    g = z - 0.25
    a = floor(g / 36524.25)
    b = a - floor(a / 4)
    year = floor((b + g) / 365.25)
    c = b + z - floor(365.25 * year)
    month = floor((5 * c + 456) / 153)
    day = int(c - floor((153.0 * month - 457) / 5) + r)
    if month > 12:
        year += 1
        month -= 12
    r *= 24
    hour = floor(r)
    r -= hour
    r *= 60
    minute = floor(r)
    r -= minute
    r *= 60
    second = floor(r)
    r -= second
    r *= 1000
    millisecond = floor(r)
    r -= millisecond
    r *= 1000
    microsecond = int(r + 0.5)
    return normalize(
        CalendarFields(
            year, month, day, hour, minute, second, millisecond, microsecond
        )
    )


def normalize(fields: CalendarFields, /) -> CalendarFields:
    """Carry overflowing fields into the next larger unit.

    Only overflow (never underflow) is handled. The month may exceed 12,
    the day overflows at most one month. This is enough to repair the
    results of :func:`from_julian_day`.

    >>> normalize(CalendarFields(2004, 12, 31, 23, 59, 59, 999, 1000))[:4]
    (2005, 1, 1, 0)
    """
    year, month, day, hour, minute, second, ms, us = fields
    if us >= 1000:
        ms, us = ms + us // 1000, us % 1000
    if ms >= 1000:
        second, ms = second + ms // 1000, ms % 1000
    if second >= 60:
        minute, second = minute + second // 60, second % 60
    if minute >= 60:
        hour, minute = hour + minute // 60, minute % 60
    if hour >= 24:
        day, hour = day + hour // 24, hour % 24
    if month > 12:
        year, month = year + (month - 1) // 12, (month - 1) % 12 + 1
    if day > (month_days := days_in_month(year, month)):
        day -= month_days
        month += 1
        if month > 12:
            year += 1
            month -= 12
    return CalendarFields(year, month, day, hour, minute, second, ms, us)


def correct_day_boundary(
    fields: CalendarFields, hour: int, /
) -> CalendarFields:
    """Repair a date which crossed midnight because of floating point
    rounding. ``hour`` is the exact hour of the day, ``fields`` the result
    of :func:`from_julian_day`.

    >>> correct_day_boundary(CalendarFields(2005, 1, 1, 0), 23)[:4]
    (2004, 12, 31, 0)
    """
    year, month, day = fields.year, fields.month, fields.day
    if hour == 23 and fields.hour == 0:
        day -= 1
        if day == 0:
            month -= 1
            if month == 0:
                month = 12
                year -= 1
            day = days_in_month(year, month)
    elif hour == 0 and fields.hour == 23:
        day += 1
        if day > days_in_month(year, month):
            month += 1
            if month > 12:
                month = 1
                year += 1
            day = 1
    else:
        return fields
    _log.debug(
        "Corrected day boundary of %04d-%02d-%02d to %04d-%02d-%02d",
        fields.year,
        fields.month,
        fields.day,
        year,
        month,
        day,
    )
    return fields._replace(year=year, month=month, day=day)


def _utc_time_to_julian_day(utc_time: int) -> float:
    return utc_time / 86_400_000_000.0 + _GREGORIAN_EPOCH_JD


def _julian_day_to_utc_time(julian_day: float) -> int:
    return int((julian_day - _GREGORIAN_EPOCH_JD) * 86_400_000_000.0)


class DateTime:
    """A date and time in UTC, in the proleptic Gregorian calendar,
    with microsecond resolution.

    Both the absolute time (microseconds since the Gregorian reform)
    and the calendar fields are stored, so that reading either is cheap.
    Any mutation recomputes both.

    Example
    -------

    >>> d = DateTime(2005, 1, 8, 12, 30)
    DateTime(2005-01-08T12:30:00Z)
    >>> d.day_of_week == SATURDAY
    True
    >>> d + Duration(days=1)
    DateTime(2005-01-09T12:30:00Z)

    Note
    ----

    Instances can be shifted in place with ``+=``, ``-=``,
    :meth:`make_utc` and :meth:`make_local`. For this reason, they aren't
    hashable. Use :meth:`timestamp` if you need a hashable key.
    """

    __slots__ = ("_utc_time", "_fields")
    _utc_time: int
    _fields: CalendarFields

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
        microsecond: int = 0,
    ) -> None:
        fields = (
            year, month, day, hour, minute, second, millisecond, microsecond
        )
        if any(type(f) is not int for f in fields):
            raise TypeError(f"date/time fields must be integers, got {fields}")
        if not is_valid(*fields):
            raise OutOfRange(
                "date/time component out of range: "
                f"{year}-{month}-{day} {hour}:{minute}:{second}"
                f".{millisecond}.{microsecond}"
            )
        self._utc_time = _julian_day_to_utc_time(
            to_julian_day(year, month, day)
        ) + (
            hour * HOURS
            + minute * MINUTES
            + second * SECONDS
            + millisecond * MILLISECONDS
            + microsecond
        )
        self._fields = CalendarFields(
            year, month, day, hour, minute, second, millisecond, microsecond
        )

    @classmethod
    def now(cls) -> DateTime:
        """Create an instance from the current time"""
        return cls.from_timestamp(Timestamp.now())

    @classmethod
    def from_timestamp(cls, ts: Timestamp, /) -> DateTime:
        """Create an instance from a :class:`Timestamp`

        Example
        -------

        >>> DateTime.from_timestamp(Timestamp.from_epoch_time(1_000_000_000))
        DateTime(2001-09-09T01:46:40Z)

        """
        return cls.from_utc_time(ts.utc_time())

    @classmethod
    def from_utc_time(cls, utc_time: int, diff: int = 0, /) -> DateTime:
        """Create an instance from a count of microseconds since the
        Gregorian reform, optionally shifted by ``diff`` microseconds."""
        self = _object_new(cls)
        self._utc_time = utc_time + diff
        self._compute()
        return self

    @classmethod
    def from_julian_day(cls, julian_day: float, /) -> DateTime:
        """Create an instance from a Julian day.

        The calendar fields and the absolute time are both derived
        from the Julian day directly.

        Example
        -------

        >>> DateTime.from_julian_day(2440587.5)
        DateTime(1970-01-01T00:00:00Z)

        """
        self = _object_new(cls)
        self._utc_time = _julian_day_to_utc_time(julian_day)
        self._fields = from_julian_day(julian_day)
        return self

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> DateTime:
        """Create an instance from a :class:`~datetime.datetime`.
        Aware datetimes are converted to UTC first,
        naive ones are assumed to be in UTC already."""
        if d.tzinfo is not None:
            d = d.astimezone(_UTC)
        return cls(
            d.year,
            d.month,
            d.day,
            d.hour,
            d.minute,
            d.second,
            d.microsecond // 1000,
            d.microsecond % 1000,
        )

    def py_datetime(self) -> _datetime:
        """Convert to an aware :class:`~datetime.datetime` in UTC.

        Raises
        ------
        ValueError
            For dates in year 0, which :mod:`datetime` doesn't support
        """
        f = self._fields
        return _datetime(
            f.year,
            f.month,
            f.day,
            f.hour,
            f.minute,
            f.second,
            f.millisecond * 1000 + f.microsecond,
            tzinfo=_UTC,
        )

    if TYPE_CHECKING:  # pragma: no branch

        @property
        def year(self) -> int: ...

        @property
        def month(self) -> int: ...

        @property
        def day(self) -> int: ...

        @property
        def hour(self) -> int: ...

        @property
        def minute(self) -> int: ...

        @property
        def second(self) -> int: ...

        @property
        def millisecond(self) -> int: ...

        @property
        def microsecond(self) -> int: ...

    else:
        # Defining properties this way is faster than declaring a `def`,
        # but the type checker doesn't like it.
        year = property(attrgetter("_fields.year"))
        month = property(attrgetter("_fields.month"))
        day = property(attrgetter("_fields.day"))
        hour = property(attrgetter("_fields.hour"))
        minute = property(attrgetter("_fields.minute"))
        second = property(attrgetter("_fields.second"))
        millisecond = property(attrgetter("_fields.millisecond"))
        microsecond = property(attrgetter("_fields.microsecond"))

    @property
    def fields(self) -> CalendarFields:
        """All calendar fields at once"""
        return self._fields

    @property
    def utc_time(self) -> int:
        """Microseconds since the Gregorian reform (1582-10-15)"""
        return self._utc_time

    @property
    def julian_day(self) -> float:
        return _utc_time_to_julian_day(self._utc_time)

    @property
    def day_of_week(self) -> int:
        """The weekday, from 0 (Sunday) to 6 (Saturday)"""
        return math.floor(self.julian_day + 1.5) % 7

    @property
    def day_of_year(self) -> int:
        """The day within the year: January 1 is 1, February 1 is 32, etc."""
        year = self._fields.year
        return (
            sum(days_in_month(year, m) for m in range(1, self._fields.month))
            + self._fields.day
        )

    def week(self, first_day_of_week: int = MONDAY) -> int:
        """The week number within the year, from 0 to 53.

        Week 1 is the week containing January 4, in accordance with
        ISO 8601. Days before the first ``first_day_of_week`` of the year
        fall in week 0 if that day is on or before January 4.

        For 2005, which started on a Saturday, week 1 starts on
        Monday, January 3. January 1 and 2 fall in week 0.
        For 2007, which started on a Monday, there is no week 0.

        Example
        -------

        >>> DateTime(2005, 1, 2).week()
        0
        >>> DateTime(2005, 1, 3).week()
        1

        """
        if not SUNDAY <= first_day_of_week <= SATURDAY:
            raise OutOfRange(
                f"first day of week must be in 0..6, got {first_day_of_week}"
            )
        year = self._fields.year
        base_day = 1
        while DateTime(year, 1, base_day).day_of_week != first_day_of_week:
            base_day += 1
        doy = self.day_of_year
        offset = 0 if base_day <= 4 else 1
        if doy < base_day:
            return offset
        return (doy - base_day) // 7 + 1 + offset

    @property
    def hour_ampm(self) -> int:
        """The hour on a 12-hour clock, from 1 to 12"""
        hour = self._fields.hour
        if hour < 1:
            return 12
        if hour > 12:
            return hour - 12
        return hour

    @property
    def is_am(self) -> bool:
        return self._fields.hour < 12

    @property
    def is_pm(self) -> bool:
        return self._fields.hour >= 12

    def timestamp(self) -> Timestamp:
        """The instant as a :class:`Timestamp`"""
        return Timestamp.from_utc_time(self._utc_time)

    is_leap_year = staticmethod(is_leap_year)
    days_of_month = staticmethod(days_in_month)
    is_valid = staticmethod(is_valid)

    def replace(self, **kwargs: int) -> DateTime:
        """Construct a new instance with the given fields replaced.

        Example
        -------

        >>> DateTime(2020, 8, 15, 23, 12).replace(year=2021)
        DateTime(2021-08-15T23:12:00Z)

        Raises
        ------
        OutOfRange
            If the resulting fields are invalid
        """
        return DateTime(**self._fields._replace(**kwargs)._asdict())

    def make_utc(self, tzd: int, /) -> None:
        """Convert local time into UTC, in place,
        by removing the time zone differential (in seconds)."""
        self -= Duration(microseconds=tzd * SECONDS)

    def make_local(self, tzd: int, /) -> None:
        """Convert UTC into local time, in place,
        by applying the time zone differential (in seconds)."""
        self += Duration(microseconds=tzd * SECONDS)

    def format(self, fmt: str, tzd: int = UTC) -> str:
        """Format with a format specifier string.
        See :func:`format_datetime`.

        Example
        -------

        >>> DateTime(2005, 1, 8, 12, 30).format(ISO8601_FORMAT, 3600)
        '2005-01-08T12:30:00+01:00'

        """
        return format_datetime(self, fmt, tzd)

    def canonical_format(self) -> str:
        """The ISO 8601 representation. Fractional seconds are
        only included if they are non-zero."""
        f = self._fields
        return format_datetime(
            self,
            ISO8601_FRAC_FORMAT
            if f.millisecond or f.microsecond
            else ISO8601_FORMAT,
        )

    __str__ = canonical_format

    def __repr__(self) -> str:
        return f"DateTime({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._utc_time == other._utc_time

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._utc_time < other._utc_time

    def __le__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._utc_time <= other._utc_time

    def __gt__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._utc_time > other._utc_time

    def __ge__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._utc_time >= other._utc_time

    def __add__(self, delta: Duration) -> DateTime:
        """Add a duration to this datetime

        Example
        -------

        >>> d = DateTime(2020, 8, 15, hour=23, minute=12)
        >>> d + Duration(hours=24, seconds=5)
        DateTime(2020-08-16T23:12:05Z)

        """
        if not isinstance(delta, Duration):
            return NotImplemented
        return DateTime.from_utc_time(self._utc_time, delta._total_us)

    __radd__ = __add__

    @overload
    def __sub__(self, other: Duration) -> DateTime: ...

    @overload
    def __sub__(self, other: DateTime) -> Duration: ...

    def __sub__(self, other: Duration | DateTime) -> DateTime | Duration:
        """Subtract a duration, or calculate the duration
        between two datetimes

        Example
        -------

        >>> d = DateTime(2020, 8, 15, hour=23, minute=12)
        >>> d - Duration(hours=24, seconds=5)
        DateTime(2020-08-14T23:11:55Z)
        >>> d - DateTime(2020, 8, 14)
        Duration(1d 23:12:00.000)

        """
        if isinstance(other, DateTime):
            return Duration(microseconds=self._utc_time - other._utc_time)
        elif isinstance(other, Duration):
            return DateTime.from_utc_time(self._utc_time, -other._total_us)
        return NotImplemented

    def __iadd__(self, delta: Duration) -> DateTime:
        if not isinstance(delta, Duration):
            return NotImplemented
        self._utc_time += delta._total_us
        self._compute()
        return self

    def __isub__(self, delta: Duration) -> DateTime:
        if not isinstance(delta, Duration):
            return NotImplemented
        self._utc_time -= delta._total_us
        self._compute()
        return self

    def __copy__(self) -> DateTime:
        new = _object_new(DateTime)
        new._utc_time = self._utc_time
        new._fields = self._fields
        return new

    def __deepcopy__(self, _: object) -> DateTime:
        return self.__copy__()

    def _compute(self) -> None:
        fields = from_julian_day(_utc_time_to_julian_day(self._utc_time))
        # The time of day is taken from the exact value.
        # The date may need repairing if the floating point
        # calculation ended up on the other side of midnight.
        hour, rem = divmod(self._utc_time % DAYS, HOURS)
        minute, rem = divmod(rem, MINUTES)
        second, rem = divmod(rem, SECONDS)
        millisecond, microsecond = divmod(rem, MILLISECONDS)
        self._fields = correct_day_boundary(fields, hour)._replace(
            hour=hour,
            minute=minute,
            second=second,
            millisecond=millisecond,
            microsecond=microsecond,
        )


class LocalDateTime:
    """A date and time in local time, together with its time zone
    differential (``tzd``): the offset from UTC in seconds, so that
    ``UTC = local time - tzd``.

    Unless it is given explicitly, the differential is determined by a
    :class:`Timezone` (by default the system timezone). Arithmetic is
    done in UTC, after which the differential is determined anew.
    This way, adding a duration across a DST transition results in the
    correct offset.

    Example
    -------

    >>> ams = ZoneInfoTimezone("Europe/Amsterdam")
    >>> d = LocalDateTime(2024, 3, 31, 1, 30, tz=ams)
    LocalDateTime(2024-03-31T01:30:00+01:00)
    >>> d + Duration(hours=1)
    LocalDateTime(2024-03-31T03:30:00+02:00)

    A differential given explicitly is used as is.
    The caller is then responsible for its correctness:

    >>> LocalDateTime(2024, 7, 1, tzd=-4 * 3600)
    LocalDateTime(2024-07-01T00:00:00-04:00)

    Comparison is based on the moment in time only:

    >>> a = LocalDateTime(2024, 7, 1, 2, tzd=3600)
    >>> a == LocalDateTime(2024, 7, 1, 3, tzd=7200)
    True
    """

    __slots__ = ("_dt", "_tzd", "_tz")
    _dt: DateTime
    _tzd: int
    _tz: Timezone

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
        microsecond: int = 0,
        *,
        tzd: int | None = None,
        tz: Timezone | None = None,
    ) -> None:
        self._dt = DateTime(
            year, month, day, hour, minute, second, millisecond, microsecond
        )
        self._tz = tz = tz or system_timezone()
        if tzd is None:
            tzd = tz.utc_offset() + (3600 if tz.is_dst_local(self._dt) else 0)
        self._tzd = tzd

    @classmethod
    def _from_parts(
        cls, dt: DateTime, tzd: int, tz: Timezone
    ) -> LocalDateTime:
        self = _object_new(cls)
        self._dt = dt
        self._tzd = tzd
        self._tz = tz
        return self

    @classmethod
    def now(cls, *, tz: Timezone | None = None) -> LocalDateTime:
        """The current local date and time"""
        return cls.from_timestamp(Timestamp.now(), tz=tz)

    @classmethod
    def from_timestamp(
        cls, ts: Timestamp, /, *, tz: Timezone | None = None
    ) -> LocalDateTime:
        """The local date and time of the given instant"""
        return cls.from_utc(DateTime.from_timestamp(ts), tz=tz)

    @classmethod
    def from_utc(
        cls,
        dt: DateTime,
        /,
        tzd: int | None = None,
        *,
        adjust: bool = True,
        tz: Timezone | None = None,
    ) -> LocalDateTime:
        """Create an instance from a UTC :class:`DateTime`.

        If no ``tzd`` is given, it is determined for that instant,
        and the datetime is converted to local time.
        If ``tzd`` is given, the datetime is converted to local time
        by applying it. Pass ``adjust=False`` if the given datetime
        already represents local time.

        Example
        -------

        >>> LocalDateTime.from_utc(DateTime(2005, 1, 8, 12), 3600)
        LocalDateTime(2005-01-08T13:00:00+01:00)
        >>> LocalDateTime.from_utc(
        ...     DateTime(2005, 1, 8, 12), 3600, adjust=False
        ... )
        LocalDateTime(2005-01-08T12:00:00+01:00)

        """
        tz = tz or system_timezone()
        if tzd is None:
            tzd = tz.tzd(dt.timestamp())
            adjust = True
        local = (
            DateTime.from_utc_time(dt.utc_time, tzd * SECONDS)
            if adjust
            else dt.__copy__()
        )
        return cls._from_parts(local, tzd, tz)

    @classmethod
    def from_julian_day(
        cls,
        julian_day: float,
        /,
        tzd: int | None = None,
        *,
        tz: Timezone | None = None,
    ) -> LocalDateTime:
        """Create an instance from a Julian day (in UTC)"""
        return cls.from_utc(DateTime.from_julian_day(julian_day), tzd, tz=tz)

    @classmethod
    def parse(
        cls, s: str, /, fmt: str | None = None, *, tz: Timezone | None = None
    ) -> LocalDateTime:
        """Parse a string, keeping the parsed fields as local time
        and the parsed offset as time zone differential.
        See :func:`parse` for details.

        Example
        -------

        >>> LocalDateTime.parse("2005-01-08T12:30:00+01:00")
        LocalDateTime(2005-01-08T12:30:00+01:00)

        Raises
        ------
        InvalidFormat
            If the string cannot be parsed
        """
        dt, tzd = parse(s, fmt)
        return cls._from_parts(dt, tzd, tz or system_timezone())

    @classmethod
    def try_parse(
        cls, s: str, /, fmt: str | None = None, *, tz: Timezone | None = None
    ) -> LocalDateTime | None:
        """Like :meth:`parse`, but returns ``None`` on failure"""
        try:
            return cls.parse(s, fmt, tz=tz)
        except InvalidFormat:
            return None

    if TYPE_CHECKING:  # pragma: no branch

        @property
        def year(self) -> int: ...

        @property
        def month(self) -> int: ...

        @property
        def day(self) -> int: ...

        @property
        def hour(self) -> int: ...

        @property
        def minute(self) -> int: ...

        @property
        def second(self) -> int: ...

        @property
        def millisecond(self) -> int: ...

        @property
        def microsecond(self) -> int: ...

        @property
        def day_of_week(self) -> int: ...

        @property
        def day_of_year(self) -> int: ...

        @property
        def hour_ampm(self) -> int: ...

        @property
        def is_am(self) -> bool: ...

        @property
        def is_pm(self) -> bool: ...

        @property
        def julian_day(self) -> float: ...

    else:
        year = property(attrgetter("_dt.year"))
        month = property(attrgetter("_dt.month"))
        day = property(attrgetter("_dt.day"))
        hour = property(attrgetter("_dt.hour"))
        minute = property(attrgetter("_dt.minute"))
        second = property(attrgetter("_dt.second"))
        millisecond = property(attrgetter("_dt.millisecond"))
        microsecond = property(attrgetter("_dt.microsecond"))
        day_of_week = property(attrgetter("_dt.day_of_week"))
        day_of_year = property(attrgetter("_dt.day_of_year"))
        hour_ampm = property(attrgetter("_dt.hour_ampm"))
        is_am = property(attrgetter("_dt.is_am"))
        is_pm = property(attrgetter("_dt.is_pm"))
        julian_day = property(attrgetter("_dt.julian_day"))

    def week(self, first_day_of_week: int = MONDAY) -> int:
        """The week number within the year. See :meth:`DateTime.week`"""
        return self._dt.week(first_day_of_week)

    @property
    def tzd(self) -> int:
        """The time zone differential, in seconds"""
        return self._tzd

    @property
    def tz(self) -> Timezone:
        """The timezone used to determine the differential"""
        return self._tz

    def local(self) -> DateTime:
        """The local date and time, as a :class:`DateTime`"""
        return self._dt.__copy__()

    @property
    def utc_time(self) -> int:
        """The instant in UTC, as microseconds since the Gregorian reform"""
        return self._dt.utc_time - self._tzd * SECONDS

    def utc(self) -> DateTime:
        """The UTC equivalent of the local date and time"""
        return DateTime.from_utc_time(self._dt.utc_time, -self._tzd * SECONDS)

    def timestamp(self) -> Timestamp:
        """The instant as a :class:`Timestamp`"""
        return Timestamp.from_utc_time(self.utc_time)

    def format(self, fmt: str) -> str:
        """Format with a format specifier string, using
        the time zone differential of this instance"""
        return format_datetime(self, fmt)

    def canonical_format(self) -> str:
        dt = self._dt
        return format_datetime(
            dt,
            ISO8601_FRAC_FORMAT
            if dt.millisecond or dt.microsecond
            else ISO8601_FORMAT,
            self._tzd,
        )

    __str__ = canonical_format

    def __repr__(self) -> str:
        return f"LocalDateTime({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return self.utc_time == other.utc_time

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return self.utc_time < other.utc_time

    def __le__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return self.utc_time <= other.utc_time

    def __gt__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return self.utc_time > other.utc_time

    def __ge__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return self.utc_time >= other.utc_time

    def _shifted(self, delta_us: int) -> LocalDateTime:
        # determine the differential anew, it may have changed due to DST
        return LocalDateTime.from_utc(
            DateTime.from_utc_time(self.utc_time, delta_us), tz=self._tz
        )

    def __add__(self, delta: Duration) -> LocalDateTime:
        """Add a duration. The time zone differential is
        determined again for the resulting moment."""
        if not isinstance(delta, Duration):
            return NotImplemented
        return self._shifted(delta._total_us)

    __radd__ = __add__

    @overload
    def __sub__(self, other: Duration) -> LocalDateTime: ...

    @overload
    def __sub__(self, other: LocalDateTime) -> Duration: ...

    def __sub__(
        self, other: Duration | LocalDateTime
    ) -> LocalDateTime | Duration:
        """Subtract a duration, or calculate the (UTC) duration
        between two local datetimes"""
        if isinstance(other, LocalDateTime):
            return Duration(microseconds=self.utc_time - other.utc_time)
        elif isinstance(other, Duration):
            return self._shifted(-other._total_us)
        return NotImplemented

    def __iadd__(self, delta: Duration) -> LocalDateTime:
        if not isinstance(delta, Duration):
            return NotImplemented
        shifted = self._shifted(delta._total_us)
        self._dt, self._tzd = shifted._dt, shifted._tzd
        return self

    def __isub__(self, delta: Duration) -> LocalDateTime:
        if not isinstance(delta, Duration):
            return NotImplemented
        shifted = self._shifted(-delta._total_us)
        self._dt, self._tzd = shifted._dt, shifted._tzd
        return self

    def __copy__(self) -> LocalDateTime:
        return LocalDateTime._from_parts(
            self._dt.__copy__(), self._tzd, self._tz
        )

    def __deepcopy__(self, _: object) -> LocalDateTime:
        return self.__copy__()


class Timezone(ABC):
    """Source of UTC offsets and daylight saving time information.

    The time zone differential for an instant is the standard offset,
    plus one hour if DST is in effect:
    ``local time = UTC + utc_offset() + dst()``.
    """

    __slots__ = ()

    @abstractmethod
    def utc_offset(self, ts: Timestamp | None = None, /) -> int:
        """The offset of standard (non-DST) time to UTC, in seconds"""

    @abstractmethod
    def is_dst(self, ts: Timestamp | None = None, /) -> bool:
        """Whether DST is in effect at the given instant (default: now)"""

    @abstractmethod
    def is_dst_local(self, dt: DateTime, /) -> bool:
        """Whether DST is in effect at the given local wall clock time"""

    @abstractmethod
    def standard_name(self) -> str:
        """The timezone name if DST is not in effect"""

    @abstractmethod
    def dst_name(self) -> str:
        """The timezone name if DST is in effect"""

    def name(self, ts: Timestamp | None = None, /) -> str:
        """The timezone name in effect at the given instant (default: now)"""
        return self.dst_name() if self.is_dst(ts) else self.standard_name()

    def dst(self, ts: Timestamp | None = None, /) -> int:
        """The DST offset in seconds: 3600 if DST is in effect, else 0"""
        return 3600 if self.is_dst(ts) else 0

    def tzd(self, ts: Timestamp | None = None, /) -> int:
        """The time zone differential at the given instant (default: now)"""
        return self.utc_offset(ts) + self.dst(ts)


class SystemTimezone(Timezone):
    """The timezone configured in the operating system
    (i.e. through the ``TZ`` environment variable or ``/etc/localtime``).

    The standard offset and the names are read once, on first use.
    Call :meth:`reset` to read them again after the configuration changed.
    """

    __slots__ = ("_lock", "_info")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._info: tuple[int, str, str] | None = None

    def _load(self) -> tuple[int, str, str]:
        info = self._info
        if info is None:
            with self._lock:
                if self._info is None:
                    if hasattr(time, "tzset"):  # pragma: no branch
                        time.tzset()
                    std_name, dst_name = time.tzname
                    self._info = (-time.timezone, std_name, dst_name)
                    _log.debug(
                        "Read system timezone: %s/%s, UTC offset %ds",
                        std_name,
                        dst_name,
                        -time.timezone,
                    )
                info = self._info
        return info

    def reset(self) -> None:
        """Forget the cached configuration"""
        with self._lock:
            self._info = None

    def utc_offset(self, ts: Timestamp | None = None, /) -> int:
        return self._load()[0]

    def is_dst(self, ts: Timestamp | None = None, /) -> bool:
        self._load()
        secs = (Timestamp.now() if ts is None else ts).epoch_time()
        try:
            return time.localtime(secs).tm_isdst > 0
        except (OverflowError, OSError, ValueError) as e:
            raise TimezoneError(f"cannot get local time for {secs}") from e

    def is_dst_local(self, dt: DateTime, /) -> bool:
        self._load()
        try:
            secs = time.mktime(
                (dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
                 0, 0, -1)
            )  # fmt: skip
            return time.localtime(secs).tm_isdst > 0
        except (OverflowError, OSError, ValueError) as e:
            raise TimezoneError(f"cannot get local time for {dt}") from e

    def standard_name(self) -> str:
        return self._load()[1]

    def dst_name(self) -> str:
        return self._load()[2]

    def __repr__(self) -> str:
        return "SystemTimezone()"


class ZoneInfoTimezone(Timezone):
    """A timezone from the IANA database, e.g. ``"Europe/Amsterdam"``.

    Example
    -------

    >>> ams = ZoneInfoTimezone("Europe/Amsterdam")
    >>> ams.tzd(Timestamp.from_epoch_time(1_720_000_000))
    7200

    Raises
    ------
    TimezoneError
        If the timezone key is unknown
    """

    __slots__ = ("_zone",)

    def __init__(self, key: str, /) -> None:
        try:
            self._zone = ZoneInfo(key)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise TimezoneError(f"unknown timezone {key!r}") from e

    @property
    def key(self) -> str:
        return self._zone.key

    def _at(self, ts: Timestamp | None) -> _datetime:
        ts = Timestamp.now() if ts is None else ts
        try:
            return ts.py_datetime().astimezone(self._zone)
        except (OverflowError, ValueError) as e:
            raise TimezoneError(f"cannot get local time for {ts}") from e

    def utc_offset(self, ts: Timestamp | None = None, /) -> int:
        d = self._at(ts)
        offset = d.utcoffset() - d.dst()  # type: ignore[operator]
        return offset // _ONE_SECOND

    def is_dst(self, ts: Timestamp | None = None, /) -> bool:
        return bool(self._at(ts).dst())

    def is_dst_local(self, dt: DateTime, /) -> bool:
        try:
            local = _datetime(
                dt.year,
                dt.month,
                dt.day,
                dt.hour,
                dt.minute,
                dt.second,
                tzinfo=self._zone,
            )
        except ValueError as e:
            raise TimezoneError(f"cannot get local time for {dt}") from e
        return bool(local.dst())

    def _names(self) -> tuple[str, str]:
        now = Timestamp.now()
        std_name = dst_name = ""
        # sample a whole year, so both seasons are seen
        for days in (0, 91, 182, 273):
            d = self._at(now + Duration(days=days))
            if d.dst():
                dst_name = d.tzname() or ""
            else:
                std_name = d.tzname() or ""
        return std_name or dst_name, dst_name or std_name

    def standard_name(self) -> str:
        return self._names()[0]

    def dst_name(self) -> str:
        return self._names()[1]

    def __repr__(self) -> str:
        return f"ZoneInfoTimezone({self.key!r})"


_system_timezone = SystemTimezone()


def system_timezone() -> SystemTimezone:
    """The timezone of the operating system, shared process-wide"""
    return _system_timezone


class Clock(ABC):
    """Source of the current time"""

    __slots__ = ()

    @abstractmethod
    def now(self) -> Timestamp: ...


class SystemClock(Clock):
    """The wall clock of the operating system"""

    __slots__ = ()

    def now(self) -> Timestamp:
        return Timestamp(time.time_ns() // 1_000)


_clock: Clock = SystemClock()


# The date/time format defined in ISO 8601.
# e.g. 2005-01-01T12:00:00+01:00 or 2005-01-01T11:00:00Z
ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
# ISO 8601 with fractional seconds.
# e.g. 2005-01-01T12:00:00.000000+01:00 or 2005-01-01T11:00:00.000000Z
ISO8601_FRAC_FORMAT = "%Y-%m-%dT%H:%M:%s%z"
# RFC 822 (obsoleted by RFC 1123), e.g. Sat, 1 Jan 05 12:00:00 GMT
RFC822_FORMAT = "%w, %e %b %y %H:%M:%S %Z"
# RFC 1123 (obsoletes RFC 822), e.g. Sat, 1 Jan 2005 12:00:00 GMT
RFC1123_FORMAT = "%w, %e %b %Y %H:%M:%S %Z"
# HTTP (RFC 2616): RFC 1036 with a zero-padded day,
# e.g. Sat, 01 Jan 2005 12:00:00 GMT
HTTP_FORMAT = "%w, %d %b %Y %H:%M:%S %Z"
# RFC 850 (obsoleted by RFC 1036), e.g. Saturday, 1-Jan-05 12:00:00 GMT
RFC850_FORMAT = "%W, %e-%b-%y %H:%M:%S %Z"
# RFC 1036 (obsoletes RFC 850), e.g. Saturday, 1 Jan 05 12:00:00 GMT
RFC1036_FORMAT = "%W, %e %b %y %H:%M:%S %Z"
# ANSI C asctime(), e.g. Sat Jan  1 12:00:00 2005
ASCTIME_FORMAT = "%w %b %f %H:%M:%S %Y"
# A simple, sortable format, e.g. 2005-01-01 12:00:00
SORTABLE_FORMAT = "%Y-%m-%d %H:%M:%S"
DURATION_FORMAT = "%dd %H:%M:%S.%i"

# Formats with a year of either 2 or 4 digits, used in detection
_RFC_AUTO_FORMAT = "%w, %e %b %r %H:%M:%S %Z"
_RFC_FULL_WEEKDAY_AUTO_FORMAT = "%W, %e %b %r %H:%M:%S %Z"

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_ZONES = {
    "Z": 0,
    "UT": 0,
    "GMT": 0,
    "BST": 1 * 3600,
    "IST": 1 * 3600,
    "WET": 0,
    "WEST": 1 * 3600,
    "CET": 1 * 3600,
    "CEST": 2 * 3600,
    "EET": 2 * 3600,
    "EEST": 3 * 3600,
    "MSK": 3 * 3600,
    "MSD": 4 * 3600,
    "NST": -3 * 3600 - 1800,
    "NDT": -2 * 3600 - 1800,
    "AST": -4 * 3600,
    "ADT": -3 * 3600,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
    "AKST": -9 * 3600,
    "AKDT": -8 * 3600,
    "HST": -10 * 3600,
    "AEST": 10 * 3600,
    "AEDT": 11 * 3600,
    "ACST": 9 * 3600 + 1800,
    "ACDT": 10 * 3600 + 1800,
    "AWST": 8 * 3600,
    "AWDT": 9 * 3600,
}


class Directive(Enum):
    """A ``%<letter>`` code in a format specifier string.
    Each directive has one meaning when formatting
    and one when parsing."""

    WEEKDAY_ABBR = "w"
    WEEKDAY = "W"
    MONTH_NAME_ABBR = "b"
    MONTH_NAME = "B"
    DAY_PADDED = "d"
    DAY = "e"
    DAY_SPACED = "f"
    MONTH_PADDED = "m"
    MONTH = "n"
    MONTH_SPACED = "o"
    YEAR_2 = "y"
    YEAR_4 = "Y"
    YEAR_2_OR_4 = "r"
    HOUR = "H"
    HOUR_AMPM = "h"
    AMPM_LOWER = "a"
    AMPM_UPPER = "A"
    MINUTE = "M"
    SECOND = "S"
    SECOND_FRACTION = "s"
    MILLISECOND = "i"
    DECISECOND = "c"
    FRACTION = "F"
    TZD_ISO = "z"
    TZD_RFC = "Z"


_DIRECTIVES = {d.value: d for d in Directive}


def tzd_iso(tzd: int = UTC) -> str:
    """Format a time zone differential the ISO 8601 way.

    >>> tzd_iso(3600), tzd_iso(-5400), tzd_iso(UTC)
    ('+01:00', '-01:30', 'Z')
    """
    if tzd in (0, UTC):
        return "Z"
    hours, rem = divmod(abs(tzd), 3600)
    return f"{'+' if tzd > 0 else '-'}{hours:02}:{rem // 60:02}"


def tzd_rfc(tzd: int = UTC) -> str:
    """Format a time zone differential the RFC way.

    For positive differentials the hour always renders as ``02``,
    followed by the seconds past the hour, zero padded to two digits.

    >>> tzd_rfc(-3600), tzd_rfc(3600), tzd_rfc(UTC)
    ('-0100', '+0200', 'GMT')
    """
    if tzd in (0, UTC):
        return "GMT"
    if tzd > 0:
        return f"+02{tzd % 3600:02}"
    hours, rem = divmod(-tzd, 3600)
    return f"-{hours:02}{rem // 60:02}"


_EMIT: dict[Directive, Callable[[DateTime, int], str]] = {
    Directive.WEEKDAY_ABBR: lambda dt, _: WEEKDAY_NAMES[dt.day_of_week][:3],
    Directive.WEEKDAY: lambda dt, _: WEEKDAY_NAMES[dt.day_of_week],
    Directive.MONTH_NAME_ABBR: lambda dt, _: MONTH_NAMES[dt.month - 1][:3],
    Directive.MONTH_NAME: lambda dt, _: MONTH_NAMES[dt.month - 1],
    Directive.DAY_PADDED: lambda dt, _: f"{dt.day:02}",
    Directive.DAY: lambda dt, _: str(dt.day),
    Directive.DAY_SPACED: lambda dt, _: f"{dt.day:2}",
    Directive.MONTH_PADDED: lambda dt, _: f"{dt.month:02}",
    Directive.MONTH: lambda dt, _: str(dt.month),
    Directive.MONTH_SPACED: lambda dt, _: f"{dt.month:2}",
    Directive.YEAR_2: lambda dt, _: f"{dt.year % 100:02}",
    Directive.YEAR_4: lambda dt, _: f"{dt.year:04}",
    Directive.HOUR: lambda dt, _: f"{dt.hour:02}",
    Directive.HOUR_AMPM: lambda dt, _: f"{dt.hour_ampm:02}",
    Directive.AMPM_LOWER: lambda dt, _: "am" if dt.is_am else "pm",
    Directive.AMPM_UPPER: lambda dt, _: "AM" if dt.is_am else "PM",
    Directive.MINUTE: lambda dt, _: f"{dt.minute:02}",
    Directive.SECOND: lambda dt, _: f"{dt.second:02}",
    Directive.SECOND_FRACTION: lambda dt, _: (
        f"{dt.second:02}.{dt.millisecond * 1000 + dt.microsecond:06}"
    ),
    Directive.MILLISECOND: lambda dt, _: f"{dt.millisecond:03}",
    Directive.DECISECOND: lambda dt, _: str(dt.millisecond // 100),
    Directive.FRACTION: lambda dt, _: (
        f"{dt.millisecond * 1000 + dt.microsecond:06}"
    ),
    Directive.TZD_ISO: lambda _, tzd: tzd_iso(tzd),
    Directive.TZD_RFC: lambda _, tzd: tzd_rfc(tzd),
}


def format_datetime(
    value: DateTime | LocalDateTime | Timestamp, fmt: str, tzd: int = UTC
) -> str:
    """Format a date and time according to a format specifier string.

    Literal characters are copied. ``%`` introduces a directive:

    ====  =======================================================
    code  output
    ====  =======================================================
    %w    abbreviated weekday (Mon, Tue, ...)
    %W    full weekday (Monday, Tuesday, ...)
    %b    abbreviated month (Jan, Feb, ...)
    %B    full month (January, February, ...)
    %d    zero-padded day of month (01 .. 31)
    %e    day of month (1 .. 31)
    %f    space-padded day of month ( 1 .. 31)
    %m    zero-padded month (01 .. 12)
    %n    month (1 .. 12)
    %o    space-padded month ( 1 .. 12)
    %y    year without century (70)
    %Y    year with century (1970)
    %H    hour (00 .. 23)
    %h    hour (00 .. 12)
    %a    am/pm
    %A    AM/PM
    %M    minute (00 .. 59)
    %S    second (00 .. 59)
    %s    seconds and microseconds (10.123456)
    %i    millisecond (000 .. 999)
    %c    tenth of a second (0 .. 9)
    %F    fractional seconds / microseconds (000000 - 999999)
    %z    ISO 8601 time zone differential (Z, +01:00, -02:30)
    %Z    RFC time zone differential (GMT, -0100)
    ====  =======================================================

    Any other character following ``%`` is copied literally.
    A :class:`LocalDateTime` is formatted with its own differential,
    ignoring ``tzd``.

    Example
    -------

    >>> format_datetime(DateTime(2005, 1, 8, 12, 30), RFC1123_FORMAT)
    'Sat, 8 Jan 2005 12:30:00 GMT'
    >>> format_datetime(DateTime(2005, 1, 8, 12, 30), "%%%Q %h%a")
    '%Q 12pm'

    """
    if isinstance(value, LocalDateTime):
        value, tzd = value._dt, value._tzd
    elif isinstance(value, Timestamp):
        value = DateTime.from_timestamp(value)
    out = []
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        code = next(chars, None)
        if code is None:
            break
        emit = _EMIT.get(_DIRECTIVES.get(code))  # type: ignore[arg-type]
        out.append(code if emit is None else emit(value, tzd))
    return "".join(out)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


_DURATION_EMIT: dict[str, Callable[[Duration], str]] = {
    "d": lambda d: str(d.as_tuple()[0]),
    "H": lambda d: f"{d.as_tuple()[1]:02}",
    "h": lambda d: str(_trunc_div(d._total_us, HOURS)),
    "M": lambda d: f"{d.as_tuple()[2]:02}",
    "m": lambda d: str(_trunc_div(d._total_us, MINUTES)),
    "S": lambda d: f"{d.as_tuple()[3]:02}",
    "s": lambda d: str(_trunc_div(d._total_us, SECONDS)),
    "i": lambda d: f"{d.as_tuple()[4]:03}",
    "c": lambda d: str(_trunc_div(d.as_tuple()[4], 100)),
    "F": lambda d: f"{d.as_tuple()[4] * 1000 + d.as_tuple()[5]:06}",
}


def format_duration(d: Duration, fmt: str = DURATION_FORMAT) -> str:
    """Format a duration according to a format specifier string.

    ====  ===============================================
    code  output
    ====  ===============================================
    %d    days
    %H    hours (00 .. 23)
    %h    total hours (0 .. n)
    %M    minutes (00 .. 59)
    %m    total minutes (0 .. n)
    %S    seconds (00 .. 59)
    %s    total seconds (0 .. n)
    %i    milliseconds (000 .. 999)
    %c    tenth of a second (0 .. 9)
    %F    fractional seconds / microseconds (000000 - 999999)
    ====  ===============================================

    Any other character following ``%`` is copied literally.

    Example
    -------

    >>> format_duration(Duration(days=1, hours=2, minutes=3))
    '1d 02:03:00.000'

    """
    out = []
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        code = next(chars, None)
        if code is None:
            break
        emit = _DURATION_EMIT.get(code)
        out.append(code if emit is None else emit(d))
    return "".join(out)


_PUNCTUATION = frozenset(string.punctuation)
_WHITESPACE = frozenset(" \t\n\v\f\r")


def _isdigit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _isalpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


class _ParseState:
    """Cursor over the input text, plus the fields parsed so far"""

    __slots__ = (
        "text",
        "pos",
        "found",
        "year",
        "month",
        "day",
        "hour",
        "minute",
        "second",
        "millis",
        "micros",
        "tzd",
    )

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.found = False
        self.year = self.month = self.day = 0
        self.hour = self.minute = self.second = 0
        self.millis = self.micros = 0
        self.tzd = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_junk(self) -> None:
        text, pos = self.text, self.pos
        while pos < len(text) and not _isdigit(text[pos]):
            pos += 1
        self.pos = pos
        if pos == len(text) and not self.found:
            raise InvalidFormat(f"No date/time fields found in {text!r}")

    def digits(self, limit: int | None = None) -> int:
        text, pos = self.text, self.pos
        end = len(text) if limit is None else min(len(text), pos + limit)
        value = 0
        while pos < end and _isdigit(text[pos]):
            value = value * 10 + ord(text[pos]) - 48
            pos += 1
        if pos > self.pos:
            self.found = True
        self.pos = pos
        return value

    def number(self, limit: int | None = None) -> int:
        self.skip_junk()
        return self.digits(limit)

    def fraction(self, n: int) -> int:
        text, pos = self.text, self.pos
        value = 0
        i = 0
        while i < n and pos < len(text) and _isdigit(text[pos]):
            value = value * 10 + ord(text[pos]) - 48
            pos += 1
            i += 1
        self.pos = pos
        return value * 10 ** (n - i)

    def skip_digits(self) -> None:
        text, pos = self.text, self.pos
        while pos < len(text) and _isdigit(text[pos]):
            pos += 1
        self.pos = pos

    def word(self, skip_punctuation: bool = True) -> str:
        text, pos = self.text, self.pos
        while pos < len(text) and (
            text[pos] in _WHITESPACE
            or (skip_punctuation and text[pos] in _PUNCTUATION)
        ):
            pos += 1
        start = pos
        while pos < len(text) and _isalpha(text[pos]):
            pos += 1
        self.pos = pos
        if pos > start:
            self.found = True
        return text[start:pos]


def _match_name(word: str, names: tuple[str, ...], what: str) -> int:
    name = word[:1].upper() + word[1:].lower()
    if len(name) < 3:
        raise InvalidFormat(
            f"{what.capitalize()} name must be at least three characters "
            f"long, got {word!r}"
        )
    for i, candidate in enumerate(names):
        if candidate.startswith(name):
            return i
    raise InvalidFormat(f"Not a valid {what} name: {word!r}")


def _two_digit_year(year: int) -> int:
    return year + (1900 if year >= 69 else 2000)


def _consume_weekday(st: _ParseState) -> None:
    _match_name(st.word(), WEEKDAY_NAMES, "weekday")


def _consume_month_name(st: _ParseState) -> None:
    st.month = _match_name(st.word(), MONTH_NAMES, "month") + 1


def _consume_day(st: _ParseState) -> None:
    st.day = st.number(2)


def _consume_month(st: _ParseState) -> None:
    st.month = st.number(2)


def _consume_year_2(st: _ParseState) -> None:
    st.year = _two_digit_year(st.number(2))


def _consume_year_4(st: _ParseState) -> None:
    st.year = st.number(4)


def _consume_year_2_or_4(st: _ParseState) -> None:
    year = st.number()
    st.year = _two_digit_year(year) if year < 1000 else year


def _consume_hour(st: _ParseState) -> None:
    st.hour = st.number(2)


def _consume_ampm(st: _ParseState) -> None:
    marker = st.word().upper()
    if marker == "AM":
        if st.hour == 12:
            st.hour = 0
    elif marker == "PM":
        if st.hour < 12:
            st.hour += 12
    else:
        raise InvalidFormat(f"Not a valid AM/PM designator: {marker!r}")


def _consume_minute(st: _ParseState) -> None:
    st.minute = st.number(2)


def _consume_second(st: _ParseState) -> None:
    st.second = st.number(2)


def _consume_second_fraction(st: _ParseState) -> None:
    st.second = st.number(2)
    if not st.at_end() and st.text[st.pos] in ".,":
        st.pos += 1
        st.millis = st.fraction(3)
        st.micros = st.fraction(3)
        st.skip_digits()


def _consume_millisecond(st: _ParseState) -> None:
    st.millis = st.number(3)


def _consume_decisecond(st: _ParseState) -> None:
    st.millis = st.number(1) * 100


def _consume_fraction(st: _ParseState) -> None:
    st.skip_junk()
    st.millis = st.fraction(3)
    st.micros = st.fraction(3)
    st.skip_digits()


def _consume_tzd(st: _ParseState) -> None:
    text = st.text
    while not st.at_end() and text[st.pos] in _WHITESPACE:
        st.pos += 1
    tzd = 0
    if not st.at_end():
        if _isalpha(text[st.pos]):
            start = st.pos
            while (
                not st.at_end()
                and st.pos - start < 4
                and _isalpha(text[st.pos])
            ):
                st.pos += 1
            tzd = _ZONES.get(text[start : st.pos], 0)
        if not st.at_end() and text[st.pos] in "+-":
            sign = 1 if text[st.pos] == "+" else -1
            st.pos += 1
            hours = st.digits(2)
            if not st.at_end() and text[st.pos] == ":":
                st.pos += 1
            minutes = st.digits(2)
            tzd += sign * (hours * 3600 + minutes * 60)
    st.tzd = tzd


_CONSUME: dict[Directive, Callable[[_ParseState], None]] = {
    Directive.WEEKDAY_ABBR: _consume_weekday,
    Directive.WEEKDAY: _consume_weekday,
    Directive.MONTH_NAME_ABBR: _consume_month_name,
    Directive.MONTH_NAME: _consume_month_name,
    Directive.DAY_PADDED: _consume_day,
    Directive.DAY: _consume_day,
    Directive.DAY_SPACED: _consume_day,
    Directive.MONTH_PADDED: _consume_month,
    Directive.MONTH: _consume_month,
    Directive.MONTH_SPACED: _consume_month,
    Directive.YEAR_2: _consume_year_2,
    Directive.YEAR_4: _consume_year_4,
    Directive.YEAR_2_OR_4: _consume_year_2_or_4,
    Directive.HOUR: _consume_hour,
    Directive.HOUR_AMPM: _consume_hour,
    Directive.AMPM_LOWER: _consume_ampm,
    Directive.AMPM_UPPER: _consume_ampm,
    Directive.MINUTE: _consume_minute,
    Directive.SECOND: _consume_second,
    Directive.SECOND_FRACTION: _consume_second_fraction,
    Directive.MILLISECOND: _consume_millisecond,
    Directive.DECISECOND: _consume_decisecond,
    Directive.FRACTION: _consume_fraction,
    Directive.TZD_ISO: _consume_tzd,
    Directive.TZD_RFC: _consume_tzd,
}


def detect_format(s: str, /) -> str | None:
    """Guess the format of a date/time string from its shape.

    This is a heuristic. Strings which don't match any known
    shape give ``None``.

    >>> detect_format("Sat, 08 Jan 2005 12:30:00 GMT")
    '%w, %e %b %r %H:%M:%S %Z'
    >>> detect_format("2005-01-08 12:30:00") == SORTABLE_FORMAT
    True
    """
    if len(s) < 4:
        return None
    if s[3] == ",":
        return _RFC_AUTO_FORMAT
    if s[3] == " ":
        return ASCTIME_FORMAT
    if -1 < s.find(",") < 10:
        return _RFC_FULL_WEEKDAY_AUTO_FORMAT
    if _isdigit(s[0]):
        if " " in s or len(s) == 10:
            return SORTABLE_FORMAT
        if "." in s or "," in s:
            return ISO8601_FRAC_FORMAT
        return ISO8601_FORMAT
    return None


def parse(s: str, /, fmt: str | None = None) -> tuple[DateTime, int]:
    """Parse a date and time according to a format specifier string.

    Returns the parsed date and time, and the parsed time zone
    differential (in seconds) separately. The differential is *not*
    applied: use :meth:`DateTime.make_utc` to convert to UTC.

    The directives are the same as for :func:`format_datetime`.
    Additionally, ``%r`` parses a year of two or four digits.
    Literal characters in the format are not matched against the input:
    any non-digit characters before a number are skipped.
    Month and weekday names match on a prefix of at least three letters.
    Missing month and day default to 1.

    If no format is given, it is determined with :func:`detect_format`.

    Example
    -------

    >>> parse("2005-01-08T12:30:00+01:00", ISO8601_FORMAT)
    (DateTime(2005-01-08T12:30:00Z), 3600)
    >>> parse("Sat, 8 Jan 2005 12:30:00 EST")
    (DateTime(2005-01-08T12:30:00Z), -18000)

    Raises
    ------
    InvalidFormat
        If the string doesn't match the format,
        or the parsed fields are out of range
    """
    if fmt is None:
        fmt = detect_format(s)
        if fmt is None:
            raise InvalidFormat(
                f"Unsupported or invalid date/time format: {s!r}"
            )
    if not fmt or not s:
        raise InvalidFormat("Empty string")
    st = _ParseState(s)
    chars = iter(fmt)
    for ch in chars:
        if st.at_end():
            break
        if ch != "%":
            continue
        code = next(chars, None)
        if code is None:
            break
        consume = _CONSUME.get(_DIRECTIVES.get(code))  # type: ignore[arg-type]
        if consume is not None:
            consume(st)
    fields = (
        st.year,
        st.month or 1,
        st.day or 1,
        st.hour,
        st.minute,
        st.second,
        st.millis,
        st.micros,
    )
    if not is_valid(*fields):
        raise InvalidFormat(f"date/time component out of range: {s!r}")
    return DateTime(*fields), st.tzd


def try_parse(
    s: str, /, fmt: str | None = None
) -> tuple[DateTime, int] | None:
    """Like :func:`parse`, but returns ``None`` on failure"""
    try:
        return parse(s, fmt)
    except InvalidFormat:
        return None


def parse_month(s: str, /) -> int:
    """The month number (1 .. 12) of a (possibly abbreviated) month name

    >>> parse_month("jan"), parse_month("SEPT")
    (1, 9)
    """
    return _match_name(_ParseState(s).word(), MONTH_NAMES, "month") + 1


def parse_day_of_week(s: str, /) -> int:
    """The weekday number (0 = Sunday .. 6) of a (possibly abbreviated)
    weekday name"""
    return _match_name(_ParseState(s).word(), WEEKDAY_NAMES, "weekday")


def parse_tzd(s: str, /) -> int:
    """Parse a time zone differential, e.g. ``"Z"``, ``"+01:00"``,
    ``"EST"`` or ``"GMT+0130"``

    >>> parse_tzd("GMT+0130")
    5400
    """
    st = _ParseState(s)
    _consume_tzd(st)
    return st.tzd


class OutOfRange(ValueError):
    """A date/time component is out of its valid range"""


class InvalidFormat(ValueError):
    """A string has an invalid format"""


class TimezoneError(RuntimeError):
    """The timezone information of the host can't be obtained"""


# Helpers that pre-compute/lookup as much as possible
_UTC = _timezone.utc
_EPOCH_DT = _datetime(1970, 1, 1, tzinfo=_UTC)
_ONE_SECOND = _timedelta(seconds=1)
_object_new = object.__new__
