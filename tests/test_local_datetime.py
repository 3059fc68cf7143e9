from copy import copy

import pytest

from civiltime import (
    ISO8601_FORMAT,
    SATURDAY,
    DateTime,
    Duration,
    InvalidFormat,
    LocalDateTime,
    Timestamp,
    Timezone,
    ZoneInfoTimezone,
    system_timezone,
)

from .common import AlwaysEqual, NeverEqual, system_tz_ams, system_tz_nyc


class FixedTimezone(Timezone):
    """A timezone with a constant offset, never in DST"""

    def __init__(self, offset: int) -> None:
        self.offset = offset

    def utc_offset(self, ts=None):
        return self.offset

    def is_dst(self, ts=None):
        return False

    def is_dst_local(self, dt):
        return False

    def standard_name(self):
        return "FIX"

    def dst_name(self):
        return "FIX"


class UnusableTimezone(FixedTimezone):
    def __init__(self) -> None:
        super().__init__(0)

    def utc_offset(self, ts=None):
        raise AssertionError("timezone should not be consulted")

    is_dst = is_dst_local = utc_offset


@pytest.fixture(scope="module")
def ams():
    return ZoneInfoTimezone("Europe/Amsterdam")


class TestInit:

    def test_explicit_tzd(self):
        d = LocalDateTime(2024, 7, 1, tzd=-4 * 3600, tz=UnusableTimezone())
        assert d.local().fields == DateTime(2024, 7, 1).fields
        assert d.tzd == -4 * 3600
        assert d.utc() == DateTime(2024, 7, 1, 4)
        assert str(d) == "2024-07-01T00:00:00-04:00"

    def test_from_timezone(self, ams):
        winter = LocalDateTime(2024, 1, 15, 12, tz=ams)
        summer = LocalDateTime(2024, 7, 15, 12, tz=ams)
        assert winter.tzd == 3600
        assert summer.tzd == 7200
        assert summer.tz is ams
        assert summer.utc() == DateTime(2024, 7, 15, 10)

    def test_fixed_timezone(self):
        d = LocalDateTime(2024, 1, 15, 12, tz=FixedTimezone(19_800))
        assert d.tzd == 19_800
        assert d.utc() == DateTime(2024, 1, 15, 6, 30)

    def test_system_timezone(self):
        with system_tz_ams():
            assert LocalDateTime(2024, 1, 15, 12).tzd == 3600
            d = LocalDateTime(2024, 7, 15, 12)
            assert d.tzd == 7200
            assert d.tz is system_timezone()
        with system_tz_nyc():
            assert LocalDateTime(2024, 1, 15, 12).tzd == -5 * 3600
            assert LocalDateTime(2024, 7, 15, 12).tzd == -4 * 3600

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            LocalDateTime(2023, 2, 29, tzd=0)


class TestFromUtc:

    def test_with_tzd(self):
        d = LocalDateTime.from_utc(
            DateTime(2005, 1, 8, 12), 3600, tz=UnusableTimezone()
        )
        assert d.local() == DateTime(2005, 1, 8, 13)
        assert d.tzd == 3600
        assert d.utc() == DateTime(2005, 1, 8, 12)

    def test_without_adjust(self):
        d = LocalDateTime.from_utc(
            DateTime(2005, 1, 8, 12), 3600, adjust=False
        )
        assert d.local() == DateTime(2005, 1, 8, 12)
        assert d.utc() == DateTime(2005, 1, 8, 11)

    def test_from_timezone(self, ams):
        d = LocalDateTime.from_utc(DateTime(2024, 7, 1, 12), tz=ams)
        assert d.tzd == 7200
        assert d.local() == DateTime(2024, 7, 1, 14)

    def test_source_unchanged(self):
        utc = DateTime(2005, 1, 8, 12)
        d = LocalDateTime.from_utc(utc, 3600, adjust=False)
        d += Duration(hours=1)
        assert utc == DateTime(2005, 1, 8, 12)

    def test_from_timestamp(self, ams):
        d = LocalDateTime.from_timestamp(
            Timestamp.from_epoch_time(1_720_000_000), tz=ams
        )
        assert str(d) == "2024-07-03T11:46:40+02:00"
        assert d.timestamp() == Timestamp.from_epoch_time(1_720_000_000)

    def test_from_julian_day(self):
        d = LocalDateTime.from_julian_day(2440587.5, 3600)
        assert str(d) == "1970-01-01T01:00:00+01:00"
        assert d.julian_day == pytest.approx(2440587.5 + 1 / 24, abs=1e-8)

    def test_now(self, ams):
        d = LocalDateTime.now(tz=ams)
        assert abs(d.timestamp() - Timestamp.now()) < Duration(seconds=5)
        assert d.tzd in (3600, 7200)


class TestDst:

    def test_spring_forward(self, ams):
        d = LocalDateTime(2024, 3, 31, 1, 30, tz=ams)
        assert d.tzd == 3600
        later = d + Duration(hours=1)
        assert str(later) == "2024-03-31T03:30:00+02:00"
        assert later.tzd == 7200
        assert later - d == Duration(hours=1)
        assert later.utc() - d.utc() == Duration(hours=1)

    def test_fall_back(self, ams):
        # the first of the two 02:30's
        d = LocalDateTime(2024, 10, 27, 2, 30, tz=ams)
        assert d.tzd == 7200
        later = d + Duration(hours=1)
        assert str(later) == "2024-10-27T02:30:00+01:00"
        assert later - d == Duration(hours=1)

    def test_subtract_back_into_dst(self, ams):
        d = LocalDateTime(2024, 3, 31, 3, 30, tz=ams)
        assert str(d - Duration(hours=1)) == "2024-03-31T01:30:00+01:00"

    def test_in_place(self, ams):
        d = LocalDateTime(2024, 3, 31, 1, 30, tz=ams)
        alias = d
        d += Duration(hours=1)
        assert alias is d
        assert d.tzd == 7200
        assert d.hour == 3
        d -= Duration(hours=1)
        assert d.tzd == 3600
        assert d.hour == 1


def test_parse():
    d = LocalDateTime.parse("2005-01-08T12:30:00+01:00")
    assert d.local() == DateTime(2005, 1, 8, 12, 30)
    assert d.tzd == 3600
    assert d.utc() == DateTime(2005, 1, 8, 11, 30)

    d = LocalDateTime.parse(
        "Sat, 8 Jan 2005 12:30:00 EST", tz=FixedTimezone(0)
    )
    assert d.tzd == -5 * 3600
    assert d.utc() == DateTime(2005, 1, 8, 17, 30)

    with pytest.raises(InvalidFormat):
        LocalDateTime.parse("not a date", ISO8601_FORMAT)


def test_try_parse():
    tz = FixedTimezone(0)
    d = LocalDateTime.try_parse("2005-01-08T12:30:00+01:00", tz=tz)
    assert d is not None
    assert d.local() == DateTime(2005, 1, 8, 12, 30)
    assert d.tzd == 3600
    assert d.utc() == DateTime(2005, 1, 8, 11, 30)

    assert LocalDateTime.try_parse("not a date", ISO8601_FORMAT) is None
    assert LocalDateTime.try_parse("", tz=tz) is None


def test_properties():
    d = LocalDateTime(2005, 1, 8, 13, 30, 15, 250, 125, tzd=3600)
    assert (d.year, d.month, d.day) == (2005, 1, 8)
    assert (d.hour, d.minute, d.second) == (13, 30, 15)
    assert (d.millisecond, d.microsecond) == (250, 125)
    assert d.day_of_week == SATURDAY
    assert d.day_of_year == 8
    assert d.week() == 1
    assert d.hour_ampm == 1
    assert d.is_pm
    assert not d.is_am
    assert d.utc_time == DateTime(2005, 1, 8, 12, 30, 15, 250, 125).utc_time


def test_local_is_a_copy():
    d = LocalDateTime(2005, 1, 8, 13, tzd=3600)
    local = d.local()
    local += Duration(hours=1)
    assert d.hour == 13


def test_timestamp_is_utc():
    d = LocalDateTime(1970, 1, 1, 1, tzd=3600)
    assert d.timestamp() == Timestamp(0)


def test_equality():
    d = LocalDateTime(2024, 7, 1, 2, tzd=3600)
    same_moment = LocalDateTime(2024, 7, 1, 3, tzd=7200)
    same_fields = LocalDateTime(2024, 7, 1, 2, tzd=7200)
    assert d == same_moment
    assert not d != same_moment
    assert d != same_fields
    assert not d == NeverEqual()
    assert d == AlwaysEqual()
    assert d != DateTime(2024, 7, 1, 1)


def test_unhashable():
    with pytest.raises(TypeError):
        hash(LocalDateTime(2024, 7, 1, tzd=0))


def test_comparison():
    d = LocalDateTime(2024, 7, 1, 2, tzd=3600)
    # earlier on the wall clock, but later in time
    later = LocalDateTime(2024, 7, 1, 1, 30, tzd=0)
    assert d < later
    assert d <= later
    assert later > d
    assert later >= d
    assert d <= LocalDateTime(2024, 7, 1, 3, tzd=7200)
    assert d >= LocalDateTime(2024, 7, 1, 3, tzd=7200)

    with pytest.raises(TypeError):
        d < DateTime(2024, 7, 1)  # type: ignore[operator]


def test_arithmetic_types():
    d = LocalDateTime(2024, 7, 1, tzd=0, tz=FixedTimezone(0))
    assert Duration(hours=1) + d == d + Duration(hours=1)
    with pytest.raises(TypeError, match="unsupported operand"):
        d + 1  # type: ignore[operator]
    with pytest.raises(TypeError, match="unsupported operand"):
        d - 1  # type: ignore[operator]


def test_arithmetic_uses_timezone():
    # an explicit differential is replaced by the one of the timezone
    d = LocalDateTime(2024, 7, 1, 12, tzd=0, tz=FixedTimezone(3600))
    later = d + Duration(minutes=1)
    assert later.tzd == 3600
    assert str(later) == "2024-07-01T13:01:00+01:00"


def test_format():
    d = LocalDateTime(2005, 1, 8, 12, 30, tzd=-5 * 3600)
    assert d.format("%H:%M %z") == "12:30 -05:00"
    assert d.format("%d %b %Y %H:%M:%S %Z") == "08 Jan 2005 12:30:00 -0500"


def test_canonical_format():
    d = LocalDateTime(2005, 1, 8, 12, 30, 0, 1, tzd=5400)
    assert d.canonical_format() == "2005-01-08T12:30:00.001000+01:30"
    assert repr(d) == "LocalDateTime(2005-01-08T12:30:00.001000+01:30)"
    assert str(LocalDateTime(2005, 1, 8, tzd=0)) == "2005-01-08T00:00:00Z"


def test_copy():
    d = LocalDateTime(2005, 1, 8, 12, tzd=3600)
    c = copy(d)
    assert c == d
    c += Duration(hours=1)
    assert d.hour == 12
