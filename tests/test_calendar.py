import random

import pytest

from civiltime import (
    CalendarFields,
    DateTime,
    OutOfRange,
    correct_day_boundary,
    days_in_month,
    from_julian_day,
    is_leap_year,
    is_valid,
    normalize,
    to_julian_day,
)


@pytest.mark.parametrize(
    "year, expected",
    [
        (2000, True),
        (2004, True),
        (2400, True),
        (0, True),
        (1900, False),
        (2100, False),
        (2001, False),
        (1582, False),
    ],
)
def test_is_leap_year(year, expected):
    assert is_leap_year(year) is expected


@pytest.mark.parametrize(
    "year, month, expected",
    [
        (2001, 1, 31),
        (2001, 2, 28),
        (2000, 2, 29),
        (1900, 2, 28),
        (2001, 4, 30),
        (2001, 6, 30),
        (2001, 9, 30),
        (2001, 11, 30),
        (2001, 12, 31),
    ],
)
def test_days_in_month(year, month, expected):
    assert days_in_month(year, month) == expected


@pytest.mark.parametrize("month", [0, 13, -1])
def test_days_in_month_out_of_range(month):
    with pytest.raises(OutOfRange):
        days_in_month(2001, month)


class TestIsValid:

    @pytest.mark.parametrize(
        "fields",
        [
            (0, 1, 1),
            (9999, 12, 31, 23, 59, 59, 999, 999),
            (2000, 2, 29),
            (1582, 10, 15),
        ],
    )
    def test_valid(self, fields):
        assert is_valid(*fields)

    @pytest.mark.parametrize(
        "fields",
        [
            (-1, 1, 1),
            (10_000, 1, 1),
            (2001, 0, 1),
            (2001, 13, 1),
            (2001, 2, 29),
            (2001, 1, 0),
            (2001, 1, 32),
            (2001, 1, 1, 24),
            (2001, 1, 1, 0, 60),
            (2001, 1, 1, 0, 0, 60),
            (2001, 1, 1, 0, 0, 0, 1000),
            (2001, 1, 1, 0, 0, 0, 0, 1000),
            (2001, 1, 1, -1),
        ],
    )
    def test_invalid(self, fields):
        assert not is_valid(*fields)


@pytest.mark.parametrize(
    "fields, expected",
    [
        ((1970, 1, 1), 2440587.5),
        ((2000, 1, 1, 12), 2451545.0),
        ((1582, 10, 15), 2299160.5),
        ((2001, 9, 9, 1, 46, 40), 2440587.5 + 1_000_000_000 / 86_400),
        ((0, 1, 1), 1721059.5),
        ((2004, 2, 29, 6), 2453064.75),
    ],
)
def test_to_julian_day(fields, expected):
    assert to_julian_day(*fields) == pytest.approx(expected, abs=1e-8)


@pytest.mark.parametrize(
    "jd, expected",
    [
        (2440587.5, CalendarFields(1970, 1, 1)),
        (2451545.0, CalendarFields(2000, 1, 1, 12)),
        (2299160.5, CalendarFields(1582, 10, 15)),
        (2453064.75, CalendarFields(2004, 2, 29, 6)),
        (1721059.5, CalendarFields(0, 1, 1)),
    ],
)
def test_from_julian_day(jd, expected):
    assert from_julian_day(jd) == expected


def _random_date(rng):
    year = rng.randint(1, 9998)
    month = rng.randint(1, 12)
    return year, month, rng.randint(1, days_in_month(year, month))


def _random_fields(rng):
    return CalendarFields(
        *_random_date(rng),
        rng.randint(0, 23),
        rng.randint(0, 59),
        rng.randint(0, 59),
        rng.randint(0, 999),
        rng.randint(0, 999),
    )


# a Julian day float near year 9999 resolves about 80 microseconds
JULIAN_DAY_RESOLUTION = 100


@pytest.mark.parametrize("seed", range(20))
def test_julian_day_round_trip_exact(seed):
    rng = random.Random(seed)
    for _ in range(50):
        # quarter days are exact in binary floating point
        fields = CalendarFields(*_random_date(rng), rng.choice((0, 6, 12, 18)))
        assert from_julian_day(to_julian_day(*fields)) == fields


@pytest.mark.parametrize("seed", range(20))
def test_julian_day_round_trip(seed):
    rng = random.Random(seed)
    for _ in range(100):
        fields = _random_fields(rng)
        result = from_julian_day(to_julian_day(*fields))
        assert is_valid(*result)
        assert (
            abs(DateTime(*result).utc_time - DateTime(*fields).utc_time)
            <= JULIAN_DAY_RESOLUTION
        )


def test_julian_day_round_trip_extremes():
    for fields in [
        CalendarFields(1, 1, 1, 0, 0, 0, 0, 1),
        CalendarFields(9998, 12, 31, 23, 59, 59, 999, 999),
        CalendarFields(9999, 1, 1, 0, 0, 0, 0, 1),
    ]:
        result = from_julian_day(to_julian_day(*fields))
        assert (
            abs(DateTime(*result).utc_time - DateTime(*fields).utc_time)
            <= JULIAN_DAY_RESOLUTION
        )


class TestNormalize:

    def test_nothing_to_do(self):
        f = CalendarFields(2005, 1, 8, 12, 30, 15, 500, 250)
        assert normalize(f) == f

    def test_cascade(self):
        assert normalize(
            CalendarFields(2004, 12, 31, 23, 59, 59, 999, 1000)
        ) == CalendarFields(2005, 1, 1)

    def test_leap_day(self):
        assert normalize(CalendarFields(2004, 2, 29, 24)) == CalendarFields(
            2004, 3, 1
        )
        assert normalize(CalendarFields(2004, 2, 28, 24)) == CalendarFields(
            2004, 2, 29
        )

    def test_large_carry(self):
        assert normalize(
            CalendarFields(2005, 1, 1, 0, 0, 0, 0, 61_000_000)
        ) == CalendarFields(2005, 1, 1, 0, 1, 1)

    def test_month_carry(self):
        assert normalize(CalendarFields(2004, 13, 1)) == CalendarFields(
            2005, 1, 1
        )
        assert normalize(CalendarFields(2004, 25, 1, 12)) == CalendarFields(
            2006, 1, 1, 12
        )

    def test_month_carry_before_day_overflow(self):
        # February 2005 has 28 days
        assert normalize(CalendarFields(2004, 14, 31)) == CalendarFields(
            2005, 3, 3
        )


class TestCorrectDayBoundary:

    def test_unchanged(self):
        f = CalendarFields(2005, 1, 1, 12)
        assert correct_day_boundary(f, 12) is f
        assert correct_day_boundary(CalendarFields(2005, 1, 1, 0), 0) == (
            CalendarFields(2005, 1, 1, 0)
        )

    @pytest.mark.parametrize(
        "fields, expected",
        [
            ((2005, 1, 8, 0), (2005, 1, 7, 0)),
            ((2005, 3, 1, 0), (2005, 2, 28, 0)),
            ((2004, 3, 1, 0), (2004, 2, 29, 0)),
            ((2005, 1, 1, 0), (2004, 12, 31, 0)),
        ],
    )
    def test_back_one_day(self, fields, expected):
        assert correct_day_boundary(
            CalendarFields(*fields), 23
        ) == CalendarFields(*expected)

    @pytest.mark.parametrize(
        "fields, expected",
        [
            ((2005, 1, 8, 23), (2005, 1, 9, 23)),
            ((2005, 2, 28, 23), (2005, 3, 1, 23)),
            ((2004, 2, 28, 23), (2004, 2, 29, 23)),
            ((2004, 12, 31, 23), (2005, 1, 1, 23)),
        ],
    )
    def test_forward_one_day(self, fields, expected):
        assert correct_day_boundary(
            CalendarFields(*fields), 0
        ) == CalendarFields(*expected)

    def test_logs_correction(self, caplog):
        with caplog.at_level("DEBUG", logger="civiltime"):
            correct_day_boundary(CalendarFields(2005, 1, 1, 0), 23)
        assert "2004-12-31" in caplog.text
