from datetime import timedelta
from decimal import Decimal
from fractions import Fraction

import pytest
from pytest import approx

from epochal import Duration, FormatMismatch, RangeOverflow, hours, minutes

from .common import AlwaysEqual, AlwaysLarger, AlwaysSmaller, NeverEqual


class TestInit:

    def test_components_are_summed(self):
        d = Duration(hours=2, minutes=5, seconds=7, nanoseconds=250)
        assert d.in_nanoseconds() == 7_507_000_000_250
        # only the total is kept
        assert not hasattr(d, "minutes")

    def test_defaults(self):
        assert Duration().in_nanoseconds() == 0
        assert Duration() == Duration.ZERO

    def test_mixed_signs(self):
        assert Duration(hours=1, minutes=-59, seconds=-60) == Duration.ZERO
        assert Duration(seconds=1, nanoseconds=-1_000_000_001) == Duration(
            nanoseconds=-1
        )

    def test_nanoseconds_must_be_int(self):
        with pytest.raises(AssertionError):
            Duration(nanoseconds=1.5)  # type: ignore[arg-type]

    def test_nan(self):
        with pytest.raises(ValueError, match="NaN"):
            Duration(seconds=float("nan"))

    def test_infinite(self):
        with pytest.raises(RangeOverflow):
            Duration(hours=float("inf"))
        with pytest.raises(RangeOverflow):
            Duration(seconds=Decimal("1e999999"))

    def test_not_a_number(self):
        with pytest.raises(TypeError):
            Duration(seconds="1")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            Duration(seconds=True)


@pytest.mark.parametrize(
    "kwargs, total",
    [
        (dict(hours=1.25), 4_500_000_000_000),
        (dict(minutes=Fraction(1, 3)), 20_000_000_000),
        (dict(seconds=Decimal("0.000000001")), 1),
        (dict(seconds=0.1), 100_000_000),
        (dict(hours=Fraction(1, 7)), 514_285_714_286),
    ],
)
def test_fractional_amounts(kwargs, total):
    assert Duration(**kwargs).in_nanoseconds() == total


def test_floats_are_read_as_written():
    assert Duration(seconds=0.5) + Duration(seconds=0.6) == Duration(
        seconds=1.1
    )
    # a binary float would drift here
    assert Duration(hours=10_000_001.0, nanoseconds=1) == Duration(
        nanoseconds=10_000_001 * 3_600_000_000_000 + 1
    )


def test_rounds_half_to_even():
    assert Duration(seconds=Decimal("0.0000000005")).in_nanoseconds() == 0
    assert Duration(seconds=Decimal("0.0000000015")).in_nanoseconds() == 2
    assert Duration(seconds=Decimal("-0.0000000025")).in_nanoseconds() == -2


def test_boolean():
    assert Duration(nanoseconds=1)
    assert Duration(nanoseconds=-1)
    assert not Duration(seconds=0.5, nanoseconds=-500_000_000)


def test_in_units():
    d = Duration(minutes=90)
    assert d.in_hours() == 1.5
    assert d.in_minutes() == 90
    assert d.in_seconds() == 5_400
    assert d.in_nanoseconds() == 5_400_000_000_000
    assert Duration(nanoseconds=1).in_seconds() == approx(1e-9)
    assert Duration(minutes=-45).in_hours() == -0.75


def test_equality():
    d = Duration(minutes=90)
    assert d == Duration(hours=1.5) == Duration(seconds=5_400)
    assert hash(d) == hash(Duration(hours=1.5))
    assert d != Duration(minutes=90, nanoseconds=1)
    assert hash(d) != hash(Duration(minutes=90, nanoseconds=1))
    # no implicit unit for plain numbers
    assert Duration(nanoseconds=5) != 5
    assert d == AlwaysEqual()
    assert d != NeverEqual()


ORDERED = [
    Duration(hours=-1),
    Duration(nanoseconds=-1),
    Duration.ZERO,
    Duration(nanoseconds=1),
    Duration(seconds=1),
    Duration(minutes=1, nanoseconds=-1),
    Duration(hours=1),
]


def test_comparison():
    assert sorted(reversed(ORDERED)) == ORDERED
    for smaller, larger in zip(ORDERED, ORDERED[1:]):
        assert smaller < larger
        assert smaller <= larger
        assert larger > smaller
        assert larger >= smaller
        assert not larger < smaller
        assert not smaller >= larger
    d = Duration(seconds=1)
    assert d <= Duration(nanoseconds=1_000_000_000)
    assert d >= Duration(nanoseconds=1_000_000_000)
    assert d < AlwaysLarger()
    assert d <= AlwaysLarger()
    assert not d > AlwaysLarger()
    assert d > AlwaysSmaller()
    assert not d <= AlwaysSmaller()
    with pytest.raises(TypeError):
        d < 1  # type: ignore[operator]


@pytest.mark.parametrize(
    "d, expected",
    [
        (Duration(nanoseconds=1), "00:00:00.000000001"),
        (Duration(seconds=Decimal("59.5")), "00:00:59.5"),
        (Duration(nanoseconds=-1_500), "-00:00:00.0000015"),
        (Duration(hours=123, seconds=1), "123:00:01"),
        (Duration(minutes=-61), "-01:01:00"),
        (Duration(hours=1.25), "01:15:00"),
        (Duration(), "00:00:00"),
    ],
)
def test_canonical_format(d, expected):
    assert d.canonical_format() == expected
    assert str(d) == expected
    assert repr(d) == f"Duration({expected})"
    assert Duration.from_canonical_format(expected) == d


class TestFromCanonicalFormat:

    @pytest.mark.parametrize(
        "s, expected",
        [
            ("-00:00:00.5", Duration(seconds=-0.5)),
            ("+02:00:00.000", Duration(hours=2)),
            ("1000:00:00", Duration(hours=1_000)),
            ("00:59:59.999999999", Duration(hours=1, nanoseconds=-1)),
            ("07:05:00.12", Duration(minutes=425, nanoseconds=120_000_000)),
        ],
    )
    def test_valid(self, s, expected):
        assert Duration.from_canonical_format(s) == expected

    @pytest.mark.parametrize(
        "s",
        [
            "00:60:00",
            "00:00:60",
            "0:00:00",
            "00:00",
            "00:00:00.",
            "00:00:00.1234567890",
            "00:00:00,5",
            "--00:00:00",
            " 00:00:00",
            "00:00:0٣",
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(FormatMismatch):
            Duration.from_canonical_format(s)


class TestArithmetic:

    def test_add_and_subtract(self):
        assert Duration(hours=23) + Duration(minutes=60) == Duration(hours=24)
        assert Duration(seconds=1) - Duration(nanoseconds=1) == Duration(
            nanoseconds=999_999_999
        )
        with pytest.raises(TypeError, match="unsupported operand"):
            Duration() + 1  # type: ignore[operator]
        with pytest.raises(TypeError, match="unsupported operand"):
            Duration() - timedelta(1)  # type: ignore[operator]

    def test_addition_is_associative(self):
        a, b, c = (
            Duration(seconds=0.1),
            Duration(seconds=0.2),
            Duration(seconds=0.3),
        )
        assert (a + b) + c == a + (b + c) == Duration(seconds=0.6)

    def test_multiply(self):
        assert Duration(nanoseconds=333_333_333) * 3 == Duration(
            nanoseconds=999_999_999
        )
        assert Duration(minutes=1) * 0.1 == Duration(seconds=6)
        assert (
            Duration(hours=1) * Decimal("0.25")
            == Duration(hours=1) * Fraction(1, 4)
            == Duration(minutes=15)
        )
        # halfway results go to the even nanosecond
        assert Duration(nanoseconds=3) * 0.5 == Duration(nanoseconds=2)
        assert Duration(nanoseconds=5) * 0.5 == Duration(nanoseconds=2)
        with pytest.raises(TypeError):
            Duration(seconds=1) * True
        with pytest.raises(TypeError):
            Duration(seconds=1) * "2"  # type: ignore[operator]

    def test_divide_by_number(self):
        assert Duration(hours=1) / 4 == Duration(minutes=15)
        assert Duration(seconds=1) / 0.25 == Duration(seconds=4)
        assert Duration(nanoseconds=10) / 3 == Duration(nanoseconds=3)
        assert Duration(nanoseconds=5) / 2 == Duration(nanoseconds=2)

    def test_divide_by_duration(self):
        assert Duration(seconds=1) / Duration(nanoseconds=250_000_000) == 4
        assert Duration(minutes=-90) / Duration(hours=1) == -1.5

    def test_divide_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            Duration(seconds=1) / Duration.ZERO
        with pytest.raises(ZeroDivisionError):
            Duration(seconds=1) / 0

    def test_divide_invalid(self):
        with pytest.raises(TypeError):
            Duration(seconds=1) / "2"  # type: ignore[operator]

    def test_negate_and_abs(self):
        assert -Duration(nanoseconds=7) == Duration(nanoseconds=-7)
        assert -Duration.ZERO == Duration.ZERO
        assert abs(Duration(minutes=-3, nanoseconds=1)) == Duration(
            minutes=3, nanoseconds=-1
        )
        assert abs(Duration(seconds=2)) == Duration(seconds=2)


class TestPyTimedelta:

    def test_to_timedelta(self):
        assert Duration.ZERO.py_timedelta() == timedelta(0)
        assert Duration(hours=25, nanoseconds=1_999).py_timedelta() == (
            timedelta(days=1, hours=1, microseconds=1)
        )
        # floored, not truncated towards zero
        assert Duration(nanoseconds=-1).py_timedelta() == timedelta(
            microseconds=-1
        )

    def test_from_timedelta(self):
        assert Duration.from_py_timedelta(
            timedelta(days=-1, seconds=1)
        ) == Duration(hours=-24, seconds=1)
        assert Duration.from_py_timedelta(
            timedelta(weeks=1, microseconds=3)
        ) == Duration(hours=168, nanoseconds=3_000)


def test_as_tuple():
    assert Duration(seconds=3_723, nanoseconds=42).as_tuple() == (1, 2, 3, 42)
    assert Duration(hours=-1, nanoseconds=-5).as_tuple() == (-1, 0, 0, -5)
    assert Duration(hours=100).as_tuple() == (100, 0, 0, 0)
    assert all(type(x) is int for x in Duration(minutes=1.5).as_tuple())


def test_helpers():
    assert hours(1.5) == Duration(minutes=90)
    assert minutes(2) == Duration(seconds=120)
    assert hours(Fraction(1, 60)) == minutes(1)
