import logging
from decimal import Decimal
from fractions import Fraction

import pytest

from epochal import (
    CivilDate,
    Instant,
    RangeOverflow,
    from_day_offset,
    from_fractional_day_offset,
    from_second_offset,
)


class TestDayOffset:

    def test_single(self):
        assert from_day_offset(CivilDate(2014, 1, 1), 10) == CivilDate(
            2014, 1, 11
        )
        assert from_day_offset(CivilDate(2014, 1, 1), -1) == CivilDate(
            2013, 12, 31
        )

    def test_batch_keeps_order(self):
        assert from_day_offset(CivilDate(2014, 1, 1), [10, 22, 45]) == [
            CivilDate(2014, 1, 11),
            CivilDate(2014, 1, 23),
            CivilDate(2014, 2, 15),
        ]

    def test_batch_from_any_iterable(self):
        origin = CivilDate(2014, 1, 1)
        assert from_day_offset(origin, (n for n in [45, 10])) == [
            CivilDate(2014, 2, 15),
            CivilDate(2014, 1, 11),
        ]
        assert from_day_offset(origin, range(0)) == []

    def test_fraction_not_allowed(self):
        with pytest.raises(TypeError, match="integer"):
            from_day_offset(CivilDate.MIN, 1.5)  # type: ignore[arg-type]

    def test_string_is_not_a_batch(self):
        with pytest.raises(TypeError):
            from_day_offset(CivilDate.MIN, "10")  # type: ignore[arg-type]

    def test_origin_must_be_date(self):
        with pytest.raises(TypeError, match="CivilDate"):
            from_day_offset(Instant(2014, 1, 1), 10)  # type: ignore[arg-type]

    def test_batch_failure_names_position(self):
        with pytest.raises(RangeOverflow, match=r"offset #1 \(1\)"):
            from_day_offset(CivilDate.MAX, [0, 1, 2])
        with pytest.raises(TypeError, match=r"offset #2 \(0\.5\)"):
            offsets = [1, 2, 0.5]
            from_day_offset(CivilDate.MIN, offsets)  # type: ignore[arg-type]

    def test_return_exceptions(self, caplog):
        caplog.set_level(logging.DEBUG, logger="epochal")
        offsets = [10, 1.5, 45]
        results = from_day_offset(
            CivilDate(2014, 1, 1),
            offsets,  # type: ignore[arg-type]
            return_exceptions=True,
        )
        assert results[0] == CivilDate(2014, 1, 11)
        assert isinstance(results[1], TypeError)
        assert results[2] == CivilDate(2014, 2, 15)
        assert "Offset #1" in caplog.text


class TestSecondOffset:

    def test_single(self):
        assert from_second_offset(Instant.EPOCH, 1_411_572_190) == Instant(
            2014, 9, 24, 15, 23, 10
        )

    def test_batch(self):
        origin = Instant(2014, 9, 24, 15, 23, 10)
        assert from_second_offset(origin, [0.5, 1.1, -10]) == [
            Instant(2014, 9, 24, 15, 23, 10, 500_000_000),
            Instant(2014, 9, 24, 15, 23, 11, 100_000_000),
            Instant(2014, 9, 24, 15, 23, 0),
        ]

    def test_keeps_presentation_timezone(self):
        i = from_second_offset(Instant(2014, 9, 24, tz="Asia/Tokyo"), 60)
        assert i.tz == "Asia/Tokyo"
        assert (i.hour, i.minute) == (0, 1)

    def test_origin_must_be_instant(self):
        with pytest.raises(TypeError, match="Instant"):
            from_second_offset(CivilDate.MIN, 10)  # type: ignore[arg-type]

    def test_batch_failure(self):
        with pytest.raises(RangeOverflow, match="offset #1"):
            from_second_offset(Instant.MAX, [0, 1])
        results = from_second_offset(
            Instant.MAX, [0, 1], return_exceptions=True
        )
        assert results[0] == Instant.MAX
        assert isinstance(results[1], RangeOverflow)

    def test_huge_decimal_in_batch(self):
        results = from_second_offset(
            Instant.EPOCH, [1, Decimal("1e999999"), 2], return_exceptions=True
        )
        assert len(results) == 3
        assert results[0] == Instant.from_timestamp(1)
        assert isinstance(results[1], RangeOverflow)
        assert results[2] == Instant.from_timestamp(2)
        with pytest.raises(RangeOverflow, match="offset #0"):
            from_second_offset(Instant.EPOCH, [Decimal("1e999999")])

    def test_nan(self):
        with pytest.raises(ValueError, match="NaN"):
            from_second_offset(Instant.EPOCH, float("nan"))


class TestFractionalDayOffset:

    @pytest.mark.parametrize(
        "days, expected",
        [
            (1.75, Instant(2014, 1, 2, 18)),
            (Decimal("0.5"), Instant(2014, 1, 1, 12)),
            (Fraction(1, 3), Instant(2014, 1, 1, 8)),
            (1 / 3, Instant(2014, 1, 1, 8)),
            (-0.25, Instant(2013, 12, 31, 18)),
            (2, Instant(2014, 1, 3)),
        ],
    )
    def test_single(self, days, expected):
        assert (
            from_fractional_day_offset(Instant(2014, 1, 1), days) == expected
        )

    def test_batch(self):
        assert from_fractional_day_offset(
            Instant(2014, 1, 1), [0.5, 0.25]
        ) == [Instant(2014, 1, 1, 12), Instant(2014, 1, 1, 6)]

    def test_days_are_86400_seconds(self):
        # a DST change doesn't make the day longer
        origin = Instant(2023, 3, 25, 12, tz="Europe/Paris")
        i = from_fractional_day_offset(origin, 1)
        assert i - origin == Instant(2014, 1, 2) - Instant(2014, 1, 1)
        assert i.hour == 13

    def test_date_origin_not_allowed(self):
        origin = CivilDate(2014, 1, 1)
        with pytest.raises(TypeError, match="CivilDate.at"):
            from_fractional_day_offset(origin, 1.5)  # type: ignore[arg-type]

    def test_huge_decimal(self):
        results = from_fractional_day_offset(
            Instant.EPOCH, [Decimal("1e999999"), 1], return_exceptions=True
        )
        assert isinstance(results[0], RangeOverflow)
        assert results[1] == Instant(1970, 1, 2)
