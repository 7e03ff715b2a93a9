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
# - Everything lives in one module:
#   - The value types refer to each other (Instant <-> ZonedView <-> CivilDate)
#   - Parsers and formatters need the private conversion helpers
#   - It can be vendored by copying a single file
# - All amounts of time are integers of nanoseconds internally. Floats
#   only ever enter through ``_exact``, which reads them at their shortest
#   decimal representation. This keeps 0.5 + 0.6 == 1.1 exactly.
# - Calendar and timezone math is delegated to the standard library
#   (``datetime`` and ``zoneinfo``); only the sub-microsecond part
#   is carried alongside.
from __future__ import annotations

__version__ = "0.1.0"

import logging
import re
import sys
from calendar import monthrange
from datetime import (
    date as _date,
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
    tzinfo as _tzinfo,
)
from decimal import ROUND_HALF_EVEN, Context, Decimal, Overflow
from fractions import Fraction
from functools import lru_cache
from numbers import Integral, Real
from operator import attrgetter
from time import time_ns
from typing import (
    TYPE_CHECKING,
    Callable,
    ClassVar,
    Iterable,
    List,
    Literal,
    TypeVar,
    Union,
    no_type_check,
    overload,
)
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

__all__ = [
    "Instant",
    "CivilDate",
    "ZonedView",
    "Duration",
    "ParseOrder",
    "Locale",
    "ENGLISH",
    "DEFAULT_PIVOT_YEAR",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    "parse_strict",
    "parse_date_strict",
    "parse_with_order",
    "parse_date_with_order",
    "ymd",
    "ydm",
    "mdy",
    "myd",
    "dmy",
    "dym",
    "ymd_hms",
    "ymd_hm",
    "ymd_h",
    "ydm_hms",
    "ydm_hm",
    "ydm_h",
    "mdy_hms",
    "mdy_hm",
    "mdy_h",
    "dmy_hms",
    "dmy_hm",
    "dmy_h",
    "from_day_offset",
    "from_second_offset",
    "from_fractional_day_offset",
    "list_supported_timezones",
    "hours",
    "minutes",
    "TemporalError",
    "FormatMismatch",
    "AmbiguousOrder",
    "OutOfRange",
    "RangeOverflow",
    "UnknownTimezone",
    "Ambiguous",
    "DoesntExistInZone",
]

logger = logging.getLogger(__name__)

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(1, 8)

DEFAULT_PIVOT_YEAR = 69
"""Two-digit years below this value are read as 20xx, others as 19xx"""

Number = Union[int, float, Decimal, Fraction]


class NOT_SET:
    pass  # sentinel for when no value is passed


class Locale:
    """The names used to parse and format months, weekdays and AM/PM markers.

    Lookups are case-insensitive. A month or weekday matches its full name,
    its abbreviation (a trailing ``.`` is ignored), or any prefix of
    at least three letters that belongs to a single name.
    So with :data:`ENGLISH`, ``"sep"``, ``"Sept"`` and ``"SEPTEMBER"``
    all mean month 9.

    :data:`ENGLISH` is the only built-in table and the default everywhere.
    Other tables can be constructed directly.

    Example
    -------

    >>> dutch = Locale(
    ...     month_names=[
    ...         "januari", "februari", "maart", "april", "mei", "juni",
    ...         "juli", "augustus", "september", "oktober", "november",
    ...         "december",
    ...     ],
    ...     month_abbreviations=[
    ...         "jan", "feb", "mrt", "apr", "mei", "jun",
    ...         "jul", "aug", "sep", "okt", "nov", "dec",
    ...     ],
    ...     weekday_names=[
    ...         "maandag", "dinsdag", "woensdag", "donderdag",
    ...         "vrijdag", "zaterdag", "zondag",
    ...     ],
    ...     weekday_abbreviations=["ma", "di", "wo", "do", "vr", "za", "zo"],
    ... )
    >>> dmy("24 september 2014", locale=dutch)
    CivilDate(2014-09-24)

    """

    __slots__ = (
        "month_names",
        "month_abbreviations",
        "weekday_names",
        "weekday_abbreviations",
        "am_pm",
        "_months",
        "_weekdays",
        "_meridiems",
    )

    def __init__(
        self,
        *,
        month_names: Iterable[str],
        month_abbreviations: Iterable[str],
        weekday_names: Iterable[str],
        weekday_abbreviations: Iterable[str],
        am_pm: tuple[str, str] = ("AM", "PM"),
    ) -> None:
        self.month_names = tuple(month_names)
        self.month_abbreviations = tuple(month_abbreviations)
        self.weekday_names = tuple(weekday_names)
        self.weekday_abbreviations = tuple(weekday_abbreviations)
        self.am_pm = tuple(am_pm)
        if not (
            len(self.month_names) == len(self.month_abbreviations) == 12
            and len(self.weekday_names) == len(self.weekday_abbreviations) == 7
            and len(self.am_pm) == 2
        ):
            raise ValueError(
                "A locale needs 12 month names and abbreviations, "
                "7 weekday names and abbreviations, and 2 AM/PM markers"
            )
        self._months = _name_lookup(self.month_names, self.month_abbreviations)
        self._weekdays = _name_lookup(
            self.weekday_names, self.weekday_abbreviations
        )
        self._meridiems = {
            self.am_pm[0].casefold(): False,
            self.am_pm[1].casefold(): True,
        }

    def month_number(self, name: str, /) -> int | None:
        """The month (1-12) for a name, or ``None`` if it isn't one"""
        return self._months.get(name.casefold())

    def weekday_number(self, name: str, /) -> int | None:
        """The ISO weekday (Monday is 1) for a name,
        or ``None`` if it isn't one"""
        return self._weekdays.get(name.casefold())

    def is_pm(self, marker: str, /) -> bool | None:
        """Whether the marker means PM (``True``) or AM (``False``).
        ``None`` if it's neither."""
        return self._meridiems.get(marker.casefold())

    def __repr__(self) -> str:
        return f"Locale({', '.join(self.month_abbreviations[:3])}, ...)"


def _name_lookup(
    names: tuple[str, ...], abbrs: tuple[str, ...]
) -> dict[str, int]:
    candidates: dict[str, set[int]] = {}
    for index, name in enumerate(names, 1):
        folded = name.casefold()
        for end in range(3, len(folded) + 1):
            candidates.setdefault(folded[:end], set()).add(index)
    lookup = {
        prefix: indices.pop()
        for prefix, indices in candidates.items()
        if len(indices) == 1
    }
    for index, (name, abbr) in enumerate(zip(names, abbrs), 1):
        lookup[abbr.casefold().rstrip(".")] = index
        lookup[name.casefold()] = index
    return lookup


ENGLISH = Locale(
    month_names=[
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
    ],
    month_abbreviations=[
        "Jan",
        "Feb",
        "Mar",
        "Apr",
        "May",
        "Jun",
        "Jul",
        "Aug",
        "Sep",
        "Oct",
        "Nov",
        "Dec",
    ],
    weekday_names=[
        "Monday",
        "Tuesday",
        "Wednesday",
        "Thursday",
        "Friday",
        "Saturday",
        "Sunday",
    ],
    weekday_abbreviations=["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
)
"""English month and weekday names. The default locale."""


class CivilDate:
    """A calendar day without a time of day or timezone.

    Stored as the number of days since 1970-01-01.
    Supports the years 1 through 9999.

    Example
    -------

    >>> d = CivilDate(2014, 1, 1)
    CivilDate(2014-01-01)
    >>> d + 10
    CivilDate(2014-01-11)
    >>> d.days_since_epoch()
    16071

    """

    __slots__ = ("_days",)

    def __init__(self, year: int, month: int, day: int) -> None:
        self._days = _check_date(year, month, day).toordinal() - _EPOCH_ORDINAL

    MIN: ClassVar[CivilDate]
    MAX: ClassVar[CivilDate]

    @property
    def year(self) -> int:
        return self.py_date().year

    @property
    def month(self) -> int:
        return self.py_date().month

    @property
    def day(self) -> int:
        return self.py_date().day

    @classmethod
    def today(cls) -> CivilDate:
        """The current date in the system timezone"""
        return cls.from_py_date(_date.today())

    @classmethod
    def from_days_since_epoch(cls, days: int, /) -> CivilDate:
        """Create from a number of days since 1970-01-01

        Raises
        ------
        RangeOverflow
            If the resulting date is outside the years 1-9999
        """
        if not isinstance(days, Integral):
            raise TypeError(f"days must be an integer, got {days!r}")
        if not _MIN_DAYS <= days <= _MAX_DAYS:
            raise RangeOverflow.for_days(days)
        self = _object_new(cls)
        self._days = int(days)
        return self

    def days_since_epoch(self) -> int:
        """The number of days since 1970-01-01. Negative before that date."""
        return self._days

    def py_date(self) -> _date:
        """Convert to a :class:`~datetime.date`"""
        return _date.fromordinal(self._days + _EPOCH_ORDINAL)

    @classmethod
    def from_py_date(cls, d: _date, /) -> CivilDate:
        """Create from a :class:`~datetime.date`

        Example
        -------

        >>> CivilDate.from_py_date(date(2021, 1, 2))
        CivilDate(2021-01-02)

        """
        return cls.from_days_since_epoch(d.toordinal() - _EPOCH_ORDINAL)

    def canonical_format(self) -> str:
        """The date in canonical format: ``YYYY-MM-DD``

        Example
        -------

        >>> CivilDate(2021, 1, 2).canonical_format()
        '2021-01-02'

        """
        return self.py_date().isoformat()

    __str__ = canonical_format

    @classmethod
    def from_canonical_format(cls, s: str, /) -> CivilDate:
        """Create from the canonical format, ``YYYY-MM-DD``.

        Inverse of :meth:`canonical_format`

        Raises
        ------
        FormatMismatch
            If the string does not have this exact shape
        OutOfRange
            If the shape is right, but the date doesn't exist
        """
        if (match := _match_date_str(s)) is None:
            raise FormatMismatch.for_shape(s, "YYYY-MM-DD")
        return cls(*map(int, match.groups()))

    def __repr__(self) -> str:
        return f"CivilDate({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CivilDate):
            return NotImplemented
        return self._days == other._days

    def __hash__(self) -> int:
        return hash(self._days)

    def __lt__(self, other: CivilDate) -> bool:
        if not isinstance(other, CivilDate):
            return NotImplemented
        return self._days < other._days

    def __le__(self, other: CivilDate) -> bool:
        if not isinstance(other, CivilDate):
            return NotImplemented
        return self._days <= other._days

    def __gt__(self, other: CivilDate) -> bool:
        if not isinstance(other, CivilDate):
            return NotImplemented
        return self._days > other._days

    def __ge__(self, other: CivilDate) -> bool:
        if not isinstance(other, CivilDate):
            return NotImplemented
        return self._days >= other._days

    def add_days(self, days: int, /) -> CivilDate:
        """Shift the date by a whole number of days.

        Example
        -------

        >>> CivilDate(2014, 1, 1).add_days(45)
        CivilDate(2014-02-15)

        Raises
        ------
        TypeError
            If ``days`` isn't an integer. Fractional days need a time
            of day, so use an :class:`Instant` for those.
        RangeOverflow
            If the result is outside the years 1-9999
        """
        if not isinstance(days, Integral):
            raise TypeError(f"days must be an integer, got {days!r}")
        return self.from_days_since_epoch(self._days + int(days))

    def __add__(self, days: int) -> CivilDate:
        if not isinstance(days, Integral):
            return NotImplemented
        return self.add_days(days)

    @overload
    def __sub__(self, other: CivilDate) -> int: ...

    @overload
    def __sub__(self, other: int) -> CivilDate: ...

    def __sub__(self, other: CivilDate | int) -> int | CivilDate:
        """Subtract a number of days, or another date to get
        the number of days between them

        Example
        -------

        >>> CivilDate(2014, 2, 15) - CivilDate(2014, 1, 1)
        45
        >>> CivilDate(2014, 2, 15) - 45
        CivilDate(2014-01-01)

        """
        if isinstance(other, CivilDate):
            return self._days - other._days
        elif isinstance(other, Integral):
            return self.add_days(-other)
        return NotImplemented

    def day_of_week(self) -> int:
        """The day of the week, where 1 is Monday and 7 is Sunday

        >>> CivilDate(2014, 9, 24).day_of_week() == WEDNESDAY
        True
        """
        return self.py_date().isoweekday()

    def day_of_year(self) -> int:
        """The day of the year, from 1 to 366"""
        return self.py_date().timetuple().tm_yday

    def iso_week(self) -> int:
        """The ISO 8601 week number, from 1 to 53"""
        return self.py_date().isocalendar()[1]

    def iso_year(self) -> int:
        """The ISO 8601 week-numbering year, which differs from
        :attr:`year` in the first and last days of some years"""
        return self.py_date().isocalendar()[0]

    def weekday_name(self, locale: Locale = ENGLISH) -> str:
        return locale.weekday_names[self.day_of_week() - 1]

    def month_name(self, locale: Locale = ENGLISH) -> str:
        return locale.month_names[self.month - 1]

    def at(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        nanosecond: int = 0,
        *,
        tz: str | None = "UTC",
        disambiguate: Disambiguate = "raise",
    ) -> Instant:
        """Combine with a time of day in a timezone to create an
        :class:`Instant`

        Example
        -------

        >>> CivilDate(2014, 1, 1).at(12, tz="Europe/Paris")
        Instant(2014-01-01 12:00:00+01:00[Europe/Paris])

        """
        return Instant(
            self.year,
            self.month,
            self.day,
            hour,
            minute,
            second,
            nanosecond,
            tz=tz,
            disambiguate=disambiguate,
        )

    # It's immutable, so there's nothing to copy
    def __copy__(self) -> CivilDate:
        return self

    def __deepcopy__(self, _: object) -> CivilDate:
        return self

    def __reduce__(self) -> tuple[object, ...]:
        return (_unpkl_date, (self._days,))


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_date(days: int) -> CivilDate:
    return CivilDate.from_days_since_epoch(days)


class Duration:
    """An exact amount of elapsed time, with nanosecond precision

    The inputs are normalized, so 90 minutes becomes 1 hour and 30 minutes,
    for example. Fractional inputs are converted exactly.

    Examples
    --------

    >>> d = Duration(hours=1, minutes=30)
    Duration(01:30:00)
    >>> d.in_minutes()
    90.0
    >>> Duration(seconds=0.5) + Duration(seconds=0.6)
    Duration(00:00:01.1)

    """

    __slots__ = ("_total_ns",)

    def __init__(
        self,
        *,
        hours: Number = 0,
        minutes: Number = 0,
        seconds: Number = 0,
        nanoseconds: int = 0,
    ) -> None:
        assert type(nanoseconds) is int  # catch this common mistake
        self._total_ns = (
            _to_nanos(hours, 3_600 * _NS_PER_SEC)
            + _to_nanos(minutes, 60 * _NS_PER_SEC)
            + _to_nanos(seconds, _NS_PER_SEC)
            + nanoseconds
        )

    ZERO: ClassVar[Duration]
    """A duration of zero"""

    def in_hours(self) -> float:
        """The total duration in hours

        >>> Duration(hours=1, minutes=30).in_hours()
        1.5
        """
        return self._total_ns / 3_600_000_000_000

    def in_minutes(self) -> float:
        """The total duration in minutes"""
        return self._total_ns / 60_000_000_000

    def in_seconds(self) -> float:
        """The total duration in seconds

        >>> d = Duration(minutes=2, seconds=1, nanoseconds=500_000_000)
        >>> d.in_seconds()
        121.5
        """
        return self._total_ns / _NS_PER_SEC

    def in_nanoseconds(self) -> int:
        """The total duration in nanoseconds. This is exact."""
        return self._total_ns

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
        return self._total_ns == other._total_ns

    def __hash__(self) -> int:
        return hash(self._total_ns)

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns < other._total_ns

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns <= other._total_ns

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns > other._total_ns

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns >= other._total_ns

    def __bool__(self) -> bool:
        """True if the duration is non-zero"""
        return bool(self._total_ns)

    def __add__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(nanoseconds=self._total_ns + other._total_ns)

    def __sub__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(nanoseconds=self._total_ns - other._total_ns)

    def __mul__(self, other: Number) -> Duration:
        """Multiply by a number. The result is rounded to
        the nearest nanosecond, ties to even.

        >>> Duration(hours=1, minutes=30) * 2.5
        Duration(03:45:00)
        """
        if not isinstance(other, (Real, Decimal)):
            return NotImplemented
        return Duration(nanoseconds=_to_nanos(other, self._total_ns))

    def __neg__(self) -> Duration:
        return Duration(nanoseconds=-self._total_ns)

    @overload
    def __truediv__(self, other: Number) -> Duration: ...

    @overload
    def __truediv__(self, other: Duration) -> float: ...

    def __truediv__(self, other: Number | Duration) -> Duration | float:
        """Divide by a number or another duration

        Example
        -------

        >>> d = Duration(hours=1, minutes=30)
        >>> d / 2
        Duration(00:45:00)
        >>> d / Duration(minutes=30)
        3.0

        """
        if isinstance(other, Duration):
            return self._total_ns / other._total_ns
        elif isinstance(other, (Real, Decimal)):
            return Duration(
                nanoseconds=_round_exact(
                    Fraction(self._total_ns) / Fraction(_exact(other))
                )
            )
        return NotImplemented

    def __abs__(self) -> Duration:
        return Duration(nanoseconds=abs(self._total_ns))

    def canonical_format(self) -> str:
        """The duration in canonical format.

        The format is:

        .. code-block:: text

           HH:MM:SS(.fffffffff)

        Trailing zeros of the fraction are left out. For example:

        .. code-block:: text

           01:24:45.0089

        """
        hrs, mins, secs, ns = abs(self).as_tuple()
        return (
            f"{'-'*(self._total_ns < 0)}{hrs:02}:{mins:02}:{secs:02}"
            + f".{ns:09}".rstrip("0") * bool(ns)
        )

    @classmethod
    def from_canonical_format(cls, s: str, /) -> Duration:
        """Create from a canonical string representation.

        Inverse of :meth:`canonical_format`

        Example
        -------

        >>> Duration.from_canonical_format("01:30:00")
        Duration(01:30:00)

        Raises
        ------
        FormatMismatch
            If the string does not match this exact format.

        """
        if not (match := _match_duration(s)):
            raise FormatMismatch.for_shape(s, "HH:MM:SS(.fffffffff)")
        sign, hrs, mins, secs, fraction = match.groups()
        return cls(
            nanoseconds=(-1 if sign == "-" else 1)
            * (
                (int(hrs) * 3_600 + int(mins) * 60 + int(secs)) * _NS_PER_SEC
                + int((fraction or "").ljust(9, "0"))
            )
        )

    __str__ = canonical_format

    def py_timedelta(self) -> _timedelta:
        """Convert to a :class:`~datetime.timedelta`.
        Nanoseconds are floored to whole microseconds.

        >>> Duration(hours=1, minutes=30).py_timedelta()
        timedelta(seconds=5400)
        """
        return _timedelta(microseconds=self._total_ns // 1_000)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        """Create from a :class:`~datetime.timedelta`

        Inverse of :meth:`py_timedelta`
        """
        return Duration(
            nanoseconds=(td.days * 86_400 + td.seconds) * _NS_PER_SEC
            + td.microseconds * 1_000
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Convert to a tuple of (hours, minutes, seconds, nanoseconds)

        Example
        -------

        >>> d = Duration(hours=1, minutes=30, nanoseconds=5_000_000_090)
        >>> d.as_tuple()
        (1, 30, 5, 90)

        """
        hrs, rem = divmod(abs(self._total_ns), 3_600 * _NS_PER_SEC)
        mins, rem = divmod(rem, 60 * _NS_PER_SEC)
        secs, ns = divmod(rem, _NS_PER_SEC)
        return (
            (hrs, mins, secs, ns)
            if self._total_ns >= 0
            else (-hrs, -mins, -secs, -ns)
        )

    def __repr__(self) -> str:
        return f"Duration({self})"


class Instant:
    """A point on the timeline, with nanosecond precision.

    Internally, it's the number of nanoseconds since 1970-01-01 00:00:00 UTC.
    It also carries a *presentation timezone*: the timezone used to show it
    as text and to read out its calendar fields. This is an IANA timezone ID,
    or ``None`` for the system timezone.

    Two instants are equal if they are the same point in time,
    regardless of their presentation timezones.

    Example
    -------

    >>> release = Instant(2014, 9, 24, 15, 23, 10)
    Instant(2014-09-24 15:23:10+00:00[UTC])
    >>> in_paris = Instant(2014, 9, 24, 17, 23, 10, tz="Europe/Paris")
    >>> release == in_paris
    True
    >>> release.add_seconds(0.5)
    Instant(2014-09-24 15:23:10.5+00:00[UTC])

    Note
    ----

    The canonical string format is:

    .. code-block:: text

        YYYY-MM-DD HH:MM:SS

    in the presentation timezone, with an optional fraction of seconds.
    See :meth:`canonical_format`.

    Disambiguation
    --------------

    Wall clock times in a timezone can be skipped or repeated
    when the clocks change. The ``disambiguate`` argument controls what
    happens in those cases:

    +------------------+-------------------------------------------------+
    | ``disambiguate`` | Behavior in case of ambiguity                   |
    +==================+=================================================+
    | ``"raise"``      | (default) Refuse to guess:                      |
    |                  | raise :exc:`~epochal.Ambiguous`                 |
    |                  | or :exc:`~epochal.DoesntExistInZone` exception. |
    +------------------+-------------------------------------------------+
    | ``"earlier"``    | Choose the earlier of the two options           |
    +------------------+-------------------------------------------------+
    | ``"later"``      | Choose the later of the two options             |
    +------------------+-------------------------------------------------+
    | ``"compatible"`` | Choose "earlier" for backward transitions and   |
    |                  | "later" for forward transitions. It corresponds |
    |                  | to setting ``fold=0`` in the standard library.  |
    +------------------+-------------------------------------------------+
    """

    __slots__ = ("_ns", "_tz")

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        nanosecond: int = 0,
        *,
        tz: str | None = "UTC",
        disambiguate: Disambiguate = "raise",
    ) -> None:
        self._ns = _wall_to_ns(
            _check_date(year, month, day),
            hour,
            minute,
            second,
            nanosecond,
            tz,
            disambiguate,
        )
        self._tz = tz

    MIN: ClassVar[Instant]
    MAX: ClassVar[Instant]
    EPOCH: ClassVar[Instant]

    @classmethod
    def _from_ns(cls, ns: int, tz: str | None) -> Instant:
        if not _MIN_NS <= ns <= _MAX_NS:
            raise RangeOverflow.for_nanos(ns)
        self = _object_new(cls)
        self._ns = ns
        self._tz = tz
        return self

    @property
    def tz(self) -> str | None:
        """The presentation timezone: an IANA ID,
        or ``None`` for the system timezone"""
        return self._tz

    @property
    def _zoned(self) -> ZonedView:
        return ZonedView._project(self._ns, self._tz)

    if TYPE_CHECKING:

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
        def nanosecond(self) -> int: ...

    else:
        # Fields are read in the presentation timezone.
        # The projection is recomputed each time: the offset isn't fixed.
        year = property(attrgetter("_zoned.year"))
        month = property(attrgetter("_zoned.month"))
        day = property(attrgetter("_zoned.day"))
        hour = property(attrgetter("_zoned.hour"))
        minute = property(attrgetter("_zoned.minute"))
        second = property(attrgetter("_zoned.second"))
        nanosecond = property(attrgetter("_zoned.nanosecond"))

    @classmethod
    def now(cls, tz: str | None = "UTC") -> Instant:
        """The current time, presented in the given timezone"""
        _check_tz(tz)
        return cls._from_ns(time_ns(), tz)

    @classmethod
    def from_timestamp(
        cls, seconds: Number, /, tz: str | None = "UTC"
    ) -> Instant:
        """Create from a number of seconds since the UNIX epoch.
        The inverse of :meth:`timestamp`.

        Example
        -------

        >>> Instant.from_timestamp(0) == Instant.EPOCH
        True
        >>> Instant.from_timestamp(1_411_572_190.25)
        Instant(2014-09-24 15:23:10.25+00:00[UTC])

        """
        _check_tz(tz)
        return cls._from_ns(_to_nanos(seconds, _NS_PER_SEC), tz)

    @classmethod
    def from_epoch_nanoseconds(
        cls, ns: int, /, tz: str | None = "UTC"
    ) -> Instant:
        if not isinstance(ns, Integral):
            raise TypeError(f"ns must be an integer, got {ns!r}")
        _check_tz(tz)
        return cls._from_ns(int(ns), tz)

    def timestamp(self) -> float:
        """The UNIX timestamp, in seconds. Use :meth:`epoch_seconds`
        if you need the exact value."""
        return self._ns / _NS_PER_SEC

    def epoch_seconds(self) -> Decimal:
        """The exact number of seconds since the UNIX epoch

        >>> Instant(1970, 1, 1, 0, 0, 1, 500_000_000).epoch_seconds()
        Decimal('1.500000000')
        """
        return Decimal(self._ns).scaleb(-9)

    def epoch_nanoseconds(self) -> int:
        return self._ns

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> Instant:
        """Create from an aware :class:`~datetime.datetime`.

        The presentation timezone is taken from a
        :class:`~zoneinfo.ZoneInfo` tzinfo. Any other tzinfo
        results in UTC presentation.
        """
        if d.utcoffset() is None:
            raise ValueError(
                f"Can only create Instant from an aware datetime, got {d!r}"
            )
        key = d.tzinfo.key if isinstance(d.tzinfo, ZoneInfo) else None
        tz = key if key in _timezone_registry() else "UTC"
        return cls._from_ns(_ns_from_py(d), tz)

    def py_datetime(self) -> _datetime:
        """Convert to an aware :class:`~datetime.datetime` in the
        presentation timezone. Nanoseconds are truncated to microseconds."""
        return self._zoned.py_datetime()

    def canonical_format(self, precision: int = 0) -> str:
        """Format as ``YYYY-MM-DD HH:MM:SS`` in the presentation timezone.

        ``precision`` is the number of fractional digits of the seconds
        to show (0-9). Digits beyond it are truncated, not rounded.

        Example
        -------

        >>> i = Instant(2014, 9, 24, 15, 23, 10, 123_456_789)
        >>> i.canonical_format()
        '2014-09-24 15:23:10'
        >>> i.canonical_format(precision=3)
        '2014-09-24 15:23:10.123'

        """
        return self._zoned.canonical_format(precision)

    def __str__(self) -> str:
        return self.canonical_format()

    @classmethod
    def from_canonical_format(
        cls,
        s: str,
        /,
        tz: str | None = None,
        *,
        disambiguate: Disambiguate = "raise",
    ) -> Instant:
        """Create from the canonical format ``YYYY-MM-DD HH:MM:SS``,
        optionally followed by a fraction of up to 9 digits.

        The text is read as wall clock time in ``tz``, which defaults
        to the **system timezone**. Note that :func:`parse_with_order`
        defaults to UTC instead.

        Raises
        ------
        FormatMismatch
            If the string does not have this exact shape
        OutOfRange
            If the shape is right, but a field is impossible
        """
        if (match := _match_instant_str(s)) is None:
            raise FormatMismatch.for_shape(s, "YYYY-MM-DD HH:MM:SS")
        *fields, fraction = match.groups()
        year, month, day, hour, minute, second = map(int, fields)
        return cls(
            year,
            month,
            day,
            hour,
            minute,
            second,
            int((fraction or "").ljust(9, "0")),
            tz=tz,
            disambiguate=disambiguate,
        )

    def format(
        self, pattern: str, /, *, precision: int = 0, locale: Locale = ENGLISH
    ) -> str:
        """Format in the presentation timezone.
        See :meth:`ZonedView.format`."""
        return self._zoned.format(pattern, precision=precision, locale=locale)

    def __repr__(self) -> str:
        return f"Instant({self._zoned._repr_body()})"

    def __eq__(self, other: object) -> bool:
        """Whether two instants are the same moment in time.
        The presentation timezone doesn't matter.

        >>> paris = Instant(2014, 9, 24, 17, tz="Europe/Paris")
        >>> Instant(2014, 9, 24, 15) == paris
        True
        """
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns == other._ns

    def __hash__(self) -> int:
        return hash(self._ns)

    def __lt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns < other._ns

    def __le__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns <= other._ns

    def __gt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns > other._ns

    def __ge__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns >= other._ns

    def exact_eq(self, other: Instant, /) -> bool:
        """Compare both the moment and the presentation timezone

        >>> a = Instant(2014, 9, 24, 15)
        >>> b = a.to_timezone("Asia/Tokyo")
        >>> a == b
        True
        >>> a.exact_eq(b)
        False
        """
        return self._ns == other._ns and self._tz == other._tz

    def add_seconds(self, seconds: Number, /) -> Instant:
        """Shift by an exact number of seconds, which may be fractional.

        Floats are taken at their shortest decimal representation,
        so fractions carry over correctly:

        >>> i = Instant(2014, 9, 24, 15, 23, 10).add_seconds(0.5)
        >>> i.add_seconds(0.6)
        Instant(2014-09-24 15:23:11.1+00:00[UTC])

        Raises
        ------
        RangeOverflow
            If the result is outside the supported range,
            or ``seconds`` is infinite.
        """
        return self._from_ns(
            self._ns + _to_nanos(seconds, _NS_PER_SEC), self._tz
        )

    def __add__(self, delta: Duration) -> Instant:
        """Add a duration

        >>> Instant(2014, 9, 24, 15) + hours(2)
        Instant(2014-09-24 17:00:00+00:00[UTC])
        """
        if not isinstance(delta, Duration):
            return NotImplemented
        return self._from_ns(self._ns + delta._total_ns, self._tz)

    @overload
    def __sub__(self, other: Instant) -> Duration: ...

    @overload
    def __sub__(self, other: Duration) -> Instant: ...

    def __sub__(self, other: Instant | Duration) -> Duration | Instant:
        """Subtract a duration, or another instant to get the
        exact duration between them

        >>> Instant(2014, 9, 24, 15) - Instant(2014, 9, 24, 12, 30)
        Duration(02:30:00)
        """
        if isinstance(other, Instant):
            return Duration(nanoseconds=self._ns - other._ns)
        elif isinstance(other, Duration):
            return self._from_ns(self._ns - other._total_ns, self._tz)
        return NotImplemented

    def view(self, tz: str | None | NOT_SET = NOT_SET()) -> ZonedView:
        """The calendar and clock fields of this instant in a timezone.
        Defaults to the presentation timezone.

        >>> Instant(2014, 9, 24, 15, 23, 10).view().day_of_year()
        267
        """
        return ZonedView._project(
            self._ns, self._tz if isinstance(tz, NOT_SET) else tz
        )

    def with_timezone(self, tz: str | None, /) -> ZonedView:
        """Project into a timezone, computing the UTC offset
        in effect at this instant. ``None`` is the system timezone.

        Example
        -------

        >>> i = Instant(2014, 9, 24, 15, 23, 10)
        >>> i.with_timezone("America/New_York")
        ZonedView(2014-09-24 11:23:10-04:00[America/New_York])

        Raises
        ------
        UnknownTimezone
            If the ID isn't in :func:`list_supported_timezones`
        """
        return ZonedView._project(self._ns, tz)

    def to_timezone(self, tz: str | None, /) -> Instant:
        """The same moment, with a different presentation timezone

        >>> Instant(2014, 9, 24, 15).to_timezone("Asia/Tokyo")
        Instant(2014-09-25 00:00:00+09:00[Asia/Tokyo])
        """
        _check_tz(tz)
        return self._from_ns(self._ns, tz)

    def replace_timezone(
        self, tz: str | None, /, *, disambiguate: Disambiguate = "raise"
    ) -> Instant:
        """Keep the wall clock time, but interpret it in another timezone.
        This results in a different moment (unless the offsets match).

        >>> Instant(2014, 9, 24, 15).replace_timezone("Asia/Tokyo")
        Instant(2014-09-24 15:00:00+09:00[Asia/Tokyo])
        """
        v = self._zoned
        return Instant(
            v.year,
            v.month,
            v.day,
            v.hour,
            v.minute,
            v.second,
            v.nanosecond,
            tz=tz,
            disambiguate=disambiguate,
        )

    def date(self) -> CivilDate:
        """The calendar date in the presentation timezone"""
        return self._zoned.date()

    def __copy__(self) -> Instant:
        return self

    def __deepcopy__(self, _: object) -> Instant:
        return self

    # a custom pickle implementation with a smaller payload
    def __reduce__(self) -> tuple[object, ...]:
        return (_unpkl_instant, (self._ns, self._tz))


@no_type_check
def _unpkl_instant(ns: int, tz: str | None) -> Instant:
    return Instant._from_ns(ns, tz)


class ZonedView:
    """The local calendar and clock fields of an :class:`Instant`
    in a timezone, together with the UTC offset in effect.

    Views are not stored; get one from :meth:`Instant.with_timezone`
    or :meth:`Instant.view` each time you need it.

    Example
    -------

    >>> v = Instant(2014, 9, 24, 15, 23, 10).with_timezone("Europe/Paris")
    ZonedView(2014-09-24 17:23:10+02:00[Europe/Paris])
    >>> v.hour, v.offset
    (17, Duration(02:00:00))
    >>> v.weekday_name()
    'Wednesday'

    """

    __slots__ = ("_py_dt", "_sub_us", "_tz")

    @classmethod
    def _project(cls, ns: int, tz: str | None) -> ZonedView:
        zone = _check_tz(tz)
        us, sub_us = divmod(ns, 1_000)
        try:
            # astimezone(None) is the system timezone
            local = (_EPOCH_UTC + _timedelta(microseconds=us)).astimezone(zone)
        except OverflowError as e:
            raise RangeOverflow.for_nanos(ns) from e
        self = _object_new(cls)
        self._py_dt = local
        self._sub_us = sub_us
        self._tz = tz
        return self

    if TYPE_CHECKING:

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

    else:
        # Defining properties this way is faster than declaring a `def`,
        # but the type checker doesn't like it.
        year = property(attrgetter("_py_dt.year"))
        month = property(attrgetter("_py_dt.month"))
        day = property(attrgetter("_py_dt.day"))
        hour = property(attrgetter("_py_dt.hour"))
        minute = property(attrgetter("_py_dt.minute"))
        second = property(attrgetter("_py_dt.second"))

    @property
    def nanosecond(self) -> int:
        """The fraction of the second, in nanoseconds"""
        return self._py_dt.microsecond * 1_000 + self._sub_us

    @property
    def tz(self) -> str | None:
        """The timezone ID, or ``None`` for the system timezone"""
        return self._tz

    @property
    def offset(self) -> Duration:
        """The UTC offset in effect at this moment"""
        offset = self._py_dt.utcoffset()
        assert offset is not None
        return Duration.from_py_timedelta(offset)

    def tzname(self) -> str | None:
        """The abbreviation of the timezone at this moment,
        e.g. ``"CEST"``. Not an IANA ID."""
        return self._py_dt.tzname()

    def fractional_second(self) -> Decimal:
        """The seconds including their fraction, exactly

        >>> v = Instant(2014, 9, 24, 15, 23, 10, 500_000_000).view()
        >>> v.fractional_second()
        Decimal('10.500000000')
        """
        return Decimal(self.second * _NS_PER_SEC + self.nanosecond).scaleb(-9)

    def date(self) -> CivilDate:
        return CivilDate.from_py_date(self._py_dt.date())

    def day_of_week(self) -> int:
        """The day of the week, where 1 is Monday and 7 is Sunday"""
        return self._py_dt.isoweekday()

    def day_of_year(self) -> int:
        return self._py_dt.timetuple().tm_yday

    def iso_week(self) -> int:
        return self._py_dt.isocalendar()[1]

    def iso_year(self) -> int:
        return self._py_dt.isocalendar()[0]

    def weekday_name(self, locale: Locale = ENGLISH) -> str:
        return locale.weekday_names[self.day_of_week() - 1]

    def month_name(self, locale: Locale = ENGLISH) -> str:
        return locale.month_names[self.month - 1]

    def to_instant(self) -> Instant:
        """Recompute the instant from the local fields and the offset.

        This always equals the instant the view was created from.
        The result is presented in the view's timezone.
        """
        offset = self._py_dt.utcoffset()
        assert offset is not None
        delta = self._py_dt.replace(tzinfo=None) - offset - _EPOCH_NAIVE
        return Instant._from_ns(
            _delta_to_ns(delta) + self._sub_us,
            self._tz,
        )

    def py_datetime(self) -> _datetime:
        """The underlying aware :class:`~datetime.datetime`.
        Sub-microsecond precision is not included."""
        return self._py_dt

    def canonical_format(self, precision: int = 0) -> str:
        """Format as ``YYYY-MM-DD HH:MM:SS``, with ``precision``
        fractional digits of the seconds (truncated)"""
        return self.format(_CANONICAL_PATTERN, precision=precision)

    def format(
        self, pattern: str, /, *, precision: int = 0, locale: Locale = ENGLISH
    ) -> str:
        """Format using ``%``-directives.

        Numeric directives always have a fixed width:

        ====== ========================================== ===========
        ``%Y`` year, 4 digits                             ``2014``
        ``%y`` year without century, 2 digits             ``14``
        ``%m`` month, 2 digits                            ``09``
        ``%d`` day of the month, 2 digits                 ``24``
        ``%H`` hour (24-hour clock), 2 digits             ``15``
        ``%I`` hour (12-hour clock), 2 digits             ``03``
        ``%M`` minute, 2 digits                           ``23``
        ``%S`` second, 2 digits                           ``10``
        ``%OS`` second with ``precision`` digits          ``10.5``
        ``%OSn`` second with ``n`` digits (0-9)           ``10.500``
        ``%j`` day of the year, 3 digits                  ``267``
        ``%u`` ISO weekday, Monday is 1                   ``3``
        ``%V`` ISO week number, 2 digits                  ``39``
        ``%G`` ISO week-numbering year, 4 digits          ``2014``
        ``%z`` UTC offset                                 ``+0200``
        ``%F`` same as ``%Y-%m-%d``
        ``%T`` same as ``%H:%M:%S``
        ``%%`` a literal ``%``
        ====== ========================================== ===========

        Name directives come from ``locale`` (:data:`ENGLISH` by default):
        ``%a``/``%A`` weekday abbreviation/name, ``%b``/``%B`` month
        abbreviation/name, ``%p`` AM/PM marker. ``%Z`` is the timezone
        abbreviation reported by the timezone database.

        Fractions are truncated, never rounded up into the next second.

        Raises
        ------
        ValueError
            For unknown directives or a precision outside 0-9
        """
        if not 0 <= precision <= 9:
            raise ValueError(f"precision must be in 0..9, got {precision}")

        def render(match: re.Match[str]) -> str:
            directive = match.group(1)
            if directive.startswith("OS"):
                return _format_seconds(
                    self, int(directive[2:]) if directive[2:] else precision
                )
            if (func := _DIRECTIVES.get(directive)) is None:
                raise ValueError(
                    f"Unknown format directive %{directive} in {pattern!r}"
                )
            return func(self, locale)

        return _match_directive(render, pattern)

    def _repr_body(self) -> str:
        ns = self.nanosecond
        return (
            self.format("%F %T")
            + f".{ns:09}".rstrip("0") * bool(ns)
            + _format_offset(self._py_dt.utcoffset(), ":")
            + (f"[{self._tz}]" if self._tz is not None else "")
        )

    def __repr__(self) -> str:
        return f"ZonedView({self._repr_body()})"


def _format_offset(offset: _timedelta | None, sep: str) -> str:
    assert offset is not None
    secs = int(offset.total_seconds())
    sign = "-" if secs < 0 else "+"
    hrs, rem = divmod(abs(secs), 3_600)
    mins, secs = divmod(rem, 60)
    return f"{sign}{hrs:02}{sep}{mins:02}" + f"{sep}{secs:02}" * bool(secs)


def _format_seconds(v: ZonedView, digits: int) -> str:
    fraction = f".{v.nanosecond:09}"[: digits + 1] * bool(digits)
    return f"{v.second:02}" + fraction


_CANONICAL_PATTERN = "%Y-%m-%d %H:%M:%OS"
_DIRECTIVES: dict[str, Callable[[ZonedView, Locale], str]] = {
    "Y": lambda v, _: f"{v.year:04}",
    "y": lambda v, _: f"{v.year % 100:02}",
    "m": lambda v, _: f"{v.month:02}",
    "d": lambda v, _: f"{v.day:02}",
    "H": lambda v, _: f"{v.hour:02}",
    "I": lambda v, _: f"{(v.hour - 1) % 12 + 1:02}",
    "M": lambda v, _: f"{v.minute:02}",
    "S": lambda v, _: f"{v.second:02}",
    "j": lambda v, _: f"{v.day_of_year():03}",
    "u": lambda v, _: f"{v.day_of_week()}",
    "V": lambda v, _: f"{v.iso_week():02}",
    "G": lambda v, _: f"{v.iso_year():04}",
    "z": lambda v, _: _format_offset(v.py_datetime().utcoffset(), ""),
    "Z": lambda v, _: v.tzname() or "",
    "a": lambda v, loc: loc.weekday_abbreviations[v.day_of_week() - 1],
    "A": lambda v, loc: loc.weekday_names[v.day_of_week() - 1],
    "b": lambda v, loc: loc.month_abbreviations[v.month - 1],
    "B": lambda v, loc: loc.month_names[v.month - 1],
    "p": lambda v, loc: loc.am_pm[v.hour >= 12],
    "F": lambda v, loc: v.format("%Y-%m-%d", locale=loc),
    "T": lambda v, loc: v.format("%H:%M:%S", locale=loc),
    "%": lambda v, _: "%",
}


class ParseOrder:
    """The order of the date and time components in a string.

    Built from letters ``y`` (year), ``m`` (month or minute), ``d`` (day),
    ``h`` (hour), ``min`` (minute) and ``s`` (second). Spaces, ``_``,
    ``-``, ``/``, ``:``, ``.`` and ``,`` between them are ignored.

    A bare ``m`` means *minute* when it directly follows ``h``
    or directly precedes ``s``. Otherwise, it means *month*.

    Example
    -------

    >>> ParseOrder("mdy hms").fields
    ('month', 'day', 'year', 'hour', 'minute', 'second')
    >>> ParseOrder("dmy h min").fields
    ('day', 'month', 'year', 'hour', 'minute')

    Raises
    ------
    AmbiguousOrder
        If a field appears twice, or the year, month or day is missing
    ValueError
        For letters outside the vocabulary
    """

    __slots__ = ("_order", "_fields")

    def __init__(self, order: str) -> None:
        letters = []
        for match in _ORDER_TOKEN.finditer(order):
            if match.group("bad") is not None:
                raise ValueError(
                    f"Unknown component {match.group('bad')!r} "
                    f"in parse order {order!r}"
                )
            if match.group("field") is not None:
                letters.append(match.group("field").lower())
        fields = []
        for i, letter in enumerate(letters):
            if letter == "m":
                follows_hour = i > 0 and letters[i - 1] == "h"
                precedes_second = (
                    i + 1 < len(letters) and letters[i + 1] == "s"
                )
                fields.append(
                    "minute" if follows_hour or precedes_second else "month"
                )
            else:
                fields.append(_ORDER_FIELDS[letter])
        if len(set(fields)) != len(fields):
            raise AmbiguousOrder(f"Parse order {order!r} repeats a component")
        if not {"year", "month", "day"}.issubset(fields):
            raise AmbiguousOrder(
                f"Parse order {order!r} must include year, month and day"
            )
        self._order = order
        self._fields = tuple(fields)

    @property
    def fields(self) -> tuple[str, ...]:
        return self._fields

    def has_time(self) -> bool:
        """Whether the order includes any of hour, minute or second"""
        return not _DATE_FIELDS.issuperset(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseOrder):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __str__(self) -> str:
        return self._order

    def __repr__(self) -> str:
        return f"ParseOrder({self._order})"


@lru_cache(maxsize=256)
def _parse_order(order: str | ParseOrder) -> ParseOrder:
    return order if isinstance(order, ParseOrder) else ParseOrder(order)


def parse_strict(
    text: str,
    /,
    tz: str | None = None,
    *,
    disambiguate: Disambiguate = "raise",
) -> Instant:
    """Parse the canonical format ``YYYY-MM-DD HH:MM:SS(.fffffffff)``.

    The time is read in ``tz``, which defaults to the **system timezone**.
    This is different from :func:`parse_with_order`, which defaults to UTC.

    Example
    -------

    >>> # on a system set to America/New_York
    >>> parse_strict("2014-09-24 15:23:10")
    Instant(2014-09-24 15:23:10-04:00)
    >>> parse_strict("2014-09-24 15:23:10", "UTC")
    Instant(2014-09-24 15:23:10+00:00[UTC])
    >>> parse_strict("09/24/2014 15:23:10")  # FormatMismatch

    """
    return Instant.from_canonical_format(text, tz, disambiguate=disambiguate)


def parse_date_strict(text: str, /) -> CivilDate:
    """Parse the canonical date format ``YYYY-MM-DD``"""
    return CivilDate.from_canonical_format(text)


def parse_with_order(
    text: str,
    order: str | ParseOrder,
    tz: str | None = "UTC",
    *,
    pivot_year: int = DEFAULT_PIVOT_YEAR,
    locale: Locale = ENGLISH,
    disambiguate: Disambiguate = "raise",
) -> Instant:
    """Parse a date and time whose components appear in the given order,
    with any separators between them.

    The result is in ``tz``, which defaults to **UTC**. This is different
    from :func:`parse_strict`, which defaults to the system timezone.

    Example
    -------

    >>> parse_with_order("2014-09-24 15:23:10", "ymd hms")
    Instant(2014-09-24 15:23:10+00:00[UTC])
    >>> parse_with_order("09/24/2014 15-23-10", "mdy hms")
    Instant(2014-09-24 15:23:10+00:00[UTC])
    >>> parse_with_order("Wed, 24 Sept 14 3:23:10.25 PM", "dmy hms")
    Instant(2014-09-24 15:23:10.25+00:00[UTC])

    Rules
    -----

    - Components are runs of digits or runs of letters.
      Everything else separates them.
    - Month names and abbreviations are looked up in ``locale``.
    - An AM/PM marker may appear anywhere if the order has an hour.
      The hour must then be 1-12.
    - A weekday name may appear anywhere. It must match the date.
    - Digits after the seconds, separated by exactly ``.`` or ``,``,
      are the fraction of the second (up to 9 digits).
    - Years of one or two digits below ``pivot_year`` are in the 2000s,
      others in the 1900s.

    Raises
    ------
    AmbiguousOrder
        If the number of components doesn't match the order
    FormatMismatch
        If a component can't be read as its field, e.g. letters for a day
    OutOfRange
        If a field is outside its domain, e.g. month 13 or day 32
    """
    parsed_order = _parse_order(order)
    return Instant(
        **_resolve_fields(text, parsed_order, pivot_year, locale),
        tz=tz,
        disambiguate=disambiguate,
    )


def parse_date_with_order(
    text: str,
    order: str | ParseOrder,
    *,
    pivot_year: int = DEFAULT_PIVOT_YEAR,
    locale: Locale = ENGLISH,
) -> CivilDate:
    """Parse a date whose components appear in the given order.
    Follows the same rules as :func:`parse_with_order`.

    >>> parse_date_with_order("24 September 2014", "dmy")
    CivilDate(2014-09-24)
    """
    parsed_order = _parse_order(order)
    if parsed_order.has_time():
        raise ValueError(
            f"Parse order '{parsed_order}' has time components. "
            "Use parse_with_order() to get an Instant."
        )
    fields = _resolve_fields(text, parsed_order, pivot_year, locale)
    return CivilDate(fields["year"], fields["month"], fields["day"])


def _resolve_fields(
    text: str, order: ParseOrder, pivot_year: int, locale: Locale
) -> dict[str, int]:
    if not 0 <= pivot_year <= 100:
        raise ValueError(f"pivot_year must be in 0..100, got {pivot_year}")
    has_hour = "hour" in order.fields
    is_pm: bool | None = None
    weekday: int | None = None
    tokens: list[tuple[str, str]] = []
    for sep, token in _tokenize(text):
        if not _match_digits(token):
            if has_hour and (pm := locale.is_pm(token)) is not None:
                if is_pm is not None:
                    raise AmbiguousOrder(
                        f"{text!r} has more than one AM/PM marker"
                    )
                is_pm = pm
                continue
            if weekday is None and (wd := locale.weekday_number(token)):
                weekday = wd
                continue
        tokens.append((sep, token))

    values = dict(hour=0, minute=0, second=0, nanosecond=0)
    i = 0
    for position, field in enumerate(order.fields, 1):
        if i == len(tokens):
            raise AmbiguousOrder.for_counts(text, order, len(tokens))
        token = tokens[i][1]
        i += 1
        if not _match_digits(token):
            if field == "month" and (month := locale.month_number(token)):
                values["month"] = month
                continue
            raise FormatMismatch(
                f"Can't read {token!r} as the {field} in {text!r}"
            )
        value = int(token)
        if field == "year" and len(token) <= 2:
            value += 2000 if value < pivot_year else 1900
        elif (
            field == "second"
            and i < len(tokens)
            and tokens[i][0] in (".", ",")
            and _match_digits(tokens[i][1])
            # the fraction can't take a component another field needs
            and len(tokens) - i - 1 >= len(order.fields) - position
        ):
            fraction = tokens[i][1]
            i += 1
            if len(fraction) > 9:
                raise FormatMismatch(
                    f"Fraction of a second in {text!r} has more than 9 digits"
                )
            values["nanosecond"] = int(fraction.ljust(9, "0"))
        values[field] = value
    if i != len(tokens):
        raise AmbiguousOrder.for_counts(text, order, len(tokens))

    if is_pm is not None:
        if not 1 <= values["hour"] <= 12:
            raise OutOfRange.for_field("hour", values["hour"], 1, 12)
        values["hour"] = values["hour"] % 12 + 12 * is_pm

    d = _check_date(values["year"], values["month"], values["day"])
    if weekday is not None and weekday != d.isoweekday():
        raise OutOfRange(
            f"{text!r} names {locale.weekday_names[weekday - 1]}, "
            f"but {d} is a {locale.weekday_names[d.isoweekday() - 1]}"
        )
    return values


def _tokenize(text: str) -> list[tuple[str, str]]:
    # (separator before the token, token)
    tokens = []
    end = 0
    for match in _match_token(text):
        tokens.append((text[end : match.start()], match.group()))
        end = match.end()
    return tokens


def _instant_parser(order: str) -> Callable[..., Instant]:
    parsed_order = ParseOrder(order)

    def parse(text: str, /, tz: str | None = "UTC", **kwargs) -> Instant:
        return parse_with_order(text, parsed_order, tz, **kwargs)

    parse.__name__ = parse.__qualname__ = order.replace(" ", "_")
    parse.__doc__ = (
        f"Parse a date and time in the order ``{order}``. "
        f"Same as ``parse_with_order(text, {order!r}, tz, **kwargs)``."
    )
    return parse


def _date_parser(order: str) -> Callable[..., CivilDate]:
    parsed_order = ParseOrder(order)

    def parse(text: str, /, **kwargs) -> CivilDate:
        return parse_date_with_order(text, parsed_order, **kwargs)

    parse.__name__ = parse.__qualname__ = order
    parse.__doc__ = (
        f"Parse a date in the order ``{order}``. "
        f"Same as ``parse_date_with_order(text, {order!r}, **kwargs)``."
    )
    return parse


@overload
def from_day_offset(
    origin: CivilDate, days: int, /, *, return_exceptions: bool = False
) -> CivilDate: ...


@overload
def from_day_offset(
    origin: CivilDate,
    days: Iterable[int],
    /,
    *,
    return_exceptions: bool = False,
) -> List[CivilDate | Exception]: ...


def from_day_offset(
    origin: CivilDate,
    days: int | Iterable[int],
    /,
    *,
    return_exceptions: bool = False,
) -> CivilDate | List[CivilDate | Exception]:
    """The date a whole number of days after ``origin``.
    Accepts a single offset or an iterable of them.

    Example
    -------

    >>> origin = CivilDate(2014, 1, 1)
    >>> from_day_offset(origin, 10)
    CivilDate(2014-01-11)
    >>> from_day_offset(origin, [10, 22, 45])
    [CivilDate(2014-01-11), CivilDate(2014-01-23), CivilDate(2014-02-15)]

    Failures in a batch
    -------------------

    By default, the first offset that fails raises its error
    (with its position in the message) and no results are returned.
    With ``return_exceptions=True``, every offset is attempted,
    and failures appear in the result list as the exception instances,
    in the position of the offset that caused them.
    """
    if not isinstance(origin, CivilDate):
        raise TypeError(f"origin must be a CivilDate, got {origin!r}")
    return _map_offsets(origin.add_days, days, return_exceptions)


@overload
def from_second_offset(
    origin: Instant, seconds: Number, /, *, return_exceptions: bool = False
) -> Instant: ...


@overload
def from_second_offset(
    origin: Instant,
    seconds: Iterable[Number],
    /,
    *,
    return_exceptions: bool = False,
) -> List[Instant | Exception]: ...


def from_second_offset(
    origin: Instant,
    seconds: Number | Iterable[Number],
    /,
    *,
    return_exceptions: bool = False,
) -> Instant | List[Instant | Exception]:
    """The instant an exact number of seconds after ``origin``.
    Accepts a single offset or an iterable of them, like
    :func:`from_day_offset`.

    >>> from_second_offset(Instant.EPOCH, 1_411_572_190)
    Instant(2014-09-24 15:23:10+00:00[UTC])
    """
    if not isinstance(origin, Instant):
        raise TypeError(f"origin must be an Instant, got {origin!r}")
    return _map_offsets(origin.add_seconds, seconds, return_exceptions)


@overload
def from_fractional_day_offset(
    origin: Instant, days: Number, /, *, return_exceptions: bool = False
) -> Instant: ...


@overload
def from_fractional_day_offset(
    origin: Instant,
    days: Iterable[Number],
    /,
    *,
    return_exceptions: bool = False,
) -> List[Instant | Exception]: ...


def from_fractional_day_offset(
    origin: Instant,
    days: Number | Iterable[Number],
    /,
    *,
    return_exceptions: bool = False,
) -> Instant | List[Instant | Exception]:
    """The instant a (fractional) number of 86400-second days
    after ``origin``.

    The origin must be an :class:`Instant`: the fraction encodes a time
    of day, which a :class:`CivilDate` doesn't have.
    Use :meth:`CivilDate.at` to give a date a time.

    >>> from_fractional_day_offset(Instant(2014, 1, 1), 1.75)
    Instant(2014-01-02 18:00:00+00:00[UTC])
    """
    if isinstance(origin, CivilDate):
        raise TypeError(
            "A fractional day offset needs an Instant origin, "
            "since the fraction encodes a time of day. "
            "Use CivilDate.at() to give the date a time."
        )
    if not isinstance(origin, Instant):
        raise TypeError(f"origin must be an Instant, got {origin!r}")

    def shift(d: Number) -> Instant:
        return origin.add_seconds(_scale(_exact(d), 86_400))

    return _map_offsets(shift, days, return_exceptions)


def _map_offsets(
    shift: Callable[[_T], _R],
    offsets: _T | Iterable[_T],
    return_exceptions: bool,
) -> _R | List[_R | Exception]:
    if isinstance(offsets, (str, bytes)) or not isinstance(offsets, Iterable):
        return shift(offsets)  # type: ignore[arg-type]
    results: List[_R | Exception] = []
    for index, offset in enumerate(offsets):
        try:
            results.append(shift(offset))
        except (TypeError, ValueError) as e:
            if not return_exceptions:
                raise type(e)(f"offset #{index} ({offset!r}): {e}") from e
            logger.debug("Offset #%d (%r) failed: %s", index, offset, e)
            results.append(e)
    return results


def list_supported_timezones() -> list[str]:
    """All timezone IDs that can be used, sorted.

    These are the IANA IDs known to :mod:`zoneinfo`, from the system
    or the ``tzdata`` package, plus ``"UTC"``.
    """
    return sorted(_timezone_registry())


@lru_cache(maxsize=None)
def _timezone_registry() -> frozenset[str]:
    keys = frozenset(available_timezones() | {"UTC"})
    logger.debug("Loaded %d timezone IDs", len(keys))
    return keys


def _check_tz(tz: str | None) -> _tzinfo | None:
    # None is the system timezone, which datetime.astimezone() understands
    if tz is None:
        return None
    elif tz == "UTC":
        return _UTC
    elif not isinstance(tz, str):
        raise TypeError(f"Timezone must be a string or None, got {tz!r}")
    elif tz not in _timezone_registry():
        raise UnknownTimezone.for_key(tz)
    return ZoneInfo(tz)


def hours(i: Number, /) -> Duration:
    """Create a :class:`~Duration` with the given number of hours.
    ``hours(1) == Duration(hours=1)``
    """
    return Duration(hours=i)


def minutes(i: Number, /) -> Duration:
    """Create a :class:`Duration` with the given number of minutes.
    ``minutes(1) == Duration(minutes=1)``
    """
    return Duration(minutes=i)


class TemporalError(ValueError):
    """Base class for the errors raised by this library"""


class FormatMismatch(TemporalError):
    """A string doesn't have the required shape"""

    @staticmethod
    def for_shape(s: str, shape: str) -> FormatMismatch:
        return FormatMismatch(f"{s!r} doesn't match the format {shape}")


class AmbiguousOrder(TemporalError):
    """A parse order doesn't account for the components of a string"""

    @staticmethod
    def for_counts(text: str, order: ParseOrder, found: int) -> AmbiguousOrder:
        return AmbiguousOrder(
            f"{text!r} has {found} component(s), "
            f"but parse order '{order}' expects {len(order.fields)}"
        )


class OutOfRange(TemporalError):
    """A field is outside its calendar or clock domain, e.g. month 13"""

    @staticmethod
    def for_field(name: str, value: int, low: int, high: int) -> OutOfRange:
        return OutOfRange(f"{name} must be in {low}..{high}, got {value}")


class DoesntExistInZone(OutOfRange):
    """A wall clock time doesn't exist in a timezone, e.g. because of DST"""

    @staticmethod
    def for_timezone(d: _datetime, tz: str) -> DoesntExistInZone:
        return DoesntExistInZone(
            f"{d.replace(tzinfo=None)} doesn't exist in timezone {tz}"
        )

    @staticmethod
    def for_system_timezone(d: _datetime) -> DoesntExistInZone:
        return DoesntExistInZone(
            f"{d.replace(tzinfo=None)} doesn't exist in the system timezone"
        )


class Ambiguous(TemporalError):
    """A wall clock time occurs twice in a timezone"""

    @staticmethod
    def for_timezone(d: _datetime, tz: str) -> Ambiguous:
        return Ambiguous(
            f"{d.replace(tzinfo=None)} is ambiguous in timezone {tz}"
        )

    @staticmethod
    def for_system_timezone(d: _datetime) -> Ambiguous:
        return Ambiguous(
            f"{d.replace(tzinfo=None)} is ambiguous in the system timezone"
        )


class RangeOverflow(TemporalError, OverflowError):
    """The result of an operation is outside the supported range"""

    @staticmethod
    def for_nanos(ns: int) -> RangeOverflow:
        return RangeOverflow(
            f"{ns} nanoseconds since the epoch is outside the supported "
            f"range ({Instant.MIN} to {Instant.MAX} UTC)"
        )

    @staticmethod
    def for_days(days: int) -> RangeOverflow:
        return RangeOverflow(
            f"{days} days since the epoch is outside the supported "
            "range (0001-01-01 to 9999-12-31)"
        )


class UnknownTimezone(TemporalError, ZoneInfoNotFoundError):
    """A timezone ID isn't in :func:`list_supported_timezones`"""

    # KeyError would put quotes around the message
    __str__ = TemporalError.__str__

    @staticmethod
    def for_key(tz: str) -> UnknownTimezone:
        return UnknownTimezone(f"Unknown timezone ID: {tz!r}")


def _check_date(year: int, month: int, day: int) -> _date:
    if not 1 <= year <= 9999:
        raise OutOfRange.for_field("year", year, 1, 9999)
    if not 1 <= month <= 12:
        raise OutOfRange.for_field("month", month, 1, 12)
    if not 1 <= day <= (last := monthrange(year, month)[1]):
        raise OutOfRange.for_field("day", day, 1, last)
    return _date(year, month, day)


def _check_time(hour: int, minute: int, second: int, nanosecond: int) -> None:
    if not 0 <= hour <= 23:
        raise OutOfRange.for_field("hour", hour, 0, 23)
    if not 0 <= minute <= 59:
        raise OutOfRange.for_field("minute", minute, 0, 59)
    if not 0 <= second <= 59:
        raise OutOfRange.for_field("second", second, 0, 59)
    if not 0 <= nanosecond < _NS_PER_SEC:
        raise OutOfRange.for_field(
            "nanosecond", nanosecond, 0, _NS_PER_SEC - 1
        )


def _wall_to_ns(
    d: _date,
    hour: int,
    minute: int,
    second: int,
    nanosecond: int,
    tz: str | None,
    disambiguate: Disambiguate,
) -> int:
    _check_time(hour, minute, second, nanosecond)
    zone = _check_tz(tz)
    microsecond, sub_us = divmod(nanosecond, 1_000)
    naive = _datetime(
        d.year,
        d.month,
        d.day,
        hour,
        minute,
        second,
        microsecond,
        fold=_as_fold(disambiguate),
    )
    try:
        if zone is None:
            dt = _resolve_local_ambiguity(naive, disambiguate)
        else:
            dt = _resolve_ambiguity(
                naive.replace(tzinfo=zone),
                zone,
                tz,  # type: ignore[arg-type]
                disambiguate,
            )
        ns = _ns_from_py(dt) + sub_us
    except OverflowError as e:
        raise RangeOverflow(
            f"{naive} in {tz or 'the system timezone'} "
            "is outside the supported range"
        ) from e
    if not _MIN_NS <= ns <= _MAX_NS:
        raise RangeOverflow.for_nanos(ns)
    return ns


def _resolve_ambiguity(
    dt: _datetime, zone: _tzinfo, key: str, disambiguate: Disambiguate
) -> _datetime:
    dt_utc = dt.astimezone(_UTC)
    # Non-existent times: they don't survive a UTC roundtrip
    if dt_utc.astimezone(zone) != dt:
        if disambiguate == "raise":
            raise DoesntExistInZone.for_timezone(dt, key)
        elif disambiguate != "compatible":  # i.e. "earlier" or "later"
            # In gaps, the relationship between
            # fold and earlier/later is reversed
            dt = dt.replace(fold=not dt.fold)
        # perform the normalisation, shifting away from non-existent times
        dt = dt.astimezone(_UTC).astimezone(zone)
    # Ambiguous times: they're never equal to other timezones
    elif disambiguate == "raise" and dt_utc != dt:
        raise Ambiguous.for_timezone(dt, key)
    return dt


# Whether the fold of a local time needs to be flipped in a gap
# was changed (fixed) in Python 3.12. See cpython/issues/83861
_requires_flip: Callable[[Disambiguate], bool]
if sys.version_info > (3, 12):
    _requires_flip = "compatible".__ne__
else:  # pragma: no cover
    _requires_flip = "compatible".__eq__


def _resolve_local_ambiguity(
    dt: _datetime, disambiguate: Disambiguate
) -> _datetime:
    norm = dt.astimezone(_UTC).astimezone()
    # Non-existent times: they don't survive a UTC roundtrip
    if norm.replace(tzinfo=None) != dt:
        if disambiguate == "raise":
            raise DoesntExistInZone.for_system_timezone(dt)
        elif _requires_flip(disambiguate):
            dt = dt.replace(fold=not dt.fold)
        # perform the normalisation, shifting away from non-existent times
        norm = dt.astimezone(_UTC).astimezone()
    # Ambiguous times: they're never equal to other timezones
    elif disambiguate == "raise" and norm != dt.replace(fold=1).astimezone(
        _UTC
    ):
        raise Ambiguous.for_system_timezone(dt)
    return norm


def _delta_to_ns(delta: _timedelta) -> int:
    return (
        delta.days * 86_400 + delta.seconds
    ) * _NS_PER_SEC + delta.microseconds * 1_000


def _ns_from_py(d: _datetime) -> int:
    return _delta_to_ns(d - _EPOCH_UTC)


def _exact(value: Number, /) -> int | Decimal | Fraction:
    # bool is an int, but almost certainly a mistake here
    if isinstance(value, bool):
        raise TypeError("Expected a number, got a bool")
    if isinstance(value, (int, Fraction)):
        return value
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Decimal):
        exact = value
    elif isinstance(value, Real):
        # floats are read at their shortest repr, so 0.1 means one tenth
        exact = Decimal(repr(float(value)))
    else:
        raise TypeError(f"Expected a number, got {value!r}")
    if exact.is_nan():
        raise ValueError("NaN can't be used as an amount of time")
    if exact.is_infinite():
        raise RangeOverflow("An infinite amount of time is out of range")
    return exact


def _round_exact(value: int | Decimal | Fraction) -> int:
    if isinstance(value, Decimal):
        return int(value.to_integral_value(ROUND_HALF_EVEN))
    return round(value)


def _scale(
    exact: int | Decimal | Fraction, factor: int
) -> int | Decimal | Fraction:
    if not isinstance(exact, Decimal):
        return exact * factor
    try:
        return _DECIMAL.multiply(exact, factor)
    except Overflow as e:
        raise RangeOverflow(f"{exact} is too large an amount of time") from e


def _to_nanos(value: Number, unit: int) -> int:
    return _round_exact(_scale(_exact(value), unit))


# Helpers that pre-compute/lookup as much as possible
_T = TypeVar("_T")
_R = TypeVar("_R")
_UTC = _timezone.utc
_object_new = object.__new__
_NS_PER_SEC = 1_000_000_000
_NS_PER_DAY = 86_400 * _NS_PER_SEC
_EPOCH_ORDINAL = _date(1970, 1, 1).toordinal()
_EPOCH_UTC = _datetime(1970, 1, 1, tzinfo=_UTC)
_EPOCH_NAIVE = _datetime(1970, 1, 1)
_MIN_DAYS = _date.min.toordinal() - _EPOCH_ORDINAL
_MAX_DAYS = _date.max.toordinal() - _EPOCH_ORDINAL
# One day of margin on both ends, so every instant has a local time
# in every timezone
_MIN_NS = (_MIN_DAYS + 1) * _NS_PER_DAY
_MAX_NS = _MAX_DAYS * _NS_PER_DAY - 1
# Enough precision for any nanosecond count in range, with room to spare
_DECIMAL = Context(prec=60)
_DATE_FIELDS = frozenset(["year", "month", "day"])
_ORDER_FIELDS = {
    "y": "year",
    "d": "day",
    "h": "hour",
    "min": "minute",
    "s": "second",
}
_ORDER_TOKEN = re.compile(
    r"(?P<field>min|[ymdhs])|[\s_\-/:.,]+|(?P<bad>.)", re.IGNORECASE
)
# non-ASCII digits form their own tokens, which no numeric field accepts
_match_token = re.compile(r"[0-9]+|[^\W\d_]+|\d+").finditer
_match_digits = re.compile(r"[0-9]+").fullmatch
_match_directive = re.compile(r"%(OS[0-9]?|.?)", re.DOTALL).sub
_match_date_str = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})").fullmatch
_match_instant_str = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2}) "
    r"([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{1,9}))?"
).fullmatch
_match_duration = re.compile(
    r"([-+]?)([0-9]{2,}):([0-5][0-9]):([0-5][0-9])(?:\.([0-9]{1,9}))?"
).fullmatch

CivilDate.MIN = CivilDate.from_days_since_epoch(_MIN_DAYS)
CivilDate.MAX = CivilDate.from_days_since_epoch(_MAX_DAYS)
Instant.MIN = Instant._from_ns(_MIN_NS, "UTC")
Instant.MAX = Instant._from_ns(_MAX_NS, "UTC")
Instant.EPOCH = Instant._from_ns(0, "UTC")
Disambiguate = Literal["compatible", "earlier", "later", "raise"]
Fold = Literal[0, 1]
_as_fold: Callable[[Disambiguate], Fold] = {  # type: ignore[assignment]
    "compatible": 0,
    "earlier": 0,
    "later": 1,
    "raise": 0,
}.__getitem__

Duration.ZERO = Duration()

ymd = _date_parser("ymd")
ydm = _date_parser("ydm")
mdy = _date_parser("mdy")
myd = _date_parser("myd")
dmy = _date_parser("dmy")
dym = _date_parser("dym")
ymd_hms = _instant_parser("ymd hms")
ymd_hm = _instant_parser("ymd hm")
ymd_h = _instant_parser("ymd h")
ydm_hms = _instant_parser("ydm hms")
ydm_hm = _instant_parser("ydm hm")
ydm_h = _instant_parser("ydm h")
mdy_hms = _instant_parser("mdy hms")
mdy_hm = _instant_parser("mdy hm")
mdy_h = _instant_parser("mdy h")
dmy_hms = _instant_parser("dmy hms")
dmy_hm = _instant_parser("dmy hm")
dmy_h = _instant_parser("dmy h")
