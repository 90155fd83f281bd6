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
#   - The functions share a handful of private helpers
#     (_to_millis, _local_fields, _from_local_fields) and nothing else
# - Internally, instants are plain ints (milliseconds since the epoch),
#   with None standing in for an invalid instant. Only at the public
#   boundary are they wrapped in ``Instant``.
# - Three failure conventions coexist, each on purpose:
#   - calculations return an invalid Instant (or NaN for differences)
#   - predicates return False
#   - compare() raises, since -1/0/1 can't express "invalid"
from __future__ import annotations

__version__ = "0.1.0"

import math
from dataclasses import dataclass
from datetime import datetime as _datetime, timedelta as _timedelta
from time import time_ns
from typing import (
    TYPE_CHECKING,
    ClassVar,
    Optional,
    Union,
)

from ._common import (
    EPOCH as _EPOCH,
    FLAT_UNIT_MILLIS as _FLAT_UNIT_MILLIS,
    MILLIS_MAX as _MILLIS_MAX,
    MILLIS_MIN as _MILLIS_MIN,
    MS_PER_DAY as _MS_PER_DAY,
    Bounds,
    MaybeMillis,
    Millis,
    SortOrder,
    TimeUnit,
    check_unit as _check_unit,
    in_range as _in_range,
)
from ._math import (
    Fields as _Fields,
    add_months as _add_months,
    days_in_month as _days_in_month,
    join_fields as _join_fields,
    replace_year_saturating as _replace_year_saturating,
    round_half_up_div as _round_half_up_div,
    split_millis as _split_millis,
)
from ._parse import parse_iso as _parse_iso
from ._tz import (
    TimeZoneNotFoundError,
    available_timezones,
    canonical_key as _canonical_key,
    clear_tzcache,
    get_system_tz as _get_system_tz,
    get_tz as _get_tz,
    offset_for_instant as _offset_for_instant,
    offset_for_local as _offset_for_local,
    reset_system_tz,
)

__all__ = [
    # Types
    "Instant",
    "TZ",
    "DateInput",
    "TimeUnit",
    "SortOrder",
    "Bounds",
    # Exceptions
    "InvalidDateError",
    "TimeZoneNotFoundError",
    # Constants
    "MIN_DATE",
    "MAX_DATE",
    "UTC",
    "JST",
    "EST",
    "PST",
    "GMT",
    # Validation
    "is_valid",
    "is_date",
    "is_exists",
    # Current time
    "now",
    "is_future",
    "is_past",
    # Truncation
    "truncate_to_unit",
    "trunc_year",
    "trunc_month",
    "trunc_day",
    "trunc_hour",
    "trunc_minute",
    "trunc_second",
    "trunc_millisecond",
    "start_of_year",
    "start_of_month",
    "start_of_day",
    "end_of_year",
    "end_of_month",
    "end_of_day",
    # Arithmetic
    "add_unit",
    "sub_unit",
    "add_years",
    "add_months",
    "add_days",
    "add_hours",
    "add_minutes",
    "add_seconds",
    "add_milliseconds",
    "sub_years",
    "sub_months",
    "sub_days",
    "sub_hours",
    "sub_minutes",
    "sub_seconds",
    "sub_milliseconds",
    # Differences
    "diff_years",
    "diff_months",
    "diff_days",
    "diff_hours",
    "diff_minutes",
    "diff_seconds",
    "diff_milliseconds",
    # Setters
    "set_year",
    "set_month",
    "set_day",
    "set_hours",
    "set_minutes",
    "set_seconds",
    "set_milliseconds",
    "set_time",
    # Comparison
    "compare",
    "is_before",
    "is_after",
    "is_equal",
    "is_before_or_equal",
    "is_after_or_equal",
    "is_between",
    "is_same_year",
    "is_same_month",
    "is_same_day",
    "is_same_hour",
    "is_same_minute",
    "is_same_second",
    "clamp",
    "earliest",
    "latest",
    # Timezones
    "is_valid_time_zone",
    "normalize_time_zone",
    "get_time_zone_offset",
    "available_timezones",
    "clear_tzcache",
    "reset_system_tz",
]

_NAIVE_EPOCH = _EPOCH.replace(tzinfo=None)
_ONE_MS = _timedelta(milliseconds=1)
_object_new = object.__new__


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = classmethod(init_subclass_not_allowed)
        return cls


class InvalidDateError(ValueError):
    """A value doesn't denote a valid instant"""

    @classmethod
    def for_operand(cls, value: object) -> InvalidDateError:
        return cls(f"Invalid date: {value!r}")


@final
class Instant:
    """A point in time, with millisecond precision.

    Internally, it's a count of milliseconds since 1970-01-01T00:00:00Z,
    within :attr:`MIN` and :attr:`MAX` (about 275,000 years either way).

    Like JavaScript's ``Date``, an instant may also be *invalid*.
    Functions return invalid instants instead of raising when given
    unusable input. An invalid instant is unequal to everything,
    including itself.

    Example
    -------
    >>> Instant("2024-01-15T10:30:00Z")
    Instant(2024-01-15T10:30:00.000Z)
    >>> Instant(1_705_314_600_000)
    Instant(2024-01-15T10:30:00.000Z)
    >>> Instant("not a date")
    Instant(<invalid>)
    >>> Instant("not a date").is_valid()
    False

    Note
    ----
    Instants can be changed in-place with :func:`set_time`,
    which is why they aren't hashable.
    """

    __slots__ = ("_millis",)

    _millis: MaybeMillis

    MIN: ClassVar[Instant]
    """The minimum representable instant"""
    MAX: ClassVar[Instant]
    """The maximum representable instant"""

    def __init__(self, value: DateInput, /) -> None:
        self._millis = _to_millis(value)

    @classmethod
    def from_local(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> Instant:
        """Create an instant from calendar fields in the system timezone.

        Local times skipped by a DST transition are moved forward,
        repeated local times resolve to the earlier instant.

        Example
        -------
        >>> Instant.from_local(2024, 1, 15, 10, 30)
        """
        fields = _checked_fields(
            year, month, day, hour, minute, second, millisecond
        )
        if (ms := _from_local_fields(fields)) is None:
            raise ValueError("Instant out of range")
        return cls._from_millis_unchecked(ms)

    @classmethod
    def from_utc(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> Instant:
        """Create an instant from calendar fields in UTC."""
        ms = _join_fields(
            _checked_fields(
                year, month, day, hour, minute, second, millisecond
            )
        )
        if not _in_range(ms):
            raise ValueError("Instant out of range")
        return cls._from_millis_unchecked(ms)

    @classmethod
    def from_timestamp_millis(cls, i: int, /) -> Instant:
        """Create an instant from a UNIX timestamp (in milliseconds).

        The inverse of the ``timestamp_millis()`` method.
        """
        if not isinstance(i, int) or isinstance(i, bool):
            raise TypeError("method requires an integer")
        if not _in_range(i):
            raise ValueError("Instant out of range")
        return cls._from_millis_unchecked(i)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> Instant:
        """Create from a standard library ``datetime``.

        Naive datetimes are read as local time in the system timezone.
        """
        if not isinstance(d, _datetime):
            raise TypeError(f"Expected datetime, got {type(d)!r}")
        if (ms := _millis_from_py(d)) is None:
            raise ValueError("Instant out of range")
        return cls._from_millis_unchecked(ms)

    @classmethod
    def now(cls) -> Instant:
        """Create an instant from the current time."""
        return cls._from_millis_unchecked(_now_millis())

    def is_valid(self) -> bool:
        return self._millis is not None

    def timestamp_millis(self) -> int:
        """The UNIX timestamp in milliseconds

        Raises
        ------
        InvalidDateError
            If the instant is invalid
        """
        if self._millis is None:
            raise InvalidDateError.for_operand(self)
        return self._millis

    def py_datetime(self) -> _datetime:
        """Convert to an aware standard library ``datetime`` in UTC.

        Raises ``ValueError`` if the instant is invalid or beyond the
        years 1-9999 supported by ``datetime``.
        """
        if self._millis is None:
            raise InvalidDateError.for_operand(self)
        try:
            return _EPOCH + _timedelta(milliseconds=self._millis)
        except OverflowError:
            raise ValueError("Instant out of range for datetime") from None

    def format_common_iso(self) -> str:
        """Format as ``YYYY-MM-DDTHH:mm:ss.sssZ``.

        Years outside 0-9999 are written with a sign and six digits,
        e.g. ``+275760-09-13T00:00:00.000Z``.
        """
        if self._millis is None:
            raise InvalidDateError.for_operand(self)
        f = _split_millis(self._millis)
        year = (
            f"{f.year:04d}" if 0 <= f.year <= 9999 else f"{f.year:+07d}"
        )
        return (
            f"{year}-{f.month:02d}-{f.day:02d}T{f.hour:02d}:{f.minute:02d}"
            f":{f.second:02d}.{f.millisecond:03d}Z"
        )

    def copy(self) -> Instant:
        return self._from_millis_unchecked(self._millis)

    __copy__ = copy

    def __deepcopy__(self, _) -> Instant:
        return self.copy()

    def __str__(self) -> str:
        if self._millis is None:
            return "Invalid Date"
        return self.format_common_iso()

    def __repr__(self) -> str:
        if self._millis is None:
            return "Instant(<invalid>)"
        return f"Instant({self.format_common_iso()})"

    def __eq__(self, other: object) -> bool:
        """Compare for equality. Invalid instants are never equal,
        not even to themselves.

        Example
        -------
        >>> Instant(0) == Instant("1970-01-01T00:00Z")
        True
        >>> bad = Instant(float("nan"))
        >>> bad == bad
        False
        """
        if not isinstance(other, Instant):
            return NotImplemented
        return self._millis is not None and self._millis == other._millis

    # Mutable through set_time()
    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        a, b = self._millis, other._millis
        return a is not None and b is not None and a < b

    def __le__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        a, b = self._millis, other._millis
        return a is not None and b is not None and a <= b

    def __gt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        a, b = self._millis, other._millis
        return a is not None and b is not None and a > b

    def __ge__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        a, b = self._millis, other._millis
        return a is not None and b is not None and a >= b

    @classmethod
    def _from_millis_unchecked(cls, ms: MaybeMillis, /) -> Instant:
        self = _object_new(cls)
        self._millis = ms
        return self

    def __reduce__(self) -> tuple[object, ...]:
        return _unpkl_inst, (self._millis,)


# A separate unpickling function allows us to make backwards-compatible changes
def _unpkl_inst(ms: MaybeMillis) -> Instant:
    return Instant._from_millis_unchecked(ms)


Instant.MIN = Instant._from_millis_unchecked(_MILLIS_MIN)
Instant.MAX = Instant._from_millis_unchecked(_MILLIS_MAX)

MIN_DATE = Instant.MIN
"""The earliest representable instant: -271821-04-20T00:00:00.000Z"""
MAX_DATE = Instant.MAX
"""The latest representable instant: +275760-09-13T00:00:00.000Z"""

DateInput = Union[Instant, int, float, str, _datetime]


def _invalid() -> Instant:
    return Instant._from_millis_unchecked(None)


def _checked_fields(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    millisecond: int,
) -> _Fields:
    fields = _Fields(year, month, day, hour, minute, second, millisecond)
    for name, value in zip(_Fields._fields, fields):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an integer, got {value!r}")
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    if not 1 <= day <= _days_in_month(year, month):
        raise ValueError(f"day is out of range for month: {day}")
    if not 0 <= hour <= 23:
        raise ValueError(f"hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute out of range: {minute}")
    if not 0 <= second <= 59:
        raise ValueError(f"second out of range: {second}")
    if not 0 <= millisecond <= 999:
        raise ValueError(f"millisecond out of range: {millisecond}")
    return fields


# ---------------------------------------------------------------------------
# Local time
# ---------------------------------------------------------------------------


def _to_wall(ms: Millis) -> Millis:
    return ms + _offset_for_instant(_get_system_tz(), ms) * 1_000


def _from_wall(wall: int) -> MaybeMillis:
    # No offset exceeds a day, so this saves pointless lookups
    if not _MILLIS_MIN - _MS_PER_DAY <= wall <= _MILLIS_MAX + _MS_PER_DAY:
        return None
    ms = wall - _offset_for_local(_get_system_tz(), wall) * 1_000
    return ms if _in_range(ms) else None


def _local_fields(ms: Millis) -> _Fields:
    return _split_millis(_to_wall(ms))


def _from_local_fields(f: _Fields) -> MaybeMillis:
    """Instant of local calendar fields, which may overflow"""
    return _from_wall(_join_fields(f))


# ---------------------------------------------------------------------------
# Validation & normalization
# ---------------------------------------------------------------------------


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    elif isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _millis_from_py(d: _datetime) -> MaybeMillis:
    if d.tzinfo is None or d.utcoffset() is None:
        return _from_wall((d - _NAIVE_EPOCH) // _ONE_MS)
    return (d - _EPOCH) // _ONE_MS


def _millis_from_str(s: str) -> MaybeMillis:
    try:
        fields, offset = _parse_iso(s)
    except ValueError:
        return None
    if offset is None:
        return _from_local_fields(fields)
    ms = _join_fields(fields) - offset * 1_000
    return ms if _in_range(ms) else None


def _to_millis(value: object) -> MaybeMillis:
    """The milliseconds of any date input, or None if it's invalid.
    Never raises."""
    if isinstance(value, Instant):
        return value._millis
    elif isinstance(value, bool):
        return None
    elif isinstance(value, int):
        return value if _in_range(value) else None
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        ms = int(value)  # truncates toward zero
        return ms if _in_range(ms) else None
    elif isinstance(value, str):
        return _millis_from_str(value)
    elif isinstance(value, _datetime):
        return _millis_from_py(value)
    return None


def _to_millis_all(*values: object) -> Optional[tuple[Millis, ...]]:
    # Stops at the first invalid value, so later ones aren't converted
    result = []
    for v in values:
        if (ms := _to_millis(v)) is None:
            return None
        result.append(ms)
    return tuple(result)


def is_valid(value: object, /) -> bool:
    """Whether the value is a date input denoting a valid instant.

    Never raises.

    Example
    -------
    >>> is_valid("2024-01-15")
    True
    >>> is_valid(float("inf"))
    False
    >>> is_valid(Instant("2024-13-01"))
    False
    """
    return _to_millis(value) is not None


def is_date(value: object, /) -> bool:
    """Whether the value is an :class:`Instant`, valid or not."""
    return isinstance(value, Instant)


def is_exists(year: float, month: float, day: float) -> bool:
    """Whether the (1-based) calendar date exists.

    Fractional arguments are truncated toward zero.

    Example
    -------
    >>> is_exists(2024, 2, 29)
    True
    >>> is_exists(2023, 2, 29)
    False
    """
    if not (_is_number(year) and _is_number(month) and _is_number(day)):
        return False
    y, m, d = int(year), int(month), int(day)
    return 1 <= m <= 12 and 1 <= d <= _days_in_month(y, m)


# ---------------------------------------------------------------------------
# Current time
# ---------------------------------------------------------------------------


def _now_millis() -> Millis:
    return time_ns() // 1_000_000


def now() -> Instant:
    """The current time. Alias for :meth:`Instant.now`."""
    return Instant._from_millis_unchecked(_now_millis())


def is_future(date: DateInput, /) -> bool:
    """Whether the date is strictly after the current time."""
    return (ms := _to_millis(date)) is not None and ms > _now_millis()


def is_past(date: DateInput, /) -> bool:
    """Whether the date is strictly before the current time."""
    return (ms := _to_millis(date)) is not None and ms < _now_millis()


# ---------------------------------------------------------------------------
# Truncation
# ---------------------------------------------------------------------------


def _truncate(ms: Millis, unit: TimeUnit) -> MaybeMillis:
    # Done field-by-field in local time. Subtracting a fixed duration
    # would go wrong across DST transitions.
    if unit == "millisecond":
        return ms
    f = _local_fields(ms)
    if unit == "year":
        f = _Fields(f.year, 1, 1)
    elif unit == "month":
        f = _Fields(f.year, f.month, 1)
    elif unit == "day":
        f = _Fields(f.year, f.month, f.day)
    elif unit == "hour":
        f = f._replace(minute=0, second=0, millisecond=0)
    elif unit == "minute":
        f = f._replace(second=0, millisecond=0)
    else:
        f = f._replace(millisecond=0)
    return _from_local_fields(f)


def truncate_to_unit(date: DateInput, unit: TimeUnit) -> Instant:
    """The start of the calendar period (in the system timezone)
    containing the date.

    Coarser fields are kept, finer fields are reset.
    An invalid date gives an invalid instant.

    Example
    -------
    >>> truncate_to_unit(Instant.from_local(2024, 6, 15, 14, 30), "month")
    ... == Instant.from_local(2024, 6, 1)
    True
    """
    unit = _check_unit(unit)
    if (ms := _to_millis(date)) is None:
        return _invalid()
    return Instant._from_millis_unchecked(_truncate(ms, unit))


def trunc_year(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "year")


def trunc_month(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "month")


def trunc_day(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "day")


def trunc_hour(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "hour")


def trunc_minute(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "minute")


def trunc_second(date: DateInput, /) -> Instant:
    return truncate_to_unit(date, "second")


def trunc_millisecond(date: DateInput, /) -> Instant:
    """A copy of the date. Instants have no sub-millisecond part."""
    return truncate_to_unit(date, "millisecond")


start_of_year = trunc_year
start_of_month = trunc_month
start_of_day = trunc_day


def _end_of(date: DateInput, unit: TimeUnit) -> Instant:
    if (ms := _to_millis(date)) is None:
        return _invalid()
    f = _local_fields(ms)
    if unit == "year":
        f = _Fields(f.year, 12, 31)
    elif unit == "month":
        f = _Fields(f.year, f.month, _days_in_month(f.year, f.month))
    else:
        f = _Fields(f.year, f.month, f.day)
    return Instant._from_millis_unchecked(
        _from_local_fields(
            f._replace(hour=23, minute=59, second=59, millisecond=999)
        )
    )


def end_of_year(date: DateInput, /) -> Instant:
    """The last millisecond of the date's (local) year"""
    return _end_of(date, "year")


def end_of_month(date: DateInput, /) -> Instant:
    """The last millisecond of the date's (local) month"""
    return _end_of(date, "month")


def end_of_day(date: DateInput, /) -> Instant:
    """The last millisecond of the date's (local) day"""
    return _end_of(date, "day")


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def _shift_months(ms: Millis, months: int) -> MaybeMillis:
    return _from_local_fields(_add_months(_local_fields(ms), months))


def add_unit(date: DateInput, amount: float, unit: TimeUnit) -> Instant:
    """Add an amount of the given unit to the date.

    The amount is truncated toward zero. Years and months are added
    to the local calendar fields, clamping the day to the length of the
    resulting month. Smaller units shift by an exact duration.

    Invalid input, or a result out of range, gives an invalid instant.

    Example
    -------
    >>> add_unit(Instant.from_local(2025, 1, 31), 1, "month")
    ... == Instant.from_local(2025, 2, 28)
    True
    """
    unit = _check_unit(unit)
    if (ms := _to_millis(date)) is None or not _is_number(amount):
        return _invalid()
    n = int(amount)
    if unit == "year":
        result = _shift_months(ms, n * 12)
    elif unit == "month":
        result = _shift_months(ms, n)
    else:
        result = ms + n * _FLAT_UNIT_MILLIS[unit]
        if not _in_range(result):
            result = None
    return Instant._from_millis_unchecked(result)


def sub_unit(date: DateInput, amount: float, unit: TimeUnit) -> Instant:
    """Subtract an amount of the given unit from the date.
    Equivalent to ``add_unit(date, -amount, unit)``.
    """
    unit = _check_unit(unit)
    if not _is_number(amount):
        return _invalid()
    return add_unit(date, -amount, unit)


def add_years(date: DateInput, amount: float) -> Instant:
    """Add years. Feb 29 becomes Feb 28 in non-leap years."""
    return add_unit(date, amount, "year")


def add_months(date: DateInput, amount: float) -> Instant:
    """Add months, clamping to the end of shorter months.

    >>> add_months(Instant.from_local(2024, 1, 31), 1)
    ... == Instant.from_local(2024, 2, 29)
    True
    """
    return add_unit(date, amount, "month")


def add_days(date: DateInput, amount: float) -> Instant:
    """Add days of exactly 24 hours."""
    return add_unit(date, amount, "day")


def add_hours(date: DateInput, amount: float) -> Instant:
    return add_unit(date, amount, "hour")


def add_minutes(date: DateInput, amount: float) -> Instant:
    return add_unit(date, amount, "minute")


def add_seconds(date: DateInput, amount: float) -> Instant:
    return add_unit(date, amount, "second")


def add_milliseconds(date: DateInput, amount: float) -> Instant:
    return add_unit(date, amount, "millisecond")


def sub_years(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "year")


def sub_months(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "month")


def sub_days(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "day")


def sub_hours(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "hour")


def sub_minutes(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "minute")


def sub_seconds(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "second")


def sub_milliseconds(date: DateInput, amount: float) -> Instant:
    return sub_unit(date, amount, "millisecond")


# ---------------------------------------------------------------------------
# Differences
# ---------------------------------------------------------------------------


def diff_years(left: DateInput, right: DateInput) -> Union[int, float]:
    """The difference in (local) calendar years, ignoring months and days.
    NaN for invalid input.

    >>> diff_years("2025-01-01", "2024-12-31")
    1
    """
    if (pair := _to_millis_all(left, right)) is None:
        return math.nan
    return _local_fields(pair[0]).year - _local_fields(pair[1]).year


def diff_months(left: DateInput, right: DateInput) -> Union[int, float]:
    """The difference in (local) calendar months, ignoring days.
    NaN for invalid input."""
    if (pair := _to_millis_all(left, right)) is None:
        return math.nan
    a, b = _local_fields(pair[0]), _local_fields(pair[1])
    return (a.year - b.year) * 12 + a.month - b.month


def _diff_flat(
    left: DateInput, right: DateInput, unit: TimeUnit
) -> Union[int, float]:
    # Compare the starts of both periods, so partial periods don't count.
    # Rounding absorbs days that are 23 or 25 hours long.
    if (
        (pair := _to_millis_all(left, right)) is None
        or (a := _truncate(pair[0], unit)) is None
        or (b := _truncate(pair[1], unit)) is None
    ):
        return math.nan
    return _round_half_up_div(a - b, _FLAT_UNIT_MILLIS[unit])


def diff_days(left: DateInput, right: DateInput) -> Union[int, float]:
    """The number of (local) calendar days between the dates.
    The time of day is ignored. NaN for invalid input.

    >>> diff_days("2024-01-02T00:01", "2024-01-01T23:59")
    1
    """
    return _diff_flat(left, right, "day")


def diff_hours(left: DateInput, right: DateInput) -> Union[int, float]:
    return _diff_flat(left, right, "hour")


def diff_minutes(left: DateInput, right: DateInput) -> Union[int, float]:
    return _diff_flat(left, right, "minute")


def diff_seconds(left: DateInput, right: DateInput) -> Union[int, float]:
    return _diff_flat(left, right, "second")


def diff_milliseconds(
    left: DateInput, right: DateInput
) -> Union[int, float]:
    return _diff_flat(left, right, "millisecond")


# ---------------------------------------------------------------------------
# Setters
# ---------------------------------------------------------------------------


def _with_field(date: DateInput, field: str, value: float) -> Instant:
    if (ms := _to_millis(date)) is None or not _is_number(value):
        return _invalid()
    f = _local_fields(ms)._replace(**{field: int(value)})
    # overflowing fields carry into the larger ones
    return Instant._from_millis_unchecked(_from_local_fields(f))


def set_year(date: DateInput, year: float) -> Instant:
    """A copy with the (local) year replaced.
    Feb 29 becomes Feb 28 in non-leap years."""
    if (ms := _to_millis(date)) is None or not _is_number(year):
        return _invalid()
    f = _replace_year_saturating(_local_fields(ms), int(year))
    return Instant._from_millis_unchecked(_from_local_fields(f))


def set_month(date: DateInput, month: float) -> Instant:
    """A copy with the (local, 1-based) month replaced.

    Months outside 1-12 carry into the year. The day is clamped to the
    length of the new month.

    >>> set_month(Instant.from_local(2024, 1, 31), 2)
    ... == Instant.from_local(2024, 2, 29)
    True
    """
    if (ms := _to_millis(date)) is None or not _is_number(month):
        return _invalid()
    f = _local_fields(ms)
    return Instant._from_millis_unchecked(
        _from_local_fields(_add_months(f, int(month) - f.month))
    )


def set_day(date: DateInput, day: float) -> Instant:
    """A copy with the (local) day of the month replaced.
    Days beyond the month spill into the next (or previous) month."""
    return _with_field(date, "day", day)


def set_hours(date: DateInput, hours: float) -> Instant:
    return _with_field(date, "hour", hours)


def set_minutes(date: DateInput, minutes: float) -> Instant:
    return _with_field(date, "minute", minutes)


def set_seconds(date: DateInput, seconds: float) -> Instant:
    return _with_field(date, "second", seconds)


def set_milliseconds(date: DateInput, milliseconds: float) -> Instant:
    return _with_field(date, "millisecond", milliseconds)


def set_time(instant: Instant, time: float) -> Instant:
    """Set the UNIX timestamp (in milliseconds) of an instant **in-place**.

    This is the only function which modifies its argument. It returns the
    same object it was given. A non-finite or out-of-range timestamp makes
    the instant invalid. Anything other than an :class:`Instant` gives a new
    invalid instant. The shared :data:`MIN_DATE` and :data:`MAX_DATE`
    constants are read-only: passing either raises :class:`TypeError`.

    Example
    -------
    >>> i = Instant(0)
    >>> set_time(i, 1_000) is i
    True
    >>> i
    Instant(1970-01-01T00:00:01.000Z)
    """
    if not isinstance(instant, Instant):
        return _invalid()
    if instant is Instant.MIN or instant is Instant.MAX:
        raise TypeError("MIN_DATE and MAX_DATE are read-only")
    instant._millis = _to_millis(time) if _is_number(time) else None
    return instant


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def compare(a: DateInput, b: DateInput, order: SortOrder = "ASC") -> int:
    """Compare two dates, giving -1, 0, or 1.

    The order is ``"ASC"`` (default) or ``"DESC"``, case-insensitive.
    Any other value means ascending.

    Suitable for sorting with :func:`functools.cmp_to_key`.

    Raises
    ------
    InvalidDateError
        If either date is invalid, so that sorting doesn't silently
        produce a wrong order.

    Example
    -------
    >>> compare("2024-01-01", "2024-01-02")
    -1
    >>> compare("2024-01-01", "2024-01-02", "DESC")
    1
    >>> sorted(dates, key=cmp_to_key(compare))
    """
    if (ms_a := _to_millis(a)) is None:
        raise InvalidDateError.for_operand(a)
    if (ms_b := _to_millis(b)) is None:
        raise InvalidDateError.for_operand(b)
    result = (ms_a > ms_b) - (ms_a < ms_b)
    if isinstance(order, str) and order.upper() == "DESC":
        return -result
    return result


def _truncated(
    values: tuple[object, ...], unit: TimeUnit
) -> Optional[list[Millis]]:
    if (millis := _to_millis_all(*values)) is None:
        return None
    result = []
    for ms in millis:
        if (t := _truncate(ms, unit)) is None:
            return None
        result.append(t)
    return result


def is_before(
    a: DateInput, b: DateInput, *, unit: TimeUnit = "millisecond"
) -> bool:
    """Whether ``a`` is strictly before ``b``, after truncating both to
    the unit. False for invalid input.

    >>> is_before("2024-01-01T10:00", "2024-01-01T11:00")
    True
    >>> is_before("2024-01-01T10:00", "2024-01-01T11:00", unit="day")
    False
    """
    unit = _check_unit(unit)
    return (p := _truncated((a, b), unit)) is not None and p[0] < p[1]


def is_after(
    a: DateInput, b: DateInput, *, unit: TimeUnit = "millisecond"
) -> bool:
    """Whether ``a`` is strictly after ``b``, after truncating both to
    the unit. False for invalid input."""
    unit = _check_unit(unit)
    return (p := _truncated((a, b), unit)) is not None and p[0] > p[1]


def is_equal(
    a: DateInput, b: DateInput, *, unit: TimeUnit = "millisecond"
) -> bool:
    """Whether the dates are equal, after truncating both to the unit.
    False for invalid input."""
    unit = _check_unit(unit)
    return (p := _truncated((a, b), unit)) is not None and p[0] == p[1]


def is_before_or_equal(
    a: DateInput, b: DateInput, *, unit: TimeUnit = "millisecond"
) -> bool:
    unit = _check_unit(unit)
    return (p := _truncated((a, b), unit)) is not None and p[0] <= p[1]


def is_after_or_equal(
    a: DateInput, b: DateInput, *, unit: TimeUnit = "millisecond"
) -> bool:
    unit = _check_unit(unit)
    return (p := _truncated((a, b), unit)) is not None and p[0] >= p[1]


def is_between(
    date: DateInput,
    start: Optional[DateInput],
    end: Optional[DateInput],
    *,
    unit: TimeUnit = "millisecond",
    bounds: Bounds = "[]",
) -> bool:
    """Whether the date lies between start and end.

    All three are truncated to the unit first. ``None`` for start or end
    leaves that side unbounded. Bounds are given in interval notation:
    ``"[]"`` (default) includes both ends, ``"()"`` excludes both,
    ``"[)"`` and ``"(]"`` include one. Unknown bounds mean ``"[]"``.

    False for invalid input.

    Example
    -------
    >>> is_between("2024-01-10", "2024-01-10", "2024-01-20")
    True
    >>> is_between("2024-01-10", "2024-01-10", "2024-01-20", bounds="()")
    False
    """
    unit = _check_unit(unit)
    if bounds not in ("()", "[)", "(]"):
        bounds = "[]"
    # unbounded sides aren't truncated, they may not survive it
    if (
        (p := _truncated((date,), unit)) is None
        or (start is not None and (lo := _truncated((start,), unit)) is None)
        or (end is not None and (hi := _truncated((end,), unit)) is None)
    ):
        return False
    t = p[0]
    if start is not None and (t < lo[0] or (bounds[0] == "(" and t == lo[0])):
        return False
    if end is not None and (t > hi[0] or (bounds[1] == ")" and t == hi[0])):
        return False
    return True


def is_same_year(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="year")


def is_same_month(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="month")


def is_same_day(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="day")


def is_same_hour(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="hour")


def is_same_minute(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="minute")


def is_same_second(a: DateInput, b: DateInput) -> bool:
    return is_equal(a, b, unit="second")


def clamp(date: DateInput, lower: DateInput, upper: DateInput) -> Instant:
    """The date, limited to the given range.
    Reversed bounds are swapped. Invalid input gives an invalid instant.
    """
    if (p := _to_millis_all(date, lower, upper)) is None:
        return _invalid()
    ms, lo, hi = p
    if lo > hi:
        lo, hi = hi, lo
    return Instant._from_millis_unchecked(max(lo, min(ms, hi)))


def earliest(*dates: DateInput) -> Instant:
    """The earliest of the dates. Invalid if any of them is.

    >>> earliest("2024-03-01T00:00Z", 0)
    Instant(1970-01-01T00:00:00.000Z)
    """
    if not dates:
        raise ValueError("earliest() requires at least one date")
    if (p := _to_millis_all(*dates)) is None:
        return _invalid()
    return Instant._from_millis_unchecked(min(p))


def latest(*dates: DateInput) -> Instant:
    """The latest of the dates. Invalid if any of them is."""
    if not dates:
        raise ValueError("latest() requires at least one date")
    if (p := _to_millis_all(*dates)) is None:
        return _invalid()
    return Instant._from_millis_unchecked(max(p))


# ---------------------------------------------------------------------------
# Timezones
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TZ:
    """A well-known timezone, tied to the IANA zone observing it.

    The offset is the standard (non-DST) offset, in minutes east of UTC.
    """

    identifier: str
    iana_name: str
    standard_offset: int
    observes_dst: bool


UTC = TZ("UTC", "UTC", 0, False)
"""Coordinated Universal Time"""
JST = TZ("JST", "Asia/Tokyo", 9 * 60, False)
"""Japan Standard Time (UTC+9, no DST)"""
EST = TZ("EST", "America/New_York", -5 * 60, True)
"""US Eastern Time (EST in winter, EDT in summer)"""
PST = TZ("PST", "America/Los_Angeles", -8 * 60, True)
"""US Pacific Time (PST in winter, PDT in summer)"""
GMT = TZ("GMT", "Europe/London", 0, True)
"""UK time (GMT in winter, BST in summer).
For GMT without DST, use :data:`UTC`."""


def normalize_time_zone(tz: Union[TZ, str], /) -> Optional[str]:
    """The IANA timezone ID as spelled by the database, or None
    if it isn't a known timezone.

    Strings are matched case-insensitively, ignoring surrounding whitespace.
    Offsets (``"+09:00"``) aren't timezones.

    >>> normalize_time_zone("  asia/tokyo ")
    'Asia/Tokyo'
    >>> normalize_time_zone(JST)
    'Asia/Tokyo'
    """
    name = tz.iana_name if isinstance(tz, TZ) else tz
    if not isinstance(name, str):
        return None
    try:
        return _canonical_key(name)
    except TimeZoneNotFoundError:
        return None


def is_valid_time_zone(tz: Union[TZ, str], /) -> bool:
    """Whether the value is a known timezone"""
    return normalize_time_zone(tz) is not None


def get_time_zone_offset(
    tz: Union[TZ, str], reference: Optional[DateInput] = None
) -> Optional[int]:
    """The UTC offset (in minutes east) of a timezone at the given
    date, or now if omitted. DST is taken into account.

    None if the timezone is unknown or the date is invalid.
    Historical offsets that aren't whole minutes are truncated.

    Example
    -------
    >>> get_time_zone_offset(EST, "2025-01-01T00:00Z")
    -300
    >>> get_time_zone_offset(EST, "2025-07-01T00:00Z")
    -240
    """
    if (key := normalize_time_zone(tz)) is None:
        return None
    ms = _now_millis() if reference is None else _to_millis(reference)
    if ms is None:
        return None
    try:
        zone = _get_tz(key)
    except TimeZoneNotFoundError:
        return None
    return int(_offset_for_instant(zone, ms) / 60)


# We expose the public members in the root of the module.
# For clarity, we remove the "_pychronia" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if callable(member) and getattr(member, "__module__", None) == __name__:
        member.__module__ = "chronia"

# clear up loop variables so they don't leak into the namespace
del name
del member

_unpkl_inst.__module__ = "chronia"


def _patch_time_frozen(inst: Instant) -> None:
    global time_ns

    def time_ns() -> int:
        return inst.timestamp_millis() * 1_000_000


def _patch_time_keep_ticking(inst: Instant) -> None:
    global time_ns

    _patched_at = time_ns()
    _time_ns = time_ns

    def time_ns() -> int:
        return inst.timestamp_millis() * 1_000_000 + _time_ns() - _patched_at


def _unpatch_time() -> None:
    global time_ns

    from time import time_ns
