"""Date, calendar, and time arithmetic helpers.

Everything here works on the proleptic Gregorian calendar with plain
integers, so it isn't limited to the years 1-9999 like :mod:`datetime`.
"""

from typing import NamedTuple

from ._common import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND

# Days in a full 400-year Gregorian cycle. The calendar repeats exactly
# after each cycle, weekdays included.
DAYS_PER_CYCLE = 146_097
MS_PER_CYCLE = DAYS_PER_CYCLE * MS_PER_DAY

# Days from 0000-03-01 to 1970-01-01
_EPOCH_SHIFT = 719_468


class Fields(NamedTuple):
    """Calendar fields of a (wall clock) millisecond count"""

    year: int
    month: int  # 1-12
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 of a valid calendar date"""
    year -= month <= 2
    era = year // 400
    yoe = year - era * 400
    doy = (153 * ((month + 9) % 12) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * DAYS_PER_CYCLE + doe - _EPOCH_SHIFT


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of :func:`days_from_civil`"""
    days += _EPOCH_SHIFT
    era = days // DAYS_PER_CYCLE
    doe = days - era * DAYS_PER_CYCLE
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    return yoe + era * 400 + (month <= 2), month, day


def make_day(year: int, month: int, day: int) -> int:
    """Day number for possibly overflowing fields.

    Months outside 1-12 carry into the year, and days outside the month
    spill into the neighbouring months (day 0 is the last day of the
    previous month).
    """
    year_delta, month0 = divmod(month - 1, 12)
    return days_from_civil(year + year_delta, month0 + 1, 1) + day - 1


def make_time(hour: int, minute: int, second: int, millisecond: int) -> int:
    return (
        hour * MS_PER_HOUR
        + minute * MS_PER_MINUTE
        + second * MS_PER_SECOND
        + millisecond
    )


def join_fields(f: Fields) -> int:
    """Millisecond count of the given fields, normalizing any overflow"""
    return make_day(f.year, f.month, f.day) * MS_PER_DAY + make_time(
        f.hour, f.minute, f.second, f.millisecond
    )


def split_millis(ms: int) -> Fields:
    days, rest = divmod(ms, MS_PER_DAY)
    hour, rest = divmod(rest, MS_PER_HOUR)
    minute, rest = divmod(rest, MS_PER_MINUTE)
    second, millisecond = divmod(rest, MS_PER_SECOND)
    return Fields(*civil_from_days(days), hour, minute, second, millisecond)


def add_months(f: Fields, months: int) -> Fields:
    """Shift by whole months, clamping the day to the destination month."""
    year_delta, month0_new = divmod(f.month - 1 + months, 12)
    year_new = f.year + year_delta
    month_new = month0_new + 1
    return f._replace(
        year=year_new,
        month=month_new,
        day=min(f.day, days_in_month(year_new, month_new)),
    )


def replace_year_saturating(f: Fields, year: int) -> Fields:
    # only matters when we move Feb 29 to a non-leap year
    if f.month == 2 and f.day == 29 and not is_leap(year):
        return f._replace(year=year, day=28)
    return f._replace(year=year)


def round_half_up_div(n: int, d: int) -> int:
    """Integer division rounding halves towards positive infinity"""
    return (2 * n + d) // (2 * d)
