"""Parsing of ISO 8601 date(time) strings

Accepted are the forms also understood by JavaScript's ``Date``:
``YYYY``, ``YYYY-MM`` and ``YYYY-MM-DD`` (or an expanded ``±YYYYYY`` year),
optionally followed by ``THH:mm``, ``THH:mm:ss`` or ``THH:mm:ss.sss``,
optionally followed by ``Z`` or a ``±HH:mm`` offset.
"""

import re
from typing import NoReturn, Optional

from ._math import Fields, days_in_month

_match_iso = re.compile(
    r"([+-]\d{6}|\d{4})"  # year
    r"(?:-(\d{2})(?:-(\d{2}))?)?"  # month, day
    r"(?:[Tt ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?"  # time
    r"([Zz]|[+-]\d{2}(?::?\d{2})?)?)?",  # offset
    re.ASCII,
).fullmatch


def _parse_err(s: str) -> NoReturn:
    raise ValueError(f"Invalid format: {s!r}") from None


def _offset_from_iso(s: str) -> int:
    if s in "Zz":
        return 0
    sign = -1 if s[0] == "-" else 1
    digits = s[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:] or 0)
    if hours > 23 or minutes > 59:
        raise ValueError("Invalid offset")
    return sign * (hours * 3600 + minutes * 60)


def parse_iso(s: str) -> tuple[Fields, Optional[int]]:
    """Parse into calendar fields and an offset in seconds.

    The offset is ``None`` if the string has no zone designator, in which
    case the fields are meant as local time.
    """
    if (match := _match_iso(s)) is None:
        _parse_err(s)

    year_s, month_s, day_s, hour_s, minute_s, second_s, frac, offset_s = (
        match.groups()
    )
    # ISO 8601 doesn't allow a negative zero year
    if year_s == "-000000":
        _parse_err(s)

    year = int(year_s)
    month = int(month_s or 1)
    day = int(day_s or 1)
    if not (1 <= month <= 12 and 1 <= day <= days_in_month(year, month)):
        _parse_err(s)

    hour = int(hour_s or 0)
    minute = int(minute_s or 0)
    second = int(second_s or 0)
    # digits beyond millisecond precision are ignored
    millisecond = int(frac[:3].ljust(3, "0")) if frac else 0
    if hour == 24:
        # 24:00 is the end of the day, i.e. midnight of the next
        if minute or second or millisecond:
            _parse_err(s)
    elif hour > 23 or minute > 59 or second > 59:
        _parse_err(s)

    try:
        offset = None if offset_s is None else _offset_from_iso(offset_s)
    except ValueError:
        _parse_err(s)

    return Fields(year, month, day, hour, minute, second, millisecond), offset
