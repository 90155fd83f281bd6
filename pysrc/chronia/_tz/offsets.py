"""UTC offsets of a zone, at an exact time or at a local wall time.

The standard library only handles the years 1-9999, while instants span
about 275 thousand years in each direction. Times later than that are
moved back by whole 400-year cycles. This keeps any recurring DST rule
intact, since the Gregorian calendar repeats exactly. Earlier times are
clamped to the start of the supported range, which precedes all
transitions anyway.
"""

from datetime import datetime, timedelta, tzinfo

from .._common import EPOCH
from .._math import MS_PER_CYCLE

_NAIVE_EPOCH = EPOCH.replace(tzinfo=None)
_ONE_MS = timedelta(milliseconds=1)
_ONE_SEC = timedelta(seconds=1)

# A few days of slack, so applying an offset can't overflow
_PY_MIN_MS = (datetime(1, 1, 3) - _NAIVE_EPOCH) // _ONE_MS
_PY_MAX_MS = (datetime(9999, 12, 29) - _NAIVE_EPOCH) // _ONE_MS


def _fit(ms: int) -> int:
    if ms < _PY_MIN_MS:
        return _PY_MIN_MS
    elif ms > _PY_MAX_MS:
        cycles = -(-(ms - _PY_MAX_MS) // MS_PER_CYCLE)
        return ms - cycles * MS_PER_CYCLE
    return ms


def offset_for_instant(tz: tzinfo, ms: int) -> int:
    """The UTC offset (in seconds) at the given exact time.

    Found by rendering the wall clock time in the zone, and taking the
    difference with the wall clock time in UTC.
    """
    utc = EPOCH + timedelta(milliseconds=_fit(ms))
    wall = utc.astimezone(tz)
    return (wall.replace(tzinfo=None) - utc.replace(tzinfo=None)) // _ONE_SEC


def offset_for_local(tz: tzinfo, wall_ms: int) -> int:
    """The UTC offset (in seconds) for a local wall time.

    Wall times in a gap or a fold get the offset in effect *before* the
    transition. Skipped times thus end up moved forward, and repeated times
    resolve to the earlier instant.
    """
    naive = _NAIVE_EPOCH + timedelta(milliseconds=_fit(wall_ms))
    offset = naive.replace(tzinfo=tz, fold=0).utcoffset()
    assert offset is not None, "zone without offset"
    return offset // _ONE_SEC
