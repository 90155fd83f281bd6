"""Timezone database access and caching."""

from __future__ import annotations

import logging
from datetime import tzinfo
from functools import lru_cache
from zoneinfo import (
    ZoneInfo,
    ZoneInfoNotFoundError,
    available_timezones as _zoneinfo_timezones,
)

from .._common import UTC
from . import system

__all__ = [
    "TimeZoneNotFoundError",
    "available_timezones",
    "canonical_key",
    "clear_tzcache",
    "get_tz",
    "get_system_tz",
    "reset_system_tz",
]

logger = logging.getLogger(__name__)


class TimeZoneNotFoundError(ValueError):
    """A timezone with the given ID was not found"""

    @classmethod
    def for_key(cls, key: object) -> TimeZoneNotFoundError:
        return cls(f"No time zone found for key: {key!r}")


def available_timezones() -> set[str]:
    """The set of all IANA timezone IDs known to this system.

    Uses the system timezone database, and the ``tzdata`` package
    if it's installed.
    """
    zones = _zoneinfo_timezones()
    # Always present in the database, but not always listed
    zones.add("UTC")
    return zones


# Maps lowercase IDs to the spelling used by the database.
# Building it scans the whole database, so it's only done once.
@lru_cache(maxsize=None)
def _zone_index() -> dict[str, str]:
    index = {key.lower(): key for key in available_timezones()}
    logger.debug("indexed %d timezone IDs", len(index))
    return index


def canonical_key(name: str) -> str:
    """The database spelling of an IANA timezone ID, matched
    case-insensitively and ignoring surrounding whitespace."""
    try:
        return _zone_index()[name.strip().lower()]
    except KeyError:
        raise TimeZoneNotFoundError.for_key(name) from None


def get_tz(key: str) -> ZoneInfo:
    canonical = canonical_key(key)
    try:
        # ZoneInfo keeps its own cache of loaded zones
        return ZoneInfo(canonical)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # Listed in the database, but not loadable
        raise TimeZoneNotFoundError.for_key(key) from None


def clear_tzcache() -> None:
    """Clear the cached timezone ID index and loaded timezones.

    Only needed if the timezone database changes while the process runs.
    """
    _zone_index.cache_clear()
    ZoneInfo.clear_cache()


_CACHED_SYSTEM_TZ: tzinfo | None = None


def get_system_tz() -> tzinfo:
    global _CACHED_SYSTEM_TZ
    # not locked: concurrent loads give the same zone, last one wins
    if _CACHED_SYSTEM_TZ is None:
        _CACHED_SYSTEM_TZ = _read_system_tz()
    return _CACHED_SYSTEM_TZ


def reset_system_tz() -> None:
    """Resets the cached system timezone to the current system timezone.

    Call this after changing the ``TZ`` environment variable.
    """
    global _CACHED_SYSTEM_TZ
    _CACHED_SYSTEM_TZ = _read_system_tz()


def _read_system_tz() -> tzinfo:
    kind, tz_value = system.get_tz()
    try:
        if kind == system.KEY:
            zone = ZoneInfo(tz_value)
        else:
            with open(tz_value, "rb") as f:
                zone = ZoneInfo.from_file(f)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # Like the C library, we treat an unusable TZ setting as UTC
        logger.warning(
            "Cannot load system timezone %r, falling back to UTC", tz_value
        )
        return UTC
    logger.debug("loaded system timezone %r", tz_value)
    return zone
