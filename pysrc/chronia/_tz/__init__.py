from .offsets import offset_for_instant, offset_for_local
from .store import (
    TimeZoneNotFoundError,
    available_timezones,
    canonical_key,
    clear_tzcache,
    get_system_tz,
    get_tz,
    reset_system_tz,
)

__all__ = [
    "TimeZoneNotFoundError",
    "available_timezones",
    "canonical_key",
    "clear_tzcache",
    "get_system_tz",
    "get_tz",
    "offset_for_instant",
    "offset_for_local",
    "reset_system_tz",
]
