from datetime import datetime as _datetime, timezone as _timezone
from typing import Literal, Optional

UTC = _timezone.utc
EPOCH = _datetime(1970, 1, 1, tzinfo=UTC)

Millis = int
# None stands for an invalid instant
MaybeMillis = Optional[Millis]

MILLIS_MAX = 8_640_000_000_000_000
MILLIS_MIN = -MILLIS_MAX

MS_PER_SECOND = 1_000
MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000

TimeUnit = Literal[
    "year", "month", "day", "hour", "minute", "second", "millisecond"
]
SortOrder = Literal["ASC", "DESC"]
Bounds = Literal["[]", "[)", "(]", "()"]

UNITS: tuple[TimeUnit, ...] = (
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "millisecond",
)

# Units that shift an instant by a fixed amount of time
FLAT_UNIT_MILLIS: dict[str, int] = {
    "day": MS_PER_DAY,
    "hour": MS_PER_HOUR,
    "minute": MS_PER_MINUTE,
    "second": MS_PER_SECOND,
    "millisecond": 1,
}


def in_range(ms: int) -> bool:
    return MILLIS_MIN <= ms <= MILLIS_MAX


def check_unit(unit: str) -> TimeUnit:
    if unit not in UNITS:
        raise ValueError(f"Invalid unit: {unit!r}")
    return unit  # type: ignore[return-value]
