from __future__ import annotations

import logging as _logging
from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from typing import Iterator as _Iterator

from ._pychronia import *
from ._pychronia import (  # for the docs
    __all__,
    __version__,
    _patch_time_frozen,
    _patch_time_keep_ticking,
    _unpatch_time,
    _unpkl_inst,
)

# Library logging: silent unless the application configures a handler
_logging.getLogger(__name__).addHandler(_logging.NullHandler())


@_dataclass
class _TimePatch:
    _pin: Instant
    _keep_ticking: bool

    def shift(self, amount: float, unit: TimeUnit):
        """Move the patched time by an amount of the given unit,
        with the same semantics as :func:`add_unit`."""
        start = now() if self._keep_ticking else self._pin
        new = add_unit(start, amount, unit)
        if not new.is_valid():
            raise ValueError("Shifted time out of range")
        self._pin = new
        if self._keep_ticking:
            _patch_time_keep_ticking(new)
        else:
            _patch_time_frozen(new)


@_contextmanager
def patch_current_time(
    i: Instant,
    /,
    *,
    keep_ticking: bool,
) -> _Iterator[_TimePatch]:
    """Patch the current time to a fixed value (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    Important
    ---------

    * This function should be used only for testing purposes. It is not
      thread-safe or part of the stable API.
    * This function only affects chronia's notion of the current time:
      :func:`now`, :func:`is_future`, :func:`is_past` and the default of
      :func:`get_time_zone_offset`. It does not affect the standard
      library's time functions or any other libraries.
      Use the ``time_machine`` package if you also want to patch other
      libraries.
    * It doesn't affect the system timezone.
      If you need to patch the system timezone, set the ``TZ`` environment
      variable and call :func:`reset_system_tz`.

    Example
    -------

    >>> from chronia import Instant, patch_current_time, now
    >>> i = Instant.from_utc(1980, 3, 2, hour=2)
    >>> with patch_current_time(i, keep_ticking=False) as p:
    ...     assert now() == i
    ...     p.shift(4, "hour")
    ...     assert now() == add_hours(i, 4)
    ...
    >>> assert now() != i
    """
    if not (isinstance(i, Instant) and i.is_valid()):
        raise InvalidDateError.for_operand(i)
    if keep_ticking:
        _patch_time_keep_ticking(i)
    else:
        _patch_time_frozen(i)

    try:
        yield _TimePatch(i, keep_ticking)
    finally:
        _unpatch_time()
