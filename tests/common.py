import os
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from chronia import reset_system_tz

# ISO strings for instants with a known representation in UTC
JAN_15_UTC = "2024-01-15T10:30:00.000Z"
JAN_15_MILLIS = 1_705_314_600_000


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


@contextmanager
def system_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_system_tz()
            yield
    finally:
        reset_system_tz()


@pytest.fixture(scope="module")
def nyc():
    """Run the module's tests with New York as the system timezone"""
    with system_tz("America/New_York"):
        yield
