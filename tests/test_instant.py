import pickle
from copy import copy, deepcopy
from datetime import datetime as py_datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis.strategies import floats, integers

from chronia import (
    MAX_DATE,
    MIN_DATE,
    Instant,
    InvalidDateError,
    now,
    patch_current_time,
)

from .common import (
    JAN_15_MILLIS,
    JAN_15_UTC,
    AlwaysEqual,
    NeverEqual,
    nyc,
)

pytestmark = pytest.mark.usefixtures("nyc")

BIG_INT = 1 << 64 + 1  # a big int that may cause an overflow error


def test_no_init():
    with pytest.raises(TypeError):
        Instant()  # type: ignore[call-arg]


def test_no_subclassing():
    with pytest.raises(TypeError, match="Subclassing not allowed"):

        class MyInstant(Instant):  # type: ignore[misc]
            pass


class TestInit:
    def test_int(self):
        assert Instant(JAN_15_MILLIS).timestamp_millis() == JAN_15_MILLIS
        assert Instant(0).timestamp_millis() == 0
        assert Instant(-1).timestamp_millis() == -1

    @pytest.mark.parametrize(
        "value, expect",
        [
            (1.9, 1),
            (-1.9, -1),
            (0.5, 0),
            (-0.0, 0),
            (1e15, 1_000_000_000_000_000),
        ],
    )
    def test_float_truncates_toward_zero(self, value, expect):
        assert Instant(value).timestamp_millis() == expect

    def test_range(self):
        assert Instant(8_640_000_000_000_000).is_valid()
        assert Instant(-8_640_000_000_000_000).is_valid()
        assert not Instant(8_640_000_000_000_001).is_valid()
        assert not Instant(-8_640_000_000_000_001).is_valid()
        assert not Instant(BIG_INT).is_valid()
        assert not Instant(-BIG_INT).is_valid()
        assert not Instant(8.64e15 + 2048).is_valid()

    @pytest.mark.parametrize(
        "value",
        [
            float("nan"),
            float("inf"),
            float("-inf"),
            True,
            False,
            None,
            [],
            object(),
            b"2024-01-15",
        ],
    )
    def test_invalid(self, value):
        assert not Instant(value).is_valid()

    def test_from_iso_string(self):
        assert Instant(JAN_15_UTC).timestamp_millis() == JAN_15_MILLIS
        assert (
            Instant("2024-01-15T19:30:00+09:00").timestamp_millis()
            == JAN_15_MILLIS
        )

    def test_string_without_zone_is_local(self):
        # New York is 5 hours behind UTC in winter
        assert Instant("2024-01-15T05:30") == Instant(JAN_15_UTC)
        assert Instant("2024-01-15") == Instant("2024-01-15T05:00Z")
        # ...and 4 hours in summer
        assert Instant("2024-07-15") == Instant("2024-07-15T04:00Z")

    def test_from_instant(self):
        i = Instant(JAN_15_MILLIS)
        j = Instant(i)
        assert i == j
        assert i is not j
        assert not Instant(Instant("foo")).is_valid()

    def test_from_datetime(self):
        assert Instant(
            py_datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        ) == Instant(JAN_15_UTC)
        assert Instant(
            py_datetime(
                2024, 1, 15, 19, 30, tzinfo=timezone(timedelta(hours=9))
            )
        ) == Instant(JAN_15_UTC)
        # naive datetimes are local time
        assert Instant(py_datetime(2024, 1, 15, 5, 30)) == Instant(JAN_15_UTC)

    def test_sub_millisecond_datetime_truncated(self):
        d = py_datetime(1970, 1, 1, 0, 0, 0, 1_999, tzinfo=timezone.utc)
        assert Instant(d).timestamp_millis() == 1
        d = py_datetime(
            1969, 12, 31, 23, 59, 59, 999_999, tzinfo=timezone.utc
        )
        assert Instant(d).timestamp_millis() == -1


class TestFromUTC:
    def test_defaults(self):
        assert Instant.from_utc(2020, 8, 15) == Instant.from_utc(
            2020, 8, 15, 0, 0, 0, 0
        )

    def test_valid(self):
        assert Instant.from_utc(2024, 1, 15, 10, 30) == Instant(JAN_15_UTC)
        assert Instant.from_utc(1970, 1, 1).timestamp_millis() == 0
        assert Instant.from_utc(1969, 12, 31, 23, 59, 59, 999) == Instant(-1)

    def test_far_years(self):
        assert Instant.from_utc(275760, 9, 13) == MAX_DATE
        assert Instant.from_utc(-271821, 4, 20) == MIN_DATE
        assert Instant.from_utc(0, 2, 29).is_valid()

    @pytest.mark.parametrize(
        "kwargs, keyword",
        [
            (dict(month=0), "month"),
            (dict(month=13), "month"),
            (dict(day=0), "day"),
            (dict(day=32), "day"),
            (dict(month=2, day=30), "day"),
            (dict(hour=-1), "hour"),
            (dict(hour=24), "hour"),
            (dict(minute=60), "minute"),
            (dict(second=60), "second"),
            (dict(millisecond=1_000), "millisecond"),
            (dict(year=275760, month=9, day=14), "range"),
            (dict(year=BIG_INT), "range"),
        ],
    )
    def test_bounds(self, kwargs, keyword):
        defaults = dict(year=2020, month=1, day=1)
        with pytest.raises(ValueError, match=keyword):
            Instant.from_utc(**{**defaults, **kwargs})

    def test_types(self):
        with pytest.raises(TypeError):
            Instant.from_utc(2020.0, 1, 1)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            Instant.from_utc(2020, True, 1)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            Instant.from_utc("2020", 1, 1)  # type: ignore[arg-type]


class TestFromLocal:
    def test_normal(self):
        assert Instant.from_local(2024, 1, 15, 5, 30) == Instant(JAN_15_UTC)
        assert Instant.from_local(2024, 7, 15) == Instant(
            "2024-07-15T04:00Z"
        )

    def test_gap_moves_forward(self):
        # 02:30 doesn't exist on this day: clocks jump from 2:00 to 3:00
        assert Instant.from_local(2024, 3, 10, 2, 30) == Instant(
            "2024-03-10T07:30Z"
        )

    def test_fold_is_earlier(self):
        # 01:30 happens twice on this day: first EDT, then EST
        assert Instant.from_local(2024, 11, 3, 1, 30) == Instant(
            "2024-11-03T05:30Z"
        )

    def test_bounds(self):
        with pytest.raises(ValueError, match="day"):
            Instant.from_local(2023, 2, 29)
        with pytest.raises(ValueError, match="range"):
            Instant.from_local(275760, 9, 13)  # after MAX in UTC-4


class TestFromTimestampMillis:
    def test_valid(self):
        assert Instant.from_timestamp_millis(JAN_15_MILLIS) == Instant(
            JAN_15_UTC
        )
        assert Instant.from_timestamp_millis(-8_640_000_000_000_000) == (
            MIN_DATE
        )

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="range"):
            Instant.from_timestamp_millis(8_640_000_000_000_001)
        with pytest.raises(ValueError, match="range"):
            Instant.from_timestamp_millis(BIG_INT)

    @pytest.mark.parametrize("value", [1.0, "0", True, None])
    def test_wrong_type(self, value):
        with pytest.raises(TypeError, match="integer"):
            Instant.from_timestamp_millis(value)


class TestFromPyDatetime:
    def test_aware(self):
        d = py_datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert Instant.from_py_datetime(d) == Instant(JAN_15_UTC)

    def test_naive_is_local(self):
        d = py_datetime(2024, 1, 15, 5, 30)
        assert Instant.from_py_datetime(d) == Instant(JAN_15_UTC)

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            Instant.from_py_datetime("2024-01-15")  # type: ignore[arg-type]


def test_now():
    i = Instant.from_utc(1980, 3, 2, 2)
    with patch_current_time(i, keep_ticking=False):
        assert Instant.now() == i
        assert now() == i
    assert Instant.now() > i


def test_is_valid():
    assert Instant(0).is_valid()
    assert not Instant("2024-02-30").is_valid()


class TestTimestampMillis:
    def test_valid(self):
        assert Instant(JAN_15_UTC).timestamp_millis() == JAN_15_MILLIS

    def test_invalid(self):
        with pytest.raises(InvalidDateError):
            Instant("foo").timestamp_millis()


class TestPyDatetime:
    def test_valid(self):
        assert Instant(JAN_15_UTC).py_datetime() == py_datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )
        assert Instant(-1).py_datetime() == py_datetime(
            1969, 12, 31, 23, 59, 59, 999_000, tzinfo=timezone.utc
        )

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="range"):
            MAX_DATE.py_datetime()

    def test_invalid(self):
        with pytest.raises(InvalidDateError):
            Instant("foo").py_datetime()


class TestFormatCommonIso:
    @pytest.mark.parametrize(
        "i, expect",
        [
            (Instant(0), "1970-01-01T00:00:00.000Z"),
            (Instant(-1), "1969-12-31T23:59:59.999Z"),
            (Instant(JAN_15_MILLIS + 7), "2024-01-15T10:30:00.007Z"),
            (Instant.from_utc(0, 1, 1), "0000-01-01T00:00:00.000Z"),
            (Instant.from_utc(-1, 12, 31), "-000001-12-31T00:00:00.000Z"),
            (Instant.from_utc(10_000, 1, 1), "+010000-01-01T00:00:00.000Z"),
            (MAX_DATE, "+275760-09-13T00:00:00.000Z"),
            (MIN_DATE, "-271821-04-20T00:00:00.000Z"),
        ],
    )
    def test_valid(self, i, expect):
        assert i.format_common_iso() == expect
        assert str(i) == expect
        assert repr(i) == f"Instant({expect})"

    def test_invalid(self):
        bad = Instant("foo")
        assert str(bad) == "Invalid Date"
        assert repr(bad) == "Instant(<invalid>)"
        with pytest.raises(InvalidDateError):
            bad.format_common_iso()


class TestEquality:
    def test_same(self):
        assert Instant(0) == Instant("1970-01-01T00:00Z")
        assert not Instant(0) != Instant("1970-01-01T00:00Z")

    def test_different(self):
        assert Instant(0) != Instant(1)
        assert not Instant(0) == Instant(1)

    def test_invalid_never_equal(self):
        bad = Instant(float("nan"))
        assert bad != bad
        assert not bad == bad
        assert bad != Instant(0)
        assert Instant(0) != bad

    def test_other_types(self):
        assert Instant(0) != 0
        assert not Instant(0) == 0
        assert Instant(0) == AlwaysEqual()
        assert Instant(0) != NeverEqual()

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Instant(0))


class TestComparison:
    def test_valid(self):
        a, b = Instant(0), Instant(1)
        assert a < b
        assert a <= b
        assert b > a
        assert b >= a
        assert a <= Instant(0)
        assert a >= Instant(0)
        assert not a > b
        assert not b < a

    def test_invalid_neither_smaller_nor_larger(self):
        bad = Instant("foo")
        i = Instant(0)
        assert not bad < i
        assert not bad <= i
        assert not bad > i
        assert not bad >= i
        assert not i < bad
        assert not i >= bad

    def test_other_types(self):
        with pytest.raises(TypeError):
            Instant(0) < 1  # type: ignore[operator]
        with pytest.raises(TypeError):
            Instant(0) >= "1970"  # type: ignore[operator]


def test_min_max():
    assert Instant.MIN is MIN_DATE
    assert Instant.MAX is MAX_DATE
    assert MIN_DATE.timestamp_millis() == -8_640_000_000_000_000
    assert MAX_DATE.timestamp_millis() == 8_640_000_000_000_000


def test_copy():
    i = Instant(JAN_15_MILLIS)
    for c in (i.copy(), copy(i), deepcopy(i)):
        assert c == i
        assert c is not i
    assert not copy(Instant("foo")).is_valid()


def test_pickle():
    i = Instant(JAN_15_MILLIS)
    assert pickle.loads(pickle.dumps(i)) == i
    assert not pickle.loads(pickle.dumps(Instant("foo"))).is_valid()


def test_old_pickle_data_remains_unpicklable():
    # Don't update this value: the whole idea is that it's a pickle at
    # a specific version of the library.
    dumped = (
        b"\x80\x04\x95'\x00\x00\x00\x00\x00\x00\x00\x8c\x07chronia\x94\x8c\x0b"
        b"_unpkl_inst\x94\x93\x94\x8a\x06@\xc4\xab\x0c\x8d\x01\x85\x94R\x94."
    )
    assert pickle.loads(dumped) == Instant(JAN_15_MILLIS)


@given(integers(-8_640_000_000_000_000, 8_640_000_000_000_000))
def test_timestamp_and_iso_agree(ms):
    i = Instant(ms)
    assert i.timestamp_millis() == ms
    assert Instant(i.format_common_iso()) == i


@given(
    floats(
        min_value=-8.64e15,
        max_value=8.64e15,
        allow_nan=False,
        allow_infinity=False,
    )
)
def test_float_timestamps(f):
    assert Instant(f).timestamp_millis() == int(f)
