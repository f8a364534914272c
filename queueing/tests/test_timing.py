from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from rest_framework.exceptions import ValidationError

from queueing.services.timing import day_bounds, duration_seconds, format_duration, parse_datetime_param, parse_day

T0 = datetime(2024, 5, 1, 9, 0, 0, tzinfo=dt_timezone.utc)


def test_duration_is_rounded_half_up():
    assert duration_seconds(T0, T0 + timedelta(seconds=1, milliseconds=500)) == 2
    assert duration_seconds(T0, T0 + timedelta(seconds=2, milliseconds=400)) == 2


def test_duration_missing_start_or_backwards_clock_is_zero():
    assert duration_seconds(None, T0) == 0
    assert duration_seconds(T0, T0 - timedelta(minutes=5)) == 0


def test_format_duration():
    assert format_duration(42) == '42s'
    assert format_duration(125) == '2m 5s'
    assert format_duration(3725) == '1h 2m 5s'
    assert format_duration(None) == '0s'


def test_parse_day_rejects_bad_dates():
    assert parse_day('2024-02-29').isoformat() == '2024-02-29'
    with pytest.raises(ValidationError):
        parse_day('2024-13-01')


def test_day_bounds_cover_one_local_day():
    start, end = day_bounds('2024-05-01')
    assert end - start == timedelta(days=1)
    assert start.tzinfo is not None


def test_parse_datetime_param():
    assert parse_datetime_param('', 'startDate') is None
    parsed = parse_datetime_param('2024-05-01T10:00:00Z', 'startDate')
    assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=dt_timezone.utc)
    assert parse_datetime_param('2024-05-01', 'endDate').tzinfo is not None
    with pytest.raises(ValidationError):
        parse_datetime_param('yesterday', 'endDate')
