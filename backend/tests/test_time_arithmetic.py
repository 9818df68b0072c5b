import pytest

from timetable_service.core.exceptions import AppError, ParseError
from timetable_service.services.time_arithmetic import (
    compute_end_time,
    format_minutes,
    is_duration_in_bounds,
    to_minutes,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("00:00", 0),
        ("09:00", 540),
        ("9:30", 570),
        (" 13:05 ", 785),
        ("23:59", 1439),
    ],
)
def test_to_minutes_parses_24_hour_times(value, expected):
    assert to_minutes(value) == expected


@pytest.mark.parametrize("value", ["25:00", "09:70", "24:00", "ab:cd", "0930", "9:5", "", "12:30:00", "-1:00"])
def test_to_minutes_rejects_malformed_times(value):
    with pytest.raises(ParseError):
        to_minutes(value)


def test_parse_error_is_a_value_error_and_an_app_error():
    with pytest.raises(ValueError) as excinfo:
        to_minutes("25:00")
    assert isinstance(excinfo.value, AppError)
    assert excinfo.value.status_code == 422


def test_compute_end_time_does_not_wrap_past_midnight():
    assert compute_end_time(540, 60) == 600
    assert compute_end_time(1400, 90) == 1490


def test_format_minutes_is_zero_padded():
    assert format_minutes(0) == "00:00"
    assert format_minutes(545) == "09:05"
    assert format_minutes(1439) == "23:59"
    assert format_minutes(1490) == "24:50"


def test_format_minutes_rejects_negative_offsets():
    with pytest.raises(ParseError):
        format_minutes(-5)


def test_end_time_survives_parse_format_parse():
    start = to_minutes("10:30")
    end = compute_end_time(start, 90)
    assert to_minutes(format_minutes(end)) == start + 90
    assert format_minutes(to_minutes(format_minutes(start))) == "10:30"


@pytest.mark.parametrize(("duration", "expected"), [(29, False), (30, True), (180, True), (181, False)])
def test_duration_bounds_are_inclusive(duration, expected):
    assert is_duration_in_bounds(duration) is expected
