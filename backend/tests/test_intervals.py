from datetime import time

import pytest

from app.core.exceptions import InvalidRangeError
from app.models.time_slot import DayOfWeek
from app.services.intervals import TimeInterval, format_time_of_day, overlaps, parse_day, parse_time_of_day


def interval(day: str, start: str, end: str) -> TimeInterval:
    return TimeInterval.parse(day, start, end)


def test_overlapping_intervals_on_same_day():
    first = interval("Monday", "09:00:00", "10:30:00")
    second = interval("Monday", "10:00:00", "11:00:00")
    assert overlaps(first, second)
    assert overlaps(second, first)


def test_touching_intervals_do_not_overlap():
    first = interval("Monday", "09:00:00", "10:00:00")
    second = interval("Monday", "10:00:00", "11:00:00")
    assert not overlaps(first, second)
    assert not second.overlaps(first)


def test_contained_interval_overlaps():
    outer = interval("Friday", "08:00:00", "12:00:00")
    inner = interval("Friday", "09:15:00", "09:45:00")
    assert overlaps(outer, inner)
    assert overlaps(inner, outer)


def test_different_days_never_overlap():
    monday = interval("Monday", "09:00:00", "10:00:00")
    tuesday = interval("Tuesday", "09:00:00", "10:00:00")
    assert not overlaps(monday, tuesday)


def test_identical_intervals_overlap_and_share_span():
    first = interval("Wednesday", "13:00:00", "14:00:00")
    second = interval("wednesday", "13:00:00", "14:00:00")
    assert overlaps(first, second)
    assert first.same_span(second)


@pytest.mark.parametrize(
    ("start", "end"),
    [("10:00:00", "10:00:00"), ("11:00:00", "10:00:00")],
)
def test_start_must_precede_end(start, end):
    with pytest.raises(InvalidRangeError):
        interval("Monday", start, end)


@pytest.mark.parametrize("value", ["25:00:00", "9:00", "09:60:00", "noon", ""])
def test_malformed_times_are_rejected(value):
    with pytest.raises(InvalidRangeError):
        parse_time_of_day(value)


def test_unpadded_hours_are_normalized():
    assert parse_time_of_day("9:05:00") == time(9, 5, 0)
    assert format_time_of_day(parse_time_of_day("9:05:00")) == "09:05:00"


def test_day_parsing_is_case_insensitive():
    assert parse_day("  saturday ") is DayOfWeek.saturday
    with pytest.raises(InvalidRangeError):
        parse_day("Funday")


def test_duration_and_ordering():
    late_monday = interval("Monday", "14:00:00", "15:30:00")
    early_tuesday = interval("Tuesday", "08:00:00", "09:00:00")
    early_monday = interval("Monday", "08:00:00", "09:00:00")
    assert late_monday.duration_minutes == 90
    ordered = sorted([early_tuesday, late_monday, early_monday], key=TimeInterval.sort_key)
    assert ordered == [early_monday, late_monday, early_tuesday]
    assert str(late_monday) == "Monday 14:00:00-15:30:00"
