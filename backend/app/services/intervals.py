"""Day-anchored, half-open time intervals.

`overlaps` is the single overlap primitive of the engine: slot definition checks
and the strict availability mode both reduce to it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

from app.core.exceptions import InvalidRangeError
from app.models.time_slot import DayOfWeek

# Unpadded hours ("9:00:00") are accepted; output is always zero padded.
TIME_OF_DAY_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d):([0-5]\d)$")


def parse_time_of_day(value: str | time) -> time:
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise InvalidRangeError("Time must be a string in HH:MM:SS format")
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if match is None:
        raise InvalidRangeError(f"Invalid time '{value}' (HH:MM:SS required)", details={"value": value})
    hours, minutes, seconds = (int(part) for part in match.groups())
    return time(hours, minutes, seconds)


def format_time_of_day(value: time) -> str:
    return value.strftime("%H:%M:%S")


def parse_day(value: str | DayOfWeek) -> DayOfWeek:
    if isinstance(value, DayOfWeek):
        return value
    normalized = str(value).strip().capitalize()
    try:
        return DayOfWeek(normalized)
    except ValueError as exc:
        raise InvalidRangeError(f"Invalid day of week '{value}'", details={"value": value}) from exc


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


@dataclass(frozen=True)
class TimeInterval:
    day: DayOfWeek
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidRangeError(
                "Start time must be before end time",
                details={
                    "day": self.day.value,
                    "start_time": format_time_of_day(self.start),
                    "end_time": format_time_of_day(self.end),
                },
            )

    @classmethod
    def parse(cls, day: str | DayOfWeek, start: str | time, end: str | time) -> "TimeInterval":
        return cls(parse_day(day), parse_time_of_day(start), parse_time_of_day(end))

    @property
    def duration_minutes(self) -> float:
        return (_seconds(self.end) - _seconds(self.start)) / 60

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def same_span(self, other: "TimeInterval") -> bool:
        return self.day == other.day and self.start == other.start and self.end == other.end

    def sort_key(self) -> tuple[int, time]:
        return (self.day.order, self.start)

    def __str__(self) -> str:
        return f"{self.day.value} {format_time_of_day(self.start)}-{format_time_of_day(self.end)}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    if a.day != b.day:
        return False
    return a.start < b.end and b.start < a.end
