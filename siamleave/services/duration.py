"""
Leave Duration Calculator

Every place that measures a leave request goes through `duration()` so the
same rules apply to quota checks, usage totals and the LeaveUsed cache:

- Hour-based when both start_time and end_time are set. Fractional hours are
  kept (rounded to 2 decimals). An end time at or before the start time
  measures 0 hours; ranges never wrap past midnight.
- Otherwise day-based: inclusive count from start_date to end_date,
  0 when the end precedes the start.
- A request carrying neither times nor dates measures one day.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


@dataclass(frozen=True)
class LeaveDuration:
    days: int = 0
    hours: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.days == 0 and self.hours == 0

    def to_hours(self, working_hours_per_day: int) -> float:
        return self.days * working_hours_per_day + self.hours


def is_valid_time_format(value: Optional[str]) -> bool:
    return bool(value) and TIME_PATTERN.match(value) is not None


def time_to_minutes(value: Optional[str]) -> Optional[int]:
    """Parse "HH:MM" into minutes after midnight; None when malformed."""
    if not is_valid_time_format(value):
        return None
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def is_within_working_hours(value: Optional[str], start_hour: int, end_hour: int) -> bool:
    minutes = time_to_minutes(value)
    if minutes is None:
        return False
    return start_hour * 60 <= minutes <= end_hour * 60


def _as_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_between(start: Union[date, str, None], end: Union[date, str, None]) -> int:
    """Inclusive day count; same-day leave is one day."""
    start_d, end_d = _as_date(start), _as_date(end)
    if start_d is None or end_d is None:
        return 0
    return max(0, (end_d - start_d).days + 1)


def duration_hours(start_time: Optional[str], end_time: Optional[str]) -> float:
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if start is None or end is None:
        return 0.0
    return round(max(0, end - start) / 60, 2)


def duration(request: Any) -> LeaveDuration:
    """
    Measure a leave request (ORM row, pydantic schema or any object with
    start_date/end_date/start_time/end_time attributes).
    """
    start_time = getattr(request, "start_time", None)
    end_time = getattr(request, "end_time", None)
    if start_time and end_time:
        return LeaveDuration(hours=duration_hours(start_time, end_time))

    start_date = getattr(request, "start_date", None)
    end_date = getattr(request, "end_date", None)
    if start_date or end_date:
        return LeaveDuration(days=days_between(start_date or end_date, end_date or start_date))

    return LeaveDuration(days=1)


def normalize(days: int, hours: float, working_hours_per_day: int) -> LeaveDuration:
    """Carry whole working days out of the hour component."""
    hours = max(0.0, hours)
    extra_days = math.floor(hours / working_hours_per_day)
    return LeaveDuration(
        days=int(days) + extra_days,
        hours=round(hours - extra_days * working_hours_per_day, 2),
    )


def hours_to_duration(total_hours: float, working_hours_per_day: int) -> LeaveDuration:
    return normalize(0, total_hours, working_hours_per_day)


def format_duration(days: int, hours: float) -> str:
    hours_label = f"{hours:g}"
    if days > 0 and hours > 0:
        return f"{days} day(s) {hours_label} hour(s)"
    if days > 0:
        return f"{days} day(s)"
    if hours > 0:
        return f"{hours_label} hour(s)"
    return "0 hours"
