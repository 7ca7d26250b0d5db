# bshop/core.py

import re
from datetime import date, datetime, time, timedelta, timezone

from .errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# strptime alone accepts "9:5" and "2024-1-5"
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def parse_date(value: str) -> date:
    try:
        if not DATE_RE.match(value):
            raise ValueError(value)
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError("Date must be YYYY-MM-DD", context={"date": value})


def parse_time(value: str) -> time:
    try:
        if not TIME_RE.match(value):
            raise ValueError(value)
        return datetime.strptime(value, TIME_FORMAT).time()
    except (TypeError, ValueError):
        raise ValidationError("Time must be HH:MM (24h)", context={"time": value})


def format_time(value) -> str:
    return value.strftime(TIME_FORMAT)


def to_instant(on_date: date, at: time) -> datetime:
    """Calendar date + clock time -> naive business-local instant."""
    return datetime.combine(on_date, at)


def add_minutes(start: datetime, minutes: int) -> datetime:
    return start + timedelta(minutes=minutes)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # half-open intervals: touching endpoints do not overlap
    return start_a < end_b and start_b < end_a


def local_now(utc_offset_hours: float, utcnow: datetime | None = None) -> datetime:
    """Current time in the shop's zone, using a fixed offset (no DST rules)."""
    if utcnow is None:
        utcnow = datetime.now(timezone.utc)
    shifted = utcnow.astimezone(timezone.utc) + timedelta(hours=utc_offset_hours)
    return shifted.replace(tzinfo=None)
