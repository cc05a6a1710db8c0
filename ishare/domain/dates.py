"""Human-friendly date formatting for ride lists and notifications."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit if n == 1 else unit + 's'} ago"


def format_distance_to_now(value: datetime, now: Optional[datetime] = None) -> str:
    """``just now``, ``5 minutes ago`` ... then ``Jun 5`` / ``Jun 5, 2022``."""
    now = now or datetime.now(value.tzinfo)
    seconds = int((now - value).total_seconds())

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")

    label = f"{value:%b} {value.day}"
    if value.year != now.year:
        label += f", {value.year}"
    return label


def format_time(value: datetime) -> str:
    return value.strftime("%I:%M %p")


def format_scheduled_time(value: datetime) -> str:
    """e.g. ``Mon, Sep 20 at 10:30 AM``."""
    return f"{value:%a}, {value:%b} {value.day} at {format_time(value)}"


def is_today(value: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(value.tzinfo)
    return value.date() == now.date()


def is_tomorrow(value: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(value.tzinfo)
    return value.date() == (now + timedelta(days=1)).date()
