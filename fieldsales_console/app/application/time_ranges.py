from __future__ import annotations

import calendar
from datetime import datetime, timedelta

PRESETS = ("today", "week", "month")


def local_now() -> datetime:
    return datetime.now().astimezone()


def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(value: datetime) -> datetime:
    return start_of_day(value).replace(day=1)


def resolve_preset(preset: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` window for a time-range preset; weeks start on Monday."""
    today = start_of_day(now or local_now())
    normalized = preset.strip().lower()
    if normalized == "today":
        return today, today + timedelta(days=1)
    if normalized == "week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=7)
    if normalized == "month":
        start = today.replace(day=1)
        return start, add_months(start, 1)
    raise ValueError(f"Unknown time range preset: {preset}. Expected one of: {', '.join(PRESETS)}")


def month_starts(now: datetime, count: int) -> list[datetime]:
    """First instant of each of the last ``count`` months, oldest first, current month included."""
    current = start_of_month(now)
    return [add_months(current, offset) for offset in range(-(count - 1), 1)]


def relative_time(moment: datetime | None, now: datetime) -> str:
    if moment is None:
        return ""
    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"
