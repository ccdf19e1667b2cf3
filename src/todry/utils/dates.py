"""Date helpers: due-date presets, parsing and relative time."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo

import tzlocal

SATURDAY = 5


def now_utc() -> datetime:
    return datetime.now(UTC)


def now_iso() -> str:
    """Get current timestamp in ISO format."""
    return now_utc().isoformat()


def local_zone() -> tzinfo:
    """Detect the system timezone, falling back to UTC."""
    try:
        return tzlocal.get_localzone()
    except Exception:  # pylint: disable=broad-exception-catch
        return UTC


def start_of_day(value: datetime) -> datetime:
    """Midnight at the start of ``value``'s day, keeping its timezone."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def today(now: datetime | None = None) -> datetime:
    now = now or datetime.now(local_zone())
    return start_of_day(now)


def tomorrow(now: datetime | None = None) -> datetime:
    """Start of the next local day."""
    now = now or datetime.now(local_zone())
    return start_of_day(now + timedelta(days=1))


def next_weekend(now: datetime | None = None) -> datetime:
    """Start of the next Saturday; a full week ahead when today is Saturday."""
    now = now or datetime.now(local_zone())
    weekday = now.weekday()
    days_ahead = 7 if weekday == SATURDAY else (SATURDAY - weekday) % 7
    return start_of_day(now + timedelta(days=days_ahead))


DUE_PRESETS = {
    "today": today,
    "tomorrow": tomorrow,
    "weekend": next_weekend,
}


def parse_due(value: str, now: datetime | None = None) -> datetime | None:
    """Parse a due date given on the command line.

    Accepts ``today``, ``tomorrow``, ``weekend``, ``none`` (clears the date),
    an ISO date (``2025-03-01``) or an ISO datetime. Naive values are taken
    to be in the local timezone.

    Raises:
        ValueError: If the value is not recognised
    """
    text = value.strip().lower()
    if text in ("none", "clear", ""):
        return None
    if text in DUE_PRESETS:
        return DUE_PRESETS[text](now)

    parsed: datetime
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        parsed = datetime.combine(date.fromisoformat(value.strip()), time())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=local_zone())
    return parsed


def relative_time(value: datetime, now: datetime | None = None) -> str:
    """Describe how long ago ``value`` was, e.g. ``"5 minutes ago"``."""
    now = now or now_utc()
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    seconds = int((now - value).total_seconds())

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _ago(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _ago(hours, "hour")
    days = hours // 24
    if days == 1:
        return "yesterday"
    return _ago(days, "day")


def _ago(amount: int, unit: str) -> str:
    if amount == 1:
        return f"1 {unit} ago"
    return f"{amount} {unit}s ago"
