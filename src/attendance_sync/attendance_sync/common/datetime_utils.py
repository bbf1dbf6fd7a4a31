from __future__ import annotations

from datetime import date, datetime, time

import pytz


def utc_now() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(pytz.utc)


def parse_hhmm(value: str) -> time:
    """Parse 'HH:MM' (or 'HH:MM:SS') into a time."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
    return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)


def ensure_aware(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Attach ``tz`` to a naive datetime; aware values pass through."""
    if value.tzinfo is None:
        return tz.localize(value)
    return value


def to_local(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
    return ensure_aware(value, pytz.utc).astimezone(tz)


def local_date(value: datetime, tz: pytz.BaseTzInfo) -> date:
    """Calendar day of ``value`` as seen in ``tz`` (never the UTC day)."""
    return to_local(value, tz).date()


def local_datetime(day: date, at: time, tz: pytz.BaseTzInfo) -> datetime:
    return tz.localize(datetime.combine(day, at))


def to_db_datetime(value: datetime | None) -> datetime | None:
    """Aware datetime -> naive UTC for DATETIME columns."""
    if value is None:
        return None
    return ensure_aware(value, pytz.utc).astimezone(pytz.utc).replace(tzinfo=None)


def from_db_datetime(value: datetime | None) -> datetime | None:
    """Naive UTC from DATETIME columns -> aware UTC."""
    if value is None:
        return None
    return ensure_aware(value, pytz.utc)


_DEVICE_TIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%Y%m%d%H%M%S",
)


def parse_device_timestamp(value, tz: pytz.BaseTzInfo) -> datetime:
    """Parse a vendor timestamp into an aware datetime.

    Accepts datetimes, unix epochs (seconds or milliseconds) and the string
    layouts devices commonly emit. Naive values are read as ``tz`` local time.
    """
    if isinstance(value, datetime):
        return ensure_aware(value, tz)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
        if seconds > 1e12:
            seconds /= 1000.0
        return datetime.fromtimestamp(seconds, pytz.utc)

    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+0000"
        for fmt in _DEVICE_TIME_FORMATS:
            try:
                return ensure_aware(datetime.strptime(text, fmt), tz)
            except ValueError:
                continue

    raise ValueError(f"Unrecognized device timestamp: {value!r}")
