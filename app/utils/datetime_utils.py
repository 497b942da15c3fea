"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- API responses expose datetimes in the configured display timezone (settings.TZ).
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

UTC = timezone.utc


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TZ)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for created_at, id_last_exported_at, etc."""
    return datetime.now(UTC)


def today_local() -> date:
    """Today's date in the display timezone (hire dates are local calendar days)."""
    return datetime.now(local_tz()).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 in the display timezone with its offset. Use for API response datetime fields."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(local_tz()).isoformat()


def add_years(value: datetime, years: int) -> datetime:
    """Shift by whole years; Feb 29 falls back to Feb 28 in non-leap years."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)
