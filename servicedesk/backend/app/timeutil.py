# servicedesk/backend/app/timeutil.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(moment: datetime, days_back: int = 0) -> Tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day `days_back` days before `moment`."""
    start = as_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)
    start -= timedelta(days=days_back)
    return start, start + timedelta(days=1)


def relative_time_label(moment: datetime, now: datetime) -> str:
    """Dashboard label: "Just now", "N minutes ago", ... or a short date."""
    delta = as_utc(now) - as_utc(moment)
    seconds = delta.total_seconds()

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if delta.days < 7:
        return f"{delta.days} day{'s' if delta.days != 1 else ''} ago"
    return as_utc(moment).strftime("%b %d, %Y")
