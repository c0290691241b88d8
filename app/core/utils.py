from datetime import date, datetime, timedelta, timezone
from typing import Optional

def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Storage keeps naive datetimes; aware values are converted to UTC first
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def view_range(view: str, today: date) -> tuple[date, date]:
    """
    Inclusive date range for a calendar view ("day", "week" or "month").
    Weeks start on Monday.
    """
    if view == "day":
        return today, today
    if view == "week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)
    if view == "month":
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)
    raise ValueError(f"Unknown view: {view}")
