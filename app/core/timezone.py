from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def local_today() -> date:
    return datetime.now(local_tz()).date()


def local_day_bounds(
    start: Optional[date],
    end: Optional[date],
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Local calendar days [start, end] -> half-open UTC interval."""
    tz = local_tz()

    def local_midnight(d: date) -> datetime:
        return datetime.combine(d, time.min, tzinfo=tz).astimezone(timezone.utc)

    start_dt = local_midnight(start) if start else None
    end_dt = local_midnight(end + timedelta(days=1)) if end else None
    return start_dt, end_dt
