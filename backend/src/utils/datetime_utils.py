"""
Datetime utilities for consistent timezone handling across the application.

Slot dates and times are stored as wall-clock strings ("YYYY-MM-DD", "HH:MM")
without an offset. They are always interpreted in the single configured
APP_TIMEZONE, and every comparison happens between timezone-aware datetimes.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from core.config import APP_TIMEZONE
from core.constants import SLOT_DATE_FORMAT, SLOT_TIME_FORMATS

logger = logging.getLogger(__name__)

LOCAL_TZ = ZoneInfo(APP_TIMEZONE)


def local_now() -> datetime:
    """
    Get the current datetime in the application timezone.

    Returns:
        Current timezone-aware datetime in APP_TIMEZONE
    """
    return datetime.now(LOCAL_TZ)


def local_today() -> date:
    """Current calendar day in the application timezone."""
    return local_now().date()


def ensure_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the application timezone.

    Naive datetimes are assumed to already be local wall-clock values.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=LOCAL_TZ)
    return dt.astimezone(LOCAL_TZ)


def parse_slot_start(slot_date: str, slot_time: str) -> datetime:
    """
    Combine a slot's date and time strings into a timezone-aware instant.

    Args:
        slot_date: Calendar day, "YYYY-MM-DD"
        slot_time: Local wall-clock time, "HH:MM" (seconds optional)

    Returns:
        Timezone-aware datetime in APP_TIMEZONE

    Raises:
        ValueError: If the combination does not parse
    """
    if not slot_date or not slot_time:
        raise ValueError(f"Missing slot date/time: {slot_date!r} {slot_time!r}")

    for time_format in SLOT_TIME_FORMATS:
        try:
            naive = datetime.strptime(
                f"{slot_date.strip()} {slot_time.strip()}",
                f"{SLOT_DATE_FORMAT} {time_format}",
            )
        except ValueError:
            continue
        return naive.replace(tzinfo=LOCAL_TZ)

    raise ValueError(f"Unparsable slot date/time: {slot_date!r} {slot_time!r}")


def is_valid_slot_date(value: str) -> bool:
    try:
        datetime.strptime(value, SLOT_DATE_FORMAT)
    except (TypeError, ValueError):
        return False
    return True


def is_valid_slot_time(value: str) -> bool:
    for time_format in SLOT_TIME_FORMATS:
        try:
            datetime.strptime(value, time_format)
        except (TypeError, ValueError):
            continue
        return True
    return False


def slot_end(slot_date: str, slot_time: str, duration_minutes: int) -> datetime:
    """End instant of a slot (start plus duration)."""
    return parse_slot_start(slot_date, slot_time) + timedelta(minutes=duration_minutes or 0)
