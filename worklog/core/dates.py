"""Timezone helpers for timesheet timestamps.

Timestamps are stored in UTC and carry their zone name in a separate column,
so that a record can be shown in the zone it was recorded in.
"""
import logging
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from worklog.core.config import settings

logger = logging.getLogger(__name__)

# "+02:00", "-0530", "UTC+01:00"
OFFSET_PATTERN = re.compile(r"^(?:UTC|GMT)?([+-])(\d{2}):?(\d{2})$")


class UTCDateTime(TypeDecorator):
    """DateTime column that always writes UTC and reads back aware UTC values."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=get_zone(settings.DEFAULT_TIMEZONE))
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_zone(name: Optional[str]) -> tzinfo:
    """Resolve a zone name, falling back to UTC for unknown names."""
    if not name or name == "UTC":
        return timezone.utc
    offset = parse_offset(name)
    if offset is not None:
        return offset
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using UTC")
        return timezone.utc


def parse_offset(name: str) -> Optional[tzinfo]:
    """Fixed-offset zone for names like ``+02:00``, None for anything else."""
    match = OFFSET_PATTERN.match(name)
    if match is None:
        return None
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        return None
    if sign == "-":
        delta = -delta
    return timezone(delta) if delta else timezone.utc


def format_offset(offset: timedelta) -> str:
    if not offset:
        return "UTC"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def zone_name(value: datetime) -> str:
    """Name of the zone a timestamp was given in."""
    tz = value.tzinfo
    if tz is None:
        return settings.DEFAULT_TIMEZONE
    key = getattr(tz, "key", None)
    if key:
        return key
    return format_offset(value.utcoffset())


def ensure_aware(value: datetime) -> datetime:
    """Attach the default zone to naive timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=get_zone(settings.DEFAULT_TIMEZONE))
    return value
