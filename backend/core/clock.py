"""Clock abstraction so "now" can be fixed in tests."""

from datetime import datetime
from zoneinfo import ZoneInfo

from backend.core import config


def _resolve_zone(timezone_name: str | None) -> ZoneInfo | None:
    name = config.APP_TIMEZONE if timezone_name is None else timezone_name
    return ZoneInfo(name) if name else None


def to_local_naive(value: datetime, timezone_name: str | None = None) -> datetime:
    """Converts an aware datetime to naive local wall time. Naive values pass through."""
    if value.tzinfo is None:
        return value

    zone = _resolve_zone(timezone_name)
    return value.astimezone(zone).replace(tzinfo=None)


class SystemClock:
    def __init__(self, timezone_name: str | None = None):
        self._zone = _resolve_zone(timezone_name)

    def now(self) -> datetime:
        if self._zone is None:
            return datetime.now()
        return datetime.now(self._zone).replace(tzinfo=None)


class FixedClock:
    def __init__(self, instant: datetime):
        self.instant = to_local_naive(instant)

    def now(self) -> datetime:
        return self.instant
