"""Tenant-local calendar and daily cutoff evaluation."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Return the zone for a tenant, falling back to UTC when unknown."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return ZoneInfo("UTC")


def parse_cutoff(raw: str | time) -> time:
    """Parse an HH:MM cutoff value."""
    if isinstance(raw, time):
        return raw
    return time.fromisoformat(raw.strip())


def format_cutoff(value: time) -> str:
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class CalendarSnapshot:
    """One consistent reading of "now" for a tenant."""

    now_utc: datetime
    local_now: datetime
    today: date
    cutoff_time: time
    timezone: str

    @property
    def yesterday(self) -> date:
        return self.today - timedelta(days=1)

    @property
    def is_cutoff_passed(self) -> bool:
        """True strictly after the cutoff instant of the local day."""
        return self.is_after_cutoff(self.local_now)

    def is_after_cutoff(self, instant: datetime) -> bool:
        """Return True when ``instant`` falls after the cutoff of its local day."""
        local = instant.astimezone(self.local_now.tzinfo)
        cutoff_at = datetime.combine(
            local.date(), self.cutoff_time, tzinfo=local.tzinfo
        )
        return local > cutoff_at

    def is_past(self, day: date) -> bool:
        return day < self.today

    def is_locked(self, day: date) -> bool:
        """Return True when orders for the day can no longer be changed."""
        return day < self.today or (day == self.today and self.is_cutoff_passed)

    def local_date_of(self, instant: datetime) -> date:
        return instant.astimezone(self.local_now.tzinfo).date()


def snapshot(
    now_utc: datetime, timezone: str | None, cutoff_time: time
) -> CalendarSnapshot:
    """Build a calendar snapshot for a tenant from a UTC instant."""
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=UTC)
    tz = resolve_timezone(timezone)
    local_now = now_utc.astimezone(tz)
    return CalendarSnapshot(
        now_utc=now_utc.astimezone(UTC),
        local_now=local_now,
        today=local_now.date(),
        cutoff_time=cutoff_time,
        timezone=tz.key,
    )


def iso_week(day: date) -> tuple[int, int]:
    """Return the (ISO week-year, ISO week-number) of a date."""
    year, week, _ = day.isocalendar()
    return year, week


def week_bounds(day: date) -> tuple[date, date]:
    """Return the Monday and Sunday of the ISO week containing the date."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)
