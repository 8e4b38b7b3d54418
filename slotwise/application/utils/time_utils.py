from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotwise.application.exceptions import ValidationError

UTC = dt_timezone.utc

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def resolve_timezone(name: str | ZoneInfo | None) -> ZoneInfo:
    """Return the ZoneInfo for an IANA name. Never guesses a default."""
    if isinstance(name, ZoneInfo):
        return name
    if not name or not str(name).strip():
        raise ValidationError("Timezone is required")
    try:
        return ZoneInfo(str(name).strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Invalid timezone: {name}") from e


def parse_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not _DATE_RE.match(str(value).strip()):
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def parse_time(value: str | time) -> time:
    """Parse "HH:MM" or "HH:MM:SS". Seconds are kept but callers compare on HH:MM."""
    if isinstance(value, time):
        return value
    match = _TIME_RE.match(str(value or "").strip())
    if not match:
        raise ValidationError(f"Invalid time (expected HH:MM): {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ValidationError(f"Invalid time: {value!r}")
    return time(hour, minute, second)


def normalize_hhmm(value: str | time) -> str:
    """"09:00:00" -> "09:00"."""
    parsed = parse_time(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def day_of_week_index(target: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (target.weekday() + 1) % 7


def ensure_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError("Instant must be timezone-aware")
    return instant


def local_to_instant(date_str: str | date, time_str: str | time, timezone: str | ZoneInfo) -> datetime:
    """
    Interpret a local calendar date and wall-clock time in `timezone` and return the UTC instant.

    Wall-clock times inside a spring-forward gap do not exist and raise ValidationError.
    Ambiguous fall-back times resolve to the first occurrence (fold=0).
    """
    tz = resolve_timezone(timezone)
    naive = datetime.combine(parse_date(date_str), parse_time(time_str))
    local = naive.replace(tzinfo=tz, fold=0)
    instant = local.astimezone(UTC)
    if instant.astimezone(tz).replace(tzinfo=None) != naive:
        raise ValidationError(
            f"{naive.strftime('%Y-%m-%d %H:%M')} does not exist in {tz.key} (DST transition)"
        )
    return instant


def instant_to_local(instant: datetime, timezone: str | ZoneInfo) -> datetime:
    return ensure_aware(instant).astimezone(resolve_timezone(timezone))


def instant_to_local_time_string(instant: datetime, timezone: str | ZoneInfo) -> str:
    return instant_to_local(instant, timezone).strftime("%H:%M")


def instant_to_local_date(instant: datetime, timezone: str | ZoneInfo) -> date:
    return instant_to_local(instant, timezone).date()


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap: touching endpoints do not conflict."""
    return start_a < end_b and end_a > start_b


def day_bounds(target: str | date, timezone: str | ZoneInfo) -> tuple[datetime, datetime]:
    """Local midnight to next local midnight as UTC instants, half-open."""
    tz = resolve_timezone(timezone)
    day = parse_date(target)
    start = datetime.combine(day, time.min, tzinfo=tz).astimezone(UTC)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz).astimezone(UTC)
    return start, end


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        ensure_aware(self.start)
        ensure_aware(self.end)
        if self.end <= self.start:
            raise ValidationError("Interval end must be after its start")

    @classmethod
    def from_start(cls, start: datetime, duration_minutes: int) -> "TimeInterval":
        if duration_minutes is None or int(duration_minutes) <= 0:
            raise ValidationError(f"Duration must be positive, got {duration_minutes!r}")
        return cls(start=start, end=start + timedelta(minutes=int(duration_minutes)))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)

    def shift(self, minutes: int) -> "TimeInterval":
        delta = timedelta(minutes=minutes)
        return TimeInterval(start=self.start + delta, end=self.end + delta)
