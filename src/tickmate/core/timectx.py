"""Time context engine - relative phrasing, local display and due-state checks.

Pure functions - no I/O. Every function that depends on the current time
accepts an optional `now` so callers (and tests) can pin the clock.
"""

import math
import re
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import DateParseError, ValidationError

DEFAULT_TIMEZONE = "UTC"

MINUTE = 60 * 1000
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
DUE_SOON_WINDOW = 2 * DAY

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)

# (upper bound of tier, unit size, unit name) - checked against the raw diff
_TIERS = (
    (HOUR, MINUTE, "minute"),
    (DAY, HOUR, "hour"),
    (WEEK, DAY, "day"),
    (MONTH, WEEK, "week"),
)

# TickTick sends offsets without a colon: 2025-01-15T10:00:00.000+0000
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")

Instant = str | datetime | int | float


@dataclass(frozen=True)
class TimeContext:
    """One instant described four ways for an agent."""

    iso: str
    relative: str
    user_local: str
    timestamp: int

    def to_dict(self) -> dict:
        return asdict(self)


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name}")


def parse_instant(value: Instant, timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """
    Convert an ISO string, datetime or epoch milliseconds to an aware datetime.

    Naive values are read as wall-clock time in `timezone`.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return EPOCH + timedelta(milliseconds=value)
    elif isinstance(value, str):
        text = _COMPACT_OFFSET.sub(r"\1:\2", value.strip())
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise DateParseError(value)
    else:
        raise DateParseError(str(value))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=get_zone(timezone))
    return parsed


def to_millis(instant: datetime) -> int:
    """Milliseconds since the Unix epoch, exact."""
    return (instant - EPOCH) // timedelta(milliseconds=1)


def to_iso(instant: datetime) -> str:
    """Canonical UTC ISO-8601 with millisecond precision."""
    utc = instant.astimezone(dt_timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_now(now: datetime | None) -> datetime:
    """Current UTC instant unless the caller pinned one. Naive values are UTC."""
    if now is None:
        return datetime.now(dt_timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=dt_timezone.utc)
    return now


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _count(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def relative_time(diff_ms: float) -> str:
    """
    Describe a signed millisecond offset from now.

    Tier membership uses the raw absolute difference; the displayed number
    is rounded within the tier.
    """
    magnitude = abs(diff_ms)
    is_past = diff_ms < 0

    if magnitude < MINUTE:
        return "just now" if is_past else "in a moment"

    for upper, unit_size, unit in _TIERS:
        if magnitude < upper:
            break
    else:
        unit_size, unit = MONTH, "month"

    phrase = _count(_round_half_up(magnitude / unit_size), unit)
    return f"{phrase} ago" if is_past else f"in {phrase}"


def is_same_day(first: datetime, second: datetime, timezone: str) -> bool:
    """True if both instants fall on the same calendar date in `timezone`."""
    zone = get_zone(timezone)
    return first.astimezone(zone).date() == second.astimezone(zone).date()


def format_local_time(instant: datetime, timezone: str, now: datetime | None = None) -> str:
    """
    Format as "Jan 15, 2025, 03:30 PM" in `timezone`.

    The date part becomes "Today" or "Tomorrow" when the local calendar
    date matches.
    """
    zone = get_zone(timezone)
    local = instant.astimezone(zone)
    today = resolve_now(now).astimezone(zone).date()

    if local.date() == today:
        day = "Today"
    elif local.date() == today + timedelta(days=1):
        day = "Tomorrow"
    else:
        day = f"{local:%b} {local.day}, {local.year}"

    return f"{day}, {local:%I:%M %p}"


def to_time_context(
    value: Instant,
    timezone: str = DEFAULT_TIMEZONE,
    now: datetime | None = None,
) -> TimeContext:
    """Build the full time context for one instant."""
    now = resolve_now(now)
    instant = parse_instant(value, timezone)
    timestamp = to_millis(instant)

    return TimeContext(
        iso=to_iso(instant),
        relative=relative_time(timestamp - to_millis(now)),
        user_local=format_local_time(instant, timezone, now),
        timestamp=timestamp,
    )


# ============== Due-State Classification ==============


def is_overdue(
    due: Instant | None,
    now: datetime | None = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> bool:
    """Due date strictly before now."""
    if due is None or due == "":
        return False
    return parse_instant(due, timezone) < resolve_now(now)


def is_due_today(
    due: Instant | None,
    timezone: str = DEFAULT_TIMEZONE,
    now: datetime | None = None,
) -> bool:
    """Due date falls on today's calendar date in `timezone`."""
    if due is None or due == "":
        return False
    return is_same_day(parse_instant(due, timezone), resolve_now(now), timezone)


def is_due_soon(
    due: Instant | None,
    now: datetime | None = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> bool:
    """Due date in the future but less than 48 hours away."""
    if due is None or due == "":
        return False
    diff = to_millis(parse_instant(due, timezone)) - to_millis(resolve_now(now))
    return 0 < diff < DUE_SOON_WINDOW
