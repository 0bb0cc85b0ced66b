"""Flexible date parsing for agent-supplied due dates."""

import re
from datetime import datetime, timedelta

from .errors import DateParseError
from .timectx import DEFAULT_TIMEZONE, get_zone, parse_instant, resolve_now, to_iso

# keyword -> calendar days to add to the current local date
RELATIVE_KEYWORDS = {
    "now": 0,
    "today": 0,
    "tomorrow": 1,
    "next week": 7,
}

# 8-digit strings are basic ISO dates (YYYYMMDD), not epoch millis
_EPOCH_MILLIS = re.compile(r"^-?\d{9,}(\.\d+)?$")


def parse_flexible_date(
    text: str,
    timezone: str = DEFAULT_TIMEZONE,
    now: datetime | None = None,
) -> str:
    """
    Turn "today", "tomorrow", "next week", an ISO string or epoch millis
    into a canonical UTC ISO timestamp.

    Relative keywords keep the current wall-clock time and advance the
    local calendar date, so month and year rollovers come out right.
    Raises DateParseError naming the input when nothing matches.
    """
    if text is None:
        raise DateParseError("None")

    key = text.strip().lower()
    if key in RELATIVE_KEYWORDS:
        local = resolve_now(now).astimezone(get_zone(timezone))
        return to_iso(local + timedelta(days=RELATIVE_KEYWORDS[key]))

    if not key:
        raise DateParseError(text)

    try:
        if _EPOCH_MILLIS.match(key):
            return to_iso(parse_instant(float(key)))
        return to_iso(parse_instant(text.strip(), timezone))
    except OverflowError:
        raise DateParseError(text)
    except DateParseError:
        # re-raise with the input as typed
        raise DateParseError(text)
