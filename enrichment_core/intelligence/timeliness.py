"""
Timeliness model: decays a signal's strength with the age of its event.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)

EventDate = Union[datetime, date, str, None]


@dataclass(frozen=True)
class TimelinessBand:
    label: str
    max_age_days: int
    multiplier: float


# Evaluated in ascending order of max_age_days, first match wins
TIMELINESS_BANDS = (
    TimelinessBand("excellent", 30, 1.0),
    TimelinessBand("strong", 90, 0.85),
    TimelinessBand("ok", 180, 0.6),
    TimelinessBand("weak", 365, 0.3),
)

UNKNOWN_DATE_MULTIPLIER = 0.4
EXPIRED_MULTIPLIER = 0.0

# Older interpreters only parse 3 or 6 fractional-second digits
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})[.,](\d+)")


def round_half_up(value: float, places: int = 2) -> float:
    """Round half up: 0.125 -> 0.13."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class TimelinessResult:
    multiplier: float
    band: str
    age_days: Optional[int]


def _to_utc(value: EventDate) -> Optional[datetime]:
    """Normalize an event date to an aware UTC datetime; None if unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable event date treated as unknown: {value!r}")
            return None
    elif not isinstance(value, datetime):
        if isinstance(value, date):
            value = datetime(value.year, value.month, value.day)
        else:
            return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def compute_timeliness_multiplier(
    event_date: EventDate, reference_date: Optional[datetime] = None
) -> TimelinessResult:
    """
    Map an event's age onto its timeliness band.

    Args:
        event_date: When the event happened (datetime, date or ISO-8601 string)
        reference_date: Clock to measure age against (defaults to now)

    Returns:
        TimelinessResult with the multiplier, band label and whole-day age
        (None when the date is missing or unparseable)
    """
    event = _to_utc(event_date)
    if event is None:
        return TimelinessResult(UNKNOWN_DATE_MULTIPLIER, "unknown", None)

    reference = _to_utc(reference_date) or datetime.now(timezone.utc)
    age_days = math.floor((reference - event).total_seconds() / 86400)

    # Future-dated events count as brand new
    if age_days < 0:
        return TimelinessResult(TIMELINESS_BANDS[0].multiplier, TIMELINESS_BANDS[0].label, 0)

    for band in TIMELINESS_BANDS:
        if age_days <= band.max_age_days:
            return TimelinessResult(band.multiplier, band.label, age_days)

    return TimelinessResult(EXPIRED_MULTIPLIER, "expired", age_days)


def apply_timeliness(
    base_strength: float, event_date: EventDate, reference_date: Optional[datetime] = None
) -> float:
    """Decay `base_strength` by the event's age, rounded to 2 decimals."""
    result = compute_timeliness_multiplier(event_date, reference_date)
    return round_half_up(base_strength * result.multiplier)
