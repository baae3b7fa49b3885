"""Per-user intake event log.

Events are only ever appended (possibly backdated) or wiped as a whole by
a reset. The collection is kept newest first for history display, but
callers that need "the last intake" must use :func:`latest`, which
resolves the true maximum timestamp.
"""

import math
from typing import Any

from dosewatch.core.dosage.constants import MS_PER_MINUTE, ROLLING_WINDOW_MS
from dosewatch.core.dosage.models import IntakeEvent
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)


def _as_number(value: Any) -> float | None:
    """Parse *value* as a finite float, or return None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_amount(amount_ml: Any, default_dose_ml: float) -> float:
    """Return *amount_ml* if it is a positive number, else the default dose."""
    number = _as_number(amount_ml)
    if number is None or number <= 0:
        if amount_ml is not None:
            logger.warning(
                "Invalid intake amount, using default dose",
                amount_ml=repr(amount_ml),
                default_dose_ml=default_dose_ml,
            )
        return default_dose_ml
    return number


def resolve_timestamp(now_ms: int, backdate_minutes: Any = None) -> int:
    """Timestamp for a new event, *backdate_minutes* before *now_ms*.

    Missing, non-numeric or negative backdating means "now".
    """
    minutes = _as_number(backdate_minutes)
    if minutes is None or minutes <= 0:
        return now_ms
    return now_ms - int(minutes * MS_PER_MINUTE)


def insert_event(events: list[IntakeEvent], event: IntakeEvent) -> list[IntakeEvent]:
    """Return a new list with *event* placed at its timestamp position.

    Order is newest first; ties keep the newly appended event in front.
    """
    position = len(events)
    for index, existing in enumerate(events):
        if existing.timestamp_ms <= event.timestamp_ms:
            position = index
            break
    return [*events[:position], event, *events[position:]]


def append_event(
    events: list[IntakeEvent],
    amount_ml: Any,
    note: str | None = None,
    backdate_minutes: Any = None,
    *,
    now_ms: int,
    default_dose_ml: float,
) -> tuple[IntakeEvent, list[IntakeEvent]]:
    """Create an intake event and insert it into *events*.

    Args:
        events: The user's current events, newest first (not modified).
        amount_ml: Requested amount; falls back to *default_dose_ml*.
        note: Optional free-text note.
        backdate_minutes: Log the intake this many minutes in the past.
        now_ms: Current time in epoch milliseconds.
        default_dose_ml: Configured default dose.

    Returns:
        Tuple of (new event, new event list).
    """
    event = IntakeEvent(
        timestamp_ms=resolve_timestamp(now_ms, backdate_minutes),
        amount_ml=coerce_amount(amount_ml, default_dose_ml),
        note=note or None,
    )
    return event, insert_event(events, event)


def latest(events: list[IntakeEvent]) -> IntakeEvent | None:
    """The event with the maximum timestamp, or None for an empty log."""
    if not events:
        return None
    return max(events, key=lambda event: event.timestamp_ms)


def rolling_total(events: list[IntakeEvent], now_ms: int) -> float:
    """Sum of amounts logged strictly inside the trailing 24 hours."""
    cutoff = now_ms - ROLLING_WINDOW_MS
    return sum(event.amount_ml for event in events if event.timestamp_ms > cutoff)
