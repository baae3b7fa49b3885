"""Session segmentation.

Groups a user's intake events into sessions. Every appended event lands
in the open session (opening one if needed) and all derived statistics
are recomputed from scratch, so recomputing twice from the same events
always gives the same numbers.

A session is closed, but kept in history, either manually or when the
idle gap since its last intake exceeds ``SESSION_IDLE_SAFE_INTERVALS``
safe intervals.
"""

from typing import Any

from dosewatch.core.dosage.constants import MS_PER_HOUR, SESSION_IDLE_SAFE_INTERVALS
from dosewatch.core.dosage.models import (
    DosageSettings,
    IntakeEvent,
    Session,
    UserDosageState,
)


def compute_session_stats(events: list[IntakeEvent]) -> dict[str, Any]:
    """Derive session statistics from *events*.

    A single-event (zero duration) session reports its total as the
    hourly rate and 0 as the 24-hour projection.

    Returns:
        Dict of derived ``Session`` fields, including ``events`` sorted
        oldest first.
    """
    ordered = sorted(events, key=lambda event: event.timestamp_ms)
    if not ordered:
        raise ValueError("A session needs at least one event")

    first, last = ordered[0], ordered[-1]
    duration_hours = (last.timestamp_ms - first.timestamp_ms) / MS_PER_HOUR
    total_ml = sum(event.amount_ml for event in ordered)
    ml_per_hour = total_ml / duration_hours if duration_hours > 0 else total_ml

    return {
        "events": ordered,
        "first_intake_timestamp_ms": first.timestamp_ms,
        "last_intake_timestamp_ms": last.timestamp_ms,
        "duration_hours": duration_hours,
        "total_ml": total_ml,
        "ml_per_intake": total_ml / len(ordered),
        "ml_per_hour": ml_per_hour,
        "ml_per_24h": ml_per_hour * 24 if duration_hours > 0 else 0.0,
        "intake_count": len(ordered),
    }


def open_session(event: IntakeEvent) -> Session:
    """Start a new session containing only *event*."""
    return Session(
        start_timestamp_ms=event.timestamp_ms,
        **compute_session_stats([event]),
    )


def extend_session(session: Session, event: IntakeEvent) -> Session:
    """Return a copy of *session* with *event* added and stats recomputed."""
    return session.model_copy(
        update=compute_session_stats([*session.events, event]),
    )


def replace_session(sessions: list[Session], session: Session) -> list[Session]:
    """Return *sessions* with the entry sharing *session*'s id swapped out.

    Unknown ids are appended.
    """
    replaced = False
    result = []
    for existing in sessions:
        if existing.id == session.id:
            result.append(session)
            replaced = True
        else:
            result.append(existing)
    if not replaced:
        result.append(session)
    return result


def route_event(state: UserDosageState, event: IntakeEvent) -> dict[str, Any]:
    """Route a freshly appended event into the open session.

    Returns:
        State changes (``current_session`` and ``sessions``) for the merge.
    """
    if state.current_session is None:
        session = open_session(event)
    else:
        session = extend_session(state.current_session, event)

    return {
        "current_session": session,
        "sessions": replace_session(state.sessions, session),
    }


def idle_threshold_ms(settings: DosageSettings) -> int:
    return SESSION_IDLE_SAFE_INTERVALS * settings.safe_interval_ms


def should_auto_close(
    state: UserDosageState,
    settings: DosageSettings,
    now_ms: int,
) -> bool:
    """Whether the idle gap since the open session's last intake is too long.

    Fires at most once per last-intake timestamp.
    """
    session = state.current_session
    if session is None:
        return False
    if state.auto_split_marker_ms == session.last_intake_timestamp_ms:
        return False
    return now_ms - session.last_intake_timestamp_ms > idle_threshold_ms(settings)


def close_session(state: UserDosageState) -> dict[str, Any]:
    """Detach the open session, keeping it unchanged in history.

    Returns:
        State changes for the merge (empty when no session is open).
    """
    session = state.current_session
    if session is None:
        return {}
    return {
        "current_session": None,
        "sessions": replace_session(state.sessions, session),
        "auto_split_marker_ms": session.last_intake_timestamp_ms,
    }
