"""Voice-assistant adapter.

Answers already-parsed voice intents against the active user's state and
returns plain-text speech. Platform request/response envelopes are the
caller's concern.

Supported intents:
  launch        – Welcome message
  status        – Last dose, time since, and how long to wait
  add_dose      – Log a dose (spoken amount or the default dose)
  session_info  – Statistics for the open session
  help          – List what can be said
  stop / cancel – End the conversation

Only the engine's public facade is used; all risk math stays in the
engine.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from dosewatch.core.dosage.engine import DosageEngine
from dosewatch.core.dosage.enums import RiskLevel
from dosewatch.logging_config import get_logger
from dosewatch.services.formatting import format_clock_time, format_duration

logger = get_logger(__name__)

HELP_TEXT = (
    'You can say: "check my status", "log a new dose", '
    'or "get session information".'
)
WELCOME_TEXT = (
    "Welcome to DoseWatch. You can ask me to check your status, "
    "log a new dose, or get session information."
)
UNKNOWN_TEXT = "I'm not sure how to help with that. " + HELP_TEXT


class VoiceIntent(StrEnum):
    launch = "launch"
    status = "status"
    add_dose = "add_dose"
    session_info = "session_info"
    help = "help"
    stop = "stop"
    cancel = "cancel"


# Platform intent names accepted alongside the canonical ones
_INTENT_ALIASES: dict[str, VoiceIntent] = {
    "launchrequest": VoiceIntent.launch,
    "statusintent": VoiceIntent.status,
    "adddosageintent": VoiceIntent.add_dose,
    "sessioninfointent": VoiceIntent.session_info,
    "amazon.helpintent": VoiceIntent.help,
    "amazon.stopintent": VoiceIntent.stop,
    "amazon.cancelintent": VoiceIntent.cancel,
}


class VoiceReply(BaseModel):
    speech: str
    end_session: bool = False


def resolve_intent(name: str) -> VoiceIntent | None:
    key = name.strip().lower()
    try:
        return VoiceIntent(key)
    except ValueError:
        return _INTENT_ALIASES.get(key)


def status_summary(engine: DosageEngine) -> str:
    """Spoken status of the active user's last dose and waiting time."""
    view = engine.view()
    last = view.last_event
    if last is None:
        return (
            "You haven't recorded any doses yet. "
            "You can say 'log a new dose' to get started."
        )

    elapsed = format_duration(engine.now() - last.timestamp_ms)
    text = f"Your last dose was {last.amount_ml:g} ml, taken {elapsed} ago. "

    wait = format_duration(view.time_remaining_ms)
    if view.risk_level == RiskLevel.safe:
        text += "It's safe to take another dose now if needed."
    elif view.risk_level == RiskLevel.warning:
        text += (
            "You're approaching the safe window. "
            f"Please wait another {wait} for complete safety."
        )
    elif view.time_remaining_ms > 0:
        text += (
            f"It's not safe to take another dose yet. Please wait another {wait}."
        )
    else:
        text += "It's not safe to take another dose. You are over your daily limit."

    return text + (
        f" You've taken {view.rolling_24h_total_ml:g} ml in the last 24 hours."
    )


def session_summary(engine: DosageEngine) -> str:
    """Spoken statistics for the active user's open session."""
    session = engine.view().current_session
    if session is None:
        return "You don't have an active session at the moment."

    return (
        f"Your current session started at "
        f"{format_clock_time(session.first_intake_timestamp_ms)}. "
        f"Your last intake was at "
        f"{format_clock_time(session.last_intake_timestamp_ms)}. "
        f"The session has lasted {session.duration_hours:.1f} hours. "
        f"You've taken {session.intake_count} doses totaling "
        f"{session.total_ml:.1f} ml. "
        f"That's {session.ml_per_intake:.1f} ml per intake and "
        f"{session.ml_per_hour:.1f} ml per hour."
    )


def add_intake_command(engine: DosageEngine, amount_ml: Any = None) -> str:
    """Log a dose for the active user and confirm it."""
    event = engine.add_intake(amount_ml)
    view = engine.view()
    text = f"I've recorded a new dose of {event.amount_ml:g} ml."
    if view.time_remaining_ms > 0:
        text += (
            f" Your next safe window is in {format_duration(view.time_remaining_ms)}."
        )
    return text


def _route_intent(
    engine: DosageEngine,
    intent: VoiceIntent | None,
    amount_ml: Any,
) -> VoiceReply:
    """Internal intent router (may raise)."""
    if intent == VoiceIntent.launch:
        return VoiceReply(speech=WELCOME_TEXT)
    if intent == VoiceIntent.status:
        return VoiceReply(speech=status_summary(engine))
    if intent == VoiceIntent.add_dose:
        return VoiceReply(speech=add_intake_command(engine, amount_ml))
    if intent == VoiceIntent.session_info:
        return VoiceReply(speech=session_summary(engine))
    if intent == VoiceIntent.help:
        return VoiceReply(speech=HELP_TEXT)
    if intent in (VoiceIntent.stop, VoiceIntent.cancel):
        return VoiceReply(speech="Goodbye!", end_session=True)
    return VoiceReply(speech=UNKNOWN_TEXT)


def handle_intent(
    engine: DosageEngine,
    intent: str,
    amount_ml: Any = None,
) -> VoiceReply:
    """Answer a voice intent for the active user.

    Always returns a reply; exceptions are logged and converted to an
    apology.

    Args:
        engine: The dosage engine.
        intent: Canonical or platform intent name.
        amount_ml: Spoken dose amount for ``add_dose`` (optional).

    Returns:
        VoiceReply with the speech text and whether to end the session.
    """
    resolved = resolve_intent(intent)
    try:
        return _route_intent(engine, resolved, amount_ml)
    except Exception:
        logger.error(
            "Unexpected error in voice intent handler",
            intent=intent,
            exc_info=True,
        )
        return VoiceReply(speech="Sorry, something went wrong. Please try again later.")
