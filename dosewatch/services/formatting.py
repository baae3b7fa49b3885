"""Human-readable formatting of engine values.

Used by the voice-assistant adapter and available to any client that
wants the same wording. Nothing here derives risk; it only formats.
"""

from datetime import UTC, datetime

from dosewatch.core.dosage.enums import RiskLevel

RISK_MESSAGES: dict[RiskLevel, str] = {
    RiskLevel.safe: "Safe to dose if needed.",
    RiskLevel.warning: "Almost there. Be cautious.",
    RiskLevel.danger: "Not safe yet. Keep waiting.",
}


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_duration(ms: int) -> str:
    """Spoken-style duration, e.g. ``"1 hour and 5 minutes"``.

    Seconds are truncated; anything at or below zero is ``"0 minutes"``.
    """
    if ms <= 0:
        return "0 minutes"

    minutes = int(ms // 60_000)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{_plural(hours, 'hour')} and {_plural(minutes, 'minute')}"
    return _plural(minutes, "minute")


def format_countdown(ms: int) -> str:
    """Clock-style countdown: ``MM:SS`` below an hour, else ``HH:MM:SS``."""
    if ms <= 0:
        return "00:00"

    total_seconds = int(ms // 1000)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_clock_time(timestamp_ms: int) -> str:
    """``HH:MM`` (UTC) for an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).strftime("%H:%M")


def risk_message(level: RiskLevel) -> str:
    return RISK_MESSAGES[level]
