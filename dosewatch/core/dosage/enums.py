"""Dosage engine enums."""

from enum import StrEnum, auto


class RiskLevel(StrEnum):
    """Safety classification of the active user's next dose."""

    danger = auto()
    warning = auto()
    safe = auto()


class NotificationKind(StrEnum):
    """One-shot events emitted by the risk evaluator.

    ``safe_after_full_wait`` replaces ``safe_reached`` when the level
    before the transition was ``danger``, i.e. the user waited out the
    whole interval without passing through a warning tick.
    """

    safe_reached = auto()
    safe_after_full_wait = auto()
    unsafe_now = auto()
    new_session_started = auto()


class SoundTag(StrEnum):
    """Sounds the notification sink may be asked to play."""

    safe = auto()
    danger = auto()
