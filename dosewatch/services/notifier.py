"""Notification sinks for risk transitions.

The engine calls ``notify(kind, message)`` once per transition and
``play_sound(tag)`` when sounds are enabled. Playback itself is left to
whatever client consumes the notifications; the sinks here only record
and log the request.
"""

from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from dosewatch.core.dosage.enums import NotificationKind, SoundTag
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)


class NotificationSink(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None: ...

    def play_sound(self, tag: SoundTag) -> None: ...


class Notification(BaseModel):
    """A delivered notification or sound request."""

    model_config = ConfigDict(frozen=True)

    kind: NotificationKind | None = None
    message: str = ""
    sound: SoundTag | None = None
    created_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LoggingNotificationSink:
    """Sink that only writes notifications to the log."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        logger.info("Notification", kind=kind.value, message=message)

    def play_sound(self, tag: SoundTag) -> None:
        logger.info("Sound requested", sound=tag.value)


class RecentNotificationSink(LoggingNotificationSink):
    """Logs notifications and keeps the most recent ones for polling clients."""

    def __init__(
        self,
        max_items: int = 50,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._items: deque[Notification] = deque(maxlen=max_items)
        self._clock = clock

    def notify(self, kind: NotificationKind, message: str) -> None:
        super().notify(kind, message)
        self._items.append(
            Notification(kind=kind, message=message, created_at=self._clock())
        )

    def play_sound(self, tag: SoundTag) -> None:
        super().play_sound(tag)
        self._items.append(Notification(sound=tag, created_at=self._clock()))

    def recent(self, limit: int | None = None) -> list[Notification]:
        """Newest first, at most *limit* items."""
        items = list(reversed(self._items))
        return items[:limit] if limit is not None else items

    def clear(self) -> None:
        self._items.clear()
