# Engine collaborators: durable store backends and notification sinks
from dosewatch.services.notifier import (
    LoggingNotificationSink,
    NotificationSink,
    RecentNotificationSink,
)
from dosewatch.services.store import DurableStore, MemoryStore, RedisStore, build_store

__all__ = [
    "DurableStore",
    "LoggingNotificationSink",
    "MemoryStore",
    "NotificationSink",
    "RecentNotificationSink",
    "RedisStore",
    "build_store",
]
