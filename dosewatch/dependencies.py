"""FastAPI dependencies exposing the per-app engine and its collaborators.

The engine, store and notification sink are created once by
``create_app()`` and kept on ``app.state``; routers receive them through
these dependencies instead of importing module-level singletons.
"""

from typing import Annotated

from fastapi import Depends, Request

from dosewatch.core.dosage.engine import DosageEngine
from dosewatch.services.notifier import RecentNotificationSink
from dosewatch.services.store import MemoryStore, RedisStore


def get_engine(request: Request) -> DosageEngine:
    return request.app.state.engine


def get_notification_sink(request: Request) -> RecentNotificationSink:
    return request.app.state.notifier


def get_store(request: Request) -> MemoryStore | RedisStore:
    return request.app.state.store


Engine = Annotated[DosageEngine, Depends(get_engine)]
Notifications = Annotated[RecentNotificationSink, Depends(get_notification_sink)]
Store = Annotated[MemoryStore | RedisStore, Depends(get_store)]
