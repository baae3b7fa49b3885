"""Dosage router.

Read the active user's dosage view, log intakes, reset history, close the
open session, and poll recent notifications.
"""

from fastapi import APIRouter, Query, status

from dosewatch.core.dosage.models import DosageView, IntakeEvent
from dosewatch.dependencies import Engine, Notifications
from dosewatch.schemas.dosage import (
    IntakeCreate,
    NotificationListResponse,
    SessionCloseResponse,
)

router = APIRouter(prefix="/api/dosage", tags=["dosage"])


@router.get("", response_model=DosageView)
async def get_dosage_view(engine: Engine) -> DosageView:
    """Current risk level, countdown, history and sessions of the active user.

    Derived fields are as of the last tick or mutation.
    """
    return engine.view()


@router.post(
    "/intakes",
    response_model=IntakeEvent,
    status_code=status.HTTP_201_CREATED,
)
async def log_intake(body: IntakeCreate, engine: Engine) -> IntakeEvent:
    """Log an intake for the active user.

    A missing or non-positive amount is replaced by the default dose.
    """
    return engine.add_intake(
        amount_ml=body.amount_ml,
        note=body.note,
        backdate_minutes=body.backdate_minutes,
    )


@router.post("/reset", response_model=DosageView)
async def reset_history(engine: Engine) -> DosageView:
    """Erase all events and sessions of the active user."""
    engine.reset_session()
    return engine.view()


@router.post("/sessions", response_model=SessionCloseResponse)
async def start_new_session(engine: Engine) -> SessionCloseResponse:
    """Close the open session; the next intake opens a new one."""
    return SessionCloseResponse(closed_session=engine.start_new_session())


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    notifier: Notifications,
    limit: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """Most recent notifications and sound requests, newest first."""
    return NotificationListResponse(notifications=notifier.recent(limit))
