"""Dosage schemas."""

from pydantic import BaseModel, Field

from dosewatch.core.dosage.models import Session
from dosewatch.services.notifier import Notification


class IntakeCreate(BaseModel):
    """Request schema for logging an intake.

    ``amount_ml`` is deliberately unbounded: a missing or non-positive
    amount is replaced by the configured default dose rather than
    rejected.
    """

    amount_ml: float | None = Field(
        default=None,
        description="Dose in ml. Omit to use the configured default dose.",
    )
    note: str | None = Field(default=None, max_length=500)
    backdate_minutes: int | None = Field(
        default=None,
        ge=0,
        le=1440,
        description="Log the intake this many minutes in the past. Range: 0-1440.",
    )


class SessionCloseResponse(BaseModel):
    """Response schema for manually starting a new session."""

    closed_session: Session | None = None


class NotificationListResponse(BaseModel):
    notifications: list[Notification]
