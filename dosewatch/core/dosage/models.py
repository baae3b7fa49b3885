"""Dosage engine Pydantic models.

Pure data models for the risk engine. No storage or HTTP dependencies;
the request/response schemas in ``dosewatch.schemas`` wrap these.
Timestamps are integer epoch milliseconds throughout.
"""

import uuid
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dosewatch.core.dosage.constants import (
    DEFAULT_DOSE_ML,
    DEFAULT_MAX_DAILY_DOSE_ML,
    DEFAULT_SAFE_INTERVAL_MIN,
    DEFAULT_WARNING_INTERVAL_MIN,
    MS_PER_MINUTE,
)
from dosewatch.core.dosage.enums import RiskLevel


def new_id() -> str:
    return str(uuid.uuid4())


class DosageSettings(BaseModel):
    """Process-wide dosage thresholds shared by every user.

    A warning interval longer than the safe interval is clamped down to
    the safe interval instead of being rejected.
    """

    safe_interval_min: int = Field(default=DEFAULT_SAFE_INTERVAL_MIN, ge=1)
    warning_interval_min: int = Field(default=DEFAULT_WARNING_INTERVAL_MIN, ge=0)
    default_dose_ml: float = Field(default=DEFAULT_DOSE_ML, gt=0)
    max_daily_dose_ml: float = Field(default=DEFAULT_MAX_DAILY_DOSE_ML, gt=0)
    sound_enabled: bool = True

    @model_validator(mode="after")
    def clamp_warning_interval(self) -> Self:
        if self.warning_interval_min > self.safe_interval_min:
            self.warning_interval_min = self.safe_interval_min
        return self

    @property
    def safe_interval_ms(self) -> int:
        return self.safe_interval_min * MS_PER_MINUTE

    @property
    def warning_interval_ms(self) -> int:
        return self.warning_interval_min * MS_PER_MINUTE


class IntakeEvent(BaseModel):
    """A single logged dose. Never edited after creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    timestamp_ms: int
    amount_ml: float = Field(gt=0)
    note: str | None = None


class Session(BaseModel):
    """A contiguous run of intakes with derived statistics.

    ``events`` is ordered by timestamp, oldest first. ``start_timestamp_ms``
    is the timestamp of the event that opened the session, which can differ
    from ``first_intake_timestamp_ms`` once an older event is backdated in.
    """

    id: str = Field(default_factory=new_id)
    start_timestamp_ms: int
    first_intake_timestamp_ms: int
    last_intake_timestamp_ms: int
    duration_hours: float = 0.0
    total_ml: float = 0.0
    ml_per_hour: float = 0.0
    ml_per_intake: float = 0.0
    ml_per_24h: float = 0.0
    intake_count: int = 0
    events: list[IntakeEvent] = Field(default_factory=list)


class UserDosageState(BaseModel):
    """Everything the engine tracks for one user.

    ``events`` is kept newest first. ``last_event`` is always the
    maximum-timestamp event (``None`` iff ``events`` is empty) and
    ``active`` is true iff ``events`` is non-empty.
    """

    events: list[IntakeEvent] = Field(default_factory=list)
    sessions: list[Session] = Field(default_factory=list)
    current_session: Session | None = None
    active: bool = False
    time_remaining_ms: int = 0
    risk_level: RiskLevel = RiskLevel.safe
    rolling_24h_total_ml: float = 0.0
    last_event: IntakeEvent | None = None
    safe_notified: bool = False
    # Last-intake timestamp the idle auto-close has already handled
    auto_split_marker_ms: int | None = None


class User(BaseModel):
    """A tracked person. Owns exactly one ``UserDosageState`` by ``id``."""

    id: str = Field(default_factory=new_id)
    display_name: str = Field(min_length=1)
    color_tag: str
    avatar_tag: str


class UserRegistryRecord(BaseModel):
    """Persisted form of the user registry."""

    users: list[User] = Field(default_factory=list)
    current_user_id: str | None = None


class DosageView(BaseModel):
    """Consistent read-only snapshot of the active user's dosage state."""

    model_config = ConfigDict(frozen=True)

    user: User
    events: list[IntakeEvent]
    sessions: list[Session]
    current_session: Session | None
    active: bool
    time_remaining_ms: int
    risk_level: RiskLevel
    rolling_24h_total_ml: float
    last_event: IntakeEvent | None
