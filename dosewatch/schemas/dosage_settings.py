"""Dosage settings schemas."""

from pydantic import BaseModel, Field


class DosageSettingsUpdate(BaseModel):
    """Request schema for updating dosage settings.

    All fields are optional -- only provided fields are updated. A
    warning interval above the safe interval (after merging with the
    stored values) is clamped down to the safe interval, not rejected.
    """

    safe_interval_min: int | None = Field(
        default=None,
        ge=1,
        le=1440,
        description="Minutes after a dose before another is safe. Range: 1-1440.",
    )
    warning_interval_min: int | None = Field(
        default=None,
        ge=0,
        le=1440,
        description="Minutes after a dose before the warning window. Range: 0-1440.",
    )
    default_dose_ml: float | None = Field(
        default=None,
        gt=0,
        le=100,
        description="Dose used when none is given, in ml.",
    )
    max_daily_dose_ml: float | None = Field(
        default=None,
        gt=0,
        le=1000,
        description="Rolling 24-hour limit in ml.",
    )
    sound_enabled: bool | None = None
