"""Dosage settings router.

The thresholds are shared by every user. Changes take effect on the next
risk tick.
"""

from fastapi import APIRouter

from dosewatch.core.dosage.models import DosageSettings
from dosewatch.dependencies import Engine
from dosewatch.schemas.dosage_settings import DosageSettingsUpdate

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=DosageSettings)
async def get_settings(engine: Engine) -> DosageSettings:
    return engine.settings


@router.patch("", response_model=DosageSettings)
async def patch_settings(body: DosageSettingsUpdate, engine: Engine) -> DosageSettings:
    """Update dosage settings.

    Only provided fields are updated. A warning interval above the safe
    interval is clamped down to it.
    """
    return engine.update_settings(body.model_dump(exclude_none=True))


@router.get("/defaults", response_model=DosageSettings)
async def get_settings_defaults() -> DosageSettings:
    """Default dosage settings for reference."""
    return DosageSettings()
