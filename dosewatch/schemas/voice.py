"""Voice-assistant schemas."""

from pydantic import BaseModel, Field


class VoiceIntentRequest(BaseModel):
    """An already-parsed voice intent."""

    intent: str = Field(min_length=1, max_length=64)
    amount_ml: float | None = Field(
        default=None,
        description="Spoken dose amount for the add_dose intent.",
    )
