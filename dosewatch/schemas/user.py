"""User registry schemas."""

from pydantic import BaseModel, Field

from dosewatch.core.dosage.models import User


class UserCreate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=50)


class UserUpdate(BaseModel):
    """Partial rename / recolor / re-avatar. Omitted fields are unchanged."""

    display_name: str | None = Field(default=None, min_length=1, max_length=50)
    color_tag: str | None = Field(default=None, min_length=1, max_length=32)
    avatar_tag: str | None = Field(default=None, min_length=1, max_length=16)


class UserListResponse(BaseModel):
    users: list[User]
    current_user_id: str
