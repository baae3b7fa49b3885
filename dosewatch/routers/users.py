"""User registry router."""

from fastapi import APIRouter, HTTPException, status

from dosewatch.core.dosage.models import DosageView, User
from dosewatch.dependencies import Engine
from dosewatch.schemas.errors import ErrorResponse
from dosewatch.schemas.user import UserCreate, UserListResponse, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown user"}}


def _user_list(engine) -> UserListResponse:
    return UserListResponse(
        users=engine.users(),
        current_user_id=engine.current_user().id,
    )


def _require_user(engine, user_id: str) -> User:
    user = engine.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("", response_model=UserListResponse)
async def list_users(engine: Engine) -> UserListResponse:
    return _user_list(engine)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def add_user(body: UserCreate, engine: Engine) -> User:
    """Add a user and make it the active user."""
    return engine.add_user(body.display_name)


@router.patch("/{user_id}", response_model=User, responses=_NOT_FOUND)
async def update_user(user_id: str, body: UserUpdate, engine: Engine) -> User:
    """Rename, recolor or re-avatar a user. Only provided fields change."""
    user = engine.update_user(user_id, body.model_dump(exclude_none=True))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.delete("/{user_id}", response_model=UserListResponse, responses=_NOT_FOUND)
async def remove_user(user_id: str, engine: Engine) -> UserListResponse:
    """Remove a user and its history.

    Removing the last remaining user is a no-op; the unchanged list is
    returned.
    """
    _require_user(engine, user_id)
    engine.remove_user(user_id)
    return _user_list(engine)


@router.post("/{user_id}/activate", response_model=DosageView, responses=_NOT_FOUND)
async def activate_user(user_id: str, engine: Engine) -> DosageView:
    """Switch the active user and return its freshly evaluated view."""
    _require_user(engine, user_id)
    engine.switch_user(user_id)
    return engine.view()
