"""User registry.

Keeps the list of tracked users, which one is active, and each user's
``UserDosageState``. At least one user always exists, so every mutation
on an unknown id is a silent no-op rather than an error.
"""

from typing import Any

from dosewatch.core.dosage.constants import USER_AVATARS, USER_COLORS
from dosewatch.core.dosage.models import User, UserDosageState, UserRegistryRecord
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("display_name", "color_tag", "avatar_tag")


def _make_user(index: int, name: str | None = None) -> User:
    """Build the *index*-th user with palette entries for that position."""
    return User(
        display_name=name or f"User {index + 1}",
        color_tag=USER_COLORS[index % len(USER_COLORS)],
        avatar_tag=USER_AVATARS[index % len(USER_AVATARS)],
    )


class UserRegistry:
    """Users, the active user, and per-user dosage state."""

    def __init__(
        self,
        users: list[User] | None = None,
        current_user_id: str | None = None,
        states: dict[str, UserDosageState] | None = None,
    ):
        self._users: list[User] = list(users or [])
        if not self._users:
            self._users.append(_make_user(0))

        known_ids = {user.id for user in self._users}
        self._current_id = (
            current_user_id if current_user_id in known_ids else self._users[0].id
        )
        # States of users that no longer exist are dropped
        self._states: dict[str, UserDosageState] = {
            user_id: state
            for user_id, state in (states or {}).items()
            if user_id in known_ids
        }

    # -- users ------------------------------------------------------------

    def list(self) -> list[User]:
        return list(self._users)

    def get(self, user_id: str) -> User | None:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def current(self) -> User:
        user = self.get(self._current_id)
        if user is None:
            # A dangling active id falls back to the first user
            user = self._users[0]
            self._current_id = user.id
        return user

    def switch_to(self, user_id: str) -> bool:
        """Make *user_id* the active user. Returns False for unknown ids."""
        if self.get(user_id) is None:
            return False
        self._current_id = user_id
        return True

    def add(self, name: str | None = None) -> User:
        """Add a user with the next palette color/avatar and activate it."""
        user = _make_user(len(self._users), name)
        self._users.append(user)
        self._current_id = user.id
        logger.info("Added user", user_id=user.id, user_count=len(self._users))
        return user

    def remove(self, user_id: str) -> bool:
        """Remove *user_id* and its dosage state.

        No-op when it is the last remaining user or is unknown. Removing
        the active user activates the first remaining one.
        """
        if len(self._users) <= 1 or self.get(user_id) is None:
            return False

        self._users = [user for user in self._users if user.id != user_id]
        self._states.pop(user_id, None)
        if self._current_id == user_id:
            self._current_id = self._users[0].id

        logger.info("Removed user", user_id=user_id, user_count=len(self._users))
        return True

    def update(self, user_id: str, changes: dict[str, Any]) -> User | None:
        """Apply a partial rename / recolor / re-avatar. None for unknown ids."""
        user = self.get(user_id)
        if user is None:
            return None

        allowed = {
            key: value
            for key, value in changes.items()
            if key in _EDITABLE_FIELDS and value
        }
        updated = user.model_copy(update=allowed)
        self._users = [updated if u.id == user_id else u for u in self._users]
        return updated

    # -- per-user state ---------------------------------------------------

    def state_for(self, user_id: str) -> UserDosageState:
        """Get-or-create the dosage state for *user_id*."""
        state = self._states.get(user_id)
        if state is None:
            state = UserDosageState()
            self._states[user_id] = state
        return state

    def set_state(self, user_id: str, state: UserDosageState) -> None:
        if self.get(user_id) is not None:
            self._states[user_id] = state

    def states(self) -> dict[str, UserDosageState]:
        return dict(self._states)

    def to_record(self) -> UserRegistryRecord:
        return UserRegistryRecord(users=self.list(), current_user_id=self._current_id)
