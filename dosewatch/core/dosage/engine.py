"""Dosage engine facade.

The one object the HTTP routers, the voice-assistant adapter and the tick
scheduler talk to. It owns the user registry and the settings store, funnels
every per-user change through :meth:`DosageEngine._merge_state`, hands
transition events to the notification sink, and writes the three persisted
records (dosage state map, settings, user registry) after each mutation.

No mutator raises for bad input: amounts fall back to the default dose,
unknown user ids are ignored and unreadable persisted data is replaced by
defaults.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from dosewatch.core.dosage.constants import MS_PER_HOUR
from dosewatch.core.dosage.enums import NotificationKind
from dosewatch.core.dosage.event_log import append_event
from dosewatch.core.dosage.models import (
    DosageSettings,
    DosageView,
    IntakeEvent,
    Session,
    User,
    UserDosageState,
    UserRegistryRecord,
)
from dosewatch.core.dosage.registry import UserRegistry
from dosewatch.core.dosage.risk import Transition, evaluate, time_remaining
from dosewatch.core.dosage.sessions import (
    close_session,
    idle_threshold_ms,
    route_event,
    should_auto_close,
)
from dosewatch.core.dosage.settings_store import SettingsStore
from dosewatch.logging_config import get_logger
from dosewatch.services.notifier import NotificationSink
from dosewatch.services.store import DurableStore

logger = get_logger(__name__)

STATE_KEY = "dosage_state"
SETTINGS_KEY = "settings"
USERS_KEY = "users"

_STATE_MAP = TypeAdapter(dict[str, UserDosageState])

T = TypeVar("T")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


class DosageEngine:
    """Per-user dosage risk engine.

    Args:
        store: Durable key/value store for the persisted records.
        notifier: Sink for one-shot transition notifications and sounds.
        clock: Returns "now" in epoch milliseconds (injectable for tests).
    """

    def __init__(
        self,
        store: DurableStore,
        notifier: NotificationSink,
        clock: Callable[[], int] = now_ms,
    ):
        self._store = store
        self._notifier = notifier
        self._clock = clock
        self._settings = SettingsStore()
        self._registry = UserRegistry()

    # -- persistence ------------------------------------------------------

    def restore(self) -> None:
        """Load settings, users and dosage state from the durable store.

        Missing or malformed records fall back to defaults.
        """
        settings = self._load(SETTINGS_KEY, DosageSettings.model_validate_json)
        if settings is not None:
            self._settings.replace(settings)

        record = self._load(USERS_KEY, UserRegistryRecord.model_validate_json)
        states = self._load(STATE_KEY, _STATE_MAP.validate_json)
        self._registry = UserRegistry(
            users=record.users if record else None,
            current_user_id=record.current_user_id if record else None,
            states=states or {},
        )
        if record is None or not record.users:
            # The synthesized default user must keep its id across restarts
            self._persist_users()

        logger.info(
            "Restored dosage engine",
            user_count=len(self._registry.list()),
            users_with_state=len(self._registry.states()),
        )

    def _load(self, key: str, parse: Callable[[str], T]) -> T | None:
        raw = self._store.load(key)
        if raw is None:
            return None
        try:
            return parse(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding malformed persisted record",
                key=key,
                error_count=e.error_count(),
            )
            return None

    def _save(self, key: str, payload: str) -> None:
        try:
            self._store.save(key, payload)
        except Exception:
            logger.error("Failed to persist record", key=key, exc_info=True)

    def _persist_states(self) -> None:
        self._save(STATE_KEY, _STATE_MAP.dump_json(self._registry.states()).decode())

    def _persist_settings(self) -> None:
        self._save(SETTINGS_KEY, self._settings.current.model_dump_json())

    def _persist_users(self) -> None:
        self._save(USERS_KEY, self._registry.to_record().model_dump_json())

    # -- reads ------------------------------------------------------------

    @property
    def settings(self) -> DosageSettings:
        return self._settings.current

    def now(self) -> int:
        """The engine clock's current time in epoch milliseconds."""
        return self._clock()

    def users(self) -> list[User]:
        return self._registry.list()

    def current_user(self) -> User:
        return self._registry.current()

    def get_user(self, user_id: str) -> User | None:
        return self._registry.get(user_id)

    def user_state(self, user_id: str) -> UserDosageState | None:
        """Stored state for *user_id* (possibly stale if not active)."""
        if self._registry.get(user_id) is None:
            return None
        return self._registry.state_for(user_id)

    def view(self) -> DosageView:
        """Snapshot of the active user's dosage state."""
        user = self._registry.current()
        state = self._registry.state_for(user.id)
        return DosageView(
            user=user,
            events=state.events,
            sessions=state.sessions,
            current_session=state.current_session,
            active=state.active,
            time_remaining_ms=state.time_remaining_ms,
            risk_level=state.risk_level,
            rolling_24h_total_ml=state.rolling_24h_total_ml,
            last_event=state.last_event,
        )

    # -- state merge and evaluation ---------------------------------------

    def _merge_state(self, user_id: str, **changes: Any) -> UserDosageState:
        """Replace *user_id*'s state with a copy carrying *changes*."""
        state = self._registry.state_for(user_id)
        merged = state.model_copy(update=changes)
        self._registry.set_state(user_id, merged)
        return merged

    def _emit(self, user_id: str, transitions: list[Transition]) -> None:
        for transition in transitions:
            logger.info(
                "Risk transition",
                user_id=user_id,
                kind=transition.kind.value,
            )
            try:
                self._notifier.notify(transition.kind, transition.message)
                if transition.sound is not None and self.settings.sound_enabled:
                    self._notifier.play_sound(transition.sound)
            except Exception:
                logger.error(
                    "Notification sink failed",
                    user_id=user_id,
                    kind=transition.kind.value,
                    exc_info=True,
                )

    def _recompute(self, user_id: str, at_ms: int) -> UserDosageState:
        settings = self.settings
        evaluation = evaluate(self._registry.state_for(user_id), settings, at_ms)
        state = self._merge_state(user_id, **evaluation.state_changes())
        self._emit(user_id, evaluation.transitions)
        changed = bool(evaluation.transitions)

        closed = self._close_idle_session(user_id, at_ms)
        if closed is not None:
            state = closed
            changed = True

        if changed:
            self._persist_states()
        return state

    def _close_idle_session(self, user_id: str, at_ms: int) -> UserDosageState | None:
        """Detach the open session if it has been idle too long at *at_ms*.

        Returns:
            The updated state, or None when the session was left open.
        """
        settings = self.settings
        state = self._registry.state_for(user_id)
        if not should_auto_close(state, settings, at_ms):
            return None

        state = self._merge_state(user_id, **close_session(state))
        idle_hours = idle_threshold_ms(settings) / MS_PER_HOUR
        self._emit(
            user_id,
            [
                Transition(
                    kind=NotificationKind.new_session_started,
                    message=(
                        f"No intake for over {idle_hours:g} hours. "
                        "A new session has started."
                    ),
                )
            ],
        )
        return state

    def tick(self) -> DosageView:
        """Periodic recomputation for the active user only."""
        self._recompute(self._registry.current().id, self._clock())
        return self.view()

    # -- dosage mutators --------------------------------------------------

    def add_intake(
        self,
        amount_ml: Any = None,
        note: str | None = None,
        backdate_minutes: Any = None,
    ) -> IntakeEvent:
        """Log an intake for the active user and recompute immediately.

        Args:
            amount_ml: Dose in ml; non-numeric or non-positive values fall
                back to the configured default dose.
            note: Optional free-text note.
            backdate_minutes: Log the intake this many minutes ago.

        Returns:
            The created IntakeEvent.
        """
        user_id = self._registry.current().id
        at_ms = self._clock()
        # An idle-expired session is closed before the new event is routed
        self._close_idle_session(user_id, at_ms)
        state = self._registry.state_for(user_id)

        event, events = append_event(
            state.events,
            amount_ml,
            note,
            backdate_minutes,
            now_ms=at_ms,
            default_dose_ml=self.settings.default_dose_ml,
        )
        state = self._merge_state(user_id, events=events, **route_event(state, event))

        newest = max(e.timestamp_ms for e in events)
        if time_remaining(at_ms - newest, self.settings) > 0:
            self._merge_state(user_id, safe_notified=False)

        self._recompute(user_id, at_ms)
        self._persist_states()

        logger.info(
            "Logged intake",
            user_id=user_id,
            event_id=event.id,
            amount_ml=event.amount_ml,
            backdated=event.timestamp_ms != at_ms,
            event_count=len(events),
        )
        return event

    def reset_session(self) -> None:
        """Wipe the active user's events and sessions entirely."""
        user_id = self._registry.current().id
        self._merge_state(user_id, **dict(UserDosageState()))
        self._persist_states()
        logger.info("Reset dosage history", user_id=user_id)

    def start_new_session(self) -> Session | None:
        """Close the open session without touching event history.

        Returns:
            The closed session, or None if no session was open.
        """
        user_id = self._registry.current().id
        state = self._registry.state_for(user_id)
        closed = state.current_session
        if closed is None:
            return None

        self._merge_state(user_id, **close_session(state))
        self._persist_states()
        logger.info("Started new session", user_id=user_id, closed_session=closed.id)
        return closed

    def update_settings(self, changes: dict[str, Any]) -> DosageSettings:
        """Partially update the shared settings; effective from the next tick."""
        updated = self._settings.update(changes)
        self._persist_settings()
        return updated

    # -- user mutators ----------------------------------------------------

    def switch_user(self, user_id: str) -> bool:
        """Activate *user_id* and re-evaluate its state from its last event."""
        if not self._registry.switch_to(user_id):
            return False
        self._persist_users()
        self._recompute(user_id, self._clock())
        return True

    def add_user(self, name: str | None = None) -> User:
        user = self._registry.add(name)
        self._persist_users()
        self._recompute(user.id, self._clock())
        return user

    def remove_user(self, user_id: str) -> bool:
        if not self._registry.remove(user_id):
            return False
        self._persist_users()
        self._persist_states()
        self._recompute(self._registry.current().id, self._clock())
        return True

    def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None:
        user = self._registry.update(user_id, changes)
        if user is not None:
            self._persist_users()
        return user
