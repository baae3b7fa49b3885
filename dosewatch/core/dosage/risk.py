"""Risk evaluation.

Turns the active user's event log and the shared settings into a risk
level, a countdown to the next safe window and the rolling 24-hour total.
The evaluator is stateless with respect to wall-clock gaps: each call
recomputes everything from the last event and ``now``, so a user whose
ticks were skipped while inactive is simply re-evaluated on activation.

Edge-triggered side effects are returned as :class:`Transition` values
rather than emitted here; the engine hands them to the notification sink.
"""

from dataclasses import dataclass, field

from dosewatch.core.dosage.enums import NotificationKind, RiskLevel, SoundTag
from dosewatch.core.dosage.event_log import latest, rolling_total
from dosewatch.core.dosage.models import DosageSettings, IntakeEvent, UserDosageState


@dataclass(frozen=True)
class Transition:
    """A one-shot notification produced by a level change."""

    kind: NotificationKind
    message: str
    sound: SoundTag | None = None


@dataclass
class RiskEvaluation:
    """Derived fields for one user at one instant."""

    risk_level: RiskLevel
    time_remaining_ms: int
    rolling_24h_total_ml: float
    last_event: IntakeEvent | None
    active: bool
    safe_notified: bool
    transitions: list[Transition] = field(default_factory=list)

    def state_changes(self) -> dict:
        """Fields to merge back into the user's ``UserDosageState``."""
        return {
            "risk_level": self.risk_level,
            "time_remaining_ms": self.time_remaining_ms,
            "rolling_24h_total_ml": self.rolling_24h_total_ml,
            "last_event": self.last_event,
            "active": self.active,
            "safe_notified": self.safe_notified,
        }


def classify(elapsed_ms: int, settings: DosageSettings) -> RiskLevel:
    """Time-based risk ladder.

    The warning boundary belongs to ``warning`` and the safe boundary
    belongs to ``safe``.
    """
    if elapsed_ms < settings.warning_interval_ms:
        return RiskLevel.danger
    if elapsed_ms < settings.safe_interval_ms:
        return RiskLevel.warning
    return RiskLevel.safe


def time_remaining(elapsed_ms: int, settings: DosageSettings) -> int:
    return max(0, settings.safe_interval_ms - elapsed_ms)


def _safe_transition(previous: RiskLevel) -> Transition:
    if previous == RiskLevel.danger:
        return Transition(
            kind=NotificationKind.safe_after_full_wait,
            message=(
                "You waited out the full safe interval. "
                "It is safe to take another dose if needed."
            ),
            sound=SoundTag.safe,
        )
    return Transition(
        kind=NotificationKind.safe_reached,
        message="Safe window reached. It is safe to take another dose if needed.",
        sound=SoundTag.safe,
    )


def _unsafe_transition(total_ml: float, settings: DosageSettings) -> Transition:
    return Transition(
        kind=NotificationKind.unsafe_now,
        message=(
            f"Your 24-hour total of {total_ml:g} ml is over the daily limit "
            f"of {settings.max_daily_dose_ml:g} ml. Do not take another dose."
        ),
        sound=SoundTag.danger,
    )


def evaluate(
    state: UserDosageState,
    settings: DosageSettings,
    now_ms: int,
) -> RiskEvaluation:
    """Evaluate risk for *state* at *now_ms*.

    Args:
        state: The user's current dosage state. ``risk_level`` and
            ``safe_notified`` are read as the previous tick's outcome.
        settings: Shared dosage thresholds.
        now_ms: Evaluation instant in epoch milliseconds.

    Returns:
        RiskEvaluation with the new derived fields and any transitions.
    """
    last_event = latest(state.events)
    if last_event is None:
        return RiskEvaluation(
            risk_level=RiskLevel.safe,
            time_remaining_ms=0,
            rolling_24h_total_ml=0.0,
            last_event=None,
            active=False,
            safe_notified=state.safe_notified,
        )

    elapsed = now_ms - last_event.timestamp_ms
    total = rolling_total(state.events, now_ms)

    time_level = classify(elapsed, settings)
    over_daily_cap = total > settings.max_daily_dose_ml
    level = RiskLevel.danger if over_daily_cap else time_level

    previous = state.risk_level
    safe_notified = state.safe_notified
    transitions: list[Transition] = []

    if level == RiskLevel.safe and not safe_notified:
        safe_notified = True
        transitions.append(_safe_transition(previous))
    elif (
        over_daily_cap
        and time_level != RiskLevel.danger
        and previous == RiskLevel.warning
    ):
        # The time ladder never falls back, so only the daily cap can do this
        transitions.append(_unsafe_transition(total, settings))

    return RiskEvaluation(
        risk_level=level,
        time_remaining_ms=time_remaining(elapsed, settings),
        rolling_24h_total_ml=total,
        last_event=last_event,
        active=True,
        safe_notified=safe_notified,
        transitions=transitions,
    )
