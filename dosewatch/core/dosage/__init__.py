"""Per-user dosage risk engine.

Turns a log of timestamped intake events into a risk level, a countdown
to the next safe window, auto-segmented sessions and session statistics:

1. Event log: append-only, optionally backdated intakes
2. Session segmenter: groups intakes, closes sessions after long idle gaps
3. Risk evaluator: danger / warning / safe ladder plus a 24-hour volume cap
4. User registry: isolates all of the above per user

``dosewatch.core.dosage.engine.DosageEngine`` composes these behind one
facade. It is not re-exported here because it depends on the service
layer's store and notifier contracts.

IMPORTANT: The risk levels are a timing aid, not medical advice.
"""

from dosewatch.core.dosage.enums import NotificationKind, RiskLevel, SoundTag
from dosewatch.core.dosage.models import (
    DosageSettings,
    DosageView,
    IntakeEvent,
    Session,
    User,
    UserDosageState,
)

__all__ = [
    "DosageSettings",
    "DosageView",
    "IntakeEvent",
    "NotificationKind",
    "RiskLevel",
    "Session",
    "SoundTag",
    "User",
    "UserDosageState",
]
