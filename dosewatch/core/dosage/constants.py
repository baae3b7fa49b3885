"""Dosage engine constants.

Time values are in milliseconds because every timestamp in the engine is
an integer epoch-millisecond value. Threshold defaults here seed a fresh
``DosageSettings`` record; the persisted record overrides them.
"""

from typing import Final

MS_PER_MINUTE: Final[int] = 60_000
MS_PER_HOUR: Final[int] = 3_600_000

# Rolling window for the daily-volume cap. An event exactly on the
# window edge is outside it.
ROLLING_WINDOW_MS: Final[int] = 24 * MS_PER_HOUR

# A session auto-closes once the idle gap since its last intake exceeds
# this many safe intervals.
SESSION_IDLE_SAFE_INTERVALS: Final[int] = 4

DEFAULT_SAFE_INTERVAL_MIN: Final[int] = 90
DEFAULT_WARNING_INTERVAL_MIN: Final[int] = 60
DEFAULT_DOSE_ML: Final[float] = 2.0
DEFAULT_MAX_DAILY_DOSE_ML: Final[float] = 10.0

# Rotating palettes assigned to new users by current user count. Colors are
# CSS hex values.
USER_COLORS: Final[tuple[str, ...]] = (
    "#22C55E",
    "#9b87f5",
    "#7E69AB",
    "#0EA5E9",
    "#D946EF",
    "#F97316",
)
USER_AVATARS: Final[tuple[str, ...]] = (
    "\U0001f464",  # 👤
    "\U0001f465",  # 👥
    "\U0001f9d1",  # 🧑
    "\U0001f469",  # 👩
    "\U0001f468",  # 👨
    "\U0001f9d4",  # 🧔
    "\U0001f471",  # 👱
    "\U0001f478",  # 👸
    "\U0001f9b8",  # 🦸
    "\U0001f9b9",  # 🦹
)
