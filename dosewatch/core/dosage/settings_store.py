"""Settings store.

Holds the single process-wide ``DosageSettings`` record. Updates are
partial and merged over the current values; an update that would leave
the warning interval above the safe interval is clamped, and an update
that fails validation outright leaves the settings untouched.
"""

from typing import Any

from pydantic import ValidationError

from dosewatch.core.dosage.models import DosageSettings
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)


class SettingsStore:
    """Validated holder for the shared dosage thresholds."""

    def __init__(self, initial: DosageSettings | None = None):
        self._settings = initial or DosageSettings()

    @property
    def current(self) -> DosageSettings:
        return self._settings

    def replace(self, settings: DosageSettings) -> None:
        self._settings = settings

    def update(self, changes: dict[str, Any]) -> DosageSettings:
        """Merge *changes* into the current settings.

        Unknown keys are ignored. Returns the settings in effect afterwards.
        """
        known = {
            key: value
            for key, value in changes.items()
            if key in DosageSettings.model_fields and value is not None
        }
        merged = {**self._settings.model_dump(), **known}

        try:
            updated = DosageSettings.model_validate(merged)
        except ValidationError as e:
            logger.warning(
                "Rejected invalid settings update",
                fields=sorted(known),
                error=str(e),
            )
            return self._settings

        old_values = {key: getattr(self._settings, key) for key in known}
        self._settings = updated
        logger.info(
            "Updated dosage settings",
            fields=sorted(known),
            old_values=old_values,
            new_values={key: getattr(updated, key) for key in known},
        )
        return updated
