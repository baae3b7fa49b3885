"""Tests for the shared dosage settings store."""

import pytest
from pydantic import ValidationError

from dosewatch.core.dosage.constants import MS_PER_MINUTE
from dosewatch.core.dosage.models import DosageSettings
from dosewatch.core.dosage.settings_store import SettingsStore


class TestDosageSettings:
    def test_defaults(self):
        settings = DosageSettings()
        assert settings.safe_interval_min == 90
        assert settings.warning_interval_min == 60
        assert settings.default_dose_ml == 2.0
        assert settings.max_daily_dose_ml == 10.0
        assert settings.sound_enabled is True
        assert settings.safe_interval_ms == 90 * MS_PER_MINUTE
        assert settings.warning_interval_ms == 60 * MS_PER_MINUTE

    def test_warning_clamped_to_safe(self):
        settings = DosageSettings(safe_interval_min=30, warning_interval_min=45)
        assert settings.warning_interval_min == 30

    def test_zero_safe_interval_rejected(self):
        with pytest.raises(ValidationError):
            DosageSettings(safe_interval_min=0)

    def test_non_positive_dose_rejected(self):
        with pytest.raises(ValidationError):
            DosageSettings(default_dose_ml=0)


class TestSettingsStore:
    def test_partial_update(self):
        store = SettingsStore()
        updated = store.update({"default_dose_ml": 1.5})
        assert updated.default_dose_ml == 1.5
        assert updated.safe_interval_min == 90
        assert store.current is updated

    def test_update_clamps_warning(self):
        store = SettingsStore()
        updated = store.update({"safe_interval_min": 45})
        assert updated.warning_interval_min == 45

    def test_unknown_and_none_fields_ignored(self):
        store = SettingsStore()
        updated = store.update({"colour": "red", "sound_enabled": None})
        assert updated == DosageSettings()

    def test_invalid_update_keeps_current(self):
        store = SettingsStore(DosageSettings(safe_interval_min=100))
        updated = store.update({"safe_interval_min": -5})
        assert updated.safe_interval_min == 100
        assert store.current.safe_interval_min == 100

    def test_replace(self):
        store = SettingsStore()
        replacement = DosageSettings(sound_enabled=False)
        store.replace(replacement)
        assert store.current is replacement
