"""Tests for human-readable formatting helpers."""

import pytest

from dosewatch.core.dosage.enums import RiskLevel
from dosewatch.services.formatting import (
    format_clock_time,
    format_countdown,
    format_duration,
    risk_message,
)


class TestFormatDuration:
    @pytest.mark.parametrize(
        ("ms", "expected"),
        [
            (0, "0 minutes"),
            (-5000, "0 minutes"),
            (59_000, "0 minutes"),
            (60_000, "1 minute"),
            (45 * 60_000, "45 minutes"),
            (60 * 60_000, "1 hour and 0 minutes"),
            (65 * 60_000, "1 hour and 5 minutes"),
            (121 * 60_000, "2 hours and 1 minute"),
        ],
    )
    def test_durations(self, ms, expected):
        assert format_duration(ms) == expected


class TestFormatCountdown:
    def test_zero(self):
        assert format_countdown(0) == "00:00"

    def test_under_an_hour(self):
        assert format_countdown(5 * 60_000 + 7_000) == "05:07"

    def test_over_an_hour(self):
        assert format_countdown(90 * 60_000) == "01:30:00"

    def test_partial_seconds_truncated(self):
        assert format_countdown(1_999) == "00:01"


class TestClockAndMessages:
    def test_clock_time_is_utc(self):
        # 2024-01-01T12:34:00Z
        assert format_clock_time(1_704_112_440_000) == "12:34"

    def test_every_level_has_a_message(self):
        for level in RiskLevel:
            assert risk_message(level)
