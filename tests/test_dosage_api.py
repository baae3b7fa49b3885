"""Tests for the dosage, settings and voice endpoints."""

import pytest

from dosewatch.core.dosage.constants import MS_PER_MINUTE


class TestDosageView:
    @pytest.mark.asyncio
    async def test_empty_view(self, client):
        response = await client.get("/api/dosage")

        assert response.status_code == 200
        data = response.json()
        assert data["active"] is False
        assert data["risk_level"] == "safe"
        assert data["events"] == []
        assert data["user"]["display_name"] == "User 1"

    @pytest.mark.asyncio
    async def test_log_intake(self, client, clock):
        response = await client.post(
            "/api/dosage/intakes", json={"amount_ml": 1.5, "note": "evening"}
        )

        assert response.status_code == 201
        event = response.json()
        assert event["amount_ml"] == 1.5
        assert event["note"] == "evening"
        assert event["timestamp_ms"] == clock()

        view = (await client.get("/api/dosage")).json()
        assert view["risk_level"] == "danger"
        assert view["time_remaining_ms"] == 90 * MS_PER_MINUTE
        assert view["current_session"]["intake_count"] == 1

    @pytest.mark.asyncio
    async def test_log_intake_defaults(self, client):
        response = await client.post("/api/dosage/intakes", json={})
        assert response.status_code == 201
        assert response.json()["amount_ml"] == 2.0

    @pytest.mark.asyncio
    async def test_non_positive_amount_uses_default(self, client):
        response = await client.post("/api/dosage/intakes", json={"amount_ml": -3})
        assert response.status_code == 201
        assert response.json()["amount_ml"] == 2.0

    @pytest.mark.asyncio
    async def test_backdate_out_of_range_rejected(self, client):
        response = await client.post(
            "/api/dosage/intakes", json={"backdate_minutes": 5000}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_backdated_intake(self, client, clock):
        response = await client.post(
            "/api/dosage/intakes", json={"backdate_minutes": 20}
        )
        assert response.json()["timestamp_ms"] == clock() - 20 * MS_PER_MINUTE

    @pytest.mark.asyncio
    async def test_reset(self, client):
        await client.post("/api/dosage/intakes", json={})
        response = await client.post("/api/dosage/reset")

        assert response.status_code == 200
        assert response.json()["events"] == []
        assert response.json()["sessions"] == []

    @pytest.mark.asyncio
    async def test_start_new_session(self, client):
        await client.post("/api/dosage/intakes", json={})
        response = await client.post("/api/dosage/sessions")

        assert response.status_code == 200
        assert response.json()["closed_session"]["intake_count"] == 1

        view = (await client.get("/api/dosage")).json()
        assert view["current_session"] is None
        assert len(view["sessions"]) == 1

    @pytest.mark.asyncio
    async def test_start_new_session_without_open_session(self, client):
        response = await client.post("/api/dosage/sessions")
        assert response.json() == {"closed_session": None}


class TestNotifications:
    @pytest.mark.asyncio
    async def test_notifications_after_safe_tick(self, client, engine, clock):
        await client.post("/api/dosage/intakes", json={})
        clock.advance(minutes=91)
        engine.tick()

        response = await client.get("/api/dosage/notifications")

        assert response.status_code == 200
        items = response.json()["notifications"]
        assert items[0]["sound"] == "safe"
        assert items[1]["kind"] == "safe_after_full_wait"

    @pytest.mark.asyncio
    async def test_limit_validated(self, client):
        response = await client.get("/api/dosage/notifications?limit=0")
        assert response.status_code == 422


class TestSettingsEndpoints:
    @pytest.mark.asyncio
    async def test_get_settings(self, client):
        response = await client.get("/api/settings")
        assert response.status_code == 200
        assert response.json()["safe_interval_min"] == 90

    @pytest.mark.asyncio
    async def test_patch_settings(self, client, engine):
        response = await client.patch(
            "/api/settings", json={"safe_interval_min": 120, "sound_enabled": False}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["safe_interval_min"] == 120
        assert data["warning_interval_min"] == 60
        assert data["sound_enabled"] is False
        assert engine.settings.safe_interval_min == 120

    @pytest.mark.asyncio
    async def test_patch_clamps_warning(self, client):
        response = await client.patch(
            "/api/settings", json={"safe_interval_min": 30}
        )
        assert response.json()["warning_interval_min"] == 30

    @pytest.mark.asyncio
    async def test_patch_rejects_out_of_range(self, client):
        response = await client.patch("/api/settings", json={"default_dose_ml": 0})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_defaults(self, client):
        await client.patch("/api/settings", json={"safe_interval_min": 120})
        response = await client.get("/api/settings/defaults")
        assert response.json()["safe_interval_min"] == 90


class TestVoiceEndpoint:
    @pytest.mark.asyncio
    async def test_add_dose_intent(self, client, engine):
        response = await client.post(
            "/api/voice/intents", json={"intent": "add_dose", "amount_ml": 1.0}
        )

        assert response.status_code == 200
        assert "new dose of 1 ml" in response.json()["speech"]
        assert len(engine.view().events) == 1

    @pytest.mark.asyncio
    async def test_stop_intent(self, client):
        response = await client.post("/api/voice/intents", json={"intent": "stop"})
        assert response.json() == {"speech": "Goodbye!", "end_session": True}
