"""
Tests for the website schedule endpoints (/api/v1/settings/website).
"""

from datetime import datetime
from unittest.mock import patch

import pytest

from registrar.core.metrics import get_registry
from registrar.services.schedule import ScheduleService

PREFIX = "/api/v1/settings/website"


class TestWebsiteSettings:
    @pytest.mark.asyncio
    async def test_default_is_closed(self, client):
        response = await client.get(PREFIX)

        assert response.status_code == 200
        body = response.json()
        assert body["is_open"] is False
        assert body["codes_active"] is True
        assert body["auto_schedule"] is False

    @pytest.mark.asyncio
    async def test_admin_opens_registration(self, client, admin_headers):
        response = await client.put(
            PREFIX,
            json={"is_open": True, "message": "Welcome", "codes_active": False},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_open"] is True

        current = (await client.get(PREFIX)).json()
        assert current["is_open"] is True
        assert current["message"] == "Welcome"
        assert current["codes_active"] is False

    @pytest.mark.asyncio
    async def test_update_requires_admin(self, client, accounting_headers):
        response = await client.put(PREFIX, json={"is_open": True}, headers=accounting_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_bad_time_rejected(self, client, admin_headers):
        response = await client.put(
            PREFIX,
            json={"is_open": True, "auto_schedule": True, "open_time": "24:00"},
            headers=admin_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_read_persists_auto_close(self, client, admin_headers):
        await client.put(
            PREFIX,
            json={
                "is_open": True,
                "auto_schedule": True,
                "open_time": "06:00",
                "close_time": "18:00",
            },
            headers=admin_headers,
        )

        with patch.object(ScheduleService, "now", return_value=datetime(2026, 3, 1, 19, 0)):
            body = (await client.get(PREFIX)).json()
            blocked = await client.post(
                "/api/v1/pre-register",
                json={"name": "Dana", "mobile_number": "0500000000", "company_name": "Acme", "code": "1234"},
            )

        assert body["is_open"] is False
        assert blocked.status_code == 503
        assert get_registry().schedule_transitions_total[("auto_close",)].value == 1

        with patch.object(ScheduleService, "now", return_value=datetime(2026, 3, 2, 7, 0)):
            next_morning = (await client.get(PREFIX)).json()

        assert next_morning["is_open"] is False
