"""Tests for shop settings: service layer and /api/settings endpoints."""

import pytest

from qyra.core.exceptions import ValidationError
from qyra.models.settings import SHOP_SETTINGS_ID, ShopSettings
from qyra.schemas.settings import SettingsUpdate, ThemeUpdate
from qyra.services.settings_service import (
    get_shop_settings,
    unavailable_reason,
    update_shop_settings,
)


class TestSettingsService:
    def test_defaults_created_on_first_read(self, db_session):
        assert db_session.get(ShopSettings, SHOP_SETTINGS_ID) is None
        row = get_shop_settings(db_session)
        assert row.id == SHOP_SETTINGS_ID
        assert not row.is_paused
        assert not row.is_closed
        assert not row.is_maintenance_mode
        assert row.dark_mode is True
        assert row.avg_time_per_customer == 10

    def test_single_row(self, db_session):
        get_shop_settings(db_session)
        get_shop_settings(db_session)
        assert db_session.query(ShopSettings).count() == 1

    def test_partial_update(self, db_session):
        update_shop_settings(db_session, SettingsUpdate(is_paused=True))
        row = update_shop_settings(db_session, SettingsUpdate(theme=ThemeUpdate(dark_mode=False)))
        assert row.is_paused is True
        assert row.dark_mode is False
        assert row.avg_time_per_customer == 10

    @pytest.mark.parametrize("avg", [0, 121, -3])
    def test_avg_out_of_range_writes_nothing(self, db_session, avg):
        with pytest.raises(ValidationError):
            update_shop_settings(db_session, SettingsUpdate(is_closed=True, avg_time_per_customer=avg))
        row = get_shop_settings(db_session)
        assert row.is_closed is False
        assert row.avg_time_per_customer == 10

    @pytest.mark.parametrize("avg", [1, 120])
    def test_avg_bounds_inclusive(self, db_session, avg):
        assert update_shop_settings(db_session, SettingsUpdate(avg_time_per_customer=avg)).avg_time_per_customer == avg

    def test_unavailable_reason_precedence(self, db_session):
        row = get_shop_settings(db_session)
        assert unavailable_reason(row) is None
        row.is_paused = True
        row.is_closed = True
        assert unavailable_reason(row) == "Shop is closed for today"


class TestSettingsEndpoints:
    def test_public_settings(self, client):
        res = client.get("/api/settings/public")
        assert res.status_code == 200
        assert res.json()["data"] == {
            "isPaused": False,
            "isClosed": False,
            "isMaintenanceMode": False,
        }

    def test_admin_settings(self, client, admin_headers):
        res = client.get("/api/settings", headers=admin_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["theme"] == {"darkMode": True}
        assert data["avgTimePerCustomer"] == 10

    def test_admin_settings_requires_admin(self, client, staff_headers):
        assert client.get("/api/settings").status_code == 401
        assert client.get("/api/settings", headers=staff_headers).status_code == 403

    def test_update(self, client, admin_headers):
        res = client.put(
            "/api/settings/update",
            json={"isMaintenanceMode": True, "theme": {"darkMode": False}, "avgTimePerCustomer": 7},
            headers=admin_headers,
        )
        assert res.status_code == 200
        body = res.json()
        assert body["message"] == "Settings updated successfully"
        assert body["data"]["isMaintenanceMode"] is True
        assert body["data"]["theme"]["darkMode"] is False
        assert body["data"]["avgTimePerCustomer"] == 7

        public = client.get("/api/settings/public").json()["data"]
        assert public["isMaintenanceMode"] is True

    def test_update_out_of_range(self, client, admin_headers):
        res = client.put("/api/settings/update", json={"avgTimePerCustomer": 500}, headers=admin_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "avgTimePerCustomer must be between 1 and 120 minutes"

    @pytest.mark.parametrize("body", [{"isPaused": "yes"}, {"avgTimePerCustomer": "7"}])
    def test_update_wrong_types(self, client, admin_headers, body):
        res = client.put("/api/settings/update", json=body, headers=admin_headers)
        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_update_requires_admin(self, client, staff_headers):
        res = client.put("/api/settings/update", json={"isPaused": True}, headers=staff_headers)
        assert res.status_code == 403
