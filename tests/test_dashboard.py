"""
Tests for dashboard metrics.
"""
import pytest

from propdesk.services import assignments, dashboard, maintenance, tenants


class TestOccupancyRate:
    @pytest.mark.parametrize("occupied,total,expected", [(0, 0, 0), (0, 4, 0), (1, 3, 33), (2, 3, 67), (4, 4, 100)])
    def test_rate(self, occupied, total, expected):
        assert dashboard.occupancy_rate(occupied, total) == expected


class TestAdminMetrics:
    def test_empty(self, app):
        metrics = dashboard.admin_metrics()
        assert metrics["total_units"] == 0
        assert metrics["occupancy_rate"] == 0
        assert metrics["open_issues"] == 0

    def test_counts(self, make_property, make_unit, tenant_account):
        tenant, account = tenant_account
        prop = make_property()
        home = make_unit(prop, "1A")
        make_unit(prop, "1B")
        tenants.create_tenant({"name": "Pending Pat", "email": "pat@example.com"})
        assignments.assign_tenant(tenant.id, home.id)

        first = maintenance.submit_request(tenant, {"title": "Leak"}, account=account)
        maintenance.submit_request(tenant, {"title": "Heater"}, account=account)
        maintenance.set_status(first.id, "resolved")

        metrics = dashboard.admin_metrics()
        assert metrics["total_properties"] == 1
        assert metrics["total_units"] == 2
        assert metrics["occupied_units"] == 1
        assert metrics["vacant_units"] == 1
        assert metrics["occupancy_rate"] == 50
        assert metrics["total_tenants"] == 2
        assert metrics["tenant_status_counts"] == {"pending": 1, "active": 1, "disabled": 0}
        assert metrics["open_issues"] == 1
        assert len(metrics["recent_properties"]) == 1


class TestDashboardApi:
    def test_admin_metrics(self, client, admin_headers):
        response = client.get("/api/dashboard/metrics", headers=admin_headers)
        assert response.status_code == 200
        assert "occupancy_rate" in response.get_json()

    def test_tenant_summary(self, client, tenant_headers, make_property, make_unit, tenant_account):
        tenant, _ = tenant_account
        unit = make_unit(make_property(), "7C")
        assignments.assign_tenant(tenant.id, unit.id)

        body = client.get("/api/dashboard/tenant", headers=tenant_headers).get_json()
        assert body["tenant"]["status"] == "active"
        assert body["unit"]["unit_number"] == "7C"
        assert body["property"]["name"] == "Sunset Apartments"
        assert body["maintenance_status_counts"]["total"] == 0

    def test_tenant_cannot_read_admin_metrics(self, client, tenant_headers):
        assert client.get("/api/dashboard/metrics", headers=tenant_headers).status_code == 403
