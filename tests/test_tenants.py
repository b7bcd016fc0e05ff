"""
Tests for admin tenant management.
"""
import pytest

from propdesk.errors import AuthenticationError, ConflictError, NotFoundError, PermissionDenied, ValidationError
from propdesk.extensions import db
from propdesk.models import Account, Tenant, Unit
from propdesk.services import assignments, auth_provider, invites, tenants


def reload(model, ident):
    db.session.expire_all()
    return db.session.get(model, ident)


class TestCreateTenant:
    def test_pending_without_unit(self, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "Tia@Example.com"})
        assert tenant.status == "pending"
        assert tenant.email == "tia@example.com"
        assert tenant.unit_id is None
        assert tenant.account_id is None

    def test_with_unit(self, make_property, make_unit):
        unit = make_unit(make_property())
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com", "unit_id": unit.id})
        assert reload(Unit, unit.id).tenant_id == tenant.id
        assert db.session.get(Tenant, tenant.id).unit_id == unit.id

    def test_occupied_unit(self, make_property, make_unit):
        unit = make_unit(make_property())
        tenants.create_tenant({"name": "Tia", "email": "tia@example.com", "unit_id": unit.id})
        with pytest.raises(ConflictError):
            tenants.create_tenant({"name": "Bo", "email": "bo@example.com", "unit_id": unit.id})
        assert Tenant.query.count() == 1

    def test_unknown_unit(self, app):
        with pytest.raises(NotFoundError):
            tenants.create_tenant({"name": "Tia", "email": "tia@example.com", "unit_id": 5})
        assert Tenant.query.count() == 0

    def test_duplicate_email(self, app):
        tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        with pytest.raises(ConflictError):
            tenants.create_tenant({"name": "Tia Again", "email": "TIA@example.com"})

    @pytest.mark.parametrize("data", [{"email": "tia@example.com"}, {"name": "Tia"}, {"name": "Tia", "email": "nope"}])
    def test_validation(self, app, data):
        with pytest.raises(ValidationError):
            tenants.create_tenant(data)


class TestUpdateTenant:
    def test_rename(self, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        tenants.update_tenant(tenant.id, {"name": "Tia Maria"})
        assert reload(Tenant, tenant.id).name == "Tia Maria"

    def test_email_taken(self, app):
        tenants.create_tenant({"name": "Bo", "email": "bo@example.com"})
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        with pytest.raises(ConflictError):
            tenants.update_tenant(tenant.id, {"email": "bo@example.com"})
        assert reload(Tenant, tenant.id).email == "tia@example.com"

    def test_email_taken_by_an_account(self, admin):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        with pytest.raises(ConflictError):
            tenants.update_tenant(tenant.id, {"email": "admin@example.com"})
        assert reload(Tenant, tenant.id).email == "tia@example.com"

    def test_new_email_reaches_open_invite(self, app):
        tenant, invite, _ = invites.issue_invite("Jane Doe", "jane@example.com")
        tenants.update_tenant(tenant.id, {"email": "jane.new@example.com"})

        assert invites.verify_invite(invite.code).email == "jane.new@example.com"
        _, account = invites.complete_signup(invite.code, "secret123")
        assert account.email == "jane.new@example.com"

        signed_in, _ = auth_provider.sign_in("jane.new@example.com", "secret123")
        assert signed_in.id == account.id
        with pytest.raises(AuthenticationError):
            auth_provider.sign_in("jane@example.com", "secret123")

    def test_new_email_reaches_bound_account(self, tenant_account):
        tenant, account = tenant_account
        tenants.update_tenant(tenant.id, {"email": "jane.new@example.com"})

        assert reload(Account, account.id).email == "jane.new@example.com"
        signed_in, _ = auth_provider.sign_in("jane.new@example.com", "secret123")
        assert signed_in.id == account.id

    def test_non_string_email(self, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        with pytest.raises(ValidationError):
            tenants.update_tenant(tenant.id, {"email": ["tia@example.com"]})


class TestToggleStatus:
    def test_cycle(self, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        assert tenants.toggle_tenant_status(tenant.id).status == "active"
        assert tenants.toggle_tenant_status(tenant.id).status == "disabled"
        assert tenants.toggle_tenant_status(tenant.id).status == "active"

    def test_disabled_tenant_cannot_sign_in(self, tenant_account):
        tenant, _ = tenant_account
        tenants.toggle_tenant_status(tenant.id)
        with pytest.raises(PermissionDenied):
            auth_provider.sign_in("jane@example.com", "secret123")


class TestListTenants:
    def test_search_and_filter(self, app):
        tenants.create_tenant({"name": "Alice Smith", "email": "alice@example.com"})
        bob = tenants.create_tenant({"name": "Bob Jones", "email": "bob@corp.test"})
        tenants.toggle_tenant_status(bob.id)

        assert [t.name for t in tenants.list_tenants(q="smith")] == ["Alice Smith"]
        assert [t.name for t in tenants.list_tenants(q="corp")] == ["Bob Jones"]
        assert [t.name for t in tenants.list_tenants(status="active")] == ["Bob Jones"]
        assert len(tenants.list_tenants()) == 2

    def test_bad_status(self, app):
        with pytest.raises(ValidationError):
            tenants.list_tenants(status="evicted")


class TestTenantApi:
    def test_create_list_and_fetch(self, client, admin_headers):
        response = client.post(
            "/api/tenants", json={"name": "Tia", "email": "tia@example.com"}, headers=admin_headers
        )
        assert response.status_code == 201
        tenant_id = response.get_json()["id"]

        listing = client.get("/api/tenants?q=tia", headers=admin_headers).get_json()
        assert listing["total"] == 1

        detail = client.get(f"/api/tenants/{tenant_id}", headers=admin_headers)
        assert detail.get_json()["email"] == "tia@example.com"

    def test_toggle(self, client, admin_headers, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        response = client.post(f"/api/tenants/{tenant.id}/toggle-status", headers=admin_headers)
        assert response.get_json()["status"] == "active"

    def test_reissue_invite(self, client, admin_headers, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        response = client.post(f"/api/tenants/{tenant.id}/invite", headers=admin_headers)
        assert response.status_code == 201
        body = response.get_json()
        assert body["invite"]["tenantId"] == tenant.id
        assert body["signup_url"].endswith(body["invite"]["code"])

    def test_remove_from_unit_without_unit(self, client, admin_headers, app):
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        response = client.post(f"/api/tenants/{tenant.id}/remove-from-unit", headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()["unit"] is None

    def test_unknown_tenant(self, client, admin_headers):
        response = client.get("/api/tenants/404", headers=admin_headers)
        assert response.status_code == 404

    def test_assignment_survives_reload(self, client, admin_headers, make_property, make_unit):
        unit = make_unit(make_property())
        tenant = tenants.create_tenant({"name": "Tia", "email": "tia@example.com"})
        assignments.assign_tenant(tenant.id, unit.id)
        body = client.get(f"/api/tenants/{tenant.id}", headers=admin_headers).get_json()
        assert body["unit_id"] == unit.id
        assert body["property_id"] == unit.property_id
