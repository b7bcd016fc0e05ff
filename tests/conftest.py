"""
PropDesk - Shared Test Fixtures
App with a fresh in-memory database per test, clients and signed-in accounts.
"""
import pytest

from propdesk import create_app
from propdesk.config import TestingConfig
from propdesk.extensions import db
from propdesk.models import Account, Property, Unit
from propdesk.services import auth_provider, invites


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(account):
    return {"Authorization": f"Bearer {auth_provider.issue_token(account)}"}


# =============================================================================
# Accounts
# =============================================================================

@pytest.fixture
def admin(app):
    account = Account(email="admin@example.com", role="admin", display_name="Admin")
    account.set_password("AdminPass1!")
    db.session.add(account)
    db.session.commit()
    return account


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def tenant_account(app):
    """An active tenant who signed up through an invite: (tenant, account)."""
    _, invite, _ = invites.issue_invite("Jane Doe", "jane@example.com")
    return invites.complete_signup(invite.code, "secret123")


@pytest.fixture
def tenant_headers(tenant_account):
    _, account = tenant_account
    return auth_headers(account)


# =============================================================================
# Portfolio
# =============================================================================

@pytest.fixture
def make_property(app):
    def _make(name="Sunset Apartments", location="12 Main St"):
        prop = Property(name=name, location=location)
        db.session.add(prop)
        db.session.commit()
        return prop
    return _make


@pytest.fixture
def make_unit(app):
    def _make(prop, unit_number="1A", rent=1200):
        unit = Unit(property_id=prop.id, unit_number=unit_number, rent=rent, status="vacant")
        db.session.add(unit)
        db.session.commit()
        return unit
    return _make
