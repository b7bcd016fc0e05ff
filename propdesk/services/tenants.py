from flask import current_app
from sqlalchemy import or_, update

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import TENANT_STATUSES, Account, Tenant, TenantInvite, Unit
from ..store import commit, execute, flush, get_or_404
from ..utils.validation import normalize_email, parse_id, require_text
from . import auth_provider
from .assignments import link

DUPLICATE_TENANT = "A tenant with this email already exists"
DUPLICATE_ACCOUNT = "An account with this email already exists"


def list_tenants(q=None, status=None):
    query = Tenant.query
    if status:
        if status not in TENANT_STATUSES:
            raise ValidationError("status must be one of: " + ", ".join(TENANT_STATUSES))
        query = query.filter(Tenant.status == status)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(Tenant.name.ilike(like), Tenant.email.ilike(like)))
    return query.order_by(Tenant.created_at.desc(), Tenant.id.desc()).all()


def create_tenant(data):
    """Admin-created tenant (pending), optionally placed in a vacant unit right away."""
    name = require_text(data, "name")
    email = normalize_email(data.get("email"))
    unit_id = parse_id(data.get("unit_id"), "unit_id")

    if Tenant.query.filter_by(email=email).first() is not None:
        raise ConflictError(DUPLICATE_TENANT)
    unit = get_or_404(Unit, unit_id, "Unit") if unit_id is not None else None
    if unit is not None and unit.tenant_id is not None:
        raise ConflictError("Unit is already occupied")

    tenant = Tenant(name=name, email=email, status="pending")
    db.session.add(tenant)
    flush(conflict=DUPLICATE_TENANT)
    if unit is not None:
        link(tenant, unit)
    commit("tenants", "units", conflict=DUPLICATE_TENANT)

    current_app.logger.info("Tenant %s created (unit %s)", tenant.id, tenant.unit_id)
    return tenant


def update_tenant(tenant_id, data):
    """Edit name/email. A new email also goes to the tenant's open invites and its account."""
    tenant = get_or_404(Tenant, tenant_id, "Tenant")
    name = require_text(data, "name") if "name" in data else tenant.name
    email = normalize_email(data.get("email")) if "email" in data else tenant.email

    if email != tenant.email:
        if Tenant.query.filter_by(email=email).first() is not None:
            raise ConflictError(DUPLICATE_TENANT)
        if auth_provider.account_exists(email):
            raise ConflictError(DUPLICATE_ACCOUNT)

        execute(
            update(TenantInvite)
            .where(TenantInvite.tenant_id == tenant.id, TenantInvite.used.is_(False))
            .values(email=email)
            .execution_options(synchronize_session=False)
        )
        account = db.session.get(Account, tenant.account_id) if tenant.account_id else None
        if account is not None:
            account.email = email
        current_app.logger.info("Tenant %s email changed", tenant.id)

    tenant.name = name
    tenant.email = email
    commit("tenants", "tenant_invites", "accounts", conflict=DUPLICATE_TENANT)
    return tenant


def toggle_tenant_status(tenant_id):
    """active -> disabled; pending or disabled -> active."""
    tenant = get_or_404(Tenant, tenant_id, "Tenant")
    tenant.status = "disabled" if tenant.status == "active" else "active"
    commit("tenants")
    current_app.logger.info("Tenant %s is now %s", tenant.id, tenant.status)
    return tenant
