"""
Unit assignment: the tenant <-> unit link.

``units.tenant_id`` and ``tenants.unit_id``/``tenants.property_id`` describe
the same fact from both sides. Every operation here changes both sides inside
one transaction, and claiming a unit is a conditional update on
``tenant_id IS NULL`` so two admins cannot put two tenants into one unit.
"""
from flask import current_app
from sqlalchemy import update

from ..errors import ConflictError
from ..extensions import db
from ..models import Property, Tenant, Unit
from ..store import commit, execute, flush, get_or_404

UNIT_OCCUPIED = "Unit is already occupied"
TENANT_HOUSED = "Tenant already occupies another unit; remove them from it first"


def link(tenant, unit):
    """Point tenant and unit at each other. Caller commits."""
    if tenant.unit_id is not None and tenant.unit_id != unit.id:
        db.session.rollback()
        raise ConflictError(TENANT_HOUSED)

    flush(conflict=UNIT_OCCUPIED)
    claimed = execute(
        update(Unit)
        .where(Unit.id == unit.id, Unit.tenant_id.is_(None))
        .values(tenant_id=tenant.id, status="occupied")
        .execution_options(synchronize_session=False),
        conflict=TENANT_HOUSED,
    ).rowcount
    if claimed != 1:
        db.session.rollback()
        raise ConflictError(UNIT_OCCUPIED)

    db.session.expire(unit, ["tenant_id", "status", "updated_at"])
    tenant.unit_id = unit.id
    tenant.property_id = unit.property_id


def unlink(tenant, unit):
    """Clear both sides of the link. Caller commits."""
    if unit is not None and unit.tenant_id == tenant.id:
        unit.tenant_id = None
        unit.status = "vacant"
    tenant.unit_id = None
    tenant.property_id = None


def assign_tenant(tenant_id, unit_id):
    unit = get_or_404(Unit, unit_id, "Unit")
    tenant = get_or_404(Tenant, tenant_id, "Tenant")

    if unit.tenant_id == tenant.id and tenant.unit_id == unit.id:
        return tenant, unit
    if unit.tenant_id is not None:
        raise ConflictError(UNIT_OCCUPIED)

    link(tenant, unit)
    commit("units", "tenants", conflict=TENANT_HOUSED)
    current_app.logger.info("Tenant %s assigned to unit %s", tenant.id, unit.id)
    return tenant, unit


def unassign_tenant(tenant_id):
    """Remove the tenant from its unit. No-op for a tenant without a unit."""
    tenant = get_or_404(Tenant, tenant_id, "Tenant")
    if tenant.unit_id is None:
        return tenant, None

    unit = db.session.get(Unit, tenant.unit_id)
    unlink(tenant, unit)
    commit("units", "tenants")
    current_app.logger.info("Tenant %s removed from unit %s", tenant.id, unit.id if unit else None)
    return tenant, unit


def delete_property(property_id):
    prop = get_or_404(Property, property_id, "Property")
    # the store has no foreign-key guard for this; check here
    if Unit.query.filter_by(property_id=prop.id).count():
        raise ConflictError("Cannot delete property with existing units.")

    db.session.delete(prop)
    commit("properties", conflict="Cannot delete property with existing units.")
    current_app.logger.info("Property %s deleted", property_id)
