from flask import current_app

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import UNIT_STATUSES, Property, Tenant, Unit
from ..store import commit, get_or_404
from ..utils.validation import parse_id, parse_rent, require_text
from .assignments import link, unlink

DUPLICATE_UNIT = "This property already has a unit with that number"


# ---------------- Properties ----------------
def list_properties():
    return Property.query.order_by(Property.created_at.desc(), Property.id.desc()).all()


def create_property(data):
    prop = Property(
        name=require_text(data, "name"),
        location=require_text(data, "location", max_length=512),
    )
    db.session.add(prop)
    commit("properties")
    current_app.logger.info("Property %s created", prop.id)
    return prop


def update_property(property_id, data):
    prop = get_or_404(Property, property_id, "Property")
    if "name" in data:
        prop.name = require_text(data, "name")
    if "location" in data:
        prop.location = require_text(data, "location", max_length=512)
    commit("properties")
    return prop


# ---------------- Units ----------------
def list_units(property_id=None, status=None):
    query = Unit.query
    if property_id is not None:
        query = query.filter(Unit.property_id == property_id)
    if status:
        if status not in UNIT_STATUSES:
            raise ValidationError("status must be one of: " + ", ".join(UNIT_STATUSES))
        query = query.filter(Unit.status == status)
    return query.order_by(Unit.property_id, Unit.unit_number).all()


def vacant_units(property_id):
    return list_units(property_id=property_id, status="vacant")


def _ensure_number_free(property_id, unit_number, unit_id=None):
    query = Unit.query.filter_by(property_id=property_id, unit_number=unit_number)
    if unit_id is not None:
        query = query.filter(Unit.id != unit_id)
    if query.first() is not None:
        raise ConflictError(DUPLICATE_UNIT)


def create_unit(data):
    property_id = parse_id(data.get("property_id"), "property_id")
    if property_id is None:
        raise ValidationError("property_id is required")
    prop = get_or_404(Property, property_id, "Property")
    unit_number = require_text(data, "unit_number", max_length=50)
    rent = parse_rent(data.get("rent"))
    tenant_id = parse_id(data.get("tenant_id"), "tenant_id")

    _ensure_number_free(prop.id, unit_number)
    tenant = get_or_404(Tenant, tenant_id, "Tenant") if tenant_id is not None else None

    unit = Unit(property_id=prop.id, unit_number=unit_number, rent=rent, status="vacant")
    db.session.add(unit)
    if tenant is not None:
        link(tenant, unit)
    commit("units", "tenants", conflict=DUPLICATE_UNIT)

    current_app.logger.info("Unit %s created in property %s", unit.id, prop.id)
    return unit


def update_unit(unit_id, data):
    """Edit a unit. A changed ``tenant_id`` re-links both sides; ``null`` vacates."""
    unit = get_or_404(Unit, unit_id, "Unit")

    # validate everything before touching the unit
    unit_number = unit.unit_number
    if "unit_number" in data:
        unit_number = require_text(data, "unit_number", max_length=50)
    rent = parse_rent(data.get("rent")) if "rent" in data else unit.rent
    property_id = unit.property_id
    if "property_id" in data:
        property_id = parse_id(data.get("property_id"), "property_id")
        if property_id is None:
            raise ValidationError("property_id is required")
        get_or_404(Property, property_id, "Property")
    _ensure_number_free(property_id, unit_number, unit_id=unit.id)

    current = db.session.get(Tenant, unit.tenant_id) if unit.tenant_id else None
    new_tenant = current
    if "tenant_id" in data:
        new_id = parse_id(data.get("tenant_id"), "tenant_id")
        if new_id != unit.tenant_id:
            new_tenant = get_or_404(Tenant, new_id, "Tenant") if new_id is not None else None

    unit.unit_number = unit_number
    unit.rent = rent
    unit.property_id = property_id
    if new_tenant is not current:
        if current is not None:
            unlink(current, unit)
        if new_tenant is not None:
            link(new_tenant, unit)
        current = new_tenant

    # a moved unit takes its occupant's property pointer along
    if current is not None:
        current.property_id = unit.property_id

    commit("units", "tenants", conflict=DUPLICATE_UNIT)
    return unit


def delete_unit(unit_id):
    unit = get_or_404(Unit, unit_id, "Unit")
    if unit.tenant_id is not None:
        raise ConflictError("Cannot delete an occupied unit; remove the tenant first")
    db.session.delete(unit)
    commit("units")
    current_app.logger.info("Unit %s deleted", unit_id)
