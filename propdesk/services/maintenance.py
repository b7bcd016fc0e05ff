"""
Maintenance requests.

Tenants submit; admins change status. Status is a plain set operation over
open / in-progress / resolved: any value may be set at any time, including
open -> resolved directly. The property, unit and tenant strings are a
snapshot of submission time and are never rewritten.
"""
from flask import current_app

from ..errors import PermissionDenied, ValidationError
from ..extensions import db
from ..models import REQUEST_STATUSES, MaintenanceRequest, Property, Unit
from ..store import commit, get_or_404
from ..utils import utcnow
from ..utils.validation import optional_text, require_text

COLLECTION = "maintenance_requests"


def display_name(tenant, account=None):
    if tenant is not None and tenant.name:
        return tenant.name
    if account is not None:
        if account.display_name:
            return account.display_name
        if account.email:
            return account.email.split("@")[0]
    return "Tenant"


def _location_of(tenant):
    """(property name, unit number) of the tenant's current unit, blank if none."""
    if tenant.unit_id is None:
        return "", ""
    unit = db.session.get(Unit, tenant.unit_id)
    if unit is None:
        return "", ""
    prop = db.session.get(Property, unit.property_id)
    return (prop.name if prop else ""), unit.unit_number


def submit_request(tenant, data, account=None):
    if tenant is None:
        raise PermissionDenied("Only tenants can submit maintenance requests")

    title = require_text(data, "title")
    description = optional_text(data, "description", max_length=5000)
    default_property, default_unit = _location_of(tenant)
    property_name = optional_text(data, "property") or default_property
    unit_label = optional_text(data, "unit", max_length=50) or default_unit

    req = MaintenanceRequest(
        property_name=property_name,
        unit_label=unit_label,
        tenant_name=display_name(tenant, account),
        tenant_id=tenant.id,
        title=title,
        description=description,
        status="open",
        submitted_at=utcnow(),
    )
    db.session.add(req)
    commit(COLLECTION)
    current_app.logger.info("Maintenance request %s submitted by tenant %s", req.id, tenant.id)
    return req


def set_status(request_id, status):
    if status not in REQUEST_STATUSES:
        raise ValidationError("status must be one of: " + ", ".join(REQUEST_STATUSES))
    req = get_or_404(MaintenanceRequest, request_id, "Maintenance request")
    previous = req.status
    req.status = status
    req.updated_at = utcnow()
    commit(COLLECTION)
    current_app.logger.info("Maintenance request %s: %s -> %s", req.id, previous, status)
    return req


def list_requests(status=None, search=None):
    """Admin view: every request, newest first, optional status filter and text search."""
    query = MaintenanceRequest.query
    if status and status != "all":
        if status not in REQUEST_STATUSES:
            raise ValidationError("status must be one of: all, " + ", ".join(REQUEST_STATUSES))
        query = query.filter(MaintenanceRequest.status == status)
    requests = query.order_by(MaintenanceRequest.submitted_at.desc(), MaintenanceRequest.id.desc()).all()

    term = (search or "").strip().lower()
    if term:
        requests = [r for r in requests if matches(r, term)]
    return requests


def matches(req, term):
    return any(
        term in (value or "").lower()
        for value in (req.title, req.unit_label, req.tenant_name, req.property_name)
    )


def list_tenant_requests(tenant_id):
    return (
        MaintenanceRequest.query.filter_by(tenant_id=tenant_id)
        .order_by(MaintenanceRequest.submitted_at.desc(), MaintenanceRequest.id.desc())
        .all()
    )


def status_counts(requests):
    counts = {status: 0 for status in REQUEST_STATUSES}
    for req in requests:
        counts[req.status] = counts.get(req.status, 0) + 1
    counts["total"] = len(requests)
    return counts


def snapshot_loader(tenant_id=None):
    """Loader for a live view: the admin list, or one tenant's list."""
    def load():
        if tenant_id is None:
            rows = list_requests()
        else:
            rows = list_tenant_requests(tenant_id)
        return [r.serialize() for r in rows]
    return load
