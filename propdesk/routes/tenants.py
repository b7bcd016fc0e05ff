# propdesk/routes/tenants.py
from flask import Blueprint, jsonify, request

from ..errors import ValidationError
from ..models import Tenant
from ..security import roles_required
from ..services import assignments, tenants
from ..store import get_or_404
from ..utils.validation import parse_id

bp = Blueprint("tenants", __name__)


@bp.get("/tenants")
@roles_required("admin")
def list_tenants():
    items = tenants.list_tenants(q=request.args.get("q"), status=request.args.get("status"))
    return jsonify({"total": len(items), "items": [t.serialize() for t in items]}), 200


@bp.post("/tenants")
@roles_required("admin")
def create_tenant():
    tenant = tenants.create_tenant(request.get_json(silent=True) or {})
    return jsonify(tenant.serialize()), 201


@bp.get("/tenants/<int:tenant_id>")
@roles_required("admin")
def get_tenant(tenant_id):
    return jsonify(get_or_404(Tenant, tenant_id, "Tenant").serialize()), 200


@bp.patch("/tenants/<int:tenant_id>")
@roles_required("admin")
def update_tenant(tenant_id):
    tenant = tenants.update_tenant(tenant_id, request.get_json(silent=True) or {})
    return jsonify(tenant.serialize()), 200


@bp.post("/tenants/<int:tenant_id>/toggle-status")
@roles_required("admin")
def toggle_status(tenant_id):
    return jsonify(tenants.toggle_tenant_status(tenant_id).serialize()), 200


@bp.post("/tenants/<int:tenant_id>/assign")
@roles_required("admin")
def assign(tenant_id):
    data = request.get_json(silent=True) or {}
    unit_id = parse_id(data.get("unit_id"), "unit_id")
    if unit_id is None:
        raise ValidationError("unit_id is required")
    tenant, unit = assignments.assign_tenant(tenant_id, unit_id)
    return jsonify(tenant=tenant.serialize(), unit=unit.serialize()), 200


@bp.post("/tenants/<int:tenant_id>/remove-from-unit")
@roles_required("admin")
def remove_from_unit(tenant_id):
    tenant, unit = assignments.unassign_tenant(tenant_id)
    return jsonify(tenant=tenant.serialize(), unit=unit.serialize() if unit else None), 200
