from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt, jwt_required

from .. import live
from ..security import current_account, current_tenant, roles_required
from ..services import maintenance
from ..services.maintenance import COLLECTION

bp = Blueprint("maintenance", __name__)


@bp.get("/maintenance-requests")
@jwt_required()
def list_maintenance_requests():
    """Admins see everything (filter + search); tenants see their own requests."""
    if get_jwt().get("role") == "admin":
        requests = maintenance.list_requests(
            status=request.args.get("status"),
            search=request.args.get("q"),
        )
    else:
        requests = maintenance.list_tenant_requests(current_tenant().id)
    return jsonify({
        "total": len(requests),
        "counts": maintenance.status_counts(requests),
        "maintenance_requests": [r.serialize() for r in requests],
    }), 200


@bp.post("/maintenance-requests")
@roles_required("tenant")
def create_maintenance_request():
    account = current_account()
    req = maintenance.submit_request(current_tenant(account), request.get_json(silent=True) or {}, account=account)
    return jsonify(req.serialize()), 201


@bp.patch("/maintenance-requests/<int:request_id>/status")
@roles_required("admin")
def update_status(request_id):
    data = request.get_json(silent=True) or {}
    req = maintenance.set_status(request_id, data.get("status"))
    return jsonify(req.serialize()), 200


@bp.get("/maintenance-requests/stream")
@jwt_required()
def stream_maintenance_requests():
    if get_jwt().get("role") == "admin":
        return live.stream_response(COLLECTION, maintenance.snapshot_loader())
    tenant_id = current_tenant().id
    return live.stream_response(
        COLLECTION, maintenance.snapshot_loader(tenant_id), filters={"tenant_id": tenant_id}
    )
