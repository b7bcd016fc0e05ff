from flask import Blueprint, jsonify

from ..security import current_tenant, roles_required
from ..services import dashboard

bp = Blueprint("dashboard", __name__)


@bp.get("/dashboard/metrics")
@roles_required("admin")
def dashboard_metrics():
    return jsonify(dashboard.admin_metrics()), 200


@bp.get("/dashboard/tenant")
@roles_required("tenant")
def tenant_dashboard():
    return jsonify(dashboard.tenant_summary(current_tenant())), 200
