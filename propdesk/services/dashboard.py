from ..extensions import db
from ..models import TENANT_STATUSES, MaintenanceRequest, Property, Tenant, Unit
from .maintenance import list_tenant_requests, status_counts

RECENT_LIMIT = 5


def occupancy_rate(occupied, total):
    """Whole-number percentage; 0 when there are no units."""
    if total == 0:
        return 0
    return round(occupied / total * 100)


def admin_metrics():
    unit_count = Unit.query.count()
    occupied = Unit.query.filter(Unit.tenant_id.isnot(None)).count()
    requests = MaintenanceRequest.query.all()
    counts = status_counts(requests)

    tenant_counts = {status: 0 for status in TENANT_STATUSES}
    for status, n in db.session.query(Tenant.status, db.func.count(Tenant.id)).group_by(Tenant.status):
        tenant_counts[status] = n

    recent_properties = (
        Property.query.order_by(Property.created_at.desc(), Property.id.desc()).limit(RECENT_LIMIT).all()
    )
    recent_tenants = Tenant.query.order_by(Tenant.created_at.desc(), Tenant.id.desc()).limit(RECENT_LIMIT).all()

    return {
        "total_properties": Property.query.count(),
        "total_units": unit_count,
        "occupied_units": occupied,
        "vacant_units": unit_count - occupied,
        "occupancy_rate": occupancy_rate(occupied, unit_count),
        "total_tenants": sum(tenant_counts.values()),
        "tenant_status_counts": tenant_counts,
        "open_issues": counts["total"] - counts["resolved"],
        "maintenance_status_counts": counts,
        "recent_properties": [p.serialize() for p in recent_properties],
        "recent_tenants": [t.serialize() for t in recent_tenants],
    }


def tenant_summary(tenant):
    unit = db.session.get(Unit, tenant.unit_id) if tenant.unit_id else None
    prop = db.session.get(Property, tenant.property_id) if tenant.property_id else None
    requests = list_tenant_requests(tenant.id)
    return {
        "tenant": tenant.serialize(),
        "unit": unit.serialize() if unit else None,
        "property": prop.serialize() if prop else None,
        "maintenance_status_counts": status_counts(requests),
    }
