from ..extensions import db
from ..utils import iso, utcnow

REQUEST_STATUSES = ("open", "in-progress", "resolved")


class MaintenanceRequest(db.Model):
    __tablename__ = "maintenance_requests"

    id = db.Column(db.Integer, primary_key=True)

    # Snapshot taken at submission; not foreign keys and never rewritten
    property_name = db.Column("property", db.String(255), nullable=False, default="")
    unit_label = db.Column("unit", db.String(50), nullable=False, default="")
    tenant_name = db.Column("tenant", db.String(255), nullable=False, default="")
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(32), nullable=False, default="open")  # open, in-progress, resolved

    submitted_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint("status IN ('open', 'in-progress', 'resolved')", name="ck_maintenance_status"),
    )

    def __repr__(self):
        return f"<MaintenanceRequest {self.id}: {self.title} - {self.status}>"

    def serialize(self):
        return {
            "id": self.id,
            "property": self.property_name,
            "unit": self.unit_label,
            "tenant": self.tenant_name,
            "tenant_id": self.tenant_id,
            "title": self.title,
            "description": self.description or "",
            "status": self.status,
            "submitted_at": iso(self.submitted_at),
            "updated_at": iso(self.updated_at),
        }
