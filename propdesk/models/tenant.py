from ..extensions import db
from ..utils import iso, utcnow

TENANT_STATUSES = ("pending", "active", "disabled")


class Tenant(db.Model):
    """A renter record. Created pending, activated by signup, never hard-deleted."""

    __tablename__ = "tenants"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending")

    # Mirrors units.tenant_id; both sides are written in the same transaction
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True, index=True)
    unit_id = db.Column(
        db.Integer,
        db.ForeignKey("units.id", use_alter=True, name="fk_tenants_unit_id"),
        nullable=True,
        unique=True,
    )
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=True, unique=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.CheckConstraint("status IN ('pending', 'active', 'disabled')", name="ck_tenants_status"),
    )

    def __repr__(self):
        return f"<Tenant {self.id}: {self.name} ({self.status})>"

    def serialize(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "status": self.status,
            "property_id": self.property_id,
            "unit_id": self.unit_id,
            "account_id": self.account_id,
            "created_at": iso(self.created_at),
        }
