from ..extensions import db
from ..utils import iso, utcnow

UNIT_STATUSES = ("vacant", "occupied")


class Property(db.Model):
    __tablename__ = "properties"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(512), nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # No cascade: a property with units must not be deletable
    units = db.relationship("Unit", backref="property", lazy=True)

    def __repr__(self):
        return f"<Property {self.id}: {self.name}>"

    def serialize(self):
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "created_at": iso(self.created_at),
            "unit_count": len(self.units),
        }


class Unit(db.Model):
    __tablename__ = "units"

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=False, index=True)
    unit_number = db.Column(db.String(50), nullable=False)
    rent = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    # a tenant occupies at most one unit
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=True, unique=True)
    status = db.Column(db.String(20), nullable=False, default="vacant")

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint("property_id", "unit_number", name="uq_units_property_number"),
        db.CheckConstraint("rent >= 0", name="ck_units_rent_non_negative"),
        db.CheckConstraint("status IN ('vacant', 'occupied')", name="ck_units_status"),
        db.CheckConstraint(
            "(status = 'occupied' AND tenant_id IS NOT NULL) OR (status = 'vacant' AND tenant_id IS NULL)",
            name="ck_units_occupancy",
        ),
    )

    def __repr__(self):
        return f"<Unit {self.id}: {self.unit_number} at Property {self.property_id}>"

    @property
    def is_vacant(self):
        return self.tenant_id is None

    def serialize(self):
        return {
            "id": self.id,
            "property_id": self.property_id,
            "property_name": self.property.name if self.property else None,
            "unit_number": self.unit_number,
            "rent": float(self.rent) if self.rent is not None else None,
            "tenant_id": self.tenant_id,
            "status": self.status,
            "created_at": iso(self.created_at),
        }
