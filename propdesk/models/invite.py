from datetime import timedelta
import secrets
import string

from ..extensions import db
from ..utils import iso, utcnow

CODE_ALPHABET = string.ascii_letters + string.digits


class TenantInvite(db.Model):
    """Single-use, time-limited signup code bound to a pending tenant.

    The code itself is the key. The row is written once on issue and mutated
    exactly once (``used`` False -> True) when the signup is completed.
    """

    __tablename__ = "tenant_invites"

    code = db.Column(db.String(64), primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    used_at = db.Column(db.DateTime, nullable=True)

    @staticmethod
    def generate_code(length=10):
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    @staticmethod
    def generate(tenant_id, email, ttl_days=7, length=10):
        now = utcnow()
        return TenantInvite(
            code=TenantInvite.generate_code(length),
            tenant_id=tenant_id,
            email=email,
            created_at=now,
            expires_at=now + timedelta(days=ttl_days),
            used=False,
        )

    def is_expired(self, now=None):
        return (now or utcnow()) >= self.expires_at

    def is_redeemable(self, now=None):
        return not self.used and not self.is_expired(now)

    def serialize(self):
        return {
            "code": self.code,
            "tenantId": self.tenant_id,
            "email": self.email,
            "createdAt": iso(self.created_at),
            "expiresAt": iso(self.expires_at),
            "used": self.used,
            "usedAt": iso(self.used_at),
        }

    def __repr__(self):
        return f"<TenantInvite {self.code} tenant={self.tenant_id} used={self.used}>"
