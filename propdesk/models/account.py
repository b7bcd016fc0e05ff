from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db
from ..utils import iso, utcnow

ROLES = ("admin", "tenant")


class Account(db.Model):
    """Authentication credential. Distinct from the Tenant record it may be bound to."""

    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="tenant")
    display_name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password, method="pbkdf2:sha256")

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def serialize(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.display_name,
            "role": self.role,
            "created_at": iso(self.created_at),
            "last_login": iso(self.last_login),
        }

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r} role={self.role!r}>"


class RevokedToken(db.Model):
    __tablename__ = "revoked_tokens"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    revoked_at = db.Column(db.DateTime, default=utcnow, nullable=False)
