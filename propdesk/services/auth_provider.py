"""
Authentication provider: accounts, sign-in, sign-out and the current session.

Accounts are the credentials; Tenant records stay separate and point at an
account once the tenant has signed up.
"""
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import (
    create_access_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)

from ..errors import AuthenticationError, ConflictError, PermissionDenied, ValidationError
from ..extensions import db
from ..models import ROLES, Account, RevokedToken, Tenant
from ..store import commit
from ..utils import utcnow
from ..utils.validation import normalize_email

# Where each role lands after signing in
ROLE_HOME = {
    "admin": "/admin/dashboard",
    "tenant": "/tenant/dashboard",
}


def redirect_for(role: str) -> str:
    try:
        return ROLE_HOME[role]
    except KeyError:
        raise AuthenticationError("Invalid account role.")


def validate_password(password) -> str:
    min_length = current_app.config.get("MIN_PASSWORD_LENGTH", 6)
    if not isinstance(password, str) or len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")
    return password


def find_account(email):
    return Account.query.filter_by(email=(email or "").strip().lower()).first()


def account_exists(email) -> bool:
    return find_account(email) is not None


def create_account(email, password, role="tenant", display_name=None) -> Account:
    email = normalize_email(email)
    validate_password(password)
    if role not in ROLES:
        raise ValidationError("Invalid role")
    if account_exists(email):
        raise ConflictError("An account with this email already exists")

    account = Account(email=email, role=role, display_name=(display_name or "").strip() or None)
    account.set_password(password)
    db.session.add(account)
    commit("accounts", conflict="An account with this email already exists")
    current_app.logger.info("Account %s created for %s (%s)", account.id, email, role)
    return account


def issue_token(account: Account) -> str:
    return create_access_token(
        identity=str(account.id),
        additional_claims={"role": account.role, "email": account.email},
        expires_delta=timedelta(hours=current_app.config.get("JWT_ACCESS_TOKEN_HOURS", 8)),
    )


def sign_in(email, password):
    """Returns ``(account, access_token)``."""
    if not isinstance(email, str) or not isinstance(password, str) or not email.strip() or not password:
        raise ValidationError("Email and password are required")
    email = email.strip().lower()

    account = find_account(email)
    if account is None or not account.check_password(password):
        current_app.logger.warning("Sign-in failed for %s", email)
        raise AuthenticationError("Invalid credentials")

    redirect_for(account.role)
    if account.role == "tenant":
        tenant = Tenant.query.filter_by(account_id=account.id).first()
        if tenant is not None and tenant.status == "disabled":
            current_app.logger.warning("Sign-in refused for disabled tenant %s", tenant.id)
            raise PermissionDenied("Account is disabled")

    account.last_login = utcnow()
    commit("accounts")
    return account, issue_token(account)


def sign_out() -> None:
    """Revoke the token of the current request."""
    claims = get_jwt()
    db.session.add(RevokedToken(jti=claims["jti"]))
    commit("revoked_tokens")
    current_app.logger.info("Account %s signed out", claims.get("sub"))


def is_token_revoked(jti) -> bool:
    return db.session.query(RevokedToken.id).filter_by(jti=jti).first() is not None


def current_session_user():
    """The signed-in Account for this request, or None."""
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity is None:
        return None
    return db.session.get(Account, int(identity))
