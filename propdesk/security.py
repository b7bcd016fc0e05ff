# propdesk/security.py
from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from .errors import NotFoundError
from .extensions import jwt
from .models import Tenant
from .services import auth_provider


def roles_required(*allowed):
    """Usage: @roles_required("admin")"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = get_jwt().get("role")
            if role not in allowed:
                return jsonify(error="forbidden", message="Insufficient permissions"), 403
            return fn(*args, **kwargs)
        return wrapper
    return deco


def current_account():
    account = auth_provider.current_session_user()
    if account is None:
        raise NotFoundError("Account not found")
    return account


def current_tenant(account=None):
    """Tenant record bound to the signed-in account."""
    account = account or current_account()
    tenant = Tenant.query.filter_by(account_id=account.id).first()
    if tenant is None:
        raise NotFoundError("No tenant record is linked to this account")
    return tenant


@jwt.token_in_blocklist_loader
def _token_revoked(jwt_header, jwt_payload):
    return auth_provider.is_token_revoked(jwt_payload["jti"])
