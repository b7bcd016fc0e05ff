"""
Tenant invites: issue, verify, and complete signup.

Lifecycle of an invite::

    issue_invite()      tenant(pending) + invite(used=False), one transaction
    verify_invite()     read only: not found / expired / already used / ok
    complete_signup()   consume invite (compare-and-set on used=False),
                        create the account, activate the tenant

Consuming the invite is the linearization point of a signup: of two
concurrent completions for the same code only the first flips ``used`` and
the second fails with AlreadyUsedError. Account creation and tenant
activation run after the invite is consumed; if either fails the invite stays
consumed and the tenant stays pending. That gap is logged and reported, and
``stranded_invites()`` lists such tenants for an operator to re-invite.
"""
from flask import current_app
from sqlalchemy import update

from ..errors import (
    AlreadyUsedError,
    ConflictError,
    ExpiredError,
    NotFoundError,
    PropDeskError,
    StoreError,
)
from ..extensions import db
from ..models import Tenant, TenantInvite
from ..store import commit, execute, flush, get_or_404
from ..utils import utcnow
from ..utils.validation import normalize_email, optional_text, require_text
from . import auth_provider

MAX_CODE_ATTEMPTS = 5
DUPLICATE_TENANT = "A tenant with this email already exists"


def signup_url(code, origin=None):
    origin = (origin or current_app.config["FRONTEND_BASE_URL"]).rstrip("/")
    return f"{origin}/signup/{code}"


def _new_invite(tenant):
    cfg = current_app.config
    for _ in range(MAX_CODE_ATTEMPTS):
        invite = TenantInvite.generate(
            tenant.id,
            tenant.email,
            ttl_days=cfg["INVITE_TTL_DAYS"],
            length=cfg["INVITE_CODE_LENGTH"],
        )
        if db.session.get(TenantInvite, invite.code) is None:
            return invite
    db.session.rollback()
    raise StoreError("Could not generate a unique invite code, please retry")


def issue_invite(name, email, origin=None):
    """Create a pending tenant and its invite. Returns ``(tenant, invite, url)``."""
    name = require_text({"name": name}, "name")
    email = normalize_email(email)
    if Tenant.query.filter_by(email=email).first() is not None:
        raise ConflictError(DUPLICATE_TENANT)

    tenant = Tenant(name=name, email=email, status="pending", property_id=None, unit_id=None)
    db.session.add(tenant)
    flush(conflict=DUPLICATE_TENANT)

    invite = _new_invite(tenant)
    db.session.add(invite)
    commit("tenants", "tenant_invites", conflict=DUPLICATE_TENANT)

    current_app.logger.info("Invite %s issued for tenant %s (expires %s)", invite.code, tenant.id, invite.expires_at)
    return tenant, invite, signup_url(invite.code, origin)


def reissue_invite(tenant_id, origin=None):
    """Fresh invite for a tenant that never completed signup.

    Earlier codes that are still redeemable expire now, so only the newest
    link works.
    """
    tenant = get_or_404(Tenant, tenant_id, "Tenant")
    if tenant.status != "pending":
        raise ConflictError("Only pending tenants can be invited")

    now = utcnow()
    execute(
        update(TenantInvite)
        .where(
            TenantInvite.tenant_id == tenant.id,
            TenantInvite.used.is_(False),
            TenantInvite.expires_at > now,
        )
        .values(expires_at=now)
        .execution_options(synchronize_session=False)
    )
    invite = _new_invite(tenant)
    db.session.add(invite)
    commit("tenant_invites")

    current_app.logger.info("Invite %s reissued for tenant %s", invite.code, tenant.id)
    return tenant, invite, signup_url(invite.code, origin)


def get_invite(code):
    if not code:
        return None
    return db.session.get(TenantInvite, code)


def check_redeemable(invite, now=None):
    if invite is None:
        raise NotFoundError("Invalid or expired invite")
    # expiry wins over the used flag
    if invite.is_expired(now):
        raise ExpiredError("This invite has expired")
    if invite.used:
        raise AlreadyUsedError("This invite has already been used")
    return invite


def verify_invite(code):
    """Return the invite if it can still be redeemed; raise otherwise. No side effects."""
    return check_redeemable(get_invite(code))


def consume_invite(code):
    """Flip ``used`` False -> True. Exactly one caller per code succeeds."""
    now = utcnow()
    try:
        consumed = execute(
            update(TenantInvite)
            .where(
                TenantInvite.code == code,
                TenantInvite.used.is_(False),
                TenantInvite.expires_at > now,
            )
            .values(used=True, used_at=now)
            .execution_options(synchronize_session=False)
        ).rowcount
        commit("tenant_invites")
    except StoreError as e:
        raise StoreError("Signup failed, please retry") from e

    if consumed != 1:
        # lost the race (or expired in between); report why
        db.session.expire_all()
        check_redeemable(get_invite(code))
        raise AlreadyUsedError("This invite has already been used")

    current_app.logger.info("Invite %s consumed", code)


def complete_signup(code, password, name=None):
    """Redeem an invite: returns ``(tenant, account)`` with the tenant active."""
    invite = verify_invite(code)
    auth_provider.validate_password(password)
    name = optional_text({"name": name}, "name")

    tenant = db.session.get(Tenant, invite.tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant not found")
    if tenant.status != "pending":
        raise ConflictError("This tenant has already been activated")
    if auth_provider.account_exists(invite.email):
        raise ConflictError("An account with this email already exists")

    tenant_id, email = tenant.id, invite.email
    consume_invite(code)

    try:
        account = auth_provider.create_account(
            email, password, role="tenant", display_name=name or tenant.name
        )
        tenant = db.session.get(Tenant, tenant_id)
        tenant.status = "active"
        tenant.account_id = account.id
        if name:
            tenant.name = name
        commit("tenants")
    except PropDeskError as e:
        current_app.logger.error(
            "Invite %s consumed but tenant %s was not activated: %s", code, tenant_id, e
        )
        raise StoreError(
            "Signup could not be completed. Ask your property manager to send a new invite."
        ) from e

    current_app.logger.info("Tenant %s activated with account %s", tenant_id, account.id)
    return tenant, account


def stranded_invites():
    """Consumed invites whose tenant never got activated."""
    return (
        db.session.query(TenantInvite, Tenant)
        .join(Tenant, Tenant.id == TenantInvite.tenant_id)
        .filter(TenantInvite.used.is_(True), Tenant.status == "pending")
        .order_by(TenantInvite.used_at)
        .all()
    )
