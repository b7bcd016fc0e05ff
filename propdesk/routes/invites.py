# propdesk/routes/invites.py
from flask import Blueprint, current_app, jsonify, request

from .. import live
from ..errors import PropDeskError
from ..security import roles_required
from ..services import auth_provider, invites
from ..utils.email import invite_email_body, send_email

bp = Blueprint("invites", __name__)


def _notify(tenant, url):
    subject = "Complete your tenant account registration"
    body = invite_email_body(tenant.name, url, current_app.config["INVITE_TTL_DAYS"])
    return send_email(tenant.email, subject, body)


def _issued(tenant, invite, url, notify):
    email_sent = _notify(tenant, url) if notify else False
    return {
        "tenant": tenant.serialize(),
        "invite": invite.serialize(),
        "signup_url": url,
        "email_sent": email_sent,
    }


@bp.post("/invites")
@roles_required("admin")
def create_invite():
    data = request.get_json(silent=True) or {}
    tenant, invite, url = invites.issue_invite(data.get("name"), data.get("email"))
    return jsonify(_issued(tenant, invite, url, bool(data.get("notify")))), 201


@bp.post("/tenants/<int:tenant_id>/invite")
@roles_required("admin")
def reissue_invite(tenant_id):
    data = request.get_json(silent=True) or {}
    tenant, invite, url = invites.reissue_invite(tenant_id)
    return jsonify(_issued(tenant, invite, url, bool(data.get("notify")))), 201


@bp.get("/invites/<code>")
def verify_invite(code):
    invite = invites.verify_invite(code)
    return jsonify(valid=True, invite=invite.serialize()), 200


def invite_state(code):
    """Verification outcome as data, for the live view."""
    def load():
        try:
            invite = invites.verify_invite(code)
        except PropDeskError as e:
            return {"code": code, "valid": False, "error": e.code, "message": e.message}
        return {"code": code, "valid": True, "invite": invite.serialize()}
    return load


@bp.get("/invites/<code>/stream")
def stream_invite(code):
    # expiry is time-based, so re-check on every heartbeat
    return live.stream_response("tenant_invites", invite_state(code), filters={"code": code}, refresh=True)


@bp.post("/invites/<code>/accept")
def accept_invite(code):
    data = request.get_json(silent=True) or {}
    tenant, account = invites.complete_signup(code, data.get("password"), name=data.get("name"))
    return jsonify(
        message="Registration completed successfully",
        tenant=tenant.serialize(),
        user=account.serialize(),
        access_token=auth_provider.issue_token(account),
        redirect=auth_provider.redirect_for(account.role),
    ), 201
