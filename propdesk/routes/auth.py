# propdesk/routes/auth.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..security import current_account
from ..services import auth_provider

bp = Blueprint("auth", __name__)


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    account, token = auth_provider.sign_in(data.get("email"), data.get("password"))
    return jsonify(
        access_token=token,
        user=account.serialize(),
        redirect=auth_provider.redirect_for(account.role),
    ), 200


@bp.post("/logout")
@jwt_required()
def logout():
    auth_provider.sign_out()
    return jsonify(message="Successfully logged out"), 200


@bp.get("/me")
@jwt_required()
def me():
    account = current_account()
    return jsonify(user=account.serialize(), redirect=auth_provider.redirect_for(account.role)), 200
