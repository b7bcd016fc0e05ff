# propdesk/errors.py
from flask import jsonify
from werkzeug.exceptions import HTTPException


class PropDeskError(Exception):
    """Base class for errors that terminate a PropDesk operation.

    Each subclass carries the HTTP status and the stable ``error`` code the
    API answers with.
    """

    status_code = 400
    code = "error"
    default_message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ValidationError(PropDeskError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class AuthenticationError(PropDeskError):
    status_code = 401
    code = "unauthorized"
    default_message = "Invalid credentials"


class PermissionDenied(PropDeskError):
    status_code = 403
    code = "forbidden"
    default_message = "Insufficient permissions"


class NotFoundError(PropDeskError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ConflictError(PropDeskError):
    status_code = 409
    code = "conflict"
    default_message = "Conflicting state"


class AlreadyUsedError(PropDeskError):
    status_code = 409
    code = "already_used"
    default_message = "Invite has already been used"


class ExpiredError(PropDeskError):
    status_code = 410
    code = "expired"
    default_message = "Invite has expired"


class StoreError(PropDeskError):
    status_code = 503
    code = "store_error"
    default_message = "Could not save changes, please retry"


def register_error_handlers(app):
    @app.errorhandler(PropDeskError)
    def propdesk_error(e):
        if isinstance(e, StoreError):
            app.logger.error("Store error: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify(error="bad_request", message=getattr(e, "description", "Bad Request")), 400

    @app.errorhandler(401)
    def unauthorized(e): return jsonify(error="unauthorized"), 401

    @app.errorhandler(403)
    def forbidden(e): return jsonify(error="forbidden"), 403

    @app.errorhandler(404)
    def not_found(e): return jsonify(error="not_found"), 404

    @app.errorhandler(405)
    def method_not_allowed(e): return jsonify(error="method_not_allowed"), 405

    @app.errorhandler(422)
    def unprocessable(e): return jsonify(error="unprocessable"), 422

    @app.errorhandler(500)
    def server_error(e):
        original = getattr(e, "original_exception", None)
        if original is not None and not isinstance(original, HTTPException):
            app.logger.error("Unhandled exception: %s", original, exc_info=original)
        return jsonify(error="server_error"), 500
