from flask import Blueprint, jsonify, request

from ..models import Property, Unit
from ..security import roles_required
from ..services import assignments, properties
from ..store import get_or_404
from ..utils.validation import parse_id

bp = Blueprint("properties", __name__)


# ---------------- Properties ----------------
@bp.get("/properties")
@roles_required("admin")
def list_properties():
    items = properties.list_properties()
    return jsonify({"total": len(items), "properties": [p.serialize() for p in items]}), 200


@bp.post("/properties")
@roles_required("admin")
def create_property():
    prop = properties.create_property(request.get_json(silent=True) or {})
    return jsonify(prop.serialize()), 201


@bp.get("/properties/<int:property_id>")
@roles_required("admin")
def get_property(property_id):
    prop = get_or_404(Property, property_id, "Property")
    response = prop.serialize()
    response["units"] = [u.serialize() for u in properties.list_units(property_id=prop.id)]
    return jsonify(response), 200


@bp.patch("/properties/<int:property_id>")
@roles_required("admin")
def update_property(property_id):
    prop = properties.update_property(property_id, request.get_json(silent=True) or {})
    return jsonify(prop.serialize()), 200


@bp.delete("/properties/<int:property_id>")
@roles_required("admin")
def delete_property(property_id):
    assignments.delete_property(property_id)
    return jsonify({"ok": True}), 200


@bp.get("/properties/<int:property_id>/vacant-units")
@roles_required("admin")
def vacant_units(property_id):
    get_or_404(Property, property_id, "Property")
    return jsonify({"units": [u.serialize() for u in properties.vacant_units(property_id)]}), 200


# ---------------- Units ----------------
@bp.get("/units")
@roles_required("admin")
def list_units():
    property_id = parse_id(request.args.get("property_id"), "property_id")
    items = properties.list_units(property_id=property_id, status=request.args.get("status"))
    return jsonify({"total": len(items), "units": [u.serialize() for u in items]}), 200


@bp.post("/units")
@roles_required("admin")
def create_unit():
    unit = properties.create_unit(request.get_json(silent=True) or {})
    return jsonify(unit.serialize()), 201


@bp.get("/units/<int:unit_id>")
@roles_required("admin")
def get_unit(unit_id):
    return jsonify(get_or_404(Unit, unit_id, "Unit").serialize()), 200


@bp.patch("/units/<int:unit_id>")
@roles_required("admin")
def update_unit(unit_id):
    unit = properties.update_unit(unit_id, request.get_json(silent=True) or {})
    return jsonify(unit.serialize()), 200


@bp.delete("/units/<int:unit_id>")
@roles_required("admin")
def delete_unit(unit_id):
    properties.delete_unit(unit_id)
    return jsonify({"ok": True}), 200
