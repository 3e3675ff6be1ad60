# marketplace/api/permissions/routes.py
import logging

from flask import Blueprint, jsonify, request

from marketplace.extensions import db
from marketplace.models import Permission as PermissionModel
from marketplace.core.audit import audit_action, record_changes
from marketplace.core.constants import Permission
from marketplace.core.database import get_or_404
from marketplace.core.exceptions import ResourceConflict
from marketplace.core.pagination import apply_search, paginate
from marketplace.core.permissions import require_permission
from .schemas import PermissionCreateSchema, PermissionQuerySchema, PermissionUpdateSchema

logger = logging.getLogger(__name__)
permissions_bp = Blueprint("permissions", __name__)


def _ensure_pair_free(resource, action):
    if PermissionModel.find_by_pair(resource, action):
        raise ResourceConflict(f"Permission '{resource}:{action}' already exists")


@permissions_bp.route("", methods=["POST"])
@require_permission(Permission.PERMISSIONS_WRITE)
@audit_action("create", "permission")
def create_permission():
    data = PermissionCreateSchema().load(request.get_json() or {})
    _ensure_pair_free(data["resource"], data["action"])

    permission = PermissionModel.create(**data)
    logger.info(f"Permission created: {permission.name}")
    return jsonify(permission.to_dict()), 201


@permissions_bp.route("", methods=["GET"])
@require_permission(Permission.PERMISSIONS_READ)
def list_permissions():
    params = PermissionQuerySchema().load(request.args)

    query = PermissionModel.query
    if params.get("resource"):
        query = query.filter(PermissionModel.resource == params["resource"])
    query = apply_search(
        query,
        params.get("q"),
        PermissionModel.name,
        PermissionModel.resource,
        PermissionModel.action,
        PermissionModel.description,
    )
    query = query.order_by(PermissionModel.resource.asc(), PermissionModel.action.asc())

    return paginate(query, "permissions")


@permissions_bp.route("/resource/<resource>", methods=["GET"])
@require_permission(Permission.PERMISSIONS_READ)
def list_permissions_by_resource(resource):
    permissions = PermissionModel.find_by_resource(resource)
    return jsonify({"permissions": [p.to_dict() for p in permissions]})


@permissions_bp.route("/seed", methods=["POST"])
@require_permission(Permission.PERMISSIONS_WRITE)
@audit_action("seed", "permission")
def seed_permissions():
    created = PermissionModel.seed_defaults()
    return jsonify({"message": "Default permissions seeded", "created": len(created)})


@permissions_bp.route("/<id>", methods=["GET"])
@require_permission(Permission.PERMISSIONS_READ)
def get_permission(id):
    return jsonify(get_or_404(PermissionModel, id, "Permission").to_dict())


@permissions_bp.route("/<id>", methods=["PUT"])
@require_permission(Permission.PERMISSIONS_WRITE)
@audit_action("update", "permission")
def update_permission(id):
    permission = get_or_404(PermissionModel, id, "Permission")
    data = PermissionUpdateSchema().load(request.get_json() or {})

    resource = data.get("resource", permission.resource)
    action = data.get("action", permission.action)
    if (resource, action) != permission.pair:
        _ensure_pair_free(resource, action)

    before = permission.to_dict()
    for field, value in data.items():
        setattr(permission, field, value)
    permission.name = f"{resource}:{action}"
    db.session.commit()
    record_changes(before, permission.to_dict())

    return jsonify(permission.to_dict())


@permissions_bp.route("/<id>", methods=["DELETE"])
@require_permission(Permission.PERMISSIONS_DELETE)
@audit_action("delete", "permission")
def delete_permission(id):
    permission = get_or_404(PermissionModel, id, "Permission")
    name = permission.name
    permission.delete()
    logger.info(f"Permission deleted: {name}")

    return jsonify({"message": f"Permission '{name}' deleted successfully"})
