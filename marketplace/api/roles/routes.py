# marketplace/api/roles/routes.py
import logging

from flask import Blueprint, jsonify, request

from marketplace.extensions import db
from marketplace.models import Permission as PermissionModel, Role
from marketplace.core.audit import audit_action, record_changes
from marketplace.core.constants import SYSTEM_ROLES, Permission
from marketplace.core.database import get_all_or_404, get_or_404
from marketplace.core.exceptions import ResourceConflict
from marketplace.core.pagination import apply_search, paginate
from marketplace.core.permissions import require_permission
from .schemas import PermissionIdsSchema, RoleCreateSchema, RoleQuerySchema, RoleUpdateSchema

logger = logging.getLogger(__name__)
roles_bp = Blueprint("roles", __name__)


def _audit_view(role):
    return dict(role.to_dict(include_permissions=False), permissions=role.get_permission_names())


@roles_bp.route("", methods=["POST"])
@require_permission(Permission.ROLES_WRITE)
@audit_action("create", "role")
def create_role():
    data = RoleCreateSchema().load(request.get_json() or {})

    if Role.get_role_by_name(data["name"]):
        raise ResourceConflict(f"Role with name '{data['name']}' already exists")

    permissions = get_all_or_404(PermissionModel, data.pop("permission_ids"), "permissions")
    role = Role(**data)
    role.set_permissions(permissions)
    db.session.add(role)
    db.session.commit()

    logger.info(f"Role created: {role.name}")
    return jsonify(role.to_dict()), 201


@roles_bp.route("", methods=["GET"])
@require_permission(Permission.ROLES_READ)
def list_roles():
    params = RoleQuerySchema().load(request.args)

    query = apply_search(Role.query, params.get("q"), Role.name, Role.display_name, Role.description)
    column = getattr(Role, params["sort_by"])
    query = query.order_by(column.asc() if params["sort_order"] == "asc" else column.desc())

    return paginate(query, "roles")


@roles_bp.route("/<id>", methods=["GET"])
@require_permission(Permission.ROLES_READ)
def get_role(id):
    return jsonify(get_or_404(Role, id, "Role").to_dict())


@roles_bp.route("/<id>", methods=["PUT"])
@require_permission(Permission.ROLES_WRITE)
@audit_action("update", "role")
def update_role(id):
    role = get_or_404(Role, id, "Role")
    data = RoleUpdateSchema().load(request.get_json() or {})

    new_name = data.get("name")
    if new_name and new_name != role.name:
        if role.name in SYSTEM_ROLES:
            raise ResourceConflict("System roles cannot be renamed")
        if Role.get_role_by_name(new_name):
            raise ResourceConflict(f"Role with name '{new_name}' already exists")

    before = _audit_view(role)
    if "permission_ids" in data:
        role.set_permissions(
            get_all_or_404(PermissionModel, data.pop("permission_ids"), "permissions")
        )

    for field, value in data.items():
        setattr(role, field, value)
    db.session.commit()
    record_changes(before, _audit_view(role))

    return jsonify(role.to_dict())


@roles_bp.route("/<id>/permissions", methods=["PUT"])
@require_permission(Permission.ROLES_WRITE)
@audit_action("assign_permissions", "role")
def assign_permissions(id):
    """Replace the role's permissions with the given set"""
    role = get_or_404(Role, id, "Role")
    data = PermissionIdsSchema().load(request.get_json() or {})

    role.set_permissions(get_all_or_404(PermissionModel, data["permission_ids"], "permissions"))
    db.session.commit()

    return jsonify(role.to_dict())


@roles_bp.route("/<id>/permissions", methods=["DELETE"])
@require_permission(Permission.ROLES_WRITE)
@audit_action("remove_permissions", "role")
def remove_permissions(id):
    role = get_or_404(Role, id, "Role")
    data = PermissionIdsSchema().load(request.get_json() or {})

    role.remove_permissions(data["permission_ids"])
    db.session.commit()

    return jsonify(role.to_dict())


@roles_bp.route("/<id>", methods=["DELETE"])
@require_permission(Permission.ROLES_DELETE)
@audit_action("delete", "role")
def delete_role(id):
    role = get_or_404(Role, id, "Role")
    if role.name in SYSTEM_ROLES:
        raise ResourceConflict("System roles cannot be deleted")

    name = role.name
    role.delete()
    logger.info(f"Role deleted: {name}")

    return jsonify({"message": f"Role '{name}' deleted successfully"})
