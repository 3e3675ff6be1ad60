# marketplace/api/users/routes.py
import logging

from flask import Blueprint, jsonify, request

from marketplace.extensions import db
from marketplace.models import Role, User
from marketplace.core.audit import audit_action
from marketplace.core.constants import Permission
from marketplace.core.database import get_all_or_404, get_or_404
from marketplace.core.errors import APIError
from marketplace.core.pagination import apply_search, paginate
from marketplace.core.permissions import require_permission
from .schemas import RoleIdsSchema, UserQuerySchema

logger = logging.getLogger(__name__)
users_bp = Blueprint("users", __name__)


@users_bp.route("", methods=["GET"])
@require_permission(Permission.USERS_READ)
def list_users():
    """List users with optional search, status and role filters"""
    filters = UserQuerySchema().load(request.args)

    query = User.query
    query = apply_search(query, filters.get("q"), User.email, User.name)
    if "status" in filters:
        query = query.filter(User.status == filters["status"])
    if "role" in filters:
        query = query.filter(User.roles.any(Role.name == filters["role"]))

    return paginate(query.order_by(User.created_at.desc()), "users")


@users_bp.route("/<id>", methods=["GET"])
@require_permission(Permission.USERS_READ)
def get_user(id):
    user = get_or_404(User, id, "User")
    return jsonify(user.to_dict(include_permissions=True))


@users_bp.route("/<id>/suspend", methods=["PATCH"])
@require_permission(Permission.USERS_WRITE)
@audit_action("suspend", "user")
def suspend_user(id):
    user = get_or_404(User, id, "User")
    if user.is_suspended:
        raise APIError("User is already suspended", status_code=400)

    user.suspend()
    db.session.commit()
    logger.info(f"User {user.id} suspended")

    return jsonify({"message": "User suspended successfully", "user": user.to_dict()})


@users_bp.route("/<id>/reactivate", methods=["PATCH"])
@require_permission(Permission.USERS_WRITE)
@audit_action("reactivate", "user")
def reactivate_user(id):
    user = get_or_404(User, id, "User")
    if not user.is_suspended:
        raise APIError("User is already active", status_code=400)

    user.reactivate()
    db.session.commit()
    logger.info(f"User {user.id} reactivated")

    return jsonify({"message": "User reactivated successfully", "user": user.to_dict()})


@users_bp.route("/<id>/roles", methods=["PUT"])
@require_permission(Permission.USERS_WRITE)
@audit_action("assign_roles", "user")
def assign_roles(id):
    """Replace the user's roles with the given set"""
    user = get_or_404(User, id, "User")
    data = RoleIdsSchema().load(request.get_json() or {})

    user.assign_roles(get_all_or_404(Role, data["role_ids"], "roles"))
    db.session.commit()

    return jsonify(user.to_dict(include_permissions=True))


@users_bp.route("/<id>/roles", methods=["DELETE"])
@require_permission(Permission.USERS_WRITE)
@audit_action("remove_roles", "user")
def remove_roles(id):
    user = get_or_404(User, id, "User")
    data = RoleIdsSchema().load(request.get_json() or {})

    user.remove_roles(data["role_ids"])
    db.session.commit()

    return jsonify(user.to_dict(include_permissions=True))
