# marketplace/api/feature_flags/routes.py
import logging

from flask import Blueprint, jsonify, request

from marketplace.extensions import db
from marketplace.models import FeatureFlag
from marketplace.core.audit import audit_action, record_changes
from marketplace.core.constants import Permission
from marketplace.core.database import get_or_404
from marketplace.core.exceptions import ResourceConflict, ValidationFailed
from marketplace.core.feature_flags import invalidate_feature_flag_cache, seed_default_flags
from marketplace.core.pagination import apply_search, paginate
from marketplace.core.permissions import require_permission
from .schemas import (
    FeatureFlagCreateSchema,
    FeatureFlagQuerySchema,
    FeatureFlagToggleSchema,
    FeatureFlagUpdateSchema,
    scope_rule_errors,
)

logger = logging.getLogger(__name__)
feature_flags_bp = Blueprint("feature_flags", __name__)


@feature_flags_bp.route("", methods=["POST"])
@require_permission(Permission.FEATURE_FLAGS_WRITE)
@audit_action("create", "feature_flag")
def create_feature_flag():
    data = FeatureFlagCreateSchema().load(request.get_json() or {})

    if FeatureFlag.find_by_key(data["key"]):
        raise ResourceConflict(f"Feature flag with key '{data['key']}' already exists")

    flag = FeatureFlag(**data)
    db.session.add(flag)
    db.session.commit()
    invalidate_feature_flag_cache()

    logger.info(f"Feature flag created: {flag.key} (enabled: {flag.is_enabled})")
    return jsonify(flag.to_dict()), 201


@feature_flags_bp.route("", methods=["GET"])
@require_permission(Permission.FEATURE_FLAGS_READ)
def list_feature_flags():
    params = FeatureFlagQuerySchema().load(request.args)

    query = apply_search(
        FeatureFlag.query, params.get("q"), FeatureFlag.key, FeatureFlag.display_name
    )
    if "scope" in params:
        query = query.filter(FeatureFlag.scope == params["scope"])
    if "is_enabled" in params:
        query = query.filter(FeatureFlag.is_enabled.is_(params["is_enabled"]))

    return paginate(query.order_by(FeatureFlag.created_at.desc()), "feature_flags")


@feature_flags_bp.route("/seed", methods=["POST"])
@require_permission(Permission.FEATURE_FLAGS_WRITE)
@audit_action("seed", "feature_flag")
def seed_feature_flags():
    created = seed_default_flags()
    return jsonify(
        {"message": "Default feature flags seeded", "created": [flag.key for flag in created]}
    )


@feature_flags_bp.route("/<id>", methods=["GET"])
@require_permission(Permission.FEATURE_FLAGS_READ)
def get_feature_flag(id):
    return jsonify(get_or_404(FeatureFlag, id, "Feature flag").to_dict())


@feature_flags_bp.route("/<id>", methods=["PUT"])
@require_permission(Permission.FEATURE_FLAGS_WRITE)
@audit_action("update", "feature_flag")
def update_feature_flag(id):
    flag = get_or_404(FeatureFlag, id, "Feature flag")
    data = FeatureFlagUpdateSchema().load(request.get_json() or {})

    errors = scope_rule_errors(
        data.get("scope", flag.scope),
        data["rules"] if "rules" in data else flag.rules,
        data["rollout_percentage"] if "rollout_percentage" in data else flag.rollout_percentage,
    )
    if errors:
        raise ValidationFailed(errors=errors)

    old_key = flag.key
    new_key = data.get("key")
    if new_key and new_key != old_key and FeatureFlag.find_by_key(new_key):
        raise ResourceConflict(f"Feature flag with key '{new_key}' already exists")

    before = flag.to_dict()
    for field, value in data.items():
        setattr(flag, field, value)
    db.session.commit()
    record_changes(before, flag.to_dict())
    invalidate_feature_flag_cache(old_key)

    logger.info(f"Feature flag updated: {flag.key} (enabled: {flag.is_enabled})")
    return jsonify(flag.to_dict())


@feature_flags_bp.route("/<id>/toggle", methods=["PATCH"])
@require_permission(Permission.FEATURE_FLAGS_WRITE)
@audit_action("toggle", "feature_flag")
def toggle_feature_flag(id):
    flag = get_or_404(FeatureFlag, id, "Feature flag")
    data = FeatureFlagToggleSchema().load(request.get_json() or {})

    flag.is_enabled = data["is_enabled"]
    db.session.commit()
    invalidate_feature_flag_cache()

    logger.info(f"Feature flag toggled: {flag.key} -> {'enabled' if flag.is_enabled else 'disabled'}")
    return jsonify(flag.to_dict())


@feature_flags_bp.route("/<id>", methods=["DELETE"])
@require_permission(Permission.FEATURE_FLAGS_DELETE)
@audit_action("delete", "feature_flag")
def delete_feature_flag(id):
    flag = get_or_404(FeatureFlag, id, "Feature flag")
    key = flag.key
    flag.delete()
    invalidate_feature_flag_cache(key)

    logger.info(f"Feature flag deleted: {key}")
    return jsonify({"message": f"Feature flag '{key}' deleted successfully"})
