# marketplace/api/vendors/routes.py
import logging

from flask import Blueprint, jsonify, request

from marketplace.extensions import db
from marketplace.models import Vendor
from marketplace.core.audit import audit_action, record_changes
from marketplace.core.constants import Permission
from marketplace.core.database import get_or_404
from marketplace.core.exceptions import ResourceConflict
from marketplace.core.pagination import apply_search, paginate
from marketplace.core.permissions import require_permission
from .schemas import VendorQuerySchema, VendorSchema

logger = logging.getLogger(__name__)
vendors_bp = Blueprint("vendors", __name__)


def _ensure_unique(name=None, email=None, exclude_id=None):
    if name:
        existing = Vendor.find_by_name(name)
        if existing and existing.id != exclude_id:
            raise ResourceConflict(f"Vendor with name '{name}' already exists")
    if email:
        existing = Vendor.find_by_email(email)
        if existing and existing.id != exclude_id:
            raise ResourceConflict(f"Vendor with email '{email}' already exists")


@vendors_bp.route("", methods=["POST"])
@require_permission(Permission.VENDORS_WRITE)
@audit_action("create", "vendor")
def create_vendor():
    data = VendorSchema().load(request.get_json() or {})
    _ensure_unique(data["name"], data.get("email"))

    vendor = Vendor.create(**data)
    logger.info(f"Vendor created: {vendor.name}")
    return jsonify(vendor.to_dict()), 201


@vendors_bp.route("", methods=["GET"])
@require_permission(Permission.VENDORS_READ)
def list_vendors():
    params = VendorQuerySchema().load(request.args)

    query = apply_search(Vendor.query, params.get("search"), Vendor.name)
    if params.get("country"):
        query = query.filter(Vendor.country == params["country"])
    if "is_active" in params:
        query = query.filter(Vendor.is_active.is_(params["is_active"]))

    return paginate(query.order_by(Vendor.created_at.desc()), "vendors")


@vendors_bp.route("/active", methods=["GET"])
@require_permission(Permission.VENDORS_READ)
def list_active_vendors():
    vendors = Vendor.query.filter(Vendor.is_active.is_(True)).order_by(Vendor.name.asc()).all()
    return jsonify({"vendors": [v.to_dict() for v in vendors]})


@vendors_bp.route("/country/<country>", methods=["GET"])
@require_permission(Permission.VENDORS_READ)
def list_vendors_by_country(country):
    vendors = Vendor.query.filter_by(country=country).order_by(Vendor.name.asc()).all()
    return jsonify({"vendors": [v.to_dict() for v in vendors]})


@vendors_bp.route("/<id>", methods=["GET"])
@require_permission(Permission.VENDORS_READ)
def get_vendor(id):
    return jsonify(get_or_404(Vendor, id, "Vendor").to_dict())


@vendors_bp.route("/<id>", methods=["PUT"])
@require_permission(Permission.VENDORS_WRITE)
@audit_action("update", "vendor")
def update_vendor(id):
    vendor = get_or_404(Vendor, id, "Vendor")
    data = VendorSchema(partial=True).load(request.get_json() or {})
    _ensure_unique(data.get("name"), data.get("email"), exclude_id=vendor.id)

    before = vendor.to_dict()
    for field, value in data.items():
        setattr(vendor, field, value)
    db.session.commit()
    record_changes(before, vendor.to_dict())

    return jsonify(vendor.to_dict())


@vendors_bp.route("/<id>/toggle-status", methods=["PATCH"])
@require_permission(Permission.VENDORS_WRITE)
@audit_action("toggle_status", "vendor")
def toggle_vendor_status(id):
    vendor = get_or_404(Vendor, id, "Vendor")
    before = vendor.to_dict()
    vendor.toggle_status()
    db.session.commit()
    record_changes(before, vendor.to_dict())

    logger.info(f"Vendor {vendor.name} is now {'active' if vendor.is_active else 'inactive'}")
    return jsonify(vendor.to_dict())


@vendors_bp.route("/<id>", methods=["DELETE"])
@require_permission(Permission.VENDORS_DELETE)
@audit_action("delete", "vendor")
def delete_vendor(id):
    vendor = get_or_404(Vendor, id, "Vendor")
    name = vendor.name
    vendor.delete()
    logger.info(f"Vendor deleted: {name}")

    return jsonify({"message": f"Vendor '{name}' deleted successfully"})
