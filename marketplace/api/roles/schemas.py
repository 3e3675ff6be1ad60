# marketplace/api/roles/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

ROLE_NAME = validate.Regexp(
    r"^[a-z][a-z0-9_-]*$", error="Use lowercase letters, digits, '-' or '_'"
)


class RoleCreateSchema(Schema):
    name = fields.Str(required=True, validate=[validate.Length(min=2, max=50), ROLE_NAME])
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
    permission_ids = fields.List(fields.Str(), load_default=list)


class RoleUpdateSchema(Schema):
    name = fields.Str(validate=[validate.Length(min=2, max=50), ROLE_NAME])
    display_name = fields.Str(validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
    permission_ids = fields.List(fields.Str())


class PermissionIdsSchema(Schema):
    permission_ids = fields.List(fields.Str(), required=True)


class RoleQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    q = fields.Str()
    sort_by = fields.Str(
        load_default="created_at",
        validate=validate.OneOf(["name", "display_name", "created_at", "updated_at"]),
    )
    sort_order = fields.Str(load_default="desc", validate=validate.OneOf(["asc", "desc"]))
