# marketplace/api/permissions/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

SEGMENT = validate.Regexp(r"^[a-z][a-z0-9_-]*$", error="Use lowercase letters, digits, '-' or '_'")


class PermissionCreateSchema(Schema):
    resource = fields.Str(required=True, validate=[validate.Length(min=1, max=50), SEGMENT])
    action = fields.Str(required=True, validate=[validate.Length(min=1, max=50), SEGMENT])
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)


class PermissionUpdateSchema(Schema):
    resource = fields.Str(validate=[validate.Length(min=1, max=50), SEGMENT])
    action = fields.Str(validate=[validate.Length(min=1, max=50), SEGMENT])
    display_name = fields.Str(validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)


class PermissionQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    resource = fields.Str()
    q = fields.Str()
