# marketplace/api/users/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from marketplace.core.constants import UserStatus


class UserQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    q = fields.Str()
    status = fields.Str(validate=validate.OneOf([s.value for s in UserStatus]))
    role = fields.Str()


class RoleIdsSchema(Schema):
    role_ids = fields.List(fields.Str(validate=validate.Length(min=1)), required=True)
