# marketplace/api/auth/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from marketplace.core.feature_flags import MAX_BATCH_KEYS


class NormalizeEmailMixin:
    @pre_load
    def normalize_email(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data, email=data["email"].strip().lower())
        return data


class SignupSchema(NormalizeEmailMixin, Schema):
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.Str(required=True, validate=validate.Length(min=8, max=128))
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))


class LoginSchema(NormalizeEmailMixin, Schema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=1))


class GoogleAuthSchema(Schema):
    token = fields.Str(required=True, validate=validate.Length(min=1))


class BatchCheckSchema(Schema):
    keys = fields.List(
        fields.Str(validate=validate.Length(min=1, max=100)),
        required=True,
        validate=validate.Length(min=1, max=MAX_BATCH_KEYS),
    )


class ProfileUpdateSchema(NormalizeEmailMixin, Schema):
    name = fields.Str(validate=validate.Length(min=2, max=100))
    email = fields.Email(validate=validate.Length(max=255))
    picture = fields.Str(allow_none=True, validate=validate.Length(max=500))


class ChangePasswordSchema(Schema):
    current_password = fields.Str(required=True, validate=validate.Length(min=1))
    new_password = fields.Str(required=True, validate=validate.Length(min=8, max=128))


class ForgotPasswordSchema(NormalizeEmailMixin, Schema):
    email = fields.Email(required=True)


class ResetPasswordSchema(Schema):
    token = fields.Str(required=True, validate=validate.Length(min=1))
    new_password = fields.Str(required=True, validate=validate.Length(min=8, max=128))
