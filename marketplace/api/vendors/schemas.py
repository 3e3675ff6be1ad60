# marketplace/api/vendors/schemas.py
from marshmallow import Schema, fields, validate, pre_load, EXCLUDE


class VendorSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    email = fields.Email(allow_none=True, validate=validate.Length(max=255))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=50))
    address = fields.Str(allow_none=True)
    country = fields.Str(allow_none=True, validate=validate.Length(max=100))
    description = fields.Str(allow_none=True)
    contact_person = fields.Str(allow_none=True, validate=validate.Length(max=200))
    tax_id = fields.Str(allow_none=True, validate=validate.Length(max=100))
    website = fields.Url(allow_none=True, validate=validate.Length(max=255))
    notes = fields.Str(allow_none=True)
    is_active = fields.Bool(load_default=True)

    @pre_load
    def blank_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for field in ("email", "website"):
            if isinstance(cleaned.get(field), str) and not cleaned[field].strip():
                cleaned[field] = None
        if isinstance(cleaned.get("email"), str):
            cleaned["email"] = cleaned["email"].strip().lower()
        return cleaned


class VendorQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    search = fields.Str()
    country = fields.Str()
    is_active = fields.Bool()
