# marketplace/api/feature_flags/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, EXCLUDE

from marketplace.core.constants import FeatureFlagScope

FLAG_KEY = validate.Regexp(
    r"^[A-Za-z0-9][A-Za-z0-9._-]*$",
    error="Keys start with a letter or digit and may contain '.', '-' or '_'",
)
SCOPES = [scope.value for scope in FeatureFlagScope]


def _is_list_of(value, types):
    return isinstance(value, list) and all(
        isinstance(item, types) and not isinstance(item, bool) for item in value
    )


def scope_rule_errors(scope, rules, rollout_percentage):
    """Field errors for a flag whose rules do not fit its scope"""
    if not isinstance(rules, dict):
        rules = {}
    if scope == FeatureFlagScope.ROLE.value:
        if not _is_list_of(rules.get("roleNames"), str):
            return {"rules": ["Role flags need rules.roleNames as a list of role names"]}
    elif scope == FeatureFlagScope.USER.value:
        if not _is_list_of(rules.get("userIds"), (str, int)):
            return {"rules": ["User flags need rules.userIds as a list of user ids"]}
    elif scope == FeatureFlagScope.PERCENTAGE.value:
        if rollout_percentage is None:
            return {"rollout_percentage": ["Percentage flags need a rollout_percentage"]}
    return {}


class FeatureFlagCreateSchema(Schema):
    key = fields.Str(required=True, validate=[validate.Length(min=1, max=100), FLAG_KEY])
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(allow_none=True)
    is_enabled = fields.Bool(load_default=False)
    scope = fields.Str(load_default=FeatureFlagScope.GLOBAL.value, validate=validate.OneOf(SCOPES))
    rules = fields.Dict(keys=fields.Str(), values=fields.Raw(), allow_none=True)
    rollout_percentage = fields.Int(allow_none=True, validate=validate.Range(min=0, max=100))

    @validates_schema
    def validate_scope_rules(self, data, **kwargs):
        errors = scope_rule_errors(data["scope"], data.get("rules"), data.get("rollout_percentage"))
        if errors:
            raise ValidationError(errors)


class FeatureFlagUpdateSchema(Schema):
    """Field-level checks only; the route validates the merged flag with ``scope_rule_errors``"""

    key = fields.Str(validate=[validate.Length(min=1, max=100), FLAG_KEY])
    display_name = fields.Str(validate=validate.Length(min=1, max=200))
    description = fields.Str(allow_none=True)
    is_enabled = fields.Bool()
    scope = fields.Str(validate=validate.OneOf(SCOPES))
    rules = fields.Dict(keys=fields.Str(), values=fields.Raw(), allow_none=True)
    rollout_percentage = fields.Int(allow_none=True, validate=validate.Range(min=0, max=100))


class FeatureFlagToggleSchema(Schema):
    is_enabled = fields.Bool(required=True)


class FeatureFlagQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    q = fields.Str()
    scope = fields.Str(validate=validate.OneOf(SCOPES))
    is_enabled = fields.Bool()
