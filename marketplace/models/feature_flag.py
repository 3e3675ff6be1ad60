# marketplace/models/feature_flag.py
from sqlalchemy.orm import validates

from marketplace.extensions import db
from marketplace.core.database import BaseModel
from marketplace.core.constants import FeatureFlagScope

SCOPE_VALUES = tuple(scope.value for scope in FeatureFlagScope)


class FeatureFlag(BaseModel):
    """Runtime switch, optionally scoped to roles, users or a rollout percentage"""

    __tablename__ = "feature_flags"

    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    is_enabled = db.Column(db.Boolean, nullable=False, default=False)
    scope = db.Column(db.String(20), nullable=False, default=FeatureFlagScope.GLOBAL.value)
    rules = db.Column(db.JSON)
    rollout_percentage = db.Column(db.Integer)

    __table_args__ = (
        db.CheckConstraint(
            "rollout_percentage IS NULL OR (rollout_percentage >= 0 AND rollout_percentage <= 100)",
            name="ck_feature_flags_rollout_range",
        ),
    )

    def __repr__(self):
        return f"<FeatureFlag {self.key} enabled={self.is_enabled}>"

    @validates("scope")
    def validate_scope(self, _key, value):
        value = value.value if isinstance(value, FeatureFlagScope) else value
        if value not in SCOPE_VALUES:
            raise ValueError(f"Invalid scope {value!r}, expected one of {', '.join(SCOPE_VALUES)}")
        return value

    @validates("rollout_percentage")
    def validate_rollout_percentage(self, _key, value):
        if value is not None and not 0 <= int(value) <= 100:
            raise ValueError("rollout_percentage must be between 0 and 100")
        return value

    def snapshot(self):
        """The subset of fields flag evaluation needs; safe to store in the cache"""
        return {
            "key": self.key,
            "is_enabled": bool(self.is_enabled),
            "scope": self.scope,
            "rules": self.rules or {},
            "rollout_percentage": self.rollout_percentage,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "display_name": self.display_name,
            "description": self.description,
            "is_enabled": self.is_enabled,
            "scope": self.scope,
            "rules": self.rules,
            "rollout_percentage": self.rollout_percentage,
            "created_at": self.isoformat(self.created_at),
            "updated_at": self.isoformat(self.updated_at),
        }

    @staticmethod
    def find_by_key(key):
        return FeatureFlag.query.filter_by(key=key).first()
