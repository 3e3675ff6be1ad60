"""create feature flags, seed defaults

Revision ID: 20241201_0004
Revises: 20241201_0003
Create Date: 2024-12-01
"""
import uuid
from datetime import datetime

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0004"
down_revision = "20241201_0003"
branch_labels = None
depends_on = None

DEFAULT_FLAGS = [
    {
        "key": "new-checkout",
        "display_name": "New Checkout Experience",
        "description": "Enable the new checkout flow with improved UX",
        "scope": "global",
        "rules": None,
        "rollout_percentage": None,
    },
    {
        "key": "advanced-analytics",
        "display_name": "Advanced Analytics Dashboard",
        "description": "Enable advanced analytics features for admin users",
        "scope": "role",
        "rules": {"roleNames": ["admin"]},
        "rollout_percentage": None,
    },
    {
        "key": "beta-features",
        "display_name": "Beta Features Access",
        "description": "Enable access to beta features for selected users",
        "scope": "user",
        "rules": {"userIds": []},
        "rollout_percentage": None,
    },
    {
        "key": "gradual-rollout-feature",
        "display_name": "Gradual Rollout Feature",
        "description": "Feature enabled for a percentage of users for gradual rollout",
        "scope": "percentage",
        "rules": None,
        "rollout_percentage": 50,
    },
]

feature_flags = sa.table(
    "feature_flags",
    sa.column("id", sa.String),
    sa.column("key", sa.String),
    sa.column("display_name", sa.String),
    sa.column("description", sa.Text),
    sa.column("is_enabled", sa.Boolean),
    sa.column("scope", sa.String),
    sa.column("rules", sa.JSON),
    sa.column("rollout_percentage", sa.Integer),
    sa.column("created_at", sa.DateTime),
    sa.column("updated_at", sa.DateTime),
)


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)

    if not insp.has_table("feature_flags"):
        op.create_table(
            "feature_flags",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("key", sa.String(100), nullable=False),
            sa.Column("display_name", sa.String(200), nullable=False),
            sa.Column("description", sa.Text()),
            sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("scope", sa.String(20), nullable=False, server_default="global"),
            sa.Column("rules", sa.JSON()),
            sa.Column("rollout_percentage", sa.Integer()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
            sa.CheckConstraint(
                "rollout_percentage IS NULL OR "
                "(rollout_percentage >= 0 AND rollout_percentage <= 100)",
                name="ck_feature_flags_rollout_range",
            ),
        )
        op.create_index("ix_feature_flags_key", "feature_flags", ["key"], unique=True)

    # JSON rules need typed binds, so existing keys are filtered here rather than in SQL
    existing = set(bind.execute(sa.select(feature_flags.c.key)).scalars())
    now = datetime.utcnow()
    missing = [
        dict(flag, id=str(uuid.uuid4()), is_enabled=False, created_at=now, updated_at=now)
        for flag in DEFAULT_FLAGS
        if flag["key"] not in existing
    ]
    if missing:
        op.bulk_insert(feature_flags, missing)


def downgrade():
    if inspect(op.get_bind()).has_table("feature_flags"):
        op.drop_table("feature_flags")
