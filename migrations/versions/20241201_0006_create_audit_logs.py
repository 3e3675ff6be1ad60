"""create audit logs

Revision ID: 20241201_0006
Revises: 20241201_0005
Create Date: 2024-12-01
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0006"
down_revision = "20241201_0005"
branch_labels = None
depends_on = None


def upgrade():
    if inspect(op.get_bind()).has_table("audit_logs"):
        return

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(100), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.Column("event_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(255), nullable=True),
        sa.Column("endpoint", sa.String(255), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_logs_timestamp", "audit_logs", ["timestamp"])


def downgrade():
    if inspect(op.get_bind()).has_table("audit_logs"):
        op.drop_table("audit_logs")
