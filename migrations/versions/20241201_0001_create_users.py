"""create users

Revision ID: 20241201_0001
Revises:
Create Date: 2024-12-01
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    insp = inspect(op.get_bind())
    if insp.has_table("users"):
        return

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("provider", sa.String(20), nullable=False, server_default="local"),
        sa.Column("google_id", sa.String(255)),
        sa.Column("picture", sa.String(500)),
        sa.Column("last_login", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("google_id", name="uq_users_google_id"),
    )


def downgrade():
    if inspect(op.get_bind()).has_table("users"):
        op.drop_table("users")
