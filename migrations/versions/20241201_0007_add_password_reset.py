"""add password reset columns to users

Revision ID: 20241201_0007
Revises: 20241201_0006
Create Date: 2024-12-01
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0007"
down_revision = "20241201_0006"
branch_labels = None
depends_on = None

TOKEN_INDEX = "ix_users_reset_password_token"


def upgrade():
    insp = inspect(op.get_bind())
    columns = {column["name"] for column in insp.get_columns("users")}

    if "reset_password_token" not in columns:
        op.add_column("users", sa.Column("reset_password_token", sa.String(64), nullable=True))
    if "reset_password_expires" not in columns:
        op.add_column("users", sa.Column("reset_password_expires", sa.DateTime(), nullable=True))

    indexes = {index["name"] for index in inspect(op.get_bind()).get_indexes("users")}
    if TOKEN_INDEX not in indexes:
        op.create_index(TOKEN_INDEX, "users", ["reset_password_token"])


def downgrade():
    insp = inspect(op.get_bind())
    if not insp.has_table("users"):
        return

    if TOKEN_INDEX in {index["name"] for index in insp.get_indexes("users")}:
        op.drop_index(TOKEN_INDEX, table_name="users")

    columns = {column["name"] for column in insp.get_columns("users")}
    with op.batch_alter_table("users") as batch_op:
        for name in ("reset_password_expires", "reset_password_token"):
            if name in columns:
                batch_op.drop_column(name)
