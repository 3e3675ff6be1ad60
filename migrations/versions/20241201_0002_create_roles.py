"""create roles and user-role links, seed system roles

Revision ID: 20241201_0002
Revises: 20241201_0001
Create Date: 2024-12-01
"""
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0002"
down_revision = "20241201_0001"
branch_labels = None
depends_on = None

SYSTEM_ROLES = [
    ("customer", "Customer", "Regular customer with basic access"),
    ("seller", "Seller", "Can manage products and view orders"),
    ("admin", "Administrator", "Full system access and management"),
]


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)

    if not insp.has_table("roles"):
        op.create_table(
            "roles",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("name", sa.String(50), nullable=False),
            sa.Column("display_name", sa.String(100), nullable=False),
            sa.Column("description", sa.Text()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint("name", name="uq_roles_name"),
        )

    if not insp.has_table("users_roles"):
        op.create_table(
            "users_roles",
            sa.Column(
                "user_id",
                sa.String(36),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                primary_key=True,
            ),
            sa.Column(
                "role_id",
                sa.String(36),
                sa.ForeignKey("roles.id", ondelete="CASCADE"),
                primary_key=True,
            ),
        )

    insert_role = sa.text(
        """
        INSERT INTO roles (id, name, display_name, description, created_at, updated_at)
        SELECT :id, :name, :display_name, :description, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
        WHERE NOT EXISTS (SELECT 1 FROM roles WHERE name = :name)
        """
    )
    for name, display_name, description in SYSTEM_ROLES:
        bind.execute(
            insert_role,
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "display_name": display_name,
                "description": description,
            },
        )


def downgrade():
    insp = inspect(op.get_bind())
    if insp.has_table("users_roles"):
        op.drop_table("users_roles")
    if insp.has_table("roles"):
        op.drop_table("roles")
