"""create vendors, seed vendor/transaction/file permissions

Revision ID: 20241201_0005
Revises: 20241201_0004
Create Date: 2024-12-01
"""
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0005"
down_revision = "20241201_0004"
branch_labels = None
depends_on = None

ACTIONS = {
    "read": ("View", "View {} information"),
    "write": ("Manage", "Create and update {}"),
    "delete": ("Delete", "Delete {}"),
}
RESOURCES = ["vendors", "transactions", "files"]

GRANTS = {
    "admin": [f"{resource}:{action}" for resource in RESOURCES for action in ACTIONS],
    "seller": [
        "transactions:read",
        "transactions:write",
        "files:read",
        "files:write",
    ],
    "customer": ["transactions:read"],
}


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)

    if not insp.has_table("vendors"):
        op.create_table(
            "vendors",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("email", sa.String(255)),
            sa.Column("phone", sa.String(50)),
            sa.Column("address", sa.Text()),
            sa.Column("country", sa.String(100)),
            sa.Column("description", sa.Text()),
            sa.Column("contact_person", sa.String(200)),
            sa.Column("tax_id", sa.String(100)),
            sa.Column("website", sa.String(255)),
            sa.Column("notes", sa.Text()),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint("name", name="uq_vendors_name"),
            sa.UniqueConstraint("email", name="uq_vendors_email"),
        )
        op.create_index("ix_vendors_country", "vendors", ["country"])

    insert_permission = sa.text(
        """
        INSERT INTO permissions
            (id, name, resource, action, display_name, description, created_at, updated_at)
        SELECT :id, :name, :resource, :action, :display_name, :description,
               CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
        WHERE NOT EXISTS (
            SELECT 1 FROM permissions WHERE resource = :resource AND action = :action
        )
        """
    )
    for resource in RESOURCES:
        label = resource.title()
        for action, (verb, description) in ACTIONS.items():
            bind.execute(
                insert_permission,
                {
                    "id": str(uuid.uuid4()),
                    "name": f"{resource}:{action}",
                    "resource": resource,
                    "action": action,
                    "display_name": f"{verb} {label}",
                    "description": description.format(label.lower()),
                },
            )

    insert_grant = sa.text(
        """
        INSERT INTO roles_permissions (role_id, permission_id)
        SELECT r.id, p.id
        FROM roles r, permissions p
        WHERE r.name = :role AND p.name = :permission
          AND NOT EXISTS (
              SELECT 1 FROM roles_permissions rp
              WHERE rp.role_id = r.id AND rp.permission_id = p.id
          )
        """
    )
    for role, permissions in GRANTS.items():
        for permission in permissions:
            bind.execute(insert_grant, {"role": role, "permission": permission})


def downgrade():
    bind = op.get_bind()
    for resource in RESOURCES:
        bind.execute(
            sa.text(
                "DELETE FROM roles_permissions WHERE permission_id IN "
                "(SELECT id FROM permissions WHERE resource = :resource)"
            ),
            {"resource": resource},
        )
        bind.execute(
            sa.text("DELETE FROM permissions WHERE resource = :resource"), {"resource": resource}
        )
    if inspect(bind).has_table("vendors"):
        op.drop_table("vendors")
