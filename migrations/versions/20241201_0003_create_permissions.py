"""create permissions and role-permission links, seed and grant defaults

Revision ID: 20241201_0003
Revises: 20241201_0002
Create Date: 2024-12-01
"""
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20241201_0003"
down_revision = "20241201_0002"
branch_labels = None
depends_on = None

RESOURCES = ["users", "products", "orders", "roles", "permissions", "features-flags"]
ACTIONS = {
    "read": ("View", "View {} information"),
    "write": ("Manage", "Create and update {}"),
    "delete": ("Delete", "Delete {}"),
}

GRANTS = {
    "admin": [f"{resource}:{action}" for resource in RESOURCES for action in ACTIONS],
    "seller": [f"{resource}:{action}" for resource in ("products", "orders") for action in ACTIONS],
    "customer": ["orders:read"],
}


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)

    if not insp.has_table("permissions"):
        op.create_table(
            "permissions",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("name", sa.String(100), nullable=False),
            sa.Column("resource", sa.String(50), nullable=False),
            sa.Column("action", sa.String(50), nullable=False),
            sa.Column("display_name", sa.String(100), nullable=False),
            sa.Column("description", sa.Text()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint("name", name="uq_permissions_name"),
            sa.UniqueConstraint("resource", "action", name="uq_permission_resource_action"),
        )

    indexes = {ix["name"] for ix in inspect(bind).get_indexes("permissions")}
    if "ix_permissions_resource" not in indexes:
        op.create_index("ix_permissions_resource", "permissions", ["resource"])

    if not insp.has_table("roles_permissions"):
        op.create_table(
            "roles_permissions",
            sa.Column(
                "role_id",
                sa.String(36),
                sa.ForeignKey("roles.id", ondelete="CASCADE"),
                primary_key=True,
            ),
            sa.Column(
                "permission_id",
                sa.String(36),
                sa.ForeignKey("permissions.id", ondelete="CASCADE"),
                primary_key=True,
            ),
        )

    seed_permissions(bind, RESOURCES)
    grant(bind, GRANTS)


def seed_permissions(bind, resources):
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
    for resource in resources:
        label = resource.replace("-", " ").title()
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


def grant(bind, grants):
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
    for role, permissions in grants.items():
        for permission in permissions:
            bind.execute(insert_grant, {"role": role, "permission": permission})


def downgrade():
    insp = inspect(op.get_bind())
    if insp.has_table("roles_permissions"):
        op.drop_table("roles_permissions")
    if insp.has_table("permissions"):
        op.drop_table("permissions")
