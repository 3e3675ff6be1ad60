# marketplace/models/associations.py
from marketplace.extensions import db

# Composite primary keys keep each link unique; cascades drop links with either side.
users_roles = db.Table(
    "users_roles",
    db.Column(
        "user_id",
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "role_id",
        db.String(36),
        db.ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

roles_permissions = db.Table(
    "roles_permissions",
    db.Column(
        "role_id",
        db.String(36),
        db.ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "permission_id",
        db.String(36),
        db.ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)
