# marketplace/models/role.py
from marketplace.extensions import db
from marketplace.core.database import BaseModel
from marketplace.core.constants import (
    DEFAULT_ROLE_GRANTS,
    DEFAULT_ROLES,
    Permission as PermissionName,
    split_permission_name,
)
from .associations import roles_permissions
from .permission import Permission


def as_pair(permission):
    """Normalise a Permission enum, 'resource:action' string or tuple to a pair"""
    if isinstance(permission, PermissionName):
        return permission.resource, permission.action
    if isinstance(permission, Permission):
        return permission.pair
    if isinstance(permission, (tuple, list)):
        resource, action = permission
        return str(resource), str(action)
    return split_permission_name(permission)


class Role(BaseModel):
    __tablename__ = "roles"

    name = db.Column(db.String(50), unique=True, nullable=False)
    display_name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    permissions = db.relationship(
        "Permission",
        secondary=roles_permissions,
        lazy="selectin",
        backref=db.backref("roles", lazy="select"),
    )

    def __repr__(self):
        return f"<Role {self.name}>"

    def permission_pairs(self):
        return {p.pair for p in self.permissions}

    def has_permission(self, permission):
        """Check if role has specific permission"""
        return as_pair(permission) in self.permission_pairs()

    def has_any_permission(self, permissions):
        pairs = self.permission_pairs()
        return any(as_pair(p) in pairs for p in permissions)

    def get_permission_names(self):
        """Get list of all permissions"""
        return sorted(p.name for p in self.permissions)

    def set_permissions(self, permissions):
        self.permissions = list(permissions)

    def remove_permissions(self, permission_ids):
        ids = set(permission_ids)
        self.permissions = [p for p in self.permissions if p.id not in ids]

    def to_dict(self, include_permissions=True):
        """Convert role to dictionary representation"""
        data = {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "created_at": self.isoformat(self.created_at),
            "updated_at": self.isoformat(self.updated_at),
        }
        if include_permissions:
            data["permissions"] = [p.to_dict() for p in self.permissions]
        return data

    @staticmethod
    def get_role_by_name(role_name):
        return Role.query.filter_by(name=role_name).first()

    @staticmethod
    def create_default_roles():
        """Create the system roles and grant their default permissions.

        Safe to call repeatedly: existing roles are kept and only missing
        grants are added.
        """
        Permission.seed_defaults()

        roles = []
        for role_data in DEFAULT_ROLES:
            role = Role.get_role_by_name(role_data["name"])
            if not role:
                role = Role(**role_data)
                db.session.add(role)

            owned = role.permission_pairs()
            for name in DEFAULT_ROLE_GRANTS.get(role.name, []):
                pair = split_permission_name(name)
                if pair in owned:
                    continue
                permission = Permission.find_by_pair(*pair)
                if permission:
                    role.permissions.append(permission)
            roles.append(role)

        db.session.commit()
        return roles
