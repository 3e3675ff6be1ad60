# marketplace/models/__init__.py
from .associations import users_roles, roles_permissions
from .permission import Permission
from .role import Role
from .user import User
from .feature_flag import FeatureFlag
from .vendor import Vendor
from .audit_log import AuditLog

__all__ = [
    "users_roles",
    "roles_permissions",
    "Permission",
    "Role",
    "User",
    "FeatureFlag",
    "Vendor",
    "AuditLog",
]
