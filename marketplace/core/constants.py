# marketplace/core/constants.py
from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"


class FeatureFlagScope(str, Enum):
    GLOBAL = "global"
    USER = "user"
    ROLE = "role"
    PERCENTAGE = "percentage"


class FeatureFlagKey(str, Enum):
    """Flag keys referenced from application code. The API accepts any key."""

    NEW_CHECKOUT = "new-checkout"
    ADVANCED_ANALYTICS = "advanced-analytics"
    BETA_FEATURES = "beta-features"
    GRADUAL_ROLLOUT_FEATURE = "gradual-rollout-feature"


class Permission(Enum):
    # User Management
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    USERS_DELETE = "users:delete"

    # Catalogue
    PRODUCTS_READ = "products:read"
    PRODUCTS_WRITE = "products:write"
    PRODUCTS_DELETE = "products:delete"

    # Orders
    ORDERS_READ = "orders:read"
    ORDERS_WRITE = "orders:write"
    ORDERS_DELETE = "orders:delete"

    # Role Management
    ROLES_READ = "roles:read"
    ROLES_WRITE = "roles:write"
    ROLES_DELETE = "roles:delete"

    # Permission Management
    PERMISSIONS_READ = "permissions:read"
    PERMISSIONS_WRITE = "permissions:write"
    PERMISSIONS_DELETE = "permissions:delete"

    # Feature Flags
    FEATURE_FLAGS_READ = "features-flags:read"
    FEATURE_FLAGS_WRITE = "features-flags:write"
    FEATURE_FLAGS_DELETE = "features-flags:delete"

    # Vendors
    VENDORS_READ = "vendors:read"
    VENDORS_WRITE = "vendors:write"
    VENDORS_DELETE = "vendors:delete"

    # Transactions
    TRANSACTIONS_READ = "transactions:read"
    TRANSACTIONS_WRITE = "transactions:write"
    TRANSACTIONS_DELETE = "transactions:delete"

    # Files
    FILES_READ = "files:read"
    FILES_WRITE = "files:write"
    FILES_DELETE = "files:delete"

    @property
    def resource(self):
        return self.value.split(":", 1)[0]

    @property
    def action(self):
        return self.value.split(":", 1)[1]


def split_permission_name(name):
    """Split 'resource:action' into its pair, raising ValueError on bad input"""
    resource, sep, action = str(name).partition(":")
    if not sep or not resource or not action:
        raise ValueError(f"Permission must look like 'resource:action', got {name!r}")
    return resource, action


ACTION_LABELS = {"read": ("View", "View {} information"),
                 "write": ("Manage", "Create and update {}"),
                 "delete": ("Delete", "Delete {}")}

SYSTEM_ROLES = ("admin", "seller", "customer")
DEFAULT_SIGNUP_ROLE = "customer"

DEFAULT_ROLES = [
    {"name": "customer", "display_name": "Customer",
     "description": "Regular customer with basic access"},
    {"name": "seller", "display_name": "Seller",
     "description": "Can manage products and view orders"},
    {"name": "admin", "display_name": "Administrator",
     "description": "Full system access and management"},
]

# Which permissions each system role receives when seeded
DEFAULT_ROLE_GRANTS = {
    "admin": [p.value for p in Permission],
    "seller": [
        p.value
        for p in Permission
        if p.resource in ("products", "orders")
        or (p.resource in ("transactions", "files") and p.action in ("read", "write"))
    ],
    "customer": [Permission.ORDERS_READ.value, Permission.TRANSACTIONS_READ.value],
}

DEFAULT_FEATURE_FLAGS = [
    {
        "key": FeatureFlagKey.NEW_CHECKOUT.value,
        "display_name": "New Checkout Experience",
        "description": "Enable the new checkout flow with improved UX",
        "is_enabled": False,
        "scope": FeatureFlagScope.GLOBAL.value,
    },
    {
        "key": FeatureFlagKey.ADVANCED_ANALYTICS.value,
        "display_name": "Advanced Analytics Dashboard",
        "description": "Enable advanced analytics features for admin users",
        "is_enabled": False,
        "scope": FeatureFlagScope.ROLE.value,
        "rules": {"roleNames": ["admin"]},
    },
    {
        "key": FeatureFlagKey.BETA_FEATURES.value,
        "display_name": "Beta Features Access",
        "description": "Enable access to beta features for selected users",
        "is_enabled": False,
        "scope": FeatureFlagScope.USER.value,
        "rules": {"userIds": []},
    },
    {
        "key": FeatureFlagKey.GRADUAL_ROLLOUT_FEATURE.value,
        "display_name": "Gradual Rollout Feature",
        "description": "Feature enabled for a percentage of users for gradual rollout",
        "is_enabled": False,
        "scope": FeatureFlagScope.PERCENTAGE.value,
        "rollout_percentage": 50,
    },
]
