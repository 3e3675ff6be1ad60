# marketplace/models/user.py
import hashlib
import secrets
from datetime import datetime, timedelta

from marketplace.extensions import db
from marketplace.core.database import BaseModel
from marketplace.core.security import SecurityMixin
from marketplace.core.constants import UserStatus
from .associations import users_roles
from .role import as_pair


class User(BaseModel, SecurityMixin):
    __tablename__ = "users"

    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=UserStatus.ACTIVE.value)
    provider = db.Column(db.String(20), nullable=False, default="local")
    google_id = db.Column(db.String(255), unique=True)
    picture = db.Column(db.String(500))
    last_login = db.Column(db.DateTime)
    # sha256 of the emailed token; the raw token is never stored
    reset_password_token = db.Column(db.String(64), index=True)
    reset_password_expires = db.Column(db.DateTime)

    roles = db.relationship(
        "Role",
        secondary=users_roles,
        lazy="selectin",
        backref=db.backref("users", lazy="select"),
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def is_suspended(self):
        return self.status == UserStatus.SUSPENDED.value

    # Roles

    def get_role_names(self):
        return sorted(role.name for role in self.roles)

    def has_role(self, role_name):
        return any(role.name == role_name for role in self.roles)

    def has_any_role(self, role_names):
        wanted = set(role_names)
        return any(role.name in wanted for role in self.roles)

    def assign_roles(self, roles):
        """Replace the user's roles"""
        self.roles = list(roles)

    def add_role(self, role):
        if role not in self.roles:
            self.roles.append(role)

    def remove_roles(self, role_ids):
        ids = set(role_ids)
        self.roles = [role for role in self.roles if role.id not in ids]

    # Permissions

    def permission_pairs(self):
        """Union of the (resource, action) pairs granted by every role"""
        pairs = set()
        for role in self.roles:
            pairs |= role.permission_pairs()
        return pairs

    def has_permission(self, resource, action=None):
        """Check a permission given as ('vendors', 'read') or 'vendors:read'"""
        pair = (resource, action) if action is not None else as_pair(resource)
        return pair in self.permission_pairs()

    def has_any_permission(self, permissions):
        pairs = self.permission_pairs()
        return any(as_pair(p) in pairs for p in permissions)

    def get_permission_names(self):
        return sorted(f"{resource}:{action}" for resource, action in self.permission_pairs())

    # Status

    def suspend(self):
        self.status = UserStatus.SUSPENDED.value

    def reactivate(self):
        self.status = UserStatus.ACTIVE.value

    # Password reset

    @staticmethod
    def hash_reset_token(token):
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def generate_reset_token(self, expires_in=timedelta(hours=1)):
        """Start a password reset and return the raw token to send to the user"""
        token = secrets.token_hex(32)
        self.reset_password_token = User.hash_reset_token(token)
        self.reset_password_expires = datetime.utcnow() + expires_in
        return token

    @property
    def reset_token_expired(self):
        return self.reset_password_expires is None or self.reset_password_expires < datetime.utcnow()

    def reset_password(self, new_password):
        self.password = new_password
        self.reset_password_token = None
        self.reset_password_expires = None

    def update_last_login(self):
        """Update the last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()

    def to_dict(self, include_permissions=False):
        """Serialize user with role information"""
        data = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "status": self.status,
            "provider": self.provider,
            "picture": self.picture,
            "roles": self.get_role_names(),
            "last_login": self.isoformat(self.last_login),
            "created_at": self.isoformat(self.created_at),
            "updated_at": self.isoformat(self.updated_at),
        }
        if include_permissions:
            data["permissions"] = self.get_permission_names()
        return data

    @staticmethod
    def find_by_email(email):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def find_by_reset_token(token):
        return User.query.filter_by(reset_password_token=User.hash_reset_token(token)).first()
