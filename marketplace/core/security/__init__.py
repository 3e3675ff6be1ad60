# marketplace/core/security/__init__.py
from typing import Optional

from flask import g, current_app
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.security import generate_password_hash, check_password_hash


class SecurityMixin:
    @property
    def password(self):
        raise AttributeError("password is not a readable attribute")

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def generate_token(self):
        claims = {"email": self.email, "roles": self.get_role_names()}
        return create_access_token(identity=str(self.id), additional_claims=claims)


def get_current_user_id() -> Optional[str]:
    """Return the user id from a valid bearer token, or None for anonymous callers.

    A malformed or expired token is treated the same as no token; routes that
    must be authenticated use ``require_permission`` / ``jwt_required`` instead.
    """
    try:
        verify_jwt_in_request(optional=True)
        user_id = get_jwt_identity()
        if user_id:
            return str(user_id)
    except (JWTExtendedException, PyJWTError) as e:
        current_app.logger.debug(f"Ignoring invalid token: {str(e)}")

    # Fallback to context (set by tests or non-JWT callers)
    return getattr(g, "user_id", None)


def get_current_user():
    """Load the User behind the current request, if any"""
    from marketplace.models import User

    user_id = get_current_user_id()
    if not user_id:
        return None
    return User.get_by_id(user_id)


__all__ = ["SecurityMixin", "get_current_user_id", "get_current_user"]
