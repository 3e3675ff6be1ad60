# marketplace/core/permissions.py
import logging
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from marketplace.models import User
from .constants import Permission
from .exceptions import AuthenticationFailed, PermissionDenied

logger = logging.getLogger(__name__)


def has_permission(user, resource, action=None):
    """True iff the pair is in the union of the permissions of the user's roles"""
    if user is None:
        return False
    return user.has_permission(resource, action)


def _permission_name(permission):
    return permission.value if isinstance(permission, Permission) else str(permission)


def load_authenticated_user():
    """Resolve the JWT to an active user, raising 401/403 otherwise"""
    verify_jwt_in_request()
    user = User.get_by_id(get_jwt_identity())
    if user is None:
        raise AuthenticationFailed("User not found")
    if user.is_suspended:
        raise PermissionDenied("Account is suspended")

    g.user_id = user.id
    g.current_user = user
    return user


def require_permission(*permissions):
    """Allow the request when the user holds at least one of ``permissions``"""
    names = [_permission_name(p) for p in permissions]

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = load_authenticated_user()
            if not user.has_any_permission(names):
                logger.warning(f"User {user.id} denied, requires one of: {', '.join(names)}")
                raise PermissionDenied(
                    f"Insufficient permissions. Required: {', '.join(names)}"
                )
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def require_role(*role_names):
    """Allow the request when the user has at least one of ``role_names``"""

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = load_authenticated_user()
            if not user.has_any_role(role_names):
                logger.warning(f"User {user.id} denied, requires role: {', '.join(role_names)}")
                raise PermissionDenied(
                    f"Insufficient role. Required: {', '.join(role_names)}"
                )
            return f(*args, **kwargs)

        return decorated_function

    return decorator
