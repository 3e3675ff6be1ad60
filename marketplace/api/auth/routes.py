# marketplace/api/auth/routes.py
import logging

from flask import Blueprint, current_app, jsonify, request

from marketplace.extensions import db, limiter
from marketplace.models import Role, User
from marketplace.core.constants import DEFAULT_SIGNUP_ROLE
from marketplace.core.errors import APIError
from marketplace.core.exceptions import AuthenticationFailed, PermissionDenied, ResourceConflict
from marketplace.core.feature_flags import batch_check, enabled_features, is_feature_enabled_for
from marketplace.core.monitoring import capture_error
from marketplace.core.permissions import load_authenticated_user
from marketplace.core.security import get_current_user
from .google import verify_google_token
from .password_reset import deliver_password_reset
from .schemas import (
    BatchCheckSchema,
    ChangePasswordSchema,
    ForgotPasswordSchema,
    GoogleAuthSchema,
    LoginSchema,
    ProfileUpdateSchema,
    ResetPasswordSchema,
    SignupSchema,
)

logger = logging.getLogger(__name__)
auth_bp = Blueprint("auth", __name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent"


def auth_rate_limit():
    return current_app.config.get("AUTH_RATE_LIMIT", "10 per minute")


def _token_response(user, status_code=200):
    user.update_last_login()
    return jsonify({"token": user.generate_token(), "user": user.to_dict()}), status_code


def _assign_signup_role(user):
    role = Role.get_role_by_name(DEFAULT_SIGNUP_ROLE)
    if role:
        user.add_role(role)
    else:
        logger.warning(f"Default role '{DEFAULT_SIGNUP_ROLE}' missing, user created without roles")


@auth_bp.route("/signup", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def signup():
    data = SignupSchema().load(request.get_json() or {})

    if User.find_by_email(data["email"]):
        raise ResourceConflict("Email already registered")

    user = User(email=data["email"], name=data["name"], provider="local")
    user.password = data["password"]
    _assign_signup_role(user)
    db.session.add(user)
    db.session.commit()

    logger.info(f"New user signed up: {user.id}")
    return _token_response(user, 201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def login():
    data = LoginSchema().load(request.get_json() or {})

    user = User.find_by_email(data["email"])
    if not user or not user.verify_password(data["password"]):
        logger.warning("Failed login attempt")
        raise AuthenticationFailed("Invalid email or password")

    if user.is_suspended:
        logger.warning(f"Suspended user {user.id} attempted to log in")
        raise PermissionDenied("Account is suspended")

    return _token_response(user)


@auth_bp.route("/google", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def google_auth():
    data = GoogleAuthSchema().load(request.get_json() or {})
    google_user = verify_google_token(data["token"])

    user = User.query.filter_by(google_id=google_user["sub"]).first()
    if not user:
        user = User.find_by_email(google_user["email"])
        if user:
            # Existing local account signing in with Google for the first time
            user.google_id = google_user["sub"]
            user.picture = user.picture or google_user["picture"]
        else:
            logger.info("Creating new user from Google sign-in")
            user = User(
                email=google_user["email"],
                name=google_user["name"] or google_user["email"],
                google_id=google_user["sub"],
                picture=google_user["picture"],
                provider="google",
            )
            _assign_signup_role(user)
            db.session.add(user)
        db.session.commit()

    if user.is_suspended:
        raise PermissionDenied("Account is suspended")

    return _token_response(user)


@auth_bp.route("/me", methods=["GET"])
def me():
    user = load_authenticated_user()
    return jsonify(user.to_dict(include_permissions=True))


@auth_bp.route("/profile", methods=["PATCH"])
@capture_error
def update_profile():
    user = load_authenticated_user()
    data = ProfileUpdateSchema().load(request.get_json() or {})

    email = data.get("email")
    if email and email != user.email and User.find_by_email(email):
        raise ResourceConflict("Email is already in use by another account")

    for field, value in data.items():
        setattr(user, field, value)
    db.session.commit()

    logger.info(f"User {user.id} updated their profile")
    return jsonify(user.to_dict(include_permissions=True))


@auth_bp.route("/change-password", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def change_password():
    user = load_authenticated_user()
    data = ChangePasswordSchema().load(request.get_json() or {})

    if not user.password_hash:
        raise APIError("Cannot change password for OAuth users", 400)
    if not user.verify_password(data["current_password"]):
        logger.warning(f"User {user.id} failed the current password check")
        raise APIError("Current password is incorrect", 400)

    user.password = data["new_password"]
    db.session.commit()

    logger.info(f"User {user.id} changed their password")
    return jsonify({"message": "Password changed successfully"})


@auth_bp.route("/forgot-password", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def forgot_password():
    data = ForgotPasswordSchema().load(request.get_json() or {})

    user = User.find_by_email(data["email"])
    if not user:
        return jsonify({"message": RESET_REQUESTED_MESSAGE})

    if user.provider != "local":
        raise APIError("Password reset is only available for local accounts", 400)

    token = user.generate_reset_token(current_app.config["PASSWORD_RESET_TOKEN_EXPIRES"])
    db.session.commit()
    deliver_password_reset(user, token)

    return jsonify({"message": RESET_REQUESTED_MESSAGE})


@auth_bp.route("/reset-password", methods=["POST"])
@limiter.limit(auth_rate_limit)
@capture_error
def reset_password():
    data = ResetPasswordSchema().load(request.get_json() or {})

    user = User.find_by_reset_token(data["token"])
    if not user:
        raise APIError("Invalid or expired password reset token", 400)
    if user.reset_token_expired:
        raise APIError("Password reset token has expired", 400)

    user.reset_password(data["new_password"])
    db.session.commit()

    logger.info(f"User {user.id} reset their password")
    return jsonify({"message": "Password has been reset successfully"})


@auth_bp.route("/me/features-flags/<key>/check", methods=["GET"])
def check_feature(key):
    user = get_current_user()
    return jsonify({"key": key, "enabled": is_feature_enabled_for(key, user)})


@auth_bp.route("/me/features-flags/check-batch", methods=["POST"])
def check_features_batch():
    data = BatchCheckSchema().load(request.get_json() or {})
    user = get_current_user()
    return jsonify({"features": batch_check(data["keys"], user)})


@auth_bp.route("/me/features-flags/enabled", methods=["GET"])
def list_enabled_features():
    user = get_current_user()
    return jsonify({"features": enabled_features(user)})
