# marketplace/__init__.py
import logging

from flask import Flask, jsonify, request

from .config import config_by_name, setup_logging
from .extensions import init_extensions, jwt
from .core.errors import register_error_handlers, register_jwt_handlers
from .core.middleware import configure_middleware
from .core.monitoring import init_sentry
from .core.security.sanitization import sanitize_request
from .core.security.security_headers import init_security_headers
from .api.auth import auth_bp
from .api.feature_flags import feature_flags_bp
from .api.health import health_bp
from .api.permissions import permissions_bp
from .api.roles import roles_bp
from .api.users import users_bp
from .api.vendors import vendors_bp

logger = logging.getLogger(__name__)


def create_app(config_name="development"):
    app = Flask(__name__)

    app.config.from_object(config_by_name[config_name])
    app.config["ENV_NAME"] = config_name
    setup_logging(config_name)

    init_extensions(app)
    register_error_handlers(app)
    register_jwt_handlers(jwt)
    init_security_headers(app)
    configure_middleware(app)
    init_sentry(app)

    @app.route("/")
    def root():
        return jsonify(
            {
                "service": "Marketplace API",
                "version": app.config.get("VERSION", "1.0.0"),
                "status": "running",
            }
        )

    @app.before_request
    @sanitize_request(exempt_paths=[r"/api/health"])
    def sanitize_api_requests():
        if request.path.startswith("/api/"):
            return None

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/admin/users")
    app.register_blueprint(roles_bp, url_prefix="/api/admin/roles")
    app.register_blueprint(permissions_bp, url_prefix="/api/admin/permissions")
    app.register_blueprint(feature_flags_bp, url_prefix="/api/admin/features-flags")
    app.register_blueprint(vendors_bp, url_prefix="/api/admin/vendors")
    app.register_blueprint(health_bp, url_prefix="/api")

    register_cli(app)

    logger.debug(f"Registered {len(list(app.url_map.iter_rules()))} routes")
    return app


def register_cli(app):
    """``flask seed`` creates default permissions, roles and feature flags"""

    @app.cli.command("seed")
    def seed():
        from .models import Role
        from .core.feature_flags import seed_default_flags

        roles = Role.create_default_roles()
        flags = seed_default_flags()
        logger.info(f"Seeded {len(roles)} roles and {len(flags)} new feature flags")
