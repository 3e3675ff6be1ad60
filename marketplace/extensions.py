"""Extension singletons shared by the models, blueprints and core helpers"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cors = CORS()
cache = Cache()
# Only the auth endpoints carry limits; admin routes are already behind a JWT
limiter = Limiter(key_func=get_remote_address, default_limits=[])

# Browsers may call the JSON API cross-origin; nothing else is exposed
API_RESOURCES = r"/api/*"
CORS_ALLOW_HEADERS = ["Authorization", "Content-Type"]
CORS_EXPOSE_HEADERS = ["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"]


def init_extensions(app):
    """Bind every extension to ``app``"""
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={API_RESOURCES: {"origins": app.config.get("CORS_ORIGINS", "*")}},
        allow_headers=CORS_ALLOW_HEADERS,
        expose_headers=CORS_EXPOSE_HEADERS,
    )
    cache.init_app(app)
    limiter.init_app(app)

    return app
