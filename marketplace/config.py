import os
from datetime import timedelta
import logging
from logging.handlers import RotatingFileHandler
import sys

from flask import g, has_request_context


# Enhanced logging setup
def setup_logging(app_env):
    """Configure logging based on environment"""
    log_level = logging.DEBUG if app_env == "development" else logging.INFO

    # Stamp every record with the acting user, filled in by the request hooks
    class UserContextFormatter(logging.Formatter):
        def format(self, record):
            if not hasattr(record, "user_id"):
                user_id = g.get("user_id") if has_request_context() else None
                record.user_id = user_id or "anonymous"
            return super().format(record)

    log_format = UserContextFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(user_id)s] - %(message)s"
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    root_logger.addHandler(console_handler)

    # File handler only when a log file is configured
    log_file = os.getenv("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        file_handler.setFormatter(log_format)
        root_logger.addHandler(file_handler)

    return root_logger


def get_db_url(db_name):
    """Get database URL with connection parameters"""
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")

    # Add SSL mode for production
    ssl_mode = "?sslmode=verify-full" if os.getenv("FLASK_ENV") == "production" else ""

    return f"postgresql://{user}:{password}@{host}:{port}/{db_name}{ssl_mode}"


class BaseConfig:
    """Base configuration with shared settings"""

    # Basic configuration
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = True
    VERSION = "1.0.0"

    # CORS settings
    CORS_ORIGINS = "*"

    # JWT settings
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_STORAGE_URI = "memory://"
    AUTH_RATE_LIMIT = "10 per minute"

    # Password reset
    PASSWORD_RESET_TOKEN_EXPIRES = timedelta(hours=1)
    PASSWORD_RESET_URL = os.getenv("PASSWORD_RESET_URL", "http://localhost:3000/reset-password")

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 1000

    # Feature flags
    FEATURE_FLAG_CACHE_TIMEOUT = 300

    # Google sign-in
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")

    # Database settings
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "max_overflow": 20,
    }

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-key")

    # Monitoring
    SENTRY_DSN = os.getenv("SENTRY_DSN")


class DevelopmentConfig(BaseConfig):
    """Development configuration"""

    DEBUG = True
    DEVELOPMENT = True

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", get_db_url("marketplace_dev"))
    SQLALCHEMY_ECHO = False

    # CORS - relaxed for development
    CORS_ORIGINS = ["http://localhost:3000", "http://localhost:3001"]

    # Caching
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = 300

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 5,  # Base number of connections
        "max_overflow": 10,  # Additional connections if needed
        "pool_timeout": 30,  # Seconds to wait for connection
        "pool_recycle": 1800,  # Recycle connections after 30 min
        "pool_pre_ping": True,  # Check connection validity before use
    }


class ProductionConfig(BaseConfig):
    """Production configuration"""

    DEBUG = False
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_ECHO = False

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.getenv("REDIS_URL", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

    # CORS
    CORS_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",")

    # Caching
    CACHE_TYPE = "RedisCache"
    CACHE_REDIS_URL = os.getenv("REDIS_URL")
    CACHE_DEFAULT_TIMEOUT = 300

    # Performance
    PREFERRED_URL_SCHEME = "https"

    # File uploads
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB

    REDIS_URL = os.getenv("REDIS_URL")


class TestingConfig(BaseConfig):
    """Testing configuration"""

    TESTING = True
    DEBUG = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"

    # Rate limiting
    RATELIMIT_ENABLED = False

    # Caching
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = 60


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config():
    """Get configuration based on environment"""
    env = os.getenv("FLASK_ENV", "development")
    return config_by_name[env]
