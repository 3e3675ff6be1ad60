# marketplace/core/monitoring.py
from functools import wraps

import sentry_sdk
from flask import g, has_request_context, request
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration


def should_capture_error(exception):
    """Client errors (4xx) are expected; everything else is reported"""
    status_code = getattr(exception, "status_code", None) or getattr(exception, "code", None)
    if isinstance(status_code, int) and status_code < 500:
        return False
    return True


def before_send(event, hint):
    """Filter expected errors and trim the event before it leaves the process"""
    exc_info = hint.get("exc_info")
    if exc_info and not should_capture_error(exc_info[1]):
        return None

    if has_request_context():
        user_id = g.get("user_id")
        if user_id:
            event["user"] = {"id": user_id}

        event.setdefault("request", {})
        event["request"]["url"] = request.url
        event["request"]["method"] = request.method

    return event


def init_sentry(app):
    """Initialize Sentry when a DSN is configured"""
    if not app.config.get("SENTRY_DSN"):
        app.logger.info("SENTRY_DSN not configured, skipping Sentry initialization")
        return False

    sentry_sdk.init(
        dsn=app.config["SENTRY_DSN"],
        integrations=[
            FlaskIntegration(transaction_style="url"),
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
        before_send=before_send,
        traces_sample_rate=0.01,
        profiles_sample_rate=0.0,
        environment=app.config.get("ENV_NAME", "production"),
        release=app.config.get("VERSION"),
        max_breadcrumbs=20,
        send_default_pii=False,
    )
    return True


def capture_error(func):
    """Report unexpected errors raised by ``func`` to Sentry, then re-raise"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if should_capture_error(e):
                if has_request_context() and g.get("user_id"):
                    sentry_sdk.set_user({"id": g.user_id})
                sentry_sdk.capture_exception(e)
            raise

    return wrapper
