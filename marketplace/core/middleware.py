# marketplace/core/middleware.py
import logging
import time

from flask import request, g
from werkzeug.middleware.proxy_fix import ProxyFix

from .security import get_current_user_id

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Resolves the acting user and logs one line per request with its timing"""

    @staticmethod
    def before_request() -> None:
        g.start_time = time.time()
        g.pop("user_id", None)
        g.user_id = get_current_user_id()

    @staticmethod
    def after_request(response):
        if hasattr(g, "start_time"):
            elapsed_ms = (time.time() - g.start_time) * 1000
            logger.info(
                f"{request.method} {request.path} -> {response.status_code} "
                f"({elapsed_ms:.1f}ms)",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status_code": response.status_code,
                    "elapsed_ms": elapsed_ms,
                    "remote_addr": request.remote_addr,
                },
            )
        return response


def configure_middleware(app):
    """Configure request hooks for the application"""
    # Trust one proxy hop (load balancer) outside development and tests
    if not app.debug and not app.testing:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    app.before_request(RequestLoggingMiddleware.before_request)
    app.after_request(RequestLoggingMiddleware.after_request)

    logger.info("Middleware configured successfully")
    return app
