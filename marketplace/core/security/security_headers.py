# marketplace/core/security/security_headers.py
from flask import current_app


class SecurityHeaders:
    """Adds security headers to every response"""

    # JSON API: nothing should be loaded or framed from responses
    CSP = "default-src 'none'; frame-ancestors 'none'; form-action 'none'; base-uri 'none'"

    @staticmethod
    def init_app(app):
        @app.after_request
        def add_security_headers(response):
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-XSS-Protection"] = "1; mode=block"

            if not current_app.debug and not current_app.testing:
                response.headers["Strict-Transport-Security"] = (
                    "max-age=31536000; includeSubDomains"
                )

            response.headers["Content-Security-Policy"] = SecurityHeaders.CSP
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
            response.headers["Cache-Control"] = "no-store"

            return response


def init_security_headers(app):
    SecurityHeaders.init_app(app)
