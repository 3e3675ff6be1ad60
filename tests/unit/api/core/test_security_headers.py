# tests/unit/api/core/test_security_headers.py

import pytest
from flask import Flask
from marketplace.core.security.security_headers import SecurityHeaders, init_security_headers


@pytest.fixture
def headers_app():
    """Bare Flask app with only the security headers installed"""
    app = Flask(__name__)
    init_security_headers(app)

    @app.route("/", methods=["GET", "POST", "PUT", "DELETE"])
    def index():
        return {"ok": True}

    return app


@pytest.fixture
def headers_client(headers_app):
    return headers_app.test_client()


def test_basic_security_headers(headers_client):
    """Test that basic security headers are set"""
    response = headers_client.get("/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-XSS-Protection"] == "1; mode=block"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert response.headers["Cache-Control"] == "no-store"


def test_content_security_policy(headers_client):
    """API responses allow no active content at all"""
    csp = headers_client.get("/").headers["Content-Security-Policy"]

    assert csp == SecurityHeaders.CSP
    assert "default-src 'none'" in csp
    assert "frame-ancestors 'none'" in csp


def test_hsts_in_production(headers_app, headers_client):
    headers_app.debug = False
    headers_app.testing = False

    hsts = headers_client.get("/").headers["Strict-Transport-Security"]

    assert "max-age=31536000" in hsts
    assert "includeSubDomains" in hsts


def test_hsts_not_in_development(headers_app, headers_client):
    headers_app.debug = True

    response = headers_client.get("/")
    assert "Strict-Transport-Security" not in response.headers


def test_hsts_not_in_testing(headers_app, headers_client):
    headers_app.testing = True
    assert "Strict-Transport-Security" not in headers_client.get("/").headers


def test_permissions_policy(headers_client):
    permissions = headers_client.get("/").headers["Permissions-Policy"]

    assert "geolocation=()" in permissions
    assert "microphone=()" in permissions
    assert "camera=()" in permissions


def test_all_responses_have_headers(headers_client):
    """Test that all response types have security headers"""
    for method in ["get", "post", "put", "delete"]:
        response = getattr(headers_client, method)("/")

        assert "X-Frame-Options" in response.headers
        assert "Content-Security-Policy" in response.headers
        assert "X-Content-Type-Options" in response.headers


def test_error_responses_have_headers(headers_app, headers_client):
    """Test that error responses also have security headers"""

    @headers_app.route("/error")
    def trigger_error():
        return {"error": "test"}, 400

    response = headers_client.get("/error")
    assert response.status_code == 400
    assert "X-Frame-Options" in response.headers

    missing = headers_client.get("/does-not-exist")
    assert missing.status_code == 404
    assert "Content-Security-Policy" in missing.headers


def test_application_responses_have_headers(client):
    """The full app installs the same headers"""
    response = client.get("/api/health")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in response.headers


def test_api_allows_cross_origin_calls(client):
    response = client.get("/api/health", headers={"Origin": "https://shop.example.com"})

    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "X-RateLimit-Remaining" in response.headers["Access-Control-Expose-Headers"]


def test_api_preflight_allows_bearer_tokens(client):
    response = client.options(
        "/api/admin/vendors",
        headers={
            "Origin": "https://shop.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "authorization" in response.headers["Access-Control-Allow-Headers"].lower()


def test_cors_is_limited_to_api_routes(client):
    response = client.get("/", headers={"Origin": "https://shop.example.com"})

    assert response.status_code == 200
    assert "Access-Control-Allow-Origin" not in response.headers
