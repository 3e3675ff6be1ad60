# tests/unit/api/health/test_routes.py
from unittest.mock import patch


def test_basic_health_check(client):
    """Test basic health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json

    assert data["status"] == "healthy"
    assert "response_time" in data
    assert data["version"] == "1.0.0"
    assert data["services"]["database"]["status"] == "healthy"
    assert data["services"]["cache"]["status"] == "healthy"
    # Redis is only checked when configured
    assert "redis" not in data["services"]


def test_health_check_with_db_failure(client):
    """Test health check when database is down"""
    with patch("marketplace.api.health.routes.check_database", return_value=(False, "DB Error")):
        response = client.get("/api/health")
        assert response.status_code == 503
        data = response.json
        assert data["status"] == "unhealthy"
        assert data["services"]["database"]["status"] == "unhealthy"
        assert data["services"]["database"]["message"] == "DB Error"


def test_health_check_with_cache_failure(client):
    with patch("marketplace.api.health.routes.check_cache", return_value=(False, "Cache Error")):
        response = client.get("/api/health")
        assert response.status_code == 503
        assert response.json["services"]["cache"]["message"] == "Cache Error"


def test_health_check_with_redis_failure(app, client, monkeypatch):
    """Test health check when Redis is configured but down"""
    monkeypatch.setitem(app.config, "REDIS_URL", "redis://localhost:6399/0")
    with patch("marketplace.api.health.routes.check_redis", return_value=(False, "Redis Error")):
        response = client.get("/api/health")
        assert response.status_code == 503
        data = response.json
        assert data["status"] == "unhealthy"
        assert data["services"]["redis"]["status"] == "unhealthy"
        assert data["services"]["redis"]["message"] == "Redis Error"


def test_health_check_with_redis_healthy(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "REDIS_URL", "redis://localhost:6399/0")
    with patch("marketplace.api.health.routes.Redis") as mock_redis:
        response = client.get("/api/health")

    mock_redis.from_url.assert_called_once_with("redis://localhost:6399/0")
    assert response.status_code == 200
    assert response.json["services"]["redis"]["status"] == "healthy"


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json["status"] == "running"
