# marketplace/api/health/routes.py
import time

from flask import Blueprint, current_app, jsonify
from redis import Redis
from sqlalchemy import text

from marketplace.extensions import cache, db
from marketplace.core.monitoring import capture_error

health_bp = Blueprint("health", __name__)

CACHE_CHECK_KEY = "health:cache-check"


def check_database():
    """Check database connection"""
    try:
        db.session.execute(text("SELECT 1"))
        return True, "Healthy"
    except Exception as e:
        db.session.rollback()
        return False, str(e)


def check_cache():
    """Round-trip a value through the configured cache backend"""
    try:
        cache.set(CACHE_CHECK_KEY, "ok", timeout=10)
        if cache.get(CACHE_CHECK_KEY) != "ok":
            return False, "Cache read did not return the written value"
        return True, "Healthy"
    except Exception as e:
        return False, str(e)


def check_redis():
    """Ping Redis; only checked when REDIS_URL is configured"""
    try:
        Redis.from_url(current_app.config["REDIS_URL"]).ping()
        return True, "Healthy"
    except Exception as e:
        return False, str(e)


@health_bp.route("/health")
@capture_error
def health_check():
    start_time = time.time()

    checks = {"database": check_database(), "cache": check_cache()}
    if current_app.config.get("REDIS_URL"):
        checks["redis"] = check_redis()

    healthy = all(ok for ok, _ in checks.values())
    health_status = {
        "status": "healthy" if healthy else "unhealthy",
        "response_time": f"{time.time() - start_time:.3f}s",
        "services": {
            name: {"status": "healthy" if ok else "unhealthy", "message": message}
            for name, (ok, message) in checks.items()
        },
        "version": current_app.config.get("VERSION", "1.0.0"),
    }

    return jsonify(health_status), 200 if healthy else 503
