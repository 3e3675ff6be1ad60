# marketplace/core/feature_flags.py
"""Feature flag evaluation, caching and the ``require_feature`` route guard.

Flag definitions are cached by key under ``feature_flag:<key>`` and the full
list under ``feature_flag:__all__``. Every write path calls
``invalidate_feature_flag_cache`` which deletes all of those entries, so
readers never see a definition older than the last committed write made
through this process's cache backend.
"""
import logging
from collections import namedtuple
from functools import wraps
from typing import Dict, Iterable, List, Optional

from flask import current_app

from marketplace.extensions import cache, db
from marketplace.models import FeatureFlag
from .constants import DEFAULT_FEATURE_FLAGS, FeatureFlagScope
from .exceptions import FeatureDisabled
from .security import get_current_user

logger = logging.getLogger(__name__)

CACHE_PREFIX = "feature_flag:"
ALL_FLAGS_CACHE_KEY = f"{CACHE_PREFIX}__all__"
MAX_BATCH_KEYS = 20

FlagContext = namedtuple("FlagContext", ["user_id", "role_names"])
ANONYMOUS = FlagContext(None, ())


def context_for_user(user) -> FlagContext:
    if user is None:
        return ANONYMOUS
    return FlagContext(str(user.id), tuple(user.get_role_names()))


def rollout_bucket(user_id, key: str) -> int:
    """Stable bucket in [0, 100) for a user and flag.

    31-multiplier string hash over UTF-16 code units, wrapped to a signed
    32-bit integer after every step and then made non-negative. Bucket
    assignments must not change between releases.
    """
    text = f"{user_id}:{key}"
    units = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(units), 2):
        value = (value << 5) - value + int.from_bytes(units[i:i + 2], "little")
        value &= 0xFFFFFFFF
        if value >= 0x80000000:
            value -= 0x100000000
    return abs(value) % 100


def _rule_list(rules: dict, name: str, flag: dict) -> list:
    """Scalar entries of a list rule; anything that is not a list counts as empty"""
    value = rules.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Feature flag '{flag.get('key')}' has malformed rules.{name}, treating as empty")
        return []
    return [item for item in value if isinstance(item, (str, int)) and not isinstance(item, bool)]


def evaluate_flag(flag: Optional[dict], context: FlagContext = ANONYMOUS) -> bool:
    """Evaluate a cached flag definition (see ``FeatureFlag.snapshot``)"""
    if not flag:
        return False
    if not flag.get("is_enabled"):
        return False

    scope = flag.get("scope")
    if scope == FeatureFlagScope.GLOBAL.value:
        return True

    if context.user_id is None:
        logger.warning(f"Feature flag '{flag.get('key')}' requires user context but none provided")
        return False

    rules = flag.get("rules")
    if not isinstance(rules, dict):
        rules = {}

    if scope == FeatureFlagScope.ROLE.value:
        allowed = _rule_list(rules, "roleNames", flag)
        return any(name in allowed for name in context.role_names)

    if scope == FeatureFlagScope.USER.value:
        allowed = _rule_list(rules, "userIds", flag)
        return str(context.user_id) in {str(user_id) for user_id in allowed}

    if scope == FeatureFlagScope.PERCENTAGE.value:
        rollout = flag.get("rollout_percentage")
        if isinstance(rollout, bool) or not isinstance(rollout, (int, float)) or rollout <= 0:
            return False
        if rollout >= 100:
            return True
        return rollout_bucket(context.user_id, flag["key"]) < rollout

    return False


def _cache_timeout():
    return current_app.config.get("FEATURE_FLAG_CACHE_TIMEOUT", 300)


def get_flag_data(key: str) -> Optional[dict]:
    """Flag definition by key, read through the cache. Misses are not cached."""
    cache_key = f"{CACHE_PREFIX}{key}"
    data = cache.get(cache_key)
    if data is not None:
        return data

    flag = FeatureFlag.find_by_key(key)
    if flag is None:
        return None

    data = flag.snapshot()
    cache.set(cache_key, data, timeout=_cache_timeout())
    return data


def get_all_flag_data() -> List[dict]:
    data = cache.get(ALL_FLAGS_CACHE_KEY)
    if data is not None:
        return data

    flags = FeatureFlag.query.order_by(FeatureFlag.created_at.desc()).all()
    data = [flag.snapshot() for flag in flags]
    cache.set(ALL_FLAGS_CACHE_KEY, data, timeout=_cache_timeout())
    return data


def invalidate_feature_flag_cache(*extra_keys: str) -> None:
    """Delete every cached flag entry.

    ``extra_keys`` covers keys that are no longer in the table, such as the
    old key of a renamed flag or a deleted flag.
    """
    keys = set(db.session.execute(db.select(FeatureFlag.key)).scalars())
    keys.update(k for k in extra_keys if k)
    cache.delete_many(ALL_FLAGS_CACHE_KEY, *(f"{CACHE_PREFIX}{k}" for k in keys))
    logger.debug(f"Invalidated feature flag cache ({len(keys)} keys)")


def is_feature_enabled(key: str, user_id=None, role_names: Iterable[str] = ()) -> bool:
    flag = get_flag_data(key)
    if flag is None:
        logger.warning(f"Feature flag '{key}' not found, defaulting to disabled")
        return False
    context = FlagContext(str(user_id) if user_id is not None else None, tuple(role_names))
    return evaluate_flag(flag, context)


def is_feature_enabled_for(key: str, user=None) -> bool:
    context = context_for_user(user)
    return is_feature_enabled(key, context.user_id, context.role_names)


def batch_check(keys: Iterable[str], user=None) -> Dict[str, bool]:
    keys = list(keys)
    if not 1 <= len(keys) <= MAX_BATCH_KEYS:
        raise ValueError(f"Between 1 and {MAX_BATCH_KEYS} keys can be checked at once")
    return {key: is_feature_enabled_for(key, user) for key in keys}


def enabled_features(user=None) -> List[str]:
    context = context_for_user(user)
    return [flag["key"] for flag in get_all_flag_data() if evaluate_flag(flag, context)]


def seed_default_flags() -> List[FeatureFlag]:
    """Create any missing default flag; existing flags are left untouched"""
    created = []
    for flag_data in DEFAULT_FEATURE_FLAGS:
        if FeatureFlag.find_by_key(flag_data["key"]):
            continue
        flag = FeatureFlag(**flag_data)
        db.session.add(flag)
        created.append(flag)
        logger.info(f"Seeded default feature flag: {flag_data['key']}")

    db.session.commit()
    invalidate_feature_flag_cache()
    return created


def require_feature(key: str):
    """Reject the request with 403 unless ``key`` is enabled for the caller"""

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if not is_feature_enabled_for(key, user):
                raise FeatureDisabled(f"Feature '{key}' is not enabled")
            return f(*args, **kwargs)

        return decorated_function

    return decorator
