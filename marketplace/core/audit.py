# marketplace/core/audit.py
import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import g, request

from marketplace.extensions import db
from marketplace.models.audit_log import AuditLog
from .security import get_current_user_id

logger = logging.getLogger(__name__)

# Never written to the audit trail
REDACTED_FIELDS = frozenset({"password", "current_password", "new_password", "credential", "token"})

# Bookkeeping columns that change on every write
IGNORED_FIELDS = frozenset({"updated_at"})


def track_changes(before: Dict[str, Any], after: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Track changes between two dictionaries"""
    changes = {}

    for key in set(before.keys()) | set(after.keys()):
        if key in IGNORED_FIELDS:
            continue
        if key not in before:
            changes[key] = {"added": after[key]}
        elif key not in after:
            changes[key] = {"removed": before[key]}
        elif before[key] != after[key]:
            changes[key] = {"from": before[key], "to": after[key]}

    return changes if changes else None


def record_changes(before: Dict[str, Any], after: Dict[str, Any]) -> None:
    """Store a before/after diff for ``audit_action`` to write instead of the request body"""
    g.audit_changes = track_changes(before, after) or {}


def _request_changes():
    payload = request.get_json(silent=True) if request.is_json else None
    if not isinstance(payload, dict):
        return payload
    return {k: v for k, v in payload.items() if k not in REDACTED_FIELDS}


def _response_entity_id(response) -> Optional[str]:
    body = response[0] if isinstance(response, tuple) else response
    data = body.get_json(silent=True) if hasattr(body, "get_json") else None
    if isinstance(data, dict):
        entity_id = data.get("id")
        return str(entity_id) if entity_id is not None else None
    return None


def _status_code(response) -> int:
    if isinstance(response, tuple) and len(response) > 1:
        return response[1]
    return getattr(response, "status_code", 200)


def audit_action(action: str, entity_type: str):
    """
    Decorator to audit admin API actions.

    Args:
        action: Type of action (create, update, delete, etc.)
        entity_type: Type of entity being acted upon

    The entity id is the ``id`` view argument or the ``id`` field of the JSON
    response. Views that call ``record_changes`` get their before/after diff
    recorded; all others get the request body. Only successful (2xx) responses
    are recorded. A failure to write the audit row is logged and never fails
    the request.
    """

    def decorator(f: Callable):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            g.pop("audit_changes", None)
            response = f(*args, **kwargs)

            if not 200 <= _status_code(response) < 300:
                return response

            try:
                changes = g.pop("audit_changes", None)
                AuditLog.log_action(
                    action=action,
                    entity_type=entity_type,
                    entity_id=kwargs.get("id") or _response_entity_id(response),
                    changes=changes if changes is not None else _request_changes(),
                    user_id=get_current_user_id(),
                    ip_address=request.remote_addr,
                    user_agent=request.user_agent.string,
                    endpoint=request.endpoint,
                )
            except Exception as e:
                logger.error(f"Error creating audit log for {action} {entity_type}: {str(e)}")
                db.session.rollback()

            return response

        return decorated_function

    return decorator
