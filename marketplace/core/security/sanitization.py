# marketplace/core/security/sanitization.py
import html
import re
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional

import bleach
from flask import request, abort


class RequestSanitizer:
    # Secrets are compared or hashed as sent; markup stripping would alter them
    exempt_fields = frozenset({"password", "current_password", "new_password", "credential", "token"})
    max_clean_passes = 5

    def __init__(self, max_content_length: int = 10 * 1024 * 1024):
        self.max_content_length = max_content_length
        self.allowed_content_types = {
            "application/json",
            "multipart/form-data",
            "application/x-www-form-urlencoded",
            "text/plain",
        }
        self.allowed_tags: List[str] = []

    def strip_markup(self, value: str) -> str:
        """Remove HTML tags and return plain text.

        bleach escapes what it keeps, so the result is unescaped again; that
        is repeated until the text is stable so an escaped tag such as
        ``&lt;script&gt;`` cannot come back as markup.
        """
        for _ in range(self.max_clean_passes):
            cleaned = html.unescape(bleach.clean(value, tags=self.allowed_tags, strip=True))
            if cleaned == value:
                return cleaned
            value = cleaned
        return bleach.clean(value, tags=self.allowed_tags, strip=True)

    def sanitize_string(self, value: str) -> str:
        """Strip NUL/control characters and any HTML markup"""
        if not isinstance(value, str):
            return str(value)
        value = value.replace("\x00", "")
        value = "".join(char for char in value if char >= " " or char in "\n\t")
        return self.strip_markup(value)

    def sanitize_data(self, obj: Any, field: Optional[str] = None) -> Any:
        if field in self.exempt_fields:
            return obj
        if isinstance(obj, str):
            return self.sanitize_string(obj)
        if isinstance(obj, dict):
            return {k: self.sanitize_data(v, k) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self.sanitize_data(item) for item in obj]
        return obj

    def validate_content_type(self, content_type: str) -> bool:
        if not content_type:
            return True
        base_content_type = content_type.split(";")[0].strip().lower()
        return base_content_type in self.allowed_content_types

    def validate_content_length(self, content_length: int) -> bool:
        if not content_length:
            return True
        return content_length <= self.max_content_length


def sanitize_request(exempt_paths: Optional[Iterable[str]] = None):
    """Decorator that validates and cleans the JSON body of write requests"""
    sanitizer = RequestSanitizer()
    patterns = [re.compile(path) for path in exempt_paths or ()]

    def decorator(f: Callable):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if any(pattern.match(request.path) for pattern in patterns):
                return f(*args, **kwargs)

            if request.method in ("POST", "PUT", "PATCH"):
                if not sanitizer.validate_content_length(request.content_length or 0):
                    abort(413, description="Request entity too large")

                content_type = request.headers.get("Content-Type", "")
                if not sanitizer.validate_content_type(content_type):
                    abort(415, description=f"Unsupported content type: {content_type}")

                if request.is_json and request.get_data(cache=True):
                    data = request.get_json(silent=True)
                    if data is None:
                        abort(400, description="Invalid JSON")
                    cleaned = sanitizer.sanitize_data(data)
                    # Later get_json() calls, silent or not, return the cleaned body
                    request._cached_json = (cleaned, cleaned)

            return f(*args, **kwargs)

        return decorated_function

    return decorator
