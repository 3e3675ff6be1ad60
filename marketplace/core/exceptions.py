class BaseAPIException(Exception):
    """Base exception class for API errors"""

    error = "API Error"

    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationFailed(BaseAPIException):
    """Raised when request data fails validation"""

    error = "Validation Error"

    def __init__(self, message="Invalid request data", status_code=400, errors=None):
        super().__init__(message, status_code)
        self.errors = errors


class AuthenticationFailed(BaseAPIException):
    """Raised when the caller cannot be authenticated"""

    error = "Unauthorized"

    def __init__(self, message="Authentication required", status_code=401):
        super().__init__(message, status_code)


class PermissionDenied(BaseAPIException):
    """Raised when user doesn't have required permissions"""

    error = "Permission Denied"

    def __init__(self, message="Permission denied", status_code=403):
        super().__init__(message, status_code)


class FeatureDisabled(BaseAPIException):
    """Raised when a route is gated by a feature flag that is off for the caller"""

    error = "Feature Disabled"

    def __init__(self, message="This feature is not available", status_code=403):
        super().__init__(message, status_code)


class ResourceNotFound(BaseAPIException):
    """Raised when a requested entity does not exist"""

    error = "Not Found"

    def __init__(self, message="Resource not found", status_code=404):
        super().__init__(message, status_code)


class ResourceConflict(BaseAPIException):
    """Raised when a write would violate a uniqueness rule"""

    error = "Conflict"

    def __init__(self, message="Resource already exists", status_code=409):
        super().__init__(message, status_code)
