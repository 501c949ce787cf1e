"""
Django-DataAPI Exceptions

Every error raised by the CRUD engine carries the HTTP status it maps to.
The view layer converts them into JSON error responses.
"""


class DataAPIError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(DataAPIError):
    """The request is malformed or fails field validation (400)."""

    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(DataAPIError):
    """The requested row does not exist (404)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message="Not Found", code=None):
        super().__init__(message, code)


class ConfigurationError(DataAPIError):
    """The resource descriptor is misconfigured (500). Never caused by the request."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


def require(condition, message, error_class=ValidationError):
    """
    Raise error_class(message) unless condition holds.

    Args:
        condition: Value tested for truthiness
        message: Error message
        error_class: DataAPIError subclass to raise

    Returns:
        The condition, unchanged

    Example:
        >>> require(params.get("id"), "Missing id.")
    """
    if not condition:
        raise error_class(message)
    return condition
