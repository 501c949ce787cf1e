"""
Django-DataAPI Response Utilities

Serializes handler results and API errors into Django responses.

Features:
- Response code -> HTTP status mapping
- Optional ALWAYS_HTTP_200 envelope
- 204 for handlers that return nothing
"""

from django.http import HttpResponse, JsonResponse

from django_dataapi.conf import api_settings


class DataAPIResponse:
    """
    Response builder for data API endpoints.

    Success and failure are carried by the HTTP status. When
    ALWAYS_HTTP_200=True, every response is sent with HTTP 200 and the
    real status is moved into the payload.

    Example:
        >>> DataAPIResponse.ok({"_id": "a", "name": "Item A"}).to_dict()
        {"_id": "a", "name": "Item A"}

        >>> DataAPIResponse.error("NOT_FOUND", "Not Found").to_dict()
        {"error": "Not Found"}
    """

    # Map response codes to HTTP status codes
    STATUS_MAP = {
        "OK": 200,
        "NO_CONTENT": 204,
        "BAD_REQUEST": 400,
        "INVALID_JSON": 400,
        "CREATE_FAILED": 400,
        "NOT_FOUND": 404,
        "METHOD_NOT_ALLOWED": 405,
        "CONFIGURATION_ERROR": 500,
        "INTERNAL_ERROR": 500,
    }

    # Messages for response codes
    MSG_MAP = {
        "OK": "Success",
        "NO_CONTENT": "Success",
        "BAD_REQUEST": "Bad request",
        "INVALID_JSON": "Invalid JSON in request body",
        "CREATE_FAILED": "Failed to create",
        "NOT_FOUND": "Not found",
        "METHOD_NOT_ALLOWED": "Method not allowed",
        "CONFIGURATION_ERROR": "Resource is misconfigured",
        "INTERNAL_ERROR": "Internal server error",
    }

    def __init__(self, code="OK", data=None, error_message=None, status=None):
        """
        Args:
            code: Response code key (e.g., "OK", "NOT_FOUND")
            data: Handler result (dict, list or scalar)
            error_message: Message of an error response
            status: Explicit HTTP status, overriding STATUS_MAP
        """
        self.code = code
        self.data = data
        self.error_message = error_message
        self.status = status

    @property
    def success(self):
        return self.code in ("OK", "NO_CONTENT")

    @property
    def http_status(self):
        if self.status is not None:
            return self.status
        return self.STATUS_MAP.get(self.code, 500)

    @classmethod
    def ok(cls, data):
        return cls(code="OK", data=data)

    @classmethod
    def no_content(cls):
        return cls(code="NO_CONTENT")

    @classmethod
    def error(cls, code, message=None):
        return cls(code=code, error_message=message)

    @classmethod
    def from_exception(cls, exc):
        """Error response for a DataAPIError, keeping its status."""
        return cls(code=exc.code, error_message=exc.message, status=exc.status_code)

    def to_dict(self, include_status_code=False):
        """
        Payload of the response.

        Without include_status_code, errors are {"error": message} and
        successes are the handler result unchanged (which may be a list).

        With include_status_code (ALWAYS_HTTP_200 mode) the payload is always
        a dict:
            - status_code: HTTP status code (200, 204, 400, ...)
            - success: True/False
            - msg: Success message (for success responses)
            - error: Error message (for error responses)
            - data: Handler result (for success responses)
        """
        if include_status_code:
            result = {"status_code": self.http_status, "success": self.success}
            if self.success:
                result["msg"] = self.MSG_MAP.get(self.code, "Success")
                result["data"] = self.data
            else:
                result["error"] = self.error_message or self.MSG_MAP.get(self.code, "An error occurred")
            return result

        if not self.success:
            return {"error": self.error_message or self.MSG_MAP.get(self.code, "An error occurred")}
        return self.data

    def to_json_response(self):
        """
        Convert to a Django response.

        When ALWAYS_HTTP_200 is True every response is a 200 JsonResponse
        with the envelope of to_dict(include_status_code=True). Otherwise
        the status is sent as is, and NO_CONTENT has an empty body.
        """
        if api_settings.ALWAYS_HTTP_200:
            return JsonResponse(self.to_dict(include_status_code=True), status=200)
        if self.code == "NO_CONTENT":
            return HttpResponse(status=204)
        payload = self.to_dict()
        return JsonResponse(payload, status=self.http_status, safe=isinstance(payload, dict))
