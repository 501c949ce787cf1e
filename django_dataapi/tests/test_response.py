"""
Tests for django_dataapi.response module.
"""

import json

from django_dataapi.exceptions import ConfigurationError, NotFoundError, ValidationError
from django_dataapi.response import DataAPIResponse


class TestDataAPIResponse:
    """Tests for DataAPIResponse class."""

    def test_ok_response(self):
        response = DataAPIResponse.ok({"_id": "a"})

        assert response.success
        assert response.http_status == 200
        assert response.to_dict() == {"_id": "a"}

    def test_error_response(self):
        response = DataAPIResponse.error("NOT_FOUND", "Not Found")

        assert not response.success
        assert response.http_status == 404
        assert response.to_dict() == {"error": "Not Found"}

    def test_error_default_message(self):
        assert DataAPIResponse.error("METHOD_NOT_ALLOWED").to_dict() == {"error": "Method not allowed"}

    def test_unknown_code_is_500(self):
        assert DataAPIResponse.error("SOMETHING_ODD").http_status == 500

    def test_from_exception(self):
        assert DataAPIResponse.from_exception(ValidationError("bad")).http_status == 400
        assert DataAPIResponse.from_exception(NotFoundError()).to_dict() == {"error": "Not Found"}
        assert DataAPIResponse.from_exception(ConfigurationError("oops")).http_status == 500

    def test_exception_status_wins(self):
        response = DataAPIResponse.from_exception(ValidationError("duplicate", code="CREATE_FAILED"))

        assert response.code == "CREATE_FAILED"
        assert response.http_status == 400

    def test_envelope(self):
        response = DataAPIResponse.ok([1, 2])

        assert response.to_dict(include_status_code=True) == {
            "status_code": 200,
            "success": True,
            "msg": "Success",
            "data": [1, 2],
        }

    def test_error_envelope(self):
        response = DataAPIResponse.error("BAD_REQUEST", "Field is not sortable.")

        assert response.to_dict(include_status_code=True) == {
            "status_code": 400,
            "success": False,
            "error": "Field is not sortable.",
        }


class TestToJsonResponse:
    """Tests for DataAPIResponse.to_json_response."""

    def test_list_payload(self):
        json_response = DataAPIResponse.ok(["k1"]).to_json_response()

        assert json_response.status_code == 200
        assert json.loads(json_response.content) == ["k1"]

    def test_error_status(self):
        json_response = DataAPIResponse.error("NOT_FOUND", "Not Found").to_json_response()

        assert json_response.status_code == 404
        assert "status_code" not in json.loads(json_response.content)

    def test_no_content(self):
        response = DataAPIResponse.no_content().to_json_response()

        assert response.status_code == 204
        assert response.content == b""

    def test_always_http_200(self, settings_override):
        settings_override(ALWAYS_HTTP_200=True)

        json_response = DataAPIResponse.error("NOT_FOUND", "Not Found").to_json_response()
        data = json.loads(json_response.content)

        assert json_response.status_code == 200
        assert data["status_code"] == 404
        assert data["success"] is False

    def test_always_http_200_no_content(self, settings_override):
        settings_override(ALWAYS_HTTP_200=True)

        json_response = DataAPIResponse.no_content().to_json_response()

        assert json_response.status_code == 200
        assert json.loads(json_response.content) == {"status_code": 204, "success": True, "msg": "Success", "data": None}

    def test_dates_serialized(self):
        import datetime

        json_response = DataAPIResponse.ok({"at": datetime.date(2024, 1, 2)}).to_json_response()

        assert json.loads(json_response.content) == {"at": "2024-01-02"}
