"""
Tests for django_dataapi.views and django_dataapi.urls modules.
"""

import json
import logging
from unittest.mock import patch

import pytest

from django_dataapi import DefaultRoutes, EndpointBinding
from django_dataapi.parameters import get_parameters


def payload(response):
    return json.loads(response.content)


class TestDataAPIView:
    """Tests for DataAPIView through RequestFactory requests."""

    @pytest.mark.asyncio
    async def test_list(self, api, item_api, items):
        response = await api.request(item_api, "list", query={"filter_price": "gt:100"})

        assert response.status_code == 200
        assert payload(response) == {"results": [{"_id": "b", "name": "Item B"}], "total": 1, "offset": 0, "limit": None}

    @pytest.mark.asyncio
    async def test_invalid_filter_mode_is_400(self, api, item_api, items):
        response = await api.request(item_api, "list", query={"filter_name": "invalid:test"})

        assert response.status_code == 400
        error = payload(response)["error"]
        assert "invalid" in error
        assert "eq, ne, gt, ge, lt, le" in error

    @pytest.mark.asyncio
    async def test_not_found_is_404(self, api, item_api, items):
        response = await api.request(item_api, "get", query={"id": "nope"})

        assert response.status_code == 404
        assert payload(response) == {"error": "Not Found"}

    @pytest.mark.asyncio
    async def test_new_and_get(self, api, item_api, items):
        response = await api.request(item_api, "new", method="post", body={"name": "Item D", "price": 10})
        assert response.status_code == 200
        keys = payload(response)

        response = await api.request(item_api, "get", query={"id": keys[0]})
        assert payload(response) == {"_id": keys[0], "name": "Item D", "price": 10}

    @pytest.mark.asyncio
    async def test_missing_mandatory_is_400(self, api, item_api):
        response = await api.request(item_api, "new", method="post", body={"price": 10})

        assert response.status_code == 400
        assert payload(response) == {"error": "Missing mandatory fields: name"}

    @pytest.mark.asyncio
    async def test_invalid_json_is_400(self, api, item_api):
        response = await api.request(item_api, "new", method="post", body="{oops")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_edit_returns_204(self, api, item_api, items):
        response = await api.request(item_api, "edit", method="put", query={"id": "a"}, body={"price": 1})

        assert response.status_code == 204
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_delete(self, api, item_api, items):
        response = await api.request(item_api, "delete", method="delete", query={"id": ["a", "b"]})

        assert response.status_code == 200
        assert payload(response)["deleted"] == 2

    @pytest.mark.asyncio
    async def test_wrong_method_is_405(self, api, item_api, items):
        response = await api.request(item_api, "list", method="post")

        assert response.status_code == 405
        assert response["Allow"] == "GET"
        assert await items.all().count().run() == 3

    @pytest.mark.asyncio
    async def test_configuration_error_is_500(self, api, registry):
        @registry.register("broken", routes={"get": DefaultRoutes.GET}, table="items")
        class BrokenAPI:
            pass

        response = await api.request(BrokenAPI, "get", query={"id": "a"})

        assert response.status_code == 500
        assert payload(response) == {"error": "Missing model key."}

    @pytest.mark.asyncio
    async def test_unknown_endpoint_is_500(self, api, item_api):
        response = await api.request(item_api, "search")

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self, api, registry, caplog):
        async def explode(resource, context, params, body=None):
            raise RuntimeError("boom")

        @registry.register("boom", routes={"get": EndpointBinding(explode, "get", get_parameters)})
        class BoomAPI:
            pass

        with caplog.at_level(logging.ERROR, logger="django_dataapi"):
            with pytest.raises(RuntimeError, match="boom"):
                await api.request(BoomAPI, "get", query={"id": "a"})

        assert "Unhandled error in GET /boom/get" in caplog.text

    @pytest.mark.asyncio
    async def test_always_http_200(self, api, item_api, items, settings_override):
        settings_override(ALWAYS_HTTP_200=True)

        response = await api.request(item_api, "get", query={"id": "nope"})
        assert response.status_code == 200
        assert payload(response) == {"status_code": 404, "success": False, "error": "Not Found"}

        response = await api.request(item_api, "get", query={"id": "a"})
        data = payload(response)
        assert data["status_code"] == 200
        assert data["data"]["name"] == "Item A"

    @pytest.mark.asyncio
    async def test_log_requests(self, api, item_api, items, settings_override, caplog):
        settings_override(LOG_REQUESTS=True)

        with caplog.at_level(logging.INFO, logger="django_dataapi"):
            await api.request(item_api, "list")

        records = [record for record in caplog.records if record.getMessage() == "data_api_request"]
        assert len(records) == 1
        assert records[0].endpoint == "list"
        assert records[0].resource == "ItemAPI"

    def test_csrf_exempt_setting(self, registry, item_api, settings_override):
        from django_dataapi.views import DataAPIView

        view = DataAPIView.as_view(registry=registry, resource_class=item_api, endpoint_name="list")
        assert not getattr(view, "csrf_exempt", False)

        settings_override(CSRF_EXEMPT=True)
        view = DataAPIView.as_view(registry=registry, resource_class=item_api, endpoint_name="list")
        assert view.csrf_exempt is True

    @pytest.mark.asyncio
    async def test_get_resource_hook(self, api, item_api, items):
        from django_dataapi.views import DataAPIView

        with patch.object(DataAPIView, "get_resource", autospec=True, side_effect=lambda self, request: item_api()) as hook:
            await api.request(item_api, "get", query={"id": "a"})

        hook.assert_called_once()


class TestDataAPIUrls:
    """Tests for data_api_urls function."""

    def test_patterns(self, registry, item_api):
        from django_dataapi.urls import data_api_urls

        patterns = data_api_urls(registry, prefix="api/")

        routes = {str(pattern.pattern): pattern.name for pattern in patterns}
        assert routes == {
            "api/items/get": "items-get",
            "api/items/list": "items-list",
            "api/items/new": "items-new",
            "api/items/edit": "items-edit",
            "api/items/delete": "items-delete",
            "api/items/detailed": "items-detailed",
        }
        assert registry.sealed

    def test_binding_endpoint_overrides_name(self, registry):
        from django_dataapi.routes import with_options
        from django_dataapi.urls import data_api_urls

        @registry.register("items", routes={"search": with_options(DefaultRoutes.LIST, endpoint="find")})
        class SearchAPI:
            pass

        patterns = data_api_urls(registry)

        assert [str(pattern.pattern) for pattern in patterns] == ["items/find"]

    def test_view_kwargs(self, registry, item_api):
        from django_dataapi.urls import data_api_urls

        pattern = data_api_urls(registry)[0]

        assert pattern.callback.view_initkwargs == {
            "registry": registry,
            "resource_class": item_api,
            "endpoint_name": "get",
        }
