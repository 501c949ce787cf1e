"""
Pytest configuration for django-dataapi tests.
"""

import json
import os
import sys
from urllib.parse import urlencode

import pytest

# Add the package root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_configure():
    """Configure Django settings before tests run."""
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            SECRET_KEY="test-secret-key",
            DEBUG=True,
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
            ],
            USE_TZ=True,
            DATA_API={
                "MAX_PAGE": 100,
            },
        )

    import django

    django.setup()


ITEMS = [
    {"_id": "a", "name": "Item A", "price": 100},
    {"_id": "b", "name": "Item B", "price": 200},
    {"_id": "c", "name": "Item C", "price": 50},
]


@pytest.fixture
def rf():
    from django.test import RequestFactory

    return RequestFactory()


@pytest.fixture
def database():
    from django_dataapi.store import MemoryDatabase, TableSchema

    return MemoryDatabase(
        tables=[
            TableSchema("items", indexes={"name": ["name"], "price": ["price"]}),
            TableSchema("orders"),
            TableSchema("customers", indexes={"email": ["email"]}),
        ]
    )


@pytest.fixture
def registry():
    from django_dataapi.registry import ResourceRegistry

    return ResourceRegistry()


@pytest.fixture
def item_api(registry, database):
    """Items resource: read-only id, writable name/price, a field with no access mode."""
    from django_dataapi import AccessMode, DataModel, DefaultRoutes, Field, with_options

    routes = dict(DefaultRoutes.ALL)
    routes["detailed"] = with_options(DefaultRoutes.LIST, {"pluckMode": "detailed"})

    @registry.register("items", routes=routes, table=database.table("items").schema, model_key="items")
    class ItemAPI:
        items = DataModel(database, "items")

        _id = Field(mode=AccessMode.READ_ONLY, listable=True, list_modes=["list", "detailed"], sortable=True)
        name = Field(
            mode=AccessMode.READ_WRITE,
            listable=True,
            list_modes=["list", "detailed"],
            sortable=True,
            mandatory=["new"],
            filter=True,
            filter_index=True,
        )
        price = Field(
            mode=AccessMode.READ_WRITE,
            listable=True,
            list_modes=["detailed"],
            sortable=True,
            indexed=False,
            filter=True,
            validator=lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
        )
        secret = Field(listable=True)

    return ItemAPI


@pytest.fixture
async def items(database):
    await database.table("items").insert([dict(row) for row in ITEMS])
    return database.table("items")


class APIClient:
    """Drives DataAPIView instances the way Django's handler would."""

    def __init__(self, registry):
        from django.test import RequestFactory

        self.registry = registry
        self.factory = RequestFactory()

    async def request(self, resource_class, endpoint, method="get", query=None, body=None):
        from django_dataapi.views import DataAPIView

        meta = self.registry.meta_for(resource_class)
        path = f"/{meta.location}/{endpoint}"
        if query:
            path = f"{path}?{urlencode(query, doseq=True)}"
        payload = body if isinstance(body, (str, bytes)) else json.dumps(body or {})
        request = self.factory.generic(method.upper(), path, payload, content_type="application/json")
        view = DataAPIView.as_view(registry=self.registry, resource_class=resource_class, endpoint_name=endpoint)
        return await view(request)


@pytest.fixture
def api(registry):
    return APIClient(registry)


@pytest.fixture
def settings_override():
    """Override DATA_API keys for one test, restoring them afterwards."""
    from django.conf import settings
    from django_dataapi.conf import api_settings

    previous = dict(getattr(settings, "DATA_API", {}))

    def override(**values):
        settings.DATA_API = {**previous, **values}
        api_settings.reload()

    yield override
    settings.DATA_API = previous
    api_settings.reload()
