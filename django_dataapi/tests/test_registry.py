"""
Tests for django_dataapi.registry module.
"""

import pytest

from django_dataapi.exceptions import ConfigurationError
from django_dataapi.fields import Field
from django_dataapi.metadata import AccessMode
from django_dataapi.registry import ResourceRegistry
from django_dataapi.routes import DefaultRoutes
from django_dataapi.store import TableSchema


class TestRegister:
    """Tests for ResourceRegistry.register."""

    def test_register_builds_descriptor(self):
        registry = ResourceRegistry()

        @registry.register("/items/", routes=DefaultRoutes.ALL, table="items", schema="shop", model_key="items")
        class ItemAPI:
            name = Field(mode=AccessMode.READ_WRITE, listable=True)

        meta = registry.meta_for(ItemAPI)
        assert meta.target is ItemAPI
        assert meta.location == "items"
        assert meta.table_name == "items"
        assert meta.schema_name == "shop"
        assert meta.model_key == "items"
        assert set(meta.endpoints) == {"get", "list", "new", "edit", "delete"}
        assert meta.pluck["list"] == ["name"]

    def test_meta_for_instance(self):
        registry = ResourceRegistry()

        @registry.register("items")
        class ItemAPI:
            pass

        assert registry.meta_for(ItemAPI()) is registry.meta_for(ItemAPI)
        assert ItemAPI in registry
        assert len(registry) == 1

    def test_meta_for_unknown(self):
        registry = ResourceRegistry()

        class Unknown:
            pass

        with pytest.raises(ConfigurationError, match="Unknown is not a registered resource"):
            registry.meta_for(Unknown)

    def test_describe_runs_after_fields(self):
        registry = ResourceRegistry()
        seen = []

        @registry.register("items", table=TableSchema("items", indexes={"name": ["name"]}))
        class ItemAPI:
            name = Field(mode=AccessMode.READ_WRITE)

            @classmethod
            def describe(cls, meta):
                seen.append(meta.fields["name"].mode)
                meta.set_filter("name", index=True).set_model_key("items")

        meta = registry.meta_for(ItemAPI)
        assert seen == [AccessMode.READ_WRITE]
        assert meta.fields["name"].indexable is True
        assert meta.model_key == "items"

    def test_duplicate_registration(self):
        registry = ResourceRegistry()

        class ItemAPI:
            pass

        registry.register("items")(ItemAPI)
        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register("items")(ItemAPI)


class TestInheritance:
    """Tests for descriptor inheritance between registered classes."""

    def test_subclass_inherits_nearest_registered_base(self):
        registry = ResourceRegistry()

        @registry.register("base", routes=DefaultRoutes.ALL, table="items", model_key="items")
        class BaseAPI:
            _id = Field(mode=AccessMode.READ_ONLY, listable=True)
            name = Field(mode=AccessMode.READ_WRITE, listable=True)

            @classmethod
            def describe(cls, meta):
                meta.set_filter("name")

        class Unregistered(BaseAPI):
            pass

        @registry.register("products", routes={"list": DefaultRoutes.LIST})
        class ProductAPI(Unregistered):
            name = Field(mode=AccessMode.READ_ONLY)
            price = Field(mode=AccessMode.READ_WRITE, listable=True)

        meta = registry.meta_for(ProductAPI)
        assert list(meta.fields) == ["_id", "name", "price"]
        assert meta.fields["name"].mode == AccessMode.READ_ONLY
        assert meta.pluck["list"] == ["_id", "name", "price"]
        assert meta.table_name == "items"
        assert meta.model_key == "items"
        assert "name" in meta.filters
        assert set(meta.endpoints) == {"get", "list", "new", "edit", "delete"}
        assert meta.endpoints["list"] is DefaultRoutes.LIST

        base = registry.meta_for(BaseAPI)
        assert base.fields["name"].mode == AccessMode.READ_WRITE
        assert "price" not in base.fields

    def test_inherited_describe_not_rerun(self):
        registry = ResourceRegistry()
        calls = []

        @registry.register("base")
        class BaseAPI:
            @classmethod
            def describe(cls, meta):
                calls.append(cls)

        @registry.register("child")
        class ChildAPI(BaseAPI):
            pass

        assert calls == [BaseAPI]


class TestSeal:
    """Tests for sealing the registry."""

    def test_register_after_seal(self):
        registry = ResourceRegistry()

        @registry.register("items")
        class ItemAPI:
            name = Field(mode=AccessMode.READ_WRITE)

        registry.seal()
        assert registry.sealed

        with pytest.raises(ConfigurationError, match="sealed"):

            @registry.register("other")
            class OtherAPI:
                pass

    def test_seal_freezes_descriptors(self):
        registry = ResourceRegistry()

        @registry.register("items")
        class ItemAPI:
            name = Field(mode=AccessMode.READ_WRITE)

        registry.seal()
        with pytest.raises(ConfigurationError):
            registry.meta_for(ItemAPI).set_mode("name", AccessMode.READ_ONLY)
