"""
Django-DataAPI Resource Registry

Owns the descriptors of every registered resource class. The registry
is written once, while resource modules are imported, and sealed when
URL patterns are generated; from then on it is only read, so requests
never need to synchronise on it.

Example:
    registry = ResourceRegistry()

    @registry.register("items", routes=DefaultRoutes.ALL, table=TableSchema("items"))
    class ItemAPI:
        items = DataModel(database, "items")
        _id = Field(mode=AccessMode.READ_ONLY, listable=True)
        name = Field(mode=AccessMode.READ_WRITE, listable=True, filter=True)

        @classmethod
        def describe(cls, meta):
            meta.set_model_key("items")
"""

import inspect
import logging

from django_dataapi.exceptions import ConfigurationError
from django_dataapi.fields import collect_fields
from django_dataapi.metadata import ResourceMeta
from django_dataapi.store.base import TableSchema


logger = logging.getLogger("django_dataapi")


class ResourceRegistry:
    """Mapping of resource class -> ResourceMeta."""

    def __init__(self):
        self._metas = {}
        self._sealed = False

    def __contains__(self, resource):
        return self._resolve_class(resource) in self._metas

    def __iter__(self):
        return iter(self._metas.values())

    def __len__(self):
        return len(self._metas)

    @property
    def sealed(self):
        return self._sealed

    def seal(self):
        """Freeze the registry and every descriptor in it."""
        for meta in self._metas.values():
            meta.seal()
        self._sealed = True
        return self

    @staticmethod
    def _resolve_class(resource):
        return resource if inspect.isclass(resource) else type(resource)

    def _parent_meta(self, cls):
        for base in cls.__mro__[1:]:
            if base in self._metas:
                return self._metas[base]
        return None

    def register(self, location, routes=None, table=None, schema="default", model_key=None):
        """
        Class decorator registering a resource.

        Steps, in order: inherit the nearest registered base class's
        descriptor, bind the table, set the model key, replay Field
        declarations, call the class's own describe(meta) if it defines
        one, add the endpoints.

        Args:
            location: URL segment the endpoints are mounted under
            routes: Dict of endpoint name -> EndpointBinding
            table: TableSchema (or table name) backing the resource
            schema: Schema name the table belongs to
            model_key: Resource attribute holding the DataModel

        Raises:
            ConfigurationError: The registry is sealed, or the class is
                already registered
        """

        def decorator(cls):
            if self._sealed:
                raise ConfigurationError(f"Cannot register {cls.__name__}: the resource registry is sealed")
            if cls in self._metas:
                raise ConfigurationError(f"{cls.__name__} is already registered")

            meta = ResourceMeta(cls)
            meta.location = location.strip("/")
            parent = self._parent_meta(cls)
            if parent is not None:
                meta.inherit(parent)
            if table is not None:
                meta.set_table(table if isinstance(table, TableSchema) else TableSchema(table), schema)
            if model_key:
                meta.set_model_key(model_key)
            for name, field in collect_fields(cls):
                field.apply(meta, name)
            if "describe" in vars(cls):
                cls.describe(meta)
            for name, binding in (routes or {}).items():
                meta.add_endpoint(name, binding)

            self._metas[cls] = meta
            logger.debug("registered %s at /%s (%d fields)", cls.__name__, meta.location, len(meta.fields))
            return cls

        return decorator

    def meta_for(self, resource):
        """
        Descriptor of a resource class or instance.

        Raises:
            ConfigurationError: The resource is not registered
        """
        cls = self._resolve_class(resource)
        try:
            return self._metas[cls]
        except KeyError:
            raise ConfigurationError(f"{cls.__name__} is not a registered resource") from None
