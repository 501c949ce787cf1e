"""
Django-DataAPI: Declarative CRUD endpoints over a document store

Resource classes declare their fields (access mode, listability,
sortability, foreign references, validators, filters); the library
turns each declaration into get/list/new/edit/delete JSON endpoints.

Example:
    from django_dataapi import AccessMode, DataModel, DefaultRoutes, Field, ResourceRegistry

    registry = ResourceRegistry()

    @registry.register("items", routes=DefaultRoutes.ALL, table="items", model_key="items")
    class ItemAPI:
        items = DataModel(database, "items")
        _id = Field(mode=AccessMode.READ_ONLY, listable=True)
        name = Field(mode=AccessMode.READ_WRITE, listable=True, filter=True, mandatory=["new"])

    urlpatterns = data_api_urls(registry, prefix="api/")
"""

__version__ = "1.0.0"

# Descriptors
from django_dataapi.metadata import AccessMode, FieldData, ForeignKey, ResourceMeta

# Declarations
from django_dataapi.fields import Field, computed
from django_dataapi.registry import ResourceRegistry

# Models and store
from django_dataapi.models import DataModel
from django_dataapi.modifiers import ContainerModifier
from django_dataapi.store import MemoryDatabase, TableSchema

# Routes
from django_dataapi.routes import DefaultRoutes, EndpointBinding, with_options
from django_dataapi.parameters import RequestContext

# Errors
from django_dataapi.exceptions import ConfigurationError, DataAPIError, NotFoundError, ValidationError

# HTTP
from django_dataapi.response import DataAPIResponse
from django_dataapi.views import DataAPIView
from django_dataapi.urls import data_api_urls

# Configuration
from django_dataapi.conf import api_settings

__all__ = [
    # Version
    "__version__",
    # Descriptors
    "AccessMode",
    "FieldData",
    "ForeignKey",
    "ResourceMeta",
    # Declarations
    "Field",
    "computed",
    "ResourceRegistry",
    # Models and store
    "DataModel",
    "ContainerModifier",
    "MemoryDatabase",
    "TableSchema",
    # Routes
    "DefaultRoutes",
    "EndpointBinding",
    "with_options",
    "RequestContext",
    # Errors
    "DataAPIError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    # HTTP
    "DataAPIResponse",
    "DataAPIView",
    "data_api_urls",
    # Settings
    "api_settings",
]
