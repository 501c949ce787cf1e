"""
Django-DataAPI URL Generation

Example:
    # urls.py
    from django_dataapi.urls import data_api_urls
    from myapp.resources import registry

    urlpatterns = data_api_urls(registry, prefix="api/")
    # api/items/get, api/items/list, api/items/new, ...
"""

import logging

from django.urls import path

from django_dataapi.views import DataAPIView


logger = logging.getLogger("django_dataapi")


def data_api_urls(registry, prefix="", view_class=DataAPIView):
    """
    Seal registry and build one URL pattern per resource endpoint.

    The route of each endpoint is <prefix><location>/<endpoint>, where
    endpoint is the binding's own endpoint or else the name it was
    registered under. Pattern names are "<location>-<name>".

    Args:
        registry: ResourceRegistry
        prefix: Route prefix, e.g. "api/"
        view_class: DataAPIView subclass serving the endpoints

    Returns:
        List of URLPattern
    """
    registry.seal()
    patterns = []
    for meta in registry:
        for name, binding in meta.endpoints.items():
            route = f"{prefix}{meta.location}/{binding.endpoint or name}"
            view = view_class.as_view(registry=registry, resource_class=meta.target, endpoint_name=name)
            patterns.append(path(route, view, name=f"{meta.location}-{name}"))
            logger.debug("route %s -> %s.%s", route, meta.target.__name__, name)
    return patterns
