"""
Django-DataAPI Views

Async Django class-based view serving one endpoint of a registered
resource.

Features:
- One view per (resource, endpoint) pair, generated by data_api_urls()
- 405 for methods other than the endpoint's
- DataAPIError -> JSON error response; anything else propagates
"""

import logging

from django.views import View
from django.views.decorators.csrf import csrf_exempt

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import ConfigurationError, DataAPIError
from django_dataapi.parameters import RequestContext
from django_dataapi.response import DataAPIResponse


logger = logging.getLogger("django_dataapi")


class DataAPIView(View):
    """
    Runs one endpoint binding of a resource.

    CSRF Protection:
        By default, CSRF protection is ENABLED (secure by default).
        To disable for token-only APIs, set CSRF_EXEMPT=True in settings.

    Example:
        # urls.py
        urlpatterns = [
            path(
                "api/items/list",
                DataAPIView.as_view(registry=registry, resource_class=ItemAPI, endpoint_name="list"),
            ),
        ]

    Usually generated by data_api_urls(registry) instead.
    """

    http_method_names = ["get", "post", "put", "delete", "options"]

    # Required
    registry = None
    resource_class = None
    endpoint_name = None

    @classmethod
    def as_view(cls, **initkwargs):
        """Override as_view to conditionally apply csrf_exempt based on settings."""
        view = super().as_view(**initkwargs)
        if api_settings.CSRF_EXEMPT:
            view = csrf_exempt(view)
        return view

    def get_meta(self):
        return self.registry.meta_for(self.resource_class)

    def get_binding(self, meta):
        try:
            return meta.endpoints[self.endpoint_name]
        except KeyError:
            raise ConfigurationError(
                f"{self.resource_class.__name__} has no endpoint '{self.endpoint_name}'"
            ) from None

    def get_resource(self, request):
        """Resource instance serving the request. Override to pass request state in."""
        return self.resource_class()

    async def get(self, request, *args, **kwargs):
        return await self.handle(request)

    async def post(self, request, *args, **kwargs):
        return await self.handle(request)

    async def put(self, request, *args, **kwargs):
        return await self.handle(request)

    async def delete(self, request, *args, **kwargs):
        return await self.handle(request)

    async def handle(self, request):
        """
        Main endpoint handler.

        Checks the method, extracts the binding's parameters, runs its
        handler and serializes the result.
        """
        try:
            meta = self.get_meta()
            binding = self.get_binding(meta)

            if request.method.lower() != binding.method:
                response = DataAPIResponse.error(
                    "METHOD_NOT_ALLOWED", f"Method {request.method} not allowed"
                ).to_json_response()
                response["Allow"] = binding.method.upper()
                return response

            resource = self.get_resource(request)
            context = RequestContext(request, resource, meta, binding.options)
            params = binding.parameters(context, meta)
            result = await binding.handler(resource, context, params, request.body)
        except DataAPIError as e:
            log = logger.error if e.status_code >= 500 else logger.info
            log(f"{request.method} {request.path} failed: {e.code}: {e.message}")
            return DataAPIResponse.from_exception(e).to_json_response()
        except Exception:
            logger.exception(f"Unhandled error in {request.method} {request.path}")
            raise

        if api_settings.LOG_REQUESTS:
            logger.info(
                "data_api_request",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "resource": self.resource_class.__name__,
                    "endpoint": self.endpoint_name,
                },
            )

        if result is None:
            return DataAPIResponse.no_content().to_json_response()
        return DataAPIResponse.ok(result).to_json_response()
