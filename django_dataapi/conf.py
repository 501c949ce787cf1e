"""
Django-DataAPI Settings

Configuration is read from Django settings under the DATA_API key.
All settings have sensible defaults.

Example:
    # settings.py
    DATA_API = {
        'MAX_PAGE': 50,
        'DEFAULT_LIMIT': 20,
        'INTERNAL_FIELD': '_internal',
    }
"""

from django.conf import settings

DEFAULTS = {
    # Pagination
    "MAX_PAGE": 100,  # Cap applied to a requested limit when no maxPage override exists
    "DEFAULT_LIMIT": None,  # Page size when neither limit nor maxPage is known, None = unbounded
    # Projection
    "DEFAULT_LIST_MODE": "list",
    "INTERNAL_FIELD": "_internal",  # Store bookkeeping column, kept by pluck, stripped from output
    "PRIMARY_KEY": "_id",
    # HTTP behavior
    "CSRF_EXEMPT": False,  # Set True ONLY for token-only APIs (no session auth)
    "ALWAYS_HTTP_200": False,  # When True, all responses return HTTP 200 with status_code in payload
    "LOG_REQUESTS": False,
}


class DataAPISettings:
    """
    A settings object that allows django-dataapi settings to be accessed as
    properties. For example:

        from django_dataapi.conf import api_settings
        print(api_settings.MAX_PAGE)

    Settings can be overridden in Django settings.py under DATA_API key.
    """

    def __init__(self, defaults=None):
        self.defaults = defaults or DEFAULTS
        self._cached_attrs = set()

    @property
    def user_settings(self):
        if not hasattr(self, "_user_settings"):
            self._user_settings = getattr(settings, "DATA_API", {})
        return self._user_settings

    def __getattr__(self, attr):
        if attr not in self.defaults:
            raise AttributeError(f"Invalid django-dataapi setting: '{attr}'")

        try:
            val = self.user_settings[attr]
        except KeyError:
            val = self.defaults[attr]

        # Cache the result
        self._cached_attrs.add(attr)
        setattr(self, attr, val)
        return val

    def reload(self):
        """Reload settings (useful for testing)."""
        for attr in self._cached_attrs:
            try:
                delattr(self, attr)
            except AttributeError:
                pass
        self._cached_attrs.clear()
        if hasattr(self, "_user_settings"):
            delattr(self, "_user_settings")


api_settings = DataAPISettings(DEFAULTS)
