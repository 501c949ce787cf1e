"""
Django-DataAPI Parameter Extraction

Turns a request's query string into the typed parameters of each CRUD
operation.

Each parameter is declared with how to obtain it:
- a converter name: "number", "int", "bool" or "string"
- "multi:<converter>" to read every value of a repeated key
- a callable receiving (context, meta)

Option overrides bound to the endpoint always win over the request.
Absent parameters stay absent; the operation decides what is required.
"""

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import ValidationError, require
from django_dataapi.filters import parse_filter_value


class RequestContext:
    """
    Per-request state handed to extractors, filters and handlers.

    Attributes:
        request: Django HttpRequest (query string in request.GET, raw body in request.body)
        resource: Resource instance serving the request
        meta: ResourceMeta of the resource
        options: Dict of option overrides bound to the endpoint
    """

    def __init__(self, request, resource=None, meta=None, options=None):
        self.request = request
        self.resource = resource
        self.meta = meta
        self.options = dict(options or {})

    def __repr__(self):
        return f"<RequestContext {getattr(self.request, 'path', '')}>"


def _number(key, raw):
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"Invalid number for parameter '{key}': {raw!r}") from None


def _int(key, raw):
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Invalid integer for parameter '{key}': {raw!r}") from None


def _bool(key, raw):
    return raw.lower() not in ("0", "false")


def _string(key, raw):
    return raw


CONVERTERS = {
    "number": _number,
    "int": _int,
    "bool": _bool,
    "string": _string,
}


def get_option_overrides(context):
    """Options bound to the endpoint serving this request."""
    return dict(context.options or {})


def extract_generic(context, meta, extractors):
    """
    Extract the parameters named in extractors.

    Args:
        context: RequestContext
        meta: ResourceMeta
        extractors: Dict of parameter name -> converter name, "multi:<converter>" or callable

    Returns:
        Dict of parameters; option overrides first, then extracted values

    Example:
        >>> extract_generic(ctx, meta, {"offset": "int", "id": "multi:string"})
        {'offset': 20, 'id': ['a', 'b']}
    """
    result = get_option_overrides(context)
    query = context.request.GET
    for key, extractor in extractors.items():
        if key in result:
            continue
        if callable(extractor):
            result[key] = extractor(context, meta)
        elif extractor.startswith("multi:"):
            convert = CONVERTERS[extractor[len("multi:") :]]
            result[key] = [convert(key, raw) for raw in query.getlist(key)]
        else:
            raw = query.get(key)
            if raw is not None:
                result[key] = CONVERTERS[extractor](key, raw)
    return result


def extract_filters(context, meta):
    """
    Read filter_<name> parameters for every filter declared on meta.

    Returns:
        Dict of filter name -> (value, mode)

    Raises:
        ValidationError: A filter value carries an unknown comparison mode
    """
    query = context.request.GET
    result = {}
    for name in meta.filters:
        raw = query.get(f"filter_{name}")
        if raw is not None:
            result[name] = parse_filter_value(name, raw)
    return result


def _non_negative(params, key):
    if key in params and params[key] is not None:
        require(params[key] >= 0, f"Parameter '{key}' must not be negative.")


def list_parameters(context, meta):
    """
    Parameters of the list operation.

    The effective limit is min(limit, maxPage or MAX_PAGE) when a limit is
    requested. Without one it is maxPage, then DEFAULT_LIMIT; when both
    are unset the page is unbounded. A maxPage read from the query string
    can only lower MAX_PAGE; an endpoint option sets it outright.

    Raises:
        ValidationError: Unsortable sortKey, bad sortDirection, bad numbers
    """
    overrides = get_option_overrides(context)
    params = extract_generic(
        context,
        meta,
        {
            "filters": extract_filters,
            "offset": "int",
            "limit": "int",
            "sortKey": "string",
            "sortDirection": "string",
            "pluckMode": "string",
            "noForeign": "bool",
            "noPluck": "bool",
            "maxPage": "int",
        },
    )
    for key in ("offset", "limit", "maxPage"):
        _non_negative(params, key)

    sort_key = params.get("sortKey")
    require(not sort_key or (sort_key in meta.fields and meta.fields[sort_key].sortable), "Field is not sortable.")
    direction = params.get("sortDirection")
    require(direction in (None, "asc", "desc"), f"Invalid sort direction '{direction}'. Accepted: asc, desc")

    if "maxPage" in params and "maxPage" not in overrides:
        params["maxPage"] = min(params["maxPage"], api_settings.MAX_PAGE)
    max_page = params.get("maxPage")
    if params.get("limit"):
        params["limit"] = min(params["limit"], max_page if max_page is not None else api_settings.MAX_PAGE)
    else:
        params["limit"] = max_page if max_page is not None else api_settings.DEFAULT_LIMIT
    return params


def get_parameters(context, meta):
    """Parameters of the get operation: id, index, noForeign."""
    params = extract_generic(context, meta, {"id": "string", "index": "string", "noForeign": "bool"})
    require(params.get("id") and isinstance(params["id"], str), "Missing id.")
    return params


def new_parameters(context, meta):
    """Parameters of the new operation: noMandatory."""
    return extract_generic(context, meta, {"noMandatory": "bool"})


def edit_parameters(context, meta):
    """Parameters of the edit operation: id, index, noMandatory."""
    params = extract_generic(context, meta, {"id": "string", "index": "string", "noMandatory": "bool"})
    require(params.get("id") and isinstance(params["id"], str), "Missing id.")
    return params


def delete_parameters(context, meta):
    """Parameters of the delete operation: one or more id values."""
    params = extract_generic(context, meta, {"id": "multi:string"})
    require(params.get("id") and isinstance(params["id"], list), "Missing id.")
    return params
