"""
Django-DataAPI CRUD Routes

The five canonical operations (get, list, new, edit, delete) and the
endpoint bindings that expose them.

Each handler is a stateless coroutine: it extracts nothing itself and
receives the resource instance, the RequestContext, the typed
parameters and the raw body. Any failure aborts the pipeline before the
next store call, and every validation runs before the first write.

Example:
    routes = {
        "get": DefaultRoutes.GET,
        "list": DefaultRoutes.LIST,
        "detailed": with_options(DefaultRoutes.LIST, {"pluckMode": "detailed"}),
        "new": DefaultRoutes.NEW,
    }
"""

import asyncio
import logging

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import NotFoundError, ValidationError, require
from django_dataapi.modifiers import lock_record, unlock_record
from django_dataapi.parameters import (
    delete_parameters,
    edit_parameters,
    get_parameters,
    list_parameters,
    new_parameters,
)
from django_dataapi.properties import read_properties, write_properties
from django_dataapi.query import (
    compile_list,
    delete as delete_query,
    get_model,
    lookup,
    paginate,
    pluck_columns,
    project,
    resolve_foreign,
)
from django_dataapi.validation import check_mandatory, clear_internal, parse_body, validate_values


logger = logging.getLogger("django_dataapi")


class EndpointBinding:
    """
    An operation exposed at an endpoint.

    Attributes:
        handler: Coroutine function (resource, context, params, body) -> result
        method: HTTP method ("get", "post", "put", "delete")
        parameters: Extractor (context, meta) -> params dict
        endpoint: URL segment; defaults to the name the binding is registered under
        options: Dict of option overrides (e.g. {"pluckMode": "detailed"})
    """

    def __init__(self, handler, method, parameters, endpoint=None, options=None):
        self.handler = handler
        self.method = method.lower()
        self.parameters = parameters
        self.endpoint = endpoint
        self.options = dict(options or {})

    def __repr__(self):
        return f"<EndpointBinding {self.method.upper()} {self.handler.__name__} options={self.options!r}>"


def with_options(binding, options=None, endpoint=None):
    """
    Copy of binding with extra option overrides and an optional endpoint.

    Options are merged over the binding's own; the endpoint is kept unless
    a new one is given.
    """
    merged = dict(binding.options)
    merged.update(options or {})
    return EndpointBinding(
        binding.handler,
        binding.method,
        binding.parameters,
        endpoint=endpoint if endpoint is not None else binding.endpoint,
        options=merged,
    )


def _primary_key(table):
    schema = getattr(table, "schema", None)
    return getattr(schema, "primary_key", None) or api_settings.PRIMARY_KEY


async def get_entry(resource, context, params, body=None):
    """Fetch one row by id (or index), resolve references, project readable fields."""
    meta = context.meta
    model = get_model(resource, meta)

    query = lookup(model.table, params["id"], params.get("index"))
    if not params.get("noForeign"):
        query = resolve_foreign(model.database, meta, query)

    row = model.from_database(await query.run())
    require(row is not None, "Not Found", NotFoundError)
    unlock_record(resource, meta, row)

    result = await read_properties(resource, meta, row)
    clear_internal(meta, result)
    return result


async def list_entries(resource, context, params, body=None):
    """Filter, sort, paginate and project rows; count the filtered set concurrently."""
    meta = context.meta
    model = get_model(resource, meta)

    sorting = (params["sortKey"], params.get("sortDirection")) if params.get("sortKey") else None
    query, query_total = compile_list(context, meta, model.table, sorting, params.get("filters"))

    mode = params.get("pluckMode") or api_settings.DEFAULT_LIST_MODE
    columns = None if params.get("noPluck") else pluck_columns(meta, mode)

    if not params.get("noForeign"):
        query = resolve_foreign(model.database, meta, query, columns)

    offset = params.get("offset") or 0
    limit = params.get("limit")
    query_paged = paginate(query, offset, limit)
    if columns is not None:
        query_paged = project(query_paged, columns)

    rows, total = await asyncio.gather(query_paged.run(), query_total.run())

    async def read(row):
        entry = model.from_database(row)
        unlock_record(resource, meta, entry)
        return await read_properties(resource, meta, entry, list_mode=mode if columns is not None else None)

    results = list(await asyncio.gather(*(read(row) for row in rows)))
    clear_internal(meta, results)
    return {"results": results, "total": total, "offset": offset, "limit": limit}


async def new_entry(resource, context, params, body=None):
    """Validate the body, build the record, insert it; return the generated keys."""
    meta = context.meta
    data = parse_body(body)
    if not params.get("noMandatory"):
        check_mandatory(meta, data, "new")
    await validate_values(meta, data)

    model = get_model(resource, meta)
    record = await write_properties(resource, meta, data)
    lock_record(resource, meta, record)

    result = await model.table.insert(record)
    if result.get("errors"):
        raise ValidationError(result.get("first_error", "Insert failed"), code="CREATE_FAILED")
    logger.debug("created %s row(s) in %s", result.get("inserted"), meta.table_name)
    return result.get("generated_keys", [])


async def edit_entry(resource, context, params, body=None):
    """Validate the body, merge it into the stored row, update by primary key."""
    meta = context.meta
    data = parse_body(body)
    if not params.get("noMandatory"):
        check_mandatory(meta, data, "edit")
    await validate_values(meta, data)

    model = get_model(resource, meta)
    previous = model.from_database(await lookup(model.table, params["id"], params.get("index")).run())
    require(previous is not None, "Not Found", NotFoundError)
    unlock_record(resource, meta, previous)

    record = await write_properties(resource, meta, data, previous)
    lock_record(resource, meta, record)

    key = previous.get(_primary_key(model.table), params["id"])
    await model.table.get(key).update(record).run()
    return None


async def delete_entries(resource, context, params, body=None):
    """Delete the rows named by one or more id parameters; return the store acknowledgement."""
    model = get_model(resource, context.meta)
    return await delete_query(model.table, params["id"]).run()


class DefaultRoutes:
    """Ready-made bindings of the five operations."""

    GET = EndpointBinding(get_entry, "get", get_parameters)
    LIST = EndpointBinding(list_entries, "get", list_parameters)
    NEW = EndpointBinding(new_entry, "post", new_parameters)
    EDIT = EndpointBinding(edit_entry, "put", edit_parameters)
    DELETE = EndpointBinding(delete_entries, "delete", delete_parameters)

    ALL = {
        "get": GET,
        "list": LIST,
        "new": NEW,
        "edit": EDIT,
        "delete": DELETE,
    }
