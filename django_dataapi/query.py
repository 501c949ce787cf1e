"""
Django-DataAPI Query Compiler

Builds store queries from typed request parameters and a resource
descriptor: single-row lookups, foreign reference resolution, filtered
and sorted list streams, pagination, column projection and deletes.

Nothing here touches the store; every function returns a lazy query
that the CRUD handlers await.
"""

import asyncio
import logging

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import ConfigurationError, require
from django_dataapi.filters import default_filter, filter_index_keys


logger = logging.getLogger("django_dataapi.query")


def get_model(resource, meta):
    """
    Return the DataModel bound to a resource instance.

    Raises:
        ConfigurationError: The descriptor has no model key, or the
            attribute it names is empty
    """
    require(meta.model_key, "Missing model key.", ConfigurationError)
    model = getattr(resource, meta.model_key, None)
    require(model is not None, f"Model attribute '{meta.model_key}' is not set.", ConfigurationError)
    return model


def lookup(table, key, index=None):
    """
    Single-row query by primary key, or first match of a named index.

    Examples:
        >>> lookup(table, "user1")                 # table.get("user1")
        >>> lookup(table, "a@b.c", index="email")  # table.get_all("a@b.c", index="email").nth(0)
    """
    if index:
        return table.get_all(key, index=index).nth(0)
    return table.get(key)


async def _resolve_reference(database, foreign, key):
    if key is None:
        return None
    query = lookup(database.table(foreign.table), key, foreign.index)
    if foreign.pluck:
        query = query.pluck(api_settings.INTERNAL_FIELD, *foreign.pluck)
    row = await query.default(None)
    if row is not None and foreign.table_type is not None:
        row = foreign.table_type.from_database(row)
    return row


def resolve_foreign(database, meta, query, pluck=None):
    """
    Attach foreign reference resolution to a row or stream query.

    Every foreign field's raw key (or array of keys for multi references)
    is replaced by the referenced row(s). A missing single reference
    resolves to None, a missing multi reference to [].

    Args:
        database: StoreDatabase holding the referenced tables
        meta: ResourceMeta
        query: RowQuery or StreamQuery
        pluck: Optional collection of columns; only foreign fields whose
            column is in it are resolved

    Returns:
        The query with the resolution step attached (unchanged when no
        field needs resolving)
    """
    references = []
    for name, field in meta.fields.items():
        column = field.column(name)
        if field.foreign and (pluck is None or column in pluck):
            references.append((column, field.foreign))
    if not references:
        return query

    async def merge(row):
        if row is None:
            return None
        merged = dict(row)
        for column, foreign in references:
            if foreign.multi:
                keys = row.get(column)
                if not isinstance(keys, (list, tuple)):
                    keys = [] if keys is None else [keys]
                merged[column] = list(
                    await asyncio.gather(*(_resolve_reference(database, foreign, key) for key in keys))
                )
            else:
                merged[column] = await _resolve_reference(database, foreign, row.get(column))
        return merged

    return query.transform(merge)


def _index_filter(meta, filters):
    for name, func in meta.filters.items():
        field = meta.fields.get(name)
        if name not in filters or field is None or not field.indexable or func is not default_filter:
            continue
        value, mode = filters[name]
        keys = filter_index_keys(value) if mode == "eq" else None
        if keys is not None:
            return name, field, keys
    return None


def _predicate(context, meta, name, func, value, mode):
    field = meta.fields.get(name)
    column = field.column(name) if field else name

    def predicate(row):
        return func(context, row.get(column), name, value, mode, row)

    return predicate


def compile_list(context, meta, table, sorting=None, filters=None):
    """
    Compile the filtered, sorted row stream of a list request.

    An index-backed sort runs before filtering (ordered index scan); an
    unindexed sort runs after filtering so only kept rows are compared.
    Filters are applied in declaration order, not request order. An eq
    filter on an indexable field narrows the table scan to an index
    lookup over the typed keys the filter value can match, unless an
    index-backed sort already drives the scan. The filter still runs
    over the rows the lookup returns.

    Args:
        context: RequestContext handed to filter functions
        meta: ResourceMeta
        table: StoreTable
        sorting: Optional (field name, "asc"|"desc"|None)
        filters: Optional dict of filter name -> (value, mode)

    Returns:
        Tuple of (stream, total) where total is a count query over the
        whole filtered stream, independent of pagination
    """
    filters = filters or {}
    sort_field = meta.fields.get(sorting[0]) if sorting else None
    sortable = sort_field.sortable if sort_field else None
    if sortable:
        sort_column = sort_field.column(sorting[0])
        direction = sorting[1] or "asc"

    indexed = None
    if not (sortable and sortable["indexed"]):
        indexed = _index_filter(meta, filters)
    if indexed:
        name, field, keys = indexed
        logger.debug("filter %s uses index %s", name, field.index_name)
        stream = table.get_all(*keys, index=field.index_name)
    else:
        stream = table.all()

    if sortable and sortable["indexed"]:
        stream = stream.order_by(sort_column, direction, index=True)

    for name, func in meta.filters.items():
        if name not in filters:
            continue
        value, mode = filters[name]
        stream = stream.filter(_predicate(context, meta, name, func, value, mode))

    if sortable and not sortable["indexed"]:
        stream = stream.order_by(sort_column, direction, index=False)

    return stream, stream.count()


def pluck_columns(meta, mode):
    """
    Store columns required by a list mode.

    Raises:
        ConfigurationError: The descriptor declares no field for the mode
    """
    columns = meta.pluck.get(mode)
    require(columns is not None, f"No fields found for pluckMode '{mode}'", ConfigurationError)
    return columns


def paginate(stream, offset=0, limit=None):
    """Keep limit rows starting at offset. limit=None keeps every remaining row."""
    return stream.slice(offset, offset + limit if limit is not None else None)


def project(query, columns):
    """Restrict rows to columns, always keeping the store's internal column."""
    return query.pluck(api_settings.INTERNAL_FIELD, *columns)


def delete(table, ids):
    """Batched delete for several ids, single-row delete otherwise."""
    if isinstance(ids, (list, tuple)):
        if len(ids) > 1:
            return table.get_all(*ids).delete()
        ids = ids[0]
    return table.get(ids).delete()
