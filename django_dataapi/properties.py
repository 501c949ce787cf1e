"""
Django-DataAPI Property Mapping

Maps store rows to API objects (read projection) and API payloads to
store records (write projection), honoring each field's access mode,
store column name and computed accessors.
"""

import inspect
import types


async def _resolve(value):
    if inspect.isawaitable(value):
        value = await value
    return value


class RecordView(types.SimpleNamespace):
    """
    Read-only view handed to computed field getters.

    Its attributes are exactly the plain properties copied so far, so a
    field may take any name. Props are also readable by subscript. The
    raw store row and the resource instance sit under the reserved names
    _row and _resource.

    Example:
        def full_name(view):
            return f"{view.first_name} {view._row['lastName']}"
    """

    def __init__(self, props, row, resource):
        super().__init__(**props)
        self._row = row
        self._resource = resource

    def __getitem__(self, name):
        if name in ("_row", "_resource"):
            raise KeyError(name)
        return self.__dict__[name]

    def __contains__(self, name):
        return name in self.__dict__ and name not in ("_row", "_resource")


async def read_properties(resource, meta, row, list_mode=None):
    """
    Build the API object for a store row.

    Plain properties are copied from their store column; getters are then
    called with a RecordView and awaited when they return an awaitable.

    Args:
        resource: Resource instance
        meta: ResourceMeta
        row: Store row (mapping)
        list_mode: When given, only fields listable in this mode are included

    Returns:
        Dict of field name -> value. Fields whose column is absent from the
        row are left out.
    """
    result = {}
    props = {}
    for name, field in meta.readable["props"]:
        if list_mode and not field.is_listable(list_mode):
            continue
        column = field.column(name)
        if column in row:
            props[name] = row[column]
            result[name] = row[column]

    view = RecordView(props, row, resource)
    for name, field in meta.readable["getters"]:
        if list_mode and not field.is_listable(list_mode):
            continue
        result[name] = await _resolve(field.getter(view))
    return result


async def write_properties(resource, meta, data, previous=None):
    """
    Build the store record for an API payload.

    Args:
        resource: Resource instance
        meta: ResourceMeta
        data: Decoded request body
        previous: Stored row being edited, or None on creation

    Returns:
        Dict ready to insert or update. On creation, declared defaults are
        seeded first (callable defaults are called). Only writable fields
        present in data are written; setters receive the record being built
        and may mutate it freely.
    """
    record = dict(previous) if previous is not None else {}
    if previous is None:
        for name, field in meta.fields.items():
            if field.default is None:
                continue
            default = field.default() if callable(field.default) else field.default
            record[field.column(name)] = default

    for name, field in meta.writable["props"]:
        if name in data:
            record[field.column(name)] = data[name]

    for name, field in meta.writable["setters"]:
        if name in data:
            await _resolve(field.setter(record, data[name]))
    return record
