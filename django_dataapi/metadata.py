"""
Django-DataAPI Resource Metadata

The resource descriptor: a plain record of everything the CRUD engine
knows about one resource class. Field access modes, list projections,
sortability, foreign references, validators, filters, the model binding
and the endpoint table all live here.

Descriptors are populated once, at class registration, through the
chainable set_* methods, then sealed. Derived data (readable/writable
partitions and pluck sets) is always recomputed from scratch from the
field table, never patched.

Example:
    meta = ResourceMeta(ItemAPI)
    (meta.set_mode("_id", AccessMode.READ_ONLY)
         .set_listable("_id")
         .set_mode("name", AccessMode.READ_WRITE)
         .set_listable("name")
         .set_sortable("name")
         .set_mandatory("name", ["new", "edit"]))
"""

import enum
from collections import namedtuple

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import ConfigurationError
from django_dataapi.filters import default_filter


class AccessMode(enum.IntFlag):
    """Field access mode. Unset fields are neither read nor written."""

    READ_ONLY = 1
    WRITE_ONLY = 2
    READ_WRITE = 3


ForeignKey = namedtuple("ForeignKey", ["table", "table_type", "index", "multi", "pluck"])
ForeignKey.__new__.__defaults__ = (None, None, False, None)


class FieldData:
    """Configuration of a single resource field."""

    __slots__ = (
        "db_name",
        "mode",
        "listable",
        "mandatory",
        "sortable",
        "foreign",
        "validator",
        "indexable",
        "index_name",
        "getter",
        "setter",
        "default",
    )

    def __init__(self):
        self.db_name = None
        self.mode = None
        self.listable = None
        self.mandatory = None
        self.sortable = None
        self.foreign = None
        self.validator = None
        self.indexable = False
        self.index_name = None
        self.getter = None
        self.setter = None
        self.default = None

    def column(self, name):
        """Store column backing the field called name."""
        return self.db_name or name

    def copy(self):
        """Copy whose listable, mandatory and sortable entries are not shared with this one."""
        clone = FieldData()
        for slot in self.__slots__:
            setattr(clone, slot, getattr(self, slot))
        if self.listable is not None:
            clone.listable = {mode: list(columns) for mode, columns in self.listable.items()}
        if self.mandatory is not None:
            clone.mandatory = set(self.mandatory)
        if self.sortable is not None:
            clone.sortable = dict(self.sortable)
        return clone

    def is_listable(self, mode):
        return bool(self.listable) and mode in self.listable

    def __repr__(self):
        return f"<FieldData mode={self.mode!r} db_name={self.db_name!r}>"


class ResourceMeta:
    """
    Descriptor of one resource class.

    Attributes:
        target: The resource class
        fields: Dict of field name -> FieldData
        filters: Dict of filter name -> filter function, in declaration order
        pluck: Dict of list mode -> list of store columns
        model_key: Resource attribute holding the DataModel binding
        modifier_keys: Dict of ContainerModifier subclass -> resource attribute
        schema_name, table_type, table_name: Table binding
        readable: {"getters": [(name, field)], "props": [(name, field)]}
        writable: {"setters": [(name, field)], "props": [(name, field)]}
        endpoints: Dict of endpoint name -> EndpointBinding
        location: URL segment the endpoints are mounted under
    """

    def __init__(self, target):
        self.target = target
        self.fields = {}
        self.filters = {}
        self.pluck = {}
        self.model_key = None
        self.modifier_keys = {}
        self.schema_name = None
        self.table_type = None
        self.table_name = None
        self.readable = {"getters": [], "props": []}
        self.writable = {"setters": [], "props": []}
        self.endpoints = {}
        self.location = None
        self._sealed = False

    def __repr__(self):
        return f"<ResourceMeta {getattr(self.target, '__name__', self.target)}>"

    @property
    def sealed(self):
        return self._sealed

    def seal(self):
        """Freeze the descriptor. Every later mutation raises ConfigurationError."""
        self._sealed = True
        return self

    def _check_mutable(self):
        if self._sealed:
            raise ConfigurationError(f"{self!r} is sealed and can no longer be modified")

    def field(self, name):
        """Return the FieldData for name, creating it on first reference."""
        if name not in self.fields:
            self._check_mutable()
            self.fields[name] = FieldData()
            self._recompute_listable()
        return self.fields[name]

    # Derived data

    def _recompute_listable(self):
        for mode in self.pluck:
            self.pluck[mode] = []
        for field in self.fields.values():
            if not field.listable:
                continue
            for mode, columns in field.listable.items():
                merged = dict.fromkeys(self.pluck.get(mode, []))
                merged.update(dict.fromkeys(columns))
                self.pluck[mode] = list(merged)

    def _recompute_access(self):
        self.readable = {"getters": [], "props": []}
        self.writable = {"setters": [], "props": []}
        for name, field in self.fields.items():
            if not field.mode:
                continue
            if field.mode & AccessMode.READ_ONLY:
                bucket = "getters" if field.getter is not None else "props"
                self.readable[bucket].append((name, field))
            if field.mode & AccessMode.WRITE_ONLY:
                bucket = "setters" if field.setter is not None else "props"
                self.writable[bucket].append((name, field))

    # Field configuration

    def set_mode(self, name, mode):
        """Set the access mode of a field."""
        self._check_mutable()
        self.field(name).mode = AccessMode(mode) if mode else None
        self._recompute_access()
        return self

    def set_listable(self, name, required=True, mode=None):
        """
        Declare which store columns a field needs in a list mode.

        Args:
            name: Field name
            required: True for the field's own column, False for none,
                or an explicit list of store columns (computed fields)
            mode: List mode (default: DEFAULT_LIST_MODE, "list")
        """
        self._check_mutable()
        field = self.field(name)
        mode = mode or api_settings.DEFAULT_LIST_MODE
        if isinstance(required, bool):
            columns = [field.column(name)] if required else []
        else:
            columns = list(required)
        field.listable = {**(field.listable or {}), mode: columns}
        self._recompute_listable()
        return self

    def set_mandatory(self, name, operations):
        """Require the field in request bodies of the given operations (e.g. "new", "edit")."""
        self._check_mutable()
        self.field(name).mandatory = set(operations)
        return self

    def set_sortable(self, name, active=True, no_index=False):
        """Allow sorting list results by this field. no_index forces an in-memory sort after filtering."""
        self._check_mutable()
        self.field(name).sortable = {"indexed": not no_index} if active else None
        return self

    def set_foreign(self, name, table, index=None, multi=False, pluck=None, table_type=None):
        """Declare the field as a reference to rows of another table."""
        self._check_mutable()
        self.field(name).foreign = ForeignKey(
            table, table_type=table_type, index=index, multi=bool(multi), pluck=list(pluck) if pluck else None
        )
        return self

    def set_validator(self, name, validator=None):
        """Set the value validator of a field. validator(value) returns a bool or an awaitable bool."""
        self._check_mutable()
        self.field(name).validator = validator
        return self

    def set_descriptor(self, name, getter=None, setter=None):
        """
        Attach computed accessors to a field.

        getter(view) computes the output value from a RecordView of the copied props; setter(record, value)
        writes into the outgoing store record. Either may be a coroutine function.
        """
        self._check_mutable()
        field = self.field(name)
        field.getter = getter
        field.setter = setter
        self._recompute_access()
        return self

    def set_db_name(self, name, db_name):
        """Back the field with a store column of a different name."""
        self._check_mutable()
        self.field(name).db_name = db_name
        return self

    def set_default(self, name, value):
        """Default written on creation. Callables are called for each new row."""
        self._check_mutable()
        self.field(name).default = value
        return self

    def set_filter(self, name, func=None, index=False):
        """
        Declare a list filter.

        Args:
            name: Filter name, read from the filter_<name> query parameter
            func: func(context, value, key, raw_value, mode, row) -> bool.
                Defaults to the eq/ne/gt/ge/lt/le comparison filter.
            index: Allow equality lookups through a store index. Only takes
                effect when the table has exactly one single-column, non-multi index
                over the field's column.
        """
        self._check_mutable()
        self.filters[name] = func or default_filter
        if index or name in self.fields:
            field = self.field(name)
            field.indexable = False
            field.index_name = None
            if index and self.table_type is not None:
                matching = [
                    index
                    for index in self.table_type.single_column_indexes(field.column(name))
                    if index not in self.table_type.multi_indexes
                ]
                if len(matching) == 1:
                    field.indexable = True
                    field.index_name = matching[0]
        return self

    # Resource configuration

    def set_model_key(self, name):
        """Set the resource attribute holding the DataModel binding."""
        self._check_mutable()
        self.model_key = name
        return self

    def set_modifier_key(self, name, modifier_class):
        """Set the resource attribute holding the key of a container modifier."""
        self._check_mutable()
        self.modifier_keys[modifier_class] = name
        return self

    def set_table(self, table_type, schema_name="default"):
        """Bind the descriptor to a store table."""
        self._check_mutable()
        self.table_type = table_type
        self.table_name = table_type.name
        self.schema_name = schema_name
        return self

    def add_endpoint(self, name, binding=None):
        """Register an endpoint binding. Passing None removes the endpoint."""
        self._check_mutable()
        if binding is None:
            self.endpoints.pop(name, None)
        else:
            self.endpoints[name] = binding
        return self

    def inherit(self, parent):
        """
        Merge a parent descriptor into this one.

        Entries already present locally win. List values are concatenated.
        Derived partitions and pluck sets are recomputed afterwards, so
        calling inherit twice with the same parent changes nothing.
        """
        self._check_mutable()
        _merge(parent.filters, self.filters)
        _merge({name: field.copy() for name, field in parent.fields.items()}, self.fields)
        for mode in parent.pluck:
            self.pluck.setdefault(mode, [])
        if self.model_key is None:
            self.model_key = parent.model_key
        for modifier_class, name in parent.modifier_keys.items():
            self.modifier_keys.setdefault(modifier_class, name)
        _merge(parent.endpoints, self.endpoints)
        if self.table_type is None:
            self.table_type = parent.table_type
            self.table_name = parent.table_name
            self.schema_name = parent.schema_name
        self._recompute_listable()
        self._recompute_access()
        return self


def _merge(src, dst):
    for key, value in src.items():
        if key not in dst:
            dst[key] = value
        elif isinstance(dst[key], list) and isinstance(value, list):
            dst[key].extend(item for item in value if item not in dst[key])
