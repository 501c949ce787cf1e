"""
Django-DataAPI Field Declarations

Declarative shorthand for the descriptor calls of ResourceMeta. Field
instances placed in a resource class body are translated, in class-body
order, into set_* calls when the class is registered.

Example:
    class ProductAPI:
        _id = Field(mode=AccessMode.READ_ONLY, listable=True, sortable=True)
        name = Field(mode=AccessMode.READ_WRITE, listable=True, mandatory=["new"], filter=True)
        price = Field(mode=AccessMode.READ_WRITE, listable=True, sortable=True, indexed=False,
                      validator=lambda v: isinstance(v, (int, float)))
        label = computed(lambda view: f"{view.name} ({view.price})",
                         mode=AccessMode.READ_ONLY, listable=["name", "price"])
"""

from django_dataapi.metadata import ForeignKey


class Field:
    """
    Declaration of one resource field.

    Args:
        mode: AccessMode; None leaves the field out of reads and writes
        listable: True (own column), False, or list of store columns
        list_modes: List modes listable applies to (default: the default list mode)
        mandatory: Operations requiring the field ("new", "edit")
        sortable: Allow sorting list results by the field
        indexed: Whether a sort on the field is index-backed
        foreign: Table name, ForeignKey, or dict of set_foreign keyword arguments
        validator: value -> bool (or awaitable bool)
        db_name: Store column backing the field
        filter: Declare a filter named after the field
        filter_func: Custom filter function (implies filter)
        filter_index: Allow index lookups for eq filters on the field
        default: Value (or callable) written on creation
        getter: Computed read accessor, getter(view)
        setter: Computed write accessor, setter(record, value)
    """

    def __init__(
        self,
        mode=None,
        listable=None,
        list_modes=None,
        mandatory=(),
        sortable=False,
        indexed=True,
        foreign=None,
        validator=None,
        db_name=None,
        filter=False,
        filter_func=None,
        filter_index=False,
        default=None,
        getter=None,
        setter=None,
    ):
        self.mode = mode
        self.listable = listable
        self.list_modes = list(list_modes or [None])
        self.mandatory = list(mandatory)
        self.sortable = sortable
        self.indexed = indexed
        self.foreign = foreign
        self.validator = validator
        self.db_name = db_name
        self.filter = filter or filter_func is not None
        self.filter_func = filter_func
        self.filter_index = filter_index
        self.default = default
        self.getter = getter
        self.setter = setter

    def __repr__(self):
        return f"<Field mode={self.mode!r}>"

    def apply(self, meta, name):
        """Replay the declaration onto meta as descriptor calls."""
        meta.field(name)
        if self.db_name:
            meta.set_db_name(name, self.db_name)
        if self.getter is not None or self.setter is not None:
            meta.set_descriptor(name, self.getter, self.setter)
        if self.mode:
            meta.set_mode(name, self.mode)
        if self.listable is not None:
            for mode in self.list_modes:
                meta.set_listable(name, self.listable, mode)
        if self.mandatory:
            meta.set_mandatory(name, self.mandatory)
        if self.sortable:
            meta.set_sortable(name, True, no_index=not self.indexed)
        if self.foreign:
            _apply_foreign(meta, name, self.foreign)
        if self.validator is not None:
            meta.set_validator(name, self.validator)
        if self.default is not None:
            meta.set_default(name, self.default)
        if self.filter:
            meta.set_filter(name, self.filter_func, index=self.filter_index)
        return meta


def computed(getter=None, setter=None, **kwargs):
    """Field backed by computed accessors instead of a stored column."""
    return Field(getter=getter, setter=setter, **kwargs)


def _apply_foreign(meta, name, foreign):
    if isinstance(foreign, str):
        meta.set_foreign(name, foreign)
    elif isinstance(foreign, ForeignKey):
        meta.set_foreign(
            name,
            foreign.table,
            index=foreign.index,
            multi=foreign.multi,
            pluck=foreign.pluck,
            table_type=foreign.table_type,
        )
    else:
        meta.set_foreign(name, **foreign)


def collect_fields(cls):
    """Field declarations defined directly on cls, in class-body order."""
    return [(name, value) for name, value in vars(cls).items() if isinstance(value, Field)]
