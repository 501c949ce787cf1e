"""
Django-DataAPI Store Algebra

Abstract interface of the chainable document-store query algebra the
CRUD engine compiles requests into.

A query is either a single-row value (RowQuery) or a row stream
(StreamQuery). Both are lazy and awaitable: nothing touches the store
until the query is awaited. Both share transform(), which attaches a
per-row function regardless of shape (do() for rows, map() for streams).
"""

from abc import ABC, abstractmethod


class TableSchema:
    """
    Declaration of a store table.

    Args:
        name: Table name
        primary_key: Primary key column (default "_id")
        indexes: Dict of index name -> list of columns. A single-column
            index may be declared multi (values are arrays) by listing it
            in multi_indexes.
        multi_indexes: Iterable of index names holding array values

    Example:
        >>> TableSchema("users", indexes={"email": ["email"]})
    """

    def __init__(self, name, primary_key="_id", indexes=None, multi_indexes=()):
        self.name = name
        self.primary_key = primary_key
        self.indexes = dict(indexes or {})
        self.multi_indexes = set(multi_indexes)

    def single_column_indexes(self, column):
        """Names of the indexes covering exactly the given column."""
        return [name for name, columns in self.indexes.items() if list(columns) == [column]]

    def __repr__(self):
        return f"<TableSchema {self.name}>"


class Query(ABC):
    """Lazy, awaitable store query."""

    @abstractmethod
    async def run(self):
        """Evaluate the query against the store."""

    def __await__(self):
        return self.run().__await__()

    @abstractmethod
    def transform(self, func):
        """Attach a per-row transform, whatever the query shape."""


class RowQuery(Query):
    """A query producing a single row (or None)."""

    @abstractmethod
    def do(self, func):
        """Apply func to the row value. func may be a coroutine function."""

    @abstractmethod
    def default(self, value):
        """Replace a missing row with value."""

    @abstractmethod
    def pluck(self, *fields):
        """Restrict the row to the given columns."""

    @abstractmethod
    def update(self, data):
        """Merge data into the stored row."""

    @abstractmethod
    def delete(self):
        """Delete the row."""

    def transform(self, func):
        return self.do(func)


class StreamQuery(Query):
    """A query producing a list of rows."""

    @abstractmethod
    def filter(self, predicate):
        """Keep rows for which predicate(row) is true. predicate may be async."""

    @abstractmethod
    def order_by(self, field, direction="asc", index=False):
        """Order rows by field. index=True requests an index-backed scan."""

    @abstractmethod
    def slice(self, start, end=None):
        """Keep rows in [start, end)."""

    @abstractmethod
    def pluck(self, *fields):
        """Restrict every row to the given columns."""

    @abstractmethod
    def map(self, func):
        """Apply func to every row. func may be a coroutine function."""

    @abstractmethod
    def count(self):
        """RowQuery evaluating to the number of rows."""

    @abstractmethod
    def nth(self, position):
        """RowQuery evaluating to the row at position, or None."""

    @abstractmethod
    def delete(self):
        """Delete every row of the stream."""

    def transform(self, func):
        return self.map(func)


class StoreTable(ABC):
    """A table handle."""

    schema = None

    @abstractmethod
    def get(self, key):
        """RowQuery by primary key."""

    @abstractmethod
    def get_all(self, *keys, index=None):
        """StreamQuery of rows whose primary key (or index) matches one of keys."""

    @abstractmethod
    def all(self):
        """StreamQuery over the whole table."""

    @abstractmethod
    async def insert(self, data):
        """Insert one row or a list of rows."""


class StoreDatabase(ABC):
    """A database handle."""

    @abstractmethod
    def table(self, name):
        """Return the StoreTable called name."""
