"""
Django-DataAPI In-Memory Store

An asyncio, in-process implementation of the store algebra. Useful for
tests, fixtures and prototyping a resource before it is bound to a real
document store.

Queries are composed lazily: each step wraps the previous step's fetch
coroutine, and nothing is evaluated until the query is awaited. Rows are
deep-copied on the way in and out, so callers never alias stored data.

Example:
    db = MemoryDatabase(tables=[TableSchema("items", indexes={"name": ["name"]})])
    await db.table("items").insert([{"name": "A", "price": 1}])
    rows = await db.table("items").all().filter(lambda r: r["price"] > 0).order_by("name")
"""

import asyncio
import copy
import datetime
import inspect
import logging
import uuid

from django_dataapi.exceptions import ConfigurationError, ValidationError
from django_dataapi.store.base import RowQuery, StoreDatabase, StoreTable, StreamQuery, TableSchema


logger = logging.getLogger("django_dataapi.store")


async def _apply(func, value):
    result = func(value)
    if inspect.isawaitable(result):
        result = await result
    return result


def sort_key(value):
    """
    Total ordering key across value types.

    None sorts first, then booleans, numbers, dates, strings (case-insensitive
    first, then exact), then anything else by repr.

    Examples:
        >>> sorted(["b", None, 2, "A"], key=sort_key)
        [None, 2, 'A', 'b']
    """
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime.datetime):
        return (3, value.timestamp())
    if isinstance(value, datetime.date):
        return (3, datetime.datetime.combine(value, datetime.time()).timestamp())
    if isinstance(value, str):
        return (4, value.casefold(), value)
    return (5, repr(value))


class MemoryRow(RowQuery):
    """Single-row query over a MemoryTable."""

    def __init__(self, fetch, table=None):
        self._fetch = fetch
        self._table = table

    async def run(self):
        return await self._fetch()

    def do(self, func):
        async def fetch():
            return await _apply(func, await self._fetch())

        return MemoryRow(fetch, self._table)

    def default(self, value):
        async def fetch():
            row = await self._fetch()
            return value if row is None else row

        return MemoryRow(fetch, self._table)

    def pluck(self, *fields):
        async def fetch():
            return _pluck(await self._fetch(), fields)

        return MemoryRow(fetch, self._table)

    def update(self, data):
        async def fetch():
            row = await self._fetch()
            if row is None:
                return _write_result(skipped=1)
            return self._table._update(row, data)

        return MemoryRow(fetch, self._table)

    def delete(self):
        async def fetch():
            row = await self._fetch()
            if row is None:
                return _write_result(skipped=1)
            return self._table._delete([row])

        return MemoryRow(fetch, self._table)


class MemoryStream(StreamQuery):
    """Row-stream query over a MemoryTable."""

    def __init__(self, fetch, table=None):
        self._fetch = fetch
        self._table = table

    async def run(self):
        return await self._fetch()

    def _chain(self, step):
        async def fetch():
            return await step(await self._fetch())

        return MemoryStream(fetch, self._table)

    def filter(self, predicate):
        async def step(rows):
            keep = await asyncio.gather(*(_apply(predicate, row) for row in rows))
            return [row for row, ok in zip(rows, keep) if ok]

        return self._chain(step)

    def order_by(self, field, direction="asc", index=False):
        async def step(rows):
            # list.sort is stable, so indexed and unindexed scans agree
            return sorted(rows, key=lambda row: sort_key(row.get(field)), reverse=direction == "desc")

        return self._chain(step)

    def slice(self, start, end=None):
        async def step(rows):
            return rows[start:end]

        return self._chain(step)

    def pluck(self, *fields):
        async def step(rows):
            return [_pluck(row, fields) for row in rows]

        return self._chain(step)

    def map(self, func):
        async def step(rows):
            return list(await asyncio.gather(*(_apply(func, row) for row in rows)))

        return self._chain(step)

    def count(self):
        async def fetch():
            return len(await self._fetch())

        return MemoryRow(fetch, self._table)

    def nth(self, position):
        async def fetch():
            rows = await self._fetch()
            try:
                return rows[position]
            except IndexError:
                return None

        return MemoryRow(fetch, self._table)

    def delete(self):
        async def fetch():
            return self._table._delete(await self._fetch())

        return MemoryRow(fetch, self._table)


class MemoryTable(StoreTable):
    """A table stored in a dict keyed by primary key, in insertion order."""

    def __init__(self, schema):
        self.schema = schema
        self._rows = {}

    @property
    def primary_key(self):
        return self.schema.primary_key

    def _snapshot(self, rows):
        return [copy.deepcopy(row) for row in rows]

    def get(self, key):
        async def fetch():
            row = self._rows.get(key)
            return copy.deepcopy(row) if row is not None else None

        return MemoryRow(fetch, self)

    def get_all(self, *keys, index=None):
        async def fetch():
            if index is None or index == self.primary_key:
                return self._snapshot(self._rows[key] for key in dict.fromkeys(keys) if key in self._rows)
            matcher = self._index_matcher(index, keys)
            return self._snapshot(row for row in self._rows.values() if matcher(row))

        return MemoryStream(fetch, self)

    def all(self):
        async def fetch():
            return self._snapshot(self._rows.values())

        return MemoryStream(fetch, self)

    def _index_matcher(self, index, keys):
        if index not in self.schema.indexes:
            raise ValidationError(f"Index `{index}` was not found on table `{self.schema.name}`")
        columns = list(self.schema.indexes[index])
        multi = index in self.schema.multi_indexes

        def matches(row):
            if len(columns) == 1:
                value = row.get(columns[0])
                if multi and isinstance(value, list):
                    return any(item in keys for item in value)
                return value in keys
            compound = [row.get(column) for column in columns]
            return any(list(key) == compound for key in keys if isinstance(key, (list, tuple)))

        return matches

    async def insert(self, data):
        rows = data if isinstance(data, list) else [data]
        result = _write_result()
        for row in rows:
            row = copy.deepcopy(row)
            key = row.get(self.primary_key)
            if key is None:
                key = str(uuid.uuid4())
                row[self.primary_key] = key
                result.setdefault("generated_keys", []).append(key)
            if key in self._rows:
                result["errors"] += 1
                result.setdefault("first_error", f"Duplicate primary key `{self.primary_key}`: {key!r}")
                continue
            self._rows[key] = row
            result["inserted"] += 1
        logger.debug("insert into %s: %s", self.schema.name, result)
        return result

    def _update(self, row, data):
        key = row[self.primary_key]
        stored = self._rows.get(key)
        if stored is None:
            return _write_result(skipped=1)
        merged = dict(stored)
        merged.update(copy.deepcopy(data))
        merged[self.primary_key] = key
        if merged == stored:
            return _write_result(unchanged=1)
        self._rows[key] = merged
        return _write_result(replaced=1)

    def _delete(self, rows):
        result = _write_result()
        for row in rows:
            if self._rows.pop(row.get(self.primary_key), None) is None:
                result["skipped"] += 1
            else:
                result["deleted"] += 1
        logger.debug("delete from %s: %s", self.schema.name, result)
        return result


class MemoryDatabase(StoreDatabase):
    """
    A set of MemoryTables.

    Args:
        name: Database name
        tables: Iterable of TableSchema (or table names) created up front
    """

    def __init__(self, name="default", tables=()):
        self.name = name
        self._tables = {}
        for schema in tables:
            self.create_table(schema)

    def create_table(self, schema):
        if isinstance(schema, str):
            schema = TableSchema(schema)
        if schema.name not in self._tables:
            self._tables[schema.name] = MemoryTable(schema)
        return self._tables[schema.name]

    def table(self, name):
        try:
            return self._tables[name]
        except KeyError:
            raise ConfigurationError(f"Table `{self.name}.{name}` does not exist") from None


def _pluck(row, fields):
    if row is None:
        return None
    return {field: row[field] for field in fields if field in row}


def _write_result(**counts):
    result = {"inserted": 0, "replaced": 0, "unchanged": 0, "deleted": 0, "skipped": 0, "errors": 0}
    result.update(counts)
    return result
