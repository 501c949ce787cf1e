"""
Django-DataAPI Store

The query algebra the CRUD engine compiles into, and an in-memory
implementation of it.
"""

from django_dataapi.store.base import Query, RowQuery, StreamQuery, StoreTable, StoreDatabase, TableSchema
from django_dataapi.store.memory import MemoryDatabase, MemoryTable, sort_key

__all__ = [
    "Query",
    "RowQuery",
    "StreamQuery",
    "StoreTable",
    "StoreDatabase",
    "TableSchema",
    "MemoryDatabase",
    "MemoryTable",
    "sort_key",
]
