"""
Django-DataAPI Model Binding

A DataModel ties a resource to one store table. Resources expose it
through the attribute named by their model key.

Example:
    class ItemAPI:
        items = DataModel(database, "items")
"""


class DataModel:
    """
    Handle on a store table.

    Subclasses may override from_database() to turn raw rows into richer
    objects; the CRUD engine only requires that the result supports
    mapping access (row[key], key in row).
    """

    def __init__(self, database, table_name):
        self.database = database
        self.table_name = table_name

    @property
    def table(self):
        return self.database.table(self.table_name)

    @classmethod
    def from_database(cls, row):
        """Deserialize a store row. None passes through."""
        if row is None:
            return None
        return dict(row)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.table_name}>"
