"""
Django-DataAPI Container Modifiers

A container modifier is a reversible transform (encryption, key
derivation, ...) applied to a store record before it is written and
reversed after it is read. The transforms themselves belong to the
application; the CRUD engine only calls lock() before insert/update
and unlock() after fetch, once per modifier declared on the resource.

Example:
    class Sealed(ContainerModifier):
        @classmethod
        def lock(cls, key, record):
            record["secret"] = encrypt(key, record["secret"])

        @classmethod
        def unlock(cls, key, record):
            record["secret"] = decrypt(key, record["secret"])

    meta.set_modifier_key("tenant_key", Sealed)
"""


class ContainerModifier:
    """Base class of record transforms keyed by an opaque per-resource key."""

    @classmethod
    def lock(cls, key, record):
        """Transform record in place before it is written."""
        raise NotImplementedError(f"{cls.__name__} does not implement lock()")

    @classmethod
    def unlock(cls, key, record):
        """Reverse lock() in place after record is read."""
        raise NotImplementedError(f"{cls.__name__} does not implement unlock()")


def _modifier_keys(resource, meta):
    for modifier_class, attr in meta.modifier_keys.items():
        yield modifier_class, getattr(resource, attr, None)


def lock_record(resource, meta, record):
    """Apply every declared modifier's lock() to an outgoing record."""
    for modifier_class, key in _modifier_keys(resource, meta):
        modifier_class.lock(key, record)
    return record


def unlock_record(resource, meta, record):
    """
    Apply every declared modifier's unlock() to a fetched record and to
    the rows its foreign references were resolved to.
    """
    if record is None:
        return record
    foreign_names = [name for name, field in meta.fields.items() if field.foreign]
    for modifier_class, key in _modifier_keys(resource, meta):
        modifier_class.unlock(key, record)
        for name in foreign_names:
            nested = record.get(name)
            for sub in nested if isinstance(nested, list) else [nested]:
                if isinstance(sub, dict):
                    modifier_class.unlock(key, sub)
    return record
