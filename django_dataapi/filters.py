"""
Django-DataAPI Filter Utilities

Handles filter_<name> query parameters and the default comparison filter.

Supports:
- Mode prefixes: filter_price=gt:100
- Implicit equality: filter_name=Item B (same as eq:Item B)
- Coercion of the raw string to the stored value's type
"""

import datetime
import operator

from django_dataapi.exceptions import ValidationError


# Comparison modes accepted in filter values
COMPARISONS = ("eq", "ne", "gt", "ge", "lt", "le")

OPERATORS = {
    "eq": operator.eq,
    "ne": operator.ne,
    "gt": operator.gt,
    "ge": operator.ge,
    "lt": operator.lt,
    "le": operator.le,
}


def parse_filter_value(name, raw):
    """
    Split a filter parameter value into (value, mode).

    The mode is the text before the first ':'. Without a ':' (or with
    nothing before it) the whole string is the value and the mode is eq.

    Args:
        name: Filter name, used in error messages
        raw: Raw query-string value

    Returns:
        Tuple of (value, mode)

    Raises:
        ValidationError: The mode is not one of COMPARISONS

    Examples:
        >>> parse_filter_value("price", "gt:100")
        ('100', 'gt')
        >>> parse_filter_value("name", "Item B")
        ('Item B', 'eq')
        >>> parse_filter_value("time", "eq:10:30")
        ('10:30', 'eq')
    """
    mode, sep, value = raw.partition(":")
    if not sep or not mode:
        return raw, "eq"
    if mode not in COMPARISONS:
        raise ValidationError(
            f"Invalid comparison mode '{mode}' for filter '{name}'. Accepted modes: {', '.join(COMPARISONS)}"
        )
    return value, mode


def coerce_filter_value(current, raw):
    """
    Convert a raw filter string to the type of the stored value.

    Args:
        current: Value stored in the row
        raw: Raw filter string

    Returns:
        The converted value, or raw unchanged when no conversion applies

    Raises:
        ValueError: raw cannot be read as the stored value's type

    Examples:
        >>> coerce_filter_value(200, "100")
        100
        >>> coerce_filter_value(1.5, "2")
        2.0
        >>> coerce_filter_value(True, "0")
        False
    """
    if isinstance(current, bool):
        return raw.lower() not in ("0", "false", "")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            return float(raw)
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, datetime.datetime):
        value = datetime.datetime.fromisoformat(raw)
        if current.tzinfo is not None and value.tzinfo is None:
            value = value.replace(tzinfo=current.tzinfo)
        return value
    if isinstance(current, datetime.date):
        return datetime.date.fromisoformat(raw)
    return raw


def filter_index_keys(raw):
    """
    Index keys that can hold a value equal to raw after coercion.

    Covers every stored type coerce_filter_value converts to, so an
    index lookup over these keys keeps each row an eq comparison would
    keep. Returns None when raw reads as a date or datetime: stored
    datetimes may carry any timezone, so no finite key set covers them.

    Examples:
        >>> filter_index_keys("100")
        ['100', 100, 100.0, True]
        >>> filter_index_keys("2024-01-02") is None
        True
    """
    try:
        datetime.datetime.fromisoformat(raw)
    except ValueError:
        pass
    else:
        return None

    keys = [raw]
    for convert in (int, float):
        try:
            keys.append(convert(raw))
        except ValueError:
            pass
    keys.append(raw.lower() not in ("0", "false", ""))
    return keys


def default_filter(context, value, key, raw, mode, row):
    """
    Compare the field's stored value with the filter value.

    A missing stored value only matches ne, as does a value the filter
    cannot be converted to or compared with.

    Args:
        context: RequestContext of the list request
        value: The field's value in the row
        key: Filter name
        raw: Raw filter string
        mode: One of COMPARISONS
        row: The whole row

    Returns:
        bool
    """
    if value is None:
        return mode == "ne"
    try:
        return bool(OPERATORS[mode](value, coerce_filter_value(value, raw)))
    except (TypeError, ValueError):
        return mode == "ne"
