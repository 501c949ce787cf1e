"""
Django-DataAPI Validation

Request body checks run before any store mutation, and output cleanup
run after projection.

Each check collects every offending field before failing, so callers
see all problems of a category in one response.
"""

import inspect
import json

from django_dataapi.conf import api_settings
from django_dataapi.exceptions import ValidationError


def parse_body(body):
    """
    Decode a JSON request body into a dict.

    Args:
        body: Raw request body (bytes or str)

    Returns:
        Dict of the decoded object

    Raises:
        ValidationError: The body is not valid JSON or not a JSON object
    """
    try:
        data = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body", code="INVALID_JSON") from None
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", code="INVALID_JSON")
    return data


def check_mandatory(meta, data, operation):
    """
    Fail when fields mandatory for operation are absent from data.

    Raises:
        ValidationError: "Missing mandatory fields: a, b"
    """
    missing = [
        name for name, field in meta.fields.items() if field.mandatory and operation in field.mandatory and name not in data
    ]
    if missing:
        raise ValidationError(f"Missing mandatory fields: {', '.join(missing)}")


async def validate_values(meta, data):
    """
    Run the validator of every field present in data.

    Validators may return a bool or an awaitable bool. Fields without a
    validator, and keys of data that are not fields, are not checked.

    Raises:
        ValidationError: "Invalid field type(s): a, b"
    """
    invalid = []
    for name, field in meta.fields.items():
        if field.validator is None or name not in data:
            continue
        ok = field.validator(data[name])
        if inspect.isawaitable(ok):
            ok = await ok
        if not ok:
            invalid.append(name)
    if invalid:
        raise ValidationError(f"Invalid field type(s): {', '.join(invalid)}")


def clear_internal(meta, results):
    """
    Remove the store's bookkeeping column from results and from the rows
    their foreign references were resolved to.

    Args:
        meta: ResourceMeta
        results: A projected object or a list of them

    Returns:
        results, modified in place
    """
    internal = api_settings.INTERNAL_FIELD
    foreign_names = [name for name, field in meta.fields.items() if field.foreign]
    for entry in results if isinstance(results, list) else [results]:
        entry.pop(internal, None)
        for name in foreign_names:
            nested = entry.get(name)
            for sub in nested if isinstance(nested, list) else [nested]:
                if isinstance(sub, dict):
                    sub.pop(internal, None)
    return results
