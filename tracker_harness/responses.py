"""Structural parsing of backend response bodies.

Each helper checks the shape a step depends on and raises
MalformedResponseError when the body does not have it, so a step can tell
"the server returned something unusable" apart from "the request failed".
"""

import json
from typing import Any, Union

from tracker_harness.models import RequestErr

Identifier = Union[int, str]


class MalformedResponseError(Exception):
    """Raised when a successful response body has an unexpected shape."""

    pass


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def require_object(body: Any) -> dict[str, Any]:
    """Return body if it is a JSON object."""
    if not isinstance(body, dict):
        raise MalformedResponseError(f"expected a JSON object, got {_type_name(body)}")
    return body


def require_list(body: Any) -> list[Any]:
    """Return body if it is a JSON array."""
    if not isinstance(body, list):
        raise MalformedResponseError(f"expected a JSON array, got {_type_name(body)}")
    return body


def is_identifier(value: Any) -> bool:
    """Numbers and strings are identifiers as long as they are truthy."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, str)) and bool(value)


def extract_id(body: Any) -> Identifier:
    """Return the ``id`` of a created entity.

    Raises:
        MalformedResponseError: If the body is not an object or carries no
            usable identifier.
    """
    obj = require_object(body)
    value = obj.get("id")
    if not is_identifier(value):
        raise MalformedResponseError(f"missing or empty 'id' field (got {value!r})")
    return value


def extract_field(body: Any, key: str) -> Any:
    """Return a truthy field from an object body."""
    obj = require_object(body)
    value = obj.get(key)
    if not value:
        raise MalformedResponseError(f"missing or empty '{key}' field")
    return value


def contains_id(body: Any, identifier: Identifier) -> bool:
    """Check that a list body holds an element whose id equals identifier.

    Raises:
        MalformedResponseError: If the body is not a list.
    """
    items = require_list(body)
    return any(isinstance(item, dict) and item.get("id") == identifier for item in items)


def mismatched_keys(body: Any, expected: dict[str, Any]) -> list[str]:
    """Return the keys of expected not echoed with the same value in body."""
    obj = require_object(body)
    return [key for key, value in expected.items() if key not in obj or obj[key] != value]


def describe_error(outcome: RequestErr) -> str:
    """Render the error part of a failed outcome for a report line."""
    error = outcome.error
    if isinstance(error, dict) and "errorMessage" in error:
        text = str(error["errorMessage"])
    elif isinstance(error, str):
        text = error
    else:
        text = json.dumps(error)

    if outcome.status is None:
        return text
    return f"HTTP {outcome.status}: {text}"
