"""
Shared case conversion for API request/response normalization.

The frontend speaks camelCase, backend services and the database speak snake_case.
The gateway renames keys at the boundary; values are never touched.

Splitting is not acronym-aware: every uppercase letter opens a new word
(XMLHttpRequest -> x_m_l_http_request). Downstream services rely on these exact
mappings, so keep them stable.
"""
from __future__ import annotations

import re
from typing import Any, Callable

# An uppercase letter preceded by anything but "_" (never matches at index 0).
_UPPER_BOUNDARY = re.compile(r"(?<=[^_])(?=[A-Z])")
# "_" followed by a lowercase letter or digit. "__x" keeps the first "_".
_UNDERSCORE_WORD = re.compile(r"_([a-z0-9])")


class CircularReferenceError(ValueError):
    """Raised when a structure passed to convert_keys contains itself."""

    def __init__(self, container: Any):
        self.container_type = type(container).__name__
        super().__init__(f"Circular reference detected in {self.container_type}; cannot convert keys")


def to_snake_case(value: Any) -> Any:
    """Convert camelCase/PascalCase to snake_case. Non-strings are returned as-is."""
    if not isinstance(value, str):
        return value
    return _UPPER_BOUNDARY.sub("_", value).lower()


def to_camel_case(value: Any) -> Any:
    """Convert snake_case to camelCase. Non-strings are returned as-is."""
    if not isinstance(value, str):
        return value
    return _UNDERSCORE_WORD.sub(lambda m: m.group(1).upper(), value)


def to_camel_key(s: str) -> str:
    """Convert a single snake_case key to camelCase (first letter lower)."""
    return to_camel_case(s)


def to_snake_key(s: str) -> str:
    """Convert a single camelCase key to snake_case."""
    return to_snake_case(s)


def convert_keys(value: Any, case_fn: Callable[[Any], Any]) -> Any:
    """
    Apply case_fn to every dict key at every nesting level of value.

    dicts become new dicts with renamed keys, lists and tuples become new
    sequences of the same type, length and order. Everything else (primitives,
    None, datetimes, compiled patterns, callables, models...) is returned by
    identity. The input is never mutated.

    Raises CircularReferenceError if a container is reached again while it is
    still being converted. Shared sub-structures that do not form a cycle are fine.
    """
    return _convert(value, case_fn, set())


def _convert(value: Any, case_fn: Callable[[Any], Any], path: set[int]) -> Any:
    if isinstance(value, dict):
        marker = id(value)
        if marker in path:
            raise CircularReferenceError(value)
        path.add(marker)
        try:
            return {case_fn(k): _convert(v, case_fn, path) for k, v in value.items()}
        finally:
            path.discard(marker)

    if isinstance(value, list) or type(value) is tuple:
        marker = id(value)
        if marker in path:
            raise CircularReferenceError(value)
        path.add(marker)
        try:
            items = [_convert(item, case_fn, path) for item in value]
        finally:
            path.discard(marker)
        return items if isinstance(value, list) else tuple(items)

    return value


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase for API responses."""
    return convert_keys(obj, to_camel_case)


def dict_keys_to_snake(obj: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case for API input normalization."""
    return convert_keys(obj, to_snake_case)
