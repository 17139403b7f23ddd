"""Shared utilities for the gateway."""
from utils.case import (
    CircularReferenceError,
    convert_keys,
    dict_keys_to_camel,
    dict_keys_to_snake,
    to_camel_case,
    to_camel_key,
    to_snake_case,
    to_snake_key,
)

__all__ = [
    "CircularReferenceError",
    "convert_keys",
    "to_camel_case",
    "to_snake_case",
    "to_camel_key",
    "to_snake_key",
    "dict_keys_to_camel",
    "dict_keys_to_snake",
]
