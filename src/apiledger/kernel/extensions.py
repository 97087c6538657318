"""Specification extension normalization (``x-`` keys)."""

from collections.abc import Mapping
from typing import Any, Dict, Optional

from .nodes import DocumentNode, to_node

EXTENSION_PREFIX = "x-"


def canonical_extension_key(raw_key: str) -> str:
    """Prefix ``x-`` unless the key already starts with it (any case)."""
    if raw_key[:2].lower() == EXTENSION_PREFIX:
        return raw_key
    return EXTENSION_PREFIX + raw_key


def normalize_extensions(raw: Optional[Mapping[Any, Any]]) -> Optional[Dict[str, DocumentNode]]:
    """Normalize a raw name -> value mapping into an extension map.

    Entries with a blank key or a value that converts to nothing are dropped.
    Later entries win when two keys canonicalize to the same name.

    Returns:
        Extension map, or None if no entry survives (so callers never emit
        an empty extensions container)
    """
    if not raw:
        return None

    result: Optional[Dict[str, DocumentNode]] = None
    for raw_key, raw_value in raw.items():
        if raw_key is None:
            continue
        key = str(raw_key)
        if not key.strip():
            continue

        node = to_node(raw_value)
        if node is None:
            continue

        if result is None:
            result = {}
        result[canonical_extension_key(key)] = node

    return result
