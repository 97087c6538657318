"""Centralized canonical JSON serialization.

This module provides a single function for byte-stable JSON rendering of
document nodes: CLI output, rendered components, test snapshots.

Decimal nodes never lose precision: integral values are written as JSON
integers and fractional values as raw number tokens carrying the Decimal's
own digits. Only non-finite Decimals (which JSON cannot express as numbers)
are written as strings.
"""

import json
import uuid
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict


def _prepare(obj: Any, raw_numbers: Dict[str, str], nonce: str) -> Any:
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            return str(obj)
        if obj == obj.to_integral_value():
            return int(obj)
        # json cannot emit a custom number token, so a unique placeholder
        # string is substituted after encoding
        placeholder = f"{nonce}{len(raw_numbers)}"
        raw_numbers[json.dumps(placeholder)] = str(obj)
        return placeholder
    if isinstance(obj, Mapping):
        return {k: _prepare(v, raw_numbers, nonce) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_prepare(v, raw_numbers, nonce) for v in obj]
    return obj


def canonical_dumps(obj: Any, sort_keys: bool = True) -> str:
    """
    Canonical JSON serialization for byte-stable output.

    Rules:
    - UTF-8 encoding
    - Sorted keys (pass sort_keys=False to keep document order)
    - Stable separators (",", ":")
    - Decimals written as numbers without precision loss
    - No trailing whitespace

    Args:
        obj: Document node to serialize
        sort_keys: Sort object keys

    Returns:
        Canonical JSON string
    """
    raw_numbers: Dict[str, str] = {}
    prepared = _prepare(obj, raw_numbers, f"decimal-{uuid.uuid4().hex}-")
    text = json.dumps(
        prepared,
        sort_keys=sort_keys,
        separators=(",", ":"),
        ensure_ascii=False  # UTF-8 encoding
    )
    for quoted, number in raw_numbers.items():
        text = text.replace(quoted, number)
    return text
