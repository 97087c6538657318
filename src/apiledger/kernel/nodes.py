"""Type-directed conversion of arbitrary values into document nodes.

A document node is the generic structured form consumed by the document
serializer:

- object: dict with string keys
- array: list (order and duplicates preserved)
- string, boolean
- number: int (signed 64-bit range), float, or Decimal
- absent: None

Types may define ``__document_node__(self)`` to convert themselves.

Conversion never raises. Values that cannot be represented degrade to their
default textual form.
"""

import base64
import dataclasses
import ipaddress
import logging
import numbers
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Protocol, Set, Union, runtime_checkable
from uuid import UUID

from pydantic import AnyUrl, BaseModel
from pydantic_core import Url

logger = logging.getLogger(__name__)

DocumentNode = Union[Dict[str, Any], List[Any], str, int, float, Decimal, bool]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_IDENTIFIER_TYPES = (
    UUID,
    AnyUrl,
    Url,
    PurePath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
)


@runtime_checkable
class DynamicValue(Protocol):
    """A host-provided wrapper around a dynamic value.

    ``base_value`` is the wrapped value (may be None). ``dynamic_properties``
    returns the named properties attached to the wrapper itself.
    """

    @property
    def base_value(self) -> Any: ...

    def dynamic_properties(self) -> Mapping[str, Any]: ...


class _PropertyView:
    """Named-property view kept from a dynamic wrapper."""

    __slots__ = ("properties",)

    def __init__(self, properties: Mapping[str, Any]):
        self.properties = properties


def _is_bare_record(value: Any) -> bool:
    """True when a wrapper's base value carries nothing more specific than the wrapper."""
    return value is None or type(value) is object or isinstance(value, SimpleNamespace)


def _unwrap(value: Any) -> Any:
    """Unwrap dynamic wrappers down to the underlying value.

    The wrapper's named-property view is preserved when its base value is a
    bare record, so dynamic record-like objects still serialize as objects.
    """
    seen = 0
    while isinstance(value, DynamicValue):
        seen += 1
        if seen > 32:
            break
        try:
            base = value.base_value
            properties = value.dynamic_properties()
        except Exception:
            logger.debug("dynamic wrapper %r could not be inspected", type(value).__name__, exc_info=True)
            return value
        if properties and (_is_bare_record(base) or base is value):
            return _PropertyView(properties)
        if base is value:
            break
        value = base
    return value


def to_node(value: Any) -> Optional[DocumentNode]:
    """Convert a value to a document node, or None when it is absent."""
    return _convert(value, set())


def _convert(value: Any, active: Set[int]) -> Optional[DocumentNode]:
    # active holds the ids of containers on the current conversion path
    value = _unwrap(value)
    if value is None:
        return None

    hook = getattr(type(value), "__document_node__", None)
    if hook is not None:
        try:
            return hook(value)
        except Exception:
            logger.debug("__document_node__ failed for %s, using text", type(value).__name__, exc_info=True)
            return _default_text(value)

    if isinstance(value, bool):
        return value

    # Enums may subclass str or int, so they are matched first
    if isinstance(value, Enum):
        return value.name

    if isinstance(value, str):
        return value

    if isinstance(value, numbers.Integral):
        return _integer_node(int(value))

    if isinstance(value, (float, Decimal)):
        return value

    if isinstance(value, numbers.Real):
        return float(value)

    temporal = _temporal_node(value)
    if temporal is not None:
        return temporal

    if isinstance(value, _IDENTIFIER_TYPES):
        return str(value)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")

    if isinstance(value, _PropertyView):
        properties = value.properties
        return _guarded(properties, active, lambda: _object_node(properties.items(), active))

    if isinstance(value, Mapping):
        return _guarded(value, active, lambda: _object_node(value.items(), active))

    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return _guarded(value, active, lambda: _reflect_or_text(value, active))

    if isinstance(value, Iterable):
        return _guarded(value, active, lambda: _array_node(value, active))

    return _guarded(value, active, lambda: _reflect_or_text(value, active))


def _guarded(
    value: Any, active: Set[int], build: Callable[[], DocumentNode]
) -> DocumentNode:
    """Build a container node unless value is already being converted.

    A value met again on its own conversion path is a reference cycle and
    degrades to its default text.
    """
    marker = id(value)
    if marker in active:
        logger.debug("reference cycle through %s, using text", type(value).__name__)
        return _default_text(value)
    active.add(marker)
    try:
        return build()
    finally:
        active.discard(marker)


def _integer_node(value: int) -> Union[int, Decimal]:
    """Keep signed 64-bit integers as int; wider values become exact Decimals."""
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return Decimal(value)


def _temporal_node(value: Any) -> Optional[str]:
    # datetime is a subclass of date, isoformat() covers both
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    return None


def format_duration(value: timedelta) -> str:
    """Format a timedelta as an ISO 8601 duration (e.g. ``P1DT2H3M4.5S``)."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)

    days, rem_us = divmod(total_us, 86400 * 1_000_000)
    hours, rem_us = divmod(rem_us, 3600 * 1_000_000)
    minutes, rem_us = divmod(rem_us, 60 * 1_000_000)
    seconds, micros = divmod(rem_us, 1_000_000)

    out = f"{sign}P"
    if days:
        out += f"{days}D"
    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if seconds or micros:
        if micros:
            frac = f"{micros:06d}".rstrip("0")
            time_part += f"{seconds}.{frac}S"
        else:
            time_part += f"{seconds}S"
    if time_part:
        out += "T" + time_part
    if out in ("P", "-P"):
        return "PT0S"
    return out


def _object_node(items: Iterable[tuple], active: Set[int]) -> Dict[str, Any]:
    obj: Dict[str, Any] = {}
    for key, raw in items:
        if key is None:
            continue
        name = key.name if isinstance(key, Enum) else str(key)
        if not name.strip():
            continue
        node = _convert(raw, active)
        if node is None:
            continue
        obj[name] = node
    return obj


def _array_node(items: Iterable[Any], active: Set[int]) -> List[Any]:
    # None elements stay as JSON null so positions are preserved
    return [_convert(item, active) for item in items]


def _public_properties(value: Any) -> Dict[str, Any]:
    """Collect publicly readable properties of an arbitrary object.

    Properties whose accessor raises are omitted.
    """
    props: Dict[str, Any] = {}

    if isinstance(value, BaseModel):
        names = list(type(value).model_fields)
    elif dataclasses.is_dataclass(value):
        names = [f.name for f in dataclasses.fields(value)]
    else:
        names = [n for n in getattr(value, "__dict__", {}) if not n.startswith("_")]
        for cls in type(value).__mro__:
            for attr, member in vars(cls).items():
                if isinstance(member, property) and not attr.startswith("_") and attr not in names:
                    names.append(attr)

    for name in names:
        if name.startswith("_"):
            continue
        try:
            props[name] = getattr(value, name)
        except Exception:
            logger.debug("skipping property %s.%s: accessor raised", type(value).__name__, name)
    return props


def _reflect_or_text(value: Any, active: Set[int]) -> DocumentNode:
    """Reflect public properties into an object, or fall back to text."""
    try:
        obj = _object_node(_public_properties(value).items(), active)
    except Exception:
        logger.debug("reflection failed for %s, using text", type(value).__name__, exc_info=True)
        obj = {}
    if obj:
        return obj
    return _default_text(value)


def _default_text(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        logger.debug("str() failed for %s", type(value).__name__, exc_info=True)
        return type(value).__name__
