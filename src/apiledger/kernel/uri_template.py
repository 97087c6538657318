"""Restricted URI-template parsing and route-value extraction.

Supported path expressions:

- ``{name}``: simple variable, a single path segment
- ``{+name}``: reserved expansion, may span segments
- ``{name*}``: explode, may span segments
- ``{+name*}``: both

Constraint syntax (``{id:[0-9]+}``) and variable lists (``{a,b}``) are
rejected. Names match ``[A-Za-z0-9_.-]+``.
"""

import re
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from apiledger.codes import ErrorCode
from apiledger.errors import TemplateVariableError, UriTemplateSyntaxError

from .nodes import format_duration

_VAR_NAME = re.compile(r"[A-Za-z0-9_.\-]+")


@dataclass(frozen=True)
class VarSegment:
    """A parsed template variable."""
    name: str
    is_reserved_expansion: bool = False
    is_explode: bool = False

    @property
    def is_multi_segment(self) -> bool:
        """Multi-segment variables may carry ``/`` in their value."""
        return self.is_reserved_expansion or self.is_explode

    def to_expression(self) -> str:
        """Render back to template syntax, e.g. ``{+path}``."""
        prefix = "+" if self.is_reserved_expansion else ""
        suffix = "*" if self.is_explode else ""
        return f"{{{prefix}{self.name}{suffix}}}"


class CaseInsensitiveDict(MutableMapping):
    """Mapping with case-insensitive string keys.

    Iteration yields the most recently written spelling of each key.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs):
        self._store: Dict[str, Tuple[str, Any]] = {}
        self.update(data or {}, **kwargs)

    def __setitem__(self, key: str, value: Any) -> None:
        self._store[key.casefold()] = (key, value)

    def __getitem__(self, key: str) -> Any:
        return self._store[key.casefold()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        other_ci = CaseInsensitiveDict(other)
        return dict(self.lower_items()) == dict(other_ci.lower_items())

    def lower_items(self) -> Iterator[Tuple[str, Any]]:
        return ((k, v) for k, (_, v) in self._store.items())

    def copy(self) -> "CaseInsensitiveDict":
        return CaseInsensitiveDict(dict(self.items()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


def _parse_expression(template: str, expression: str) -> VarSegment:
    """Parse the body of one ``{...}`` expression into a VarSegment."""
    body = expression.strip()
    if not body:
        raise UriTemplateSyntaxError(template, "empty expression '{}' is not supported", expression)
    if ":" in body:
        raise UriTemplateSyntaxError(
            template, "constraint syntax (':') is not supported", expression
        )
    if "," in body:
        raise UriTemplateSyntaxError(
            template, "multiple variables in one expression are not supported", expression
        )

    reserved = body.startswith("+")
    if reserved:
        body = body[1:]
    explode = body.endswith("*")
    if explode:
        body = body[:-1]
    body = body.strip()

    if not body:
        raise UriTemplateSyntaxError(template, "expression has no variable name", expression)
    if not _VAR_NAME.fullmatch(body):
        raise UriTemplateSyntaxError(template, f"invalid variable name '{body}'", expression)

    return VarSegment(name=body, is_reserved_expansion=reserved, is_explode=explode)


def _scan(template: str) -> Iterator[Tuple[str, Optional[str]]]:
    """Split a template into (literal, expression) pairs.

    The expression is None for a trailing literal.

    Raises:
        UriTemplateSyntaxError: On a ``{`` with no closing ``}``
    """
    pos = 0
    while pos < len(template):
        start = template.find("{", pos)
        if start < 0:
            yield template[pos:], None
            return
        end = template.find("}", start + 1)
        if end < 0:
            raise UriTemplateSyntaxError(template, "unterminated expression: missing '}'")
        yield template[pos:start], template[start + 1:end]
        pos = end + 1


def parse_template(template: str) -> List[VarSegment]:
    """Parse a path template into its variable segments, in template order.

    Raises:
        UriTemplateSyntaxError: If the template is outside the supported grammar
    """
    if template is None:
        raise UriTemplateSyntaxError("", "template is empty")
    segments: List[VarSegment] = []
    for _literal, expression in _scan(template):
        if expression is not None:
            segments.append(_parse_expression(template, expression))
    return segments


def to_invariant_text(value: Any) -> str:
    """Render a route value as locale-independent text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, float):
        # repr() is the shortest round-tripping form
        return repr(value)
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    return str(value)


def _lookup(route_values: Mapping[str, Any], name: str) -> Tuple[bool, Any]:
    """Case-insensitive lookup in an externally supplied mapping."""
    if name in route_values:
        return True, route_values[name]
    folded = name.casefold()
    for key, value in route_values.items():
        if isinstance(key, str) and key.casefold() == folded:
            return True, value
    return False, None


class VariableExtraction(BaseModel):
    """Result of matching route values against a template.

    ``variables`` is a CaseInsensitiveDict, so lookups ignore key case.
    """
    ok: bool
    variables: CaseInsensitiveDict = Field(default_factory=CaseInsensitiveDict)  # empty unless ok
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    variable: Optional[str] = None  # offending variable, when known

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("variables", mode="before")
    @classmethod
    def to_case_insensitive(cls, v: Any) -> Any:
        if isinstance(v, Mapping) and not isinstance(v, CaseInsensitiveDict):
            return CaseInsensitiveDict(v)
        return v

    @field_serializer("variables")
    def dump_variables(self, variables: CaseInsensitiveDict) -> Dict[str, str]:
        return dict(variables.items())


def _match(template: str, route_values: Mapping[str, Any]) -> CaseInsensitiveDict:
    """Match route values to the template; raises on any failure."""
    segments = parse_template(template)
    variables = CaseInsensitiveDict()
    for segment in segments:
        found, raw = _lookup(route_values, segment.name)
        if not found or raw is None:
            raise TemplateVariableError(
                template,
                segment.name,
                f"Route value for variable '{segment.name}' is missing "
                f"(template '{template}').",
                ErrorCode.MISSING_VARIABLE,
            )

        text = to_invariant_text(raw)
        if segment.is_multi_segment:
            if text.startswith("/"):
                text = text[1:]
        elif "/" in text:
            raise TemplateVariableError(
                template,
                segment.name,
                f"Variable '{segment.name}' is a single path segment and cannot "
                f"contain '/' (value '{text}', template '{template}').",
                ErrorCode.INVALID_VARIABLE_VALUE,
            )
        variables[segment.name] = text
    return variables


def extract_variables(template: str, route_values: Mapping[str, Any]) -> CaseInsensitiveDict:
    """Map route values onto the template's variables.

    Returns:
        Case-insensitive variable name -> text mapping holding exactly the
        template's variables

    Raises:
        UriTemplateSyntaxError: If the template is malformed
        TemplateVariableError: If a value is missing or crosses a segment boundary
    """
    return _match(template, route_values or {})


def build_variables(template: str, route_values: Optional[Mapping[str, Any]]) -> VariableExtraction:
    """Non-raising form of extract_variables.

    The returned variables are empty whenever ok is False, so a partially
    filled map is never exposed.
    """
    try:
        variables = _match(template, route_values or {})
    except UriTemplateSyntaxError as e:
        return VariableExtraction(ok=False, error=str(e), code=e.code)
    except TemplateVariableError as e:
        return VariableExtraction(ok=False, error=str(e), code=e.code, variable=e.variable)
    return VariableExtraction(ok=True, variables=variables)


class PathTemplateMapping(BaseModel):
    """A path template rewritten for a router."""
    openapi_pattern: str  # query expressions removed
    route_pattern: str  # multi-segment variables use the ':path' converter
    query_parameters: List[str] = Field(default_factory=list)


def _parse_query_names(template: str, expression: str) -> List[str]:
    names = []
    for raw in expression[1:].split(","):
        raw = raw.strip()
        if not raw:
            continue
        name = raw[:-1] if raw.endswith("*") else raw
        if not _VAR_NAME.fullmatch(name):
            raise UriTemplateSyntaxError(
                template, f"invalid variable name '{name}' in query expression", expression
            )
        names.append(name)
    if not names:
        raise UriTemplateSyntaxError(
            template, "query expression must include at least one variable", expression
        )
    return names


def map_route_pattern(template: str) -> PathTemplateMapping:
    """Rewrite a path template into a router pattern.

    ``{name}`` stays a single-segment parameter, multi-segment variables become
    ``{name:path}``. Query expressions (``{?a,b}``, ``{&c}``) are removed from
    the path and their names collected.

    Raises:
        UriTemplateSyntaxError: On fragment expressions, malformed expressions,
            or a template that leaves no path
    """
    if template is None or not template.strip():
        raise UriTemplateSyntaxError(template or "", "template is empty")

    openapi_parts: List[str] = []
    route_parts: List[str] = []
    query: List[str] = []

    for literal, expression in _scan(template):
        openapi_parts.append(literal)
        route_parts.append(literal)
        if expression is None:
            continue
        body = expression.strip()
        if body.startswith("#"):
            raise UriTemplateSyntaxError(
                template, "fragment expressions ('#') are not supported", expression
            )
        if body[:1] in ("?", "&"):
            query.extend(_parse_query_names(template, body))
            continue
        segment = _parse_expression(template, expression)
        openapi_parts.append(segment.to_expression())
        route_parts.append(
            f"{{{segment.name}:path}}" if segment.is_multi_segment else f"{{{segment.name}}}"
        )

    openapi_pattern = "".join(openapi_parts)
    if not openapi_pattern.strip():
        raise UriTemplateSyntaxError(template, "template resolved to an empty path")

    return PathTemplateMapping(
        openapi_pattern=openapi_pattern,
        route_pattern="".join(route_parts),
        query_parameters=query,
    )
