"""Public API for the apiledger package.

High-level functions that return complete, structured results.
Callers should use these functions instead of importing from _internal.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from apiledger._internal.canonical_json import canonical_dumps
from apiledger.codes import ErrorCode
from apiledger.errors import UriTemplateSyntaxError
from apiledger.kernel.extensions import normalize_extensions
from apiledger.kernel.registry import DocumentBuildContext
from apiledger.kernel.uri_template import (
    VariableExtraction,
    build_variables,
    map_route_pattern,
    parse_template,
)


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


class TemplateVariable(BaseModel):
    """One variable of an inspected template."""
    name: str
    reserved_expansion: bool
    explode: bool
    multi_segment: bool


class TemplateReport(BaseModel):
    """Stable result model for template inspection."""
    ok: bool
    template: str
    variables: List[TemplateVariable] = Field(default_factory=list)  # template order
    openapi_pattern: Optional[str] = None
    route_pattern: Optional[str] = None
    query_parameters: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    code: Optional[ErrorCode] = None


def inspect_template(template: str) -> TemplateReport:
    """Parse a path template and report its variables and router pattern.

    Query expressions are accepted here (they are collected as query
    parameters); the path variables follow the restricted grammar.
    """
    try:
        mapping = map_route_pattern(template)
        segments = parse_template(mapping.openapi_pattern)
    except UriTemplateSyntaxError as e:
        return TemplateReport(ok=False, template=template or "", error=str(e), code=e.code)

    return TemplateReport(
        ok=True,
        template=template,
        variables=[
            TemplateVariable(
                name=s.name,
                reserved_expansion=s.is_reserved_expansion,
                explode=s.is_explode,
                multi_segment=s.is_multi_segment,
            )
            for s in segments
        ],
        openapi_pattern=mapping.openapi_pattern,
        route_pattern=mapping.route_pattern,
        query_parameters=mapping.query_parameters,
    )


def match_route(template: str, route_values: Optional[Mapping[str, Any]]) -> VariableExtraction:
    """Match live route values against a declared path template.

    Never raises for bad templates or values; check ``ok`` on the result.
    """
    return build_variables(template, route_values)


def normalize_extensions_file(path: Union[str, os.PathLike, Path]) -> Optional[Dict[str, Any]]:
    """Load a JSON object from a file and normalize it as extensions.

    Raises:
        ValueError: If the file does not hold a JSON object
    """
    with open(_normalize_path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Extensions file must hold a JSON object, got {type(data).__name__}")
    return normalize_extensions(data)


def render_components(context: DocumentBuildContext, sort_keys: bool = False) -> str:
    """Render a build context's shared components as canonical JSON."""
    return canonical_dumps(context.render_components(), sort_keys=sort_keys)
