"""apiledger: OpenAPI component registry and path-template matching."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("apiledger")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from apiledger.api import inspect_template, match_route, render_components, TemplateReport
from apiledger.codes import ErrorCode
from apiledger.errors import (
    ApiLedgerError,
    ComponentConflictError,
    ComponentNotFoundError,
    ComponentTypeMismatchError,
    DuplicateUsageKeyError,
    TemplateVariableError,
    UnresolvedReferenceError,
    UriTemplateSyntaxError,
)
from apiledger.kernel.components import ComponentKind, ComponentReference, ConflictPolicy
from apiledger.kernel.extensions import normalize_extensions
from apiledger.kernel.nodes import to_node
from apiledger.kernel.registry import ComponentRegistry, DocumentBuildContext
from apiledger.kernel.resolver import ReferenceResolver, ResolvedUsage, UsageSite
from apiledger.kernel.uri_template import (
    VarSegment,
    VariableExtraction,
    build_variables,
    extract_variables,
    parse_template,
)
from apiledger.settings import DocumentSettings, load_settings

__all__ = [
    "__version__",
    "inspect_template",
    "match_route",
    "render_components",
    "TemplateReport",
    "ErrorCode",
    "ApiLedgerError",
    "ComponentConflictError",
    "ComponentNotFoundError",
    "ComponentTypeMismatchError",
    "DuplicateUsageKeyError",
    "TemplateVariableError",
    "UnresolvedReferenceError",
    "UriTemplateSyntaxError",
    "ComponentKind",
    "ComponentReference",
    "ConflictPolicy",
    "normalize_extensions",
    "to_node",
    "ComponentRegistry",
    "DocumentBuildContext",
    "ReferenceResolver",
    "ResolvedUsage",
    "UsageSite",
    "VarSegment",
    "VariableExtraction",
    "build_variables",
    "extract_variables",
    "parse_template",
    "DocumentSettings",
    "load_settings",
]
