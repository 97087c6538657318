"""Error code constants for apiledger failures.

These constants prevent stringly-typed error codes and ensure
client code matches on the correct failure codes.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes attached to apiledger exceptions and results."""

    # Component registry
    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
    COMPONENT_CONFLICT = "COMPONENT_CONFLICT"
    COMPONENT_TYPE_MISMATCH = "COMPONENT_TYPE_MISMATCH"

    # Reference resolution
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    DUPLICATE_USAGE_KEY = "DUPLICATE_USAGE_KEY"

    # URI templates
    INVALID_TEMPLATE = "INVALID_TEMPLATE"
    MISSING_VARIABLE = "MISSING_VARIABLE"
    INVALID_VARIABLE_VALUE = "INVALID_VARIABLE_VALUE"
