"""Exception hierarchy for apiledger."""

from typing import Optional

from apiledger.codes import ErrorCode


class ApiLedgerError(Exception):
    """Base exception for apiledger errors."""
    code: ErrorCode

    def __init__(self, message: str, code: ErrorCode):
        self.code = code
        super().__init__(message)


class ComponentError(ApiLedgerError):
    """Base exception for component registry and resolution errors."""

    def __init__(self, message: str, code: ErrorCode, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(message, code)


class ComponentNotFoundError(ComponentError, KeyError):
    """Raised when a component lookup misses its bucket."""

    def __init__(self, kind: str, name: str):
        super().__init__(
            f"Component '{name}' not found in '{kind}'.",
            ErrorCode.COMPONENT_NOT_FOUND,
            kind,
            name,
        )

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class ComponentConflictError(ComponentError):
    """Raised when a name already exists and the conflict policy is ERROR."""

    def __init__(self, kind: str, name: str):
        super().__init__(
            f"A component in '{kind}' named '{name}' already exists.",
            ErrorCode.COMPONENT_CONFLICT,
            kind,
            name,
        )


class ComponentTypeMismatchError(ComponentError):
    """Raised when a stored component is not of the requested type."""

    def __init__(self, kind: str, name: str, expected: type, found: type):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Component '{name}' in '{kind}' is {found.__name__}, "
            f"expected {expected.__name__}.",
            ErrorCode.COMPONENT_TYPE_MISMATCH,
            kind,
            name,
        )


class UnresolvedReferenceError(ComponentError):
    """Raised when a usage site demands a component that exists nowhere."""

    def __init__(self, kind: str, name: str, inline: bool):
        self.inline = inline
        mode = "inline embedding" if inline else "reference"
        super().__init__(
            f"Component '{name}' requested for {mode} was not found in '{kind}' "
            f"components or inline components.",
            ErrorCode.UNRESOLVED_REFERENCE,
            kind,
            name,
        )


class DuplicateUsageKeyError(ComponentError):
    """Raised when a usage target already contains the local key."""

    def __init__(self, kind: str, name: str, key: str):
        self.key = key
        super().__init__(
            f"Target already contains an entry with the key '{key}' "
            f"(while applying '{kind}' component '{name}').",
            ErrorCode.DUPLICATE_USAGE_KEY,
            kind,
            name,
        )


class UriTemplateSyntaxError(ApiLedgerError, ValueError):
    """Raised when a path template is outside the supported grammar."""

    def __init__(self, template: str, reason: str, expression: Optional[str] = None):
        self.template = template
        self.expression = expression
        self.reason = reason
        where = f" in expression '{{{expression}}}'" if expression is not None else ""
        super().__init__(
            f"Invalid URI template '{template}'{where}: {reason}",
            ErrorCode.INVALID_TEMPLATE,
        )


class TemplateVariableError(ApiLedgerError, ValueError):
    """Raised when route values cannot be matched to a template."""

    def __init__(self, template: str, variable: str, message: str, code: ErrorCode):
        self.template = template
        self.variable = variable
        super().__init__(message, code)
