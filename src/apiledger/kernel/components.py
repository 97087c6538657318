"""Component buckets, conflict policy, reference markers and cloning."""

import copy
from enum import Enum
from typing import Any, Dict, Iterator, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class ComponentKind(str, Enum):
    """The fixed component buckets of the ``components`` object.

    Values are the bucket keys used in the rendered document.
    """

    SCHEMAS = "schemas"
    RESPONSES = "responses"
    PARAMETERS = "parameters"
    EXAMPLES = "examples"
    REQUEST_BODIES = "requestBodies"
    HEADERS = "headers"
    SECURITY_SCHEMES = "securitySchemes"
    LINKS = "links"
    CALLBACKS = "callbacks"
    PATH_ITEMS = "pathItems"
    # OpenAPI 3.2 only
    MEDIA_TYPES = "mediaTypes"

    @property
    def label(self) -> str:
        """Singular, human-readable label (e.g. ``request body``)."""
        return _LABELS[self]


_LABELS = {
    ComponentKind.SCHEMAS: "schema",
    ComponentKind.RESPONSES: "response",
    ComponentKind.PARAMETERS: "parameter",
    ComponentKind.EXAMPLES: "example",
    ComponentKind.REQUEST_BODIES: "request body",
    ComponentKind.HEADERS: "header",
    ComponentKind.SECURITY_SCHEMES: "security scheme",
    ComponentKind.LINKS: "link",
    ComponentKind.CALLBACKS: "callback",
    ComponentKind.PATH_ITEMS: "path item",
    ComponentKind.MEDIA_TYPES: "media type",
}


class ConflictPolicy(str, Enum):
    """What ``add`` does when the name already exists in the bucket.

    - OVERWRITE: replace the existing value (no merge of sub-fields)
    - IGNORE: keep the existing value; ``add`` returns False
    - ERROR: raise ComponentConflictError; the bucket is unchanged
    """

    OVERWRITE = "overwrite"
    IGNORE = "ignore"
    ERROR = "error"


class ComponentReference(BaseModel):
    """Reference marker: a by-name pointer to a shared component."""
    kind: ComponentKind
    name: str

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def ref(self) -> str:
        """JSON pointer to the component, e.g. ``#/components/schemas/Pet``."""
        return f"#/components/{self.kind.value}/{self.name}"

    def to_node(self) -> Dict[str, str]:
        """Render as a ``$ref`` object."""
        return {"$ref": self.ref}

    def __document_node__(self) -> Dict[str, str]:
        """Conversion hook used by to_node()."""
        return self.to_node()


class ComponentStore(BaseModel):
    """One ordered name -> value mapping per component bucket.

    Names are unique within a bucket; the same name may label components
    in different buckets.
    """
    schemas: Dict[str, Any] = Field(default_factory=dict)
    responses: Dict[str, Any] = Field(default_factory=dict)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    examples: Dict[str, Any] = Field(default_factory=dict)
    request_bodies: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, Any] = Field(default_factory=dict)
    security_schemes: Dict[str, Any] = Field(default_factory=dict)
    links: Dict[str, Any] = Field(default_factory=dict)
    callbacks: Dict[str, Any] = Field(default_factory=dict)
    path_items: Dict[str, Any] = Field(default_factory=dict)
    media_types: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    def bucket(self, kind: ComponentKind) -> Dict[str, Any]:
        """Return the backing mapping for a bucket."""
        match kind:
            case ComponentKind.SCHEMAS:
                return self.schemas
            case ComponentKind.RESPONSES:
                return self.responses
            case ComponentKind.PARAMETERS:
                return self.parameters
            case ComponentKind.EXAMPLES:
                return self.examples
            case ComponentKind.REQUEST_BODIES:
                return self.request_bodies
            case ComponentKind.HEADERS:
                return self.headers
            case ComponentKind.SECURITY_SCHEMES:
                return self.security_schemes
            case ComponentKind.LINKS:
                return self.links
            case ComponentKind.CALLBACKS:
                return self.callbacks
            case ComponentKind.PATH_ITEMS:
                return self.path_items
            case ComponentKind.MEDIA_TYPES:
                return self.media_types
        raise ValueError(f"Unknown component kind: {kind!r}")

    def iter_buckets(self) -> Iterator[Tuple[ComponentKind, Dict[str, Any]]]:
        """Yield (kind, bucket) pairs in ComponentKind order."""
        for kind in ComponentKind:
            yield kind, self.bucket(kind)

    def __len__(self) -> int:
        return sum(len(bucket) for _, bucket in self.iter_buckets())


def clone_component(value: T) -> T:
    """Return a deep, mutation-safe copy of a component value."""
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    return copy.deepcopy(value)
