"""Component registry: per-document buckets with conflict policy."""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, overload

from apiledger.errors import (
    ComponentConflictError,
    ComponentNotFoundError,
    ComponentTypeMismatchError,
)
from apiledger.settings import DocumentSettings

from .components import ComponentKind, ComponentReference, ComponentStore, ConflictPolicy
from .nodes import to_node

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ComponentRegistry:
    """Add, check and retrieve components in one ComponentStore."""

    def __init__(
        self,
        store: Optional[ComponentStore] = None,
        settings: Optional[DocumentSettings] = None,
        label: str = "components",
    ):
        self.store = store if store is not None else ComponentStore()
        self.settings = settings if settings is not None else DocumentSettings()
        self.label = label

    def _bucket(self, kind: ComponentKind) -> Dict[str, Any]:
        kind = ComponentKind(kind)
        if kind is ComponentKind.MEDIA_TYPES and not self.settings.supports_media_types:
            raise ValueError(
                f"Media type components require OpenAPI 3.2 "
                f"(document targets {self.settings.openapi_version})"
            )
        return self.store.bucket(kind)

    def add(
        self,
        kind: ComponentKind,
        name: str,
        value: Any,
        policy: Optional[ConflictPolicy] = None,
    ) -> bool:
        """Register a value under a name in the bucket for kind.

        Args:
            kind: Target bucket
            name: Component name (unique within the bucket)
            value: Component value (stored as-is, not copied)
            policy: Conflict policy; defaults to the settings' policy

        Returns:
            True if the value was stored, False if IGNORE kept an existing value

        Raises:
            ComponentConflictError: If the name exists and policy is ERROR
            ValueError: If name is blank or value is None
        """
        if name is None or not str(name).strip():
            raise ValueError(f"Component name must be a non-empty string, got {name!r}")
        if value is None:
            raise ValueError(f"Component value for '{name}' must not be None")

        policy = ConflictPolicy(policy) if policy is not None else self.settings.conflict_policy
        bucket = self._bucket(kind)
        kind = ComponentKind(kind)

        if name not in bucket:
            bucket[name] = value
            return True

        match policy:
            case ConflictPolicy.OVERWRITE:
                logger.debug("overwriting %s %s '%s'", self.label, kind.value, name)
                bucket[name] = value
                return True
            case ConflictPolicy.IGNORE:
                logger.debug("keeping existing %s %s '%s'", self.label, kind.value, name)
                return False
            case ConflictPolicy.ERROR:
                logger.warning("duplicate %s %s '%s'", self.label, kind.value, name)
                raise ComponentConflictError(kind.value, name)
        raise ValueError(f"Unknown conflict policy: {policy!r}")

    def exists(self, kind: ComponentKind, name: str) -> bool:
        """Check whether a name is registered in the bucket for kind."""
        return name in self._bucket(kind)

    @overload
    def get(self, kind: ComponentKind, name: str) -> Any: ...

    @overload
    def get(self, kind: ComponentKind, name: str, expected_type: Type[T]) -> T: ...

    def get(self, kind, name, expected_type=None):
        """Return the stored value.

        Raises:
            ComponentNotFoundError: If the name is not in the bucket
            ComponentTypeMismatchError: If expected_type is given and does not match
        """
        bucket = self._bucket(kind)
        kind = ComponentKind(kind)
        if name not in bucket:
            raise ComponentNotFoundError(kind.value, name)
        value = bucket[name]
        if expected_type is not None and not isinstance(value, expected_type):
            raise ComponentTypeMismatchError(kind.value, name, expected_type, type(value))
        return value

    def try_get(self, kind: ComponentKind, name: str) -> Optional[Any]:
        """Return the stored value, or None if absent."""
        return self._bucket(kind).get(name)

    def remove(self, kind: ComponentKind, name: str) -> bool:
        """Remove a component; returns False if it was not registered."""
        bucket = self._bucket(kind)
        if name not in bucket:
            return False
        del bucket[name]
        return True

    def names(self, kind: ComponentKind) -> List[str]:
        """Names registered in a bucket, in insertion order."""
        return list(self._bucket(kind))

    def __len__(self) -> int:
        return len(self.store)

    def __contains__(self, item: Any) -> bool:
        if not isinstance(item, ComponentReference):
            return False
        return self.exists(item.kind, item.name)


class DocumentBuildContext:
    """State owned by one in-progress document build.

    Holds the document's shared components and the inline candidate pool.
    A context is driven by a single builder; concurrent registration needs
    external synchronization.
    """

    def __init__(self, settings: Optional[DocumentSettings] = None):
        self.settings = settings if settings is not None else DocumentSettings()
        self.components = ComponentRegistry(settings=self.settings, label="components")
        self.inline = ComponentRegistry(settings=self.settings, label="inline components")

    def add_component(self, kind, name, value, policy=None) -> bool:
        return self.components.add(kind, name, value, policy)

    def add_inline(self, kind, name, value, policy=None) -> bool:
        return self.inline.add(kind, name, value, policy)

    def reference(self, kind: ComponentKind, name: str) -> ComponentReference:
        """Build a reference marker to a registered component.

        Raises:
            ComponentNotFoundError: If the component is not registered
        """
        kind = ComponentKind(kind)
        if not self.components.exists(kind, name):
            raise ComponentNotFoundError(kind.value, name)
        return ComponentReference(kind=kind, name=name)

    def render_components(self) -> Dict[str, Dict[str, Any]]:
        """Render the shared components as document nodes.

        Only non-empty buckets are emitted, in ComponentKind order.
        """
        return render_store(self.components.store)


def render_store(store: ComponentStore) -> Dict[str, Dict[str, Any]]:
    """Render a ComponentStore into a ``components`` object."""
    rendered: Dict[str, Dict[str, Any]] = {}
    for kind, bucket in store.iter_buckets():
        if not bucket:
            continue
        out: Dict[str, Any] = {}
        for name, value in bucket.items():
            node = to_node(value)
            if node is not None:
                out[name] = node
        if out:
            rendered[kind.value] = out
    return rendered
