"""Usage-site resolution: inline clone vs. shared reference.

A usage site names a component and the local key it appears under. Lookup
order is:

1. Inline candidate pool -> private clone (candidates shadow shared
   components of the same name)
2. Document components -> clone when the site demands inline embedding,
   otherwise a ComponentReference marker
3. Not found and inline demanded -> UnresolvedReferenceError
4. Not found otherwise -> soft miss (None)
"""

import logging
from collections.abc import MutableMapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from apiledger.errors import DuplicateUsageKeyError, UnresolvedReferenceError

from .components import ComponentKind, ComponentReference, clone_component
from .registry import DocumentBuildContext

logger = logging.getLogger(__name__)


class UsageSite(BaseModel):
    """A request to consume a named component at some point of the document."""
    reference_id: str  # Registry name of the component
    key: str = ""  # Local key at the usage point; defaults to reference_id
    inline: bool = False  # Demand a private, mutation-safe copy

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def default_key(cls, data: Any) -> Any:
        """Use the reference id as the local key when none is given."""
        if isinstance(data, dict) and not data.get("key"):
            data = {**data, "key": data.get("reference_id", "")}
        return data

    @model_validator(mode="after")
    def validate_names(self) -> "UsageSite":
        if not self.reference_id.strip():
            raise ValueError("reference_id must be a non-empty string")
        return self


class ResolvedUsage(BaseModel):
    """Result of resolving a usage site."""
    key: str
    value: Any  # Cloned component value or ComponentReference
    source: Literal["inline", "component"]

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_reference(self) -> bool:
        return isinstance(self.value, ComponentReference)


class ReferenceResolver:
    """Resolve usage sites against one document build context."""

    def __init__(self, context: DocumentBuildContext):
        self.context = context

    def resolve(self, site: UsageSite, kind: ComponentKind) -> Optional[ResolvedUsage]:
        """Resolve a usage site.

        Returns:
            ResolvedUsage, or None when the component is missing and the site
            did not demand inline embedding

        Raises:
            UnresolvedReferenceError: If the site demands inline embedding of a
                component that exists in neither pool
        """
        kind = ComponentKind(kind)
        name = site.reference_id

        candidate = self.context.inline.try_get(kind, name)
        if candidate is not None:
            return ResolvedUsage(key=site.key, value=clone_component(candidate), source="inline")

        shared = self.context.components.try_get(kind, name)
        if shared is not None:
            if site.inline:
                value = clone_component(shared)
            else:
                value = ComponentReference(kind=kind, name=name)
            return ResolvedUsage(key=site.key, value=value, source="component")

        if site.inline:
            raise UnresolvedReferenceError(kind.value, name, inline=True)

        logger.debug("soft miss for %s '%s'", kind.label, name)
        return None

    def require(self, site: UsageSite, kind: ComponentKind) -> ResolvedUsage:
        """Resolve a usage site; a miss is always an error."""
        resolved = self.resolve(site, kind)
        if resolved is None:
            raise UnresolvedReferenceError(ComponentKind(kind).value, site.reference_id, inline=site.inline)
        return resolved

    def apply(self, target: MutableMapping, site: UsageSite, kind: ComponentKind) -> bool:
        """Resolve a usage site and place the result under its local key.

        Returns:
            True if an entry was added, False on a soft miss

        Raises:
            DuplicateUsageKeyError: If target already holds the local key
            UnresolvedReferenceError: As for resolve()
        """
        if site.key in target:
            raise DuplicateUsageKeyError(ComponentKind(kind).value, site.reference_id, site.key)
        resolved = self.resolve(site, kind)
        if resolved is None:
            return False
        target[resolved.key] = resolved.value
        return True
