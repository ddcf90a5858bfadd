"""Remote descriptor resolution.

Provides a registry-backed resolver and the per-call-chain context used by the
synthesizers to resolve RemoteReference nodes without recursing forever on
self-referential definitions.
"""

import logging
from dataclasses import dataclass, field, replace

from propgen.models.descriptors import (
    DescriptorResolver,
    RemoteReference,
    TypeDescriptor,
)

logger = logging.getLogger(__name__)


class DescriptorRegistry:
    """In-memory resolver mapping (owner, type name) to descriptors."""

    def __init__(self, definitions: dict[str, TypeDescriptor] | None = None):
        """Initialize the registry.

        Args:
            definitions: Optional owner name -> descriptor map registered under type name "t"
        """
        self._definitions: dict[tuple[str, str], TypeDescriptor] = {}
        for owner_name, descriptor in (definitions or {}).items():
            self.register(owner_name, descriptor)

    def register(self, owner_name: str, descriptor: TypeDescriptor, type_name: str = "t") -> None:
        self._definitions[(owner_name, type_name)] = descriptor

    def unregister(self, owner_name: str, type_name: str = "t") -> None:
        self._definitions.pop((owner_name, type_name), None)

    def __call__(self, reference: RemoteReference) -> TypeDescriptor | None:
        return self._definitions.get(reference.key)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


@dataclass(frozen=True)
class ResolutionContext:
    """Resolver plus the references being resolved on the current call chain."""

    resolver: DescriptorResolver | None = None
    visiting: frozenset[tuple[str, str]] = field(default_factory=frozenset)

    def resolve(
        self, reference: RemoteReference
    ) -> tuple[TypeDescriptor | None, "ResolutionContext"]:
        """Resolve a reference for one step of recursion.

        Returns:
            (descriptor, context for the resolved subtree). The descriptor is
            None when the reference is unresolvable or already being resolved
            further up the chain.
        """
        owner = f"{reference.owner_name}.{reference.type_name}"

        if reference.key in self.visiting:
            logger.debug(f"Cyclic reference to {owner}, not expanding again")
            return None, self

        resolved: TypeDescriptor | None = None
        if self.resolver is not None:
            try:
                resolved = self.resolver(reference)
            except Exception as e:
                logger.warning(f"Resolver failed for {owner}: {e}")
                resolved = None

        if resolved is None:
            resolved = reference.fallback

        if resolved is None:
            logger.debug(f"No definition found for {owner}")
            return None, self

        return resolved, replace(self, visiting=self.visiting | {reference.key})


def as_context(resolver: DescriptorResolver | ResolutionContext | None) -> ResolutionContext:
    """Normalize a resolver argument into a ResolutionContext."""
    if isinstance(resolver, ResolutionContext):
        return resolver
    return ResolutionContext(resolver=resolver)
