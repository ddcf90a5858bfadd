"""Structural equivalence of type descriptors.

Two descriptors are equivalent when they are the same variant with pairwise
equivalent substructure. Source metadata and record factories are ignored.
Used as the precondition gate for comparison trials.
"""

from propgen.models.descriptors import (
    BoundedInteger,
    KeyedSequence,
    Literal,
    MapField,
    Mapping,
    Opaque,
    Primitive,
    RemoteReference,
    Sequence,
    Signature,
    StructuredRecord,
    Tuple,
    TypeDescriptor,
    Union,
)
from propgen.services.generators import literal_payload
from propgen.services.validators import matches_literal


def equivalent(a: TypeDescriptor | None, b: TypeDescriptor | None) -> bool:
    """Compare two descriptors structurally."""
    if a is None or b is None:
        return a is None and b is None

    if type(a) is not type(b):
        return False

    if isinstance(a, Primitive):
        return a.kind == b.kind

    if isinstance(a, BoundedInteger):
        return a.declared_bounds() == b.declared_bounds()

    if isinstance(a, Literal):
        return matches_literal(a.value, b.value)

    if isinstance(a, Sequence):
        return equivalent(a.element, b.element)

    if isinstance(a, KeyedSequence):
        return matches_literal(literal_payload(a.key), literal_payload(b.key)) and equivalent(
            a.value, b.value
        )

    if isinstance(a, Tuple):
        return all_equivalent(a.elements, b.elements)

    if isinstance(a, StructuredRecord):
        return a.type_name == b.type_name and _fields_equivalent(a.fields, b.fields)

    if isinstance(a, Mapping):
        return _fields_equivalent(a.fields, b.fields)

    if isinstance(a, Union):
        return all_equivalent(a.alternatives, b.alternatives)

    if isinstance(a, RemoteReference):
        return a.key == b.key

    if isinstance(a, Opaque):
        return a.label == b.label

    return a == b


def all_equivalent(
    left: list[TypeDescriptor] | tuple[TypeDescriptor, ...],
    right: list[TypeDescriptor] | tuple[TypeDescriptor, ...],
) -> bool:
    """Pairwise, in-order equivalence of two descriptor lists."""
    return len(left) == len(right) and all(equivalent(a, b) for a, b in zip(left, right))


def signatures_equivalent(a: Signature, b: Signature) -> bool:
    """Check that parameter lists and return descriptors are pairwise equivalent."""
    return all_equivalent(a.params, b.params) and equivalent(a.returns, b.returns)


def _fields_equivalent(left: tuple[MapField, ...], right: tuple[MapField, ...]) -> bool:
    """Field sets match regardless of declaration order."""
    if len(left) != len(right):
        return False

    unmatched = list(right)
    for field in left:
        for index, candidate in enumerate(unmatched):
            if _field_equivalent(field, candidate):
                del unmatched[index]
                break
        else:
            return False
    return True


def _field_equivalent(a: MapField, b: MapField) -> bool:
    return a.required == b.required and equivalent(a.key, b.key) and equivalent(a.value, b.value)
