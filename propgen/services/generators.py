"""Valid-value generators built from type descriptors.

Every descriptor is interpreted into a Hypothesis strategy. Strategies are
reusable: each run of a trial draws a fresh, independent sequence of values.
Descriptors the engine cannot interpret degrade to the unconstrained term
strategy with a warning instead of failing.
"""

import logging
from typing import Any

from hypothesis import strategies as st

from propgen.models.descriptors import (
    BoundedInteger,
    DescriptorResolver,
    KeyedSequence,
    Literal,
    MapField,
    Mapping,
    Opaque,
    Primitive,
    PrimitiveKind,
    RemoteReference,
    Sequence,
    StructuredRecord,
    Tuple,
    TypeDescriptor,
    Union,
)
from propgen.models.values import Atom, is_hashable, make_record
from propgen.services.resolution import ResolutionContext, as_context

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

ATOM_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ATOM_MAX_SIZE = 16
MAX_UNICODE_CODEPOINT = 0x10FFFF

# Bounds on the size of generated terms
TERM_MAX_LEAVES = 8
TERM_MAX_CHILDREN = 4


# =============================================================================
# Canonical Strategies
# =============================================================================


def integers() -> st.SearchStrategy[int]:
    return st.integers()


def floats() -> st.SearchStrategy[float]:
    """Finite floats, so results stay comparable with ==."""
    return st.floats(allow_nan=False, allow_infinity=False)


def atoms() -> st.SearchStrategy[Atom]:
    """Short alphanumeric symbols."""
    return st.text(alphabet=ATOM_ALPHABET, min_size=1, max_size=ATOM_MAX_SIZE).map(Atom)


def printable_text() -> st.SearchStrategy[str]:
    return st.text(alphabet=st.characters(exclude_categories=("Cs", "Cc")))


def charlists() -> st.SearchStrategy[list[int]]:
    return st.lists(st.integers(min_value=0, max_value=MAX_UNICODE_CODEPOINT))


def hashable_terms() -> st.SearchStrategy[Any]:
    """Scalar terms, usable as dict keys."""
    return st.one_of(
        integers(),
        floats(),
        st.booleans(),
        st.none(),
        atoms(),
        printable_text(),
        st.binary(),
    )


def terms() -> st.SearchStrategy[Any]:
    """Arbitrary nested values: scalars, lists, tuples and maps."""
    return st.recursive(
        hashable_terms(),
        lambda children: st.one_of(
            st.lists(children, max_size=TERM_MAX_CHILDREN),
            st.tuples(children, children),
            st.dictionaries(atoms(), children, max_size=TERM_MAX_CHILDREN),
        ),
        max_leaves=TERM_MAX_LEAVES,
    )


def generic_maps() -> st.SearchStrategy[dict[Atom, Any]]:
    return st.dictionaries(atoms(), terms(), max_size=TERM_MAX_CHILDREN)


PRIMITIVE_STRATEGIES = {
    PrimitiveKind.INTEGER: integers,
    PrimitiveKind.FLOAT: floats,
    PrimitiveKind.BOOLEAN: st.booleans,
    PrimitiveKind.ATOM: atoms,
    PrimitiveKind.BINARY: st.binary,
    PrimitiveKind.BITSTRING: st.binary,
    PrimitiveKind.STRING: printable_text,
    PrimitiveKind.CHARLIST: charlists,
    PrimitiveKind.ANY: terms,
    PrimitiveKind.TERM: terms,
    PrimitiveKind.NULL: st.none,
    PrimitiveKind.NUMBER: lambda: st.one_of(integers(), floats()),
}


# =============================================================================
# Public API
# =============================================================================


def generator(
    descriptor: TypeDescriptor,
    resolver: DescriptorResolver | ResolutionContext | None = None,
) -> st.SearchStrategy[Any]:
    """Build a strategy producing values that conform to a descriptor.

    Args:
        descriptor: Descriptor to interpret
        resolver: Resolver for RemoteReference nodes

    Returns:
        Hypothesis strategy of conforming values
    """
    return _to_strategy(descriptor, as_context(resolver))


def input_generator(
    params: list[TypeDescriptor] | tuple[TypeDescriptor, ...],
    resolver: DescriptorResolver | ResolutionContext | None = None,
) -> st.SearchStrategy[tuple[Any, ...]]:
    """Build a strategy of argument tuples, one element per parameter."""
    context = as_context(resolver)
    return st.tuples(*(_to_strategy(param, context) for param in params))


# =============================================================================
# Interpretation
# =============================================================================


def _to_strategy(descriptor: TypeDescriptor, context: ResolutionContext) -> st.SearchStrategy[Any]:
    if isinstance(descriptor, Primitive):
        return PRIMITIVE_STRATEGIES[descriptor.kind]()

    if isinstance(descriptor, BoundedInteger):
        lower, upper = descriptor.sampling_bounds()
        return st.integers(min_value=lower, max_value=upper)

    if isinstance(descriptor, Literal):
        return st.just(descriptor.value)

    if isinstance(descriptor, Sequence):
        if descriptor.element is None:
            return st.lists(terms())
        return st.lists(_to_strategy(descriptor.element, context))

    if isinstance(descriptor, KeyedSequence):
        # Always a single pair, never a variable-length keyword list
        key = literal_payload(descriptor.key)
        return _to_strategy(descriptor.value, context).map(lambda value: [(key, value)])

    if isinstance(descriptor, Tuple):
        return st.tuples(*(_to_strategy(element, context) for element in descriptor.elements))

    if isinstance(descriptor, StructuredRecord):
        return _entries_strategy(descriptor.fields, context).map(
            lambda entries: _build_record(descriptor, entries)
        )

    if isinstance(descriptor, Mapping):
        if not descriptor.fields:
            return generic_maps()
        return _entries_strategy(descriptor.fields, context).map(dict)

    if isinstance(descriptor, Union):
        if not descriptor.alternatives:
            return _fallback(descriptor, "empty union")
        return st.one_of(*(_to_strategy(alt, context) for alt in descriptor.alternatives))

    if isinstance(descriptor, RemoteReference):
        resolved, inner = context.resolve(descriptor)
        if resolved is None:
            return _fallback(descriptor, "unresolved or cyclic reference")
        return _to_strategy(resolved, inner)

    if isinstance(descriptor, Opaque):
        return _fallback(descriptor, "unsupported shape")

    return _fallback(descriptor, "unknown descriptor")


def _fallback(descriptor: Any, reason: str) -> st.SearchStrategy[Any]:
    logger.warning(f"⚠️  {reason.capitalize()} {descriptor!r}, using term generator")
    return terms()


def _entries_strategy(
    fields: tuple[MapField, ...], context: ResolutionContext
) -> st.SearchStrategy[list[tuple[Any, Any]]]:
    """Draw one (key, value) pair per field, optional fields included."""
    pairs = [
        st.tuples(_key_strategy(field.key, context), _to_strategy(field.value, context))
        for field in fields
    ]
    return st.tuples(*pairs).map(list).filter(_has_distinct_keys)


def _key_strategy(descriptor: TypeDescriptor, context: ResolutionContext) -> st.SearchStrategy[Any]:
    if isinstance(descriptor, Primitive) and descriptor.kind in (PrimitiveKind.ANY, PrimitiveKind.TERM):
        return hashable_terms()
    if _is_unhashable_shape(descriptor):
        logger.warning(f"⚠️  Map key {descriptor!r} cannot be a dict key, using hashable terms")
        return hashable_terms()
    return _to_strategy(descriptor, context).filter(is_hashable)


def _is_unhashable_shape(descriptor: TypeDescriptor) -> bool:
    if isinstance(descriptor, (Sequence, KeyedSequence)):
        return True
    if isinstance(descriptor, StructuredRecord):
        return descriptor.factory is None
    if isinstance(descriptor, Mapping):
        return True
    if isinstance(descriptor, Tuple):
        return any(_is_unhashable_shape(element) for element in descriptor.elements)
    if isinstance(descriptor, Union):
        return any(_is_unhashable_shape(alt) for alt in descriptor.alternatives)
    return isinstance(descriptor, Primitive) and descriptor.kind == PrimitiveKind.CHARLIST


def _has_distinct_keys(entries: list[tuple[Any, Any]]) -> bool:
    return len({key for key, _ in entries}) == len(entries)


def _build_record(descriptor: StructuredRecord, entries: list[tuple[Any, Any]]) -> Any:
    fields = dict(entries)
    if descriptor.factory is not None and all(isinstance(key, str) for key in fields):
        return descriptor.factory(**fields)
    return make_record(descriptor.type_name, fields)


def literal_payload(value: Any) -> Any:
    """Unwrap a Literal descriptor to its payload."""
    if isinstance(value, Literal):
        return value.value
    return value
