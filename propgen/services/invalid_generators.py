"""Invalid-value generators built from type descriptors.

Used for robustness trials: each strategy produces values that should be
rejected by the descriptor's validator. Container descriptors get values of
an entirely different shape rather than near-miss values, so this is a
coarse adversarial sampler, not a boundary tester.
"""

import logging
from typing import Any

from hypothesis import strategies as st

from propgen.models.descriptors import (
    DEFAULT_SPAN,
    BoundedInteger,
    DescriptorResolver,
    KeyedSequence,
    Literal,
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
from propgen.services.generators import (
    atoms,
    floats,
    generic_maps,
    integers,
    printable_text,
    terms,
)
from propgen.services.resolution import ResolutionContext, as_context
from propgen.services.validators import matches_literal

logger = logging.getLogger(__name__)


# =============================================================================
# Shape Pools
# =============================================================================


def non_integer_values() -> st.SearchStrategy[Any]:
    return st.one_of(floats(), printable_text(), atoms(), st.lists(integers()), generic_maps())


def non_binary_values() -> st.SearchStrategy[Any]:
    return st.one_of(integers(), floats(), atoms(), st.lists(terms()), generic_maps())


def non_atom_values() -> st.SearchStrategy[Any]:
    return st.one_of(integers(), floats(), printable_text(), st.lists(terms()), generic_maps())


def non_string_values() -> st.SearchStrategy[Any]:
    return st.one_of(integers(), floats(), atoms(), st.lists(terms()), generic_maps())


def non_list_values() -> st.SearchStrategy[Any]:
    return st.one_of(integers(), floats(), printable_text(), atoms(), generic_maps())


def non_tuple_values() -> st.SearchStrategy[Any]:
    return st.one_of(
        integers(), floats(), printable_text(), atoms(), st.lists(terms()), generic_maps()
    )


def non_map_values() -> st.SearchStrategy[Any]:
    return st.one_of(integers(), floats(), printable_text(), atoms(), st.lists(terms()))


def generic_invalid_values() -> st.SearchStrategy[Any]:
    """Mixed scalars and collections for shapes with no targeted pool."""
    return st.one_of(
        integers(), floats(), printable_text(), atoms(), st.lists(terms()), generic_maps()
    )


INVALID_PRIMITIVE_STRATEGIES = {
    PrimitiveKind.INTEGER: non_integer_values,
    PrimitiveKind.FLOAT: lambda: st.one_of(
        integers(), printable_text(), atoms(), st.lists(floats()), generic_maps()
    ),
    PrimitiveKind.BOOLEAN: lambda: st.one_of(
        integers(), floats(), printable_text(), st.lists(atoms())
    ),
    PrimitiveKind.ATOM: non_atom_values,
    PrimitiveKind.BINARY: non_binary_values,
    PrimitiveKind.BITSTRING: lambda: st.one_of(integers(), atoms(), generic_maps()),
    PrimitiveKind.STRING: non_string_values,
    PrimitiveKind.CHARLIST: lambda: st.one_of(
        integers(), floats(), printable_text(), atoms(), generic_maps()
    ),
    PrimitiveKind.ANY: terms,
    PrimitiveKind.TERM: terms,
    PrimitiveKind.NULL: lambda: st.one_of(
        integers(), floats(), printable_text(), atoms(), st.lists(terms())
    ),
    PrimitiveKind.NUMBER: lambda: st.one_of(
        printable_text(), atoms(), st.lists(terms()), generic_maps()
    ),
}


# =============================================================================
# Public API
# =============================================================================


def invalid_generator(
    descriptor: TypeDescriptor,
    resolver: DescriptorResolver | ResolutionContext | None = None,
) -> st.SearchStrategy[Any]:
    """Build a strategy producing values expected to fail the descriptor's validator.

    Args:
        descriptor: Descriptor to interpret
        resolver: Resolver for RemoteReference nodes

    Returns:
        Hypothesis strategy of non-conforming values
    """
    return _to_invalid_strategy(descriptor, as_context(resolver))


def invalid_input_generator(
    params: list[TypeDescriptor] | tuple[TypeDescriptor, ...],
    resolver: DescriptorResolver | ResolutionContext | None = None,
) -> st.SearchStrategy[tuple[Any, ...]]:
    """Build a strategy of argument tuples in which every argument is invalid."""
    context = as_context(resolver)
    return st.tuples(*(_to_invalid_strategy(param, context) for param in params))


# =============================================================================
# Interpretation
# =============================================================================


def _to_invalid_strategy(
    descriptor: TypeDescriptor, context: ResolutionContext
) -> st.SearchStrategy[Any]:
    if isinstance(descriptor, Primitive):
        return INVALID_PRIMITIVE_STRATEGIES[descriptor.kind]()

    if isinstance(descriptor, BoundedInteger):
        return _out_of_range_values(descriptor)

    if isinstance(descriptor, Literal):
        expected = descriptor.value
        return st.one_of(atoms(), integers(), floats(), printable_text()).filter(
            lambda value: not matches_literal(value, expected)
        )

    if isinstance(descriptor, (Sequence, KeyedSequence)):
        return non_list_values()

    if isinstance(descriptor, Tuple):
        return non_tuple_values()

    if isinstance(descriptor, (Mapping, StructuredRecord)):
        return non_map_values()

    if isinstance(descriptor, RemoteReference):
        resolved, inner = context.resolve(descriptor)
        if resolved is None or isinstance(resolved, StructuredRecord):
            # Untagged maps are fine here, but no wrong-shaped records are attempted
            return generic_invalid_values()
        return _to_invalid_strategy(resolved, inner)

    if not isinstance(descriptor, (Union, Opaque)):
        logger.warning(f"⚠️  Unknown descriptor {descriptor!r}, using generic invalid generator")
    return generic_invalid_values()


def _out_of_range_values(descriptor: BoundedInteger) -> st.SearchStrategy[Any]:
    """Integers just outside each declared bound, plus non-integers."""
    lower, upper = descriptor.declared_bounds()
    options: list[st.SearchStrategy[Any]] = []
    if lower is not None:
        options.append(st.integers(min_value=lower - DEFAULT_SPAN, max_value=lower - 1))
    if upper is not None:
        options.append(st.integers(min_value=upper + 1, max_value=upper + DEFAULT_SPAN))
    options.extend([floats(), printable_text(), atoms()])
    return st.one_of(*options)
