"""Value validators built from type descriptors.

Mirrors the generator's case structure: every descriptor variant has a
predicate counterpart. Shapes the engine cannot interpret validate
permissively so they never produce false negatives.
"""

import logging
from collections.abc import Callable
from typing import Any

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
from propgen.models.values import Atom, record_view
from propgen.services.generators import MAX_UNICODE_CODEPOINT, literal_payload
from propgen.services.resolution import ResolutionContext, as_context

logger = logging.getLogger(__name__)

Validator = Callable[[Any], bool]


# =============================================================================
# Primitive Predicates
# =============================================================================


def is_integer(value: Any) -> bool:
    """bool is an int subclass in Python but never an integer here."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_charlist(value: Any) -> bool:
    return isinstance(value, list) and all(
        is_integer(item) and 0 <= item <= MAX_UNICODE_CODEPOINT for item in value
    )


def matches_literal(value: Any, expected: Any) -> bool:
    """Type-strict equality, so Literal(1) rejects True and 1.0."""
    return type(value) is type(expected) and value == expected


def _accept(_value: Any) -> bool:
    return True


PRIMITIVE_VALIDATORS: dict[PrimitiveKind, Validator] = {
    PrimitiveKind.INTEGER: is_integer,
    PrimitiveKind.FLOAT: lambda value: isinstance(value, float),
    PrimitiveKind.BOOLEAN: lambda value: isinstance(value, bool),
    PrimitiveKind.ATOM: lambda value: isinstance(value, Atom),
    PrimitiveKind.BINARY: lambda value: isinstance(value, bytes),
    PrimitiveKind.BITSTRING: lambda value: isinstance(value, (bytes, bytearray)),
    PrimitiveKind.STRING: lambda value: isinstance(value, str),
    PrimitiveKind.CHARLIST: is_charlist,
    PrimitiveKind.ANY: _accept,
    PrimitiveKind.TERM: _accept,
    PrimitiveKind.NULL: lambda value: value is None,
    PrimitiveKind.NUMBER: lambda value: is_integer(value) or isinstance(value, float),
}


# =============================================================================
# Public API
# =============================================================================


def validator(
    descriptor: TypeDescriptor,
    resolver: DescriptorResolver | ResolutionContext | None = None,
) -> Validator:
    """Build a predicate testing whether a value conforms to a descriptor.

    Args:
        descriptor: Descriptor to interpret
        resolver: Resolver for RemoteReference nodes

    Returns:
        Predicate returning True for conforming values
    """
    return _to_validator(descriptor, as_context(resolver))


# =============================================================================
# Interpretation
# =============================================================================


def _to_validator(descriptor: TypeDescriptor, context: ResolutionContext) -> Validator:
    if isinstance(descriptor, Primitive):
        return PRIMITIVE_VALIDATORS[descriptor.kind]

    if isinstance(descriptor, BoundedInteger):
        return _bounded_validator(descriptor)

    if isinstance(descriptor, Literal):
        expected = descriptor.value
        return lambda value: matches_literal(value, expected)

    if isinstance(descriptor, Sequence):
        if descriptor.element is None:
            return lambda value: isinstance(value, list)
        element_validator = _to_validator(descriptor.element, context)
        return lambda value: isinstance(value, list) and all(element_validator(item) for item in value)

    if isinstance(descriptor, KeyedSequence):
        return _keyed_validator(descriptor, context)

    if isinstance(descriptor, Tuple):
        return _tuple_validator(descriptor, context)

    if isinstance(descriptor, StructuredRecord):
        return _record_validator(descriptor, context)

    if isinstance(descriptor, Mapping):
        fields_valid = _required_fields_validator(descriptor.fields, context)
        return lambda value: isinstance(value, dict) and fields_valid(value)

    if isinstance(descriptor, Union):
        if not descriptor.alternatives:
            return _accept
        alternatives = [_to_validator(alt, context) for alt in descriptor.alternatives]
        return lambda value: any(check(value) for check in alternatives)

    if isinstance(descriptor, RemoteReference):
        resolved, inner = context.resolve(descriptor)
        if resolved is None:
            logger.debug(f"Validating {descriptor!r} permissively")
            return _accept
        return _to_validator(resolved, inner)

    if not isinstance(descriptor, Opaque):
        logger.warning(f"⚠️  Unknown descriptor {descriptor!r}, validating permissively")
    return _accept


def _bounded_validator(descriptor: BoundedInteger) -> Validator:
    lower, upper = descriptor.declared_bounds()

    def check(value: Any) -> bool:
        if not is_integer(value):
            return False
        if lower is not None and value < lower:
            return False
        return upper is None or value <= upper

    return check


def _keyed_validator(descriptor: KeyedSequence, context: ResolutionContext) -> Validator:
    key = literal_payload(descriptor.key)
    value_validator = _to_validator(descriptor.value, context)

    def check(value: Any) -> bool:
        if not isinstance(value, list):
            return False
        return any(
            isinstance(item, tuple)
            and len(item) == 2
            and matches_literal(item[0], key)
            and value_validator(item[1])
            for item in value
        )

    return check


def _tuple_validator(descriptor: Tuple, context: ResolutionContext) -> Validator:
    element_validators = [_to_validator(element, context) for element in descriptor.elements]
    expected_size = len(element_validators)

    def check(value: Any) -> bool:
        if not isinstance(value, tuple) or len(value) != expected_size:
            return False
        return all(validate(item) for validate, item in zip(element_validators, value))

    return check


def _record_validator(descriptor: StructuredRecord, context: ResolutionContext) -> Validator:
    fields_valid = _required_fields_validator(descriptor.fields, context)

    def check(value: Any) -> bool:
        view = record_view(value)
        if view is None:
            return False
        tag, entries = view
        return tag == descriptor.type_name and fields_valid(entries)

    return check


def _required_fields_validator(
    fields: tuple[MapField, ...], context: ResolutionContext
) -> Validator:
    """Check required fields by predicate satisfaction over all entries.

    A required field is present when at least one entry satisfies both its
    key and value predicates; fields are not looked up by key.
    """
    required = [
        (_to_validator(field.key, context), _to_validator(field.value, context))
        for field in fields
        if field.required
    ]

    def check(entries: dict[Any, Any]) -> bool:
        return all(
            any(key_valid(key) and value_valid(value) for key, value in entries.items())
            for key_valid, value_valid in required
        )

    return check
