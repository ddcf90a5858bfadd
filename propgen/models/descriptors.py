"""Type descriptor model.

The closed set of immutable descriptor nodes consumed by the generator,
validator, invalid-generator and equivalence services. Descriptors are built
once by a descriptor source and are only ever traversed.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Constants
# =============================================================================

# Width of the default sampling window for open-ended integer bounds
DEFAULT_SPAN = 1000

# Used when a bound expression cannot be turned into an integer
UNRESOLVED_LOWER_BOUND = 0
UNRESOLVED_UPPER_BOUND = 100


class PrimitiveKind(str, Enum):
    """Unconstrained value shapes."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ATOM = "atom"
    BINARY = "binary"
    BITSTRING = "bitstring"
    STRING = "string"
    CHARLIST = "charlist"
    ANY = "any"
    TERM = "term"
    NULL = "null"
    NUMBER = "number"


@dataclass(frozen=True)
class SourceMeta:
    """Where a descriptor was declared. Never part of equality."""

    file: str | None = None
    line: int | None = None


# =============================================================================
# Descriptor Nodes
# =============================================================================


@dataclass(frozen=True)
class TypeDescriptor:
    """Base class for all descriptor nodes."""

    meta: SourceMeta | None = field(default=None, kw_only=True, compare=False, repr=False)


@dataclass(frozen=True)
class Primitive(TypeDescriptor):
    kind: PrimitiveKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", PrimitiveKind(self.kind))


@dataclass(frozen=True)
class BoundedInteger(TypeDescriptor):
    """Integer constrained to an optional lower and upper bound.

    Bounds are normally integers. Anything else is passed through a
    best-effort literal extractor when the descriptor is interpreted.
    """

    lower: Any = None
    upper: Any = None

    def __post_init__(self) -> None:
        lower, upper = self.declared_bounds()
        if lower is not None and upper is not None and lower > upper:
            raise ValueError(f"Empty integer range: {lower}..{upper}")

    @classmethod
    def non_negative(cls) -> "BoundedInteger":
        return cls(0, None)

    @classmethod
    def positive(cls) -> "BoundedInteger":
        return cls(1, None)

    @classmethod
    def negative(cls) -> "BoundedInteger":
        return cls(None, -1)

    @classmethod
    def range(cls, lower: int, upper: int) -> "BoundedInteger":
        return cls(lower, upper)

    def declared_bounds(self) -> tuple[int | None, int | None]:
        """Bounds as declared, None meaning open-ended."""
        lower = None if self.lower is None else extract_integer_value(self.lower, UNRESOLVED_LOWER_BOUND)
        upper = None if self.upper is None else extract_integer_value(self.upper, UNRESOLVED_UPPER_BOUND)
        return lower, upper

    def sampling_bounds(self) -> tuple[int, int]:
        """Closed window used to generate values.

        Open sides are filled in so that non-negative integers sample from
        [0, 1000], positive from [1, 1000] and negative from [-1000, -1].
        """
        lower, upper = self.declared_bounds()
        if lower is None and upper is None:
            return -DEFAULT_SPAN, DEFAULT_SPAN
        if upper is None:
            return lower, max(DEFAULT_SPAN, lower)
        if lower is None:
            return min(-DEFAULT_SPAN, upper), upper
        return lower, upper


@dataclass(frozen=True)
class Literal(TypeDescriptor):
    """A single constant value (atom or integer; str, bool and None from Python adapters)."""

    value: Any


@dataclass(frozen=True)
class Sequence(TypeDescriptor):
    element: TypeDescriptor | None = None


@dataclass(frozen=True)
class KeyedSequence(TypeDescriptor):
    """Keyword-style list of (key, value) pairs tagged by a fixed key."""

    key: Any
    value: TypeDescriptor


@dataclass(frozen=True)
class Tuple(TypeDescriptor):
    elements: tuple[TypeDescriptor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))


@dataclass(frozen=True)
class MapField:
    """One key/value association of a Mapping or StructuredRecord."""

    key: TypeDescriptor
    value: TypeDescriptor
    required: bool = True


@dataclass(frozen=True)
class Mapping(TypeDescriptor):
    fields: tuple[MapField, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class StructuredRecord(TypeDescriptor):
    """A named record.

    Values are tagged dicts unless a factory is attached, in which case
    generated values are built with ``factory(**fields)``.
    """

    type_name: str
    fields: tuple[MapField, ...] = ()
    factory: Callable[..., Any] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class Union(TypeDescriptor):
    alternatives: tuple[TypeDescriptor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "alternatives", tuple(self.alternatives))


@dataclass(frozen=True)
class RemoteReference(TypeDescriptor):
    """Reference to a descriptor defined elsewhere, e.g. another record's type.

    ``fallback`` is used when the resolver has no definition for the reference.
    """

    owner_name: str
    type_name: str = "t"
    fallback: TypeDescriptor | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.owner_name, self.type_name


@dataclass(frozen=True)
class Opaque(TypeDescriptor):
    """A shape the descriptor source could not express (e.g. function types)."""

    label: str


# =============================================================================
# Signatures
# =============================================================================


@dataclass(frozen=True)
class Signature:
    """Parameter and return descriptors of one function."""

    params: tuple[TypeDescriptor, ...]
    returns: TypeDescriptor

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))


DescriptorResolver = Callable[[RemoteReference], TypeDescriptor | None]


def extract_integer_value(value: Any, default: int) -> int:
    """Best-effort conversion of a bound expression to an integer."""
    if isinstance(value, Literal):
        value = value.value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default
