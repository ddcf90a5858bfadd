"""Descriptor sources.

Turns Python callables into Signatures, either from their type hints
(AnnotationSource) or from explicit registrations (SignatureRegistry).
"""

import dataclasses
import enum
import inspect
import logging
import types
import typing
from collections.abc import Callable, Iterable
from typing import Annotated, Any, get_args, get_origin, get_type_hints, is_typeddict

import annotated_types
from pydantic.fields import FieldInfo

from propgen.core.exceptions import SpecNotFoundError
from propgen.models import descriptors as d
from propgen.models.values import Atom
from propgen.services.resolution import DescriptorRegistry
from propgen.services.type_namer import callable_name

logger = logging.getLogger(__name__)

DescriptorSource = Callable[[Callable[..., Any]], d.Signature]

SCALAR_ANNOTATIONS: dict[Any, d.PrimitiveKind] = {
    bool: d.PrimitiveKind.BOOLEAN,
    int: d.PrimitiveKind.INTEGER,
    float: d.PrimitiveKind.FLOAT,
    str: d.PrimitiveKind.STRING,
    bytes: d.PrimitiveKind.BINARY,
    bytearray: d.PrimitiveKind.BITSTRING,
    Atom: d.PrimitiveKind.ATOM,
    Any: d.PrimitiveKind.ANY,
    object: d.PrimitiveKind.TERM,
    None: d.PrimitiveKind.NULL,
    type(None): d.PrimitiveKind.NULL,
}


# =============================================================================
# Annotation Source
# =============================================================================


class AnnotationSource:
    """Descriptor source reading a callable's type hints.

    Dataclass parameters become StructuredRecords built with the class itself;
    dataclasses nested inside them become RemoteReferences registered in
    ``self.registry``, which is also the resolver to use with them.
    """

    def __init__(self, registry: DescriptorRegistry | None = None):
        self.registry = registry if registry is not None else DescriptorRegistry()

    def __call__(self, func: Callable[..., Any]) -> d.Signature:
        """Extract the signature of a callable.

        Raises:
            SpecNotFoundError: If the callable cannot be described
        """
        name = callable_name(func)
        try:
            hints = get_type_hints(func, include_extras=True)
            signature = inspect.signature(func)
        except (NameError, TypeError, ValueError) as e:
            raise SpecNotFoundError.for_target(name, f"annotations unavailable ({e})") from e

        params: list[d.TypeDescriptor] = []
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                raise SpecNotFoundError.for_target(name, f"variadic parameter '{param.name}'")
            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                if param.default is inspect.Parameter.empty:
                    raise SpecNotFoundError.for_target(
                        name, f"keyword-only parameter '{param.name}' has no default"
                    )
                continue
            if param.name not in hints:
                raise SpecNotFoundError.for_target(name, f"parameter '{param.name}' is not annotated")
            params.append(self.describe(hints[param.name]))

        if "return" not in hints:
            raise SpecNotFoundError.for_target(name, "return type is not annotated")

        return d.Signature(tuple(params), self.describe(hints["return"]))

    def describe(self, annotation: Any) -> d.TypeDescriptor:
        """Describe a top-level annotation."""
        if _is_dataclass_type(annotation):
            reference = self._reference(annotation)
            return self.registry(reference)
        return self._describe(annotation)

    def _describe(self, annotation: Any) -> d.TypeDescriptor:
        kind = _scalar_kind(annotation)
        if kind is not None:
            return d.Primitive(kind)

        if annotation is list:
            return d.Sequence(None)
        if annotation is dict:
            return d.Mapping(())

        if _is_dataclass_type(annotation):
            return self._reference(annotation)

        if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
            return _one_or_union([d.Literal(member) for member in annotation])

        if is_typeddict(annotation):
            return self._typed_dict(annotation)

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is Annotated:
            return self._annotated(args[0], args[1:])

        if origin is typing.Literal:
            return _one_or_union([d.Literal(value) for value in args])

        if origin in (typing.Union, types.UnionType):
            return d.Union(tuple(self._describe(arg) for arg in args))

        if origin in (typing.Required, typing.NotRequired):
            return self._describe(args[0])

        if origin is list:
            return d.Sequence(self._describe(args[0]) if args else None)

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return d.Opaque(repr(annotation))
            if args == ((),):
                return d.Tuple(())
            return d.Tuple(tuple(self._describe(arg) for arg in args))

        if origin is dict:
            key, value = args if args else (Any, Any)
            return d.Mapping((d.MapField(self._describe(key), self._describe(value), required=False),))

        logger.debug(f"No descriptor for annotation {annotation!r}, marking opaque")
        return d.Opaque(repr(annotation))

    def _annotated(self, base: Any, metadata: tuple[Any, ...]) -> d.TypeDescriptor:
        if base is int:
            lower, upper = _integer_bounds(metadata)
            if lower is not None or upper is not None:
                return d.BoundedInteger(lower, upper)
        return self._describe(base)

    def _typed_dict(self, annotation: Any) -> d.Mapping:
        try:
            hints = get_type_hints(annotation, include_extras=True)
        except (NameError, TypeError) as e:
            raise SpecNotFoundError.for_target(
                callable_name(annotation), f"field annotations unavailable ({e})"
            ) from e
        required_keys = getattr(annotation, "__required_keys__", frozenset(hints))
        return d.Mapping(
            tuple(
                d.MapField(d.Literal(name), self._describe(hint), required=name in required_keys)
                for name, hint in hints.items()
            )
        )

    def _reference(self, cls: type) -> d.RemoteReference:
        """Register a dataclass definition once and refer to it by name."""
        owner_name = cls.__qualname__
        if (owner_name, "t") not in self.registry:
            # Placeholder so self-referencing fields terminate while describing
            self.registry.register(owner_name, d.Opaque(owner_name))
            try:
                record = self._record(cls)
            except (NameError, TypeError) as e:
                self.registry.unregister(owner_name)
                raise SpecNotFoundError.for_target(
                    callable_name(cls), f"field annotations unavailable ({e})"
                ) from e
            except SpecNotFoundError:
                self.registry.unregister(owner_name)
                raise
            self.registry.register(owner_name, record)
        return d.RemoteReference(owner_name)

    def _record(self, cls: type) -> d.StructuredRecord:
        hints = get_type_hints(cls, include_extras=True)
        fields = tuple(
            d.MapField(d.Literal(field.name), self._describe(hints.get(field.name, Any)))
            for field in dataclasses.fields(cls)
            if field.init
        )
        return d.StructuredRecord(cls.__qualname__, fields, factory=cls)


# =============================================================================
# Explicit Registry Source
# =============================================================================


class SignatureRegistry:
    """Descriptor source backed by explicit registrations."""

    def __init__(self) -> None:
        self._signatures: dict[Callable[..., Any], d.Signature] = {}

    def register(
        self,
        func: Callable[..., Any],
        params: list[d.TypeDescriptor] | tuple[d.TypeDescriptor, ...],
        returns: d.TypeDescriptor,
    ) -> None:
        self._signatures[func] = d.Signature(tuple(params), returns)

    def __call__(self, func: Callable[..., Any]) -> d.Signature:
        try:
            return self._signatures[func]
        except KeyError:
            raise SpecNotFoundError.for_target(callable_name(func), "no signature registered") from None


# =============================================================================
# Helpers
# =============================================================================


def _scalar_kind(annotation: Any) -> d.PrimitiveKind | None:
    # Identity lookup: Annotated metadata is not always hashable
    for candidate, kind in SCALAR_ANNOTATIONS.items():
        if annotation is candidate:
            return kind
    return None


def _is_dataclass_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)


def _one_or_union(literals: list[d.Literal]) -> d.TypeDescriptor:
    if len(literals) == 1:
        return literals[0]
    return d.Union(tuple(literals))


def _flatten_constraints(metadata: Iterable[Any]) -> Iterable[Any]:
    for item in metadata:
        if isinstance(item, FieldInfo):
            yield from _flatten_constraints(item.metadata)
        elif isinstance(item, annotated_types.Interval):
            yield from _flatten_constraints(item)
        else:
            yield item


def _integer_bounds(metadata: Iterable[Any]) -> tuple[int | None, int | None]:
    """Collect integer bounds from annotated-types constraints."""
    lower: int | None = None
    upper: int | None = None
    for constraint in _flatten_constraints(metadata):
        if isinstance(constraint, annotated_types.Ge) and isinstance(constraint.ge, int):
            lower = constraint.ge
        elif isinstance(constraint, annotated_types.Gt) and isinstance(constraint.gt, int):
            lower = constraint.gt + 1
        elif isinstance(constraint, annotated_types.Le) and isinstance(constraint.le, int):
            upper = constraint.le
        elif isinstance(constraint, annotated_types.Lt) and isinstance(constraint.lt, int):
            upper = constraint.lt - 1
    return lower, upper
