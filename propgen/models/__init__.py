"""Descriptor and value models."""

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
    Signature,
    SourceMeta,
    StructuredRecord,
    Tuple,
    TypeDescriptor,
    Union,
)
from propgen.models.values import RECORD_TAG, Atom, make_record, record_view

__all__ = [
    "Atom",
    "BoundedInteger",
    "DescriptorResolver",
    "KeyedSequence",
    "Literal",
    "MapField",
    "Mapping",
    "Opaque",
    "Primitive",
    "PrimitiveKind",
    "RECORD_TAG",
    "RemoteReference",
    "Sequence",
    "Signature",
    "SourceMeta",
    "StructuredRecord",
    "Tuple",
    "TypeDescriptor",
    "Union",
    "make_record",
    "record_view",
]
