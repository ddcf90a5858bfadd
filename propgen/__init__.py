"""propgen - property-based test generation from type descriptors."""

from propgen.core.exceptions import (
    InvalidInputAcceptedError,
    ResultDivergenceError,
    SpecMismatchError,
    SpecNotFoundError,
    TrialFailure,
    ValidationFailureError,
)
from propgen.core.log import configure_logging
from propgen.models import (
    Atom,
    BoundedInteger,
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
    StructuredRecord,
    Tuple,
    TypeDescriptor,
    Union,
    make_record,
)
from propgen.schemas import FailureKind, FailureRecord, TrialKind, TrialOptions, TrialReport
from propgen.services import (
    AnnotationSource,
    DescriptorRegistry,
    PropertySuite,
    SignatureRegistry,
    TrialHarness,
    equivalent,
    generator,
    infer_type_name,
    invalid_generator,
    signatures_equivalent,
    validator,
)

__version__ = "0.1.0"

__all__ = [
    "AnnotationSource",
    "Atom",
    "BoundedInteger",
    "DescriptorRegistry",
    "FailureKind",
    "FailureRecord",
    "InvalidInputAcceptedError",
    "KeyedSequence",
    "Literal",
    "MapField",
    "Mapping",
    "Opaque",
    "Primitive",
    "PrimitiveKind",
    "PropertySuite",
    "RemoteReference",
    "ResultDivergenceError",
    "Sequence",
    "Signature",
    "SignatureRegistry",
    "SpecMismatchError",
    "SpecNotFoundError",
    "StructuredRecord",
    "TrialFailure",
    "TrialHarness",
    "TrialKind",
    "TrialOptions",
    "TrialReport",
    "Tuple",
    "TypeDescriptor",
    "Union",
    "ValidationFailureError",
    "configure_logging",
    "equivalent",
    "generator",
    "infer_type_name",
    "invalid_generator",
    "make_record",
    "signatures_equivalent",
    "validator",
]
