"""Descriptor interpreters and the trial harness."""

from propgen.services.annotations import AnnotationSource, SignatureRegistry
from propgen.services.equivalence import equivalent, signatures_equivalent
from propgen.services.generators import generator, input_generator
from propgen.services.harness import TrialCounter, TrialHarness, open_counter
from propgen.services.invalid_generators import invalid_generator, invalid_input_generator
from propgen.services.resolution import DescriptorRegistry, ResolutionContext
from propgen.services.suite import PropertySuite, TrialCase
from propgen.services.type_namer import infer_type_name
from propgen.services.validators import validator

__all__ = [
    "AnnotationSource",
    "DescriptorRegistry",
    "PropertySuite",
    "ResolutionContext",
    "SignatureRegistry",
    "TrialCase",
    "TrialCounter",
    "TrialHarness",
    "equivalent",
    "generator",
    "infer_type_name",
    "input_generator",
    "invalid_generator",
    "invalid_input_generator",
    "open_counter",
    "signatures_equivalent",
    "validator",
]
