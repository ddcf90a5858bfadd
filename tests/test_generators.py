"""Property-based tests for the generator synthesizer.

Tests cover:
- Generated values satisfy the validator built from the same descriptor
- BoundedInteger sampling windows
- Record and mapping assembly
- Remote references, including self-referential definitions
- Unsupported shapes falling back to the term generator
"""

import logging
from dataclasses import dataclass

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from propgen.models import (
    RECORD_TAG,
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
    StructuredRecord,
    Tuple,
    Union,
)
from propgen.services.generators import generator, input_generator
from propgen.services.resolution import DescriptorRegistry
from propgen.services.validators import is_integer, validator

# =============================================================================
# Custom Strategies
# =============================================================================


def primitive_descriptors() -> st.SearchStrategy[Primitive]:
    """Generate every primitive kind."""
    return st.sampled_from(list(PrimitiveKind)).map(Primitive)


def bounded_descriptors() -> st.SearchStrategy[BoundedInteger]:
    """Generate bounded integers with open and closed sides."""
    closed = st.tuples(
        st.integers(min_value=-500, max_value=500),
        st.integers(min_value=0, max_value=500),
    ).map(lambda pair: BoundedInteger(pair[0], pair[0] + pair[1]))
    return st.one_of(
        st.just(BoundedInteger.non_negative()),
        st.just(BoundedInteger.positive()),
        st.just(BoundedInteger.negative()),
        st.just(BoundedInteger()),
        st.integers(min_value=-5000, max_value=5000).map(lambda lo: BoundedInteger(lo, None)),
        st.integers(min_value=-5000, max_value=5000).map(lambda hi: BoundedInteger(None, hi)),
        closed,
    )


def literal_descriptors() -> st.SearchStrategy[Literal]:
    """Generate atom and integer literals."""
    return st.one_of(
        st.integers().map(Literal),
        st.sampled_from(["ok", "error", "nil", "pending"]).map(lambda name: Literal(Atom(name))),
    )


def _mapping_of(values: list) -> Mapping:
    return Mapping(
        [MapField(Literal(Atom(f"key{i}")), value, required=i % 2 == 0) for i, value in enumerate(values)]
    )


def _record_of(values: list) -> StructuredRecord:
    return StructuredRecord(
        "Record",
        [MapField(Literal(f"field{i}"), value) for i, value in enumerate(values)],
    )


def descriptor_trees() -> st.SearchStrategy:
    """Generate finite descriptor trees over every interpretable variant."""
    leaves = st.one_of(primitive_descriptors(), bounded_descriptors(), literal_descriptors())
    return st.recursive(
        leaves,
        lambda children: st.one_of(
            children.map(Sequence),
            children.map(lambda value: KeyedSequence(Atom("option"), value)),
            st.lists(children, max_size=3).map(Tuple),
            st.lists(children, max_size=3).map(_mapping_of),
            st.lists(children, max_size=3).map(_record_of),
            st.lists(children, min_size=1, max_size=3).map(Union),
        ),
        max_leaves=5,
    )


# =============================================================================
# Round Trip
# =============================================================================


class TestGeneratedValuesValidate:
    """Every value drawn from generator(d) satisfies validator(d)."""

    @given(descriptor_trees(), st.data())
    @settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.large_base_example],
    )
    def test_generated_values_satisfy_validator(self, descriptor, data):
        """
        Property: For any descriptor tree built from supported variants, a value
        drawn from its generator SHALL be accepted by its validator.
        """
        value = data.draw(generator(descriptor))

        assert validator(descriptor)(value), (
            f"Generated value rejected by its own validator\n"
            f"Descriptor: {descriptor!r}\n"
            f"Value: {value!r}"
        )

    @given(st.lists(primitive_descriptors(), max_size=4), st.data())
    @settings(max_examples=50, deadline=None)
    def test_input_generator_draws_one_value_per_param(self, params, data):
        """
        Property: An argument tuple has exactly one element per parameter and
        each element satisfies that parameter's validator.
        """
        args = data.draw(input_generator(params))

        assert isinstance(args, tuple)
        assert len(args) == len(params)
        for param, arg in zip(params, args):
            assert validator(param)(arg), f"{arg!r} does not satisfy {param!r}"


# =============================================================================
# Bounded Integers
# =============================================================================


class TestBoundedIntegerSampling:
    """Default sampling windows for open-ended bounds."""

    @given(generator(BoundedInteger.non_negative()))
    def test_non_negative_window(self, value: int):
        assert 0 <= value <= 1000

    @given(generator(BoundedInteger.positive()))
    def test_positive_window(self, value: int):
        assert 1 <= value <= 1000

    @given(generator(BoundedInteger.negative()))
    def test_negative_window(self, value: int):
        assert -1000 <= value <= -1

    @given(generator(BoundedInteger()))
    def test_unbounded_window(self, value: int):
        assert -1000 <= value <= 1000

    @given(generator(BoundedInteger(5000, None)))
    def test_lower_bound_above_default_span(self, value: int):
        """An open upper side never produces an empty window."""
        assert value == 5000

    @given(generator(BoundedInteger(Literal(3), Literal(7))))
    def test_literal_bounds_are_extracted(self, value: int):
        assert 3 <= value <= 7

    @given(generator(BoundedInteger("lo", "hi")))
    def test_unresolvable_bounds_use_defaults(self, value: int):
        assert 0 <= value <= 100

    @given(generator(BoundedInteger(-3, 3)))
    def test_values_are_never_booleans(self, value: int):
        assert is_integer(value)


# =============================================================================
# Aggregates
# =============================================================================


@dataclass
class Point:
    x: int
    y: int


class TestAggregates:
    """Record, mapping and keyword-list assembly."""

    @given(generator(StructuredRecord("User", [MapField(Literal("name"), Primitive("string"))])))
    def test_record_is_tagged_with_type_name(self, value):
        assert value[RECORD_TAG] == "User"
        assert isinstance(value["name"], str)

    @given(
        generator(
            StructuredRecord(
                "Point",
                [
                    MapField(Literal("x"), Primitive("integer")),
                    MapField(Literal("y"), Primitive("integer")),
                ],
                factory=Point,
            )
        )
    )
    def test_record_factory_builds_instances(self, value):
        assert isinstance(value, Point)
        assert is_integer(value.x) and is_integer(value.y)

    @given(
        generator(
            Mapping(
                [
                    MapField(Literal(Atom("id")), Primitive("integer")),
                    MapField(Literal(Atom("tag")), Primitive("string"), required=False),
                ]
            )
        )
    )
    def test_optional_fields_are_drawn(self, value):
        """Optional fields are generated too, not omitted."""
        assert set(value) == {Atom("id"), Atom("tag")}

    @given(generator(Mapping([MapField(Primitive("atom"), Primitive("integer"))])))
    def test_mapping_keys_come_from_key_descriptor(self, value):
        assert len(value) == 1
        assert all(isinstance(key, Atom) for key in value)

    @given(generator(Mapping([MapField(Primitive("any"), Primitive("integer"))])))
    def test_any_keys_are_hashable(self, value):
        assert len(value) == 1

    @given(generator(Mapping([])))
    def test_empty_mapping_draws_generic_maps(self, value):
        assert isinstance(value, dict)
        assert all(isinstance(key, Atom) for key in value)

    @given(generator(KeyedSequence(Atom("timeout"), Primitive("integer"))))
    def test_keyed_sequence_is_single_pair(self, value):
        assert len(value) == 1
        key, item = value[0]
        assert key == Atom("timeout")
        assert is_integer(item)

    @given(generator(Tuple([Primitive("integer"), Primitive("atom")])))
    def test_tuple_positions(self, value):
        assert isinstance(value, tuple) and len(value) == 2
        assert is_integer(value[0])
        assert isinstance(value[1], Atom)

    @given(generator(Union([Literal(Atom("ok")), Literal(Atom("error"))])))
    def test_union_draws_from_alternatives(self, value):
        assert value in (Atom("ok"), Atom("error"))


# =============================================================================
# Remote References
# =============================================================================


class TestRemoteReferences:
    """Resolution through the external resolver and fallbacks."""

    def test_resolved_reference_uses_definition(self):
        registry = DescriptorRegistry({"Accounts": BoundedInteger(10, 20)})

        @given(generator(RemoteReference("Accounts"), registry))
        def check(value):
            assert 10 <= value <= 20

        check()

    @given(generator(RemoteReference("Missing", fallback=Primitive("string"))))
    def test_fallback_used_when_resolver_has_no_answer(self, value):
        assert isinstance(value, str)

    def test_resolver_errors_fall_back_to_terms(self, caplog):
        def broken(reference):
            raise RuntimeError("resolver offline")

        with caplog.at_level(logging.WARNING):
            strategy = generator(RemoteReference("Accounts"), broken)

        assert "resolver offline" in caplog.text
        assert "using term generator" in caplog.text

        @given(strategy)
        def check(value):
            pass

        check()

    def test_self_referential_definition_terminates(self):
        """A cyclic definition yields a finite generator instead of recursing forever."""
        tree = Union(
            [
                Primitive("null"),
                StructuredRecord(
                    "Node",
                    [
                        MapField(Literal("value"), Primitive("integer")),
                        MapField(Literal("next"), RemoteReference("Node")),
                    ],
                ),
            ]
        )
        registry = DescriptorRegistry({"Node": tree})
        descriptor = RemoteReference("Node")
        validate = validator(descriptor, registry)

        @given(generator(descriptor, registry))
        @settings(max_examples=50)
        def check(value):
            assert validate(value)

        check()


# =============================================================================
# Fallbacks
# =============================================================================


class TestUnsupportedShapes:
    """Shapes the engine cannot interpret degrade with a warning."""

    def test_opaque_warns_and_generates_terms(self, caplog):
        with caplog.at_level(logging.WARNING):
            strategy = generator(Opaque("Callable[[int], int]"))

        assert "Callable[[int], int]" in caplog.text

        @given(strategy)
        @settings(max_examples=20)
        def check(value):
            pass

        check()

    def test_empty_union_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            generator(Union([]))

        assert "Empty union" in caplog.text

    def test_tuple_key_holding_a_list_warns(self, caplog):
        key = Tuple([Sequence(Primitive("integer"))])

        with caplog.at_level(logging.WARNING):
            strategy = generator(Mapping([MapField(key, Primitive("integer"))]))

            @given(strategy)
            @settings(max_examples=20)
            def check(value):
                assert len(value) == 1

            check()

        assert "cannot be a dict key" in caplog.text

    def test_union_key_with_a_map_alternative_warns(self, caplog):
        key = Union([Primitive("integer"), Mapping([])])

        with caplog.at_level(logging.WARNING):
            strategy = generator(Mapping([MapField(key, Primitive("string"))]))

            @given(strategy)
            @settings(max_examples=20)
            def check(value):
                assert len(value) == 1

            check()

        assert "cannot be a dict key" in caplog.text
