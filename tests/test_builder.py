"""
Tests for the survey builder.

These tests verify:
    - Name resolution against the derived question tree
    - Suggestions and assumptions for leaf, nested, enum and multi-select fields
    - Precedence of assumptions over suggestions
    - Delegation to a backend and reconstruction of its responses
"""

import pytest

from elicitor.backends.base import SurveyBackend
from elicitor.builder import SurveyBuilder
from elicitor.errors import BackendError, ResponseTypeError, UnknownPathError, UnknownVariantError
from elicitor.examples import Address, Card, Checkout, Feature, Payment, Person, Phone, Profile
from elicitor.model import Assumed, Suggested
from elicitor.paths import ResponsePath
from elicitor.responses import Responses
from elicitor.values import ChosenVariant, ChosenVariants, IntValue, StringValue


def P(dotted):
    return ResponsePath.parse(dotted)


class RecordingBackend(SurveyBackend):
    """Returns fixed responses and remembers what it was given."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def collect(self, definition, prefilled, validator):
        self.calls.append((definition, prefilled, validator))
        return self.responses


class CancellingBackend(SurveyBackend):
    def collect(self, definition, prefilled, validator):
        raise BackendError("Cancelled by user")


class TestSuggestions:
    """Test suggest() and with_suggestions()."""

    def test_leaf(self):
        """A suggested leaf should carry a Suggested default."""
        definition = SurveyBuilder(Person).suggest("name", "Alice").definition()
        assert definition.find("name").default == Suggested(StringValue("Alice"))
        assert definition.find("age").suggestion is None

    def test_value_objects_are_accepted(self):
        """ResponseValues should be taken as they are."""
        definition = SurveyBuilder(Person).suggest("age", IntValue(40)).definition()
        assert definition.find("age").suggestion == IntValue(40)

    def test_nested_struct(self):
        """Suggesting a struct value should suggest every nested leaf."""
        builder = SurveyBuilder(Profile).suggest("address", Address(street="Main", city="Reno"))
        definition = builder.definition()
        assert definition.find("address.street").suggestion == StringValue("Main")
        assert definition.find("address.city").suggestion == StringValue("Reno")
        assert definition.find("address").suggestion is None

    def test_nested_leaf_by_dotted_name(self):
        """Nested leaves should be addressable by dotted name."""
        definition = SurveyBuilder(Profile).suggest("address.city", "Reno").definition()
        assert definition.find("address.city").suggestion == StringValue("Reno")

    def test_enum_value(self):
        """Suggesting a variant should suggest the selection and its fields."""
        definition = SurveyBuilder(Checkout).suggest("payment", Card(number="4111")).definition()
        assert definition.find("payment").suggestion == ChosenVariant(1)
        assert definition.find("payment.alternatives.1.number").suggestion == StringValue("4111")

    def test_enum_index(self):
        """An enum question should accept a variant index."""
        by_name = SurveyBuilder(Checkout).suggest("payment", 0).definition()
        by_selection = SurveyBuilder(Checkout).suggest("payment.selected_alternative", 0).definition()
        assert by_name.find("payment").suggestion == ChosenVariant(0)
        assert by_name == by_selection

    def test_multiselect(self):
        """Multi-select questions should accept enum values or indices."""
        by_value = SurveyBuilder(Phone).suggest("features", [Feature.CAMERA, Feature.GPS]).definition()
        by_index = SurveyBuilder(Phone).suggest("features", [0, 2]).definition()
        assert by_value.find("features").suggestion == ChosenVariants.of(0, 2)
        assert by_value == by_index

    def test_top_level_enum(self):
        """A top-level enum should be addressed by the root path."""
        definition = SurveyBuilder(Payment).suggest("", Card(number="9")).definition()
        assert definition.find("selected_alternative").suggestion == ChosenVariant(1)
        assert definition.find("alternatives.1.number").suggestion == StringValue("9")

    def test_with_existing(self):
        """An existing value should suggest every field."""
        builder = SurveyBuilder(Person).with_existing(Person(name="Alice", age=30))
        definition = builder.definition()
        assert definition.find("name").suggestion == StringValue("Alice")
        assert definition.find("age").suggestion == IntValue(30)
        assert SurveyBuilder.with_existing is SurveyBuilder.with_suggestions

    def test_chaining(self):
        """Every recording method should return the builder."""
        builder = SurveyBuilder(Person)
        assert builder.suggest("name", "A") is builder
        assert builder.assume("age", 20) is builder
        assert builder.with_suggestions(Person(name="B", age=30)) is builder


class TestAssumptions:
    """Test assume() and its precedence."""

    def test_leaf(self):
        """An assumed leaf should be Assumed and prefilled."""
        builder = SurveyBuilder(Person).assume("age", 30)
        assert builder.definition().find("age").default == Assumed(IntValue(30))
        assert builder.prefilled() == Responses({"age": IntValue(30)})

    def test_assumption_wins(self):
        """An assumption should override a suggestion for the same path."""
        builder = SurveyBuilder(Person).assume("age", 40).suggest("age", 30)
        assert builder.definition().find("age").default == Assumed(IntValue(40))

    def test_nested_enum(self):
        """Assuming a variant should prefill the selection and its fields."""
        builder = SurveyBuilder(Checkout).assume("payment", Card(number="4111"))
        assert builder.prefilled() == Responses(
            {
                "payment.selected_alternative": ChosenVariant(1),
                "payment.alternatives.1.number": StringValue("4111"),
            }
        )
        assert builder.definition().find("payment").is_assumed

    def test_suggestion_does_not_prefill(self):
        """Suggestions should never appear in the prefilled responses."""
        assert len(SurveyBuilder(Person).suggest("age", 30).prefilled()) == 0


class TestNameResolution:
    """Test how names are resolved."""

    def test_unknown_name(self):
        """A name that matches no question should raise."""
        with pytest.raises(UnknownPathError):
            SurveyBuilder(Person).suggest("height", 1)
        with pytest.raises(UnknownPathError):
            SurveyBuilder(Profile).assume("address.zip", "1")

    def test_group_without_value(self):
        """Variant groups carry no value of their own."""
        with pytest.raises(UnknownPathError):
            SurveyBuilder(Checkout).suggest("payment.alternatives.0", 1)
        with pytest.raises(UnknownPathError):
            SurveyBuilder(Checkout).suggest("payment.alternatives.1", Card(number="1"))

    def test_wrong_value_type(self):
        """A value the question cannot take should raise at its path."""
        with pytest.raises(ResponseTypeError) as exc_info:
            SurveyBuilder(Person).suggest("age", "thirty")
        assert exc_info.value.path == P("age")

    def test_selection_out_of_range(self):
        """Selections naming a missing variant or option should raise."""
        with pytest.raises(UnknownVariantError) as exc_info:
            SurveyBuilder(Checkout).assume("payment", 5)
        assert exc_info.value.path == P("payment.selected_alternative")
        with pytest.raises(UnknownVariantError):
            SurveyBuilder(Checkout).suggest("payment", -1)
        with pytest.raises(UnknownVariantError) as exc_info:
            SurveyBuilder(Phone).assume("features", [0, 9])
        assert exc_info.value.index == 9

    def test_path_objects(self):
        """ResponsePath names should work like dotted strings."""
        definition = SurveyBuilder(Profile).suggest(P("address.city"), "Reno").definition()
        assert definition.find("address.city").suggestion == StringValue("Reno")


class TestRun:
    """Test delegation to a backend."""

    def test_reconstructs_backend_responses(self):
        """run should build the value from what the backend returns."""
        backend = RecordingBackend(Responses({"name": StringValue("Alice"), "age": IntValue(30)}))
        assert SurveyBuilder(Person).run(backend) == Person(name="Alice", age=30)

    def test_hands_over_definition_and_prefilled(self):
        """The backend should see the defaults, the prefilled store and a validator."""
        backend = RecordingBackend(Responses({"name": StringValue("Alice")}))
        builder = SurveyBuilder(Person).suggest("name", "Al").assume("age", 30)
        person = builder.run(backend)

        definition, prefilled, validator = backend.calls[0]
        assert definition.find("name").suggestion == StringValue("Al")
        assert definition.find("age").is_assumed
        assert definition.prelude == "Let's get to know you."
        assert prefilled == Responses({"age": IntValue(30)})
        assert validator.validate_field("age", IntValue(3), Responses()) == "Value must be at least 18"
        assert person == Person(name="Alice", age=30)

    def test_assumptions_override_backend(self):
        """Assumed values should win over anything the backend returns."""
        backend = RecordingBackend(Responses({"name": StringValue("Alice"), "age": IntValue(99)}))
        person = SurveyBuilder(Person).assume("age", 30).run(backend)
        assert person.age == 30
        assert backend.responses.get("age") == IntValue(99)

    def test_backend_errors_propagate(self):
        """Cancellation should surface unchanged."""
        with pytest.raises(BackendError, match="Cancelled"):
            SurveyBuilder(Person).run(CancellingBackend())
