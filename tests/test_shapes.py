"""
Tests for shape declarations and their descriptions.

These tests verify:
    - Field classification into question kinds
    - Enum variant registration and ordering
    - Every authoring check
"""

import enum
import pathlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import pytest

from elicitor.errors import AuthoringError
from elicitor.examples import Adventurer, Card, Cash, Feature, Payment, Person, Stats
from elicitor.shapes import EnumShape, OneOf, StructShape, ask, describe, is_shape, survey, survey_options


class TestClassification:
    """Test how fields map to question kinds."""

    def test_person(self):
        """A flat struct should describe each field in order."""
        shape = describe(Person)
        assert isinstance(shape, StructShape)
        assert [(f.name, f.kind) for f in shape.fields] == [("name", "input"), ("age", "int")]
        assert shape.field("age").attributes.min == 18
        assert shape.field("missing") is None

    def test_adventurer_kinds(self):
        """Every supported field type should get its kind."""
        kinds = {f.name: (f.kind, f.optional) for f in describe(Adventurer).fields}
        assert kinds == {
            "name": ("input", False),
            "passphrase": ("masked", False),
            "backstory": ("multiline", False),
            "height": ("float", False),
            "brave": ("confirm", False),
            "role": ("one_of", False),
            "stats": ("all_of", False),
            "inventory": ("any_of", False),
            "lucky_numbers": ("list", False),
            "journal": ("input", False),
            "title": ("input", True),
        }
        assert describe(Adventurer).field("journal").target is pathlib.Path

    def test_mask_char(self):
        """mask=True should use '*'; a string should pick another character."""

        @dataclass
        class Login:
            pin: str = ask("PIN:", mask="#")
            password: str = ask("Password:", mask=True)

        shape = describe(Login)
        assert shape.field("pin").attributes.mask_char == "#"
        assert shape.field("password").attributes.mask_char == "*"

    def test_propagated_validator_only_on_numbers(self):
        """validate_fields should attach to numeric fields only."""
        shape = describe(Stats)
        assert all(len(f.validators) == 1 for f in shape.fields)

        def check(value, responses, path):
            return None

        @survey(validate_fields=check)
        @dataclass
        class Mixed:
            label: str = ask("Label:")
            count: int = ask("Count:")

        mixed = describe(Mixed)
        assert mixed.field("label").validators == ()
        assert mixed.field("count").validators == (check,)

    def test_field_validator_runs_first(self):
        """The field's own validator should precede the propagated one."""

        def own(value, responses, path):
            return None

        def shared(value, responses, path):
            return None

        @survey(validate_fields=shared)
        @dataclass
        class Counted:
            count: int = ask("Count:", validate=own)

        assert describe(Counted).field("count").validators == (own, shared)

    def test_is_shape(self):
        """Dataclasses and enums are shapes; other types are not."""
        assert is_shape(Person)
        assert is_shape(Payment)
        assert is_shape(Feature)
        assert not is_shape(int)
        assert not is_shape("Person")

    def test_describe_is_cached(self):
        """describe should analyse a type once."""
        assert describe(Person) is describe(Person)


class TestEnums:
    """Test enum shapes."""

    def test_variants_in_declaration_order(self):
        """OneOf variants should be indexed in declaration order."""
        shape = describe(Payment)
        assert isinstance(shape, EnumShape)
        assert [v.name for v in shape.variants] == ["Cash", "Card"]
        assert [v.prompt for v in shape.variants] == ["Cash", "Card"]
        assert shape.variants[0].struct is None
        assert shape.variants[1].struct.fields[0].name == "number"

    def test_index_of(self):
        """index_of should find the variant of an existing value."""
        shape = describe(Payment)
        assert shape.index_of(Cash()) == 0
        assert shape.index_of(Card(number="1")) == 1
        with pytest.raises(TypeError):
            shape.index_of("cash")

    def test_variant_prompt_defaults_to_class_name(self):
        """A variant declared without ask= should use its class name."""

        class Size(OneOf):
            pass

        class Small(Size):
            pass

        assert describe(Size).variants[0].prompt == "Small"

    def test_plain_enum_prompts(self):
        """Plain enum prompts should be string values, else member names."""

        class Level(enum.Enum):
            LOW = 1
            HIGH = 2

        assert [v.prompt for v in describe(Feature).variants] == ["GPS", "Bluetooth", "Camera"]
        assert [v.prompt for v in describe(Level).variants] == ["LOW", "HIGH"]
        assert describe(Level).variants[1].build({}) is Level.HIGH

    def test_enum_prompt_from_survey(self):
        """A top-level enum's prompt should come from @survey(prompt=...)."""

        @survey(prompt="Pick a colour")
        class Colour(OneOf):
            pass

        class Red(Colour):
            pass

        assert describe(Colour).prompt == "Pick a colour"
        assert describe(Payment).prompt == "Payment"

    def test_options_are_not_inherited(self):
        """Options declared on a class should not leak into subclasses."""

        @survey(prelude="Base")
        @dataclass
        class Base:
            a: int = ask("A:")

        @dataclass
        class Derived(Base):
            b: int = ask("B:")

        assert survey_options(Base).prelude == "Base"
        assert survey_options(Derived).prelude is None

    def test_unit_variant_equality(self):
        """Unit variants of the same class should compare equal."""
        assert Cash() == Cash()
        assert Cash() != Card(number="1")


class TestAuthoringErrors:
    """Test malformed declarations are rejected before any schema exists."""

    def test_missing_prompt(self):
        """Every struct field needs ask() with a prompt."""

        @dataclass
        class NoPrompt:
            a: int = field(default=0)

        with pytest.raises(AuthoringError, match="no prompt"):
            describe(NoPrompt)

    def test_empty_prompt(self):
        """An empty prompt counts as missing."""

        @dataclass
        class EmptyPrompt:
            a: int = ask("")

        with pytest.raises(AuthoringError):
            describe(EmptyPrompt)

    def test_mask_and_multiline(self):
        """mask and multiline are mutually exclusive."""

        @dataclass
        class Both:
            a: str = ask("A:", mask=True, multiline=True)

        with pytest.raises(AuthoringError, match="mutually exclusive"):
            describe(Both)

    def test_mask_is_one_character(self):
        """A mask string should be exactly one character."""

        @dataclass
        class Pin:
            pin: str = ask("PIN:", mask="**")

        with pytest.raises(AuthoringError, match="single character"):
            describe(Pin)

    @pytest.mark.parametrize("option", ["mask", "multiline"])
    def test_text_options_need_str(self, option):
        """mask and multiline only apply to strings."""

        @dataclass
        class Wrong:
            a: int = ask("A:", **{option: True})

        with pytest.raises(AuthoringError, match="only valid on str"):
            describe(Wrong)

    def test_bounds_need_numbers(self):
        """min/max only apply to numeric fields."""

        @dataclass
        class Wrong:
            a: str = ask("A:", min=1)

        with pytest.raises(AuthoringError, match="numeric"):
            describe(Wrong)

    def test_min_greater_than_max(self):
        """min must not exceed max."""

        @dataclass
        class Wrong:
            a: int = ask("A:", min=10, max=1)

        with pytest.raises(AuthoringError, match="greater than max"):
            describe(Wrong)

    def test_multiselect_on_primitive(self):
        """multiselect needs a list."""

        @dataclass
        class Wrong:
            a: str = ask("A:", multiselect=True)

        with pytest.raises(AuthoringError, match="multiselect"):
            describe(Wrong)

    def test_multiselect_on_primitive_list(self):
        """multiselect needs an enum element type."""

        @dataclass
        class Wrong:
            a: List[str] = ask("A:", multiselect=True)

        with pytest.raises(AuthoringError, match="enum element"):
            describe(Wrong)

    def test_enum_list_without_multiselect(self):
        """A list of enums must be declared multiselect."""

        @dataclass
        class Wrong:
            a: List[Feature] = ask("A:")

        with pytest.raises(AuthoringError, match="multiselect=True"):
            describe(Wrong)

    @pytest.mark.parametrize("annotation", [Dict[str, int], bytes, List[bytes], Union[int, str]])
    def test_unsupported_types(self, annotation):
        """Types outside the supported set should be rejected."""
        Wrong = dataclass(type("Wrong", (), {"__annotations__": {"a": annotation}, "a": ask("A:")}))
        with pytest.raises(AuthoringError):
            describe(Wrong)

    def test_optional_nested(self):
        """Optional is not supported around nested shapes."""

        @dataclass
        class Wrong:
            payment: Optional[Payment] = ask("Pay:")

        with pytest.raises(AuthoringError, match="Optional"):
            describe(Wrong)

    def test_unresolvable_annotation(self):
        """A forward reference that cannot be resolved should be reported."""

        @dataclass
        class Wrong:
            a: "Missing" = ask("A:")  # noqa: F821

        with pytest.raises(AuthoringError, match="Cannot resolve"):
            describe(Wrong)

    def test_not_a_shape(self):
        """Plain classes and non-types are not shapes."""
        with pytest.raises(AuthoringError):
            describe(int)
        with pytest.raises(AuthoringError):
            describe("Person")

    def test_enum_without_variants(self):
        """An enum root must have at least one variant."""

        class Empty(OneOf):
            pass

        with pytest.raises(AuthoringError, match="no variants"):
            describe(Empty)

    def test_root_cannot_ask(self):
        """An enum root has no prompt of its own."""
        with pytest.raises(AuthoringError):

            class Wrong(OneOf, ask="Wrong"):
                pass

    def test_describing_a_variant(self):
        """A variant class is not itself an enum shape."""
        with pytest.raises(AuthoringError, match="variant"):
            describe(Cash)
