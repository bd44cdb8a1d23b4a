"""
Tests for the HTML form generator.

These tests verify that survey definitions are correctly rendered as
static HTML forms.

Tests cover:
    - Document structure and options
    - One control per question kind, named by value path
    - Radio groups for enums, checkboxes for multi-selects
    - Suggested and assumed defaults
    - Escaping of prompts and values
"""

from elicitor.backends.html_document import HtmlOptions, generate_html, save_html_file
from elicitor.builder import SurveyBuilder
from elicitor.examples import Adventurer, Card, Checkout, Person, Phone
from elicitor.mapping import derive_schema
from elicitor.model import InputQuestion, Question, SurveyDefinition
from elicitor.paths import ResponsePath


class TestDocumentStructure:
    """Test the document around the form."""

    def test_full_document(self):
        """A full document should have head, body and one form."""
        html = generate_html(derive_schema(Person))
        assert html.startswith("<!DOCTYPE html>")
        assert "<style>" in html
        assert html.count("<form") == 1
        assert html.rstrip().endswith("</html>")

    def test_title(self):
        """The title should appear in the head and as a heading."""
        html = generate_html(derive_schema(Person), HtmlOptions(title="Sign up"))
        assert "<title>Sign up</title>" in html
        assert "<h1>Sign up</h1>" in html

    def test_form_only(self):
        """full_document=False should produce only the form."""
        html = generate_html(derive_schema(Person), HtmlOptions(full_document=False, styles=False))
        assert html.startswith('<form class="survey">')
        assert "<html" not in html
        assert "<style>" not in html

    def test_without_styles_or_submit(self):
        """Styles and the submit button should be optional."""
        html = generate_html(derive_schema(Person), HtmlOptions(styles=False, submit_label=None))
        assert "<style>" not in html
        assert "<button" not in html

    def test_prelude_and_epilogue(self):
        """Prelude and epilogue should frame the questions, escaped."""
        html = generate_html(derive_schema(Person))
        assert '<p class="prelude">Let&#x27;s get to know you.</p>' in html
        assert '<p class="epilogue">Thanks!</p>' in html
        assert html.index("prelude") < html.index('name="name"') < html.index('class="epilogue"')


class TestControls:
    """Test the control rendered for each kind."""

    def test_text_and_number(self):
        """Inputs should be named by path and carry bounds."""
        html = generate_html(derive_schema(Person))
        assert '<label for="q-name">What is your name?</label>' in html
        assert '<input type="text" id="q-name" name="name" required>' in html
        assert '<input type="number" id="q-age" name="age" step="1" min="18" max="120" required>' in html

    def test_every_kind(self):
        """Every question kind should get its own control."""
        html = generate_html(derive_schema(Adventurer))
        assert 'type="password" id="q-passphrase" name="passphrase"' in html
        assert '<textarea id="q-backstory" name="backstory" rows="4" required></textarea>' in html
        assert 'name="height" step="any" min="0.5" max="3.0"' in html
        assert '<input type="checkbox" id="q-brave" name="brave" value="true">' in html
        assert 'name="lucky_numbers" data-list="int"' in html
        assert '<input type="text" id="q-title" name="title">' in html

    def test_enum_radio_group(self):
        """An enum should be a radio group with variant fields below."""
        html = generate_html(derive_schema(Checkout))
        assert "<legend>How would you like to pay?</legend>" in html
        assert '<input type="radio" name="payment.selected_alternative" value="0" required> Cash</label>' in html
        assert '<input type="radio" name="payment.selected_alternative" value="1" required> Card</label>' in html
        assert 'name="payment.alternatives.1.number"' in html
        assert html.index('value="1" required> Card') < html.index("payment.alternatives.1.number")

    def test_multiselect_checkboxes(self):
        """A multi-select should be a group of checkboxes."""
        html = generate_html(derive_schema(Phone))
        for index, label in enumerate(["GPS", "Bluetooth", "Camera"]):
            assert f'<input type="checkbox" name="features" value="{index}"> {label}</label>' in html

    def test_nested_struct_fieldset(self):
        """Nested structs should be fieldsets with their prompt as legend."""
        html = generate_html(derive_schema(Adventurer))
        assert "<legend>Distribute your stats</legend>" in html
        assert 'name="stats.wits"' in html

    def test_escaping(self):
        """Prompts should be escaped."""
        definition = SurveyDefinition(
            questions=(Question(path=ResponsePath.parse("q"), prompt='<b>"Bold"</b>', kind=InputQuestion()),)
        )
        html = generate_html(definition)
        assert "&lt;b&gt;&quot;Bold&quot;&lt;/b&gt;" in html
        assert "<b>" not in html


class TestDefaults:
    """Test suggested and assumed defaults."""

    def test_suggestions_prefill(self):
        """Suggested values should prefill controls."""
        definition = SurveyBuilder(Checkout).suggest("payment", Card(number="4111")).definition()
        html = generate_html(definition)
        assert 'value="1" checked required> Card' in html
        assert 'name="payment.alternatives.1.number" value="4111" required>' in html

    def test_suggested_confirm_and_list(self):
        """Confirm suggestions should check the box; lists should be joined."""
        definition = (
            SurveyBuilder(Adventurer).suggest("brave", True).suggest("lucky_numbers", [7, 13]).definition()
        )
        html = generate_html(definition)
        assert 'name="brave" value="true" checked>' in html
        assert 'value="7, 13"' in html

    def test_assumed_are_hidden(self):
        """Assumed values should be hidden inputs, not questions."""
        definition = SurveyBuilder(Person).assume("age", 30).definition()
        html = generate_html(definition)
        assert '<input type="hidden" name="age" value="30">' in html
        assert 'id="q-age"' not in html

    def test_assumed_selection_keeps_variant_fields(self):
        """An assumed variant should still render its own fields."""
        definition = SurveyBuilder(Checkout).assume("payment", 1).definition()
        html = generate_html(definition)
        assert '<input type="hidden" name="payment.selected_alternative" value="1">' in html
        assert 'type="radio"' not in html
        assert 'name="payment.alternatives.1.number"' in html


def test_save_html_file(tmp_path):
    """save_html_file should write the generated document."""
    target = tmp_path / "person.html"
    definition = derive_schema(Person)
    save_html_file(definition, str(target), HtmlOptions(title="Person"))
    assert target.read_text(encoding="utf-8") == generate_html(definition, HtmlOptions(title="Person"))
