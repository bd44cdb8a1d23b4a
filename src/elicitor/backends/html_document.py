"""
Static HTML form generator.

Converts a SurveyDefinition into a self-contained HTML document with one
form control per question. The document does not collect anything by
itself; serve it, print it or post it to another tool.

Controls by kind:
    - Input / Masked / Multiline: text, password and textarea
    - Int / Float: number inputs carrying min/max bounds
    - Confirm: a checkbox
    - List: a text input holding comma-separated items
    - AllOf: a fieldset
    - OneOf: a fieldset of radio buttons, each variant's fields below it
    - AnyOf: a fieldset of checkboxes, each option's fields below it

Form control names are the dotted value paths, so a posted form maps
straight back onto a response store.
"""

import html
import logging
from dataclasses import dataclass
from typing import List, Optional

from elicitor.model import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    IntQuestion,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    SurveyDefinition,
)
from elicitor.values import BoolValue, ChosenVariant, ChosenVariants, ResponseValue

logger = logging.getLogger(__name__)

DEFAULT_STYLES = """\
body { font-family: sans-serif; max-width: 40em; margin: 2em auto; }
fieldset { margin: 1em 0; border: 1px solid #ccc; }
label { display: block; margin: 0.5em 0 0.2em; }
.alternative { margin-left: 1.5em; }
.prelude, .epilogue { color: #444; }"""


@dataclass(frozen=True)
class HtmlOptions:
    """
    Document generation settings.

    Properties:
        title: document and heading title (no heading when None)
        styles: embed DEFAULT_STYLES in a <style> element
        submit_label: text of the submit button (no button when None)
        full_document: wrap the form in <html>, <head> and <body>; when
            False only the <form> element is produced
    """

    title: Optional[str] = None
    styles: bool = True
    submit_label: Optional[str] = "Submit"
    full_document: bool = True


def _esc(text: str) -> str:
    return html.escape(text, quote=True)


def _format_value(value: ResponseValue) -> str:
    """Plain text form of a value, as a control's value attribute holds it."""
    if isinstance(value, BoolValue):
        return "true" if value.value else "false"
    if isinstance(value, ChosenVariants):
        return ",".join(str(i) for i in value.ordered())
    raw = value.raw
    if isinstance(raw, list):
        return ", ".join(str(item) for item in raw)
    return str(raw)


def _control_id(question: Question) -> str:
    return "q-" + (question.value_path.as_str() or "root").replace(".", "-")


def _bounds(minimum, maximum) -> str:
    attrs = ""
    if minimum is not None:
        attrs += f' min="{minimum}"'
    if maximum is not None:
        attrs += f' max="{maximum}"'
    return attrs


class _Renderer:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def emit(self, depth: int, line: str) -> None:
        self.lines.append("  " * depth + line)

    def question(self, question: Question, depth: int) -> None:
        kind = question.kind

        if isinstance(kind, AllOfQuestion):
            self.emit(depth, "<fieldset>")
            self.emit(depth + 1, f"<legend>{_esc(question.prompt)}</legend>")
            for child in kind.questions:
                self.question(child, depth + 1)
            self.emit(depth, "</fieldset>")
            return

        if isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
            self.choice(question, depth)
            return

        if question.value_path is None:
            return

        name = _esc(question.value_path.as_str())
        if question.is_assumed:
            value = _esc(_format_value(question.default.value))
            self.emit(depth, f'<input type="hidden" name="{name}" value="{value}">')
            return

        control_id = _control_id(question)
        suggestion = question.suggestion
        value_attr = "" if suggestion is None else f' value="{_esc(_format_value(suggestion))}"'
        required = "" if question.optional else " required"

        if isinstance(kind, ConfirmQuestion):
            checked = " checked" if isinstance(suggestion, BoolValue) and suggestion.value else ""
            self.emit(
                depth,
                f'<label><input type="checkbox" id="{control_id}" name="{name}" value="true"{checked}> '
                f"{_esc(question.prompt)}</label>",
            )
            return

        self.emit(depth, f'<label for="{control_id}">{_esc(question.prompt)}</label>')
        if isinstance(kind, MultilineQuestion):
            text = "" if suggestion is None else _esc(_format_value(suggestion))
            self.emit(depth, f'<textarea id="{control_id}" name="{name}" rows="4"{required}>{text}</textarea>')
        elif isinstance(kind, MaskedQuestion):
            self.emit(depth, f'<input type="password" id="{control_id}" name="{name}"{required}>')
        elif isinstance(kind, IntQuestion):
            self.emit(
                depth,
                f'<input type="number" id="{control_id}" name="{name}" step="1"'
                f"{_bounds(kind.min, kind.max)}{value_attr}{required}>",
            )
        elif isinstance(kind, FloatQuestion):
            self.emit(
                depth,
                f'<input type="number" id="{control_id}" name="{name}" step="any"'
                f"{_bounds(kind.min, kind.max)}{value_attr}{required}>",
            )
        elif isinstance(kind, ListQuestion):
            self.emit(
                depth,
                f'<input type="text" id="{control_id}" name="{name}" data-list="{kind.element}"'
                f' placeholder="comma-separated"{value_attr}{required}>',
            )
        else:
            self.emit(depth, f'<input type="text" id="{control_id}" name="{name}"{value_attr}{required}>')

    def choice(self, question: Question, depth: int) -> None:
        kind = question.kind
        name = _esc(question.value_path.as_str())
        single = isinstance(kind, OneOfQuestion)
        children = question.children()

        if question.is_assumed:
            value = question.default.value
            self.emit(depth, f'<input type="hidden" name="{name}" value="{_esc(_format_value(value))}">')
            chosen = [value.index] if isinstance(value, ChosenVariant) else list(value.ordered())
            for index in chosen:
                if 0 <= index < len(children):
                    for child in children[index].children():
                        self.question(child, depth)
            return

        suggestion = question.suggestion
        if isinstance(suggestion, ChosenVariant):
            suggested = {suggestion.index}
        elif isinstance(suggestion, ChosenVariants):
            suggested = set(suggestion.indices)
        else:
            suggested = set()

        input_type = "radio" if single else "checkbox"
        required = " required" if single and not question.optional else ""
        self.emit(depth, "<fieldset>")
        self.emit(depth + 1, f"<legend>{_esc(question.prompt)}</legend>")
        for index, option in enumerate(children):
            checked = " checked" if index in suggested else ""
            self.emit(
                depth + 1,
                f'<label><input type="{input_type}" name="{name}" value="{index}"{checked}{required}> '
                f"{_esc(option.prompt)}</label>",
            )
            nested = option.children()
            if nested:
                self.emit(depth + 1, '<div class="alternative">')
                for child in nested:
                    self.question(child, depth + 2)
                self.emit(depth + 1, "</div>")
        self.emit(depth, "</fieldset>")


def generate_html(definition: SurveyDefinition, options: Optional[HtmlOptions] = None) -> str:
    """
    Generate an HTML form for a survey definition.

    Args:
        definition: SurveyDefinition to render (read-only)
        options: HtmlOptions; defaults apply when None

    Returns:
        String containing the HTML document (or only the form)
    """
    options = options or HtmlOptions()
    out = _Renderer()
    base = 0

    if options.full_document:
        out.emit(0, "<!DOCTYPE html>")
        out.emit(0, '<html lang="en">')
        out.emit(0, "<head>")
        out.emit(1, '<meta charset="utf-8">')
        if options.title:
            out.emit(1, f"<title>{_esc(options.title)}</title>")
        if options.styles:
            out.emit(1, "<style>")
            for line in DEFAULT_STYLES.splitlines():
                out.emit(2, line)
            out.emit(1, "</style>")
        out.emit(0, "</head>")
        out.emit(0, "<body>")
        base = 1

    # =========================================================================
    # FORM
    # =========================================================================

    out.emit(base, '<form class="survey">')
    if options.title:
        out.emit(base + 1, f"<h1>{_esc(options.title)}</h1>")
    if definition.prelude:
        out.emit(base + 1, f'<p class="prelude">{_esc(definition.prelude)}</p>')

    for question in definition.questions:
        out.question(question, base + 1)

    if definition.epilogue:
        out.emit(base + 1, f'<p class="epilogue">{_esc(definition.epilogue)}</p>')
    if options.submit_label:
        out.emit(base + 1, f'<button type="submit">{_esc(options.submit_label)}</button>')
    out.emit(base, "</form>")

    if options.full_document:
        out.emit(0, "</body>")
        out.emit(0, "</html>")
    return "\n".join(out.lines)


def save_html_file(definition: SurveyDefinition, filename: str, options: Optional[HtmlOptions] = None) -> None:
    """
    Generate HTML and save to file.

    Args:
        definition: SurveyDefinition to render
        filename: Output file path (.html extension recommended)
        options: HtmlOptions
    """
    document = generate_html(definition, options=options)
    with open(filename, "w", encoding="utf-8") as f:
        f.write(document)
    logger.info("Wrote HTML form to %s", filename)


__all__ = ["HtmlOptions", "generate_html", "save_html_file"]
