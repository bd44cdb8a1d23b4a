"""
Core Survey Model Objects

Defines the presentation-agnostic description of what must be answered
to construct a value of some shape:

    - Question kinds (what sort of answer a question takes)
    - Default policies (none / suggested / assumed)
    - Questions (a path, a prompt, a kind and a default)
    - SurveyDefinition (root container: questions plus prelude/epilogue)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about terminals, GUIs or documents
        - Are immutable
        - Are fully serializable
        - Represent structure, not behavior

Nested shapes are represented by the three grouping kinds:

    AllOf   every child question must be answered (a nested struct)
    OneOf   exactly one variant group is answered (an enum); the chosen
            index is stored at ``<path>.selected_alternative`` and variant
            N's questions live under ``<path>.alternatives.N``
    AnyOf   any subset of the options is selected (multi-select over an
            enum); selected indices are stored at ``<path>``
"""

from __future__ import annotations

import os
from abc import ABC
from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, Iterator, Mapping, Optional, Tuple, Union

from elicitor.errors import ResponseTypeError, UnknownPathError
from elicitor.paths import PathLike, ResponsePath
from elicitor.values import (
    INT_MAX,
    INT_MIN,
    BoolValue,
    ChosenVariant,
    ChosenVariants,
    FloatValue,
    IntValue,
    ResponseValue,
    StringValue,
    list_value_for,
)

DEFAULT_MASK = "*"

Number = Union[int, float]


# =============================================================================
# QUESTION KINDS
# =============================================================================


class QuestionKind(ABC):
    """
    Base class for question kinds.

    The set of kinds is closed. ``name`` identifies the kind in serialized
    form; ``value_tag`` is the tag of the ResponseValue a question of this
    kind is answered with (None for kinds that carry no value).
    """

    name: ClassVar[str] = ""
    value_tag: ClassVar[Optional[str]] = None


@dataclass(frozen=True)
class UnitQuestion(QuestionKind):
    """An enum variant with no fields. Nothing to answer."""

    name: ClassVar[str] = "unit"


@dataclass(frozen=True)
class InputQuestion(QuestionKind):
    """Single-line text."""

    name: ClassVar[str] = "input"
    value_tag: ClassVar[Optional[str]] = StringValue.tag


@dataclass(frozen=True)
class MultilineQuestion(QuestionKind):
    """Multi-line text, typically edited in a text area or editor."""

    name: ClassVar[str] = "multiline"
    value_tag: ClassVar[Optional[str]] = StringValue.tag


@dataclass(frozen=True)
class MaskedQuestion(QuestionKind):
    """Text whose characters are hidden while typed (passwords)."""

    name: ClassVar[str] = "masked"
    value_tag: ClassVar[Optional[str]] = StringValue.tag

    mask: str = DEFAULT_MASK


@dataclass(frozen=True)
class IntQuestion(QuestionKind):
    name: ClassVar[str] = "int"
    value_tag: ClassVar[Optional[str]] = IntValue.tag

    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(frozen=True)
class FloatQuestion(QuestionKind):
    name: ClassVar[str] = "float"
    value_tag: ClassVar[Optional[str]] = FloatValue.tag

    min: Optional[float] = None
    max: Optional[float] = None


@dataclass(frozen=True)
class ConfirmQuestion(QuestionKind):
    """Yes/no."""

    name: ClassVar[str] = "confirm"
    value_tag: ClassVar[Optional[str]] = BoolValue.tag


@dataclass(frozen=True)
class ListQuestion(QuestionKind):
    """
    A list of one primitive type.

    Properties:
        element: "string", "int" or "float"
        min / max: bounds applied to every element (numeric lists only)
    """

    name: ClassVar[str] = "list"

    element: str = "string"
    min: Optional[Number] = None
    max: Optional[Number] = None

    @property
    def value_tag(self) -> str:  # type: ignore[override]
        return f"{self.element}_list"


@dataclass(frozen=True)
class AllOfQuestion(QuestionKind):
    """An ordered group of questions that must all be answered."""

    name: ClassVar[str] = "all_of"

    questions: Tuple["Question", ...] = ()


@dataclass(frozen=True)
class OneOfQuestion(QuestionKind):
    """
    Exactly one of N variant groups is answered.

    Each variant is itself a Question at ``<path>.alternatives.N`` whose
    kind is UnitQuestion or AllOfQuestion. Only the selected variant's
    descendants need responses.
    """

    name: ClassVar[str] = "one_of"
    value_tag: ClassVar[Optional[str]] = ChosenVariant.tag

    variants: Tuple["Question", ...] = ()


@dataclass(frozen=True)
class AnyOfQuestion(QuestionKind):
    """
    Independent yes/no per option of an enum.

    Options follow the same layout as OneOf variants. A data-carrying
    option's questions only need responses when the option is selected.
    """

    name: ClassVar[str] = "any_of"
    value_tag: ClassVar[Optional[str]] = ChosenVariants.tag

    options: Tuple["Question", ...] = ()


# =============================================================================
# DEFAULT POLICIES
# =============================================================================


class DefaultValue(ABC):
    """How a question is pre-populated before presentation."""


@dataclass(frozen=True)
class NoDefault(DefaultValue):
    """The question must be answered."""


@dataclass(frozen=True)
class Suggested(DefaultValue):
    """Pre-filled, but still presented for confirmation or editing."""

    value: ResponseValue


@dataclass(frozen=True)
class Assumed(DefaultValue):
    """
    Never presented. The value is injected into the responses as-is.

    Presentation collaborators must not query an assumed path again.
    """

    value: ResponseValue


NO_DEFAULT = NoDefault()


# =============================================================================
# QUESTIONS
# =============================================================================


@dataclass(frozen=True)
class Question:
    """
    One node of a survey definition.

    Properties:
        path:
            Location of this question's response, relative to the root of
            the shape the definition was derived from.

        prompt:
            Human-readable question text.

        kind:
            What sort of answer is expected (see QuestionKind).

        default:
            NoDefault, Suggested or Assumed.

        optional:
            True when the field may stay unanswered (reconstructs to None).
    """

    path: ResponsePath
    prompt: str
    kind: QuestionKind
    default: DefaultValue = NO_DEFAULT
    optional: bool = False

    @property
    def value_path(self) -> Optional[ResponsePath]:
        """
        Path where this question's own answer is stored.

        OneOf answers live under the reserved selection segment; group and
        unit questions carry no value of their own.
        """
        if isinstance(self.kind, OneOfQuestion):
            return self.path.selection()
        if self.kind.value_tag is None:
            return None
        return self.path

    @property
    def is_assumed(self) -> bool:
        return isinstance(self.default, Assumed)

    @property
    def suggestion(self) -> Optional[ResponseValue]:
        if isinstance(self.default, Suggested):
            return self.default.value
        return None

    def children(self) -> Tuple["Question", ...]:
        kind = self.kind
        if isinstance(kind, AllOfQuestion):
            return kind.questions
        if isinstance(kind, OneOfQuestion):
            return kind.variants
        if isinstance(kind, AnyOfQuestion):
            return kind.options
        return ()

    def walk(self) -> Iterator["Question"]:
        """This question and all of its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def rerooted(self, prefix: ResponsePath) -> "Question":
        """Copy of this subtree with every path placed under ``prefix``."""
        return self._rebuild(
            path=prefix.join(self.path),
            children=tuple(child.rerooted(prefix) for child in self.children()),
        )

    def with_default(self, default: DefaultValue) -> "Question":
        return replace(self, default=default)

    def _rebuild(self, path: ResponsePath, children: Tuple["Question", ...]) -> "Question":
        kind = self.kind
        if isinstance(kind, AllOfQuestion):
            kind = AllOfQuestion(questions=children)
        elif isinstance(kind, OneOfQuestion):
            kind = OneOfQuestion(variants=children)
        elif isinstance(kind, AnyOfQuestion):
            kind = AnyOfQuestion(options=children)
        return replace(self, path=path, kind=kind)


@dataclass(frozen=True)
class SurveyDefinition:
    """
    Root container for everything a presentation layer needs.

    Everything a backend renders or asks MUST be derivable from this
    object alone. Document generators consume it read-only.

    INVARIANTS:
        - No two questions anywhere in the tree share a path
        - Paths are spelled with segments that contain no "."
    """

    questions: Tuple[Question, ...] = ()
    prelude: Optional[str] = None
    epilogue: Optional[str] = None

    def walk(self) -> Iterator[Question]:
        for question in self.questions:
            yield from question.walk()

    def find(self, path: PathLike) -> Question:
        """
        Question at ``path``.

        A selection path (``<enum>.selected_alternative``) resolves to its
        OneOf question.
        """
        path = ResponsePath.coerce(path)
        for question in self.walk():
            if question.path == path or question.value_path == path:
                return question
        raise UnknownPathError(path)

    def with_defaults(self, defaults: Mapping[ResponsePath, DefaultValue]) -> "SurveyDefinition":
        """
        Copy of this definition with default policies applied.

        ``defaults`` is keyed by value path (see Question.value_path).
        """
        remaining: Dict[ResponsePath, DefaultValue] = dict(defaults)
        questions = tuple(_apply_defaults(q, remaining) for q in self.questions)
        if remaining:
            raise UnknownPathError(next(iter(remaining)), "no question takes a value there")
        return replace(self, questions=questions)


def _apply_defaults(question: Question, remaining: Dict[ResponsePath, DefaultValue]) -> Question:
    children = tuple(_apply_defaults(child, remaining) for child in question.children())
    rebuilt = question._rebuild(question.path, children)
    value_path = question.value_path
    if value_path is not None and value_path in remaining:
        rebuilt = rebuilt.with_default(remaining.pop(value_path))
    return rebuilt


# =============================================================================
# ANSWER COERCION
# =============================================================================


def coerce_answer(kind: QuestionKind, raw, path: PathLike = ()) -> ResponseValue:
    """
    Turn a plain Python answer into the ResponseValue ``kind`` expects.

    Raises:
        ResponseTypeError: when ``raw`` cannot answer a question of ``kind``
    """
    path = ResponsePath.coerce(path)
    expected = kind.value_tag
    if expected is None:
        raise ResponseTypeError(path, expected=kind.name, actual="a value (this question takes none)")

    if isinstance(raw, ResponseValue):
        if raw.tag != expected:
            raise ResponseTypeError(path, expected=expected, actual=raw.tag)
        return raw

    if isinstance(kind, (InputQuestion, MultilineQuestion, MaskedQuestion)):
        if isinstance(raw, str):
            return StringValue(raw)
        if isinstance(raw, os.PathLike):
            return StringValue(os.fspath(raw))
    elif isinstance(kind, IntQuestion):
        if _is_int(raw):
            return IntValue(raw)
    elif isinstance(kind, FloatQuestion):
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return FloatValue(float(raw))
    elif isinstance(kind, ConfirmQuestion):
        if isinstance(raw, bool):
            return BoolValue(raw)
    elif isinstance(kind, OneOfQuestion):
        if _is_int(raw):
            return ChosenVariant(raw)
    elif isinstance(kind, AnyOfQuestion):
        if _is_sequence(raw) and all(_is_int(i) for i in raw):
            return ChosenVariants(frozenset(raw))
    elif isinstance(kind, ListQuestion):
        if _is_sequence(raw):
            element_type = {"string": str, "int": int, "float": float}[kind.element]
            items = list(raw)
            if all(_is_element(item, element_type) for item in items):
                return list_value_for(element_type, items)

    raise ResponseTypeError(path, expected=expected, actual=type(raw).__name__)


def _is_sequence(raw) -> bool:
    return isinstance(raw, (list, tuple, set, frozenset))


def _is_int(raw) -> bool:
    return isinstance(raw, int) and not isinstance(raw, bool) and INT_MIN <= raw <= INT_MAX


def _is_element(item, element_type: type) -> bool:
    if isinstance(item, bool):
        return False
    if element_type is int:
        return _is_int(item)
    if element_type is float:
        return isinstance(item, (int, float))
    return isinstance(item, element_type)


__all__ = [
    "DEFAULT_MASK",
    "QuestionKind",
    "UnitQuestion",
    "InputQuestion",
    "MultilineQuestion",
    "MaskedQuestion",
    "IntQuestion",
    "FloatQuestion",
    "ConfirmQuestion",
    "ListQuestion",
    "AllOfQuestion",
    "OneOfQuestion",
    "AnyOfQuestion",
    "DefaultValue",
    "NoDefault",
    "Suggested",
    "Assumed",
    "NO_DEFAULT",
    "Question",
    "SurveyDefinition",
    "coerce_answer",
]
