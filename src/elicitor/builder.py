"""
Survey builder: suggestions, assumptions and running a backend.

    profile = (
        SurveyBuilder(Profile)
        .suggest("name", "Alice")
        .assume("address.country", "NZ")
        .run(backend)
    )

Suggested values are pre-filled but still presented. Assumed values are
never presented; they go straight into the responses handed to the
backend. Names are dotted paths and are resolved by walking the derived
question tree, so they always mean exactly what derivation produced.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict

from elicitor.errors import UnknownPathError, UnknownVariantError
from elicitor.mapping import deconstruct, derive_schema, field_responses, reconstruct
from elicitor.model import (
    AllOfQuestion,
    AnyOfQuestion,
    Assumed,
    DefaultValue,
    OneOfQuestion,
    Question,
    Suggested,
    SurveyDefinition,
    coerce_answer,
)
from elicitor.paths import ALTERNATIVES_KEY, PathLike, ResponsePath
from elicitor.responses import Responses
from elicitor.shapes import EnumShape, FieldShape, describe
from elicitor.validation import Validator
from elicitor.values import ChosenVariant, ChosenVariants, ResponseValue

if TYPE_CHECKING:
    from elicitor.backends.base import SurveyBackend

logger = logging.getLogger(__name__)


class SurveyBuilder:
    """
    Accumulates default values for one shape, then delegates collection.

    Every method that records a value returns the builder, so calls chain.
    Assumptions win over suggestions at the same path.
    """

    def __init__(self, shape: type) -> None:
        self.shape = shape
        self._definition = derive_schema(shape)
        self._suggestions: Dict[ResponsePath, ResponseValue] = {}
        self._assumptions: Dict[ResponsePath, ResponseValue] = {}

    def suggest(self, name: PathLike, value: Any) -> "SurveyBuilder":
        """Pre-fill the question at ``name``; the user can still change it."""
        for path, response in self._entries(name, value).items():
            self._suggestions[path] = response
        return self

    def assume(self, name: PathLike, value: Any) -> "SurveyBuilder":
        """Answer the question at ``name`` without presenting it."""
        for path, response in self._entries(name, value).items():
            self._assumptions[path] = response
        return self

    def with_suggestions(self, existing: Any) -> "SurveyBuilder":
        """Suggest every field from an existing value of the shape."""
        for path, response in deconstruct(self.shape, existing).items():
            self._suggestions[path] = response
        return self

    with_existing = with_suggestions

    def definition(self) -> SurveyDefinition:
        """The derived definition with every recorded default applied."""
        defaults: Dict[ResponsePath, DefaultValue] = {
            path: Suggested(value) for path, value in self._suggestions.items()
        }
        defaults.update((path, Assumed(value)) for path, value in self._assumptions.items())
        return self._definition.with_defaults(defaults)

    def prefilled(self) -> Responses:
        """Responses holding every assumed value."""
        return Responses(self._assumptions.items())

    def run(self, backend: "SurveyBackend") -> Any:
        """
        Collect responses with ``backend`` and build the value.

        Backend failures (including cancellation) propagate unchanged.
        """
        definition = self.definition()
        prefilled = self.prefilled()
        logger.debug(
            "Running %s with %d suggestion(s) and %d assumption(s)",
            self.shape.__name__,
            len(self._suggestions),
            len(self._assumptions),
        )
        collected = backend.collect(definition, prefilled, Validator(self.shape))
        responses = collected.copy()
        responses.merge(prefilled)
        logger.info("Collected %d response(s) for %s", len(responses), self.shape.__name__)
        return reconstruct(self.shape, responses)

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    def _entries(self, name: PathLike, value: Any) -> Responses:
        path = ResponsePath.coerce(name)
        question = self._definition.find(path)

        if _is_plain_answer(question, value):
            if question.value_path is None:
                raise UnknownPathError(path, "this question takes no value")
            answer = coerce_answer(question.kind, value, question.value_path)
            _check_indices(question, answer)
            return Responses([(question.value_path, answer)])

        if question.path.is_root():
            return deconstruct(self.shape, value)
        f = self._field_at(question.path)
        return field_responses(f, value).with_prefix(question.path.parent)

    def _field_at(self, path: ResponsePath) -> FieldShape:
        """The field declaration a (non-root) question path was derived from."""
        description = describe(self.shape)
        segments = path.segments
        while segments:
            if isinstance(description, EnumShape):
                if len(segments) < 3 or segments[0] != ALTERNATIVES_KEY or not segments[1].isdigit():
                    break
                index = int(segments[1])
                if index >= len(description.variants) or description.variants[index].struct is None:
                    break
                description = description.variants[index].struct
                segments = segments[2:]
                continue
            f = description.field(segments[0])
            if f is None:
                break
            segments = segments[1:]
            if not segments:
                return f
            if f.kind not in ("all_of", "one_of", "any_of"):
                break
            description = describe(f.target)
        raise UnknownPathError(path)


def _is_plain_answer(question: Question, value: Any) -> bool:
    """True when ``value`` answers the question directly (no shape value)."""
    if isinstance(value, ResponseValue):
        return True
    kind = question.kind
    if isinstance(kind, OneOfQuestion):
        return isinstance(value, int) and not isinstance(value, bool)
    if isinstance(kind, AnyOfQuestion):
        return isinstance(value, (list, tuple, set, frozenset)) and all(
            isinstance(item, int) and not isinstance(item, bool) for item in value
        )
    return not isinstance(kind, AllOfQuestion)


def _check_indices(question: Question, answer: ResponseValue) -> None:
    """Reject selections naming a variant or option the question does not have."""
    count = len(question.children())
    if isinstance(answer, ChosenVariant):
        indices = [answer.index]
    elif isinstance(answer, ChosenVariants):
        indices = list(answer.ordered())
    else:
        return
    for index in indices:
        if not 0 <= index < count:
            raise UnknownVariantError(question.value_path, index, count)


__all__ = ["SurveyBuilder"]
