"""
Non-interactive backend that answers from a script.

    backend = ScriptedBackend({
        "name": "Alice",
        "age": 30,
        "payment": 1,                   # selects variant 1
        "payment.alternatives.1.number": "4111",
    })
    person = SurveyBuilder(Person).run(backend)

Script keys are dotted question paths (for enum questions the selection
path ``<path>.selected_alternative`` works too). Values are plain Python
answers and are coerced per question kind.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from elicitor.backends.base import SurveyBackend
from elicitor.errors import BackendError, ResponseTypeError
from elicitor.model import AllOfQuestion, AnyOfQuestion, OneOfQuestion, Question, SurveyDefinition, coerce_answer
from elicitor.paths import PathLike, ResponsePath
from elicitor.responses import Responses
from elicitor.validation import Validator
from elicitor.values import ChosenVariant, ChosenVariants, ResponseValue

logger = logging.getLogger(__name__)


class ScriptedBackend(SurveyBackend):
    """
    Answers every presented question from a fixed mapping.

    Questions the script does not answer fall back to their suggestion;
    optional questions may stay unanswered. Anything else is a failure,
    as is any answer that does not validate: a script cannot retry.
    """

    def __init__(self, answers: Optional[Mapping[PathLike, Any]] = None) -> None:
        self.answers: Dict[ResponsePath, Any] = {
            ResponsePath.coerce(name): value for name, value in (answers or {}).items()
        }
        self.asked = []

    def collect(self, definition: SurveyDefinition, prefilled: Responses, validator: Validator) -> Responses:
        responses = prefilled.copy()
        self.asked = []
        for question in definition.questions:
            self._visit(question, responses, validator)

        errors = validator.validate_all(responses)
        if errors:
            summary = "; ".join(f"{path}: {message}" for path, message in errors.items())
            raise BackendError(f"Responses failed validation: {summary}", errors)
        logger.debug("Scripted collection answered %d question(s)", len(self.asked))
        return responses

    def _visit(self, question: Question, responses: Responses, validator: Validator) -> None:
        kind = question.kind
        if isinstance(kind, AllOfQuestion):
            for child in kind.questions:
                self._visit(child, responses, validator)
            return

        value_path = question.value_path
        if value_path is None:
            return

        if question.is_assumed:
            value = responses.get(value_path)
        else:
            value = self._answer(question, responses, validator)
        if value is None:
            return

        if isinstance(kind, OneOfQuestion) and isinstance(value, ChosenVariant):
            self._visit(self._branch(question, value.index), responses, validator)
        elif isinstance(kind, AnyOfQuestion) and isinstance(value, ChosenVariants):
            for index in value.ordered():
                self._visit(self._branch(question, index), responses, validator)

    def _branch(self, question: Question, index: int) -> Question:
        branches = question.children()
        if not 0 <= index < len(branches):
            message = f"Unknown option {index}"
            raise BackendError(f"Invalid answer for '{question.value_path}': {message}", {question.value_path: message})
        return branches[index]

    def _answer(self, question: Question, responses: Responses, validator: Validator) -> Optional[ResponseValue]:
        value_path = question.value_path
        raw = self._scripted(question)
        if raw is None:
            value = question.suggestion
            if value is None:
                if question.optional:
                    return None
                raise BackendError(f"No answer scripted for '{question.path}'")
        else:
            try:
                value = coerce_answer(question.kind, raw, value_path)
            except ResponseTypeError as exc:
                raise BackendError(str(exc), {value_path: str(exc)}) from exc

        message = validator.validate_field(value_path, value, responses)
        if message is not None:
            raise BackendError(f"Invalid answer for '{value_path}': {message}", {value_path: message})

        responses.insert(value_path, value)
        self.asked.append(value_path)
        return value

    def _scripted(self, question: Question) -> Any:
        if question.path in self.answers:
            return self.answers[question.path]
        return self.answers.get(question.value_path)


__all__ = ["ScriptedBackend"]
