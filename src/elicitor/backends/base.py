"""
Presentation collaborator interface.

A backend is handed a fully derived SurveyDefinition, the responses that
are already known (assumed values) and a Validator, and returns the
complete response store. How it asks (terminal prompts, a GUI, a web
form, a script) is entirely its own business.
"""

from abc import ABC, abstractmethod

from elicitor.model import SurveyDefinition
from elicitor.responses import Responses
from elicitor.validation import Validator


class SurveyBackend(ABC):
    """
    Base class for presentation backends.

    ARCHITECTURAL RULE:
        Backends must not present Assumed questions, must validate every
        answer before storing it, and signal cancellation or failure by
        raising BackendError.
    """

    @abstractmethod
    def collect(self, definition: SurveyDefinition, prefilled: Responses, validator: Validator) -> Responses:
        """
        Collect responses for ``definition``.

        Args:
            definition: questions to present, with default policies applied
            prefilled: responses for assumed questions (not to be asked)
            validator: field and whole-set validation for the shape

        Returns:
            The collected responses. Prefilled entries may be included or
            left out; the caller merges them either way.

        Raises:
            BackendError: collection was cancelled or failed
        """


__all__ = ["SurveyBackend"]
