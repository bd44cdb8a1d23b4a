"""
Elicitor

Derives a question schema from a data shape and reconstructs typed values
from the answers collected for it.

ARCHITECTURAL GUARANTEE:
------------------------
The core (paths, values, responses, model, shapes, mapping, validation,
builder) contains ZERO knowledge of:
    - Terminals, GUIs or documents
    - How or in what order questions are presented

Presentation happens in backends. All backends consume the same
SurveyDefinition and hand back the same flat Responses store.
"""

import logging

from elicitor.builder import SurveyBuilder
from elicitor.errors import (
    AuthoringError,
    BackendError,
    ElicitorError,
    MissingResponseError,
    ReconstructionError,
    ResponseTypeError,
    SerializationError,
    UnknownPathError,
    UnknownVariantError,
)
from elicitor.mapping import deconstruct, derive_schema, reconstruct
from elicitor.model import Assumed, Question, Suggested, SurveyDefinition
from elicitor.paths import ROOT, ResponsePath
from elicitor.responses import Responses
from elicitor.shapes import OneOf, ask, survey
from elicitor.validation import Validator, validate_all, validate_field

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "SurveyBuilder",
    "AuthoringError",
    "BackendError",
    "ElicitorError",
    "MissingResponseError",
    "ReconstructionError",
    "ResponseTypeError",
    "SerializationError",
    "UnknownPathError",
    "UnknownVariantError",
    "derive_schema",
    "reconstruct",
    "deconstruct",
    "Assumed",
    "Question",
    "Suggested",
    "SurveyDefinition",
    "ROOT",
    "ResponsePath",
    "Responses",
    "OneOf",
    "ask",
    "survey",
    "Validator",
    "validate_all",
    "validate_field",
]
