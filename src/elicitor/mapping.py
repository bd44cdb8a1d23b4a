"""
Mapping engine: shapes to survey definitions and responses back to values.

    derive_schema(shape)           -> SurveyDefinition
    reconstruct(shape, responses)  -> value of shape (or ReconstructionError)
    deconstruct(shape, value)      -> Responses (the reverse of reconstruct)

Nested shapes are handled by recursion plus re-rooting. A nested type's
definition is derived on its own (rooted at the empty path) and then
spliced into the parent with every path rewritten under the field path.
Reconstruction mirrors this: the parent filters the responses down to the
field's prefix, strips it, and hands the sub-store to the nested type.

Both directions are pure: nothing here mutates its inputs or keeps state
between calls, apart from the per-type caches of shape descriptions and
derived definitions.
"""

from __future__ import annotations

import functools
import logging
import os
import pathlib
from collections import Counter
from typing import Any, Dict, Tuple

from elicitor.errors import AuthoringError, ReconstructionError, UnknownVariantError
from elicitor.model import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    SurveyDefinition,
    UnitQuestion,
)
from elicitor.paths import ROOT, ResponsePath
from elicitor.responses import Responses
from elicitor.shapes import (
    LIST_ELEMENTS,
    EnumShape,
    FieldShape,
    StructShape,
    describe,
)
from elicitor.values import (
    BoolValue,
    ChosenVariant,
    ChosenVariants,
    FloatValue,
    IntValue,
    StringValue,
    list_value_for,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SCHEMA DERIVATION
# =============================================================================


@functools.lru_cache(maxsize=None)
def derive_schema(shape: type) -> SurveyDefinition:
    """
    Derive the survey definition of a shape.

    Deterministic and side-effect free; the result is cached per type.

    Raises:
        AuthoringError: the shape (or a nested shape) is malformed, or two
            questions would share a path spelling
    """
    description = describe(shape)
    if isinstance(description, StructShape):
        questions = _struct_questions(description)
    else:
        questions = (_enum_question(description, description.prompt),)

    _check_unique_paths(shape, questions)

    options = description.options
    definition = SurveyDefinition(questions=questions, prelude=options.prelude, epilogue=options.epilogue)
    logger.debug("Derived %d question(s) for %s", sum(1 for _ in definition.walk()), shape.__name__)
    return definition


def _struct_questions(struct: StructShape) -> Tuple[Question, ...]:
    return tuple(_field_question(f) for f in struct.fields)


def _field_question(f: FieldShape) -> Question:
    path = ResponsePath((f.name,))
    return Question(path=path, prompt=f.prompt, kind=_field_kind(f, path), optional=f.optional)


def _field_kind(f: FieldShape, path: ResponsePath) -> QuestionKind:
    attributes = f.attributes
    if f.kind == "masked":
        return MaskedQuestion(mask=attributes.mask_char)
    if f.kind == "multiline":
        return MultilineQuestion()
    if f.kind == "confirm":
        return ConfirmQuestion()
    if f.kind == "int":
        return IntQuestion(min=attributes.min, max=attributes.max)
    if f.kind == "float":
        return FloatQuestion(min=_as_float(attributes.min), max=_as_float(attributes.max))
    if f.kind == "input":
        return InputQuestion()
    if f.kind == "list":
        return ListQuestion(element=LIST_ELEMENTS[f.target], min=attributes.min, max=attributes.max)

    nested = derive_schema(f.target)
    if f.kind == "all_of":
        return AllOfQuestion(questions=tuple(q.rerooted(path) for q in nested.questions))

    root = nested.questions[0]
    variants = tuple(v.rerooted(path) for v in root.children())
    if f.kind == "one_of":
        return OneOfQuestion(variants=variants)
    return AnyOfQuestion(options=variants)


def _enum_question(enum_shape: EnumShape, prompt: str) -> Question:
    variants = []
    for index, variant in enumerate(enum_shape.variants):
        variant_path = ROOT.alternative(index)
        if variant.struct is None:
            kind: QuestionKind = UnitQuestion()
        else:
            kind = AllOfQuestion(
                questions=tuple(q.rerooted(variant_path) for q in _struct_questions(variant.struct))
            )
        variants.append(Question(path=variant_path, prompt=variant.prompt, kind=kind))
    return Question(path=ROOT, prompt=prompt, kind=OneOfQuestion(variants=tuple(variants)))


def _check_unique_paths(shape: type, questions: Tuple[Question, ...]) -> None:
    spellings: Counter = Counter()
    for top in questions:
        for question in top.walk():
            spellings[question.path.as_str()] += 1
            if isinstance(question.kind, OneOfQuestion):
                spellings[question.path.selection().as_str()] += 1
    duplicates = sorted(spelling for spelling, count in spellings.items() if count > 1)
    if duplicates:
        raise AuthoringError(f"Ambiguous question paths in {shape.__name__}: {', '.join(duplicates)}")


def _as_float(value):
    return None if value is None else float(value)


# =============================================================================
# RECONSTRUCTION
# =============================================================================


def reconstruct(shape: type, responses: Responses) -> Any:
    """
    Build a value of ``shape`` from a populated response store.

    Read-only and idempotent: the store is never modified, so calling this
    twice on the same store yields equal values.

    Raises:
        ReconstructionError: a response is missing, has the wrong type, or
            selects an unknown variant; ``.path`` names the first offender
    """
    description = describe(shape)
    logger.debug("Reconstructing %s from %d response(s)", shape.__name__, len(responses))
    if isinstance(description, StructShape):
        return _reconstruct_struct(description, responses)
    return _reconstruct_enum(description, responses)


def _reconstruct_struct(struct: StructShape, responses: Responses) -> Any:
    values: Dict[str, Any] = {}
    for f in struct.fields:
        values[f.name] = _read_field(f, responses)
    return struct.build(values)


def _read_field(f: FieldShape, responses: Responses) -> Any:
    path = ResponsePath((f.name,))
    if f.optional and path not in responses:
        return None

    if f.kind in ("input", "masked", "multiline"):
        text = responses.get_string(path)
        return pathlib.Path(text) if f.target is pathlib.Path else text
    if f.kind == "confirm":
        return responses.get_bool(path)
    if f.kind == "int":
        return responses.get_int(path)
    if f.kind == "float":
        return responses.get_float(path)
    if f.kind == "list":
        if f.target is str:
            return responses.get_string_list(path)
        if f.target is int:
            return responses.get_int_list(path)
        return responses.get_float_list(path)
    if f.kind == "any_of":
        return _read_multiselect(f, path, responses)

    try:
        return reconstruct(f.target, responses.filter_prefix(path))
    except ReconstructionError as exc:
        raise exc.rerooted(path) from None


def _read_multiselect(f: FieldShape, path: ResponsePath, responses: Responses) -> list:
    """
    One element per selected index, ascending.

    Each element is built by the enum's own reconstruction from a
    synthesized store holding the selection index (plus that option's
    payload responses, if it carries data).
    """
    enum_shape = describe(f.target)
    items = []
    for index in responses.get_chosen_variants(path):
        if not 0 <= index < len(enum_shape.variants):
            raise UnknownVariantError(path, index, len(enum_shape.variants))
        option_root = ROOT.alternative(index)
        option_store = Responses([(ROOT.selection(), ChosenVariant(index))])
        option_store.merge(responses.filter_prefix(path.join(option_root)).with_prefix(option_root))
        try:
            items.append(reconstruct(f.target, option_store))
        except ReconstructionError as exc:
            raise exc.rerooted(path) from None
    return items


def _reconstruct_enum(enum_shape: EnumShape, responses: Responses) -> Any:
    selection = ROOT.selection()
    index = responses.get_chosen_variant(selection)
    if not 0 <= index < len(enum_shape.variants):
        raise UnknownVariantError(selection, index, len(enum_shape.variants))

    variant = enum_shape.variants[index]
    if variant.struct is None:
        return variant.build({})

    variant_root = ROOT.alternative(index)
    try:
        return _reconstruct_struct(variant.struct, responses.filter_prefix(variant_root))
    except ReconstructionError as exc:
        raise exc.rerooted(variant_root) from None


# =============================================================================
# DECONSTRUCTION
# =============================================================================


def deconstruct(shape: type, value: Any) -> Responses:
    """
    Read an existing value of ``shape`` into a response store.

    This is reconstruction in reverse: ``reconstruct(shape,
    deconstruct(shape, value)) == value`` for every value whose
    multi-select lists are in declaration order.
    """
    description = describe(shape)
    if isinstance(description, StructShape):
        return _deconstruct_struct(description, value)
    return _deconstruct_enum(description, value)


def _deconstruct_struct(struct: StructShape, value: Any) -> Responses:
    out = Responses()
    for f in struct.fields:
        _write_field(f, getattr(value, f.name), out)
    return out


def field_responses(f: FieldShape, value: Any) -> Responses:
    """Responses for one field's value, keyed relative to the owning struct."""
    out = Responses()
    _write_field(f, value, out)
    return out


def _write_field(f: FieldShape, value: Any, out: Responses) -> None:
    path = ResponsePath((f.name,))
    if value is None and f.optional:
        return

    if f.kind in ("input", "masked", "multiline"):
        out.insert(path, StringValue(os.fspath(value) if isinstance(value, os.PathLike) else value))
    elif f.kind == "confirm":
        out.insert(path, BoolValue(value))
    elif f.kind == "int":
        out.insert(path, IntValue(value))
    elif f.kind == "float":
        out.insert(path, FloatValue(float(value)))
    elif f.kind == "list":
        out.insert(path, list_value_for(f.target, value))
    elif f.kind == "any_of":
        enum_shape = describe(f.target)
        indices = set()
        for item in value:
            indices.add(enum_shape.index_of(item))
            for item_path, item_value in deconstruct(f.target, item).items():
                if item_path != ROOT.selection():
                    out.insert(path.join(item_path), item_value)
        out.insert(path, ChosenVariants(frozenset(indices)))
    else:
        out.merge(deconstruct(f.target, value).with_prefix(path))


def _deconstruct_enum(enum_shape: EnumShape, value: Any) -> Responses:
    index = enum_shape.index_of(value)
    out = Responses([(ROOT.selection(), ChosenVariant(index))])
    variant = enum_shape.variants[index]
    if variant.struct is not None:
        out.merge(_deconstruct_struct(variant.struct, value).with_prefix(ROOT.alternative(index)))
    return out


__all__ = ["derive_schema", "reconstruct", "deconstruct", "field_responses"]
