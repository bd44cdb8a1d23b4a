"""
Validation dispatch.

Validation is invoked by presentation collaborators while collecting
answers, never by reconstruction. Three classes of validator exist:

    Field-level   declared with ask(validate=...); checks one value
    Propagated    declared with @survey(validate_fields=...); attached to
                  every numeric field of the struct when it is described
    Composite     declared with @survey(validate=...); checks the whole
                  response set of the struct once every field passes

Numeric bounds (min/max) act as an implicit field-level validator that
runs ahead of the declared ones. At most one message is reported per path.

Nested shapes re-delegate: the dispatcher strips the field's prefix from
the path and from the responses and asks the nested shape, so a nested
struct's validators always see paths and responses relative to itself.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple

from elicitor.errors import UnknownPathError
from elicitor.paths import ALTERNATIVES_KEY, ROOT, PathLike, ResponsePath
from elicitor.responses import Responses
from elicitor.shapes import LIST_ELEMENTS, EnumShape, FieldShape, Shape, StructShape, VariantShape, describe
from elicitor.values import ChosenVariant, ChosenVariants, ResponseValue

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This question requires an answer"

_FIELD_TAGS = {
    "input": "string",
    "masked": "string",
    "multiline": "string",
    "confirm": "bool",
    "int": "int",
    "float": "float",
    "any_of": ChosenVariants.tag,
}


def validate_field(
    shape: type,
    path: PathLike,
    value: ResponseValue,
    responses: Responses,
) -> Optional[str]:
    """
    Validate one answer before it is accepted.

    Args:
        shape: the top-level shape being collected
        path: where ``value`` will be stored
        value: the candidate answer
        responses: everything collected so far

    Returns:
        An error message, or None if the value is acceptable.

    Raises:
        UnknownPathError: ``path`` does not address a question of ``shape``
    """
    path = ResponsePath.coerce(path)
    message = _dispatch(describe(shape), path, value, responses, path)
    if message is not None:
        logger.debug("Rejected answer at %s: %s", path, message)
    return message


def _dispatch(
    description: Shape,
    path: ResponsePath,
    value: ResponseValue,
    responses: Responses,
    full_path: ResponsePath,
) -> Optional[str]:
    if isinstance(description, EnumShape):
        return _dispatch_enum(description, path, value, responses, full_path)

    if path.is_root():
        raise UnknownPathError(full_path)
    f = description.field(path.segments[0])
    if f is None:
        raise UnknownPathError(full_path)
    field_path = ResponsePath((f.name,))

    if f.kind in ("all_of", "one_of") or (f.kind == "any_of" and len(path) > 1):
        return _dispatch(
            describe(f.target),
            path.strip_prefix(field_path),
            value,
            responses.filter_prefix(field_path),
            full_path,
        )
    if len(path) > 1:
        raise UnknownPathError(full_path)
    return check_field(f, value, responses, field_path)


def _dispatch_enum(
    enum_shape: EnumShape,
    path: ResponsePath,
    value: ResponseValue,
    responses: Responses,
    full_path: ResponsePath,
) -> Optional[str]:
    if path == ROOT.selection():
        return check_selection(enum_shape, value)

    segments = path.segments
    if len(segments) < 3 or segments[0] != ALTERNATIVES_KEY:
        raise UnknownPathError(full_path)
    variant = _variant_at(enum_shape, segments[1])
    if variant is None or variant.struct is None:
        raise UnknownPathError(full_path, "no such variant field")
    variant_root = ResponsePath(segments[:2])
    return _dispatch(
        variant.struct,
        path.strip_prefix(variant_root),
        value,
        responses.filter_prefix(variant_root),
        full_path,
    )


def _variant_at(enum_shape: EnumShape, segment: str) -> Optional[VariantShape]:
    if not segment.isdigit():
        return None
    index = int(segment)
    if index >= len(enum_shape.variants):
        return None
    return enum_shape.variants[index]


def check_selection(enum_shape: EnumShape, value: ResponseValue) -> Optional[str]:
    if not isinstance(value, ChosenVariant):
        return f"Expected a {ChosenVariant.tag} answer, got {value.tag}"
    if not 0 <= value.index < len(enum_shape.variants):
        return f"Unknown option {value.index}"
    return None


def check_field(f: FieldShape, value: ResponseValue, responses: Responses, path: ResponsePath) -> Optional[str]:
    """
    Run the implicit checks and then the declared validators of one field.

    Order: value type, bounds, the field's own validator, the propagated
    validator. The first message wins.
    """
    expected = _expected_tag(f)
    if value.tag != expected:
        return f"Expected a {expected} answer, got {value.tag}"

    message = _check_bounds(f, value)
    if message is not None:
        return message

    for validator in f.validators:
        message = validator(value, responses, path)
        if message:
            return message
    return None


def _expected_tag(f: FieldShape) -> str:
    if f.kind == "list":
        return f"{LIST_ELEMENTS[f.target]}_list"
    return _FIELD_TAGS[f.kind]


def _check_bounds(f: FieldShape, value: ResponseValue) -> Optional[str]:
    if f.kind == "any_of":
        count = len(describe(f.target).variants)
        unknown = [index for index in value.ordered() if not 0 <= index < count]
        if unknown:
            return f"Unknown option {unknown[0]}"
        return None

    low, high = f.attributes.min, f.attributes.max
    if low is None and high is None:
        return None
    if f.kind in ("int", "float"):
        numbers = [value.value]
    elif f.kind == "list":
        numbers = list(value.items)
    else:
        return None

    for number in numbers:
        if low is not None and not low <= number:
            return f"Value must be at least {low}"
        if high is not None and not number <= high:
            return f"Value must be at most {high}"
    return None


# =============================================================================
# WHOLE-SET VALIDATION
# =============================================================================


def validate_all(shape: type, responses: Responses) -> Dict[ResponsePath, str]:
    """
    Validate a complete response set.

    Reports, one message per path:
        - every present answer failing its field-level checks
        - every required question of an active branch left unanswered
        - when both of the above are clean, the composite validators of
          every struct in the active tree (re-rooted under their field)

    Returns:
        Mapping from path to message; empty when the set is valid.
    """
    description = describe(shape)
    errors: Dict[ResponsePath, str] = {}

    if isinstance(description, EnumShape):
        _report_selection(description, responses, ROOT, errors)

    for struct, sub, prefix in _active_structs(description, responses, ROOT):
        for f in struct.fields:
            field_path = ResponsePath((f.name,))
            if f.kind == "all_of":
                continue
            if f.kind == "one_of":
                _report_selection(describe(f.target), sub.filter_prefix(field_path), prefix.join(field_path), errors)
                continue
            value = sub.get(field_path)
            if value is None:
                if not f.optional:
                    errors[prefix.join(field_path)] = REQUIRED_MESSAGE
                continue
            message = check_field(f, value, sub, field_path)
            if message is not None:
                errors[prefix.join(field_path)] = message

    if errors:
        logger.debug("Field validation failed at %d path(s)", len(errors))
        return errors

    for struct, sub, prefix in _active_structs(description, responses, ROOT):
        composite = struct.options.validate
        if composite is None:
            continue
        for path, message in dict(composite(sub) or {}).items():
            errors.setdefault(prefix.join(ResponsePath.coerce(path)), message)

    if errors:
        logger.debug("Composite validation failed at %d path(s)", len(errors))
    return errors


def _report_selection(
    enum_shape: EnumShape,
    responses: Responses,
    prefix: ResponsePath,
    errors: Dict[ResponsePath, str],
) -> None:
    value = responses.get(ROOT.selection())
    if value is None:
        errors[prefix.selection()] = REQUIRED_MESSAGE
        return
    message = check_selection(enum_shape, value)
    if message is not None:
        errors[prefix.selection()] = message


def _active_structs(
    description: Shape,
    responses: Responses,
    prefix: ResponsePath,
) -> Iterator[Tuple[StructShape, Responses, ResponsePath]]:
    """
    Every struct reachable through answered selections.

    Yields (struct, responses relative to it, its path from the root).
    Unselected variants and options are skipped.
    """
    if isinstance(description, EnumShape):
        value = responses.get(ROOT.selection())
        if isinstance(value, ChosenVariant) and 0 <= value.index < len(description.variants):
            variant = description.variants[value.index]
            if variant.struct is not None:
                variant_root = ROOT.alternative(value.index)
                yield from _active_structs(
                    variant.struct, responses.filter_prefix(variant_root), prefix.join(variant_root)
                )
        return

    yield description, responses, prefix
    for f in description.fields:
        field_path = ResponsePath((f.name,))
        if f.kind in ("all_of", "one_of"):
            yield from _active_structs(describe(f.target), responses.filter_prefix(field_path), prefix.join(field_path))
        elif f.kind == "any_of":
            value = responses.get(field_path)
            if not isinstance(value, ChosenVariants):
                continue
            enum_shape = describe(f.target)
            for index in value.ordered():
                if not 0 <= index < len(enum_shape.variants):
                    continue
                option = enum_shape.variants[index]
                if option.struct is None:
                    continue
                option_root = field_path.join(ROOT.alternative(index))
                yield from _active_structs(option.struct, responses.filter_prefix(option_root), prefix.join(option_root))


class Validator:
    """
    Validation entry points bound to one shape.

    Handed to presentation backends so they can check answers without
    knowing anything about the shape itself.
    """

    def __init__(self, shape: type) -> None:
        self.shape = shape
        describe(shape)

    def validate_field(self, path: PathLike, value: ResponseValue, responses: Responses) -> Optional[str]:
        return validate_field(self.shape, path, value, responses)

    def validate_all(self, responses: Responses) -> Dict[ResponsePath, str]:
        return validate_all(self.shape, responses)


__all__ = ["validate_field", "validate_all", "Validator", "REQUIRED_MESSAGE"]
