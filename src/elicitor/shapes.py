"""
Shape declarations and their descriptions.

A shape is a statically known data type whose structure drives schema
derivation. Three kinds of Python types are shapes:

    Structs     a @dataclass (optionally decorated with @survey) whose
                fields are declared with ask(...)
    Enums       a class deriving from OneOf; every subclass declared with
                ``class Card(Payment, ask="Card")`` is one variant, in
                declaration order, optionally a dataclass carrying fields
    Plain enums an enum.Enum subclass (unit variants only)

Example:

    @survey(prelude="Welcome!")
    @dataclass
    class Profile:
        name: str = ask("What is your name?")
        age: int = ask("How old are you?", min=18, max=120)

describe() inspects a type exactly once (results are cached per type)
and performs every authoring check. Nothing here produces questions;
that is the mapping engine's job.
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import pathlib
import sys
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from elicitor.errors import AuthoringError
from elicitor.model import DEFAULT_MASK
from elicitor.values import ResponseValue

ASK_METADATA_KEY = "elicitor"
SURVEY_OPTIONS_ATTR = "__survey_options__"

Number = Union[int, float]

# (value, responses so far, path) -> error message or None
FieldValidator = Callable[[ResponseValue, Any, Any], Optional[str]]
# (responses) -> {path: message}
CompositeValidator = Callable[[Any], Mapping[Any, str]]

PRIMITIVE_KINDS = {bool: "confirm", int: "int", float: "float", str: "input", pathlib.Path: "input"}
LIST_ELEMENTS = {str: "string", int: "int", float: "float"}
NUMERIC_KINDS = ("int", "float")

if sys.version_info >= (3, 10):
    import types as _types

    _UNION_ORIGINS: Tuple[Any, ...] = (Union, _types.UnionType)
else:
    _UNION_ORIGINS = (Union,)


# =============================================================================
# DECLARATIONS
# =============================================================================


@dataclass(frozen=True)
class FieldAttributes:
    """Attributes declared on a field with ask()."""

    prompt: Optional[str] = None
    mask: Union[bool, str] = False
    multiline: bool = False
    min: Optional[Number] = None
    max: Optional[Number] = None
    multiselect: bool = False
    validate: Optional[FieldValidator] = None

    @property
    def mask_char(self) -> Optional[str]:
        if self.mask is True:
            return DEFAULT_MASK
        if isinstance(self.mask, str) and self.mask:
            return self.mask
        return None


@dataclass(frozen=True)
class SurveyOptions:
    """Shape-level attributes declared with @survey."""

    prelude: Optional[str] = None
    epilogue: Optional[str] = None
    prompt: Optional[str] = None
    validate_fields: Optional[FieldValidator] = None
    validate: Optional[CompositeValidator] = None


def ask(
    prompt: Optional[str] = None,
    *,
    mask: Union[bool, str] = False,
    multiline: bool = False,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
    multiselect: bool = False,
    validate: Optional[FieldValidator] = None,
    **field_kwargs: Any,
) -> Any:
    """
    Declare a surveyed dataclass field.

    Returns a ``dataclasses.field`` whose metadata carries the attributes;
    any extra keyword arguments are passed through to ``field``.
    """
    attributes = FieldAttributes(
        prompt=prompt,
        mask=mask,
        multiline=multiline,
        min=min,
        max=max,
        multiselect=multiselect,
        validate=validate,
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[ASK_METADATA_KEY] = attributes
    return field(metadata=metadata, **field_kwargs)


def survey(
    cls: Optional[type] = None,
    *,
    prelude: Optional[str] = None,
    epilogue: Optional[str] = None,
    prompt: Optional[str] = None,
    validate_fields: Optional[FieldValidator] = None,
    validate: Optional[CompositeValidator] = None,
):
    """
    Attach shape-level options to a struct or enum. Usable bare or called.

    Args:
        prelude / epilogue: text shown before / after the questions
        prompt: question text for an enum used as the top-level shape
        validate_fields: validator propagated to every numeric field
        validate: composite validator over the shape's whole response set
    """
    options = SurveyOptions(
        prelude=prelude,
        epilogue=epilogue,
        prompt=prompt,
        validate_fields=validate_fields,
        validate=validate,
    )

    def wrap(target: type) -> type:
        setattr(target, SURVEY_OPTIONS_ATTR, options)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


class OneOf:
    """
    Base class for enum shapes whose variants may carry data.

    A direct subclass is an enum root; every subclass of a root is one of
    its variants, registered in declaration order:

        class Payment(OneOf):
            pass

        class Cash(Payment, ask="Cash"):
            pass

        @dataclass
        class Card(Payment, ask="Card"):
            number: str = ask("Card number:")
    """

    __variants__: ClassVar[List[Tuple[type, str]]]

    def __init_subclass__(cls, ask: Optional[str] = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if OneOf in cls.__bases__:
            if ask is not None:
                raise AuthoringError(f"Enum root {cls.__name__} cannot declare ask=; use @survey(prompt=...)")
            cls.__variants__ = []
            return
        root = _enum_root(cls)
        root.__variants__.append((cls, ask or cls.__name__))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _enum_root(cls: type) -> type:
    for base in cls.__mro__[1:]:
        if "__variants__" in base.__dict__:
            return base
    raise AuthoringError(f"{cls.__name__} is not derived from a OneOf enum root")


def survey_options(shape: type) -> SurveyOptions:
    return shape.__dict__.get(SURVEY_OPTIONS_ATTR) or SurveyOptions()


# =============================================================================
# DESCRIPTIONS
# =============================================================================


@dataclass(frozen=True)
class FieldShape:
    """
    One analysed field of a struct or variant.

    Properties:
        name: dataclass field name (the path segment)
        kind: question kind name the field maps to
        target: the type answers are converted to (primitive, list element
            or nested shape)
        optional: True for Optional[...] fields
        validators: user validator first, then the propagated one
    """

    name: str
    kind: str
    target: Any
    attributes: FieldAttributes
    optional: bool = False
    validators: Tuple[FieldValidator, ...] = ()

    @property
    def prompt(self) -> str:
        return self.attributes.prompt or ""

    @property
    def is_nested(self) -> bool:
        return self.kind in ("all_of", "one_of")


@dataclass(frozen=True)
class StructShape:
    cls: type
    fields: Tuple[FieldShape, ...]
    options: SurveyOptions

    def field(self, name: str) -> Optional[FieldShape]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None

    def build(self, values: Dict[str, Any]) -> Any:
        return self.cls(**values)


@dataclass(frozen=True)
class VariantShape:
    """
    One enum variant.

    ``struct`` is None for unit variants. ``member`` is set for variants
    of a plain enum.Enum.
    """

    name: str
    prompt: str
    cls: Any
    struct: Optional[StructShape] = None
    member: Optional[enum.Enum] = None

    def build(self, values: Dict[str, Any]) -> Any:
        if self.member is not None:
            return self.member
        if self.struct is not None:
            return self.struct.build(values)
        return self.cls()


@dataclass(frozen=True)
class EnumShape:
    cls: type
    variants: Tuple[VariantShape, ...]
    options: SurveyOptions

    @property
    def prompt(self) -> str:
        return self.options.prompt or self.cls.__name__

    def index_of(self, value: Any) -> int:
        """Variant index of an existing value of this enum."""
        for index, variant in enumerate(self.variants):
            if variant.member is not None:
                if value is variant.member:
                    return index
            elif type(value) is variant.cls:
                return index
        raise TypeError(f"{value!r} is not a variant of {self.cls.__name__}")


Shape = Union[StructShape, EnumShape]


def is_shape(tp: Any) -> bool:
    return isinstance(tp, type) and (dataclasses.is_dataclass(tp) or _is_enum_type(tp))


def _is_enum_type(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    if issubclass(tp, enum.Enum):
        return True
    return issubclass(tp, OneOf) and "__variants__" in tp.__dict__


@functools.lru_cache(maxsize=None)
def describe(shape: type) -> Shape:
    """
    Analyse a shape type. Cached per type; raises AuthoringError.
    """
    if not isinstance(shape, type):
        raise AuthoringError(f"{shape!r} is not a type")
    if isinstance(shape, type) and issubclass(shape, enum.Enum):
        return _describe_plain_enum(shape)
    if issubclass(shape, OneOf):
        if "__variants__" not in shape.__dict__:
            raise AuthoringError(
                f"{shape.__name__} is a variant, not an enum; describe its root "
                f"{_enum_root(shape).__name__} instead"
            )
        return _describe_one_of(shape)
    if dataclasses.is_dataclass(shape):
        return _describe_struct(shape, survey_options(shape))
    raise AuthoringError(
        f"{shape.__name__} is not a shape: expected a dataclass, a OneOf enum or an enum.Enum"
    )


def _describe_plain_enum(shape: type) -> EnumShape:
    members = list(shape)
    if not members:
        raise AuthoringError(f"Enum {shape.__name__} has no variants")
    variants = tuple(
        VariantShape(
            name=member.name,
            prompt=member.value if isinstance(member.value, str) else member.name,
            cls=shape,
            member=member,
        )
        for member in members
    )
    return EnumShape(cls=shape, variants=variants, options=survey_options(shape))


def _describe_one_of(shape: type) -> EnumShape:
    if not shape.__variants__:
        raise AuthoringError(f"Enum {shape.__name__} has no variants")
    variants = []
    for variant_cls, prompt in shape.__variants__:
        struct = None
        if dataclasses.is_dataclass(variant_cls) and dataclasses.fields(variant_cls):
            struct = _describe_struct(variant_cls, survey_options(variant_cls))
        variants.append(VariantShape(name=variant_cls.__name__, prompt=prompt, cls=variant_cls, struct=struct))
    return EnumShape(cls=shape, variants=tuple(variants), options=survey_options(shape))


def _describe_struct(shape: type, options: SurveyOptions) -> StructShape:
    try:
        hints = typing.get_type_hints(shape)
    except NameError as exc:
        raise AuthoringError(f"Cannot resolve field types of {shape.__name__}: {exc}") from exc

    fields = []
    for dc_field in dataclasses.fields(shape):
        attributes = dc_field.metadata.get(ASK_METADATA_KEY)
        owner = f"{shape.__name__}.{dc_field.name}"
        if attributes is None or not attributes.prompt:
            raise AuthoringError(f"Field {owner} has no prompt; declare it with ask(\"...\")")
        if "." in dc_field.name:
            raise AuthoringError(f"Field {owner} contains '.', which is reserved for paths")
        fields.append(_describe_field(owner, dc_field.name, hints[dc_field.name], attributes, options))
    return StructShape(cls=shape, fields=tuple(fields), options=options)


def _describe_field(
    owner: str,
    name: str,
    annotation: Any,
    attributes: FieldAttributes,
    options: SurveyOptions,
) -> FieldShape:
    annotation, optional = _unwrap_optional(owner, annotation)
    kind, target = _classify(owner, annotation, attributes)

    if optional and kind in ("all_of", "one_of", "any_of"):
        raise AuthoringError(f"Field {owner}: Optional is only supported around primitive and list types")

    _check_bounds(owner, kind, target, attributes)

    validators: List[FieldValidator] = []
    if attributes.validate is not None:
        validators.append(attributes.validate)
    if options.validate_fields is not None and kind in NUMERIC_KINDS:
        validators.append(options.validate_fields)

    return FieldShape(
        name=name,
        kind=kind,
        target=target,
        attributes=attributes,
        optional=optional,
        validators=tuple(validators),
    )


def _unwrap_optional(owner: str, annotation: Any) -> Tuple[Any, bool]:
    if typing.get_origin(annotation) not in _UNION_ORIGINS:
        return annotation, False
    args = typing.get_args(annotation)
    rest = [arg for arg in args if arg is not type(None)]
    if len(rest) != 1 or len(args) != 2:
        raise AuthoringError(f"Field {owner}: unions other than Optional[X] are not supported")
    return rest[0], True


def _classify(owner: str, annotation: Any, attributes: FieldAttributes) -> Tuple[str, Any]:
    """Question kind for a field. First match wins."""
    if attributes.mask and attributes.multiline:
        raise AuthoringError(f"Field {owner}: mask and multiline are mutually exclusive")
    if attributes.mask:
        if annotation is not str:
            raise AuthoringError(f"Field {owner}: mask is only valid on str fields")
        if isinstance(attributes.mask, str) and len(attributes.mask) != 1:
            raise AuthoringError(f"Field {owner}: mask must be a single character, got {attributes.mask!r}")
        return "masked", str
    if attributes.multiline:
        if annotation is not str:
            raise AuthoringError(f"Field {owner}: multiline is only valid on str fields")
        return "multiline", str

    if annotation in PRIMITIVE_KINDS:
        if attributes.multiselect:
            raise AuthoringError(f"Field {owner}: multiselect requires a list of an enum type")
        return PRIMITIVE_KINDS[annotation], annotation

    if typing.get_origin(annotation) in (list, List):
        args = typing.get_args(annotation)
        element = args[0] if args else None
        if element in LIST_ELEMENTS:
            if attributes.multiselect:
                raise AuthoringError(
                    f"Field {owner}: multiselect requires an enum element type, got {element.__name__}"
                )
            return "list", element
        if _is_enum_type(element):
            if not attributes.multiselect:
                raise AuthoringError(f"Field {owner}: a list of {element.__name__} needs multiselect=True")
            return "any_of", element
        if attributes.multiselect:
            raise AuthoringError(f"Field {owner}: multiselect requires an enum element type, got {element!r}")
        raise AuthoringError(f"Field {owner}: unsupported list element type {element!r}")

    if attributes.multiselect:
        raise AuthoringError(f"Field {owner}: multiselect requires a list of an enum type")
    if _is_enum_type(annotation):
        return "one_of", annotation
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return "all_of", annotation

    raise AuthoringError(f"Field {owner}: unsupported field type {annotation!r}")


def _check_bounds(owner: str, kind: str, target: Any, attributes: FieldAttributes) -> None:
    if attributes.min is None and attributes.max is None:
        return
    numeric = kind in NUMERIC_KINDS or (kind == "list" and target in (int, float))
    if not numeric:
        raise AuthoringError(f"Field {owner}: min/max are only valid on numeric fields")
    if attributes.min is not None and attributes.max is not None and attributes.min > attributes.max:
        raise AuthoringError(f"Field {owner}: min ({attributes.min}) is greater than max ({attributes.max})")


__all__ = [
    "ask",
    "survey",
    "OneOf",
    "describe",
    "is_shape",
    "FieldAttributes",
    "SurveyOptions",
    "FieldShape",
    "StructShape",
    "VariantShape",
    "EnumShape",
    "Shape",
    "FieldValidator",
    "CompositeValidator",
]
