"""
Response values.

Every collected answer is one of a closed family of immutable value
objects. The family mirrors the question kinds:

    StringValue      Input / Multiline / Masked
    IntValue         Int
    FloatValue       Float
    BoolValue        Confirm
    ChosenVariant    OneOf selection
    ChosenVariants   AnyOf selection
    StringList       List of strings
    IntList          List of integers
    FloatList        List of floats

ARCHITECTURAL RULE:
    Values never coerce themselves into one another. A value whose tag
    does not match the question bound to its path is an error, not a
    conversion opportunity. Each value checks its own payload on
    construction, so a tag always describes the data it carries.
"""

from abc import ABC
from dataclasses import dataclass
from typing import ClassVar, Dict, FrozenSet, Iterable, Tuple, Type

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def _is_int(raw) -> bool:
    return isinstance(raw, int) and not isinstance(raw, bool)


def _check_int(raw, what: str) -> None:
    if not _is_int(raw):
        raise TypeError(f"{what} must be an integer, got {type(raw).__name__}")
    if not INT_MIN <= raw <= INT_MAX:
        raise ValueError(f"{what} {raw} does not fit in 64 bits")


def _as_float(raw, what: str) -> float:
    if isinstance(raw, float) or _is_int(raw):
        return float(raw)
    raise TypeError(f"{what} must be a number, got {type(raw).__name__}")


class ResponseValue(ABC):
    """
    Base class for all response values.

    ``tag`` names the variant; it is stable and used by serialization and
    error messages.
    """

    tag: ClassVar[str] = ""

    @property
    def raw(self):
        """The plain Python payload of this value."""
        raise NotImplementedError


@dataclass(frozen=True)
class StringValue(ResponseValue):
    tag: ClassVar[str] = "string"

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String value must be a str, got {type(self.value).__name__}")

    @property
    def raw(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntValue(ResponseValue):
    tag: ClassVar[str] = "int"

    value: int

    def __post_init__(self) -> None:
        _check_int(self.value, "Int value")

    @property
    def raw(self) -> int:
        return self.value


@dataclass(frozen=True)
class FloatValue(ResponseValue):
    tag: ClassVar[str] = "float"

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _as_float(self.value, "Float value"))

    @property
    def raw(self) -> float:
        return self.value


@dataclass(frozen=True)
class BoolValue(ResponseValue):
    tag: ClassVar[str] = "bool"

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Bool value must be a bool, got {type(self.value).__name__}")

    @property
    def raw(self) -> bool:
        return self.value


@dataclass(frozen=True)
class ChosenVariant(ResponseValue):
    """Index of the selected variant of a OneOf question."""

    tag: ClassVar[str] = "chosen_variant"

    index: int

    def __post_init__(self) -> None:
        _check_int(self.index, "Variant index")

    @property
    def raw(self) -> int:
        return self.index


@dataclass(frozen=True)
class ChosenVariants(ResponseValue):
    """
    Indices selected in an AnyOf question.

    Stored as a frozenset: insertion order is irrelevant. Consumers that
    need an order use ``ordered()`` (ascending).
    """

    tag: ClassVar[str] = "chosen_variants"

    indices: FrozenSet[int] = frozenset()

    def __post_init__(self) -> None:
        if isinstance(self.indices, (str, bytes)) or not isinstance(self.indices, Iterable):
            raise TypeError(f"Variant indices must be a collection, got {type(self.indices).__name__}")
        indices = frozenset(self.indices)
        for index in indices:
            _check_int(index, "Variant index")
        object.__setattr__(self, "indices", indices)

    @classmethod
    def of(cls, *indices: int) -> "ChosenVariants":
        return cls(frozenset(indices))

    def ordered(self) -> Tuple[int, ...]:
        return tuple(sorted(self.indices))

    @property
    def raw(self) -> Tuple[int, ...]:
        return self.ordered()


@dataclass(frozen=True)
class _ListValue(ResponseValue):
    items: Tuple = ()

    def __post_init__(self) -> None:
        if isinstance(self.items, (str, bytes)) or not isinstance(self.items, Iterable):
            raise TypeError(f"List items must be a sequence, got {type(self.items).__name__}")
        object.__setattr__(self, "items", tuple(self._element(item) for item in self.items))

    def _element(self, item):
        return item

    @property
    def raw(self) -> list:
        return list(self.items)


@dataclass(frozen=True)
class StringList(_ListValue):
    tag: ClassVar[str] = "string_list"

    def _element(self, item):
        if not isinstance(item, str):
            raise TypeError(f"String list item must be a str, got {type(item).__name__}")
        return item


@dataclass(frozen=True)
class IntList(_ListValue):
    tag: ClassVar[str] = "int_list"

    def _element(self, item):
        _check_int(item, "Int list item")
        return item


@dataclass(frozen=True)
class FloatList(_ListValue):
    tag: ClassVar[str] = "float_list"

    def _element(self, item):
        return _as_float(item, "Float list item")


VALUE_TYPES: Dict[str, Type[ResponseValue]] = {
    cls.tag: cls
    for cls in (
        StringValue,
        IntValue,
        FloatValue,
        BoolValue,
        ChosenVariant,
        ChosenVariants,
        StringList,
        IntList,
        FloatList,
    )
}


def value_from_raw(tag: str, raw) -> ResponseValue:
    """
    Build the value for ``tag`` from its plain payload.

    Raises:
        ValueError: unknown tag, or an integer outside 64 bits
        TypeError: a payload of the wrong type for the tag
    """
    try:
        cls = VALUE_TYPES[tag]
    except KeyError:
        raise ValueError(f"Unknown response value tag: {tag!r}") from None
    return cls(raw)


def list_value_for(element_type: type, items: Iterable) -> ResponseValue:
    """List value class matching a primitive element type."""
    if element_type is str:
        return StringList(tuple(items))
    if element_type is int:
        return IntList(tuple(items))
    if element_type is float:
        return FloatList(tuple(items))
    raise TypeError(f"Unsupported list element type: {element_type!r}")
