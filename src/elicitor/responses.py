"""
The response store.

``Responses`` is a flat mapping from ResponsePath to ResponseValue. It is
owned by whoever drives collection (a builder or a presentation backend).
The mapping engine only reads from it, or derives new filtered stores.

Flat keys over a nested tree are deliberate: prefix filtering,
serialization and backend storage all stay trivial.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, Union

from elicitor.errors import MissingResponseError, ResponseTypeError
from elicitor.paths import PathLike, ResponsePath
from elicitor.values import (
    BoolValue,
    ChosenVariant,
    ChosenVariants,
    FloatList,
    FloatValue,
    IntList,
    IntValue,
    ResponseValue,
    StringList,
    StringValue,
)


class Responses:
    """
    Mapping from ResponsePath to ResponseValue.

    Keys are unique; inserting at an existing path replaces the value.
    Iteration follows insertion order.
    """

    def __init__(
        self,
        entries: Union[Mapping[PathLike, ResponseValue], Iterable[Tuple[PathLike, ResponseValue]], None] = None,
    ) -> None:
        self._values: Dict[ResponsePath, ResponseValue] = {}
        if entries is None:
            return
        items = entries.items() if isinstance(entries, Mapping) else entries
        for path, value in items:
            self.insert(path, value)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def insert(self, path: PathLike, value: ResponseValue) -> None:
        if not isinstance(value, ResponseValue):
            raise TypeError(f"Expected a ResponseValue, got {type(value).__name__}")
        self._values[ResponsePath.coerce(path)] = value

    def remove(self, path: PathLike) -> Optional[ResponseValue]:
        return self._values.pop(ResponsePath.coerce(path), None)

    def get(self, path: PathLike) -> Optional[ResponseValue]:
        return self._values.get(ResponsePath.coerce(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (ResponsePath, str, tuple)):
            return False
        return ResponsePath.coerce(path) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[ResponsePath]:
        return iter(self._values)

    def items(self) -> List[Tuple[ResponsePath, ResponseValue]]:
        return list(self._values.items())

    def paths(self) -> List[ResponsePath]:
        return list(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Responses):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        inner = ", ".join(f"{path.as_str()!r}: {value!r}" for path, value in self._values.items())
        return f"Responses({{{inner}}})"

    def copy(self) -> "Responses":
        return Responses(self._values.items())

    def merge(self, other: "Responses") -> None:
        """Insert every entry of ``other``, replacing existing paths."""
        for path, value in other.items():
            self._values[path] = value

    # ------------------------------------------------------------------
    # Prefix handling
    # ------------------------------------------------------------------

    def filter_prefix(self, prefix: PathLike) -> "Responses":
        """
        Entries under ``prefix``, with the prefix stripped from each key.

        This is how a nested shape gets a store of its own: the result is
        independent of sibling entries and never aliases this store.
        """
        prefix = ResponsePath.coerce(prefix)
        return Responses(
            (path.strip_prefix(prefix), value)
            for path, value in self._values.items()
            if prefix.is_prefix_of(path)
        )

    def with_prefix(self, prefix: PathLike) -> "Responses":
        """Copy of this store with every key re-rooted under ``prefix``."""
        prefix = ResponsePath.coerce(prefix)
        return Responses((prefix.join(path), value) for path, value in self._values.items())

    def has_prefix(self, prefix: PathLike) -> bool:
        prefix = ResponsePath.coerce(prefix)
        return any(prefix.is_prefix_of(path) for path in self._values)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def _typed(self, path: PathLike, cls: Type[ResponseValue]) -> ResponseValue:
        path = ResponsePath.coerce(path)
        value = self._values.get(path)
        if value is None:
            raise MissingResponseError(path)
        if type(value) is not cls:
            raise ResponseTypeError(path, expected=cls.tag, actual=value.tag)
        return value

    def get_string(self, path: PathLike) -> str:
        return self._typed(path, StringValue).value

    def get_int(self, path: PathLike) -> int:
        return self._typed(path, IntValue).value

    def get_float(self, path: PathLike) -> float:
        return self._typed(path, FloatValue).value

    def get_bool(self, path: PathLike) -> bool:
        return self._typed(path, BoolValue).value

    def get_chosen_variant(self, path: PathLike) -> int:
        return self._typed(path, ChosenVariant).index

    def get_chosen_variants(self, path: PathLike) -> Tuple[int, ...]:
        """Selected indices in ascending order."""
        return self._typed(path, ChosenVariants).ordered()

    def get_string_list(self, path: PathLike) -> List[str]:
        return list(self._typed(path, StringList).items)

    def get_int_list(self, path: PathLike) -> List[int]:
        return list(self._typed(path, IntList).items)

    def get_float_list(self, path: PathLike) -> List[float]:
        return list(self._typed(path, FloatList).items)
