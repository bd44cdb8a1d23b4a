"""
Response paths.

A ResponsePath is the join key between a survey definition and the
responses collected for it. It is an ordered tuple of segment names:

    - struct field names ("address", "city")
    - positional field names ("field_0", "field_1")
    - the reserved enum segments "selected_alternative" and "alternatives"

Example:
    The card number of the second payment variant of a checkout lives at

        payment.alternatives.1.number

ARCHITECTURAL RULE:
    Paths are immutable. Child paths are built by appending a segment,
    never by mutating a parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

SELECTED_ALTERNATIVE_KEY = "selected_alternative"
ALTERNATIVES_KEY = "alternatives"
SEPARATOR = "."


def positional_segment(index: int) -> str:
    """Segment name of the positional field at ``index``."""
    return f"field_{index}"


@dataclass(frozen=True)
class ResponsePath:
    """
    Ordered sequence of segment names addressing one response.

    Two paths are equal iff their segments are equal. The empty path
    addresses the root of a shape.
    """

    segments: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.segments, tuple):
            object.__setattr__(self, "segments", tuple(self.segments))

    @classmethod
    def parse(cls, dotted: str) -> "ResponsePath":
        """Build a path from its dotted spelling ("" is the root)."""
        if not dotted:
            return cls()
        return cls(tuple(dotted.split(SEPARATOR)))

    @classmethod
    def coerce(cls, value: "PathLike") -> "ResponsePath":
        if isinstance(value, ResponsePath):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        return cls(tuple(value))

    def child(self, segment: str) -> "ResponsePath":
        return ResponsePath(self.segments + (segment,))

    def join(self, other: "ResponsePath") -> "ResponsePath":
        """Append all of ``other``'s segments (re-root ``other`` under self)."""
        return ResponsePath(self.segments + other.segments)

    def selection(self) -> "ResponsePath":
        """Where the chosen variant of an enum rooted here is stored."""
        return self.child(SELECTED_ALTERNATIVE_KEY)

    def alternative(self, index: int) -> "ResponsePath":
        """Root of the payload of variant ``index`` of an enum rooted here."""
        return self.child(ALTERNATIVES_KEY).child(str(index))

    def is_prefix_of(self, other: "ResponsePath") -> bool:
        n = len(self.segments)
        return other.segments[:n] == self.segments

    def strip_prefix(self, prefix: "ResponsePath") -> "ResponsePath":
        if not prefix.is_prefix_of(self):
            raise ValueError(f"{prefix} is not a prefix of {self}")
        return ResponsePath(self.segments[len(prefix.segments):])

    @property
    def parent(self) -> "ResponsePath":
        return ResponsePath(self.segments[:-1])

    @property
    def last(self) -> str:
        return self.segments[-1] if self.segments else ""

    def is_root(self) -> bool:
        return not self.segments

    def as_str(self) -> str:
        return SEPARATOR.join(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __str__(self) -> str:
        return self.as_str() or "<root>"


PathLike = Union[ResponsePath, str, Tuple[str, ...]]

ROOT = ResponsePath()
