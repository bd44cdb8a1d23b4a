"""Exceptions raised across elicitor."""

from __future__ import annotations

from typing import Dict, Optional

from elicitor.paths import ResponsePath


class ElicitorError(Exception):
    """Base error for the package."""


class AuthoringError(ElicitorError):
    """A shape declaration is malformed. Raised before any schema exists."""


class UnknownPathError(ElicitorError, KeyError):
    """A path does not address any question of the survey."""

    def __init__(self, path: ResponsePath, detail: str = "") -> None:
        self.path = path
        message = f"No question at path '{path}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class ReconstructionError(ElicitorError):
    """
    A response store cannot be turned back into a value.

    Carries the offending path. These only occur when a presentation
    collaborator hands over a store that was not fully validated.
    """

    def __init__(self, path: ResponsePath, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message} (at '{path}')")

    def rerooted(self, prefix: ResponsePath) -> "ReconstructionError":
        """Copy of this error with its path placed under ``prefix``."""
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.path = prefix.join(self.path)
        clone.args = (f"{self.message} (at '{clone.path}')",)
        return clone


class MissingResponseError(ReconstructionError):
    def __init__(self, path: ResponsePath) -> None:
        super().__init__(path, "Missing response")


class ResponseTypeError(ReconstructionError):
    def __init__(self, path: ResponsePath, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(path, f"Expected a {expected} response, got {actual}")


class UnknownVariantError(ReconstructionError):
    def __init__(self, path: ResponsePath, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(path, f"Unknown variant index {index} (expected 0..{count - 1})")


class BackendError(ElicitorError):
    """A presentation collaborator failed or was cancelled."""

    def __init__(self, message: str, errors: Optional[Dict[ResponsePath, str]] = None) -> None:
        self.errors = dict(errors or {})
        super().__init__(message)


class SerializationError(ElicitorError):
    """Serialized responses or definitions cannot be decoded."""
