"""Error taxonomy for tiny-home publishing.

Validation errors are deterministic and caller-facing: they are raised to the
immediate caller and must stop the publish before anything reaches the
transport. `PublishFailed` wraps transport-side failures.
"""

from __future__ import annotations

from typing import Sequence


class TinyHomeError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(TinyHomeError, ValueError):
    """A message attribute or payload field failed validation."""


class InvalidAttributeValue(ValidationError):
    def __init__(self, field: str, value: str, allowed: Sequence[str]) -> None:
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"message attribute {field} does not equal {' or '.join(self.allowed)}"
            f" (got {value!r})"
        )


class UnknownChannelCombination(ValidationError):
    def __init__(self, flags: tuple[bool, bool, bool, bool]) -> None:
        self.flags = flags
        super().__init__(
            "message attributes not set for known subscription: "
            + ", ".join(str(flag).lower() for flag in flags)
        )


class FieldTooLong(ValidationError):
    def __init__(self, field: str, limit: int, length: int) -> None:
        self.field = field
        self.limit = limit
        self.length = length
        super().__init__(f"{field} greater than {limit} characters (got {length})")


class InvalidCase(ValidationError):
    def __init__(self, field: str, character: str, position: int) -> None:
        self.field = field
        self.character = character
        self.position = position
        super().__init__(
            f"{field} supports only lower case characters "
            f"(got {character!r} at position {position})"
        )


class UnsupportedCharacter(ValidationError):
    def __init__(
        self,
        field: str,
        character: str,
        position: int,
        supported: Sequence[str],
    ) -> None:
        self.field = field
        self.character = character
        self.position = position
        self.supported = tuple(supported)
        super().__init__(
            f"{field} is using unsupported special characters, only supported "
            f"characters are: {list(self.supported)} "
            f"(got {character!r} at position {position})"
        )


class PublishFailed(TinyHomeError, RuntimeError):
    """The transport did not acknowledge the published record."""
