"""Structured, user-facing validation errors and their stable numeric ids."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


class ErrorCode(IntEnum):
    """Fixed error ids reported outside the requirement catalogs.

    Catalog entries carry their own ids; see ``envgate.preflight.catalogs``.
    """

    VERSION_MISMATCH = 1172215790
    MULTIBYTE_MISSING = 1207148809
    SESSION_AUTO_START = 1224003190
    PLATFORM_UNSUPPORTED = 1312463704
    REFLECTION_UNSUPPORTED = 1329405326
    DIRECTORY_CREATE_FAILED = 1330363887
    DIRECTORY_NOT_WRITABLE = 1330372964


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One unmet requirement, shaped for display by the host application.

    ``message`` is a ``%s``-style template filled from ``arguments``.
    """

    message: str
    code: int | None = None
    arguments: tuple[str, ...] = field(default_factory=tuple)
    title: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("ValidationError.message must be a non-empty string")
        code = self.code
        if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
            raise ValueError("ValidationError.code must be an integer or None")
        object.__setattr__(self, "arguments", _as_arguments(self.arguments))
        if not isinstance(self.title, str):
            raise ValueError("ValidationError.title must be a string")

    def with_title(self, title: str) -> ValidationError:
        """Return a copy carrying ``title``; message, code and arguments are kept."""

        return ValidationError(
            message=self.message,
            code=self.code,
            arguments=self.arguments,
            title=title,
        )

    def render(self) -> str:
        """Return the message with its arguments interpolated."""

        if not self.arguments:
            return self.message
        return self.message % self.arguments

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "title": self.title,
            "code": self.code,
            "message": self.message,
            "arguments": list(self.arguments),
            "rendered": self.render(),
        }

    def __str__(self) -> str:
        rendered = self.render()
        if self.title:
            return f"{self.title}: {rendered}"
        return rendered


def _as_arguments(value: Sequence[object]) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError("ValidationError.arguments must be a sequence")
    return tuple(str(item) for item in value)


__all__ = ["ErrorCode", "ValidationError"]
