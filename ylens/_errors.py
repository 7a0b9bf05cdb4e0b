# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Sequence
from typing import Any, ClassVar

__all__ = (
    "LensError",
    "LensValidationError",
    "UnsupportedSchemaError",
    "ItemNotFoundError",
    "LensMisuseError",
)


class LensError(Exception):
    default_message: ClassVar[str] = "ylens error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class LensValidationError(LensError):
    """Raised when a value does not decode against the bound schema node."""

    default_message = "Validation failed"
    __slots__ = ("context",)

    def __init__(self, context: str, cause: Exception | None = None):
        reason = _first_line(cause) if cause else "invalid value"
        super().__init__(
            f"Validation failed at {context}: {reason}",
            details={"context": context},
            cause=cause,
        )
        self.context = context

    @property
    def parse_error(self) -> Exception | None:
        """The underlying pydantic error."""
        return self.get_cause()


class UnsupportedSchemaError(LensError):
    """Raised at tree-construction time for schemas the lens layer cannot project."""

    default_message = "Unsupported schema"
    __slots__ = ("schema_type", "path")

    def __init__(self, schema_type: str, path: Sequence[str]):
        self.schema_type = schema_type
        self.path = tuple(path)
        super().__init__(
            f'Unsupported schema type "{schema_type}" at path: {".".join(self.path)}',
            details={"schema_type": schema_type, "path": list(self.path)},
        )


class ItemNotFoundError(LensError):
    default_message = "Item not found"
    __slots__ = ()


class LensMisuseError(LensError):
    """Programmer error: an operation the bound lens kind does not support."""

    default_message = "Operation not supported by this lens"
    __slots__ = ()


def _first_line(error: Exception) -> str:
    text = str(error).strip()
    return text.splitlines()[0] if text else error.__class__.__name__
