"""Exception hierarchy for entityscope.

Discovery itself never raises for data-shape reasons: ambiguous envelopes,
missing key fields and unsupported conventions become warnings. The
exceptions here cover the remaining cases, where the *caller* handed us
something unusable: malformed override configuration, a schema document that
cannot be loaded, or a subset request the selected convention cannot express.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Stable machine-readable error codes."""

    CONFIG_INVALID = "E100"
    CONFIG_NOT_FOUND = "E101"
    SCHEMA_LOAD_FAILED = "E200"
    SCHEMA_UNSUPPORTED = "E201"
    TRANSLATION_UNSUPPORTED_OPERATOR = "E300"
    UNKNOWN = "E999"


@dataclass
class ErrorContext:
    """Extra details attached to an error for display and debugging."""

    source: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.source:
            data["source"] = self.source
        if self.operation:
            data["operation"] = self.operation
        if self.extra:
            data["extra"] = dict(self.extra)
        return data


class EntityScopeError(Exception):
    """Base class for all entityscope errors."""

    default_code = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.context = context or ErrorContext()
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "context": self.context.to_dict(),
        }


class ConfigValidationError(EntityScopeError):
    """Raised when settings or override configuration is structurally invalid."""

    default_code = ErrorCode.CONFIG_INVALID

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, code=code, context=context)


class SchemaLoadError(EntityScopeError):
    """Raised when a schema document cannot be read or parsed."""

    default_code = ErrorCode.SCHEMA_LOAD_FAILED


class TranslationError(EntityScopeError):
    """Raised when a subset request cannot be expressed in a native query shape."""

    default_code = ErrorCode.TRANSLATION_UNSUPPORTED_OPERATOR

    def __init__(
        self,
        message: str,
        operator: str | None = None,
        style: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        self.operator = operator
        self.style = style
        super().__init__(message, context=context)


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "EntityScopeError",
    "ConfigValidationError",
    "SchemaLoadError",
    "TranslationError",
]
