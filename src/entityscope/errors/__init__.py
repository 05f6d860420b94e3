"""entityscope error handling.

Provides the exception hierarchy used outside the discovery path:

- Base exception with error codes and structured context
- Configuration validation errors for settings and overrides
- Schema loading errors raised by adapter constructors
- Translation errors raised by predicate translators
"""

from entityscope.errors.base import (
    ConfigValidationError,
    EntityScopeError,
    ErrorCode,
    ErrorContext,
    SchemaLoadError,
    TranslationError,
)

__all__ = [
    "EntityScopeError",
    "ErrorCode",
    "ErrorContext",
    "ConfigValidationError",
    "SchemaLoadError",
    "TranslationError",
]
