"""
Exception hierarchy

Every error raised by localeweave derives from LocaleWeaveError and carries
an optional machine-readable code plus a context dict with diagnostic data.
"""

from typing import Any, Dict, Optional


class LocaleWeaveError(Exception):
    """Base error with optional code and context."""

    def __init__(self, message: str = "", code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context or {}


class ConfigurationError(LocaleWeaveError):
    """Run parameters are invalid or incomplete."""


class ValidationError(LocaleWeaveError):
    """Input text, language code or variable validation failed."""


class ProviderNotFoundError(LocaleWeaveError):
    """The requested provider identifier is not registered."""


class ApiError(LocaleWeaveError):
    """A provider call returned a non-2xx response or failed in transport."""


class RateLimitError(ApiError):
    """The provider answered 429 Too Many Requests."""


class TranslationError(LocaleWeaveError):
    """Producing a translated string failed."""


class TranslationCancelledError(TranslationError):
    """A run was cancelled through its cancel check."""


class FileError(LocaleWeaveError):
    """Reading or writing a locale file failed."""


class ParseError(LocaleWeaveError):
    """A locale file could not be parsed."""
