"""
localeweave - AI translation of locale files

Translates nested string catalogs (JSON/YAML) into several target languages
through ChatGPT, Gemini or Anthropic, with caching, rate limiting, retries
and placeholder protection.
"""

__version__ = "0.1.0"

from localeweave.config import Configuration, TargetLanguage
from localeweave.exceptions import (
    ApiError,
    ConfigurationError,
    FileError,
    LocaleWeaveError,
    ParseError,
    ProviderNotFoundError,
    RateLimitError,
    TranslationCancelledError,
    TranslationError,
    ValidationError,
)

__all__ = [
    '__version__',
    'Configuration',
    'TargetLanguage',
    'LocaleWeaveError',
    'ConfigurationError',
    'ValidationError',
    'ProviderNotFoundError',
    'ApiError',
    'RateLimitError',
    'TranslationError',
    'TranslationCancelledError',
    'FileError',
    'ParseError',
]
