"""
Translation Input Validation Module

Contains validation functions for translation inputs:
- Text presence checks
- Language code format checks
- File and API key presence checks
"""

import re
from pathlib import Path
from typing import Any, Union

from localeweave.exceptions import ConfigurationError, FileError, ValidationError

LANGUAGE_CODE_PATTERN = re.compile(r"^[a-z]{2}$", re.IGNORECASE)


def validate_language_code(code: Any) -> bool:
    """
    Validate a two-letter language code.

    Args:
        code: Language code to validate (e.g. "it", "DE")

    Returns:
        True if valid

    Raises:
        ValidationError: If the code is missing or malformed
    """
    if code is None:
        raise ValidationError("Language code cannot be None", code="invalid_language_code")
    if not isinstance(code, str):
        raise ValidationError("Language code must be a string", code="invalid_language_code",
                              context={"language_code": code})
    if not code:
        raise ValidationError("Language code cannot be empty", code="invalid_language_code")
    if not LANGUAGE_CODE_PATTERN.match(code):
        raise ValidationError("Language code must be 2 letters", code="invalid_language_code",
                              context={"language_code": code})
    return True


def validate_text(text: Any) -> bool:
    """
    Validate text to be translated.

    Raises:
        ValidationError: If text is missing, not a string or blank
    """
    if text is None:
        raise ValidationError("Text cannot be None", code="invalid_text")
    if not isinstance(text, str):
        raise ValidationError("Text must be a string", code="invalid_text", context={"text": text})
    if not text.strip():
        raise ValidationError("Text cannot be empty", code="invalid_text")
    return True


def validate_file_exists(path: Union[str, Path, None]) -> bool:
    """
    Validate that a file path is set and exists.

    Raises:
        FileError: If the path is missing or the file does not exist
    """
    if path is None:
        raise FileError("File path cannot be None", code="file_missing")
    if not isinstance(path, (str, Path)):
        raise FileError("File path must be a string or Path", code="file_missing", context={"file_path": path})
    if not Path(path).is_file():
        raise FileError(f"File does not exist: {path}", code="file_missing", context={"file_path": str(path)})
    return True


def validate_api_key(key: Any, provider: str) -> bool:
    """
    Validate that an API key is present (correctness is not checked).

    Raises:
        ConfigurationError: If the key is missing or blank
    """
    if key is None:
        raise ConfigurationError(f"API key for {provider} cannot be None", code="api_key_missing",
                                 context={"provider": provider})
    if not isinstance(key, str):
        raise ConfigurationError(f"API key for {provider} must be a string", code="api_key_missing",
                                 context={"provider": provider})
    if not key.strip():
        raise ConfigurationError(f"API key for {provider} cannot be empty", code="api_key_missing",
                                 context={"provider": provider})
    return True
