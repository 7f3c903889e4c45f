"""
Direct Translation Service

Translates individual strings outside a file-based run, e.g. for the
/api/translate endpoint. Uses the same provider adapters (and therefore the
same cache, rate limiting and retry behaviour) as the orchestrator.
"""

from typing import List, Optional

from localeweave import language_codes as lc
from localeweave.ai.factory import ProviderFactory
from localeweave.ai.providers import BaseHTTPProvider
from localeweave.config import Configuration
from localeweave.exceptions import ConfigurationError, TranslationError, ValidationError
from localeweave.logger import get_logger
from localeweave.translation import validator

logger = get_logger(__name__)


class TranslationService:
    """Translate text directly through a configured provider."""

    def __init__(self, config: Configuration, provider: Optional[BaseHTTPProvider] = None):
        if not config.provider:
            raise ConfigurationError("Provider must be configured", code="provider_missing")
        validator.validate_api_key(config.api_key_for(), config.provider)

        self.config = config
        self.provider = provider or ProviderFactory.create(config.provider, config)

    def _resolve_language(self, to: str, language_name: Optional[str]) -> tuple:
        target_lang_code = str(to).strip()
        validator.validate_language_code(target_lang_code)
        if not language_name and not lc.is_known_language(target_lang_code):
            logger.warning(f"Unknown language code {target_lang_code}, using the code as its name")
        return target_lang_code, language_name or lc.get_language_name(target_lang_code) or target_lang_code

    def translate(self, text: str, to: str, language_name: Optional[str] = None) -> str:
        """
        Translate one string.

        Args:
            text: Text to translate
            to: Target language code
            language_name: Display name, defaults to the ISO 639-1 name

        Returns:
            Translated text

        Raises:
            ValidationError: Re-raised unchanged for invalid input
            TranslationError: For any other failure
        """
        validator.validate_text(text)
        target_lang_code, target_lang_name = self._resolve_language(to, language_name)

        try:
            return self.provider.translate_text(text, target_lang_code, target_lang_name)
        except (ValidationError, TranslationError):
            raise
        except Exception as e:
            raise TranslationError(
                f"Failed to translate text: {e}",
                code="translation_failed",
                context={"text": text, "target_lang": target_lang_code, "original_error": e},
            ) from e

    def translate_batch(
        self,
        texts: List[str],
        to: str,
        language_name: Optional[str] = None,
        skip_errors: bool = False,
    ) -> List[Optional[str]]:
        """
        Translate several strings one by one.

        Args:
            texts: Texts to translate
            to: Target language code
            language_name: Display name, defaults to the ISO 639-1 name
            skip_errors: Return None for failed items instead of raising

        Returns:
            Translations in input order
        """
        if not isinstance(texts, list):
            raise ValidationError("texts must be a list", code="invalid_texts")
        if not texts:
            return []

        for text in texts:
            validator.validate_text(text)
        target_lang_code, target_lang_name = self._resolve_language(to, language_name)

        results: List[Optional[str]] = []
        for text in texts:
            try:
                results.append(self.provider.translate_text(text, target_lang_code, target_lang_name))
            except TranslationError as e:
                if not skip_errors:
                    raise
                logger.warning(f"Skipping failed translation to {target_lang_code}: {e}")
                results.append(None)

        return results
