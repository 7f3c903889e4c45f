"""
Translation Manager Module

TranslationManager coordinates one translation run:
- Read the source strings through the file handler
- For each target language (concurrently): filter exclusions, pick a
  strategy, translate, merge with existing output, write the file
- Aggregate per-language successes and failures into a TranslationOutcome
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from localeweave.ai.factory import ProviderFactory
from localeweave.config import Configuration, TargetLanguage
from localeweave.exceptions import LocaleWeaveError, TranslationCancelledError
from localeweave.logger import get_logger, set_log_mode
from localeweave.project.files import FileHandler, get_file_handler
from localeweave.translation.progress import ProgressTracker, TranslationProgress
from localeweave.translation.strategies import StrategySelector
from localeweave.translation.utils import filter_exclusions, merge_incremental, split_translatable, unflatten

logger = get_logger(__name__)


@dataclass
class TranslationFailure:
    """A language that could not be translated."""
    language: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TranslationOutcome:
    """Result of a translation run."""
    success_count: int = 0
    failure_count: int = 0
    errors: List[TranslationFailure] = field(default_factory=list)
    outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)  # Language code -> written tree
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.failure_count == 0 and not self.cancelled

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "errors": [
                {"language": error.language, "message": error.message, "context": _json_safe(error.context)}
                for error in self.errors
            ],
            "cancelled": self.cancelled,
        }


def _json_safe(value: Any) -> Any:
    """Convert error context into JSON-friendly values (exceptions become strings)."""
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_json_safe(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class TranslationManager:
    """
    Runs the translation of the source file into every target language.

    Languages are processed on a thread pool of max_concurrent_requests
    workers sharing one provider (and therefore one cache and one rate
    limiter). Completed languages are folded into the outcome by the calling
    thread only, so the outcome itself needs no lock.
    """

    def __init__(
        self,
        config: Configuration,
        file_handler: Optional[FileHandler] = None,
        provider=None,
        progress_callback: Optional[Callable[[TranslationProgress], None]] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize translation manager.

        Args:
            config: Run configuration, validated here before any provider is created
            file_handler: Source/output file adapter (default: picked from the input file extension)
            provider: Provider adapter (default: created by ProviderFactory)
            progress_callback: Optional callback receiving TranslationProgress events
            cancel_check: Optional function returning True when the run should stop

        Raises:
            ConfigurationError: If the configuration is invalid
            ProviderNotFoundError: If the provider is unknown to the factory
        """
        self.config = config.validate()
        if config.log_mode is not None:
            set_log_mode(config.log_mode)

        self.file_handler = file_handler or get_file_handler(config)
        self._owns_provider = provider is None
        self.provider = provider or ProviderFactory.create(config.provider, config)
        self.progress_tracker = ProgressTracker(enabled=True, callback=progress_callback)
        self.cancel_check = cancel_check

    def close(self) -> None:
        """Release the provider if this manager created it."""
        if self._owns_provider and hasattr(self.provider, "close"):
            self.provider.close()

    def _is_cancelled(self) -> bool:
        return bool(self.cancel_check and self.cancel_check())

    def translate_all(self) -> TranslationOutcome:
        """
        Translate the source strings into all configured target languages.

        A failing language is recorded in the outcome and never stops the
        others. Errors reading the source file propagate, since no language
        can be processed without it.

        Returns:
            TranslationOutcome with per-language successes and failures
        """
        source_strings = self.file_handler.get_source_strings()
        languages = list(self.config.target_languages)
        outcome = TranslationOutcome()
        start_time = time.time()

        self.progress_tracker.reset()
        logger.info(
            "Translating %d strings from %s into %d languages with %s (mode=%s, dry_run=%s)",
            len(source_strings),
            self.config.source_language,
            len(languages),
            self.config.provider,
            self.config.translation_mode,
            self.config.dry_run,
        )

        max_workers = min(self.config.max_concurrent_requests, len(languages)) or 1
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="translate") as executor:
            futures = {
                executor.submit(self.translate_language, language, source_strings): language
                for language in languages
            }
            for future in as_completed(futures):
                language = futures[future]
                try:
                    outcome.outputs[language.code] = future.result()
                    outcome.success_count += 1
                except Exception as e:
                    self._record_failure(outcome, language, e)

        elapsed = time.time() - start_time
        logger.info(
            f"Translation run finished in {elapsed:.1f}s: "
            f"{outcome.success_count} succeeded, {outcome.failure_count} failed"
            f"{' (cancelled)' if outcome.cancelled else ''}"
        )
        return outcome

    def translate_language(self, language: TargetLanguage, source_strings: Dict[str, Any]) -> Dict[str, Any]:
        """
        Translate, merge and write one target language.

        Args:
            language: Target language
            source_strings: Flat source string map

        Returns:
            The tree written for the language: {code: nested_translations}

        Raises:
            TranslationCancelledError: If cancellation was requested
            LocaleWeaveError: On translation or file errors
        """
        if self._is_cancelled():
            raise TranslationCancelledError(
                f"Translation to {language.code} cancelled",
                code="cancelled",
                context={"target_lang": language.code},
            )

        strings = filter_exclusions(source_strings, self.config.exclusions_for(language.code))
        excluded_count = len(source_strings) - len(strings)
        require_translation, no_translation = split_translatable(strings)

        strategy = StrategySelector.select(
            len(require_translation), self.config, self.provider, self.progress_tracker, self.cancel_check
        )
        logger.info(
            f"[{language.code}] {len(require_translation)} strings to translate "
            f"({strategy.name} strategy, {excluded_count} excluded, {len(no_translation)} copied)"
        )

        translated = strategy.translate(require_translation, language.code, language.name)

        merged = {
            key: translated[key] if key in require_translation else value
            for key, value in strings.items()
        }

        output_path = self.file_handler.build_output_path(language.code)
        if self.config.translation_mode == "incremental":
            existing = self.file_handler.read_existing_translations(output_path, language.code)
            if existing:
                logger.debug(f"[{language.code}] Keeping {len(existing)} existing translations")
            merged = merge_incremental(existing, merged)

        tree = {language.code: unflatten(merged)}
        self.file_handler.write(output_path, tree)

        self.progress_tracker.complete(language.name, len(require_translation))
        return tree

    def _record_failure(self, outcome: TranslationOutcome, language: TargetLanguage, error: Exception) -> None:
        context: Dict[str, Any] = {"error_type": type(error).__name__}
        if isinstance(error, LocaleWeaveError):
            context.update(error.context)
            if error.code:
                context["code"] = error.code

        if isinstance(error, TranslationCancelledError):
            outcome.cancelled = True
            logger.warning(f"[{language.code}] Translation cancelled")
        else:
            self.progress_tracker.error(language.name, error)
            logger.debug("Failure details for %s", language.code, exc_info=error)

        outcome.failure_count += 1
        outcome.errors.append(TranslationFailure(language=language.name, message=str(error), context=context))
