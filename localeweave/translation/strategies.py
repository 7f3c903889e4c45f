"""
Translation Strategies

A strategy turns the flat string map of one language into provider calls:
- DeepStrategy: one provider call per string
- BatchStrategy: one provider call per chunk of BATCH_SIZE strings

StrategySelector picks Deep for small maps and Batch from
DEEP_STRATEGY_THRESHOLD strings upwards.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from localeweave.config import Configuration
from localeweave.exceptions import TranslationCancelledError
from localeweave.logger import get_logger
from localeweave.translation.progress import ProgressTracker
from localeweave.translation.utils import chunk

logger = get_logger(__name__)

DEEP_STRATEGY_THRESHOLD = 50
BATCH_SIZE = 10


class BaseStrategy(ABC):
    """Base class for translation strategies."""

    name = ""

    def __init__(
        self,
        config: Configuration,
        provider,
        progress_tracker: ProgressTracker,
        cancel_check: Optional[Callable[[], bool]] = None,
    ):
        """
        Args:
            config: Run configuration
            provider: Adapter exposing translate_text / translate_batch
            progress_tracker: Receives progress events
            cancel_check: Optional function returning True when the run should stop
        """
        self.config = config
        self.provider = provider
        self.progress_tracker = progress_tracker
        self.cancel_check = cancel_check

    def _check_cancelled(self, target_lang_code: str) -> None:
        if self.cancel_check and self.cancel_check():
            raise TranslationCancelledError(
                f"Translation to {target_lang_code} cancelled",
                code="cancelled",
                context={"target_lang": target_lang_code},
            )

    @abstractmethod
    def translate(self, strings: Dict[str, str], target_lang_code: str, target_lang_name: str) -> Dict[str, str]:
        """
        Translate a flat string map.

        Args:
            strings: Flat mapping of dotted keys to source strings
            target_lang_code: Target language code
            target_lang_name: Target language display name

        Returns:
            Flat mapping of the same keys, in the same order, to translations
        """


class DeepStrategy(BaseStrategy):
    """Translates strings one by one."""

    name = "deep"

    def translate(self, strings, target_lang_code, target_lang_name):
        translated: Dict[str, str] = {}
        total = len(strings)

        for index, (key, value) in enumerate(strings.items()):
            self._check_cancelled(target_lang_code)

            translated[key] = self.provider.translate_text(value, target_lang_code, target_lang_name)

            self.progress_tracker.update(
                language=target_lang_name,
                current_key=key,
                progress=round((index + 1) / total * 100.0, 1),
            )

        return translated


class BatchStrategy(BaseStrategy):
    """Translates strings in chunks of BATCH_SIZE, one provider call per chunk."""

    name = "batch"

    def translate(self, strings, target_lang_code, target_lang_name):
        translated: Dict[str, str] = {}
        batches = chunk(list(strings.items()), BATCH_SIZE)
        total_batches = len(batches)

        for batch_index, batch in enumerate(batches, start=1):
            self._check_cancelled(target_lang_code)

            keys = [key for key, _ in batch]
            values = [value for _, value in batch]
            logger.debug(f"Chunk {batch_index}/{total_batches}: translating {len(values)} strings to {target_lang_code}")

            translated_batch = self.provider.translate_batch(values, target_lang_code, target_lang_name)
            for key, translation in zip(keys, translated_batch):
                translated[key] = translation

            self.progress_tracker.update(
                language=target_lang_name,
                current_key=f"Batch {batch_index}/{total_batches}",
                progress=round(batch_index / total_batches * 100.0, 1),
            )

        return translated


class StrategySelector:
    """Chooses the strategy for a string count."""

    @staticmethod
    def select(
        strings_count: int,
        config: Configuration,
        provider,
        progress_tracker: ProgressTracker,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> BaseStrategy:
        """
        Select Deep below DEEP_STRATEGY_THRESHOLD strings, Batch otherwise.

        Returns:
            Strategy instance bound to the given provider and tracker
        """
        strategy_class = DeepStrategy if strings_count < DEEP_STRATEGY_THRESHOLD else BatchStrategy
        return strategy_class(config, provider, progress_tracker, cancel_check)
