"""
Translation Progress

Contains the TranslationProgress dataclass and the ProgressTracker that
strategies report to while a language is being translated.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from localeweave.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TranslationProgress:
    """Progress information for ongoing translation."""
    language: str
    current_key: str
    progress: float                  # Percent complete, one decimal
    elapsed: float = 0.0             # Seconds since the tracker started
    remaining: Optional[float] = None  # Estimated seconds left


def format_time(seconds: Optional[float]) -> str:
    """Format seconds as "1m 5s" / "42s"."""
    if not seconds or seconds <= 0:
        return "0s"

    minutes, secs = divmod(int(seconds), 60)
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def truncate(text: str, max_length: int = 40) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length - 3]}..."


class ProgressTracker:
    """
    Receives progress events from strategies.

    Every event is logged and, when a callback is set, forwarded to it as a
    TranslationProgress. The tracker is shared by concurrently processed
    languages, so it keeps no per-language state.
    """

    def __init__(
        self,
        enabled: bool = True,
        callback: Optional[Callable[[TranslationProgress], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.enabled = enabled
        self.callback = callback
        self._clock = clock
        self._start_time = clock()

    def update(self, language: str, current_key: str, progress: float) -> Optional[TranslationProgress]:
        """
        Report progress for a language.

        Args:
            language: Display name of the language being translated
            current_key: Key (Deep) or "Batch i/N" label (Batch)
            progress: Percent complete

        Returns:
            The emitted TranslationProgress, or None when disabled
        """
        if not self.enabled:
            return None

        elapsed = self._clock() - self._start_time
        remaining = None
        if progress > 0:
            remaining = max(elapsed / (progress / 100.0) - elapsed, 0.0)

        event = TranslationProgress(
            language=language,
            current_key=current_key,
            progress=progress,
            elapsed=elapsed,
            remaining=remaining,
        )
        logger.info(
            "%s | %s | %.1f%% | Elapsed: %s | Remaining: ~%s",
            language,
            truncate(current_key),
            progress,
            format_time(elapsed),
            format_time(remaining),
        )

        if self.callback:
            self.callback(event)
        return event

    def complete(self, language: str, total_strings: int) -> None:
        if not self.enabled:
            return
        elapsed = self._clock() - self._start_time
        logger.info(f"✓ {language}: {total_strings} strings translated in {format_time(elapsed)}")

    def error(self, language: str, error: Exception) -> None:
        if not self.enabled:
            return
        logger.error(f"✗ {language}: {error}")

    def reset(self) -> None:
        """Restart the elapsed-time clock."""
        self._start_time = self._clock()
