"""Pytest configuration and shared fixtures for tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from localeweave.config import Configuration, TargetLanguage
from localeweave.translation.progress import ProgressTracker, TranslationProgress


@pytest.fixture
def make_config() -> Callable[..., Configuration]:
    """Build a valid configuration with fast retry and pacing settings."""

    def _make(**overrides: Any) -> Configuration:
        values = {
            "provider": "chatgpt",
            "openai_key": "test-key",
            "source_language": "en",
            "target_languages": (TargetLanguage("it", "Italian"),),
            "input_file": "en.json",
            "output_folder": "out",
            "rate_limit_delay": 0.0,
            "retry_delay": 0.01,
        }
        values.update(overrides)
        return Configuration(**values)

    return _make


@pytest.fixture
def config(make_config: Callable[..., Configuration]) -> Configuration:
    """Default valid configuration."""
    return make_config()


@pytest.fixture
def progress_events() -> list[TranslationProgress]:
    """List collecting progress events."""
    return []


@pytest.fixture
def tracker(progress_events: list[TranslationProgress]) -> ProgressTracker:
    """Progress tracker appending every event to progress_events."""
    return ProgressTracker(callback=progress_events.append)
