"""Unit tests for config module."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable

import pytest

from localeweave.config import Configuration, TargetLanguage, get_prompt
from localeweave.exceptions import ConfigurationError


def _error_code(config: Configuration) -> str:
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    return exc_info.value.code


def test_valid_configuration_returns_itself(config: Configuration) -> None:
    """validate() returns the configuration for chaining."""
    assert config.validate() is config


def test_provider_checked_first() -> None:
    """An empty configuration fails on the provider rule."""
    assert _error_code(Configuration()) == "provider_missing"


def test_unknown_provider(make_config: Callable[..., Configuration]) -> None:
    """Unrecognized provider identifiers are rejected."""
    assert _error_code(make_config(provider="deepl")) == "provider_unknown"


@pytest.mark.parametrize(
    ("provider", "key_field"),
    [("chatgpt", "openai_key"), ("gemini", "gemini_key"), ("anthropic", "anthropic_key")],
)
def test_provider_specific_key_required(
    make_config: Callable[..., Configuration], provider: str, key_field: str
) -> None:
    """Each provider requires its own credential field."""
    config = make_config(provider=provider, openai_key=None)
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert exc_info.value.code == "api_key_missing"
    assert exc_info.value.context["missing_field"] == key_field

    overrides = {"provider": provider, "openai_key": None}
    overrides[key_field] = "k"
    assert make_config(**overrides).validate()


def test_blank_key_rejected(make_config: Callable[..., Configuration]) -> None:
    """Whitespace-only keys count as missing."""
    assert _error_code(make_config(openai_key="   ")) == "api_key_missing"


@pytest.mark.parametrize(
    ("overrides", "code"),
    [
        ({"source_language": ""}, "source_language_missing"),
        ({"target_languages": ()}, "target_languages_missing"),
        ({"target_languages": (TargetLanguage("", "Italian"),)}, "invalid_target_language"),
        ({"target_languages": (TargetLanguage("it", ""),)}, "invalid_target_language"),
        ({"translation_mode": "merge"}, "invalid_mode"),
        ({"max_concurrent_requests": 0}, "invalid_concurrency"),
        ({"request_timeout": 0}, "invalid_timeout"),
        ({"cache_size": 0}, "invalid_cache_size"),
        ({"max_retries": -1}, "invalid_max_retries"),
        ({"retry_delay": 0}, "invalid_retry_delay"),
        ({"cache_ttl": 0}, "invalid_cache_ttl"),
        ({"rate_limit_delay": -0.1}, "invalid_rate_limit_delay"),
        ({"log_mode": "verbose"}, "invalid_log_mode"),
        ({"max_backups": -1}, "invalid_max_backups"),
        ({"max_concurrent_requests": "3"}, "invalid_concurrency"),
        ({"max_concurrent_requests": None}, "invalid_concurrency"),
        ({"max_concurrent_requests": True}, "invalid_concurrency"),
        ({"request_timeout": "30"}, "invalid_timeout"),
        ({"cache_size": 1000.0}, "invalid_cache_size"),
        ({"max_retries": "3"}, "invalid_max_retries"),
        ({"retry_delay": None}, "invalid_retry_delay"),
        ({"cache_ttl": "60"}, "invalid_cache_ttl"),
        ({"rate_limit_delay": "0.5"}, "invalid_rate_limit_delay"),
    ],
)
def test_invalid_settings(make_config: Callable[..., Configuration], overrides: dict[str, Any], code: str) -> None:
    """Each rule reports its own error code."""
    assert _error_code(make_config(**overrides)) == code


def test_rules_checked_in_order(make_config: Callable[..., Configuration]) -> None:
    """The first violated rule wins."""
    config = make_config(openai_key=None, source_language="", translation_mode="bogus")
    assert _error_code(config) == "api_key_missing"

    config = make_config(source_language="", max_concurrent_requests=0)
    assert _error_code(config) == "source_language_missing"


def test_zero_retries_allowed(make_config: Callable[..., Configuration]) -> None:
    """max_retries may be zero."""
    assert make_config(max_retries=0).validate()


def test_configuration_is_immutable(config: Configuration) -> None:
    """Fields cannot be reassigned."""
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.provider = "gemini"  # type: ignore[misc]


def test_exclusions_are_read_only() -> None:
    """Per-language exclusions cannot be changed after the configuration is built."""
    config = Configuration.from_dict({"exclusions_per_language": {"fr": ["legal"]}})

    with pytest.raises(TypeError):
        config.exclusions_per_language["de"] = frozenset({"terms"})  # type: ignore[index]
    assert config.exclusions_per_language["fr"] == frozenset({"legal"})
    assert isinstance(config.global_exclusions, frozenset)


def test_numeric_strings_from_json_are_rejected() -> None:
    """JSON values keep their type, so a quoted number fails validation."""
    config = Configuration.from_dict({
        "provider": "chatgpt",
        "openai_key": "test-key",
        "source_language": "en",
        "target_languages": [{"code": "it", "name": "Italian"}],
        "max_retries": "3",
    })
    assert _error_code(config) == "invalid_max_retries"


def test_log_mode_defaults_to_none(config: Configuration) -> None:
    """Without an explicit log mode the configuration is still valid."""
    assert config.log_mode is None
    assert config.validate() is config


def test_with_overrides_returns_copy(config: Configuration) -> None:
    """with_overrides leaves the original untouched."""
    changed = config.with_overrides(dry_run=True)
    assert changed.dry_run is True
    assert config.dry_run is False


def test_from_dict_accepts_both_language_shapes() -> None:
    """Target languages may use code/name or short_name/display_name."""
    config = Configuration.from_dict({
        "provider": "gemini",
        "gemini_key": "g-key",
        "source_language": "en",
        "target_languages": [
            {"code": "it", "name": "Italian"},
            {"short_name": "fr", "display_name": "French"},
        ],
        "global_exclusions": ["app.name"],
        "exclusions_per_language": {"fr": ["legal"]},
        "unknown_field": "ignored",
    })

    assert config.target_languages == (TargetLanguage("it", "Italian"), TargetLanguage("fr", "French"))
    assert config.exclusions_for("fr") == frozenset({"app.name", "legal"})
    assert config.exclusions_for("it") == frozenset({"app.name"})
    assert config.validate() is config


def test_from_dict_rejects_non_mapping_language() -> None:
    """A bare string is not a valid target language entry."""
    with pytest.raises(ConfigurationError) as exc_info:
        Configuration.from_dict({"target_languages": ["it"]})
    assert exc_info.value.code == "invalid_target_language"


def test_api_key_for(make_config: Callable[..., Configuration]) -> None:
    """api_key_for looks up the field of the requested provider."""
    config = make_config(gemini_key="g-key")
    assert config.api_key_for() == "test-key"
    assert config.api_key_for("gemini") == "g-key"
    assert config.api_key_for("unknown") is None


def test_get_prompt_falls_back_to_text_prompt() -> None:
    """Unknown prompt names return the single text prompt."""
    assert get_prompt("nope") == get_prompt("text_translation_prompt")
    assert "{texts_json}" in get_prompt("array_translation_prompt")
