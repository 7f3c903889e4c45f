"""
Run configuration

Configuration is an immutable value built once per run and passed to every
component constructor. validate() checks the parameters in a fixed order and
stops at the first violated rule, before any network activity happens.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from localeweave.exceptions import ConfigurationError
from localeweave.logger import LOG_MODES

# Provider configuration constants
BUILTIN_PROVIDERS = ["chatgpt", "gemini", "anthropic"]

BUILTIN_PROVIDER_DISPLAY_NAMES = {
    "chatgpt": "ChatGPT",
    "gemini": "Gemini",
    "anthropic": "Anthropic",
}

# Credential field required by each provider
PROVIDER_KEY_FIELDS = {
    "chatgpt": "openai_key",
    "gemini": "gemini_key",
    "anthropic": "anthropic_key",
}

TRANSLATION_MODES = ("override", "incremental")

DEFAULT_SYSTEM_MESSAGE = (
    "You are a professional translator. Translate the text exactly, without adding "
    "comments, explanations, or alternatives."
)

# Default prompts
DEFAULT_PROMPTS = {
    "text_translation_prompt": {
        "version": "1.0",
        "description": "Single string translation prompt",
        "prompt": """Translate the following text from {source_language} to {target_language_name}. Return ONLY the translated text, without any explanations.
{context_section}
Preserve every placeholder such as __VAR_0__ exactly as it appears.

Text: {text}""",
    },
    "array_translation_prompt": {
        "version": "1.0",
        "description": "Array translation prompt for batch calls",
        "prompt": """You are a professional translator specializing in i18n locale content translation.

Translate each string from {source_language} to {target_language_name} ({target_language_code}). Return ONLY a JSON array with the translated strings in the same order.
{context_section}
CRITICAL REQUIREMENTS:
- Preserve ALL placeholders EXACTLY as they appear (__VAR_0__, __VAR_1__, etc.)
- Maintain the original tone and style
- Return exactly {text_count} translated strings

Array to translate:
{texts_json}

Return format: ["translated1", "translated2", ...]
Do not include explanations, markdown code blocks, or any text outside the JSON array.""",
    },
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_prompt(prompt_name: str = "text_translation_prompt") -> str:
    """Get a prompt template by name."""
    return DEFAULT_PROMPTS.get(prompt_name, DEFAULT_PROMPTS["text_translation_prompt"])["prompt"]


@dataclass(frozen=True)
class TargetLanguage:
    """A target language with its code (e.g. "it") and display name (e.g. "Italian")."""
    code: str
    name: str


@dataclass(frozen=True)
class Configuration:
    """Validated bag of run parameters."""
    provider: Optional[str] = None
    openai_key: Optional[str] = None
    gemini_key: Optional[str] = None
    anthropic_key: Optional[str] = None
    source_language: Optional[str] = None
    target_languages: Tuple[TargetLanguage, ...] = ()
    input_file: Optional[str] = None
    output_folder: Optional[str] = None
    translation_mode: str = "override"
    translation_context: Optional[str] = None
    model: Optional[str] = None
    max_concurrent_requests: int = 3
    request_timeout: float = 30
    max_retries: int = 3
    retry_delay: float = 2.0
    rate_limit_delay: float = 0.5
    cache_enabled: bool = True
    cache_size: int = 1000
    cache_ttl: Optional[float] = None
    dry_run: bool = False
    global_exclusions: FrozenSet[str] = frozenset()
    exclusions_per_language: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    preserve_variables: bool = True
    create_backup: bool = True
    max_backups: int = 3
    log_mode: Optional[str] = None  # None leaves the process log mode untouched

    def __post_init__(self):
        object.__setattr__(self, "global_exclusions", frozenset(self.global_exclusions))
        object.__setattr__(self, "exclusions_per_language", MappingProxyType({
            code: frozenset(keys) for code, keys in self.exclusions_per_language.items()
        }))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """
        Build a configuration from plain JSON-like data.

        Target languages may use either ``code``/``short_name`` and
        ``name``/``display_name`` keys. Missing fields keep their defaults;
        the result is not validated.

        Args:
            data: Mapping of configuration field names to values

        Returns:
            Configuration instance
        """
        known = set(cls.__dataclass_fields__)
        values = {key: value for key, value in data.items() if key in known}

        targets = []
        for entry in data.get("target_languages") or []:
            if isinstance(entry, TargetLanguage):
                targets.append(entry)
            elif isinstance(entry, Mapping):
                targets.append(TargetLanguage(
                    code=entry.get("code", entry.get("short_name")),
                    name=entry.get("name", entry.get("display_name")),
                ))
            else:
                raise ConfigurationError(
                    "Each target language must be a mapping with code and name",
                    code="invalid_target_language",
                    context={"entry": entry},
                )
        values["target_languages"] = tuple(targets)
        values["global_exclusions"] = frozenset(data.get("global_exclusions") or ())
        values["exclusions_per_language"] = {
            code: keys or ()
            for code, keys in (data.get("exclusions_per_language") or {}).items()
        }
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "Configuration":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def api_key_for(self, provider: Optional[str] = None) -> Optional[str]:
        """Get the credential configured for a provider."""
        key_field = PROVIDER_KEY_FIELDS.get(provider or self.provider)
        return getattr(self, key_field) if key_field else None

    def exclusions_for(self, language_code: str) -> FrozenSet[str]:
        """Global exclusions plus the ones specific to a language."""
        return self.global_exclusions | frozenset(self.exclusions_per_language.get(language_code, ()))

    def validate(self) -> "Configuration":
        """
        Validate the configuration.

        Raises:
            ConfigurationError: On the first violated rule

        Returns:
            The configuration itself, so calls can be chained
        """
        self._validate_provider()
        self._validate_api_key()
        self._validate_languages()
        self._validate_optional_settings()
        return self

    def _validate_provider(self) -> None:
        if not self.provider:
            raise ConfigurationError("Provider must be set", code="provider_missing")
        if self.provider not in BUILTIN_PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider: {self.provider}. Supported: {', '.join(BUILTIN_PROVIDERS)}",
                code="provider_unknown",
                context={"provider": self.provider, "available": list(BUILTIN_PROVIDERS)},
            )

    def _validate_api_key(self) -> None:
        api_key = self.api_key_for()
        if not api_key or not str(api_key).strip():
            display = BUILTIN_PROVIDER_DISPLAY_NAMES[self.provider]
            raise ConfigurationError(
                f"{display} API key is required for the {self.provider} provider",
                code="api_key_missing",
                context={"provider": self.provider, "missing_field": PROVIDER_KEY_FIELDS[self.provider]},
            )

    def _validate_languages(self) -> None:
        if not self.source_language or not str(self.source_language).strip():
            raise ConfigurationError("Source language must be set", code="source_language_missing")
        if not self.target_languages:
            raise ConfigurationError("At least one target language is required", code="target_languages_missing")

        for lang in self.target_languages:
            if not isinstance(lang, TargetLanguage):
                raise ConfigurationError(
                    "Each target language must be a TargetLanguage",
                    code="invalid_target_language",
                    context={"entry": lang},
                )
            if not lang.code:
                raise ConfigurationError("Target language must have a code", code="invalid_target_language")
            if not lang.name:
                raise ConfigurationError(
                    f"Target language {lang.code} must have a name",
                    code="invalid_target_language",
                    context={"code": lang.code},
                )

    def _validate_optional_settings(self) -> None:
        if self.translation_mode not in TRANSLATION_MODES:
            raise ConfigurationError(
                "Translation mode must be 'override' or 'incremental'",
                code="invalid_mode",
                context={"mode": self.translation_mode},
            )

        if not _is_int(self.max_concurrent_requests) or self.max_concurrent_requests <= 0:
            raise ConfigurationError(
                "Max concurrent requests must be a positive integer",
                code="invalid_concurrency",
                context={"max_concurrent_requests": self.max_concurrent_requests},
            )
        if not _is_number(self.request_timeout) or self.request_timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be a positive number",
                code="invalid_timeout",
                context={"request_timeout": self.request_timeout},
            )
        if not _is_int(self.cache_size) or self.cache_size <= 0:
            raise ConfigurationError(
                "Cache size must be a positive integer", code="invalid_cache_size", context={"cache_size": self.cache_size}
            )
        if not _is_int(self.max_retries) or self.max_retries < 0:
            raise ConfigurationError(
                "Max retries must be a non-negative integer",
                code="invalid_max_retries",
                context={"max_retries": self.max_retries},
            )
        if not _is_number(self.retry_delay) or self.retry_delay <= 0:
            raise ConfigurationError(
                "Retry delay must be a positive number", code="invalid_retry_delay", context={"retry_delay": self.retry_delay}
            )
        if self.cache_ttl is not None and (not _is_number(self.cache_ttl) or self.cache_ttl <= 0):
            raise ConfigurationError(
                "Cache TTL must be a positive number when set", code="invalid_cache_ttl", context={"cache_ttl": self.cache_ttl}
            )
        if not _is_number(self.rate_limit_delay) or self.rate_limit_delay < 0:
            raise ConfigurationError(
                "Rate limit delay must be a non-negative number",
                code="invalid_rate_limit_delay",
                context={"rate_limit_delay": self.rate_limit_delay},
            )
        if not _is_int(self.max_backups) or self.max_backups < 0:
            raise ConfigurationError(
                "Max backups must be a non-negative integer",
                code="invalid_max_backups",
                context={"max_backups": self.max_backups},
            )
        if self.log_mode is not None and self.log_mode not in LOG_MODES:
            raise ConfigurationError(
                f"Log mode must be one of {', '.join(LOG_MODES)}",
                code="invalid_log_mode",
                context={"log_mode": self.log_mode},
            )
