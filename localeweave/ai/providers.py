"""
AI Provider Implementations

This module contains the shared HTTP provider skeleton and one adapter per
backend:
- ChatGPT (OpenAI chat completions)
- Gemini (generateContent)
- Anthropic (messages)

The skeleton handles caching, rate limiting, variable protection, retry with
exponential backoff and response classification. Each adapter only knows how
to build its request and where the translated text lives in the response.
"""

import json
import random
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from localeweave.config import (
    BUILTIN_PROVIDER_DISPLAY_NAMES,
    DEFAULT_SYSTEM_MESSAGE,
    Configuration,
    get_prompt,
)
from localeweave.core.cache import Cache
from localeweave.core.rate_limiter import RateLimiter
from localeweave.exceptions import ApiError, RateLimitError, TranslationError
from localeweave.logger import get_logger
from localeweave.translation import validator
from localeweave.translation.utils import parse_translations_response
from localeweave.translation.variables import VariableExtractor

logger = get_logger(__name__)

MAX_RETRY_DELAY = 60.0
JITTER_RATIO = 0.3


def get_httpx_timeout(request_timeout: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        request_timeout: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(request_timeout, dict):
        return httpx.Timeout(
            connect=request_timeout.get('connect', 10.0),
            write=request_timeout.get('write', 30.0),
            read=request_timeout.get('read', 30.0),
            pool=request_timeout.get('pool', 10.0),
        )
    timeout_value = float(request_timeout) if request_timeout else 30.0
    return httpx.Timeout(connect=10.0, write=timeout_value, read=timeout_value, pool=10.0)


def calculate_backoff(
    attempt: int,
    base_delay: float,
    rng: Callable[[], float] = random.random,
    max_delay: float = MAX_RETRY_DELAY,
) -> float:
    """
    Exponential backoff with jitter.

    delay = base_delay * 2^(attempt-1) * (1 + jitter), jitter in [0, 0.3),
    capped at max_delay.

    Args:
        attempt: 1-indexed attempt number that just failed
        base_delay: Delay for the first retry, seconds
        rng: Uniform [0, 1) source
        max_delay: Upper bound, seconds

    Returns:
        Seconds to sleep before the next attempt
    """
    jitter = rng() * JITTER_RATIO
    delay = base_delay * (2 ** (attempt - 1)) * (1 + jitter)
    return min(delay, max_delay)


def build_cache_key(text: str, target_lang_code: str) -> str:
    return f"{text}:{target_lang_code}"


def dig(payload: Any, *path: Any) -> Any:
    """Follow a path of dict keys / list indexes, returning None when it breaks."""
    node = payload
    for step in path:
        try:
            node = node[step]
        except (KeyError, IndexError, TypeError):
            return None
    return node


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error message from a provider error body."""
    try:
        error_json = response.json()
    except ValueError:
        return response.text[:500]

    if isinstance(error_json, dict) and "error" in error_json:
        error_detail = error_json["error"]
        if isinstance(error_detail, dict):
            return str(error_detail.get("message", error_detail))
        return str(error_detail)
    return response.text[:500]


class BaseHTTPProvider(ABC):
    """
    Shared skeleton for HTTP translation providers.

    One instance owns one Cache and one RateLimiter, which live as long as the
    provider and are shared by every language translated through it.
    """

    name = ""
    default_model = ""

    def __init__(
        self,
        config: Configuration,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the provider.

        Args:
            config: Run configuration
            client: Optional preconfigured httpx client (e.g. with a mock transport)
            sleep: Sleep function used between retries
        """
        self.config = config
        self.cache = Cache(capacity=config.cache_size, ttl=config.cache_ttl)
        self.rate_limiter = RateLimiter(delay=config.rate_limit_delay)
        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()
        self._sleep = sleep
        logger.info(f"Initialized {self.display_name} provider (model: {self.model})")

    @property
    def display_name(self) -> str:
        return BUILTIN_PROVIDER_DISPLAY_NAMES.get(self.name, self.name)

    @property
    def model(self) -> str:
        return self.config.model or self.default_model

    @property
    def api_key(self) -> str:
        return self.config.api_key_for(self.name) or ""

    @property
    def http_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(timeout=get_httpx_timeout(self.config.request_timeout))
            return self._client

    def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        with self._client_lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def translate_text(self, text: str, target_lang_code: str, target_lang_name: str) -> str:
        """
        Translate a single string.

        Args:
            text: Source text
            target_lang_code: Target language code (e.g. "it")
            target_lang_name: Target language display name (e.g. "Italian")

        Returns:
            Translated text

        Raises:
            ValidationError: If text or language code is invalid
            TranslationError: If the translation could not be produced
        """
        validator.validate_text(text)
        validator.validate_language_code(target_lang_code)

        try:
            return self._with_cache(
                build_cache_key(text, target_lang_code),
                lambda: self._translate_uncached(text, target_lang_code, target_lang_name),
            )
        except Exception as e:
            raise TranslationError(
                f"Failed to translate text with {self.display_name}: {e}",
                code=getattr(e, "code", None) or "translation_failed",
                context={"text": text, "target_lang": target_lang_code, "original_error": e},
            ) from e

    def translate_batch(self, texts: List[str], target_lang_code: str, target_lang_name: str) -> List[str]:
        """
        Translate several strings, returning results in input order.

        Cached strings are served from the cache; the remaining ones are sent
        in one request.

        Raises:
            ValidationError: If any text or the language code is invalid
            TranslationError: If the translations could not be produced
        """
        validator.validate_language_code(target_lang_code)
        for text in texts:
            validator.validate_text(text)

        results: List[Optional[str]] = [None] * len(texts)
        pending: List[int] = []
        for index, text in enumerate(texts):
            cached = self.cache.get(build_cache_key(text, target_lang_code)) if self.config.cache_enabled else None
            if cached is not None:
                results[index] = cached
            else:
                pending.append(index)

        if len(pending) == 1:
            index = pending[0]
            results[index] = self.translate_text(texts[index], target_lang_code, target_lang_name)
        elif pending:
            pending_texts = [texts[index] for index in pending]
            logger.debug(f"Batch of {len(texts)} strings to {target_lang_code}: {len(pending)} not cached")
            try:
                translated = self._translate_batch_uncached(pending_texts, target_lang_code, target_lang_name)
            except Exception as e:
                raise TranslationError(
                    f"Failed to translate batch with {self.display_name}: {e}",
                    code=getattr(e, "code", None) or "translation_failed",
                    context={"texts": pending_texts, "target_lang": target_lang_code, "original_error": e},
                ) from e

            for index, translation in zip(pending, translated):
                results[index] = translation
                if self.config.cache_enabled:
                    self.cache.set(build_cache_key(texts[index], target_lang_code), translation)

        return results

    # ------------------------------------------------------------------
    # Translation pipeline
    # ------------------------------------------------------------------

    def _with_cache(self, cache_key: str, producer: Callable[[], str]) -> str:
        if not self.config.cache_enabled:
            return producer()

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key[:60]}")
            return cached

        return self.cache.set(cache_key, producer())

    def _translate_uncached(self, text: str, target_lang_code: str, target_lang_name: str) -> str:
        extractor = VariableExtractor(text) if self.config.preserve_variables else None
        safe_text = extractor.extract() if extractor else text

        prompt = self.build_text_prompt(safe_text, target_lang_name)
        translation = self.generate(prompt)

        return extractor.restore(translation, strict=True) if extractor else translation

    def _translate_batch_uncached(
        self, texts: List[str], target_lang_code: str, target_lang_name: str
    ) -> List[str]:
        extractors = [VariableExtractor(text) for text in texts] if self.config.preserve_variables else None
        safe_texts = [extractor.extract() for extractor in extractors] if extractors else list(texts)

        prompt = self.build_batch_prompt(safe_texts, target_lang_code, target_lang_name)
        response_text = self.generate(prompt, max_tokens=8192)

        translations = parse_translations_response(response_text)
        if translations is None:
            raise TranslationError(
                "Could not parse translations from response",
                code="parse_failed",
                context={"response": response_text[:500]},
            )
        if len(translations) != len(texts):
            raise TranslationError(
                f"Translation count mismatch: expected {len(texts)}, got {len(translations)}",
                code="count_mismatch",
                context={"expected": len(texts), "received": len(translations)},
            )
        for translation in translations:
            if not isinstance(translation, str) or not translation.strip():
                raise TranslationError("Empty translation in batch response", code="empty_translation",
                                       context={"translations": translations})

        translations = [translation.strip() for translation in translations]
        if extractors:
            translations = [
                extractor.restore(translation, strict=True)
                for extractor, translation in zip(extractors, translations)
            ]
        return translations

    def build_text_prompt(self, text: str, target_lang_name: str) -> str:
        return get_prompt("text_translation_prompt").format(
            source_language=self.config.source_language,
            target_language_name=target_lang_name,
            context_section=self._context_section(),
            text=text,
        )

    def build_batch_prompt(self, texts: List[str], target_lang_code: str, target_lang_name: str) -> str:
        return get_prompt("array_translation_prompt").format(
            source_language=self.config.source_language,
            target_language_name=target_lang_name,
            target_language_code=target_lang_code,
            context_section=self._context_section(),
            text_count=len(texts),
            texts_json=json.dumps(texts, ensure_ascii=False),
        )

    def _context_section(self) -> str:
        context = self.config.translation_context
        return f"\nContext: {context}\n" if context else ""

    def generate(self, prompt: str, max_tokens: int = 1024) -> str:
        """
        Send a prompt and return the provider's text output.

        Raises:
            ApiError: When the request keeps failing after retries
            TranslationError: When the response carries no translation
        """
        url, headers, body = self.build_request(prompt, DEFAULT_SYSTEM_MESSAGE, max_tokens)
        logger.debug(f"Calling {self.display_name} API (model: {self.model})")
        response = self.make_request(url, headers=headers, body=body)
        return self.extract_translation(response)

    def extract_translation(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError as e:
            raise TranslationError(
                f"Failed to parse {self.display_name} response",
                code="invalid_response",
                context={"error": str(e), "body": response.text[:500]},
            ) from e

        translation = self.extract_text(payload)
        if not isinstance(translation, str) or not translation.strip():
            raise TranslationError(
                "No translation in response",
                code="empty_translation",
                context={"body": response.text[:500]},
            )
        return translation.strip()

    # ------------------------------------------------------------------
    # HTTP with retry
    # ------------------------------------------------------------------

    def make_request(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> httpx.Response:
        """
        POST with rate limiting and retry.

        Each attempt waits for the rate limiter, records the call start, sends
        the request and classifies the response. Retryable failures are
        retried while attempts < max_retries, sleeping calculate_backoff()
        seconds in between.
        """
        attempt = 0

        while True:
            attempt += 1
            try:
                self.rate_limiter.acquire()
                response = self._send(url, headers, body)
                self.handle_response(response)
                return response
            except ApiError as e:
                if attempt >= self.config.max_retries:
                    raise

                delay = calculate_backoff(attempt, self.config.retry_delay)
                logger.warning(
                    f"Retry {attempt}/{self.config.max_retries} after {delay:.2f}s "
                    f"({type(e).__name__}: {e})"
                )
                self._sleep(delay)

    def _send(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> httpx.Response:
        try:
            return self.http_client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            raise ApiError(f"{self.display_name} API request timeout", code="timeout",
                           context={"error": str(e)}) from e
        except httpx.TransportError as e:
            raise ApiError(f"{self.display_name} API request failed: {e}", code="transport_error",
                           context={"error": str(e)}) from e

    def handle_response(self, response: httpx.Response) -> None:
        """
        Classify a response by status code.

        Raises:
            RateLimitError: On 429
            ApiError: On any other non-2xx status
        """
        status = response.status_code
        if 200 <= status < 300:
            return

        context = {"status": status, "body": response.text[:500]}
        if status == 429:
            context["retry_after"] = response.headers.get("retry-after")
            raise RateLimitError("Rate limit exceeded", code="rate_limited", context=context)
        if 400 <= status < 500:
            raise ApiError(f"Client error: {status} ({_error_detail(response)})", code="client_error",
                           context=context)
        if 500 <= status < 600:
            raise ApiError(f"Server error: {status}", code="server_error", context=context)
        raise ApiError(f"Unexpected status: {status}", code="unexpected_status", context=context)

    # ------------------------------------------------------------------
    # Provider specifics
    # ------------------------------------------------------------------

    @abstractmethod
    def build_request(
        self, prompt: str, system_message: str, max_tokens: int
    ) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return (url, headers, json body) for one generation request."""

    @abstractmethod
    def extract_text(self, payload: Any) -> Optional[str]:
        """Return the generated text from a decoded response, or None."""


class ChatGPTProvider(BaseHTTPProvider):
    """OpenAI chat completions provider."""

    name = "chatgpt"
    default_model = "gpt-4o-mini"
    API_URL = "https://api.openai.com/v1/chat/completions"

    def build_request(self, prompt, system_message, max_tokens):
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_message},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.3,
            "max_tokens": max_tokens,
        }
        return self.API_URL, headers, body

    def extract_text(self, payload):
        return dig(payload, "choices", 0, "message", "content")


class GeminiProvider(BaseHTTPProvider):
    """Google Gemini generateContent provider."""

    name = "gemini"
    default_model = "gemini-2.0-flash"
    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def build_request(self, prompt, system_message, max_tokens):
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        body = {
            "systemInstruction": {"parts": [{"text": system_message}]},
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": max_tokens},
        }
        return self.API_URL.format(model=self.model), headers, body

    def extract_text(self, payload):
        return dig(payload, "candidates", 0, "content", "parts", 0, "text")


class AnthropicProvider(BaseHTTPProvider):
    """Anthropic messages provider."""

    name = "anthropic"
    default_model = "claude-3-5-sonnet-20241022"
    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def build_request(self, prompt, system_message, max_tokens):
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.API_VERSION,
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system_message,
            "messages": [{"role": "user", "content": prompt}],
        }
        return self.API_URL, headers, body

    def extract_text(self, payload):
        return dig(payload, "content", 0, "text")
