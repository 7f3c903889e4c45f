"""
Provider factory

Maps each provider identifier of the configuration to its adapter class.
"""

from typing import Dict, List, Type

from localeweave.ai.providers import AnthropicProvider, BaseHTTPProvider, ChatGPTProvider, GeminiProvider
from localeweave.config import Configuration
from localeweave.exceptions import ProviderNotFoundError
from localeweave.logger import get_logger

logger = get_logger(__name__)


class ProviderFactory:
    """Creates provider adapters by identifier."""

    _providers: Dict[str, Type[BaseHTTPProvider]] = {
        ChatGPTProvider.name: ChatGPTProvider,
        GeminiProvider.name: GeminiProvider,
        AnthropicProvider.name: AnthropicProvider,
    }

    @classmethod
    def create(cls, provider_name: str, config: Configuration, **provider_options) -> BaseHTTPProvider:
        """
        Create a provider adapter.

        Args:
            provider_name: Provider identifier ("chatgpt", "gemini", "anthropic")
            config: Run configuration
            **provider_options: Passed to the adapter (e.g. client, sleep)

        Returns:
            Provider instance

        Raises:
            ProviderNotFoundError: If the identifier is unknown
        """
        provider_class = cls._providers.get(provider_name)
        if provider_class is None:
            available = cls.list_available_providers()
            raise ProviderNotFoundError(
                f"Unknown provider: {provider_name}. Supported: {', '.join(available)}",
                code="provider_not_found",
                context={"provider": provider_name, "available": available},
            )

        logger.debug(f"Creating provider {provider_name} ({provider_class.__name__})")
        return provider_class(config, **provider_options)

    @classmethod
    def list_available_providers(cls) -> List[str]:
        return list(cls._providers)
