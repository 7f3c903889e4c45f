"""
AI Module

This module provides provider adapters and the direct translation service.
"""

from localeweave.ai.factory import ProviderFactory
from localeweave.ai.providers import AnthropicProvider, BaseHTTPProvider, ChatGPTProvider, GeminiProvider
from localeweave.ai.service import TranslationService

__all__ = [
    'ProviderFactory',
    'BaseHTTPProvider',
    'ChatGPTProvider',
    'GeminiProvider',
    'AnthropicProvider',
    'TranslationService',
]
