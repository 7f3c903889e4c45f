"""
Core module - shared in-memory resources

This module provides:
- Cache: thread-safe LRU cache with optional TTL
- RateLimiter: thread-safe pacing gate between outbound calls
"""

from localeweave.core.cache import Cache
from localeweave.core.rate_limiter import RateLimiter

__all__ = ['Cache', 'RateLimiter']
