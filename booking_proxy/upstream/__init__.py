from .base import CachedToken, TokenProvider
from .mindbody import MindbodyClient
from .token_cache import TokenCache

__all__ = ["CachedToken", "MindbodyClient", "TokenCache", "TokenProvider"]
