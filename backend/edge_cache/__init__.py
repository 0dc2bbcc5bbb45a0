"""
Edge Cache Module

Response cache in front of the public image routes.

Features:
- File-based caching with LRU eviction
- TTL capped by the response's own max-age
- Only public, max-age responses are stored
"""

from .cache_manager import CachedResponse, EdgeResponseCache, parse_max_age
from .middleware import EdgeCacheMiddleware

__all__ = ["EdgeResponseCache", "EdgeCacheMiddleware", "CachedResponse", "parse_max_age"]
