# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Parse cache for FilterBox.
Caches parsed pipe chains to avoid re-tokenizing the same markup.
"""

import threading
from collections import OrderedDict
from typing import Optional

from .expressions import PipeChain, parse_markup


class ParseCache:
    """
    LRU cache for parsed output markup.

    Parsed chains are immutable, so one cache is shared by every render.
    """

    def __init__(self, max_size: int = 256):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached chains (0 disables caching)
        """
        self.max_size = max_size
        self._cache: "OrderedDict[str, PipeChain]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, markup: str) -> Optional[PipeChain]:
        """
        Get parsed chain from cache.

        Returns:
            Parsed chain or None if not cached
        """
        with self._lock:
            chain = self._cache.get(markup)
            if chain is not None:
                # Move to end (mark as recently used)
                self._cache.move_to_end(markup)
                self.hits += 1
            return chain

    def put(self, markup: str, chain: PipeChain):
        """Cache a parsed chain"""
        if self.max_size <= 0:
            return
        with self._lock:
            self._cache[markup] = chain
            self._cache.move_to_end(markup)

            # Evict oldest if needed
            while len(self._cache) > self.max_size:
                self._cache.popitem(last=False)

    def load_or_parse(self, markup: str) -> PipeChain:
        """
        Load from cache or parse markup.

        Raises:
            TemplateSyntaxError: If the markup does not parse
        """
        cached = self.get(markup)
        if cached is not None:
            return cached

        with self._lock:
            self.misses += 1
        chain = parse_markup(markup)
        self.put(markup, chain)
        return chain

    def invalidate(self, markup: str):
        """Invalidate cache entry for markup"""
        with self._lock:
            self._cache.pop(markup, None)

    def clear(self):
        """Clear all cache entries"""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

    def size(self) -> int:
        """Get current cache size"""
        return len(self._cache)


# Global cache instance
_global_cache: Optional[ParseCache] = None


def get_cache() -> ParseCache:
    """Get global parse cache instance"""
    global _global_cache
    if _global_cache is None:
        from .config import get_config

        _global_cache = ParseCache(max_size=get_config().rendering.parse_cache_size)
    return _global_cache


def reset_cache():
    """Drop the global cache; the next get_cache() rebuilds it from config"""
    global _global_cache
    _global_cache = None
