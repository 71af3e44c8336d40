"""
In-process TTL cache for recipe provider responses.

This module provides a simple, lightweight cache for recipe searches and detail
lookups to spare the provider's per-key quota while keeping results fresh.

The cache is process-local and in-memory, with automatic expiration based on TTL.
Only successful, non-empty responses should be stored; failures are never cached.
"""

import time
from typing import Any, Dict, Hashable, Optional, Tuple

# Cache storage: key -> (timestamp, cached_value)
_RESPONSE_CACHE: Dict[Hashable, Tuple[float, Any]] = {}

# TTL in seconds - 60 seconds balances freshness with quota savings
RESPONSE_CACHE_TTL_SECONDS = 60


def make_cache_key(endpoint: str, **params: Any) -> Hashable:
    """
    Create a deterministic cache key for a provider request.

    Args:
        endpoint: Logical endpoint name (e.g., "complexSearch", "information")
        **params: Request parameters; strings are lowercased and stripped,
                  lists/tuples are normalized to tuples, None becomes ""

    Returns:
        Hashable cache key (tuple)

    Examples:
        >>> make_cache_key("complexSearch", query=" Tomato ", diet=None, servings=2)
        ('complexSearch', ('diet', ''), ('query', 'tomato'), ('servings', 2))
    """
    normalized = []
    for name in sorted(params):
        value = params[name]
        if value is None:
            value = ""
        elif isinstance(value, str):
            value = value.strip().lower()
        elif isinstance(value, (list, tuple)):
            value = tuple(_normalize_item(v) for v in value)
        normalized.append((name, value))
    return (endpoint, *normalized)


def _normalize_item(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def get_cached(key: Hashable) -> Optional[Any]:
    """
    Retrieve a cached response if it exists and hasn't expired.

    Args:
        key: Cache key from make_cache_key()

    Returns:
        Cached value, or None if not found or expired
    """
    now = time.time()
    entry = _RESPONSE_CACHE.get(key)

    if not entry:
        return None

    timestamp, value = entry

    # Check if expired
    if now - timestamp > RESPONSE_CACHE_TTL_SECONDS:
        _RESPONSE_CACHE.pop(key, None)
        return None

    return value


def set_cached(key: Hashable, value: Any) -> None:
    """Store a response in the cache under the given key."""
    _RESPONSE_CACHE[key] = (time.time(), value)


def clear_cache() -> None:
    """Clear all cached responses (useful for testing)."""
    _RESPONSE_CACHE.clear()


def get_cache_size() -> int:
    """Get the current number of cached entries (useful for monitoring)."""
    return len(_RESPONSE_CACHE)
