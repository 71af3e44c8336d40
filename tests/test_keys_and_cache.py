"""
Tests for API key rotation and the provider response cache.
"""

import threading
from collections import Counter
from unittest.mock import patch

import pytest

from gourmet.utils import cache
from gourmet.utils.keys import ApiKeyRotator


class TestApiKeyRotator:
    """Round-robin key rotation."""

    def test_round_robin_wraps(self):
        """With N keys the (k+N)-th call returns the k-th call's key."""
        rotator = ApiKeyRotator(["a", "b", "c"])
        first_round = [rotator.next_key() for _ in range(3)]
        second_round = [rotator.next_key() for _ in range(3)]

        assert first_round == ["a", "b", "c"]
        assert second_round == first_round

    def test_single_key_always_returned(self):
        rotator = ApiKeyRotator(["only"])
        assert [rotator.next_key() for _ in range(3)] == ["only", "only", "only"]

    def test_blank_keys_are_dropped(self):
        """Whitespace-only keys do not take part in rotation."""
        rotator = ApiKeyRotator(["", "  ", " k1 ", "k2"])
        assert len(rotator) == 2
        assert rotator.next_key() == "k1"

    def test_no_keys_is_a_configuration_error(self):
        """An empty key list raises RuntimeError."""
        with pytest.raises(RuntimeError, match="SPOONACULAR_API_KEY_1"):
            ApiKeyRotator([])

    def test_shared_rotator_spreads_keys_evenly(self):
        """Threads sharing one rotator never hand out the same slot twice."""
        rotator = ApiKeyRotator(["a", "b"])
        handed_out = []
        lock = threading.Lock()

        def worker():
            keys = [rotator.next_key() for _ in range(500)]
            with lock:
                handed_out.extend(keys)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert Counter(handed_out) == {"a": 2000, "b": 2000}
        assert rotator.cursor == 0

    def test_cursor_advances(self):
        rotator = ApiKeyRotator(["a", "b"])
        assert rotator.cursor == 0
        rotator.next_key()
        assert rotator.cursor == 1
        rotator.next_key()
        assert rotator.cursor == 0


class TestResponseCache:
    """TTL cache behaviour."""

    def setup_method(self):
        cache.clear_cache()

    def test_make_cache_key_normalizes(self):
        """Case, whitespace and None are normalized."""
        key_a = cache.make_cache_key("complexSearch", query=" Tomato ", diet=None)
        key_b = cache.make_cache_key("complexSearch", diet="", query="tomato")
        assert key_a == key_b

    def test_set_and_get(self):
        key = cache.make_cache_key("information", recipe_id=1)
        cache.set_cached(key, {"id": 1})
        assert cache.get_cached(key) == {"id": 1}
        assert cache.get_cache_size() == 1

    def test_expired_entries_are_dropped(self):
        """Entries older than the TTL are evicted on read."""
        key = cache.make_cache_key("information", recipe_id=2)
        with patch("gourmet.utils.cache.time.time", return_value=1000.0):
            cache.set_cached(key, "value")
        with patch("gourmet.utils.cache.time.time",
                   return_value=1000.0 + cache.RESPONSE_CACHE_TTL_SECONDS + 1):
            assert cache.get_cached(key) is None
        assert cache.get_cache_size() == 0
