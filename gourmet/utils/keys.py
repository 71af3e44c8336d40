"""
Round-robin API key rotation.

The recipe provider meters requests per key, so the app spreads its traffic
across several keys. ApiKeyRotator is owned by the provider instance that uses
it; there is no module-level cursor.
"""

import threading
from typing import Iterable, List


class ApiKeyRotator:
    """
    Hand out API keys in strict round-robin order.

    With N keys, the (k+N)-th call to next_key() returns the same key as the
    k-th call, also when several threads share the rotator. Empty and
    whitespace-only keys are dropped at construction.

    Raises:
        RuntimeError: If no usable key is supplied.
    """

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys: List[str] = [k.strip() for k in keys if k and k.strip()]
        if not self._keys:
            raise RuntimeError(
                "No Spoonacular API key configured. Add SPOONACULAR_API_KEY_1 (and optionally "
                "SPOONACULAR_API_KEY_2) to your .env file at the project root."
            )
        self._cursor = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def cursor(self) -> int:
        """Index of the key the next call will receive."""
        return self._cursor

    def next_key(self) -> str:
        """Return the current key and advance the cursor (wrapping modulo the key count)."""
        with self._lock:
            key = self._keys[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._keys)
        return key
