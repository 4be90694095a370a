"""Stale-result guard for overlapping reads.

Every read that may be superseded takes a token from ``begin(key)``. When it
completes it checks ``is_current(key, token)`` before publishing its result;
a newer ``begin`` for the same key, or an ``invalidate``, makes older tokens
stale. Nothing is cancelled; stale results are simply not applied.
"""

import itertools
from typing import Optional


class RequestGuard:
    """Monotonically increasing request tokens, tracked per key."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def begin(self, key: str) -> int:
        token = next(self._counter)
        self._latest[key] = token
        return token

    def is_current(self, key: str, token: int) -> bool:
        return self._latest.get(key) == token

    def invalidate(self, key: Optional[str] = None) -> None:
        """Mark in-flight reads for ``key`` (or every key) as stale."""
        if key is None:
            self._latest.clear()
        else:
            self._latest.pop(key, None)
