"""User resolver — username lookup and directory search over the user collection.

The store has no index on a case-folded username, so resolution is a linear
scan of the whole user collection: O(n) reads per uncached lookup. The
fetched snapshot is cached for ``cache_ttl_seconds`` and shared by
resolution and directory search.
"""

import logging
import time
from typing import Callable, Iterable, Optional

from waytrack.clients.base import IDocumentStore
from waytrack.exceptions import DuplicateUsernameError
from waytrack.models.archive import User
from waytrack.services.normalizer import normalize_user
from waytrack.services.request_guard import RequestGuard

logger = logging.getLogger(__name__)

_SNAPSHOT_KEY = "users"


def match_username(users: Iterable[User], username: str) -> Optional[User]:
    """Case-insensitive match on ``username``, falling back to ``name``.

    Only case is folded; whitespace and diacritics are compared as-is.
    Several users matching the same field is an integrity error.
    """
    needle = username.lower()
    if not needle:
        return None

    users = list(users)
    for field_name in ("username", "name"):
        matches = [u for u in users if (getattr(u, field_name) or "").lower() == needle]
        if len(matches) > 1:
            logger.warning(f"Duplicate {field_name} {username!r}: {[u.id for u in matches]}")
            raise DuplicateUsernameError(username, [u.id for u in matches])
        if matches:
            return matches[0]
    return None


def search_users(users: Iterable[User], query: str) -> list[User]:
    """Substring search on username, full name and name.

    Usernames starting with the query rank before usernames that merely
    contain it; ties sort alphabetically by username.
    """
    term = query.strip().lower()
    if not term:
        return []

    hits = [
        u for u in users
        if term in u.username.lower()
        or term in (u.full_name or "").lower()
        or term in (u.name or "").lower()
    ]
    return sorted(hits, key=lambda u: (not u.username.lower().startswith(term), u.username.lower()))


class UserResolver:
    """Resolves path usernames to user records, with a TTL'd collection snapshot."""

    def __init__(
        self,
        store: IDocumentStore,
        collection: str,
        cache_ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.collection = collection
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._guard = RequestGuard()
        self._snapshot: Optional[list[User]] = None
        self._fetched_at = 0.0

    async def all_users(self) -> list[User]:
        """Every user document, served from the snapshot while it is fresh."""
        if self._snapshot is not None and self._is_fresh():
            logger.debug("User snapshot cache hit")
            return self._snapshot

        token = self._guard.begin(_SNAPSHOT_KEY)
        docs = await self.store.get_all(self.collection)
        users = [normalize_user(d) for d in docs]

        # A newer scan or an invalidation happened meanwhile: answer the
        # caller but leave the cache to the newer result.
        if self.cache_ttl_seconds > 0 and self._guard.is_current(_SNAPSHOT_KEY, token):
            self._snapshot = users
            self._fetched_at = self._clock()
        logger.debug(f"Scanned {len(users)} users from {self.collection}")
        return users

    async def resolve(self, username: str) -> Optional[User]:
        return match_username(await self.all_users(), username)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        doc = await self.store.get(self.collection, user_id)
        return normalize_user(doc) if doc else None

    async def search(self, query: Optional[str]) -> list[User]:
        """Directory listing. ``None`` lists everyone; a blank query lists no one."""
        users = await self.all_users()
        if query is None:
            return sorted(users, key=lambda u: u.username.lower())
        return search_users(users, query)

    def invalidate(self) -> None:
        self._snapshot = None
        self._guard.invalidate()

    def _is_fresh(self) -> bool:
        return self._clock() - self._fetched_at < self.cache_ttl_seconds
