"""
conftest.py
-----------
Shared pytest fixtures for the archive service tests.

Provides:
- An in-memory IDocumentStore with call recording
- Sample user and entry documents in the stored (camelCase) shape
- A wired ArchiveService
"""
import asyncio
from datetime import datetime, timezone
from typing import Optional

import pytest

from waytrack.clients.base import IDocumentStore, StoredDocument, EqualityFilter, StoreTimestamp
from waytrack.exceptions import StoreError
from waytrack.services.archive import ArchiveService
from waytrack.services.user_resolver import UserResolver

USERS = "users_v3"
ENTRIES = "archives_v3"


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


def ts(year: int, month: int, day: int = 1) -> StoreTimestamp:
    """Store-native timestamp for a UTC midnight."""
    dt = datetime(year, month, day, tzinfo=timezone.utc)
    return StoreTimestamp(seconds=int(dt.timestamp()))


class InMemoryDocumentStore(IDocumentStore):
    """Dict-backed store. Records calls; can be told to fail."""

    def __init__(self, collections: Optional[dict[str, dict[str, dict]]] = None):
        self.collections = collections or {}
        self.calls: list[tuple] = []
        self.fail = False

    def _check(self, collection: str):
        if self.fail:
            raise StoreError("store offline", collection)

    async def get_all(self, collection: str) -> list[StoredDocument]:
        self.calls.append(("get_all", collection))
        self._check(collection)
        return [StoredDocument(k, dict(v)) for k, v in self.collections.get(collection, {}).items()]

    async def query(self, collection: str, filters: list[EqualityFilter]) -> list[StoredDocument]:
        self.calls.append(("query", collection, tuple(filters)))
        self._check(collection)
        return [
            StoredDocument(k, dict(v))
            for k, v in self.collections.get(collection, {}).items()
            if all(f.field in v and v[f.field] == f.value for f in filters)
        ]

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        self.calls.append(("get", collection, doc_id))
        self._check(collection)
        data = self.collections.get(collection, {}).get(doc_id)
        return StoredDocument(doc_id, dict(data)) if data is not None else None

    async def test_connection(self) -> bool:
        return not self.fail


# ----- Sample documents -----

@pytest.fixture
def user_docs():
    return {
        "u-ada": {"username": "adalovelace", "fullName": "Ada Lovelace", "avatarUrl": "https://img/ada.png"},
        "u-ben": {"username": "ben", "name": "Benjamin"},
        "u-aben": {"username": "aben", "fullName": "Aben Ahmed"},
        "u-grace": {"username": "grace", "name": "Grace Hopper"},
    }


@pytest.fixture
def entry_docs():
    return {
        # Ada: books
        "e1": {"userId": "u-ada", "category": "book", "title": "Notes", "creator": "Menabrea",
               "rating": "4.5", "status": "completed", "createdAt": ts(2024, 3, 10)},
        "e2": {"userId": "u-ada", "category": "Books", "title": "Difference Engine", "rating": 5,
               "createdAt": ts(2024, 1, 5)},
        "e3": {"userId": "u-ada", "category": "book", "title": "Planned Read", "status": "planned",
               "createdAt": ts(2024, 2, 1)},
        "e4": {"userId": "u-ada", "category": "book", "title": "Undated", "rating": 3.0},
        # Ada: music with an artist aggregate
        "e5": {"userId": "u-ada", "category": "music", "format": "artist", "title": "Bach", "rating": 5},
        "e6": {"userId": "u-ada", "category": "music", "format": "album", "title": "Goldberg Variations",
               "creator": "Bach", "rating": "5.0", "status": "", "createdAt": ts(2024, 3, 2)},
        # Ada: podcasts, tv, unknown
        "e7": {"userId": "u-ada", "category": "podcast", "format": "show", "title": "History Hour"},
        "e8": {"userId": "u-ada", "category": "podcasts", "title": "Episode 12", "rating": 4.9,
               "createdAt": ts(2023, 12, 24)},
        "e9": {"userId": "u-ada", "category": "tv", "title": "Connections", "status": "in-progress",
               "createdAt": ts(2024, 3, 1)},
        "e10": {"userId": "u-ada", "category": "games", "title": "Chess"},
        # Someone else
        "e11": {"userId": "u-ben", "category": "book", "title": "Ben's Book", "createdAt": ts(2024, 3, 3)},
    }


@pytest.fixture
def store(user_docs, entry_docs):
    return InMemoryDocumentStore({USERS: user_docs, ENTRIES: entry_docs})


@pytest.fixture
def resolver(store):
    return UserResolver(store, USERS, cache_ttl_seconds=300)


@pytest.fixture
def archive(store, resolver):
    return ArchiveService(store, resolver, ENTRIES, preview_limit=10, default_timezone="UTC")
