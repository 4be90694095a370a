"""Archive views — the entry pipeline behind every screen.

Resolve user → equality query on entries → normalize → completion filter →
classify → month groups / favorites rail / aggregate rail.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Optional

from waytrack.clients.base import IDocumentStore, EqualityFilter
from waytrack.models.archive import Category, CATEGORIES, Entry, User, UNCLASSIFIED
from waytrack.services.classifier import classify, resolve_category, split_aggregates
from waytrack.services.grouping import MonthGroup, group_by_month, viewer_timezone
from waytrack.services.normalizer import normalize_entry, sort_newest_first
from waytrack.services.selectors import completed_only, favorites
from waytrack.services.user_resolver import UserResolver

logger = logging.getLogger(__name__)


@dataclass
class BucketSummary:
    """One category widget on the profile screen."""
    category: Category
    count: int
    preview: list[Entry]
    aggregates: list[Entry] = field(default_factory=list)
    favorites: list[Entry] = field(default_factory=list)


@dataclass
class ProfileView:
    user: User
    buckets: list[BucketSummary]
    unclassified: list[Entry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(b.count + len(b.aggregates) for b in self.buckets) + len(self.unclassified)


@dataclass
class CategoryView:
    user: User
    category: Category
    sections: list[MonthGroup]
    favorites: list[Entry]
    aggregates: list[Entry]

    @property
    def count(self) -> int:
        return sum(len(s.entries) for s in self.sections)


class ArchiveService:
    """Builds profile, category and directory views from the document store."""

    def __init__(
        self,
        store: IDocumentStore,
        resolver: UserResolver,
        entries_collection: str,
        preview_limit: int = 10,
        default_timezone: str = "UTC",
    ):
        self.store = store
        self.resolver = resolver
        self.entries_collection = entries_collection
        self.preview_limit = preview_limit
        self.default_timezone = default_timezone

    # ── Entry retrieval ──────────────────────────────────────────

    async def fetch_entries(self, user_id: str, category: Optional[Category] = None) -> list[Entry]:
        """A user's entries, normalized and sorted newest first.

        The store query filters on ``userId`` only. Stored category values
        vary in case and number, so the category cut is made by the
        classifier, the same way the profile buckets entries.
        """
        docs = await self.store.query(
            self.entries_collection, [EqualityFilter("userId", user_id)],
        )
        entries = [normalize_entry(d) for d in docs]
        if category is not None:
            entries = classify(entries)[category.bucket]
        logger.debug(
            f"Fetched {len(entries)} entries for user={user_id} "
            f"category={category.key if category else '*'}"
        )
        return sort_newest_first(entries)

    async def _user_with_entries(
        self,
        username: str,
        user_id: Optional[str],
        category: Optional[Category],
    ) -> tuple[Optional[User], list[Entry]]:
        if user_id:
            # Pre-resolved id: both reads are independent
            user, entries = await asyncio.gather(
                self.resolver.get_by_id(user_id),
                self.fetch_entries(user_id, category),
            )
            return user, (entries if user else [])

        user = await self.resolver.resolve(username)
        if user is None:
            return None, []
        return user, await self.fetch_entries(user.id, category)

    # ── Views ────────────────────────────────────────────────────

    async def directory(self, query: Optional[str] = None) -> list[User]:
        return await self.resolver.search(query)

    async def profile(self, username: str, user_id: Optional[str] = None) -> Optional[ProfileView]:
        user, entries = await self._user_with_entries(username, user_id, None)
        if user is None:
            return None

        buckets = classify(completed_only(entries))
        summaries = []
        for category in CATEGORIES:
            split = split_aggregates(category, buckets[category.bucket])
            summaries.append(BucketSummary(
                category=category,
                count=len(split.items),
                preview=split.items[:self.preview_limit],
                aggregates=split.aggregates,
                favorites=favorites(split.items),
            ))
        return ProfileView(user=user, buckets=summaries, unclassified=buckets[UNCLASSIFIED])

    async def category_view(
        self,
        username: str,
        category_name: str,
        user_id: Optional[str] = None,
        tz: Optional[str] = None,
    ) -> Optional[CategoryView]:
        category = resolve_category(category_name)
        user, entries = await self._user_with_entries(username, user_id, category)
        if user is None:
            return None

        split = split_aggregates(category, completed_only(entries))
        zone: tzinfo = viewer_timezone(tz or self.default_timezone)
        return CategoryView(
            user=user,
            category=category,
            sections=group_by_month(split.items, zone),
            favorites=favorites(split.items),
            aggregates=split.aggregates,
        )
