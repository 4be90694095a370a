"""Category classifier — buckets entries into tv, music, podcasts, books.

Stored category values are inconsistent across historical documents
(singular or plural, any casing). Every spelling of a known category maps to
its bucket; anything else lands in ``unclassified`` instead of disappearing.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from waytrack.exceptions import UnknownCategoryError
from waytrack.models.archive import Category, CATEGORIES, Entry, UNCLASSIFIED

logger = logging.getLogger(__name__)

_BY_NAME: dict[str, Category] = {}
for _c in CATEGORIES:
    for _name in (_c.key, _c.bucket, _c.label):
        _BY_NAME[_name.lower()] = _c


def lookup_category(name: Optional[str]) -> Optional[Category]:
    """Any known spelling (key, plural bucket, UI label; any case) → Category."""
    if not name:
        return None
    return _BY_NAME.get(name.strip().lower())


def resolve_category(ui_name: str) -> Category:
    """UI category name → Category, or UnknownCategoryError."""
    category = lookup_category(ui_name)
    if category is None:
        raise UnknownCategoryError(ui_name)
    return category


def stored_key(ui_name: str) -> str:
    """Books → book, Podcasts → podcast, TV → tv, Music → music."""
    return resolve_category(ui_name).key


def is_aggregate(entry: Entry, category: Optional[Category] = None) -> bool:
    """True for artist-level music entries and show-level podcast entries."""
    category = category or lookup_category(entry.category)
    if category is None or category.aggregate_format is None or not entry.format:
        return False
    return entry.format.lower() == category.aggregate_format


@dataclass
class CategorySplit:
    """Entries of one category split into individual items and aggregates."""
    category: Category
    items: list[Entry] = field(default_factory=list)
    aggregates: list[Entry] = field(default_factory=list)


def split_aggregates(category: Category, entries: Iterable[Entry]) -> CategorySplit:
    split = CategorySplit(category=category)
    for entry in entries:
        if is_aggregate(entry, category):
            split.aggregates.append(entry)
        else:
            split.items.append(entry)
    return split


def classify(entries: Iterable[Entry]) -> dict[str, list[Entry]]:
    """Partition entries into the four buckets plus ``unclassified``.

    Input order is preserved inside every bucket.
    """
    buckets: dict[str, list[Entry]] = {c.bucket: [] for c in CATEGORIES}
    buckets[UNCLASSIFIED] = []

    for entry in entries:
        category = lookup_category(entry.category)
        if category is None:
            logger.debug(f"Unclassified entry {entry.id} (category={entry.category!r})")
            buckets[UNCLASSIFIED].append(entry)
        else:
            buckets[category.bucket].append(entry)

    if buckets[UNCLASSIFIED]:
        logger.warning(f"{len(buckets[UNCLASSIFIED])} entries have an unknown category")
    return buckets
