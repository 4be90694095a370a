"""Display selection rules shared by every listing."""

from typing import Iterable

from waytrack.models.archive import Entry

COMPLETED = "completed"
FAVORITE_RATING = 5.0


def is_completed(entry: Entry) -> bool:
    """Missing or empty status counts as completed."""
    return not entry.status or entry.status == COMPLETED


def completed_only(entries: Iterable[Entry]) -> list[Entry]:
    return [e for e in entries if is_completed(e)]


def is_favorite(entry: Entry) -> bool:
    return entry.rating is not None and entry.rating == FAVORITE_RATING


def favorites(entries: Iterable[Entry]) -> list[Entry]:
    """Entries rated exactly 5. Callers pass completed, non-aggregate entries."""
    return [e for e in entries if is_favorite(e)]
