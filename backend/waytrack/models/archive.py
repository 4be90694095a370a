"""Archive domain objects — normalized users, entries and the category table."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class User:
    """A user document in canonical shape."""
    id: str
    username: str = ""
    full_name: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.name or self.username


@dataclass
class Entry:
    """A single archived item (or artist/show aggregate) in canonical shape."""
    id: str
    user_id: Optional[str] = None
    category: Optional[str] = None         # As stored: "book", "Books", "music", ...
    format: Optional[str] = None           # "artist" | "show" | item kinds | None
    title: Optional[str] = None
    creator: Optional[str] = None
    thumbnail_url: Optional[str] = None
    rating: Optional[float] = None         # Coerced; None when missing or not numeric
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def sort_date(self) -> datetime:
        """updatedAt, else createdAt, else the epoch (undated entries sort last)."""
        return self.updated_at or self.created_at or EPOCH


@dataclass(frozen=True)
class Category:
    """One of the four fixed archive categories."""
    key: str                        # Stored singular key
    bucket: str                     # Plural bucket / URL name
    label: str                      # UI name
    heading_verb: str               # "Listened in Mar '24"
    gradient: str
    aggregate_format: Optional[str] = None
    aggregate_label: Optional[str] = None


CATEGORIES: tuple[Category, ...] = (
    Category(
        key="tv", bucket="tv", label="TV", heading_verb="Watched in",
        gradient="linear-gradient(to bottom right, rgba(20, 102, 122, 1), rgba(15, 71, 92, 1), rgba(10, 43, 61, 1))",
    ),
    Category(
        key="music", bucket="music", label="Music", heading_verb="Listened in",
        gradient="linear-gradient(to bottom right, rgba(255, 89, 102, 1), rgba(217, 64, 77, 1), rgba(179, 38, 51, 1))",
        aggregate_format="artist", aggregate_label="Artists",
    ),
    Category(
        key="podcast", bucket="podcasts", label="Podcasts", heading_verb="Heard in",
        gradient="linear-gradient(to bottom right, rgba(204, 115, 242, 1), rgba(166, 77, 204, 1), rgba(128, 38, 166, 1))",
        aggregate_format="show", aggregate_label="Shows",
    ),
    Category(
        key="book", bucket="books", label="Books", heading_verb="Read in",
        gradient="linear-gradient(to bottom right, rgba(209, 166, 115, 1), rgba(184, 133, 89, 1), rgba(158, 107, 64, 1))",
    ),
)

DEFAULT_HEADING_VERB = "Added in"
DEFAULT_GRADIENT = "linear-gradient(to bottom right, #333, #222, #111)"
UNCLASSIFIED = "unclassified"
