"""Entry normalizer — raw store documents to canonical User / Entry objects.

Timestamps arrive in several shapes depending on which writer produced the
document and which backend serves it:
- native ``datetime`` / ``date``
- a store wrapper exposing ``to_datetime()`` (also ``ToDatetime()``, ``to_date()``)
- a ``{"seconds": ..., "nanoseconds": ...}`` mapping (JSON exports)
- an ISO-8601 string
- epoch milliseconds
Anything else is treated as "no date".
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from waytrack.clients.base import StoredDocument
from waytrack.models.archive import User, Entry

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Entry"
UNKNOWN_CREATOR = "Unknown Creator"

_WRAPPER_METHODS = ("to_datetime", "ToDatetime", "to_date", "toDate")


def to_datetime(value: Any) -> Optional[datetime]:
    """Resolve any supported timestamp representation to an aware datetime."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    for method in _WRAPPER_METHODS:
        fn = getattr(value, method, None)
        if callable(fn):
            try:
                return to_datetime(fn())
            except (OverflowError, OSError, ValueError):
                return None

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            try:
                return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
            except (OverflowError, OSError, TypeError, ValueError):
                # out of range for datetime, or a non-numeric nanoseconds field
                return None
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_datetime(datetime.fromisoformat(text))
        except ValueError:
            logger.debug(f"Unparseable timestamp {value!r}")
            return None

    return None


def coerce_rating(value: Any) -> Optional[float]:
    """Numeric or numeric-string rating → float. Anything else → None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            rating = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            rating = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return rating if math.isfinite(rating) else None


def format_rating(rating: Optional[float]) -> Optional[str]:
    """One decimal place: 4.5 → "4.5", 4 → "4.0". None omits the badge."""
    if rating is None:
        return None
    return f"{rating:.1f}"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_user(doc: StoredDocument) -> User:
    data = doc.data
    return User(
        id=doc.id,
        username=_text(data.get("username")) or "",
        full_name=_text(data.get("fullName")),
        name=_text(data.get("name")),
        avatar_url=_text(
            data.get("avatarUrl") or data.get("photoURL") or data.get("profileImageUrl")
        ),
    )


def normalize_entry(doc: StoredDocument) -> Entry:
    data = doc.data
    status = data.get("status")
    return Entry(
        id=doc.id,
        user_id=_text(data.get("userId")),
        category=_text(data.get("category")),
        format=_text(data.get("format")),
        title=_text(data.get("title")),
        creator=_text(data.get("creator")),
        thumbnail_url=_text(data.get("thumbnailUrl")),
        rating=coerce_rating(data.get("rating")),
        status=None if status is None else str(status),
        created_at=to_datetime(data.get("createdAt")),
        updated_at=to_datetime(data.get("updatedAt")),
    )


def sort_newest_first(entries: Iterable[Entry]) -> list[Entry]:
    """Stable sort by ``sort_date`` descending; undated entries end up last."""
    return sorted(entries, key=lambda e: e.sort_date, reverse=True)


def entry_payload(entry: Entry) -> dict:
    """Display shape of an entry with defaults filled in."""
    return {
        "id": entry.id,
        "title": entry.title or UNTITLED,
        "creator": entry.creator or UNKNOWN_CREATOR,
        "thumbnail_url": entry.thumbnail_url,
        "rating": format_rating(entry.rating),
        "format": entry.format,
        "category": entry.category,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
        "updated_at": entry.updated_at.isoformat() if entry.updated_at else None,
    }


def user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "name": user.name,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
    }
