"""Abstract interface for document store backends.

Defines the read-only contract the archive services consume. Firestore (REST)
is the hosted implementation; the SQL store serves self-hosted and local
deployments from a single JSON documents table.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


# ── Data Transfer Objects ────────────────────────────────────────

@dataclass
class StoredDocument:
    """A raw document as returned by the store."""
    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class EqualityFilter:
    """One ``field == value`` clause. Multiple filters are AND-ed."""
    field: str
    value: Any


@dataclass(frozen=True)
class StoreTimestamp:
    """Store-native timestamp wrapper (seconds + nanos since the epoch)."""
    seconds: int
    nanos: int = 0

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds + self.nanos / 1e9, tz=timezone.utc)

    @classmethod
    def from_iso(cls, value: str) -> "StoreTimestamp":
        """Parse an RFC 3339 timestamp such as ``2024-03-05T10:00:00.123456Z``."""
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat accepts at most microseconds
        head, sep, rest = text.partition(".")
        nanos = 0
        if sep:
            digits = ""
            for ch in rest:
                if not ch.isdigit():
                    break
                digits += ch
            tz_part = rest[len(digits):]
            nanos = int((digits + "000000000")[:9])
            text = head + tz_part
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls(seconds=int(dt.timestamp()), nanos=nanos)


# ── Abstract Interfaces ──────────────────────────────────────────

class IDocumentStore(ABC):
    """Interface for document store backends (Firestore, SQL)."""

    @abstractmethod
    async def get_all(self, collection: str) -> list[StoredDocument]:
        """Every document in a collection. No pagination at the call site."""
        ...

    @abstractmethod
    async def query(
        self, collection: str, filters: list[EqualityFilter],
    ) -> list[StoredDocument]:
        """Documents matching all equality filters."""
        ...

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        """A single document by id, or None if it does not exist."""
        ...

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if the store is reachable."""
        ...

    async def close(self) -> None:
        """Release pooled resources. Backends without any may ignore this."""
        return None
