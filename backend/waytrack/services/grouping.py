"""Chronological grouper — buckets entries by calendar month of ``created_at``."""

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from waytrack.models.archive import Entry

UNKNOWN_DATE = "Unknown Date"


@dataclass
class MonthGroup:
    """Entries created in one calendar month, in the viewer's time zone."""
    label: str                              # "Mar '24" | "Unknown Date"
    year: Optional[int] = None
    month: Optional[int] = None
    entries: list[Entry] = field(default_factory=list)

    @property
    def is_dated(self) -> bool:
        return self.year is not None


def viewer_timezone(name: Optional[str]) -> tzinfo:
    """IANA zone name → tzinfo. Empty, "UTC" or unknown names fall back to UTC."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def group_by_month(entries: Iterable[Entry], tz: Optional[tzinfo] = None) -> list[MonthGroup]:
    """Group pre-sorted entries into month buckets, newest month first.

    Order inside a bucket is the input order. Undated entries form a final
    "Unknown Date" group.
    """
    tz = tz or timezone.utc
    groups: dict[tuple[int, int], MonthGroup] = {}
    undated = MonthGroup(label=UNKNOWN_DATE)

    for entry in entries:
        if entry.created_at is None:
            undated.entries.append(entry)
            continue

        local = entry.created_at.astimezone(tz)
        key = (local.year, local.month)
        group = groups.get(key)
        if group is None:
            group = MonthGroup(
                label=local.strftime("%b '%y"),
                year=local.year,
                month=local.month,
            )
            groups[key] = group
        group.entries.append(entry)

    ordered = [groups[k] for k in sorted(groups, reverse=True)]
    if undated.entries:
        ordered.append(undated)
    return ordered
