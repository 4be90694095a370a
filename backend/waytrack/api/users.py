"""User directory, profile and category archive endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from waytrack.api.deps import get_archive_service
from waytrack.config import settings
from waytrack.services.archive import ArchiveService, BucketSummary
from waytrack.services.normalizer import entry_payload, user_payload

router = APIRouter()


@router.get("/users")
async def list_users(
    q: Optional[str] = Query(None, max_length=100),
    archive: ArchiveService = Depends(get_archive_service),
):
    """User directory. Without ``q`` lists everyone; a blank ``q`` matches no one."""
    users = await archive.directory(q)
    return {
        "users": [user_payload(u) for u in users],
        "meta": {"query": q, "count": len(users)},
    }


@router.get("/users/{username}")
async def get_user_profile(
    username: str,
    user_id: Optional[str] = Query(None, description="Pre-resolved user id; skips the username scan"),
    archive: ArchiveService = Depends(get_archive_service),
):
    """Profile with one widget per category."""
    view = await archive.profile(username, user_id=user_id)
    if view is None:
        raise HTTPException(404, "User not found")

    return {
        "user": user_payload(view.user),
        "categories": [_bucket_payload(b) for b in view.buckets],
        "unclassified": [entry_payload(e) for e in view.unclassified],
        "meta": {
            "total_entries": view.total,
            "app_store_url": settings.app_store_url,
        },
    }


@router.get("/users/{username}/{category}")
async def get_user_category(
    username: str,
    category: str,
    user_id: Optional[str] = Query(None, description="Pre-resolved user id; skips the username scan"),
    tz: Optional[str] = Query(None, description="Viewer IANA time zone for month grouping"),
    archive: ArchiveService = Depends(get_archive_service),
):
    """One category: month sections, favorites rail and artist/show rail."""
    view = await archive.category_view(username, category, user_id=user_id, tz=tz)
    if view is None:
        raise HTTPException(404, "User not found")

    cat = view.category
    return {
        "user": user_payload(view.user),
        "category": {"key": cat.key, "name": cat.bucket, "label": cat.label},
        "theme": {"background": cat.gradient},
        "sections": [
            {
                "label": s.label,
                "heading": f"{cat.heading_verb} {s.label}" if s.is_dated else s.label,
                "entries": [entry_payload(e) for e in s.entries],
            }
            for s in view.sections
        ],
        "favorites": [entry_payload(e) for e in view.favorites] or None,
        "aggregates": _rail(cat.aggregate_label, view.aggregates),
        "meta": {"count": view.count},
    }


def _rail(label: Optional[str], entries: list) -> Optional[dict]:
    if not label or not entries:
        return None
    return {"label": label, "entries": [entry_payload(e) for e in entries]}


def _bucket_payload(bucket: BucketSummary) -> dict:
    cat = bucket.category
    return {
        "key": cat.key,
        "name": cat.bucket,
        "label": cat.label,
        "count": bucket.count,
        "entries": [entry_payload(e) for e in bucket.preview],
        "favorites": [entry_payload(e) for e in bucket.favorites] or None,
        "aggregates": _rail(cat.aggregate_label, bucket.aggregates),
        "theme": {"background": cat.gradient},
    }
