"""Health and system status endpoints."""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

from waytrack.config import settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Service health check — reports document store status."""
    integrations = getattr(request.app.state, "integrations", {})
    return {
        "status": "ok",
        "version": "0.1.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "document_store": settings.document_store,
        "integrations": integrations,
    }
