"""Probe the configured document store on startup and report status."""

import logging
from typing import Optional

from waytrack.clients.base import IDocumentStore
from waytrack.config import Settings

logger = logging.getLogger(__name__)


async def probe_all(settings: Settings, store: Optional[IDocumentStore]) -> dict:
    """Check reachability of the document store backend. Returns status dict."""
    results = {}

    if settings.uses_sql_store:
        results["sql"] = await _probe(store)
        results["firestore"] = {"status": "not_configured"}
    elif settings.has_firestore:
        results["firestore"] = await _probe(store)
    else:
        results["firestore"] = {"status": "not_configured"}

    return results


async def _probe(store: Optional[IDocumentStore]) -> dict:
    """Probe a single backend."""
    if store is None:
        return {"status": "not_configured"}
    ok = await store.test_connection()
    if not ok:
        logger.warning(f"Document store {type(store).__name__} is unreachable")
    return {"status": "ok" if ok else "unreachable"}
