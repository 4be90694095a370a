"""Firestore client — IDocumentStore implementation over the REST API v1.

Handles: paginated collection listing, structured equality queries,
single-document reads, and decoding of Firestore typed values.
"""

import logging
import httpx
from typing import Any, Optional

from waytrack.clients.base import (
    IDocumentStore, StoredDocument, EqualityFilter, StoreTimestamp,
)
from waytrack.exceptions import StoreError

logger = logging.getLogger(__name__)


class FirestoreClient(IDocumentStore):
    """Firestore implementation of IDocumentStore."""

    BASE_URL = "https://firestore.googleapis.com/v1"

    def __init__(
        self,
        project_id: str,
        api_key: Optional[str] = None,
        database: str = "(default)",
        page_size: int = 300,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_id = project_id
        self.api_key = api_key
        self.database = database
        self.page_size = page_size
        self._transport = transport
        self._root = f"{self.BASE_URL}/projects/{project_id}/databases/{database}/documents"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=15.0, transport=self._transport)

    def _params(self, extra: dict | None = None) -> dict:
        params = dict(extra or {})
        if self.api_key:
            params["key"] = self.api_key
        return params

    # ── IDocumentStore implementation ────────────────────────────

    async def get_all(self, collection: str) -> list[StoredDocument]:
        """List a whole collection, following ``nextPageToken`` until exhausted."""
        docs: list[StoredDocument] = []
        page_token: Optional[str] = None

        try:
            async with self._client() as client:
                while True:
                    params = {"pageSize": self.page_size}
                    if page_token:
                        params["pageToken"] = page_token
                    resp = await client.get(f"{self._root}/{collection}", params=self._params(params))
                    resp.raise_for_status()
                    data = resp.json()

                    docs.extend(self._parse_document(d) for d in data.get("documents", []))

                    page_token = data.get("nextPageToken")
                    if not page_token:
                        break
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Listing {collection} failed: {e}", collection) from e

        logger.debug(f"Fetched {len(docs)} documents from {collection}")
        return docs

    async def query(
        self, collection: str, filters: list[EqualityFilter],
    ) -> list[StoredDocument]:
        """Run a structured query with AND-ed EQUAL field filters."""
        structured: dict[str, Any] = {"from": [{"collectionId": collection}]}
        where = self._build_where(filters)
        if where:
            structured["where"] = where

        try:
            async with self._client() as client:
                resp = await client.post(
                    f"{self._root}:runQuery",
                    params=self._params(),
                    json={"structuredQuery": structured},
                )
                resp.raise_for_status()
                rows = resp.json()
            # runQuery streams rows; rows without "document" only carry readTime
            return [self._parse_document(r["document"]) for r in rows if r.get("document")]
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Query on {collection} failed: {e}", collection) from e

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        try:
            async with self._client() as client:
                resp = await client.get(f"{self._root}/{collection}/{doc_id}", params=self._params())
                if resp.status_code == 404:
                    return None
                resp.raise_for_status()
                return self._parse_document(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Reading {collection}/{doc_id} failed: {e}", collection) from e

    async def test_connection(self) -> bool:
        try:
            async with self._client() as client:
                resp = await client.post(
                    f"{self._root}:listCollectionIds",
                    params=self._params(),
                    json={"pageSize": 1},
                )
                return resp.status_code < 400
        except httpx.HTTPError:
            return False

    # ── Encoding helpers ─────────────────────────────────────────

    def _build_where(self, filters: list[EqualityFilter]) -> Optional[dict]:
        clauses = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": f.field},
                    "op": "EQUAL",
                    "value": encode_value(f.value),
                }
            }
            for f in filters
        ]
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return {"compositeFilter": {"op": "AND", "filters": clauses}}

    def _parse_document(self, raw: dict) -> StoredDocument:
        """Convert a Firestore document resource into a StoredDocument.

        The id is the last segment of ``name``
        (``projects/p/databases/(default)/documents/users_v3/<id>``).
        """
        doc_id = raw.get("name", "").rsplit("/", 1)[-1]
        fields = raw.get("fields", {})
        return StoredDocument(
            id=doc_id,
            data={k: decode_value(v) for k, v in fields.items()},
        )


def encode_value(value: Any) -> dict:
    """Python value → Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, StoreTimestamp):
        return {"timestampValue": value.to_datetime().isoformat().replace("+00:00", "Z")}
    return {"stringValue": str(value)}


def decode_value(value: dict) -> Any:
    """Firestore typed value → Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return StoreTimestamp.from_iso(value["timestampValue"])
    if "mapValue" in value:
        fields = value["mapValue"].get("fields", {})
        return {k: decode_value(v) for k, v in fields.items()}
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    if "bytesValue" in value:
        return value["bytesValue"]
    return None
