"""SQL document store — IDocumentStore implementation over SQLAlchemy.

Keeps every collection in the single ``documents`` table with the payload in
a JSON column. String equality filters are pushed into SQL through JSON path
extraction; any other filter value is compared after loading.
"""

import logging
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from waytrack.clients.base import IDocumentStore, StoredDocument, EqualityFilter
from waytrack.database import build_sessionmaker
from waytrack.exceptions import StoreError
from waytrack.models.tables import Document

logger = logging.getLogger(__name__)


class SqlDocumentStore(IDocumentStore):
    """SQLAlchemy implementation of IDocumentStore."""

    def __init__(
        self,
        engine: AsyncEngine,
        sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.engine = engine
        self._session = sessionmaker or build_sessionmaker(engine)

    async def get_all(self, collection: str) -> list[StoredDocument]:
        stmt = select(Document).where(Document.collection == collection).order_by(Document.id)
        return await self._fetch(stmt, collection)

    async def query(
        self, collection: str, filters: list[EqualityFilter],
    ) -> list[StoredDocument]:
        stmt = select(Document).where(Document.collection == collection)
        residual: list[EqualityFilter] = []
        for f in filters:
            if isinstance(f.value, str):
                stmt = stmt.where(Document.data[f.field].as_string() == f.value)
            else:
                residual.append(f)

        docs = await self._fetch(stmt.order_by(Document.id), collection)
        if residual:
            docs = [
                d for d in docs
                if all(f.field in d.data and d.data[f.field] == f.value for f in residual)
            ]
        return docs

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        stmt = select(Document).where(
            Document.collection == collection,
            Document.doc_id == doc_id,
        )
        docs = await self._fetch(stmt, collection)
        return docs[0] if docs else None

    async def test_connection(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError):
            return False

    async def close(self) -> None:
        await self.engine.dispose()

    async def _fetch(self, stmt, collection: str) -> list[StoredDocument]:
        try:
            async with self._session() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Reading {collection} failed: {e}", collection) from e
        return [StoredDocument(id=r.doc_id, data=dict(r.data or {})) for r in rows]
