"""
pep_gateway.catalog.sql

SQL-backed catalog (SQLAlchemy async).

Responsibilities:
- Resolve catalog entries from the `documents` table.
- Provide a readiness check for the backing database.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pep_gateway.catalog.models import CatalogEntry
from pep_gateway.db.models import Document


class SqlCatalog:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def lookup(self, resource_id: str) -> CatalogEntry | None:
        # One short-lived session per lookup; nothing is shared across requests.
        async with self._session_factory() as session:
            row = await session.get(Document, resource_id)
            return row.to_entry() if row is not None else None

    async def ping(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))
