"""
pep_gateway.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
- Seed the reference document set when the table is empty.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pep_gateway.catalog.models import CatalogEntry
from pep_gateway.catalog.static import SEED_DOCUMENTS
from pep_gateway.db.base import Base
from pep_gateway.db.models import Document


async def init_db(engine: AsyncEngine) -> None:
    """
    Dev/test bootstrap: create tables if they don't exist.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_documents(
    session_factory: async_sessionmaker[AsyncSession],
    entries: Iterable[CatalogEntry] = SEED_DOCUMENTS,
) -> int:
    async with session_factory() as session:
        existing = (await session.execute(select(func.count()).select_from(Document))).scalar_one()
        if existing:
            return 0
        rows = [Document.from_entry(e) for e in entries]
        session.add_all(rows)
        await session.commit()
        return len(rows)
