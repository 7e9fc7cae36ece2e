"""
pep_gateway.catalog.static

Process-wide, read-only in-memory catalog.

Responsibilities:
- Serve the reference document set without external storage.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pep_gateway.catalog.models import CatalogEntry, Category

SEED_DOCUMENTS: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="doc1",
        title="Bat mobile blue prints",
        category=Category.top_secret,
        owner="Lucius Fox",
    ),
    CatalogEntry(
        id="doc2",
        title="Friday bowling league",
        category=Category.internal,
        owner="Joe Bloggs",
    ),
    CatalogEntry(
        id="doc3",
        title="Press release: Gotham marathon",
        category=Category.public,
        owner="Jane Barton",
    ),
)


class StaticCatalog:
    def __init__(self, entries: Iterable[CatalogEntry] = SEED_DOCUMENTS) -> None:
        # Frozen view: concurrent requests share it without locking.
        self._entries: Mapping[str, CatalogEntry] = MappingProxyType({e.id: e for e in entries})

    async def lookup(self, resource_id: str) -> CatalogEntry | None:
        return self._entries.get(resource_id)

    async def ping(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._entries)
