"""
pep_gateway.db.models

Persistence schema for catalog documents.
"""

from __future__ import annotations

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from pep_gateway.catalog.models import CatalogEntry, Category
from pep_gateway.db.base import Base


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    category: Mapped[Category] = mapped_column(
        Enum(Category, name="document_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    owner: Mapped[str] = mapped_column(String(256), nullable=False)

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(id=self.id, title=self.title, category=self.category, owner=self.owner)

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> Document:
        return cls(id=entry.id, title=entry.title, category=entry.category, owner=entry.owner)


# --- Module Notes -----------------------------------------------------------
# Category values are persisted as their lowercase strings so rows stay readable
# and match the attribute values sent to the PDP.
