"""
pep_gateway.catalog.models

Catalog domain model.

Responsibilities:
- Define the protected resource (`CatalogEntry`) and its sensitivity `Category`.
- Define the `Catalog` lookup interface.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol


class Category(enum.StrEnum):
    # Values are sent to the PDP as the `category` attribute; treat as stable API contract.
    public = "public"
    internal = "internal"
    top_secret = "top_secret"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    id: str
    title: str
    category: Category
    owner: str

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "owner": self.owner,
        }


class Catalog(Protocol):
    async def lookup(self, resource_id: str) -> CatalogEntry | None: ...

    async def ping(self) -> None: ...
