"""
pep_gateway.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with catalog connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pep_gateway.api.deps import catalog_dep
from pep_gateway.catalog.models import Catalog

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(catalog: Catalog = Depends(catalog_dep)) -> dict[str, str]:
    await catalog.ping()
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Probes carry no identity requirement; the proxy routes them from the kubelet.
