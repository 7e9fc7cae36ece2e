"""
tests.support

Shared fakes and helpers for the gateway tests.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from pep_gateway.api.app import create_app
from pep_gateway.authz.query import AuthorizationQuery
from pep_gateway.catalog.models import Catalog
from pep_gateway.settings import Settings

XFCC = "x-forwarded-client-cert"
CALLER = "spiffe://example.org/api"


class FakePdp:
    """
    Records every query; answers with a fixed decision or raises a fixed error.
    """

    def __init__(self, decision: bool | Exception = True, *, delay: float = 0.0) -> None:
        self.decision = decision
        self.delay = delay
        self.queries: list[AuthorizationQuery] = []
        self.cancelled = False

    async def is_allowed(self, query: AuthorizationQuery) -> bool:
        self.queries.append(query)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if isinstance(self.decision, Exception):
            raise self.decision
        return self.decision


@asynccontextmanager
async def running_app(
    *,
    pdp: FakePdp,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings or Settings(env="test"), catalog=catalog, pdp=pdp)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
