"""
pep_gateway.api.app

FastAPI app factory for the gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Open and close shared collaborators (catalog backend, PDP HTTP client).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI

from pep_gateway import __version__
from pep_gateway.api.routers.health import router as health_router
from pep_gateway.api.routers.resources import router as resources_router
from pep_gateway.api.routers.root import router as root_router
from pep_gateway.authz.pep import PolicyEnforcementPoint
from pep_gateway.catalog.models import Catalog
from pep_gateway.catalog.sql import SqlCatalog
from pep_gateway.catalog.static import StaticCatalog
from pep_gateway.db.init_db import init_db, seed_documents
from pep_gateway.db.session import create_engine, create_sessionmaker
from pep_gateway.observability.logging import configure_logging, get_logger
from pep_gateway.observability.middleware import RequestContextMiddleware
from pep_gateway.pdp_clients.base import PolicyDecisionPoint
from pep_gateway.pdp_clients.cerbos_http import CerbosHttpClient, build_http_client
from pep_gateway.settings import Settings

log = get_logger(__name__)


async def _open_catalog(settings: Settings, stack: AsyncExitStack) -> Catalog:
    if settings.catalog_backend == "static":
        return StaticCatalog()

    engine = create_engine(settings)
    stack.push_async_callback(engine.dispose)
    sessionmaker = create_sessionmaker(engine)
    if settings.env in ("dev", "test"):
        # Dev/test convenience: create and seed the documents table.
        await init_db(engine)
        seeded = await seed_documents(sessionmaker)
        log.info("catalog_seeded", documents=seeded)
    return SqlCatalog(sessionmaker)


def create_app(
    *,
    settings: Settings,
    catalog: Catalog | None = None,
    pdp: PolicyDecisionPoint | None = None,
) -> FastAPI:
    """
    `catalog` and `pdp` override the collaborators built from settings (tests, embedding).
    """

    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            resolved_catalog = catalog
            if resolved_catalog is None:
                resolved_catalog = await _open_catalog(settings, stack)
            resolved_pdp = pdp
            if resolved_pdp is None:
                http = await stack.enter_async_context(build_http_client(settings))
                resolved_pdp = CerbosHttpClient(http=http)

            app.state.catalog = resolved_catalog
            app.state.pep = PolicyEnforcementPoint.from_settings(
                settings,
                catalog=resolved_catalog,
                pdp=resolved_pdp,
            )
            log.info(
                "startup",
                env=settings.env,
                catalog_backend=settings.catalog_backend if catalog is None else "injected",
                pdp_url=settings.pdp_url if pdp is None else "injected",
            )
            yield
            log.info("shutdown")

    app = FastAPI(
        title="SPIFFE Policy Enforcement Gateway",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(root_router)
    app.include_router(resources_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Collaborators live on app.state for the process lifetime; requests share them
# read-only, so no locking is needed.
