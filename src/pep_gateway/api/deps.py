"""
pep_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access patterns (settings, catalog, enforcement point).
"""

from __future__ import annotations

from fastapi import Request

from pep_gateway.authz.pep import PolicyEnforcementPoint
from pep_gateway.catalog.models import Catalog
from pep_gateway.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Set by `create_app`, so tests can inject their own settings object.
    return request.app.state.settings  # type: ignore[no-any-return]


def catalog_dep(request: Request) -> Catalog:
    # Created in the app lifespan (see `pep_gateway.api.app.create_app`).
    return request.app.state.catalog  # type: ignore[no-any-return]


def pep_dep(request: Request) -> PolicyEnforcementPoint:
    return request.app.state.pep  # type: ignore[no-any-return]
