"""
pep_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="PEP_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "pep-gateway"
    log_level: str = "INFO"
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    # uvicorn stops accepting, drains, then force-closes after this many seconds.
    shutdown_grace_seconds: int = Field(default=10, ge=0)

    # Identity (injected by the mTLS-terminating proxy)
    xfcc_header: str = "x-forwarded-client-cert"

    # Policy decision point (Cerbos HTTP API)
    pdp_url: str = "http://cerbos.cerbos.svc.cluster.local:3592"
    pdp_timeout_seconds: float = Field(default=2.0, gt=0)
    principal_roles: tuple[str, ...] = ("api",)
    resource_kind: str = "document"

    # Enforcement
    conceal_existence: bool = False

    # Catalog
    catalog_backend: Literal["static", "sql"] = "static"
    database_url: str = "sqlite+aiosqlite:///./catalog.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `principal_roles` accepts a JSON list from the environment, e.g.
# PEP_PRINCIPAL_ROLES='["api", "batch"]'.
