"""
pep_gateway.auth.deps

FastAPI dependency functions for caller identity.

Responsibilities:
- Convert the forwarded-client-certificate header into a typed `Identity`.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_403_FORBIDDEN

from pep_gateway.api.deps import settings_dep
from pep_gateway.auth.models import Identity
from pep_gateway.auth.xfcc import IdentityError, extract_identity
from pep_gateway.observability.logging import get_logger
from pep_gateway.settings import Settings

log = get_logger(__name__)


def xfcc_header(request: Request, settings: Settings = Depends(settings_dep)) -> str | None:
    return request.headers.get(settings.xfcc_header)


def get_identity(header_value: str | None = Depends(xfcc_header)) -> Identity:
    try:
        return extract_identity(header_value)
    except IdentityError as e:
        log.warning("identity_rejected", error_kind=type(e).__name__, error=str(e))
        # Parsing detail is never returned to an unauthenticated caller.
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Forbidden") from e


# --- Module Notes -----------------------------------------------------------
# Resource routes do not use `get_identity`; they hand the raw header to the
# enforcement point so the whole request follows a single state machine.
