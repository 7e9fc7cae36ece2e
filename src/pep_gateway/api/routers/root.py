"""
pep_gateway.api.routers.root

Caller greeting endpoint.

Responsibilities:
- Require a valid workload identity on `/` (403 otherwise).
- Greet the caller by SPIFFE ID as plain text.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from pep_gateway.auth.deps import get_identity
from pep_gateway.auth.models import Identity

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def hello(identity: Identity = Depends(get_identity)) -> str:
    return f"Hello {identity}. Nothing to see here. Move on.\n"
