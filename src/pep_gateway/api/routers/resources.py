"""
pep_gateway.api.routers.resources

Protected resource endpoints.

Responsibilities:
- Route every verb on `/resources/{id}` through the enforcement point.
- Abort the PDP call when the ASGI server reports a client disconnect.
- Render the enforcement outcome as JSON.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.types import Receive

from pep_gateway.api.deps import pep_dep
from pep_gateway.auth.deps import xfcc_header
from pep_gateway.authz.pep import PolicyEnforcementPoint

router = APIRouter(prefix="/resources", tags=["resources"])

# GET maps to `read`; all other routed verbs map to `modify`.
RESOURCE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def wait_for_disconnect(receive: Receive) -> None:
    """
    Return once `receive` yields `http.disconnect`.

    Body chunks are drained and dropped; resource handlers never read the body.
    """

    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            return


@router.api_route("/{resource_id}", methods=RESOURCE_METHODS)
async def resource(
    request: Request,
    resource_id: str,
    header_value: str | None = Depends(xfcc_header),
    pep: PolicyEnforcementPoint = Depends(pep_dep),
) -> JSONResponse:
    # Request bodies are not read; the decision depends only on caller, resource and verb.
    outcome = await pep.enforce(
        xfcc=header_value,
        resource_id=resource_id,
        method=request.method,
        until_disconnected=lambda: wait_for_disconnect(request.receive),
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
