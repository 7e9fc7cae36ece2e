"""
pep_gateway.pdp_clients.cerbos_http

Cerbos HTTP API client.

Responsibilities:
- Translate an `AuthorizationQuery` into a Cerbos `CheckResources` request.
- Validate the response strictly; anything unexpected is a `PolicyError`.
- Map transport failures onto `PolicyError` kinds (no retries).
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pep_gateway.authz.query import AuthorizationQuery
from pep_gateway.pdp_clients.base import PolicyError, PolicyErrorKind
from pep_gateway.settings import Settings

CHECK_RESOURCES_PATH = "/api/check/resources"

EFFECT_ALLOW = "EFFECT_ALLOW"
EFFECT_DENY = "EFFECT_DENY"


class _ResourceRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    kind: str | None = None


class _ResultEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resource: _ResourceRef
    actions: dict[str, str]


class CheckResourcesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_id: str | None = Field(default=None, alias="requestId")
    results: list[_ResultEntry] = Field(min_length=1)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    # One pooled client per process; the timeout bounds connect/read/write/pool each.
    return httpx.AsyncClient(
        base_url=settings.pdp_url,
        timeout=httpx.Timeout(settings.pdp_timeout_seconds),
    )


def check_resources_payload(query: AuthorizationQuery, *, request_id: str) -> dict[str, Any]:
    return {
        "requestId": request_id,
        "principal": {
            "id": query.principal.id,
            "roles": list(query.principal.roles),
            "attr": dict(query.principal.attributes),
        },
        "resources": [
            {
                "actions": [query.action.value],
                "resource": {
                    "kind": query.resource.kind,
                    "id": query.resource.id,
                    "attr": dict(query.resource.attributes),
                },
            }
        ],
    }


class CerbosHttpClient:
    """
    Boundary to the Cerbos PDP. Returns True/False or raises `PolicyError`.
    """

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def is_allowed(self, query: AuthorizationQuery) -> bool:
        # Reuse the gateway request id so PDP audit logs correlate with ours.
        request_id = structlog.contextvars.get_contextvars().get("request_id") or str(uuid.uuid4())
        payload = check_resources_payload(query, request_id=request_id)

        try:
            r = await self._http.post(CHECK_RESOURCES_PATH, json=payload)
            r.raise_for_status()
            body = r.json()
        except httpx.TimeoutException as e:
            raise PolicyError(PolicyErrorKind.timeout, f"PDP request timed out: {e!r}") from e
        except httpx.HTTPStatusError as e:
            raise PolicyError(
                PolicyErrorKind.unreachable,
                f"PDP answered HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise PolicyError(PolicyErrorKind.unreachable, f"PDP request failed: {e!r}") from e
        except ValueError as e:
            raise PolicyError(PolicyErrorKind.malformed, "PDP response is not JSON") from e

        return _effect_for(body, query)


def _effect_for(body: Any, query: AuthorizationQuery) -> bool:
    try:
        parsed = CheckResourcesResponse.model_validate(body)
    except ValidationError as e:
        raise PolicyError(PolicyErrorKind.malformed, f"unexpected PDP response: {e}") from e

    action = query.action.value
    for result in parsed.results:
        if result.resource.id != query.resource.id:
            continue
        effect = result.actions.get(action)
        if effect == EFFECT_ALLOW:
            return True
        if effect == EFFECT_DENY:
            return False
        raise PolicyError(
            PolicyErrorKind.malformed,
            f"PDP returned effect {effect!r} for action {action!r}",
        )

    raise PolicyError(
        PolicyErrorKind.malformed,
        f"PDP response has no result for resource {query.resource.id!r}",
    )


# --- Module Notes -----------------------------------------------------------
# Cerbos also exposes gRPC (port 3593); the HTTP API keeps the stack on httpx.
