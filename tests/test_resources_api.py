"""
tests.test_resources_api

End-to-end enforcement through the HTTP surface (PDP replaced by a fake).
"""

from __future__ import annotations

import pytest
import structlog

from pep_gateway.api.routers.resources import wait_for_disconnect
from pep_gateway.authz.actions import Action
from pep_gateway.authz.query import AuthorizationQuery
from pep_gateway.settings import Settings
from tests.support import CALLER, XFCC, FakePdp, running_app

IDENTITY_HEADERS = {XFCC: f"URI={CALLER}"}


@pytest.mark.asyncio
async def test_allowed_public_document() -> None:
    async with running_app(pdp=FakePdp(True)) as client:
        r = await client.get("/resources/doc3", headers=IDENTITY_HEADERS)

    assert r.status_code == 200
    assert r.json() == {
        "id": "doc3",
        "title": "Press release: Gotham marathon",
        "category": "public",
        "owner": "Jane Barton",
    }


@pytest.mark.asyncio
async def test_denied_top_secret_document() -> None:
    pdp = FakePdp(False)
    async with running_app(pdp=pdp) as client:
        r = await client.get("/resources/doc1", headers=IDENTITY_HEADERS)

    assert r.status_code == 401
    body = r.json()
    assert "title" not in body
    assert "owner" not in body
    assert pdp.queries[0].resource.attributes["category"] == "top_secret"


@pytest.mark.asyncio
async def test_missing_identity_header() -> None:
    pdp = FakePdp(True)
    async with running_app(pdp=pdp) as client:
        r = await client.get("/resources/doc2")

    assert r.status_code == 403
    assert r.json() == {"detail": "Forbidden"}
    assert pdp.queries == []


@pytest.mark.asyncio
async def test_unknown_document() -> None:
    pdp = FakePdp(True)
    async with running_app(pdp=pdp) as client:
        r = await client.get("/resources/doc-unknown", headers=IDENTITY_HEADERS)

    assert r.status_code == 404
    assert pdp.queries == []


@pytest.mark.asyncio
async def test_pdp_timeout() -> None:
    settings = Settings(env="test", pdp_timeout_seconds=0.05)
    async with running_app(pdp=FakePdp(True, delay=5), settings=settings) as client:
        r = await client.get("/resources/doc2", headers=IDENTITY_HEADERS)

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
async def test_writes_are_checked_as_modify(method: str) -> None:
    pdp = FakePdp(False)
    async with running_app(pdp=pdp) as client:
        r = await client.request(method, "/resources/doc2", headers=IDENTITY_HEADERS, json={"x": 1})

    assert r.status_code == 401
    assert pdp.queries[0].action is Action.modify


@pytest.mark.asyncio
async def test_repeated_request_is_stable() -> None:
    async with running_app(pdp=FakePdp(True)) as client:
        first = await client.get("/resources/doc2", headers=IDENTITY_HEADERS)
        second = await client.get("/resources/doc2", headers=IDENTITY_HEADERS)

    assert (first.status_code, first.json()) == (second.status_code, second.json())


@pytest.mark.asyncio
async def test_request_id_is_echoed() -> None:
    async with running_app(pdp=FakePdp(True)) as client:
        r = await client.get(
            "/resources/doc3",
            headers={**IDENTITY_HEADERS, "x-request-id": "trace-123"},
        )
        generated = await client.get("/resources/doc3", headers=IDENTITY_HEADERS)

    assert r.headers["x-request-id"] == "trace-123"
    assert generated.headers["x-request-id"]


@pytest.mark.asyncio
async def test_custom_identity_header_name() -> None:
    settings = Settings(env="test", xfcc_header="x-client-identity")
    async with running_app(pdp=FakePdp(True), settings=settings) as client:
        ok = await client.get("/resources/doc3", headers={"x-client-identity": f"URI={CALLER}"})
        ignored = await client.get("/resources/doc3", headers=IDENTITY_HEADERS)

    assert ok.status_code == 200
    assert ignored.status_code == 403


@pytest.mark.asyncio
async def test_conceal_existence_over_http() -> None:
    settings = Settings(env="test", conceal_existence=True)
    async with running_app(pdp=FakePdp(False), settings=settings) as client:
        denied = await client.get("/resources/doc1", headers=IDENTITY_HEADERS)
        missing = await client.get("/resources/nope", headers=IDENTITY_HEADERS)

    assert denied.status_code == missing.status_code == 404
    assert denied.json() == missing.json()


@pytest.mark.asyncio
async def test_root_greets_identified_caller() -> None:
    async with running_app(pdp=FakePdp(True)) as client:
        r = await client.get("/", headers=IDENTITY_HEADERS)
        anonymous = await client.get("/")

    assert r.status_code == 200
    assert r.text == f"Hello {CALLER}. Nothing to see here. Move on.\n"
    assert anonymous.status_code == 403
    assert anonymous.json() == {"detail": "Forbidden"}


@pytest.mark.asyncio
@pytest.mark.parametrize(("decision", "status"), [(True, 200), (False, 401)])
async def test_slow_pdp_decision_is_served(decision: bool, status: int) -> None:
    pdp = FakePdp(decision, delay=0.05)
    settings = Settings(env="test", pdp_timeout_seconds=1.0)
    async with running_app(pdp=pdp, settings=settings) as client:
        r = await client.get("/resources/doc3", headers=IDENTITY_HEADERS)

    assert r.status_code == status
    assert len(pdp.queries) == 1
    assert not pdp.cancelled


@pytest.mark.asyncio
async def test_slow_pdp_decision_on_write_with_body() -> None:
    pdp = FakePdp(True, delay=0.05)
    async with running_app(pdp=pdp) as client:
        r = await client.put("/resources/doc2", headers=IDENTITY_HEADERS, content=b"x" * 4096)

    assert r.status_code == 200
    assert pdp.queries[0].action is Action.modify


class ContextCapturingPdp(FakePdp):
    def __init__(self) -> None:
        super().__init__(True)
        self.context: dict = {}

    async def is_allowed(self, query: AuthorizationQuery) -> bool:
        self.context = structlog.contextvars.get_contextvars()
        return await super().is_allowed(query)


@pytest.mark.asyncio
async def test_request_context_reaches_pdp_call() -> None:
    pdp = ContextCapturingPdp()
    async with running_app(pdp=pdp) as client:
        r = await client.get(
            "/resources/doc3",
            headers={**IDENTITY_HEADERS, "x-request-id": "trace-456"},
        )

    assert r.status_code == 200
    assert pdp.context["request_id"] == "trace-456"
    assert pdp.context["path"] == "/resources/doc3"
    assert pdp.context["method"] == "GET"
    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.asyncio
async def test_wait_for_disconnect_skips_body_messages() -> None:
    messages = [
        {"type": "http.request", "body": b"abc", "more_body": True},
        {"type": "http.request", "body": b"", "more_body": False},
        {"type": "http.disconnect"},
    ]
    seen = []

    async def receive() -> dict:
        message = messages.pop(0)
        seen.append(message["type"])
        return message

    await wait_for_disconnect(receive)

    assert seen == ["http.request", "http.request", "http.disconnect"]
    assert messages == []
