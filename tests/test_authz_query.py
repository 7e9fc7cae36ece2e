"""
tests.test_authz_query

Action mapping and authorization query construction.
"""

from __future__ import annotations

import pytest

from pep_gateway.auth.models import Identity
from pep_gateway.authz.actions import Action, map_action
from pep_gateway.authz.query import build_query
from pep_gateway.catalog.static import SEED_DOCUMENTS

IDENTITY = Identity(trust_domain="example.org", path="/api")
DOC1 = SEED_DOCUMENTS[0]


def test_get_maps_to_read() -> None:
    assert map_action("GET") is Action.read


@pytest.mark.parametrize(
    "method",
    ["POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "get", "", "BREW", "PROPFIND"],
)
def test_everything_else_maps_to_modify(method: str) -> None:
    assert map_action(method) is Action.modify


def test_query_shape() -> None:
    query = build_query(IDENTITY, DOC1, Action.read)

    assert query.principal.id == "spiffe://example.org/api"
    assert query.principal.roles == ("api",)
    assert query.principal.attributes["trustDomain"] == "example.org"
    assert query.resource.kind == "document"
    assert query.resource.id == "doc1"
    assert query.resource.attributes["category"] == "top_secret"
    assert query.action is Action.read


def test_query_carries_all_contextual_attributes() -> None:
    query = build_query(IDENTITY, DOC1, Action.modify)

    assert dict(query.principal.attributes) == {"trustDomain": "example.org", "path": "/api"}
    assert dict(query.resource.attributes) == {"category": "top_secret", "owner": "Lucius Fox"}


def test_identical_inputs_build_identical_queries() -> None:
    first = build_query(IDENTITY, DOC1, Action.read)
    second = build_query(Identity(trust_domain="example.org", path="/api"), DOC1, Action.read)

    assert first == second


def test_different_action_builds_different_query() -> None:
    assert build_query(IDENTITY, DOC1, Action.read) != build_query(IDENTITY, DOC1, Action.modify)


def test_query_attributes_are_read_only() -> None:
    query = build_query(IDENTITY, DOC1, Action.read)

    with pytest.raises(TypeError):
        query.principal.attributes["trustDomain"] = "evil.org"  # type: ignore[index]


def test_custom_roles_and_kind() -> None:
    query = build_query(
        IDENTITY,
        DOC1,
        Action.read,
        principal_roles=("api", "batch"),
        resource_kind="report",
    )

    assert query.principal.roles == ("api", "batch")
    assert query.resource.kind == "report"
