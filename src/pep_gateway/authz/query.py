"""
pep_gateway.authz.query

Authorization query construction.

Responsibilities:
- Define the PDP query shape (principal, resource, action).
- Centralize the attributes sent to the PDP; this is the only place they are added.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pep_gateway.auth.models import Identity
from pep_gateway.authz.actions import Action
from pep_gateway.catalog.models import CatalogEntry

DEFAULT_PRINCIPAL_ROLES: tuple[str, ...] = ("api",)
DEFAULT_RESOURCE_KIND = "document"


@dataclass(frozen=True, slots=True)
class PrincipalDescriptor:
    id: str
    roles: tuple[str, ...]
    attributes: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    kind: str
    id: str
    attributes: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class AuthorizationQuery:
    """
    Fully determined by (identity, entry, action): equal inputs give equal queries.
    """

    principal: PrincipalDescriptor
    resource: ResourceDescriptor
    action: Action


def build_query(
    identity: Identity,
    entry: CatalogEntry,
    action: Action,
    *,
    principal_roles: tuple[str, ...] = DEFAULT_PRINCIPAL_ROLES,
    resource_kind: str = DEFAULT_RESOURCE_KIND,
) -> AuthorizationQuery:
    principal = PrincipalDescriptor(
        id=str(identity),
        roles=tuple(principal_roles),
        attributes=MappingProxyType(
            {
                "trustDomain": identity.trust_domain,
                "path": identity.path,
            }
        ),
    )
    resource = ResourceDescriptor(
        kind=resource_kind,
        id=entry.id,
        attributes=MappingProxyType(
            {
                "category": entry.category.value,
                "owner": entry.owner,
            }
        ),
    )
    return AuthorizationQuery(principal=principal, resource=resource, action=action)


# --- Module Notes -----------------------------------------------------------
# Policies depend on these attribute names (`trustDomain`, `category`); renaming
# one is a breaking change for every deployed policy.
