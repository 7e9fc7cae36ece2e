"""
pep_gateway.pdp_clients.base

PDP client boundary.

Responsibilities:
- Define the interface the enforcement point calls (`PolicyDecisionPoint`).
- Define the single error class for "no decision was obtained" (`PolicyError`).
"""

from __future__ import annotations

import enum
from typing import Protocol

from pep_gateway.authz.query import AuthorizationQuery


class PolicyErrorKind(enum.StrEnum):
    unreachable = "unreachable"
    timeout = "timeout"
    malformed = "malformed"
    cancelled = "cancelled"
    disconnect_check_failed = "disconnect_check_failed"


class PolicyError(Exception):
    """
    The PDP produced no usable decision. Never an implicit allow or deny.
    """

    def __init__(self, kind: PolicyErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class PolicyDecisionPoint(Protocol):
    async def is_allowed(self, query: AuthorizationQuery) -> bool:
        """Return the PDP decision or raise `PolicyError`."""
        ...
