"""
pep_gateway.authz.pep

Policy enforcement point.

Responsibilities:
- Drive one request through identity -> catalog -> query -> PDP -> outcome.
- Bound the PDP call by a timeout and abort it when the client disconnects.
- Fail closed: only an explicit PDP allow releases the resource payload.

Per-request states:

    START -> IDENTITY_RESOLVED -> RESOURCE_RESOLVED -> QUERY_BUILT
          -> DECISION_RECEIVED -> ALLOWED | DENIED
    (any PDP failure)          -> FAILED

The enforcement point holds no per-request state on the instance; one instance
serves all concurrent requests.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from pep_gateway.auth.xfcc import IdentityError, extract_identity
from pep_gateway.authz.actions import map_action
from pep_gateway.authz.query import (
    DEFAULT_PRINCIPAL_ROLES,
    DEFAULT_RESOURCE_KIND,
    AuthorizationQuery,
    build_query,
)
from pep_gateway.catalog.models import Catalog
from pep_gateway.observability.logging import get_logger
from pep_gateway.pdp_clients.base import PolicyDecisionPoint, PolicyError, PolicyErrorKind
from pep_gateway.settings import Settings

log = get_logger(__name__)

T = TypeVar("T")


# Resolves once the client has gone away; never resolves for a live connection.
DisconnectWaiter = Callable[[], Awaitable[None]]


class Decision(enum.StrEnum):
    allow = "allow"
    deny = "deny"
    error = "error"


class EnforcementState(enum.StrEnum):
    start = "START"
    identity_resolved = "IDENTITY_RESOLVED"
    resource_resolved = "RESOURCE_RESOLVED"
    query_built = "QUERY_BUILT"
    decision_received = "DECISION_RECEIVED"
    allowed = "ALLOWED"
    denied = "DENIED"
    failed = "FAILED"


@dataclass(frozen=True, slots=True)
class Outcome:
    """
    HTTP-level result of one enforcement.

    `state` is the last state reached; `decision` is None when the PDP was never asked.
    """

    status_code: int
    body: dict[str, Any]
    state: EnforcementState
    decision: Decision | None = None

    @property
    def allowed(self) -> bool:
        return self.state is EnforcementState.allowed


# Generic bodies only; the reason for a refusal is kept in server-side logs.
def _forbidden() -> Outcome:
    return Outcome(403, {"detail": "Forbidden"}, EnforcementState.start)


def _not_found(state: EnforcementState, decision: Decision | None = None) -> Outcome:
    return Outcome(404, {"detail": "Not found"}, state, decision)


def _access_denied() -> Outcome:
    return Outcome(401, {"detail": "Access denied"}, EnforcementState.denied, Decision.deny)


def _failed() -> Outcome:
    return Outcome(
        500, {"detail": "Internal server error"}, EnforcementState.failed, Decision.error
    )


class PolicyEnforcementPoint:
    def __init__(
        self,
        *,
        catalog: Catalog,
        pdp: PolicyDecisionPoint,
        pdp_timeout: float,
        conceal_existence: bool = False,
        principal_roles: tuple[str, ...] = DEFAULT_PRINCIPAL_ROLES,
        resource_kind: str = DEFAULT_RESOURCE_KIND,
    ) -> None:
        self._catalog = catalog
        self._pdp = pdp
        self._pdp_timeout = pdp_timeout
        self._conceal_existence = conceal_existence
        self._principal_roles = principal_roles
        self._resource_kind = resource_kind

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        catalog: Catalog,
        pdp: PolicyDecisionPoint,
    ) -> PolicyEnforcementPoint:
        return cls(
            catalog=catalog,
            pdp=pdp,
            pdp_timeout=settings.pdp_timeout_seconds,
            conceal_existence=settings.conceal_existence,
            principal_roles=settings.principal_roles,
            resource_kind=settings.resource_kind,
        )

    async def enforce(
        self,
        *,
        xfcc: str | None,
        resource_id: str,
        method: str,
        until_disconnected: DisconnectWaiter | None = None,
    ) -> Outcome:
        elog = log.bind(resource_id=resource_id)
        state = EnforcementState.start

        try:
            identity = extract_identity(xfcc)
        except IdentityError as e:
            # Uniform 403: the caller never learns which check failed.
            elog.warning("identity_rejected", error_kind=type(e).__name__, error=str(e))
            return _forbidden()
        state = EnforcementState.identity_resolved

        action = map_action(method)
        elog = elog.bind(caller=str(identity), action=action.value)

        entry = await self._catalog.lookup(resource_id)
        if entry is None:
            elog.info("resource_not_found")
            return _not_found(state)
        state = EnforcementState.resource_resolved

        query = build_query(
            identity,
            entry,
            action,
            principal_roles=self._principal_roles,
            resource_kind=self._resource_kind,
        )
        state = EnforcementState.query_built

        try:
            allowed = await self._decide(query, until_disconnected)
        except PolicyError as e:
            elog.error(
                "pdp_failed",
                failed_in=state.value,
                decision=Decision.error.value,
                error_kind=e.kind.value,
                error=str(e),
            )
            return _failed()
        state = EnforcementState.decision_received
        elog.debug("decision_received", allowed=allowed, state=state.value)

        if allowed:
            elog.info("request_allowed", decision=Decision.allow.value)
            return Outcome(200, entry.to_json(), EnforcementState.allowed, Decision.allow)

        elog.warning("request_denied", decision=Decision.deny.value)
        if self._conceal_existence:
            return _not_found(EnforcementState.denied, Decision.deny)
        return _access_denied()

    async def _decide(
        self,
        query: AuthorizationQuery,
        until_disconnected: DisconnectWaiter | None,
    ) -> bool:
        try:
            async with asyncio.timeout(self._pdp_timeout):
                return await self._unless_disconnected(
                    self._pdp.is_allowed(query), until_disconnected
                )
        except TimeoutError as e:
            raise PolicyError(
                PolicyErrorKind.timeout,
                f"no PDP decision within {self._pdp_timeout}s",
            ) from e

    async def _unless_disconnected(
        self,
        coro: Coroutine[Any, Any, T],
        until_disconnected: DisconnectWaiter | None,
    ) -> T:
        """
        Race the PDP call against the disconnect waiter; the loser is cancelled.

        A finished call wins even if the client left in the same tick. A waiter
        that raises is reported as its own failure, not as a disconnect.
        """

        if until_disconnected is None:
            return await coro

        call = asyncio.ensure_future(coro)
        watcher = asyncio.ensure_future(until_disconnected())
        try:
            await asyncio.wait({call, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [t for t in (call, watcher) if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        watch_error = None if watcher.cancelled() else watcher.exception()
        if not call.cancelled():
            return call.result()
        if watch_error is not None:
            raise PolicyError(
                PolicyErrorKind.disconnect_check_failed,
                f"disconnect check failed: {watch_error!r}",
            ) from watch_error
        raise PolicyError(PolicyErrorKind.cancelled, "client disconnected before the PDP answered")


# --- Module Notes -----------------------------------------------------------
# Timeouts are not retried: a repeated authorization call may see a different
# policy version, and a visible 500 is preferable to a silently delayed answer.
