"""
pep_gateway.authz.actions

Abstract actions understood by the policy layer.
"""

from __future__ import annotations

import enum


class Action(enum.StrEnum):
    read = "read"
    modify = "modify"


def map_action(method: str) -> Action:
    # Only the retrieval verb is read-only; anything else, known or not, may change state.
    if method == "GET":
        return Action.read
    return Action.modify
