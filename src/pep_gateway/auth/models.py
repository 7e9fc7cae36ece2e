"""
pep_gateway.auth.models

Identity domain model.

Responsibilities:
- Define the SPIFFE identity (`Identity`) resolved for every request.
- Validate identity URIs; an `Identity` is either fully valid or never built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

SPIFFE_SCHEME = "spiffe"

_TRUST_DOMAIN_RE = re.compile(r"[a-z0-9._-]+")
_PATH_SEGMENT_RE = re.compile(r"[A-Za-z0-9._-]+")


class InvalidSpiffeId(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Workload identity of the caller: `spiffe://<trust_domain><path>`.
    """

    trust_domain: str
    path: str

    def __post_init__(self) -> None:
        _validate_trust_domain(self.trust_domain)
        _validate_path(self.path)

    @property
    def uri(self) -> str:
        return f"{SPIFFE_SCHEME}://{self.trust_domain}{self.path}"

    def __str__(self) -> str:
        return self.uri

    @classmethod
    def from_uri(cls, uri: str) -> Identity:
        # urlsplit lowercases the scheme; check the raw text so str() round-trips.
        scheme = uri.split(":", 1)[0]
        if scheme != SPIFFE_SCHEME:
            raise InvalidSpiffeId(f"scheme must be {SPIFFE_SCHEME!r}, got {scheme!r}")
        parts = urlsplit(uri)
        if not uri.startswith(f"{SPIFFE_SCHEME}://"):
            raise InvalidSpiffeId("trust domain is missing")
        if "@" in parts.netloc:
            raise InvalidSpiffeId("userinfo is not allowed")
        if ":" in parts.netloc:
            raise InvalidSpiffeId("port is not allowed")
        if parts.query or parts.fragment:
            raise InvalidSpiffeId("query and fragment are not allowed")
        return cls(trust_domain=parts.netloc, path=parts.path)


def _validate_trust_domain(trust_domain: str) -> None:
    if not trust_domain:
        raise InvalidSpiffeId("trust domain is empty")
    if not _TRUST_DOMAIN_RE.fullmatch(trust_domain):
        raise InvalidSpiffeId(f"trust domain contains invalid characters: {trust_domain!r}")


def _validate_path(path: str) -> None:
    # A bare trust-domain ID names the domain, not a workload.
    if not path:
        raise InvalidSpiffeId("path is empty")
    if not path.startswith("/"):
        raise InvalidSpiffeId("path must start with '/'")
    for segment in path[1:].split("/"):
        if not segment:
            raise InvalidSpiffeId("path contains an empty segment")
        if segment in (".", ".."):
            raise InvalidSpiffeId("path contains a dot segment")
        if not _PATH_SEGMENT_RE.fullmatch(segment):
            raise InvalidSpiffeId(f"path segment contains invalid characters: {segment!r}")
