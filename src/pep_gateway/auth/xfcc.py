"""
pep_gateway.auth.xfcc

Forwarded-client-certificate (XFCC) header parsing.

Responsibilities:
- Tokenize the proxy-injected header into `key=value` segments.
- Select the asserted identity (first `URI=` segment wins).
- Map every malformed input onto exactly one `IdentityError` subclass.

Header shape (Envoy convention): fields of one certificate are separated by `;`,
certificates of a proxy chain by `,`. Values containing separators are quoted:

    By=spiffe://example.org/gw;Hash=ab12;URI=spiffe://example.org/api,URI="spiffe://..."
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from urllib.parse import urlsplit

from pep_gateway.auth.models import Identity, InvalidSpiffeId

IDENTITY_KEY = "URI"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_URI_CHARS_RE = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class IdentityError(Exception):
    """
    Base class for every way a request can fail to present a usable identity.
    Callers see a uniform 403; the subclass and message only reach the logs.
    """


class MissingHeader(IdentityError):
    pass


class NoIdentitySegment(IdentityError):
    pass


class MalformedURI(IdentityError):
    pass


class InvalidIdentityFormat(IdentityError):
    pass


def extract_identity(header_value: str | None) -> Identity:
    if header_value is None or not header_value.strip():
        raise MissingHeader("forwarded client certificate header is absent or empty")

    for key, value in iter_segments(header_value):
        if key != IDENTITY_KEY:
            continue
        _check_well_formed(value)
        try:
            return Identity.from_uri(value)
        except InvalidSpiffeId as e:
            raise InvalidIdentityFormat(f"URI is not a SPIFFE ID: {e}") from e

    raise NoIdentitySegment("no URI segment in forwarded client certificate header")


def iter_segments(header_value: str) -> Iterator[tuple[str, str]]:
    """
    Yield `(key, value)` pairs in header order across all certificate elements.

    Segments without `=` carry nothing addressable and are skipped.
    """

    for raw in _split_unquoted(header_value):
        key, sep, value = raw.partition("=")
        if not sep:
            continue
        yield key.strip(), _unquote(value.strip())


def _split_unquoted(text: str) -> Iterator[str]:
    buf: list[str] = []
    in_quotes = False
    escaped = False
    for ch in text:
        if escaped:
            buf.append(ch)
            escaped = False
        elif ch == "\\" and in_quotes:
            buf.append(ch)
            escaped = True
        elif ch == '"':
            buf.append(ch)
            in_quotes = not in_quotes
        elif ch in ";," and not in_quotes:
            yield "".join(buf)
            buf = []
        else:
            buf.append(ch)
    yield "".join(buf)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def _check_well_formed(value: str) -> None:
    if not value:
        raise MalformedURI("URI segment is empty")
    if not _URI_CHARS_RE.fullmatch(value):
        raise MalformedURI("URI contains characters outside RFC 3986")
    if _BAD_PERCENT_RE.search(value):
        raise MalformedURI("URI contains an invalid percent-encoding")
    if not _SCHEME_RE.match(value):
        raise MalformedURI("URI has no scheme")
    try:
        # Accessing .port validates it; urlsplit alone accepts "host:abc".
        urlsplit(value).port
    except ValueError as e:
        raise MalformedURI(f"URI does not parse: {e}") from e


# --- Module Notes -----------------------------------------------------------
# "First URI wins" is the contract for proxy chains: the first certificate element
# is the one asserted for this hop, later ones are ignored rather than rejected.
