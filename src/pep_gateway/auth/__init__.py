"""
pep_gateway.auth

Caller identity package.

Responsibilities:
- SPIFFE identity model.
- Parsing of the proxy-injected forwarded-client-certificate header.
- FastAPI dependency resolving the caller identity.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Certificate validation happens at the proxy; this package trusts the header's
# content and only parses it.
