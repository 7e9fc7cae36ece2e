"""
pep_gateway.pdp_clients

Policy decision point clients.

Responsibilities:
- Provide client implementations for calling the external PDP.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The enforcement point depends on the `PolicyDecisionPoint` protocol, not on HTTP.
