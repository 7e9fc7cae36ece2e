"""
pep_gateway.authz

Authorization package.

Responsibilities:
- Map HTTP methods onto abstract policy actions.
- Build PDP queries from identity, catalog entry and action.
- Enforce PDP decisions fail-closed (policy enforcement point).
"""

# Package marker.
