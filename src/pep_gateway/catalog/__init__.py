"""
pep_gateway.catalog

Protected resource catalog.

Responsibilities:
- Catalog entry model and the read-only lookup interface the gateway depends on.
- Static (in-memory) and SQL-backed implementations.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The enforcement point only sees the `Catalog` protocol, so backends can be
# swapped without touching enforcement logic.
