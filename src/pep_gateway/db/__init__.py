"""
pep_gateway.db

Persistence package (SQLAlchemy async) for the SQL-backed catalog.

Responsibilities:
- Provide ORM models, engine/session setup and dev/test bootstrap.
"""

# Package marker.
