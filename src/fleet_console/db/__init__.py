"""
fleet_console.db

Persistence package (SQLAlchemy async) backing the record-store service.

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.
