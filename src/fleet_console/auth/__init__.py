"""
fleet_console.auth

Authentication/authorization primitives for the record-store service.

Responsibilities:
- Role vocabulary and the authenticated caller type.
- JWT session tokens and bcrypt password hashing.
- FastAPI auth dependencies (Principal + RBAC).
"""

# Package marker.
