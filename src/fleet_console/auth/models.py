"""
fleet_console.auth.models

Auth domain models.

Responsibilities:
- Define the role vocabulary shared by profiles, tokens and authorization checks.
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(enum.StrEnum):
    # Values are persisted in the profiles table and carried in session tokens.
    admin = "admin"
    user = "user"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, decoded from a session token.
    """

    subject: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    def owns(self, user_id: str) -> bool:
        return self.subject == user_id
