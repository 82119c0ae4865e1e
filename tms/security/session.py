"""
SESSION CONTEXT

The authenticated identity, handed explicitly to stores and views.
Nothing in the core reads a global or browser-stored session.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    email: str
    name: str
    role: str
    company: Optional[str] = None

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> "SessionContext":
        """Build a session from the user object returned by authentication."""
        return cls(
            user_id=str(user["id"]),
            email=user["email"],
            name=user.get("name", ""),
            role=user["role"],
            company=user.get("company"),
        )

