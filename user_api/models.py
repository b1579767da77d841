"""Domain models for the user directory service."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class User:
    """Represents a user record held by the repository."""

    id: int
    name: str
    email: str

    def with_changes(self, *, name: Optional[str] = None, email: Optional[str] = None) -> "User":
        """Return a copy of the record with the given fields replaced.

        The identifier is always carried over; the original value is left untouched.
        """

        changes: Dict[str, str] = {}
        if name is not None:
            changes["name"] = name
        if email is not None:
            changes["email"] = email
        return replace(self, **changes)


__all__ = ["User"]
