"""Core package for the user directory service."""

from __future__ import annotations

from typing import Any

from .models import User
from .repository import RepositoryResult, UserRepository


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the user directory API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "RepositoryResult",
    "User",
    "UserRepository",
    "create_app",
]
