"""Expected failure outcomes and the messages returned to clients."""

from __future__ import annotations

from enum import Enum


class AuthFailure(str, Enum):
    MISSING_HEADER = "Missing Authorization header."
    INVALID_TOKEN = "Invalid token."

    @property
    def message(self) -> str:
        return self.value


class ValidationFailure(str, Enum):
    MISSING_NAME = "Name is required."
    MISSING_EMAIL = "Email is required."
    INVALID_EMAIL_FORMAT = "Invalid email format."
    DUPLICATE_EMAIL = "Email already exists."
    EMAIL_IN_USE = "Email already in use by another user."

    @property
    def message(self) -> str:
        return self.value


class LookupFailure(str, Enum):
    USER_NOT_FOUND = "User not found."

    @property
    def message(self) -> str:
        return self.value


class ConfigError(ValueError):
    """Raised when the service configuration cannot be loaded."""


INTERNAL_ERROR_MESSAGE = "Internal server error."


__all__ = [
    "AuthFailure",
    "ConfigError",
    "INTERNAL_ERROR_MESSAGE",
    "LookupFailure",
    "ValidationFailure",
]
