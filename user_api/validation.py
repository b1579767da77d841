"""Stateless field checks shared by the create and update handlers."""

from __future__ import annotations

from typing import Optional

from .errors import ValidationFailure


def is_blank(value: Optional[str]) -> bool:
    """Return ``True`` for ``None``, empty, or whitespace-only strings."""

    return value is None or not value.strip()


def looks_like_email(value: str) -> bool:
    # Only the presence of "@" is required; addresses without a domain pass.
    return "@" in value


def check_user_fields(name: Optional[str], email: Optional[str]) -> Optional[ValidationFailure]:
    """Return the first field failure for a candidate record, or ``None``.

    Uniqueness is not checked here since it depends on the repository contents.
    """

    if is_blank(name):
        return ValidationFailure.MISSING_NAME
    if is_blank(email):
        return ValidationFailure.MISSING_EMAIL
    if not looks_like_email(email or ""):
        return ValidationFailure.INVALID_EMAIL_FORMAT
    return None


__all__ = ["check_user_fields", "is_blank", "looks_like_email"]
