"""In-memory storage for user records."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Union

from .errors import LookupFailure, ValidationFailure
from .models import User
from .validation import check_user_fields

Failure = Union[LookupFailure, ValidationFailure]


@dataclass(frozen=True)
class RepositoryResult:
    """Outcome of a repository operation: either a user or an expected failure."""

    user: Optional[User] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class UserRepository:
    """Owns the user collection and keeps ids and emails unique.

    Every operation runs under a single lock so that id assignment and the
    email uniqueness checks happen atomically with the mutation they guard.
    """

    def __init__(self) -> None:
        self._users: List[User] = []
        self._lock = threading.Lock()

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users)

    def get(self, user_id: int) -> Optional[User]:
        with self._lock:
            index = self._index_of_locked(user_id)
            return self._users[index] if index is not None else None

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def add(self, name: Optional[str], email: Optional[str]) -> RepositoryResult:
        """Store a new user, assigning the next identifier."""

        failure = check_user_fields(name, email)
        if failure is not None:
            return RepositoryResult(failure=failure)
        assert name is not None and email is not None

        with self._lock:
            if self._email_taken_locked(email):
                return RepositoryResult(failure=ValidationFailure.DUPLICATE_EMAIL)
            user = User(id=self._next_id_locked(), name=name, email=email)
            self._users.append(user)
        return RepositoryResult(user=user)

    def update(self, user_id: int, name: Optional[str], email: Optional[str]) -> RepositoryResult:
        """Replace the name and email of an existing user, keeping its position."""

        with self._lock:
            index = self._index_of_locked(user_id)
            if index is None:
                return RepositoryResult(failure=LookupFailure.USER_NOT_FOUND)

            failure = check_user_fields(name, email)
            if failure is not None:
                return RepositoryResult(failure=failure)
            assert name is not None and email is not None

            if self._email_taken_locked(email, exclude_id=user_id):
                return RepositoryResult(failure=ValidationFailure.EMAIL_IN_USE)

            updated = self._users[index].with_changes(name=name, email=email)
            self._users[index] = updated
        return RepositoryResult(user=updated)

    def delete(self, user_id: int) -> RepositoryResult:
        with self._lock:
            index = self._index_of_locked(user_id)
            if index is None:
                return RepositoryResult(failure=LookupFailure.USER_NOT_FOUND)
            removed = self._users.pop(index)
        return RepositoryResult(user=removed)

    def _index_of_locked(self, user_id: int) -> Optional[int]:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None

    def _email_taken_locked(self, email: str, *, exclude_id: Optional[int] = None) -> bool:
        return any(user.email == email and user.id != exclude_id for user in self._users)

    def _next_id_locked(self) -> int:
        if not self._users:
            return 1
        return max(user.id for user in self._users) + 1


__all__ = ["RepositoryResult", "UserRepository"]
