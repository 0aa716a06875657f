"""Credential store — password table for managers and employee overrides.

The store is injected into the role router (``app.state.role_router``)
rather than living as a module global. The bundled implementation keeps
Argon2 hashes in memory and is seeded from ``MANAGER_PASSWORDS``; it is not
persisted across restarts.

Employees without an override authenticate with their derived default
password (see ``shift_tracker.employees.credentials``). That scheme is
deterministic and publicly derivable. This is a known weakness, kept for
operational compatibility.
"""

from __future__ import annotations

import abc
from typing import Mapping, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


class CredentialStore(abc.ABC):
    """Password table keyed by profile id."""

    @abc.abstractmethod
    def has(self, user_id: str) -> bool:
        """True if a password is stored for *user_id*."""

    @abc.abstractmethod
    def verify(self, user_id: str, password: str) -> bool:
        """True if *password* matches the stored password for *user_id*."""

    @abc.abstractmethod
    def set_password(self, user_id: str, password: str) -> None:
        """Store (or replace) the password for *user_id*."""

    @abc.abstractmethod
    def discard(self, user_id: str) -> None:
        """Forget any password stored for *user_id*."""


class InMemoryCredentialStore(CredentialStore):
    """Process-local credential table."""

    def __init__(self, seed: Optional[Mapping[str, str]] = None) -> None:
        self._table: dict[str, str] = {}
        self._dummy_hash: Optional[str] = None
        for user_id, password in (seed or {}).items():
            self.set_password(user_id, password)

    def has(self, user_id: str) -> bool:
        return user_id in self._table

    def verify(self, user_id: str, password: str) -> bool:
        stored = self._table.get(user_id)
        if stored is None:
            # Same hashing work for unknown ids.
            if self._dummy_hash is None:
                self._dummy_hash = hash_password("unknown-user")
            verify_password(password, self._dummy_hash)
            return False
        return verify_password(password, stored)

    def set_password(self, user_id: str, password: str) -> None:
        self._table[user_id] = hash_password(password)

    def discard(self, user_id: str) -> None:
        self._table.pop(user_id, None)
