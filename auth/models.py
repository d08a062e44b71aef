"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the
session layer do the work; these only own the shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    hashed_password is always a bcrypt hash ($2b$<cost>$<salt+digest>). The
    plaintext never reaches the store, and the hash is never serialized into
    an API response.
    """

    username: str
    hashed_password: str
    email: str = ""
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class SessionClaims:
    """The identity + timing payload carried inside a session token.

    Timestamps are integer seconds since the epoch. Frozen: a refreshed
    session is a new SessionClaims, never an edit of the old one.
    """

    user_id: int
    username: str
    issuer: str
    subject: str
    issued_at: int
    not_before: int
    expires_at: int


@dataclass(frozen=True)
class Principal:
    """An authenticated request identity, as produced by the access gate."""

    user_id: int
    username: str
