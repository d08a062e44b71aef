"""
auth/sessions.py -- Session issue / validate / refresh on top of the token codec.

Stateless sessions: validity is a pure function of (token, secret, now).
Nothing is stored server side, so a refreshed token does not invalidate the
one it replaced -- the old token simply runs out at its own exp. There is no
revocation store to consult.

The module-level functions take the secret and clock value explicitly.
SessionManager binds them once at startup (from Settings) so route code never
handles the secret directly.

Layer rule: no imports from api/. core/ only for Settings typing.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from auth.errors import TokenExpiredError, TokenNotYetValidError
from auth.models import SessionClaims
from auth.tokens import decode_token, encode_claims

if TYPE_CHECKING:
    from core.config import Settings

ISSUER = "sessionkit"
DEFAULT_TTL_SECONDS = 24 * 3600


def _now(now: int | None) -> int:
    return int(time.time()) if now is None else int(now)


def issue_session(
    user_id: int,
    username: str,
    secret: str,
    ttl: int = DEFAULT_TTL_SECONDS,
    now: int | None = None,
    issuer: str = ISSUER,
) -> str:
    """Mint a token valid from ``now`` until ``now + ttl`` (exclusive)."""
    issued_at = _now(now)
    claims = SessionClaims(
        user_id=user_id,
        username=username,
        issuer=issuer,
        subject=username,
        issued_at=issued_at,
        not_before=issued_at,
        expires_at=issued_at + ttl,
    )
    return encode_claims(claims, secret)


def validate_session(token: str, secret: str, now: int | None = None) -> SessionClaims:
    """Return the token's claims if it is usable at ``now``.

    Raises a SessionValidationError subclass:
      MalformedTokenError / BadSignatureError from the codec, unchanged;
      TokenExpiredError when now >= exp;
      TokenNotYetValidError when now < nbf.
    """
    claims = decode_token(token, secret)
    current = _now(now)
    if current >= claims.expires_at:
        raise TokenExpiredError()
    if current < claims.not_before:
        raise TokenNotYetValidError()
    return claims


def refresh_session(
    token: str,
    secret: str,
    now: int | None = None,
    ttl: int = DEFAULT_TTL_SECONDS,
    issuer: str = ISSUER,
) -> str:
    """Re-issue a fresh token for the same identity.

    The presented token must itself validate -- an expired token cannot be
    refreshed, so refresh never extends a session past its exp.
    """
    current = _now(now)
    claims = validate_session(token, secret, now=current)
    return issue_session(claims.user_id, claims.username, secret, ttl=ttl, now=current, issuer=issuer)


@dataclass(frozen=True)
class SessionManager:
    """Secret, lifetime and clock bound together for the HTTP layer.

    Immutable and free of request state, so one instance on app.state is
    shared by every worker thread without locking.
    """

    secret: str = field(repr=False)
    ttl: int = DEFAULT_TTL_SECONDS
    issuer: str = ISSUER
    clock: Callable[[], float] = time.time

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionManager:
        return cls(
            secret=settings.secret_key,
            ttl=settings.token_expire_seconds,
            issuer=settings.token_issuer,
        )

    def now(self) -> int:
        return int(self.clock())

    def issue(self, user_id: int, username: str) -> str:
        return issue_session(user_id, username, self.secret, ttl=self.ttl, now=self.now(), issuer=self.issuer)

    def validate(self, token: str) -> SessionClaims:
        return validate_session(token, self.secret, now=self.now())

    def refresh(self, token: str) -> str:
        return refresh_session(token, self.secret, now=self.now(), ttl=self.ttl, issuer=self.issuer)
