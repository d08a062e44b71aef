"""
auth/gate.py -- Per-request access decision from the Authorization header.

Two outcomes per request: a Principal (authenticated) or None
(unauthenticated). Route policy decides what None means:

  required=True   missing header      -> MissingCredentialError
                  not "Bearer <tok>"  -> MalformedCredentialError
                  token not usable    -> InvalidCredentialError
  required=False  any of the above    -> None, request continues anonymously

The gate reads nothing but the header, the bound secret and the clock. It
never retries and never touches the user store -- a token that validates is
trusted for its lifetime.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

from auth.errors import (
    GateRejection,
    InvalidCredentialError,
    MalformedCredentialError,
    MissingCredentialError,
    SessionValidationError,
)
from auth.models import Principal
from auth.sessions import SessionManager

logger = logging.getLogger("sessionkit.auth")

BEARER_SCHEME = "Bearer"


def parse_bearer(header: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    The value must be exactly two space-separated parts, the first literally
    "Bearer" (case-sensitive).
    """
    if not header:
        raise MissingCredentialError()
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        raise MalformedCredentialError()
    return parts[1]


class AccessGate:
    """Turns an Authorization header into a Principal or a rejection.

    Usage:
        gate = AccessGate(SessionManager(secret=..., ttl=3600))
        principal = gate.authorize(request.headers.get("Authorization"))
    """

    def __init__(self, sessions: SessionManager) -> None:
        self.sessions = sessions

    def authorize(self, header: str | None, required: bool = True) -> Principal | None:
        try:
            token = parse_bearer(header)
        except GateRejection as exc:
            if required:
                raise
            logger.debug("Anonymous request: %s", exc.code)
            return None

        try:
            claims = self.sessions.validate(token)
        except SessionValidationError as exc:
            logger.debug("Session rejected: %s", exc.code)
            if required:
                raise InvalidCredentialError() from exc
            return None

        return Principal(user_id=claims.user_id, username=claims.username)
