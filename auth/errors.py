"""
auth/errors.py -- Typed failure outcomes for the auth core.

Every class carries the HTTP status and machine-readable code the API layer
should answer with. Core modules only raise these; the exception handler in
api/main.py is the single place that turns them into responses.

Hierarchy:

  AuthError
    HashingError                      500  -- entropy or stored-hash format failure
    DuplicateUsernameError            409
    CredentialMismatchError           401  -- unknown user and wrong password look the same
    SessionValidationError            401
      TokenDecodeError
        MalformedTokenError
        BadSignatureError
      TokenExpiredError
      TokenNotYetValidError
    GateRejection                     401
      MissingCredentialError
      MalformedCredentialError
      InvalidCredentialError

Decode errors subclass SessionValidationError so validate_session() can let
them propagate unchanged; callers catch SessionValidationError for any
"token not usable" outcome.

Layer rule: stdlib only.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all auth-core failures."""

    status_code: int = 401
    code: str = "unauthorized"
    message: str = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class HashingError(AuthError):
    status_code = 500
    code = "hashing_error"
    message = "Password hashing failed."


class DuplicateUsernameError(AuthError):
    status_code = 409
    code = "duplicate_username"
    message = "A user with that username already exists."


class CredentialMismatchError(AuthError):
    code = "bad_credentials"
    message = "Invalid username or password."


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class SessionValidationError(AuthError):
    code = "invalid_session"
    message = "Session token is not usable."


class TokenDecodeError(SessionValidationError):
    code = "invalid_token"
    message = "Session token could not be decoded."


class MalformedTokenError(TokenDecodeError):
    code = "malformed_token"
    message = "Session token is malformed."


class BadSignatureError(TokenDecodeError):
    code = "bad_signature"
    message = "Session token signature does not verify."


class TokenExpiredError(SessionValidationError):
    code = "token_expired"
    message = "Session token has expired."


class TokenNotYetValidError(SessionValidationError):
    code = "token_not_yet_valid"
    message = "Session token is not valid yet."


# ---------------------------------------------------------------------------
# Access gate
# ---------------------------------------------------------------------------


class GateRejection(AuthError):
    code = "unauthorized"
    message = "Authentication required."


class MissingCredentialError(GateRejection):
    code = "missing_credential"
    message = "Missing authentication credential."


class MalformedCredentialError(GateRejection):
    code = "malformed_credential"
    message = "Authorization header must be 'Bearer <token>'."


class InvalidCredentialError(GateRejection):
    code = "invalid_credential"
    message = "Invalid authentication credential."
