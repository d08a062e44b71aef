"""
auth/tokens.py -- Session token codec (HS256 JWT via python-jose).

Wire format: base64url(header) "." base64url(payload) "." base64url(signature)
  header:    {"alg": "HS256", "typ": "JWT"}
  payload:   user_id, username, iss, sub, iat, nbf, exp (seconds since epoch)
  signature: HMAC-SHA256(secret, header "." payload)

Security design decisions:
  Fixed algorithm. Only HS256 is produced and only HS256 is accepted. A
  header declaring anything else -- "none", RS256, HS512 -- is rejected as
  malformed before the signature is looked at, which closes the
  algorithm-confusion hole.

  Signature first, claims second. decode_token() recomputes the signature
  over the exact header.payload bytes it received and compares it with the
  signature segment as text, in constant time. Comparing the encoded segment
  (not the decoded bytes) matters: base64url ignores the spare low bits of the
  last character, so two different segments can decode to the same digest.
  The payload is only parsed after the signature matches.

  No clock here. decode_token() never looks at exp/nbf; freshness is the
  session layer's job (auth/sessions.py). Both functions are pure in
  (claims/token, secret).

Failure policy: raise MalformedTokenError / BadSignatureError, never log.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import hmac
from typing import Any

from jose import JWTError, jwk, jwt
from jose.utils import base64url_encode

from auth.errors import BadSignatureError, MalformedTokenError
from auth.models import SessionClaims

ALGORITHM = "HS256"
TOKEN_TYPE = "JWT"


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def claims_to_payload(claims: SessionClaims) -> dict[str, Any]:
    """Map SessionClaims onto the registered JWT claim names."""
    return {
        "user_id": claims.user_id,
        "username": claims.username,
        "iss": claims.issuer,
        "sub": claims.subject,
        "iat": claims.issued_at,
        "nbf": claims.not_before,
        "exp": claims.expires_at,
    }


def encode_claims(claims: SessionClaims, secret: str) -> str:
    """Serialize and sign claims. Returns the compact token string."""
    return jwt.encode(claims_to_payload(claims), secret, algorithm=ALGORITHM)


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def _sign(signing_input: bytes, secret: str) -> str:
    key = jwk.construct(secret, ALGORITHM)
    return base64url_encode(key.sign(signing_input)).decode("ascii")


def _int_claim(payload: dict, name: str) -> int:
    value = payload.get(name)
    # bool is an int subclass; true/false are not timestamps or ids.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedTokenError(f"Claim '{name}' must be numeric.")
    try:
        return int(value)
    except (OverflowError, ValueError) as exc:
        # Infinity and NaN parse as floats but have no integer value.
        raise MalformedTokenError(f"Claim '{name}' must be a finite number.") from exc


def _str_claim(payload: dict, name: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value:
        raise MalformedTokenError(f"Claim '{name}' must be a non-empty string.")
    return value


def payload_to_claims(payload: dict) -> SessionClaims:
    """Build SessionClaims from a decoded payload, rejecting missing or mistyped fields."""
    return SessionClaims(
        user_id=_int_claim(payload, "user_id"),
        username=_str_claim(payload, "username"),
        issuer=_str_claim(payload, "iss"),
        subject=_str_claim(payload, "sub"),
        issued_at=_int_claim(payload, "iat"),
        not_before=_int_claim(payload, "nbf"),
        expires_at=_int_claim(payload, "exp"),
    )


def decode_token(token: str, secret: str) -> SessionClaims:
    """Verify a token's signature and return its claims.

    Raises:
        MalformedTokenError: wrong segment count, undecodable header or
            payload, an algorithm other than HS256, or bad claim types.
        BadSignatureError: the signature segment does not match the one
            recomputed from header.payload with ``secret``.
    """
    if not isinstance(token, str):
        raise MalformedTokenError()
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError("Token must have three non-empty segments.")

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise MalformedTokenError("Token header could not be decoded.") from exc
    if header.get("alg") != ALGORITHM:
        raise MalformedTokenError("Unsupported token algorithm.")
    if header.get("typ", TOKEN_TYPE) != TOKEN_TYPE:
        raise MalformedTokenError("Unsupported token type.")

    header_segment, payload_segment, signature_segment = parts
    expected = _sign(f"{header_segment}.{payload_segment}".encode("utf-8"), secret)
    if not hmac.compare_digest(expected.encode("ascii"), signature_segment.encode("utf-8")):
        raise BadSignatureError()

    try:
        payload = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MalformedTokenError("Token payload could not be decoded.") from exc
    return payload_to_claims(payload)
