"""
auth/passwords.py -- Password hashing and verification (bcrypt).

Security design decisions:
  bcrypt directly, no passlib wrapper. Each hash embeds its own random salt
  and cost factor ($2b$<cost>$...), so verify_password() needs nothing but the
  stored string, and raising the cost later does not break old hashes.

  Only two operations are exposed: hash_password() and verify_password().
  Callers never compare hash strings themselves -- equal passwords produce
  different hashes, and a direct string compare would leak timing.

  bcrypt only reads the first 72 bytes of input. Older bcrypt releases
  truncate silently, bcrypt 5.x raises instead. Both functions truncate
  explicitly so stored hashes verify the same way on either.

Failure policy: no logging here. A wrong password is a plain False; only a
broken entropy source or an unparseable stored hash raises HashingError.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from auth.errors import HashingError

DEFAULT_ROUNDS = 12

_MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises HashingError if the salt cannot be generated (entropy failure) or
    the backend rejects the input.
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")
    except (OSError, NotImplementedError, ValueError) as exc:
        raise HashingError() from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw re-hashes with the embedded salt and compares digests in
    constant time. A malformed stored hash raises HashingError rather than
    returning False -- that is a data fault, not a wrong password.
    """
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError as exc:
        raise HashingError("Stored password hash is malformed.") from exc


@lru_cache(maxsize=8)
def _dummy_hash(rounds: int) -> str:
    return hash_password("sessionkit_timing_dummy", rounds)


def equalize_timing(plain: str, rounds: int = DEFAULT_ROUNDS) -> None:
    """Burn one bcrypt verification against a throwaway hash [C1].

    Called when the username does not exist so the response takes as long as
    a real wrong-password check. The dummy is cached per cost factor; the
    first call per cost pays one extra hash.
    """
    verify_password(plain, _dummy_hash(rounds))
