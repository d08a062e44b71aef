"""
auth/accounts.py -- Login, registration and bootstrap-account flows.

These glue the credential verifier (auth/passwords.py) to the user store.
Results are typed: a User on success, an AuthError subclass otherwise. The
API layer decides what the client sees.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

from auth.errors import CredentialMismatchError, DuplicateUsernameError
from auth.models import User
from auth.passwords import DEFAULT_ROUNDS, equalize_timing, hash_password, verify_password
from auth.store import UserStore

logger = logging.getLogger("sessionkit.auth")


def authenticate_user(store: UserStore, username: str, password: str, rounds: int = DEFAULT_ROUNDS) -> User:
    """Check a username/password pair with timing equalization [C1].

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against a dummy hash (same cost)
    - Wrong password: bcrypt runs against the real hash (same cost)
    Both raise the same CredentialMismatchError, so neither the response body
    nor its timing reveals which usernames exist.
    """
    user = store.find_by_username(username)
    if user is None:
        equalize_timing(password, rounds)
        raise CredentialMismatchError()
    if not verify_password(password, user.hashed_password):
        raise CredentialMismatchError()
    return user


def register_user(
    store: UserStore,
    username: str,
    password: str,
    email: str,
    rounds: int = DEFAULT_ROUNDS,
) -> User:
    """Create an account. Raises DuplicateUsernameError if the name is taken.

    The lookup first spares a bcrypt round for the common duplicate case;
    the store's UNIQUE constraint still catches a concurrent insert.
    """
    if store.find_by_username(username) is not None:
        raise DuplicateUsernameError()
    user_id = store.insert(username, hash_password(password, rounds), email)
    created = store.find_by_id(user_id)
    if created is None:
        raise RuntimeError(f"User {user_id} not found after insert")
    return created


def seed_default_user(
    store: UserStore,
    username: str,
    password: str,
    email: str,
    rounds: int = DEFAULT_ROUNDS,
) -> bool:
    """Create the bootstrap account if it does not exist yet.

    Returns True if a user was created. Idempotent: safe on every startup.
    """
    if store.find_by_username(username) is not None:
        return False
    try:
        register_user(store, username, password, email, rounds)
    except DuplicateUsernameError:
        # Another worker seeded it between our lookup and insert.
        return False
    logger.info("Default user created: %s", username)
    return True
