"""
auth/dependencies.py -- FastAPI Depends() helpers around the access gate.

require_session() is the hard variant: it raises a GateRejection, which the
AuthError handler in api/main.py renders as 401.
optional_session() is the soft variant: it returns None instead.

Both read the gate from app.state (built once in the lifespan) and return a
typed Principal -- identity is passed to the route as a value, never stashed
on request.state.

Layer rule: may import from fastapi (this module is part of the FastAPI
dependency injection system). No imports from api/ or core/.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import GateRejection
from auth.gate import AccessGate
from auth.models import Principal


def _gate(request: Request) -> AccessGate:
    return request.app.state.gate


def require_session(request: Request) -> Principal:
    """Require a valid bearer token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(require_session)): ...
    """
    principal = _gate(request).authorize(request.headers.get("Authorization"), required=True)
    if principal is None:
        raise GateRejection()
    return principal


def optional_session(request: Request) -> Principal | None:
    """Return the caller's Principal if a valid bearer token is present, else None."""
    return _gate(request).authorize(request.headers.get("Authorization"), required=False)
