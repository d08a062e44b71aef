"""
api/routes/v1/token.py -- Session token renewal.

Routes:
  POST /api/v1/token/refresh  -- exchange a still-valid bearer token for a new one

The presented token must validate in full. An expired token cannot be
refreshed -- the client has to log in again. The old token is not revoked;
it stays usable until its own exp.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import TokenResponse
from auth.errors import InvalidCredentialError, SessionValidationError
from auth.gate import parse_bearer
from auth.sessions import SessionManager

router = APIRouter()


@router.post("/token/refresh", response_model=TokenResponse)
async def refresh(request: Request) -> JSONResponse:
    """Issue a fresh token for the identity in the current bearer token.

    Missing or malformed Authorization header -> 401 missing_credential /
    malformed_credential. Token not usable (expired, bad signature, ...) ->
    401 invalid_credential.
    """
    sessions: SessionManager = request.app.state.sessions
    token = parse_bearer(request.headers.get("Authorization"))
    try:
        new_token = sessions.refresh(token)
    except SessionValidationError as exc:
        raise InvalidCredentialError("Session token cannot be refreshed.") from exc

    resp = JSONResponse(
        status_code=200,
        content=TokenResponse(access_token=new_token, expires_in=sessions.ttl).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp
