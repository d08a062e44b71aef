"""
api/routes/v1/auth.py -- Login, registration and session-status endpoints.

Routes:
  POST /api/v1/auth/login     -- password login; returns a bearer token
  POST /api/v1/auth/register  -- create an account
  GET  /api/v1/auth/session   -- who am I, if anyone (optional auth)

Security:
  [H2] POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  [C1] authenticate_user() provides timing equalization -- use it, never inline.
  [M5] Cache-Control: no-store on responses that carry a token.

login and register are plain `def` handlers: bcrypt is deliberately slow
CPU work, and FastAPI runs sync handlers in its threadpool so the event loop
stays free.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, RegisterRequest, SessionStatusResponse, UserResponse
from auth.accounts import authenticate_user, register_user
from auth.dependencies import optional_session
from auth.models import Principal
from auth.sessions import SessionManager
from auth.store import UserStore
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/login:     public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/register:  public
# - GET  /api/v1/auth/session:   optional auth (optional_session)
router = APIRouter()

_settings = get_settings()


@limiter.limit(_settings.login_rate_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a session token.

    Wrong username and wrong password both surface as the same
    CredentialMismatchError ("bad_credentials"), rendered by the AuthError
    handler, so the response does not leak which usernames exist.
    """
    user_store: UserStore = request.app.state.user_store
    sessions: SessionManager = request.app.state.sessions

    user = authenticate_user(user_store, body.username, body.password, rounds=_settings.bcrypt_rounds)
    token = sessions.issue(user.id, user.username)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=sessions.ttl,
            user=UserResponse.from_user(user),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create a new account. A taken username answers 409 duplicate_username."""
    user_store: UserStore = request.app.state.user_store
    user = register_user(user_store, body.username, body.password, body.email, rounds=_settings.bcrypt_rounds)
    return UserResponse.from_user(user)


@router.get("/auth/session", response_model=SessionStatusResponse)
async def session_status(principal: Principal | None = Depends(optional_session)) -> SessionStatusResponse:
    """Report whether the request carries a usable session.

    Never 401s: a missing, malformed or expired token just reads as
    authenticated=false.
    """
    if principal is None:
        return SessionStatusResponse(authenticated=False)
    return SessionStatusResponse(authenticated=True, user_id=principal.user_id, username=principal.username)
